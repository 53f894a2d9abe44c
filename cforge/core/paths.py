"""
Path and filesystem helpers used by the build stages.

Thin wrappers with sentinel returns (bool / -1), never raising for
ordinary "missing" or "permission" conditions.
"""
import hashlib
import logging
import os
import stat
from datetime import datetime, timezone

logger = logging.getLogger(__name__)


# ── Path strings ──────────────────────────────────────────────────────────────

def path_join(*parts: str) -> str:
    """Join path components, skipping empty ones."""
    parts = tuple(p for p in parts if p)
    if not parts:
        return ""
    return os.path.join(*parts)


def path_basename(path: str) -> str:
    return os.path.basename(path)


def replace_first(text: str, old: str, new: str) -> str:
    """Replace the first occurrence of *old* in *text*."""
    if not old:
        return text
    return text.replace(old, new, 1)


# ── Filesystem queries ───────────────────────────────────────────────────────

def file_exists(path: str) -> bool:
    return os.path.isfile(path)


def dir_exists(path: str) -> bool:
    return os.path.isdir(path)


def is_exec(path: str) -> bool:
    """True when *path* is a regular file with an executable bit set."""
    try:
        mode = os.stat(path).st_mode
    except OSError:
        return False
    return stat.S_ISREG(mode) and bool(mode & (stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH))


def file_size(path: str) -> int:
    """Size in bytes, or -1 when the file cannot be stat'ed."""
    try:
        return os.path.getsize(path)
    except OSError:
        return -1


def hash_file(path: str) -> str:
    """SHA-256 of a file."""
    h = hashlib.sha256()
    with open(path, "rb") as f:
        for chunk in iter(lambda: f.read(8192), b""):
            h.update(chunk)
    return h.hexdigest()


# ── Filesystem mutations ─────────────────────────────────────────────────────

def make_dir(path: str, mode: int = 0o755) -> bool:
    """Create a single directory level; True if it exists afterwards."""
    try:
        os.mkdir(path, mode)
    except FileExistsError:
        return dir_exists(path)
    except OSError as e:
        logger.debug("mkdir %s failed: %s", path, e)
        return False
    return True


def change_mode(path: str, mode: int) -> bool:
    try:
        os.chmod(path, mode)
    except OSError as e:
        logger.debug("chmod %s failed: %s", path, e)
        return False
    return True


def now_iso() -> str:
    """Current UTC time as ISO 8601 string."""
    return datetime.now(timezone.utc).isoformat()
