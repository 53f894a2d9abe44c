"""
Provenance: facts about the toolchain and the linked artifact.

Only used to fill the optional build receipt.  ELF header fields are
read with pyelftools; a non-ELF artifact simply has ``elf=None``.
"""
import logging
from typing import Optional

from elftools.common.exceptions import ELFError
from elftools.elf.elffile import ELFFile

from cforge.core.command import execute_and_capture
from cforge.core.paths import file_exists, file_size, hash_file, is_exec
from cforge.io.schema import ArtifactMeta, ElfMeta, ToolchainIdentity
from cforge.policy.toolchain import Toolchain

logger = logging.getLogger(__name__)


def capture_toolchain(toolchain: Toolchain) -> ToolchainIdentity:
    """Record the compiler's first ``--version`` line."""
    out = execute_and_capture(toolchain.compiler, ["--version"])
    version = "unknown"
    if out:
        lines = out.splitlines()
        if lines:
            version = lines[0].strip()
    return ToolchainIdentity(
        profile_id=toolchain.profile_id,
        compiler=toolchain.compiler,
        compiler_version=version,
    )


def read_elf_header(path: str) -> Optional[ElfMeta]:
    """ELF type and machine, or None if *path* is not an ELF file."""
    try:
        with open(path, "rb") as f:
            elf = ELFFile(f)
            return ElfMeta(
                elf_type=str(elf.header["e_type"]),
                arch=str(elf.header["e_machine"]),
            )
    except (ELFError, OSError) as e:
        logger.debug("Not an ELF file %s: %s", path, e)
        return None


def inspect_artifact(path: str) -> Optional[ArtifactMeta]:
    """Hash, size and header facts of the linked output, None if absent or unreadable."""
    if not file_exists(path):
        return None
    try:
        digest = hash_file(path)
    except OSError as e:
        logger.warning("Could not hash artifact %s: %s", path, e)
        return None
    return ArtifactMeta(
        path=path,
        sha256=digest,
        size_bytes=file_size(path),
        is_executable=is_exec(path),
        elf=read_elf_header(path),
    )
