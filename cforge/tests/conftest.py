"""
Shared pytest fixtures for cforge tests.

Provides small C sources, a throwaway project directory laid out as
src/ (+ obj/ bin/ created by the build), and a guard that fails the
test if any subprocess is spawned.

Toolchain-dependent tests request ``gcc_ok`` and are skipped when gcc
is not on PATH.
"""
import shutil
import subprocess
import textwrap
from pathlib import Path

import pytest

# main() leaves a marker in the working directory so tests can tell
# whether the linked program was executed.
MAIN_C = textwrap.dedent("""\
    #include <stdio.h>

    int helper(void);

    int main(void) {
        FILE *f = fopen("ran.marker", "w");
        if (f) {
            fputs("ran\\n", f);
            fclose(f);
        }
        return helper();
    }
""")

HELPER_C = textwrap.dedent("""\
    int helper(void) {
        return 0;
    }
""")

HELPER_FAILING_C = textwrap.dedent("""\
    int helper(void) {
        return 7;
    }
""")

# Never referenced from main.c, so the link still succeeds without it.
BROKEN_C = textwrap.dedent("""\
    int broken(void) {
        return
    }
""")

# Compiles only without -Werror.
WARNING_C = textwrap.dedent("""\
    int warns(void) {
        int unused;
        return 0;
    }
""")


def _gcc_available() -> bool:
    """Check if gcc is in PATH."""
    return shutil.which("gcc") is not None


@pytest.fixture(scope="session")
def gcc_ok():
    """Skip tests if gcc is not available."""
    if not _gcc_available():
        pytest.skip("gcc not available - install gcc to run these tests")


@pytest.fixture
def project(tmp_path, monkeypatch) -> Path:
    """Empty project root with src/, used as the working directory."""
    for var in ("CFORGE_OUTPUT_NAME", "CFORGE_RUN", "CFORGE_STRICT_EXIT",
                "CFORGE_RECEIPT_PATH", "CFORGE_BUILD_ROOT"):
        monkeypatch.delenv(var, raising=False)
    (tmp_path / "src").mkdir()
    monkeypatch.chdir(tmp_path)
    return tmp_path


def write_sources(root: Path, files: dict) -> None:
    """Write {file name: content} under root/src."""
    for name, content in files.items():
        (root / "src" / name).write_text(content)


@pytest.fixture
def spawn_guard(monkeypatch):
    """Fail the test if anything calls subprocess.run."""
    calls = []

    def _refuse(*args, **kwargs):
        calls.append(args)
        raise AssertionError(f"unexpected subprocess spawn: {args!r}")

    monkeypatch.setattr(subprocess, "run", _refuse)
    return calls
