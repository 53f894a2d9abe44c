"""
Command execution: spawn an external program and wait for it.

Two modes:
  - capture:     stdout is collected into memory, stderr stays on the
                 terminal.  ``execute_and_capture`` returns the text or
                 None if the process could not be created.  The exit
                 status is NOT inspected; callers verify a side effect.
  - passthrough: the child inherits stdin/stdout/stderr.
                 ``execute_passthrough`` returns the CommandResult;
                 its ``ok`` is exit status == 0.

Both block until the child exits.  There is no timeout.
"""
import logging
import shlex
import subprocess
import time
from dataclasses import dataclass, field
from typing import List, Optional, Sequence

logger = logging.getLogger(__name__)


@dataclass
class CommandResult:
    """Outcome of one subprocess invocation."""

    argv: List[str] = field(default_factory=list)
    started: bool = False
    exit_code: int = -1
    stdout: Optional[str] = None
    duration_ms: int = 0
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.started and self.exit_code == 0

    @property
    def command_line(self) -> str:
        return shlex.join(self.argv)


def run_command(
    argv: Sequence[str],
    capture: bool = True,
    cwd: Optional[str] = None,
) -> CommandResult:
    """
    Spawn ``argv[0]`` with ``argv[1:]`` and wait for it to exit.

    Never raises for process-creation failures: a missing or
    non-executable program yields ``started=False``.
    """
    argv = [str(a) for a in argv]
    if not argv or not argv[0]:
        logger.error("Cannot execute an empty command")
        return CommandResult(argv=argv, error="empty command")

    logger.debug("Executing command: %s", shlex.join(argv))

    t0 = time.monotonic()
    try:
        proc = subprocess.run(
            argv,
            cwd=cwd,
            stdout=subprocess.PIPE if capture else None,
            text=True,
            errors="replace",
        )
    except OSError as e:
        duration = int((time.monotonic() - t0) * 1000)
        logger.error("Failed to start %s: %s", argv[0], e)
        return CommandResult(argv=argv, duration_ms=duration, error=str(e))

    duration = int((time.monotonic() - t0) * 1000)
    return CommandResult(
        argv=argv,
        started=True,
        exit_code=proc.returncode,
        stdout=(proc.stdout or "") if capture else None,
        duration_ms=duration,
    )


def execute_and_capture(
    program: str,
    args: Sequence[str] = (),
    cwd: Optional[str] = None,
) -> Optional[str]:
    """Run *program* and return its captured stdout, or None if it never started."""
    result = run_command([program, *args], capture=True, cwd=cwd)
    if not result.started:
        return None
    return result.stdout


def execute_passthrough(
    program: str,
    args: Sequence[str] = (),
    cwd: Optional[str] = None,
) -> CommandResult:
    """Run *program* on the caller's terminal; ``.ok`` iff it exits with 0."""
    return run_command([program, *args], capture=False, cwd=cwd)
