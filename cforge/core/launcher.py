"""
Run stage: execute the linked program on the caller's terminal.
"""
import logging
import os

from cforge.core.command import execute_passthrough
from cforge.core.paths import file_exists, is_exec
from cforge.io.schema import PhaseStatus, RunPhase

logger = logging.getLogger(__name__)


def invocation_path(program: str) -> str:
    """Relative paths are spawned as ``./<path>`` so PATH is never searched."""
    if os.path.isabs(program) or program.startswith("./") or program.startswith("../"):
        return program
    return "./" + program


def run_program(program: str) -> RunPhase:
    """
    Run *program* if it exists and is executable.

    Neither precondition failure spawns a process.
    """
    logger.info("Running program %s", program)

    if not file_exists(program):
        logger.error("Program %s does not exist", program)
        return RunPhase(program=program, status=PhaseStatus.FAILED, reason="missing")

    if not is_exec(program):
        logger.error("File %s is not executable", program)
        return RunPhase(program=program, status=PhaseStatus.FAILED, reason="not executable")

    result = execute_passthrough(invocation_path(program))

    reason = None
    if not result.started:
        reason = "could not be started"
    elif result.exit_code != 0:
        reason = f"exited with status {result.exit_code}"
        logger.error("Program %s exited with status %d", program, result.exit_code)

    return RunPhase(
        program=program,
        command=result.command_line,
        exit_code=result.exit_code,
        duration_ms=result.duration_ms,
        status=PhaseStatus.SUCCESS if reason is None else PhaseStatus.FAILED,
        reason=reason,
    )
