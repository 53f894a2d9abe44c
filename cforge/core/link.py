"""
Link stage: all compiled objects → one executable.

Fails without spawning anything when there is nothing to link.
Success needs both a zero exit status and the output file on disk.
"""
import logging
from typing import Optional

from cforge.core.command import execute_passthrough
from cforge.core.paths import file_exists
from cforge.core.string_array import StringArray
from cforge.io.schema import LinkPhase, PhaseStatus
from cforge.policy.toolchain import Toolchain

logger = logging.getLogger(__name__)


def link_files(
    output: str,
    obj_files: Optional[StringArray],
    toolchain: Toolchain,
) -> LinkPhase:
    """Link *obj_files* (in array order) into *output*."""
    if obj_files is None or obj_files.count == 0:
        logger.error("No object files for linking")
        return LinkPhase(
            output_path=output,
            status=PhaseStatus.FAILED,
            reason="no object files",
        )

    logger.info("Linking files into %s", output)

    result = execute_passthrough(
        toolchain.compiler, toolchain.link_args(output, obj_files.items)
    )

    reason = None
    if not result.started:
        reason = "linker could not be started"
    elif result.exit_code != 0:
        reason = f"linker exited with status {result.exit_code}"
    elif not file_exists(output):
        reason = "linker produced no output file"

    return LinkPhase(
        output_path=output,
        command=result.command_line,
        exit_code=result.exit_code,
        duration_ms=result.duration_ms,
        status=PhaseStatus.SUCCESS if reason is None else PhaseStatus.FAILED,
        reason=reason,
    )
