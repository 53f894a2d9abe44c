"""
Compile stage: each discovered source → one object file.

Success of a unit is decided by the object file existing after the
compiler ran, not by the compiler's exit status.  A failing unit is
reported and skipped; the loop always visits every source.
"""
import logging
from typing import Tuple

from cforge.core.command import run_command
from cforge.core.paths import file_exists, path_basename, path_join, replace_first
from cforge.core.string_array import StringArray
from cforge.io.schema import (
    CompilePhase,
    CompilePhaseSummary,
    CompileUnitResult,
    PhaseStatus,
)
from cforge.policy.toolchain import Toolchain

logger = logging.getLogger(__name__)


def object_path_for(src_file: str, obj_dir: str, toolchain: Toolchain) -> str:
    """``join(obj_dir, replace_first(basename(src), ".c", ".o"))``."""
    base_name = path_basename(src_file)
    obj_name = replace_first(base_name, toolchain.source_suffix, toolchain.object_suffix)
    return path_join(obj_dir, obj_name)


def compile_file(src_file: str, obj_file: str, toolchain: Toolchain) -> CompileUnitResult:
    """Compile a single source file into *obj_file*."""
    logger.info("Compiling %s to %s", src_file, obj_file)

    result = run_command(
        [toolchain.compiler, *toolchain.compile_args(src_file, obj_file)],
        capture=True,
    )
    if result.stdout:
        logger.debug("%s: %s", toolchain.compiler, result.stdout.rstrip())

    return CompileUnitResult(
        source_path=src_file,
        object_path=obj_file,
        compiled=result.started and file_exists(obj_file),
        exit_code=result.exit_code,
        duration_ms=result.duration_ms,
    )


def compile_all(
    src_files: StringArray,
    obj_dir: str,
    toolchain: Toolchain,
) -> Tuple[StringArray, CompilePhase]:
    """
    Compile every source in order.

    Returns (object paths of the units that compiled, CompilePhase).
    The object array keeps source order and skips failed units.
    """
    obj_files = StringArray(max(src_files.count, 1))
    units = []

    for src_file in src_files:
        obj_file = object_path_for(src_file, obj_dir, toolchain)
        unit = compile_file(src_file, obj_file, toolchain)
        units.append(unit)

        if unit.compiled:
            obj_files.append(obj_file)
        else:
            logger.error("Error compiling %s", src_file)

    failed = len(units) - obj_files.count
    if not units:
        status = PhaseStatus.SKIPPED
    elif failed == 0:
        status = PhaseStatus.SUCCESS
    else:
        # Some units failed; link still proceeds with whatever compiled
        status = PhaseStatus.FAILED

    template = " ".join(
        [toolchain.compiler, *toolchain.compile_args("<source>", "<object>")]
    )
    phase = CompilePhase(
        command_template=template,
        units=units,
        summary=CompilePhaseSummary(compiled_units=obj_files.count, failed_units=failed),
        status=status,
    )
    return obj_files, phase
