"""
Build runner, top-level orchestration: src/*.c → obj/*.o → bin/<name> [→ run].

``run_build`` performs one complete build and returns a ``BuildOutcome``;
``main`` is the command-line entry point.

Stages run strictly one after another:
  1. layout check: src/ must exist; obj/ and bin/ are created (fatal on failure)
  2. discovery: zero sources is fatal
  3. compile: per-unit failures are reported, never abort the loop
  4. link: one invocation over every compiled object
  5. run: optional, only after a successful link
"""
import argparse
import logging
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

from pydantic import ValidationError

from cforge.config import BuildSettings
from cforge.core.compile import compile_all
from cforge.core.discovery import discover
from cforge.core.launcher import run_program
from cforge.core.link import link_files
from cforge.core.paths import change_mode, dir_exists, make_dir, now_iso
from cforge.core.provenance import capture_toolchain, inspect_artifact
from cforge.io.schema import (
    BuildReceipt,
    CompilePhase,
    LinkPhase,
    PhaseStatus,
    RunPhase,
)
from cforge.io.writer import write_receipt
from cforge.policy.toolchain import BuildLayout, Toolchain

logger = logging.getLogger(__name__)


class BuildFatalError(RuntimeError):
    """A condition that ends the whole build before linking."""


@dataclass
class BuildOutcome:
    """What one build run produced, stage by stage."""

    output_path: str
    sources: List[str] = field(default_factory=list)
    objects: List[str] = field(default_factory=list)
    compile: CompilePhase = field(default_factory=CompilePhase)
    link: LinkPhase = field(default_factory=LinkPhase)
    run: RunPhase = field(default_factory=RunPhase)
    receipt_path: Optional[Path] = None

    @property
    def succeeded(self) -> bool:
        return (
            self.link.status == PhaseStatus.SUCCESS
            and self.compile.summary.failed_units == 0
            and self.run.status != PhaseStatus.FAILED
        )


def _ensure_dir(path: str, label: str, mode: int) -> None:
    if dir_exists(path):
        return
    logger.info("Creating directory for %s %s", label, path)
    if not make_dir(path, mode):
        raise BuildFatalError(f"Failed to create directory {path}")


def run_build(
    output_name: str = "program",
    should_run: bool = False,
    layout: Optional[BuildLayout] = None,
    toolchain: Optional[Toolchain] = None,
    dir_mode: int = 0o755,
    receipt_path: Optional[Path] = None,
) -> BuildOutcome:
    """
    Run one complete build.

    Raises
    ------
    BuildFatalError
        Missing source directory, obj/ or bin/ not creatable, or no
        source files found.  Nothing is linked in that case.
    """
    if layout is None:
        layout = BuildLayout()
    if toolchain is None:
        toolchain = Toolchain.v0()

    created_at = now_iso()

    # ── Step 1: directory layout ─────────────────────────────────────
    if not dir_exists(layout.src_dir):
        raise BuildFatalError(f"Source code directory {layout.src_dir} does not exist")

    _ensure_dir(layout.obj_dir, "object files", dir_mode)
    _ensure_dir(layout.bin_dir, "executable files", dir_mode)

    # ── Step 2: discovery ────────────────────────────────────────────
    logger.info("Searching for source files in %s", layout.src_dir)
    src_files = discover(layout.src_dir, toolchain.source_ext)

    if src_files is None or src_files.count == 0:
        raise BuildFatalError(
            f"No source {toolchain.source_suffix} files found in directory {layout.src_dir}"
        )

    logger.info("Found %d source files", src_files.count)

    output_path = layout.output_path(output_name)
    outcome = BuildOutcome(output_path=output_path, sources=src_files.items)
    obj_files = None

    try:
        # ── Step 3: compile ──────────────────────────────────────────
        obj_files, outcome.compile = compile_all(src_files, layout.obj_dir, toolchain)
        outcome.objects = obj_files.items

        if obj_files.count != src_files.count:
            logger.error(
                "Only %d out of %d files compiled", obj_files.count, src_files.count
            )
        else:
            logger.info("All files successfully compiled")

        # ── Step 4: link ─────────────────────────────────────────────
        outcome.link = link_files(output_path, obj_files, toolchain)

        if outcome.link.status == PhaseStatus.SUCCESS:
            logger.info("Program successfully built: %s", output_path)
            change_mode(output_path, 0o755)

            # ── Step 5: run ──────────────────────────────────────────
            if should_run:
                logger.info("Running program...")
                outcome.run = run_program(output_path)
        else:
            logger.error("Error linking program")
    finally:
        src_files.destroy()
        if obj_files is not None:
            obj_files.destroy()

    if receipt_path is not None:
        receipt = BuildReceipt(
            created_at=created_at,
            toolchain=capture_toolchain(toolchain),
            src_dir=layout.src_dir,
            obj_dir=layout.obj_dir,
            bin_dir=layout.bin_dir,
            sources=outcome.sources,
            compile=outcome.compile,
            link=outcome.link,
            run=outcome.run,
            artifact=inspect_artifact(output_path),
        )
        receipt.status = receipt.compute_status()
        receipt.finished_at = now_iso()
        outcome.receipt_path = write_receipt(receipt, receipt_path)
        logger.info("Receipt saved: %s", outcome.receipt_path)

    return outcome


# ── CLI ──────────────────────────────────────────────────────────────────────

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="cforge",
        allow_abbrev=False,
        description="cforge: compile src/*.c into obj/, link bin/<name>, optionally run it",
    )
    parser.add_argument(
        "command",
        nargs="*",
        help="'run' is the same as --run; anything else is ignored",
    )
    parser.add_argument(
        "--run",
        action="store_true",
        help="Run the program after a successful link",
    )
    parser.add_argument(
        "--out",
        nargs="?",
        default=None,
        help="File name of the linked program under bin/ (default: program); "
        "use --out=NAME for a name that starts with '-'",
    )
    parser.add_argument(
        "--strict",
        action="store_true",
        help="Exit with status 1 when compiling, linking or running fails",
    )
    parser.add_argument(
        "--receipt",
        type=Path,
        default=None,
        help="Write a JSON build receipt to this path",
    )
    parser.add_argument(
        "-C", "--directory",
        default=None,
        help="Directory holding src/, obj/ and bin/ (default: current directory)",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable verbose logging (shows executed commands)",
    )
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """CLI entry point for cforge."""
    args, unknown = build_parser().parse_known_args(argv)
    log_format = "%(asctime)s [%(name)s] %(levelname)s: %(message)s"

    try:
        settings = BuildSettings()
    except ValidationError as e:
        logging.basicConfig(level=logging.INFO, format=log_format)
        logger.critical("Invalid configuration: %s", e)
        return 1

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else settings.LOG_LEVEL,
        format=log_format,
    )
    if unknown:
        logger.debug("Ignoring arguments: %s", " ".join(unknown))

    # argparse fills the positional only once; later words land in unknown
    words = [*args.command, *unknown]
    should_run = settings.RUN or args.run or "run" in words
    output_name = args.out or settings.OUTPUT_NAME
    root = args.directory or settings.BUILD_ROOT
    strict = args.strict or settings.STRICT_EXIT
    receipt_path = args.receipt
    if receipt_path is None and settings.RECEIPT_PATH:
        receipt_path = Path(settings.RECEIPT_PATH)

    try:
        outcome = run_build(
            output_name=output_name,
            should_run=should_run,
            layout=BuildLayout.under(root),
            dir_mode=settings.DIR_MODE,
            receipt_path=receipt_path,
        )
    except BuildFatalError as e:
        logger.critical("%s", e)
        return 1

    if strict and not outcome.succeeded:
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
