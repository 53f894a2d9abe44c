"""
Schema: Pydantic models for the build receipt.

One optional JSON document per build run.  Records which sources were
discovered, how each unit compiled, the link and run outcomes, and the
produced artifact.  Paths are stored as the orchestrator saw them.
"""
from enum import Enum, unique
from typing import List, Optional

from pydantic import BaseModel, Field

from cforge import SCHEMA_VERSION, TOOL_NAME, __version__


# ── Enums ────────────────────────────────────────────────────────────────────

@unique
class PhaseStatus(str, Enum):
    """Status of a single stage (compile/link/run)."""
    SUCCESS = "SUCCESS"
    FAILED = "FAILED"
    SKIPPED = "SKIPPED"


@unique
class JobStatus(str, Enum):
    SUCCESS = "SUCCESS"
    PARTIAL = "PARTIAL"
    FAILED = "FAILED"


# ── Compile ──────────────────────────────────────────────────────────────────

class CompileUnitResult(BaseModel):
    """Result of compiling a single translation unit."""
    source_path: str
    object_path: str
    compiled: bool = False   # object file present after the compiler ran
    exit_code: int = -1      # -1 when the compiler could not be started
    duration_ms: int = 0


class CompilePhaseSummary(BaseModel):
    compiled_units: int = 0
    failed_units: int = 0


class CompilePhase(BaseModel):
    """Compile stage: every source → object, failures isolated."""
    command_template: str = ""
    units: List[CompileUnitResult] = Field(default_factory=list)
    summary: CompilePhaseSummary = Field(default_factory=CompilePhaseSummary)
    status: PhaseStatus = PhaseStatus.SKIPPED


# ── Link / Run ───────────────────────────────────────────────────────────────

class LinkPhase(BaseModel):
    """Link stage: all objects → one executable."""
    output_path: str = ""
    command: str = ""
    exit_code: int = -1
    duration_ms: int = 0
    status: PhaseStatus = PhaseStatus.SKIPPED
    reason: Optional[str] = None


class RunPhase(BaseModel):
    """Run stage: execute the linked program on the terminal."""
    program: str = ""
    command: str = ""
    exit_code: int = -1
    duration_ms: int = 0
    status: PhaseStatus = PhaseStatus.SKIPPED
    reason: Optional[str] = None


# ── Artifact / toolchain ─────────────────────────────────────────────────────

class ElfMeta(BaseModel):
    """Minimal ELF header facts."""
    elf_type: str = ""   # ET_EXEC, ET_DYN, ...
    arch: str = ""       # EM_X86_64, ...


class ArtifactMeta(BaseModel):
    """Metadata for the linked executable."""
    path: str
    sha256: str
    size_bytes: int
    is_executable: bool
    elf: Optional[ElfMeta] = None   # None when the file is not ELF


class ToolchainIdentity(BaseModel):
    profile_id: str
    compiler: str
    compiler_version: str = "unknown"   # first line of `<compiler> --version`


class ToolInfo(BaseModel):
    name: str = TOOL_NAME
    version: str = __version__
    schema_version: str = SCHEMA_VERSION


# ── Receipt ──────────────────────────────────────────────────────────────────

class BuildReceipt(BaseModel):
    """Everything one build run did, in stage order."""
    tool: ToolInfo = Field(default_factory=ToolInfo)
    created_at: str
    finished_at: Optional[str] = None
    status: JobStatus = JobStatus.FAILED

    toolchain: ToolchainIdentity
    src_dir: str
    obj_dir: str
    bin_dir: str

    sources: List[str] = Field(default_factory=list)
    compile: CompilePhase = Field(default_factory=CompilePhase)
    link: LinkPhase = Field(default_factory=LinkPhase)
    run: RunPhase = Field(default_factory=RunPhase)
    artifact: Optional[ArtifactMeta] = None

    def compute_status(self) -> JobStatus:
        """SUCCESS if every stage held, PARTIAL if an artifact exists anyway."""
        if self.link.status != PhaseStatus.SUCCESS:
            return JobStatus.FAILED
        if self.compile.summary.failed_units > 0:
            return JobStatus.PARTIAL
        if self.run.status == PhaseStatus.FAILED:
            return JobStatus.PARTIAL
        return JobStatus.SUCCESS
