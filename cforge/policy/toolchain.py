"""
Toolchain: the single supported compiler invocation and directory layout.

Both are frozen descriptors so that stage code carries no opinions about
flags or directory names.  There is exactly one profile; changing flags
is a profile change, not a stage change.
"""
from dataclasses import dataclass, field
from typing import List, Sequence, Tuple

from cforge.core.paths import path_join


@dataclass(frozen=True)
class Toolchain:
    """Compiler identity and the argv templates for compile and link."""

    profile_id: str
    compiler: str
    source_ext: str
    object_ext: str
    compile_flags: Tuple[str, ...] = field(default_factory=tuple)
    link_flags: Tuple[str, ...] = field(default_factory=tuple)

    @classmethod
    def v0(cls) -> "Toolchain":
        """gcc, C sources, warnings as errors."""
        return cls(
            profile_id="gcc-c-werror",
            compiler="gcc",
            source_ext="c",
            object_ext="o",
            compile_flags=("-Wall", "-Werror"),
        )

    @property
    def source_suffix(self) -> str:
        return f".{self.source_ext}"

    @property
    def object_suffix(self) -> str:
        return f".{self.object_ext}"

    def compile_args(self, src_file: str, obj_file: str) -> List[str]:
        """Arguments (without the program) for ``gcc -c -o <obj> <src> -Wall -Werror``."""
        return ["-c", "-o", obj_file, src_file, *self.compile_flags]

    def link_args(self, output: str, obj_files: Sequence[str]) -> List[str]:
        """Arguments (without the program) for ``gcc -o <output> <obj...>``."""
        return ["-o", output, *obj_files, *self.link_flags]


@dataclass(frozen=True)
class BuildLayout:
    """Fixed src/ obj/ bin/ layout, optionally rooted somewhere else."""

    src_dir: str = "src"
    obj_dir: str = "obj"
    bin_dir: str = "bin"

    @classmethod
    def under(cls, root: str) -> "BuildLayout":
        if root in ("", "."):
            return cls()
        return cls(
            src_dir=path_join(root, "src"),
            obj_dir=path_join(root, "obj"),
            bin_dir=path_join(root, "bin"),
        )

    def output_path(self, output_name: str) -> str:
        return path_join(self.bin_dir, output_name)
