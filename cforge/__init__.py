"""
cforge: minimal C build orchestrator.

Discovers src/*.c, compiles each translation unit into obj/, links the
objects into bin/<name>, and optionally runs the result.

No dependency graph, no incremental builds, no parallel compilation.
"""

__version__ = "0.1.0"
TOOL_NAME = "cforge"
SCHEMA_VERSION = "0.1"
