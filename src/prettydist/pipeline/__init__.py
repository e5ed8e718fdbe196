"""
Pipeline orchestration and post-run checks.
"""

from .audit import DanglingReference, find_dangling_references
from .executor import DEFAULT_PASSES, PASSES, resolve_passes, run_pipeline, single_run_guard

__all__ = [
    "DEFAULT_PASSES",
    "DanglingReference",
    "PASSES",
    "find_dangling_references",
    "resolve_passes",
    "run_pipeline",
    "single_run_guard",
]
