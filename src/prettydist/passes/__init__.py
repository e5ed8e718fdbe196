"""
The three tree passes and the walker they share.
"""

from .normalize import normalize_extensions
from .prettify import prettify_urls
from .report import Action, PassReport, PipelineReport
from .rewrite import rewrite_html, rewrite_references
from .walker import FileSystemNode, NodeKind, iter_files, walk

__all__ = [
    "Action",
    "FileSystemNode",
    "NodeKind",
    "PassReport",
    "PipelineReport",
    "iter_files",
    "normalize_extensions",
    "prettify_urls",
    "rewrite_html",
    "rewrite_references",
    "walk",
]
