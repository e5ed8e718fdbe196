"""
Depth-first enumeration of an output tree.

Every directory is listed exactly once, before any of its entries is handed
to the caller. Nodes created while a pass is consuming the walk (a directory
made by the URL prettifier, say) therefore never show up in a listing that was
already taken, which keeps passes that write into the tree from revisiting
their own output at that level.
"""

from __future__ import annotations

import os
import stat
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Iterator, List, Tuple


class NodeKind(str, Enum):
    DIRECTORY = "directory"
    FILE = "file"


@dataclass(frozen=True)
class FileSystemNode:
    """A path together with what the filesystem reported it to be."""

    path: Path
    kind: NodeKind

    @property
    def name(self) -> str:
        return self.path.name

    @property
    def is_dir(self) -> bool:
        return self.kind is NodeKind.DIRECTORY


def classify(path: Path) -> NodeKind:
    """Stat path (following symlinks); errors propagate to the caller."""
    mode = path.stat().st_mode
    return NodeKind.DIRECTORY if stat.S_ISDIR(mode) else NodeKind.FILE


def walk(root: Path | str) -> Iterator[FileSystemNode]:
    """
    Yield every node below root in depth-first pre-order.

    Entries come in the order the filesystem lists them. A directory node is
    yielded before its contents, and its listing is taken when the walk
    resumes after that yield. An explicit stack is used instead of recursion,
    so tree depth is not bounded by the interpreter's recursion limit.

    Raises:
        OSError: Any listing or stat failure aborts the walk.
    """
    base = Path(root)
    stack: List[Tuple[Path, Iterator[str]]] = [(base, iter(os.listdir(base)))]
    while stack:
        directory, entries = stack[-1]
        name = next(entries, None)
        if name is None:
            stack.pop()
            continue
        path = directory / name
        node = FileSystemNode(path=path, kind=classify(path))
        yield node
        if node.is_dir:
            stack.append((path, iter(os.listdir(path))))


def iter_files(root: Path | str) -> Iterator[FileSystemNode]:
    """Yield only the file nodes of walk(root)."""
    for node in walk(root):
        if not node.is_dir:
            yield node
