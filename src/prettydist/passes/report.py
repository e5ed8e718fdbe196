"""
Records of what each pass changed.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, List


def display_path(path: Path, root: Path) -> str:
    """Return path relative to root in POSIX form, or the full path when outside root."""
    try:
        return path.relative_to(root).as_posix()
    except ValueError:
        return str(path)


@dataclass(frozen=True)
class Action:
    """
    One filesystem mutation.

    Attributes:
        kind: "move", "rename" or "rewrite".
        source: Path before the mutation.
        destination: Path after the mutation (same as source for rewrites).
        substitutions: Number of references replaced (rewrites only).
    """
    kind: str
    source: Path
    destination: Path
    substitutions: int = 0


@dataclass
class PassReport:
    """Stores what changed during one pass."""

    name: str
    files_seen: int = 0
    actions: List[Action] = field(default_factory=list)

    def record(self, kind: str, source: Path, destination: Path, substitutions: int = 0) -> Action:
        action = Action(kind=kind, source=source, destination=destination, substitutions=substitutions)
        self.actions.append(action)
        return action

    @property
    def changed(self) -> int:
        return len(self.actions)

    @property
    def substitutions(self) -> int:
        return sum(action.substitutions for action in self.actions)


@dataclass
class PipelineReport:
    """
    Stores what changed across a whole run.

    Attributes:
        root: The output directory the passes ran over.
        dry_run: True when no mutation was applied.
        passes: Reports of the passes that completed, in run order.
    """
    root: Path
    dry_run: bool = False
    passes: List[PassReport] = field(default_factory=list)

    def get(self, name: str) -> PassReport:
        for report in self.passes:
            if report.name == name:
                return report
        raise KeyError(name)

    def summary_rows(self) -> Iterable[tuple[str, str]]:
        yield ("Root", str(self.root))
        yield ("Mode", "dry-run" if self.dry_run else "applied")
        for report in self.passes:
            detail = f"{report.changed} of {report.files_seen} files"
            if report.substitutions:
                detail += f" ({report.substitutions} references)"
            yield (report.name, detail)
