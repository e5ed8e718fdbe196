"""
Exception types raised by the post-build pipeline.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional


class PrettydistError(RuntimeError):
    """Base class for every error surfaced to the operator."""


class ConfigError(PrettydistError):
    """Raised when configuration files cannot be loaded or validated."""


class RootNotFoundError(PrettydistError):
    """Raised when the output root is missing or is not a directory."""


class PassOrderError(PrettydistError):
    """Raised when a pass selection breaks the mandated pass order."""


class PipelineBusyError(PrettydistError):
    """Raised when another run already holds the lock for the same root."""


class PassFailedError(PrettydistError):
    """
    Raised when a filesystem error aborts a pass.

    Attributes:
        pass_name: Name of the pass that was running.
        path: Path involved in the failing operation, when known.
        kind: One of "not-found", "permission-denied", "name-collision", "io-failure".
    """

    def __init__(self, pass_name: str, exc: Exception, path: Optional[Path] = None) -> None:
        self.pass_name = pass_name
        self.kind = classify_os_error(exc)
        filename = getattr(exc, "filename", None)
        self.path: Optional[Path] = path or (Path(filename) if filename else None)
        detail = getattr(exc, "strerror", None) or str(exc)
        location = f" ({self.path})" if self.path else ""
        super().__init__(f"{pass_name} failed [{self.kind}]{location}: {detail}")


def classify_os_error(exc: Exception) -> str:
    """Map a filesystem failure onto the error kinds reported to the operator."""
    if isinstance(exc, FileNotFoundError):
        return "not-found"
    if isinstance(exc, PermissionError):
        return "permission-denied"
    if isinstance(exc, (FileExistsError, IsADirectoryError, NotADirectoryError)):
        return "name-collision"
    return "io-failure"
