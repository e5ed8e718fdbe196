"""
Filesystem helpers shared across the passes.
"""

from __future__ import annotations

import os
import shutil
import tempfile
from contextlib import contextmanager
from pathlib import Path

from filelock import FileLock


def ensure_directory(path: Path | str) -> Path:
    """
    Ensure a directory exists, returning the Path.

    Succeeds when the directory is already present and creates missing parents.
    Raises FileExistsError when a non-directory already occupies the path.
    """
    target = Path(path)
    target.mkdir(parents=True, exist_ok=True)
    return target


def lock_path_for(target: Path, tag: str = "") -> Path:
    """Return the lock file path that sits alongside target."""
    suffix = f".{tag}.lock" if tag else ".lock"
    return target.with_name(f"{target.name}{suffix}")


@contextmanager
def file_lock(path: Path | str, *, tag: str = "", timeout: float = -1):
    """
    Context manager for a filesystem lock file alongside the target.

    A timeout of 0 fails immediately with filelock.Timeout when the lock is held.
    """
    target = Path(path).expanduser().resolve()
    lock_path = lock_path_for(target, tag)
    lock_path.parent.mkdir(parents=True, exist_ok=True)
    with FileLock(str(lock_path), timeout=timeout):
        yield lock_path


def _atomic_write_text(target: Path, content: str, encoding: str) -> None:
    """Write text atomically by staging a temp file and renaming."""
    target.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_path = tempfile.mkstemp(prefix=f".{target.name}.", suffix=".tmp", dir=target.parent)
    try:
        with os.fdopen(fd, "w", encoding=encoding, newline="") as handle:
            handle.write(content)
            handle.flush()
            os.fsync(handle.fileno())
        # mkstemp creates 0600 files; keep the permissions the page already had.
        if target.exists():
            shutil.copymode(target, tmp_path)
        os.replace(tmp_path, target)
    finally:
        try:
            os.unlink(tmp_path)
        except FileNotFoundError:
            pass


def read_text_file(path: Path | str, encoding: str = "utf-8") -> str:
    """Read text without newline translation so CRLF pages round-trip untouched."""
    with open(path, "r", encoding=encoding, newline="") as handle:
        return handle.read()


def write_text_file(path: Path | str, content: str, encoding: str = "utf-8") -> Path:
    """
    Write text to a file atomically, creating parent directories as needed.
    """
    target = Path(path)
    _atomic_write_text(target, content, encoding=encoding)
    return target
