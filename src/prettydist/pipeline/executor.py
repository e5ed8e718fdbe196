"""
Pipeline executor runs the passes over one output root in their fixed order.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager, nullcontext
from pathlib import Path
from typing import Callable, Dict, List, Optional, Sequence

from filelock import Timeout

from ..config import ConfigError, PostbuildConfig
from ..errors import PassFailedError, PassOrderError, PipelineBusyError, PrettydistError, RootNotFoundError
from ..passes import PassReport, PipelineReport, normalize_extensions, prettify_urls, rewrite_references
from ..passes import normalize, prettify, rewrite
from ..util import file_lock

logger = logging.getLogger(__name__)

LOCK_TAG = "prettydist"

PassFunction = Callable[..., PassReport]

PASSES: Dict[str, PassFunction] = {
    prettify.PASS_NAME: prettify_urls,
    normalize.PASS_NAME: normalize_extensions,
    rewrite.PASS_NAME: rewrite_references,
}
DEFAULT_PASSES = tuple(PASSES)


def resolve_passes(selection: Optional[Sequence[str]] = None) -> List[str]:
    """
    Validate a pass selection, returning the names to run in order.

    Rewriting references assumes the webp files already carry their final
    names, so a selection that rewrites before normalizing is rejected.

    Raises:
        ConfigError: If a name is unknown or repeated.
        PassOrderError: If rewrite-refs is placed before normalize-extensions.
    """
    if selection is None:
        return list(DEFAULT_PASSES)
    names = list(selection)
    unknown = [name for name in names if name not in PASSES]
    if unknown:
        raise ConfigError(f"Unknown pass(es): {', '.join(unknown)}. Choose from {', '.join(DEFAULT_PASSES)}.")
    if len(set(names)) != len(names):
        raise ConfigError("Each pass may be selected only once.")
    if normalize.PASS_NAME in names and rewrite.PASS_NAME in names:
        if names.index(rewrite.PASS_NAME) < names.index(normalize.PASS_NAME):
            raise PassOrderError(
                f"{rewrite.PASS_NAME} must run after {normalize.PASS_NAME}; "
                "rewriting first leaves references to webp files that do not exist yet."
            )
    return names


def _validate_root(config: PostbuildConfig) -> Path:
    root = config.resolved_root
    if not root.exists():
        raise RootNotFoundError(f"Output directory not found: {root}")
    if not root.is_dir():
        raise RootNotFoundError(f"Output root must be a directory, got file: {root}")
    return root


@contextmanager
def single_run_guard(root: Path):
    """
    Hold a non-blocking lock next to the root for the duration of a run.

    Raises:
        PipelineBusyError: If another run already holds the lock.
    """
    try:
        with file_lock(root, tag=LOCK_TAG, timeout=0) as lock_path:
            logger.debug("Acquired run lock %s", lock_path)
            yield
    except Timeout as exc:
        raise PipelineBusyError(f"Another run is already processing {root} (lock {exc.lock_file})") from exc


def _run_pass(name: str, config: PostbuildConfig, *, dry_run: bool) -> PassReport:
    logger.info("Running %s", name)
    try:
        return PASSES[name](config, dry_run=dry_run)
    except OSError as exc:
        raise PassFailedError(name, exc) from exc


def run_pipeline(
    config: PostbuildConfig,
    *,
    dry_run: bool = False,
    passes: Optional[Sequence[str]] = None,
    lock: bool = True,
) -> PipelineReport:
    """
    Run the passes over config.root, stopping at the first failure.

    Mutations made before a failure stay on disk; there is no rollback.

    Args:
        config: Post-build settings.
        dry_run: Log and report planned changes without touching the tree.
        passes: Optional subset of pass names (see resolve_passes).
        lock: Guard the root against a concurrent run.

    Returns:
        A PipelineReport with one PassReport per completed pass.

    Raises:
        PrettydistError: Any failure; it has already been logged.
    """
    try:
        names = resolve_passes(passes)
        root = _validate_root(config)
        report = PipelineReport(root=root, dry_run=dry_run)
        guard = single_run_guard(root) if lock and not dry_run else nullcontext()
        with guard:
            for name in names:
                report.passes.append(_run_pass(name, config, dry_run=dry_run))
    except PrettydistError as exc:
        logger.error("Postbuild error: %s", exc)
        raise
    logger.info("Postbuild processing complete.")
    return report
