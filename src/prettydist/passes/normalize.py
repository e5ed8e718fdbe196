"""
Collapse double-extension artifacts left by image optimizers: hero.png.webp -> hero.webp.
"""

from __future__ import annotations

import logging
import re
from functools import lru_cache
from typing import Optional, Tuple

from ..config import PostbuildConfig
from .report import PassReport, display_path
from .walker import iter_files

PASS_NAME = "normalize-extensions"

logger = logging.getLogger(__name__)


def extension_alternation(extensions: Tuple[str, ...]) -> str:
    # Longest first so "jpeg" is tried before "jpg".
    return "|".join(re.escape(ext) for ext in sorted(extensions, key=len, reverse=True))


@lru_cache(maxsize=16)
def _double_extension_pattern(extensions: Tuple[str, ...], webp: str) -> re.Pattern[str]:
    return re.compile(rf"\.(?:{extension_alternation(extensions)})\.{re.escape(webp)}$", re.IGNORECASE)


def double_extension_pattern(config: PostbuildConfig) -> re.Pattern[str]:
    return _double_extension_pattern(tuple(config.image_extensions), config.webp_extension)


def collapsed_name(name: str, config: PostbuildConfig) -> Optional[str]:
    """Return the single-extension name for a double-extension artifact, else None."""
    pattern = double_extension_pattern(config)
    if not pattern.search(name):
        return None
    return pattern.sub(f".{config.webp_extension}", name)


def normalize_extensions(config: PostbuildConfig, *, dry_run: bool = False) -> PassReport:
    """
    Rename every <base>.<image ext>.webp file to <base>.webp in place.

    A pre-existing <base>.webp is overwritten without notice.
    """
    root = config.resolved_root
    report = PassReport(name=PASS_NAME)
    for node in iter_files(root):
        report.files_seen += 1
        new_name = collapsed_name(node.name, config)
        if new_name is None:
            continue
        target = node.path.with_name(new_name)
        if dry_run:
            logger.info("Dry-run: would rename %s --> %s", display_path(node.path, root), display_path(target, root))
        else:
            logger.info("Renaming: %s --> %s", display_path(node.path, root), display_path(target, root))
            node.path.replace(target)
        report.record("rename", node.path, target)
    return report