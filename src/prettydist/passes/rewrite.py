"""
Point image references in pages at the optimized webp files.
"""

from __future__ import annotations

import logging
import re
from functools import lru_cache
from typing import Tuple

from ..config import PostbuildConfig
from ..errors import PassFailedError
from ..util import read_text_file, write_text_file
from .normalize import extension_alternation
from .report import PassReport, display_path
from .walker import iter_files

PASS_NAME = "rewrite-refs"

# A reference ends at a quote, whitespace or the closing bracket of a tag.
REFERENCE_DELIMITERS = "\"'\\s>"

logger = logging.getLogger(__name__)


@lru_cache(maxsize=16)
def _reference_pattern(prefix: str, extensions: Tuple[str, ...]) -> re.Pattern[str]:
    return re.compile(
        rf"((?:\.\./|/)?{re.escape(prefix)}[^{REFERENCE_DELIMITERS}]+)"
        rf"\.(?:{extension_alternation(extensions)})"
        rf"(?=[{REFERENCE_DELIMITERS}])",
        re.IGNORECASE,
    )


def reference_pattern(config: PostbuildConfig) -> re.Pattern[str]:
    return _reference_pattern(config.asset_prefix, tuple(config.image_extensions))


def rewrite_html(text: str, config: PostbuildConfig) -> tuple[str, int]:
    """
    Swap the extension of every anchored image reference for the webp one.

    Returns:
        The rewritten text and the number of references replaced.
    """
    return reference_pattern(config).subn(rf"\g<1>.{config.webp_extension}", text)


def rewrite_references(config: PostbuildConfig, *, dry_run: bool = False) -> PassReport:
    """
    Rewrite image references in every page under the root.

    Pages are written back even when nothing matched, unless
    config.skip_unchanged_writes is set.
    """
    root = config.resolved_root
    report = PassReport(name=PASS_NAME)
    for node in iter_files(root):
        report.files_seen += 1
        if not node.name.endswith(config.html_extension):
            continue
        try:
            content = read_text_file(node.path)
        except UnicodeDecodeError as exc:
            raise PassFailedError(PASS_NAME, exc, path=node.path) from exc
        updated, count = rewrite_html(content, config)
        if count == 0 and config.skip_unchanged_writes:
            logger.debug("No image refs to update in %s", display_path(node.path, root))
            continue
        if dry_run:
            logger.info("Dry-run: would update %d image ref(s) in %s", count, display_path(node.path, root))
        else:
            write_text_file(node.path, updated)
            logger.info("Updated image refs in %s", display_path(node.path, root))
        report.record("rewrite", node.path, node.path, substitutions=count)
    return report
