"""
Find image references in pages that point at files missing from the tree.
"""

from __future__ import annotations

import logging
import os
import re
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import List

from ..config import PostbuildConfig
from ..passes.walker import iter_files
from ..util import read_text_file

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DanglingReference:
    """
    An image reference whose target does not exist.

    Attributes:
        page: Page containing the reference.
        line: 1-based line number of the reference.
        reference: Reference text as written in the page.
        expected: Filesystem path the reference resolves to.
    """
    page: Path
    line: int
    reference: str
    expected: Path


@lru_cache(maxsize=16)
def _asset_reference_pattern(prefix: str) -> re.Pattern[str]:
    return re.compile(
        rf"(?<=[\"'\s=(,])((?:\.\./)+|/)?{re.escape(prefix)}[^\"'\s>),]+",
        re.IGNORECASE,
    )


def resolve_reference(reference: str, page: Path, root: Path) -> Path:
    """Resolve a reference the way a static server would for the given page."""
    target = reference.split("?", 1)[0].split("#", 1)[0]
    if target.startswith("/"):
        candidate = root / target.lstrip("/")
    else:
        candidate = page.parent / target
    return Path(os.path.normpath(candidate))


def find_dangling_references(config: PostbuildConfig) -> List[DanglingReference]:
    """
    Scan every page under the root for asset references with no file behind them.
    """
    root = config.resolved_root
    pattern = _asset_reference_pattern(config.asset_prefix)
    dangling: List[DanglingReference] = []
    for node in iter_files(root):
        if not node.name.endswith(config.html_extension):
            continue
        content = read_text_file(node.path)
        for match in pattern.finditer(content):
            reference = match.group(0)
            expected = resolve_reference(reference, node.path, root)
            if expected.is_file():
                continue
            line = content.count("\n", 0, match.start()) + 1
            logger.debug("Dangling reference %s in %s:%d", reference, node.path, line)
            dangling.append(DanglingReference(page=node.path, line=line, reference=reference, expected=expected))
    return dangling
