"""Count references to semantic names and legacy aliases in a tree.

Names nobody references are candidates for removal; names referenced
once deserve a look (often just an import). Everything else is kept.
"""

from __future__ import annotations

import logging
import re
from collections import defaultdict
from collections.abc import Iterable
from pathlib import Path

from constforge.analysis.schemas import BindingUsage
from constforge.analysis.walker import iter_source_files
from constforge.config import Settings
from constforge.constants import USAGE_REVIEW_THRESHOLD, UsageRecommendation
from constforge.errors import ScanRootError
from constforge.registry.legacy import LegacyCompatibilityBridge
from constforge.registry.semantic import SemanticMappingLayer

logger = logging.getLogger(__name__)


def recommend(usage_count: int) -> UsageRecommendation:
    if usage_count == 0:
        return UsageRecommendation.REMOVE
    if usage_count <= USAGE_REVIEW_THRESHOLD:
        return UsageRecommendation.REVIEW
    return UsageRecommendation.KEEP


def find_binding_usages(
    root_dir: Path | str,
    layer: SemanticMappingLayer,
    bridge: LegacyCompatibilityBridge | None = None,
    *,
    settings: Settings | None = None,
    exclude: Iterable[Path] = (),
) -> list[BindingUsage]:
    """Return one :class:`BindingUsage` per name, least used first.

    ``exclude`` lists files (typically the catalog itself) whose
    mentions do not count as usages.
    """
    root = Path(root_dir)
    if not root.exists():
        msg = f"{root} does not exist"
        raise ScanRootError(msg)
    cfg = settings or Settings()

    kinds: dict[str, str] = {b.name: "binding" for b in layer}
    if bridge is not None:
        kinds.update({old: "alias" for old in bridge.migration_map()})
    if not kinds:
        return []

    # Longest first so CATEGORY.NAME wins over a bare NAME prefix;
    # member access (TIMEOUTS.QUICK_MS) counts as a reference to the name
    names = sorted(kinds, key=len, reverse=True)
    pattern = re.compile(
        r"(?<![\w])(?:" + "|".join(re.escape(n) for n in names) + r")(?![\w])"
    )
    excluded = {p.resolve() for p in exclude}

    counts: dict[str, int] = defaultdict(int)
    files: dict[str, set[str]] = defaultdict(set)
    for path in iter_source_files(root, cfg):
        if path.resolve() in excluded:
            continue
        try:
            text = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            logger.warning("Skipping %s: %s", path, exc)
            continue
        rel = path.relative_to(root).as_posix() if root.is_dir() else path.as_posix()
        for m in pattern.finditer(text):
            counts[m.group()] += 1
            files[m.group()].add(rel)

    usages = [
        BindingUsage(
            name=name,
            kind=kind,
            usage_count=counts[name],
            files=sorted(files[name]),
            recommendation=recommend(counts[name]),
        )
        for name, kind in kinds.items()
    ]
    return sorted(usages, key=lambda u: (u.usage_count, u.name))
