"""Find literals defined under several names, before any catalog exists.

Values worth registering are the ones already defined more than once:
``REQUEST_TIMEOUT = 30000`` in one file, ``timeoutMs: 30000`` in
another. Only literals assigned directly to a name count as
definitions; bare call arguments and comparisons do not.
"""

from __future__ import annotations

import logging
import re
from collections import defaultdict
from collections.abc import Iterator
from pathlib import Path
from typing import TypeAlias

from constforge.analysis.analyzer import display_path, read_source
from constforge.analysis.schemas import (
    DuplicateGroup,
    DuplicateReport,
    LiteralDefinition,
    ScanWarning,
)
from constforge.analysis.tokenizer import LiteralKind, LiteralToken, tokenize
from constforge.analysis.walker import iter_source_files
from constforge.config import EXTENSION_MAP, Settings
from constforge.constants import (
    DUPLICATE_MIN_DEFINITIONS,
    NUMBER_SEVERITY_THRESHOLDS,
    STRING_SEVERITY_THRESHOLDS,
    TRIVIAL_LITERALS,
    DuplicateSeverity,
)
from constforge.errors import ScanRootError, classify_read_error

logger = logging.getLogger(__name__)

# The name a literal is assigned to, at the end of the text left of it:
# NAME = , name: , name := , "name": , name: int =
_DEFINITION_RE = re.compile(
    r"(?<![\w$])(?P<name>[A-Za-z_$][\w$]*)[\"']?"
    r"(?:\s*:\s*[\w\[\]. |]+?\s*=|\s*:=|\s*[:=])\s*$"
)

GroupKey: TypeAlias = tuple[LiteralKind, int | float | str]


def severity(kind: LiteralKind, count: int) -> DuplicateSeverity:
    medium, high = (
        STRING_SEVERITY_THRESHOLDS
        if kind == "string"
        else NUMBER_SEVERITY_THRESHOLDS
    )
    if count >= high:
        return DuplicateSeverity.HIGH
    if count >= medium:
        return DuplicateSeverity.MEDIUM
    return DuplicateSeverity.LOW


def iter_definitions(
    text: str, language: str, display: str
) -> Iterator[tuple[LiteralToken, LiteralDefinition]]:
    """Yield non-trivial literals assigned directly to a name."""
    for token in tokenize(text, language):
        if token.value in TRIVIAL_LITERALS:
            continue
        left = text[text.rfind("\n", 0, token.start) + 1:token.start]
        m = _DEFINITION_RE.search(left)
        if m is None:
            continue
        yield token, LiteralDefinition(
            file_path=display,
            line=token.line,
            column=token.column,
            name=m.group("name"),
            literal=token.raw,
        )


def find_duplicates(
    root_dir: Path | str,
    settings: Settings | None = None,
    *,
    min_count: int = DUPLICATE_MIN_DEFINITIONS,
) -> DuplicateReport:
    """Group literal definitions by value across every file under ``root_dir``.

    A group is reported once its value has ``min_count`` or more
    definitions. Groups come most duplicated first, then by kind and
    value; definitions inside a group keep walk order.
    """
    if min_count < 2:
        msg = f"min_count must be at least 2, got {min_count}"
        raise ValueError(msg)
    root = Path(root_dir)
    if not root.exists():
        msg = f"{root} does not exist"
        raise ScanRootError(msg)
    cfg = settings or Settings()

    warnings: list[ScanWarning] = []

    def on_error(path: Path, error: OSError) -> None:
        warnings.append(
            ScanWarning(
                file_path=display_path(path, root),
                kind=classify_read_error(error),
                message=str(error),
            )
        )

    grouped: dict[GroupKey, list[LiteralDefinition]] = defaultdict(list)
    total_files = 0
    for path in iter_source_files(root, cfg, on_error=on_error):
        display = display_path(path, root)
        text = read_source(path, display, cfg)
        if isinstance(text, ScanWarning):
            warnings.append(text)
            continue
        total_files += 1
        language = EXTENSION_MAP.get(path.suffix.lower(), "unknown")
        for token, definition in iter_definitions(text, language, display):
            grouped[(token.kind, token.value)].append(definition)

    groups = [
        _group(kind, value, definitions)
        for (kind, value), definitions in grouped.items()
        if len(definitions) >= min_count
    ]
    groups.sort(key=lambda g: (-g.count, g.kind, str(g.value)))
    total_definitions = sum(len(d) for d in grouped.values())
    logger.info(
        "Found %d duplicated values among %d definitions in %d files",
        len(groups),
        total_definitions,
        total_files,
    )
    return DuplicateReport(
        groups=groups,
        warnings=warnings,
        total_files=total_files,
        total_definitions=total_definitions,
    )


def _group(
    kind: LiteralKind,
    value: int | float | str,
    definitions: list[LiteralDefinition],
) -> DuplicateGroup:
    return DuplicateGroup(
        kind=kind,
        value=value,
        count=len(definitions),
        severity=severity(kind, len(definitions)),
        names=sorted({d.name for d in definitions}),
        files=sorted({d.file_path for d in definitions}),
        definitions=definitions,
    )
