"""Render scan, duplicate, validation, and usage reports as JSON or tables."""

from __future__ import annotations

import json
from typing import Any

from constforge.analysis.schemas import (
    BindingUsage,
    DuplicateReport,
    ScanReport,
    ScanWarning,
)
from constforge.constants import TABLE_SNIPPET_CHARS, ReportFormat
from constforge.validation.validator import ValidationReport


def render_scan(report: ScanReport, fmt: ReportFormat | str) -> str:
    if ReportFormat(fmt) is ReportFormat.JSON:
        return _dumps(report.model_dump(mode="json"))

    rows = [
        (
            f"{o.file_path}:{o.line}:{o.column}",
            o.matched_literal,
            o.matched_atomic_id or "-",
            _one_line(o.suggested_replacement),
        )
        for o in report.occurrences
    ]
    lines = _table(("LOCATION", "LITERAL", "ATOMIC ID", "SUGGESTION"), rows)
    lines.extend(_warning_lines(report.warnings))

    summary = report.summary
    lines.append("")
    lines.append(
        f"{summary.total_occurrences} occurrences in "
        f"{len(summary.complexity_by_file)} of {summary.total_files} files"
    )
    lines.extend(
        f"  {path}: {level}"
        for path, level in sorted(summary.complexity_by_file.items())
    )
    if report.interrupted:
        lines.append("(scan interrupted; partial results)")
    return "\n".join(lines)


def render_duplicates(report: DuplicateReport, fmt: ReportFormat | str) -> str:
    if ReportFormat(fmt) is ReportFormat.JSON:
        return _dumps(report.model_dump(mode="json"))

    rows = [
        (
            repr(g.value),
            str(g.count),
            str(g.severity),
            _one_line(", ".join(g.names)),
            _one_line(", ".join(g.files)),
        )
        for g in report.groups
    ]
    lines = _table(("VALUE", "COUNT", "SEVERITY", "NAMES", "FILES"), rows)
    lines.extend(_warning_lines(report.warnings))
    lines.append("")
    lines.append(
        f"{len(report.groups)} duplicated values among "
        f"{report.total_definitions} definitions in {report.total_files} files"
    )
    return "\n".join(lines)


def render_validation(report: ValidationReport, fmt: ReportFormat | str) -> str:
    if ReportFormat(fmt) is ReportFormat.JSON:
        return _dumps(report.model_dump(mode="json"))

    if report.passed:
        return f"Validation passed ({report.rules_checked} rules)"
    lines = [
        f"Validation failed: {len(report.violations)} of "
        f"{report.rules_checked} rules violated"
    ]
    lines.extend(
        f"  [{v.rule_set}] {v.kind}: {v.message}" for v in report.violations
    )
    return "\n".join(lines)


def render_usage(usages: list[BindingUsage], fmt: ReportFormat | str) -> str:
    if ReportFormat(fmt) is ReportFormat.JSON:
        return _dumps([u.model_dump(mode="json") for u in usages])
    rows = [
        (u.name, u.kind, str(u.usage_count), str(u.recommendation))
        for u in usages
    ]
    return "\n".join(_table(("NAME", "KIND", "USES", "ADVICE"), rows))


def _dumps(payload: Any) -> str:
    return json.dumps(payload, indent=2, ensure_ascii=False)


def _warning_lines(warnings: list[ScanWarning]) -> list[str]:
    if not warnings:
        return []
    return [
        "",
        f"Warnings ({len(warnings)} files skipped):",
        *(f"  {w.file_path}: {w.kind}: {w.message}" for w in warnings),
    ]


def _one_line(text: str) -> str:
    flat = " | ".join(part.strip() for part in text.splitlines() if part.strip())
    if len(flat) > TABLE_SNIPPET_CHARS:
        return flat[: TABLE_SNIPPET_CHARS - 3] + "..."
    return flat


def _table(
    headers: tuple[str, ...], rows: list[tuple[str, ...]]
) -> list[str]:
    widths = [len(h) for h in headers]
    for row in rows:
        widths = [max(w, len(cell)) for w, cell in zip(widths, row, strict=True)]

    def fmt_row(cells: tuple[str, ...]) -> str:
        return "  ".join(
            cell.ljust(w) for cell, w in zip(cells, widths, strict=True)
        ).rstrip()

    return [
        fmt_row(headers),
        fmt_row(tuple("-" * w for w in widths)),
        *(fmt_row(r) for r in rows),
    ]
