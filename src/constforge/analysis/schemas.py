"""Pydantic models for the migration analysis data flow."""

from __future__ import annotations

from pydantic import BaseModel, Field

from constforge.constants import (
    ComplexityLevel,
    DuplicateSeverity,
    ScanWarningKind,
    UsageRecommendation,
    ValueDomain,
)


class DetectedOccurrence(BaseModel):
    """A literal in source text that duplicates a registered atomic value."""

    file_path: str
    line: int
    column: int
    matched_literal: str
    matched_atomic_id: str | None = None
    domain: ValueDomain | None = None
    context_snippet: str
    source_line: str = ""
    suggested_replacement: str = ""


class ScanWarning(BaseModel):
    """A file or directory skipped during a scan."""

    file_path: str
    kind: ScanWarningKind
    message: str


class FileScanResult(BaseModel):
    """Output of scanning one file — occurrences in file order."""

    file_path: str
    occurrences: list[DetectedOccurrence] = Field(
        default_factory=lambda: list[DetectedOccurrence]()
    )
    warning: ScanWarning | None = None

    @property
    def scanned(self) -> bool:
        return self.warning is None


class ScanSummary(BaseModel):
    total_files: int = 0
    total_occurrences: int = 0
    complexity_by_file: dict[str, ComplexityLevel] = Field(default_factory=dict)


class ScanReport(BaseModel):
    """Occurrences, warnings (listed separately), and a summary."""

    occurrences: list[DetectedOccurrence] = Field(
        default_factory=lambda: list[DetectedOccurrence]()
    )
    warnings: list[ScanWarning] = Field(default_factory=lambda: list[ScanWarning]())
    summary: ScanSummary = Field(default_factory=ScanSummary)
    interrupted: bool = False

    @property
    def has_findings(self) -> bool:
        return bool(self.occurrences)


class BindingUsage(BaseModel):
    """How often a semantic name or legacy alias is referenced."""

    name: str
    kind: str  # "binding" or "alias"
    usage_count: int = 0
    files: list[str] = Field(default_factory=lambda: list[str]())
    recommendation: UsageRecommendation = UsageRecommendation.KEEP


class LiteralDefinition(BaseModel):
    """A literal assigned directly to a name (``NAME = 5000``, ``ttl: 5000``)."""

    file_path: str
    line: int
    column: int
    name: str
    literal: str


class DuplicateGroup(BaseModel):
    """One literal value defined more than once, across any files."""

    kind: str  # "number" or "string"
    value: int | float | str
    count: int
    severity: DuplicateSeverity
    names: list[str] = Field(default_factory=lambda: list[str]())
    files: list[str] = Field(default_factory=lambda: list[str]())
    definitions: list[LiteralDefinition] = Field(
        default_factory=lambda: list[LiteralDefinition]()
    )


class DuplicateReport(BaseModel):
    """Registry-independent duplicate discovery over a source tree."""

    groups: list[DuplicateGroup] = Field(
        default_factory=lambda: list[DuplicateGroup]()
    )
    warnings: list[ScanWarning] = Field(default_factory=lambda: list[ScanWarning]())
    total_files: int = 0
    total_definitions: int = 0

    @property
    def has_findings(self) -> bool:
        return bool(self.groups)
