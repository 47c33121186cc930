"""Migration analysis — detect duplicated literals and plan their refactor."""

from constforge.analysis.analyzer import (
    MigrationAnalyzer,
    build_report,
    score_complexity,
)
from constforge.analysis.review import MigrationCandidate, MigrationPlan
from constforge.analysis.schemas import (
    BindingUsage,
    DetectedOccurrence,
    FileScanResult,
    ScanReport,
    ScanSummary,
    ScanWarning,
)
from constforge.analysis.usage import find_binding_usages

__all__ = [
    "BindingUsage",
    "DetectedOccurrence",
    "FileScanResult",
    "MigrationAnalyzer",
    "MigrationCandidate",
    "MigrationPlan",
    "ScanReport",
    "ScanSummary",
    "ScanWarning",
    "build_report",
    "find_binding_usages",
    "score_complexity",
]
