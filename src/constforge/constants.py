"""Shared constants — single source of truth for cross-module values.

All magic strings and numbers that appear in 2+ files belong here.
StrEnum members are str-compatible, so downstream code (JSON reports,
YAML rule files, CLI flags) works unchanged.
"""

from __future__ import annotations

from enum import StrEnum

# ── String Enums ─────────────────────────────────────────


class ValueDomain(StrEnum):
    """Domain of an atomic value — half of its identity key."""

    TIME_MS = "time_ms"
    QUANTITY = "quantity"
    PRIORITY = "priority"
    TECHNICAL = "technical"
    STRING = "string"


# Numeric domains in fallback lookup order
NUMERIC_DOMAINS: tuple[ValueDomain, ...] = (
    ValueDomain.TIME_MS,
    ValueDomain.QUANTITY,
    ValueDomain.PRIORITY,
    ValueDomain.TECHNICAL,
)


class ComparisonOp(StrEnum):
    """Operators accepted by ordering rules."""

    LT = "<"
    LE = "<="
    GT = ">"
    GE = ">="


class ViolationKind(StrEnum):
    """Category of a validation failure."""

    ORDERING = "ordering"
    RANGE = "range"
    DISTINCT = "distinct"
    SHARED = "shared"


class ComplexityLevel(StrEnum):
    """Per-file migration complexity bucket."""

    NONE = "none"
    SIMPLE = "simple"
    MODERATE = "moderate"
    COMPLEX = "complex"


class OccurrenceState(StrEnum):
    """Review lifecycle of a detected literal.

    DISCOVERED → REVIEWED → APPLIED | REJECTED
    """

    DISCOVERED = "discovered"
    REVIEWED = "reviewed"
    APPLIED = "applied"
    REJECTED = "rejected"


class ScanWarningKind(StrEnum):
    """Why a file was skipped during a scan."""

    PERMISSION = "permission"
    ENCODING = "encoding"
    BINARY = "binary"
    TOO_LARGE = "too_large"
    IO = "io"


class ReportFormat(StrEnum):
    """Supported CLI report formats."""

    JSON = "json"
    TABLE = "table"


class UsageRecommendation(StrEnum):
    """Cleanup advice for a semantic name or legacy alias."""

    KEEP = "keep"
    REVIEW = "review"
    REMOVE = "remove"


class DuplicateSeverity(StrEnum):
    """How urgently a group of duplicated literals needs a single name."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class Environment(StrEnum):
    """Deployment environments that may override bundle fields."""

    DEVELOPMENT = "development"
    PRODUCTION = "production"
    TEST = "test"


# ── Complexity Buckets ───────────────────────────────────

SIMPLE_MAX_OCCURRENCES = 3
MODERATE_MAX_OCCURRENCES = 8

# ── Exit Codes ───────────────────────────────────────────

EXIT_OK = 0
EXIT_FINDINGS = 1
EXIT_TOOL_FAILURE = 2

# ── Scanning ─────────────────────────────────────────────

CONTEXT_WINDOW_CHARS = 50
BINARY_DETECTION_BUFFER = 8192
MAX_FILE_SIZE_BYTES = 2_097_152  # 2MB
SCAN_MAX_CONCURRENCY = 8

# ── Usage Analysis ───────────────────────────────────────

USAGE_REVIEW_THRESHOLD = 1

# ── Duplicate Discovery ──────────────────────────────────

DUPLICATE_MIN_DEFINITIONS = 2
# (medium, high) definition counts; strings are noisier than numbers
NUMBER_SEVERITY_THRESHOLDS = (5, 10)
STRING_SEVERITY_THRESHOLDS = (10, 20)
# Too common to be worth a shared name
TRIVIAL_LITERALS: frozenset[int | str] = frozenset({0, 1, -1, ""})

# ── Table Rendering ──────────────────────────────────────

TABLE_SNIPPET_CHARS = 60
