"""Rule files and the constant validator (the CI gate)."""

from constforge.validation.rules import (
    OrderingRule,
    RangeRule,
    RuleSet,
    load_rule_file,
    parse_rule_sets,
)
from constforge.validation.validator import (
    ConstantValidator,
    ValidationReport,
    Violation,
)

__all__ = [
    "ConstantValidator",
    "OrderingRule",
    "RangeRule",
    "RuleSet",
    "ValidationReport",
    "Violation",
    "load_rule_file",
    "parse_rule_sets",
]
