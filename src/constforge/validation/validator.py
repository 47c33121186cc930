"""Cross-cutting invariant checks over resolved semantic names.

Violations are data, not exceptions: every rule is evaluated and every
failure collected, and the caller (the CLI) decides the exit code.
Names that are not bound are modeling mistakes and raise
:class:`~constforge.errors.UnboundNameError`.
"""

from __future__ import annotations

import logging
import operator
from collections.abc import Callable, Iterable, Sequence
from concurrent.futures import ThreadPoolExecutor
from typing import Any, TypeAlias

from pydantic import BaseModel, Field

from constforge.constants import ComparisonOp, ViolationKind
from constforge.registry.semantic import SemanticMappingLayer
from constforge.validation.rules import OrderingRule, RangeRule, RuleSet

logger = logging.getLogger(__name__)

ADHOC_RULE_SET = "adhoc"
_MAX_RULE_SET_WORKERS = 4

_COMPARATORS: dict[ComparisonOp, Callable[[Any, Any], bool]] = {
    ComparisonOp.LT: operator.lt,
    ComparisonOp.LE: operator.le,
    ComparisonOp.GT: operator.gt,
    ComparisonOp.GE: operator.ge,
}

OrderingInput: TypeAlias = OrderingRule | tuple[str, str, str] | str


class Violation(BaseModel):
    """One failed rule, with the names and values it compared."""

    rule_set: str
    kind: ViolationKind
    rule: str
    names: tuple[str, ...]
    values: tuple[Any, ...] = ()
    message: str


class ValidationReport(BaseModel):
    violations: list[Violation] = Field(default_factory=lambda: list[Violation]())
    passed: bool = True
    rules_checked: int = 0


def _is_number(value: Any) -> bool:
    return isinstance(value, int | float) and not isinstance(value, bool)


class ConstantValidator:
    """Evaluates ordering, range, and unification rules."""

    def __init__(
        self,
        layer: SemanticMappingLayer,
        rule_sets: Iterable[RuleSet] = (),
    ) -> None:
        self._layer = layer
        self._rule_sets: list[RuleSet] = list(rule_sets)

    def add_rule_set(self, rule_set: RuleSet) -> None:
        self._rule_sets.append(rule_set)

    @property
    def rule_sets(self) -> list[RuleSet]:
        return list(self._rule_sets)

    def validate_ordering(
        self,
        rules: Iterable[OrderingInput],
        rule_set: str = ADHOC_RULE_SET,
    ) -> list[Violation]:
        """Check every ordering rule; returns all failures."""
        violations: list[Violation] = []
        for raw in rules:
            rule = (
                raw
                if isinstance(raw, OrderingRule)
                else OrderingRule.model_validate(raw)
            )
            left = self._layer.resolve(rule.left).value
            right = self._layer.resolve(rule.right).value
            names = (rule.left, rule.right)

            if not (_is_number(left) and _is_number(right)):
                violations.append(
                    Violation(
                        rule_set=rule_set,
                        kind=ViolationKind.ORDERING,
                        rule=str(rule),
                        names=names,
                        values=(left, right),
                        message=(
                            f"{rule}: values {left!r} and {right!r} "
                            "are not comparable numbers"
                        ),
                    )
                )
                continue

            if not _COMPARATORS[rule.op](left, right):
                violations.append(
                    Violation(
                        rule_set=rule_set,
                        kind=ViolationKind.ORDERING,
                        rule=str(rule),
                        names=names,
                        values=(left, right),
                        message=(
                            f"{rule.left} ({left!r}) {rule.op} "
                            f"{rule.right} ({right!r}) does not hold"
                        ),
                    )
                )
        return violations

    def validate_range(
        self,
        semantic_name: str,
        min: int | float | None = None,  # noqa: A002
        max: int | float | None = None,  # noqa: A002
        rule_set: str = ADHOC_RULE_SET,
    ) -> Violation | None:
        """Check ``min <= value <= max`` (inclusive, open if None)."""
        rule = RangeRule(name=semantic_name, min=min, max=max)
        value = self._layer.resolve(semantic_name).value
        if not _is_number(value):
            reason = f"value {value!r} is not a number"
        elif rule.min is not None and value < rule.min:
            reason = f"value {value!r} is below {rule.min!r}"
        elif rule.max is not None and value > rule.max:
            reason = f"value {value!r} is above {rule.max!r}"
        else:
            return None
        return Violation(
            rule_set=rule_set,
            kind=ViolationKind.RANGE,
            rule=str(rule),
            names=(semantic_name,),
            values=(value,),
            message=f"{rule}: {reason}",
        )

    def validate_distinct(
        self,
        names: Sequence[str],
        rule_set: str = ADHOC_RULE_SET,
    ) -> Violation | None:
        """Names must resolve to pairwise different atomic values."""
        resolved = [self._layer.resolve(n) for n in names]
        ids = [v.id for v in resolved]
        if len(set(ids)) == len(ids):
            return None
        clashes = sorted({i for i in ids if ids.count(i) > 1})
        return Violation(
            rule_set=rule_set,
            kind=ViolationKind.DISTINCT,
            rule=f"distinct({', '.join(names)})",
            names=tuple(names),
            values=tuple(v.value for v in resolved),
            message=(
                f"{', '.join(names)} must stay distinct but share "
                f"{', '.join(clashes)}"
            ),
        )

    def validate_shared(
        self,
        names: Sequence[str],
        rule_set: str = ADHOC_RULE_SET,
    ) -> Violation | None:
        """Names must all resolve to the same atomic value."""
        resolved = [self._layer.resolve(n) for n in names]
        if len({v.id for v in resolved}) <= 1:
            return None
        return Violation(
            rule_set=rule_set,
            kind=ViolationKind.SHARED,
            rule=f"shared({', '.join(names)})",
            names=tuple(names),
            values=tuple(v.value for v in resolved),
            message=(
                f"{', '.join(names)} must share one value but resolve to "
                f"{', '.join(repr(v.value) for v in resolved)}"
            ),
        )

    def validate_rule_set(self, rule_set: RuleSet) -> list[Violation]:
        violations = self.validate_ordering(rule_set.ordering, rule_set.name)
        for rng in rule_set.ranges:
            v = self.validate_range(rng.name, rng.min, rng.max, rule_set.name)
            if v is not None:
                violations.append(v)
        for group in rule_set.distinct:
            v = self.validate_distinct(group, rule_set.name)
            if v is not None:
                violations.append(v)
        for group in rule_set.shared:
            v = self.validate_shared(group, rule_set.name)
            if v is not None:
                violations.append(v)
        return violations

    def validate_all(self) -> ValidationReport:
        """Evaluate every registered rule set — the CI gate.

        Rule sets are independent and read-only, so they run on a
        small thread pool; the merged list is sorted for stable output.
        """
        rule_sets = list(self._rule_sets)
        if not rule_sets:
            return ValidationReport()

        workers = min(len(rule_sets), _MAX_RULE_SET_WORKERS)
        with ThreadPoolExecutor(max_workers=workers) as pool:
            results = list(pool.map(self.validate_rule_set, rule_sets))

        violations = sorted(
            (v for batch in results for v in batch),
            key=lambda v: (v.rule_set, v.kind, v.rule),
        )
        checked = sum(rs.rule_count for rs in rule_sets)
        if violations:
            logger.info(
                "Validation failed: %d of %d rules violated",
                len(violations),
                checked,
            )
        return ValidationReport(
            violations=violations,
            passed=not violations,
            rules_checked=checked,
        )
