"""Tests for the constant validator."""

from __future__ import annotations

import pytest

from constforge.constants import ViolationKind
from constforge.errors import UnboundNameError
from constforge.registry.atomic import AtomicValueRegistry
from constforge.registry.catalog import ConstantGraph
from constforge.registry.semantic import SemanticMappingLayer
from constforge.validation.rules import OrderingRule, RuleSet
from constforge.validation.validator import ConstantValidator


@pytest.fixture
def thresholds(
    registry: AtomicValueRegistry, layer: SemanticMappingLayer
) -> SemanticMappingLayer:
    """Priority thresholds where LIGHT > MODERATE by mistake."""
    ids: dict[str, str] = {}
    for name, value in [
        ("LIGHT", 80),
        ("MODERATE", 60),
        ("HIGH", 90),
        ("CRITICAL", 95),
    ]:
        ids[name] = registry.register("priority", value, f"{name.lower()} load")
        layer.bind(name, ids[name], f"{name.lower()} threshold")
    layer.bind("CPU_WARNING", ids["LIGHT"], "cpu warning threshold")
    queue = registry.register("string", "alerts", "queue")
    layer.bind("ALERT_QUEUE", queue, "queue")
    return layer


@pytest.fixture
def validator(thresholds: SemanticMappingLayer) -> ConstantValidator:
    return ConstantValidator(thresholds)


class TestOrdering:
    def test_inverted_thresholds_reported(
        self, validator: ConstantValidator
    ) -> None:
        violations = validator.validate_ordering(
            [("LIGHT", "<", "MODERATE"), "MODERATE < HIGH"]
        )
        assert len(violations) == 1
        v = violations[0]
        assert v.kind is ViolationKind.ORDERING
        assert v.names == ("LIGHT", "MODERATE")
        assert v.values == (80, 60)
        assert "LIGHT (80) < MODERATE (60)" in v.message

    def test_all_failures_collected(
        self, validator: ConstantValidator
    ) -> None:
        violations = validator.validate_ordering(
            [
                OrderingRule(left="CRITICAL", op="<", right="HIGH"),
                "HIGH <= MODERATE",
                "LIGHT >= HIGH",
            ]
        )
        assert len(violations) == 3

    def test_non_strict_operators(self, validator: ConstantValidator) -> None:
        assert validator.validate_ordering(["LIGHT <= CPU_WARNING"]) == []
        assert validator.validate_ordering(["LIGHT >= CPU_WARNING"]) == []
        assert len(validator.validate_ordering(["LIGHT < CPU_WARNING"])) == 1

    def test_string_values_are_not_comparable(
        self, validator: ConstantValidator
    ) -> None:
        violations = validator.validate_ordering(["ALERT_QUEUE < HIGH"])
        assert "not comparable" in violations[0].message

    def test_unbound_name_raises(self, validator: ConstantValidator) -> None:
        with pytest.raises(UnboundNameError):
            validator.validate_ordering(["LIGHT < NOPE"])


class TestRange:
    @pytest.mark.parametrize(
        ("lo", "hi", "ok"),
        [
            (80, 80, True),
            (0, 100, True),
            (None, 79, False),
            (81, None, False),
            (None, None, True),
        ],
    )
    def test_inclusive_bounds(
        self,
        validator: ConstantValidator,
        lo: int | None,
        hi: int | None,
        ok: bool,
    ) -> None:
        result = validator.validate_range("LIGHT", lo, hi)
        assert (result is None) is ok

    def test_violation_details(self, validator: ConstantValidator) -> None:
        v = validator.validate_range("CRITICAL", max=90)
        assert v is not None
        assert v.kind is ViolationKind.RANGE
        assert "above 90" in v.message

    def test_string_value_fails_range(
        self, validator: ConstantValidator
    ) -> None:
        v = validator.validate_range("ALERT_QUEUE", min=0)
        assert v is not None
        assert "not a number" in v.message


class TestUnification:
    def test_distinct_detects_shared_atomic_value(
        self, validator: ConstantValidator
    ) -> None:
        assert validator.validate_distinct(["LIGHT", "HIGH"]) is None
        v = validator.validate_distinct(["LIGHT", "CPU_WARNING"])
        assert v is not None
        assert v.kind is ViolationKind.DISTINCT
        assert "priority:80" in v.message

    def test_shared_requires_one_value(
        self, validator: ConstantValidator
    ) -> None:
        assert validator.validate_shared(["LIGHT", "CPU_WARNING"]) is None
        v = validator.validate_shared(["LIGHT", "HIGH"])
        assert v is not None
        assert v.values == (80, 90)


class TestValidateAll:
    def test_no_rule_sets_passes(self, validator: ConstantValidator) -> None:
        report = validator.validate_all()
        assert report.passed
        assert report.rules_checked == 0

    def test_merges_rule_sets_in_stable_order(
        self, validator: ConstantValidator
    ) -> None:
        validator.add_rule_set(
            RuleSet(
                name="zeta",
                ordering=["LIGHT < MODERATE"],
                ranges=[{"name": "HIGH", "max": 50}],
            )
        )
        validator.add_rule_set(
            RuleSet(name="alpha", distinct=[["LIGHT", "CPU_WARNING"]])
        )
        report = validator.validate_all()
        assert not report.passed
        assert report.rules_checked == 3
        assert [(v.rule_set, v.kind) for v in report.violations] == [
            ("alpha", ViolationKind.DISTINCT),
            ("zeta", ViolationKind.ORDERING),
            ("zeta", ViolationKind.RANGE),
        ]

    def test_catalog_rules_pass(self, graph: ConstantGraph) -> None:
        report = ConstantValidator(graph.layer, graph.rule_sets).validate_all()
        assert report.passed
        assert report.rules_checked == 3
