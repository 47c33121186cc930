"""Tests for the business config composer."""

from __future__ import annotations

from types import MappingProxyType

import pytest

from constforge.errors import (
    BundleRedefinitionError,
    CrossBundleReferenceError,
    RawLiteralDerivationError,
    UnboundNameError,
)
from constforge.registry.atomic import AtomicValueRegistry
from constforge.registry.composer import (
    BusinessConfigComposer,
    Derivation,
    merge_entries,
)
from constforge.registry.semantic import SemanticMappingLayer


@pytest.fixture
def composer(
    registry: AtomicValueRegistry, layer: SemanticMappingLayer
) -> BusinessConfigComposer:
    quick = registry.register("time_ms", 5000, "quick response")
    ttl = registry.register("time_ms", 30, "session ttl seconds")
    retries = registry.register("quantity", 3, "retry attempts")
    queue = registry.register("string", "alerts", "queue name")
    layer.bind("QUICK_RESPONSE_MS", quick, "fast path")
    layer.bind("SESSION_TTL_S", ttl, "session lifetime")
    layer.bind("MAX_RETRIES", retries, "retry cap")
    layer.bind("ALERT_QUEUE", queue, "queue")
    registry.freeze()
    layer.freeze()
    return BusinessConfigComposer(layer)


class TestDerivation:
    def test_parse_expression(self) -> None:
        d = Derivation.parse("SESSION_TTL_S * 1_000")
        assert d == Derivation("SESSION_TTL_S", "*", 1000)
        assert str(d) == "SESSION_TTL_S * 1000"

    def test_parse_rejects_plain_literal(self) -> None:
        assert Derivation.parse("5000") is None
        assert Derivation.parse("QUICK_RESPONSE_MS") is None

    def test_integer_result_stays_int(self) -> None:
        assert Derivation("X", "/", 2).apply(10) == 5
        assert isinstance(Derivation("X", "/", 2).apply(10), int)
        assert Derivation("X", "/", 4).apply(10) == 2.5


class TestCompose:
    def test_resolves_names_and_derivations(
        self, composer: BusinessConfigComposer
    ) -> None:
        bundle = composer.compose(
            "notification",
            {
                "timeout": "QUICK_RESPONSE_MS",
                "queue": "ALERT_QUEUE",
                "session": {"ttl_ms": "SESSION_TTL_S * 1000"},
            },
        )
        assert bundle["timeout"] == 5000
        assert bundle["queue"] == "alerts"
        assert bundle["session"]["ttl_ms"] == 30000
        assert bundle.sources["session.ttl_ms"] == "SESSION_TTL_S * 1000"

    def test_accepts_derivation_objects(
        self, composer: BusinessConfigComposer
    ) -> None:
        bundle = composer.compose(
            "retry", {"budget": Derivation("MAX_RETRIES", "+", 1)}
        )
        assert bundle["budget"] == 4

    def test_bundle_is_immutable(
        self, composer: BusinessConfigComposer
    ) -> None:
        bundle = composer.compose("n", {"timeout": "QUICK_RESPONSE_MS"})
        assert isinstance(bundle.entries, MappingProxyType)
        with pytest.raises(TypeError):
            bundle.entries["timeout"] = 1  # type: ignore[index]

    @pytest.mark.parametrize("literal", [5000, 2.5, True])
    def test_raw_literal_rejected(
        self, composer: BusinessConfigComposer, literal: object
    ) -> None:
        with pytest.raises(RawLiteralDerivationError, match="timeout"):
            composer.compose("n", {"timeout": literal})

    def test_raw_string_literal_rejected(
        self, composer: BusinessConfigComposer
    ) -> None:
        with pytest.raises(RawLiteralDerivationError):
            composer.compose("n", {"url": "https://example.com"})

    def test_registered_string_value_is_a_raw_literal(
        self, composer: BusinessConfigComposer
    ) -> None:
        with pytest.raises(
            RawLiteralDerivationError, match="registered string value"
        ):
            composer.compose("n", {"channel": "alerts"})

    @pytest.mark.parametrize(
        "leaf", ["QUICK_RESPONSE_MS / 0", Derivation("MAX_RETRIES", "/", 0.0)]
    )
    def test_division_by_zero_rejected(
        self, composer: BusinessConfigComposer, leaf: object
    ) -> None:
        with pytest.raises(RawLiteralDerivationError, match="division by zero"):
            composer.compose("n", {"t": leaf})
        assert "n" not in composer

    def test_derivation_base_must_be_a_name(
        self, composer: BusinessConfigComposer
    ) -> None:
        with pytest.raises(RawLiteralDerivationError, match="semantic name"):
            composer.compose("n", {"timeout": "5 * 1000"})

    def test_derivation_of_string_rejected(
        self, composer: BusinessConfigComposer
    ) -> None:
        with pytest.raises(RawLiteralDerivationError, match="numeric"):
            composer.compose("n", {"queue": "ALERT_QUEUE * 2"})

    def test_derivation_landing_on_registered_value_rejected(
        self, composer: BusinessConfigComposer
    ) -> None:
        with pytest.raises(RawLiteralDerivationError, match="duplicates"):
            composer.compose("n", {"timeout": "QUICK_RESPONSE_MS * 1"})

    def test_unbound_name(self, composer: BusinessConfigComposer) -> None:
        with pytest.raises(UnboundNameError, match="MISSING_MS"):
            composer.compose("n", {"timeout": "MISSING_MS"})

    def test_cross_bundle_reference(
        self, composer: BusinessConfigComposer
    ) -> None:
        base = composer.compose("base", {"timeout": "QUICK_RESPONSE_MS"})
        with pytest.raises(CrossBundleReferenceError):
            composer.compose("derived", {"inner": base})
        with pytest.raises(CrossBundleReferenceError):
            composer.compose("derived", {"inner": "base"})

    def test_recompose_identical_returns_cached(
        self, composer: BusinessConfigComposer
    ) -> None:
        first = composer.compose("n", {"timeout": "QUICK_RESPONSE_MS"})
        second = composer.compose("n", {"timeout": "QUICK_RESPONSE_MS"})
        assert first is second

    def test_recompose_different_raises_unless_forced(
        self, composer: BusinessConfigComposer
    ) -> None:
        composer.compose("n", {"timeout": "QUICK_RESPONSE_MS"})
        with pytest.raises(BundleRedefinitionError):
            composer.compose("n", {"timeout": "MAX_RETRIES"})
        forced = composer.compose(
            "n", {"timeout": "MAX_RETRIES"}, force=True
        )
        assert forced["timeout"] == 3
        assert composer.get("n") is forced

    def test_get_unknown_bundle(
        self, composer: BusinessConfigComposer
    ) -> None:
        with pytest.raises(UnboundNameError):
            composer.get("missing")


class TestBundleViews:
    def test_flatten_and_summary(
        self, composer: BusinessConfigComposer
    ) -> None:
        bundle = composer.compose(
            "n",
            {
                "timeout": "QUICK_RESPONSE_MS",
                "retry": {"attempts": "MAX_RETRIES"},
            },
        )
        assert bundle.flatten() == {"timeout": 5000, "retry.attempts": 3}
        assert bundle.to_dict() == {
            "timeout": 5000,
            "retry": {"attempts": 3},
        }
        summary = bundle.summary()
        assert summary.splitlines()[0] == "n:"
        assert "retry.attempts = 3  (MAX_RETRIES)" in summary


def test_merge_entries_is_deep() -> None:
    merged = merge_entries(
        {"a": "X", "nested": {"b": "Y", "c": "Z"}},
        {"nested": {"c": "W"}},
    )
    assert merged == {"a": "X", "nested": {"b": "Y", "c": "W"}}
