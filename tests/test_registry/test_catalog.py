"""Tests for catalog loading and the two-phase bootstrap."""

from __future__ import annotations

from pathlib import Path

import pytest

from constforge.constants import Environment
from constforge.errors import (
    CatalogError,
    DuplicateValueError,
    FrozenRegistryError,
    RawLiteralDerivationError,
    UnboundNameError,
)
from constforge.registry.catalog import (
    ConstantGraph,
    build_graph,
    load_catalog,
    parse_catalog,
)

FIXTURE_DIR = Path(__file__).resolve().parent.parent / "fixtures"


def _write(tmp_path: Path, text: str, name: str = "catalog.yaml") -> Path:
    path = tmp_path / name
    path.write_text(text, encoding="utf-8")
    return path


class TestLoadCatalog:
    def test_notification_bundle_end_to_end(self, graph: ConstantGraph) -> None:
        bundle = graph.composer.get("notification")
        assert bundle["timeout"] == 5000
        assert bundle["request_timeout"] == 30000
        assert bundle["queue"] == "alerts"
        assert bundle["retry"]["attempts"] == 3
        assert bundle["retry"]["backoff"] == 2000

    def test_both_phases_frozen(self, graph: ConstantGraph) -> None:
        assert graph.registry.is_frozen
        assert graph.layer.is_frozen
        with pytest.raises(FrozenRegistryError):
            graph.registry.register("quantity", 999, "late")

    def test_shared_value_has_several_names(
        self, graph: ConstantGraph
    ) -> None:
        atomic_id = graph.registry.lookup("time_ms", 30000)
        assert atomic_id is not None
        assert graph.layer.names_for(atomic_id) == [
            "REQUEST_TIMEOUT_MS",
            "RESPONSE_TIME.NORMAL_ALERT",
        ]

    def test_aliases_and_rules_loaded(self, graph: ConstantGraph) -> None:
        assert graph.bridge.migration_map() == {
            "DEFAULT_BATCH": "STANDARD_BATCH_SIZE",
            "NOTIFY_TIMEOUT": "QUICK_RESPONSE_MS",
        }
        assert [rs.name for rs in graph.rule_sets] == ["batching", "timeouts"]

    def test_environment_override(self) -> None:
        graph = load_catalog(FIXTURE_DIR / "catalog.yaml", "test")
        assert graph.environment is Environment.TEST
        batching = graph.composer.get("batching")
        assert batching["standard"] == 10
        # Untouched bundles compose as usual
        assert graph.composer.get("notification")["timeout"] == 5000

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(CatalogError, match="not found"):
            load_catalog(tmp_path / "absent.yaml")

    def test_unparseable_yaml(self, tmp_path: Path) -> None:
        path = _write(tmp_path, "values: [unclosed\n")
        with pytest.raises(CatalogError, match="cannot parse"):
            load_catalog(path)

    def test_json_catalog(self, tmp_path: Path) -> None:
        path = _write(
            tmp_path,
            '{"values": [{"domain": "quantity", "value": 3, '
            '"description": "retries", '
            '"bindings": [{"name": "MAX_RETRIES"}]}]}',
            name="catalog.json",
        )
        graph = load_catalog(path)
        assert graph.layer.resolve("MAX_RETRIES").value == 3
        assert graph.layer.binding("MAX_RETRIES").meaning == "retries"


class TestParseCatalog:
    def test_empty_document(self) -> None:
        spec = parse_catalog(None)
        assert spec.values == []
        assert spec.bundles == {}

    def test_non_mapping(self) -> None:
        with pytest.raises(CatalogError, match="mapping"):
            parse_catalog(["a", "b"])

    def test_unknown_domain(self) -> None:
        with pytest.raises(CatalogError, match="values.0.domain"):
            parse_catalog(
                {"values": [{"domain": "speed", "value": 1, "description": "x"}]}
            )

    def test_string_number_not_coerced(self) -> None:
        spec = parse_catalog(
            {"values": [{"domain": "string", "value": "30", "description": "x"}]}
        )
        assert spec.values[0].value == "30"


class TestBuildGraph:
    def test_conflicting_descriptions_abort_bootstrap(self) -> None:
        spec = parse_catalog(
            {
                "values": [
                    {"domain": "time_ms", "value": 30000, "description": "A"},
                    {"domain": "time_ms", "value": 30000, "description": "B"},
                ]
            }
        )
        with pytest.raises(DuplicateValueError):
            build_graph(spec)

    def test_raw_literal_in_bundle(self) -> None:
        spec = parse_catalog(
            {
                "values": [
                    {
                        "domain": "time_ms",
                        "value": 5000,
                        "description": "quick",
                        "bindings": [{"name": "QUICK_RESPONSE_MS"}],
                    }
                ],
                "bundles": {"notification": {"timeout": 5000}},
            }
        )
        with pytest.raises(RawLiteralDerivationError):
            build_graph(spec)

    def test_alias_to_unbound_name(self) -> None:
        spec = parse_catalog({"aliases": {"OLD": "NEW"}})
        with pytest.raises(UnboundNameError):
            build_graph(spec)

    def test_override_of_unknown_bundle(self) -> None:
        spec = parse_catalog(
            {"environments": {"production": {"ghost": {"x": "Y"}}}}
        )
        with pytest.raises(CatalogError, match="ghost"):
            build_graph(spec, Environment.PRODUCTION)

    def test_malformed_rules(self) -> None:
        spec = parse_catalog({"rules": {"ordering": ["A ~ B"]}})
        with pytest.raises(CatalogError):
            build_graph(spec)
