"""Catalog loading — explicit two-phase startup of one registry generation.

Phase 1 registers every atomic value and binding, then freezes both the
registry and the semantic layer. Phase 2 runs only after phase 1
completes: bundles are composed (with optional environment overrides)
and legacy aliases exposed. Nothing in phase 2 writes back to phase 1.

Catalog layout (YAML or JSON)::

    values:
      - domain: time_ms
        value: 5000
        description: quick response
        bindings:
          - name: QUICK_RESPONSE_MS
            meaning: fast user-facing timeout
            category: RESPONSE_TIME        # optional
    bundles:
      notification:
        timeout: QUICK_RESPONSE_MS
        retry:
          backoff: "BASE_DELAY_MS * 2"
    environments:
      test:
        notification:
          timeout: SHORT_TIMEOUT_MS
    aliases:
      NOTIFY_TIMEOUT: QUICK_RESPONSE_MS
    rules:
      rule_sets: [...]
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml
from pydantic import (
    BaseModel,
    Field,
    StrictFloat,
    StrictInt,
    StrictStr,
    ValidationError,
)

from constforge.constants import Environment, ValueDomain
from constforge.errors import CatalogError, RuleFileError
from constforge.registry.atomic import AtomicValueRegistry
from constforge.registry.composer import BusinessConfigComposer, merge_entries
from constforge.registry.legacy import LegacyCompatibilityBridge
from constforge.registry.semantic import SemanticMappingLayer
from constforge.validation.rules import RuleSet, parse_rule_sets, read_structured

logger = logging.getLogger(__name__)


class BindingSpec(BaseModel):
    name: str
    meaning: str = ""
    category: str | None = None


class ValueSpec(BaseModel):
    domain: ValueDomain
    value: StrictInt | StrictFloat | StrictStr
    description: str
    bindings: list[BindingSpec] = Field(default_factory=lambda: list[BindingSpec]())


class CatalogSpec(BaseModel):
    """Validated shape of a catalog document."""

    values: list[ValueSpec] = Field(default_factory=lambda: list[ValueSpec]())
    bundles: dict[str, dict[str, Any]] = Field(default_factory=dict)
    environments: dict[Environment, dict[str, dict[str, Any]]] = Field(
        default_factory=dict
    )
    aliases: dict[str, str] = Field(default_factory=dict)
    rules: Any = None


@dataclass
class ConstantGraph:
    """One bootstrapped generation: registry, names, bundles, aliases."""

    registry: AtomicValueRegistry
    layer: SemanticMappingLayer
    composer: BusinessConfigComposer
    bridge: LegacyCompatibilityBridge
    rule_sets: list[RuleSet] = field(default_factory=lambda: list[RuleSet]())
    environment: Environment | None = None


def load_catalog(
    path: Path, environment: Environment | str | None = None
) -> ConstantGraph:
    """Read ``path`` and bootstrap a :class:`ConstantGraph`.

    Raises :class:`CatalogError` for unreadable or malformed files.
    Bootstrap-integrity errors (duplicate values, unbound names, raw
    literals in bundles) propagate unchanged.
    """
    if not path.exists():
        msg = f"Catalog not found: {path}"
        raise CatalogError(msg)
    try:
        raw = read_structured(path)
    except (OSError, ValueError, yaml.YAMLError) as exc:
        msg = f"{path}: cannot parse catalog: {exc}"
        raise CatalogError(msg) from exc
    return build_graph(parse_catalog(raw, str(path)), environment)


def parse_catalog(raw: Any, source: str = "<catalog>") -> CatalogSpec:
    if raw is None:
        raw = {}
    if not isinstance(raw, dict):
        msg = f"{source}: catalog must be a mapping"
        raise CatalogError(msg)
    try:
        return CatalogSpec.model_validate(raw)
    except ValidationError as exc:
        first = exc.errors()[0]
        loc = ".".join(str(p) for p in first["loc"])
        msg = f"{source}: {loc}: {first['msg']}"
        raise CatalogError(msg) from exc


def build_graph(
    spec: CatalogSpec,
    environment: Environment | str | None = None,
) -> ConstantGraph:
    """Run both bootstrap phases over a parsed catalog."""
    env = Environment(environment) if environment is not None else None

    # Phase 1: atomic values + semantic bindings, then freeze
    registry = AtomicValueRegistry()
    layer = SemanticMappingLayer(registry)
    for value_spec in spec.values:
        atomic_id = registry.register(
            value_spec.domain, value_spec.value, value_spec.description
        )
        for binding in value_spec.bindings:
            layer.bind(
                binding.name,
                atomic_id,
                binding.meaning or value_spec.description,
                binding.category,
            )
    registry.freeze()
    layer.freeze()

    # Phase 2: composition + legacy aliases
    composer = BusinessConfigComposer(layer)
    overrides = spec.environments.get(env, {}) if env is not None else {}
    for bundle_name, entries in spec.bundles.items():
        if bundle_name in overrides:
            entries = merge_entries(entries, overrides[bundle_name])
        composer.compose(bundle_name, entries)
    unknown = set(overrides) - set(spec.bundles)
    if unknown:
        msg = (
            f"environment {env} overrides unknown bundles: "
            f"{', '.join(sorted(unknown))}"
        )
        raise CatalogError(msg)

    bridge = LegacyCompatibilityBridge(layer)
    for old_name, semantic_name in spec.aliases.items():
        bridge.expose_alias(old_name, semantic_name)

    try:
        rule_sets = parse_rule_sets(spec.rules, "catalog rules")
    except RuleFileError as exc:
        raise CatalogError(str(exc)) from exc

    logger.info(
        "Catalog loaded: %d values, %d bindings, %d bundles, %d aliases",
        len(registry),
        len(layer),
        len(composer.bundles()),
        len(bridge),
    )
    return ConstantGraph(
        registry=registry,
        layer=layer,
        composer=composer,
        bridge=bridge,
        rule_sets=rule_sets,
        environment=env,
    )
