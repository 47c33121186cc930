"""Shared test fixtures: catalog graph and fresh registries."""

import os

# Keep a developer's shell configuration out of Settings() in tests.
for _key in list(os.environ):
    if _key.startswith("CONSTFORGE_"):
        del os.environ[_key]

from pathlib import Path  # noqa: E402

import pytest  # noqa: E402

from constforge.registry.atomic import AtomicValueRegistry  # noqa: E402
from constforge.registry.catalog import ConstantGraph, load_catalog  # noqa: E402
from constforge.registry.semantic import SemanticMappingLayer  # noqa: E402

FIXTURE_DIR = Path(__file__).resolve().parent / "fixtures"
CATALOG_PATH = FIXTURE_DIR / "catalog.yaml"


@pytest.fixture
def registry() -> AtomicValueRegistry:
    return AtomicValueRegistry()


@pytest.fixture
def layer(registry: AtomicValueRegistry) -> SemanticMappingLayer:
    return SemanticMappingLayer(registry)


@pytest.fixture
def graph() -> ConstantGraph:
    """The fixture catalog, bootstrapped without environment overrides."""
    return load_catalog(CATALOG_PATH)
