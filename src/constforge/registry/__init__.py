"""Layered constant resolution: atomic values → names → bundles → aliases."""

from constforge.registry.atomic import AtomicValueRegistry, RegistrySnapshot
from constforge.registry.composer import (
    BusinessConfigComposer,
    ConfigBundle,
    Derivation,
)
from constforge.registry.legacy import LegacyCompatibilityBridge
from constforge.registry.schemas import AtomicValue, SemanticBinding
from constforge.registry.semantic import SemanticMappingLayer

__all__ = [
    "AtomicValue",
    "AtomicValueRegistry",
    "BusinessConfigComposer",
    "ConfigBundle",
    "Derivation",
    "LegacyCompatibilityBridge",
    "RegistrySnapshot",
    "SemanticBinding",
    "SemanticMappingLayer",
]
