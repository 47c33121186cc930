"""Legacy compatibility bridge — old constant names as lazy re-exports.

Each alias stores only the semantic name it points at. Every access
re-resolves through the current semantic layer, so a new registry
generation propagates to every legacy name without code changes.

A legacy constants module can delegate to the bridge::

    # legacy/timeouts.py
    from myapp.constants import bridge

    __getattr__ = bridge.module_getattr()
"""

from __future__ import annotations

import logging
import warnings
from collections.abc import Callable

from constforge.errors import DuplicateBindingNameError, UnboundNameError
from constforge.registry.schemas import AtomicLiteral, AtomicValue
from constforge.registry.semantic import SemanticMappingLayer

logger = logging.getLogger(__name__)


class LegacyCompatibilityBridge:
    """Maps deprecated names onto semantic bindings."""

    def __init__(self, layer: SemanticMappingLayer) -> None:
        self._layer = layer
        self._aliases: dict[str, str] = {}
        self._warned: set[str] = set()

    def expose_alias(self, old_name: str, semantic_name: str) -> None:
        """Register ``old_name`` as a lazy alias of ``semantic_name``.

        Fails fast with :class:`UnboundNameError` if the target is not
        bound yet, instead of deferring the error to first use.
        """
        if not self._layer.is_bound(semantic_name):
            raise UnboundNameError(
                semantic_name, f"target of legacy alias {old_name!r}"
            )
        existing = self._aliases.get(old_name)
        if existing is not None and existing != semantic_name:
            raise DuplicateBindingNameError(
                old_name, existing, semantic_name
            )
        self._aliases[old_name] = semantic_name

    def resolve_value(self, old_name: str) -> AtomicValue:
        """Resolve an alias to its current atomic value."""
        return self._resolve(old_name)

    def resolve(self, old_name: str) -> AtomicLiteral:
        """Resolve an alias to its current literal value."""
        return self._resolve(old_name).value

    def switch_generation(self, layer: SemanticMappingLayer) -> None:
        """Point every alias at a new registry generation.

        All targets must be bound in ``layer``; nothing changes if any
        is missing.
        """
        for old_name, semantic_name in self._aliases.items():
            if not layer.is_bound(semantic_name):
                raise UnboundNameError(
                    semantic_name,
                    f"target of legacy alias {old_name!r} "
                    "missing from new generation",
                )
        self._layer = layer
        logger.info(
            "Legacy bridge switched generation (%d aliases)",
            len(self._aliases),
        )

    def module_getattr(self) -> Callable[[str], AtomicLiteral]:
        """Build a PEP 562 module ``__getattr__`` backed by this bridge."""

        def __getattr__(name: str) -> AtomicLiteral:
            if name not in self._aliases:
                raise AttributeError(name)
            return self._resolve(name).value

        return __getattr__

    def migration_map(self) -> dict[str, str]:
        """Old name → semantic name, sorted by old name."""
        return dict(sorted(self._aliases.items()))

    def __contains__(self, old_name: object) -> bool:
        return old_name in self._aliases

    def __len__(self) -> int:
        return len(self._aliases)

    def _resolve(self, old_name: str) -> AtomicValue:
        # Every public entry point calls this directly, so the caller's
        # frame is always four levels above warnings.warn
        try:
            semantic_name = self._aliases[old_name]
        except KeyError:
            raise UnboundNameError(old_name, "no such legacy alias") from None
        self._warn_once(old_name, semantic_name)
        return self._layer.resolve(semantic_name)

    def _warn_once(self, old_name: str, semantic_name: str) -> None:
        if old_name in self._warned:
            return
        self._warned.add(old_name)
        logger.warning(
            "Legacy constant %s is deprecated; use %s",
            old_name,
            semantic_name,
        )
        warnings.warn(
            f"{old_name} is deprecated; use {semantic_name}",
            DeprecationWarning,
            stacklevel=4,
        )
