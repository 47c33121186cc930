"""Semantic mapping layer — human-meaningful names over atomic ids.

Bindings hold atomic ids, never copies of values: ``resolve()`` always
reads through to the registry that owns the value.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from collections.abc import Iterator

from constforge.errors import (
    DuplicateBindingNameError,
    FrozenRegistryError,
    UnboundNameError,
    UnknownAtomicIdError,
)
from constforge.registry.atomic import AtomicValueRegistry
from constforge.registry.schemas import (
    AtomicValue,
    SemanticBinding,
    qualify,
)

logger = logging.getLogger(__name__)


class SemanticMappingLayer:
    """Binds names (unique per category) to registered atomic values."""

    def __init__(self, registry: AtomicValueRegistry) -> None:
        self._registry = registry
        self._bindings: dict[str, SemanticBinding] = {}
        self._names_by_id: dict[str, list[str]] = defaultdict(list)
        self._frozen = False

    @property
    def registry(self) -> AtomicValueRegistry:
        return self._registry

    @property
    def is_frozen(self) -> bool:
        return self._frozen

    def bind(
        self,
        name: str,
        atomic_id: str,
        meaning: str,
        category: str | None = None,
    ) -> None:
        """Bind ``name`` (within ``category``) to ``atomic_id``.

        Rebinding the same name to the same id is a no-op; rebinding it
        to a different id raises :class:`DuplicateBindingNameError`.
        """
        key = qualify(name, category)
        if self._frozen:
            raise FrozenRegistryError(
                "semantic layer", f"bind {key!r}"
            )
        if not self._registry.contains(atomic_id):
            raise UnknownAtomicIdError(atomic_id)

        existing = self._bindings.get(key)
        if existing is not None:
            if existing.atomic_id != atomic_id:
                raise DuplicateBindingNameError(
                    key, existing.atomic_id, atomic_id
                )
            return

        self._bindings[key] = SemanticBinding(
            name=key,
            atomic_id=atomic_id,
            meaning=meaning,
            category=category,
        )
        self._names_by_id[atomic_id].append(key)
        logger.debug("Bound %s -> %s", key, atomic_id)

    def freeze(self) -> None:
        """End of bootstrap phase 1; no further bindings."""
        self._frozen = True

    def resolve(self, name: str) -> AtomicValue:
        """Return the atomic value bound to ``name``."""
        binding = self.binding(name)
        return self._registry.get(binding.atomic_id)

    def binding(self, name: str) -> SemanticBinding:
        try:
            return self._bindings[name]
        except KeyError:
            raise UnboundNameError(name) from None

    def is_bound(self, name: str) -> bool:
        return name in self._bindings

    def names_for(self, atomic_id: str) -> list[str]:
        """All names bound to ``atomic_id``, sorted."""
        return sorted(self._names_by_id.get(atomic_id, ()))

    def bindings(self, category: str | None = None) -> list[SemanticBinding]:
        if category is None:
            return list(self._bindings.values())
        return [b for b in self._bindings.values() if b.category == category]

    def __contains__(self, name: object) -> bool:
        return name in self._bindings

    def __len__(self) -> int:
        return len(self._bindings)

    def __iter__(self) -> Iterator[SemanticBinding]:
        return iter(self._bindings.values())
