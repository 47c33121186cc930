"""Atomic value registry — single owner of literal identity.

Lifecycle: construct → ``register()`` during bootstrap → ``freeze()``.
Writers are single-threaded by contract; once frozen the registry is
immutable and safe for any number of concurrent readers.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator, Mapping
from types import MappingProxyType

from constforge.constants import ValueDomain
from constforge.errors import (
    AtomicValueTypeError,
    DuplicateValueError,
    FrozenRegistryError,
    RegistryNotFrozenError,
    UnknownAtomicIdError,
)
from constforge.registry.schemas import AtomicLiteral, AtomicValue

logger = logging.getLogger(__name__)


def _check_value(domain: ValueDomain, value: object) -> AtomicLiteral:
    # bool is an int subclass; True would collide with 1
    if domain is ValueDomain.STRING:
        if not isinstance(value, str):
            raise AtomicValueTypeError(domain, value)
        return value
    if isinstance(value, bool) or not isinstance(value, int | float):
        raise AtomicValueTypeError(domain, value)
    return value


class RegistrySnapshot:
    """Immutable read view of a frozen registry.

    Handed to the migration analyzer; holds only read-only mappings,
    so worker threads can share it without locking.
    """

    def __init__(
        self,
        by_key: Mapping[tuple[ValueDomain, AtomicLiteral], str],
        by_id: Mapping[str, AtomicValue],
    ) -> None:
        self._by_key = by_key
        self._by_id = by_id

    def lookup(
        self, domain: ValueDomain | str, value: AtomicLiteral
    ) -> str | None:
        return self._by_key.get((ValueDomain(domain), value))

    def get(self, atomic_id: str) -> AtomicValue:
        try:
            return self._by_id[atomic_id]
        except KeyError:
            raise UnknownAtomicIdError(atomic_id) from None

    def domains(self) -> frozenset[ValueDomain]:
        return frozenset(v.domain for v in self._by_id.values())

    def __len__(self) -> int:
        return len(self._by_id)

    def __iter__(self) -> Iterator[AtomicValue]:
        return iter(self._by_id.values())


class AtomicValueRegistry:
    """Maps each (domain, value) pair to exactly one :class:`AtomicValue`."""

    def __init__(self) -> None:
        self._by_key: dict[tuple[ValueDomain, AtomicLiteral], str] = {}
        self._by_id: dict[str, AtomicValue] = {}
        self._frozen = False

    @property
    def is_frozen(self) -> bool:
        return self._frozen

    def register(
        self,
        domain: ValueDomain | str,
        value: AtomicLiteral,
        description: str,
    ) -> str:
        """Register a literal and return its id.

        Idempotent for an identical description. A different
        description for an existing (domain, value) is a semantic
        conflict and raises :class:`DuplicateValueError`.
        """
        if self._frozen:
            raise FrozenRegistryError(
                "registry", f"register ({domain}, {value!r})"
            )
        dom = ValueDomain(domain)
        literal = _check_value(dom, value)

        existing_id = self._by_key.get((dom, literal))
        if existing_id is not None:
            existing = self._by_id[existing_id]
            if existing.description != description:
                raise DuplicateValueError(
                    dom, literal, existing.description, description
                )
            return existing_id

        atomic_id = f"{dom}:{literal!r}"
        self._by_key[(dom, literal)] = atomic_id
        self._by_id[atomic_id] = AtomicValue(
            id=atomic_id,
            domain=dom,
            value=literal,
            description=description,
        )
        logger.debug("Registered %s (%s)", atomic_id, description)
        return atomic_id

    def freeze(self) -> None:
        """Transition to read-only. Further ``register()`` calls fail."""
        if not self._frozen:
            self._frozen = True
            logger.info("Registry frozen with %d values", len(self._by_id))

    def lookup(
        self, domain: ValueDomain | str, value: AtomicLiteral
    ) -> str | None:
        """Return the id for (domain, value), or None."""
        return self._by_key.get((ValueDomain(domain), value))

    def get(self, atomic_id: str) -> AtomicValue:
        try:
            return self._by_id[atomic_id]
        except KeyError:
            raise UnknownAtomicIdError(atomic_id) from None

    def contains(self, atomic_id: str) -> bool:
        return atomic_id in self._by_id

    def values(
        self, domain: ValueDomain | str | None = None
    ) -> list[AtomicValue]:
        """All atomic values, optionally filtered by domain."""
        if domain is None:
            return list(self._by_id.values())
        dom = ValueDomain(domain)
        return [v for v in self._by_id.values() if v.domain is dom]

    def snapshot(self) -> RegistrySnapshot:
        """Read-only view for analysis; the registry must be frozen."""
        if not self._frozen:
            raise RegistryNotFrozenError()
        return RegistrySnapshot(
            MappingProxyType(self._by_key),
            MappingProxyType(self._by_id),
        )

    def __len__(self) -> int:
        return len(self._by_id)

    def __iter__(self) -> Iterator[AtomicValue]:
        return iter(self._by_id.values())
