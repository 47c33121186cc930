"""Frozen value objects shared by the registry layers."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TypeAlias

from constforge.constants import ValueDomain

AtomicLiteral: TypeAlias = int | float | str


@dataclass(frozen=True)
class AtomicValue:
    """A canonical (domain, literal) pair — the ultimate source of truth."""

    id: str
    domain: ValueDomain
    value: AtomicLiteral
    description: str


@dataclass(frozen=True)
class SemanticBinding:
    """A human-meaningful name attached to exactly one atomic value.

    ``name`` is the qualified lookup key (``CATEGORY.NAME`` when a
    category is given); ``short_name`` is the bare identifier.
    """

    name: str
    atomic_id: str
    meaning: str
    category: str | None = None

    @property
    def short_name(self) -> str:
        return self.name.rsplit(".", 1)[-1]


def qualify(name: str, category: str | None) -> str:
    """Build the lookup key for a binding."""
    return f"{category}.{name}" if category else name
