"""Business config composer — named bundles built only from semantic names.

An entry leaf is either a semantic name, a :class:`Derivation` whose
base operand is a semantic name, or the string form of one
(``"SESSION_TTL_S * 1000"``). Raw literals are rejected at compose
time, which is what keeps copy-pasted numbers from reappearing in
configuration code. Bundles never reference other bundles.
"""

from __future__ import annotations

import logging
import operator
import re
from collections.abc import Callable, Iterator, Mapping
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Literal, TypeAlias

from constforge.constants import ValueDomain
from constforge.errors import (
    BundleRedefinitionError,
    CrossBundleReferenceError,
    RawLiteralDerivationError,
    UnboundNameError,
)
from constforge.registry.schemas import AtomicLiteral
from constforge.registry.semantic import SemanticMappingLayer

logger = logging.getLogger(__name__)

DerivationOp: TypeAlias = Literal["*", "/", "+", "-"]
EntryLeaf: TypeAlias = "str | Derivation"
EntrySpec: TypeAlias = Mapping[str, Any]

_OPERATORS: dict[str, Callable[[Any, Any], Any]] = {
    "*": operator.mul,
    "/": operator.truediv,
    "+": operator.add,
    "-": operator.sub,
}

_NAME_RE = re.compile(r"^[A-Za-z_][\w.]*$")
_EXPR_RE = re.compile(
    r"^\s*(?P<base>\S+?)\s*(?P<op>[*/+-])\s*"
    r"(?P<operand>\d[\d_]*(?:\.\d+)?)\s*$"
)


@dataclass(frozen=True)
class Derivation:
    """A pure unit derivation: ``base <op> operand``.

    ``base`` must be a semantic name; ``operand`` is a unit factor
    (for example ``1000`` for seconds → milliseconds).
    """

    base: str
    op: DerivationOp
    operand: int | float

    def apply(self, value: int | float) -> int | float:
        result = _OPERATORS[self.op](value, self.operand)
        if isinstance(result, float) and result.is_integer():
            if isinstance(value, int) and isinstance(self.operand, int):
                return int(result)
        return result

    def __str__(self) -> str:
        return f"{self.base} {self.op} {self.operand}"

    @classmethod
    def parse(cls, expr: str) -> Derivation | None:
        """Parse ``"NAME * 1000"``; None if ``expr`` is not an expression."""
        m = _EXPR_RE.match(expr)
        if m is None:
            return None
        raw = m.group("operand").replace("_", "")
        operand: int | float = float(raw) if "." in raw else int(raw)
        return cls(
            base=m.group("base"),
            op=m.group("op"),  # type: ignore[arg-type]
            operand=operand,
        )


@dataclass(frozen=True)
class ConfigBundle:
    """Immutable snapshot of a composed configuration."""

    bundle_name: str
    entries: Mapping[str, Any]
    sources: Mapping[str, str]

    def __getitem__(self, key: str) -> Any:
        return self.entries[key]

    def get(self, key: str, default: Any = None) -> Any:
        return self.entries.get(key, default)

    def flatten(self) -> dict[str, AtomicLiteral]:
        """Dotted field path → resolved value."""
        return dict(_flatten(self.entries))

    def to_dict(self) -> dict[str, Any]:
        return _thaw(self.entries)

    def summary(self) -> str:
        """Human-readable field listing with the name behind each value."""
        lines = [f"{self.bundle_name}:"]
        for path, value in _flatten(self.entries):
            lines.append(f"  - {path} = {value!r}  ({self.sources[path]})")
        return "\n".join(lines)


class BusinessConfigComposer:
    """Composes and caches :class:`ConfigBundle` objects by name."""

    def __init__(self, layer: SemanticMappingLayer) -> None:
        self._layer = layer
        self._bundles: dict[str, ConfigBundle] = {}
        self._specs: dict[str, tuple[Any, ...]] = {}

    def compose(
        self,
        bundle_name: str,
        entries: EntrySpec,
        *,
        force: bool = False,
    ) -> ConfigBundle:
        """Resolve ``entries`` into an immutable bundle.

        Recomposing an existing name with identical entries returns
        the cached bundle; different entries raise
        :class:`BundleRedefinitionError` unless ``force`` is set.
        """
        if isinstance(entries, ConfigBundle):
            raise CrossBundleReferenceError(
                bundle_name, "<root>", entries.bundle_name
            )
        spec = self._normalize(bundle_name, entries, prefix="")

        cached = self._bundles.get(bundle_name)
        if cached is not None and not force:
            if self._specs[bundle_name] == spec:
                return cached
            raise BundleRedefinitionError(bundle_name)

        resolved, sources = self._resolve(bundle_name, entries, prefix="")
        bundle = ConfigBundle(
            bundle_name=bundle_name,
            entries=resolved,
            sources=MappingProxyType(sources),
        )
        self._bundles[bundle_name] = bundle
        self._specs[bundle_name] = spec
        if cached is not None:
            logger.info("Bundle %s recomposed (forced)", bundle_name)
        else:
            logger.debug("Composed bundle %s", bundle_name)
        return bundle

    def get(self, bundle_name: str) -> ConfigBundle:
        try:
            return self._bundles[bundle_name]
        except KeyError:
            raise UnboundNameError(bundle_name, "no such bundle") from None

    def bundles(self) -> list[ConfigBundle]:
        return list(self._bundles.values())

    def __contains__(self, bundle_name: object) -> bool:
        return bundle_name in self._bundles

    # ── internals ────────────────────────────────────────

    def _normalize(
        self, bundle: str, entries: EntrySpec, prefix: str
    ) -> tuple[Any, ...]:
        """Validate leaf shapes and return a comparable spec."""
        items: list[tuple[str, Any]] = []
        for field, raw in entries.items():
            path = f"{prefix}{field}"
            if isinstance(raw, Mapping):
                items.append((field, self._normalize(bundle, raw, f"{path}.")))
            else:
                items.append((field, self._leaf(bundle, path, raw)))
        return tuple(sorted(items, key=lambda kv: kv[0]))

    def _leaf(self, bundle: str, path: str, raw: Any) -> EntryLeaf:
        if isinstance(raw, ConfigBundle):
            raise CrossBundleReferenceError(bundle, path, raw.bundle_name)
        if isinstance(raw, Derivation):
            self._check_derivation(bundle, path, raw)
            return raw
        if not isinstance(raw, str):
            raise RawLiteralDerivationError(bundle, path, raw)
        if _NAME_RE.match(raw):
            self._check_base(bundle, path, raw)
            return raw
        derivation = Derivation.parse(raw)
        if derivation is None:
            raise RawLiteralDerivationError(bundle, path, raw)
        self._check_derivation(bundle, path, derivation)
        return derivation

    def _check_derivation(
        self, bundle: str, path: str, derivation: Derivation
    ) -> None:
        if derivation.op == "/" and derivation.operand == 0:
            raise RawLiteralDerivationError(
                bundle, path, str(derivation), "division by zero"
            )
        self._check_base(bundle, path, derivation.base)

    def _check_base(self, bundle: str, path: str, name: str) -> None:
        if self._layer.is_bound(name):
            return
        if name in self._bundles or name == bundle:
            raise CrossBundleReferenceError(bundle, path, name)
        if not _NAME_RE.match(name):
            raise RawLiteralDerivationError(
                bundle, path, name,
                "derivation base must be a semantic name",
            )
        if self._layer.registry.lookup(ValueDomain.STRING, name) is not None:
            raise RawLiteralDerivationError(
                bundle, path, name,
                "raw string literal duplicates a registered string value",
            )
        raise UnboundNameError(name, f"bundle {bundle!r} field {path!r}")

    def _resolve(
        self, bundle: str, entries: EntrySpec, prefix: str
    ) -> tuple[Mapping[str, Any], dict[str, str]]:
        resolved: dict[str, Any] = {}
        sources: dict[str, str] = {}
        for field, raw in entries.items():
            path = f"{prefix}{field}"
            if isinstance(raw, Mapping):
                child, child_sources = self._resolve(bundle, raw, f"{path}.")
                resolved[field] = child
                sources.update(child_sources)
                continue
            leaf = self._leaf(bundle, path, raw)
            if isinstance(leaf, Derivation):
                resolved[field] = self._derive(bundle, path, leaf)
            else:
                resolved[field] = self._layer.resolve(leaf).value
            sources[path] = str(leaf)
        return MappingProxyType(resolved), sources

    def _derive(
        self, bundle: str, path: str, derivation: Derivation
    ) -> int | float:
        base = self._layer.resolve(derivation.base)
        if base.domain is ValueDomain.STRING or isinstance(base.value, str):
            raise RawLiteralDerivationError(
                bundle, path, str(derivation),
                "derivations apply to numeric values only",
            )
        result = derivation.apply(base.value)
        # A derived value that lands on a registered literal duplicates it
        if self._layer.registry.lookup(base.domain, result) is not None:
            raise RawLiteralDerivationError(
                bundle, path, str(derivation),
                f"result {result!r} duplicates a registered "
                f"{base.domain} value",
            )
        return result


def merge_entries(base: EntrySpec, overrides: EntrySpec) -> dict[str, Any]:
    """Deep-merge ``overrides`` into ``base`` (used for environments)."""
    merged: dict[str, Any] = dict(base)
    for key, value in overrides.items():
        current = merged.get(key)
        if isinstance(current, Mapping) and isinstance(value, Mapping):
            merged[key] = merge_entries(current, value)
        else:
            merged[key] = value
    return merged


def _flatten(
    entries: Mapping[str, Any], prefix: str = ""
) -> Iterator[tuple[str, Any]]:
    for key, value in entries.items():
        path = f"{prefix}{key}"
        if isinstance(value, Mapping):
            yield from _flatten(value, f"{path}.")
        else:
            yield path, value


def _thaw(entries: Mapping[str, Any]) -> dict[str, Any]:
    return {
        k: _thaw(v) if isinstance(v, Mapping) else v
        for k, v in entries.items()
    }
