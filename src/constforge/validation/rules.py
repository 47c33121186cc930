"""Load and validate rule files (YAML or JSON) for the constant validator."""

from __future__ import annotations

import json
import re
from pathlib import Path
from typing import Any, TypeAlias

import yaml
from pydantic import BaseModel, Field, ValidationError, model_validator

from constforge.constants import ComparisonOp
from constforge.errors import RuleFileError

Bound: TypeAlias = int | float

_ORDERING_RE = re.compile(r"^\s*(\S+)\s*(<=|>=|<|>)\s*(\S+)\s*$")
_RULE_SET_KEYS = frozenset({"ordering", "ranges", "distinct", "shared"})


class OrderingRule(BaseModel):
    """``left <op> right`` over two semantic names."""

    model_config = {"frozen": True}

    left: str
    op: ComparisonOp
    right: str

    @model_validator(mode="before")
    @classmethod
    def _parse_shorthand(cls, data: Any) -> Any:
        """Accept ``"A < B"`` strings and ``[A, op, B]`` triples."""
        if isinstance(data, str):
            m = _ORDERING_RE.match(data)
            if m is None:
                msg = f"cannot parse ordering rule {data!r}"
                raise ValueError(msg)
            return {"left": m.group(1), "op": m.group(2), "right": m.group(3)}
        if isinstance(data, list | tuple) and len(data) == 3:
            return {"left": data[0], "op": data[1], "right": data[2]}
        return data

    def __str__(self) -> str:
        return f"{self.left} {self.op} {self.right}"


class RangeRule(BaseModel):
    """Inclusive ``min <= value <= max``; either bound may be omitted."""

    model_config = {"frozen": True}

    name: str
    min: Bound | None = None
    max: Bound | None = None

    @model_validator(mode="after")
    def _check_bounds(self) -> RangeRule:
        if self.min is not None and self.max is not None and self.min > self.max:
            msg = f"range for {self.name!r} has min > max"
            raise ValueError(msg)
        return self

    def __str__(self) -> str:
        lo = "-inf" if self.min is None else repr(self.min)
        hi = "+inf" if self.max is None else repr(self.max)
        return f"{self.name} in [{lo}, {hi}]"


class RuleSet(BaseModel):
    """A named group of rules evaluated together.

    ``distinct`` groups must resolve to different atomic values and
    ``shared`` groups to one atomic value; both express the policy
    on whether equal thresholds in different contexts are unified.
    """

    name: str = "default"
    ordering: list[OrderingRule] = Field(default_factory=lambda: list[OrderingRule]())
    ranges: list[RangeRule] = Field(default_factory=lambda: list[RangeRule]())
    distinct: list[list[str]] = Field(default_factory=lambda: list[list[str]]())
    shared: list[list[str]] = Field(default_factory=lambda: list[list[str]]())

    @property
    def rule_count(self) -> int:
        return (
            len(self.ordering)
            + len(self.ranges)
            + len(self.distinct)
            + len(self.shared)
        )


def parse_rule_sets(raw: Any, source: str = "<rules>") -> list[RuleSet]:
    """Turn decoded YAML/JSON into rule sets.

    Accepts ``{rule_sets: [...]}``, a bare list of rule sets, or a
    single rule set mapping. Raises :class:`RuleFileError` otherwise.
    """
    if raw is None:
        return []
    if isinstance(raw, dict) and "rule_sets" in raw:
        items = raw["rule_sets"]
    elif isinstance(raw, dict) and _RULE_SET_KEYS & set(raw):
        items = [raw]
    elif isinstance(raw, list):
        items = raw
    else:
        msg = f"{source}: expected 'rule_sets' or a rule set mapping"
        raise RuleFileError(msg)

    if not isinstance(items, list):
        msg = f"{source}: 'rule_sets' must be a list"
        raise RuleFileError(msg)

    rule_sets: list[RuleSet] = []
    for i, item in enumerate(items):
        if not isinstance(item, dict):
            msg = f"{source}: rule set {i} must be a mapping"
            raise RuleFileError(msg)
        item = {"name": f"rule_set_{i}", **item}
        try:
            rule_sets.append(RuleSet.model_validate(item))
        except ValidationError as exc:
            first = exc.errors()[0]
            loc = ".".join(str(p) for p in first["loc"])
            msg = f"{source}: rule set {item['name']!r}: {loc}: {first['msg']}"
            raise RuleFileError(msg) from exc
    return rule_sets


def load_rule_file(path: Path) -> list[RuleSet]:
    """Load rule sets from a ``.yaml``/``.yml``/``.json`` file."""
    if not path.exists():
        msg = f"Rule file not found: {path}"
        raise RuleFileError(msg)
    try:
        raw = read_structured(path)
    except (OSError, ValueError, yaml.YAMLError) as exc:
        msg = f"{path}: cannot parse rule file: {exc}"
        raise RuleFileError(msg) from exc
    return parse_rule_sets(raw, str(path))


def read_structured(path: Path) -> Any:
    """Decode a JSON or YAML document based on the file suffix."""
    text = path.read_text(encoding="utf-8")
    if path.suffix.lower() == ".json":
        return json.loads(text)
    return yaml.safe_load(text)
