"""Infer the value domain of a literal from the identifiers around it."""

from __future__ import annotations

import re

from constforge.constants import NUMERIC_DOMAINS, ValueDomain

# Words are matched against identifier parts (camelCase/snake_case split)
DOMAIN_KEYWORDS: dict[ValueDomain, frozenset[str]] = {
    ValueDomain.TIME_MS: frozenset({
        "timeout", "ttl", "delay", "interval", "duration", "ms",
        "millis", "milliseconds", "expire", "expiry", "expires",
        "wait", "backoff", "period", "cooldown", "latency", "elapsed",
        "time", "sec", "seconds", "debounce", "throttle",
    }),
    ValueDomain.PRIORITY: frozenset({
        "priority", "severity", "level", "weight", "rank", "urgency",
        "importance", "order",
    }),
    ValueDomain.QUANTITY: frozenset({
        "size", "limit", "max", "min", "count", "batch", "retries",
        "retry", "attempts", "length", "capacity", "threshold",
        "concurrency", "pool", "page", "items", "queue", "total",
        "num", "workers", "connections",
    }),
    ValueDomain.TECHNICAL: frozenset({
        "port", "code", "status", "version", "buffer", "bytes", "bits",
        "mask", "flag", "precision", "radix", "offset",
    }),
}

_IDENT_RE = re.compile(r"[A-Za-z_][A-Za-z0-9_]*")
_PART_RE = re.compile(r"[A-Z]+(?![a-z])|[A-Z]?[a-z]+|\d+")

# Identifiers closest to the literal are checked first
_MAX_IDENTIFIERS = 3


def split_identifier(identifier: str) -> list[str]:
    """``requestTimeoutMs`` / ``REQUEST_TIMEOUT_MS`` → lowercase words."""
    return [p.lower() for p in _PART_RE.findall(identifier)]


def infer_domains(
    left_context: str, kind: str = "number"
) -> tuple[ValueDomain, ...]:
    """Candidate domains for a literal, most likely first.

    String literals only ever live in the string domain. Numeric
    literals get the domain suggested by the nearest identifier to
    their left (within the same line) followed by the remaining
    numeric domains as fallbacks, so a literal in an unrelated line
    still matches its registered value.
    """
    if kind == "string":
        return (ValueDomain.STRING,)

    inferred = _nearest_domain(left_context)
    if inferred is None:
        return NUMERIC_DOMAINS
    return (inferred, *(d for d in NUMERIC_DOMAINS if d is not inferred))


def _nearest_domain(left_context: str) -> ValueDomain | None:
    identifiers = _IDENT_RE.findall(left_context)[-_MAX_IDENTIFIERS:]
    for identifier in reversed(identifiers):
        # Suffix words carry the unit/role: maxTimeoutMs → ms
        for word in reversed(split_identifier(identifier)):
            for domain, keywords in DOMAIN_KEYWORDS.items():
                if word in keywords:
                    return domain
    return None
