"""Tests for domain inference."""

from __future__ import annotations

import pytest

from constforge.analysis.domains import infer_domains, split_identifier
from constforge.constants import NUMERIC_DOMAINS, ValueDomain


@pytest.mark.parametrize(
    ("identifier", "expected"),
    [
        ("requestTimeoutMs", ["request", "timeout", "ms"]),
        ("REQUEST_TIMEOUT_MS", ["request", "timeout", "ms"]),
        ("HTTPPort", ["http", "port"]),
        ("batch_size2", ["batch", "size", "2"]),
    ],
)
def test_split_identifier(identifier: str, expected: list[str]) -> None:
    assert split_identifier(identifier) == expected


@pytest.mark.parametrize(
    ("context", "first"),
    [
        ("const REQUEST_TIMEOUT = ", ValueDomain.TIME_MS),
        ("  retries: ", ValueDomain.QUANTITY),
        ("REDIS_PORT = ", ValueDomain.TECHNICAL),
        ("alert.severityLevel = ", ValueDomain.PRIORITY),
    ],
)
def test_nearest_identifier_wins(context: str, first: ValueDomain) -> None:
    domains = infer_domains(context)
    assert domains[0] is first
    assert set(domains) == set(NUMERIC_DOMAINS)


def test_closest_identifier_checked_first() -> None:
    # batchSize is nearer to the literal than timeout
    assert infer_domains("timeout(batchSize = ")[0] is ValueDomain.QUANTITY


def test_no_hint_falls_back_to_all_numeric() -> None:
    assert infer_domains("x = ") == NUMERIC_DOMAINS
    assert infer_domains("") == NUMERIC_DOMAINS


def test_strings_only_match_string_domain() -> None:
    assert infer_domains("timeout = ", "string") == (ValueDomain.STRING,)
