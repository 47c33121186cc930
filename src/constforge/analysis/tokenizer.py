"""Regex tokenizer for numeric and string literals.

A single left-to-right pass over the text with one alternation per
language: comments are consumed and dropped, so numbers inside
comments and strings never surface as numeric tokens.
"""

from __future__ import annotations

import re
from bisect import bisect_right
from collections.abc import Iterator
from dataclasses import dataclass
from functools import lru_cache
from typing import Literal, TypeAlias

from constforge.config import (
    BLOCK_COMMENT_LANGUAGES,
    DEFAULT_LINE_COMMENT_MARKERS,
    LINE_COMMENT_MARKERS,
)

LiteralKind: TypeAlias = Literal["number", "string"]

_NUMBER = (
    r"(?<![\w.$])"
    r"(?:0[xX][0-9a-fA-F](?:_?[0-9a-fA-F])*"
    r"|\d(?:_?\d)*(?:\.\d(?:_?\d)*)?(?:[eE][+-]?\d+)?)"
    r"(?![\w.])"
)
_DOUBLE = r'"(?:\\.|[^"\\\n])*"'
_SINGLE = r"'(?:\\.|[^'\\\n])*'"
_BACKTICK = r"`(?:\\.|[^`\\])*`"
_TRIPLE = r'"""[\s\S]*?"""|' + r"'''[\s\S]*?'''"
# Python string prefixes (r, b, u, f and pairs such as rb or fr)
_PY_PREFIX = r"(?:(?<![\w])[rRbBuUfF]{1,2})?"

_ESCAPES = {"n": "\n", "t": "\t", "r": "\r", "0": "\0"}
_ESCAPE_RE = re.compile(r"\\(.)", re.DOTALL)

# A minus after an operand is subtraction, not a sign; after an
# identifier it is a sign only if the identifier is one of these keywords
_OPERAND_END = frozenset(")]}'\"`")
_UNARY_KEYWORDS = frozenset({
    "return", "yield", "case", "in", "of", "else", "await", "throw",
    "and", "or", "not", "is", "if", "lambda",
})


@dataclass(frozen=True)
class LiteralToken:
    """A literal with its span (0-based offsets) and 1-based position."""

    kind: LiteralKind
    raw: str
    value: int | float | str
    start: int
    end: int
    line: int
    column: int


@lru_cache(maxsize=32)
def _pattern(language: str) -> re.Pattern[str]:
    comments: list[str] = []
    if language in BLOCK_COMMENT_LANGUAGES:
        comments.append(r"/\*[\s\S]*?\*/")
    markers = LINE_COMMENT_MARKERS.get(language, DEFAULT_LINE_COMMENT_MARKERS)
    comments.extend(re.escape(m) + r"[^\n]*" for m in markers)

    strings: list[str] = [_DOUBLE, _SINGLE]
    if language == "python":
        strings = [rf"{_PY_PREFIX}(?:{_TRIPLE}|{_DOUBLE}|{_SINGLE})"]
    if language in {"javascript", "typescript", "go"}:
        strings.append(_BACKTICK)

    return re.compile(
        rf"(?P<comment>{'|'.join(comments)})"
        rf"|(?P<string>{'|'.join(strings)})"
        rf"|(?P<number>{_NUMBER})"
    )


def tokenize(text: str, language: str = "unknown") -> Iterator[LiteralToken]:
    """Yield numeric and string literals in file order."""
    line_starts = [0] + [m.end() for m in re.finditer(r"\n", text)]
    for m in _pattern(language).finditer(text):
        kind = m.lastgroup
        if kind == "comment":
            continue
        raw = m.group()
        start = m.start()
        value: int | float | str | None
        if kind == "number":
            value = _number_value(raw)
            if value is not None and _is_negated(text, start):
                start -= 1
                raw = "-" + raw
                value = -value
        else:
            value = _string_value(raw)
        if value is None:
            continue
        line_idx = bisect_right(line_starts, start) - 1
        yield LiteralToken(
            kind="number" if kind == "number" else "string",
            raw=raw,
            value=value,
            start=start,
            end=m.end(),
            line=line_idx + 1,
            column=start - line_starts[line_idx] + 1,
        )


def line_text(text: str, token: LiteralToken) -> str:
    """The full source line on which ``token`` starts."""
    begin = text.rfind("\n", 0, token.start) + 1
    end = text.find("\n", token.start)
    return text[begin:] if end == -1 else text[begin:end]


def _number_value(raw: str) -> int | float | None:
    digits = raw.replace("_", "")
    try:
        if digits[:2].lower() == "0x":
            return int(digits, 16)
        if any(c in digits for c in ".eE"):
            return float(digits)
        return int(digits)
    except ValueError:
        return None


def _is_negated(text: str, start: int) -> bool:
    """True if the number at ``start`` is preceded by a unary minus."""
    i = start - 1
    if i < 0 or text[i] != "-":
        return False
    i -= 1
    while i >= 0 and text[i] in " \t":
        i -= 1
    if i < 0:
        return True
    if text[i] in _OPERAND_END:
        return False
    if not (text[i].isalnum() or text[i] == "_"):
        return True
    j = i
    while j >= 0 and (text[j].isalnum() or text[j] == "_"):
        j -= 1
    return text[j + 1:i + 1] in _UNARY_KEYWORDS


def _string_value(raw: str) -> str | None:
    body = raw.lstrip("rRbBuUfF")
    prefix = raw[:len(raw) - len(body)].lower()
    quote = 3 if body[:3] in ('"""', "'''") else 1
    inner = body[quote:-quote]
    # Interpolated strings have no single literal value
    if body.startswith("`") and "${" in inner:
        return None
    if "f" in prefix:
        if "{" in inner.replace("{{", ""):
            return None
        inner = inner.replace("{{", "{").replace("}}", "}")
    if "r" in prefix:
        return inner
    return _ESCAPE_RE.sub(lambda m: _ESCAPES.get(m.group(1), m.group(1)), inner)
