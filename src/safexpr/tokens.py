"""Tokenizer for arithmetic expressions.

Source text is NFC-normalized and then lexed with ASCII-only classes, so
look-alike code points (fullwidth digits, other scripts' letters, line
separators) never become tokens.
"""

from __future__ import annotations

import re
import unicodedata
from collections.abc import Iterator
from dataclasses import dataclass
from enum import Enum

from safexpr.errors import EvaluationFailure
from safexpr.outcome import malformed


class TokenKind(str, Enum):
    NUMBER = "number"
    IDENTIFIER = "identifier"
    OPERATOR = "operator"
    PUNCTUATION = "punctuation"


@dataclass(frozen=True)
class Token:
    """A single lexical token."""

    kind: TokenKind
    lexeme: str
    offset: int  # 0-based character offset in the normalized source

    def is_operator(self, *lexemes: str) -> bool:
        return self.kind is TokenKind.OPERATOR and (not lexemes or self.lexeme in lexemes)

    def is_punctuation(self, lexeme: str) -> bool:
        return self.kind is TokenKind.PUNCTUATION and self.lexeme == lexeme


OPERATOR_CHARS = frozenset("+-*/%")
PUNCTUATION_CHARS = frozenset("().,")
WHITESPACE_CHARS = frozenset("\t\n\r ")

_DIGITS = frozenset("0123456789")
NUMBER_PATTERN = r"(?:[0-9]+(?:\.[0-9]*)?|\.[0-9]+)(?:[eE][+-]?[0-9]+)?"

_NUMBER_RE = re.compile(NUMBER_PATTERN)
_IDENTIFIER_RE = re.compile(r"[A-Za-z][A-Za-z0-9_]*")


def normalize_source(text: str) -> str:
    return unicodedata.normalize("NFC", text)


def printable_char(ch: str) -> str:
    """Render a single offending character safely for messages."""

    if ch.isascii() and ch.isprintable():
        return ch
    return f"U+{ord(ch):04X}"


def _has_surplus_leading_zero(lexeme: str) -> bool:
    integer_part = re.split(r"[.eE]", lexeme, maxsplit=1)[0]
    return len(integer_part) > 1 and integer_part[0] == "0"


def _lex(text: str) -> Iterator[Token]:
    pos = 0
    end = len(text)
    while pos < end:
        ch = text[pos]

        if ch in WHITESPACE_CHARS:
            pos += 1
            continue

        if ch in _DIGITS or (ch == "." and pos + 1 < end and text[pos + 1] in _DIGITS):
            m = _NUMBER_RE.match(text, pos)
            assert m is not None
            lexeme = m.group(0)
            if _has_surplus_leading_zero(lexeme):
                raise EvaluationFailure(malformed(lexeme, pos))
            yield Token(TokenKind.NUMBER, lexeme, pos)
            pos = m.end()
            continue

        if ch in OPERATOR_CHARS:
            yield Token(TokenKind.OPERATOR, ch, pos)
            pos += 1
            continue

        if ch in PUNCTUATION_CHARS:
            yield Token(TokenKind.PUNCTUATION, ch, pos)
            pos += 1
            continue

        m = _IDENTIFIER_RE.match(text, pos)
        if m is not None:
            yield Token(TokenKind.IDENTIFIER, m.group(0), pos)
            pos = m.end()
            continue

        raise EvaluationFailure(malformed(printable_char(ch), pos))


class TokenStream:
    """Lazy, restartable token sequence over one source text.

    Each iteration lexes from the beginning; a character outside every lexical
    class raises `EvaluationFailure` carrying a MalformedInput failure at the
    point iteration reaches it.
    """

    def __init__(self, text: str) -> None:
        self.text = normalize_source(text)

    def __iter__(self) -> Iterator[Token]:
        return _lex(self.text)

    def __repr__(self) -> str:
        return f"TokenStream({self.text!r})"


def tokenize(text: str) -> TokenStream:
    return TokenStream(text)
