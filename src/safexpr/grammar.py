"""Grammar validation for token sequences.

Accepted language:

    Expr    := Term (BinOp Term)*
    Term    := ['+'|'-'] Atom
    Atom    := Number | Call | Identifier | '(' Expr ')'
    Call    := 'Math' '.' Identifier ['(' (Expr (',' Expr)*)? ')']
    BinOp   := '+' | '-' | '*' | '/' | '%'

The validator is a single iterative pass with an explicit stack of open
groups, so hostile nesting cannot exhaust the interpreter's call stack: input
nested deeper than `max_depth` is rejected here.
"""

from __future__ import annotations

from collections.abc import Iterable
from enum import Enum

from safexpr.errors import EvaluationFailure
from safexpr.outcome import (
    malformed,
    missing_operand,
    trailing_input,
    unbalanced_parens,
)
from safexpr.tokens import Token, TokenKind

DEFAULT_MAX_DEPTH = 256
MATH_NAMESPACE_NAME = "Math"

_SUFFIX_LIMIT = 80


class _Open(Enum):
    GROUP = "group"
    CALL = "call"


class _State(Enum):
    TERM = "term"  # a sign may come next, then an atom
    ATOM = "atom"  # sign already consumed
    AFTER = "after"  # a complete term was read


def is_math_access(tokens: tuple[Token, ...], i: int) -> bool:
    """True if tokens[i] is `Math` immediately followed by `.`."""

    tok = tokens[i]
    return (
        tok.kind is TokenKind.IDENTIFIER
        and tok.lexeme == MATH_NAMESPACE_NAME
        and i + 1 < len(tokens)
        and tokens[i + 1].is_punctuation(".")
    )


def unparsed_suffix(tokens: tuple[Token, ...], start: int) -> str:
    suffix = " ".join(t.lexeme for t in tokens[start:])
    if len(suffix) > _SUFFIX_LIMIT:
        suffix = suffix[: _SUFFIX_LIMIT - 3] + "..."
    return suffix


def _fail_at_end(tokens: tuple[Token, ...], stack: list[_Open]) -> EvaluationFailure:
    if stack:
        return EvaluationFailure(unbalanced_parens())
    last = tokens[-1]
    if last.kind is TokenKind.OPERATOR:
        return EvaluationFailure(missing_operand(last.lexeme, last.offset))
    return EvaluationFailure(malformed(last.lexeme, last.offset))


def validate(tokens: Iterable[Token], *, max_depth: int = DEFAULT_MAX_DEPTH) -> tuple[Token, ...]:
    """Check that `tokens` form exactly one well-formed expression.

    Returns the materialized token tuple. Raises `EvaluationFailure` with the
    first failure found, scanning left to right.
    """

    seq = tuple(tokens)
    if not seq:
        raise EvaluationFailure(malformed())

    stack: list[_Open] = []
    state = _State.TERM
    i = 0
    n = len(seq)

    def open_(kind: _Open, tok: Token) -> None:
        stack.append(kind)
        if len(stack) > max_depth:
            raise EvaluationFailure(malformed(tok.lexeme, tok.offset))

    while i < n:
        tok = seq[i]

        if state is _State.AFTER:
            if tok.kind is TokenKind.OPERATOR:
                state = _State.TERM
                i += 1
                continue
            if tok.is_punctuation(")"):
                if not stack:
                    raise EvaluationFailure(unbalanced_parens(tok.offset))
                stack.pop()
                i += 1
                continue
            if tok.is_punctuation(",") and stack and stack[-1] is _Open.CALL:
                state = _State.TERM
                i += 1
                continue
            if not stack:
                raise EvaluationFailure(trailing_input(unparsed_suffix(seq, i), tok.offset))
            # Inside a group or argument list only `)`, `,` or an operator may follow.
            raise EvaluationFailure(unbalanced_parens(tok.offset))

        if state is _State.TERM and tok.is_operator("+", "-"):
            state = _State.ATOM
            i += 1
            continue

        if tok.kind is TokenKind.NUMBER:
            state = _State.AFTER
            i += 1
            continue

        if tok.kind is TokenKind.IDENTIFIER:
            if not is_math_access(seq, i):
                state = _State.AFTER
                i += 1
                continue
            # Math . Identifier [ '(' args ')' ]
            member_at = i + 2
            if member_at >= n:
                if stack:
                    raise EvaluationFailure(unbalanced_parens())
                dot = seq[i + 1]
                raise EvaluationFailure(malformed(dot.lexeme, dot.offset))
            member = seq[member_at]
            if member.kind is not TokenKind.IDENTIFIER:
                raise EvaluationFailure(malformed(member.lexeme, member.offset))
            i = member_at + 1
            state = _State.AFTER
            if i < n and seq[i].is_punctuation("("):
                open_(_Open.CALL, seq[i])
                i += 1
                if i < n and seq[i].is_punctuation(")"):
                    stack.pop()
                    i += 1
                else:
                    state = _State.TERM
            continue

        if tok.is_punctuation("("):
            open_(_Open.GROUP, tok)
            state = _State.TERM
            i += 1
            continue

        raise EvaluationFailure(malformed(tok.lexeme, tok.offset))

    if state is not _State.AFTER:
        raise _fail_at_end(seq, stack)
    if stack:
        raise EvaluationFailure(unbalanced_parens())
    return seq
