"""Precedence-climbing interpreter.

Walks a validated token tuple once and folds values directly; there is no
intermediate AST and nothing derived from the input is ever compiled or
executed. Binary operators fold on explicit operand and operator stacks, so
only parentheses and call arguments recurse: each level of nesting costs two
Python frames whatever operators surround it. Arithmetic follows IEEE-754
double semantics: division by zero gives a signed infinity, invalid operations
give NaN, and `%` takes the sign of the dividend.
"""

from __future__ import annotations

import math
from collections.abc import Callable
from enum import Enum

from safexpr.errors import EvaluationFailure
from safexpr.grammar import is_math_access, unparsed_suffix
from safexpr.outcome import (
    malformed,
    missing_operand,
    not_callable,
    trailing_input,
    unbalanced_parens,
)
from safexpr.resolver import NameResolver
from safexpr.tokens import Token, TokenKind

PREC_SUM = 0
PREC_MUL = 1


class Operator(str, Enum):
    ADD = "+"
    SUB = "-"
    MUL = "*"
    DIV = "/"
    MOD = "%"


def _add(x: float, y: float) -> float:
    return x + y


def _subtract(x: float, y: float) -> float:
    return x - y


def _multiply(x: float, y: float) -> float:
    return x * y


def _divide(x: float, y: float) -> float:
    if y == 0.0:
        if x == 0.0 or math.isnan(x):
            return math.nan
        return math.copysign(math.inf, x) * math.copysign(1.0, y)
    return x / y


def _remainder(x: float, y: float) -> float:
    if y == 0.0 or math.isinf(x) or math.isnan(x) or math.isnan(y):
        return math.nan
    return math.fmod(x, y)


OPERATIONS: dict[Operator, tuple[int, Callable[[float, float], float]]] = {
    Operator.ADD: (PREC_SUM, _add),
    Operator.SUB: (PREC_SUM, _subtract),
    Operator.MUL: (PREC_MUL, _multiply),
    Operator.DIV: (PREC_MUL, _divide),
    Operator.MOD: (PREC_MUL, _remainder),
}


def _fold(
    values: list[float], pending: list[tuple[int, Callable[[float, float], float]]]
) -> None:
    _, apply = pending.pop()
    right = values.pop()
    values.append(apply(values.pop(), right))


class Interpreter:
    """Evaluates one token tuple against one resolver.

    Instances hold the parse cursor and are single-use; create one per
    evaluation.
    """

    def __init__(self, tokens: tuple[Token, ...], resolver: NameResolver) -> None:
        self._tokens = tokens
        self._resolver = resolver
        self._pos = 0

    def run(self) -> float:
        result = self._expression()
        # Leftover tokens and early end of input are already rejected by
        # `grammar.validate`; these checks cover interpreters built on an
        # unvalidated token tuple.
        if self._pos < len(self._tokens):
            tok = self._tokens[self._pos]
            if tok.is_punctuation(")"):
                raise EvaluationFailure(unbalanced_parens(tok.offset))
            raise EvaluationFailure(trailing_input(unparsed_suffix(self._tokens, self._pos), tok.offset))
        return result

    # -- cursor helpers -------------------------------------------------

    def _peek(self) -> Token | None:
        if self._pos < len(self._tokens):
            return self._tokens[self._pos]
        return None

    def _at_punctuation(self, lexeme: str) -> bool:
        tok = self._peek()
        return tok is not None and tok.is_punctuation(lexeme)

    def _advance(self) -> Token:
        tok = self._peek()
        if tok is None:
            raise self._end_of_input()
        self._pos += 1
        return tok

    def _expect(self, lexeme: str) -> None:
        tok = self._peek()
        if tok is None or not tok.is_punctuation(lexeme):
            raise EvaluationFailure(unbalanced_parens(tok.offset if tok else None))
        self._pos += 1

    def _end_of_input(self) -> EvaluationFailure:
        # Only reachable on unvalidated input, see `run`.
        if self._pos and self._tokens[self._pos - 1].kind is TokenKind.OPERATOR:
            last = self._tokens[self._pos - 1]
            return EvaluationFailure(missing_operand(last.lexeme, last.offset))
        if any(t.is_punctuation("(") for t in self._tokens[: self._pos]):
            return EvaluationFailure(unbalanced_parens())
        return EvaluationFailure(malformed())

    # -- grammar ---------------------------------------------------------

    def _expression(self) -> float:
        values = [self._atom()]
        pending: list[tuple[int, Callable[[float, float], float]]] = []
        while True:
            tok = self._peek()
            if tok is None or tok.kind is not TokenKind.OPERATOR:
                break
            precedence, apply = OPERATIONS[Operator(tok.lexeme)]
            # Left-associative: fold everything that binds at least as tightly.
            while pending and pending[-1][0] >= precedence:
                _fold(values, pending)
            pending.append((precedence, apply))
            self._pos += 1
            if self._peek() is None:
                raise EvaluationFailure(missing_operand(tok.lexeme, tok.offset))
            values.append(self._atom())
        while pending:
            _fold(values, pending)
        return values[0]

    def _atom(self) -> float:
        # Sign, group and Math call handling stay in one frame so that each
        # level of nesting costs as few Python frames as possible.
        tok = self._advance()
        negate = False
        if tok.is_operator("+", "-"):
            negate = tok.lexeme == "-"
            tok = self._advance()

        if tok.kind is TokenKind.NUMBER:
            value = float(tok.lexeme)
        elif tok.is_punctuation("("):
            value = self._expression()
            self._expect(")")
        elif tok.kind is TokenKind.IDENTIFIER and is_math_access(self._tokens, self._pos - 1):
            self._pos += 1  # "."
            name_tok = self._advance()
            member = self._resolver.math_member(name_tok)
            if self._at_punctuation("("):
                if not member.callable:
                    raise EvaluationFailure(not_callable(member.name, name_tok.offset))
                self._pos += 1
                args: list[float] = []
                if not self._at_punctuation(")"):
                    args.append(self._expression())
                    while self._at_punctuation(","):
                        self._pos += 1
                        args.append(self._expression())
                self._expect(")")
                value = member.call(args)
            elif member.callable:
                raise EvaluationFailure(not_callable(member.name, name_tok.offset, called=False))
            else:
                assert member.value is not None
                value = member.value
        elif tok.kind is TokenKind.IDENTIFIER:
            value = self._resolver.variable(tok)
        else:
            raise EvaluationFailure(malformed(tok.lexeme, tok.offset))

        return -value if negate else value
