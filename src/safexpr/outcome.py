"""Evaluation outcomes and the closed failure taxonomy.

Every call to `safexpr.evaluate` returns exactly one of `Success` or `Failure`.
Failure messages only ever contain token lexemes and fixed text, so renderers
can treat them as plain text.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Literal


class FailureKind(str, Enum):
    """Failure reasons, in the order the evaluator can detect them."""

    MALFORMED_INPUT = "MalformedInput"
    UNBALANCED_PARENS = "UnbalancedParens"
    UNDEFINED_VARIABLE = "UndefinedVariable"
    UNDEFINED_MATH_MEMBER = "UndefinedMathMember"
    NOT_CALLABLE = "NotCallable"
    NOT_A_NUMBER = "NotANumber"
    MISSING_OPERAND = "MissingOperand"
    TRAILING_INPUT = "TrailingInput"


@dataclass(frozen=True)
class Success:
    value: float
    ok: Literal[True] = True


@dataclass(frozen=True)
class Failure:
    """A failed evaluation.

    `detail` is the name, operator or suffix the kind refers to (None for
    MalformedInput without a culprit and for UnbalancedParens). `offset` is the
    character offset of the offending token in the normalized source, when one
    exists.
    """

    kind: FailureKind
    message: str
    detail: str | None = None
    offset: int | None = None
    ok: Literal[False] = False


EvaluationOutcome = Success | Failure


def malformed(lexeme: str | None = None, offset: int | None = None) -> Failure:
    message = f"malformed {lexeme}" if lexeme else "malformed"
    return Failure(FailureKind.MALFORMED_INPUT, message, lexeme, offset)


def unbalanced_parens(offset: int | None = None) -> Failure:
    return Failure(FailureKind.UNBALANCED_PARENS, "unbalanced parentheses", None, offset)


def undefined_variable(name: str, offset: int | None = None) -> Failure:
    return Failure(FailureKind.UNDEFINED_VARIABLE, f"{name} is not defined", name, offset)


def undefined_math_member(name: str, offset: int | None = None) -> Failure:
    return Failure(FailureKind.UNDEFINED_MATH_MEMBER, f"Math.{name} not defined", name, offset)


def not_callable(name: str, offset: int | None = None, *, called: bool = True) -> Failure:
    # `called` distinguishes `Math.PI()` from a bare `Math.sqrt`.
    message = f"Math.{name} not callable" if called else f"Math.{name} must be called"
    return Failure(FailureKind.NOT_CALLABLE, message, name, offset)


def not_a_number(name: str, offset: int | None = None) -> Failure:
    return Failure(FailureKind.NOT_A_NUMBER, f"{name} is not a number", name, offset)


def missing_operand(operator: str, offset: int | None = None) -> Failure:
    return Failure(FailureKind.MISSING_OPERAND, f"missing operand: {operator}", operator, offset)


def trailing_input(suffix: str, offset: int | None = None) -> Failure:
    return Failure(FailureKind.TRAILING_INPUT, f"unparsed: {suffix}", suffix, offset)
