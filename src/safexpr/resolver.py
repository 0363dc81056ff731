"""Name resolution for identifiers in a validated token sequence."""

from __future__ import annotations

import math
import numbers
import re
from collections.abc import Mapping

from safexpr.errors import EvaluationFailure
from safexpr.grammar import MATH_NAMESPACE_NAME
from safexpr.namespace import MATH_NAMESPACE, MathMember
from safexpr.outcome import not_a_number, undefined_math_member, undefined_variable
from safexpr.tokens import NUMBER_PATTERN, Token


_NUMERIC_TEXT_RE = re.compile(rf"[+-]?{NUMBER_PATTERN}")


def coerce_binding(name: str, value: object, offset: int | None = None) -> float:
    """Convert a bound value to a finite float, or raise NotANumber.

    Real numbers are accepted, and so is text holding one signed number
    literal (`"2"`, `" -1.5e3 "`), as query strings and form fields deliver
    it. Booleans are rejected even though `bool` is an `int` subclass; so are
    NaN, infinities and integers outside double range.
    """

    if isinstance(value, str):
        text = value.strip()
        if _NUMERIC_TEXT_RE.fullmatch(text) is None:
            raise EvaluationFailure(not_a_number(name, offset))
        value = float(text)
    if isinstance(value, bool) or not isinstance(value, numbers.Real):
        raise EvaluationFailure(not_a_number(name, offset))
    try:
        result = float(value)
    except (OverflowError, ValueError, TypeError) as e:
        raise EvaluationFailure(not_a_number(name, offset)) from e
    if not math.isfinite(result):
        raise EvaluationFailure(not_a_number(name, offset))
    return result


class NameResolver:
    """Looks identifiers up in caller bindings or the fixed Math namespace."""

    def __init__(
        self,
        bindings: Mapping[str, object],
        namespace: Mapping[str, MathMember] = MATH_NAMESPACE,
    ) -> None:
        self._bindings = bindings
        self._namespace = namespace
        # A caller binding named `Math` disables namespace access entirely.
        self._math_shadowed = MATH_NAMESPACE_NAME in bindings

    def variable(self, tok: Token) -> float:
        name = tok.lexeme
        if name == MATH_NAMESPACE_NAME or name not in self._bindings:
            raise EvaluationFailure(undefined_variable(name, tok.offset))
        return coerce_binding(name, self._bindings[name], tok.offset)

    def math_member(self, tok: Token) -> MathMember:
        name = tok.lexeme
        if self._math_shadowed or name not in self._namespace:
            raise EvaluationFailure(undefined_math_member(name, tok.offset))
        return self._namespace[name]
