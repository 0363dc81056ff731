"""Rendering evaluation outcomes for people and for JSON consumers.

Keep this module small and dependency-light: it is imported by the CLI and
MCP layers and only depends on the outcome types. Output is plain text;
callers embedding it in markup must escape it themselves.
"""

from __future__ import annotations

import math
from typing import Any

from safexpr.outcome import EvaluationOutcome, Failure, FailureKind

# Decimal point positions in this range print as plain digits, others in
# exponent form (`1e-7`, `1e+21`).
_FIXED_MIN_EXPONENT = -6
_FIXED_MAX_EXPONENT = 21


def format_number(value: float) -> str:
    """Shortest round-trip decimal text for a result.

    `17`, `0.5`, `0.000001`, `1e-7`, `1.5e+300`, `NaN`, `Infinity` and
    `-Infinity`.
    """

    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "Infinity" if value > 0 else "-Infinity"
    if value == 0:
        return "0"

    sign = "-" if value < 0 else ""
    mantissa, _, exponent = repr(abs(value)).partition("e")
    int_part, _, frac_part = mantissa.partition(".")
    digits = int_part + frac_part
    # `point` is where the decimal point falls relative to `digits`.
    point = len(int_part) + int(exponent or 0)
    stripped = digits.lstrip("0")
    point -= len(digits) - len(stripped)
    digits = stripped.rstrip("0")

    if len(digits) <= point <= _FIXED_MAX_EXPONENT:
        text = digits + "0" * (point - len(digits))
    elif 0 < point <= _FIXED_MAX_EXPONENT:
        text = f"{digits[:point]}.{digits[point:]}"
    elif _FIXED_MIN_EXPONENT < point <= 0:
        text = "0." + "0" * -point + digits
    else:
        e = point - 1
        head = digits[0] + (f".{digits[1:]}" if len(digits) > 1 else "")
        text = f"{head}e{'+' if e >= 0 else '-'}{abs(e)}"
    return sign + text


def format_hint(failure: Failure) -> str | None:
    """Return an actionable hint for a failure, or None."""

    kind = failure.kind
    if kind is FailureKind.UNDEFINED_VARIABLE:
        if failure.detail == "Math":
            return "use a member such as `Math.PI` or `Math.sqrt(x)`; `Math` alone is not a value"
        return f"bind it with `--var {failure.detail}=<number>` or `--vars '{{\"{failure.detail}\": 1}}'`"
    if kind is FailureKind.UNDEFINED_MATH_MEMBER:
        return "run `safexpr functions` to list the available Math members"
    if kind is FailureKind.NOT_CALLABLE:
        if failure.message.endswith("must be called"):
            return f"call it with arguments, e.g. `Math.{failure.detail}(x)`"
        return f"`Math.{failure.detail}` is a constant; drop the parentheses"
    if kind is FailureKind.NOT_A_NUMBER:
        return "variables must be finite numbers"
    if kind is FailureKind.UNBALANCED_PARENS:
        return "check that every `(` has a matching `)`"
    if kind is FailureKind.MISSING_OPERAND:
        return f"add a value after `{failure.detail}`"
    return None


def format_outcome(outcome: EvaluationOutcome) -> str:
    if isinstance(outcome, Failure):
        return f"error: {outcome.message}"
    return format_number(outcome.value)


def format_outcome_with_hint(outcome: EvaluationOutcome) -> str:
    """Format an outcome plus an optional hint line for stderr output."""

    result = format_outcome(outcome)
    if isinstance(outcome, Failure):
        hint = format_hint(outcome)
        if hint:
            result += f"\nhint: {hint}"
    return result


def failure_to_dict(failure: Failure) -> dict[str, Any]:
    return {
        "kind": failure.kind.value,
        "message": failure.message,
        "detail": failure.detail,
        "offset": failure.offset,
    }


def outcome_to_dict(outcome: EvaluationOutcome) -> dict[str, Any]:
    """JSON-safe envelope; non-finite results appear only as text."""

    if isinstance(outcome, Failure):
        return {"ok": False, "error": failure_to_dict(outcome)}
    value = outcome.value
    return {
        "ok": True,
        "result": format_number(value),
        "value": value if math.isfinite(value) else None,
    }
