"""The `evaluate` boundary.

Everything below this module signals failure by raising `EvaluationFailure`;
`evaluate` turns that into a `Failure` value, so callers branch on the
returned outcome and never see an exception for any string input.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping

from safexpr.errors import EvaluationFailure
from safexpr.grammar import DEFAULT_MAX_DEPTH, validate
from safexpr.interpreter import Interpreter
from safexpr.outcome import EvaluationOutcome, Failure, Success, malformed
from safexpr.resolver import NameResolver
from safexpr.tokens import Token, tokenize

logger = logging.getLogger("safexpr.evaluator")

DEFAULT_MAX_LENGTH = 65536


def _checked_tokens(source: str, *, max_depth: int, max_length: int) -> tuple[Token, ...]:
    if not isinstance(source, str) or len(source) > max_length:
        raise EvaluationFailure(malformed())
    return validate(tokenize(source), max_depth=max_depth)


def evaluate(
    source: str,
    bindings: Mapping[str, object] | None = None,
    *,
    max_depth: int = DEFAULT_MAX_DEPTH,
    max_length: int = DEFAULT_MAX_LENGTH,
) -> EvaluationOutcome:
    """Evaluate arithmetic `source` with variable `bindings`.

    Returns `Success(value)` (NaN and infinities included) or a `Failure`
    from the closed taxonomy in `safexpr.outcome`.
    """

    try:
        tokens = _checked_tokens(source, max_depth=max_depth, max_length=max_length)
        value = Interpreter(tokens, NameResolver(bindings or {})).run()
    except EvaluationFailure as e:
        logger.debug("evaluation failed: %s %r", e.failure.kind.value, e.failure.detail)
        return e.failure
    except RecursionError:
        # Only reachable when max_depth is raised past what the stack allows.
        logger.warning("evaluation exceeded the interpreter stack (max_depth=%d)", max_depth)
        return malformed()
    return Success(value)


def check(
    source: str,
    *,
    max_depth: int = DEFAULT_MAX_DEPTH,
    max_length: int = DEFAULT_MAX_LENGTH,
) -> Failure | None:
    """Tokenize and validate `source` without resolving names or evaluating."""

    try:
        _checked_tokens(source, max_depth=max_depth, max_length=max_length)
    except EvaluationFailure as e:
        return e.failure
    return None
