"""safexpr exception hierarchy.

Keep this module small and dependency-free: it is imported broadly across the
project and by tests.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:  # pragma: no cover
    from safexpr.outcome import Failure


class SafexprError(Exception):
    """Base exception for all safexpr errors."""


class SafexprConfigError(SafexprError):
    """Raised for invalid user configuration."""


class SafexprInputError(SafexprError):
    """Raised when expression text or bindings cannot be read or decoded."""


class EvaluationFailure(SafexprError):
    """Carries a taxonomy `Failure` out of the tokenizer, validator or interpreter.

    `safexpr.evaluate` converts it back into a value; it never crosses that
    boundary.
    """

    def __init__(self, failure: Failure) -> None:
        super().__init__(failure.message)
        self.failure = failure
