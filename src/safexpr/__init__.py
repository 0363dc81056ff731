from __future__ import annotations

from importlib.metadata import PackageNotFoundError, version

from safexpr.errors import SafexprConfigError, SafexprError, SafexprInputError
from safexpr.evaluator import check, evaluate
from safexpr.outcome import EvaluationOutcome, Failure, FailureKind, Success


def _package_version() -> str:
    try:
        return version("safexpr")
    except PackageNotFoundError:
        # Running from a source checkout, or otherwise not installed.
        return "0.0.0"


__version__ = _package_version()

__all__ = [
    "EvaluationOutcome",
    "Failure",
    "FailureKind",
    "SafexprConfigError",
    "SafexprError",
    "SafexprInputError",
    "Success",
    "__version__",
    "check",
    "evaluate",
]
