"""The fixed `Math` namespace available to expressions.

Members follow IEEE-754 double semantics: where the `math` module would raise
for a domain or range error, the member returns NaN or a signed infinity
instead. The table is built once at import time and exposed read-only.
"""

from __future__ import annotations

import math
import struct
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from types import MappingProxyType

INF = math.inf
NAN = math.nan


@dataclass(frozen=True)
class MathMember:
    """A constant (`value`) or a function (`function`) under `Math.`."""

    name: str
    value: float | None = None
    function: Callable[..., float] | None = None
    arity: int = 0
    variadic: bool = False

    @property
    def callable(self) -> bool:
        return self.function is not None

    def call(self, args: list[float]) -> float:
        """Apply the function; missing arguments read as NaN, extras are ignored."""

        assert self.function is not None
        if self.variadic:
            return self.function(*args)
        padded = list(args[: self.arity])
        padded.extend([NAN] * (self.arity - len(padded)))
        return self.function(*padded)


def _is_odd_integer(y: float) -> bool:
    return math.isfinite(y) and y == math.floor(y) and math.fmod(y, 2.0) != 0.0


def _nan_on_domain_error(fn: Callable[[float], float]) -> Callable[[float], float]:
    def wrapped(x: float) -> float:
        if math.isnan(x):
            return NAN
        try:
            return fn(x)
        except ValueError:
            return NAN

    wrapped.__name__ = fn.__name__
    return wrapped


def _inf_on_overflow(fn: Callable[[float], float]) -> Callable[[float], float]:
    def wrapped(x: float) -> float:
        try:
            return fn(x)
        except OverflowError:
            return math.copysign(INF, x) if fn is math.sinh else INF

    wrapped.__name__ = fn.__name__
    return wrapped


def _log_with(fn: Callable[[float], float], *, pole: float = 0.0) -> Callable[[float], float]:
    # -Infinity at the pole, NaN below it.
    def wrapped(x: float) -> float:
        if math.isnan(x) or x < pole:
            return NAN
        if x == pole:
            return -INF
        return fn(x)

    wrapped.__name__ = fn.__name__
    return wrapped


def _integral(fn: Callable[[float], int]) -> Callable[[float], float]:
    # ceil/floor/trunc keep infinities, NaN and the sign of zero.
    def wrapped(x: float) -> float:
        if not math.isfinite(x):
            return x
        result = float(fn(x))
        if result == 0.0:
            return math.copysign(0.0, x)
        return result

    wrapped.__name__ = fn.__name__
    return wrapped


def _round(x: float) -> float:
    """Round half toward positive infinity."""

    if not math.isfinite(x):
        return x
    floor = math.floor(x)
    result = float(floor + 1 if x - floor >= 0.5 else floor)
    if result == 0.0:
        return math.copysign(0.0, x)
    return result


def _sign(x: float) -> float:
    if math.isnan(x) or x == 0.0:
        return x
    return math.copysign(1.0, x)


def _atanh(x: float) -> float:
    if math.isnan(x) or abs(x) > 1.0:
        return NAN
    if abs(x) == 1.0:
        return math.copysign(INF, x)
    return math.atanh(x)


def _sqrt(x: float) -> float:
    if math.isnan(x) or x < 0.0:
        return NAN
    return math.sqrt(x)


def _pow(x: float, y: float) -> float:
    if math.isnan(y):
        return NAN
    if y == 0.0:
        return 1.0
    if abs(x) == 1.0 and math.isinf(y):
        return NAN
    if x == 0.0 and y < 0.0:
        return math.copysign(INF, x) if _is_odd_integer(y) else INF
    try:
        return math.pow(x, y)
    except OverflowError:
        return -INF if x < 0.0 and _is_odd_integer(y) else INF
    except ValueError:
        return NAN


def _hypot(*args: float) -> float:
    try:
        return math.hypot(*args)
    except OverflowError:
        return INF


def _max(*args: float) -> float:
    result = -INF
    for value in args:
        if math.isnan(value):
            return NAN
        if value > result or (value == result == 0.0 and math.copysign(1.0, result) < 0):
            result = value
    return result


def _min(*args: float) -> float:
    result = INF
    for value in args:
        if math.isnan(value):
            return NAN
        if value < result or (value == result == 0.0 and math.copysign(1.0, value) < 0):
            result = value
    return result


def _to_uint32(x: float) -> int:
    if not math.isfinite(x):
        return 0
    return int(x) % 2**32


def _to_int32(x: float) -> int:
    n = _to_uint32(x)
    return n - 2**32 if n >= 2**31 else n


def _clz32(x: float) -> float:
    return float(32 - _to_uint32(x).bit_length())


def _imul(x: float, y: float) -> float:
    product = (_to_int32(x) * _to_int32(y)) % 2**32
    return float(product - 2**32 if product >= 2**31 else product)


def _fround(x: float) -> float:
    if not math.isfinite(x):
        return x
    try:
        return struct.unpack("f", struct.pack("f", x))[0]
    except OverflowError:
        return math.copysign(INF, x)


_CONSTANTS: dict[str, float] = {
    "E": math.e,
    "LN10": math.log(10),
    "LN2": math.log(2),
    "LOG10E": 1 / math.log(10),
    "LOG2E": 1 / math.log(2),
    "PI": math.pi,
    "SQRT1_2": math.sqrt(0.5),
    "SQRT2": math.sqrt(2),
}

_UNARY: dict[str, Callable[[float], float]] = {
    "abs": math.fabs,
    "acos": _nan_on_domain_error(math.acos),
    "acosh": _nan_on_domain_error(math.acosh),
    "asin": _nan_on_domain_error(math.asin),
    "asinh": math.asinh,
    "atan": math.atan,
    "atanh": _atanh,
    "cbrt": math.cbrt,
    "ceil": _integral(math.ceil),
    "clz32": _clz32,
    "cos": _nan_on_domain_error(math.cos),
    "cosh": _inf_on_overflow(math.cosh),
    "exp": _inf_on_overflow(math.exp),
    "expm1": _inf_on_overflow(math.expm1),
    "floor": _integral(math.floor),
    "fround": _fround,
    "log": _log_with(math.log),
    "log10": _log_with(math.log10),
    "log1p": _log_with(math.log1p, pole=-1.0),
    "log2": _log_with(math.log2),
    "round": _round,
    "sign": _sign,
    "sin": _nan_on_domain_error(math.sin),
    "sinh": _inf_on_overflow(math.sinh),
    "sqrt": _sqrt,
    "tan": _nan_on_domain_error(math.tan),
    "tanh": math.tanh,
    "trunc": _integral(math.trunc),
}

_BINARY: dict[str, Callable[[float, float], float]] = {
    "atan2": math.atan2,
    "imul": _imul,
    "pow": _pow,
}

_VARIADIC: dict[str, Callable[..., float]] = {
    "hypot": _hypot,
    "max": _max,
    "min": _min,
}


def _build() -> Mapping[str, MathMember]:
    table: dict[str, MathMember] = {}
    for name, value in _CONSTANTS.items():
        table[name] = MathMember(name, value=value)
    for name, fn in _UNARY.items():
        table[name] = MathMember(name, function=fn, arity=1)
    for name, fn in _BINARY.items():
        table[name] = MathMember(name, function=fn, arity=2)
    for name, fn in _VARIADIC.items():
        table[name] = MathMember(name, function=fn, variadic=True)
    return MappingProxyType(dict(sorted(table.items())))


MATH_NAMESPACE: Mapping[str, MathMember] = _build()
