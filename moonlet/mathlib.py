"""The standard mathematical library."""

from __future__ import annotations

import math
import random as _random
from typing import Callable

from moonlet.objects import str2number

__all__ = [
    "MathLibrary",
    "PI",
    "RADIANS_PER_DEGREE",
    "fmod",
    "modf",
    "frexp",
    "ldexp",
    "deg",
    "rad",
    "minimum",
    "maximum",
]

PI = 3.14159265358979323846
RADIANS_PER_DEGREE = PI / 180.0
_NAN = float("nan")
_INF = float("inf")


def _type_name(value: object) -> str:
    if value is None:
        return "nil"
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, (int, float)):
        return "number"
    if isinstance(value, str):
        return "string"
    return type(value).__name__


def _check_number(value: object, index: int, fname: str) -> float:
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return float(value)
    if isinstance(value, str):
        converted = str2number(value)
        if converted is not None:
            return converted
    raise TypeError(
        f"bad argument #{index} to '{fname}' (number expected, got {_type_name(value)})"
    )


def _check_int(value: object, index: int, fname: str) -> int:
    number = _check_number(value, index, fname)
    if math.isnan(number) or math.isinf(number):
        return 0
    return int(number)


def _no_value(fname: str) -> TypeError:
    return TypeError(f"bad argument #1 to '{fname}' (number expected, got no value)")


def fmod(x: float, y: float) -> float:
    """Remainder of ``x / y`` with the sign of ``x``; NaN on a zero divisor."""
    x = _check_number(x, 1, "fmod")
    y = _check_number(y, 2, "fmod")
    try:
        return math.fmod(x, y)
    except ValueError:
        return _NAN


def modf(x: float) -> tuple[float, float]:
    """Split ``x`` into (integral part, fractional part)."""
    fp, ip = math.modf(_check_number(x, 1, "modf"))
    return ip, fp


def frexp(x: float) -> tuple[float, int]:
    """Return (mantissa, exponent) with ``x == m * 2**e``."""
    return math.frexp(_check_number(x, 1, "frexp"))


def ldexp(m: float, e: int) -> float:
    """Return ``m * 2**e``."""
    m = _check_number(m, 1, "ldexp")
    exponent = _check_int(e, 2, "ldexp")
    try:
        return math.ldexp(m, exponent)
    except OverflowError:
        return math.copysign(_INF, m)


def deg(x: float) -> float:
    """Convert radians to degrees."""
    return _check_number(x, 1, "deg") / RADIANS_PER_DEGREE


def rad(x: float) -> float:
    """Convert degrees to radians."""
    return _check_number(x, 1, "rad") * RADIANS_PER_DEGREE


def minimum(*args: float) -> float:
    """Smallest of the arguments; at least one is required."""
    if not args:
        raise _no_value("min")
    result = _check_number(args[0], 1, "min")
    for index, value in enumerate(args[1:], start=2):
        d = _check_number(value, index, "min")
        if d < result:
            result = d
    return result


def maximum(*args: float) -> float:
    """Largest of the arguments; at least one is required."""
    if not args:
        raise _no_value("max")
    result = _check_number(args[0], 1, "max")
    for index, value in enumerate(args[1:], start=2):
        d = _check_number(value, index, "max")
        if d > result:
            result = d
    return result


def _log(x: float, fn: Callable[[float], float]) -> float:
    if x == 0:
        return -_INF
    if x < 0 or math.isnan(x):
        return _NAN
    return fn(x)


def _unary(fname: str, fn: Callable[[float], float]) -> Callable[[float], float]:
    """Wrap a one-argument function with argument checks and C-style
    results (NaN outside the domain, infinity on overflow)."""

    def call(x: float) -> float:
        value = _check_number(x, 1, fname)
        try:
            return fn(value)
        except ValueError:
            return _NAN
        except OverflowError:
            return math.copysign(_INF, value) if fname == "sinh" else _INF

    call.__name__ = fname
    return call


def _atan2(y: float, x: float) -> float:
    return math.atan2(_check_number(y, 1, "atan2"), _check_number(x, 2, "atan2"))


def _pow(x: float, y: float) -> float:
    x = _check_number(x, 1, "pow")
    y = _check_number(y, 2, "pow")
    odd_integer = y.is_integer() and int(y) % 2 == 1 if math.isfinite(y) else False
    try:
        return math.pow(x, y)
    except (ValueError, ZeroDivisionError):
        if x == 0 and y < 0:
            return math.copysign(_INF, x) if odd_integer else _INF
        return _NAN
    except OverflowError:
        return -_INF if x < 0 and odd_integer else _INF


class MathLibrary:
    """The ``math`` table, with its own random number generator."""

    def __init__(self, seed: int | None = None) -> None:
        self._rng = _random.Random(seed)

    def random(self, *args: float) -> float:
        """``random()`` gives [0, 1); ``random(u)`` an integer in [1, u];
        ``random(l, u)`` an integer in [l, u]."""
        r = self._rng.random()
        if len(args) == 0:
            return r
        if len(args) == 1:
            u = _check_int(args[0], 1, "random")
            if not 1 <= u:
                raise ValueError("bad argument #1 to 'random' (interval is empty)")
            return float(math.floor(r * u) + 1)
        if len(args) == 2:
            lo = _check_int(args[0], 1, "random")
            u = _check_int(args[1], 2, "random")
            if not lo <= u:
                raise ValueError("bad argument #2 to 'random' (interval is empty)")
            return float(math.floor(r * (u - lo + 1)) + lo)
        raise TypeError("wrong number of arguments")

    def randomseed(self, seed: float) -> None:
        """Reseed the generator."""
        self._rng.seed(_check_int(seed, 1, "randomseed"))

    def as_table(self) -> dict[str, object]:
        """The library's fields, keyed by their names."""
        return {
            "abs": _unary("abs", abs),
            "acos": _unary("acos", math.acos),
            "asin": _unary("asin", math.asin),
            "atan2": _atan2,
            "atan": _unary("atan", math.atan),
            "ceil": _unary("ceil", lambda x: float(math.ceil(x)) if math.isfinite(x) else x),
            "cosh": _unary("cosh", math.cosh),
            "cos": _unary("cos", math.cos),
            "deg": deg,
            "exp": _unary("exp", math.exp),
            "floor": _unary("floor", lambda x: float(math.floor(x)) if math.isfinite(x) else x),
            "fmod": fmod,
            "frexp": frexp,
            "ldexp": ldexp,
            "log10": _unary("log10", lambda x: _log(x, math.log10)),
            "log": _unary("log", lambda x: _log(x, math.log)),
            "max": maximum,
            "min": minimum,
            "modf": modf,
            "pow": _pow,
            "rad": rad,
            "random": self.random,
            "randomseed": self.randomseed,
            "sinh": _unary("sinh", math.sinh),
            "sin": _unary("sin", math.sin),
            "sqrt": _unary("sqrt", math.sqrt),
            "tanh": _unary("tanh", math.tanh),
            "tan": _unary("tan", math.tan),
            "pi": PI,
            "huge": _INF,
        }