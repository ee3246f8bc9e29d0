"""Generic helpers over interpreter values: number encodings, conversions,
raw equality, message formatting and chunk names."""

from __future__ import annotations

import re

__all__ = [
    "int2fb",
    "fb2int",
    "log2",
    "ceil_log2",
    "str2number",
    "raw_equal",
    "format_message",
    "chunk_id",
    "LUA_IDSIZE",
    "NUMBER_FMT",
]

LUA_IDSIZE = 60
NUMBER_FMT = "%.14g"

_ULONG_MAX = 2**64 - 1
_SPACE = " \t\n\v\f\r"
_DECIMAL = re.compile(r"[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?")
_SPECIAL = re.compile(r"[+-]?(?:infinity|inf|nan)", re.IGNORECASE)
_HEX = re.compile(r"[ \t\n\v\f\r]*([+-]?)(?:0[xX])?([0-9a-fA-F]+)")


def int2fb(x: int) -> int:
    """Encode a non-negative integer as a "floating point byte" (eeeeexxx)."""
    if x < 0:
        raise ValueError("int2fb expects a non-negative integer")
    e = 0
    while x >= 16:
        x = (x + 1) >> 1
        e += 1
    if x < 8:
        return x
    return ((e + 1) << 3) | (x - 8)


def fb2int(x: int) -> int:
    """Decode a "floating point byte" back to an integer."""
    e = (x >> 3) & 31
    if e == 0:
        return x
    return ((x & 7) + 8) << (e - 1)


def log2(x: int) -> int:
    """Floor of the base-2 logarithm; -1 for zero."""
    if x < 0:
        raise ValueError("log2 expects a non-negative integer")
    return x.bit_length() - 1


def ceil_log2(x: int) -> int:
    """Ceiling of the base-2 logarithm of a positive integer."""
    if x < 1:
        raise ValueError("ceil_log2 expects a positive integer")
    return log2(x - 1) + 1


def str2number(s: str) -> float | None:
    """Convert a string to a number, or return None if it is not one.

    Accepts decimal numerals with optional exponent, hexadecimal constants
    (``0x...``) and surrounding whitespace.
    """
    start = len(s) - len(s.lstrip(_SPACE))
    match = _DECIMAL.match(s, start) or _SPECIAL.match(s, start)
    if match is None:
        return None
    result = float(match.group())
    end = match.end()
    if end < len(s) and s[end] in "xX":
        hexmatch = _HEX.match(s)
        if hexmatch is None:
            return None
        value = min(int(hexmatch.group(2), 16), _ULONG_MAX)
        if hexmatch.group(1) == "-":
            value = (-value) & _ULONG_MAX
        result = float(value)
        end = hexmatch.end()
    if s[end:].lstrip(_SPACE):
        return None
    return result


def _type_name(value: object) -> str:
    if value is None:
        return "nil"
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, (int, float)):
        return "number"
    if isinstance(value, (str, bytes)):
        return "string"
    return "object"


def raw_equal(a: object, b: object) -> bool:
    """Primitive equality: same type, then value or identity."""
    kind = _type_name(a)
    if kind != _type_name(b):
        return False
    if kind == "nil":
        return True
    if kind in ("number", "boolean", "string"):
        return a == b
    return a is b


def _format_number(value: float) -> str:
    return NUMBER_FMT % value


def format_message(fmt: str, *args: object) -> str:
    """Format a message understanding only ``%d %c %f %p %s %%``.

    Any other ``%x`` sequence is copied literally.
    """
    values = iter(args)

    def take() -> object:
        try:
            return next(values)
        except StopIteration:
            raise ValueError(f"not enough arguments for format {fmt!r}") from None

    parts: list[str] = []
    pos = 0
    while True:
        e = fmt.find("%", pos)
        if e < 0:
            break
        parts.append(fmt[pos:e])
        spec = fmt[e + 1 : e + 2]
        if spec == "s":
            text = take()
            parts.append("(null)" if text is None else str(text))
        elif spec == "c":
            parts.append(chr(int(take())))  # type: ignore[arg-type]
        elif spec == "d":
            parts.append(_format_number(int(take())))  # type: ignore[arg-type]
        elif spec == "f":
            parts.append(_format_number(float(take())))  # type: ignore[arg-type]
        elif spec == "p":
            parts.append(f"0x{id(take()):x}")
        elif spec == "%":
            parts.append("%")
        elif spec == "":
            parts.append("%")
            pos = len(fmt)
            break
        else:
            parts.append("%" + spec)
        pos = e + 2
    parts.append(fmt[pos:])
    return "".join(parts)


def chunk_id(source: str, bufflen: int = LUA_IDSIZE) -> str:
    """Build a printable chunk name from a source description.

    ``=name`` is used verbatim, ``@file`` names a file (keeping its tail),
    and anything else is shown as ``[string "..."]``.
    """
    if bufflen < 1:
        raise ValueError("bufflen must be positive")
    if source.startswith("="):
        return source[1:][: bufflen - 1]
    if source.startswith("@"):
        name = source[1:]
        room = bufflen - len(" '...' ") - 1
        if room < 0:
            raise ValueError("bufflen too small for a file name")
        if len(name) > room:
            return "..." + name[len(name) - room :]
        return name
    room = bufflen - len(' [string "..."] ') - 1
    if room < 0:
        raise ValueError("bufflen too small for a string chunk")
    cut = len(source)
    for stop in "\n\r":
        idx = source.find(stop)
        if idx >= 0:
            cut = min(cut, idx)
    length = min(cut, room)
    if length < len(source):
        return '[string "' + source[:length] + '..."]'
    return '[string "' + source + '"]'