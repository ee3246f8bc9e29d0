"""The standard operating-system library: time, dates, environment,
files and processes."""

from __future__ import annotations

import errno as _errno
import locale as _locale
import os as _os
import shutil as _shutil
import subprocess as _subprocess
import tempfile as _tempfile
import time as _time
from collections.abc import Mapping

from moonlet.objects import NUMBER_FMT, str2number

__all__ = [
    "clock",
    "date",
    "time",
    "difftime",
    "getenv",
    "remove",
    "rename",
    "tmpname",
    "execute",
    "setlocale",
    "exit",
]

_CATEGORIES = {
    "all": _locale.LC_ALL,
    "collate": _locale.LC_COLLATE,
    "ctype": _locale.LC_CTYPE,
    "monetary": _locale.LC_MONETARY,
    "numeric": _locale.LC_NUMERIC,
    "time": _locale.LC_TIME,
}


def _type_name(value: object) -> str:
    if value is None:
        return "nil"
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, (int, float)):
        return "number"
    if isinstance(value, str):
        return "string"
    if isinstance(value, Mapping):
        return "table"
    return type(value).__name__


def _to_number(value: object) -> float | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        return str2number(value)
    return None


def _check_number(value: object, index: int, fname: str) -> float:
    number = _to_number(value)
    if number is None:
        raise TypeError(
            f"bad argument #{index} to '{fname}' (number expected, got {_type_name(value)})"
        )
    return number


def _opt_string(value: object, index: int, fname: str) -> str | None:
    if value is None or isinstance(value, str):
        return value
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return NUMBER_FMT % value
    raise TypeError(
        f"bad argument #{index} to '{fname}' (string expected, got {_type_name(value)})"
    )


def _failure(exc: OSError, filename: str) -> tuple[None, str, int]:
    code = exc.errno or 0
    message = exc.strerror or str(exc)
    return None, f"{filename}: {message}", code


def clock() -> float:
    """Processor time used by the program, in seconds."""
    return _time.process_time()


def _strftime(conversion: str, stm: _time.struct_time) -> str:
    try:
        return _time.strftime(conversion, stm)
    except ValueError:
        return ""


def date(fmt: str = "%c", t: float | None = None) -> str | dict[str, object] | None:
    """Format a time.

    A leading ``!`` selects UTC. ``*t`` returns a table with the fields
    year, month, day, hour, min, sec, wday, yday and isdst. Returns None
    if the time cannot be represented.
    """
    fmt = _opt_string(fmt, 1, "date") or "%c"
    seconds = int(_time.time()) if t is None else int(_check_number(t, 2, "date"))
    utc = fmt.startswith("!")
    if utc:
        fmt = fmt[1:]
    try:
        stm = _time.gmtime(seconds) if utc else _time.localtime(seconds)
    except (OverflowError, OSError, ValueError):
        return None
    if fmt == "*t":
        fields: dict[str, object] = {
            "sec": stm.tm_sec,
            "min": stm.tm_min,
            "hour": stm.tm_hour,
            "day": stm.tm_mday,
            "month": stm.tm_mon,
            "year": stm.tm_year,
            "wday": (stm.tm_wday + 1) % 7 + 1,
            "yday": stm.tm_yday,
        }
        if stm.tm_isdst >= 0:
            fields["isdst"] = bool(stm.tm_isdst)
        return fields
    out: list[str] = []
    chars = iter(fmt)
    for ch in chars:
        if ch != "%":
            out.append(ch)
            continue
        spec = next(chars, None)
        if spec is None:
            out.append("%")
            break
        out.append(_strftime("%" + spec, stm))
    return "".join(out)


def time(table: Mapping[str, object] | None = None) -> float | None:
    """Current time, or the time described by a date table.

    Missing ``sec`` and ``min`` default to 0 and ``hour`` to 12; ``day``,
    ``month`` and ``year`` are required. Returns None if the date cannot
    be represented.
    """
    if table is None:
        return float(int(_time.time()))
    if not isinstance(table, Mapping):
        raise TypeError(
            f"bad argument #1 to 'time' (table expected, got {_type_name(table)})"
        )

    def field(key: str, default: int | None) -> int:
        number = _to_number(table.get(key))
        if number is None:
            if default is None:
                raise ValueError(f"field '{key}' missing in date table")
            return default
        return int(number)

    sec = field("sec", 0)
    minute = field("min", 0)
    hour = field("hour", 12)
    day = field("day", None)
    month = field("month", None)
    year = field("year", None)
    flag = table.get("isdst")
    isdst = -1 if flag is None else (0 if flag is False else 1)
    try:
        result = _time.mktime((year, month, day, hour, minute, sec, 0, 0, isdst))
    except (OverflowError, ValueError):
        return None
    if result == -1:
        return None
    return float(int(result))


def difftime(t2: float, t1: float = 0) -> float:
    """Number of seconds from ``t1`` to ``t2``."""
    end = int(_check_number(t2, 1, "difftime"))
    start = int(_check_number(t1, 2, "difftime"))
    return float(end - start)


def getenv(name: str) -> str | None:
    """Value of an environment variable, or None if it is not set."""
    key = _opt_string(name, 1, "getenv")
    if key is None:
        raise TypeError("bad argument #1 to 'getenv' (string expected, got no value)")
    return _os.environ.get(key)


def remove(filename: str) -> bool | tuple[None, str, int]:
    """Delete a file or empty directory.

    Returns True, or ``(None, message, errno)`` on failure.
    """
    try:
        if _os.path.isdir(filename) and not _os.path.islink(filename):
            _os.rmdir(filename)
        else:
            _os.remove(filename)
    except OSError as exc:
        return _failure(exc, filename)
    return True


def rename(src: str, dst: str) -> bool | tuple[None, str, int]:
    """Rename a file, replacing ``dst`` if it exists.

    Returns True, or ``(None, message, errno)`` on failure.
    """
    try:
        _os.replace(src, dst)
    except OSError as exc:
        return _failure(exc, src)
    return True


def tmpname() -> str:
    """Create a new empty temporary file and return its name."""
    try:
        fd, name = _tempfile.mkstemp(prefix="lua_")
    except OSError as exc:
        raise OSError(exc.errno, "unable to generate a unique filename") from exc
    _os.close(fd)
    return name


def execute(command: str | None = None) -> int:
    """Run a shell command and return its exit status.

    Without a command, returns 1 if a shell is available and 0 otherwise.
    """
    text = _opt_string(command, 1, "execute")
    if text is None:
        if _os.name == "nt":
            return 1 if _os.environ.get("COMSPEC") else 0
        return 1 if _shutil.which("sh") else 0
    return _subprocess.run(text, shell=True, check=False).returncode


def setlocale(locale_name: str | None = None, category: str = "all") -> str | None:
    """Set or query the locale of a category.

    Returns the new locale name, or None if the request cannot be honoured.
    """
    name = _opt_string(locale_name, 1, "setlocale")
    if category not in _CATEGORIES:
        raise ValueError(f"bad argument #2 to 'setlocale' (invalid option '{category}')")
    try:
        return _locale.setlocale(_CATEGORIES[category], name)
    except _locale.Error:
        return None


def exit(code: int = 0) -> None:
    """Terminate the program with the given status."""
    status = int(_check_number(code, 1, "exit"))
    raise SystemExit(status)


_ = _errno  # errno codes are reported through OSError instances