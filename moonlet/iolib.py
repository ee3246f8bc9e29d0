"""The standard input/output library: file handles and the ``io`` table."""

from __future__ import annotations

import errno as _errno
import math
import os as _os
import subprocess as _subprocess
import sys
import tempfile as _tempfile
from enum import Enum
from typing import IO, Iterator

from moonlet.objects import NUMBER_FMT

__all__ = ["LuaFile", "IOLibrary", "LUAL_BUFFERSIZE"]

LUAL_BUFFERSIZE = 8192
_WHITESPACE = b" \t\n\v\f\r"
_DIGITS = b"0123456789"

Failure = tuple[None, str, int]


class _Kind(Enum):
    FILE = "file"
    PIPE = "pipe"
    STD = "std"


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


def _failure(exc: OSError, filename: str | None = None) -> Failure:
    code = getattr(exc, "errno", None) or 0
    message = getattr(exc, "strerror", None) or str(exc)
    if filename is not None:
        message = f"{filename}: {message}"
    return None, message, code


def _python_mode(mode: str) -> str:
    if not mode or mode[0] not in "rwa" or any(c not in "+b" for c in mode[1:]):
        raise OSError(_errno.EINVAL, _os.strerror(_errno.EINVAL))
    return mode[0] + ("+" if "+" in mode else "") + "b"


def _open_handle(filename: str, mode: str) -> IO[bytes]:
    return open(filename, _python_mode(mode))  # noqa: SIM115


class LuaFile:
    """A file handle: a regular file, a pipe or a standard stream."""

    def __init__(
        self,
        handle: IO[bytes],
        kind: _Kind = _Kind.FILE,
        process: _subprocess.Popen | None = None,
    ) -> None:
        self._handle: IO[bytes] | None = handle
        self._kind = kind
        self._process = process
        self._pending = b""
        self._vbuf = "full"

    # -- state ----------------------------------------------------------------

    @property
    def closed(self) -> bool:
        return self._handle is None

    def _check(self) -> IO[bytes]:
        if self._handle is None:
            raise ValueError("attempt to use a closed file")
        return self._handle

    def __str__(self) -> str:
        if self._handle is None:
            return "file (closed)"
        return f"file (0x{id(self._handle):x})"

    __repr__ = __str__

    def __enter__(self) -> LuaFile:
        return self

    def __exit__(self, *exc_info: object) -> None:
        if self._handle is not None and self._kind is not _Kind.STD:
            self.close()

    # -- low-level reading ----------------------------------------------------

    def _read_bytes(self, n: int) -> bytes:
        handle = self._check()
        data, self._pending = self._pending[:n], self._pending[n:]
        if len(data) < n:
            data += handle.read(n - len(data)) or b""
        return data

    def _read_all(self) -> bytes:
        handle = self._check()
        data, self._pending = self._pending, b""
        return data + (handle.read() or b"")

    def _read_raw_line(self) -> bytes:
        handle = self._check()
        data, self._pending = self._pending, b""
        cut = data.find(b"\n")
        if cut >= 0:
            self._pending = data[cut + 1 :]
            return data[: cut + 1]
        return data + (handle.readline() or b"")

    def _unget(self, c: bytes) -> None:
        self._pending = c + self._pending

    def _drop_pending(self) -> None:
        handle = self._check()
        if self._pending and handle.seekable():
            handle.seek(-len(self._pending), _os.SEEK_CUR)
            self._pending = b""

    # -- read formats ---------------------------------------------------------

    def _read_line(self) -> str | None:
        line = self._read_raw_line()
        if not line:
            return None
        if line.endswith(b"\n"):
            line = line[:-1]
        return line.decode("latin-1")

    def _test_eof(self) -> str | None:
        c = self._read_bytes(1)
        if not c:
            return None
        self._unget(c)
        return ""

    def _read_chars(self, n: int) -> str | None:
        data = self._read_all() if n < 0 else self._read_bytes(n)
        return data.decode("latin-1") if data else None

    def _read_number(self) -> float | None:
        text = bytearray()
        c = self._read_bytes(1)
        while c and c in _WHITESPACE:
            c = self._read_bytes(1)

        def accept(chars: bytes) -> bool:
            nonlocal c
            if c and c in chars:
                text.extend(c)
                c = self._read_bytes(1)
                return True
            return False

        def accept_many(chars: bytes) -> bool:
            found = False
            while accept(chars):
                found = True
            return found

        accept(b"+-")
        digits = accept_many(_DIGITS)
        if accept(b"."):
            digits = accept_many(_DIGITS) or digits
        if digits and accept(b"eE"):
            accept(b"+-")
            accept_many(_DIGITS)
        if c:
            self._unget(c)
        try:
            return float(text.decode("ascii"))
        except ValueError:
            return None

    def _read(self, formats: tuple[object, ...]) -> object:
        results: list[str | float | None] = []
        try:
            if not formats:
                results.append(self._read_line())
            for index, fmt in enumerate(formats, start=1):
                if isinstance(fmt, (int, float)) and not isinstance(fmt, bool):
                    n = int(fmt) if math.isfinite(fmt) else -1
                    value = self._test_eof() if n == 0 else self._read_chars(n)
                elif isinstance(fmt, str) and fmt.startswith("*"):
                    code = fmt[1:2]
                    if code == "n":
                        value = self._read_number()
                    elif code == "l":
                        value = self._read_line()
                    elif code == "a":
                        value = self._read_all().decode("latin-1")
                    else:
                        raise ValueError(f"bad argument #{index} to 'read' (invalid format)")
                else:
                    raise ValueError(f"bad argument #{index} to 'read' (invalid option)")
                results.append(value)
                if value is None:
                    break
        except OSError as exc:
            return _failure(exc)
        return results[0] if len(results) == 1 else tuple(results)

    def _write(self, values: tuple[object, ...]) -> bool | Failure:
        handle = self._check()
        try:
            self._drop_pending()
            for index, value in enumerate(values, start=1):
                if isinstance(value, (int, float)) and not isinstance(value, bool):
                    data = (NUMBER_FMT % value).encode("ascii")
                elif isinstance(value, str):
                    data = value.encode("latin-1")
                elif isinstance(value, (bytes, bytearray)):
                    data = bytes(value)
                else:
                    raise TypeError(
                        f"bad argument #{index} to 'write' "
                        f"(string expected, got {_type_name(value)})"
                    )
                handle.write(data)
                if self._vbuf == "no" or (self._vbuf == "line" and b"\n" in data):
                    handle.flush()
        except OSError as exc:
            return _failure(exc)
        return True

    def _lines(self, close_at_end: bool) -> Iterator[str]:
        while True:
            if self._handle is None:
                raise ValueError("file is already closed")
            line = self._read_line()
            if line is None:
                if close_at_end:
                    self.close()
                return
            yield line

    # -- public methods -------------------------------------------------------

    def read(self, *args: object) -> object:
        """Read by formats: ``*l`` a line, ``*n`` a number, ``*a`` the rest,
        or a count of characters (0 tests for end of file).

        With no arguments one line is read. One format gives one value,
        several give a tuple; a value that cannot be read is None and ends
        the reading.
        """
        self._check()
        return self._read(args)

    def write(self, *args: object) -> bool | Failure:
        """Write strings and numbers; returns True or ``(None, msg, errno)``."""
        return self._write(args)

    def lines(self) -> Iterator[str]:
        """Iterate over the remaining lines, without closing the file."""
        self._check()
        return self._lines(close_at_end=False)

    def seek(self, whence: str = "cur", offset: int = 0) -> int | Failure:
        """Move the file position; returns the new position from the start."""
        handle = self._check()
        modes = {"set": _os.SEEK_SET, "cur": _os.SEEK_CUR, "end": _os.SEEK_END}
        if not isinstance(whence, str):
            raise TypeError(
                f"bad argument #1 to 'seek' (string expected, got {_type_name(whence)})"
            )
        if whence not in modes:
            raise ValueError(f"bad argument #1 to 'seek' (invalid option '{whence}')")
        offset = int(offset)
        try:
            if whence == "cur":
                offset -= len(self._pending)
            self._pending = b""
            return handle.seek(offset, modes[whence])
        except OSError as exc:
            return _failure(exc)

    def setvbuf(self, mode: str | None = None, size: int = LUAL_BUFFERSIZE) -> bool:
        """Choose when written data is flushed: ``no``, ``full`` or ``line``."""
        self._check()
        if mode is None:
            raise TypeError("bad argument #1 to 'setvbuf' (string expected, got no value)")
        if mode not in ("no", "full", "line"):
            raise ValueError(f"bad argument #1 to 'setvbuf' (invalid option '{mode}')")
        if int(size) < 0:
            raise ValueError("bad argument #2 to 'setvbuf' (invalid size)")
        self._vbuf = mode
        return True

    def flush(self) -> bool | Failure:
        """Write out buffered data."""
        handle = self._check()
        try:
            handle.flush()
        except OSError as exc:
            return _failure(exc)
        return True

    def close(self) -> bool | Failure | tuple[None, str]:
        """Close the file. Standard streams refuse to close."""
        handle = self._check()
        if self._kind is _Kind.STD:
            return None, "cannot close standard file"
        self._handle = None
        self._pending = b""
        try:
            handle.close()
            if self._process is not None:
                self._process.wait()
        except OSError as exc:
            return _failure(exc)
        return True


def _std_handle(stream: object) -> IO[bytes]:
    return getattr(stream, "buffer", stream)  # type: ignore[return-value]


class IOLibrary:
    """The ``io`` table, with its default input and output files."""

    def __init__(
        self,
        stdin: IO[bytes] | None = None,
        stdout: IO[bytes] | None = None,
        stderr: IO[bytes] | None = None,
    ) -> None:
        self.stdin = LuaFile(stdin if stdin is not None else _std_handle(sys.stdin), _Kind.STD)
        self.stdout = LuaFile(
            stdout if stdout is not None else _std_handle(sys.stdout), _Kind.STD
        )
        self.stderr = LuaFile(
            stderr if stderr is not None else _std_handle(sys.stderr), _Kind.STD
        )
        self._input = self.stdin
        self._output = self.stdout

    def open(self, filename: str, mode: str = "r") -> LuaFile | Failure:
        """Open a file in a C-style mode (``r``, ``w``, ``a``, with ``+``/``b``)."""
        try:
            return LuaFile(_open_handle(filename, mode))
        except OSError as exc:
            return _failure(exc, filename)

    def popen(self, prog: str, mode: str = "r") -> LuaFile | Failure:
        """Start a shell command and connect to its output (``r``) or input (``w``)."""
        if not mode or mode[0] not in "rw":
            return _failure(OSError(_errno.EINVAL, _os.strerror(_errno.EINVAL)), prog)
        reading = mode[0] == "r"
        try:
            process = _subprocess.Popen(
                prog,
                shell=True,
                stdout=_subprocess.PIPE if reading else None,
                stdin=None if reading else _subprocess.PIPE,
            )
        except OSError as exc:
            return _failure(exc, prog)
        handle = process.stdout if reading else process.stdin
        assert handle is not None
        return LuaFile(handle, _Kind.PIPE, process)

    def tmpfile(self) -> LuaFile | Failure:
        """Open an anonymous temporary file for update."""
        try:
            return LuaFile(_tempfile.TemporaryFile("w+b"))
        except OSError as exc:
            return _failure(exc)

    def _iofile(self, file: object, mode: str, fname: str) -> LuaFile | None:
        if file is None:
            return None
        if isinstance(file, LuaFile):
            file._check()
            return file
        if isinstance(file, (str, int, float)) and not isinstance(file, bool):
            filename = file if isinstance(file, str) else NUMBER_FMT % file
            try:
                return LuaFile(_open_handle(filename, mode))
            except OSError as exc:
                raise OSError(
                    exc.errno, f"bad argument #1 to '{fname}' ({filename}: {exc.strerror})"
                ) from exc
        raise TypeError(
            f"bad argument #1 to '{fname}' (FILE* expected, got {_type_name(file)})"
        )

    def input(self, file: object = None) -> LuaFile:
        """Set the default input to a file name or handle; return it."""
        chosen = self._iofile(file, "r", "input")
        if chosen is not None:
            self._input = chosen
        return self._input

    def output(self, file: object = None) -> LuaFile:
        """Set the default output to a file name or handle; return it."""
        chosen = self._iofile(file, "w", "output")
        if chosen is not None:
            self._output = chosen
        return self._output

    @staticmethod
    def _standard(file: LuaFile, which: str) -> LuaFile:
        if file.closed:
            raise ValueError(f"standard {which} file is closed")
        return file

    def read(self, *args: object) -> object:
        """Read from the default input; see LuaFile.read."""
        return self._standard(self._input, "input")._read(args)

    def write(self, *args: object) -> bool | Failure:
        """Write to the default output."""
        return self._standard(self._output, "output")._write(args)

    def lines(self, filename: str | None = None) -> Iterator[str]:
        """Iterate over the lines of the default input, or of a named file
        which is closed when the lines run out."""
        if filename is None:
            return self._input.lines()
        try:
            file = LuaFile(_open_handle(filename, "r"))
        except OSError as exc:
            raise OSError(
                exc.errno, f"bad argument #1 to 'lines' ({filename}: {exc.strerror})"
            ) from exc
        return file._lines(close_at_end=True)

    def close(self, file: LuaFile | None = None) -> bool | Failure | tuple[None, str]:
        """Close a file, or the default output."""
        target = self._output if file is None else file
        if not isinstance(target, LuaFile):
            raise TypeError(
                f"bad argument #1 to 'close' (FILE* expected, got {_type_name(target)})"
            )
        return target.close()

    def flush(self) -> bool | Failure:
        """Flush the default output."""
        return self._standard(self._output, "output").flush()

    def type(self, obj: object) -> str | None:
        """``"file"``, ``"closed file"``, or None for anything else."""
        if not isinstance(obj, LuaFile):
            return None
        return "closed file" if obj.closed else "file"