"""Lexical analysis of source text into tokens."""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum
from typing import Iterator, NoReturn

from moonlet.objects import chunk_id, str2number

__all__ = [
    "FIRST_RESERVED",
    "NUM_RESERVED",
    "TOKEN_TEXTS",
    "RESERVED",
    "MAXSRC",
    "Token",
    "Lexeme",
    "LexError",
    "Lexer",
    "tokenize",
]

FIRST_RESERVED = 257
MAXSRC = 80
_MAX_INT = 2**31 - 1
_UCHAR_MAX = 255

_SPACE = " \t\n\v\f\r"
_DIGITS = "0123456789"
_ALPHA = "abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ"
_ESCAPES = {"a": "\a", "b": "\b", "f": "\f", "n": "\n", "r": "\r", "t": "\t", "v": "\v"}


class Token(IntEnum):
    """Multi-character tokens; single characters are their own code."""

    AND = FIRST_RESERVED
    BREAK = 258
    DO = 259
    ELSE = 260
    ELSEIF = 261
    END = 262
    FALSE = 263
    FOR = 264
    FUNCTION = 265
    IF = 266
    IN = 267
    LOCAL = 268
    NIL = 269
    NOT = 270
    OR = 271
    REPEAT = 272
    RETURN = 273
    THEN = 274
    TRUE = 275
    UNTIL = 276
    WHILE = 277
    CONCAT = 278
    DOTS = 279
    EQ = 280
    GE = 281
    LE = 282
    NE = 283
    NUMBER = 284
    NAME = 285
    STRING = 286
    EOS = 287


TOKEN_TEXTS: tuple[str, ...] = (
    "and", "break", "do", "else", "elseif",
    "end", "false", "for", "function", "if",
    "in", "local", "nil", "not", "or", "repeat",
    "return", "then", "true", "until", "while",
    "..", "...", "==", ">=", "<=", "~=",
    "<number>", "<name>", "<string>", "<eof>",
)

NUM_RESERVED = Token.WHILE - FIRST_RESERVED + 1

RESERVED: dict[str, Token] = {
    TOKEN_TEXTS[i]: Token(FIRST_RESERVED + i) for i in range(NUM_RESERVED)
}


def _is_digit(c: str | None) -> bool:
    return c is not None and c in _DIGITS


def _is_alpha(c: str | None) -> bool:
    return c is not None and c in _ALPHA


def _is_alnum(c: str | None) -> bool:
    return _is_alpha(c) or _is_digit(c)


def _is_newline(c: str | None) -> bool:
    return c == "\n" or c == "\r"


@dataclass(frozen=True)
class Lexeme:
    """A token code with its semantic value (number or string, if any)."""

    token: int
    value: float | str | None = None


class LexError(Exception):
    """A lexical or syntax error, with its full message."""

    def __init__(self, message: str, line: int) -> None:
        super().__init__(message)
        self.message = message
        self.line = line


class Lexer:
    """Scans source text one token at a time, with one token of look-ahead."""

    def __init__(self, source: str | bytes, chunkname: str | None = None) -> None:
        if isinstance(source, bytes):
            source = source.decode("latin-1")
        self._text = source
        self._pos = 0
        self.source = source if chunkname is None else chunkname
        self.linenumber = 1
        self.lastline = 1
        self.t = Lexeme(Token.EOS)
        self.ahead = Lexeme(Token.EOS)
        self._buff: list[str] = []
        self.current: str | None = None
        self._advance()

    # -- character handling -------------------------------------------------

    def _advance(self) -> None:
        if self._pos < len(self._text):
            self.current = self._text[self._pos]
            self._pos += 1
        else:
            self.current = None

    def _save(self, c: str) -> None:
        self._buff.append(c)

    def _save_and_next(self) -> None:
        assert self.current is not None
        self._save(self.current)
        self._advance()

    def _check_next(self, chars: str) -> bool:
        if self.current is None or self.current not in chars:
            return False
        self._save_and_next()
        return True

    def _inc_line(self) -> None:
        old = self.current
        self._advance()
        if _is_newline(self.current) and self.current != old:
            self._advance()
        self.linenumber += 1
        if self.linenumber >= _MAX_INT:
            self.syntax_error("chunk has too many lines")

    # -- errors -------------------------------------------------------------

    def token2str(self, token: int) -> str:
        """Printable form of a token code."""
        if token < FIRST_RESERVED:
            if token < 32 or token == 127:
                return f"char({token})"
            return chr(token)
        return TOKEN_TEXTS[token - FIRST_RESERVED]

    def _txt_token(self, token: int) -> str:
        if token in (Token.NAME, Token.STRING, Token.NUMBER):
            return "".join(self._buff)
        return self.token2str(token)

    def lex_error(self, msg: str, token: int = 0) -> NoReturn:
        """Raise LexError located at the current line, near ``token``."""
        message = f"{chunk_id(self.source, MAXSRC)}:{self.linenumber}: {msg}"
        if token:
            message = f"{message} near '{self._txt_token(token)}'"
        raise LexError(message, self.linenumber)

    def syntax_error(self, msg: str) -> NoReturn:
        """Raise LexError near the current token."""
        self.lex_error(msg, self.t.token)

    # -- scanning -----------------------------------------------------------

    def _read_numeral(self) -> float:
        while True:
            self._save_and_next()
            if not (_is_digit(self.current) or self.current == "."):
                break
        if self._check_next("Ee"):
            self._check_next("+-")
        while _is_alnum(self.current) or self.current == "_":
            self._save_and_next()
        value = str2number("".join(self._buff))
        if value is None:
            self.lex_error("malformed number", Token.NUMBER)
        return value

    def _skip_sep(self) -> int:
        count = 0
        s = self.current
        self._save_and_next()
        while self.current == "=":
            self._save_and_next()
            count += 1
        return count if self.current == s else -count - 1

    def _read_long_string(self, sep: int, keep: bool) -> str | None:
        self._save_and_next()
        if _is_newline(self.current):
            self._inc_line()
        while True:
            c = self.current
            if c is None:
                self.lex_error(
                    "unfinished long string" if keep else "unfinished long comment",
                    Token.EOS,
                )
            elif c == "]":
                if self._skip_sep() == sep:
                    self._save_and_next()
                    break
            elif _is_newline(c):
                self._save("\n")
                self._inc_line()
                if not keep:
                    self._buff.clear()
            elif keep:
                self._save_and_next()
            else:
                self._advance()
        if not keep:
            return None
        edge = 2 + sep
        return "".join(self._buff[edge : len(self._buff) - edge])

    def _read_string(self, delimiter: str) -> str:
        self._save_and_next()
        while self.current != delimiter:
            c = self.current
            if c is None:
                self.lex_error("unfinished string", Token.EOS)
            if _is_newline(c):
                self.lex_error("unfinished string", Token.STRING)
            if c != "\\":
                self._save_and_next()
                continue
            self._advance()
            c = self.current
            if c is None:
                continue
            if c in _ESCAPES:
                self._save(_ESCAPES[c])
                self._advance()
            elif _is_newline(c):
                self._save("\n")
                self._inc_line()
            elif not _is_digit(c):
                self._save_and_next()
            else:
                code = 0
                for _ in range(3):
                    if not _is_digit(self.current):
                        break
                    code = 10 * code + int(self.current)  # type: ignore[arg-type]
                    self._advance()
                if code > _UCHAR_MAX:
                    self.lex_error("escape sequence too large", Token.STRING)
                self._save(chr(code))
        self._save_and_next()
        return "".join(self._buff[1:-1])

    def _llex(self) -> Lexeme:
        self._buff.clear()
        while True:
            c = self.current
            if c is None:
                return Lexeme(Token.EOS)
            if _is_newline(c):
                self._inc_line()
                continue
            if c == "-":
                self._advance()
                if self.current != "-":
                    return Lexeme(ord("-"))
                self._advance()
                if self.current == "[":
                    sep = self._skip_sep()
                    self._buff.clear()
                    if sep >= 0:
                        self._read_long_string(sep, keep=False)
                        self._buff.clear()
                        continue
                while not _is_newline(self.current) and self.current is not None:
                    self._advance()
                continue
            if c == "[":
                sep = self._skip_sep()
                if sep >= 0:
                    return Lexeme(Token.STRING, self._read_long_string(sep, keep=True))
                if sep == -1:
                    return Lexeme(ord("["))
                self.lex_error("invalid long string delimiter", Token.STRING)
            if c in "=<>~":
                self._advance()
                if self.current != "=":
                    return Lexeme(ord(c))
                self._advance()
                return Lexeme({"=": Token.EQ, "<": Token.LE, ">": Token.GE, "~": Token.NE}[c])
            if c in "\"'":
                return Lexeme(Token.STRING, self._read_string(c))
            if c == ".":
                self._save_and_next()
                if self._check_next("."):
                    if self._check_next("."):
                        return Lexeme(Token.DOTS)
                    return Lexeme(Token.CONCAT)
                if not _is_digit(self.current):
                    return Lexeme(ord("."))
                return Lexeme(Token.NUMBER, self._read_numeral())
            if c in _SPACE:
                self._advance()
                continue
            if _is_digit(c):
                return Lexeme(Token.NUMBER, self._read_numeral())
            if _is_alpha(c) or c == "_":
                while True:
                    self._save_and_next()
                    if not (_is_alnum(self.current) or self.current == "_"):
                        break
                word = "".join(self._buff)
                reserved = RESERVED.get(word)
                if reserved is not None:
                    return Lexeme(reserved)
                return Lexeme(Token.NAME, word)
            self._advance()
            return Lexeme(ord(c))

    def next(self) -> Lexeme:
        """Advance to the next token and return it."""
        self.lastline = self.linenumber
        if self.ahead.token != Token.EOS:
            self.t = self.ahead
            self.ahead = Lexeme(Token.EOS)
        else:
            self.t = self._llex()
        return self.t

    def lookahead(self) -> Lexeme:
        """Scan the token after the current one without consuming it."""
        if self.ahead.token != Token.EOS:
            raise RuntimeError("a look-ahead token is already pending")
        self.ahead = self._llex()
        return self.ahead


def tokenize(source: str | bytes, chunkname: str | None = None) -> Iterator[Lexeme]:
    """Yield the tokens of ``source`` up to (not including) end of stream."""
    lexer = Lexer(source, chunkname)
    while True:
        lexeme = lexer.next()
        if lexeme.token == Token.EOS:
            return
        yield lexeme