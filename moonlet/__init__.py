"""Building blocks of a small Lua interpreter: value helpers, memory
accounting, collector marks, opcodes, a lexer and standard libraries."""

__version__ = "0.1.0"

__all__ = [
    "objects",
    "memory",
    "marks",
    "opcodes",
    "mathlib",
    "lexer",
    "oslib",
    "iolib",
    "loadlib",
]