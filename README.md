# moonlet

Pieces of a small Lua interpreter, written in plain Python with no
third-party dependencies.

## What is inside

- `moonlet.objects`: value helpers. Floating-point byte encoding
  (`int2fb`, `fb2int`), integer logarithms (`log2`, `ceil_log2`),
  string-to-number conversion accepting decimal and `0x` hexadecimal
  numerals (`str2number`, which returns `None` for anything else), raw
  equality (`raw_equal`), a message formatter that understands only
  `%d %c %f %p %s %%` (`format_message`) and chunk names for error messages
  (`chunk_id`).
- `moonlet.memory`: an `Allocator` that counts the bytes in use
  (`total_bytes`), optionally capped by a limit, and raises
  `LuaMemoryError` when growing past it. `grow_size` gives the next size of
  a growing vector (doubling, at least 4, raising `OverflowError` at the
  limit) and `Allocator.check_vector` rejects vectors too big to address.
- `moonlet.marks`: the `GCState` enumeration and helpers for an object's
  mark byte (`bitmask`, `bit2mask`, `is_white`, `is_black`, `is_gray`,
  `other_white`, `is_dead`, `change_white`, `gray_to_black`,
  `current_white_bits`).
- `moonlet.opcodes`: the `OpCode`, `OpMode` and `OpArgMask` enumerations,
  instruction encoding and decoding (`create_abc`, `create_abx`,
  `create_asbx`, `get_a`, `set_sbx`, ...), RK operand helpers (`is_k`,
  `index_k`, `rk_as_k`) and per-opcode properties (`op_mode`, `b_mode`,
  `c_mode`, `sets_a`, `is_test`).
- `moonlet.mathlib`: the `math` library. Module-level `fmod`, `modf`,
  `frexp`, `ldexp`, `deg`, `rad`, `minimum` and `maximum`, and a
  `MathLibrary` with its own seeded generator for `random` and
  `randomseed`; `MathLibrary.as_table()` returns every field by name,
  including `pi` and `huge`.
- `moonlet.lexer`: a `Lexer` producing `Lexeme` objects whose `token` is a
  `Token` code or a single character's code, with one token of look-ahead
  (`Lexer.lookahead`). `tokenize` yields the lexemes of a whole chunk.
  Errors are raised as `LexError`, carrying the message and line.
- `moonlet.oslib`: the `os` library: `clock`, `date`, `time`, `difftime`,
  `getenv`, `remove`, `rename`, `tmpname`, `execute` (runs a shell
  command), `setlocale` and `exit` (raises `SystemExit`). `remove` and
  `rename` return `True` or a `(None, message, errno)` tuple.
- `moonlet.iolib`: the `io` library. `IOLibrary` holds the standard files
  and the default input and output and offers `open`, `popen`, `tmpfile`,
  `input`, `output`, `read`, `write`, `lines`, `close`, `flush` and
  `type`. `LuaFile` handles support `read` (`*l`, `*n`, `*a` or a count),
  `write`, `lines`, `seek`, `setvbuf`, `flush` and `close`, and work as
  context managers.
- `moonlet.loadlib`: the `package` library through the `Package` class:
  `search_path`, `require`, `module` and `loadlib`, with the `loaded`,
  `preload`, `loaders`, `path` and `cpath` members. `make_path`,
  `path_templates` and `func_name` build and split search paths.
  Failures raise `RequireError` or `LoadLibError`.

## Installing

```
pip install .
```

## Examples

Tokenize a chunk:

```python
from moonlet.lexer import tokenize

for lexeme in tokenize("local x = 10 -- ten", "=demo"):
    print(lexeme.token, lexeme.value)
```

Encode and decode an instruction:

```python
from moonlet.opcodes import OpCode, create_abc, get_opcode, get_b

i = create_abc(OpCode.ADD, 0, 1, 2)
assert get_opcode(i) is OpCode.ADD
assert get_b(i) == 1
```

Format an error message the way the interpreter does:

```python
from moonlet.objects import chunk_id, format_message

print(format_message("%s:%d: %s", chunk_id("@script.lua", 80), 3, "unexpected symbol"))
```

Require a preloaded module:

```python
from moonlet.loadlib import Package

package = Package(path="", cpath="")
package.preload["greeting"] = lambda name: {"hello": "world"}
assert package.require("greeting") == {"hello": "world"}
```

## What it does not do

moonlet cannot run Lua programs. It has no parser, no code generator, no
virtual machine and no garbage collector; `moonlet.marks` only describes
mark bits and collector phases. There is no command-line interpreter.
`Package.require` loads source files only through a `load_file` callable
that you supply, and `Package.loadlib` always raises `LoadLibError`
because dynamic libraries are not supported.

## Running the tests

```
pip install .[test]
pytest
```