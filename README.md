# moonkit

Pure-Python building blocks for a small scripting-language runtime. The package has no third-party dependencies.

## Modules

### `moonkit.opcodes`

This module describes the 32-bit instruction format.

- Enums: `OpCode` has 47 opcodes, `OpMode` is one of ABC, ABX, ASBX or AX, and `OpArgMask` is one of N, U, R or K.
- Field accessors: `get_opcode`/`set_opcode`, `get_a`/`set_a`, `get_b`/`set_b`, `get_c`/`set_c`, `get_bx`/`set_bx`, `get_sbx`/`set_sbx` and `get_ax`/`set_ax`.
  - The setters return a new instruction value.
  - `get_opcode` raises `ValueError` for an unknown opcode.
- Constructors: `create_abc`, `create_abx` and `create_ax`.
- RK operand helpers: `is_k`, `index_k` and `rk_ask`.
- Per-opcode properties: `get_op_mode`, `get_b_mode`, `get_c_mode`, `test_a_mode` (the instruction sets register A) and `test_t_mode` (the instruction is a test).
- The tables behind these are `OPMODES` and `OPNAMES`. The module also defines the size, position and limit constants, such as `MAXARG_SBX` and `BITRK`.

### `moonkit.strings`

- `lua_hash(data, seed)` is a seeded string hash. It samples at most about 32 bytes of the input.
- `LuaString` is a string object. Short strings are interned, so compare them by identity.
- `long_strings_equal` compares two long strings.
- `StringTable` interns strings of up to 40 bytes and creates longer strings fresh.
  - `new_lstr` creates or reuses a string.
  - `new` first checks a small cache of recent strings.
  - `hash_long` computes a long string's hash once.
  - The table also has `resize`, `remove` and `clear_cache`.
  - It supports `len()` and `in`.

### `moonkit.values`

- `TypeTag` holds the basic type tags and their variants:
  - integer and float numbers;
  - short and long strings;
  - the kinds of function.
- Tag helpers: `novariant`, `mark_collectable`, `is_collectable` and `tag_of(value)`. The last one maps a Python value to its tag.
- Other helpers: `is_false`, where only `None` and `False` are false, `lmod` and `sizenode`.
- Function-prototype records: `Proto`, `LocVar` and `Upvaldesc`.

### `moonkit.numbers`

- `str_to_number` converts decimal and hexadecimal numerals to numbers.
  - Numerals with a hexadecimal binary exponent are accepted.
  - The result is an integer when the numeral is one, otherwise a float.
  - Text that is not a numeral, including `inf` and `nan`, raises `ValueError`.
- `number_to_string` formats a float with `%.14g`. It keeps a `.0` on floats that look like integers.
- `arith(op, a, b)` with `ArithOp` does raw arithmetic and bitwise operations.
  - Integers are 64-bit two's-complement values and wrap on overflow.
  - Numeric strings are coerced to numbers.
  - Operands that cannot take part raise `TypeError`.
  - Integer division or modulo by zero raises `ZeroDivisionError`.
- Other helpers:
  - `int2fb` and `fb2int` encode and decode a "floating point byte";
  - `ceillog2`;
  - `hexavalue`;
  - `utf8_escape`, which encodes a code point up to 0x10FFFF as UTF-8 bytes.

### `moonkit.formatting`

- `format_message(fmt, *args)` supports `%s %c %d %I %f %p %U %%`. An unknown directive raises `ValueError`, and missing arguments raise `TypeError`.
- `chunk_id(source, bufflen=60)` builds the short source names used in diagnostics:
  - `=name` is shown literally.
  - `@file` is shown as a file name, with the front cut off when it is too long.
  - Anything else is shown as `[string "first line..."]`.

### `moonkit.oslib`

- `clock()` returns processor time.
- `date(fmt="%c", t=None)`:
  - a leading `!` means UTC;
  - the format `"*t"` returns a dict of fields, where `wday` is 1 for Sunday;
  - invalid conversion specifiers raise `ValueError`.
- `time(fields=None)` returns the current time, or converts a dict of local-time fields. The dict is updated in place with the normalised values.
- `difftime(t1, t2)` returns the seconds from `t2` to `t1`.
- `execute(cmd=None)` runs a shell command.
  - It returns `(succeeded, "exit" | "signal", code)`.
  - With no command it returns whether a shell is available.
- `getenv`, `remove` and `rename`. `remove` and `rename` raise `OSError` on failure.
- `tmpname()` creates an empty temporary file and returns its name.
- `setlocale(locale_name=None, category="all")` returns the locale name, or `None` when the request cannot be honoured.
- `exit(status=None, close=False)` raises `SystemExit`.

### `moonkit.loader`

- `search_path(name, path, sep=".", dirsep=os.sep)` returns the first readable file built from the `;`-separated templates. If none is readable, it raises `FileNotFoundError` listing every file tried.
- `build_path(envname, default, environ=None, noenv=False)` reads the versioned variable, such as `LUA_PATH_5_3`, before the plain one, here `LUA_PATH`. In the value, `;;` stands for the default path.
- `open_function_names(modname)` gives the open-function names to look for in a native library, in the order they are tried.
- `Package` holds:
  - `path` and `cpath`;
  - the `preload` and `loaded` dicts;
  - the `searchers` list: `searcher_preload`, `searcher_lua`, `searcher_c` and `searcher_croot`;
  - a `require(name)` method, which loads a module once and caches its value in `loaded`.
- A module that no searcher finds raises `ModuleNotFound`, a subclass of `ImportError`. Its message lists what each searcher tried.

## Example

```python
from moonkit.opcodes import OpCode, create_abc, get_opcode, get_b
from moonkit.numbers import str_to_number, number_to_string
from moonkit.formatting import format_message, chunk_id
from moonkit.loader import Package

ins = create_abc(OpCode.ADD, 0, 1, 2)
assert get_opcode(ins) is OpCode.ADD
assert get_b(ins) == 1

assert str_to_number("0x10") == 16
assert number_to_string(3.0) == "3.0"

assert format_message("%s:%d: %s", "file.lua", 3, "oops") == "file.lua:3: oops"
assert chunk_id("@script.lua") == "script.lua"

pkg = Package(path="", cpath="")
pkg.preload["greet"] = lambda name, data: {"hello": name}
assert pkg.require("greet") == {"hello": "greet"}
```

## What the package does not do

There is no lexer, parser or compiler, and no virtual machine that executes instructions. `moonkit.opcodes` only encodes and decodes them. There is no table implementation or garbage collector, and no interpreter command.

`Package` does not run script files or load native libraries on its own. Pass a `file_loader` and a `library_loader` to make `searcher_lua` and `searcher_c`/`searcher_croot` usable. Without them, a file that is found leads to an `ImportError` that explains no loader is configured.

## Tests

The test suite uses pytest and hypothesis. Both are listed in the `test` extra.