# luacore

Building blocks of a Lua 5.2 runtime, usable from plain Python.

## Modules

- `luacore.opcodes`: the virtual-machine instruction set. `OpCode` has
  methods that report its argument modes (`op_mode`, `b_mode`, `c_mode`,
  `sets_a`, `is_test`). `Instruction` is an immutable 32-bit word. It has
  the properties `opcode`, `a`, `b`, `c`, `bx`, `sbx` and `ax`, and the
  methods `with_opcode`, `with_a`, `with_b`, `with_c`, `with_bx`,
  `with_sbx` and `with_ax`, each of which returns a new word. The module
  also has the constructors `create_abc`, `create_abx`, `create_asbx` and
  `create_ax`, and the RK operand helpers `is_k`, `index_k` and `rk_as_k`.
- `luacore.strtable`: `lua_hash` and a `StringTable`. The table interns
  short strings as `LuaString` objects and doubles its bucket count as it
  fills. Strings longer than `max_short_len` come back as separate long
  strings and are not interned.
- `luacore.objects`:
  - type tags (`LuaType`, `novariant`, `collectable`);
  - the "floating point byte" encoding (`int2fb`, `fb2int`) and `ceillog2`;
  - IEEE number arithmetic (`arith` with `ArithOp`) and `hexavalue`;
  - string-to-number conversion with `str2number`, which accepts
    hexadecimal numerals with `p` exponents and rejects `inf` and `nan`;
  - `format_message` (`%d %c %f %p %s %%` only) and `chunkid`;
  - the base exception `LuaError`.
- `luacore.patterns`: Lua pattern matching with `find`, `match`, `gmatch`
  and `gsub`. Bad patterns raise `PatternError`, which is a subclass of
  `LuaError`.
- `luacore.strlib`: the rest of the string library: `posrelat`, `str_len`,
  `sub`, `byte`, `char`, `rep`, `reverse`, `lower`, `upper`, `quote` and
  `format_string`.
- `luacore.oslib`: the OS library: `clock`, `date`, `time`, `difftime`,
  `getenv`, `remove`, `rename`, `tmpname`, `execute`, `exit` and
  `setlocale`. `remove` and `rename` return `True` on success. On failure
  they return `(None, message, errno)`.

## Example

```python
from luacore import patterns, strlib
from luacore.opcodes import OpCode, create_abc

patterns.find("hello world", "o w")          # (5, 7)
patterns.match("key=value", "(%w+)=(%w+)")   # ("key", "value")
patterns.gsub("hello world", "o", "0")       # ("hell0 w0rld", 2)
list(patterns.gmatch("one two", "%a+"))      # [("one",), ("two",)]
strlib.sub("hello", 2, -2)                   # "ell"
strlib.format_string("%5.2f|%q", 3.14159, 'a"b')   # ' 3.14|"a\\"b"'

ins = create_abc(OpCode.ADD, 1, 2, 3)
ins.opcode, ins.a, ins.b, ins.c              # (OpCode.ADD, 1, 2, 3)
```

Positions are 1-based, as in Lua. `find` returns the start and the end,
followed by any captures. `match` and `gmatch` give tuples of captures, or
the whole match when the pattern has no captures.

Errors are raised as exceptions: `PatternError` for malformed patterns and
`LuaError` for other runtime errors. `oslib.exit` raises `SystemExit`.

## What it does not do

These are separate pieces, not a complete runtime. The package has no
lexer, parser, compiler or virtual machine. It cannot run Lua source or
bytecode, and it provides no command-line interpreter. It also does not
dump functions to binary chunks.

## Tests

```
pip install -e .[test]
pytest
```