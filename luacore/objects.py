"""Value type tags and generic helpers over numbers and strings."""

from __future__ import annotations

import math
import re
from enum import IntEnum
from typing import Optional, Union


class LuaError(Exception):
    """Error raised by the runtime helpers."""


class LuaType(IntEnum):
    """Basic type tags, plus the extra tags used for non-values."""

    NONE = -1
    NIL = 0
    BOOLEAN = 1
    LIGHTUSERDATA = 2
    NUMBER = 3
    STRING = 4
    TABLE = 5
    FUNCTION = 6
    USERDATA = 7
    THREAD = 8
    PROTO = 9
    UPVAL = 10
    DEADKEY = 11


NUMTAGS = 9
TOTALTAGS = LuaType.UPVAL + 2

VARBITS = 3 << 4
BIT_ISCOLLECTABLE = 1 << 6

# function variants
TLCL = LuaType.FUNCTION | (0 << 4)  # Lua closure
TLCF = LuaType.FUNCTION | (1 << 4)  # light C function
TCCL = LuaType.FUNCTION | (2 << 4)  # C closure

# string variants
TSHRSTR = LuaType.STRING | (0 << 4)
TLNGSTR = LuaType.STRING | (1 << 4)

IDSIZE = 60


class ArithOp(IntEnum):
    """Arithmetic operators understood by :func:`arith`."""

    ADD = 0
    SUB = 1
    MUL = 2
    DIV = 3
    MOD = 4
    POW = 5
    UNM = 6


def novariant(tag: int) -> int:
    """Strip the variant bits from a type tag."""
    return tag & 0x0F


def collectable(tag: int) -> int:
    """Mark a type tag as collectable."""
    return tag | BIT_ISCOLLECTABLE


def int2fb(x: int) -> int:
    """Encode an unsigned integer as a 'floating point byte' (eeeeexxx)."""
    x &= 0xFFFFFFFF
    if x < 8:
        return x
    e = 0
    while x >= 0x10:
        x = (x + 1) >> 1
        e += 1
    return ((e + 1) << 3) | (x - 8)


def fb2int(x: int) -> int:
    """Decode a 'floating point byte'."""
    e = (x >> 3) & 0x1F
    if e == 0:
        return x
    return ((x & 7) + 8) << (e - 1)


def ceillog2(x: int) -> int:
    """Ceiling of log2(x) for an unsigned 32-bit value."""
    return ((x - 1) & 0xFFFFFFFF).bit_length()


def _div(a: float, b: float) -> float:
    if b == 0:
        if a == 0 or math.isnan(a):
            return math.nan
        return math.copysign(math.inf, a) * math.copysign(1.0, b)
    return a / b


def _is_odd_integer(v: float) -> bool:
    return math.isfinite(v) and v == math.floor(v) and math.fmod(v, 2.0) != 0


def _pow(a: float, b: float) -> float:
    try:
        return math.pow(a, b)
    except OverflowError:
        if a < 0 and _is_odd_integer(b):
            return -math.inf
        return math.inf
    except ValueError:
        if a == 0 and b < 0:
            if _is_odd_integer(b):
                return math.copysign(math.inf, a)
            return math.inf
        return math.nan


def _mod(a: float, b: float) -> float:
    q = _div(a, b)
    if math.isfinite(q):
        q = float(math.floor(q))
    return a - q * b


def arith(op: Union[ArithOp, int], v1: float, v2: float = 0.0) -> float:
    """Apply an arithmetic operator to numbers with IEEE semantics."""
    op = ArithOp(op)
    a, b = float(v1), float(v2)
    if op is ArithOp.ADD:
        return a + b
    if op is ArithOp.SUB:
        return a - b
    if op is ArithOp.MUL:
        return a * b
    if op is ArithOp.DIV:
        return _div(a, b)
    if op is ArithOp.MOD:
        return _mod(a, b)
    if op is ArithOp.POW:
        return _pow(a, b)
    return -a


def hexavalue(c: Union[str, int]) -> int:
    """Value of a hexadecimal digit."""
    ch = chr(c) if isinstance(c, int) else c
    if "0" <= ch <= "9":
        return ord(ch) - ord("0")
    return ord(ch.lower()) - ord("a") + 10


_SPACES = " \t\n\v\f\r"
_HEXDIGITS = "0123456789abcdefABCDEF"
_DECIMAL = re.compile(r"[ \t\n\v\f\r]*[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?")


def _read_sign(s: str, i: int) -> tuple[bool, int]:
    if i < len(s) and s[i] == "-":
        return True, i + 1
    if i < len(s) and s[i] == "+":
        return False, i + 1
    return False, i


def _read_hex(s: str, i: int, r: float) -> tuple[float, int, int]:
    count = 0
    while i < len(s) and s[i] in _HEXDIGITS:
        r = r * 16.0 + hexavalue(s[i])
        count += 1
        i += 1
    return r, i, count


def _ldexp(r: float, e: int) -> float:
    try:
        return math.ldexp(r, e)
    except OverflowError:
        return math.copysign(math.inf, r)


def _strx2number(s: str) -> tuple[float, int]:
    """Parse a hexadecimal numeral; return the value and the end index."""
    i = 0
    while i < len(s) and s[i] in _SPACES:
        i += 1
    neg, i = _read_sign(s, i)
    if not (s[i:i + 1] == "0" and s[i + 1:i + 2] in ("x", "X")):
        return 0.0, 0
    i += 2
    r, i, ndigits = _read_hex(s, i, 0.0)
    nfrac = 0
    if i < len(s) and s[i] == ".":
        r, i, nfrac = _read_hex(s, i + 1, r)
    if ndigits == 0 and nfrac == 0:
        return 0.0, 0
    e = -4 * nfrac
    end = i
    if i < len(s) and s[i] in "pP":
        neg1, j = _read_sign(s, i + 1)
        if j < len(s) and s[j].isdigit() and s[j].isascii():
            k = j
            while k < len(s) and s[k].isascii() and s[k].isdigit():
                k += 1
            exp1 = int(s[j:k])
            e += -exp1 if neg1 else exp1
            end = k
    if neg:
        r = -r
    return _ldexp(r, e), end


def _strtod(s: str) -> tuple[float, int]:
    m = _DECIMAL.match(s)
    if m is None:
        return 0.0, 0
    return float(m.group(0)), m.end()


def str2number(s: Union[str, bytes]) -> Optional[float]:
    """Convert a numeral to a float, or return None if it is not one."""
    if isinstance(s, (bytes, bytearray)):
        s = bytes(s).decode("latin-1")
    if "n" in s or "N" in s:  # reject 'inf' and 'nan'
        return None
    if "x" in s or "X" in s:
        value, end = _strx2number(s)
    else:
        value, end = _strtod(s)
    if end == 0:
        return None
    while end < len(s) and s[end] in _SPACES:
        end += 1
    return value if end == len(s) else None


def _number_to_str(n: float) -> str:
    return "%.14g" % n


def format_message(fmt: str, *args: object) -> str:
    """Format a message supporting only %d, %c, %f, %p, %s and %%."""
    parts = []
    values = iter(args)
    pos = 0
    while True:
        e = fmt.find("%", pos)
        if e < 0:
            break
        parts.append(fmt[pos:e])
        spec = fmt[e + 1:e + 2]
        if spec == "s":
            value = next(values)
            parts.append("(null)" if value is None else str(value))
        elif spec == "c":
            parts.append(chr(int(next(values))))
        elif spec == "d":
            parts.append(_number_to_str(float(int(next(values)))))
        elif spec == "f":
            parts.append(_number_to_str(float(next(values))))
        elif spec == "p":
            value = next(values)
            addr = value if isinstance(value, int) else id(value)
            parts.append("0x%x" % addr)
        elif spec == "%":
            parts.append("%")
        else:
            raise LuaError(f"invalid option '%{spec}' to 'lua_pushfstring'")
        pos = e + 2
    parts.append(fmt[pos:])
    return "".join(parts)


_RETS = "..."
_PRE = '[string "'
_POS = '"]'


def chunkid(source: str, bufflen: int = IDSIZE) -> str:
    """Printable chunk name that fits in *bufflen* bytes including a terminator."""
    length = len(source)
    if source.startswith("="):
        if length <= bufflen:
            return source[1:]
        return source[1:bufflen]
    if source.startswith("@"):
        if length <= bufflen:
            return source[1:]
        keep = bufflen - len(_RETS) - 1
        return _RETS + source[length - keep:]
    nl = source.find("\n")
    avail = bufflen - (len(_PRE) + len(_RETS) + len(_POS) + 1)
    if length < avail and nl < 0:
        return _PRE + source + _POS
    if nl >= 0:
        length = nl
    length = min(length, avail)
    return _PRE + source[:length] + _RETS + _POS