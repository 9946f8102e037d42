"""Basic string operations and printf-style formatting."""

from __future__ import annotations

import math
from collections.abc import Mapping
from typing import Optional, Tuple

from luacore.objects import LuaError, str2number

MAXSIZE = (2**64 - 1) >> 1
FLAGS = "-+ #0"

_ASCII_LOWER = str.maketrans(
    "ABCDEFGHIJKLMNOPQRSTUVWXYZ", "abcdefghijklmnopqrstuvwxyz"
)
_ASCII_UPPER = str.maketrans(
    "abcdefghijklmnopqrstuvwxyz", "ABCDEFGHIJKLMNOPQRSTUVWXYZ"
)


def _type_name(value: object) -> str:
    if value is None:
        return "nil"
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, (int, float)):
        return "number"
    if isinstance(value, str):
        return "string"
    if isinstance(value, (Mapping, list, tuple, set)):
        return "table"
    if callable(value):
        return "function"
    return "userdata"


def _number_to_str(value: float) -> str:
    return "%.14g" % value


def _tostring(value: object) -> str:
    """Printable form of a value, as the standard 'tostring' gives it."""
    if value is None:
        return "nil"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return _number_to_str(value)
    if isinstance(value, str):
        return value
    return f"{_type_name(value)}: 0x{id(value):08x}"


def _arg_error(arg: int, fname: str, msg: str) -> LuaError:
    return LuaError(f"bad argument #{arg} to '{fname}' ({msg})")


def _check_number(value: object, arg: int, fname: str) -> float:
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return float(value)
    if isinstance(value, str):
        converted = str2number(value)
        if converted is not None:
            return converted
    raise _arg_error(arg, fname, f"number expected, got {_type_name(value)}")


def _check_int(value: object, arg: int, fname: str) -> int:
    n = _check_number(value, arg, fname)
    if not math.isfinite(n):
        return 0
    return int(n)


def _check_string(value: object, arg: int, fname: str) -> str:
    if isinstance(value, str):
        return value
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return _number_to_str(value)
    raise _arg_error(arg, fname, f"string expected, got {_type_name(value)}")


def posrelat(pos: int, length: int) -> int:
    """Translate a relative position: negative counts back from the end."""
    if pos >= 0:
        return pos
    if -pos > length:
        return 0
    return length + pos + 1


def str_len(s: str) -> int:
    """Length of a string."""
    return len(s)


def sub(s: str, i: int = 1, j: int = -1) -> str:
    """Substring from position *i* to *j*, both inclusive and 1-based."""
    length = len(s)
    start = max(posrelat(i, length), 1)
    end = min(posrelat(j, length), length)
    if start <= end:
        return s[start - 1:end]
    return ""


def byte(s: str, i: int = 1, j: Optional[int] = None) -> Tuple[int, ...]:
    """Character codes of s[i..j]; *j* defaults to *i*."""
    length = len(s)
    posi = posrelat(i, length)
    pose = posrelat(posi if j is None else j, length)
    posi = max(posi, 1)
    pose = min(pose, length)
    if posi > pose:
        return ()
    return tuple(ord(ch) for ch in s[posi - 1:pose])


def char(*args: object) -> str:
    """String made of the given character codes (each 0 to 255)."""
    chars = []
    for index, value in enumerate(args, start=1):
        c = _check_int(value, index, "char")
        if not 0 <= c <= 255:
            raise _arg_error(index, "char", "value out of range")
        chars.append(chr(c))
    return "".join(chars)


def rep(s: str, n: int, sep: str = "") -> str:
    """*n* copies of *s* separated by *sep*."""
    n = _check_int(n, 2, "rep")
    if n <= 0:
        return ""
    if len(s) + len(sep) >= MAXSIZE // n:
        raise LuaError("resulting string too large")
    return sep.join([s] * n)


def reverse(s: str) -> str:
    """The string reversed."""
    return s[::-1]


def lower(s: str) -> str:
    """ASCII letters turned to lower case."""
    return s.translate(_ASCII_LOWER)


def upper(s: str) -> str:
    """ASCII letters turned to upper case."""
    return s.translate(_ASCII_UPPER)


def _iscntrl(ch: str) -> bool:
    c = ord(ch)
    return c < 32 or c == 127


def quote(s: str) -> str:
    """Quote a string so that it can be read back safely."""
    out = ['"']
    for index, ch in enumerate(s):
        if ch in '"\\\n':
            out.append("\\" + ch)
        elif _iscntrl(ch):
            following = s[index + 1:index + 2]
            if following.isascii() and following.isdigit():
                out.append("\\%03d" % ord(ch))
            else:
                out.append("\\%d" % ord(ch))
        else:
            out.append(ch)
    out.append('"')
    return "".join(out)


def _scan_format(fmt: str, i: int) -> Tuple[str, int]:
    """Read flags, width and precision; return them and the index after."""
    n = len(fmt)
    start = i
    while i < n and fmt[i] in FLAGS:
        i += 1
    if i - start >= len(FLAGS) + 1:
        raise LuaError("invalid format (repeated flags)")

    def skip_digits(pos: int) -> int:
        for _ in range(2):
            if pos < n and fmt[pos].isascii() and fmt[pos].isdigit():
                pos += 1
        return pos

    i = skip_digits(i)
    if i < n and fmt[i] == ".":
        i = skip_digits(i + 1)
    if i < n and fmt[i].isascii() and fmt[i].isdigit():
        raise LuaError("invalid format (width or precision too long)")
    return fmt[start:i], i


def _format_unsigned(spec: str, conv: str, value: int) -> str:
    k = 0
    while k < len(spec) and spec[k] in FLAGS:
        k += 1
    flags, rest = spec[:k], spec[k:]
    width_text, dot, prec_text = rest.partition(".")
    width = int(width_text) if width_text else 0
    precision = (int(prec_text) if prec_text else 0) if dot else None
    digits = format(value, {"o": "o", "u": "d", "x": "x", "X": "X"}[conv])
    if precision is not None:
        if precision == 0 and value == 0:
            digits = ""
        digits = digits.rjust(precision, "0")
    prefix = ""
    if "#" in flags:
        if conv == "o" and not digits.startswith("0"):
            digits = "0" + digits
        elif conv in "xX" and value != 0:
            prefix = "0" + conv
    body = prefix + digits
    if len(body) < width:
        if "-" in flags:
            body = body.ljust(width)
        elif "0" in flags and precision is None:
            body = prefix + digits.rjust(width - len(prefix), "0")
        else:
            body = body.rjust(width)
    return body


def _format_item(spec: str, conv: str, value: object, arg: int) -> str:
    if conv == "c":
        return ("%" + spec + "c") % chr(_check_int(value, arg, "format") & 0xFF)
    if conv in "di" and conv:
        n = _check_number(value, arg, "format")
        if not (math.isfinite(n) and -(2**63) <= n < 2**63):
            raise _arg_error(arg, "format", "not a number in proper range")
        return ("%" + spec + "d") % int(n)
    if conv in "ouxX" and conv:
        n = _check_number(value, arg, "format")
        if not (math.isfinite(n) and -1 < n < 2**64):
            raise _arg_error(arg, "format", "not a non-negative number in proper range")
        return _format_unsigned(spec, conv, int(n))
    if conv in "eEfgG" and conv:
        return ("%" + spec + conv) % _check_number(value, arg, "format")
    if conv == "q":
        return quote(_check_string(value, arg, "format"))
    if conv == "s":
        text = _tostring(value)
        if "." not in spec and len(text) >= 100:
            return text
        return ("%" + spec + "s") % text
    raise LuaError(f"invalid option '%{conv}' to 'format'")


def format_string(fmt: str, *args: object) -> str:
    """Format arguments following a printf-like format string."""
    out = []
    n = len(fmt)
    i = 0
    arg = 1
    while i < n:
        ch = fmt[i]
        if ch != "%":
            out.append(ch)
            i += 1
            continue
        i += 1
        if i < n and fmt[i] == "%":
            out.append("%")
            i += 1
            continue
        arg += 1
        if arg - 1 > len(args):
            raise _arg_error(arg, "format", "no value")
        spec, i = _scan_format(fmt, i)
        conv = fmt[i] if i < n else "\0"
        i += 1
        out.append(_format_item(spec, conv, args[arg - 2], arg))
    return "".join(out)