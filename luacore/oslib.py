"""Operating-system facilities: time, dates, files, environment, processes."""

from __future__ import annotations

import locale
import os
import subprocess
import tempfile
import time as _time
from collections.abc import Mapping
from typing import Dict, Optional, Tuple, Union

from luacore.objects import LuaError, str2number

# Valid conversion specifiers: one-char options, then prefixed two-char ones.
_STRFTIME_OPTIONS = (
    ("aAbBcCdDeFgGhHIjmMnprRStTuUVwWxXyYzZ%", ""),
    ("E", "cCxXyY"),
    ("O", "deHImMSuUVwWy"),
)

_DATE_BUFFER = 200

EXIT_SUCCESS = 0
EXIT_FAILURE = 1

_LOCALE_CATEGORIES = {
    "all": locale.LC_ALL,
    "collate": locale.LC_COLLATE,
    "ctype": locale.LC_CTYPE,
    "monetary": locale.LC_MONETARY,
    "numeric": locale.LC_NUMERIC,
    "time": locale.LC_TIME,
}

FileResult = Union[bool, Tuple[None, str, int]]


def _file_error(exc: OSError, filename: Optional[str]) -> Tuple[None, str, int]:
    message = exc.strerror or str(exc)
    if filename is not None:
        message = f"{filename}: {message}"
    return None, message, exc.errno or 0


def clock() -> float:
    """Processor time used by the program, in seconds."""
    return _time.process_time()


def _check_option(conv: str) -> str:
    for first, second in _STRFTIME_OPTIONS:
        if conv and conv[0] in first:
            if not second:
                return conv[:1]
            if len(conv) > 1 and conv[1] in second:
                return conv[:2]
    raise LuaError(f"bad argument #1 to 'date' (invalid conversion specifier '%{conv}')")


def date(fmt: str = "%c", t: Optional[float] = None) -> Union[str, Dict[str, object], None]:
    """Format a time; '!' selects UTC and '*t' returns a field table.

    Returns None if the time cannot be represented.
    """
    seconds = int(_time.time()) if t is None else int(t)
    utc = fmt.startswith("!")
    if utc:
        fmt = fmt[1:]
    try:
        stm = _time.gmtime(seconds) if utc else _time.localtime(seconds)
    except (OverflowError, OSError, ValueError):
        return None
    if fmt == "*t":
        fields: Dict[str, object] = {
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
    out = []
    i = 0
    while i < len(fmt):
        if fmt[i] != "%":
            out.append(fmt[i])
            i += 1
            continue
        spec = _check_option(fmt[i + 1:])
        piece = _time.strftime("%" + spec, stm)
        out.append(piece if len(piece) < _DATE_BUFFER else "")
        i += 1 + len(spec)
    return "".join(out)


def _get_field(fields: Mapping, key: str, default: int) -> int:
    value = fields.get(key)
    number: Optional[float] = None
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        number = float(value)
    elif isinstance(value, str):
        number = str2number(value)
    if number is None:
        if default < 0:
            raise LuaError(f"field '{key}' missing in date table")
        return default
    return int(number)


def _get_bool_field(fields: Mapping, key: str) -> int:
    value = fields.get(key)
    if value is None:
        return -1
    return 0 if value is False else 1


def time(fields: Optional[Mapping] = None) -> Optional[int]:
    """Current time, or the time described by a date table; None if invalid."""
    if fields is None:
        return int(_time.time())
    if not isinstance(fields, Mapping):
        raise LuaError("bad argument #1 to 'time' (table expected)")
    sec = _get_field(fields, "sec", 0)
    minute = _get_field(fields, "min", 0)
    hour = _get_field(fields, "hour", 12)
    day = _get_field(fields, "day", -1)
    month = _get_field(fields, "month", -1)
    year = _get_field(fields, "year", -1)
    isdst = _get_bool_field(fields, "isdst")
    try:
        result = _time.mktime((year, month, day, hour, minute, sec, 0, 0, isdst))
    except (OverflowError, OSError, ValueError):
        return None
    if result == -1:
        return None
    return int(result)


def difftime(t2: float, t1: float = 0) -> float:
    """Seconds from *t1* to *t2*."""
    return float(int(t2) - int(t1))


def getenv(name: str) -> Optional[str]:
    """Value of an environment variable, or None."""
    return os.environ.get(name)


def remove(filename: str) -> FileResult:
    """Delete a file or empty directory; True, or (None, message, errno)."""
    try:
        if os.path.isdir(filename) and not os.path.islink(filename):
            os.rmdir(filename)
        else:
            os.remove(filename)
    except OSError as exc:
        return _file_error(exc, filename)
    return True


def rename(src: str, dst: str) -> FileResult:
    """Rename a file; True, or (None, message, errno)."""
    try:
        os.rename(src, dst)
    except OSError as exc:
        return _file_error(exc, None)
    return True


def tmpname() -> str:
    """Create an empty temporary file and return its name."""
    try:
        fd, name = tempfile.mkstemp(prefix="lua_")
    except OSError as exc:
        raise LuaError("unable to generate a unique filename") from exc
    os.close(fd)
    return name


def execute(command: Optional[str] = None):
    """Run a shell command.

    Without a command, return True if a shell is available. Otherwise
    return (True or None, "exit" or "signal", code).
    """
    if command is None:
        try:
            subprocess.run("exit 0", shell=True, check=False)
        except OSError:
            return False
        return True
    try:
        completed = subprocess.run(command, shell=True, check=False)
    except OSError as exc:
        return _file_error(exc, None)
    code = completed.returncode
    if code < 0:
        return None, "signal", -code
    return (True if code == 0 else None), "exit", code


def exit(status: Union[bool, int, None] = None, close: bool = False) -> None:
    """Terminate the program with the given status."""
    if isinstance(status, bool):
        code = EXIT_SUCCESS if status else EXIT_FAILURE
    elif status is None:
        code = EXIT_SUCCESS
    else:
        code = int(status)
    raise SystemExit(code)


def setlocale(locale_name: Optional[str] = None, category: str = "all") -> Optional[str]:
    """Set or query the locale of a category; None if the request fails."""
    if category not in _LOCALE_CATEGORIES:
        raise LuaError(f"bad argument #2 to 'setlocale' (invalid option '{category}')")
    try:
        return locale.setlocale(_LOCALE_CATEGORIES[category], locale_name)
    except locale.Error:
        return None