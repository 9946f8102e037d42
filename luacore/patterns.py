"""Pattern matching over strings: find, match, gmatch and gsub."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Callable, Iterator, Optional, Tuple, Union

from luacore.objects import LuaError

MAXCAPTURES = 32
MAXCCALLS = 200

L_ESC = "%"
SPECIALS = "^$*+?.([%-"

CAP_UNFINISHED = -1
CAP_POSITION = -2

Capture = Union[str, int]
Replacement = Union[str, int, float, Callable[..., object], Mapping]


class PatternError(LuaError):
    """Malformed pattern, bad capture or invalid replacement."""


def _posrelat(pos: int, length: int) -> int:
    if pos >= 0:
        return pos
    if -pos > length:
        return 0
    return length + pos + 1


# Character predicates of the "C" locale.

def _isalpha(c: int) -> bool:
    return 65 <= c <= 90 or 97 <= c <= 122


def _isdigit(c: int) -> bool:
    return 48 <= c <= 57


def _isalnum(c: int) -> bool:
    return _isalpha(c) or _isdigit(c)


def _isgraph(c: int) -> bool:
    return 33 <= c <= 126


_CLASSES = {
    "a": _isalpha,
    "c": lambda c: c < 32 or c == 127,
    "d": _isdigit,
    "g": _isgraph,
    "l": lambda c: 97 <= c <= 122,
    "p": lambda c: _isgraph(c) and not _isalnum(c),
    "s": lambda c: 9 <= c <= 13 or c == 32,
    "u": lambda c: 65 <= c <= 90,
    "w": _isalnum,
    "x": lambda c: _isdigit(c) or 65 <= c <= 70 or 97 <= c <= 102,
    "z": lambda c: c == 0,
}


def _match_class(c: int, cl: str) -> bool:
    test = _CLASSES.get(cl.lower() if cl.isascii() else cl)
    if test is None:
        return ord(cl) == c
    res = test(c)
    return res if "a" <= cl <= "z" else not res


def _number_to_str(value: Union[int, float]) -> str:
    return "%.14g" % value


def _type_name(value: object) -> str:
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, (Mapping, list, tuple, set)):
        return "table"
    if callable(value):
        return "function"
    return "userdata"


class _MatchState:
    def __init__(self, src: str, pat: str) -> None:
        self.src = src
        self.pat = pat
        self.src_end = len(src)
        self.p_end = len(pat)
        self.matchdepth = MAXCCALLS
        self.level = 0
        self.capture: list[list[int]] = []

    def reset(self) -> None:
        self.level = 0
        self.capture = []

    def _p(self, i: int) -> str:
        return self.pat[i] if i < self.p_end else "\0"

    def _s(self, i: int) -> str:
        return self.src[i] if 0 <= i < self.src_end else "\0"

    # captures

    def _check_capture(self, ch: str) -> int:
        idx = ord(ch) - ord("1")
        if idx < 0 or idx >= self.level or self.capture[idx][1] == CAP_UNFINISHED:
            raise PatternError(f"invalid capture index %{idx + 1}")
        return idx

    def _capture_to_close(self) -> int:
        for level in range(self.level - 1, -1, -1):
            if self.capture[level][1] == CAP_UNFINISHED:
                return level
        raise PatternError("invalid pattern capture")

    def _start_capture(self, s: int, p: int, what: int) -> Optional[int]:
        if self.level >= MAXCAPTURES:
            raise PatternError("too many captures")
        del self.capture[self.level:]
        self.capture.append([s, what])
        self.level += 1
        res = self.match(s, p)
        if res is None:
            self.level -= 1
        return res

    def _end_capture(self, s: int, p: int) -> Optional[int]:
        idx = self._capture_to_close()
        self.capture[idx][1] = s - self.capture[idx][0]
        res = self.match(s, p)
        if res is None:
            self.capture[idx][1] = CAP_UNFINISHED
        return res

    def _match_capture(self, s: int, ch: str) -> Optional[int]:
        idx = self._check_capture(ch)
        init, length = self.capture[idx]
        if length < 0 or self.src_end - s < length:
            return None
        if self.src[init:init + length] == self.src[s:s + length]:
            return s + length
        return None

    # classes

    def _classend(self, p: int) -> int:
        ch = self.pat[p]
        p += 1
        if ch == L_ESC:
            if p == self.p_end:
                raise PatternError("malformed pattern (ends with '%')")
            return p + 1
        if ch == "[":
            if self._p(p) == "^":
                p += 1
            while True:
                if p == self.p_end:
                    raise PatternError("malformed pattern (missing ']')")
                cur = self.pat[p]
                p += 1
                if cur == L_ESC and p < self.p_end:
                    p += 1
                if self._p(p) == "]":
                    break
            return p + 1
        return p

    def _matchbracketclass(self, c: int, p: int, ec: int) -> bool:
        sig = True
        if self._p(p + 1) == "^":
            sig = False
            p += 1
        while True:
            p += 1
            if p >= ec:
                break
            ch = self.pat[p]
            if ch == L_ESC:
                p += 1
                if _match_class(c, self.pat[p]):
                    return sig
            elif self._p(p + 1) == "-" and p + 2 < ec:
                p += 2
                if ord(self.pat[p - 2]) <= c <= ord(self.pat[p]):
                    return sig
            elif ord(ch) == c:
                return sig
        return not sig

    def _singlematch(self, s: int, p: int, ep: int) -> bool:
        if s >= self.src_end:
            return False
        c = ord(self.src[s])
        ch = self.pat[p]
        if ch == ".":
            return True
        if ch == L_ESC:
            return _match_class(c, self.pat[p + 1])
        if ch == "[":
            return self._matchbracketclass(c, p, ep - 1)
        return ord(ch) == c

    def _matchbalance(self, s: int, p: int) -> Optional[int]:
        if p >= self.p_end - 1:
            raise PatternError("malformed pattern (missing arguments to '%b')")
        if s >= self.src_end or self.src[s] != self.pat[p]:
            return None
        begin, end = self.pat[p], self.pat[p + 1]
        cont = 1
        s += 1
        while s < self.src_end:
            ch = self.src[s]
            if ch == end:
                cont -= 1
                if cont == 0:
                    return s + 1
            elif ch == begin:
                cont += 1
            s += 1
        return None

    def _max_expand(self, s: int, p: int, ep: int) -> Optional[int]:
        i = 0
        while self._singlematch(s + i, p, ep):
            i += 1
        while i >= 0:
            res = self.match(s + i, ep + 1)
            if res is not None:
                return res
            i -= 1
        return None

    def _min_expand(self, s: int, p: int, ep: int) -> Optional[int]:
        while True:
            res = self.match(s, ep + 1)
            if res is not None:
                return res
            if not self._singlematch(s, p, ep):
                return None
            s += 1

    def match(self, s: int, p: int) -> Optional[int]:
        """Match pattern from *p* against source from *s*; return the end or None."""
        if self.matchdepth == 0:
            raise PatternError("pattern too complex")
        self.matchdepth -= 1
        result: Optional[int] = s
        while p != self.p_end:
            ch = self.pat[p]
            nxt = self._p(p + 1)
            if ch == "(":
                if nxt == ")":
                    result = self._start_capture(s, p + 2, CAP_POSITION)
                else:
                    result = self._start_capture(s, p + 1, CAP_UNFINISHED)
                break
            if ch == ")":
                result = self._end_capture(s, p + 1)
                break
            if ch == "$" and p + 1 == self.p_end:
                result = s if s == self.src_end else None
                break
            if ch == L_ESC and nxt == "b":
                found = self._matchbalance(s, p + 2)
                if found is not None:
                    s = found
                    p += 4
                    continue
                result = None
                break
            if ch == L_ESC and nxt == "f":
                p += 2
                if self._p(p) != "[":
                    raise PatternError("missing '[' after '%f' in pattern")
                ep = self._classend(p)
                previous = "\0" if s == 0 else self.src[s - 1]
                current = self._s(s)
                if not self._matchbracketclass(ord(previous), p, ep - 1) and \
                        self._matchbracketclass(ord(current), p, ep - 1):
                    p = ep
                    continue
                result = None
                break
            if ch == L_ESC and nxt.isascii() and nxt.isdigit():
                found = self._match_capture(s, nxt)
                if found is not None:
                    s = found
                    p += 2
                    continue
                result = None
                break
            ep = self._classend(p)
            suffix = self._p(ep)
            if not self._singlematch(s, p, ep):
                if suffix in ("*", "?", "-"):
                    p = ep + 1
                    continue
                result = None
                break
            if suffix == "?":
                res = self.match(s + 1, ep + 1)
                if res is not None:
                    result = res
                    break
                p = ep + 1
                continue
            if suffix == "+":
                result = self._max_expand(s + 1, p, ep)
                break
            if suffix == "*":
                result = self._max_expand(s, p, ep)
                break
            if suffix == "-":
                result = self._min_expand(s, p, ep)
                break
            s += 1
            p = ep
        else:
            result = s
        self.matchdepth += 1
        return result

    # results

    def onecapture(self, i: int, s: Optional[int], e: Optional[int]) -> Capture:
        if i >= self.level:
            if i == 0:
                return self.src[s:e]
            raise PatternError("invalid capture index")
        init, length = self.capture[i]
        if length == CAP_UNFINISHED:
            raise PatternError("unfinished capture")
        if length == CAP_POSITION:
            return init + 1
        return self.src[init:init + length]

    def captures(self, s: Optional[int], e: Optional[int]) -> Tuple[Capture, ...]:
        nlevels = 1 if (self.level == 0 and s is not None) else self.level
        return tuple(self.onecapture(i, s, e) for i in range(nlevels))


def _nospecials(pattern: str) -> bool:
    return not any(ch in SPECIALS for ch in pattern)


def _find_aux(s: str, pattern: str, init: int, find: bool, plain: bool):
    ls = len(s)
    start = _posrelat(init, ls)
    if start < 1:
        start = 1
    elif start > ls + 1:
        return None
    if find and (plain or _nospecials(pattern)):
        idx = s.find(pattern, start - 1)
        if idx < 0:
            return None
        return (idx + 1, idx + len(pattern))
    anchor = pattern.startswith("^")
    if anchor:
        pattern = pattern[1:]
    ms = _MatchState(s, pattern)
    s1 = start - 1
    while True:
        ms.reset()
        res = ms.match(s1, 0)
        if res is not None:
            if find:
                return (s1 + 1, res) + ms.captures(None, None)
            return ms.captures(s1, res)
        keep_going = s1 < ms.src_end
        s1 += 1
        if not keep_going or anchor:
            return None


def find(s: str, pattern: str, init: int = 1, plain: bool = False
         ) -> Optional[Tuple[Capture, ...]]:
    """Find *pattern* in *s*.

    Returns None, or a tuple of 1-based start and end positions followed
    by any captures.
    """
    return _find_aux(s, pattern, init, True, plain)


def match(s: str, pattern: str, init: int = 1) -> Optional[Tuple[Capture, ...]]:
    """Match *pattern* in *s*; return the captures (or the whole match) or None."""
    return _find_aux(s, pattern, init, False, False)


def gmatch(s: str, pattern: str) -> Iterator[Tuple[Capture, ...]]:
    """Yield the captures of every successive match of *pattern* in *s*."""
    ms = _MatchState(s, pattern)
    start = 0
    while True:
        for src in range(start, ms.src_end + 1):
            ms.reset()
            e = ms.match(src, 0)
            if e is not None:
                start = e + 1 if e == src else e
                yield ms.captures(src, e)
                break
        else:
            return


def _add_template(ms: _MatchState, out: list, template: str, s: int, e: int) -> None:
    i = 0
    length = len(template)
    while i < length:
        ch = template[i]
        if ch != L_ESC:
            out.append(ch)
            i += 1
            continue
        i += 1
        nxt = template[i] if i < length else "\0"
        if not (nxt.isascii() and nxt.isdigit()):
            if nxt != L_ESC:
                raise PatternError("invalid use of '%' in replacement string")
            out.append(nxt)
        elif nxt == "0":
            out.append(ms.src[s:e])
        else:
            value = ms.onecapture(ord(nxt) - ord("1"), s, e)
            out.append(_number_to_str(value) if isinstance(value, int) else value)
        i += 1


def _add_value(ms: _MatchState, out: list, repl: Replacement, s: int, e: int) -> None:
    if isinstance(repl, str):
        _add_template(ms, out, repl, s, e)
        return
    if isinstance(repl, (int, float)) and not isinstance(repl, bool):
        _add_template(ms, out, _number_to_str(repl), s, e)
        return
    if isinstance(repl, Mapping):
        value = repl.get(ms.onecapture(0, s, e))
    else:
        value = repl(*ms.captures(s, e))
    if value is None or value is False:
        out.append(ms.src[s:e])
    elif isinstance(value, str):
        out.append(value)
    elif isinstance(value, (int, float)) and not isinstance(value, bool):
        out.append(_number_to_str(value))
    else:
        raise PatternError(f"invalid replacement value (a {_type_name(value)})")


def gsub(s: str, pattern: str, repl: Replacement, max_n: Optional[int] = None
         ) -> Tuple[str, int]:
    """Replace matches of *pattern* in *s*; return the new string and the count.

    *repl* may be a template string (with %0-%9 and %%), a number, a
    mapping looked up with the first capture, or a callable given the
    captures. A replacement of None or False keeps the original text.
    """
    if isinstance(repl, bool) or not (
        isinstance(repl, (str, int, float, Mapping)) or callable(repl)
    ):
        raise TypeError("bad argument #3 to 'gsub' (string/function/table expected)")
    srcl = len(s)
    limit = srcl + 1 if max_n is None or max_n < 0 else max_n
    anchor = pattern.startswith("^")
    if anchor:
        pattern = pattern[1:]
    ms = _MatchState(s, pattern)
    out: list = []
    src = 0
    n = 0
    while n < limit:
        ms.reset()
        e = ms.match(src, 0)
        if e is not None:
            n += 1
            _add_value(ms, out, repl, src, e)
        if e is not None and e > src:
            src = e
        elif src < ms.src_end:
            out.append(s[src])
            src += 1
        else:
            break
        if anchor:
            break
    out.append(s[src:])
    return "".join(out), n