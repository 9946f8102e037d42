"""Interned short strings, long strings and their hashing."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional, Union

HASH_LIMIT = 5
_U32 = 0xFFFFFFFF
_MAX_INT = 2**31 - 1

BytesLike = Union[bytes, bytearray, str]


def _as_bytes(data: BytesLike) -> bytes:
    if isinstance(data, str):
        return data.encode("utf-8")
    return bytes(data)


def lua_hash(data: BytesLike, seed: int) -> int:
    """Hash a byte string, sampling at most about 2**HASH_LIMIT bytes."""
    raw = _as_bytes(data)
    length = len(raw)
    h = (seed ^ length) & _U32
    step = (length >> HASH_LIMIT) + 1
    for l1 in range(length, step - 1, -step):
        h = (h ^ (((h << 5) + (h >> 2) + raw[l1 - 1]) & _U32)) & _U32
    return h


@dataclass(eq=False)
class LuaString:
    """A string object: short ones are interned, long ones are not."""

    data: bytes
    hash: int
    is_long: bool = False
    extra: int = field(default=0)

    def equals(self, other: "LuaString") -> bool:
        """String equality: identity for short strings, contents for long."""
        if self.is_long != other.is_long:
            return False
        if not self.is_long:
            return self is other
        return self is other or self.data == other.data

    def is_reserved(self) -> bool:
        """True for short strings marked as reserved words."""
        return not self.is_long and self.extra > 0

    def __len__(self) -> int:
        return len(self.data)

    def __bytes__(self) -> bytes:
        return self.data


def _check_size(size: int) -> None:
    if size <= 0 or size & (size - 1):
        raise ValueError(f"string table size must be a positive power of two, got {size}")


class StringTable:
    """Hash table keeping one instance of every short string."""

    def __init__(self, seed: int = 0, size: int = 32, max_short_len: int = 40) -> None:
        _check_size(size)
        self.seed = seed & _U32
        self.max_short_len = max_short_len
        self._buckets: List[List[LuaString]] = [[] for _ in range(size)]
        self._nuse = 0

    @property
    def size(self) -> int:
        return len(self._buckets)

    def _lookup(self, raw: bytes, h: int) -> Optional[LuaString]:
        for ts in self._buckets[h & (self.size - 1)]:
            if ts.hash == h and ts.data == raw:
                return ts
        return None

    def intern(self, data: BytesLike) -> LuaString:
        """Return the string object for *data*, reusing short strings."""
        raw = _as_bytes(data)
        if len(raw) > self.max_short_len:
            return LuaString(raw, self.seed, is_long=True)
        h = lua_hash(raw, self.seed)
        found = self._lookup(raw, h)
        if found is not None:
            return found
        if self._nuse >= self.size and self.size <= _MAX_INT // 2:
            self.resize(self.size * 2)
        ts = LuaString(raw, h)
        self._buckets[h & (self.size - 1)].insert(0, ts)
        self._nuse += 1
        return ts

    def resize(self, newsize: int) -> None:
        """Rehash every short string into *newsize* buckets."""
        _check_size(newsize)
        buckets: List[List[LuaString]] = [[] for _ in range(newsize)]
        for chain in self._buckets:
            for ts in chain:
                buckets[ts.hash & (newsize - 1)].insert(0, ts)
        self._buckets = buckets

    def __len__(self) -> int:
        return self._nuse

    def __contains__(self, data: object) -> bool:
        if not isinstance(data, (bytes, bytearray, str)):
            return False
        raw = _as_bytes(data)
        if len(raw) > self.max_short_len:
            return False
        return self._lookup(raw, lua_hash(raw, self.seed)) is not None