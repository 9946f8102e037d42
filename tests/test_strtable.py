import pytest

from luacore.strtable import LuaString, StringTable, lua_hash


def test_hash_of_empty_is_seed():
    assert lua_hash(b"", 1234) == 1234


def test_hash_single_byte():
    assert lua_hash(b"a", 0) == 128


def test_hash_is_deterministic_and_accepts_str():
    assert lua_hash("hello", 7) == lua_hash(b"hello", 7)
    assert lua_hash(b"hello", 7) != lua_hash(b"hello", 8)


def test_hash_fits_32_bits():
    h = lua_hash(b"x" * 1000, 0xFFFFFFFF)
    assert 0 <= h <= 0xFFFFFFFF


def test_intern_returns_same_object():
    table = StringTable(seed=3)
    a = table.intern("name")
    b = table.intern(b"name")
    assert a is b
    assert a.equals(b)
    assert len(table) == 1


def test_distinct_short_strings():
    table = StringTable()
    a = table.intern("x")
    b = table.intern("y")
    assert not a.equals(b)
    assert len(table) == 2


def test_long_strings_are_not_interned():
    table = StringTable(seed=5, max_short_len=4)
    a = table.intern("longer text")
    b = table.intern("longer text")
    assert a is not b
    assert a.is_long and b.is_long
    assert a.equals(b)
    assert a.hash == 5
    assert len(table) == 0
    assert "longer text" not in table


def test_short_and_long_never_equal():
    short = LuaString(b"ab", lua_hash(b"ab", 0))
    long = LuaString(b"ab", 0, is_long=True)
    assert not short.equals(long)
    assert not long.equals(short)


def test_table_grows_when_crowded():
    table = StringTable(size=2)
    items = [table.intern(f"s{i}") for i in range(5)]
    assert table.size >= 4
    assert len(table) == 5
    for i, ts in enumerate(items):
        assert table.intern(f"s{i}") is ts


def test_resize_keeps_members():
    table = StringTable(size=4)
    words = ["alpha", "beta", "gamma"]
    objs = [table.intern(w) for w in words]
    table.resize(16)
    assert table.size == 16
    assert all(w in table for w in words)
    table.resize(1)
    assert [table.intern(w) for w in words] == objs
    assert len(table) == 3


@pytest.mark.parametrize("size", [0, 3, -4])
def test_invalid_sizes(size):
    with pytest.raises(ValueError):
        StringTable(size=size)
    with pytest.raises(ValueError):
        StringTable().resize(size)


def test_contains():
    table = StringTable()
    table.intern("present")
    assert "present" in table
    assert "absent" not in table
    assert 42 not in table


def test_reserved_flag():
    table = StringTable()
    ts = table.intern("while")
    assert not ts.is_reserved()
    ts.extra = 1
    assert table.intern("while").is_reserved()
    assert not LuaString(b"while", 0, is_long=True, extra=1).is_reserved()


def test_length_and_bytes():
    ts = StringTable().intern("abc")
    assert len(ts) == 3
    assert bytes(ts) == b"abc"