import errno
import os
import sys
import time as pytime

import pytest

from luacore.objects import LuaError
from luacore import oslib


def test_clock_non_decreasing():
    first = oslib.clock()
    second = oslib.clock()
    assert second >= first


def test_date_utc_epoch_table():
    fields = oslib.date("!*t", 0)
    assert fields["year"] == 1970
    assert (fields["month"], fields["day"], fields["hour"]) == (1, 1, 0)
    assert fields["wday"] == 5
    assert fields["yday"] == 1
    assert fields["isdst"] is False


def test_date_utc_format():
    assert oslib.date("!%Y-%m-%d", 0) == "1970-01-01"


def test_date_literal_text_kept():
    assert oslib.date("!plain text", 0) == "plain text"


def test_date_invalid_specifier():
    with pytest.raises(LuaError, match="invalid conversion specifier"):
        oslib.date("%Q", 0)
    with pytest.raises(LuaError, match="invalid conversion specifier"):
        oslib.date("abc%", 0)


def test_date_two_char_specifier_accepted():
    assert oslib.date("!%EY", 0) == oslib.date("!%Y", 0)


def test_time_round_trip():
    t = 1_000_000_000
    assert oslib.time(oslib.date("*t", t)) == t


def test_time_now():
    assert abs(oslib.time() - pytime.time()) < 5


def test_time_missing_field():
    with pytest.raises(LuaError, match="field 'day' missing"):
        oslib.time({"year": 2000, "month": 1})


def test_time_default_hour_is_noon():
    t = oslib.time({"year": 2000, "month": 6, "day": 15})
    assert oslib.date("*t", t)["hour"] == 12


def test_difftime():
    assert oslib.difftime(10, 4) == 6.0
    assert oslib.difftime(5) == 5.0


def test_getenv(monkeypatch):
    monkeypatch.setenv("LUACORE_TEST_VAR", "value")
    assert oslib.getenv("LUACORE_TEST_VAR") == "value"
    monkeypatch.delenv("LUACORE_TEST_VAR")
    assert oslib.getenv("LUACORE_TEST_VAR") is None


def test_remove(tmp_path):
    target = tmp_path / "f.txt"
    target.write_text("x")
    assert oslib.remove(str(target)) is True
    assert not target.exists()


def test_remove_missing(tmp_path):
    missing = str(tmp_path / "missing")
    result = oslib.remove(missing)
    assert result[0] is None
    assert result[1].startswith(missing + ": ")
    assert result[2] == errno.ENOENT


def test_rename(tmp_path):
    src = tmp_path / "a"
    dst = tmp_path / "b"
    src.write_text("data")
    assert oslib.rename(str(src), str(dst)) is True
    assert dst.read_text() == "data"
    assert not src.exists()


def test_rename_missing(tmp_path):
    result = oslib.rename(str(tmp_path / "nope"), str(tmp_path / "b"))
    assert result[0] is None
    assert result[2] == errno.ENOENT


def test_tmpname_creates_file():
    name = oslib.tmpname()
    try:
        assert os.path.isfile(name)
        assert os.path.basename(name).startswith("lua_")
    finally:
        os.remove(name)


def test_execute_shell_available():
    assert oslib.execute() is True


def test_execute_exit_codes():
    assert oslib.execute("exit 0") == (True, "exit", 0)
    assert oslib.execute("exit 3") == (None, "exit", 3)


@pytest.mark.parametrize(
    "status, code", [(True, 0), (False, 1), (None, 0), (7, 7)]
)
def test_exit_status(status, code):
    with pytest.raises(SystemExit) as info:
        oslib.exit(status)
    assert info.value.code == code


def test_setlocale_query():
    current = oslib.setlocale(None, "numeric")
    assert isinstance(current, str) and current


def test_setlocale_invalid_category():
    with pytest.raises(LuaError, match="invalid option"):
        oslib.setlocale(None, "bogus")


def test_setlocale_unknown_locale():
    assert oslib.setlocale("no_such_locale.xyz", "all") is None