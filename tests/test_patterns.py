import pytest

from luacore.objects import LuaError
from luacore.patterns import PatternError, find, gmatch, gsub, match


@pytest.mark.parametrize(
    "s, needle, init",
    [("hello world", "wor", 1), ("abcabc", "bc", 3), ("abc", "", 2), ("a.b", ".", 1)],
)
def test_find_plain_agrees_with_str_find(s, needle, init):
    result = find(s, needle, init, True)
    idx = s.find(needle, init - 1)
    assert result == (idx + 1, idx + len(needle))


def test_find_plain_not_found():
    assert find("hello", "xyz") is None


def test_find_init_past_end():
    assert find("abc", "a", 10) is None


def test_find_negative_init_counts_from_end():
    start, end = find("abcabc", "a", -3)
    assert start == 4 and end == 4


def test_find_pattern_digits():
    s = "abc123def"
    start, end = find(s, "%d+")
    assert s[start - 1:end] == "123"


def test_find_with_captures():
    assert find("key=val", "(%w+)=(%w+)") == (1, 7, "key", "val")


def test_match_anchor():
    assert match("  x", "^x") is None
    assert match("x  ", "^x") == ("x",)


def test_match_whole_when_no_captures():
    assert match("abc 42 def", "%d+") == ("42",)


def test_position_captures():
    assert match("hello", "()ll()") == (3, 5)


def test_balance():
    assert match("f(a(b)c) d", "%b()") == ("(a(b)c)",)


def test_frontier():
    words = [w for (w,) in gmatch("THE (quick) fox", "%f[%a]%a+")]
    assert words == ["THE", "quick", "fox"]


def test_back_reference():
    assert match('say "hi" now', "([\"'])(.-)%1") == ('"', "hi")


def test_lazy_and_greedy():
    assert match("<a><b>", "<(.-)>") == ("a",)
    assert match("<a><b>", "<(.*)>") == ("a><b",)


def test_optional_and_end_anchor():
    assert match("color", "^colou?r$") == ("color",)
    assert match("colour", "^colou?r$") == ("colour",)
    assert match("colours", "^colou?r$") is None


def test_bracket_class_and_complement():
    s = "abc-DEF_ghi"
    assert [w for (w,) in gmatch(s, "[a-z]+")] == ["abc", "ghi"]
    assert [w for (w,) in gmatch(s, "[^%l]+")] == ["-DEF_"]


def test_upper_class_complement():
    s = "abcD"
    start, end = find(s, "%U+")
    assert s[start - 1:end] == "abc"


def test_gmatch_key_values():
    pairs = dict(gmatch("from=world, to=Lua", "(%w+)=(%w+)"))
    assert pairs == {"from": "world", "to": "Lua"}


def test_gmatch_empty_matches_advance():
    assert len(list(gmatch("abc", "x*"))) == len("abc") + 1


def test_gsub_manual_examples():
    assert gsub("hello world", "(%w+)", "%1 %1") == ("hello hello world world", 2)
    assert gsub("hello world", "%w+", "%0 %0", 1) == ("hello hello world", 1)
    assert gsub("hello world", "(%w+) (%w+)", "%2 %1") == ("world hello", 1)
    assert gsub("abc", "", "-") == ("-a-b-c-", 4)


def test_gsub_count_matches_replace():
    s = "hello world foo"
    result, n = gsub(s, "o", "0")
    assert result == s.replace("o", "0")
    assert n == s.count("o")


def test_gsub_max_n_limits():
    result, n = gsub("aaa", "a", "b", 2)
    assert n == 2
    assert result == "b" * 2 + "a"


def test_gsub_anchored_once():
    result, n = gsub("aaa", "^a", "b")
    assert n == 1
    assert result == "b" + "aa"


def test_gsub_function_and_mapping():
    result, n = gsub("a b", "%w", lambda c: c.upper())
    assert result == "A B" and n == 2
    result, n = gsub("abc", "%w", {"a": "1"})
    assert result == "1bc" and n == 3


def test_gsub_function_returning_none_keeps_text():
    s = "one two"
    assert gsub(s, "%w+", lambda w: None) == (s, 2)


def test_gsub_numeric_replacement():
    assert gsub("x y", "%a", 7) == ("7 7", 2)


def test_gsub_escaped_percent():
    assert gsub("a", "a", "%%") == ("%", 1)


def test_gsub_invalid_template():
    with pytest.raises(PatternError, match="invalid use"):
        gsub("abc", "b", "%z")


def test_gsub_invalid_replacement_value():
    with pytest.raises(PatternError, match="invalid replacement value"):
        gsub("abc", "b", lambda _: [1])


def test_gsub_bad_repl_type():
    with pytest.raises(TypeError):
        gsub("abc", "b", None)


@pytest.mark.parametrize(
    "pattern, message",
    [
        ("%", "ends with"),
        ("[a", "missing"),
        ("%b", "missing arguments"),
        ("%fa", "missing '\\['"),
        ("(a", "unfinished capture"),
        ("a)", "invalid pattern capture"),
        ("(a)%2", "invalid capture index"),
    ],
)
def test_malformed_patterns(pattern, message):
    with pytest.raises(PatternError, match=message):
        match("abc", pattern)


def test_pattern_too_complex():
    with pytest.raises(PatternError, match="too complex"):
        match("a" * 300, "a?" * 300)


def test_too_many_captures():
    with pytest.raises(PatternError, match="too many captures"):
        match("a" * 40, "(a)" * 33)


def test_pattern_error_is_lua_error():
    with pytest.raises(LuaError):
        find("abc", "[")