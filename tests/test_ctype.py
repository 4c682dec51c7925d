import string

import pytest

from alos.ctype import (
    CharClass,
    char_class,
    is_alnum,
    is_alpha,
    is_ascii,
    is_cntrl,
    is_digit,
    is_graph,
    is_lower,
    is_print,
    is_punct,
    is_space,
    is_upper,
    is_xdigit,
    to_ascii,
    to_lower,
    to_upper,
)

ASCII = [chr(code) for code in range(128)]


def test_pinned_table_entries():
    assert char_class("A") == CharClass.UPPER | CharClass.XDIGIT
    assert char_class(" ") == CharClass.SPACE | CharClass.HARD_SPACE
    assert char_class("\t") == CharClass.CNTRL | CharClass.SPACE


def test_eof_and_high_codes_have_no_class():
    assert char_class(-1) == CharClass(0)
    assert all(char_class(code) == CharClass(0) for code in range(128, 256))


@pytest.mark.parametrize("ch", ASCII)
def test_agrees_with_ascii_semantics(ch):
    assert is_alpha(ch) == (ch in string.ascii_letters)
    assert is_digit(ch) == (ch in string.digits)
    assert is_alnum(ch) == (ch in string.ascii_letters + string.digits)
    assert is_upper(ch) == (ch in string.ascii_uppercase)
    assert is_lower(ch) == (ch in string.ascii_lowercase)
    assert is_punct(ch) == (ch in string.punctuation)
    assert is_xdigit(ch) == (ch in string.hexdigits)
    assert is_space(ch) == (ch in " \t\n\v\f\r")
    assert is_print(ch) == ch.isprintable()
    assert is_graph(ch) == (ch.isprintable() and ch != " ")
    assert is_cntrl(ch) == (ord(ch) < 32 or ord(ch) == 127)


@pytest.mark.parametrize("ch", ASCII)
def test_int_and_str_agree(ch):
    assert char_class(ch) == char_class(ord(ch))


def test_case_round_trip():
    for ch in string.ascii_lowercase:
        assert to_lower(to_upper(ch)) == ch
        assert to_upper(ch) == ch.upper()
    for ch in string.ascii_uppercase:
        assert to_upper(to_lower(ch)) == ch
        assert to_lower(ch) == ch.lower()


def test_case_conversion_keeps_other_chars_and_type():
    assert to_upper("5") == "5"
    assert to_lower("!") == "!"
    assert to_upper(ord("q")) == ord("Q")
    assert to_lower(-1) == -1


def test_ascii_helpers():
    assert is_ascii("z")
    assert not is_ascii(200)
    assert not is_ascii(-1)
    assert to_ascii(0xC1) == 0x41
    assert to_ascii("a") == "a"


@pytest.mark.parametrize("bad", [256, -2, "ab", "", "\u4e2d"])
def test_out_of_range_rejected(bad):
    with pytest.raises(ValueError):
        char_class(bad)


def test_wrong_type_rejected():
    with pytest.raises(TypeError):
        is_digit(3.5)