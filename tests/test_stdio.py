import io

import pytest

from alos.stdio import getchar, printf, putc, puts, scanf
from alos.vsprintf import sprintf


def test_printf_writes_formatted_text_and_returns_length():
    out = io.StringIO()
    n = printf("try to load %s in:0x%x\n", "alos", 0xC0001000, stream=out)
    assert out.getvalue() == "try to load alos in:0xc0001000\n"
    assert n == len(out.getvalue())


def test_printf_agrees_with_sprintf():
    out = io.StringIO()
    fmt = "%5d|%-4s|%#o|%08X"
    args = (-42, "ab", 8, 0xBEEF)
    n = printf(fmt, *args, stream=out)
    assert out.getvalue() == sprintf(fmt, *args)
    assert n == len(sprintf(fmt, *args))


def test_printf_defaults_to_stdout(capsys):
    printf("%s:%d", "alos", 7)
    assert capsys.readouterr().out == sprintf("%s:%d", "alos", 7)


def test_puts_adds_no_newline():
    out = io.StringIO()
    assert puts("abc", stream=out) == 3
    assert out.getvalue() == "abc"


def test_putc_accepts_char_and_code():
    out = io.StringIO()
    assert putc("a", stream=out) == 1
    assert putc(ord("b"), stream=out) == 1
    assert out.getvalue() == "ab"


def test_putc_rejects_longer_strings():
    with pytest.raises(ValueError):
        putc("ab", stream=io.StringIO())


def test_scanf_stops_after_newline():
    src = io.StringIO("ls\nmore")
    assert scanf(21, src) == "ls\n"
    assert scanf(21, src) == "more"
    assert scanf(21, src) == ""


def test_scanf_respects_count():
    src = io.StringIO("abcdef")
    assert scanf(3, src) == "abc"
    assert scanf(3, src) == "def"


def test_scanf_zero_count_reads_nothing():
    src = io.StringIO("x")
    assert scanf(0, src) == ""
    assert getchar(src) == "x"


def test_getchar_reads_one_at_a_time_then_eof():
    src = io.StringIO("ab")
    assert getchar(src) == "a"
    assert getchar(src) == "b"
    with pytest.raises(EOFError):
        getchar(src)