"""Character classification over the 8-bit table used by the C library."""

from __future__ import annotations

import enum
from typing import Union

CharLike = Union[str, int]

EOF = -1


class CharClass(enum.IntFlag):
    """Class bits stored for every character code."""

    UPPER = 0x01
    LOWER = 0x02
    DIGIT = 0x04
    CNTRL = 0x08
    PUNCT = 0x10
    SPACE = 0x20
    XDIGIT = 0x40
    HARD_SPACE = 0x80


_NONE = CharClass(0)


def _classify(code: int) -> CharClass:
    if code == 0x20:
        return CharClass.SPACE | CharClass.HARD_SPACE
    if 9 <= code <= 13:
        return CharClass.CNTRL | CharClass.SPACE
    if code < 0x20 or code == 0x7F:
        return CharClass.CNTRL
    if ord("0") <= code <= ord("9"):
        return CharClass.DIGIT
    if ord("A") <= code <= ord("Z"):
        if code <= ord("F"):
            return CharClass.UPPER | CharClass.XDIGIT
        return CharClass.UPPER
    if ord("a") <= code <= ord("z"):
        if code <= ord("f"):
            return CharClass.LOWER | CharClass.XDIGIT
        return CharClass.LOWER
    if code < 0x7F:
        return CharClass.PUNCT
    return _NONE


_TABLE = tuple(_classify(code) for code in range(256))


def _code(c: CharLike) -> int:
    """Return the character code of ``c``, checked against the table range."""
    if isinstance(c, str):
        if len(c) != 1:
            raise ValueError(f"expected a single character, got {c!r}")
        code = ord(c)
    elif isinstance(c, int):
        code = int(c)
    else:
        raise TypeError(f"expected a character or an int, got {type(c).__name__}")
    if not EOF <= code <= 0xFF:
        raise ValueError(f"character code {code} is outside the 8-bit table")
    return code


def char_class(c: CharLike) -> CharClass:
    """Return the class bits of ``c``; EOF (-1) has none."""
    code = _code(c)
    if code == EOF:
        return _NONE
    return _TABLE[code]


def _has(c: CharLike, mask: CharClass) -> bool:
    return bool(char_class(c) & mask)


def is_alnum(c: CharLike) -> bool:
    return _has(c, CharClass.UPPER | CharClass.LOWER | CharClass.DIGIT)


def is_alpha(c: CharLike) -> bool:
    return _has(c, CharClass.UPPER | CharClass.LOWER)


def is_cntrl(c: CharLike) -> bool:
    return _has(c, CharClass.CNTRL)


def is_digit(c: CharLike) -> bool:
    return _has(c, CharClass.DIGIT)


def is_graph(c: CharLike) -> bool:
    return _has(
        c, CharClass.PUNCT | CharClass.UPPER | CharClass.LOWER | CharClass.DIGIT
    )


def is_lower(c: CharLike) -> bool:
    return _has(c, CharClass.LOWER)


def is_print(c: CharLike) -> bool:
    return _has(
        c,
        CharClass.PUNCT
        | CharClass.UPPER
        | CharClass.LOWER
        | CharClass.DIGIT
        | CharClass.HARD_SPACE,
    )


def is_punct(c: CharLike) -> bool:
    return _has(c, CharClass.PUNCT)


def is_space(c: CharLike) -> bool:
    return _has(c, CharClass.SPACE)


def is_upper(c: CharLike) -> bool:
    return _has(c, CharClass.UPPER)


def is_xdigit(c: CharLike) -> bool:
    return _has(c, CharClass.DIGIT | CharClass.XDIGIT)


def is_ascii(c: CharLike) -> bool:
    """True when ``c``, taken as unsigned, is at most 0x7f."""
    code = ord(c) if isinstance(c, str) else int(c)
    return 0 <= code <= 0x7F


def to_ascii(c: CharLike) -> CharLike:
    """Clear all but the low seven bits of ``c``."""
    if isinstance(c, str):
        return chr(ord(c) & 0x7F)
    return int(c) & 0x7F


def to_lower(c: CharLike) -> CharLike:
    """Lower-case an ASCII capital; anything else is returned unchanged."""
    code = _code(c)
    if is_upper(code):
        code += ord("a") - ord("A")
    return chr(code) if isinstance(c, str) else code


def to_upper(c: CharLike) -> CharLike:
    """Upper-case an ASCII small letter; anything else is returned unchanged."""
    code = _code(c)
    if is_lower(code):
        code -= ord("a") - ord("A")
    return chr(code) if isinstance(c, str) else code