"""Formatted output in the style of the C library's ``vsprintf``."""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Any, Iterator

_UPPER_DIGITS = "0123456789ABCDEFGHIJKLMNOPQRSTUVWXYZ"
_LOWER_DIGITS = _UPPER_DIGITS.lower()
_DECIMAL = "0123456789"
_MASK32 = 0xFFFFFFFF
_SIGN_BIT = 0x80000000


class Flags(enum.IntFlag):
    """Conversion flags understood by :func:`format_number`."""

    ZEROPAD = 1
    SIGN = 2
    PLUS = 4
    SPACE = 8
    LEFT = 16
    SPECIAL = 32
    SMALL = 64


_FLAG_CHARS = {
    "-": Flags.LEFT,
    "+": Flags.PLUS,
    " ": Flags.SPACE,
    "#": Flags.SPECIAL,
    "0": Flags.ZEROPAD,
}


@dataclass
class CharCount:
    """Receives the number of characters written so far for a ``%n``."""

    value: int = 0


def _to_base(value: int, base: int, digits: str) -> str:
    if value == 0:
        return "0"
    out = []
    while value:
        value, rem = divmod(value, base)
        out.append(digits[rem])
    return "".join(reversed(out))


def format_number(num: int, base: int, size: int, precision: int, flags: int) -> str:
    """Render a 32-bit integer with width ``size`` and minimum digits ``precision``.

    Without ``Flags.SIGN`` the value is taken as unsigned.
    """
    if not 2 <= base <= 36:
        raise ValueError(f"base must be between 2 and 36, got {base}")
    flags = int(flags)
    digits = _LOWER_DIGITS if flags & Flags.SMALL else _UPPER_DIGITS
    if flags & Flags.LEFT:
        flags &= ~Flags.ZEROPAD.value
    fill = "0" if flags & Flags.ZEROPAD else " "

    value = int(num) & _MASK32
    if flags & Flags.SIGN and value & _SIGN_BIT:
        sign = "-"
        value = (-value) & _MASK32
    elif flags & Flags.PLUS:
        sign = "+"
    elif flags & Flags.SPACE:
        sign = " "
    else:
        sign = ""
    if sign:
        size -= 1

    prefix = ""
    if flags & Flags.SPECIAL:
        if base == 16:
            size -= 2
            prefix = "0" + digits[33]
        elif base == 8:
            size -= 1
            prefix = "0"

    body = _to_base(value, base, digits)
    precision = max(precision, len(body))
    size -= precision

    parts = []
    if not flags & (Flags.ZEROPAD | Flags.LEFT):
        parts.append(" " * max(size, 0))
        size = 0
    parts.append(sign)
    parts.append(prefix)
    if not flags & Flags.LEFT:
        parts.append(fill * max(size, 0))
        size = 0
    parts.append("0" * (precision - len(body)))
    parts.append(body)
    parts.append(" " * max(size, 0))
    return "".join(parts)


def _as_int(arg: Any) -> int:
    if isinstance(arg, int):
        return int(arg)
    raise TypeError(f"expected an integer argument, got {type(arg).__name__}")


def _as_char(arg: Any) -> str:
    if isinstance(arg, str) and len(arg) == 1:
        return arg
    if isinstance(arg, int):
        return chr(int(arg) & 0xFF)
    raise TypeError(f"expected a character argument, got {arg!r}")


def _read_decimal(fmt: str, pos: int) -> tuple[int, int]:
    start = pos
    while pos < len(fmt) and fmt[pos] in _DECIMAL:
        pos += 1
    return int(fmt[start:pos]), pos


def sprintf(fmt: str, *args: Any) -> str:
    """Format ``args`` according to ``fmt`` and return the resulting text.

    Supports the flags ``-+ #0``, widths and precisions (also ``*``), the
    qualifiers ``hlL`` and the conversions ``c s o p x X d i u n``.  As in the
    original library, a ``*`` is consumed as an argument but is not stepped
    over, so it is then emitted literally.
    """
    out: list[str] = []
    pending: Iterator[Any] = iter(args)

    def next_arg() -> Any:
        try:
            return next(pending)
        except StopIteration:
            raise TypeError("not enough arguments for format string") from None

    pos = 0
    end = len(fmt)
    while pos < end:
        ch = fmt[pos]
        pos += 1
        if ch != "%":
            out.append(ch)
            continue

        flags = 0
        while pos < end and fmt[pos] in _FLAG_CHARS:
            flags |= _FLAG_CHARS[fmt[pos]]
            pos += 1

        width = -1
        if pos < end and fmt[pos] in _DECIMAL:
            width, pos = _read_decimal(fmt, pos)
        elif pos < end and fmt[pos] == "*":
            width = _as_int(next_arg())
            if width < 0:
                width = -width
                flags |= Flags.LEFT

        precision = -1
        if pos < end and fmt[pos] == ".":
            pos += 1
            if pos < end and fmt[pos] in _DECIMAL:
                precision, pos = _read_decimal(fmt, pos)
            elif pos < end and fmt[pos] == "*":
                precision = _as_int(next_arg())
            if precision < 0:
                precision = 0

        if pos < end and fmt[pos] in "hlL":
            pos += 1

        if pos >= end:
            out.append("%")
            break
        conv = fmt[pos]
        pos += 1

        if conv == "c":
            char = _as_char(next_arg())
            pad = " " * max(width - 1, 0)
            out.append(char + pad if flags & Flags.LEFT else pad + char)
        elif conv == "s":
            text = next_arg()
            if not isinstance(text, str):
                raise TypeError(f"expected a string argument, got {text!r}")
            if precision >= 0:
                text = text[:precision]
            pad = " " * max(width - len(text), 0)
            out.append(text + pad if flags & Flags.LEFT else pad + text)
        elif conv == "o":
            out.append(format_number(_as_int(next_arg()), 8, width, precision, flags))
        elif conv == "p":
            if width == -1:
                width = 8
                flags |= Flags.ZEROPAD
            out.append(format_number(_as_int(next_arg()), 16, width, precision, flags))
        elif conv in "xX":
            if conv == "x":
                flags |= Flags.SMALL
            out.append(format_number(_as_int(next_arg()), 16, width, precision, flags))
        elif conv in "diu":
            if conv != "u":
                flags |= Flags.SIGN
            out.append(format_number(_as_int(next_arg()), 10, width, precision, flags))
        elif conv == "n":
            target = next_arg()
            if not isinstance(target, CharCount):
                raise TypeError("%n needs a CharCount argument")
            target.value = sum(map(len, out))
        else:
            if conv != "%":
                out.append("%")
            out.append(conv)
    return "".join(out)