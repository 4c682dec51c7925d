"""Console input and output on text streams: printf, puts, putc, scanf, getchar."""

from __future__ import annotations

import sys
from typing import Any, Optional, TextIO, Union

from alos.vsprintf import sprintf


def _output(stream: Optional[TextIO]) -> TextIO:
    return sys.stdout if stream is None else stream


def _input(stream: Optional[TextIO]) -> TextIO:
    return sys.stdin if stream is None else stream


def printf(fmt: str, *args: Any, stream: Optional[TextIO] = None) -> int:
    """Format ``args`` with ``fmt``, write the text and return its length."""
    text = sprintf(fmt, *args)
    _output(stream).write(text)
    return len(text)


def puts(s: str, stream: Optional[TextIO] = None) -> int:
    """Write ``s`` as it is, without adding a newline; return its length."""
    _output(stream).write(s)
    return len(s)


def putc(c: Union[str, int], stream: Optional[TextIO] = None) -> int:
    """Write a single character, given as a one-character string or a code."""
    if isinstance(c, int):
        char = chr(c & 0xFF)
    elif isinstance(c, str) and len(c) == 1:
        char = c
    else:
        raise ValueError(f"expected a single character, got {c!r}")
    _output(stream).write(char)
    return 1


def scanf(count: int, stream: Optional[TextIO] = None) -> str:
    """Read at most ``count`` characters, stopping after a newline or at end of input."""
    source = _input(stream)
    chars: list[str] = []
    while len(chars) < count:
        char = source.read(1)
        if not char:
            break
        chars.append(char)
        if char == "\n":
            break
    return "".join(chars)


def getchar(stream: Optional[TextIO] = None) -> str:
    """Read one character; raise EOFError when the input is exhausted."""
    char = _input(stream).read(1)
    if not char:
        raise EOFError("end of input")
    return char