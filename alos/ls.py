"""List the names in a directory, each followed by a tab."""

from __future__ import annotations

import argparse
import os
from typing import Iterable, Optional, Sequence, Union

from alos.ext2 import parse_dir_entries
from alos.stdio import puts


def entry_names(block: bytes) -> list[str]:
    """Return the names of the records in one raw ext2 directory block."""
    return [os.fsdecode(entry.name) for entry in parse_dir_entries(block)]


def format_listing(names: Iterable[str]) -> str:
    """Join ``names``, each followed by a tab, and end the listing with a newline."""
    return "".join(f"{name}\t" for name in names) + "\n"


def list_directory(path: Union[str, "os.PathLike[str]"] = ".") -> list[str]:
    """Return the names in ``path`` in directory order, starting with . and .."""
    with os.scandir(path) as entries:
        names = [entry.name for entry in entries]
    return [".", "..", *names]


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = argparse.ArgumentParser(prog="alos-ls", description="List a directory.")
    parser.add_argument("path", nargs="?", default=".", help="directory to list")
    args = parser.parse_args(argv)
    try:
        names = list_directory(args.path)
    except OSError:
        puts("open current dir error\n")
        return 0
    puts(format_listing(names))
    return 0