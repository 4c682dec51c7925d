"""A minimal command shell with cd, mkdir and rmdir built in."""

from __future__ import annotations

import argparse
import os
import subprocess
import sys
from pathlib import Path
from typing import Callable, Optional, Sequence, TextIO, Union

from alos.stdio import puts

BUFFER_SIZE = 21
MAX_ARGS = 9
GREETING = "hello,You are in alos-shell now(press 'h' for help)\n"


class CommandTooLong(ValueError):
    """A command line that does not fit in the command buffer."""


def split_command(line: str) -> list[str]:
    """Split ``line`` at spaces into at most nine words."""
    return [word for word in line.split(" ") if word][:MAX_ARGS]


def _mkdir(path: str) -> None:
    os.mkdir(path, 0o777)


_BUILTINS: dict[str, Callable[[str], None]] = {
    "cd": os.chdir,
    "mkdir": _mkdir,
    "rmdir": os.rmdir,
}


class Shell:
    """Reads command lines and runs built-ins or programs from ``bin_dir``."""

    def __init__(
        self, bin_dir: Union[str, "os.PathLike[str]"] = "/bin", stdout: Optional[TextIO] = None
    ) -> None:
        self.bin_dir = Path(bin_dir)
        self.stdout = stdout

    def _say(self, text: str) -> None:
        puts(text, stream=self.stdout)

    def run_builtin(self, argv: Sequence[str]) -> bool:
        """Run ``argv`` if it names a built-in; return whether it did."""
        if not argv or argv[0] not in _BUILTINS:
            return False
        name = argv[0]
        if len(argv) < 2:
            self._say(f"{name}: missing operand\n")
            return True
        try:
            _BUILTINS[name](argv[1])
        except OSError as exc:
            self._say(f"{name}: {exc.strerror}: {argv[1]}\n")
        return True

    def do_command(self, argv: Sequence[str]) -> int:
        """Run a built-in or the program ``bin_dir/argv[0]``; return its status.

        A built-in gives 0; a program that cannot be started gives -1.
        """
        if not argv:
            raise ValueError("empty command")
        if self.run_builtin(argv):
            return 0
        path = self.bin_dir / argv[0]
        try:
            completed = subprocess.run(
                list(argv), executable=str(path), env={}, check=False
            )
        except OSError as exc:
            self._say(f"execve:-1 {path}: {exc.strerror or exc}\n")
            return -1
        return completed.returncode

    def handle_line(self, line: str) -> Optional[int]:
        """Run one input line; return the command status, or None for a blank line."""
        text = line[:-1] if line.endswith("\n") else line
        if len(text) >= BUFFER_SIZE - 1:
            raise CommandTooLong(f"command longer than {BUFFER_SIZE - 2} characters")
        argv = split_command(text)
        if not argv:
            return None
        return self.do_command(argv)

    def run(self, stdin: Optional[TextIO] = None) -> int:
        """Read and run commands until the input ends."""
        source = sys.stdin if stdin is None else stdin
        self._say(GREETING)
        for line in source:
            try:
                self.handle_line(line)
            except CommandTooLong:
                self._say("cmd is too long\n")
        return 0


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = argparse.ArgumentParser(prog="alos-shell", description="Run the shell.")
    parser.add_argument(
        "--bin-dir", default="/bin", help="directory programs are run from"
    )
    args = parser.parse_args(argv)
    return Shell(args.bin_dir).run()