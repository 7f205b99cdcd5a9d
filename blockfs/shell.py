"""Command line shell for the block file system."""

from __future__ import annotations

import re
import sys
from collections.abc import Iterable
from dataclasses import dataclass
from typing import TextIO

from .filesys import FileSys, FileSysError

PROMPT = "FS> "

_ULONG_MAX = 2**64 - 1
_UINT_MASK = 2**32 - 1
_NUMBER = re.compile(r"\s*([+-]?)(0[xX][0-9a-fA-F]+|0[0-7]*|[1-9][0-9]*)")

_NO_ARGS = frozenset({"ls", "home", "quit"})
_ONE_ARG = frozenset({"mkdir", "cd", "rmdir", "create", "cat", "rm", "stat"})
_TWO_ARGS = frozenset({"append", "tail"})


class CommandError(Exception):
    """Raised for a command line that cannot be carried out."""


@dataclass(frozen=True)
class Command:
    """A parsed command line."""

    name: str
    file_name: str = ""
    append_data: str = ""


def parse_command(line: str) -> Command | None:
    """Parse a command line; None for a blank line, CommandError if invalid."""
    tokens = line.split()
    if not tokens:
        return None
    name = tokens[0]
    if name in _NO_ARGS:
        expected = 1
    elif name in _ONE_ARG:
        expected = 2
    elif name in _TWO_ARGS:
        expected = 3
    else:
        raise CommandError(f"Invalid command line: {name} is not a command")
    if len(tokens) != expected:
        raise CommandError(
            f"Invalid command line: {name} has improper number of arguments"
        )
    padded = tokens + ["", ""]
    return Command(name, padded[1], padded[2])


def _parse_count(text: str) -> int:
    """Read a byte count the way an unsigned C conversion with base 0 would."""
    match = _NUMBER.match(text)
    if match is None:
        return 0
    sign, digits = match.groups()
    if digits[:2] in ("0x", "0X"):
        magnitude = int(digits[2:], 16)
    elif digits.startswith("0"):
        magnitude = int(digits, 8)
    else:
        magnitude = int(digits)
    if magnitude > _ULONG_MAX:
        raise CommandError(
            f"Invalid command line: {text} is not a valid number of bytes"
        )
    value = (-magnitude) % (_ULONG_MAX + 1) if sign == "-" else magnitude
    return value & _UINT_MASK


class Shell:
    """Reads commands and runs them against a file system."""

    def __init__(
        self,
        filesys: FileSys,
        out: TextIO | None = None,
        err: TextIO | None = None,
    ) -> None:
        self.filesys = filesys
        self.out = out if out is not None else sys.stdout
        self.err = err if err is not None else sys.stderr
        self._handlers = {
            "mkdir": lambda c: self.filesys.mkdir(c.file_name),
            "cd": lambda c: self.filesys.cd(c.file_name),
            "home": lambda c: self.filesys.home(),
            "rmdir": lambda c: self.filesys.rmdir(c.file_name),
            "ls": self._ls,
            "create": lambda c: self.filesys.create(c.file_name),
            "append": lambda c: self.filesys.append(c.file_name, c.append_data),
            "cat": lambda c: self._show(self.filesys.cat(c.file_name)),
            "tail": self._tail,
            "rm": lambda c: self.filesys.rm(c.file_name),
            "stat": lambda c: print(self.filesys.stat(c.file_name), file=self.out),
        }

    def _show(self, data: bytes) -> None:
        print(data.decode("utf-8", "replace"), file=self.out)

    def _ls(self, command: Command) -> None:
        for name in self.filesys.ls():
            print(name, file=self.out)

    def _tail(self, command: Command) -> None:
        count = _parse_count(command.append_data)
        self._show(self.filesys.tail(command.file_name, count))

    def execute_command(self, line: str) -> bool:
        """Run one command line. Return True when the user asked to quit."""
        try:
            command = parse_command(line)
        except CommandError as exc:
            print(exc, file=self.err)
            return False
        if command is None:
            return False
        if command.name == "quit":
            return True
        try:
            self._handlers[command.name](command)
        except CommandError as exc:
            print(exc, file=self.err)
        except FileSysError as exc:
            print(exc, file=self.out)
        return False

    def run(self, lines: Iterable[str] | None = None) -> None:
        """Prompt for and run commands until quit or end of input."""
        source = iter(lines if lines is not None else sys.stdin)
        self.filesys.mount()
        try:
            while True:
                self.out.write(PROMPT)
                self.out.flush()
                line = next(source, None)
                if line is None or self.execute_command(line):
                    break
        finally:
            self.filesys.unmount()

    def run_script(self, path: str) -> None:
        """Run the commands of a script file, echoing each after the prompt."""
        try:
            with open(path, encoding="utf-8") as script:
                lines = script.readlines()
        except OSError:
            print("Could not open script file", file=self.err)
            return
        # A final line with no terminating newline is not run.
        if lines and not lines[-1].endswith("\n"):
            lines.pop()
        self.filesys.mount()
        try:
            for line in lines:
                text = line[:-1]
                print(f"{PROMPT}{text}", file=self.out)
                if self.execute_command(text):
                    break
        finally:
            self.filesys.unmount()


def main(argv: list[str] | None = None) -> int:
    """Start the shell interactively, or on a script given with -s."""
    args = sys.argv[1:] if argv is None else list(argv)
    shell = Shell(FileSys())
    if not args:
        shell.run()
    elif len(args) == 2 and args[0] == "-s":
        shell.run_script(args[1])
    else:
        print("Invalid command line", file=sys.stderr)
        print("Usage (one of the following): ", file=sys.stderr)
        print("blockfs", file=sys.stderr)
        print("blockfs -s <script-name> ", file=sys.stderr)
    return 0