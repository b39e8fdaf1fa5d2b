"""Prompting capability used by the interactive shell.

The shell only talks to a ``Prompter``; ``ConsolePrompter`` is the terminal
implementation. Tests use a scripted stand-in.
"""

from __future__ import annotations

import datetime
from decimal import Decimal
from typing import Callable, List, Optional, Protocol, Sequence

import dateparser

from .allocator import to_decimal
from .errors import InvalidInput

DATE_HINT = "e.g. '24 June 2019', 'last monday', 'today', '2019-06-24'"


def parse_human_date(text: str) -> datetime.date:
    """Parse free-form date input with dateparser."""
    text = (text or "").strip()
    if not text:
        raise InvalidInput("Date is empty")
    try:
        return datetime.datetime.strptime(text, "%Y-%m-%d").date()
    except ValueError:
        pass
    parsed = dateparser.parse(text, settings={"PREFER_DATES_FROM": "past"})
    if not parsed:
        raise InvalidInput(f"Could not parse the date: {text}")
    return parsed.date()


def parse_date_list(text: str) -> List[datetime.date]:
    """Comma separated dates; empty input is an empty list."""
    return sorted({parse_human_date(part) for part in (text or "").split(",") if part.strip()})


class Prompter(Protocol):
    def ask_text(self, prompt: str, default: Optional[str] = None) -> str: ...

    def ask_date(
        self, prompt: str, default: Optional[datetime.date] = None
    ) -> datetime.date: ...

    def ask_number(self, prompt: str, default=None) -> Decimal: ...

    def ask_yes_no(self, prompt: str, default: bool = False) -> bool: ...

    def choose(self, prompt: str, options: Sequence[str], default: int = 0) -> int: ...


class ConsolePrompter:
    """Blocking prompts on stdin/stdout. Invalid answers are asked again."""

    def __init__(
        self,
        input_func: Callable[[str], str] = input,
        output: Callable[[str], None] = print,
    ):
        self._input = input_func
        self._print = output

    def _read(self, prompt: str, default=None) -> str:
        suffix = f" [{default}]" if default not in (None, "") else ""
        try:
            answer = self._input(f"{prompt}{suffix}: ").strip()
        except EOFError:
            raise KeyboardInterrupt from None
        return answer

    def ask_text(self, prompt: str, default: Optional[str] = None) -> str:
        while True:
            answer = self._read(prompt, default)
            if answer:
                return answer
            if default is not None:
                return default
            self._print("A value is required.")

    def ask_date(self, prompt, default=None):
        while True:
            answer = self._read(prompt, default.isoformat() if default else None)
            if not answer and default is not None:
                return default
            try:
                return parse_human_date(answer)
            except InvalidInput as e:
                self._print(f"{e} ({DATE_HINT})")

    def ask_number(self, prompt, default=None):
        while True:
            answer = self._read(prompt, default)
            if not answer and default is not None:
                return to_decimal(default)
            try:
                return to_decimal(answer, "answer")
            except InvalidInput as e:
                self._print(str(e))

    def ask_yes_no(self, prompt, default=False):
        hint = "Y/n" if default else "y/N"
        while True:
            answer = self._read(f"{prompt} ({hint})").lower()
            if not answer:
                return default
            if answer in {"y", "yes"}:
                return True
            if answer in {"n", "no"}:
                return False
            self._print("Please answer y or n.")

    def choose(self, prompt, options, default=0):
        if not options:
            raise InvalidInput(f"Nothing to choose from for: {prompt}")
        self._print(prompt)
        for i, option in enumerate(options, start=1):
            self._print(f"  {i}. {option}")
        while True:
            answer = self._read("Choice", default + 1)
            if not answer:
                return default
            if answer.isdigit() and 1 <= int(answer) <= len(options):
                return int(answer) - 1
            self._print(f"Enter a number between 1 and {len(options)}.")
