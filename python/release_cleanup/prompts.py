"""
Interactive prompt primitives used by the cleanup workflow.

Prompts read plain lines from the terminal, in the same style as the
confirmation prompts of the deletion scripts: the question is printed, the
answer is validated and the question is repeated until the answer is valid.

Multi-select prompts print numbered choices with their default marks and
accept "1,3,5-7", "all", "none", or an empty line to keep the defaults.
"""

import getpass
from dataclasses import dataclass
from typing import Any, Callable, List, Optional, Sequence, Union

Validator = Callable[[str], Union[bool, str]]


@dataclass
class Choice:
    """One entry of a select or checkbox prompt"""

    label: str
    value: Any
    checked: bool = False


class Separator:
    """Visual separator between choices of a select prompt"""

    def __init__(self, line: str = "-" * 20):
        self.line = line


def validate_required(value: str, field_name: str = "Field") -> Union[bool, str]:
    """Validate that input is not empty"""
    return len(value) > 0 or f"{field_name} is required"


def parse_selection(answer: str, count: int) -> Optional[List[int]]:
    """Parse a checkbox answer into zero-based indexes.

    Returns None when the answer is not valid for `count` choices.
    """
    answer = answer.strip().lower()
    if answer == "all":
        return list(range(count))
    if answer == "none":
        return []

    indexes: List[int] = []
    for part in answer.replace(" ", ",").split(","):
        if not part:
            continue
        if "-" in part:
            start, _, end = part.partition("-")
            if not (start.isdigit() and end.isdigit()):
                return None
            low, high = int(start), int(end)
            if low > high:
                return None
            numbers = range(low, high + 1)
        elif part.isdigit():
            numbers = [int(part)]
        else:
            return None
        for number in numbers:
            if number < 1 or number > count:
                return None
            if number - 1 not in indexes:
                indexes.append(number - 1)
    return sorted(indexes)


class Prompter:
    """Line-based terminal prompts"""

    def __init__(
        self,
        input_func: Callable[[str], str] = input,
        secret_func: Callable[[str], str] = getpass.getpass,
        output: Callable[[str], None] = print,
    ):
        self._input = input_func
        self._secret = secret_func
        self._output = output

    def select(self, message: str, choices: Sequence[Union[Choice, Separator]], default: int = 0) -> Any:
        """Single choice from a list. Returns the chosen value.

        Args:
            message: Question to print
            choices: Choices, optionally interleaved with separators
            default: Zero-based index (among real choices) used for an empty answer
        """
        options = [c for c in choices if isinstance(c, Choice)]
        if not options:
            raise ValueError("select() needs at least one choice")

        self._output(f"\n{message}")
        number = 0
        for entry in choices:
            if isinstance(entry, Separator):
                self._output(f"  {entry.line}")
                continue
            number += 1
            marker = ">" if number - 1 == default else " "
            self._output(f" {marker} {number}) {entry.label}")

        while True:
            answer = self._input(f"Choose [1-{len(options)}] (default {default + 1}): ").strip()
            if not answer:
                return options[default].value
            if answer.isdigit() and 1 <= int(answer) <= len(options):
                return options[int(answer) - 1].value
            self._output(f"Please enter a number between 1 and {len(options)}.")

    def checkbox(
        self,
        message: str,
        choices: Sequence[Choice],
        empty_selects_all: bool = False,
    ) -> List[Any]:
        """Multi-select. Returns the chosen values in choice order.

        Args:
            message: Question to print
            choices: Choices; those with checked=True are the defaults
            empty_selects_all: When the final selection is empty, return every
                choice instead. Callers choose this explicitly; destructive
                selections keep it False so that nothing means nothing.
        """
        if not choices:
            return []

        self._output(f"\n{message}")
        for number, choice in enumerate(choices, 1):
            mark = "x" if choice.checked else " "
            self._output(f"  [{mark}] {number}) {choice.label}")

        while True:
            answer = self._input("Select numbers (e.g. 1,3,5-7), 'all', 'none' or Enter for defaults: ")
            if not answer.strip():
                indexes = [i for i, c in enumerate(choices) if c.checked]
            else:
                indexes = parse_selection(answer, len(choices))
                if indexes is None:
                    self._output(f"Please enter numbers between 1 and {len(choices)}, 'all' or 'none'.")
                    continue
            break

        if not indexes and empty_selects_all:
            return [c.value for c in choices]
        return [choices[i].value for i in indexes]

    def confirm(self, message: str, default: bool = False) -> bool:
        """Yes/no question; an empty answer returns the default"""
        hint = "Y/n" if default else "y/N"
        while True:
            response = self._input(f"{message} ({hint}): ").lower().strip()
            if not response:
                return default
            if response in ["yes", "y"]:
                return True
            elif response in ["no", "n"]:
                return False
            else:
                self._output("Please enter 'yes' or 'no'.")

    def text(self, message: str, validate: Optional[Validator] = None) -> str:
        return self._ask(self._input, message, validate)

    def secret(self, message: str, validate: Optional[Validator] = None) -> str:
        """Like text() but without echoing the answer"""
        return self._ask(self._secret, message, validate)

    def _ask(self, reader: Callable[[str], str], message: str, validate: Optional[Validator]) -> str:
        while True:
            answer = reader(f"{message} ").strip()
            if validate is None:
                return answer
            result = validate(answer)
            if result is True:
                return answer
            self._output(result if isinstance(result, str) else "Invalid value.")
