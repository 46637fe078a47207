"""Variable expansion of words and re-splitting of expanded arguments."""

from __future__ import annotations

from collections.abc import Iterable

from minishell.environment import Environment
from minishell.parser import Command

_DIGITS = "0123456789"
_NAME_CHARS = "abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ_" + _DIGITS


def _is_digit(char: str) -> bool:
    return char != "" and char in _DIGITS


def _is_name_char(char: str) -> bool:
    return char != "" and char in _NAME_CHARS


def delete_quotes(text: str, quote: str) -> str:
    """Remove every occurrence of the quote character from ``text``."""
    return text.replace(quote, "")


def expand_word(text: str, env: Environment, exit_status: int = 0) -> tuple[str, bool]:
    """Expand ``$NAME`` and ``$?`` in ``text``.

    Returns the expanded text and whether any expansion took place.
    ``$`` followed by a digit drops both characters.
    """
    size = len(text)

    def at(index: int) -> str:
        return text[index] if index < size else ""

    parts: list[str] = []
    expanded = False
    j = 0
    while j < size:
        if at(j) == "$" and _is_digit(at(j + 1)):
            j += 2
            if j >= size:
                break
        char, following = at(j), at(j + 1)
        if char == "$" and following == "?":
            parts.append(str(exit_status))
            expanded = True
            j += 2
        elif (
            char == "$"
            and following not in ("", " ")
            and (following != '"' or at(j + 2) != "")
        ):
            end = j + 1
            while _is_name_char(at(end)):
                end += 1
            value = env.get(text[j:end]) or ""
            parts.append(delete_quotes(value, '"'))
            expanded = True
            j = end
        else:
            parts.append(char)
            j += 1
    return "".join(parts), expanded


def expand_argument(
    command: Command, index: int, env: Environment, exit_status: int = 0
) -> str:
    """Expand one argument of ``command`` in place and mark the command if it changed."""
    text, expanded = expand_word(command.args[index], env, exit_status)
    if expanded:
        command.expanded = True
    command.args[index] = text
    return text


def split_arguments(args: Iterable[str]) -> list[str]:
    """Split arguments that contain spaces into separate words."""
    result: list[str] = []
    for arg in args:
        if " " in arg:
            result.extend(piece for piece in arg.split(" ") if piece)
        else:
            result.append(arg)
    return result


def filter_commands(commands: Iterable[Command]) -> None:
    """Re-split the arguments of every command that underwent expansion."""
    for command in commands:
        if command.expanded:
            command.args = split_arguments(command.args)