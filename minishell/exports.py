"""The export builtin: listing and defining exported variables."""

from __future__ import annotations

import string
from collections.abc import Sequence

from minishell.environment import EnvVar, split_assignment
from minishell.session import Session

DECLARE_PREFIX = "declare -x "


def is_valid_name(text: str) -> bool:
    """True when every character of ``text`` is an ASCII letter or digit."""
    return all(char.isascii() and char.isalnum() for char in text)


def _sort_in_place(variables: list[EnvVar]) -> None:
    """Exchange sort comparing each key only over its own length."""
    count = len(variables)
    for i in range(count):
        for j in range(i + 1, count):
            first = variables[i].key
            if first > variables[j].key[: len(first)]:
                variables[i], variables[j] = variables[j], variables[i]


def declare(session: Session) -> None:
    """Sort the environment and print it as ``declare -x`` lines."""
    _sort_in_place(session.env.vars)
    for var in session.env:
        line = DECLARE_PREFIX + var.key
        if var.val is not None:
            line += f"={var.val}"
        session.write(line + "\n")


def _reject_dashed(session: Session, key: str) -> None:
    session.error(f"export: `-{key}': not a valid identifier\n")
    session.exit_status = 1


def export_var(session: Session, text: str) -> None:
    """Apply one ``export`` argument: ``KEY``, ``KEY=VALUE`` or ``KEY+=VALUE``."""
    if text.startswith("="):
        if text == "=":
            session.error("minishell: export: `=': not a valid identifier\n")
        else:
            session.error(f"minishell: export: {text}: not a valid identifier\n")
        session.exit_status = 1
        return
    env = session.env
    if "+=" in text:
        key, _, val = text.partition("+=")
        if not is_valid_name(key):
            _reject_dashed(session, key)
        elif env.has_key(key):
            env.append_value(key, val)
        else:
            env.add(key, val)
    elif "=" not in text:
        if not is_valid_name(text):
            _reject_dashed(session, text)
        elif not env.has_key(text):
            env.add(text, None)
    else:
        key, val = split_assignment(text)
        if not is_valid_name(key):
            session.error(f"{key}: not a valid identifier\n")
            session.exit_status = 1
        elif env.has_key(key):
            env.set_value(key, val)
        else:
            env.add(key, val)


def export(session: Session, args: Sequence[str]) -> None:
    """Run ``export`` with its full argument vector (``args[0]`` is the name)."""
    if len(args) < 2:
        declare(session)
        return
    for arg in args[1:]:
        if arg[:1] != "" and arg[0] in string.digits:
            session.error(f"minishell: export:`{arg}': not a valid identifier\n")
            session.exit_status = 1
        else:
            export_var(session, arg)