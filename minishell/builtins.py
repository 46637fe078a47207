"""Builtin commands run inside the shell process."""

from __future__ import annotations

import os
import re
from collections.abc import Callable, Sequence

from minishell.environment import EMPTY_VALUE
from minishell.exports import export
from minishell.session import Session

_NUMERIC = re.compile(r"(?:[+-]*[0-9])*")
_ATOI = re.compile(r"[ \t\n\v\f\r]*([+-]?)([0-9]*)")


class ShellExit(Exception):
    """Raised by ``exit`` to end the shell with ``status``."""

    def __init__(self, status: int) -> None:
        super().__init__(status)
        self.status = status


def echo(session: Session, args: Sequence[str]) -> None:
    """Print the arguments; leading ``-n`` options suppress the newline."""
    words = list(args[1:])
    if not words:
        session.write("\n")
    elif words[0].startswith("-n"):
        while words and words[0].startswith("-n"):
            words.pop(0)
        session.write(" ".join(words))
    else:
        session.write(" ".join(words) + "\n")
    session.exit_status = 0


def _getcwd() -> str | None:
    try:
        return os.getcwd()
    except OSError:
        return None


def _update_pwd(session: Session) -> None:
    for var in session.env:
        if var.key.startswith("PWD"):
            var.val = _getcwd()
        if var.key.startswith("OLDPWD"):
            var.val = session.oldpwd


def cd(session: Session, args: Sequence[str]) -> None:
    """Change directory to ``args[1]`` or to ``$HOME``."""
    if len(args) >= 3:
        session.error(" too many arguments\n")
        session.exit_status = 1
        return
    session.oldpwd = _getcwd()
    path = args[1] if len(args) > 1 else None
    if path is None:
        home = session.env.lookup("HOME")
        if home is None:
            session.error("cd: $HOME not set\n")
            session.exit_status = 1
            return
        try:
            os.chdir(home)
        except OSError:
            session.error("cd: no such file or directory: \n")
            session.exit_status = 1
            return
    else:
        try:
            os.chdir(path)
        except OSError:
            session.error("cd No such file or directory\n")
            session.exit_status = 1
            return
    _update_pwd(session)


def pwd(session: Session) -> None:
    """Print the working directory, falling back to ``$PWD``."""
    cwd = _getcwd()
    if cwd is not None:
        session.write(cwd + "\n")
        return
    for var in session.env:
        if var.key.startswith("PWD"):
            session.write((var.val or "") + "\n")
            break


def env(session: Session) -> None:
    """Print every variable that has a value."""
    if len(session.env) <= 1:
        session.write(f"{session.pwd or ''}\n")
        session.write("SHLVL=1\n")
        session.write("_=/usr/bin/env\n")
        return
    for var in session.env:
        if var.val is None:
            continue
        if var.val and EMPTY_VALUE.startswith(var.val):
            session.write(f"{var.key}=\n")
        else:
            session.write(f"{var.key}={var.val}\n")


def _atoi(text: str) -> int:
    match = _ATOI.match(text)
    sign, digits = match.group(1), match.group(2)
    value = int(digits) if digits else 0
    return -value if sign == "-" else value


def exit_builtin(session: Session, args: Sequence[str]) -> None:
    """Raise ShellExit, unless there are too many arguments."""
    if len(args) >= 3:
        session.error(" too many arguments\n")
        session.exit_status = 1
        return
    session.write("exit\n")
    if len(args) < 2:
        raise ShellExit(0)
    arg = args[1]
    if _NUMERIC.fullmatch(arg):
        raise ShellExit(_atoi(arg) & 0xFF)
    session.error(f"minishell : exit {arg} : numeric argument required\n")
    raise ShellExit(2)


def unset(session: Session, args: Sequence[str]) -> None:
    """Remove the named variables."""
    for name in args[1:]:
        session.env.remove(name)


_BUILTINS: dict[str, Callable[[Session, Sequence[str]], None]] = {
    "echo": echo,
    "cd": cd,
    "pwd": lambda session, args: pwd(session),
    "export": export,
    "unset": unset,
    "env": lambda session, args: env(session),
    "exit": exit_builtin,
}

_PARENT_BUILTINS = frozenset({"export", "unset", "cd", "exit"})


def is_builtin(name: str | None) -> bool:
    """True when ``name`` is one of the shell's builtins."""
    return name in _BUILTINS


def is_parent_builtin(name: str | None) -> bool:
    """True for builtins that must run in the shell process itself."""
    return name in _PARENT_BUILTINS


def run_builtin(session: Session, args: Sequence[str]) -> bool:
    """Run ``args`` if it names a builtin; return whether it did."""
    if not args or args[0] not in _BUILTINS:
        return False
    _BUILTINS[args[0]](session, args)
    return True