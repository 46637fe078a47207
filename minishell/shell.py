"""The interactive read-parse-execute loop."""

from __future__ import annotations

import contextlib
import signal
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field

from minishell.builtins import ShellExit
from minishell.environment import Environment
from minishell.executor import run_pipeline
from minishell.expansion import expand_argument, filter_commands
from minishell.parser import Command, ParseError, parse
from minishell.session import Session
from minishell.tokens import check_quotes, tokenize

PROMPT = "minishell$ "
UNCLOSED_QUOTE_ERROR = "syntax error: unclosed quote !"
INTERRUPTED_STATUS = 130

Reader = Callable[[str], "str | None"]


@dataclass
class Shell:
    """A shell bound to one session."""

    session: Session = field(default_factory=Session)

    def _parse_line(self, line: str) -> list[Command] | None:
        """Tokenize, parse and expand ``line``; None after a reported error."""
        session = self.session
        if not check_quotes(line):
            session.error(UNCLOSED_QUOTE_ERROR + "\n")
            session.exit_status = 2
            return None
        tokens = tokenize(line)
        if not tokens:
            return []
        try:
            commands = parse(tokens)
        except ParseError as exc:
            session.error(f"{exc}\n")
            session.exit_status = exc.status
            return None
        for command in commands:
            for index in range(command.argc):
                expand_argument(command, index, session.env, session.exit_status)
        filter_commands(commands)
        return commands

    def run_line(self, line: str) -> int:
        """Run one command line and return the resulting exit status.

        ShellExit raised by the ``exit`` builtin propagates to the caller.
        """
        commands = self._parse_line(line)
        if commands:
            run_pipeline(self.session, commands)
        return self.session.exit_status

    def loop(self, reader: Reader | None = None) -> int:
        """Read and run lines until end of input or ``exit``; return the exit code."""
        read = reader if reader is not None else input
        session = self.session
        while True:
            try:
                line = read(PROMPT)
            except EOFError:
                line = None
            except KeyboardInterrupt:
                session.write("\n")
                session.exit_status = INTERRUPTED_STATUS
                continue
            if line is None:
                session.oldpwd = None
                session.write("exit\n")
                return 0
            try:
                self.run_line(line)
            except ShellExit as exc:
                return exc.status
            except KeyboardInterrupt:
                session.write("\n")
                session.exit_status = INTERRUPTED_STATUS


def main(argv: Sequence[str] | None = None) -> int:
    """Start an interactive shell on the process environment."""
    del argv
    with contextlib.suppress(ImportError):
        import readline  # noqa: F401 - enables line editing and history for input()
    if hasattr(signal, "SIGQUIT"):
        signal.signal(signal.SIGQUIT, signal.SIG_IGN)
    shell = Shell(Session())
    return shell.loop()


if __name__ == "__main__":
    raise SystemExit(main())