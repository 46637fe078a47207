"""Grouping of tokens into commands with their redirections."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field

from minishell.tokens import Token, TokenKind

PIPE_ERROR = "syntax error near unexpected token `|'"
NEWLINE_ERROR = "syntax error near unexpected token `newline'"
MISSING_TARGET_ERROR = "syntax error: unexpected token near '\\n'"
BAD_TARGET_ERROR = "syntax error: near unexpected token"


class ParseError(Exception):
    """A syntax error in a command line; the shell reports it with ``status``."""

    def __init__(self, message: str, status: int = 2) -> None:
        super().__init__(message)
        self.message = message
        self.status = status

    def __str__(self) -> str:
        return self.message


@dataclass
class Redirection:
    """A redirection operator and the word that follows it."""

    kind: TokenKind
    word: str | None


@dataclass
class Command:
    """One simple command of a pipeline."""

    args: list[str] = field(default_factory=list)
    redirections: list[Redirection] = field(default_factory=list)
    expanded: bool = False

    @property
    def argc(self) -> int:
        return len(self.args)


def _take_command(pending: list[Token]) -> Command:
    """Remove one command's tokens from the front of ``pending``."""
    redirections: list[Redirection] = []
    i = 0
    while i < len(pending):
        token = pending[i]
        if token.kind is TokenKind.NONE:
            i += 1
            continue
        if token.kind is TokenKind.PIPE:
            break
        if i + 1 >= len(pending):
            raise ParseError(MISSING_TARGET_ERROR)
        target = pending[i + 1]
        if target.kind is not TokenKind.NONE:
            raise ParseError(BAD_TARGET_ERROR)
        redirections.append(Redirection(token.kind, target.word))
        del pending[i : i + 2]
    args = [token.word for token in pending[:i] if token.word is not None]
    del pending[:i]
    return Command(args, redirections)


def parse(tokens: Iterable[Token]) -> list[Command]:
    """Build the pipeline's commands; raise ParseError on a syntax error."""
    pending = list(tokens)
    commands: list[Command] = []
    if pending and pending[0].kind is TokenKind.PIPE:
        raise ParseError(PIPE_ERROR)
    while pending:
        if pending[0].kind is TokenKind.PIPE:
            pending.pop(0)
            if not pending:
                raise ParseError(NEWLINE_ERROR)
        if pending[0].kind is TokenKind.PIPE:
            raise ParseError(PIPE_ERROR)
        commands.append(_take_command(pending))
    return commands