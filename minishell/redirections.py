"""Opening redirection targets and reading here-documents."""

from __future__ import annotations

from collections.abc import Iterable
from typing import BinaryIO

from minishell.expansion import delete_quotes, expand_word
from minishell.parser import Command, Redirection
from minishell.session import Session
from minishell.tokens import TokenKind

SINGLE_QUOTE = "'"
DOUBLE_QUOTE = '"'
MAX_HERE_DOCS = 16
OUTPUT_KINDS = frozenset({TokenKind.TRUNCATE, TokenKind.APPEND})

_MODES = {
    TokenKind.TRUNCATE: "wb",
    TokenKind.APPEND: "ab",
    TokenKind.REDIRECT_INPUT: "rb",
}


class RedirectionError(Exception):
    """A redirection target could not be opened."""

    def __init__(self, filename: str, reason: str) -> None:
        super().__init__(filename, reason)
        self.filename = filename
        self.reason = reason

    def __str__(self) -> str:
        return f"{self.filename}: {self.reason}"


def is_quoted(delimiter: str) -> str | None:
    """Return the quote that wraps ``delimiter`` on both ends, or None."""
    if not delimiter:
        return None
    for quote in (SINGLE_QUOTE, DOUBLE_QUOTE):
        if delimiter[0] == quote and delimiter[-1] == quote:
            return quote
    return None


def here_doc_count(commands: Iterable[Command]) -> int:
    """Number of here-documents across all commands."""
    return sum(
        1
        for command in commands
        for redirection in command.redirections
        if redirection.kind is TokenKind.HEREDOC
    )


def read_here_doc(
    session: Session, redirection: Redirection, lines: Iterable[str]
) -> str:
    """Read lines up to the delimiter and return the here-document's text.

    An unquoted delimiter enables variable expansion of the lines; a quoted
    one has its quotes removed and disables it.
    """
    delimiter = redirection.word or ""
    quote = is_quoted(delimiter)
    expand = quote is None
    if quote is not None:
        delimiter = delete_quotes(delimiter, quote)
    session.here_doc_expand = expand
    parts: list[str] = []
    for raw in lines:
        line = raw[:-1] if raw.endswith("\n") else raw
        if line:
            if line == delimiter:
                break
            if expand:
                line = expand_word(line, session.env, session.exit_status)[0]
            parts.append(line)
        parts.append("\n")
    return "".join(parts)


def open_redirections(command: Command) -> list[tuple[Redirection, BinaryIO]]:
    """Open every file redirection of ``command`` in order.

    Here-documents are skipped. On the first failure the files already
    opened are closed and RedirectionError is raised.
    """
    opened: list[tuple[Redirection, BinaryIO]] = []
    for redirection in command.redirections:
        mode = _MODES.get(redirection.kind)
        if mode is None:
            continue
        name = redirection.word or ""
        try:
            handle = open(name, mode)  # noqa: SIM115 - caller owns the handle
        except OSError as exc:
            for _, previous in opened:
                previous.close()
            raise RedirectionError(name, exc.strerror or str(exc)) from exc
        opened.append((redirection, handle))
    return opened