"""Lexical analysis of a command line into words and operators."""

from __future__ import annotations

import itertools
from dataclasses import dataclass
from enum import IntEnum


class TokenKind(IntEnum):
    """Kinds of lexical tokens; redirections run from TRUNCATE to HEREDOC."""

    NONE = 0
    PIPE = 1
    TRUNCATE = 2
    REDIRECT_INPUT = 3
    APPEND = 4
    HEREDOC = 5

    @property
    def is_redirection(self) -> bool:
        return TokenKind.TRUNCATE <= self <= TokenKind.HEREDOC


@dataclass
class Token:
    """A word (kind NONE) or an operator (word is None)."""

    kind: TokenKind
    word: str | None = None
    key: int = 0


_OPERATORS = {
    "|": TokenKind.PIPE,
    ">": TokenKind.TRUNCATE,
    "<": TokenKind.REDIRECT_INPUT,
}

_QUOTES = "\"'"


def _is_space(char: str) -> bool:
    return char == " " or (char != "" and "\t" <= char <= "\r")


def token_kind(char: str) -> TokenKind:
    """Return the operator kind a single character starts, or NONE."""
    return _OPERATORS.get(char, TokenKind.NONE)


def check_quotes(line: str) -> bool:
    """Return True when every quote in ``line`` is closed."""
    i = 0
    while i < len(line):
        char = line[i]
        if char in _QUOTES:
            close = line.find(char, i + 1)
            if close == -1:
                return False
            i = close
        i += 1
    return True


def _word_end(text: str, start: int) -> int:
    end = start
    size = len(text)
    while end < size and token_kind(text[end]) is TokenKind.NONE:
        if text[end] in _QUOTES:
            close = text.find(text[end], end + 1)
            end = size if close == -1 else close
            if end >= size:
                break
        if _is_space(text[end]):
            break
        end += 1
    return min(end, size)


def tokenize(line: str) -> list[Token]:
    """Split a command line into tokens, keeping quotes inside words."""
    text = line.strip(" ")
    size = len(text)
    keys = itertools.count()
    tokens: list[Token] = []
    i = 0
    while i < size:
        while i < size and _is_space(text[i]):
            i += 1
        kind = token_kind(text[i]) if i < size else TokenKind.NONE
        if kind is not TokenKind.NONE:
            following = token_kind(text[i + 1]) if i + 1 < size else TokenKind.NONE
            width = 1
            if kind is TokenKind.TRUNCATE and following is TokenKind.TRUNCATE:
                kind, width = TokenKind.APPEND, 2
            elif kind is TokenKind.REDIRECT_INPUT and following is TokenKind.REDIRECT_INPUT:
                kind, width = TokenKind.HEREDOC, 2
            tokens.append(Token(kind, None, next(keys)))
            i += width
        else:
            end = _word_end(text, i)
            tokens.append(Token(TokenKind.NONE, text[i:end], next(keys)))
            i = end
    return tokens