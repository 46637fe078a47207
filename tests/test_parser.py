import pytest

from minishell.parser import (
    BAD_TARGET_ERROR,
    MISSING_TARGET_ERROR,
    NEWLINE_ERROR,
    PIPE_ERROR,
    Command,
    ParseError,
    Redirection,
    parse,
)
from minishell.tokens import TokenKind, tokenize


def test_simple_command():
    assert parse(tokenize("ls -l")) == [Command(["ls", "-l"], [])]


def test_empty_token_list():
    assert parse([]) == []


def test_pipeline_splits_commands():
    commands = parse(tokenize("ls -l | wc -l | cat"))
    assert [c.args for c in commands] == [["ls", "-l"], ["wc", "-l"], ["cat"]]
    assert all(c.redirections == [] for c in commands)


def test_redirections_are_collected_in_order():
    (command,) = parse(tokenize("cat < in > out >> log"))
    assert command.args == ["cat"]
    assert command.redirections == [
        Redirection(TokenKind.REDIRECT_INPUT, "in"),
        Redirection(TokenKind.TRUNCATE, "out"),
        Redirection(TokenKind.APPEND, "log"),
    ]


def test_redirection_before_command_words():
    (command,) = parse(tokenize("> out echo hi"))
    assert command.args == ["echo", "hi"]
    assert command.redirections == [Redirection(TokenKind.TRUNCATE, "out")]


def test_heredoc_in_pipeline():
    commands = parse(tokenize("cat << EOF | grep x"))
    assert commands[0].redirections == [Redirection(TokenKind.HEREDOC, "EOF")]
    assert commands[0].args == ["cat"]
    assert commands[1].args == ["grep", "x"]


def test_argc_matches_args():
    (command,) = parse(tokenize("echo a b c"))
    assert command.argc == len(command.args)


def test_input_tokens_are_not_consumed():
    tokens = tokenize("cat < in | wc")
    before = list(tokens)
    parse(tokens)
    assert tokens == before


@pytest.mark.parametrize(
    "line, message",
    [
        ("| ls", PIPE_ERROR),
        ("ls |", NEWLINE_ERROR),
        ("ls | | wc", PIPE_ERROR),
        ("ls >", MISSING_TARGET_ERROR),
        ("ls > | wc", BAD_TARGET_ERROR),
        ("cat < > out", BAD_TARGET_ERROR),
    ],
)
def test_syntax_errors(line, message):
    with pytest.raises(ParseError) as info:
        parse(tokenize(line))
    assert info.value.message == message
    assert info.value.status == 2
    assert str(info.value) == message


def test_pipe_error_text():
    with pytest.raises(ParseError, match="unexpected token `\\|'"):
        parse(tokenize("|"))