import io
import os

import pytest

from minishell.builtins import ShellExit
from minishell.environment import Environment
from minishell.executor import find_executable, run_command, run_pipeline
from minishell.parser import Command, parse
from minishell.session import Session
from minishell.tokens import tokenize

SYSTEM_PATH = os.environ.get("PATH", "/usr/bin:/bin")


def make_session(**extra):
    values = {"PATH": SYSTEM_PATH, **extra}
    return Session(
        env=Environment.from_envp(values),
        stdout=io.StringIO(),
        stderr=io.StringIO(),
    )


def run(session, line):
    return run_pipeline(session, parse(tokenize(line)))


def test_find_executable_searches_path(tmp_path):
    (tmp_path / "tool").write_text("")
    env = Environment.from_envp({"PATH": f"/nonexistent-dir::{tmp_path}"})
    assert find_executable("tool", env) == f"{tmp_path}/tool"


def test_find_executable_missing(tmp_path):
    env = Environment.from_envp({"PATH": str(tmp_path)})
    assert find_executable("tool", env) is None


def test_find_executable_without_path():
    env = Environment.from_envp(["HOME=/x"])
    assert find_executable("sh", env) is None


def test_builtin_echo():
    session = make_session()
    assert run(session, "echo hi there") == 0
    assert session.stdout.getvalue() == "hi there\n"


def test_external_pipeline():
    session = make_session()
    status = run(session, "echo hello | cat")
    assert status == 0
    assert session.stdout.getvalue() == "hello\n"


def test_external_command_output():
    session = make_session()
    run(session, "printf abc")
    assert session.stdout.getvalue() == "abc"


def test_exit_status_of_last_command():
    session = make_session()
    assert run(session, "false") == 1
    assert session.exit_status == 1
    assert run(session, "false | true") == 0


def test_command_not_found():
    session = make_session()
    assert run(session, "nosuchcmd_xyz") == 127
    assert session.stderr.getvalue() == "nosuchcmd_xyz: command not found\n"


def test_missing_relative_path():
    session = make_session()
    assert run(session, "./definitely_missing") == 127
    assert session.stderr.getvalue() == "./definitely_missing: No such file or directory\n"


def test_no_path_variable():
    session = Session(
        env=Environment.from_envp(["HOME=/x"]),
        stdout=io.StringIO(),
        stderr=io.StringIO(),
    )
    assert run(session, "ls") == 127
    assert session.stderr.getvalue() == "ls: No such file or directory\n"


def test_directory_is_reported(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    (tmp_path / "sub").mkdir()
    session = make_session()
    assert run(session, "./sub") == 126
    assert session.stderr.getvalue() == "./sub: Is a directory\n"


def test_output_redirection(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    session = make_session()
    run(session, "echo hi > out")
    run(session, "echo more >> out")
    assert (tmp_path / "out").read_text() == "hi\nmore\n"
    assert session.stdout.getvalue() == ""


def test_input_redirection(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    (tmp_path / "in").write_text("from file\n")
    session = make_session()
    run(session, "cat < in")
    assert session.stdout.getvalue() == "from file\n"


def test_missing_input_file(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    session = make_session()
    assert run(session, "cat < missing") == 1
    assert session.stderr.getvalue() == "missing: No such file or directory\n"


def test_parent_builtin_changes_environment():
    session = make_session()
    run(session, "export FOO=bar")
    assert session.env.get("FOO") == "bar"


def test_builtin_in_pipeline_does_not_change_environment():
    session = make_session()
    run(session, "export FOO=bar | cat")
    assert session.env.get("FOO") == ""


def test_builtin_output_feeds_next_stage():
    session = make_session()
    run(session, "echo abc | cat")
    assert session.stdout.getvalue() == "abc\n"


def test_exit_as_last_command_raises():
    session = make_session()
    with pytest.raises(ShellExit) as info:
        run(session, "echo a | exit 5")
    assert info.value.status == 5


def test_here_document(monkeypatch):
    answers = iter(["line $USER", "EOF"])

    def fake_input(prompt=""):
        try:
            return next(answers)
        except StopIteration:
            raise EOFError from None

    monkeypatch.setattr("builtins.input", fake_input)
    session = make_session(USER="someone")
    run(session, "cat << EOF")
    assert session.stdout.getvalue() == "line someone\n"


def test_too_many_here_documents():
    session = make_session()
    assert run(session, "cat" + " << x" * 17) == 2
    assert session.stderr.getvalue() == " maximum here-document count exceeded\n"


def test_run_command_with_only_empty_args():
    session = make_session()
    assert run_command(session, Command(["", ""])) == 0


def test_run_command_builtin_is_isolated():
    session = make_session()
    status = run_command(session, Command(["export", "A=1"]))
    assert status == 0
    assert session.env.get("A") == ""


def test_run_command_builtin_writes_to_session():
    session = make_session()
    assert run_command(session, Command(["echo", "x"])) == 0
    assert session.stdout.getvalue() == "x\n"


def test_cd_in_pipeline_keeps_directory(tmp_path):
    before = os.getcwd()
    session = make_session()
    status = run(session, f"cd {tmp_path} | cat")
    assert status == 0
    assert session.stdout.getvalue() == ""
    assert os.getcwd() == before