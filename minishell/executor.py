"""Running commands and pipelines of commands."""

from __future__ import annotations

import contextlib
import copy
import dataclasses
import io
import os
import subprocess
import tempfile
from collections.abc import Iterable, Iterator, Sequence
from typing import IO, Union

from minishell.builtins import ShellExit, is_builtin, is_parent_builtin, run_builtin
from minishell.environment import Environment
from minishell.parser import Command
from minishell.redirections import (
    MAX_HERE_DOCS,
    OUTPUT_KINDS,
    RedirectionError,
    here_doc_count,
    open_redirections,
    read_here_doc,
)
from minishell.session import Session
from minishell.tokens import TokenKind

Stream = Union[IO[bytes], int, None]
_PATH_PREFIXES = (".", "/")


def find_executable(name: str, env: Environment) -> str | None:
    """First ``dir/name`` that exists along ``$PATH``, or None."""
    path = env.lookup("PATH")
    if path is None:
        return None
    for directory in path.split(":"):
        if not directory:
            continue
        candidate = f"{directory}/{name}"
        if os.access(candidate, os.F_OK):
            return candidate
    return None


def _fileno(stream: object) -> int | None:
    try:
        return stream.fileno()  # type: ignore[attr-defined]
    except (AttributeError, OSError, ValueError):
        return None


def _close(stream: Stream) -> None:
    if stream is None:
        return
    if isinstance(stream, int):
        os.close(stream)
    else:
        stream.close()


def _deliver(text: str, target: Stream, session: Session) -> None:
    if not text:
        return
    if target is None:
        session.write(text)
        return
    data = text.encode()
    try:
        if isinstance(target, int):
            view = memoryview(data)
            while view:
                written = os.write(target, view)
                view = view[written:]
        else:
            target.write(data)
            target.flush()
    except BrokenPipeError:
        pass


def _effective_args(args: Sequence[str]) -> list[str] | None:
    """Arguments with leading empty words dropped; None if nothing is left."""
    for index, arg in enumerate(args):
        if arg:
            return list(args[index:])
    return None


def _environ(session: Session) -> dict[str, str]:
    return {var.key: var.val for var in session.env if var.val is not None}


def _popen(
    session: Session, args: list[str], executable: str, stdin: Stream, stdout: Stream
) -> subprocess.Popen:
    return subprocess.Popen(
        args,
        executable=executable,
        stdin=stdin,
        stdout=stdout,
        stderr=_fileno(session.stderr),
        env=_environ(session),
    )


def _not_found(session: Session, name: str) -> int:
    if name.startswith(_PATH_PREFIXES):
        session.error(f"{name}: No such file or directory\n")
    else:
        session.error(f"{name}: command not found\n")
    return 127


def _spawn(
    session: Session, args: list[str], stdin: Stream, stdout: Stream
) -> subprocess.Popen | int:
    name = args[0]
    if os.access(name, os.F_OK):
        if not os.access(name, os.X_OK):
            if name.startswith(_PATH_PREFIXES):
                session.error(f"{name}: Permission denied\n")
                return 126
            session.error(f"{name}: command not found\n")
            return 127
        try:
            return _popen(session, args, os.path.abspath(name), stdin, stdout)
        except OSError:
            if name.startswith(_PATH_PREFIXES):
                session.error(f"{name}: Is a directory\n")
                return 126
            session.error(" command not found\n")
            return 127
    if session.env.lookup("PATH") is None:
        session.error(f"{name}: No such file or directory\n")
        return 127
    found = find_executable(name, session.env)
    if found is None:
        return _not_found(session, name)
    try:
        return _popen(session, args, found, stdin, stdout)
    except OSError as exc:
        session.error(f"execve: {exc.strerror or exc}\n")
        return 126


def _run_child_builtin(session: Session, args: list[str], stdout: Stream) -> int:
    """Run a builtin as a pipeline stage, isolated from the shell's own state."""
    buffer = io.StringIO()
    child = dataclasses.replace(
        session, env=copy.deepcopy(session.env), stdout=buffer, exit_status=0
    )
    try:
        cwd: str | None = os.getcwd()
    except OSError:
        cwd = None
    try:
        run_builtin(child, args)
        status = child.exit_status
    except ShellExit as exc:
        status = exc.status
    finally:
        if cwd is not None:
            with contextlib.suppress(OSError):
                os.chdir(cwd)
        _deliver(buffer.getvalue(), stdout, session)
    return status


def run_command(
    session: Session, command: Command, stdin: Stream = None, stdout: Stream = None
) -> subprocess.Popen | int:
    """Start one pipeline stage.

    Returns the started process, or the exit status when the stage finished
    without one (a builtin, a failed redirection or an unknown command).
    """
    try:
        opened = open_redirections(command)
    except RedirectionError as exc:
        session.error(f"{exc}\n")
        return 1
    with contextlib.ExitStack() as stack:
        for _, handle in opened:
            stack.callback(handle.close)
        for redirection, handle in opened:
            if redirection.kind is TokenKind.REDIRECT_INPUT:
                stdin = handle
            else:
                stdout = handle
        args = _effective_args(command.args)
        if args is None:
            return 0
        if is_builtin(args[0]):
            return _run_child_builtin(session, args, stdout)
        return _spawn(session, args, stdin, stdout)


def _run_in_parent(session: Session, command: Command) -> int:
    """Run a builtin that changes the shell itself, honouring output redirection."""
    try:
        opened = open_redirections(command)
    except RedirectionError as exc:
        session.error(f"{exc}\n")
        session.exit_status = 1
        return 1
    target = None
    for redirection, handle in opened:
        if redirection.kind in OUTPUT_KINDS:
            target = handle
    saved = session.stdout
    buffer = io.StringIO()
    if target is not None:
        session.stdout = buffer
    try:
        run_builtin(session, command.args)
    finally:
        session.stdout = saved
        if target is not None:
            _deliver(buffer.getvalue(), target, session)
        for _, handle in opened:
            handle.close()
    return session.exit_status


def _prompt_lines() -> Iterator[str]:
    while True:
        try:
            yield input("> ")
        except EOFError:
            return


def _collect_here_docs(session: Session, commands: list[Command]) -> dict[int, IO[bytes]]:
    """Read every here-document; each command keeps the text of its last one."""
    lines = _prompt_lines()
    result: dict[int, IO[bytes]] = {}
    try:
        for index, command in enumerate(commands):
            for redirection in command.redirections:
                if redirection.kind is not TokenKind.HEREDOC:
                    continue
                text = read_here_doc(session, redirection, lines)
                handle = tempfile.TemporaryFile()
                handle.write(text.encode())
                handle.seek(0)
                previous = result.pop(index, None)
                if previous is not None:
                    previous.close()
                result[index] = handle
    except BaseException:
        for handle in result.values():
            handle.close()
        raise
    return result


def _wait(process: subprocess.Popen) -> int:
    code = process.wait()
    return 128 - code if code < 0 else code


def _run_stages(
    session: Session,
    commands: list[Command],
    here_docs: dict[int, IO[bytes]],
    final_out: Stream,
    processes: list[subprocess.Popen],
) -> subprocess.Popen | int:
    incoming: Stream = None
    result: subprocess.Popen | int = 0
    try:
        for index, command in enumerate(commands):
            last = index == len(commands) - 1
            stdin = here_docs.get(index, incoming)
            if last and command.args and is_parent_builtin(command.args[0]):
                _close(incoming)
                incoming = None
                return _run_in_parent(session, command)
            outgoing: Stream = None
            write_end: int | None = None
            if last:
                out = final_out
            else:
                args = _effective_args(command.args)
                if args is None or is_builtin(args[0]):
                    outgoing = tempfile.TemporaryFile()
                    out = outgoing
                else:
                    outgoing, write_end = os.pipe()
                    out = write_end
            try:
                result = run_command(session, command, stdin, out)
            except BaseException:
                _close(outgoing)
                raise
            finally:
                if write_end is not None:
                    os.close(write_end)
                _close(incoming)
                incoming = None
            if outgoing is not None and not isinstance(outgoing, int):
                outgoing.seek(0)
            incoming = outgoing
            if isinstance(result, subprocess.Popen):
                processes.append(result)
        return result
    finally:
        _close(incoming)


def run_pipeline(session: Session, commands: Iterable[Command]) -> int:
    """Run a parsed pipeline, wait for it and return the new exit status."""
    commands = list(commands)
    session.exit_status = 0
    if not commands:
        return 0
    if here_doc_count(commands) > MAX_HERE_DOCS:
        session.error(" maximum here-document count exceeded\n")
        session.exit_status = 2
        return 2
    try:
        here_docs = _collect_here_docs(session, commands)
    except KeyboardInterrupt:
        session.exit_status = 130
        return 130
    processes: list[subprocess.Popen] = []
    with contextlib.ExitStack() as stack:
        for handle in here_docs.values():
            stack.callback(handle.close)
        final_fd = _fileno(session.stdout)
        capture: IO[bytes] | None = None
        if final_fd is None:
            capture = stack.enter_context(tempfile.TemporaryFile())
            final_out: Stream = capture
        else:
            session.stdout.flush()
            final_out = final_fd
        try:
            last = _run_stages(session, commands, here_docs, final_out, processes)
        finally:
            for process in processes:
                _wait(process)
            if capture is not None:
                capture.seek(0)
                text = capture.read().decode(errors="replace")
                if text:
                    session.write(text)
        status = _wait(last) if isinstance(last, subprocess.Popen) else last
    session.exit_status = status
    return status