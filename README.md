# minishell

A small interactive command shell. It reads command lines, splits them into
words and operators, expands variables and runs the result, either as one of
its built-in commands or as an external program found on `PATH`.

## Features

- Pipelines joined with `|`
- Redirections: `<` input, `>` truncate, `>>` append, `<<` here-document
  (at most 16 here-documents per line; a delimiter wrapped in quotes has
  them removed and turns expansion of the here-document's lines off)
- `$NAME` and `$?` expansion; `$` followed by a digit is dropped together
  with the digit; an argument that gained spaces through expansion is split
  again into separate words
- Built-ins: `echo` (with `-n`), `cd`, `pwd`, `env`, `export`, `unset`, `exit`
- `export` with `NAME`, `NAME=value` and `NAME+=value`; `export` on its own
  sorts the variables and lists them as `declare -x` lines
- Syntax errors for unclosed quotes and misplaced pipes or redirections,
  reported with exit status 2

`export`, `unset`, `cd` and `exit` change the shell itself when they are the
last command of a line; earlier in a pipeline, built-ins run on a copy of
the shell's state and only their output is passed on.

## Installing

```
pip install .
```

## Running

```
minishell
```

The shell shows the prompt `minishell$ ` and reads one line at a time, with
line editing and history where Python's `readline` module is available.
End of input (Ctrl-D) prints `exit` and leaves. Ctrl-C at the prompt starts
a new line and sets `$?` to 130. `exit N` leaves with status `N` (taken
modulo 256); a non-numeric argument is reported and leaves with status 2.

```
$ minishell
minishell$ export GREETING=hello
minishell$ echo $GREETING world | cat > out.txt
minishell$ cat < out.txt
hello world
minishell$ echo $?
0
minishell$ exit
exit
```

## Using it from Python

The pieces work on their own, too:

```python
from minishell.tokens import tokenize
from minishell.parser import parse
from minishell.shell import Shell

commands = parse(tokenize("grep foo < in.txt | wc -l"))

shell = Shell()
status = shell.run_line("echo hello")
```

- `minishell.tokens`: `tokenize`, `check_quotes`, `Token`, `TokenKind`
- `minishell.parser`: `parse`, `Command`, `Redirection`, `ParseError`
- `minishell.expansion`: `expand_word`, `expand_argument`,
  `split_arguments`, `filter_commands`, `delete_quotes`
- `minishell.environment`: `Environment`, `EnvVar`, `split_assignment`
- `minishell.session`: `Session`, holding the environment, last exit status
  and output streams
- `minishell.builtins`, `minishell.exports`: the built-in commands;
  `exit` raises `ShellExit`
- `minishell.redirections`: `open_redirections`, `read_here_doc`,
  `here_doc_count`, `RedirectionError`
- `minishell.executor`: `run_pipeline`, `run_command`, `find_executable`
- `minishell.shell`: `Shell.run_line`, `Shell.loop` and `main`

`Shell.loop` accepts any callable that takes the prompt and returns a line
(or `None` at end of input), so the shell can be driven without a terminal.

## What it does not do

- Quotes only keep spaces and operators inside a word and must be closed;
  they stay in the arguments as written, and `$` expansion also happens
  inside single quotes.
- There are no `;`, `&&`, `||`, background jobs, subshells, globbing or
  shell scripts; the shell reads command lines interactively only.
- History is kept only for the running session.

## Running the tests

```
pip install .[test]
pytest
```