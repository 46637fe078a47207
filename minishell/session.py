"""State shared by the shell, its builtins and its executor."""

from __future__ import annotations

import os
import sys
from dataclasses import dataclass, field
from typing import TextIO

from minishell.environment import Environment


@dataclass
class Session:
    """Environment, last exit status, directories and output streams."""

    env: Environment = field(default_factory=lambda: Environment.from_envp(os.environ))
    exit_status: int = 0
    pwd: str | None = None
    oldpwd: str | None = None
    here_doc_expand: bool = False
    stdout: TextIO = field(default_factory=lambda: sys.stdout)
    stderr: TextIO = field(default_factory=lambda: sys.stderr)

    def write(self, text: str) -> None:
        """Write to standard output and flush."""
        self.stdout.write(text)
        self.stdout.flush()

    def error(self, text: str) -> None:
        """Write to standard error and flush."""
        self.stderr.write(text)
        self.stderr.flush()