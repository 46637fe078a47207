"""The shell's ordered table of environment variables."""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass, field

EMPTY_VALUE = '""'
DEFAULT_PATH = (
    "/usr/local/sbin:/usr/local/bin:/usr/sbin:/usr/bin:/sbin:/bin:"
    "/usr/games:/usr/local/games:/snap/bin"
)


@dataclass
class EnvVar:
    """One variable; ``val`` is None when exported without a value."""

    key: str
    val: str | None


def split_assignment(text: str) -> tuple[str, str]:
    """Split ``KEY=VALUE`` at the first '='; a missing '=' gives an empty value."""
    key, _, val = text.partition("=")
    return key, val


def _stored(val: str | None) -> str | None:
    if val is None:
        return None
    return val if val else EMPTY_VALUE


@dataclass
class Environment:
    """Variables in insertion order, with the shell's matching rules."""

    vars: list[EnvVar] = field(default_factory=list)

    @classmethod
    def from_envp(cls, envp: Iterable[str] | Mapping[str, str]) -> Environment:
        """Build from ``KEY=VALUE`` strings or a mapping; empty input gets a PATH."""
        if isinstance(envp, Mapping):
            entries = [EnvVar(key, val) for key, val in envp.items()]
        else:
            entries = [EnvVar(*split_assignment(text)) for text in envp]
        if not entries:
            entries = [EnvVar("PATH", DEFAULT_PATH)]
        return cls(entries)

    def __iter__(self) -> Iterator[EnvVar]:
        return iter(self.vars)

    def __len__(self) -> int:
        return len(self.vars)

    def get(self, key: str | None) -> str | None:
        """Exact lookup for expansion: a leading '$' is ignored, missing gives ''."""
        if key is None:
            return None
        if key.startswith("$"):
            key = key[1:]
        for var in self.vars:
            if var.key == key:
                return var.val
        return ""

    def lookup(self, prefix: str) -> str | None:
        """Value of the first variable whose key starts with ``prefix``."""
        for var in self.vars:
            if var.key.startswith(prefix):
                return var.val
        return None

    def has_key(self, key: str) -> bool:
        """True when some key starts with ``key``."""
        return any(var.key.startswith(key) for var in self.vars)

    def set_value(self, key: str, val: str | None) -> None:
        """Replace the value of every key starting with ``key``; None changes nothing."""
        if val is None:
            return
        for var in self.vars:
            if var.key.startswith(key):
                var.val = _stored(val)

    def append_value(self, key: str, val: str) -> None:
        """Append ``val`` to the value of the variable named exactly ``key``."""
        for var in self.vars:
            if var.key == key:
                var.val = (var.val or "") + val

    def add(self, key: str, val: str | None) -> EnvVar:
        """Append a new variable; an empty value is stored as a quoted empty string."""
        var = EnvVar(key, _stored(val))
        self.vars.append(var)
        return var

    def remove(self, key: str) -> bool:
        """Unset a variable; return True when one was removed."""
        if not any(key.startswith(var.key) for var in self.vars):
            return False
        for index, var in enumerate(self.vars):
            if var.key.startswith(key):
                del self.vars[index]
                return True
        return False

    def to_envp(self) -> list[str]:
        """``KEY=VALUE`` strings for every variable that has a value."""
        return [f"{var.key}={var.val}" for var in self.vars if var.val is not None]