from minishell.environment import (
    DEFAULT_PATH,
    EMPTY_VALUE,
    EnvVar,
    Environment,
    split_assignment,
)


def make():
    return Environment.from_envp(["HOME=/home/u", "PATH=/bin:/usr/bin", "B=x=y"])


def test_split_assignment():
    assert split_assignment("B=x=y") == ("B", "x=y")
    assert split_assignment("NAME") == ("NAME", "")


def test_from_envp_keeps_order():
    env = make()
    assert [v.key for v in env] == ["HOME", "PATH", "B"]
    assert len(env) == 3


def test_from_mapping():
    env = Environment.from_envp({"A": "1"})
    assert env.vars == [EnvVar("A", "1")]


def test_empty_envp_gets_default_path():
    env = Environment.from_envp([])
    assert env.get("PATH") == DEFAULT_PATH


def test_get_exact_and_dollar():
    env = make()
    assert env.get("B") == "x=y"
    assert env.get("$HOME") == "/home/u"
    assert env.get("HOM") == ""
    assert env.get(None) is None


def test_lookup_prefix():
    env = make()
    assert env.lookup("PAT") == "/bin:/usr/bin"
    assert env.lookup("NOPE") is None


def test_has_key_prefix():
    env = make()
    assert env.has_key("HO")
    assert not env.has_key("HOMEX")


def test_set_value_and_empty():
    env = make()
    env.set_value("B", "new")
    assert env.get("B") == "new"
    env.set_value("B", "")
    assert env.get("B") == EMPTY_VALUE
    env.set_value("B", None)
    assert env.get("B") == EMPTY_VALUE


def test_append_value():
    env = make()
    env.append_value("HOME", "/sub")
    assert env.get("HOME") == "/home/u/sub"


def test_append_to_valueless():
    env = make()
    env.add("V", None)
    env.append_value("V", "abc")
    assert env.get("V") == "abc"


def test_add_variants():
    env = make()
    env.add("N", None)
    env.add("E", "")
    env.add("V", "v")
    assert env.get("N") is None
    assert env.get("E") == EMPTY_VALUE
    assert env.get("V") == "v"


def test_remove():
    env = make()
    assert env.remove("HOME") is True
    assert env.get("HOME") == ""
    assert env.remove("ZZZ") is False
    assert len(env) == 2


def test_remove_first_entry_keeps_rest():
    env = make()
    env.remove("HOME")
    assert [v.key for v in env] == ["PATH", "B"]


def test_to_envp_round_trip_skips_valueless():
    entries = ["HOME=/home/u", "B=x=y"]
    env = Environment.from_envp(entries)
    env.add("N", None)
    assert env.to_envp() == entries
    assert Environment.from_envp(env.to_envp()).vars == Environment.from_envp(entries).vars