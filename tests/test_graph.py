import pytest

from taskrun import ConfigError, UnknownTarget, build_table, resolve_chain, sh, target
from taskrun.model import Step, Target


def test_table_keeps_declared_order_and_is_read_only():
    t = build_table([
        target("b", sh("x", "true")),
        target("a", sh("y", "true")),
    ])
    assert list(t) == ["b", "a"]
    with pytest.raises(TypeError):
        t["c"] = t["a"]


def test_duplicate_names_rejected():
    with pytest.raises(ConfigError, match="Duplicate"):
        build_table([target("a", sh("x", "true")), target("a", sh("y", "true"))])


def test_missing_prerequisite_is_config_error():
    with pytest.raises(ConfigError, match="missing target 'nope'"):
        build_table([target("a", sh("x", "true"), needs="nope")])


def test_cycle_rejected_at_build_time():
    with pytest.raises(ConfigError, match="cycle"):
        build_table([
            target("a", sh("x", "true"), needs="b"),
            target("b", sh("y", "true"), needs="a"),
        ])


def test_self_dependency_rejected():
    with pytest.raises(ConfigError, match="a -> a"):
        build_table([target("a", sh("x", "true"), needs="a")])


def test_empty_command_rejected():
    with pytest.raises(ConfigError, match="empty command"):
        build_table([Target("a", (Step("x", "   "),))])


def test_target_without_steps_rejected():
    with pytest.raises(ConfigError, match="no steps"):
        build_table([Target("a", ())])


def test_resolve_chain_runs_deepest_first():
    t = build_table([
        target("run", sh("r", "./bin"), needs="build"),
        target("build", sh("b", "make"), needs="fetch"),
        target("fetch", sh("f", "git pull")),
    ])
    assert resolve_chain(t, "run") == ["fetch", "build", "run"]
    assert resolve_chain(t, "fetch") == ["fetch"]


def test_resolve_chain_unknown():
    t = build_table([target("a", sh("x", "true"))])
    with pytest.raises(UnknownTarget) as exc:
        resolve_chain(t, "zzz")
    assert exc.value.known == ["a"]


def test_resolve_chain_guards_unvalidated_cycles():
    # a plain dict bypasses build_table validation
    t = {
        "a": Target("a", (Step("x", "true"),), needs="b"),
        "b": Target("b", (Step("y", "true"),), needs="a"),
    }
    with pytest.raises(ConfigError, match="a -> b -> a"):
        resolve_chain(t, "a")


def test_unbalanced_quote_is_config_error():
    with pytest.raises(ConfigError, match="No closing quotation"):
        build_table([target("a", sh("x", "pandoc 'notes.md -o out.pdf"))])
