import pytest

from gitlab_provisioner.engine.errors import DependencyCycleError
from gitlab_provisioner.engine.graph import dependency_order


def test_order_is_deterministic() -> None:
    assert dependency_order(["c", "b", "a"], {"b": ["a"], "c": ["a"]}) == ["a", "b", "c"]


def test_edges_to_outside_addresses_are_ignored() -> None:
    assert dependency_order(["b", "a"], {"b": ["external"]}) == ["a", "b"]


def test_chain() -> None:
    assert dependency_order(["a", "b", "c"], {"a": ["b"], "b": ["c"]}) == ["c", "b", "a"]


def test_cycle_detection() -> None:
    with pytest.raises(DependencyCycleError, match=" -> ") as excinfo:
        dependency_order(["a", "b", "c"], {"a": ["b"], "b": ["a"]})
    assert set(excinfo.value.addresses) == {"a", "b"}


def test_lower_priority_comes_first() -> None:
    assert dependency_order(["high", "low"], {}, {"high": 100, "low": 0}) == ["low", "high"]


def test_priority_does_not_override_dependencies() -> None:
    order = dependency_order(["high", "low"], {"low": ["high"]}, {"high": 100, "low": 0})
    assert order == ["high", "low"]


def test_priority_applies_among_ready_addresses() -> None:
    order = dependency_order(
        ["user", "env", "var"],
        {"var": ["env"]},
        {"user": 10, "env": 100, "var": 100},
    )
    assert order == ["user", "env", "var"]
