from __future__ import annotations

import pytest

from lib_flat_config.domain.errors import CircularSubstitution, UnresolvedSubstitution
from lib_flat_config.domain.store import FlatConfig
from lib_flat_config.domain.substitution import resolve


@pytest.mark.parametrize(
    ("template", "expected"),
    [
        ("${my.key.1}", "Value1"),
        ("${my.key.1} ${my.key.1}${my.key.1}", "Value1 Value1Value1"),
        ("${my.key.1", "${my.key.1"),
        ("}${my.key.1", "}${my.key.1"),
        ("}${my.key.1}", "}Value1"),
        ("$}${my.key.1}", "$}Value1"),
        ("no markers at all", "no markers at all"),
    ],
)
def test_direct_substitution(template: str, expected: str) -> None:
    config = FlatConfig({"my.key.1": "Value1", "my.key.2": template})
    assert config.get_string("my.key.2") == expected
    assert config.subset("my.key").get_string("2") == expected


def test_transitive_substitution() -> None:
    config = FlatConfig()
    config.put("my.key.1", "Value1")
    config.put("my.key.2", "${my.key.1}")
    config.put("my.key.3", "${my.key.2}")
    config.put("my.key.4", "<${my.key.3}>")
    assert config.get_string("my.key.3") == "Value1"
    assert config.get_string("my.key.4") == "<Value1>"


def test_substitution_keys_are_absolute_inside_subsets() -> None:
    config = FlatConfig({"host": "db", "svc.host": "local", "svc.url": "http://${host}"})
    assert config.subset("svc").get_string("url") == "http://db"


def test_substitution_builds_reference_names() -> None:
    config = FlatConfig({"env": "prod", "db.prod": "10.0.0.1", "target": "${db.${env}}"})
    # leftmost marker is "${db.${env}" which names the key "db.${env" and does not exist
    with pytest.raises(UnresolvedSubstitution):
        config.get_string("target")


def test_null_and_empty_references_resolve_to_absent() -> None:
    config = FlatConfig()
    config.put("my.key.null", None)
    config.put("my.key.empty", "")
    config.put("my.key.x", "${my.key.null}")
    config.put("my.key.y", "${my.key.empty}")
    config.put("my.key.z", "a${my.key.null}b")
    assert config.get_string("my.key.x", None) is None
    assert config.get_string("my.key.y", None) is None
    assert config.get_string("my.key.z") == "ab"
    assert config.contains_value("my.key.x") is False


def test_missing_substitution_raises() -> None:
    config = FlatConfig()
    config.put("my.key.1", "${my.key.missing}")
    with pytest.raises(UnresolvedSubstitution, match="my.key.missing"):
        config.get_string("my.key.1")
    with pytest.raises(UnresolvedSubstitution):
        config.contains_value("my.key.1")
    assert config.contains_key("my.key.1") is True


@pytest.mark.parametrize(
    "entries",
    [
        {"a": "${b}", "b": "${a}"},
        {"my.key.1": "${my.key.2}", "my.key.2": "${my.key.3}", "my.key.3": "${my.key.1}"},
        {"a": "${a}"},
    ],
)
def test_cycles_raise(entries: dict[str, str]) -> None:
    config = FlatConfig(entries)
    for key in entries:
        with pytest.raises(CircularSubstitution):
            config.get_string(key)


def test_cycle_guard_compares_string_states() -> None:
    # "${x}${x}" -> "${y}${x}" -> "${x}${x}" repeats the first intermediate state
    entries = {"x": "${y}", "y": "${x}", "start": "${x}${x}"}
    with pytest.raises(CircularSubstitution):
        resolve(entries, "start")


def test_growing_references_terminate_when_no_marker_is_left() -> None:
    entries = {"a": "${b}${b}", "b": "c"}
    assert resolve(entries, "a") == "cc"


def test_to_dict_of_subset_raises_for_cycles() -> None:
    config = FlatConfig({"s.a": "${s.b}", "s.b": "${s.a}"})
    assert config.to_dict() == {"s.a": "${s.b}", "s.b": "${s.a}"}
    with pytest.raises(CircularSubstitution):
        config.subset("s").to_dict()


def test_resolve_absent_key_returns_none() -> None:
    assert resolve({"a": "1"}, "b") is None
    assert resolve({"a": None}, "a") is None
