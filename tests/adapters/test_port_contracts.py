"""Adapter contract tests for the default ports implementation.

Purpose
-------
Verify the default adapters continue to satisfy the application-layer ports
defined in ``src/lib_flat_config/application/ports.py`` so dependency
inversion remains enforceable through automated tests.
"""

from __future__ import annotations

from pathlib import Path

from lib_flat_config.adapters.env.default import DefaultEnvLoader, default_env_prefix
from lib_flat_config.adapters.properties.default import PropertiesParser, PropertiesSerializer
from lib_flat_config.adapters.sources.default import DefaultSourceReader
from lib_flat_config.application import ports


def test_properties_parser_contract() -> None:
    """PropertiesParser must fulfil PairParser and return string pairs."""

    parser = PropertiesParser()
    assert isinstance(parser, ports.PairParser)
    pairs = parser.parse("service.timeout=15\n")
    assert pairs == [("service.timeout", "15")]


def test_properties_serializer_contract() -> None:
    """PropertiesSerializer must fulfil PairSerializer and emit one line per pair."""

    serializer = PropertiesSerializer()
    assert isinstance(serializer, ports.PairSerializer)
    assert serializer.serialize([("service.timeout", "15")]) == "service.timeout=15\n"


def test_default_source_reader_contract(tmp_path: Path) -> None:
    """DefaultSourceReader must fulfil SourceReader and expose the loaded path."""

    target = tmp_path / "config.properties"
    target.write_text("service.value=1\n", encoding="utf-8")
    reader = DefaultSourceReader()

    assert isinstance(reader, ports.SourceReader)
    assert reader.read(str(target)) == "service.value=1\n"
    assert reader.last_loaded_path == str(target)


def test_default_env_loader_contract() -> None:
    """DefaultEnvLoader should satisfy EnvLoader and keep values as strings."""

    prefix = default_env_prefix("demo")
    environ = {
        f"{prefix}_SERVICE__ENABLED": "true",
        f"{prefix}_SERVICE__RETRIES": "3",
        "IRRELEVANT": "ignored",
    }
    loader = DefaultEnvLoader(environ=environ)

    assert isinstance(loader, ports.EnvLoader)

    payload = loader.load(prefix)
    assert payload["service.enabled"] == "true"
    assert payload["service.retries"] == "3"
