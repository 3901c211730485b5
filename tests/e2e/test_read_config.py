from __future__ import annotations

import logging
from pathlib import Path

import pytest

from lib_flat_config import (
    ConfigError,
    FlatConfig,
    InvalidFormat,
    InvalidOperation,
    NotFound,
    SourceError,
    dump_config,
    parse_config,
    read_config,
    read_config_env,
    read_config_file,
    write_config,
)


def write(path: Path, content: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")


def test_read_config_from_file_with_subsets_and_substitution(tmp_path: Path) -> None:
    path = tmp_path / "app.properties"
    write(
        path,
        "# application defaults\n"
        "base.dir = /opt/app\n"
        "log.dir = ${base.dir}/logs\n"
        "db.host = localhost\n"
        "db.port = 5432\n"
        "db.url = jdbc:postgresql://${db.host}:${db.port}/app\n"
        "db.pool.sizes = 1, 5 ;10\n",
    )

    config = read_config(str(path))
    assert config.get_string("log.dir") == "/opt/app/logs"

    db = config.subset("db")
    assert db.get_int("port") == 5432
    assert db.get_string("url") == "jdbc:postgresql://localhost:5432/app"
    assert db.subset("pool").get_string_array("sizes") == ["1", "5", "10"]
    assert db.get_string("user", "postgres") == "postgres"


def test_read_config_prefers_package_resources(tmp_path: Path, monkeypatch) -> None:
    package = tmp_path / "flat_config_e2e_defaults"
    write(package / "__init__.py", "")
    write(package / "app.properties", "origin=resource\n")
    monkeypatch.syspath_prepend(str(tmp_path))
    monkeypatch.chdir(tmp_path)
    write(tmp_path / "app.properties", "origin=file\n")

    assert read_config("app.properties").get_string("origin") == "file"
    assert read_config("app.properties", packages=["flat_config_e2e_defaults"]).get_string("origin") == "resource"


def test_read_config_missing_source(tmp_path: Path) -> None:
    with pytest.raises(NotFound):
        read_config(str(tmp_path / "missing.properties"))
    with pytest.raises(NotFound):
        read_config_file(tmp_path / "missing.properties")


def test_read_config_malformed_escape(tmp_path: Path) -> None:
    path = tmp_path / "broken.properties"
    write(path, "key=\\u00zz\n")
    with pytest.raises(InvalidFormat):
        read_config_file(path)


def test_read_config_emits_loaded_event(tmp_path: Path, caplog: pytest.LogCaptureFixture) -> None:
    path = tmp_path / "app.properties"
    write(path, "a=1\nb=2\n")
    caplog.set_level(logging.INFO, logger="lib_flat_config")
    read_config_file(path)
    events = [record for record in caplog.records if record.getMessage() == "configuration_loaded"]
    assert events
    context = getattr(events[-1], "context")
    assert context["keys"] == 2
    assert context["path"] == str(path)


def test_store_and_read_back(tmp_path: Path) -> None:
    """Written files keep empty, blank and padded values apart from ``None``."""

    config = FlatConfig()
    config.put("k1", "v1")
    config.put("k2", None)
    config.put("k3", "")
    config.put("k4", "     ")
    config.put("k5", "xxx  ")
    config.put("k6", "${k1}")
    config.put("path with spaces", "C:\\temp\\new")

    target = write_config(config, tmp_path / "nested" / "out.properties", comment="generated")
    assert target.read_text(encoding="utf-8").startswith("#generated\n")

    loaded = read_config_file(target)
    assert loaded.keys() == config.keys()
    assert loaded.get_string("k1") == "v1"
    assert loaded.get_string("k2", None) is None
    assert loaded.get_string("k3", None) is None
    assert loaded.to_dict()["k3"] is None
    assert loaded.get_string("k4") == "     "
    assert loaded.get_string("k5") == "xxx  "
    assert loaded.to_dict()["k6"] == "${k1}"
    assert loaded.get_string("k6") == "v1"
    assert loaded.get_string("path with spaces") == "C:\\temp\\new"


def test_dump_config_is_sorted_and_raw() -> None:
    config = parse_config("z=${a}\na=1\nm=\n")
    assert dump_config(config) == "a=1\nm=\nz=${a}\n"


def test_dump_and_write_reject_subsets(tmp_path: Path) -> None:
    view = parse_config("a.b=1").subset("a")
    with pytest.raises(InvalidOperation):
        dump_config(view)
    with pytest.raises(InvalidOperation):
        write_config(view, tmp_path / "out.properties")
    assert not (tmp_path / "out.properties").exists()


def test_write_config_wraps_os_errors(tmp_path: Path) -> None:
    blocker = tmp_path / "blocker"
    blocker.write_text("not a directory", encoding="utf-8")
    with pytest.raises(SourceError):
        write_config(parse_config("a=1"), blocker / "out.properties")


def test_read_config_env() -> None:
    environ = {"DEMO_DB__HOST": "db", "DEMO_DB__URL": "pg://${db.host}", "OTHER": "x"}
    config = read_config_env("DEMO", environ=environ)
    assert config.keys() == {"db.host", "db.url"}
    assert config.subset("db").get_string("url") == "pg://db"


def test_undecodable_source_is_a_source_error(tmp_path: Path) -> None:
    path = tmp_path / "latin.properties"
    path.write_bytes("name=café\n".encode("latin-1"))

    with pytest.raises(SourceError, match="utf-8"):
        read_config_file(path)
    with pytest.raises(SourceError, match="utf-8"):
        read_config(str(path))
    assert read_config_file(path, encoding="latin-1").get_string("name") == "café"
    assert read_config(str(path), encoding="latin-1").get_string("name") == "café"


def test_unknown_package_is_not_found(tmp_path: Path) -> None:
    path = tmp_path / "app.properties"
    write(path, "origin=file\n")
    assert read_config(str(path), packages=["no_such_flat_config_package"]).get_string("origin") == "file"
    with pytest.raises(ConfigError) as excinfo:
        read_config(str(tmp_path / "missing.properties"), packages=["no_such_flat_config_package"])
    assert isinstance(excinfo.value, NotFound)
