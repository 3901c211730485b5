"""Composition root for ``lib_flat_config``.

Purpose
-------
Provide the entry points that wire the source, properties and environment
adapters to the :class:`~lib_flat_config.domain.store.FlatConfig` domain type
while emitting structured observability signals.

Contents
--------
* :class:`SourceError` – raised when a source cannot be read or written.
* :func:`parse_config` – build a store from ``.properties`` text.
* :func:`read_config` – resource-or-file lookup, then parse.
* :func:`read_config_file` – filesystem-only variant.
* :func:`read_config_env` – build a store from the process environment.
* :func:`dump_config` / :func:`write_config` – serialise a root store.

System Role
-----------
This is the canonical place for wiring adapters. The domain never sees files,
resources or environment variables; it only receives pairs through
:meth:`FlatConfig.from_pairs` and hands them back through
:meth:`FlatConfig.to_raw_pairs`.
"""

from __future__ import annotations

from pathlib import Path
from typing import Iterable, Mapping

from .adapters.env.default import DefaultEnvLoader, default_env_prefix
from .adapters.properties.default import PropertiesParser, PropertiesSerializer
from .adapters.sources.default import DefaultSourceReader
from .domain.checks import check_max, check_min, check_min_max
from .domain.errors import (
    CircularSubstitution,
    ConfigError,
    InvalidFormat,
    InvalidKey,
    InvalidOperation,
    InvalidValue,
    MissingKey,
    NotFound,
    UnresolvedSubstitution,
    ValidationError,
)
from .domain.store import FlatConfig
from .observability import bind_trace_id, log_debug, log_info, make_event

_PARSER = PropertiesParser()
_SERIALIZER = PropertiesSerializer()


class SourceError(ConfigError):
    """Raised when a configuration source cannot be read or written.

    Why
    ----
    Callers should only need to catch :class:`ConfigError`; the composition
    root wraps :class:`OSError` from the filesystem with the offending path.
    """


def parse_config(text: str) -> FlatConfig:
    """Return a root store holding the pairs defined in ``.properties`` *text*.

    Examples
    --------
    >>> cfg = parse_config("base=/opt/app\\nlogs=${base}/logs\\n")
    >>> cfg.get_string("logs")
    '/opt/app/logs'
    """

    return FlatConfig.from_pairs(_PARSER.parse(text))


def read_config(source: str, *, packages: Iterable[str] = (), encoding: str = "utf-8") -> FlatConfig:
    """Load a ``.properties`` resource or file into a root store.

    What
    ----
    Every package in *packages* is searched for a resource called *source*
    before *source* is treated as a filesystem path.

    Raises
    ------
    NotFound
        No resource or file called *source* exists.
    SourceError
        The source exists but could not be read or is not valid *encoding* text.
    InvalidFormat
        The text contains a malformed ``\\uXXXX`` escape.

    Side Effects
    ------------
    Clears the active trace identifier and emits ``configuration_loaded``.
    """

    bind_trace_id(None)
    reader = DefaultSourceReader(packages=packages, encoding=encoding)
    try:
        text = reader.read(source)
    except (OSError, UnicodeDecodeError) as exc:
        log_debug("source_error", **make_event("properties", source, {"error": str(exc), "encoding": encoding}))
        raise SourceError(f"The properties source '{source}' could not be loaded as {encoding}: {exc}") from exc
    return _loaded(parse_config(text), reader.last_loaded_path)


def read_config_file(path: str | Path, *, encoding: str = "utf-8") -> FlatConfig:
    """Load the ``.properties`` file at *path* into a root store.

    Examples
    --------
    >>> from tempfile import TemporaryDirectory
    >>> tmp = TemporaryDirectory()
    >>> target = Path(tmp.name) / 'app.properties'
    >>> _ = target.write_text('mykey = value-01', encoding='utf-8')
    >>> read_config_file(target).get_string('mykey')
    'value-01'
    >>> tmp.cleanup()
    """

    bind_trace_id(None)
    file_path = Path(path)
    if not file_path.is_file():
        log_debug("source_missing", **make_event("file", str(file_path)))
        raise NotFound(f"Configuration file not found: {file_path}")
    try:
        text = file_path.read_text(encoding=encoding)
    except (OSError, UnicodeDecodeError) as exc:
        log_debug("source_error", **make_event("file", str(file_path), {"error": str(exc), "encoding": encoding}))
        raise SourceError(f"File '{file_path}' could not be read as {encoding}: {exc}") from exc
    return _loaded(parse_config(text), str(file_path))


def read_config_env(prefix: str | None = None, *, environ: Mapping[str, str] | None = None) -> FlatConfig:
    """Return a root store built from environment variables.

    Examples
    --------
    >>> cfg = read_config_env("DEMO", environ={"DEMO_DB__PORT": "5432"})
    >>> cfg.get_int("db.port")
    5432
    """

    bind_trace_id(None)
    data = DefaultEnvLoader(environ=environ).load(prefix)
    config = FlatConfig.from_pairs(data)
    log_info("configuration_loaded", **make_event("env", None, {"keys": len(data), "prefix": prefix}))
    return config


def dump_config(config: FlatConfig, *, comment: str | None = None, ascii_only: bool = False) -> str:
    """Serialise the raw entries of a root store as ``.properties`` text.

    Raises
    ------
    InvalidOperation
        *config* is a subset; dump its root instead.

    Examples
    --------
    >>> cfg = FlatConfig({"b": "${a}", "a": "1"})
    >>> print(dump_config(cfg), end="")
    a=1
    b=${a}
    """

    return _SERIALIZER.serialize(config.to_raw_pairs(), comment=comment, ascii_only=ascii_only)


def write_config(
    config: FlatConfig,
    path: str | Path,
    *,
    comment: str | None = None,
    ascii_only: bool = False,
    encoding: str = "utf-8",
) -> Path:
    """Write a root store to *path*, creating parent directories and overwriting.

    Returns
    -------
    Path
        The written file.

    Raises
    ------
    InvalidOperation
        *config* is a subset.
    SourceError
        The file could not be written.
    """

    payload = dump_config(config, comment=comment, ascii_only=ascii_only)
    target = Path(path)
    try:
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(payload, encoding=encoding)
    except OSError as exc:
        log_debug("source_error", **make_event("file", str(target), {"error": str(exc)}))
        raise SourceError(f"The properties could not be written to file '{target}': {exc}") from exc
    log_info("configuration_written", **make_event("file", str(target), {"keys": len(config.keys())}))
    return target


def _loaded(config: FlatConfig, path: str | None) -> FlatConfig:
    log_info("configuration_loaded", **make_event("properties", path, {"keys": len(config.keys())}))
    return config


__all__ = [
    "FlatConfig",
    "ConfigError",
    "InvalidKey",
    "MissingKey",
    "InvalidFormat",
    "InvalidValue",
    "UnresolvedSubstitution",
    "CircularSubstitution",
    "InvalidOperation",
    "ValidationError",
    "NotFound",
    "SourceError",
    "check_min",
    "check_max",
    "check_min_max",
    "parse_config",
    "read_config",
    "read_config_file",
    "read_config_env",
    "dump_config",
    "write_config",
    "default_env_prefix",
]
