"""Public package surface for ``lib_flat_config``.

Re-exports the store, the error taxonomy, the composition-root helpers and the
observability hooks so consumers only ever need ``import lib_flat_config``.
"""

from __future__ import annotations

from .core import (
    CircularSubstitution,
    ConfigError,
    FlatConfig,
    InvalidFormat,
    InvalidKey,
    InvalidOperation,
    InvalidValue,
    MissingKey,
    NotFound,
    SourceError,
    UnresolvedSubstitution,
    ValidationError,
    check_max,
    check_min,
    check_min_max,
    default_env_prefix,
    dump_config,
    parse_config,
    read_config,
    read_config_env,
    read_config_file,
    write_config,
)
from .observability import bind_trace_id, get_logger

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
    "bind_trace_id",
    "get_logger",
]
