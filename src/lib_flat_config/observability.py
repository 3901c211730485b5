"""Structured log events for loading and storing properties sources.

Every event goes through the ``lib_flat_config`` logger with a ``context``
mapping attached as ``record.context``. The mapping always carries the bound
``trace_id`` plus the ``source`` kind (``"properties"``, ``"resource"``,
``"file"``, ``"env"``) and the ``path`` involved.

Only the adapters and :mod:`lib_flat_config.core` log. The store, the
substitution resolver and the range checks never do.
"""

from __future__ import annotations

import logging
from contextvars import ContextVar
from typing import Any, Final, Mapping

TRACE_ID: ContextVar[str | None] = ContextVar("lib_flat_config_trace_id", default=None)
"""Trace identifier copied into every event context."""

_LOGGER: Final[logging.Logger] = logging.getLogger("lib_flat_config")
_LOGGER.addHandler(logging.NullHandler())


def get_logger() -> logging.Logger:
    """Return the package logger; it stays silent until the host adds a handler."""

    return _LOGGER


def bind_trace_id(trace_id: str | None) -> None:
    """Bind *trace_id* to the following events, or clear it with ``None``.

    :func:`lib_flat_config.core.read_config` and friends clear the binding
    on entry, so bind after loading to tag later events.

    Examples
    --------
    >>> bind_trace_id('req-7')
    >>> TRACE_ID.get()
    'req-7'
    >>> bind_trace_id(None)
    >>> TRACE_ID.get() is None
    True
    """

    TRACE_ID.set(trace_id)


def log_debug(message: str, **fields: Any) -> None:
    _emit(logging.DEBUG, message, fields)


def log_info(message: str, **fields: Any) -> None:
    _emit(logging.INFO, message, fields)


def log_error(message: str, **fields: Any) -> None:
    _emit(logging.ERROR, message, fields)


def make_event(source: str, path: str | None, payload: Mapping[str, Any] | None = None) -> dict[str, Any]:
    """Return the ``source`` / ``path`` fields of an event merged with *payload*.

    Examples
    --------
    >>> make_event('file', '/etc/app.properties', {'keys': 3})
    {'source': 'file', 'path': '/etc/app.properties', 'keys': 3}
    >>> make_event('env', None)
    {'source': 'env', 'path': None}
    """

    event: dict[str, Any] = {"source": source, "path": path}
    if payload:
        event.update(payload)
    return event


def _emit(level: int, message: str, fields: Mapping[str, Any]) -> None:
    context = {"trace_id": TRACE_ID.get(), **fields}
    _LOGGER.log(level, message, extra={"context": context})
