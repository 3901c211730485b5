"""Environment variable adapter.

Purpose
-------
Snapshot process environment variables as flat configuration pairs. It
implements :class:`lib_flat_config.application.ports.EnvLoader`.

Key behaviours
--------------
* Without a prefix every variable is returned verbatim.
* With a prefix (``default_env_prefix``) only matching variables are captured;
  the prefix is stripped, names are lower-cased, and ``__`` becomes ``.`` so
  ``DEMO_DB__HOST`` maps to ``db.host``.
* Values stay strings; typed conversion is the store's job.
* Emits structured logging via :mod:`lib_flat_config.observability`.
"""

from __future__ import annotations

import os
from typing import Mapping

from ...observability import log_debug

NESTING_DELIMITER = "__"


def default_env_prefix(slug: str) -> str:
    """Return the canonical environment prefix for *slug*.

    Examples
    --------
    >>> default_env_prefix('lib-flat-config')
    'LIB_FLAT_CONFIG'
    """

    return slug.replace("-", "_").upper()


class DefaultEnvLoader:
    """Load environment variables that belong to the configuration namespace."""

    def __init__(self, *, environ: Mapping[str, str] | None = None) -> None:
        """Initialise the loader with a specific ``environ`` mapping for testability.

        Parameters
        ----------
        environ:
            Mapping to read from. Defaults to :data:`os.environ`.
        """

        self._environ = os.environ if environ is None else environ

    def load(self, prefix: str | None = None) -> dict[str, str]:
        """Return a flat mapping of the variables selected by *prefix*.

        Parameters
        ----------
        prefix:
            Prefix filter (upper-case). The loader appends ``_`` if missing.
            ``None`` or an empty string selects every variable unchanged.

        Side Effects
        ------------
        Emits ``env_variables_loaded`` debug events with the number of keys.

        Examples
        --------
        >>> env = {
        ...     'DEMO_DB__HOST': 'localhost',
        ...     'DEMO_TIMEOUT': '30',
        ...     'OTHER': 'ignored',
        ... }
        >>> DefaultEnvLoader(environ=env).load('DEMO')
        {'db.host': 'localhost', 'timeout': '30'}
        """

        if not prefix:
            collected = dict(self._environ)
            log_debug("env_variables_loaded", source="env", path=None, keys=len(collected))
            return collected

        prefix = prefix if prefix.endswith("_") else f"{prefix}_"
        collected = {}
        for key, value in self._environ.items():
            if not key.startswith(prefix):
                continue
            stripped = key[len(prefix) :]
            if not stripped:
                continue
            collected[to_config_key(stripped)] = value
        log_debug("env_variables_loaded", source="env", path=None, keys=len(collected))
        return collected


def to_config_key(name: str) -> str:
    """Translate an environment variable name (without prefix) to a dotted key.

    Examples
    --------
    >>> to_config_key('SERVICE__RETRY_COUNT')
    'service.retry_count'
    """

    return name.lower().replace(NESTING_DELIMITER, ".")
