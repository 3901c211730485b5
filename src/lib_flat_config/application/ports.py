"""Application-layer ports describing adapter responsibilities.

Purpose
-------
Define the structural contracts that adapters must satisfy so the composition
root can move configuration between text sources and
:class:`lib_flat_config.domain.store.FlatConfig` without depending on concrete
implementations.

Contents
--------
* :class:`PairParser` – turns a flat text blob into key/value pairs.
* :class:`PairSerializer` – turns key/value pairs back into a flat text blob.
* :class:`SourceReader` – locates a named source (resource or file) and reads it.
* :class:`EnvLoader` – snapshots process environment variables.

System Role
-----------
The store only knows "construct from pairs" and "export raw pairs"; these
protocols are the other half of that boundary.
"""

from __future__ import annotations

from typing import Iterable, Mapping, Protocol, runtime_checkable


@runtime_checkable
class PairParser(Protocol):
    """Parse a flat text blob into ``(key, value)`` string pairs."""

    def parse(self, text: str) -> list[tuple[str, str]]:
        """Return the pairs found in *text* or raise ``InvalidFormat``."""


@runtime_checkable
class PairSerializer(Protocol):
    """Serialise ``(key, value)`` pairs into a flat text blob."""

    def serialize(
        self,
        pairs: Iterable[tuple[str, str | None]],
        *,
        comment: str | None = None,
        ascii_only: bool = False,
    ) -> str:
        """Return the text representation of *pairs*."""


@runtime_checkable
class SourceReader(Protocol):
    """Resolve a source name to its text content.

    Why
    ----
    Keep the "resource first, then file" search discipline out of the
    composition root.
    """

    last_loaded_path: str | None

    def read(self, name: str) -> str:
        """Return the text behind *name* or raise ``NotFound``."""


@runtime_checkable
class EnvLoader(Protocol):
    """Translate process environment variables into flat configuration pairs."""

    def load(self, prefix: str | None = None) -> Mapping[str, str]:
        """Return the variables that match *prefix* (all variables when ``None``)."""
