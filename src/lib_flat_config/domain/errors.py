"""Domain-level exception hierarchy.

Purpose
-------
Expose the stable error taxonomy shared by the store, the adapters, the
composition root, and consuming applications. The hierarchy lives in the
domain layer so outer layers may depend on it without the domain depending on
them.

Contents
--------
* :class:`ConfigError` – umbrella base class for all configuration-related
  issues.
* :class:`InvalidKey` – a ``None`` key reached a keyed operation.
* :class:`MissingKey` – a mandatory accessor found no value.
* :class:`InvalidFormat` – a value or a properties text could not be parsed.
* :class:`InvalidValue` – a value cannot be stored without corrupting it.
* :class:`UnresolvedSubstitution` / :class:`CircularSubstitution` – ``${key}``
  expansion failures.
* :class:`InvalidOperation` – an operation that is not allowed on a subset.
* :class:`ValidationError` – range checks on converted values failed.
* :class:`NotFound` – a properties resource or file does not exist.

System Role
-----------
Every error is raised synchronously at the offending call and never swallowed
inside the library. Callers catch :class:`ConfigError` to handle all library
failures uniformly.
"""

from __future__ import annotations


class ConfigError(Exception):
    """Base type for all exceptions emitted by ``lib_flat_config``.

    Why
    ----
    Provide a single catch-all type for consumers that do not need fine-grained
    handling.
    """


class InvalidKey(ConfigError):
    """Raised when ``None`` is passed where a configuration key is required."""


class MissingKey(ConfigError):
    """Raised by mandatory accessors when no value is configured for a key.

    Empty strings count as missing, as do keys whose stored value is ``None``.
    """


class InvalidFormat(ConfigError):
    """Raised when text cannot be parsed into the requested shape.

    Typical Sources
    ---------------
    Typed accessors (int, long, decimal, enum conversions) and the properties
    parser when it meets a malformed ``\\uXXXX`` escape.
    """


class InvalidValue(ConfigError):
    """Raised when a value cannot be stored without breaking its round trip.

    String arrays are stored as a comma separated list, so elements must not
    contain any of the delimiter characters ``,``, ``;`` or ``:``.
    """


class UnresolvedSubstitution(ConfigError):
    """Raised when a ``${key}`` expression references a key that does not exist."""


class CircularSubstitution(ConfigError):
    """Raised when ``${key}`` expansion returns to a string it produced before."""


class InvalidOperation(ConfigError):
    """Raised when an operation is attempted on a subset view that only roots support.

    Current Usage
    -------------
    :meth:`FlatConfig.merge` and :meth:`FlatConfig.to_raw_pairs`.
    """


class ValidationError(ConfigError):
    """Signifies that a converted value failed a semantic (range) check."""


class NotFound(ConfigError):
    """Represents a missing properties resource or file.

    Why
    ----
    Allow callers to distinguish absent sources from malformed ones.
    """
