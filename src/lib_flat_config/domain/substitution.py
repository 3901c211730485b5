"""``${key}`` substitution for stored configuration values.

Purpose
-------
Expand ``${key}`` expressions inside raw values at read time. The resolver is a
textual, iterative rewrite loop: it supports transitive references, multiple or
adjacent expressions in one value, and leftmost-first expansion order.

Contents
--------
* :data:`MARKER_OPEN` / :data:`MARKER_CLOSE` – expression delimiters.
* :func:`resolve` – expand the value stored under an absolute key.

System Role
-----------
Called by :class:`lib_flat_config.domain.store.FlatConfig` for every read that
hands a value to the caller. Substitution keys are always absolute keys into the
shared mapping, independent of the subset view that triggered the read.
"""

from __future__ import annotations

from typing import Final, Mapping

from .errors import CircularSubstitution, UnresolvedSubstitution

MARKER_OPEN: Final[str] = "${"
MARKER_CLOSE: Final[str] = "}"


def resolve(entries: Mapping[str, str | None], key: str) -> str | None:
    """Return the value stored under *key* with all ``${...}`` expressions expanded.

    What
    ----
    Repeatedly replaces the leftmost complete ``${name}`` span with the raw value
    stored under ``name`` (``None`` becomes an empty string) until no complete
    expression is left or the value becomes empty. Unterminated expressions are
    left untouched.

    Cycle detection works on the full intermediate strings of one call: when a
    rewrite produces a string that was already produced earlier,
    :class:`CircularSubstitution` is raised. Two different keys that happen to
    produce identical transient text therefore also abort the expansion.

    Parameters
    ----------
    entries:
        Shared mapping of absolute keys to raw values.
    key:
        Absolute key whose value should be resolved.

    Returns
    -------
    str | None
        Expanded value, or ``None`` when the key is absent or holds ``None``.

    Raises
    ------
    UnresolvedSubstitution
        An expression names a key that is not present in *entries*.
    CircularSubstitution
        The rewrite loop revisits an intermediate string.

    Examples
    --------
    >>> resolve({"host": "db", "url": "jdbc://${host}:${port", "port": "1"}, "url")
    'jdbc://db:${port'
    >>> resolve({"a": "x", "b": "${a}${a}", "c": "[${b}]"}, "c")
    '[xx]'
    >>> resolve({}, "missing") is None
    True
    """

    value = entries.get(key)
    if value is None:
        return None

    seen: set[str] = set()
    while value:
        start = value.find(MARKER_OPEN)
        if start == -1:
            break
        end = value.find(MARKER_CLOSE, start)
        if end == -1:
            break
        reference = value[start + len(MARKER_OPEN) : end]
        if reference not in entries:
            raise UnresolvedSubstitution(f"The substitution key '{reference}' referenced by key '{key}' does not exist")
        replacement = entries[reference] or ""
        value = value[:start] + replacement + value[end + len(MARKER_CLOSE) :]
        if value in seen:
            raise CircularSubstitution(f"Key '{key}' leads to a circular, non-resolvable substitution")
        seen.add(value)
    return value
