"""Range checks for values returned by the typed accessors.

The helpers pass ``None`` through untouched so they compose with optional
accessors::

    timeout = check_min_max(cfg.get_int("timeout", None), 1, 600)
"""

from __future__ import annotations

from typing import Any, Protocol, TypeVar

from .errors import ValidationError


class _Comparable(Protocol):
    def __lt__(self, other: Any, /) -> bool: ...

    def __gt__(self, other: Any, /) -> bool: ...


C = TypeVar("C", bound=_Comparable)


def check_min(value: C | None, minimum: C) -> C | None:
    """Return *value* unless it is smaller than *minimum*.

    Examples
    --------
    >>> check_min(12, 12)
    12
    >>> check_min(None, 12) is None
    True
    >>> check_min(11, 12)
    Traceback (most recent call last):
    ...
    lib_flat_config.domain.errors.ValidationError: Value '11' is smaller than the allowed minimum '12'
    """

    if value is not None and value < minimum:
        raise ValidationError(f"Value '{value}' is smaller than the allowed minimum '{minimum}'")
    return value


def check_max(value: C | None, maximum: C) -> C | None:
    """Return *value* unless it is bigger than *maximum*."""

    if value is not None and value > maximum:
        raise ValidationError(f"Value '{value}' is bigger than the allowed maximum '{maximum}'")
    return value


def check_min_max(value: C | None, minimum: C, maximum: C) -> C | None:
    """Return *value* unless it lies outside ``[minimum, maximum]``."""

    return check_max(check_min(value, minimum), maximum)
