"""Flat key/value configuration store with subset views.

Purpose
-------
Hold configuration as string key/value pairs, provide typed access on top of
the string storage, and expand ``${key}`` expressions when values are read.

Contents
--------
* :class:`FlatConfig` – the store. An instance is either a *root* (no prefix)
  or a *subset* (a dot-terminated prefix plus a reference to the same mapping
  as the store it was derived from).
* :data:`ARRAY_DELIMITERS` – characters that separate string array elements.
* Conversion helpers (``_to_text``, ``_parse_int``, ``_parse_decimal``, …)
  that translate between Python values and stored text.

System Role
-----------
This is the domain core. It performs no I/O and does no logging; the adapters
and :mod:`lib_flat_config.core` feed it pairs via :meth:`FlatConfig.from_pairs`
and serialise it via :meth:`FlatConfig.to_raw_pairs`.

Aliasing
--------
A subset is a live view, not a copy. Every subset created from a root (or from
another subset) shares the root's mapping, so a ``put`` through any view is
immediately visible through all the others.

Concurrency
-----------
**Not synchronised.** If several threads access one store family and at least
one of them calls :meth:`~FlatConfig.put`, :meth:`~FlatConfig.remove` or
:meth:`~FlatConfig.merge`, the host application must serialise access with its
own lock.
"""

from __future__ import annotations

import json
import re
from collections.abc import Mapping
from decimal import Decimal, InvalidOperation as DecimalInvalidOperation
from enum import Enum
from typing import Any, Callable, Final, Iterable, Sequence, TypeVar, overload

from .errors import InvalidFormat, InvalidKey, InvalidOperation, InvalidValue, MissingKey
from .substitution import resolve

T = TypeVar("T")
E = TypeVar("E", bound=Enum)

ARRAY_DELIMITERS: Final[str] = ",;:"
"""Characters that separate string array elements when reading."""

ARRAY_JOINER: Final[str] = ","

_ARRAY_SPLIT: Final[re.Pattern[str]] = re.compile(r"[,;:]")
_INTEGER: Final[re.Pattern[str]] = re.compile(r"[+-]?[0-9]+")
_DECIMAL: Final[re.Pattern[str]] = re.compile(r"[+-]?(?:[0-9]+(?:\.[0-9]*)?|\.[0-9]+)(?:[eE][+-]?[0-9]+)?")

_INT_RANGE: Final[tuple[int, int]] = (-(2**31), 2**31 - 1)
_LONG_RANGE: Final[tuple[int, int]] = (-(2**63), 2**63 - 1)

_UNSET: Final[Any] = object()


class FlatConfig:
    """String key/value store with typed accessors and ``${key}`` substitution.

    Why
    ----
    Applications want to keep configuration in flat ``.properties`` style
    files, address related keys as a group (``db.host``, ``db.port`` via
    ``subset("db")``), and read values as the type they need.

    What
    ----
    Wraps a ``dict[str, str | None]`` of *absolute* keys. Root stores address
    keys directly; subsets prepend their prefix to every key they receive.
    Reads go through :func:`lib_flat_config.domain.substitution.resolve`.

    Parameters
    ----------
    pairs:
        Optional mapping or iterable of ``(key, value)`` pairs, converted as in
        :meth:`from_pairs`.

    Examples
    --------
    >>> cfg = FlatConfig({"db.host": "localhost", "db.url": "jdbc://${db.host}/app"})
    >>> db = cfg.subset("db")
    >>> db.get_string("url")
    'jdbc://localhost/app'
    >>> db.put("port", 5432)
    >>> cfg.get_int("db.port")
    5432
    >>> sorted(db.keys())
    ['host', 'port', 'url']
    """

    __slots__ = ("_entries", "_prefix")

    def __init__(self, pairs: Mapping[Any, Any] | Iterable[tuple[Any, Any]] | None = None) -> None:
        self._entries: dict[str, str | None] = {}
        self._prefix: str | None = None
        if pairs is not None:
            items = pairs.items() if isinstance(pairs, Mapping) else pairs
            for key, value in items:
                if key is None:
                    raise InvalidKey("Key must not be None")
                self._entries[str(key)] = _to_text(value) or None

    @classmethod
    def from_pairs(cls, pairs: Mapping[Any, Any] | Iterable[tuple[Any, Any]]) -> FlatConfig:
        """Create a root store from *pairs*.

        Keys are converted with ``str()``; values are converted to their stored
        text form (see :meth:`put`). Empty string values are stored as ``None``.
        A ``None`` key raises :class:`InvalidKey`.

        Examples
        --------
        >>> cfg = FlatConfig.from_pairs([("a", 1), ("b", ""), ("c", True)])
        >>> cfg.to_raw_pairs()
        [('a', '1'), ('b', None), ('c', 'true')]
        """

        return cls(pairs)

    @classmethod
    def _view(cls, entries: dict[str, str | None], prefix: str) -> FlatConfig:
        """Return a subset view sharing *entries*."""

        view = cls.__new__(cls)
        view._entries = entries
        view._prefix = prefix
        return view

    # -- view information -------------------------------------------------

    @property
    def prefix(self) -> str | None:
        """Absolute, dot-terminated prefix of a subset or ``None`` for a root."""

        return self._prefix

    @property
    def subset_name(self) -> str | None:
        """Prefix without its trailing dot, ``None`` for a root.

        Examples
        --------
        >>> FlatConfig().subset("a").subset("b.").subset_name
        'a.b'
        """

        return self._prefix[:-1] if self._prefix is not None else None

    @property
    def is_subset(self) -> bool:
        return self._prefix is not None

    def subset(self, prefix: str) -> FlatConfig:
        """Return a live view of all keys below *prefix*.

        What
        ----
        A trailing ``.`` is appended to *prefix* unless present; the new view's
        absolute prefix is this store's prefix followed by the normalised one.
        The returned store references (does not copy) this store's mapping, so
        changes flow in both directions.

        Examples
        --------
        >>> FlatConfig().subset("bla").subset("bli").prefix
        'bla.bli.'
        """

        if prefix is None:
            raise InvalidKey("Subset prefix must not be None")
        normalised = prefix if prefix.endswith(".") else f"{prefix}."
        return FlatConfig._view(self._entries, self._to_absolute_key(normalised))

    def _to_absolute_key(self, key: str) -> str:
        if key is None:
            raise InvalidKey("Key must not be None")
        return self._prefix + key if self._prefix is not None else key

    # -- queries ----------------------------------------------------------

    def keys(self) -> set[str]:
        """Return the keys visible through this view.

        Roots return every key; subsets return the keys that start with their
        prefix, with the prefix stripped. Computed on every call.
        """

        if self._prefix is None:
            return set(self._entries)
        size = len(self._prefix)
        return {key[size:] for key in self._entries if key.startswith(self._prefix)}

    def contains_key(self, key: str) -> bool:
        """Return whether *key* exists, regardless of its value."""

        return self._to_absolute_key(key) in self._entries

    def contains_value(self, key: str) -> bool:
        """Return whether *key* resolves to a non-empty value."""

        return bool(resolve(self._entries, self._to_absolute_key(key)))

    def contains_keys(self) -> bool:
        return bool(self.keys())

    def contains_values(self) -> bool:
        return any(self.contains_value(key) for key in self.keys())

    def __contains__(self, key: object) -> bool:
        return isinstance(key, str) and self.contains_key(key)

    def to_dict(self) -> dict[str, str | None]:
        """Return a new dict with the entries of this view.

        What
        ----
        A root returns a shallow copy of its raw entries, unresolved
        ``${...}`` templates included, which is what persistence needs. A
        subset returns its entries with the prefix stripped and every value
        resolved, ready to be handed to code that knows nothing about the rest
        of the configuration.

        Examples
        --------
        >>> cfg = FlatConfig({"x": "1", "s.y": "${x}"})
        >>> cfg.to_dict()["s.y"]
        '${x}'
        >>> cfg.subset("s").to_dict()
        {'y': '1'}
        """

        if self._prefix is None:
            return dict(self._entries)
        size = len(self._prefix)
        return {
            key[size:]: resolve(self._entries, key) for key in list(self._entries) if key.startswith(self._prefix)
        }

    def to_raw_pairs(self) -> list[tuple[str, str | None]]:
        """Return every literal entry of a root store as sorted ``(key, value)`` pairs.

        Raises
        ------
        InvalidOperation
            When called on a subset; serialise through the owning root instead.
        """

        if self._prefix is not None:
            raise InvalidOperation(f"Only root level configs can be exported (subset '{self._prefix}')")
        return sorted(self._entries.items())

    def to_json(self, *, indent: int | None = None) -> str:
        """Serialise :meth:`to_dict` to JSON with sorted keys.

        Examples
        --------
        >>> FlatConfig({"b": "2", "a": None}).to_json()
        '{"a":null,"b":"2"}'
        """

        return json.dumps(self.to_dict(), indent=indent, separators=(",", ":"), ensure_ascii=False, sort_keys=True)

    # -- typed accessors --------------------------------------------------

    @overload
    def get_string(self, key: str) -> str: ...

    @overload
    def get_string(self, key: str, default: T) -> str | T: ...

    def get_string(self, key: str, default: Any = _UNSET) -> Any:
        """Return the resolved value for *key*.

        ``None`` and empty values count as absent: the optional form returns
        *default*, the mandatory form (no *default*) raises :class:`MissingKey`.
        """

        value = resolve(self._entries, self._to_absolute_key(key))
        if value:
            return value
        if default is _UNSET:
            raise self._missing(key)
        return default

    @overload
    def get_boolean(self, key: str) -> bool: ...

    @overload
    def get_boolean(self, key: str, default: T) -> bool | T: ...

    def get_boolean(self, key: str, default: Any = _UNSET) -> Any:
        """Return ``True`` when the value equals ``"true"`` ignoring case, ``False`` otherwise.

        Malformed values never raise; they simply read as ``False``.
        """

        return self._convert(key, default, _parse_boolean, "boolean")

    @overload
    def get_int(self, key: str) -> int: ...

    @overload
    def get_int(self, key: str, default: T) -> int | T: ...

    def get_int(self, key: str, default: Any = _UNSET) -> Any:
        """Return the value as a 32-bit signed integer."""

        return self._convert(key, default, _parse_int, "int")

    @overload
    def get_long(self, key: str) -> int: ...

    @overload
    def get_long(self, key: str, default: T) -> int | T: ...

    def get_long(self, key: str, default: Any = _UNSET) -> Any:
        """Return the value as a 64-bit signed integer."""

        return self._convert(key, default, _parse_long, "long")

    @overload
    def get_decimal(self, key: str) -> Decimal: ...

    @overload
    def get_decimal(self, key: str, default: T) -> Decimal | T: ...

    def get_decimal(self, key: str, default: Any = _UNSET) -> Any:
        """Return the value as an arbitrary-precision :class:`~decimal.Decimal`."""

        return self._convert(key, default, _parse_decimal, "decimal")

    @overload
    def get_enum(self, key: str, enum_type: type[E]) -> E: ...

    @overload
    def get_enum(self, key: str, enum_type: type[E], default: T) -> E | T: ...

    def get_enum(self, key: str, enum_type: type[E], default: Any = _UNSET) -> Any:
        """Return the member of *enum_type* whose name equals the value.

        Examples
        --------
        >>> from enum import Enum
        >>> class Unit(Enum):
        ...     SECONDS = 1
        ...     HOURS = 3600
        >>> FlatConfig({"unit": "HOURS"}).get_enum("unit", Unit)
        <Unit.HOURS: 3600>
        """

        def parse(value: str) -> E:
            try:
                return enum_type[value]
            except KeyError as exc:
                raise ValueError(value) from exc

        return self._convert(key, default, parse, f"enum of type '{enum_type.__name__}'")

    @overload
    def get_string_array(self, key: str) -> list[str]: ...

    @overload
    def get_string_array(self, key: str, default: T) -> list[str] | T: ...

    def get_string_array(self, key: str, default: Any = _UNSET) -> Any:
        """Split the value on ``,``, ``;`` or ``:`` and trim every element.

        Empty elements after the last delimiter are dropped.

        Examples
        --------
        >>> FlatConfig({"hosts": "a, b ;c:"}).get_string_array("hosts")
        ['a', 'b', 'c']
        """

        return self._convert(key, default, _split_and_trim, "string array")

    def _convert(self, key: str, default: Any, parse: Callable[[str], Any], type_name: str) -> Any:
        """Fetch *key* through :meth:`get_string` and convert it with *parse*."""

        value = self.get_string(key, None)
        if value is None:
            if default is _UNSET:
                raise self._missing(key)
            return default
        try:
            return parse(value)
        except ValueError:
            raise InvalidFormat(f"Value '{value}' for key '{key}' is no valid {type_name}") from None

    def _missing(self, key: str) -> MissingKey:
        suffix = f" in subset '{self._prefix}'" if self._prefix is not None else ""
        return MissingKey(f"No value configured for key '{key}'{suffix}")

    # -- mutation ---------------------------------------------------------

    def put(self, key: str, value: object) -> None:
        """Store *value* under *key*, overwriting any existing entry.

        What
        ----
        The value is converted to text first:

        * ``str`` is stored as is (also ``""``), ``None`` as ``None``;
        * ``bool`` becomes ``"true"`` / ``"false"``;
        * :class:`~enum.Enum` members are stored by name;
        * :class:`~decimal.Decimal` uses plain notation (no exponent);
        * ``list`` / ``tuple`` are string arrays joined with ``,``;
        * anything else is stored as ``str(value)``.

        Raises
        ------
        InvalidValue
            An array element contains ``,``, ``;`` or ``:``. Nothing is
            written in that case.
        """

        absolute = self._to_absolute_key(key)
        self._entries[absolute] = _to_text(value)

    def remove(self, key: str) -> None:
        """Delete *key* if present."""

        self._entries.pop(self._to_absolute_key(key), None)

    def merge(self, other: FlatConfig) -> None:
        """Copy every entry of *other* into this store, overwriting collisions.

        Raises
        ------
        InvalidOperation
            If this store or *other* is a subset. Merging a partial view would
            either drop the keys outside its prefix or write them into the
            wrong namespace.
        """

        if self._prefix is not None or other._prefix is not None:
            raise InvalidOperation("Only root level configs can be merged (no subsets)")
        self._entries.update(other._entries)

    def __repr__(self) -> str:
        """Render the view as ``FlatConfig(subset=p.)[k=v, ...]`` with raw values.

        Examples
        --------
        >>> cfg = FlatConfig({"a.x": "1", "a.y": "${a.x}", "b": "2"})
        >>> cfg
        FlatConfig[a.x=1, a.y=${a.x}, b=2]
        >>> cfg.subset("a")
        FlatConfig(subset=a.)[x=1, y=${a.x}]
        >>> blank = FlatConfig({"unset": None})
        >>> blank.put("empty", "")
        >>> blank
        FlatConfig[empty=, unset=None]
        """

        head = "FlatConfig" if self._prefix is None else f"FlatConfig(subset={self._prefix})"
        body = ", ".join(
            f"{key}={_display(self._entries.get(self._to_absolute_key(key)))}" for key in sorted(self.keys())
        )
        return f"{head}[{body}]"


def _display(value: str | None) -> str:
    return "None" if value is None else value


def _to_text(value: object) -> str | None:
    """Convert *value* to the text stored in the mapping.

    Examples
    --------
    >>> _to_text(True), _to_text(42), _to_text(Decimal("1E+3")), _to_text(None)
    ('true', '42', '1000', None)
    """

    if value is None:
        return None
    if isinstance(value, Enum):
        return value.name
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, Decimal):
        return format(value, "f")
    if isinstance(value, (list, tuple)):
        return _join_array(value)
    return str(value)


def _join_array(values: Sequence[object]) -> str:
    """Join array elements with :data:`ARRAY_JOINER`, rejecting reserved characters."""

    elements: list[str] = []
    for item in values:
        text = _to_text(item)
        if text is None:
            raise InvalidValue("Array values must not contain None elements")
        if any(char in text for char in ARRAY_DELIMITERS):
            raise InvalidValue(f"Array value '{text}' contains one of the separator chars '{ARRAY_DELIMITERS}'")
        elements.append(text)
    return ARRAY_JOINER.join(elements)


def _split_and_trim(value: str) -> list[str]:
    parts = _ARRAY_SPLIT.split(value)
    while parts and parts[-1] == "":
        parts.pop()
    return [part.strip() for part in parts]


def _parse_boolean(value: str) -> bool:
    return value.lower() == "true"


def _parse_bounded(value: str, bounds: tuple[int, int]) -> int:
    if not _INTEGER.fullmatch(value):
        raise ValueError(value)
    number = int(value)
    if not bounds[0] <= number <= bounds[1]:
        raise ValueError(value)
    return number


def _parse_int(value: str) -> int:
    return _parse_bounded(value, _INT_RANGE)


def _parse_long(value: str) -> int:
    return _parse_bounded(value, _LONG_RANGE)


def _parse_decimal(value: str) -> Decimal:
    if not _DECIMAL.fullmatch(value):
        raise ValueError(value)
    try:
        return Decimal(value)
    except DecimalInvalidOperation as exc:
        raise ValueError(value) from exc
