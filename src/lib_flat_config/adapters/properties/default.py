"""``.properties`` adapter.

Purpose
-------
Implement the :class:`lib_flat_config.application.ports.PairParser` and
:class:`lib_flat_config.application.ports.PairSerializer` protocols for the
flat ``key=value`` format popularised by ``java.util.Properties``.

Contents
--------
* :class:`PropertiesParser` – logical-line reader with comment, continuation,
  separator and escape handling.
* :class:`PropertiesSerializer` – writer that escapes keys and values so the
  parser reads them back verbatim.
* Helpers (`_logical_lines`, `_split_line`, `_unescape`, `_escape`) that do the
  character-level work.

System Role
-----------
Used by :mod:`lib_flat_config.core` to turn files and resources into
:class:`~lib_flat_config.domain.store.FlatConfig` instances and back.
"""

from __future__ import annotations

import re
from string import hexdigits
from typing import Final, Iterable, Iterator

from ...domain.errors import InvalidFormat
from ...observability import log_debug, log_error

_NEWLINE: Final[re.Pattern[str]] = re.compile(r"\r\n|\r|\n")
_WHITESPACE: Final[str] = " \t\f"
_SEPARATORS: Final[str] = "=:"
_COMMENT_MARKERS: Final[str] = "#!"

_DECODE: Final[dict[str, str]] = {"t": "\t", "n": "\n", "r": "\r", "f": "\f"}
_ENCODE: Final[dict[str, str]] = {
    "\\": "\\\\",
    "\t": "\\t",
    "\n": "\\n",
    "\r": "\\r",
    "\f": "\\f",
    "=": "\\=",
    ":": "\\:",
    "#": "\\#",
    "!": "\\!",
}


class PropertiesParser:
    """Parse ``.properties`` text into ``(key, value)`` pairs.

    Why
    ----
    Properties files are the storage format configuration stores are usually
    shipped in; the parser keeps their established rules so existing files
    load unchanged.

    Examples
    --------
    >>> PropertiesParser().parse("# comment\\nhost = db\\nname:app\\\\\\n    -prod\\n")
    [('host', 'db'), ('name', 'app-prod')]
    """

    def parse(self, text: str) -> list[tuple[str, str]]:
        """Return the pairs defined in *text*; later duplicates win.

        Raises
        ------
        InvalidFormat
            A ``\\uXXXX`` escape is not followed by four hex digits.
        """

        collected: dict[str, str] = {}
        for line_number, line in _logical_lines(text):
            key, value = _split_line(line, line_number)
            collected[key] = value
        log_debug("properties_parsed", source="properties", path=None, keys=len(collected))
        return list(collected.items())


class PropertiesSerializer:
    """Render ``(key, value)`` pairs as ``.properties`` text.

    Examples
    --------
    >>> print(PropertiesSerializer().serialize([("a key", " x=1"), ("empty", None)], comment="demo"), end="")
    #demo
    a\\ key=\\ x\\=1
    empty=
    """

    def serialize(
        self,
        pairs: Iterable[tuple[str, str | None]],
        *,
        comment: str | None = None,
        ascii_only: bool = False,
    ) -> str:
        """Return one ``key=value`` line per pair, preceded by optional ``#`` comment lines.

        Parameters
        ----------
        pairs:
            Pairs in output order. ``None`` values are written as empty values.
        comment:
            Optional text written as leading comment lines.
        ascii_only:
            Escape characters outside printable ASCII as ``\\uXXXX``.
        """

        lines: list[str] = []
        if comment is not None:
            lines.extend(f"#{line}" for line in comment.splitlines() or [""])
        for key, value in pairs:
            escaped_key = _escape(key, escape_space=True, ascii_only=ascii_only)
            escaped_value = _escape(value or "", escape_space=False, ascii_only=ascii_only)
            lines.append(f"{escaped_key}={escaped_value}")
        return "".join(f"{line}\n" for line in lines)


def _logical_lines(text: str) -> Iterator[tuple[int, str]]:
    """Yield ``(line_number, logical_line)`` joining continued lines.

    Leading whitespace is stripped from every natural line; blank lines and
    comment lines are skipped unless they continue a previous line.

    Examples
    --------
    >>> list(_logical_lines("a=1\\\\\\n  2\\n\\n! note\\nb=3"))
    [(1, 'a=12'), (5, 'b=3')]
    """

    buffer: str | None = None
    start = 0
    for number, raw in enumerate(_NEWLINE.split(text), start=1):
        line = raw.lstrip(_WHITESPACE)
        if buffer is None:
            if not line or line[0] in _COMMENT_MARKERS:
                continue
            start = number
            buffer = ""
        if _continues(line):
            buffer += line[:-1]
            continue
        yield start, buffer + line
        buffer = None
    if buffer is not None:
        yield start, buffer


def _continues(line: str) -> bool:
    """Return whether *line* ends with an odd number of backslashes."""

    trailing = len(line) - len(line.rstrip("\\"))
    return trailing % 2 == 1


def _split_line(line: str, line_number: int) -> tuple[str, str]:
    """Split a logical line into its unescaped key and value.

    The key ends at the first unescaped ``=``, ``:`` or whitespace character.
    Whitespace and at most one separator are skipped before the value.

    Examples
    --------
    >>> _split_line("key   :  value  ", 1)
    ('key', 'value  ')
    >>> _split_line("a\\\\=b=c", 1)
    ('a=b', 'c')
    >>> _split_line("lonely", 1)
    ('lonely', '')
    """

    length = len(line)
    key_end = length
    escaped = False
    for index, char in enumerate(line):
        if escaped:
            escaped = False
        elif char == "\\":
            escaped = True
        elif char in _WHITESPACE or char in _SEPARATORS:
            key_end = index
            break

    value_start = key_end
    separator_seen = False
    while value_start < length:
        char = line[value_start]
        if char in _WHITESPACE:
            value_start += 1
        elif not separator_seen and char in _SEPARATORS:
            separator_seen = True
            value_start += 1
        else:
            break

    key = _unescape(line[:key_end], line_number)
    value = _unescape(line[value_start:], line_number)
    return key, value


def _unescape(text: str, line_number: int) -> str:
    """Decode backslash escapes; ``\\X`` for any other ``X`` yields ``X``.

    Examples
    --------
    >>> _unescape("tab\\\\there \\\\u00e9\\\\:", 1)
    'tab\\there é:'
    """

    if "\\" not in text:
        return text
    out: list[str] = []
    index = 0
    length = len(text)
    while index < length:
        char = text[index]
        index += 1
        if char != "\\":
            out.append(char)
            continue
        if index >= length:
            break
        char = text[index]
        index += 1
        if char == "u":
            digits = text[index : index + 4]
            if len(digits) != 4 or any(digit not in hexdigits for digit in digits):
                log_error("properties_invalid_escape", source="properties", path=None, line=line_number)
                raise InvalidFormat(f"Malformed \\uXXXX encoding in line {line_number}")
            out.append(chr(int(digits, 16)))
            index += 4
        else:
            out.append(_DECODE.get(char, char))
    return _join_surrogates("".join(out))


def _join_surrogates(text: str) -> str:
    """Combine UTF-16 surrogate pairs produced by consecutive ``\\uXXXX`` escapes."""

    if not any("\ud800" <= char <= "\udfff" for char in text):
        return text
    return text.encode("utf-16-le", "surrogatepass").decode("utf-16-le", "surrogatepass")


def _escape(text: str, *, escape_space: bool, ascii_only: bool) -> str:
    """Escape *text* so :func:`_split_line` reads it back verbatim.

    Spaces are escaped everywhere when *escape_space* is set (keys) and only in
    leading position otherwise (values).

    Examples
    --------
    >>> _escape(" a b", escape_space=False, ascii_only=False)
    '\\\\ a b'
    >>> _escape("é", escape_space=False, ascii_only=True)
    '\\\\u00E9'
    """

    out: list[str] = []
    for index, char in enumerate(text):
        if char == " ":
            out.append("\\ " if escape_space or index == 0 else " ")
        elif char in _ENCODE:
            out.append(_ENCODE[char])
        elif ascii_only and not 0x20 <= ord(char) <= 0x7E:
            encoded = char.encode("utf-16-be", "surrogatepass")
            for offset in range(0, len(encoded), 2):
                out.append(f"\\u{int.from_bytes(encoded[offset:offset + 2], 'big'):04X}")
        else:
            out.append(char)
    return "".join(out)
