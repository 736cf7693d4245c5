"""Flat ``key=value`` properties reader for the groups file.

Follows the classic ``.properties`` syntax:

- ``#`` and ``!`` comment lines, blank lines ignored.
- Key ends at the first unescaped ``=``, ``:`` or whitespace.
- A line ending in an odd number of backslashes continues on the next line
  (leading whitespace of the continuation is dropped).
- ``\\t \\n \\r \\f`` and ``\\uXXXX`` escapes; any other escaped character
  stands for itself.
- Later duplicates win.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from propsrealm.domain.lines import COMMENT_PREFIXES, read_unicode_escape

if TYPE_CHECKING:
    from collections.abc import Iterable, Iterator

_WHITESPACE = " \t\f"
_SEPARATORS = "=:"
_SPECIAL_ESCAPES = {"t": "\t", "n": "\n", "r": "\r", "f": "\f"}


def _continues(line: str) -> bool:
    trailing = len(line) - len(line.rstrip("\\"))
    return trailing % 2 == 1


def iter_logical_lines(lines: Iterable[str]) -> Iterator[str]:
    """Join continuation lines and drop comments and blank lines."""
    pending: str | None = None
    for raw in lines:
        line = raw.rstrip("\r\n").lstrip(_WHITESPACE)
        if pending is None and (not line or line.startswith(COMMENT_PREFIXES)):
            continue
        if _continues(line):
            pending = (pending or "") + line[:-1]
            continue
        yield (pending or "") + line
        pending = None
    if pending is not None:
        yield pending


def unescape(text: str) -> str:
    """Resolve properties-style backslash escapes in *text*."""
    out: list[str] = []
    chars = iter(text)
    for ch in chars:
        if ch != "\\":
            out.append(ch)
            continue
        marker = next(chars, None)
        if marker is None:
            break
        if marker == "u":
            out.append(read_unicode_escape(chars))
        else:
            out.append(_SPECIAL_ESCAPES.get(marker, marker))
    return "".join(out)


def split_entry(line: str) -> tuple[str, str]:
    """Split a logical line into its raw (still escaped) key and value."""
    end = 0
    while end < len(line):
        ch = line[end]
        if ch == "\\":
            end += 2
            continue
        if ch in _SEPARATORS or ch in _WHITESPACE:
            break
        end += 1
    key = line[:end]
    rest = line[end:].lstrip(_WHITESPACE)
    if rest[:1] in ("=", ":"):
        rest = rest[1:].lstrip(_WHITESPACE)
    return key, rest


def parse_properties(lines: Iterable[str]) -> dict[str, str]:
    """Parse properties *lines* into a ``key -> value`` dict.

    Raises:
        LineDecodeError: On a malformed ``\\uXXXX`` escape.
    """
    entries: dict[str, str] = {}
    for logical in iter_logical_lines(lines):
        raw_key, raw_value = split_entry(logical)
        entries[unescape(raw_key)] = unescape(raw_value)
    return entries
