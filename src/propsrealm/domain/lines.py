"""Users-file line grammar — comments, realm marker, escaped key/value pairs.

A data line is ``<username><delimiter><secret>`` where the delimiter is the
first unescaped ``=`` or ``:``. A backslash takes the next character
literally, except ``\\uXXXX`` which yields one character from four hex digits.

Examples:
    >>> decode_line("alice=s3cr3t")
    ('alice', 's3cr3t')
    >>> decode_line(r"bob\\:smith:pa\\=ss")
    ('bob:smith', 'pa=ss')
    >>> decode_line("no delimiter here")
    (None, 'no delimiter here')
"""

from __future__ import annotations

import string
from typing import TYPE_CHECKING

from propsrealm.domain.errors import LineDecodeError

if TYPE_CHECKING:
    from collections.abc import Iterator

COMMENT_PREFIXES = ("#", "!")
REALM_MARKER_PREFIX = "$REALM_NAME="
REALM_MARKER_SUFFIX = "$"

_DELIMITERS = frozenset("=:")
_UNICODE_ESCAPE_DIGITS = 4
_HEX_DIGITS = frozenset(string.hexdigits)


def is_comment(line: str) -> bool:
    """Return True for ``#`` and ``!`` comment lines (already stripped)."""
    return line.startswith(COMMENT_PREFIXES)


def parse_realm_marker(line: str) -> str | None:
    """Extract the realm name from a ``#...$REALM_NAME=<name>$...`` comment.

    Returns None when the line is not a ``#`` comment, carries no marker,
    or the closing ``$`` is missing.
    """
    if not line.startswith("#"):
        return None
    idx = line.find(REALM_MARKER_PREFIX)
    if idx < 0:
        return None
    start = idx + len(REALM_MARKER_PREFIX)
    end = line.find(REALM_MARKER_SUFFIX, start)
    if end < 0:
        return None
    return line[start:end]


def read_unicode_escape(chars: Iterator[str]) -> str:
    """Consume the four hex digits following ``\\u`` and return the character."""
    hex_digits = ""
    for _ in range(_UNICODE_ESCAPE_DIGITS):
        try:
            hex_digits += next(chars)
        except StopIteration:
            raise LineDecodeError(hex_digits) from None
    # int() alone would also take "0x", "_", "+" and surrounding blanks.
    if not _HEX_DIGITS.issuperset(hex_digits):
        raise LineDecodeError(hex_digits, reason="not a hexadecimal number")
    return chr(int(hex_digits, 16))


def decode_line(line: str) -> tuple[str | None, str]:
    """Decode one stripped users-file line into ``(username, secret)``.

    The username is None when no delimiter was found; such lines are
    skipped by the loader.

    Raises:
        LineDecodeError: On a truncated or non-hex ``\\uXXXX`` escape.
    """
    username: str | None = None
    buffer: list[str] = []

    chars = iter(line)
    for ch in chars:
        if ch == "\\":
            marker = next(chars, None)
            if marker is None:
                buffer.append(ch)
            elif marker == "u":
                buffer.append(read_unicode_escape(chars))
            else:
                buffer.append(marker)
        elif username is None and ch in _DELIMITERS:
            username = "".join(buffer).strip()
            buffer = []
        else:
            buffer.append(ch)

    return username, "".join(buffer).strip()


def escape_value(text: str) -> str:
    """Escape *text* so that :func:`decode_line` reproduces it verbatim.

    Control characters and non-ASCII text become ``\\uXXXX`` escapes, so
    the result always fits on one line. Leading and trailing whitespace is
    not preserved by the grammar.
    """
    out: list[str] = []
    for i, ch in enumerate(text):
        if ch == "\\" or ch in _DELIMITERS or (i == 0 and ch in "#!"):
            out.append("\\" + ch)
        elif (ord(ch) < 0x20 or ord(ch) > 0x7E) and ord(ch) <= 0xFFFF:
            out.append(f"\\u{ord(ch):04x}")
        else:
            out.append(ch)
    return "".join(out)
