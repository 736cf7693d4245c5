"""Build a Snapshot from a users stream and an optional groups stream.

Both streams are UTF-8 and are read line by line. Binary streams are
decoded as they are read; text streams are used as they are. Loading is
all-or-nothing: any failure raises
:class:`~propsrealm.domain.errors.LoadError` and nothing is returned.
"""

from __future__ import annotations

import io
import time
from collections.abc import Callable
from typing import IO, TYPE_CHECKING

from propsrealm.domain.accounts import Account, Snapshot, parse_group_list
from propsrealm.domain.errors import LineDecodeError, LoadError, NoRealmFoundError
from propsrealm.domain.lines import (
    REALM_MARKER_PREFIX,
    decode_line,
    is_comment,
    parse_realm_marker,
)
from propsrealm.infrastructure.properties import parse_properties

if TYPE_CHECKING:
    from collections.abc import Iterator

AccountsStream = IO[bytes] | IO[str]


def read_text_lines(stream: AccountsStream, label: str) -> Iterator[str]:
    """Lazily iterate the lines of *stream* (``\\n``, ``\\r\\n`` or ``\\r``).

    Raises:
        LoadError: If the stream cannot be read or is not valid UTF-8.
    """
    if isinstance(stream, io.TextIOBase):
        text: IO[str] = stream
    else:
        text = io.TextIOWrapper(stream, encoding="utf-8", newline=None)
    try:
        for chunk in text:
            # Text streams may still carry a lone "\r" inside one chunk.
            yield from io.StringIO(chunk, newline=None)
    except (OSError, UnicodeDecodeError) as exc:
        msg = f"Unable to read {label} properties: {exc}"
        raise LoadError(msg) from exc
    finally:
        # The caller owns the binary stream; closing the wrapper would close it.
        if isinstance(text, io.TextIOWrapper) and text is not stream:
            text.detach()


def load_snapshot(
    accounts: AccountsStream,
    groups: AccountsStream | None = None,
    *,
    default_realm: str | None = None,
    clock: Callable[[], float] = time.time,
) -> Snapshot:
    """Parse the users and groups streams into a new Snapshot.

    Args:
        accounts: Users file, ``<user>=<secret>`` lines.
        groups: Optional groups file, ``<user>=<group>,<group>`` properties.
        default_realm: Realm used when the users file declares none.
        clock: Wall-clock source in epoch seconds.

    Raises:
        LineDecodeError: A line carries a malformed unicode escape.
        NoRealmFoundError: No realm marker and no *default_realm*.
        LoadError: A stream could not be read.
    """
    group_map = parse_properties(read_text_lines(groups, "groups")) if groups is not None else {}

    entries: dict[str, Account] = {}
    realm_name: str | None = None

    for lineno, raw in enumerate(read_text_lines(accounts, "users"), start=1):
        line = raw.strip()
        if line.startswith("#") and REALM_MARKER_PREFIX in line:
            declared = parse_realm_marker(line)
            if declared is not None:
                realm_name = declared
            continue
        if is_comment(line):
            continue
        try:
            username, secret = decode_line(line)
        except LineDecodeError as exc:
            exc.add_note(f"users properties line {lineno}")
            raise
        if username is None:
            continue
        entries[username] = Account(username, secret, parse_group_list(group_map.get(username)))

    if realm_name is None:
        if default_realm is None:
            raise NoRealmFoundError
        realm_name = default_realm

    # Principals that only appear in the groups file.
    for username, raw_groups in group_map.items():
        if username not in entries:
            entries[username] = Account(username, None, parse_group_list(raw_groups))

    return Snapshot(accounts=entries, realm_name=realm_name, load_time=int(clock() * 1000))
