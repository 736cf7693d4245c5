"""Accounts and snapshots — immutable values shared by all readers.

INVARIANT: A Snapshot is never mutated after construction. Reloading builds
a new Snapshot; per-request views (merged group claims) are new Accounts.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field, replace
from types import MappingProxyType


def parse_group_list(raw: str | None) -> frozenset[str]:
    """Split a comma-joined group string into trimmed, non-empty names.

    Examples:
        >>> sorted(parse_group_list(" admin, ops,,admin "))
        ['admin', 'ops']
        >>> parse_group_list(None)
        frozenset()
    """
    if raw is None:
        return frozenset()
    return frozenset(part.strip() for part in raw.split(",") if part.strip())


@dataclass(frozen=True)
class Account:
    """One principal from the users and/or groups file.

    ``secret`` is None for principals that only appear in the groups file:
    they can be authorized but never authenticated.
    """

    name: str
    secret: str | None = None
    groups: frozenset[str] = frozenset()

    @property
    def has_secret(self) -> bool:
        return self.secret is not None


def merge_group_claims(account: Account, claims: Iterable[str]) -> Account:
    """Return a copy of *account* whose groups include *claims*."""
    return replace(account, groups=account.groups | frozenset(claims))


@dataclass(frozen=True)
class Snapshot:
    """Point-in-time view of all loaded accounts.

    Attributes:
        accounts: Read-only username -> Account mapping (case-sensitive).
        realm_name: Realm the digests are bound to.
        load_time: Wall-clock load time in epoch milliseconds.
    """

    accounts: Mapping[str, Account] = field(default_factory=dict)
    realm_name: str = ""
    load_time: int = 0

    def __post_init__(self) -> None:
        object.__setattr__(self, "accounts", MappingProxyType(dict(self.accounts)))

    def get(self, name: str) -> Account | None:
        return self.accounts.get(name)

    def __len__(self) -> int:
        return len(self.accounts)
