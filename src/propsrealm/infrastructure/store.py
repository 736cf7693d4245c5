"""IdentityStore — the live Snapshot reference.

States: UNLOADED (no snapshot) -> LOADED -> LOADED' on each reload.

INVARIANT: The live snapshot changes only by a single reference assignment
in :meth:`IdentityStore.publish`. A failed load never reaches ``publish``,
so readers keep whatever was live before.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from propsrealm.domain.errors import RealmUnavailableError
from propsrealm.infrastructure.loader import load_snapshot

if TYPE_CHECKING:
    from propsrealm.domain.accounts import Snapshot
    from propsrealm.infrastructure.loader import AccountsStream

logger = logging.getLogger(__name__)


class IdentityStore:
    """Holds the currently published Snapshot.

    Readers call :meth:`current` (or :attr:`snapshot`) once per request and
    keep using that object; they never block a reload.
    """

    def __init__(self) -> None:
        self._snapshot: Snapshot | None = None

    def current(self) -> Snapshot | None:
        """The live snapshot, or None while unloaded."""
        return self._snapshot

    @property
    def loaded(self) -> bool:
        return self._snapshot is not None

    @property
    def snapshot(self) -> Snapshot:
        """The live snapshot.

        Raises:
            RealmUnavailableError: If nothing has been loaded yet.
        """
        snapshot = self._snapshot
        if snapshot is None:
            msg = "Identity store has not been loaded"
            raise RealmUnavailableError(msg)
        return snapshot

    @property
    def load_time(self) -> int:
        """Epoch milliseconds of the live snapshot's load."""
        return self.snapshot.load_time

    def publish(self, snapshot: Snapshot) -> Snapshot | None:
        """Replace the live snapshot, returning the previous one."""
        previous, self._snapshot = self._snapshot, snapshot
        return previous

    def load(
        self,
        accounts: AccountsStream,
        groups: AccountsStream | None = None,
        *,
        default_realm: str | None = None,
    ) -> Snapshot:
        """Parse the streams and publish the resulting snapshot.

        Raises:
            LoadError: On any parse or read failure; the live snapshot is
                left unchanged.
        """
        snapshot = load_snapshot(accounts, groups, default_realm=default_realm)
        self.publish(snapshot)
        logger.info(
            "Loaded %d accounts for realm %s",
            len(snapshot),
            snapshot.realm_name,
        )
        return snapshot
