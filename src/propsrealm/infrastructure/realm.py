"""PropertiesRealm — the legacy properties-file security realm.

The realm is the single dependency injected into every identity service.
It owns the live :class:`IdentityStore`, the password hash service and the
optional plugin manager, and hands out :class:`RealmIdentity` objects bound
to one snapshot each.

Typical use::

    realm = PropertiesRealm()
    realm.initialize({"usersProperties": "users.properties", "plainText": "true"})
    identity = realm.realm_identity("alice")
    identity.verify_evidence(PasswordGuess("s3cr3t"))
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from contextlib import ExitStack
from pathlib import Path
from typing import TYPE_CHECKING

from propsrealm.config.models import RealmConfig
from propsrealm.domain.errors import LoadError
from propsrealm.domain.identity import (
    RealmIdentity,
    credential_acquire_support,
    evidence_verify_support,
    resolve_account,
)
from propsrealm.infrastructure.hashing import DefaultPasswordHashService
from propsrealm.infrastructure.store import IdentityStore

if TYPE_CHECKING:
    from collections.abc import Iterable

    from propsrealm.domain.accounts import Snapshot
    from propsrealm.domain.identity import PasswordHashService
    from propsrealm.domain.types import CredentialKind, EvidenceKind, PasswordAlgorithm, SupportLevel
    from propsrealm.infrastructure.loader import AccountsStream
    from propsrealm.plugins.manager import PluginManager

logger = logging.getLogger(__name__)


class PropertiesRealm:
    """Identity realm backed by a users file and an optional groups file."""

    def __init__(
        self,
        config: RealmConfig | None = None,
        *,
        hasher: PasswordHashService | None = None,
        plugins: PluginManager | None = None,
        store: IdentityStore | None = None,
    ) -> None:
        self.config = config or RealmConfig()
        self.store = store or IdentityStore()
        self.plugins = plugins
        self._hasher = hasher

    # ------------------------------------------------------------------
    # Configuration and loading
    # ------------------------------------------------------------------

    @property
    def hasher(self) -> PasswordHashService:
        """Plugin-supplied hash service, else :class:`DefaultPasswordHashService`."""
        if self._hasher is None:
            offered = self.plugins.password_service() if self.plugins is not None else None
            self._hasher = offered or DefaultPasswordHashService()
        return self._hasher

    @property
    def loaded(self) -> bool:
        return self.store.loaded

    @property
    def load_time(self) -> int:
        return self.store.load_time

    def initialize(self, configuration: Mapping[str, str] | RealmConfig | None = None) -> bool:
        """Apply *configuration* and load the configured properties files.

        A failed load is logged, not raised: the realm stays unloaded or
        keeps serving its previous snapshot. Returns whether the load
        succeeded.
        """
        if isinstance(configuration, RealmConfig):
            self.config = configuration
        elif configuration is not None:
            self.config = RealmConfig.from_properties(configuration)

        try:
            self.load_files()
        except LoadError:
            logger.exception("Unable to load properties")
            return False
        return True

    def load_files(
        self,
        users_path: Path | None = None,
        groups_path: Path | None = None,
    ) -> Snapshot:
        """Open the configured (or given) files and load them.

        Raises:
            LoadError: If no users file is configured, a file cannot be
                opened, or its content is invalid.
        """
        users = users_path or self.config.users_properties
        groups = groups_path or self.config.groups_properties
        if users is None:
            msg = "No users properties file configured"
            raise LoadError(msg)

        try:
            with ExitStack() as stack:
                users_stream = stack.enter_context(Path(users).open("rb"))
                groups_stream = stack.enter_context(Path(groups).open("rb")) if groups else None
                return self.load(users_stream, groups_stream)
        except OSError as exc:
            msg = f"Unable to open properties file: {exc}"
            raise LoadError(msg) from exc

    def load(self, accounts: AccountsStream, groups: AccountsStream | None = None) -> Snapshot:
        """Load already-open streams and publish the new snapshot."""
        snapshot = self.store.load(accounts, groups, default_realm=self.config.default_realm)
        if self.plugins is not None:
            self.plugins.notify(
                "post_load",
                realm_name=snapshot.realm_name,
                account_count=len(snapshot),
                load_time=snapshot.load_time,
            )
        return snapshot

    # ------------------------------------------------------------------
    # Realm-level support
    # ------------------------------------------------------------------

    def credential_acquire_support(
        self,
        kind: CredentialKind | str,
        algorithm: PasswordAlgorithm | str | None = None,
        parameters: object | None = None,
    ) -> SupportLevel:
        return credential_acquire_support(kind, algorithm, parameters, plain_text=self.config.plain_text)

    def evidence_verify_support(self, kind: EvidenceKind | str) -> SupportLevel:
        return evidence_verify_support(kind)

    # ------------------------------------------------------------------
    # Identities
    # ------------------------------------------------------------------

    def realm_identity(
        self,
        principal: str,
        group_claims: Iterable[str] | None = None,
    ) -> RealmIdentity:
        """Resolve *principal* against the live snapshot.

        Unknown principals yield an identity whose :meth:`~RealmIdentity.exists`
        is False.

        Raises:
            RealmUnavailableError: If no snapshot has been loaded.
        """
        snapshot = self.store.snapshot
        return RealmIdentity(
            principal=principal,
            account=resolve_account(snapshot, principal, group_claims),
            snapshot=snapshot,
            hasher=self.hasher,
            plain_text=self.config.plain_text,
            groups_attribute=self.config.groups_attribute,
        )
