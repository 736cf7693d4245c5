"""IdentityService — principal lookup, password verification, credentials.

Unknown principals are answers, not errors: lookups report
``exists: False`` and verification reports ``verified: False``.
Only an unloaded realm (``REALM_UNAVAILABLE``) and corrupt stored data
(``CREDENTIAL_CORRUPT``) are service errors.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from propsrealm.domain.credentials import ClearPassword, PasswordGuess
from propsrealm.domain.errors import CredentialConstructionError, RealmUnavailableError
from propsrealm.domain.types import CredentialKind, EvidenceKind, PasswordAlgorithm
from propsrealm.services.base import BaseService
from propsrealm.services.result import ServiceResult
from propsrealm.services.telemetry import trace_span, traced

if TYPE_CHECKING:
    from collections.abc import Iterable

    from propsrealm.domain.identity import RealmIdentity

logger = logging.getLogger(__name__)


class IdentityService(BaseService):
    """Answers identity questions against the live snapshot."""

    def _identity(
        self,
        op: str,
        principal: str,
        group_claims: Iterable[str] | None = None,
    ) -> RealmIdentity | ServiceResult:
        try:
            return self._realm.realm_identity(principal, group_claims)
        except RealmUnavailableError as exc:
            return ServiceResult.failure(op, "REALM_UNAVAILABLE", str(exc))

    @staticmethod
    def _account_warnings(identity: RealmIdentity) -> list[str]:
        account = identity.account
        if account is None:
            return [f"Principal {identity.principal!r} not found in realm {identity.realm_name!r}"]
        if not account.has_secret:
            return [f"Principal {identity.principal!r} has no password; it can only be authorized"]
        return []

    @traced
    def lookup(self, principal: str, group_claims: Iterable[str] | None = None) -> ServiceResult:
        """Describe *principal*: existence, groups and credential support."""
        op = "identity_lookup"
        identity = self._identity(op, principal, group_claims)
        if isinstance(identity, ServiceResult):
            return identity

        account = identity.account
        warnings = self._account_warnings(identity)

        support = {
            algorithm.value: identity.credential_acquire_support(CredentialKind.PASSWORD, algorithm).value
            for algorithm in PasswordAlgorithm
        }
        return ServiceResult(
            ok=True,
            op=op,
            data={
                "principal": principal,
                "exists": identity.exists(),
                "has_password": bool(account and account.has_secret),
                "realm_name": identity.realm_name,
                "attributes": identity.authorization_attributes(),
                "credential_support": support,
                "evidence_support": identity.evidence_verify_support(EvidenceKind.PASSWORD_GUESS).value,
            },
            warnings=warnings,
        )

    @traced
    def verify(self, principal: str, guess: str) -> ServiceResult:
        """Check a password guess for *principal*."""
        op = "identity_verify"
        identity = self._identity(op, principal)
        if isinstance(identity, ServiceResult):
            return identity

        with trace_span("verify_evidence"):
            try:
                verified = identity.verify_evidence(PasswordGuess(guess))
            except CredentialConstructionError as exc:
                logger.error("Stored credential for %s is unusable: %s", principal, exc)
                return ServiceResult.failure(op, "CREDENTIAL_CORRUPT", str(exc), principal=principal)

        warnings = self._account_warnings(identity)
        self._dispatch_event("post_verify", {"principal": principal, "verified": verified}, warnings)
        return ServiceResult(
            ok=True,
            op=op,
            data={"principal": principal, "verified": verified, "realm_name": identity.realm_name},
            warnings=warnings,
        )

    @traced
    def credential(self, principal: str, algorithm: PasswordAlgorithm | str | None = None) -> ServiceResult:
        """Produce the stored credential for *principal* in *algorithm*.

        Clear passwords are returned as text, digests as lowercase hex.
        """
        op = "identity_credential"
        identity = self._identity(op, principal)
        if isinstance(identity, ServiceResult):
            return identity

        try:
            credential = identity.get_credential(CredentialKind.PASSWORD, algorithm)
        except CredentialConstructionError as exc:
            return ServiceResult.failure(op, "CREDENTIAL_CORRUPT", str(exc), principal=principal)

        if credential is None:
            return ServiceResult.failure(
                op,
                "CREDENTIAL_UNAVAILABLE",
                f"No {algorithm or 'default'} credential available for {principal!r}",
                principal=principal,
                exists=identity.exists(),
            )

        value = credential.password if isinstance(credential, ClearPassword) else credential.hex_digest
        return ServiceResult(
            ok=True,
            op=op,
            data={
                "principal": principal,
                "realm_name": identity.realm_name,
                "algorithm": credential.algorithm.value,
                "value": value,
            },
        )
