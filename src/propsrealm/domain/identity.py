"""Identity resolution and the per-request credential responder.

A :class:`RealmIdentity` is bound to the Snapshot that was live when it was
resolved. Every credential operation on it reads that Snapshot only, so a
concurrent reload can never mix realm names or secrets from two loads.

Support rules (single ``plain_text`` mode flag):

- ``clear`` is acquirable only in plain-text mode.
- ``digest-md5`` is always acquirable: it is computed from the clear secret
  in plain-text mode and hex-decoded from the stored value otherwise.
- Any algorithm parameters make the request unsupported.
"""

from __future__ import annotations

import binascii
import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Protocol, TypeVar

from propsrealm.domain.accounts import Account, Snapshot, merge_group_claims
from propsrealm.domain.credentials import (
    ClearPassword,
    DigestParameters,
    DigestPassword,
    PasswordCredential,
)
from propsrealm.domain.errors import CredentialConstructionError
from propsrealm.domain.types import (
    CredentialKind,
    EvidenceKind,
    PasswordAlgorithm,
    SupportLevel,
)

if TYPE_CHECKING:
    from collections.abc import Iterable
    from enum import StrEnum

logger = logging.getLogger(__name__)

_E = TypeVar("_E", bound="StrEnum")


class PasswordHashService(Protocol):
    """Password hashing primitives supplied by the host."""

    def hash(
        self,
        secret: str,
        algorithm: PasswordAlgorithm,
        parameters: DigestParameters | None = None,
    ) -> PasswordCredential:
        """Build a credential of *algorithm* from a clear *secret*."""
        ...

    def verify(
        self,
        credential: PasswordCredential,
        algorithm: PasswordAlgorithm,
        guess: str,
    ) -> bool:
        """Check *guess* against an existing *credential*."""
        ...


def _coerce(enum_cls: type[_E], value: Any) -> _E | None:
    """Map *value* onto a member of *enum_cls*, or None if it is not one."""
    try:
        return enum_cls(value)
    except ValueError:
        return None


def default_algorithm(plain_text: bool) -> PasswordAlgorithm:
    """Algorithm used when the caller does not name one."""
    return PasswordAlgorithm.CLEAR if plain_text else PasswordAlgorithm.DIGEST_MD5


def credential_acquire_support(
    kind: CredentialKind | str,
    algorithm: PasswordAlgorithm | str | None = None,
    parameters: object | None = None,
    *,
    plain_text: bool,
) -> SupportLevel:
    """Realm-wide answer to "can a credential of this shape be produced"."""
    if _coerce(CredentialKind, kind) is not CredentialKind.PASSWORD or parameters is not None:
        return SupportLevel.UNSUPPORTED
    if algorithm is None:
        return SupportLevel.SUPPORTED
    match _coerce(PasswordAlgorithm, algorithm):
        case PasswordAlgorithm.CLEAR if plain_text:
            return SupportLevel.SUPPORTED
        case PasswordAlgorithm.DIGEST_MD5:
            return SupportLevel.SUPPORTED
        case _:
            return SupportLevel.UNSUPPORTED


def evidence_verify_support(kind: EvidenceKind | str) -> SupportLevel:
    """Only password guesses can be verified."""
    if _coerce(EvidenceKind, kind) is EvidenceKind.PASSWORD_GUESS:
        return SupportLevel.SUPPORTED
    return SupportLevel.UNSUPPORTED


def decode_stored_digest(username: str, realm: str, representation: str) -> DigestPassword:
    """Hex-decode a stored digest into a credential bound to *username*/*realm*.

    Raises:
        CredentialConstructionError: If *representation* is not valid hex.
            Embedded whitespace counts as invalid.
    """
    try:
        digest = binascii.unhexlify(representation)
    except ValueError as exc:
        msg = f"Failed to decode hashed password of {username!r} from properties realm"
        raise CredentialConstructionError(msg) from exc
    return DigestPassword(username=username, realm=realm, digest=digest)


def resolve_account(
    snapshot: Snapshot,
    principal: str,
    group_claims: Iterable[str] | None = None,
) -> Account | None:
    """Look up *principal*, merging externally asserted *group_claims*.

    The stored account is never modified; a merge produces a new Account.
    Unknown principals resolve to None.
    """
    account = snapshot.get(principal)
    if account is not None and group_claims is not None:
        account = merge_group_claims(account, group_claims)
    return account


@dataclass(frozen=True)
class RealmIdentity:
    """A resolved principal and the operations the realm offers on it."""

    principal: str
    account: Account | None
    snapshot: Snapshot
    hasher: PasswordHashService
    plain_text: bool = False
    groups_attribute: str = "groups"

    @property
    def realm_name(self) -> str:
        return self.snapshot.realm_name

    def exists(self) -> bool:
        return self.account is not None

    def _usable_secret(self) -> str | None:
        if self.account is None:
            return None
        return self.account.secret

    # ------------------------------------------------------------------
    # Support queries
    # ------------------------------------------------------------------

    def credential_acquire_support(
        self,
        kind: CredentialKind | str = CredentialKind.PASSWORD,
        algorithm: PasswordAlgorithm | str | None = None,
        parameters: object | None = None,
    ) -> SupportLevel:
        if self._usable_secret() is None:
            return SupportLevel.UNSUPPORTED
        return credential_acquire_support(kind, algorithm, parameters, plain_text=self.plain_text)

    def evidence_verify_support(self, kind: EvidenceKind | str) -> SupportLevel:
        return evidence_verify_support(kind)

    # ------------------------------------------------------------------
    # Credentials and evidence
    # ------------------------------------------------------------------

    def get_credential(
        self,
        kind: CredentialKind | str = CredentialKind.PASSWORD,
        algorithm: PasswordAlgorithm | str | None = None,
    ) -> PasswordCredential | None:
        """Produce the stored credential in the requested *algorithm*.

        Returns None for unknown principals, group-only principals and
        unsupported kinds or algorithms.

        Raises:
            CredentialConstructionError: If the stored value is corrupt.
        """
        if self.credential_acquire_support(kind, algorithm) is not SupportLevel.SUPPORTED:
            return None
        resolved = default_algorithm(self.plain_text) if algorithm is None else PasswordAlgorithm(algorithm)
        return self._materialize(resolved)

    def verify_evidence(self, evidence: object) -> bool:
        """Check a password guess against the stored credential.

        Raises:
            CredentialConstructionError: If the stored credential cannot be
                built or the hash service fails. A wrong guess is ``False``.
        """
        if self._usable_secret() is None:
            return False
        if getattr(evidence, "kind", None) is not EvidenceKind.PASSWORD_GUESS:
            return False

        algorithm = default_algorithm(self.plain_text)
        actual = self._materialize(algorithm)
        logger.debug("Attempting to authenticate account %s", self.principal)
        try:
            return self.hasher.verify(actual, algorithm, evidence.guess)  # type: ignore[attr-defined]
        except CredentialConstructionError:
            raise
        except Exception as exc:
            msg = f"Password verification failed for {self.principal!r}"
            raise CredentialConstructionError(msg) from exc

    def _materialize(self, algorithm: PasswordAlgorithm) -> PasswordCredential:
        assert self.account is not None and self.account.secret is not None
        secret = self.account.secret
        if algorithm is PasswordAlgorithm.CLEAR:
            return ClearPassword(secret)

        if not self.plain_text:
            return decode_stored_digest(self.account.name, self.realm_name, secret)

        parameters = DigestParameters(username=self.account.name, realm=self.realm_name)
        try:
            return self.hasher.hash(secret, algorithm, parameters)
        except CredentialConstructionError:
            raise
        except Exception as exc:
            msg = f"Failed to build {algorithm} credential for {self.account.name!r}"
            raise CredentialConstructionError(msg) from exc

    # ------------------------------------------------------------------
    # Authorization
    # ------------------------------------------------------------------

    def authorization_attributes(self) -> dict[str, list[str]]:
        """Attributes for authorization decisions: the principal's groups."""
        if self.account is None:
            return {}
        return {self.groups_attribute: sorted(self.account.groups)}
