"""Credential and evidence values.

Each value carries its own kind so dispatch is a match on the closed
enumerations in :mod:`propsrealm.domain.types` rather than on classes.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from propsrealm.domain.types import CredentialKind, EvidenceKind, PasswordAlgorithm


@dataclass(frozen=True)
class DigestParameters:
    """Names a digest is bound to."""

    username: str
    realm: str


@dataclass(frozen=True)
class ClearPassword:
    """A password held as clear text."""

    password: str = field(repr=False)

    kind = CredentialKind.PASSWORD
    algorithm = PasswordAlgorithm.CLEAR


@dataclass(frozen=True)
class DigestPassword:
    """An ``H(username:realm:password)`` digest bound to a user and realm."""

    username: str
    realm: str
    digest: bytes = field(repr=False)

    kind = CredentialKind.PASSWORD
    algorithm = PasswordAlgorithm.DIGEST_MD5

    @property
    def hex_digest(self) -> str:
        return self.digest.hex()


PasswordCredential = ClearPassword | DigestPassword


@dataclass(frozen=True)
class PasswordGuess:
    """A caller-supplied password to check against the stored credential."""

    guess: str = field(repr=False)

    kind = EvidenceKind.PASSWORD_GUESS


Evidence = PasswordGuess
