"""Closed enumerations for credential, evidence and support answers.

Credential and evidence dispatch is matched against these members only.
Anything outside them is answered with ``SupportLevel.UNSUPPORTED``.
"""

from __future__ import annotations

from enum import StrEnum


class SupportLevel(StrEnum):
    """How well a realm or identity supports a credential or evidence kind."""

    UNSUPPORTED = "unsupported"
    POSSIBLY_SUPPORTED = "possibly-supported"
    SUPPORTED = "supported"

    @property
    def may_be_supported(self) -> bool:
        return self is not SupportLevel.UNSUPPORTED


class CredentialKind(StrEnum):
    """Credential kinds a properties realm can produce."""

    PASSWORD = "password"


class EvidenceKind(StrEnum):
    """Evidence kinds a properties realm can verify."""

    PASSWORD_GUESS = "password-guess"


class PasswordAlgorithm(StrEnum):
    """Password algorithms understood by the realm."""

    CLEAR = "clear"
    DIGEST_MD5 = "digest-md5"
