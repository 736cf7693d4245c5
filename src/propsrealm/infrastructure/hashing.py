"""Default password hash service.

``digest-md5`` is the HTTP Digest ``HA1`` value,
``MD5(username ":" realm ":" password)`` over UTF-8, which is what the
``add-user`` style tooling writes to legacy users files.
"""

from __future__ import annotations

import hashlib
import hmac

from propsrealm.domain.credentials import (
    ClearPassword,
    DigestParameters,
    DigestPassword,
    PasswordCredential,
)
from propsrealm.domain.errors import CredentialConstructionError
from propsrealm.domain.types import PasswordAlgorithm


def digest_md5(username: str, realm: str, password: str) -> bytes:
    """Compute ``MD5(username:realm:password)``."""
    return hashlib.md5(f"{username}:{realm}:{password}".encode()).digest()  # noqa: S324


class DefaultPasswordHashService:
    """Clear and digest-md5 passwords using :mod:`hashlib`."""

    def hash(
        self,
        secret: str,
        algorithm: PasswordAlgorithm,
        parameters: DigestParameters | None = None,
    ) -> PasswordCredential:
        match algorithm:
            case PasswordAlgorithm.CLEAR:
                return ClearPassword(secret)
            case PasswordAlgorithm.DIGEST_MD5:
                if parameters is None:
                    msg = "digest-md5 requires username and realm parameters"
                    raise CredentialConstructionError(msg)
                return DigestPassword(
                    username=parameters.username,
                    realm=parameters.realm,
                    digest=digest_md5(parameters.username, parameters.realm, secret),
                )
        msg = f"Unsupported password algorithm: {algorithm!r}"
        raise CredentialConstructionError(msg)

    def verify(
        self,
        credential: PasswordCredential,
        algorithm: PasswordAlgorithm,
        guess: str,
    ) -> bool:
        if credential.algorithm is not algorithm:
            msg = f"Credential is {credential.algorithm}, not {algorithm}"
            raise CredentialConstructionError(msg)
        match credential:
            case ClearPassword(password=password):
                return hmac.compare_digest(password.encode(), guess.encode())
            case DigestPassword(username=username, realm=realm, digest=digest):
                return hmac.compare_digest(digest, digest_md5(username, realm, guess))
        msg = f"Unsupported credential: {type(credential).__name__}"
        raise CredentialConstructionError(msg)
