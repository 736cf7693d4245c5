"""Tests for the default password hash service."""

from __future__ import annotations

import hashlib

import pytest

from propsrealm.domain.credentials import ClearPassword, DigestParameters, DigestPassword
from propsrealm.domain.errors import CredentialConstructionError
from propsrealm.domain.types import PasswordAlgorithm
from propsrealm.infrastructure.hashing import DefaultPasswordHashService, digest_md5


class TestDigestMd5:
    def test_known_vector(self) -> None:
        # RFC 2617 section 3.5 example credentials.
        assert digest_md5("Mufasa", "testrealm@host.com", "Circle Of Life").hex() == (
            "939e7578ed9e3c518a452acee763bce9"
        )

    def test_utf8(self) -> None:
        expected = hashlib.md5("carol:Test:café".encode()).digest()  # noqa: S324
        assert digest_md5("carol", "Test", "café") == expected


class TestDefaultPasswordHashService:
    def test_hash_clear(self) -> None:
        service = DefaultPasswordHashService()
        assert service.hash("pw", PasswordAlgorithm.CLEAR) == ClearPassword("pw")

    def test_hash_digest_requires_parameters(self) -> None:
        service = DefaultPasswordHashService()
        with pytest.raises(CredentialConstructionError):
            service.hash("pw", PasswordAlgorithm.DIGEST_MD5)

    def test_hash_and_verify_digest(self) -> None:
        service = DefaultPasswordHashService()
        credential = service.hash("pw", PasswordAlgorithm.DIGEST_MD5, DigestParameters("alice", "Test"))
        assert isinstance(credential, DigestPassword)
        assert service.verify(credential, PasswordAlgorithm.DIGEST_MD5, "pw")
        assert not service.verify(credential, PasswordAlgorithm.DIGEST_MD5, "nope")

    def test_verify_clear(self) -> None:
        service = DefaultPasswordHashService()
        assert service.verify(ClearPassword("pw"), PasswordAlgorithm.CLEAR, "pw")
        assert not service.verify(ClearPassword("pw"), PasswordAlgorithm.CLEAR, "PW")

    def test_algorithm_mismatch(self) -> None:
        service = DefaultPasswordHashService()
        with pytest.raises(CredentialConstructionError):
            service.verify(ClearPassword("pw"), PasswordAlgorithm.DIGEST_MD5, "pw")

    def test_clear_password_not_in_repr(self) -> None:
        assert "pw" not in repr(ClearPassword("pw"))
