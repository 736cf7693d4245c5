"""Tests for RealmIdentity — credential support, acquisition and verification."""

from __future__ import annotations

import hashlib

import pytest

from propsrealm.domain.accounts import Account, Snapshot
from propsrealm.domain.credentials import ClearPassword, DigestPassword, PasswordGuess
from propsrealm.domain.errors import CredentialConstructionError
from propsrealm.domain.identity import (
    RealmIdentity,
    credential_acquire_support,
    decode_stored_digest,
    evidence_verify_support,
    resolve_account,
)
from propsrealm.domain.types import CredentialKind, EvidenceKind, PasswordAlgorithm, SupportLevel
from propsrealm.infrastructure.hashing import DefaultPasswordHashService


def _md5(text: str) -> bytes:
    return hashlib.md5(text.encode()).digest()  # noqa: S324


def _identity(account: Account | None, *, plain_text: bool, realm: str = "Test") -> RealmIdentity:
    accounts = {account.name: account} if account is not None else {}
    snapshot = Snapshot(accounts, realm, 1_700_000_000_000)
    return RealmIdentity(
        principal=account.name if account is not None else "ghost",
        account=account,
        snapshot=snapshot,
        hasher=DefaultPasswordHashService(),
        plain_text=plain_text,
    )


class _ExplodingHasher:
    def hash(self, secret, algorithm, parameters=None):
        raise ValueError("hash backend down")

    def verify(self, credential, algorithm, guess):
        raise ValueError("hash backend down")


class _OfflineHasher:
    def hash(self, secret, algorithm, parameters=None):
        raise RuntimeError("backend down")

    def verify(self, credential, algorithm, guess):
        raise RuntimeError("backend down")


class TestRealmSupport:
    @pytest.mark.parametrize(
        ("algorithm", "plain_text", "expected"),
        [
            (None, True, SupportLevel.SUPPORTED),
            (None, False, SupportLevel.SUPPORTED),
            ("clear", True, SupportLevel.SUPPORTED),
            ("clear", False, SupportLevel.UNSUPPORTED),
            ("digest-md5", True, SupportLevel.SUPPORTED),
            ("digest-md5", False, SupportLevel.SUPPORTED),
            ("bcrypt", True, SupportLevel.UNSUPPORTED),
        ],
    )
    def test_password_algorithms(self, algorithm, plain_text, expected) -> None:
        assert credential_acquire_support("password", algorithm, plain_text=plain_text) is expected

    def test_parameters_make_request_unsupported(self) -> None:
        level = credential_acquire_support(
            CredentialKind.PASSWORD, PasswordAlgorithm.DIGEST_MD5, {"iterations": 1}, plain_text=True
        )
        assert level is SupportLevel.UNSUPPORTED

    def test_unknown_kind(self) -> None:
        assert credential_acquire_support("x509", plain_text=True) is SupportLevel.UNSUPPORTED

    def test_evidence_support(self) -> None:
        assert evidence_verify_support(EvidenceKind.PASSWORD_GUESS) is SupportLevel.SUPPORTED
        assert evidence_verify_support("password-guess") is SupportLevel.SUPPORTED
        assert evidence_verify_support("bearer-token") is SupportLevel.UNSUPPORTED

    def test_may_be_supported(self) -> None:
        assert SupportLevel.SUPPORTED.may_be_supported
        assert SupportLevel.POSSIBLY_SUPPORTED.may_be_supported
        assert not SupportLevel.UNSUPPORTED.may_be_supported


class TestPlainTextIdentity:
    def test_verify_correct_and_wrong_guess(self) -> None:
        identity = _identity(Account("alice", "s3cr3t"), plain_text=True)
        assert identity.verify_evidence(PasswordGuess("s3cr3t")) is True
        assert identity.verify_evidence(PasswordGuess("wrong")) is False

    def test_clear_credential(self) -> None:
        identity = _identity(Account("alice", "s3cr3t"), plain_text=True)
        credential = identity.get_credential(CredentialKind.PASSWORD, PasswordAlgorithm.CLEAR)
        assert credential == ClearPassword("s3cr3t")

    def test_default_algorithm_is_clear(self) -> None:
        identity = _identity(Account("alice", "s3cr3t"), plain_text=True)
        assert isinstance(identity.get_credential(), ClearPassword)

    def test_digest_computed_from_clear_secret(self) -> None:
        identity = _identity(Account("alice", "s3cr3t"), plain_text=True)
        credential = identity.get_credential("password", "digest-md5")
        assert isinstance(credential, DigestPassword)
        assert credential.username == "alice"
        assert credential.realm == "Test"
        assert credential.digest == _md5("alice:Test:s3cr3t")

    def test_hash_service_failure_is_construction_error(self) -> None:
        identity = RealmIdentity(
            principal="alice",
            account=Account("alice", "s3cr3t"),
            snapshot=Snapshot({}, "Test", 1),
            hasher=_ExplodingHasher(),
            plain_text=True,
        )
        with pytest.raises(CredentialConstructionError):
            identity.get_credential("password", "digest-md5")
        with pytest.raises(CredentialConstructionError):
            identity.verify_evidence(PasswordGuess("s3cr3t"))

    @pytest.mark.parametrize("plain_text", [True, False])
    def test_any_hash_service_error_is_construction_error(self, plain_text: bool) -> None:
        secret = "s3cr3t" if plain_text else _md5("alice:Test:s3cr3t").hex()
        identity = RealmIdentity(
            principal="alice",
            account=Account("alice", secret),
            snapshot=Snapshot({}, "Test", 1),
            hasher=_OfflineHasher(),
            plain_text=plain_text,
        )
        with pytest.raises(CredentialConstructionError) as exc_info:
            identity.verify_evidence(PasswordGuess("s3cr3t"))
        assert isinstance(exc_info.value.__cause__, RuntimeError)

    def test_offline_hasher_digest_credential(self) -> None:
        identity = RealmIdentity(
            principal="alice",
            account=Account("alice", "s3cr3t"),
            snapshot=Snapshot({}, "Test", 1),
            hasher=_OfflineHasher(),
            plain_text=True,
        )
        with pytest.raises(CredentialConstructionError):
            identity.get_credential("password", "digest-md5")


class TestDigestIdentity:
    def test_verify_against_stored_digest(self) -> None:
        stored = _md5("alice:Test:s3cr3t").hex()
        identity = _identity(Account("alice", stored), plain_text=False)
        assert identity.verify_evidence(PasswordGuess("s3cr3t")) is True
        assert identity.verify_evidence(PasswordGuess("wrong")) is False

    def test_digest_bound_to_realm(self) -> None:
        stored = _md5("alice:Other:s3cr3t").hex()
        identity = _identity(Account("alice", stored), plain_text=False)
        assert identity.verify_evidence(PasswordGuess("s3cr3t")) is False

    def test_uppercase_hex_accepted(self) -> None:
        stored = _md5("alice:Test:s3cr3t").hex().upper()
        identity = _identity(Account("alice", stored), plain_text=False)
        assert identity.verify_evidence(PasswordGuess("s3cr3t")) is True

    def test_clear_unavailable(self) -> None:
        identity = _identity(Account("alice", _md5("alice:Test:pw").hex()), plain_text=False)
        assert identity.credential_acquire_support("password", "clear") is SupportLevel.UNSUPPORTED
        assert identity.get_credential("password", "clear") is None

    def test_stored_digest_returned(self) -> None:
        stored = _md5("alice:Test:pw").hex()
        identity = _identity(Account("alice", stored), plain_text=False)
        credential = identity.get_credential()
        assert isinstance(credential, DigestPassword)
        assert credential.hex_digest == stored

    def test_corrupt_digest_raises(self) -> None:
        identity = _identity(Account("alice", "not-hex"), plain_text=False)
        with pytest.raises(CredentialConstructionError):
            identity.verify_evidence(PasswordGuess("anything"))
        with pytest.raises(CredentialConstructionError):
            identity.get_credential("password", "digest-md5")

    def test_decode_stored_digest_odd_length(self) -> None:
        with pytest.raises(CredentialConstructionError, match="alice"):
            decode_stored_digest("alice", "Test", "abc")

    def test_whitespace_in_stored_digest_is_corrupt(self) -> None:
        hex_digest = _md5("alice:Test:pw").hex()
        spaced = " ".join(hex_digest[i : i + 2] for i in range(0, len(hex_digest), 2))
        identity = _identity(Account("alice", spaced), plain_text=False)
        with pytest.raises(CredentialConstructionError):
            identity.verify_evidence(PasswordGuess("pw"))

    def test_non_ascii_stored_digest_is_corrupt(self) -> None:
        with pytest.raises(CredentialConstructionError):
            decode_stored_digest("alice", "Test", "\u00e9" * 32)


class TestMissingAndGroupOnly:
    def test_unknown_principal(self) -> None:
        identity = _identity(None, plain_text=True)
        assert not identity.exists()
        assert identity.credential_acquire_support("password") is SupportLevel.UNSUPPORTED
        assert identity.get_credential() is None
        assert identity.verify_evidence(PasswordGuess("anything")) is False
        assert identity.authorization_attributes() == {}

    def test_group_only_principal(self) -> None:
        identity = _identity(Account("dave", None, frozenset({"auditors"})), plain_text=True)
        assert identity.exists()
        assert identity.credential_acquire_support("password", "clear") is SupportLevel.UNSUPPORTED
        assert identity.get_credential() is None
        assert identity.verify_evidence(PasswordGuess("")) is False
        assert identity.authorization_attributes() == {"groups": ["auditors"]}

    def test_evidence_support_independent_of_account(self) -> None:
        identity = _identity(None, plain_text=True)
        assert identity.evidence_verify_support("password-guess") is SupportLevel.SUPPORTED

    def test_foreign_evidence_rejected(self) -> None:
        identity = _identity(Account("alice", "s3cr3t"), plain_text=True)
        assert identity.verify_evidence("s3cr3t") is False


class TestAuthorization:
    def test_groups_under_configured_attribute(self) -> None:
        snapshot = Snapshot({"alice": Account("alice", "pw", frozenset({"ops", "admin"}))}, "Test", 1)
        identity = RealmIdentity(
            principal="alice",
            account=snapshot.get("alice"),
            snapshot=snapshot,
            hasher=DefaultPasswordHashService(),
            groups_attribute="Roles",
        )
        assert identity.authorization_attributes() == {"Roles": ["admin", "ops"]}

    def test_group_claims_merged_without_mutating_snapshot(self) -> None:
        snapshot = Snapshot({"alice": Account("alice", "pw", frozenset({"admin"}))}, "Test", 1)
        account = resolve_account(snapshot, "alice", ["auditors"])
        assert account is not None
        assert account.groups == frozenset({"admin", "auditors"})
        assert snapshot.get("alice").groups == frozenset({"admin"})

    def test_group_claims_for_unknown_principal(self) -> None:
        snapshot = Snapshot({}, "Test", 1)
        assert resolve_account(snapshot, "ghost", ["admin"]) is None
