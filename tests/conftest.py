"""Shared pytest fixtures and test helpers for propsrealm tests."""

from __future__ import annotations

import hashlib
import logging
from collections.abc import Callable, Generator
from pathlib import Path

import pytest
from click.testing import CliRunner

from propsrealm.config.models import RealmConfig
from propsrealm.infrastructure.realm import PropertiesRealm
from propsrealm.services.telemetry import disable_telemetry

REALM_NAME = "Test"

GROUPS_PROPERTIES = """\
# Groups for the realm 'Test'
alice=admin,ops
bob\\:smith=users
dave=auditors, readers
"""


def md5_hex(username: str, realm: str, password: str) -> str:
    """The stored representation of a digest-md5 password."""
    return hashlib.md5(f"{username}:{realm}:{password}".encode()).hexdigest()  # noqa: S324


def users_properties(*, plain_text: bool = True, realm: str | None = REALM_NAME) -> str:
    """Users file with alice/s3cr3t, bob:smith/pa=ss and carol/café."""

    def secret(user: str, password: str) -> str:
        if plain_text:
            return password.replace("=", "\\=")
        return md5_hex(user, realm or "Default", password)

    header = "#\n# Properties declaration of users\n#\n"
    if realm is not None:
        header += f"#$REALM_NAME={realm}$ This line is used by the add-user utility\n"
    carol = "caf\\u00e9" if plain_text else md5_hex("carol", realm or "Default", "café")
    return (
        header
        + f"alice={secret('alice', 's3cr3t')}\n"
        + f"bob\\:smith={secret('bob:smith', 'pa=ss')}\n"
        + f"carol={carol}\n"
    )


@pytest.fixture
def cli_runner() -> CliRunner:
    """Provide a Click CLI test runner."""
    return CliRunner()


@pytest.fixture(autouse=True)
def _reset_telemetry() -> Generator[None]:
    yield
    disable_telemetry()


@pytest.fixture(autouse=True)
def _restore_logging() -> Generator[None]:
    """Undo handler and level changes made by configure_logging."""
    root = logging.getLogger()
    original_handlers = root.handlers[:]
    original_level = root.level
    package = logging.getLogger("propsrealm")
    package_level = package.level
    yield
    root.handlers = original_handlers
    root.setLevel(original_level)
    package.setLevel(package_level)


@pytest.fixture
def write_file(tmp_path: Path) -> Callable[[str, str], Path]:
    """Factory writing UTF-8 text files under ``tmp_path``."""

    def write(name: str, content: str) -> Path:
        path = tmp_path / name
        path.write_text(content, encoding="utf-8")
        return path

    return write


@pytest.fixture
def plain_config(write_file: Callable[[str, str], Path]) -> RealmConfig:
    return RealmConfig(
        plain_text=True,
        users_properties=write_file("users.properties", users_properties()),
        groups_properties=write_file("groups.properties", GROUPS_PROPERTIES),
    )


@pytest.fixture
def digest_config(write_file: Callable[[str, str], Path]) -> RealmConfig:
    return RealmConfig(
        plain_text=False,
        users_properties=write_file("users.properties", users_properties(plain_text=False)),
        groups_properties=write_file("groups.properties", GROUPS_PROPERTIES),
    )


@pytest.fixture
def plain_realm(plain_config: RealmConfig) -> PropertiesRealm:
    """Loaded plain-text realm."""
    realm = PropertiesRealm(plain_config)
    assert realm.initialize()
    return realm


@pytest.fixture
def digest_realm(digest_config: RealmConfig) -> PropertiesRealm:
    """Loaded digest realm."""
    realm = PropertiesRealm(digest_config)
    assert realm.initialize()
    return realm


@pytest.fixture
def _isolated_config(
    tmp_path: Path,
    write_file: Callable[[str, str], Path],
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    """CWD with a ``propsrealm.toml`` pointing at plain-text files and two rules.

    Use via ``@pytest.mark.usefixtures("_isolated_config")`` on command test
    classes.
    """
    write_file("users.properties", users_properties())
    write_file("groups.properties", GROUPS_PROPERTIES)
    write_file(
        "propsrealm.toml",
        """\
[realm]
plain_text = true
users_properties = "users.properties"
groups_properties = "groups.properties"

[role_mapper.rules.admins]
regexp = ".*-admin"
destRole = "admin"

[role_mapper.rules.users]
regexp = ".*-user"
destRole = "user"
doReplace = false
""",
    )
    monkeypatch.delenv("PROPSREALM_CONFIG", raising=False)
    monkeypatch.chdir(tmp_path)
