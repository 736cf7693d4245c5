"""RealmSettings — one frozen object for CLI flags, env vars and TOML.

Sources, strongest first:

1. keyword arguments (the root CLI group's flags)
2. ``PROPSREALM_*`` environment variables, ``__`` between nested names
   (``PROPSREALM_REALM__PLAIN_TEXT=true``)
3. ``propsrealm.toml``
4. model defaults

Example ``propsrealm.toml``::

    [realm]
    plain_text = true
    default_realm = "ManagementRealm"
    users_properties = "mgmt-users.properties"
    groups_properties = "mgmt-groups.properties"

    [role_mapper.rules.legacy]
    regexp = "LEGACY_.*"
    destRole = "legacy"
"""

from __future__ import annotations

import threading
import tomllib
from pathlib import Path
from typing import Any

import click
from pydantic import Field
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource

from propsrealm.config.discovery import find_config
from propsrealm.config.models import RealmConfig, RoleMapperConfig


def _read_toml(path: Path | None) -> dict[str, Any]:
    if path is None or not path.is_file():
        return {}
    try:
        return tomllib.loads(path.read_text(encoding="utf-8"))
    except tomllib.TOMLDecodeError as exc:
        msg = f"Invalid TOML in {path}: {exc}"
        raise click.ClickException(msg) from exc


class TomlSettingsSource(PydanticBaseSettingsSource):
    """Settings source over the parsed ``propsrealm.toml`` tables."""

    def __init__(self, settings_cls: type[BaseSettings], toml_path: Path | None) -> None:
        super().__init__(settings_cls)
        self._tables = _read_toml(toml_path)

    def get_field_value(self, field: Any, field_name: str) -> tuple[Any, str, bool]:
        return self._tables.get(field_name), field_name, field_name in self._tables

    def __call__(self) -> dict[str, Any]:
        return self._tables


# pydantic-settings builds sources inside __init__, so the TOML path of the
# instance under construction travels through a thread-local.
_pending = threading.local()


class RealmSettings(BaseSettings):
    """Settings for the propsrealm CLI.

    Attributes:
        config_root: Directory that relative realm file paths are anchored
            at: the config file's directory, else the working directory.
        config_path: The TOML file that was read, if any.
    """

    model_config = {
        "frozen": True,
        "env_prefix": "PROPSREALM_",
        "env_nested_delimiter": "__",
    }

    config_root: Path = Field(default_factory=Path.cwd)
    config_path: Path | None = None

    json_output: bool = False
    quiet: bool = False
    verbose: bool = False
    log_json: bool = False
    log_level: str = "WARNING"

    realm: RealmConfig = Field(default_factory=RealmConfig)
    role_mapper: RoleMapperConfig = Field(default_factory=RoleMapperConfig)

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        return (
            init_settings,
            env_settings,
            TomlSettingsSource(settings_cls, getattr(_pending, "toml_path", None)),
        )

    @property
    def resolved_realm(self) -> RealmConfig:
        """The ``[realm]`` section with file paths anchored at :attr:`config_root`."""
        return self.realm.resolve_paths(self.config_root)

    @classmethod
    def from_cli(
        cls,
        *,
        config_path: str | None = None,
        config_root: Path | None = None,
        **cli_flags: Any,
    ) -> RealmSettings:
        """Build settings for one CLI invocation.

        An explicit *config_path* that does not exist is ignored; without
        one, ``propsrealm.toml`` is discovered from *config_root* (or cwd).
        """
        if config_path:
            candidate = Path(config_path)
            toml_path = candidate if candidate.is_file() else None
        else:
            toml_path = find_config(config_root)

        if config_root is None:
            config_root = toml_path.parent if toml_path else Path.cwd()

        _pending.toml_path = toml_path
        try:
            return cls(config_root=config_root, config_path=toml_path, **cli_flags)
        finally:
            _pending.toml_path = None
