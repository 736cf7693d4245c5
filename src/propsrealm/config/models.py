"""Pydantic configuration models with code-baked defaults.

Fields accept both the snake_case names used in ``propsrealm.toml`` and the
camelCase keys of the flat realm configuration surface (``plainText``,
``groupsAttribute``, ``defaultRealm``, ``usersProperties``,
``groupsProperties``).
"""

from __future__ import annotations

from collections.abc import Mapping
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field, field_validator


class RealmConfig(BaseModel):
    """[realm] section."""

    model_config = {"frozen": True, "populate_by_name": True}

    plain_text: bool = Field(default=False, alias="plainText")
    groups_attribute: str = Field(default="groups", alias="groupsAttribute")
    default_realm: str | None = Field(default=None, alias="defaultRealm")
    users_properties: Path | None = Field(default=None, alias="usersProperties")
    groups_properties: Path | None = Field(default=None, alias="groupsProperties")

    @field_validator("plain_text", mode="before")
    @classmethod
    def _parse_flag(cls, value: Any) -> Any:
        # Only a case-insensitive "true" enables plain-text mode.
        if isinstance(value, str):
            return value.strip().lower() == "true"
        return value

    @classmethod
    def from_properties(cls, properties: Mapping[str, str]) -> RealmConfig:
        """Build from flat string configuration; unknown keys are ignored."""
        return cls.model_validate(dict(properties))

    def resolve_paths(self, base: Path) -> RealmConfig:
        """Return a copy with relative file paths anchored at *base*."""
        update: dict[str, Path] = {}
        for name in ("users_properties", "groups_properties"):
            path: Path | None = getattr(self, name)
            if path is not None and not path.is_absolute():
                update[name] = base / path
        return self.model_copy(update=update) if update else self


class RoleMapperConfig(BaseModel):
    """[role_mapper] section.

    ``rules`` holds flat ``<rule>.<attribute>`` keys. Nested TOML tables
    (``[role_mapper.rules.legacy]``) are flattened into the same shape.
    """

    model_config = {"frozen": True}

    rules: dict[str, str] = Field(default_factory=dict)

    @field_validator("rules", mode="before")
    @classmethod
    def _flatten_tables(cls, value: Any) -> Any:
        if not isinstance(value, Mapping):
            return value
        flat: dict[str, Any] = {}
        for key, item in value.items():
            if isinstance(item, Mapping):
                for attribute, attr_value in item.items():
                    flat[f"{key}.{attribute}"] = _as_config_string(attr_value)
            else:
                flat[key] = _as_config_string(item)
        return flat


def _as_config_string(value: Any) -> Any:
    # TOML booleans become the "true"/"false" strings of the flat surface.
    if isinstance(value, bool):
        return "true" if value else "false"
    return value
