"""Pluggy hook specifications for realm lifecycle events and setup extensions.

Two notification hooks fire after loads and verifications. One setup-time
hook lets the host supply its own password hash service.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import pluggy

if TYPE_CHECKING:
    from propsrealm.domain.identity import PasswordHashService

PROJECT_NAME = "propsrealm"

hookspec = pluggy.HookspecMarker(PROJECT_NAME)
hookimpl = pluggy.HookimplMarker(PROJECT_NAME)


class PropsRealmHookSpec:
    """Hook specifications for the propsrealm plugin system."""

    @hookspec
    def post_load(self, realm_name: str, account_count: int, load_time: int) -> None:
        """Called after a snapshot has been published."""

    @hookspec
    def post_verify(self, principal: str, verified: bool) -> None:
        """Called after password evidence has been checked."""

    @hookspec(firstresult=True)
    def register_password_service(self) -> PasswordHashService | None:
        """Return a password hash service to replace the default one."""
