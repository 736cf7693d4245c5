"""BaseService — foundation for realm-backed services.

Every service receives a :class:`PropertiesRealm` at construction time.
Services translate realm exceptions into :class:`ServiceResult` errors so
callers never see them.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from propsrealm.infrastructure.realm import PropertiesRealm


class BaseService:
    """Base for all realm-backed service classes.

    Usage::

        class IdentityService(BaseService):
            def verify(self, principal: str, guess: str) -> ServiceResult:
                identity = self._realm.realm_identity(principal)
                ...
    """

    def __init__(self, realm: PropertiesRealm) -> None:
        self._realm = realm

    def _dispatch_event(self, hook_name: str, payload: dict[str, Any], warnings: list[str]) -> None:
        """Dispatch a lifecycle event. No-op without a plugin manager.

        INVARIANT: Plugin failures are warnings, never errors.
        """
        plugins = self._realm.plugins
        if plugins is None:
            return
        if not plugins.notify(hook_name, **payload):
            warnings.append(f"Event dispatch failed for {hook_name}")
