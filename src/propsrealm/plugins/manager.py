"""PluginManager — pluggy wrapper for realm extensions.

Plugins are found through the ``propsrealm.plugins`` entry point group.
They observe loads and verifications and may supply the password hash
service.
"""

from __future__ import annotations

import inspect
import logging
from typing import TYPE_CHECKING, Any

import pluggy

from propsrealm.plugins.hookspecs import PROJECT_NAME, PropsRealmHookSpec

if TYPE_CHECKING:
    from propsrealm.domain.identity import PasswordHashService

ENTRY_POINT_GROUP = "propsrealm.plugins"

logger = logging.getLogger(__name__)


class PluginManager:
    """Registers plugins and dispatches realm hooks to them."""

    def __init__(self) -> None:
        self._pm = pluggy.PluginManager(PROJECT_NAME)
        self._pm.add_hookspecs(PropsRealmHookSpec)
        self._loaded = False

    @property
    def is_loaded(self) -> bool:
        return self._loaded

    @property
    def hook(self) -> pluggy.HookRelay:
        return self._pm.hook

    def discover_and_load(self) -> list[str]:
        """Load entry-point plugins and return the registered names."""
        self._pm.load_setuptools_entrypoints(ENTRY_POINT_GROUP)
        for plugin in list(self._pm.get_plugins()):
            if inspect.isclass(plugin):
                self._replace_with_instance(plugin)
        self._loaded = True
        return self.list_plugin_names()

    def register_plugin(self, plugin: object, name: str | None = None) -> None:
        plugin_name = name or type(plugin).__name__
        self._pm.register(plugin, name=plugin_name)
        logger.debug("Registered plugin: %s", plugin_name)

    def unregister(self, plugin: object) -> None:
        self._pm.unregister(plugin)

    def list_plugin_names(self) -> list[str]:
        return [self._pm.get_name(plugin) or type(plugin).__name__ for plugin in self._pm.get_plugins()]

    def notify(self, hook_name: str, **payload: Any) -> bool:
        """Fire a notification hook; False if any plugin raised.

        INVARIANT: Plugin failures are warnings, never errors.
        """
        try:
            getattr(self._pm.hook, hook_name)(**payload)
        except Exception:
            logger.warning("Plugin hook %s failed", hook_name, exc_info=True)
            return False
        return True

    def password_service(self) -> PasswordHashService | None:
        """The hash service offered by the first plugin that returns one."""
        try:
            return self._pm.hook.register_password_service()
        except Exception:
            logger.warning("Plugin password service unavailable", exc_info=True)
            return None

    def _replace_with_instance(self, plugin_cls: type) -> None:
        # Entry points may register the class itself; hooks need an instance.
        name = self._pm.get_name(plugin_cls) or plugin_cls.__name__
        self._pm.unregister(plugin_cls)
        try:
            instance = plugin_cls()
        except Exception:
            logger.warning("Could not instantiate plugin %s; skipped", name, exc_info=True)
            return
        self._pm.register(instance, name=name)
