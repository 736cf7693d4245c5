"""AppContext — shared Click context for all commands.

Created once by the root CLI group and passed to subcommands via
``@click.pass_obj``.  The realm and role mapper are built lazily so
``--help`` and ``--version`` never touch the properties files.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import click

from propsrealm.output.formatters import OutputSettings, format_result

if TYPE_CHECKING:
    from propsrealm.config.settings import RealmSettings
    from propsrealm.domain.roles import RoleMapper
    from propsrealm.infrastructure.realm import PropertiesRealm
    from propsrealm.services.result import ServiceResult

logger = logging.getLogger(__name__)


class AppContext:
    """Shared context flowing through Click's command hierarchy."""

    def __init__(self, settings: RealmSettings) -> None:
        self.settings = settings
        self._realm: PropertiesRealm | None = None
        self._role_mapper: RoleMapper | None = None

        from propsrealm.config.logging import configure_logging

        configure_logging(
            verbose=settings.verbose,
            log_json=settings.log_json,
            level=settings.log_level,
        )

        if settings.verbose:
            from propsrealm.services.telemetry import enable_telemetry

            enable_telemetry()

    @property
    def realm(self) -> PropertiesRealm:
        """The configured realm, not yet loaded."""
        if self._realm is None:
            from propsrealm.infrastructure.realm import PropertiesRealm
            from propsrealm.plugins.manager import PluginManager

            plugins = PluginManager()
            names = plugins.discover_and_load()
            if names:
                logger.debug("Loaded plugins: %s", ", ".join(names))
            self._realm = PropertiesRealm(self.settings.resolved_realm, plugins=plugins)
        return self._realm

    @property
    def loaded_realm(self) -> PropertiesRealm:
        """The realm after an attempt to load its files.

        A failed load leaves the realm unloaded; identity services then
        report ``REALM_UNAVAILABLE``.
        """
        realm = self.realm
        if not realm.loaded:
            realm.initialize()
        return realm

    @property
    def role_mapper(self) -> RoleMapper:
        if self._role_mapper is None:
            from propsrealm.domain.roles import RoleMapper

            mapper = RoleMapper()
            mapper.initialize(self.settings.role_mapper.rules)
            self._role_mapper = mapper
        return self._role_mapper

    def emit(self, result: ServiceResult) -> None:
        """Format and output a ServiceResult with correct exit semantics.

        * Success: stdout, warnings to stderr (except in JSON mode, where
          they are part of the payload).
        * Failure: stderr, exit code 1.
        """
        settings = OutputSettings(
            json_output=self.settings.json_output,
            quiet=self.settings.quiet,
            verbose=self.settings.verbose,
        )
        output = format_result(result, settings=settings)
        if result.ok:
            click.echo(output)
            if not settings.json_output:
                for warning in result.warnings:
                    click.echo(f"WARNING: {warning}", err=True)
        else:
            click.echo(output, err=True)
            raise SystemExit(1)
