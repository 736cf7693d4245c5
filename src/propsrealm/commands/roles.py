"""Command group: regex role mapping."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from propsrealm.commands._base import RealmGroup
from propsrealm.services.roles import RoleMappingService

if TYPE_CHECKING:
    from propsrealm.commands._context import AppContext

_ROLES_EXAMPLES = """\
  propsrealm roles map 123-user 999-admin
  propsrealm -q roles map app-guest
  propsrealm roles rules"""


@click.group(cls=RealmGroup, examples=_ROLES_EXAMPLES)
@click.pass_obj
def roles(app: AppContext) -> None:
    """Apply and inspect the configured role mapping rules."""


@roles.command(
    "map",
    examples="""\
  propsrealm roles map 123-user 999-admin
  propsrealm --json roles map app-guest app-admin"""
)
@click.argument("role_names", nargs=-1)
@click.pass_obj
def map_cmd(app: AppContext, role_names: tuple[str, ...]) -> None:
    """Map ROLE_NAMES through the rules and print the result."""
    app.emit(RoleMappingService(app.role_mapper).map_roles(role_names))


@roles.command(
    examples="""\
  propsrealm roles rules
  propsrealm --json roles rules"""
)
@click.pass_obj
def rules(app: AppContext) -> None:
    """List configured rules in evaluation order."""
    app.emit(RoleMappingService(app.role_mapper).rules())
