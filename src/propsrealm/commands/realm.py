"""Command group: load and inspect the realm."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from propsrealm.commands._base import RealmGroup
from propsrealm.services.realm import RealmService

if TYPE_CHECKING:
    from propsrealm.commands._context import AppContext

_REALM_EXAMPLES = """\
  propsrealm realm load
  propsrealm --json realm load
  propsrealm realm status"""


@click.group(cls=RealmGroup, examples=_REALM_EXAMPLES)
@click.pass_obj
def realm(app: AppContext) -> None:
    """Load and inspect the properties realm."""


@realm.command(
    examples="""\
  propsrealm realm load
  propsrealm -c /etc/propsrealm.toml realm load
  PROPSREALM_REALM__PLAIN_TEXT=true propsrealm realm load"""
)
@click.pass_obj
def load(app: AppContext) -> None:
    """Read the users and groups files and report the new snapshot."""
    app.emit(RealmService(app.realm).load())


@realm.command(
    examples="""\
  propsrealm realm status
  propsrealm --json realm status"""
)
@click.pass_obj
def status(app: AppContext) -> None:
    """Show realm configuration and the loaded snapshot, if any."""
    app.emit(RealmService(app.loaded_realm).status())
