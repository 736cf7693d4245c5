"""Subcommand modules for propsrealm.

Provides register_commands() which uses deferred imports so that
``propsrealm --help`` does not import the service layer.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    import click


def register_commands(cli: click.Group) -> None:
    """Register all command groups on the root CLI group."""
    from propsrealm.commands.identity import identity
    from propsrealm.commands.realm import realm
    from propsrealm.commands.roles import roles

    cli.add_command(realm)
    cli.add_command(identity)
    cli.add_command(roles)
