"""propsrealm entry point: global flags, settings and command groups."""

from __future__ import annotations

from typing import Any

import click

from propsrealm import __version__
from propsrealm.commands import register_commands
from propsrealm.commands._context import AppContext
from propsrealm.config.settings import RealmSettings


@click.group(invoke_without_command=True)
@click.version_option(__version__, prog_name="propsrealm")
@click.option("-c", "--config", "config_path", metavar="PATH", help="Use this propsrealm.toml.")
@click.option("--json", "json_output", is_flag=True, help="Print results as JSON.")
@click.option("-q", "--quiet", is_flag=True, help="Print bare values only.")
@click.option("-v", "--verbose", is_flag=True, help="Debug logging and timing details.")
@click.option("--log-json", is_flag=True, help="Write logs to stderr as JSON lines.")
@click.pass_context
def cli(ctx: click.Context, config_path: str | None, **flags: Any) -> None:
    """propsrealm — legacy properties-file security realm.

    Loads a users file (and optional groups file), answers identity and
    password questions, and maps roles through regex rules.
    """
    ctx.obj = AppContext(RealmSettings.from_cli(config_path=config_path, **flags))
    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())


register_commands(cli)
