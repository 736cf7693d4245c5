"""Command group: principal lookup, password checks and credentials."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from propsrealm.commands._base import RealmGroup
from propsrealm.domain.types import PasswordAlgorithm
from propsrealm.services.identity import IdentityService

if TYPE_CHECKING:
    from propsrealm.commands._context import AppContext

_IDENTITY_EXAMPLES = """\
  propsrealm identity show alice
  propsrealm identity show bob --group auditors
  propsrealm identity verify alice
  propsrealm identity credential alice --algorithm digest-md5"""


@click.group(cls=RealmGroup, examples=_IDENTITY_EXAMPLES)
@click.pass_obj
def identity(app: AppContext) -> None:
    """Look up principals and check their passwords."""


@identity.command(
    examples="""\
  propsrealm identity show alice
  propsrealm identity show alice -g auditors -g ops
  propsrealm --json identity show alice"""
)
@click.argument("name")
@click.option(
    "-g",
    "--group",
    "groups",
    multiple=True,
    help="Extra group claim to merge into the account (repeatable).",
)
@click.pass_obj
def show(app: AppContext, name: str, groups: tuple[str, ...]) -> None:
    """Describe principal NAME: groups and supported credentials."""
    app.emit(IdentityService(app.loaded_realm).lookup(name, groups or None))


@identity.command(
    examples="""\
  propsrealm identity verify alice
  propsrealm identity verify alice --password s3cr3t
  propsrealm -q identity verify alice --password s3cr3t"""
)
@click.argument("name")
@click.option("--password", prompt=True, hide_input=True, help="Password to check.")
@click.pass_obj
def verify(app: AppContext, name: str, password: str) -> None:
    """Check PASSWORD for principal NAME. Exits 1 when rejected."""
    result = IdentityService(app.loaded_realm).verify(name, password)
    app.emit(result)
    if not result.data.get("verified"):
        raise SystemExit(1)


@identity.command(
    examples="""\
  propsrealm identity credential alice
  propsrealm identity credential alice --algorithm digest-md5
  propsrealm -q identity credential alice --algorithm clear"""
)
@click.argument("name")
@click.option(
    "--algorithm",
    type=click.Choice([algorithm.value for algorithm in PasswordAlgorithm]),
    default=None,
    help="Credential algorithm (default depends on the realm mode).",
)
@click.pass_obj
def credential(app: AppContext, name: str, algorithm: str | None) -> None:
    """Print the stored credential for principal NAME."""
    app.emit(IdentityService(app.loaded_realm).credential(name, algorithm))
