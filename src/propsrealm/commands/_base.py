"""Click command and group classes that take an ``examples=`` keyword.

Passing ``--examples`` prints the examples and exits, which keeps
``--help`` short.
"""

from __future__ import annotations

from typing import Any

import click


def _print_examples(ctx: click.Context, param: click.Parameter, value: bool) -> None:
    if not value or ctx.resilient_parsing:
        return
    click.echo(f"Examples for '{ctx.command_path}':\n")
    click.echo(ctx.command.examples)  # type: ignore[attr-defined]
    ctx.exit(0)


class _ExamplesMixin:
    """Stores ``examples`` and adds the eager ``--examples`` flag when set."""

    params: list[click.Parameter]

    def _init_examples(self, examples: str | None) -> None:
        self.examples = examples
        if examples:
            self.params.append(
                click.Option(
                    ["--examples"],
                    is_flag=True,
                    expose_value=False,
                    is_eager=True,
                    callback=_print_examples,
                    help="Show usage examples.",
                )
            )


class RealmCommand(_ExamplesMixin, click.Command):
    def __init__(self, *args: Any, examples: str | None = None, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self._init_examples(examples)


class RealmGroup(_ExamplesMixin, click.Group):
    """Group whose ``@group.command`` builds :class:`RealmCommand` by default."""

    command_class = RealmCommand

    def __init__(self, *args: Any, examples: str | None = None, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self._init_examples(examples)
