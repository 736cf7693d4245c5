"""Operation-specific Rich renderers for ServiceResult.

Each renderer writes to a Rich Console (backed by StringIO).  The caller
extracts the rendered text via ``get_output(console)``.

Renderers are dispatched by ``result.op`` in :func:`render_result`.
Unknown ops fall through to a generic key-value renderer.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from rich.table import Table
from rich.text import Text

from propsrealm.output.console import create_console, get_output, style_for_flag

if TYPE_CHECKING:
    from collections.abc import Callable

    from rich.console import Console

    from propsrealm.services.result import ServiceResult


# ── Public API ────────────────────────────────────────────────────────


def render_result(result: ServiceResult, *, verbose: bool = False) -> str:
    """Render a ServiceResult to a styled string via Rich.

    Returns plain text (no ANSI) when Rich detects no terminal,
    which is the case inside Click's CliRunner and piped output.
    """
    console = create_console()

    if result.ok:
        renderer = _OP_RENDERERS.get(result.op, _render_generic)
        renderer(result, console, verbose=verbose)
    else:
        _render_error(result, console, verbose=verbose)

    return get_output(console).rstrip("\n")


def render_quiet(result: ServiceResult) -> str:
    """Render minimal output for ``--quiet`` mode."""
    if not result.ok:
        msg = result.error.message if result.error else "Unknown error"
        return f"ERROR: {result.op} — {msg}"

    data = result.data
    if result.op == "map_roles":
        return "\n".join(data.get("output", []))
    if result.op == "list_rules":
        return "\n".join(str(item["id"]) for item in data.get("items", []))
    if result.op == "identity_verify":
        return "verified" if data.get("verified") else "rejected"
    if result.op == "identity_credential":
        return str(data.get("value", ""))
    return f"OK: {result.op}"


# ── Helpers ───────────────────────────────────────────────────────────


def _status_line(console: Console, result: ServiceResult) -> None:
    """Print the OK status line."""
    console.print(Text.assemble(("OK", "realm.ok"), (f"  {result.op}", "realm.op")))


def _field(console: Console, key: str, value: Any) -> None:
    """Print a single indented key-value field."""
    if key == "principal":
        v = Text(str(value), style="realm.principal")
    elif key == "realm_name":
        v = Text(str(value), style="realm.name")
    elif isinstance(value, list):
        v = Text(", ".join(str(item) for item in value) or "-")
    else:
        v = Text(str(value), style=style_for_flag(value))
    console.print(Text.assemble((f"  {key}: ", "realm.key"), v))


def _render_meta(console: Console, result: ServiceResult) -> None:
    """Print meta block including telemetry timings (verbose only)."""
    if not result.meta:
        return

    console.print()
    console.print(Text("  meta:", style="dim"))
    for k, v in result.meta.items():
        if k == "telemetry":
            _render_span(console, v, indent=4)
        else:
            console.print(f"    {k}: {v}", markup=False)


def _render_span(console: Console, span: dict[str, Any], *, indent: int) -> None:
    pad = " " * indent
    console.print(f"{pad}{span.get('name', '?')}  {span.get('duration_ms', 0)}ms", markup=False)
    for child in span.get("children", []):
        _render_span(console, child, indent=indent + 2)


# ── Error renderer ────────────────────────────────────────────────────


def _render_error(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    err = result.error
    msg = err.message if err else "Unknown error"
    console.print(Text.assemble(("ERROR", "realm.error"), (f"  {result.op}", "realm.op"), f" — {msg}"))

    if verbose and err and err.detail:
        console.print(Text("  detail:", style="dim"))
        for k, v in err.detail.items():
            console.print(f"    {k}: {v}", markup=False)


# ── Realm renderers ───────────────────────────────────────────────────


def _render_fields(keys: tuple[str, ...]) -> Callable[..., None]:
    def render(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
        _status_line(console, result)
        for key in keys:
            if key in result.data:
                _field(console, key, result.data[key])
        if verbose:
            _render_meta(console, result)

    return render


def _render_lookup(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    _status_line(console, result)
    data = result.data
    for key in ("principal", "exists", "has_password", "realm_name"):
        _field(console, key, data.get(key))
    for name, values in data.get("attributes", {}).items():
        _field(console, name, values)

    table = Table(show_header=True, header_style="bold", box=None, padding=(0, 2))
    table.add_column("algorithm")
    table.add_column("support")
    for algorithm, level in data.get("credential_support", {}).items():
        table.add_row(algorithm, Text(level, style=style_for_flag(level)))
    console.print()
    console.print(table)
    if verbose:
        _render_meta(console, result)


def _render_map_roles(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    _status_line(console, result)
    data = result.data
    _field(console, "input", data.get("input", []))
    _field(console, "output", data.get("output", []))
    for role in data.get("added", []):
        console.print(Text(f"  + {role}", style="realm.role.added"))
    for role in data.get("removed", []):
        console.print(Text(f"  - {role}", style="realm.role.removed"))
    if verbose:
        _render_meta(console, result)


def _render_rules(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    _status_line(console, result)
    items = result.data.get("items", [])
    if not items:
        console.print(Text("  No rules configured", style="dim"))
        return

    table = Table(show_header=True, header_style="bold", box=None, padding=(0, 2))
    for column in ("rule", "regexp", "dest role", "mode", "active"):
        table.add_column(column)
    for item in items:
        table.add_row(
            str(item["id"]),
            str(item["regexp"] or "-"),
            str(item["dest_role"] or "-"),
            "replace" if item["replace"] else "add",
            Text(str(item["active"]).lower(), style=style_for_flag(item["active"])),
        )
    console.print(table)
    if verbose:
        _render_meta(console, result)


def _render_generic(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    _status_line(console, result)
    for key, value in result.data.items():
        _field(console, key, value)
    if verbose:
        _render_meta(console, result)


_OP_RENDERERS: dict[str, Callable[..., None]] = {
    "realm_load": _render_fields(("realm_name", "accounts", "group_only", "load_time")),
    "realm_status": _render_fields(
        ("loaded", "realm_name", "accounts", "load_time", "plain_text", "groups_attribute")
    ),
    "identity_lookup": _render_lookup,
    "identity_verify": _render_fields(("principal", "realm_name", "verified")),
    "identity_credential": _render_fields(("principal", "realm_name", "algorithm", "value")),
    "map_roles": _render_map_roles,
    "list_rules": _render_rules,
}
