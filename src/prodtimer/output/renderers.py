"""Operation-specific Rich renderers for ServiceResult.

Each renderer writes to a Rich Console (backed by StringIO). Renderers are
dispatched by ``result.op`` in :func:`render_result`; unknown ops fall
through to a generic key-value renderer.
"""

from __future__ import annotations

import json as _json
from typing import TYPE_CHECKING, Any

from rich.markup import escape
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from prodtimer.domain.dates import format_duration_hms
from prodtimer.output.console import create_console, get_output, style_for_state

if TYPE_CHECKING:
    from rich.console import Console

    from prodtimer.services.result import ServiceResult


# ── Public API ────────────────────────────────────────────────────────


def render_result(result: ServiceResult, *, verbose: bool = False) -> str:
    """Render a ServiceResult to a styled string via Rich."""
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

    items = result.data.get("items")
    if items and isinstance(items, list):
        return "\n".join(str(item.get("name", "")) for item in items if isinstance(item, dict))
    if result.op == "stats":
        return format_duration_hms(result.data.get("total_duration_ms", 0), separator=":")
    if "remaining_ms" in result.data:
        return format_duration_hms(result.data["remaining_ms"], separator=":")

    return f"OK: {result.op}"


# ── Helpers ───────────────────────────────────────────────────────────


def _status_line(console: Console, result: ServiceResult) -> None:
    label = Text("OK", style="pt.ok")
    op = Text(f"  {result.op}", style="pt.op")
    console.print(label, op, end="")
    console.print()


def _field(console: Console, key: str, value: Any) -> None:
    k = Text(f"  {key}: ", style="pt.key")
    if key == "name":
        v = Text(str(value), style="pt.name")
    elif key.endswith("_ms") or key == "duration":
        v = Text(format_duration_hms(int(value)), style="pt.time")
    else:
        v = Text(str(value))
    console.print(k, v, end="")
    console.print()


# ── Error renderer ────────────────────────────────────────────────────


def _render_error(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    err = result.error
    msg = err.message if err else "Unknown error"
    label = Text("ERROR", style="pt.error")
    op = Text(f"  {result.op}", style="pt.op")
    console.print(label, op, Text(" — "), msg)
    if verbose and err:
        console.print(Text(f"  code: {err.code}", style="dim"))
        for k, v in err.detail.items():
            console.print(f"    {k}: {v}")


# ── Timer renderers ───────────────────────────────────────────────────


def _render_timer(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    """Render a timer snapshot (create/start/pause/reset/end/info) as a panel."""
    d = result.data
    state = str(d.get("state", ""))
    lines = [
        f"state:     [{style_for_state(state)}]{state}[/]",
        f"duration:  {format_duration_hms(d.get('duration', 0))}",
        f"elapsed:   {format_duration_hms(d.get('elapsed_ms', 0))}",
        f"remaining: {format_duration_hms(d.get('remaining_ms', 0))}",
    ]
    if d.get("description"):
        lines.append(f"note:      {escape(str(d['description']))}")
    if verbose and d.get("started_at") is not None:
        lines.append(f"started:   {d['started_at']}")

    title = f"{escape(str(d.get('name', '?')))} — {result.op}"
    console.print(
        Panel("\n".join(lines), title=title, border_style=style_for_state(state), expand=False)
    )


def _render_saved_list(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    items = result.data.get("items", [])
    table = Table(show_header=True, show_lines=False, pad_edge=False, expand=False)
    table.add_column("Name", style="pt.name", no_wrap=True)
    table.add_column("Duration", style="pt.time", justify="right")
    table.add_column("Description")
    for item in items:
        table.add_row(
            str(item.get("name", "")),
            format_duration_hms(item.get("duration", 0), separator=":"),
            str(item.get("description") or ""),
        )
    console.print(table)
    console.print(f"\n{result.data.get('count', len(items))} saved timers")


def _render_saved(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    _status_line(console, result)
    for key in ("name", "duration", "description"):
        if result.data.get(key) is not None:
            _field(console, key, result.data[key])


def _render_stats(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    d = result.data
    timers: dict[str, Any] = d.get("timers", {})
    console.print(Text(f"Stats for {d.get('date', '?')}", style="bold"))
    if not timers:
        console.print(Text("  no sessions recorded", style="dim"))
        return

    table = Table(show_header=True, show_lines=False, pad_edge=False, expand=False)
    table.add_column("Name", style="pt.name", no_wrap=True)
    table.add_column("Sessions", justify="right")
    table.add_column("Total", style="pt.time", justify="right")
    table.add_column("Description")
    for name, totals in sorted(timers.items(), key=lambda kv: -kv[1]["total_duration_ms"]):
        table.add_row(
            name,
            str(totals.get("count", 0)),
            format_duration_hms(totals.get("total_duration_ms", 0), separator=":"),
            str(totals.get("description") or ""),
        )
    console.print(table)
    console.print(
        f"\n{d.get('timer_count', 0)} sessions, "
        f"{format_duration_hms(d.get('total_duration_ms', 0))} total"
    )


def _render_generic(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    _status_line(console, result)
    for key, value in result.data.items():
        if isinstance(value, (dict, list)):
            value = _json.dumps(value, separators=(",", ":"))
        _field(console, key, value)


# ── Dispatch table ────────────────────────────────────────────────────

_OP_RENDERERS: dict[str, Any] = {
    # Lifecycle
    "create": _render_timer,
    "start": _render_timer,
    "pause": _render_timer,
    "reset": _render_timer,
    "end": _render_timer,
    "info": _render_timer,
    # Saved timers
    "save": _render_saved,
    "list_saved_timers": _render_saved_list,
    "delete_saved_timer": _render_generic,
    "update_config": _render_generic,
    # Stats
    "stats": _render_stats,
    "stop_beeping": _render_generic,
}
