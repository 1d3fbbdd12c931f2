"""Operation-specific Rich renderers for ServiceResult.

This is the View: plans are drawn as one table per group, followed by the
strategy text and the unassigned pool. Renderers are dispatched by
``result.op`` in :func:`render_result`; unknown ops fall through to a
generic key-value renderer.
"""

from __future__ import annotations

import json as _json
from typing import TYPE_CHECKING, Any

from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from raidctl.output.console import create_console, get_output, style_for_role

if TYPE_CHECKING:
    from rich.console import Console

    from raidctl.services.result import ServiceResult


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
    """Minimal output for ``--quiet``: IDs for lists, the subject ID otherwise."""
    if not result.ok:
        msg = result.error.message if result.error else "Unknown error"
        return f"ERROR: {result.op}: {msg}"

    items = result.data.get("items")
    if items and isinstance(items, list):
        ids = [str(item["id"]) for item in items if isinstance(item, dict) and "id" in item]
        return "\n".join(ids)
    for key in ("plan", "preset"):
        doc = result.data.get(key)
        if isinstance(doc, dict) and "id" in doc:
            return str(doc["id"])
    if "id" in result.data:
        return str(result.data["id"])
    return f"OK: {result.op}"


# ── Helpers ───────────────────────────────────────────────────────────


def _status_line(console: Console, result: ServiceResult) -> None:
    console.print(Text("OK", style="raid.ok"), Text(f"  {result.op}", style="raid.op"))


def _field(console: Console, key: str, value: Any) -> None:
    """Print a single indented key-value field."""
    k = Text(f"  {key}:", style="raid.key")
    if key == "id" or key.endswith("_id"):
        v = Text(str(value), style="raid.id")
    elif key in ("title", "name"):
        v = Text(str(value), style="raid.title")
    else:
        v = Text(str(value))
    console.print(k, v)


def _role_text(role: str | None) -> Text:
    return Text(role or "", style=style_for_role(role))


def _participant_label(pid: str, names: dict[str, Any]) -> Text:
    info = names.get(pid)
    if info is None:
        return Text(pid)
    return Text(str(info.get("username", pid)))


# ── Error renderer ────────────────────────────────────────────────────


def _render_error(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    err = result.error
    msg = err.message if err else "Unknown error"
    console.print(
        Text("ERROR", style="raid.error"), Text(f"  {result.op}", style="raid.op"), Text(f": {msg}")
    )
    if verbose and err and err.detail:
        console.print(Text("  detail:", style="dim"))
        for k, v in err.detail.items():
            console.print(f"    {k}: {v}")


# ── Plan renderers ────────────────────────────────────────────────────


def _group_table(
    index: int,
    group: dict[str, Any],
    names: dict[str, Any],
    *,
    selected: str | None,
    verbose: bool,
) -> Table:
    table = Table(
        title=f"{index}. {group.get('name', '')}",
        title_justify="left",
        show_header=True,
        pad_edge=False,
        expand=False,
    )
    table.add_column("#", justify="right", style="dim")
    table.add_column("Slot")
    table.add_column("Participant")
    table.add_column("Role")
    if verbose:
        table.add_column("Position ID", style="raid.id", no_wrap=True)

    for i, pos in enumerate(group.get("positions", []), start=1):
        pid = pos.get("participantId")
        if pid is None:
            who = Text("empty", style="raid.empty")
            role = Text("")
        else:
            who = _participant_label(pid, names)
            if pid == selected:
                who.stylize("raid.selected")
            info = names.get(pid) or {}
            role = _role_text(info.get("role"))
        row: list[Any] = [str(i), pos.get("label") or "", who, role]
        if verbose:
            row.append(pos.get("id", ""))
        table.add_row(*row)

    if verbose:
        table.caption = group.get("id", "")
    return table


def _pool_table(items: list[dict[str, Any]], *, selected: str | None = None) -> Table:
    table = Table(show_header=True, pad_edge=False, expand=False)
    table.add_column("ID", style="raid.id", no_wrap=True)
    table.add_column("Username")
    table.add_column("Role")
    table.add_column("Spec", style="dim")
    for item in items:
        name = Text(str(item.get("username", "")))
        if item.get("id") == selected:
            name.stylize("raid.selected")
        table.add_row(
            str(item.get("id", "")), name, _role_text(item.get("role")), item.get("spec") or ""
        )
    return table


def _render_plan(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    """Render a plan: groups, strategy, and (when supplied) the pool."""
    d = result.data
    plan = d.get("plan", {})
    names: dict[str, Any] = d.get("participants", {})
    selected = d.get("selection")

    _status_line(console, result)
    _field(console, "id", plan.get("id", "?"))
    _field(console, "title", plan.get("title", ""))
    if verbose:
        _field(console, "event_id", plan.get("eventId", ""))
    if d.get("created"):
        _field(console, "created", True)
    displaced = d.get("displaced", [])
    if displaced:
        labels = [_participant_label(pid, names).plain for pid in displaced]
        _field(console, "returned to pool", ", ".join(labels))

    for idx, group in enumerate(plan.get("groups", []), start=1):
        console.print()
        console.print(_group_table(idx, group, names, selected=selected, verbose=verbose))

    strategy = plan.get("strategy")
    if strategy:
        console.print()
        console.print(Panel(strategy, title="Strategy", border_style="dim", expand=False))

    if "unassigned" in d:
        pool = d["unassigned"]
        console.print()
        console.print(Text(f"Unassigned ({len(pool)})", style="raid.title"))
        if pool:
            console.print(_pool_table(pool, selected=selected))


def _render_pool(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    """Render the unassigned pool or a stored signup list."""
    items = result.data.get("items", [])
    console.print(_pool_table(items))
    console.print(f"\n{result.data.get('count', len(items))} participants")


# ── List renderers ────────────────────────────────────────────────────


def _render_plan_list(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    items = result.data.get("items", [])
    table = Table(show_header=True, pad_edge=False, expand=False)
    table.add_column("ID", style="raid.id", no_wrap=True)
    table.add_column("Event", no_wrap=True)
    table.add_column("Title", style="raid.title")
    if verbose:
        table.add_column("Modified", style="dim")
    for item in items:
        row = [str(item.get("id", "")), str(item.get("event_id", "")), str(item.get("title", ""))]
        if verbose:
            row.append(str(item.get("modified", "")))
        table.add_row(*row)
    console.print(table)
    console.print(f"\n{result.data.get('count', len(items))} plans")


def _render_preset_list(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    items = result.data.get("items", [])
    table = Table(show_header=True, pad_edge=False, expand=False)
    table.add_column("ID", style="raid.id", no_wrap=True)
    table.add_column("Name", style="raid.title")
    table.add_column("Groups", justify="right")
    table.add_column("Slots", justify="right")
    table.add_column("Description")
    if verbose:
        table.add_column("Created", style="dim")
    for item in items:
        row = [
            str(item.get("id", "")),
            str(item.get("name", "")),
            str(item.get("group_count", "")),
            str(item.get("slot_count", "")),
            str(item.get("description") or ""),
        ]
        if verbose:
            row.append(str(item.get("created", "")))
        table.add_row(*row)
    console.print(table)
    console.print(f"\n{result.data.get('count', len(items))} presets")


def _render_preset(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    preset = result.data.get("preset", {})
    _status_line(console, result)
    for key in ("id", "name", "description"):
        if preset.get(key):
            _field(console, key, preset[key])
    groups = preset.get("groups", [])
    _field(console, "groups", len(groups))
    if verbose:
        for group in groups:
            labels = [p.get("label") or "-" for p in group.get("positions", [])]
            console.print(f"    {group.get('name', '')}: {', '.join(labels)}")


# ── Upgrade renderer ──────────────────────────────────────────────────


def _render_upgrade(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    _status_line(console, result)
    d = result.data
    for key in ("applied_count", "pending_count", "current", "head", "message"):
        if key in d:
            _field(console, key, d[key])
    if verbose and d.get("pending"):
        console.print()
        for p in d["pending"]:
            console.print(f"  {p['revision']}: {p['description']}")


# ── Generic fallback ──────────────────────────────────────────────────


def _render_generic(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    """Fallback renderer: status line + all data as key-value pairs."""
    _status_line(console, result)
    for key, value in result.data.items():
        if isinstance(value, (dict, list)):
            _field(console, key, _json.dumps(value, separators=(",", ":")))
        else:
            _field(console, key, value)


# ── Dispatch table ────────────────────────────────────────────────────

_PLAN_OPS = (
    "load_plan",
    "get_plan",
    "create_plan",
    "open_plan",
    "assign",
    "unassign",
    "reorder_groups",
    "reorder_positions",
    "add_group",
    "remove_group",
    "rename_group",
    "add_position",
    "remove_position",
    "relabel_position",
    "retitle",
    "set_strategy",
    "apply_topology",
    "tap",
    "drag",
)

_OP_RENDERERS: dict[str, Any] = {
    **dict.fromkeys(_PLAN_OPS, _render_plan),
    "unassigned": _render_pool,
    "list_participants": _render_pool,
    "list_plans": _render_plan_list,
    "list_presets": _render_preset_list,
    "get_preset": _render_preset,
    "save_preset": _render_preset,
    "update_preset": _render_preset,
    "upgrade": _render_upgrade,
}
