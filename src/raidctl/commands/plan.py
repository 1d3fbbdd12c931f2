"""Command group: view and edit the raid plan of an event.

Group and slot arguments accept either an ID (``grp_...``/``pos_...``) or
the 1-based number shown by ``raidctl plan show``.
"""

from __future__ import annotations

import json
from collections.abc import Callable
from pathlib import Path
from typing import TYPE_CHECKING, TextIO

import click

from raidctl.commands._base import RaidGroup
from raidctl.domain.roster import find_group, locate_participant
from raidctl.interaction.gestures import ChipRef, GroupRef, PositionRef

if TYPE_CHECKING:
    from raidctl.commands._context import AppContext
    from raidctl.domain.outcomes import EngineResult
    from raidctl.domain.roster import Plan
    from raidctl.interaction.gestures import GestureOutcome, InteractionController
    from raidctl.interaction.session import EditingSession

_PLAN_EXAMPLES = """\
  raidctl plan create EVT-1 --title "Tuesday Raid"
  raidctl plan show EVT-1
  raidctl plan assign EVT-1 u42 1 3
  raidctl plan tap EVT-1 @u42 2/1
  raidctl plan drag EVT-1 @u42 2/1"""


@click.group(cls=RaidGroup, examples=_PLAN_EXAMPLES)
@click.pass_obj
def plan(app: AppContext) -> None:
    """View and edit raid plans."""


# ── Reference resolution ──────────────────────────────────────────────


def _group_id(current: Plan, ref: str) -> str:
    """Map a 1-based group number to its ID; anything else passes through."""
    if ref.isdigit():
        n = int(ref)
        if 1 <= n <= len(current.groups):
            return current.groups[n - 1].id
    return ref


def _slot(current: Plan, group_ref: str, position_ref: str) -> tuple[str, str]:
    group_id = _group_id(current, group_ref)
    if position_ref.isdigit():
        group = find_group(current, group_id)
        n = int(position_ref)
        if group is not None and 1 <= n <= len(group.positions):
            return group_id, group.positions[n - 1].id
    return group_id, position_ref


def _chip(current: Plan, participant_id: str) -> ChipRef:
    where = locate_participant(current, participant_id)
    if where is None:
        return ChipRef(participant_id)
    return ChipRef(participant_id, where.group_id, where.position_id)


def _parse_target(current: Plan, token: str) -> PositionRef | GroupRef:
    """``GROUP/SLOT`` is a slot, a bare ``GROUP`` is a group."""
    group_ref, sep, position_ref = token.partition("/")
    if sep:
        return PositionRef(*_slot(current, group_ref, position_ref))
    return GroupRef(_group_id(current, group_ref))


def _edit(app: AppContext, event_id: str, action: Callable[[EditingSession], EngineResult]) -> None:
    """Open a session, run one engine call, persist, and emit."""
    session = app.open_session(event_id)
    original = session.plan
    result = action(session)
    app.close_session(session, original)
    app.emit(app.plan_result(session, result))


# ── Plan lifecycle ────────────────────────────────────────────────────


@plan.command(
    name="list",
    examples="""\
  raidctl plan list
  raidctl plan list 1234567890""",
)
@click.argument("guild_id", required=False)
@click.pass_obj
def list_cmd(app: AppContext, guild_id: str | None) -> None:
    """List the plans of a guild (defaults to the workspace name)."""
    from raidctl.services.plans import PlanService

    app.emit(PlanService(app.store).list_plans(guild_id or app.settings.workspace.name))


@plan.command(
    examples="""\
  raidctl plan create EVT-1
  raidctl plan create EVT-1 --title "Tuesday Raid" --groups 8 --slots 5
  raidctl plan create EVT-1 --preset PRESET-0002""",
)
@click.argument("event_id")
@click.option("--guild", "guild_id", default=None, help="Owning guild (default: workspace name).")
@click.option("--title", default=None, help="Plan title.")
@click.option("--preset", "preset_id", default=None, help="Seed the groups from a preset.")
@click.option("--groups", "group_count", type=click.IntRange(min=0), default=None)
@click.option("--slots", "slot_count", type=click.IntRange(min=0), default=None)
@click.pass_obj
def create(
    app: AppContext,
    event_id: str,
    guild_id: str | None,
    title: str | None,
    preset_id: str | None,
    group_count: int | None,
    slot_count: int | None,
) -> None:
    """Create the plan for an event."""
    from raidctl.domain.topology import default_groups, regenerate_groups
    from raidctl.services.plans import PlanService
    from raidctl.services.presets import PresetService, preset_from_result

    groups = None
    if preset_id is not None:
        found = PresetService(app.store).get_preset(preset_id)
        if not found.ok:
            app.fail(found)
        groups = regenerate_groups(preset_from_result(found).groups)
    elif group_count is not None or slot_count is not None:
        cfg = app.settings.engine
        groups = default_groups(
            cfg.default_groups if group_count is None else group_count,
            cfg.default_slots if slot_count is None else slot_count,
        )

    app.emit(
        PlanService(app.store).create_plan(
            event_id,
            guild_id or app.settings.workspace.name,
            title or f"Raid Plan: {event_id}",
            groups,
        )
    )


@plan.command(
    examples="""\
  raidctl plan show EVT-1
  raidctl plan show EVT-1 --create
  raidctl -v plan show EVT-1""",
)
@click.argument("event_id")
@click.option("--create", "create_missing", is_flag=True, help="Create the plan if missing.")
@click.option("--guild", "guild_id", default=None, help="Guild for a newly created plan.")
@click.pass_obj
def show(app: AppContext, event_id: str, create_missing: bool, guild_id: str | None) -> None:
    """Show groups, slots, and the unassigned pool."""
    op = "load_plan"
    extra: dict[str, object] = {}
    if create_missing:
        from raidctl.services.plans import PlanService

        opened = PlanService(app.store).open_plan(
            event_id, guild_id or app.settings.workspace.name
        )
        if not opened.ok:
            app.fail(opened)
        op = "open_plan"
        extra["created"] = opened.data["created"]
    session = app.open_session(event_id)
    app.emit(app.plan_result(session, op=op, extra=extra))


@plan.command(examples="  raidctl plan delete EVT-1")
@click.argument("event_id")
@click.pass_obj
def delete(app: AppContext, event_id: str) -> None:
    """Delete the plan of an event."""
    from raidctl.services.plans import PlanService, plan_from_result

    svc = PlanService(app.store)
    loaded = svc.load_plan(event_id)
    if not loaded.ok:
        app.fail(loaded)
    app.emit(svc.delete_plan(plan_from_result(loaded).id))


@plan.command(
    examples="""\
  raidctl plan unassigned EVT-1
  raidctl plan unassigned EVT-1 --search healer
  raidctl -q plan unassigned EVT-1""",
)
@click.argument("event_id")
@click.option("--search", default=None, help="Filter by username or role.")
@click.pass_obj
def unassigned(app: AppContext, event_id: str, search: str | None) -> None:
    """List signups not seated in any slot."""
    from raidctl.services.result import ServiceResult

    session = app.open_session(event_id)
    items = [
        p.model_dump(mode="json", by_alias=True, exclude_none=True)
        for p in session.unassigned(search)
    ]
    app.emit(
        ServiceResult(
            ok=True,
            op="unassigned",
            data={"event_id": event_id, "count": len(items), "items": items},
        )
    )


@plan.command(
    examples="""\
  raidctl plan export EVT-1
  raidctl plan export EVT-1 --output plan.json""",
)
@click.argument("event_id")
@click.option("--output", type=click.Path(dir_okay=False, path_type=Path), default=None)
@click.pass_obj
def export(app: AppContext, event_id: str, output: Path | None) -> None:
    """Write the plan document as JSON."""
    from raidctl.services.plans import PlanService
    from raidctl.services.result import ServiceResult

    loaded = PlanService(app.store).load_plan(event_id)
    if not loaded.ok:
        app.fail(loaded)
    text = json.dumps(loaded.data["plan"], indent=2)
    if output is None:
        click.echo(text)
        return
    output.write_text(text + "\n", encoding="utf-8")
    app.emit(
        ServiceResult(
            ok=True,
            op="export_plan",
            data={"id": loaded.data["plan"]["id"], "output_file": str(output)},
        )
    )


# ── Assignment ────────────────────────────────────────────────────────


@plan.command(
    examples="""\
  raidctl plan assign EVT-1 u42 1 3
  raidctl plan assign EVT-1 u42 grp_3f2a9c1b7d0e pos_0b1c2d3e4f5a""",
)
@click.argument("event_id")
@click.argument("participant_id")
@click.argument("group")
@click.argument("slot")
@click.pass_obj
def assign(app: AppContext, event_id: str, participant_id: str, group: str, slot: str) -> None:
    """Seat a participant in a slot, vacating their previous slot."""
    _edit(app, event_id, lambda s: s.assign(participant_id, *_slot(s.plan, group, slot)))


@plan.command(examples="  raidctl plan unassign EVT-1 1 3")
@click.argument("event_id")
@click.argument("group")
@click.argument("slot")
@click.pass_obj
def unassign(app: AppContext, event_id: str, group: str, slot: str) -> None:
    """Empty a slot; its occupant returns to the pool."""
    _edit(app, event_id, lambda s: s.unassign(*_slot(s.plan, group, slot)))


# ── Structure ─────────────────────────────────────────────────────────


@plan.command(
    name="add-group",
    examples="""\
  raidctl plan add-group EVT-1
  raidctl plan add-group EVT-1 --name Tanks --slots 2""",
)
@click.argument("event_id")
@click.option("--name", default=None, help="Group name (default: Group N).")
@click.option("--slots", type=int, default=1, show_default=True)
@click.pass_obj
def add_group(app: AppContext, event_id: str, name: str | None, slots: int) -> None:
    """Append a group."""
    _edit(app, event_id, lambda s: s.add_group(name, slots=slots))


@plan.command(name="remove-group", examples="  raidctl plan remove-group EVT-1 3")
@click.argument("event_id")
@click.argument("group")
@click.pass_obj
def remove_group(app: AppContext, event_id: str, group: str) -> None:
    """Remove a group; anyone in it returns to the pool."""
    _edit(app, event_id, lambda s: s.remove_group(_group_id(s.plan, group)))


@plan.command(name="rename-group", examples='  raidctl plan rename-group EVT-1 1 "Main Tanks"')
@click.argument("event_id")
@click.argument("group")
@click.argument("name")
@click.pass_obj
def rename_group(app: AppContext, event_id: str, group: str, name: str) -> None:
    """Rename a group."""
    _edit(app, event_id, lambda s: s.rename_group(_group_id(s.plan, group), name))


@plan.command(
    name="add-slot",
    examples="""\
  raidctl plan add-slot EVT-1 2
  raidctl plan add-slot EVT-1 2 --label Off-tank""",
)
@click.argument("event_id")
@click.argument("group")
@click.option("--label", default=None, help="Slot caption.")
@click.pass_obj
def add_slot(app: AppContext, event_id: str, group: str, label: str | None) -> None:
    """Append an empty slot to a group."""
    _edit(app, event_id, lambda s: s.add_position(_group_id(s.plan, group), label))


@plan.command(name="remove-slot", examples="  raidctl plan remove-slot EVT-1 2 5")
@click.argument("event_id")
@click.argument("group")
@click.argument("slot")
@click.pass_obj
def remove_slot(app: AppContext, event_id: str, group: str, slot: str) -> None:
    """Remove a slot; its occupant returns to the pool."""
    _edit(app, event_id, lambda s: s.remove_position(*_slot(s.plan, group, slot)))


@plan.command(
    name="label-slot",
    examples="""\
  raidctl plan label-slot EVT-1 1 1 "Main tank"
  raidctl plan label-slot EVT-1 1 1""",
)
@click.argument("event_id")
@click.argument("group")
@click.argument("slot")
@click.argument("label", required=False)
@click.pass_obj
def label_slot(app: AppContext, event_id: str, group: str, slot: str, label: str | None) -> None:
    """Set a slot caption (omit LABEL to clear it)."""
    _edit(app, event_id, lambda s: s.relabel_position(*_slot(s.plan, group, slot), label))


@plan.command(name="move-group", examples="  raidctl plan move-group EVT-1 1 3")
@click.argument("event_id")
@click.argument("from_number", type=int)
@click.argument("to_number", type=int)
@click.pass_obj
def move_group(app: AppContext, event_id: str, from_number: int, to_number: int) -> None:
    """Move a group from one 1-based position to another."""
    _edit(app, event_id, lambda s: s.reorder_groups(from_number - 1, to_number - 1))


@plan.command(name="move-slot", examples="  raidctl plan move-slot EVT-1 2 5 1")
@click.argument("event_id")
@click.argument("group")
@click.argument("from_number", type=int)
@click.argument("to_number", type=int)
@click.pass_obj
def move_slot(
    app: AppContext, event_id: str, group: str, from_number: int, to_number: int
) -> None:
    """Move a slot within its group (1-based numbers)."""
    _edit(
        app,
        event_id,
        lambda s: s.reorder_positions(_group_id(s.plan, group), from_number - 1, to_number - 1),
    )


# ── Plan text ─────────────────────────────────────────────────────────


@plan.command(examples='  raidctl plan title EVT-1 "Heroic Progression"')
@click.argument("event_id")
@click.argument("title")
@click.pass_obj
def title(app: AppContext, event_id: str, title: str) -> None:
    """Change the plan title."""
    _edit(app, event_id, lambda s: s.retitle(title))


@plan.command(
    examples="""\
  raidctl plan strategy EVT-1 "Stack on the boss, spread for meteors"
  raidctl plan strategy EVT-1 --file tactics.txt
  raidctl plan strategy EVT-1 --clear""",
)
@click.argument("event_id")
@click.argument("text", required=False)
@click.option("--file", "source", type=click.File("r", encoding="utf-8"), default=None)
@click.option("--clear", is_flag=True, help="Remove the strategy text.")
@click.pass_obj
def strategy(
    app: AppContext,
    event_id: str,
    text: str | None,
    source: TextIO | None,
    clear: bool,
) -> None:
    """Set the free-text strategy shown beside the groups."""
    if source is not None:
        text = source.read()
    if text is None and not clear:
        click.echo("No strategy given. Pass TEXT, --file, or --clear.", err=True)
        raise SystemExit(1)
    _edit(app, event_id, lambda s: s.set_strategy(None if clear else text))


@plan.command(name="apply-preset", examples="  raidctl plan apply-preset EVT-1 PRESET-0001")
@click.argument("event_id")
@click.argument("preset_id")
@click.pass_obj
def apply_preset(app: AppContext, event_id: str, preset_id: str) -> None:
    """Replace the groups with a preset; everyone returns to the pool."""
    from raidctl.services.presets import PresetService, preset_from_result

    found = PresetService(app.store).get_preset(preset_id)
    if not found.ok:
        app.fail(found)
    groups = preset_from_result(found).groups
    _edit(app, event_id, lambda s: s.apply_topology(groups))


# ── Gestures ──────────────────────────────────────────────────────────


def _replay(
    app: AppContext,
    event_id: str,
    *,
    touch_capable: bool,
    op: str,
    steps: Callable[[InteractionController], list[GestureOutcome]],
    notes: list[str] | None = None,
) -> None:
    from raidctl.interaction.gestures import InteractionController
    from raidctl.interaction.modes import InteractionMode

    session = app.open_session(event_id)
    original = session.plan
    cfg = app.settings.interaction
    controller = InteractionController.for_device(
        session,
        touch_capable=touch_capable,
        force_mode=cfg.force_mode,
        selection_timeout=cfg.selection_timeout,
    )
    outcomes = steps(controller)
    app.close_session(session, original)

    warnings = [
        f"Gesture dropped: {o.error.message}" for o in outcomes if o.error is not None
    ]
    warnings.extend(notes or [])
    expected = InteractionMode.DISCRETE if touch_capable else InteractionMode.CONTINUOUS
    if controller.mode is not expected:
        warnings.append(f"Ignored: interaction mode is forced to {controller.mode.value}")
    selection = controller.selection
    result = app.plan_result(
        session,
        op=op,
        extra={
            "engine_calls": sum(1 for o in outcomes if o.engine_called),
            "selection": selection.participant_id if selection else None,
        },
    )
    app.emit(result.model_copy(update={"warnings": [*result.warnings, *warnings]}))


@plan.command(
    examples="""\
  raidctl plan tap EVT-1 @u42 1/3
  raidctl plan tap EVT-1 @u42 @u7 2/1
  raidctl plan tap EVT-1 @u42 clear""",
)
@click.argument("event_id")
@click.argument("taps", nargs=-1, required=True)
@click.pass_obj
def tap(app: AppContext, event_id: str, taps: tuple[str, ...]) -> None:
    """Replay taps: @ID taps a chip, GROUP/SLOT taps a slot, 'clear' cancels."""
    ignored: list[str] = []

    def steps(controller: InteractionController) -> list[GestureOutcome]:
        outcomes = []
        for token in taps:
            current = controller.session.plan
            if token == "clear":
                outcomes.append(controller.clear_selection())
            elif token.startswith("@"):
                outcomes.append(controller.on_tap(_chip(current, token[1:])))
            else:
                target = _parse_target(current, token)
                if isinstance(target, PositionRef):
                    outcomes.append(controller.on_tap(target))
                else:
                    ignored.append(f"Ignored tap on group {token}: tap a slot as GROUP/SLOT")
        return outcomes

    _replay(app, event_id, touch_capable=True, op="tap", steps=steps, notes=ignored)


@plan.command(
    examples="""\
  raidctl plan drag EVT-1 @u42 1/3
  raidctl plan drag EVT-1 3 1
  raidctl plan drag EVT-1 @u42""",
)
@click.argument("event_id")
@click.argument("source")
@click.argument("target", required=False)
@click.pass_obj
def drag(app: AppContext, event_id: str, source: str, target: str | None) -> None:
    """Drag @ID onto GROUP/SLOT, or a GROUP onto another GROUP.

    Without TARGET the drag is released over nothing.
    """

    def steps(controller: InteractionController) -> list[GestureOutcome]:
        current = controller.session.plan
        subject: ChipRef | GroupRef
        if source.startswith("@"):
            subject = _chip(current, source[1:])
        else:
            subject = GroupRef(_group_id(current, source))
        start = controller.on_drag_start(subject)
        drop = _parse_target(current, target) if target else None
        return [start, controller.on_drag_end(drop)]

    _replay(app, event_id, touch_capable=False, op="drag", steps=steps)

