"""Command group: composition presets."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from raidctl.commands._base import RaidGroup

if TYPE_CHECKING:
    from raidctl.commands._context import AppContext

_PRESET_EXAMPLES = """\
  raidctl preset save EVT-1 "10-man standard" --description "2 tanks, 2 healers"
  raidctl preset list
  raidctl preset show PRESET-0001
  raidctl preset delete PRESET-0001"""


@click.group(cls=RaidGroup, examples=_PRESET_EXAMPLES)
@click.pass_obj
def preset(app: AppContext) -> None:
    """Save and reuse group layouts."""


@preset.command(
    name="list",
    examples="""\
  raidctl preset list
  raidctl -v preset list 1234567890""",
)
@click.argument("guild_id", required=False)
@click.pass_obj
def list_cmd(app: AppContext, guild_id: str | None) -> None:
    """List the presets of a guild (defaults to the workspace name)."""
    from raidctl.services.presets import PresetService

    app.emit(PresetService(app.store).list_presets(guild_id or app.settings.workspace.name))


@preset.command(examples="  raidctl -v preset show PRESET-0001")
@click.argument("preset_id")
@click.pass_obj
def show(app: AppContext, preset_id: str) -> None:
    """Show a preset's groups and slot labels."""
    from raidctl.services.presets import PresetService

    app.emit(PresetService(app.store).get_preset(preset_id))


@preset.command(
    examples="""\
  raidctl preset save EVT-1 "25-man progression"
  raidctl preset save EVT-1 "Farm" --description "Loose comp for farm nights\"""",
)
@click.argument("event_id")
@click.argument("name")
@click.option("--description", default=None, help="What the layout is for.")
@click.pass_obj
def save(app: AppContext, event_id: str, name: str, description: str | None) -> None:
    """Save the group layout of an event's plan; assignments are not kept."""
    from raidctl.services.plans import PlanService, plan_from_result
    from raidctl.services.presets import PresetService

    loaded = PlanService(app.store).load_plan(event_id)
    if not loaded.ok:
        app.fail(loaded)
    current = plan_from_result(loaded)
    app.emit(
        PresetService(app.store).save_preset(current.guild_id, name, description, current.groups)
    )


@preset.command(
    examples="""\
  raidctl preset edit PRESET-0001 --name "10-man farm"
  raidctl preset edit PRESET-0001 --description "" """,
)
@click.argument("preset_id")
@click.option("--name", default=None, help="New name.")
@click.option("--description", default=None, help="New description.")
@click.pass_obj
def edit(app: AppContext, preset_id: str, name: str | None, description: str | None) -> None:
    """Rename a preset or change its description."""
    from raidctl.services.presets import PresetService

    if name is None and description is None:
        click.echo("No changes specified. Use --help for options.", err=True)
        raise SystemExit(1)
    app.emit(PresetService(app.store).update_preset(preset_id, name=name, description=description))


@preset.command(examples="  raidctl preset delete PRESET-0001")
@click.argument("preset_id")
@click.pass_obj
def delete(app: AppContext, preset_id: str) -> None:
    """Delete a preset."""
    from raidctl.services.presets import PresetService

    app.emit(PresetService(app.store).delete_preset(preset_id))
