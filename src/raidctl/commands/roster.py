"""Command group: event signup lists."""

from __future__ import annotations

from typing import TYPE_CHECKING, BinaryIO

import click

from raidctl.commands._base import RaidGroup

if TYPE_CHECKING:
    from raidctl.commands._context import AppContext


@click.group(
    cls=RaidGroup,
    examples="""\
  raidctl roster import EVT-1 signups.json
  cat signups.json | raidctl roster import EVT-1 -
  raidctl roster list EVT-1""",
)
@click.pass_obj
def roster(app: AppContext) -> None:
    """Import and inspect event signups."""


@roster.command(
    name="import",
    examples="""\
  raidctl roster import EVT-1 signups.json
  raidctl roster import EVT-1 -""",
)
@click.argument("event_id")
@click.argument("source", type=click.File("rb"))
@click.pass_obj
def import_cmd(app: AppContext, event_id: str, source: BinaryIO) -> None:
    """Replace the signups of an event from a JSON array.

    Each entry needs ``id``, ``userId`` and ``username``; ``role`` and
    ``spec`` are optional.
    """
    from raidctl.services.roster import RosterService

    app.emit(RosterService(app.store).import_json(event_id, source.read()))


@roster.command(name="list", examples="  raidctl roster list EVT-1")
@click.argument("event_id")
@click.pass_obj
def list_cmd(app: AppContext, event_id: str) -> None:
    """List the signups of an event in import order."""
    from raidctl.services.roster import RosterService

    app.emit(RosterService(app.store).list_participants(event_id))
