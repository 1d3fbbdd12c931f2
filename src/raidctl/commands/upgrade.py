"""Command: bring the plan database schema up to date."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from raidctl.commands._base import RaidCommand

if TYPE_CHECKING:
    from raidctl.commands._context import AppContext


@click.command(
    cls=RaidCommand,
    examples="""\
  raidctl upgrade --check
  raidctl upgrade
  raidctl --json upgrade --check""",
)
@click.option(
    "--check",
    "check_only",
    is_flag=True,
    help="List schema revisions the plan database is missing; change nothing.",
)
@click.pass_obj
def upgrade(app: AppContext, check_only: bool) -> None:
    """Migrate the workspace's plan database to the current schema.

    A workspace created before migrations existed is stamped at the current
    revision instead of being rebuilt, so its saved plans and signups stay
    as they are.
    """
    from raidctl.services.upgrade import UpgradeService

    svc = UpgradeService(app.store)
    app.emit(svc.check_pending() if check_only else svc.apply())
