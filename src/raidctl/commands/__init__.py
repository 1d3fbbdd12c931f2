"""Subcommand modules for raidctl.

``register_commands`` imports lazily so ``raidctl --help`` stays fast.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    import click


def register_commands(cli: click.Group) -> None:
    """Attach every command group and standalone command to the root group."""
    from raidctl.commands.plan import plan
    from raidctl.commands.preset import preset
    from raidctl.commands.roster import roster
    from raidctl.commands.upgrade import upgrade

    cli.add_command(roster)
    cli.add_command(plan)
    cli.add_command(preset)
    cli.add_command(upgrade)
