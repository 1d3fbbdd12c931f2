"""Rich Console factory and theme for raidctl output.

Consoles render into a StringIO buffer so every renderer can keep the
``render -> str`` contract. Rich drops color codes on its own when the
output is not a terminal (tests, pipes).
"""

from __future__ import annotations

from io import StringIO

from rich.console import Console
from rich.theme import Theme

RAID_THEME = Theme(
    {
        "raid.ok": "bold green",
        "raid.error": "bold red",
        "raid.warning": "bold yellow",
        "raid.op": "bold cyan",
        "raid.key": "dim",
        "raid.id": "bold blue",
        "raid.title": "bold",
        "raid.empty": "dim italic",
        "raid.selected": "reverse",
        "raid.role.tank": "blue",
        "raid.role.healer": "green",
        "raid.role.dps": "red",
    }
)

_ROLE_STYLES: dict[str, str] = {
    "tank": "raid.role.tank",
    "healer": "raid.role.healer",
    "heal": "raid.role.healer",
    "dps": "raid.role.dps",
    "damage": "raid.role.dps",
}


def create_console(*, no_color: bool = False, width: int | None = None) -> Console:
    """Create a Console that renders to a StringIO buffer."""
    return Console(
        file=StringIO(),
        theme=RAID_THEME,
        no_color=no_color,
        highlight=False,
        width=width or 120,
    )


def get_output(console: Console) -> str:
    """Extract rendered text from a StringIO-backed Console."""
    assert isinstance(console.file, StringIO)
    return console.file.getvalue()


def style_for_role(role: str | None) -> str:
    """Rich style name for a participant role (empty when unknown)."""
    if not role:
        return ""
    return _ROLE_STYLES.get(role.lower(), "")
