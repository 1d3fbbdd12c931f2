"""PresetService — reusable group/slot topologies per guild.

INVARIANT: Stored presets carry no participant bindings. Groups are
sanitized on every write, whatever the caller sends.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from pydantic import ValidationError
from sqlalchemy import delete, insert, select, update
from sqlalchemy.exc import SQLAlchemyError

from raidctl.domain.roster import Group, Preset, dump_groups, load_groups
from raidctl.domain.topology import slot_count, strip_bindings
from raidctl.infrastructure.database.counters import next_sequential_id
from raidctl.infrastructure.database.schema import presets
from raidctl.services._helpers import not_found, now_iso, persistence_failure
from raidctl.services.base import BaseService
from raidctl.services.result import ServiceResult

if TYPE_CHECKING:
    from collections.abc import Iterable

    from sqlalchemy import Row

logger = logging.getLogger(__name__)


def _row_to_preset(row: Row[Any]) -> Preset:
    return Preset(
        id=row.id,
        guild_id=row.guild_id,
        name=row.name,
        description=row.description,
        groups=load_groups(row.groups),
        created=row.created,
    )


def preset_from_result(result: ServiceResult) -> Preset:
    """Rebuild the Preset carried by a successful preset operation."""
    return Preset.model_validate(result.data["preset"])


class PresetService(BaseService):
    """Persistence gateway for composition presets."""

    def list_presets(self, guild_id: str) -> ServiceResult:
        """All presets for *guild_id*, newest first."""
        op = "list_presets"
        try:
            with self._store.read() as conn:
                rows = conn.execute(
                    select(presets)
                    .where(presets.c.guild_id == guild_id)
                    .order_by(presets.c.created.desc(), presets.c.id.desc())
                ).fetchall()
            items = [_row_to_preset(r) for r in rows]
        except (SQLAlchemyError, ValidationError) as exc:
            return persistence_failure(op, exc)
        return ServiceResult(
            ok=True,
            op=op,
            data={
                "count": len(items),
                "items": [
                    {
                        **p.to_document(),
                        "group_count": len(p.groups),
                        "slot_count": slot_count(p.groups),
                    }
                    for p in items
                ],
            },
        )

    def get_preset(self, preset_id: str) -> ServiceResult:
        op = "get_preset"
        try:
            with self._store.read() as conn:
                row = conn.execute(select(presets).where(presets.c.id == preset_id)).first()
            if row is None:
                return not_found(op, f"No preset found with ID: {preset_id}", preset_id=preset_id)
            preset = _row_to_preset(row)
        except (SQLAlchemyError, ValidationError) as exc:
            return persistence_failure(op, exc)
        return ServiceResult(ok=True, op=op, data={"preset": preset.to_document()})

    def save_preset(
        self,
        guild_id: str,
        name: str,
        description: str | None,
        groups: Iterable[Group],
    ) -> ServiceResult:
        """Store a new preset from a plan's current topology (bindings stripped)."""
        op = "save_preset"
        clean = strip_bindings(groups)
        now = now_iso()
        try:
            with self._store.transaction() as conn:
                preset_id = next_sequential_id(conn, "PRESET-")
                conn.execute(
                    insert(presets).values(
                        id=preset_id,
                        guild_id=guild_id,
                        name=name,
                        description=description,
                        groups=dump_groups(clean),
                        created=now,
                        modified=now,
                    )
                )
        except SQLAlchemyError as exc:
            logger.warning("Failed to save preset %r for guild %s: %s", name, guild_id, exc)
            return persistence_failure(op, exc)

        preset = Preset(
            id=preset_id,
            guild_id=guild_id,
            name=name,
            description=description,
            groups=clean,
            created=now,
        )
        logger.info("Composition preset %s created for guild %s", preset_id, guild_id)
        return ServiceResult(ok=True, op=op, data={"preset": preset.to_document()})

    def update_preset(
        self,
        preset_id: str,
        *,
        name: str | None = None,
        description: str | None = None,
        groups: Iterable[Group] | None = None,
    ) -> ServiceResult:
        """Edit a preset. Only the fields passed are changed."""
        op = "update_preset"
        values: dict[str, Any] = {"modified": now_iso()}
        if name:
            values["name"] = name
        if description is not None:
            values["description"] = description
        if groups is not None:
            values["groups"] = dump_groups(strip_bindings(groups))
        try:
            with self._store.transaction() as conn:
                updated = conn.execute(
                    update(presets).where(presets.c.id == preset_id).values(**values)
                )
                if updated.rowcount == 0:
                    return not_found(
                        op, f"No preset found with ID: {preset_id}", preset_id=preset_id
                    )
        except SQLAlchemyError as exc:
            return persistence_failure(op, exc)
        return self.get_preset(preset_id).model_copy(update={"op": op})

    def delete_preset(self, preset_id: str) -> ServiceResult:
        op = "delete_preset"
        try:
            with self._store.transaction() as conn:
                deleted = conn.execute(delete(presets).where(presets.c.id == preset_id))
                if deleted.rowcount == 0:
                    return not_found(
                        op, f"No preset found with ID: {preset_id}", preset_id=preset_id
                    )
        except SQLAlchemyError as exc:
            return persistence_failure(op, exc)
        logger.info("Preset %s deleted", preset_id)
        return ServiceResult(ok=True, op=op, data={"id": preset_id})
