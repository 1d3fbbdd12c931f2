"""UpgradeService — database migration with Alembic.

Databases created by ``init_database`` already carry the full schema but
no Alembic revision; ``apply`` stamps those at head instead of re-running
the baseline ``CREATE TABLE`` migration.
"""

from __future__ import annotations

import logging
from typing import Any

from alembic import command
from alembic.runtime.migration import MigrationContext
from alembic.script import ScriptDirectory
from alembic.util import CommandError
from sqlalchemy import inspect
from sqlalchemy.exc import SQLAlchemyError

from raidctl.infrastructure.database.migrations import build_config
from raidctl.services.base import BaseService
from raidctl.services.result import ServiceError, ServiceResult

logger = logging.getLogger(__name__)


class UpgradeService(BaseService):
    """Handles database schema migrations via Alembic."""

    def _db_url(self) -> str:
        return f"sqlite:///{self._store.db_path}"

    def _tables_exist(self) -> bool:
        return "plans" in inspect(self._store.engine).get_table_names()

    def check_pending(self) -> ServiceResult:
        """List pending migrations without applying."""
        op = "upgrade"
        try:
            cfg = build_config(self._db_url())
            script = ScriptDirectory.from_config(cfg)
            head = script.get_current_head()

            with self._store.read() as conn:
                current = MigrationContext.configure(conn).get_current_revision()

            pending: list[dict[str, Any]] = []
            if head is not None and current != head:
                rev = script.get_revision(head)
                while rev is not None and rev.revision != current:
                    pending.append({"revision": rev.revision, "description": rev.doc or ""})
                    if rev.down_revision is None:
                        break
                    rev = script.get_revision(str(rev.down_revision))
        except (CommandError, SQLAlchemyError, OSError) as exc:
            return ServiceResult(
                ok=False,
                op=op,
                error=ServiceError(
                    code="CHECK_FAILED", message=f"Failed to check migrations: {exc}"
                ),
            )
        return ServiceResult(
            ok=True,
            op=op,
            data={
                "pending_count": len(pending),
                "pending": pending,
                "current": current,
                "head": head,
            },
        )

    def apply(self) -> ServiceResult:
        """Bring the database to the head revision."""
        op = "upgrade"
        check = self.check_pending()
        if not check.ok:
            return check

        pending_count = check.data["pending_count"]
        if pending_count == 0:
            return ServiceResult(
                ok=True,
                op=op,
                data={
                    "applied_count": 0,
                    "current": check.data["head"],
                    "message": "Database is already up to date",
                },
            )

        stamped = False
        try:
            cfg = build_config(self._db_url())
            if check.data["current"] is None and self._tables_exist():
                command.stamp(cfg, "head")
                stamped = True
            else:
                command.upgrade(cfg, "head")
        except (CommandError, SQLAlchemyError, OSError) as exc:
            logger.warning("Migration failed: %s", exc)
            return ServiceResult(
                ok=False,
                op=op,
                error=ServiceError(code="MIGRATION_FAILED", message=f"Migration failed: {exc}"),
            )

        logger.info("Database at revision %s", check.data["head"])
        return ServiceResult(
            ok=True,
            op=op,
            data={
                "applied_count": pending_count,
                "current": check.data["head"],
                "stamped": stamped,
            },
        )

    def stamp_current(self) -> ServiceResult:
        """Stamp the DB as at current head (for freshly created DBs)."""
        op = "upgrade"
        try:
            cfg = build_config(self._db_url())
            command.stamp(cfg, "head")
            head = ScriptDirectory.from_config(cfg).get_current_head()
        except (CommandError, SQLAlchemyError, OSError) as exc:
            return ServiceResult(
                ok=False,
                op=op,
                error=ServiceError(code="STAMP_FAILED", message=f"Failed to stamp database: {exc}"),
            )
        return ServiceResult(ok=True, op=op, data={"stamped": True, "current": head})
