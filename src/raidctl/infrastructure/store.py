"""Store — repository owning the database engine and transaction boundaries.

The Store is the single dependency injected into every service. It opens
(and if needed creates) the SQLite database under the workspace root and
hands out connections through :meth:`transaction`.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from pathlib import Path
from typing import TYPE_CHECKING

from raidctl.infrastructure.database.engine import init_database

if TYPE_CHECKING:
    from collections.abc import Iterator

    from sqlalchemy import Connection
    from sqlalchemy.engine import Engine

    from raidctl.config.settings import RaidSettings

logger = logging.getLogger(__name__)


class Store:
    """Repository encapsulating database access for one workspace.

    Constructed once at CLI startup from :class:`RaidSettings`.
    Services receive the Store via their :class:`BaseService` constructor.
    """

    def __init__(self, settings: RaidSettings) -> None:
        self._settings = settings
        self._engine: Engine = init_database(settings.db_path)
        logger.debug("Opened store at %s", settings.db_path)

    @property
    def root(self) -> Path:
        """The workspace root directory."""
        return self._settings.root

    @property
    def db_path(self) -> Path:
        return self._settings.db_path

    @property
    def engine(self) -> Engine:
        """The underlying SQLAlchemy engine (for direct access when needed)."""
        return self._engine

    @property
    def settings(self) -> RaidSettings:
        return self._settings

    @contextmanager
    def transaction(self) -> Iterator[Connection]:
        """Yield a connection inside one transaction.

        Commits when the block exits normally, rolls back on any exception.

        Usage::

            with store.transaction() as conn:
                conn.execute(insert(plans).values(...))
        """
        with self._engine.begin() as conn:
            yield conn

    @contextmanager
    def read(self) -> Iterator[Connection]:
        """Yield a connection for read-only queries."""
        with self._engine.connect() as conn:
            yield conn

    def close(self) -> None:
        """Release pooled connections."""
        self._engine.dispose()
