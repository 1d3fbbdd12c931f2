"""BaseService — foundation for all raidctl services.

Every service receives a :class:`Store` at construction time and owns its
transaction boundaries via ``self._store.transaction()``.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from raidctl.infrastructure.store import Store


class BaseService:
    """Base for all service-layer classes.

    Usage::

        class PlanService(BaseService):
            def load_plan(self, event_id: str) -> ServiceResult:
                with self._store.read() as conn:
                    ...
    """

    def __init__(self, store: Store) -> None:
        self._store = store
