"""Debounced plan persistence for interactive editing sessions.

Bursts of edits collapse into a single ``save_plan`` call once the session
has been quiet for ``debounce_seconds``. Only the most recent plan is ever
written; intermediate states are dropped.

INVARIANT: A failed save never discards the edit. The plan stays pending,
subscribers are told about the failure, and the next ``schedule`` or
``flush`` retries it.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from raidctl.domain.roster import Plan
    from raidctl.services.plans import PlanService
    from raidctl.services.result import ServiceResult

logger = logging.getLogger(__name__)

FailureCallback = Callable[["ServiceResult"], None]
TimerFactory = Callable[[float, Callable[[], None]], Any]


def _default_timer(interval: float, function: Callable[[], None]) -> threading.Timer:
    timer = threading.Timer(interval, function)
    timer.daemon = True
    return timer


class AutosaveScheduler:
    """Coalesce plan saves behind a quiet-period timer.

    Parameters:
        plan_service: Gateway used for the actual ``save``.
        debounce_seconds: Quiet period before a pending plan is written.
        sync: Save immediately on every ``schedule`` (CLI one-shots, tests).
        timer_factory: Builds the timer object; it must expose ``start()``
            and ``cancel()`` like :class:`threading.Timer`.
    """

    def __init__(
        self,
        plan_service: PlanService,
        *,
        debounce_seconds: float = 1.0,
        sync: bool = False,
        timer_factory: TimerFactory = _default_timer,
    ) -> None:
        self._plans = plan_service
        self._delay = max(debounce_seconds, 0.0)
        self._sync = sync
        self._timer_factory = timer_factory
        self._lock = threading.RLock()
        self._timer: Any = None
        self._pending: Plan | None = None
        self._subscribers: list[FailureCallback] = []
        self.last_result: ServiceResult | None = None

    @property
    def pending(self) -> bool:
        """True while an unsaved plan is waiting to be written."""
        with self._lock:
            return self._pending is not None

    def subscribe(self, callback: FailureCallback) -> None:
        """Register *callback* to receive every failed save result."""
        self._subscribers.append(callback)

    def schedule(self, plan: Plan) -> None:
        """Mark *plan* as the latest state and restart the quiet period."""
        with self._lock:
            self._pending = plan
            if self._sync:
                self._write_pending()
                return
            self._cancel_timer()
            self._timer = self._timer_factory(self._delay, self._on_timer)
            self._timer.start()

    def flush(self) -> ServiceResult | None:
        """Write the pending plan now. Returns None when nothing was pending."""
        with self._lock:
            self._cancel_timer()
            if self._pending is None:
                return None
            return self._write_pending()

    def close(self) -> ServiceResult | None:
        """Final flush before the session ends."""
        return self.flush()

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    def _on_timer(self) -> None:
        with self._lock:
            self._timer = None
            if self._pending is not None:
                self._write_pending()

    def _cancel_timer(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def _write_pending(self) -> ServiceResult:
        plan = self._pending
        assert plan is not None
        result = self._plans.save(plan)
        self.last_result = result
        if result.ok:
            if self._pending is plan:
                self._pending = None
            logger.debug("Autosaved plan %s", plan.id)
            return result

        logger.warning(
            "Autosave of plan %s failed: %s",
            plan.id,
            result.error.message if result.error else "unknown error",
        )
        for callback in list(self._subscribers):
            callback(result)
        return result
