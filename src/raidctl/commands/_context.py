"""AppContext — shared Click context for all commands.

Created once by the root CLI group and handed to subcommands via
``@click.pass_obj``. Opens the Store lazily, so ``--help`` and
``--version`` never touch the database, and owns result emission
(stdout/stderr routing plus exit codes).
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, NoReturn

import click

from raidctl.output.formatters import OutputSettings, format_result

if TYPE_CHECKING:
    from raidctl.config.settings import RaidSettings
    from raidctl.domain.outcomes import EngineResult
    from raidctl.domain.roster import Plan
    from raidctl.infrastructure.store import Store
    from raidctl.interaction.session import EditingSession
    from raidctl.services.autosave import AutosaveScheduler
    from raidctl.services.result import ServiceResult


class AppContext:
    """Shared context flowing through Click's command hierarchy."""

    def __init__(self, settings: RaidSettings) -> None:
        self.settings = settings
        self._store: Store | None = None

        from raidctl.config.logging import configure_logging

        configure_logging(verbose=settings.verbose, log_json=settings.log_json)

    @property
    def store(self) -> Store:
        """The workspace store (opened on first access)."""
        if self._store is None:
            from raidctl.infrastructure.store import Store

            self._store = Store(self.settings)
        return self._store

    def emit(self, result: ServiceResult) -> None:
        """Format and output a ServiceResult with correct exit semantics.

        * Success: stdout. Warnings go to stderr so piped output stays clean.
        * Failure: stderr, then exit code 1.
        """
        settings = OutputSettings(
            json_output=self.settings.json_output,
            quiet=self.settings.quiet,
            verbose=self.settings.verbose,
        )
        output = format_result(result, settings=settings)
        if result.ok:
            click.echo(output)
            if not settings.json_output:
                for warning in result.warnings:
                    click.echo(f"WARNING: {warning}", err=True)
        else:
            click.echo(output, err=True)
            raise SystemExit(1)

    def fail(self, result: ServiceResult) -> NoReturn:
        """Emit a failed result; never returns."""
        self.emit(result)
        raise SystemExit(1)

    # ------------------------------------------------------------------
    # Editing sessions
    # ------------------------------------------------------------------

    def open_session(self, event_id: str) -> EditingSession:
        """Load the event's plan and signups into an editing session.

        Exits with the load error when the event has no plan or its
        signup list cannot be read.
        """
        from raidctl.domain.engine import ConflictPolicy
        from raidctl.interaction.session import EditingSession
        from raidctl.services.plans import PlanService, plan_from_result
        from raidctl.services.roster import RosterService, participants_from_result

        loaded = PlanService(self.store).load_plan(event_id)
        if not loaded.ok:
            self.fail(loaded)
        signups = RosterService(self.store).list_participants(event_id)
        if not signups.ok:
            self.fail(signups)
        engine_cfg = self.settings.engine
        return EditingSession(
            plan_from_result(loaded),
            participants_from_result(signups),
            policy=ConflictPolicy(engine_cfg.conflict_policy),
            autosave=self._autosave(),
            max_strategy_length=engine_cfg.max_strategy_length,
        )

    def close_session(self, session: EditingSession, original: Plan) -> None:
        """Persist whatever the session changed; exit 1 if the save fails.

        With autosave on, pending debounced writes are flushed. With it
        off, the final plan is saved once here.
        """
        from raidctl.services.autosave import AutosaveScheduler
        from raidctl.services.plans import PlanService

        scheduler = session.autosave
        if isinstance(scheduler, AutosaveScheduler):
            saved = scheduler.close()
            if saved is None:
                saved = scheduler.last_result
        elif session.plan is not original:
            saved = PlanService(self.store).save(session.plan)
        else:
            saved = None
        if saved is not None and not saved.ok:
            self.fail(saved)

    def plan_result(
        self,
        session: EditingSession,
        result: EngineResult | None = None,
        *,
        op: str = "load_plan",
        extra: dict[str, Any] | None = None,
    ) -> ServiceResult:
        """Wrap the session's plan for display, pool and names included."""
        from raidctl.services.result import ServiceResult, from_engine

        if result is not None:
            base = from_engine(result, warnings=session.pop_notices())
        else:
            base = ServiceResult(
                ok=True,
                op=op,
                data={"plan": session.plan.to_document()},
                warnings=session.pop_notices(),
            )
        if not base.ok:
            return base
        data = {
            **base.data,
            "unassigned": [
                p.model_dump(mode="json", by_alias=True, exclude_none=True)
                for p in session.unassigned()
            ],
            "participants": {
                pid: {"username": p.username, "role": p.role}
                for pid, p in session.lookup().items()
            },
            **(extra or {}),
        }
        return base.model_copy(update={"data": data})

    def _autosave(self) -> AutosaveScheduler | None:
        cfg = self.settings.autosave
        if not cfg.enabled:
            return None
        from raidctl.services.autosave import AutosaveScheduler
        from raidctl.services.plans import PlanService

        return AutosaveScheduler(
            PlanService(self.store),
            debounce_seconds=cfg.debounce_seconds,
            sync=self.settings.sync,
        )
