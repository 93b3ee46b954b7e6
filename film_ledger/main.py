"""
Film Ledger — Core Assembly
===========================

What:  Builds the engine, repository and services into one LedgerCore.
How:   create_core() is the factory; LedgerCore.aclose() is the shutdown
       half (drain detached passes, stop the periodic sweep, dispose the
       engine).
Who:   The request layer creates one core per process; `python -m
       film_ledger.main` runs the periodic reconciliation worker.

Lifecycle:
    Startup:
    1. Initialize logging
    2. Validate configuration (logged, not fatal)
    3. Build engine → session factory → repository → services
    Shutdown:
    1. Stop the periodic sweep if it runs
    2. Wait for scheduled reconcile passes
    3. Dispose database engine
"""

import asyncio
import logging
import signal
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncEngine

from film_ledger import __version__
from film_ledger.config import Settings, settings as default_settings
from film_ledger.database import build_engine, build_session_factory, dispose_engine
from film_ledger.logging_setup import setup_logging
from film_ledger.repositories.base import LedgerRepository
from film_ledger.repositories.sqlalchemy_repository import SqlAlchemyLedgerRepository
from film_ledger.services import (
    CounterReconciler,
    EngagementService,
    NotificationService,
    PreferenceService,
    ProfileService,
    ReconcileScheduler,
    UserDirectory,
)

logger = logging.getLogger(__name__)


class LedgerCore:
    """Every service of the core, wired to one repository."""

    def __init__(
        self,
        repository: LedgerRepository,
        config: Settings,
        engine: Optional[AsyncEngine] = None,
    ):
        self.config = config
        self.engine = engine
        self.repository = repository

        self.preferences = PreferenceService(
            repository, optimistic_lock=config.preference_optimistic_lock
        )
        self.reconciler = CounterReconciler(
            repository,
            timeout=config.reconcile_timeout_seconds,
            concurrency=config.reconcile_concurrency,
        )
        self.scheduler = ReconcileScheduler(
            self.reconciler, max_pending=config.reconcile_max_pending_passes
        )
        self.engagement = EngagementService(repository)
        self.notifications = NotificationService(repository)
        self.directory = UserDirectory(repository, self.scheduler)
        self.profiles = ProfileService(repository)

        self._stop_event = asyncio.Event()
        self._periodic: Optional[asyncio.Task] = None

    def start_periodic_reconciliation(self) -> asyncio.Task:
        """Run the periodic sweep in the background until aclose()."""
        if self._periodic is None or self._periodic.done():
            self._stop_event.clear()
            self._periodic = asyncio.get_running_loop().create_task(
                self.scheduler.run_periodic(
                    self.config.reconcile_interval_seconds, self._stop_event
                ),
                name="reconcile-periodic",
            )
        return self._periodic

    def stop_periodic_reconciliation(self) -> None:
        self._stop_event.set()

    async def aclose(self) -> None:
        logger.info("Film Ledger core shutting down...")
        self.stop_periodic_reconciliation()
        if self._periodic is not None:
            await self._periodic
        await self.scheduler.drain()
        if self.engine is not None:
            await dispose_engine(self.engine)
        logger.info("Shutdown complete.")


def create_core(
    config: Optional[Settings] = None,
    engine: Optional[AsyncEngine] = None,
) -> LedgerCore:
    """
    Create a LedgerCore from settings.

    Args:
        config: defaults to the module-level settings singleton
        engine: reuse an existing engine (tests); built from config otherwise
    """
    config = config or default_settings
    setup_logging(config)
    logger.info("Film Ledger core %s starting up...", __version__)

    try:
        config.validate_required_for_production()
    except ValueError as e:
        logger.error("Configuration error: %s", str(e))

    engine = engine or build_engine(config=config)
    repository = SqlAlchemyLedgerRepository(build_session_factory(engine))
    return LedgerCore(repository, config, engine=engine)


async def run_worker(config: Optional[Settings] = None) -> None:
    """Periodic reconciliation worker; stops on SIGINT / SIGTERM."""
    core = create_core(config)
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, core.stop_periodic_reconciliation)
        except NotImplementedError:
            # Windows event loops have no signal handlers
            pass
    try:
        await core.start_periodic_reconciliation()
    finally:
        await core.aclose()


if __name__ == "__main__":
    asyncio.run(run_worker())
