"""
Film Ledger — Reconcile Scheduler
=================================

What:  Runs counter reconciliation off the caller's path.
How:   schedule() wraps a reconcile pass in a detached asyncio.Task that the
       scheduler keeps a reference to until it finishes. A done-callback is
       the pass's error channel: it logs crashes and partial failures, and
       nothing is ever raised back to whoever scheduled the pass.
       run_periodic() sweeps every user at a fixed interval until stopped.
Who:   UserDirectory (one pass per listing), create_core() / worker process
       (periodic sweep), LedgerCore.aclose() (drain on shutdown).

Backpressure:
    Every pass opens up to `reconcile_concurrency` sessions. A page whose
    users overlap a pass still in flight is not scheduled again, and at most
    `max_pending` passes run at once; further requests are skipped until one
    finishes. Skipped users are picked up by a later listing or sweep.
"""

import asyncio
import logging
from typing import Any, Dict, FrozenSet, Iterable, Optional

from film_ledger.config import settings
from film_ledger.schemas.ledger import ReconcileReport
from film_ledger.services.counter_reconciler import CounterReconciler, user_id_of

logger = logging.getLogger(__name__)


class ReconcileScheduler:
    """Owns detached reconcile passes and the periodic sweep."""

    def __init__(self, reconciler: CounterReconciler, max_pending: Optional[int] = None):
        self.reconciler = reconciler
        self.max_pending = (
            settings.reconcile_max_pending_passes if max_pending is None else max_pending
        )
        # Strong references (the event loop only keeps weak ones) mapped to
        # the user ids each pass covers
        self._tasks: Dict[asyncio.Task, FrozenSet[int]] = {}

    @property
    def pending(self) -> int:
        return len(self._tasks)

    def schedule(self, users: Iterable[Any]) -> Optional["asyncio.Task[ReconcileReport]"]:
        """
        Start a reconcile pass for `users` and return without waiting.

        Must be called from inside a running event loop.

        Returns:
            The pass task, or None when it was skipped because some of the
            users are already being reconciled or `max_pending` passes are
            in flight.
        """
        users = list(users)
        user_ids = frozenset(user_id_of(u) for u in users)

        in_flight = set()
        for pending_ids in self._tasks.values():
            in_flight |= user_ids & pending_ids
        if in_flight:
            logger.debug("Skipped reconcile pass; users %s already pending", sorted(in_flight))
            return None
        if len(self._tasks) >= self.max_pending:
            logger.warning(
                "Skipped reconcile pass for %d users; %d passes already pending",
                len(users),
                len(self._tasks),
            )
            return None

        task = asyncio.get_running_loop().create_task(
            self.reconciler.reconcile_all(users),
            name=f"reconcile-{len(users)}-users",
        )
        self._tasks[task] = user_ids
        task.add_done_callback(self._on_done)
        logger.debug("Scheduled reconcile pass for %d users", len(users))
        return task

    def _on_done(self, task: asyncio.Task) -> None:
        self._tasks.pop(task, None)
        if task.cancelled():
            logger.info("Reconcile pass %s cancelled", task.get_name())
            return

        error = task.exception()
        if error is not None:
            logger.error(
                "Reconcile pass %s crashed: %s",
                task.get_name(),
                str(error),
                exc_info=error,
            )
            return

        report = task.result()
        if report.failed:
            logger.warning(
                "Reconcile pass %s left %d users stale: %s",
                report.pass_id,
                len(report.failed),
                [f.user_id for f in report.failed],
            )

    async def drain(self) -> None:
        """Wait for every scheduled pass, including ones scheduled meanwhile."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    async def cancel_all(self) -> None:
        for task in list(self._tasks):
            task.cancel()
        await self.drain()

    async def run_periodic(
        self,
        interval_seconds: Optional[float] = None,
        stop_event: Optional[asyncio.Event] = None,
    ) -> None:
        """
        Sweep all users, wait `interval_seconds`, repeat until `stop_event`
        is set. The first sweep starts immediately.
        """
        interval = interval_seconds or settings.reconcile_interval_seconds
        stop_event = stop_event or asyncio.Event()
        logger.info("Periodic reconciliation every %.0fs", interval)

        while not stop_event.is_set():
            report = await self.reconciler.reconcile_everyone()
            logger.info(
                "Periodic sweep %s: %d updated, %d failed",
                report.pass_id,
                len(report.updated),
                len(report.failed),
            )
            try:
                await asyncio.wait_for(stop_event.wait(), timeout=interval)
            except asyncio.TimeoutError:
                continue

        logger.info("Periodic reconciliation stopped")
