"""
Film Ledger — Reconcile Scheduler Unit Tests
============================================

What:  Tests for detached reconcile passes and the periodic sweep.
How:   The reconciler is a MagicMock with AsyncMock coroutines; no DB.

What we test:
    ✅ schedule() returns before the pass completes; drain() waits for it
    ✅ A crashing pass is logged, never raised to the scheduling caller
    ✅ Overlapping pages and passes beyond max_pending are skipped
    ✅ run_periodic() sweeps until stopped
"""

import asyncio
import logging
from unittest.mock import AsyncMock, MagicMock

import pytest

from film_ledger.schemas.ledger import ReconcileReport
from film_ledger.services.scheduler import ReconcileScheduler


def blocking_reconciler(release: asyncio.Event) -> MagicMock:
    """A reconciler whose passes wait until `release` is set."""
    reconciler = MagicMock()

    async def reconcile_all(users):
        await release.wait()
        return ReconcileReport(pass_id="p1")

    reconciler.reconcile_all = AsyncMock(side_effect=reconcile_all)
    return reconciler


class TestSchedule:
    """Tests for schedule(), drain() and cancel_all()."""

    @pytest.mark.asyncio
    async def test_schedule_is_detached(self):
        """The pass runs in the background until drained."""
        release = asyncio.Event()
        scheduler = ReconcileScheduler(blocking_reconciler(release))

        task = scheduler.schedule([1, 2])
        await asyncio.sleep(0)

        assert not task.done()
        assert scheduler.pending == 1

        release.set()
        await scheduler.drain()

        assert task.result().pass_id == "p1"
        assert scheduler.pending == 0

    @pytest.mark.asyncio
    async def test_crash_is_logged_not_raised(self, caplog):
        """A crashing pass is reported through the log only."""
        reconciler = MagicMock()
        reconciler.reconcile_all = AsyncMock(side_effect=RuntimeError("boom"))
        scheduler = ReconcileScheduler(reconciler)

        with caplog.at_level(logging.ERROR, logger="film_ledger.services.scheduler"):
            scheduler.schedule([1])
            await scheduler.drain()

        assert scheduler.pending == 0
        assert "crashed" in caplog.text

    @pytest.mark.asyncio
    async def test_cancel_all(self):
        """Pending passes are cancelled and forgotten."""
        reconciler = MagicMock()

        async def hang(users):
            await asyncio.sleep(10)

        reconciler.reconcile_all = AsyncMock(side_effect=hang)
        scheduler = ReconcileScheduler(reconciler)

        task = scheduler.schedule([1])
        await asyncio.sleep(0)
        await scheduler.cancel_all()

        assert task.cancelled()
        assert scheduler.pending == 0


class TestBackpressure:
    """Tests for skipping passes while others are in flight."""

    @pytest.mark.asyncio
    async def test_overlapping_page_is_skipped(self, make_user):
        """Users already being reconciled are not scheduled twice."""
        release = asyncio.Event()
        reconciler = blocking_reconciler(release)
        scheduler = ReconcileScheduler(reconciler, max_pending=4)

        first = scheduler.schedule([make_user(id=1), make_user(id=2)])
        second = scheduler.schedule([make_user(id=2), make_user(id=3)])

        assert first is not None
        assert second is None
        assert scheduler.pending == 1

        release.set()
        await scheduler.drain()
        assert reconciler.reconcile_all.await_count == 1

    @pytest.mark.asyncio
    async def test_disjoint_pages_run_side_by_side(self):
        """Pages with no common users each get a pass."""
        release = asyncio.Event()
        scheduler = ReconcileScheduler(blocking_reconciler(release), max_pending=4)

        assert scheduler.schedule([1, 2]) is not None
        assert scheduler.schedule([3, 4]) is not None
        assert scheduler.pending == 2

        release.set()
        await scheduler.drain()

    @pytest.mark.asyncio
    async def test_burst_capped_at_max_pending(self, caplog):
        """A burst of listings never exceeds max_pending passes."""
        release = asyncio.Event()
        reconciler = blocking_reconciler(release)
        scheduler = ReconcileScheduler(reconciler, max_pending=2)

        with caplog.at_level(logging.WARNING, logger="film_ledger.services.scheduler"):
            tasks = [scheduler.schedule([user_id]) for user_id in range(10)]

        assert sum(task is not None for task in tasks) == 2
        assert scheduler.pending == 2
        assert "already pending" in caplog.text

        release.set()
        await scheduler.drain()
        assert reconciler.reconcile_all.await_count == 2

    @pytest.mark.asyncio
    async def test_same_page_scheduled_again_after_finish(self):
        """Once a pass finishes its users can be scheduled again."""
        release = asyncio.Event()
        release.set()
        reconciler = blocking_reconciler(release)
        scheduler = ReconcileScheduler(reconciler, max_pending=1)

        scheduler.schedule([1])
        await scheduler.drain()

        assert scheduler.schedule([1]) is not None
        await scheduler.drain()
        assert reconciler.reconcile_all.await_count == 2


class TestRunPeriodic:
    """Tests for the periodic sweep."""

    @pytest.mark.asyncio
    async def test_run_periodic_until_stopped(self):
        """Sweeps repeat until the stop event is set."""
        stop = asyncio.Event()
        reconciler = MagicMock()
        sweeps = []

        async def reconcile_everyone():
            sweeps.append(1)
            if len(sweeps) == 3:
                stop.set()
            return ReconcileReport(pass_id=f"p{len(sweeps)}")

        reconciler.reconcile_everyone = AsyncMock(side_effect=reconcile_everyone)
        scheduler = ReconcileScheduler(reconciler)

        await asyncio.wait_for(scheduler.run_periodic(0.01, stop), timeout=2)

        assert len(sweeps) == 3
