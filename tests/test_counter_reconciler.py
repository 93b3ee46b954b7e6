"""
Film Ledger — Counter Reconciler Unit Tests
===========================================

What:  Tests for counter recomputation and the partial-failure model.
How:   Mock repository with per-user side effects.

What we test:
    ✅ Counts written back with a silent update
    ✅ One failing user does not stop the others, pass does not raise
    ✅ Timeout is a per-user failure
    ✅ Idempotent re-run
    ✅ Full sweep walks every page
"""

import asyncio

import pytest

from film_ledger.exceptions import NotFoundError, StorageError
from film_ledger.models.content import ContentKind
from film_ledger.services.counter_reconciler import CounterReconciler

# user id → (reviews, words)
COUNTS = {1: (3, 1), 2: (0, 4), 3: (2, 2)}


def count_side_effect(user_id, kind):
    reviews, words = COUNTS[user_id]
    return reviews if kind is ContentKind.REVIEW else words


class TestReconcileUser:
    """Tests for reconcile_user."""

    @pytest.mark.asyncio
    async def test_writes_counts_silently(self, mock_repository):
        """Both counts are written back with a silent update."""
        mock_repository.count_content_by_user.side_effect = count_side_effect
        reconciler = CounterReconciler(mock_repository, timeout=1, concurrency=2)

        snapshot = await reconciler.reconcile_user(1)

        assert (snapshot.review_count, snapshot.words_count) == (3, 1)
        mock_repository.update_user.assert_awaited_once_with(
            1, {"review_count": 3, "words_count": 1}, silent=True
        )


class TestReconcileAll:
    """Tests for reconcile_all over one page."""

    @pytest.mark.asyncio
    async def test_every_user_updated(self, mock_repository, make_user):
        """Every user in the page gets fresh counters."""
        mock_repository.count_content_by_user.side_effect = count_side_effect
        reconciler = CounterReconciler(mock_repository, timeout=1, concurrency=2)

        report = await reconciler.reconcile_all([make_user(id=1), make_user(id=2), 3])

        assert report.ok
        assert [s.user_id for s in report.updated] == [1, 2, 3]
        assert report.updated[1].words_count == 4

    @pytest.mark.asyncio
    async def test_failed_write_isolated(self, mock_repository):
        """One failing write leaves the other users updated."""
        mock_repository.count_content_by_user.side_effect = count_side_effect

        async def update_user(user_id, fields, **kwargs):
            if user_id == 2:
                raise StorageError(context={"operation": "update_user"})

        mock_repository.update_user.side_effect = update_user
        reconciler = CounterReconciler(mock_repository, timeout=1, concurrency=3)

        report = await reconciler.reconcile_all([1, 2, 3])

        assert [s.user_id for s in report.updated] == [1, 3]
        assert [(f.user_id, f.error) for f in report.failed] == [(2, "StorageError")]
        written = {c.args[0]: c.args[1] for c in mock_repository.update_user.await_args_list}
        assert written[1] == {"review_count": 3, "words_count": 1}
        assert written[3] == {"review_count": 2, "words_count": 2}

    @pytest.mark.asyncio
    async def test_missing_user_is_a_failure_not_an_error(self, mock_repository):
        """A vanished user is reported, not raised."""
        mock_repository.count_content_by_user.return_value = 0
        mock_repository.update_user.side_effect = NotFoundError(resource="user", resource_id=9)
        reconciler = CounterReconciler(mock_repository, timeout=1)

        report = await reconciler.reconcile_all([9])

        assert report.failed[0].error == "NotFoundError"

    @pytest.mark.asyncio
    async def test_timeout_is_a_per_user_failure(self, mock_repository):
        """A slow user times out without stalling the pass."""
        async def slow_count(user_id, kind):
            if user_id == 3:
                await asyncio.sleep(1)
            return count_side_effect(user_id, kind)

        mock_repository.count_content_by_user.side_effect = slow_count
        reconciler = CounterReconciler(mock_repository, timeout=0.05, concurrency=3)

        report = await reconciler.reconcile_all([1, 2, 3])

        assert [s.user_id for s in report.updated] == [1, 2]
        assert report.failed[0].user_id == 3
        assert report.failed[0].error == "TimeoutError"

    @pytest.mark.asyncio
    async def test_rerun_is_idempotent(self, mock_repository):
        """A second pass writes the same counters."""
        mock_repository.count_content_by_user.side_effect = count_side_effect
        reconciler = CounterReconciler(mock_repository, timeout=1)

        first = await reconciler.reconcile_all([1, 2, 3])
        second = await reconciler.reconcile_all([1, 2, 3])

        assert first.updated == second.updated
        assert first.pass_id != second.pass_id

    @pytest.mark.asyncio
    async def test_empty_page(self, mock_repository):
        """An empty page is a no-op report."""
        reconciler = CounterReconciler(mock_repository, timeout=1)

        report = await reconciler.reconcile_all([])

        assert report.updated == [] and report.failed == []
        mock_repository.update_user.assert_not_awaited()


class TestReconcileEveryone:
    """Tests for the all-users sweep."""

    @pytest.mark.asyncio
    async def test_walks_all_pages(self, mock_repository, make_user):
        """Every page is read until the total is covered."""
        pages = {0: [make_user(id=1), make_user(id=2)], 2: [make_user(id=3)]}
        mock_repository.list_users.side_effect = lambda offset, limit: (3, pages[offset])
        mock_repository.count_content_by_user.side_effect = count_side_effect
        reconciler = CounterReconciler(mock_repository, timeout=1)

        report = await reconciler.reconcile_everyone(page_size=2)

        assert [s.user_id for s in report.updated] == [1, 2, 3]
        assert mock_repository.list_users.await_count == 2

    @pytest.mark.asyncio
    async def test_page_read_failure_ends_sweep(self, mock_repository):
        """A failed page read stops the sweep without raising."""
        mock_repository.list_users.side_effect = StorageError()
        reconciler = CounterReconciler(mock_repository, timeout=1)

        report = await reconciler.reconcile_everyone(page_size=2)

        assert report.updated == [] and report.failed == []
