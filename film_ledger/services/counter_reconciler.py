"""
Film Ledger — Counter Reconciler
================================

What:  Keeps users.review_count / users.words_count in line with the review
       and words tables.
How:   For each user: count both content kinds, then write the counts back
       with a silent update (no updated_at or version bump; this is a cache
       refresh, not a user action).
Who:   ReconcileScheduler (detached pass per user listing, periodic sweep).

Failure model:
    A pass is best-effort. Every user is reconciled independently under a
    semaphore (reconcile_concurrency) and a timeout
    (reconcile_timeout_seconds). A storage error, a missing user or a
    timeout is logged and recorded in the report; the remaining users are
    still reconciled and the pass itself never raises. There is no retry:
    the next pass recomputes from scratch, which is safe because the write
    is idempotent.
"""

import asyncio
import logging
from typing import Any, Iterable, Optional

from film_ledger.config import settings
from film_ledger.logging_setup import new_pass_id, pass_id_var
from film_ledger.models.content import ContentKind
from film_ledger.repositories.base import LedgerRepository
from film_ledger.schemas.ledger import CounterSnapshot, ReconcileFailure, ReconcileReport

logger = logging.getLogger(__name__)


def user_id_of(user: Any) -> int:
    """Accept UserRecord-like objects or bare ids."""
    return getattr(user, "id", user)


class CounterReconciler:
    """Recomputes cached per-user content counters from the content tables."""

    def __init__(
        self,
        repository: LedgerRepository,
        timeout: Optional[float] = None,
        concurrency: Optional[int] = None,
    ):
        self.repository = repository
        self.timeout = timeout if timeout is not None else settings.reconcile_timeout_seconds
        self.concurrency = concurrency or settings.reconcile_concurrency

    async def reconcile_user(self, user_id: int) -> CounterSnapshot:
        """
        Count and write back one user's counters.

        Raises whatever the repository raises (NotFoundError for an unknown
        user, StorageError); reconcile_all() is the tolerant entry point.
        """
        review_count = await self.repository.count_content_by_user(user_id, ContentKind.REVIEW)
        words_count = await self.repository.count_content_by_user(user_id, ContentKind.WORDS)
        await self.repository.update_user(
            user_id,
            {"review_count": review_count, "words_count": words_count},
            silent=True,
        )
        return CounterSnapshot(
            user_id=user_id, review_count=review_count, words_count=words_count
        )

    async def reconcile_all(self, page_of_users: Iterable[Any]) -> ReconcileReport:
        """
        Reconcile every user in the page; never raises for per-user failures.

        Args:
            page_of_users: UserRecords or user ids

        Returns:
            ReconcileReport listing refreshed counters and failed users
        """
        pass_id = new_pass_id()
        token = pass_id_var.set(pass_id)
        try:
            user_ids = [user_id_of(u) for u in page_of_users]
            semaphore = asyncio.Semaphore(self.concurrency)
            report = ReconcileReport(pass_id=pass_id)

            async def run_one(user_id: int) -> None:
                async with semaphore:
                    try:
                        snapshot = await asyncio.wait_for(
                            self.reconcile_user(user_id), timeout=self.timeout
                        )
                    except asyncio.TimeoutError:
                        logger.warning(
                            "Reconcile of user %s timed out after %.1fs; skipped",
                            user_id,
                            self.timeout,
                        )
                        report.failed.append(
                            ReconcileFailure(
                                user_id=user_id,
                                error="TimeoutError",
                                message=f"timed out after {self.timeout}s",
                            )
                        )
                    except Exception as e:
                        logger.warning(
                            "Reconcile of user %s failed: %s", user_id, str(e), exc_info=True
                        )
                        report.failed.append(
                            ReconcileFailure(
                                user_id=user_id,
                                error=type(e).__name__,
                                message=str(e),
                            )
                        )
                    else:
                        report.updated.append(snapshot)

            await asyncio.gather(*(run_one(user_id) for user_id in user_ids))

            # Deterministic order regardless of completion order
            report.updated.sort(key=lambda s: user_ids.index(s.user_id))
            report.failed.sort(key=lambda f: user_ids.index(f.user_id))

            log = logger.warning if report.failed else logger.info
            log(
                "Reconcile pass finished: %d updated, %d failed",
                len(report.updated),
                len(report.failed),
            )
            return report
        finally:
            pass_id_var.reset(token)

    async def reconcile_everyone(self, page_size: Optional[int] = None) -> ReconcileReport:
        """
        Sweep all users page by page (periodic schedule).

        A failure to read a page ends the sweep early; it is logged, and the
        users reconciled so far stay in the report.
        """
        page_size = page_size or settings.reconcile_page_size
        offset = 0
        report: Optional[ReconcileReport] = None

        while True:
            try:
                total, users = await self.repository.list_users(offset, page_size)
            except Exception as e:
                logger.error("Reconcile sweep stopped at offset %d: %s", offset, str(e))
                break
            if not users:
                break

            page_report = await self.reconcile_all(users)
            report = page_report if report is None else report.merge(page_report)
            offset += len(users)
            if offset >= total:
                break

        return report or ReconcileReport(pass_id=new_pass_id())
