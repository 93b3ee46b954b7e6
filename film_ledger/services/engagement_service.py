"""
Film Ledger — Engagement Aggregator
===================================

What:  Per-user engagement totals for detail views.
How:   Reads every review and words row the user owns and sums like_num
       (per kind) and review_num (reviews only). Read-only.
"""

import logging

from film_ledger.models.content import ContentKind
from film_ledger.repositories.base import LedgerRepository
from film_ledger.schemas.ledger import EngagementTotals

logger = logging.getLogger(__name__)


class EngagementService:

    def __init__(self, repository: LedgerRepository):
        self.repository = repository

    async def aggregate_for_user(self, user_id: int) -> EngagementTotals:
        """
        Raises:
            NotFoundError: unknown user (a user without content gets zeros)
        """
        await self.repository.get_user(user_id)

        reviews = await self.repository.list_content_by_user(user_id, ContentKind.REVIEW)
        words = await self.repository.list_content_by_user(user_id, ContentKind.WORDS)

        totals = EngagementTotals(
            user_id=user_id,
            review_like_total=sum(r.like_num for r in reviews),
            review_count_total=sum(r.review_num for r in reviews),
            words_like_total=sum(w.like_num for w in words),
        )
        logger.debug(
            "User %s engagement over %d reviews / %d words: %s",
            user_id,
            len(reviews),
            len(words),
            totals.model_dump(exclude={"user_id"}),
        )
        return totals
