"""
Film Ledger — User Directory
============================

What:  Paginated user listing that keeps the cached counters roughly fresh.
How:   Reads one page, hands that page to the ReconcileScheduler and returns
       immediately. The response may therefore still show the counters from
       before this pass; the next listing sees the refreshed values.
"""

import logging

from film_ledger.exceptions import ValidationError
from film_ledger.repositories.base import LedgerRepository
from film_ledger.schemas.ledger import UserPage
from film_ledger.services.scheduler import ReconcileScheduler

logger = logging.getLogger(__name__)


class UserDirectory:

    def __init__(self, repository: LedgerRepository, scheduler: ReconcileScheduler):
        self.repository = repository
        self.scheduler = scheduler

    async def list_users(self, page: int = 1, limit: int = 10) -> UserPage:
        """
        One page of users (ordered by id) plus the total user count.

        Raises:
            ValidationError: page or limit below 1
        """
        if page < 1:
            raise ValidationError(message="page must be at least 1", field="page")
        if limit < 1:
            raise ValidationError(message="limit must be at least 1", field="limit")

        count, users = await self.repository.list_users((page - 1) * limit, limit)
        if users:
            self.scheduler.schedule(users)
        logger.debug("Listed page %d (%d of %d users)", page, len(users), count)
        return UserPage(count=count, users=users)
