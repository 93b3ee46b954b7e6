"""
Film Ledger — Notification Ledger
=================================

What:  Like events as notifications with a read/unread flag.
How:   record_like() appends a ledger entry; list_unread() reads the
       receiver's unchecked entries; mark_checked() flips one entry to read.
Who:   Called by the request layer on like actions and notification views.

Behaviour worth knowing:
    - record_like() does not deduplicate: liking the same review twice
      produces two entries and two unread notifications.
    - Self-likes are stored but never listed; the exclusion happens here
      at read time, not at write time.
    - mark_checked() is idempotent; an entry never goes back to unread.
"""

import logging

from film_ledger.repositories.base import LedgerRepository
from film_ledger.schemas.ledger import UnreadNotifications
from film_ledger.schemas.records import LikeEventFilter, LikeEventRecord

logger = logging.getLogger(__name__)


class NotificationService:
    """Notification ledger built on like events."""

    def __init__(self, repository: LedgerRepository):
        self.repository = repository

    async def record_like(
        self, sender_id: int, receiver_id: int, content_id: int
    ) -> LikeEventRecord:
        """
        Record that `sender_id` liked review `content_id` of `receiver_id`.

        Returns:
            The new, unchecked entry

        Raises:
            NotFoundError: the review does not exist
        """
        event = await self.repository.create_like_event(
            {
                "sender_id": sender_id,
                "receiver_id": receiver_id,
                "content_id": content_id,
            }
        )
        logger.info(
            "Like %s recorded: user %s → user %s (review %s)",
            event.id,
            sender_id,
            receiver_id,
            content_id,
        )
        return event

    async def list_unread(self, receiver_id: int) -> UnreadNotifications:
        """Unchecked entries addressed to `receiver_id`, self-likes excluded."""
        events = await self.repository.list_like_events(
            LikeEventFilter(receiver_id=receiver_id, checked=False)
        )
        entries = [e for e in events if e.sender_id != e.receiver_id]
        return UnreadNotifications(count=len(entries), entries=entries)

    async def mark_checked(self, entry_id: int) -> None:
        """
        Mark one entry as read; already-read entries are left alone.

        Raises:
            NotFoundError: unknown entry
        """
        event = await self.repository.find_like_event(entry_id)
        if event.checked:
            logger.debug("Like %s already checked", entry_id)
            return
        await self.repository.update_like_event(entry_id, {"checked": True})
        logger.info("Like %s marked as checked", entry_id)
