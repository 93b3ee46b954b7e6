"""
Film Ledger — LikeEvent SQLAlchemy Model
========================================

What:  `likes` table, the notification ledger. One row per like action.
How:   sender/receiver/review identify the event and never change; only
       `checked` moves, and only from false to true.

Self-likes (sender_id == receiver_id) are stored like any other event and
filtered out when unread notifications are listed.

Entries are never deleted. The foreign keys carry no ON DELETE action, so the
database refuses to remove a user or review that still has ledger entries
instead of cascading into the ledger.
"""

from datetime import datetime

from sqlalchemy import Boolean, DateTime, ForeignKey, Index, Integer, text
from sqlalchemy.orm import Mapped, mapped_column

from film_ledger.database import Base
from film_ledger.models.user import utcnow


class LikeEvent(Base):
    """
    A user liking another user's review.

    Query Patterns:
        - Unread for a receiver: WHERE receiver_id = :id AND checked = false
          → idx_likes_receiver_checked
    """

    __tablename__ = "likes"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    sender_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id"), nullable=False
    )

    receiver_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id"), nullable=False
    )

    review_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("reviews.id"), nullable=False
    )

    checked: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False, server_default=text("false")
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow
    )

    __table_args__ = (
        Index("idx_likes_receiver_checked", "receiver_id", "checked"),
    )

    def __repr__(self) -> str:
        return (
            f"<LikeEvent(id={self.id}, sender_id={self.sender_id}, "
            f"receiver_id={self.receiver_id}, checked={self.checked})>"
        )
