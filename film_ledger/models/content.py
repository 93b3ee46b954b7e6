"""
Film Ledger — Content SQLAlchemy Models
=======================================

What:  `reviews` and `words` tables. Both belong to exactly one user and
       carry a like counter; reviews also count related interactions.
How:   ContentKind selects the model, so counting and listing code is
       written once for both kinds.

like_num / review_num are only ever incremented.
"""

import enum
from datetime import datetime
from typing import Type, Union

from sqlalchemy import DateTime, ForeignKey, Index, Integer, String, Text, text
from sqlalchemy.orm import Mapped, mapped_column

from film_ledger.database import Base
from film_ledger.models.user import utcnow


class ContentKind(str, enum.Enum):
    """The two content tables aggregated per user."""

    REVIEW = "review"
    WORDS = "words"

    @property
    def model(self) -> Type[Union["Review", "Words"]]:
        return Review if self is ContentKind.REVIEW else Words


class Review(Base):
    """A movie review written by a user."""

    __tablename__ = "reviews"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    user_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )

    title: Mapped[str] = mapped_column(String(255), nullable=False, default="")

    content: Mapped[str] = mapped_column(Text, nullable=False, default="")

    like_num: Mapped[int] = mapped_column(
        Integer, nullable=False, default=0, server_default=text("0")
    )

    # Count of favor/interaction events related to this review
    review_num: Mapped[int] = mapped_column(
        Integer, nullable=False, default=0, server_default=text("0")
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )

    __table_args__ = (Index("idx_reviews_user_id", "user_id"),)

    def __repr__(self) -> str:
        return f"<Review(id={self.id}, user_id={self.user_id}, like_num={self.like_num})>"


class Words(Base):
    """A quote ("words") posted by a user."""

    __tablename__ = "words"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    user_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )

    title: Mapped[str] = mapped_column(String(255), nullable=False, default="")

    content: Mapped[str] = mapped_column(Text, nullable=False, default="")

    like_num: Mapped[int] = mapped_column(
        Integer, nullable=False, default=0, server_default=text("0")
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )

    __table_args__ = (Index("idx_words_user_id", "user_id"),)

    def __repr__(self) -> str:
        return f"<Words(id={self.id}, user_id={self.user_id}, like_num={self.like_num})>"
