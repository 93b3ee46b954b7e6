"""
Film Ledger — User SQLAlchemy Model
===================================

What:  ORM model representing the `users` table.
Who:   SqlAlchemyLedgerRepository reads and writes it; services only ever
       see the UserRecord projection.

Column notes:
    - favor / movie_ids: space-delimited token sets (see film_ledger.tokens);
      NULL and "" both mean "empty".
    - review_count / words_count: cached projections of the content tables,
      refreshed by the counter reconciler with silent updates.
    - version: bumped by every non-silent write; preference writes can be
      made conditional on it.
    - updated_at: refreshed on every non-silent write only.
"""

from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import DateTime, Integer, String, Text, text
from sqlalchemy.orm import Mapped, mapped_column

from film_ledger.database import Base

DEFAULT_AVATAR = "static/images/avatar.jpg"


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class User(Base):
    """
    A registered user plus derived preference and counter state.

    Lifecycle:
        1. Created on registration (outside this package)
        2. favor / movie_ids grow through PreferenceService
        3. review_count / words_count refreshed by CounterReconciler
        4. Deleted only by explicit user removal (outside this package)
    """

    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    name: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)

    avatar: Mapped[Optional[str]] = mapped_column(
        String(255),
        nullable=True,
        default=DEFAULT_AVATAR,
    )

    cover: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)

    # ── Encoded token sets ────────────────────────────────────────────────
    favor: Mapped[Optional[str]] = mapped_column(
        Text,
        nullable=True,
        comment="Space-delimited favor tags, insertion ordered, no duplicates",
    )

    movie_ids: Mapped[Optional[str]] = mapped_column(
        Text,
        nullable=True,
        comment="Space-delimited liked movie ids, insertion ordered, no duplicates",
    )

    # ── Cached counters ───────────────────────────────────────────────────
    review_count: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        default=0,
        server_default=text("0"),
    )

    words_count: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        default=0,
        server_default=text("0"),
    )

    # ── Optimistic lock ───────────────────────────────────────────────────
    version: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        default=0,
        server_default=text("0"),
    )

    # ── Timestamps ────────────────────────────────────────────────────────
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
    )

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        onupdate=utcnow,
    )

    def __repr__(self) -> str:
        return f"<User(id={self.id}, name='{self.name}', version={self.version})>"
