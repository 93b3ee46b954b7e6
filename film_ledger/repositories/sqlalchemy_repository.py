"""
Film Ledger — SQLAlchemy Repository
===================================

What:  LedgerRepository over async SQLAlchemy (asyncpg in production,
       aiosqlite in tests).
How:   Every method opens its own session_scope(), so each call is one
       transaction. ORM rows are converted into pydantic records before the
       session closes.

Error translation:
    - Missing rows           → NotFoundError
    - Stale expected_version → ConflictError
    - Any SQLAlchemyError    → StorageError (original type kept in context)

Silent updates:
    SQLAlchemy only applies a column's `onupdate` when the column is absent
    from the SET clause. A silent update therefore sets
    `updated_at = users.updated_at` explicitly and leaves `version` alone.
"""

import logging
from typing import Any, Dict, List, Mapping, Optional, Tuple

from sqlalchemy import func, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from film_ledger.database import session_scope
from film_ledger.exceptions import (
    ConflictError,
    FilmLedgerError,
    NotFoundError,
    StorageError,
    ValidationError,
)
from film_ledger.models import ContentKind, LikeEvent, Review, User
from film_ledger.repositories.base import LedgerRepository
from film_ledger.schemas.records import (
    ContentRecord,
    LikeEventFilter,
    LikeEventRecord,
    UserRecord,
)

logger = logging.getLogger(__name__)

# Columns the core is allowed to write
USER_WRITABLE_FIELDS = frozenset(
    {"name", "avatar", "cover", "favor", "movie_ids", "review_count", "words_count"}
)
LIKE_EVENT_WRITABLE_FIELDS = frozenset({"checked"})


class SqlAlchemyLedgerRepository(LedgerRepository):
    """
    Args:
        session_factory: async_sessionmaker bound to the shared engine
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self._session_factory = session_factory

    # ── Users ─────────────────────────────────────────────────────────────

    async def get_user(self, user_id: int) -> UserRecord:
        try:
            async with session_scope(self._session_factory) as session:
                user = await session.get(User, user_id)
                if user is None:
                    raise NotFoundError(resource="user", resource_id=user_id)
                return UserRecord.model_validate(user)
        except SQLAlchemyError as e:
            raise self._storage_error("get_user", e, user_id=user_id)

    async def list_users(self, offset: int, limit: int) -> Tuple[int, List[UserRecord]]:
        try:
            async with session_scope(self._session_factory) as session:
                total = await session.scalar(select(func.count(User.id)))
                result = await session.execute(
                    select(User).order_by(User.id).offset(offset).limit(limit)
                )
                users = [UserRecord.model_validate(u) for u in result.scalars().all()]
                return total or 0, users
        except SQLAlchemyError as e:
            raise self._storage_error("list_users", e, offset=offset, limit=limit)

    async def update_user(
        self,
        user_id: int,
        fields: Mapping[str, Any],
        *,
        silent: bool = False,
        expected_version: Optional[int] = None,
    ) -> None:
        values = dict(fields)
        self._check_fields(values, USER_WRITABLE_FIELDS, "user")

        if silent:
            values["updated_at"] = User.updated_at
        else:
            values["version"] = User.version + 1

        stmt = (
            update(User)
            .where(User.id == user_id)
            .values(**values)
            .execution_options(synchronize_session=False)
        )
        if expected_version is not None:
            stmt = stmt.where(User.version == expected_version)

        try:
            async with session_scope(self._session_factory) as session:
                result = await session.execute(stmt)
                if result.rowcount == 0:
                    exists = await session.scalar(select(User.id).where(User.id == user_id))
                    if exists is None:
                        raise NotFoundError(resource="user", resource_id=user_id)
                    raise ConflictError(user_id=user_id, expected_version=expected_version)
        except SQLAlchemyError as e:
            raise self._storage_error("update_user", e, user_id=user_id)

    # ── Content ───────────────────────────────────────────────────────────

    async def count_content_by_user(self, user_id: int, kind: ContentKind) -> int:
        model = kind.model
        try:
            async with session_scope(self._session_factory) as session:
                count = await session.scalar(
                    select(func.count(model.id)).where(model.user_id == user_id)
                )
                return count or 0
        except SQLAlchemyError as e:
            raise self._storage_error(
                "count_content_by_user", e, user_id=user_id, kind=kind.value
            )

    async def list_content_by_user(
        self, user_id: int, kind: ContentKind
    ) -> List[ContentRecord]:
        model = kind.model
        try:
            async with session_scope(self._session_factory) as session:
                result = await session.execute(
                    select(model).where(model.user_id == user_id).order_by(model.id)
                )
                return [
                    ContentRecord(
                        id=row.id,
                        user_id=row.user_id,
                        kind=kind,
                        title=row.title,
                        like_num=row.like_num,
                        review_num=getattr(row, "review_num", 0),
                        created_at=row.created_at,
                    )
                    for row in result.scalars().all()
                ]
        except SQLAlchemyError as e:
            raise self._storage_error(
                "list_content_by_user", e, user_id=user_id, kind=kind.value
            )

    # ── Like events ───────────────────────────────────────────────────────

    async def create_like_event(self, fields: Dict[str, Any]) -> LikeEventRecord:
        content_id = fields["content_id"]
        try:
            async with session_scope(self._session_factory) as session:
                # Credit the review first; a missing review aborts the event
                credited = await session.execute(
                    update(Review)
                    .where(Review.id == content_id)
                    .values(like_num=Review.like_num + 1)
                    .execution_options(synchronize_session=False)
                )
                if credited.rowcount == 0:
                    raise NotFoundError(resource="review", resource_id=content_id)

                event = LikeEvent(
                    sender_id=fields["sender_id"],
                    receiver_id=fields["receiver_id"],
                    review_id=content_id,
                    checked=False,
                )
                session.add(event)
                await session.flush()

                row = (
                    await session.execute(self._event_query().where(LikeEvent.id == event.id))
                ).one()
                return self._to_event_record(*row)
        except SQLAlchemyError as e:
            raise self._storage_error("create_like_event", e, content_id=content_id)

    async def find_like_event(self, event_id: int) -> LikeEventRecord:
        try:
            async with session_scope(self._session_factory) as session:
                row = (
                    await session.execute(self._event_query().where(LikeEvent.id == event_id))
                ).one_or_none()
                if row is None:
                    raise NotFoundError(resource="like event", resource_id=event_id)
                return self._to_event_record(*row)
        except SQLAlchemyError as e:
            raise self._storage_error("find_like_event", e, event_id=event_id)

    async def list_like_events(self, filter: LikeEventFilter) -> List[LikeEventRecord]:
        query = self._event_query()
        if filter.receiver_id is not None:
            query = query.where(LikeEvent.receiver_id == filter.receiver_id)
        if filter.sender_id is not None:
            query = query.where(LikeEvent.sender_id == filter.sender_id)
        if filter.checked is not None:
            query = query.where(LikeEvent.checked == filter.checked)

        try:
            async with session_scope(self._session_factory) as session:
                result = await session.execute(query.order_by(LikeEvent.id))
                return [self._to_event_record(*row) for row in result.all()]
        except SQLAlchemyError as e:
            raise self._storage_error(
                "list_like_events", e, filter=filter.model_dump(exclude_none=True)
            )

    async def update_like_event(self, event_id: int, fields: Mapping[str, Any]) -> None:
        values = dict(fields)
        self._check_fields(values, LIKE_EVENT_WRITABLE_FIELDS, "like event")
        try:
            async with session_scope(self._session_factory) as session:
                result = await session.execute(
                    update(LikeEvent)
                    .where(LikeEvent.id == event_id)
                    .values(**values)
                    .execution_options(synchronize_session=False)
                )
                if result.rowcount == 0:
                    raise NotFoundError(resource="like event", resource_id=event_id)
        except SQLAlchemyError as e:
            raise self._storage_error("update_like_event", e, event_id=event_id)

    # ── Helpers ───────────────────────────────────────────────────────────

    @staticmethod
    def _event_query():
        """LikeEvent joined with the sender's name and the review's title."""
        return (
            select(LikeEvent, User.name, Review.title)
            .outerjoin(User, User.id == LikeEvent.sender_id)
            .outerjoin(Review, Review.id == LikeEvent.review_id)
        )

    @staticmethod
    def _to_event_record(
        event: LikeEvent, sender_name: Optional[str], content_title: Optional[str]
    ) -> LikeEventRecord:
        return LikeEventRecord(
            id=event.id,
            sender_id=event.sender_id,
            receiver_id=event.receiver_id,
            content_id=event.review_id,
            checked=event.checked,
            created_at=event.created_at,
            sender_name=sender_name,
            content_title=content_title,
        )

    @staticmethod
    def _check_fields(values: Dict[str, Any], allowed: frozenset, resource: str) -> None:
        unknown = set(values) - allowed
        if unknown:
            raise ValidationError(
                message=f"Cannot write {sorted(unknown)} on {resource}",
                context={"allowed": sorted(allowed)},
            )

    @staticmethod
    def _storage_error(operation: str, error: Exception, **context: Any) -> FilmLedgerError:
        logger.error("Storage error in %s: %s", operation, str(error), exc_info=True)
        return StorageError(
            context={"operation": operation, "original_error": type(error).__name__, **context},
        )
