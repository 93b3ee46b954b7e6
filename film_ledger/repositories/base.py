"""
Film Ledger — Abstract Storage Interface
========================================

What:  The narrow storage contract every service depends on.
How:   SqlAlchemyLedgerRepository implements it over async SQLAlchemy; unit
       tests substitute an AsyncMock built with `spec=LedgerRepository`.
Who:   PreferenceService, CounterReconciler, EngagementService,
       NotificationService, UserDirectory, ProfileService.

Contract (all implementations):
    - Missing rows raise NotFoundError, never return None.
    - Persistence failures raise StorageError.
    - Each call is its own unit of work; the core never holds a session or
      transaction across calls.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Mapping, Optional, Tuple

from film_ledger.models.content import ContentKind
from film_ledger.schemas.records import (
    ContentRecord,
    LikeEventFilter,
    LikeEventRecord,
    UserRecord,
)


class LedgerRepository(ABC):
    """Storage operations consumed by the preference and ledger core."""

    # ── Users ─────────────────────────────────────────────────────────────

    @abstractmethod
    async def get_user(self, user_id: int) -> UserRecord:
        """
        Raises:
            NotFoundError: no user with this id
        """

    @abstractmethod
    async def list_users(self, offset: int, limit: int) -> Tuple[int, List[UserRecord]]:
        """Return (total user count, one page of users ordered by id)."""

    @abstractmethod
    async def update_user(
        self,
        user_id: int,
        fields: Mapping[str, Any],
        *,
        silent: bool = False,
        expected_version: Optional[int] = None,
    ) -> None:
        """
        Write `fields` onto one user.

        Args:
            silent:           leave updated_at and version untouched (cache
                              refreshes such as counter reconciliation)
            expected_version: only write if the stored version still equals
                              this value

        Raises:
            NotFoundError: no user with this id
            ConflictError: expected_version given and no longer current
        """

    # ── Content ───────────────────────────────────────────────────────────

    @abstractmethod
    async def count_content_by_user(self, user_id: int, kind: ContentKind) -> int:
        """Number of `kind` rows owned by the user (0 for unknown users)."""

    @abstractmethod
    async def list_content_by_user(
        self, user_id: int, kind: ContentKind
    ) -> List[ContentRecord]:
        """Every `kind` row owned by the user, ordered by id."""

    # ── Like events ───────────────────────────────────────────────────────

    @abstractmethod
    async def create_like_event(self, fields: Dict[str, Any]) -> LikeEventRecord:
        """
        Persist a new, unchecked like event and credit the liked review.

        `fields` carries sender_id, receiver_id and content_id.

        Raises:
            NotFoundError: the liked review does not exist
        """

    @abstractmethod
    async def find_like_event(self, event_id: int) -> LikeEventRecord:
        """
        Raises:
            NotFoundError: no like event with this id
        """

    @abstractmethod
    async def list_like_events(self, filter: LikeEventFilter) -> List[LikeEventRecord]:
        """Matching events in insertion (id) order."""

    @abstractmethod
    async def update_like_event(self, event_id: int, fields: Mapping[str, Any]) -> None:
        """
        Raises:
            NotFoundError: no like event with this id
        """
