"""
Film Ledger — Command and Result Schemas
========================================

What:  Typed inputs and outputs of the service operations.
Who:   The request layer builds commands and serializes results; this
       package never touches the wire format itself.
"""

from typing import List, Optional

from pydantic import BaseModel, Field

from film_ledger.schemas.records import LikeEventRecord, UserRecord


# ══════════════════════════════════════════════════════════════════════════
# Commands
# ══════════════════════════════════════════════════════════════════════════


class FavorCommand(BaseModel):
    """
    What:  "Collect user preference" command: free-text favor tags plus one
           liked movie.
    `type` keeps the field name the clients already send; it is a
    whitespace-separated list of tags ("action drama").
    """
    user_id: int = Field(alias="id")
    type: str = Field(default="", description="Whitespace-separated favor tags")
    movie_id: Optional[int] = Field(default=None, alias="movieId")

    model_config = {"populate_by_name": True}

    @property
    def tags(self) -> List[str]:
        return self.type.split()


# ══════════════════════════════════════════════════════════════════════════
# Results
# ══════════════════════════════════════════════════════════════════════════


class UserPreferences(BaseModel):
    """Decoded favor tags and liked movie ids of one user."""
    user_id: int
    favor_tags: List[str] = Field(default_factory=list)
    # Exact stored tokens; "12" and "012" are different ids
    liked_movie_ids: List[str] = Field(default_factory=list)


class EngagementTotals(BaseModel):
    """Sums over every review and words row a user owns."""
    user_id: int
    review_like_total: int = 0
    review_count_total: int = 0
    words_like_total: int = 0


class CounterSnapshot(BaseModel):
    """Counters written back for one user by a reconcile step."""
    user_id: int
    review_count: int
    words_count: int


class ReconcileFailure(BaseModel):
    user_id: int
    error: str = Field(description="Exception class name")
    message: str = ""


class ReconcileReport(BaseModel):
    """
    Outcome of a reconcile pass. A pass never raises; failed users are
    listed here (and logged) instead.
    """
    pass_id: str
    updated: List[CounterSnapshot] = Field(default_factory=list)
    failed: List[ReconcileFailure] = Field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failed

    def merge(self, other: "ReconcileReport") -> "ReconcileReport":
        return ReconcileReport(
            pass_id=self.pass_id,
            updated=self.updated + other.updated,
            failed=self.failed + other.failed,
        )


class UnreadNotifications(BaseModel):
    """Unread like notifications for one receiver."""
    count: int
    entries: List[LikeEventRecord] = Field(default_factory=list)


class UserPage(BaseModel):
    """One page of the user directory; counters may predate reconciliation."""
    count: int = Field(description="Total number of users")
    users: List[UserRecord] = Field(default_factory=list)
