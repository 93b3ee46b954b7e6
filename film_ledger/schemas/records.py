"""
Film Ledger — Storage Records
=============================

What:  Pydantic projections of the ORM rows, returned by the repository.
Why:   Services never hold live ORM objects, so they can be exercised with a
       mocked repository and cannot trigger lazy loads outside a session.
How:   `model_config = {"from_attributes": True}` lets the repository call
       `UserRecord.model_validate(orm_row)`.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from film_ledger.models.content import ContentKind


class UserRecord(BaseModel):
    """A user row as seen by the services."""
    id: int
    name: str
    avatar: Optional[str] = None
    cover: Optional[str] = None
    favor: Optional[str] = Field(default=None, description="Encoded favor tags")
    movie_ids: Optional[str] = Field(default=None, description="Encoded liked movie ids")
    review_count: int = 0
    words_count: int = 0
    version: int = 0
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class ContentRecord(BaseModel):
    """A review or words row, reduced to what aggregation needs."""
    id: int
    user_id: int
    kind: ContentKind
    title: str = ""
    like_num: int = 0
    review_num: int = Field(default=0, description="Always 0 for words")
    created_at: Optional[datetime] = None


class LikeEventRecord(BaseModel):
    """
    One ledger entry, with sender and content identity denormalized for
    display (sender_name, content_title may be None if the join found
    nothing).
    """
    id: int
    sender_id: int
    receiver_id: int
    content_id: int = Field(description="The liked review's id")
    checked: bool = False
    created_at: Optional[datetime] = None
    sender_name: Optional[str] = None
    content_title: Optional[str] = None


class LikeEventFilter(BaseModel):
    """Criteria for LedgerRepository.list_like_events(); None means any."""
    receiver_id: Optional[int] = None
    sender_id: Optional[int] = None
    checked: Optional[bool] = None
