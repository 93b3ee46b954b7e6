# Models package init
"""
Film Ledger — ORM Models
========================

Importing this package registers every table on Base.metadata.

Model Inventory:
    - User:      identity, encoded preferences, cached counters
    - Review:    review content with like and interaction counters
    - Words:     quote ("words") content with a like counter
    - LikeEvent: one user liking another user's review (notification ledger)
"""

from film_ledger.models.user import User
from film_ledger.models.content import ContentKind, Review, Words
from film_ledger.models.like import LikeEvent

__all__ = ["User", "ContentKind", "Review", "Words", "LikeEvent"]
