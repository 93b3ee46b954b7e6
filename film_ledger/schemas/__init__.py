# Schemas package init
"""
Film Ledger — Pydantic Schemas
==============================

    - records.py: repository return types (UserRecord, ContentRecord,
                  LikeEventRecord) and LikeEventFilter
    - ledger.py:  service commands and results
"""

from film_ledger.schemas.records import (
    ContentRecord,
    LikeEventFilter,
    LikeEventRecord,
    UserRecord,
)
from film_ledger.schemas.ledger import (
    CounterSnapshot,
    EngagementTotals,
    FavorCommand,
    ReconcileFailure,
    ReconcileReport,
    UnreadNotifications,
    UserPage,
    UserPreferences,
)

__all__ = [
    "ContentRecord",
    "LikeEventFilter",
    "LikeEventRecord",
    "UserRecord",
    "CounterSnapshot",
    "EngagementTotals",
    "FavorCommand",
    "ReconcileFailure",
    "ReconcileReport",
    "UnreadNotifications",
    "UserPage",
    "UserPreferences",
]
