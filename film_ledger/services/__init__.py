# Services package init
"""
Film Ledger — Services Layer
============================

What:  Business logic between the request layer and the repository.
How:   Services receive a LedgerRepository in their constructor, take typed
       arguments or commands and return pydantic results.

Service Inventory:
    - PreferenceService:   favor tags and liked movie ids
    - CounterReconciler:   recompute cached review/words counters
    - EngagementService:   per-user like and review totals
    - NotificationService: like notifications, unread listing, mark-as-read
    - ReconcileScheduler:  detached and periodic reconcile passes
    - UserDirectory:       paginated user listing (schedules reconciliation)
    - ProfileService:      avatar / cover URL updates
"""

from film_ledger.services.counter_reconciler import CounterReconciler
from film_ledger.services.engagement_service import EngagementService
from film_ledger.services.notification_service import NotificationService
from film_ledger.services.preference_service import PreferenceService
from film_ledger.services.profile_service import AssetKind, ProfileService
from film_ledger.services.scheduler import ReconcileScheduler
from film_ledger.services.user_directory import UserDirectory

__all__ = [
    "AssetKind",
    "CounterReconciler",
    "EngagementService",
    "NotificationService",
    "PreferenceService",
    "ProfileService",
    "ReconcileScheduler",
    "UserDirectory",
]
