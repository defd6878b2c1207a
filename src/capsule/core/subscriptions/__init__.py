"""
Subscriptions

Usage:
    from capsule.core.subscriptions import SubscriptionStore, TargetKind

    store = SubscriptionStore(db)
    await store.subscribe(subscriber_id, "sen", TargetKind.ENTITY)
"""

from .models import Subscriber, Subscription, TargetKind
from .store import SubscriptionStore

__all__ = [
    "Subscriber",
    "Subscription",
    "TargetKind",
    "SubscriptionStore",
]
