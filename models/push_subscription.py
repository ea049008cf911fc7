"""
models/push_subscription.py
---------------------------
A browser Web Push subscription, keyed by its endpoint URL.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Optional


@dataclass
class PushSubscription:
    endpoint: str
    p256dh: str
    auth: str
    created_at: Optional[datetime] = None

    def to_webpush_info(self) -> dict:
        """Shape expected by pywebpush.webpush(subscription_info=...)."""
        return {"endpoint": self.endpoint, "keys": {"p256dh": self.p256dh, "auth": self.auth}}
