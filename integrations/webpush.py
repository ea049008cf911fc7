"""
integrations/webpush.py
-----------------------
Browser Web Push delivery (VAPID) via pywebpush.
"""

import json
from typing import Optional

from pywebpush import WebPushException, webpush

from config import VAPID_PRIVATE_KEY, VAPID_PUBLIC_KEY, VAPID_SUBJECT
from models.push_subscription import PushSubscription
from utils.errors import ExternalServiceError
from utils.logger import get_logger

logger = get_logger(__name__)

# Push services answer these when a subscription has been revoked
GONE_STATUSES = (404, 410)


class SubscriptionGone(Exception):
    """The push service no longer knows this endpoint."""


class WebPushSender:

    def __init__(
        self,
        public_key: Optional[str] = None,
        private_key: Optional[str] = None,
        subject: Optional[str] = None,
    ):
        self.public_key = public_key if public_key is not None else VAPID_PUBLIC_KEY
        self.private_key = private_key if private_key is not None else VAPID_PRIVATE_KEY
        self.subject = subject or VAPID_SUBJECT

    @property
    def enabled(self) -> bool:
        return bool(self.public_key and self.private_key)

    def send(self, subscription: PushSubscription, title: str, message: str = "") -> None:
        """
        Deliver one notification. Blocking; callers run it in a worker thread.

        Raises:
            SubscriptionGone: On a 404/410 answer.
            ExternalServiceError: On any other delivery failure.
        """
        payload = json.dumps({"title": title, "body": message})
        try:
            webpush(
                subscription_info=subscription.to_webpush_info(),
                data=payload,
                vapid_private_key=self.private_key,
                vapid_claims={"sub": self.subject},
            )
        except WebPushException as e:
            status = getattr(e.response, "status_code", None)
            if status in GONE_STATUSES:
                raise SubscriptionGone(subscription.endpoint)
            raise ExternalServiceError(f"Web push failed: {e}")
