"""
services/notification_service.py
--------------------------------
Fans a notification out to every channel: the in-process history the
dashboard polls, a Telegram chat, and browser Web Push subscriptions.
"""

import asyncio
from collections import deque
from typing import Any, Optional
from uuid import uuid4

from integrations.telegram_notifier import TelegramNotifier
from integrations.webpush import SubscriptionGone, WebPushSender
from models.notification import Notification
from models.push_subscription import PushSubscription
from repositories import Repositories
from utils.clock import Clock, utcnow
from utils.errors import ValidationError
from utils.logger import get_logger

logger = get_logger(__name__)

HISTORY_SIZE = 100


class NotificationService:
    """
    Delivery is best-effort: a failing channel is logged and skipped, and
    `notify` never raises because of it.
    """

    def __init__(
        self,
        repos: Repositories,
        telegram: Optional[TelegramNotifier] = None,
        push: Optional[WebPushSender] = None,
        clock: Clock = utcnow,
    ):
        self.subscriptions = repos.push_subscriptions
        self.telegram = telegram or TelegramNotifier()
        self.push = push or WebPushSender()
        self.clock = clock
        self.history: deque[Notification] = deque(maxlen=HISTORY_SIZE)

    async def notify(self, title: str, message: str = "", kind: str = "info") -> Notification:
        notification = Notification(
            id=uuid4().hex, title=title, message=message or None, kind=kind, created_at=self.clock()
        )
        self.history.appendleft(notification)

        if self.telegram.enabled:
            try:
                await self.telegram.send(title, message)
            except Exception as e:
                logger.warning(f"Telegram notification '{title}' not delivered: {e}")

        if self.push.enabled:
            for subscription in await asyncio.to_thread(self.subscriptions.get_all):
                await self._push(subscription, title, message)
        return notification

    async def _push(self, subscription: PushSubscription, title: str, message: str) -> None:
        try:
            await asyncio.to_thread(self.push.send, subscription, title, message)
        except SubscriptionGone:
            await asyncio.to_thread(self.subscriptions.delete, subscription.endpoint)
        except Exception as e:
            logger.warning(f"Push to {subscription.endpoint[:40]}... failed: {e}")

    def recent(self) -> list[Notification]:
        """Notification history, newest first."""
        return list(self.history)

    def public_key(self) -> str:
        """VAPID application server key the browser subscribes with."""
        return self.push.public_key

    def subscribe(self, payload: dict[str, Any]) -> PushSubscription:
        """
        Store a browser PushSubscription JSON ({endpoint, keys: {p256dh, auth}}).

        Raises:
            ValidationError: If the endpoint or a key is missing.
        """
        keys = payload.get("keys") or {}
        endpoint = payload.get("endpoint")
        if not endpoint or not keys.get("p256dh") or not keys.get("auth"):
            raise ValidationError("subscription endpoint and keys (p256dh, auth) are required")
        saved = self.subscriptions.save(
            PushSubscription(endpoint=endpoint, p256dh=keys["p256dh"], auth=keys["auth"])
        )
        logger.info("Registered push subscription.")
        return saved

    async def send_test(self) -> Notification:
        return await self.notify("FinStat", "Test notification", kind="test")
