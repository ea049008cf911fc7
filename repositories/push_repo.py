"""
repositories/push_repo.py
-------------------------
PostgreSQL data access for Web Push subscriptions.
"""

from db.connection import transaction
from models.push_subscription import PushSubscription
from repositories.interfaces import PushSubscriptionRepository
from utils.logger import get_logger

logger = get_logger(__name__)


class PostgresPushSubscriptionRepository(PushSubscriptionRepository):
    """Repository for the push_subscriptions table."""

    def save(self, subscription: PushSubscription) -> PushSubscription:
        sql = """
            INSERT INTO push_subscriptions (endpoint, p256dh, auth)
            VALUES (%s, %s, %s)
            ON CONFLICT (endpoint)
            DO UPDATE SET p256dh = EXCLUDED.p256dh, auth = EXCLUDED.auth
            RETURNING created_at;
        """
        with transaction("save push subscription") as cur:
            cur.execute(sql, (subscription.endpoint, subscription.p256dh, subscription.auth))
            subscription.created_at = cur.fetchone()["created_at"]
        return subscription

    def get_all(self) -> list[PushSubscription]:
        with transaction("list push subscriptions") as cur:
            cur.execute(
                "SELECT endpoint, p256dh, auth, created_at FROM push_subscriptions ORDER BY created_at;"
            )
            return [PushSubscription(**r) for r in cur.fetchall()]

    def delete(self, endpoint: str) -> bool:
        with transaction("delete push subscription") as cur:
            cur.execute("DELETE FROM push_subscriptions WHERE endpoint = %s;", (endpoint,))
            deleted = cur.rowcount > 0
        if deleted:
            logger.info("Removed expired push subscription.")
        return deleted
