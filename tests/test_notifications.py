"""
Tests for notification fan-out, push subscriptions and the stats/settings services.
"""

import asyncio
from datetime import timedelta
from decimal import Decimal

import pytest

from integrations.webpush import SubscriptionGone
from utils.errors import ExternalServiceError, ValidationError

SUBSCRIPTION = {"endpoint": "https://push.test/abc", "keys": {"p256dh": "key", "auth": "secret"}}


class FakeTelegram:
    enabled = True

    def __init__(self, fail=False):
        self.fail = fail
        self.sent = []

    async def send(self, title, message=""):
        if self.fail:
            raise ExternalServiceError("telegram down")
        self.sent.append((title, message))


class FakePush:
    enabled = True
    public_key = "public-vapid-key"

    def __init__(self, gone=()):
        self.gone = gone
        self.sent = []

    def send(self, subscription, title, message=""):
        if subscription.endpoint in self.gone:
            raise SubscriptionGone(subscription.endpoint)
        self.sent.append((subscription.endpoint, title))


class TestNotificationService:

    def test_history_newest_first(self, ctx):
        asyncio.run(ctx.notifications.notify("First"))
        asyncio.run(ctx.notifications.notify("Second", "body", kind="reminder"))
        titles = [n.title for n in ctx.notifications.recent()]
        assert titles == ["Second", "First"]

    def test_fans_out_to_telegram_and_push(self, ctx):
        ctx.notifications.telegram = FakeTelegram()
        ctx.notifications.push = FakePush()
        ctx.notifications.subscribe(SUBSCRIPTION)

        asyncio.run(ctx.notifications.notify("Rent", "Due today"))
        assert ctx.notifications.telegram.sent == [("Rent", "Due today")]
        assert ctx.notifications.push.sent == [("https://push.test/abc", "Rent")]

    def test_channel_failure_is_swallowed(self, ctx):
        ctx.notifications.telegram = FakeTelegram(fail=True)
        notification = asyncio.run(ctx.notifications.notify("Still recorded"))
        assert ctx.notifications.recent() == [notification]

    def test_gone_subscription_is_removed(self, ctx):
        ctx.notifications.push = FakePush(gone=("https://push.test/abc",))
        ctx.notifications.subscribe(SUBSCRIPTION)
        asyncio.run(ctx.notifications.send_test())
        assert ctx.repos.push_subscriptions.get_all() == []

    def test_subscribe_requires_keys(self, ctx):
        with pytest.raises(ValidationError):
            ctx.notifications.subscribe({"endpoint": "https://push.test/x", "keys": {"auth": "a"}})

    def test_resubscribe_refreshes_keys(self, ctx):
        ctx.notifications.subscribe(SUBSCRIPTION)
        ctx.notifications.subscribe({**SUBSCRIPTION, "keys": {"p256dh": "new", "auth": "new"}})
        (stored,) = ctx.repos.push_subscriptions.get_all()
        assert stored.p256dh == "new"


class TestStats:

    def test_overview(self, ctx, card):
        other = ctx.accounts.create_account("Cash", "cash", initial_balance=200)
        closed = ctx.accounts.create_account("Old", "cash", initial_balance=999)
        ctx.accounts.close_account(closed.id)
        goal = ctx.goals.create_goal("Bike", 100)
        ctx.goals.create_goal("House", 10000)
        ctx.goals.contribute(goal.id, 100, other.id)

        overview = ctx.stats.overview()
        assert overview["totalBalance"] == Decimal("1100")
        assert overview["totalSaved"] == Decimal("100")
        assert overview["activeGoals"] == 1
        assert overview["completedGoals"] == 1

    def test_monthly_includes_empty_months(self, ctx, clock, card):
        ctx.accounts.record_transaction(card.id, 300, "income", date=clock.now - timedelta(days=62))
        ctx.accounts.record_transaction(card.id, 100, "expense")
        ctx.accounts.record_transaction(card.id, 50, "income")

        months = ctx.stats.monthly(3)
        assert [m["month"] for m in months] == ["2023-11", "2023-12", "2024-01"]
        assert months[0]["income"] == Decimal("300")
        assert months[1] == {"month": "2023-12", "income": 0, "expense": 0, "net": 0}
        assert months[2]["expense"] == Decimal("100")
        assert months[2]["net"] == Decimal("-50")

    def test_monthly_range_checked(self, ctx):
        with pytest.raises(ValidationError):
            ctx.stats.monthly(0)


class TestSettings:

    def test_token_round_trip(self, ctx):
        assert ctx.settings.get_token() == ""
        ctx.settings.set_token("  abc  ")
        assert ctx.settings.get_token() == "abc"
        assert ctx.settings.get_settings().to_dict()["hasBrokerToken"] is True

    def test_update_preferences(self, ctx):
        updated = ctx.settings.update_settings({"currency": "usd", "theme": "dark"})
        assert updated.currency == "USD"
        assert updated.theme == "dark"
        with pytest.raises(ValidationError):
            ctx.settings.update_settings({"theme": "neon"})
        with pytest.raises(ValidationError):
            ctx.settings.update_settings({"broker_token": "sneaky"})

    def test_seeded_categories(self, ctx):
        income = ctx.settings.list_categories("income")
        assert {c.name for c in income} == {"Salary", "Freelance", "Gifts", "Investments"}
        assert len(ctx.settings.list_categories()) == 12
