"""
Shared fixtures.

Every test runs on a fresh in-memory store with a frozen clock; no test
touches PostgreSQL, Telegram, Web Push or the Tinkoff API.
"""

import os

os.environ.setdefault("STORE_BACKEND", "memory")

from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient

from context import build_context
from db.memory import MemoryStore
from integrations.telegram_notifier import TelegramNotifier
from integrations.webpush import WebPushSender


class FrozenClock:
    """Callable clock that only moves when told to."""

    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


@pytest.fixture
def clock():
    return FrozenClock(datetime(2024, 1, 15, 12, 0, tzinfo=timezone.utc))


@pytest.fixture
def ctx(clock):
    return build_context(
        backend="memory",
        clock=clock,
        store=MemoryStore(),
        telegram=TelegramNotifier(token="", chat_id=""),
        push=WebPushSender(public_key="", private_key=""),
    )


@pytest.fixture
def client(ctx):
    from main import create_app

    with TestClient(create_app(ctx, start_jobs=False)) as test_client:
        yield test_client


@pytest.fixture
def card(ctx):
    return ctx.accounts.create_account("Main card", "card", initial_balance=1000)


@pytest.fixture
def deposit_account(ctx):
    return ctx.accounts.create_account("Savings", "deposit")
