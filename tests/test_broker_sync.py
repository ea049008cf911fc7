"""
Tests for the Tinkoff client and brokerage balance sync.
"""

import asyncio
import json
import threading
from decimal import Decimal

import httpx
import pytest

import services.broker_service as broker_module
from integrations.tinkoff_client import TinkoffClient
from services.broker_service import quotation_to_decimal, rub_cash
from utils.errors import ExternalServiceError, ValidationError

POSITIONS = {
    "money": [
        {"currency": "rub", "units": "1500", "nano": 500000000},
        {"currency": "usd", "units": "10", "nano": 0},
        {"currency": "RUB", "units": "20", "nano": 0},
    ]
}


class FakeTinkoff:
    """Stands in for TinkoffClient; records the token it was built with."""

    def __init__(self, token, accounts=None, positions=None, fail_accounts=False, fail_positions=()):
        self.token = token
        self.accounts = accounts or []
        self.positions = positions or {}
        self.fail_accounts = fail_accounts
        self.fail_positions = fail_positions
        self.closed = False

    async def get_accounts(self):
        if self.fail_accounts:
            raise ExternalServiceError("gateway down")
        return self.accounts

    async def get_positions(self, account_id):
        if account_id in self.fail_positions:
            raise ExternalServiceError("positions unavailable")
        return self.positions.get(account_id, {"money": []})

    async def get_portfolio(self, account_id):
        return {"totalAmountPortfolio": {"currency": "rub", "units": "42", "nano": 0}}

    async def aclose(self):
        self.closed = True


def use_fake(ctx, **kwargs):
    built = []

    def factory(token):
        client = FakeTinkoff(token, **kwargs)
        built.append(client)
        return client

    ctx.broker.client_factory = factory
    return built


@pytest.fixture(autouse=True)
def no_env_token(monkeypatch):
    monkeypatch.setattr(broker_module, "TINKOFF_TOKEN", "")


class TestMoneyValues:

    def test_quotation(self):
        assert quotation_to_decimal({"units": "12", "nano": 340000000}) == Decimal("12.34")
        assert quotation_to_decimal({"units": "-3", "nano": -500000000}) == Decimal("-3.5")

    def test_nested_value_shape(self):
        assert quotation_to_decimal({"value": {"units": "7", "nano": 250000000}}) == Decimal("7.25")
        assert quotation_to_decimal(None) == 0

    def test_malformed_units(self):
        with pytest.raises(ExternalServiceError):
            quotation_to_decimal({"units": "lots", "nano": 0})

    def test_rub_cash_ignores_other_currencies(self):
        assert rub_cash(POSITIONS) == Decimal("1520.5")


class TestSync:

    def test_no_credential(self, ctx):
        built = use_fake(ctx)
        result = asyncio.run(ctx.broker.sync())
        assert result.status == "no_credential"
        assert built == []

    def test_env_token_fallback(self, ctx, monkeypatch):
        monkeypatch.setattr(broker_module, "TINKOFF_TOKEN", "env-token")
        built = use_fake(ctx)
        result = asyncio.run(ctx.broker.sync())
        assert result.status == "ok"
        assert built[0].token == "env-token"

    def test_saved_token_wins(self, ctx, monkeypatch):
        monkeypatch.setattr(broker_module, "TINKOFF_TOKEN", "env-token")
        ctx.settings.set_token("saved-token")
        built = use_fake(ctx)
        asyncio.run(ctx.broker.sync())
        assert built[0].token == "saved-token"
        assert built[0].closed

    def test_mirrors_rub_cash(self, ctx):
        ctx.settings.set_token("t")
        use_fake(ctx, accounts=[{"id": "2000", "name": "Brokerage"}], positions={"2000": POSITIONS})

        result = asyncio.run(ctx.broker.sync())
        (account,) = result.accounts
        assert result.status == "ok"
        assert account.type == "broker"
        assert account.external_id == "tinkoff:2000"
        assert account.balance == Decimal("1521")  # 1520.5 rounded half up

    def test_second_sync_updates_in_place(self, ctx):
        ctx.settings.set_token("t")
        use_fake(ctx, accounts=[{"id": "2000", "name": "Brokerage"}], positions={"2000": POSITIONS})
        asyncio.run(ctx.broker.sync())
        use_fake(
            ctx,
            accounts=[{"id": "2000", "name": "Renamed"}],
            positions={"2000": {"money": [{"currency": "rub", "units": "10", "nano": 0}]}},
        )
        asyncio.run(ctx.broker.sync())

        brokers = [a for a in ctx.accounts.list_accounts() if a.type == "broker"]
        assert len(brokers) == 1
        assert brokers[0].name == "Renamed"
        assert brokers[0].balance == Decimal("10")

    def test_failing_account_is_skipped(self, ctx):
        ctx.settings.set_token("t")
        use_fake(
            ctx,
            accounts=[{"id": "1", "name": "Bad"}, {"id": "2", "name": "Good"}],
            positions={"2": POSITIONS},
            fail_positions=("1",),
        )
        result = asyncio.run(ctx.broker.sync())
        assert result.status == "ok"
        assert [a.external_id for a in result.accounts] == ["tinkoff:2"]

    def test_listing_failure_is_reported(self, ctx):
        ctx.settings.set_token("t")
        use_fake(ctx, fail_accounts=True)
        result = asyncio.run(ctx.broker.sync())
        assert result.status == "error"
        assert "gateway down" in result.error

    def test_malformed_money_skips_only_that_account(self, ctx):
        ctx.settings.set_token("t")
        use_fake(
            ctx,
            accounts=[{"id": "1", "name": "Bad"}, {"id": "2", "name": "Good"}],
            positions={
                "1": {"money": [{"currency": "rub", "units": "n/a", "nano": 0}]},
                "2": POSITIONS,
            },
        )
        result = asyncio.run(ctx.broker.sync())
        assert result.status == "ok"
        assert [a.external_id for a in result.accounts] == ["tinkoff:2"]

    def test_store_writes_run_off_the_event_loop(self, ctx, monkeypatch):
        ctx.settings.set_token("t")
        use_fake(ctx, accounts=[{"id": "2000", "name": "Brokerage"}], positions={"2000": POSITIONS})
        seen = []
        upsert = ctx.broker.accounts.upsert_external

        def tracked(account):
            seen.append(threading.get_ident())
            return upsert(account)

        monkeypatch.setattr(ctx.broker.accounts, "upsert_external", tracked)
        asyncio.run(ctx.broker.sync())
        assert len(seen) == 1
        assert threading.get_ident() not in seen

    def test_pass_through_requires_token(self, ctx):
        use_fake(ctx)
        with pytest.raises(ValidationError):
            asyncio.run(ctx.broker.get_accounts())


class TestTinkoffClient:

    def test_posts_json_with_bearer_token(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["path"] = request.url.path
            seen["auth"] = request.headers["Authorization"]
            seen["body"] = json.loads(request.content)
            return httpx.Response(200, json={"accounts": [{"id": "1"}]})

        async def run():
            async with TinkoffClient("secret", base_url="https://gw.test/api", transport=httpx.MockTransport(handler)) as client:
                return await client.get_accounts()

        assert asyncio.run(run()) == [{"id": "1"}]
        assert seen["path"] == "/api/tinkoff.public.invest.api.contract.v1.UsersService/GetAccounts"
        assert seen["auth"] == "Bearer secret"
        assert seen["body"] == {}

    def test_http_error_becomes_external_service_error(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(401, json={"message": "unauthenticated"})

        async def run():
            async with TinkoffClient("bad", base_url="https://gw.test", transport=httpx.MockTransport(handler)) as client:
                await client.get_positions("1")

        with pytest.raises(ExternalServiceError):
            asyncio.run(run())
