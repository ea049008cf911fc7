"""
services/broker_service.py
--------------------------
Mirrors brokerage cash balances from Tinkoff Invest into local accounts.
"""

import asyncio
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from typing import Any, AsyncIterator, Callable, Optional

from config import TINKOFF_TOKEN
from integrations.tinkoff_client import TinkoffClient
from models.account import Account
from repositories import Repositories
from utils.errors import ExternalServiceError, ValidationError
from utils.logger import get_logger
from utils.money import ZERO, round_units

logger = get_logger(__name__)

EXTERNAL_SOURCE = "tinkoff"
NANO = Decimal("1000000000")

ClientFactory = Callable[[str], TinkoffClient]


def quotation_to_decimal(value: Optional[dict[str, Any]]) -> Decimal:
    """
    Convert a MoneyValue/Quotation to Decimal.

    Reads `units` and `nano` at the top level, falling back to a nested
    `value` object.

    Raises:
        ExternalServiceError: `units` or `nano` is not a number.
    """
    if not value:
        return ZERO
    nested = value.get("value") if isinstance(value.get("value"), dict) else {}
    units = value.get("units", nested.get("units"))
    nano = value.get("nano", nested.get("nano"))
    try:
        return Decimal(str(units or 0)) + Decimal(str(nano or 0)) / NANO
    except InvalidOperation:
        raise ExternalServiceError(f"Malformed money value from broker: {value}")


def rub_cash(positions: dict[str, Any]) -> Decimal:
    """Sum of the RUB money entries of a GetPositions answer."""
    total = ZERO
    for money in positions.get("money", []):
        if str(money.get("currency", "")).lower() == "rub":
            total += quotation_to_decimal(money)
    return total


@dataclass
class SyncResult:
    status: str  # 'ok' | 'no_credential' | 'error'
    accounts: list[Account] = field(default_factory=list)
    error: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "status": self.status,
            "synced": len(self.accounts),
            "accounts": [a.to_dict() for a in self.accounts],
            "error": self.error,
        }


class BrokerService:
    """
    Responsibilities:
        - Resolve the broker credential (saved settings first, then env).
        - Periodic sync of RUB cash per brokerage account.
        - Pass-through reads for the REST surface.
    """

    def __init__(self, repos: Repositories, client_factory: ClientFactory = TinkoffClient):
        self.accounts = repos.accounts
        self.settings = repos.settings
        self.client_factory = client_factory

    def token(self) -> str:
        return self.settings.get().broker_token or TINKOFF_TOKEN

    @asynccontextmanager
    async def _client(self) -> AsyncIterator[TinkoffClient]:
        token = await asyncio.to_thread(self.token)
        if not token:
            raise ValidationError("Broker token is not configured")
        client = self.client_factory(token)
        try:
            yield client
        finally:
            await client.aclose()

    async def sync(self) -> SyncResult:
        """
        Refresh every mirrored brokerage account.

        Never raises for remote failures: a missing token gives
        'no_credential', a failed account listing gives 'error', and a
        failure on one account skips just that account.
        """
        if not await asyncio.to_thread(self.token):
            logger.info("Broker sync skipped: no token configured.")
            return SyncResult(status="no_credential")

        synced = []
        async with self._client() as client:
            try:
                remote_accounts = await client.get_accounts()
            except ExternalServiceError as e:
                logger.error(f"Broker sync failed: {e.message}")
                return SyncResult(status="error", error=e.message)

            for remote in remote_accounts:
                remote_id = remote.get("id")
                if not remote_id:
                    continue
                try:
                    cash = rub_cash(await client.get_positions(remote_id))
                except ExternalServiceError as e:
                    logger.warning(f"Skipping broker account {remote_id}: {e.message}")
                    continue
                account = Account(
                    name=remote.get("name") or f"Tinkoff {remote_id}",
                    type="broker",
                    balance=round_units(cash),
                    currency="RUB",
                    external_source=EXTERNAL_SOURCE,
                    external_id=f"{EXTERNAL_SOURCE}:{remote_id}",
                )
                synced.append(await asyncio.to_thread(self.accounts.upsert_external, account))

        logger.info(f"Broker sync finished: {len(synced)} account(s) updated.")
        return SyncResult(status="ok", accounts=synced)

    async def get_accounts(self) -> list[dict[str, Any]]:
        async with self._client() as client:
            return await client.get_accounts()

    async def get_portfolio(self, account_id: str) -> dict[str, Any]:
        async with self._client() as client:
            return await client.get_portfolio(account_id)

    async def get_positions(self, account_id: str) -> dict[str, Any]:
        async with self._client() as client:
            return await client.get_positions(account_id)
