"""
integrations/tinkoff_client.py
------------------------------
Async client for the Tinkoff Invest REST gateway (gRPC-over-HTTP JSON).

Every call is a POST to
`<base>/tinkoff.public.invest.api.contract.v1.<Service>/<Method>` with a
JSON body and a Bearer token. Transport errors are retried; anything else
surfaces as ExternalServiceError.
"""

from typing import Any, Optional

import httpx
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from config import BROKER_TIMEOUT_SECONDS, TINKOFF_API_URL
from utils.errors import ExternalServiceError
from utils.logger import get_logger

logger = get_logger(__name__)

SERVICE_PREFIX = "tinkoff.public.invest.api.contract.v1."


class TinkoffClient:

    def __init__(
        self,
        token: str,
        base_url: Optional[str] = None,
        timeout: float = BROKER_TIMEOUT_SECONDS,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = (base_url or TINKOFF_API_URL).rstrip("/")
        self.client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=timeout,
            transport=transport,
            headers={
                "Authorization": f"Bearer {token}",
                "Accept": "application/json",
            },
        )

    async def __aenter__(self) -> "TinkoffClient":
        return self

    async def __aexit__(self, *exc) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self.client.aclose()

    @retry(
        retry=retry_if_exception_type(httpx.TransportError),
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=1, max=8),
        reraise=True,
    )
    async def _send(self, method: str, body: dict[str, Any]) -> httpx.Response:
        return await self.client.post(f"/{SERVICE_PREFIX}{method}", json=body)

    async def _call(self, method: str, body: dict[str, Any]) -> dict[str, Any]:
        """
        Raises:
            ExternalServiceError: Unreachable gateway or non-2xx answer.
        """
        try:
            response = await self._send(method, body)
        except httpx.HTTPError as e:
            raise ExternalServiceError(f"Tinkoff API unreachable ({method}): {e}")
        if response.status_code >= 400:
            detail = response.text[:200]
            raise ExternalServiceError(
                f"Tinkoff API {method} failed with {response.status_code}: {detail}"
            )
        try:
            return response.json()
        except ValueError:
            raise ExternalServiceError(f"Tinkoff API {method} returned invalid JSON")

    # ── UsersService ──────────────────────────────────────

    async def get_accounts(self) -> list[dict[str, Any]]:
        data = await self._call("UsersService/GetAccounts", {})
        return data.get("accounts", [])

    # ── OperationsService ─────────────────────────────────

    async def get_portfolio(self, account_id: str, currency: str = "RUB") -> dict[str, Any]:
        return await self._call(
            "OperationsService/GetPortfolio", {"accountId": account_id, "currency": currency}
        )

    async def get_positions(self, account_id: str) -> dict[str, Any]:
        return await self._call("OperationsService/GetPositions", {"accountId": account_id})
