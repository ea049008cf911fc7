"""
handlers/broker_handler.py
--------------------------
Read-through views of the Tinkoff Invest account and the manual sync trigger.
"""

from fastapi import APIRouter, Depends, Query

from context import AppContext
from handlers.envelope import get_context, ok
from utils.errors import ValidationError

router = APIRouter(prefix="/api", tags=["broker"])


def _require(account_id: str | None) -> str:
    if not account_id:
        raise ValidationError("accountId is required")
    return account_id


@router.get("/broker/accounts")
async def broker_accounts(ctx: AppContext = Depends(get_context)):
    return ok(await ctx.broker.get_accounts())


@router.get("/broker/portfolio")
async def broker_portfolio(
    account_id: str | None = Query(None, alias="accountId"),
    ctx: AppContext = Depends(get_context),
):
    return ok(await ctx.broker.get_portfolio(_require(account_id)))


@router.get("/broker/positions")
async def broker_positions(
    account_id: str | None = Query(None, alias="accountId"),
    ctx: AppContext = Depends(get_context),
):
    return ok(await ctx.broker.get_positions(_require(account_id)))


@router.post("/sync/broker")
async def sync_broker(ctx: AppContext = Depends(get_context)):
    return ok(await ctx.broker.sync())
