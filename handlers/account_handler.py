"""
handlers/account_handler.py
---------------------------
Accounts, their ledger, and the deposit interest panel.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query

from context import AppContext
from handlers.envelope import get_context, ok
from handlers.schemas import AccountCreate, AccountPatch, MoneyMovement, RateChange, TransactionCreate

router = APIRouter(prefix="/api", tags=["accounts"])


# ── Accounts ──────────────────────────────────────────────

@router.get("/accounts")
def list_accounts(
    include_inactive: bool = Query(False, alias="includeInactive"),
    ctx: AppContext = Depends(get_context),
):
    return ok(ctx.accounts.list_accounts(include_inactive=include_inactive))


@router.post("/accounts")
def create_account(body: AccountCreate, ctx: AppContext = Depends(get_context)):
    account = ctx.accounts.create_account(
        name=body.name,
        type=body.type,
        initial_balance=body.balance if body.balance is not None else 0,
        currency=body.currency,
        icon=body.icon,
        color=body.color,
    )
    # A deposit may be opened with its rate in one call
    if body.interest_rate is not None and account.is_deposit():
        account = ctx.interest.set_rate(account.id, body.interest_rate)
    return ok(account)


@router.get("/accounts/{account_id}")
def get_account(account_id: str, ctx: AppContext = Depends(get_context)):
    return ok(ctx.accounts.get_account(account_id))


@router.patch("/accounts/{account_id}")
def update_account(account_id: str, body: AccountPatch, ctx: AppContext = Depends(get_context)):
    return ok(ctx.accounts.update_account(account_id, body.patch()))


@router.delete("/accounts/{account_id}")
def close_account(account_id: str, ctx: AppContext = Depends(get_context)):
    return ok(ctx.accounts.close_account(account_id))


@router.post("/accounts/{account_id}/deposit")
def deposit(account_id: str, body: MoneyMovement, ctx: AppContext = Depends(get_context)):
    tx = ctx.accounts.deposit(account_id, body.amount, description=body.description or "Deposit")
    return ok({"transaction": tx.to_dict(), "account": ctx.accounts.get_account(account_id).to_dict()})


@router.post("/accounts/{account_id}/withdraw")
def withdraw(account_id: str, body: MoneyMovement, ctx: AppContext = Depends(get_context)):
    tx = ctx.accounts.withdraw(account_id, body.amount, description=body.description or "Withdrawal")
    return ok({"transaction": tx.to_dict(), "account": ctx.accounts.get_account(account_id).to_dict()})


# ── Interest ──────────────────────────────────────────────

@router.get("/accounts/{account_id}/interest")
def interest_state(account_id: str, ctx: AppContext = Depends(get_context)):
    return ok(ctx.interest.get_rate_state(account_id))


@router.post("/accounts/{account_id}/rate")
def set_rate(account_id: str, body: RateChange, ctx: AppContext = Depends(get_context)):
    return ok(ctx.interest.set_rate(account_id, body.rate))


@router.post("/accounts/{account_id}/interest/apply")
def apply_interest(account_id: str, ctx: AppContext = Depends(get_context)):
    return ok(ctx.interest.apply_interest(account_id))


# ── Transactions ──────────────────────────────────────────

@router.get("/transactions")
def list_transactions(
    account_id: Optional[str] = Query(None, alias="accountId"),
    ctx: AppContext = Depends(get_context),
):
    return ok(ctx.accounts.list_transactions(account_id=account_id))


@router.post("/transactions")
def create_transaction(body: TransactionCreate, ctx: AppContext = Depends(get_context)):
    return ok(
        ctx.accounts.record_transaction(
            account_id=body.account_id,
            amount=body.amount,
            type=body.type,
            description=body.description,
            date=body.date,
            category_id=body.category_id,
        )
    )
