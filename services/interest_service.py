"""
services/interest_service.py
----------------------------
Interest accrual for deposit accounts.

A deposit account keeps an ordered list of rate buckets: principal that
entered while a given annual rate was in effect. Interest is simple,
Actual/365, counted in whole days from each bucket's last payout, and the
total is floored to a whole currency unit.

The bucket arithmetic lives in plain functions so the account service can
reuse it when money moves; `InterestService` loads and stores the state.
"""

import copy
from dataclasses import dataclass
from datetime import datetime, timedelta
from decimal import Decimal
from typing import Optional

from models.account import Account, RateBucket
from models.transaction import Transaction
from repositories import Repositories
from utils.clock import Clock, utcnow
from utils.errors import NotFoundError, ValidationError
from utils.logger import get_logger
from utils.money import ZERO, floor_units, to_decimal

logger = get_logger(__name__)

DAYS_PER_YEAR = Decimal("365")
ONE_DAY = timedelta(days=1)


# ── Bucket arithmetic ─────────────────────────────────────

def on_deposit(
    buckets: list[RateBucket], current_rate: Optional[Decimal], amount: Decimal, now: datetime
) -> list[RateBucket]:
    """
    Allocate a deposit to the bucket of the current rate.

    The amount joins the last bucket when it carries the current rate;
    otherwise a new bucket is opened at the tail. Without a current rate
    nothing is tracked and the buckets come back unchanged.
    """
    result = copy.deepcopy(buckets)
    if current_rate is None:
        return result
    if not result or result[-1].rate != current_rate:
        result.append(RateBucket(rate=current_rate, principal=ZERO, start_date=now, last_sync=now))
    result[-1].principal += amount
    return result


def on_withdraw(buckets: list[RateBucket], amount: Decimal) -> list[RateBucket]:
    """
    Take a withdrawal out of the buckets, newest first (LIFO).

    Each bucket gives up at most its own principal. Emptied buckets are
    dropped, except the last one, which stays as the current-rate placeholder.
    """
    result = copy.deepcopy(buckets)
    remaining = amount
    for bucket in reversed(result):
        if remaining <= 0:
            break
        take = min(bucket.principal, remaining)
        bucket.principal -= take
        remaining -= take
    last = len(result) - 1
    return [b for i, b in enumerate(result) if b.principal > 0 or i == last]


def elapsed_days(since: datetime, now: datetime) -> int:
    """Whole days between two instants; partial days do not count."""
    return max(0, (now - since) // ONE_DAY)


def accrued_interest(buckets: list[RateBucket], now: datetime) -> Decimal:
    """Simple interest owed on all buckets as of `now`, floored to whole units."""
    total = ZERO
    for bucket in buckets:
        days = elapsed_days(bucket.accrual_start(), now)
        if days > 0 and bucket.principal > 0 and bucket.rate > 0:
            total += bucket.principal * bucket.rate / 100 * days / DAYS_PER_YEAR
    return floor_units(total)


def synced(buckets: list[RateBucket], now: datetime) -> list[RateBucket]:
    """Copy of the buckets with every last_sync moved to `now`."""
    result = copy.deepcopy(buckets)
    for bucket in result:
        bucket.last_sync = now
    return result


# ── Service ───────────────────────────────────────────────

@dataclass
class InterestResult:
    amount: Decimal
    account: Account
    transaction: Optional[Transaction] = None

    def to_dict(self) -> dict:
        return {
            "amount": self.amount,
            "account": self.account.to_dict(),
            "transaction": self.transaction.to_dict() if self.transaction else None,
        }


class InterestService:
    """
    Handles rate changes and interest payouts for deposit accounts.

    Responsibilities:
        - Open a new rate bucket whenever the rate is set.
        - Report interest accrued since the last payout.
        - Credit accrued interest as an income transaction.
    """

    def __init__(self, repos: Repositories, clock: Clock = utcnow):
        self.accounts = repos.accounts
        self.transactions = repos.transactions
        self.clock = clock

    def _get_account(self, account_id: str) -> Account:
        account = self.accounts.get(account_id)
        if account is None:
            raise NotFoundError("Account", account_id)
        return account

    def set_rate(self, account_id: str, new_rate) -> Account:
        """
        Set the current annual rate (percent) of a deposit account.

        Every call opens a new empty bucket, even when the rate is unchanged.
        Deposits made afterwards flow into it.

        Raises:
            ValidationError: Negative rate, or the account is not a deposit.
            NotFoundError: Unknown account.
        """
        rate = to_decimal(new_rate, "rate")
        if rate < 0:
            raise ValidationError("rate must be zero or positive")
        account = self._get_account(account_id)
        if not account.is_deposit():
            raise ValidationError("Interest rates apply to deposit accounts only")

        now = self.clock()
        opened = RateBucket(rate=rate, principal=ZERO, start_date=now, last_sync=now)
        updated = self.accounts.set_rate_state(
            account_id, rate, lambda current: current.rate_buckets + [opened]
        )
        if updated is None:
            raise NotFoundError("Account", account_id)
        logger.info(f"Set interest rate of account #{account_id} to {rate}%")
        return updated

    def compute_accrued_interest(self, account_id: str) -> Decimal:
        """Interest earned since the last payout, floored to whole units."""
        account = self._get_account(account_id)
        return accrued_interest(account.rate_buckets, self.clock())

    def apply_interest(self, account_id: str) -> InterestResult:
        """
        Credit accrued interest to the account.

        When something has accrued, the income transaction, the balance
        increment and the reset of every bucket's last_sync are written as
        one unit. Principal is not touched (no compounding). When nothing
        has accrued, nothing is written, so partial days keep accruing.
        """
        now = self.clock()
        tx = Transaction(
            account_id=account_id,
            type="income",
            amount=ZERO,
            date=now,
            description="Accrued interest",
        )

        # Measured on the locked account: each day is credited at most once
        def credit(account: Account, pending: Transaction) -> Optional[list[RateBucket]]:
            amount = accrued_interest(account.rate_buckets, now)
            if amount <= 0:
                return None
            pending.amount = amount
            return synced(account.rate_buckets, now)

        if self.transactions.record(tx, credit) is None:
            return InterestResult(amount=ZERO, account=self._get_account(account_id))
        logger.info(f"Credited {tx.amount} interest to account #{account_id}")
        return InterestResult(amount=tx.amount, account=self._get_account(account_id), transaction=tx)

    def get_rate_state(self, account_id: str) -> dict:
        """Current rate, buckets and accrued interest of one account."""
        account = self._get_account(account_id)
        return {
            "accountId": account.id,
            "interestRate": account.interest_rate,
            "rateBuckets": [b.to_dict() for b in account.rate_buckets],
            "accruedInterest": accrued_interest(account.rate_buckets, self.clock()),
        }
