"""
services/account_service.py
---------------------------
Business logic for accounts and the transactions that move their balances.
"""

from datetime import date, datetime
from decimal import Decimal
from typing import Any, Optional

from config import DEFAULT_CURRENCY
from models.account import ACCOUNT_TYPES, Account, RateBucket
from models.transaction import TRANSACTION_TYPES, Transaction
from repositories import Repositories
from services.interest_service import on_deposit, on_withdraw
from utils.clock import Clock, as_datetime, utcnow
from utils.errors import NotFoundError, ValidationError
from utils.logger import get_logger
from utils.money import to_decimal

logger = get_logger(__name__)

# Fields only ledger operations may change
_LEDGER_FIELDS = ("balance", "interest_rate", "rate_buckets")


def require_text(value: Optional[str], field: str) -> str:
    """Strip a required string field or raise ValidationError."""
    if value is None or not str(value).strip():
        raise ValidationError(f"{field} is required")
    return str(value).strip()


def require_positive(value: Any, field: str = "amount") -> Decimal:
    amount = to_decimal(value, field)
    if amount <= 0:
        raise ValidationError(f"{field} must be greater than zero")
    return amount


def signed_amount(amount: Decimal, tx_type: str) -> Decimal:
    """Income is stored positive and expense negative, whatever sign the caller used."""
    return abs(amount) if tx_type == "income" else -abs(amount)


class AccountService:
    """
    Handles all business logic related to accounts and their ledger.

    Every balance change goes through a Transaction written together with
    the balance increment (`TransactionRepository.record`), so the balance
    always equals the opening balance plus the sum of the account's
    transactions.
    """

    def __init__(self, repos: Repositories, clock: Clock = utcnow):
        self.accounts = repos.accounts
        self.transactions = repos.transactions
        self.clock = clock

    # ── Accounts ──────────────────────────────────────────

    def create_account(
        self,
        name: Optional[str],
        type: Optional[str],
        initial_balance: Any = 0,
        currency: Optional[str] = None,
        icon: Optional[str] = None,
        color: Optional[str] = None,
    ) -> Account:
        """
        Open a new account.

        Raises:
            ValidationError: Missing name/type, unknown type, negative opening balance.
        """
        if not name or not str(name).strip() or not type:
            raise ValidationError("name and type are required")
        if type not in ACCOUNT_TYPES:
            raise ValidationError(f"type must be one of: {', '.join(ACCOUNT_TYPES)}")
        balance = to_decimal(initial_balance if initial_balance is not None else 0, "balance")
        if balance < 0:
            raise ValidationError("initial balance cannot be negative")

        account = Account(
            name=str(name).strip(),
            type=type,
            balance=balance,
            currency=(currency or DEFAULT_CURRENCY).upper(),
            icon=icon,
            color=color,
        )
        return self.accounts.add(account)

    def get_account(self, account_id: str) -> Account:
        account = self.accounts.get(account_id)
        if account is None:
            raise NotFoundError("Account", account_id)
        return account

    def list_accounts(self, include_inactive: bool = False) -> list[Account]:
        """Accounts newest first; closed ones only when asked for."""
        return self.accounts.get_all(include_inactive=include_inactive)

    def update_account(self, account_id: str, fields: dict[str, Any]) -> Account:
        """
        Patch descriptive fields (name, currency, icon, color, is_active).

        Balance and interest state are not patchable: they only change
        through transactions and the interest service.

        Raises:
            ValidationError: A ledger field, an unknown field, or an empty name.
            NotFoundError: Unknown account.
        """
        protected = [f for f in fields if f in _LEDGER_FIELDS]
        if protected:
            raise ValidationError(
                f"{', '.join(protected)} cannot be set directly; record a transaction instead"
            )
        allowed = ("name", "currency", "icon", "color", "is_active")
        unknown = [f for f in fields if f not in allowed]
        if unknown:
            raise ValidationError(f"Unknown account fields: {', '.join(unknown)}")

        patch = dict(fields)
        if "name" in patch:
            patch["name"] = require_text(patch["name"], "name")
        if "currency" in patch:
            patch["currency"] = require_text(patch["currency"], "currency").upper()
        if "is_active" in patch and not isinstance(patch["is_active"], bool):
            raise ValidationError("isActive must be a boolean")

        updated = self.accounts.update_details(account_id, patch)
        if updated is None:
            raise NotFoundError("Account", account_id)
        logger.info(f"Updated account #{account_id}: {', '.join(patch) or 'no changes'}")
        return updated

    def close_account(self, account_id: str) -> Account:
        """Soft-delete: the account and its history stay in the store."""
        return self.update_account(account_id, {"is_active": False})

    # ── Ledger ────────────────────────────────────────────

    def record_transaction(
        self,
        account_id: Optional[str],
        amount: Any,
        type: Optional[str],
        description: Optional[str] = None,
        date: Optional[date | datetime] = None,
        category_id: Optional[str] = None,
    ) -> Transaction:
        """
        Record income or an expense and apply it to the account balance.

        The sign is normalized by `type`: income adds |amount|, expense
        subtracts |amount|.

        Raises:
            ValidationError: Non-numeric amount, missing type or account.
            NotFoundError: Unknown account.
        """
        if not type or not account_id:
            raise ValidationError("amount(number), type and accountId are required")
        if type not in TRANSACTION_TYPES:
            raise ValidationError(f"type must be one of: {', '.join(TRANSACTION_TYPES)}")
        value = to_decimal(amount)

        tx = Transaction(
            account_id=account_id,
            type=type,
            amount=signed_amount(value, type),
            date=as_datetime(date) if date else self.clock(),
            description=(description or "").strip(),
            category_id=category_id or None,
        )
        return self.transactions.record(tx)

    def deposit(self, account_id: str, amount: Any, description: str = "Deposit") -> Transaction:
        """
        Top up an account. On deposit accounts the money also joins the
        bucket of the current interest rate, in the same write.

        Raises:
            ValidationError: Amount is not positive.
            NotFoundError: Unknown account.
        """
        value = require_positive(amount)
        now = self.clock()
        tx = Transaction(account_id=account_id, type="income", amount=value, date=now,
                         description=description)

        def allocate(account: Account, _tx: Transaction) -> list[RateBucket]:
            if not account.is_deposit():
                return account.rate_buckets
            return on_deposit(account.rate_buckets, account.interest_rate, value, now)

        return self.transactions.record(tx, allocate)

    def withdraw(self, account_id: str, amount: Any, description: str = "Withdrawal") -> Transaction:
        """
        Take money out of an account. On deposit accounts the principal is
        released from the newest buckets first, in the same write.
        """
        value = require_positive(amount)
        now = self.clock()
        tx = Transaction(account_id=account_id, type="expense", amount=-value, date=now,
                         description=description)

        def release(account: Account, _tx: Transaction) -> list[RateBucket]:
            if not account.is_deposit():
                return account.rate_buckets
            return on_withdraw(account.rate_buckets, value)

        return self.transactions.record(tx, release)

    def list_transactions(self, account_id: Optional[str] = None) -> list[Transaction]:
        """Transactions newest first, optionally for one account."""
        return self.transactions.get_all(account_id=account_id)
