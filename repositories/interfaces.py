"""
repositories/interfaces.py
--------------------------
Abstract repository interfaces, one per entity.

Any store (PostgreSQL, in-memory) must implement these. Every method has a
fixed signature; there are no free-form "where/data" calls, so a caller
cannot patch a field the interface does not name.
"""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Any, Callable, Optional

from models import (
    Account,
    Category,
    Goal,
    PushSubscription,
    RateBucket,
    Reminder,
    Settings,
    Transaction,
)

# Fields a caller may patch through update_details()
ACCOUNT_DETAIL_FIELDS = ("name", "currency", "icon", "color", "is_active")
GOAL_DETAIL_FIELDS = (
    "name", "description", "target_amount", "target_date", "icon", "color", "is_active",
)
REMINDER_DETAIL_FIELDS = (
    "title", "message", "type", "frequency", "next_date", "is_active", "goal_id",
)
SETTINGS_FIELDS = ("broker_token", "currency", "language", "theme")

# Computes the new bucket list from the account as it stands inside the write.
# Ledger rebuckets may also amend the transaction, or return None to cancel it.
RateRebucket = Callable[[Account], list[RateBucket]]
LedgerRebucket = Callable[[Account, Transaction], Optional[list[RateBucket]]]


def check_fields(fields: dict[str, Any], allowed: tuple[str, ...]) -> None:
    """Guard against programming errors; services validate user input first."""
    unknown = set(fields) - set(allowed)
    if unknown:
        raise ValueError(f"Cannot update fields: {', '.join(sorted(unknown))}")


class AccountRepository(ABC):

    @abstractmethod
    def add(self, account: Account) -> Account:
        """Persist a new account; populates `id` and `created_at`."""

    @abstractmethod
    def get(self, account_id: str) -> Optional[Account]:
        """Fetch one account or None."""

    @abstractmethod
    def get_all(self, include_inactive: bool = False) -> list[Account]:
        """Accounts ordered by creation, newest first."""

    @abstractmethod
    def update_details(self, account_id: str, fields: dict[str, Any]) -> Optional[Account]:
        """Patch descriptive fields (see ACCOUNT_DETAIL_FIELDS). None if missing."""

    @abstractmethod
    def set_rate_state(
        self, account_id: str, interest_rate: Optional[Any], rebucket: RateRebucket
    ) -> Optional[Account]:
        """
        Replace the current rate, and the bucket list with `rebucket(account)`.
        The account is read and written under one lock. None if missing.
        """

    @abstractmethod
    def get_by_external_id(self, external_id: str) -> Optional[Account]:
        """Find a mirrored account by its '<source>:<remote id>' key."""

    @abstractmethod
    def upsert_external(self, account: Account) -> Account:
        """
        Insert a mirrored account, or refresh name and balance of the one
        already stored under `account.external_id`.
        """


class TransactionRepository(ABC):

    @abstractmethod
    def record(
        self, tx: Transaction, rebucket: Optional[LedgerRebucket] = None
    ) -> Optional[Transaction]:
        """
        Insert the transaction and add its signed amount to the account
        balance as one atomic unit.

        The account is locked for the whole unit. When `rebucket` is given it
        is called with the locked account and the transaction; the bucket
        list it returns is written in the same unit. If it returns None,
        nothing is written and None is returned.

        Raises:
            NotFoundError: If the account does not exist (nothing is written).
        """

    @abstractmethod
    def get(self, tx_id: str) -> Optional[Transaction]:
        """Fetch one transaction or None."""

    @abstractmethod
    def get_all(self, account_id: Optional[str] = None) -> list[Transaction]:
        """Transactions ordered by date, newest first."""

    @abstractmethod
    def monthly_totals(self, since: datetime) -> list[dict]:
        """
        Income and expense magnitudes per calendar month from `since` on.

        Returns:
            [{'year': int, 'month': int, 'income': Decimal, 'expense': Decimal}, ...]
        """


class GoalRepository(ABC):

    @abstractmethod
    def add(self, goal: Goal) -> Goal:
        """Persist a new goal; populates `id` and `created_at`."""

    @abstractmethod
    def get(self, goal_id: str) -> Optional[Goal]:
        """Fetch one goal or None."""

    @abstractmethod
    def get_all(self, include_inactive: bool = False) -> list[Goal]:
        """Goals ordered by creation, newest first."""

    @abstractmethod
    def update_details(self, goal_id: str, fields: dict[str, Any]) -> Optional[Goal]:
        """Patch fields in GOAL_DETAIL_FIELDS without re-checking completion."""

    @abstractmethod
    def add_contribution(self, goal_id: str, tx: Transaction) -> Goal:
        """
        Atomically record the (negative) expense `tx` on its account, debit
        the account balance, credit the goal by |tx.amount| and mark it
        completed once the target is reached.

        Raises:
            NotFoundError: If the goal or the account does not exist.
        """


class ReminderRepository(ABC):

    @abstractmethod
    def add(self, reminder: Reminder) -> Reminder: ...

    @abstractmethod
    def get(self, reminder_id: str) -> Optional[Reminder]: ...

    @abstractmethod
    def get_all(self, active_only: bool = False) -> list[Reminder]:
        """Reminders ordered by next_date, soonest first."""

    @abstractmethod
    def get_due(self, now: datetime) -> list[Reminder]:
        """Active reminders with next_date <= now."""

    @abstractmethod
    def update_details(self, reminder_id: str, fields: dict[str, Any]) -> Optional[Reminder]: ...

    @abstractmethod
    def advance(self, reminder_id: str, next_date: datetime) -> None: ...

    @abstractmethod
    def deactivate(self, reminder_id: str) -> None: ...

    @abstractmethod
    def delete(self, reminder_id: str) -> bool: ...


class CategoryRepository(ABC):

    @abstractmethod
    def ensure(self, category: Category) -> Category:
        """Insert unless a category with the same name exists; return the stored one."""

    @abstractmethod
    def get_all(self, active_only: bool = True, category_type: Optional[str] = None) -> list[Category]: ...


class SettingsRepository(ABC):

    @abstractmethod
    def get(self) -> Settings:
        """Return the singleton, creating it with defaults on first access."""

    @abstractmethod
    def update(self, fields: dict[str, Any]) -> Settings: ...


class PushSubscriptionRepository(ABC):

    @abstractmethod
    def save(self, subscription: PushSubscription) -> PushSubscription:
        """Insert or refresh the keys of an endpoint."""

    @abstractmethod
    def get_all(self) -> list[PushSubscription]: ...

    @abstractmethod
    def delete(self, endpoint: str) -> bool: ...
