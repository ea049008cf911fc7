"""
repositories/memory.py
----------------------
In-memory implementations of every repository interface, backed by
`db.memory.MemoryStore`. They follow the PostgreSQL repositories'
contracts exactly (ordering, atomic ledger writes, NotFoundError on a
missing account) so services behave the same on either backend.
"""

import copy
import dataclasses
from datetime import datetime
from decimal import Decimal
from typing import Any, Optional
from uuid import uuid4

from db.memory import MemoryStore
from models import (
    Account,
    Category,
    Goal,
    PushSubscription,
    Reminder,
    Settings,
    Transaction,
)
from repositories.interfaces import (
    ACCOUNT_DETAIL_FIELDS,
    GOAL_DETAIL_FIELDS,
    REMINDER_DETAIL_FIELDS,
    SETTINGS_FIELDS,
    AccountRepository,
    CategoryRepository,
    GoalRepository,
    LedgerRebucket,
    PushSubscriptionRepository,
    RateRebucket,
    ReminderRepository,
    SettingsRepository,
    TransactionRepository,
    check_fields,
)
from utils.clock import utcnow
from utils.errors import NotFoundError
from utils.logger import get_logger

logger = get_logger(__name__)


def _patched(record: Any, fields: dict[str, Any]) -> Any:
    return dataclasses.replace(record, **fields)


class MemoryAccountRepository(AccountRepository):

    def __init__(self, store: MemoryStore):
        self.store = store

    def add(self, account: Account) -> Account:
        account.id = account.id or uuid4().hex
        account.created_at = utcnow()
        self.store.put("accounts", account.id, account)
        logger.info(f"Added {account.type} account '{account.name}' #{account.id}")
        return account

    def get(self, account_id: str) -> Optional[Account]:
        return self.store.get("accounts", account_id)

    def get_all(self, include_inactive: bool = False) -> list[Account]:
        rows = reversed(self.store.all("accounts"))
        return [a for a in rows if include_inactive or a.is_active]

    def update_details(self, account_id: str, fields: dict[str, Any]) -> Optional[Account]:
        check_fields(fields, ACCOUNT_DETAIL_FIELDS)
        with self.store.locked() as tables:
            current = tables["accounts"].get(account_id)
            if current is None:
                return None
            updated = _patched(current, fields)
            tables["accounts"][account_id] = updated
            return copy.deepcopy(updated)

    def set_rate_state(
        self, account_id: str, interest_rate, rebucket: RateRebucket
    ) -> Optional[Account]:
        with self.store.locked() as tables:
            current = tables["accounts"].get(account_id)
            if current is None:
                return None
            buckets = rebucket(copy.deepcopy(current))
            updated = _patched(
                current, {"interest_rate": interest_rate, "rate_buckets": copy.deepcopy(buckets)}
            )
            tables["accounts"][account_id] = updated
            return copy.deepcopy(updated)

    def get_by_external_id(self, external_id: str) -> Optional[Account]:
        for account in self.store.all("accounts"):
            if account.external_id == external_id:
                return account
        return None

    def upsert_external(self, account: Account) -> Account:
        with self.store.locked():
            existing = self.get_by_external_id(account.external_id)
            if existing is None:
                return self.add(account)
            updated = _patched(existing, {"name": account.name, "balance": account.balance})
            self.store.put("accounts", updated.id, updated)
            return updated


class MemoryTransactionRepository(TransactionRepository):

    def __init__(self, store: MemoryStore):
        self.store = store

    def record(
        self, tx: Transaction, rebucket: Optional[LedgerRebucket] = None
    ) -> Optional[Transaction]:
        with self.store.locked() as tables:
            account = tables["accounts"].get(tx.account_id)
            if account is None:
                raise NotFoundError("Account", tx.account_id)
            buckets = None
            if rebucket is not None:
                buckets = rebucket(copy.deepcopy(account), tx)
                if buckets is None:
                    return None
            _insert_ledger_entry(tables, tx)
            if buckets is not None:
                account.rate_buckets = copy.deepcopy(buckets)
        logger.info(f"Recorded {tx.type} #{tx.id} of {tx.amount} on account {tx.account_id}")
        return tx

    def get(self, tx_id: str) -> Optional[Transaction]:
        return self.store.get("transactions", tx_id)

    def get_all(self, account_id: Optional[str] = None) -> list[Transaction]:
        rows = [
            t for t in reversed(self.store.all("transactions"))
            if account_id is None or t.account_id == account_id
        ]
        return sorted(rows, key=lambda t: t.date, reverse=True)

    def monthly_totals(self, since: datetime) -> list[dict]:
        buckets: dict[tuple[int, int], dict] = {}
        for t in self.store.all("transactions"):
            if t.date < since:
                continue
            key = (t.date.year, t.date.month)
            entry = buckets.setdefault(
                key, {"year": key[0], "month": key[1], "income": Decimal("0"), "expense": Decimal("0")}
            )
            if t.is_income():
                entry["income"] += t.amount
            else:
                entry["expense"] -= t.amount
        return [buckets[k] for k in sorted(buckets)]


def _insert_ledger_entry(tables: dict, tx: Transaction) -> None:
    """Caller must hold the store lock."""
    account = tables["accounts"].get(tx.account_id)
    if account is None:
        raise NotFoundError("Account", tx.account_id)
    tx.id = tx.id or uuid4().hex
    tx.created_at = utcnow()
    account.balance += tx.amount
    tables["transactions"][tx.id] = copy.deepcopy(tx)


class MemoryGoalRepository(GoalRepository):

    def __init__(self, store: MemoryStore):
        self.store = store

    def add(self, goal: Goal) -> Goal:
        goal.id = goal.id or uuid4().hex
        goal.created_at = utcnow()
        self.store.put("goals", goal.id, goal)
        logger.info(f"Added goal '{goal.name}' #{goal.id}")
        return goal

    def get(self, goal_id: str) -> Optional[Goal]:
        return self.store.get("goals", goal_id)

    def get_all(self, include_inactive: bool = False) -> list[Goal]:
        rows = reversed(self.store.all("goals"))
        return [g for g in rows if include_inactive or g.is_active]

    def update_details(self, goal_id: str, fields: dict[str, Any]) -> Optional[Goal]:
        check_fields(fields, GOAL_DETAIL_FIELDS)
        with self.store.locked() as tables:
            current = tables["goals"].get(goal_id)
            if current is None:
                return None
            updated = _patched(current, fields)
            tables["goals"][goal_id] = updated
            return copy.deepcopy(updated)

    def add_contribution(self, goal_id: str, tx: Transaction) -> Goal:
        with self.store.locked() as tables:
            goal = tables["goals"].get(goal_id)
            if goal is None:
                raise NotFoundError("Goal", goal_id)
            _insert_ledger_entry(tables, tx)
            goal.current_amount += abs(tx.amount)
            if goal.current_amount >= goal.target_amount:
                goal.is_completed = True
            result = copy.deepcopy(goal)
        logger.info(f"Contributed {abs(tx.amount)} to goal #{goal_id} from account {tx.account_id}")
        return result


class MemoryReminderRepository(ReminderRepository):

    def __init__(self, store: MemoryStore):
        self.store = store

    def add(self, reminder: Reminder) -> Reminder:
        reminder.id = reminder.id or uuid4().hex
        reminder.created_at = utcnow()
        self.store.put("reminders", reminder.id, reminder)
        logger.info(f"Added reminder '{reminder.title}' #{reminder.id}")
        return reminder

    def get(self, reminder_id: str) -> Optional[Reminder]:
        return self.store.get("reminders", reminder_id)

    def get_all(self, active_only: bool = False) -> list[Reminder]:
        rows = [r for r in self.store.all("reminders") if r.is_active or not active_only]
        return sorted(rows, key=lambda r: r.next_date)

    def get_due(self, now: datetime) -> list[Reminder]:
        return [r for r in self.get_all(active_only=True) if r.next_date <= now]

    def update_details(self, reminder_id: str, fields: dict[str, Any]) -> Optional[Reminder]:
        check_fields(fields, REMINDER_DETAIL_FIELDS)
        with self.store.locked() as tables:
            current = tables["reminders"].get(reminder_id)
            if current is None:
                return None
            updated = _patched(current, fields)
            tables["reminders"][reminder_id] = updated
            return copy.deepcopy(updated)

    def advance(self, reminder_id: str, next_date: datetime) -> None:
        self.update_details(reminder_id, {"next_date": next_date})

    def deactivate(self, reminder_id: str) -> None:
        self.update_details(reminder_id, {"is_active": False})

    def delete(self, reminder_id: str) -> bool:
        return self.store.delete("reminders", reminder_id)


class MemoryCategoryRepository(CategoryRepository):

    def __init__(self, store: MemoryStore):
        self.store = store

    def ensure(self, category: Category) -> Category:
        with self.store.locked():
            for existing in self.store.all("categories"):
                if existing.name == category.name:
                    return existing
            category.id = category.id or uuid4().hex
            self.store.put("categories", category.id, category)
            return category

    def get_all(self, active_only: bool = True, category_type: Optional[str] = None) -> list[Category]:
        rows = [
            c for c in self.store.all("categories")
            if (c.is_active or not active_only) and (category_type is None or c.type == category_type)
        ]
        return sorted(rows, key=lambda c: (c.type != "income", c.name))


class MemorySettingsRepository(SettingsRepository):

    def __init__(self, store: MemoryStore):
        self.store = store

    def get(self) -> Settings:
        with self.store.locked():
            settings = self.store.get("settings", "settings")
            if settings is None:
                settings = Settings()
                self.store.put("settings", settings.id, settings)
            return settings

    def update(self, fields: dict[str, Any]) -> Settings:
        check_fields(fields, SETTINGS_FIELDS)
        with self.store.locked():
            updated = _patched(self.get(), fields)
            self.store.put("settings", updated.id, updated)
            return updated


class MemoryPushSubscriptionRepository(PushSubscriptionRepository):

    def __init__(self, store: MemoryStore):
        self.store = store

    def save(self, subscription: PushSubscription) -> PushSubscription:
        subscription.created_at = subscription.created_at or utcnow()
        self.store.put("push_subscriptions", subscription.endpoint, subscription)
        return subscription

    def get_all(self) -> list[PushSubscription]:
        return self.store.all("push_subscriptions")

    def delete(self, endpoint: str) -> bool:
        deleted = self.store.delete("push_subscriptions", endpoint)
        if deleted:
            logger.info("Removed expired push subscription.")
        return deleted
