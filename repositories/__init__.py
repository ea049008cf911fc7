"""
repositories/ - Data Access Layer
==================================
Each repository encapsulates all storage access for a specific domain entity.
Repositories receive raw data from the store and return domain model objects.

`build_repositories()` assembles the full set for one backend:
    - "postgres": SQL repositories on the psycopg2 pool (db.connection).
    - "memory":   in-process repositories on a MemoryStore.
"""

from dataclasses import dataclass
from typing import Optional

from db.memory import MemoryStore
from repositories.interfaces import (
    AccountRepository,
    CategoryRepository,
    GoalRepository,
    PushSubscriptionRepository,
    ReminderRepository,
    SettingsRepository,
    TransactionRepository,
)


@dataclass
class Repositories:
    """One repository per entity, all bound to the same store."""
    accounts: AccountRepository
    transactions: TransactionRepository
    goals: GoalRepository
    reminders: ReminderRepository
    categories: CategoryRepository
    settings: SettingsRepository
    push_subscriptions: PushSubscriptionRepository


def build_repositories(backend: str, store: Optional[MemoryStore] = None) -> Repositories:
    """
    Create the repository bundle for a storage backend.

    Args:
        backend: "postgres" or "memory".
        store: Existing MemoryStore to reuse (memory backend only).

    Raises:
        ValueError: For an unknown backend name.
    """
    if backend == "memory":
        from repositories.memory import (
            MemoryAccountRepository,
            MemoryCategoryRepository,
            MemoryGoalRepository,
            MemoryPushSubscriptionRepository,
            MemoryReminderRepository,
            MemorySettingsRepository,
            MemoryTransactionRepository,
        )
        store = store or MemoryStore()
        return Repositories(
            accounts=MemoryAccountRepository(store),
            transactions=MemoryTransactionRepository(store),
            goals=MemoryGoalRepository(store),
            reminders=MemoryReminderRepository(store),
            categories=MemoryCategoryRepository(store),
            settings=MemorySettingsRepository(store),
            push_subscriptions=MemoryPushSubscriptionRepository(store),
        )

    if backend == "postgres":
        from repositories.account_repo import PostgresAccountRepository
        from repositories.category_repo import PostgresCategoryRepository
        from repositories.goal_repo import PostgresGoalRepository
        from repositories.push_repo import PostgresPushSubscriptionRepository
        from repositories.reminder_repo import PostgresReminderRepository
        from repositories.settings_repo import PostgresSettingsRepository
        from repositories.transaction_repo import PostgresTransactionRepository
        return Repositories(
            accounts=PostgresAccountRepository(),
            transactions=PostgresTransactionRepository(),
            goals=PostgresGoalRepository(),
            reminders=PostgresReminderRepository(),
            categories=PostgresCategoryRepository(),
            settings=PostgresSettingsRepository(),
            push_subscriptions=PostgresPushSubscriptionRepository(),
        )

    raise ValueError(f"Unknown store backend: {backend!r}")
