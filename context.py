"""
context.py
----------
Explicit application context: the repositories and every service, built
once and handed to the HTTP layer and the background jobs.
"""

from dataclasses import dataclass
from typing import Optional

from config import STORE_BACKEND
from db.memory import MemoryStore
from db.seed import seed_database
from integrations.telegram_notifier import TelegramNotifier
from integrations.tinkoff_client import TinkoffClient
from integrations.webpush import WebPushSender
from repositories import Repositories, build_repositories
from services.account_service import AccountService
from services.broker_service import BrokerService, ClientFactory
from services.goal_service import GoalService
from services.import_service import ImportService
from services.interest_service import InterestService
from services.notification_service import NotificationService
from services.reminder_service import ReminderService
from services.settings_service import SettingsService
from services.stats_service import StatsService
from utils.clock import Clock, utcnow


@dataclass
class AppContext:
    repos: Repositories
    accounts: AccountService
    interest: InterestService
    goals: GoalService
    notifications: NotificationService
    reminders: ReminderService
    imports: ImportService
    broker: BrokerService
    stats: StatsService
    settings: SettingsService
    backend: str = STORE_BACKEND


def build_context(
    backend: Optional[str] = None,
    clock: Clock = utcnow,
    store: Optional[MemoryStore] = None,
    telegram: Optional[TelegramNotifier] = None,
    push: Optional[WebPushSender] = None,
    broker_client_factory: ClientFactory = TinkoffClient,
) -> AppContext:
    """
    Wire repositories and services for one storage backend.

    The memory backend is seeded here; PostgreSQL is seeded at start-up
    once the pool and schema exist.
    """
    backend = backend or STORE_BACKEND
    repos = build_repositories(backend, store=store)
    if backend == "memory":
        seed_database(repos)

    accounts = AccountService(repos, clock=clock)
    notifications = NotificationService(repos, telegram=telegram, push=push, clock=clock)
    return AppContext(
        repos=repos,
        accounts=accounts,
        interest=InterestService(repos, clock=clock),
        goals=GoalService(repos, clock=clock),
        notifications=notifications,
        reminders=ReminderService(repos, notifications, clock=clock),
        imports=ImportService(accounts),
        broker=BrokerService(repos, client_factory=broker_client_factory),
        stats=StatsService(repos, clock=clock),
        settings=SettingsService(repos),
        backend=backend,
    )
