"""
models/ - Domain Layer
======================
Plain dataclasses for every stored entity. Repositories build them from
rows; services mutate copies and hand them back to repositories.
`to_dict()` renders the camelCase shape the front end consumes.
"""

from models.account import ACCOUNT_TYPES, Account, RateBucket
from models.category import Category
from models.goal import Goal
from models.notification import Notification
from models.push_subscription import PushSubscription
from models.reminder import REMINDER_FREQUENCIES, REMINDER_TYPES, Reminder
from models.settings import SETTINGS_ID, Settings
from models.transaction import TRANSACTION_TYPES, Transaction

__all__ = [
    "ACCOUNT_TYPES",
    "Account",
    "Category",
    "Goal",
    "Notification",
    "PushSubscription",
    "REMINDER_FREQUENCIES",
    "REMINDER_TYPES",
    "RateBucket",
    "Reminder",
    "SETTINGS_ID",
    "Settings",
    "TRANSACTION_TYPES",
    "Transaction",
]
