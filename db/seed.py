"""
db/seed.py
----------
Default reference data: categories and the settings singleton.
Idempotent; safe to run on every start-up.
"""

from models.category import Category
from utils.logger import get_logger

logger = get_logger(__name__)

DEFAULT_CATEGORIES: list[Category] = [
    # Income
    Category(name="Salary", type="income", icon="💰", color="#34C759"),
    Category(name="Freelance", type="income", icon="💻", color="#007AFF"),
    Category(name="Gifts", type="income", icon="🎁", color="#FF2D92"),
    Category(name="Investments", type="income", icon="📈", color="#5AC8FA"),
    # Expenses
    Category(name="Groceries", type="expense", icon="🛒", color="#FF9500"),
    Category(name="Transport", type="expense", icon="🚗", color="#5856D6"),
    Category(name="Entertainment", type="expense", icon="🎬", color="#AF52DE"),
    Category(name="Health", type="expense", icon="🏥", color="#FF3B30"),
    Category(name="Education", type="expense", icon="📚", color="#34C759"),
    Category(name="Utilities", type="expense", icon="🏠", color="#8E8E93"),
    Category(name="Clothing", type="expense", icon="👕", color="#FF2D92"),
    Category(name="Cafes & Restaurants", type="expense", icon="🍕", color="#FFCC00"),
]


def seed_database(repos) -> None:
    """
    Insert default categories (matched by name) and make sure the
    settings record exists.

    Args:
        repos: A `repositories.Repositories` bundle.
    """
    for category in DEFAULT_CATEGORIES:
        repos.categories.ensure(Category(**vars(category)))
    repos.settings.get()
    logger.info(f"Seeded {len(DEFAULT_CATEGORIES)} default categories.")
