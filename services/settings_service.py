"""
services/settings_service.py
----------------------------
The settings singleton (broker token, preferences) and category reference data.
"""

from typing import Any, Optional

from models.category import Category
from models.settings import Settings
from repositories import Repositories
from utils.errors import ValidationError
from utils.logger import get_logger

logger = get_logger(__name__)

_PREFERENCES = ("currency", "language", "theme")
THEMES = ("auto", "light", "dark")


class SettingsService:

    def __init__(self, repos: Repositories):
        self.settings = repos.settings
        self.categories = repos.categories

    def get_token(self) -> str:
        return self.settings.get().broker_token

    def set_token(self, token: Optional[str]) -> Settings:
        """Save (or with an empty value, clear) the brokerage token."""
        settings = self.settings.update({"broker_token": (token or "").strip()})
        logger.info(f"Broker token {'saved' if settings.broker_token else 'cleared'}.")
        return settings

    def get_settings(self) -> Settings:
        return self.settings.get()

    def update_settings(self, fields: dict[str, Any]) -> Settings:
        """
        Raises:
            ValidationError: Unknown field, empty value or unknown theme.
        """
        unknown = [f for f in fields if f not in _PREFERENCES]
        if unknown:
            raise ValidationError(f"Cannot update settings fields: {', '.join(unknown)}")
        patch = {}
        for key, value in fields.items():
            if value is None or not str(value).strip():
                raise ValidationError(f"{key} cannot be empty")
            patch[key] = str(value).strip()
        if "currency" in patch:
            patch["currency"] = patch["currency"].upper()
        if "theme" in patch and patch["theme"] not in THEMES:
            raise ValidationError(f"theme must be one of: {', '.join(THEMES)}")
        return self.settings.update(patch)

    def list_categories(self, category_type: Optional[str] = None) -> list[Category]:
        if category_type is not None and category_type not in ("income", "expense"):
            raise ValidationError("type must be 'income' or 'expense'")
        return self.categories.get_all(active_only=True, category_type=category_type)
