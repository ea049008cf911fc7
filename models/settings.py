"""
models/settings.py
------------------
The singleton settings record (brokerage credential and preferences).
"""

from dataclasses import dataclass

SETTINGS_ID = "settings"


@dataclass
class Settings:
    broker_token: str = ""
    currency: str = "RUB"
    language: str = "ru"
    theme: str = "auto"
    id: str = SETTINGS_ID

    def to_dict(self) -> dict:
        # The credential itself is only returned by GET /api/token
        return {
            "id": self.id,
            "currency": self.currency,
            "language": self.language,
            "theme": self.theme,
            "hasBrokerToken": bool(self.broker_token),
        }
