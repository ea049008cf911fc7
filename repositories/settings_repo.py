"""
repositories/settings_repo.py
-----------------------------
PostgreSQL data access for the settings singleton.
"""

from typing import Any

from db.connection import transaction
from models.settings import SETTINGS_ID, Settings
from repositories.interfaces import SETTINGS_FIELDS, SettingsRepository, check_fields

_COLUMNS = "id, broker_token, currency, language, theme"


class PostgresSettingsRepository(SettingsRepository):
    """Repository for the single row of the settings table."""

    def get(self) -> Settings:
        """
        Return the settings row, creating it with defaults on first access.
        Uses PostgreSQL's ON CONFLICT (upsert) for atomicity.
        """
        sql = f"""
            INSERT INTO settings (id) VALUES (%s)
            ON CONFLICT (id) DO UPDATE SET id = EXCLUDED.id
            RETURNING {_COLUMNS};
        """
        with transaction("load settings") as cur:
            cur.execute(sql, (SETTINGS_ID,))
            return Settings(**cur.fetchone())

    def update(self, fields: dict[str, Any]) -> Settings:
        check_fields(fields, SETTINGS_FIELDS)
        if not fields:
            return self.get()
        columns = ", ".join(["id", *fields])
        placeholders = ", ".join(["%(id)s", *(f"%({name})s" for name in fields)])
        assignments = ", ".join(f"{name} = EXCLUDED.{name}" for name in fields)
        sql = f"""
            INSERT INTO settings ({columns}) VALUES ({placeholders})
            ON CONFLICT (id) DO UPDATE SET {assignments}
            RETURNING {_COLUMNS};
        """
        with transaction("update settings") as cur:
            cur.execute(sql, {**fields, "id": SETTINGS_ID})
            return Settings(**cur.fetchone())
