"""
config.py
---------
Central configuration module. Loads all environment variables
from the .env file and exposes them as typed constants.
"""

import os
from dotenv import load_dotenv

load_dotenv()


# ── Storage ───────────────────────────────────────────────
# "postgres" for the real database, "memory" for a throwaway in-process store
STORE_BACKEND: str = os.getenv("STORE_BACKEND", "postgres").lower()

# ── PostgreSQL ────────────────────────────────────────────
DB_HOST: str = os.getenv("DB_HOST", "localhost")
DB_PORT: int = int(os.getenv("DB_PORT", "5432"))
DB_NAME: str = os.getenv("DB_NAME", "finstat")
DB_USER: str = os.getenv("DB_USER", "finstat_user")
DB_PASS: str = os.getenv("DB_PASS", "")

DATABASE_URL: str = os.getenv(
    "DATABASE_URL",
    f"postgresql://{DB_USER}:{DB_PASS}@{DB_HOST}:{DB_PORT}/{DB_NAME}",
)
DB_POOL_MIN: int = int(os.getenv("DB_POOL_MIN", "1"))
DB_POOL_MAX: int = int(os.getenv("DB_POOL_MAX", "5"))

# ── HTTP API ──────────────────────────────────────────────
API_HOST: str = os.getenv("API_HOST", "127.0.0.1")
API_PORT: int = int(os.getenv("API_PORT", "4000"))

_raw_origins = os.getenv("CORS_ORIGINS", "*")
CORS_ORIGINS: list[str] = [o.strip() for o in _raw_origins.split(",") if o.strip()]

# ── Logging ───────────────────────────────────────────────
LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()

# ── Currency ──────────────────────────────────────────────
DEFAULT_CURRENCY: str = os.getenv("DEFAULT_CURRENCY", "RUB")

# ── Background jobs ───────────────────────────────────────
REMINDER_POLL_SECONDS: int = int(os.getenv("REMINDER_POLL_SECONDS", "60"))
BROKER_SYNC_SECONDS: int = int(os.getenv("BROKER_SYNC_SECONDS", "300"))

# ── Tinkoff Invest ────────────────────────────────────────
# Used only when no token has been saved through /api/token
TINKOFF_TOKEN: str = os.getenv("TINKOFF_TOKEN", "")
TINKOFF_API_URL: str = os.getenv(
    "TINKOFF_API_URL",
    "https://invest-public-api.tinkoff.ru/rest",
)
BROKER_TIMEOUT_SECONDS: float = float(os.getenv("BROKER_TIMEOUT_SECONDS", "15"))

# ── Telegram notifications ────────────────────────────────
TELEGRAM_BOT_TOKEN: str = os.getenv("TELEGRAM_BOT_TOKEN", "")
TELEGRAM_CHAT_ID: str = os.getenv("TELEGRAM_CHAT_ID", "")

# ── Web Push ──────────────────────────────────────────────
VAPID_PUBLIC_KEY: str = os.getenv("VAPID_PUBLIC_KEY", "")
VAPID_PRIVATE_KEY: str = os.getenv("VAPID_PRIVATE_KEY", "")
VAPID_SUBJECT: str = os.getenv("VAPID_SUBJECT", "mailto:admin@localhost")
