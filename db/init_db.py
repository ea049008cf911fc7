"""
db/init_db.py
-------------
Creates the database schema (tables) if they do not already exist.
Run this module directly to initialize a fresh database:
    python -m db.init_db
"""

from db.connection import transaction
from utils.logger import get_logger

logger = get_logger(__name__)

SCHEMA_SQL = """
-- Accounts: balance is maintained eagerly by every ledger write
CREATE TABLE IF NOT EXISTS accounts (
    id              TEXT PRIMARY KEY,
    name            VARCHAR(100) NOT NULL,
    type            VARCHAR(10) NOT NULL CHECK (type IN ('card', 'cash', 'deposit', 'crypto', 'broker')),
    balance         NUMERIC(18,2) NOT NULL DEFAULT 0,
    currency        VARCHAR(5) NOT NULL DEFAULT 'RUB',
    icon            VARCHAR(32),
    color           VARCHAR(16),
    is_active       BOOLEAN NOT NULL DEFAULT TRUE,
    interest_rate   NUMERIC(7,3),
    rate_buckets    JSONB NOT NULL DEFAULT '[]'::jsonb,
    external_source VARCHAR(32),
    external_id     VARCHAR(128) UNIQUE,
    created_at      TIMESTAMPTZ NOT NULL DEFAULT NOW()
);

-- Categories: static reference data
CREATE TABLE IF NOT EXISTS categories (
    id              TEXT PRIMARY KEY,
    name            VARCHAR(100) UNIQUE NOT NULL,
    type            VARCHAR(10) NOT NULL CHECK (type IN ('income', 'expense')),
    icon            VARCHAR(32),
    color           VARCHAR(16),
    is_active       BOOLEAN NOT NULL DEFAULT TRUE
);

-- Transactions: signed amounts, positive = income, negative = expense
CREATE TABLE IF NOT EXISTS transactions (
    id              TEXT PRIMARY KEY,
    account_id      TEXT NOT NULL REFERENCES accounts(id),
    type            VARCHAR(10) NOT NULL CHECK (type IN ('income', 'expense')),
    amount          NUMERIC(18,2) NOT NULL,
    description     TEXT NOT NULL DEFAULT '',
    date            TIMESTAMPTZ NOT NULL DEFAULT NOW(),
    category_id     TEXT,
    created_at      TIMESTAMPTZ NOT NULL DEFAULT NOW()
);

-- Savings goals
CREATE TABLE IF NOT EXISTS goals (
    id              TEXT PRIMARY KEY,
    name            VARCHAR(100) NOT NULL,
    description     TEXT,
    target_amount   NUMERIC(18,2) NOT NULL CHECK (target_amount > 0),
    current_amount  NUMERIC(18,2) NOT NULL DEFAULT 0,
    target_date     TIMESTAMPTZ,
    icon            VARCHAR(32),
    color           VARCHAR(16),
    is_completed    BOOLEAN NOT NULL DEFAULT FALSE,
    is_active       BOOLEAN NOT NULL DEFAULT TRUE,
    created_at      TIMESTAMPTZ NOT NULL DEFAULT NOW()
);

-- Reminders: polled by the scheduler
CREATE TABLE IF NOT EXISTS reminders (
    id              TEXT PRIMARY KEY,
    title           VARCHAR(200) NOT NULL,
    message         TEXT,
    type            VARCHAR(10) NOT NULL CHECK (type IN ('goal', 'payment', 'custom')),
    frequency       VARCHAR(10) NOT NULL CHECK (frequency IN ('once', 'daily', 'weekly', 'monthly')),
    next_date       TIMESTAMPTZ NOT NULL,
    is_active       BOOLEAN NOT NULL DEFAULT TRUE,
    goal_id         TEXT,
    created_at      TIMESTAMPTZ NOT NULL DEFAULT NOW()
);

-- Settings singleton (id = 'settings')
CREATE TABLE IF NOT EXISTS settings (
    id              TEXT PRIMARY KEY,
    broker_token    TEXT NOT NULL DEFAULT '',
    currency        VARCHAR(5) NOT NULL DEFAULT 'RUB',
    language        VARCHAR(10) NOT NULL DEFAULT 'ru',
    theme           VARCHAR(10) NOT NULL DEFAULT 'auto'
);

-- Web Push subscriptions
CREATE TABLE IF NOT EXISTS push_subscriptions (
    endpoint        TEXT PRIMARY KEY,
    p256dh          TEXT NOT NULL,
    auth            TEXT NOT NULL,
    created_at      TIMESTAMPTZ NOT NULL DEFAULT NOW()
);

-- Indexes for faster queries
CREATE INDEX IF NOT EXISTS idx_transactions_account_date ON transactions(account_id, date);
CREATE INDEX IF NOT EXISTS idx_transactions_date ON transactions(date);
CREATE INDEX IF NOT EXISTS idx_reminders_due ON reminders(next_date) WHERE is_active = TRUE;
"""


def create_tables() -> None:
    """
    Execute the schema SQL to create all tables.
    Safe to call multiple times (uses IF NOT EXISTS).
    """
    with transaction("initialize schema") as cur:
        cur.execute(SCHEMA_SQL)
    logger.info("Database schema initialized successfully.")


if __name__ == "__main__":
    from db.connection import init_pool
    from db.seed import seed_database
    from repositories import build_repositories

    init_pool()
    create_tables()
    seed_database(build_repositories("postgres"))
    print("Database schema created and seeded.")
