"""
repositories/account_repo.py
----------------------------
PostgreSQL data access for accounts, including the embedded rate buckets
(stored as a JSONB array).
"""

from typing import Any, Optional
from uuid import uuid4

from psycopg2.extras import Json

from db.connection import transaction
from models.account import Account, RateBucket
from repositories.interfaces import (
    ACCOUNT_DETAIL_FIELDS,
    AccountRepository,
    RateRebucket,
    check_fields,
)
from utils.logger import get_logger

logger = get_logger(__name__)

_COLUMNS = (
    "id, name, type, balance, currency, icon, color, is_active, interest_rate, "
    "rate_buckets, external_source, external_id, created_at"
)


def buckets_to_json(buckets: list[RateBucket]) -> Json:
    return Json([b.to_json() for b in buckets])


def lock_account(cur, account_id: str) -> Optional[Account]:
    """Read an account row with a row lock held until the transaction ends."""
    cur.execute(f"SELECT {_COLUMNS} FROM accounts WHERE id = %s FOR UPDATE;", (account_id,))
    row = cur.fetchone()
    return PostgresAccountRepository._row_to_account(row) if row else None


class PostgresAccountRepository(AccountRepository):
    """Repository for CRUD operations on the accounts table."""

    # ── CREATE ────────────────────────────────────────────

    def add(self, account: Account) -> Account:
        """
        Insert a new account.

        Args:
            account: The Account domain object to persist.

        Returns:
            The same Account with its `id` and `created_at` populated.
        """
        account.id = account.id or uuid4().hex
        sql = """
            INSERT INTO accounts
                (id, name, type, balance, currency, icon, color, is_active,
                 interest_rate, rate_buckets, external_source, external_id)
            VALUES (%s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s)
            RETURNING created_at;
        """
        with transaction("add account") as cur:
            cur.execute(sql, (
                account.id, account.name, account.type, account.balance,
                account.currency, account.icon, account.color, account.is_active,
                account.interest_rate, buckets_to_json(account.rate_buckets),
                account.external_source, account.external_id,
            ))
            account.created_at = cur.fetchone()["created_at"]
        logger.info(f"Added {account.type} account '{account.name}' #{account.id}")
        return account

    # ── READ ──────────────────────────────────────────────

    def get(self, account_id: str) -> Optional[Account]:
        with transaction("fetch account") as cur:
            cur.execute(f"SELECT {_COLUMNS} FROM accounts WHERE id = %s;", (account_id,))
            row = cur.fetchone()
        return self._row_to_account(row) if row else None

    def get_all(self, include_inactive: bool = False) -> list[Account]:
        """
        Get all accounts, newest first.

        Args:
            include_inactive: If False, closed accounts are skipped.
        """
        sql = f"SELECT {_COLUMNS} FROM accounts"
        if not include_inactive:
            sql += " WHERE is_active = TRUE"
        sql += " ORDER BY created_at DESC, id DESC;"
        with transaction("list accounts") as cur:
            cur.execute(sql)
            return [self._row_to_account(r) for r in cur.fetchall()]

    def get_by_external_id(self, external_id: str) -> Optional[Account]:
        with transaction("fetch mirrored account") as cur:
            cur.execute(f"SELECT {_COLUMNS} FROM accounts WHERE external_id = %s;", (external_id,))
            row = cur.fetchone()
        return self._row_to_account(row) if row else None

    # ── UPDATE ────────────────────────────────────────────

    def update_details(self, account_id: str, fields: dict[str, Any]) -> Optional[Account]:
        check_fields(fields, ACCOUNT_DETAIL_FIELDS)
        if not fields:
            return self.get(account_id)
        assignments = ", ".join(f"{name} = %({name})s" for name in fields)
        sql = f"UPDATE accounts SET {assignments} WHERE id = %(id)s RETURNING {_COLUMNS};"
        with transaction(f"update account #{account_id}") as cur:
            cur.execute(sql, {**fields, "id": account_id})
            row = cur.fetchone()
        return self._row_to_account(row) if row else None

    def set_rate_state(
        self, account_id: str, interest_rate, rebucket: RateRebucket
    ) -> Optional[Account]:
        sql = f"""
            UPDATE accounts SET interest_rate = %s, rate_buckets = %s
            WHERE id = %s RETURNING {_COLUMNS};
        """
        with transaction(f"update rate of account #{account_id}") as cur:
            account = lock_account(cur, account_id)
            if account is None:
                return None
            cur.execute(sql, (interest_rate, buckets_to_json(rebucket(account)), account_id))
            row = cur.fetchone()
        return self._row_to_account(row)

    def upsert_external(self, account: Account) -> Account:
        """
        Insert a mirrored account or refresh it in place.
        Uses ON CONFLICT on the unique external_id for atomicity.
        """
        sql = f"""
            INSERT INTO accounts
                (id, name, type, balance, currency, icon, color, is_active,
                 external_source, external_id)
            VALUES (%s, %s, %s, %s, %s, %s, %s, TRUE, %s, %s)
            ON CONFLICT (external_id)
            DO UPDATE SET name = EXCLUDED.name, balance = EXCLUDED.balance
            RETURNING {_COLUMNS};
        """
        with transaction("upsert mirrored account") as cur:
            cur.execute(sql, (
                account.id or uuid4().hex, account.name, account.type, account.balance,
                account.currency, account.icon, account.color,
                account.external_source, account.external_id,
            ))
            return self._row_to_account(cur.fetchone())

    # ── HELPERS ───────────────────────────────────────────

    @staticmethod
    def _row_to_account(row: dict) -> Account:
        """Convert a database row to an Account domain object."""
        return Account(
            id=row["id"],
            name=row["name"],
            type=row["type"],
            balance=row["balance"],
            currency=row["currency"],
            icon=row["icon"],
            color=row["color"],
            is_active=row["is_active"],
            interest_rate=row["interest_rate"],
            rate_buckets=[RateBucket.from_json(b) for b in row["rate_buckets"] or []],
            external_source=row["external_source"],
            external_id=row["external_id"],
            created_at=row["created_at"],
        )
