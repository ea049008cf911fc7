"""
repositories/transaction_repo.py
--------------------------------
PostgreSQL data access for ledger transactions.
Every insert moves the account balance in the same database transaction.
"""

from datetime import datetime
from decimal import Decimal
from typing import Optional
from uuid import uuid4

from db.connection import transaction
from models.transaction import Transaction
from repositories.account_repo import buckets_to_json, lock_account
from repositories.interfaces import LedgerRebucket, TransactionRepository
from utils.errors import NotFoundError
from utils.logger import get_logger

logger = get_logger(__name__)

_COLUMNS = "id, account_id, type, amount, description, date, category_id, created_at"


def insert_ledger_entry(cur, tx: Transaction) -> None:
    """
    Insert `tx` and add its signed amount to the account balance on an
    open cursor. The balance update runs first so a missing account aborts
    before the row is written.

    Raises:
        NotFoundError: If the account does not exist.
    """
    cur.execute(
        "UPDATE accounts SET balance = balance + %s WHERE id = %s RETURNING id;",
        (tx.amount, tx.account_id),
    )
    if cur.fetchone() is None:
        raise NotFoundError("Account", tx.account_id)
    tx.id = tx.id or uuid4().hex
    cur.execute(
        """
        INSERT INTO transactions (id, account_id, type, amount, description, date, category_id)
        VALUES (%s, %s, %s, %s, %s, %s, %s)
        RETURNING created_at;
        """,
        (tx.id, tx.account_id, tx.type, tx.amount, tx.description, tx.date, tx.category_id),
    )
    tx.created_at = cur.fetchone()["created_at"]


class PostgresTransactionRepository(TransactionRepository):
    """Repository for the transactions table."""

    # ── CREATE ────────────────────────────────────────────

    def record(
        self, tx: Transaction, rebucket: Optional[LedgerRebucket] = None
    ) -> Optional[Transaction]:
        """
        Insert a transaction and apply it to the account balance atomically.

        Args:
            tx: The Transaction to persist (amount already signed).
            rebucket: Computes the replacement bucket list from the locked
                account row; returning None cancels the write.

        Returns:
            The same Transaction with its `id` and `created_at` populated,
            or None when `rebucket` cancelled it.
        """
        with transaction("record transaction") as cur:
            account = lock_account(cur, tx.account_id)
            if account is None:
                raise NotFoundError("Account", tx.account_id)
            buckets = None
            if rebucket is not None:
                buckets = rebucket(account, tx)
                if buckets is None:
                    return None
            insert_ledger_entry(cur, tx)
            if buckets is not None:
                cur.execute(
                    "UPDATE accounts SET rate_buckets = %s WHERE id = %s;",
                    (buckets_to_json(buckets), tx.account_id),
                )
        logger.info(f"Recorded {tx.type} #{tx.id} of {tx.amount} on account {tx.account_id}")
        return tx

    # ── READ ──────────────────────────────────────────────

    def get(self, tx_id: str) -> Optional[Transaction]:
        with transaction("fetch transaction") as cur:
            cur.execute(f"SELECT {_COLUMNS} FROM transactions WHERE id = %s;", (tx_id,))
            row = cur.fetchone()
        return self._row_to_transaction(row) if row else None

    def get_all(self, account_id: Optional[str] = None) -> list[Transaction]:
        """
        Fetch transactions, optionally for one account.

        Returns:
            List of Transaction objects ordered by date descending.
        """
        sql = f"SELECT {_COLUMNS} FROM transactions"
        params: list = []
        if account_id:
            sql += " WHERE account_id = %s"
            params.append(account_id)
        sql += " ORDER BY date DESC, created_at DESC;"
        with transaction("list transactions") as cur:
            cur.execute(sql, params)
            return [self._row_to_transaction(r) for r in cur.fetchall()]

    def monthly_totals(self, since: datetime) -> list[dict]:
        """
        Get total income and expenses per calendar month.

        Returns:
            List of dicts with keys 'year', 'month', 'income', 'expense'.
        """
        sql = """
            SELECT EXTRACT(YEAR FROM date)::int AS year,
                   EXTRACT(MONTH FROM date)::int AS month,
                   COALESCE(SUM(amount) FILTER (WHERE type = 'income'), 0) AS income,
                   COALESCE(-SUM(amount) FILTER (WHERE type = 'expense'), 0) AS expense
            FROM transactions
            WHERE date >= %s
            GROUP BY 1, 2
            ORDER BY 1, 2;
        """
        with transaction("compute monthly totals") as cur:
            cur.execute(sql, (since,))
            return [
                {
                    "year": r["year"],
                    "month": r["month"],
                    "income": Decimal(r["income"]),
                    "expense": Decimal(r["expense"]),
                }
                for r in cur.fetchall()
            ]

    # ── HELPERS ───────────────────────────────────────────

    @staticmethod
    def _row_to_transaction(row: dict) -> Transaction:
        """Convert a database row to a Transaction domain object."""
        return Transaction(
            id=row["id"],
            account_id=row["account_id"],
            type=row["type"],
            amount=row["amount"],
            description=row["description"],
            date=row["date"],
            category_id=row["category_id"],
            created_at=row["created_at"],
        )
