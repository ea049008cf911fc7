"""
models/transaction.py
---------------------
Domain model for ledger transactions (income and expense).
"""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Optional

TRANSACTION_TYPES = ("income", "expense")


@dataclass
class Transaction:
    """
    Represents a single movement of money on one account.

    Attributes:
        id: Generated identifier (None until stored).
        account_id: Account the money moved on.
        type: Either 'income' or 'expense'.
        amount: Signed amount: positive for income, negative for expense.
        description: Human-readable note.
        date: When the movement happened.
        category_id: Optional category reference.
        created_at: Timestamp when the record was created.
    """
    account_id: str
    type: str  # 'income' | 'expense'
    amount: Decimal
    date: datetime
    description: str = ""
    category_id: Optional[str] = None
    id: Optional[str] = None
    created_at: Optional[datetime] = None

    def is_expense(self) -> bool:
        """Returns True if this is an expense transaction."""
        return self.type == "expense"

    def is_income(self) -> bool:
        """Returns True if this is an income transaction."""
        return self.type == "income"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "amount": self.amount,
            "description": self.description,
            "type": self.type,
            "date": self.date,
            "accountId": self.account_id,
            "categoryId": self.category_id,
            "createdAt": self.created_at,
        }

    def __str__(self) -> str:
        return f"{self.amount:+} | {self.description} | {self.date.date()}"
