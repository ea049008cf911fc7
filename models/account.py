"""
models/account.py
-----------------
Domain model for money accounts and the interest-rate buckets
embedded in deposit accounts.
"""

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Optional

from utils.clock import ensure_aware

ACCOUNT_TYPES = ("card", "cash", "deposit", "crypto", "broker")


@dataclass
class RateBucket:
    """
    Principal that entered the account while `rate` was in effect.

    Attributes:
        rate: Annual interest rate in percent (5 means 5%).
        principal: Amount currently accruing at this rate.
        start_date: When the bucket was opened.
        last_sync: When interest was last paid out; accrual counts from here.
    """
    rate: Decimal
    principal: Decimal
    start_date: datetime
    last_sync: Optional[datetime] = None

    def accrual_start(self) -> datetime:
        return self.last_sync or self.start_date

    def to_json(self) -> dict:
        """Storage form (JSONB): decimals as strings, dates as ISO-8601."""
        return {
            "rate": str(self.rate),
            "principal": str(self.principal),
            "startDate": self.start_date.isoformat(),
            "lastSync": self.last_sync.isoformat() if self.last_sync else None,
        }

    @classmethod
    def from_json(cls, data: dict) -> "RateBucket":
        last_sync = data.get("lastSync")
        return cls(
            rate=Decimal(str(data["rate"])),
            principal=Decimal(str(data["principal"])),
            start_date=ensure_aware(datetime.fromisoformat(data["startDate"])),
            last_sync=ensure_aware(datetime.fromisoformat(last_sync)) if last_sync else None,
        )

    def to_dict(self) -> dict:
        return {
            "rate": self.rate,
            "principal": self.principal,
            "startDate": self.start_date,
            "lastSync": self.last_sync,
        }


@dataclass
class Account:
    """
    A place where money is held: a card, cash, a deposit, a crypto wallet
    or a mirrored brokerage account.

    Attributes:
        id: Generated identifier (None until stored).
        name: Display name.
        type: One of ACCOUNT_TYPES.
        balance: Running sum of the account's transactions plus the opening balance.
        currency: ISO currency code.
        icon: Emoji or icon name for the UI.
        color: Hex color for the UI.
        is_active: False once the account is closed (soft delete).
        interest_rate: Current annual rate in percent, deposit accounts only.
        rate_buckets: Ordered principal buckets, oldest first.
        external_source: Origin of a mirrored account (e.g. 'tinkoff').
        external_id: Stable key '<source>:<remote id>' of a mirrored account.
        created_at: Timestamp when the record was created.
    """
    name: str
    type: str
    balance: Decimal = Decimal("0")
    currency: str = "RUB"
    icon: Optional[str] = None
    color: Optional[str] = None
    is_active: bool = True
    interest_rate: Optional[Decimal] = None
    rate_buckets: list[RateBucket] = field(default_factory=list)
    external_source: Optional[str] = None
    external_id: Optional[str] = None
    id: Optional[str] = None
    created_at: Optional[datetime] = None

    def is_deposit(self) -> bool:
        return self.type == "deposit"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "type": self.type,
            "balance": self.balance,
            "currency": self.currency,
            "icon": self.icon,
            "color": self.color,
            "isActive": self.is_active,
            "interestRate": self.interest_rate,
            "rateBuckets": [b.to_dict() for b in self.rate_buckets],
            "externalSource": self.external_source,
            "externalId": self.external_id,
            "createdAt": self.created_at,
        }

    def __str__(self) -> str:
        return f"{self.name} ({self.type}): {self.balance} {self.currency}"
