"""
handlers/schemas.py
-------------------
Request bodies of the REST API. Clients send camelCase keys; the models
expose snake_case attributes that map straight onto service arguments.

Fields are mostly optional so that the services, not the schema layer,
report which required value is missing.
"""

from datetime import datetime
from decimal import Decimal
from typing import Any, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def patch(self) -> dict[str, Any]:
        """Only the fields the client actually sent."""
        return self.model_dump(exclude_unset=True)


# ── Accounts ──────────────────────────────────────────────

class AccountCreate(CamelModel):
    name: Optional[str] = None
    type: Optional[str] = None
    balance: Optional[Decimal] = None
    currency: Optional[str] = None
    icon: Optional[str] = None
    color: Optional[str] = None
    interest_rate: Optional[Decimal] = None


class AccountPatch(CamelModel):
    name: Optional[str] = None
    currency: Optional[str] = None
    icon: Optional[str] = None
    color: Optional[str] = None
    is_active: Optional[bool] = None
    # Accepted only to be rejected with a clear message
    balance: Optional[Any] = None
    interest_rate: Optional[Any] = None
    rate_buckets: Optional[Any] = None


class MoneyMovement(CamelModel):
    amount: Optional[Decimal] = None
    description: Optional[str] = None


class RateChange(CamelModel):
    rate: Optional[Decimal] = None


# ── Transactions ──────────────────────────────────────────

class TransactionCreate(CamelModel):
    account_id: Optional[str] = None
    amount: Optional[Decimal] = None
    type: Optional[str] = None
    description: Optional[str] = None
    date: Optional[datetime] = None
    category_id: Optional[str] = None


# ── Goals ─────────────────────────────────────────────────

class GoalCreate(CamelModel):
    name: Optional[str] = None
    target_amount: Optional[Decimal] = None
    description: Optional[str] = None
    target_date: Optional[datetime] = None
    icon: Optional[str] = None
    color: Optional[str] = None


class GoalPatch(CamelModel):
    name: Optional[str] = None
    description: Optional[str] = None
    target_amount: Optional[Decimal] = None
    target_date: Optional[datetime] = None
    icon: Optional[str] = None
    color: Optional[str] = None
    is_active: Optional[bool] = None


class Contribution(CamelModel):
    amount: Optional[Decimal] = None
    # "accountId" is accepted as well, matching the transaction bodies
    from_account_id: Optional[str] = Field(
        None, validation_alias=AliasChoices("fromAccountId", "accountId", "from_account_id")
    )


# ── Reminders ─────────────────────────────────────────────

class ReminderCreate(CamelModel):
    title: Optional[str] = None
    message: Optional[str] = None
    type: Optional[str] = "custom"
    frequency: Optional[str] = "once"
    next_date: Optional[datetime] = None
    goal_id: Optional[str] = None


class ReminderPatch(CamelModel):
    title: Optional[str] = None
    message: Optional[str] = None
    type: Optional[str] = None
    frequency: Optional[str] = None
    next_date: Optional[datetime] = None
    is_active: Optional[bool] = None
    goal_id: Optional[str] = None


# ── Settings / push ───────────────────────────────────────

class TokenUpdate(CamelModel):
    token: Optional[str] = None


class SettingsPatch(CamelModel):
    currency: Optional[str] = None
    language: Optional[str] = None
    theme: Optional[str] = None


class PushKeys(CamelModel):
    p256dh: Optional[str] = None
    auth: Optional[str] = None


class PushSubscriptionIn(CamelModel):
    endpoint: Optional[str] = None
    keys: Optional[PushKeys] = None
