"""
services/stats_service.py
-------------------------
Dashboard figures: totals across accounts and goals, and monthly cash flow.
"""

from datetime import datetime

from dateutil.relativedelta import relativedelta

from repositories import Repositories
from utils.clock import Clock, utcnow
from utils.errors import ValidationError
from utils.money import ZERO

MAX_MONTHS = 36


class StatsService:

    def __init__(self, repos: Repositories, clock: Clock = utcnow):
        self.accounts = repos.accounts
        self.goals = repos.goals
        self.transactions = repos.transactions
        self.clock = clock

    def overview(self) -> dict:
        """Total balance of active accounts and progress of active goals."""
        accounts = self.accounts.get_all()
        goals = self.goals.get_all()
        return {
            "totalBalance": sum((a.balance for a in accounts), ZERO),
            "accountCount": len(accounts),
            "totalSaved": sum((g.current_amount for g in goals), ZERO),
            "activeGoals": sum(1 for g in goals if not g.is_completed),
            "completedGoals": sum(1 for g in goals if g.is_completed),
        }

    def monthly(self, months: int = 6) -> list[dict]:
        """
        Income and expense per calendar month, oldest first, including the
        current month. Months without transactions report zeros.
        """
        if months < 1 or months > MAX_MONTHS:
            raise ValidationError(f"months must be between 1 and {MAX_MONTHS}")
        now = self.clock()
        first = datetime(now.year, now.month, 1, tzinfo=now.tzinfo) - relativedelta(months=months - 1)

        totals = {
            (row["year"], row["month"]): row for row in self.transactions.monthly_totals(first)
        }
        result = []
        for offset in range(months):
            month = first + relativedelta(months=offset)
            row = totals.get((month.year, month.month), {})
            income = row.get("income", ZERO)
            expense = row.get("expense", ZERO)
            result.append({
                "month": f"{month.year:04d}-{month.month:02d}",
                "income": income,
                "expense": expense,
                "net": income - expense,
            })
        return result
