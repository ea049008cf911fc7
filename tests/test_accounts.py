"""
Tests for accounts and the transaction ledger.
"""

from datetime import date
from decimal import Decimal

import pytest

from utils.errors import NotFoundError, ValidationError


class TestCreateAccount:

    def test_defaults(self, ctx):
        account = ctx.accounts.create_account("Wallet", "cash")
        assert account.id
        assert account.balance == Decimal("0")
        assert account.currency == "RUB"
        assert account.is_active

    def test_opening_balance(self, ctx):
        account = ctx.accounts.create_account("Card", "card", initial_balance="2500.50", currency="usd")
        assert account.balance == Decimal("2500.50")
        assert account.currency == "USD"

    @pytest.mark.parametrize("name, type", [(None, "card"), ("  ", "card"), ("Card", None)])
    def test_name_and_type_required(self, ctx, name, type):
        with pytest.raises(ValidationError):
            ctx.accounts.create_account(name, type)

    def test_unknown_type(self, ctx):
        with pytest.raises(ValidationError):
            ctx.accounts.create_account("Piggy", "jar")

    def test_negative_opening_balance(self, ctx):
        with pytest.raises(ValidationError):
            ctx.accounts.create_account("Card", "card", initial_balance=-1)

    def test_list_newest_first_and_hides_closed(self, ctx):
        first = ctx.accounts.create_account("First", "card")
        second = ctx.accounts.create_account("Second", "cash")
        ctx.accounts.close_account(first.id)

        assert [a.id for a in ctx.accounts.list_accounts()] == [second.id]
        assert [a.id for a in ctx.accounts.list_accounts(include_inactive=True)] == [second.id, first.id]


class TestUpdateAccount:

    def test_patch_descriptive_fields(self, ctx, card):
        updated = ctx.accounts.update_account(card.id, {"name": "Travel card", "color": "#fff"})
        assert updated.name == "Travel card"
        assert updated.color == "#fff"
        assert updated.balance == card.balance

    @pytest.mark.parametrize("field", ["balance", "interest_rate", "rate_buckets"])
    def test_ledger_fields_are_rejected(self, ctx, card, field):
        with pytest.raises(ValidationError):
            ctx.accounts.update_account(card.id, {field: 1})
        assert ctx.accounts.get_account(card.id).balance == Decimal("1000")

    def test_unknown_account(self, ctx):
        with pytest.raises(NotFoundError):
            ctx.accounts.update_account("nope", {"name": "x"})

    def test_close_keeps_history(self, ctx, card):
        ctx.accounts.record_transaction(card.id, 10, "expense", "Coffee")
        closed = ctx.accounts.close_account(card.id)
        assert not closed.is_active
        assert len(ctx.accounts.list_transactions(card.id)) == 1


class TestRecordTransaction:

    def test_balance_tracks_signed_sum(self, ctx, card):
        ctx.accounts.record_transaction(card.id, 500, "income", "Salary")
        ctx.accounts.record_transaction(card.id, 200, "expense", "Groceries")
        ctx.accounts.record_transaction(card.id, -50, "expense", "Taxi")

        txs = ctx.accounts.list_transactions(card.id)
        assert ctx.accounts.get_account(card.id).balance == Decimal("1000") + sum(t.amount for t in txs)
        assert ctx.accounts.get_account(card.id).balance == Decimal("1250")

    def test_sign_follows_type(self, ctx, card):
        income = ctx.accounts.record_transaction(card.id, -300, "income")
        expense = ctx.accounts.record_transaction(card.id, 300, "expense")
        assert income.amount == Decimal("300")
        assert expense.amount == Decimal("-300")

    def test_explicit_date_and_category(self, ctx, card):
        tx = ctx.accounts.record_transaction(
            card.id, 10, "expense", date=date(2023, 12, 31), category_id="cat-1"
        )
        assert tx.date.date() == date(2023, 12, 31)
        assert tx.category_id == "cat-1"

    def test_unknown_account_writes_nothing(self, ctx, card):
        with pytest.raises(NotFoundError):
            ctx.accounts.record_transaction("missing", 10, "income")
        assert ctx.accounts.list_transactions() == []

    @pytest.mark.parametrize("amount", [None, "abc", float("nan")])
    def test_amount_must_be_numeric(self, ctx, card, amount):
        with pytest.raises(ValidationError):
            ctx.accounts.record_transaction(card.id, amount, "income")

    def test_type_required(self, ctx, card):
        with pytest.raises(ValidationError):
            ctx.accounts.record_transaction(card.id, 10, None)
        with pytest.raises(ValidationError):
            ctx.accounts.record_transaction(card.id, 10, "transfer")


class TestDepositWithdraw:

    def test_card_top_up_and_withdrawal(self, ctx, card):
        ctx.accounts.deposit(card.id, 250)
        tx = ctx.accounts.withdraw(card.id, 100)
        assert tx.amount == Decimal("-100")
        assert tx.description == "Withdrawal"
        assert ctx.accounts.get_account(card.id).balance == Decimal("1150")

    @pytest.mark.parametrize("amount", [0, -5])
    def test_amount_must_be_positive(self, ctx, card, amount):
        with pytest.raises(ValidationError):
            ctx.accounts.deposit(card.id, amount)

    def test_deposit_account_tracks_buckets(self, ctx, deposit_account):
        ctx.interest.set_rate(deposit_account.id, 10)
        ctx.accounts.deposit(deposit_account.id, 100)
        ctx.interest.set_rate(deposit_account.id, 12)
        ctx.accounts.deposit(deposit_account.id, 50)
        ctx.accounts.withdraw(deposit_account.id, 30)

        account = ctx.accounts.get_account(deposit_account.id)
        assert account.balance == Decimal("120")
        assert [(b.rate, b.principal) for b in account.rate_buckets] == [
            (Decimal("10"), Decimal("100")),
            (Decimal("12"), Decimal("20")),
        ]

    def test_plain_transaction_leaves_buckets(self, ctx, deposit_account):
        ctx.interest.set_rate(deposit_account.id, 10)
        ctx.accounts.record_transaction(deposit_account.id, 500, "income")
        account = ctx.accounts.get_account(deposit_account.id)
        assert account.balance == Decimal("500")
        assert account.rate_buckets[-1].principal == 0
