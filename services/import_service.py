"""
services/import_service.py
--------------------------
Bank statement import: CSV/Excel files are read with pandas, mapped through
a bank template, and recorded as transactions on one account.
"""

import io
import numbers
import re
from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import Any, Iterable, Iterator, Optional

import pandas as pd

from models.transaction import Transaction
from services.account_service import AccountService
from utils.errors import ParseError, ValidationError
from utils.logger import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class BankTemplate:
    """Column mapping of one bank's statement export."""
    id: str
    name: str
    date_column: str
    description_column: str
    amount_column: str
    currency_column: str = ""
    decimal_separator: str = ","

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "columns": {
                "date": self.date_column,
                "description": self.description_column,
                "amount": self.amount_column,
                "currency": self.currency_column,
            },
            "decimalSeparator": self.decimal_separator,
        }


BANK_TEMPLATES: dict[str, BankTemplate] = {
    "sberbank": BankTemplate(
        id="sberbank",
        name="Сбербанк",
        date_column="Дата операции",
        description_column="Описание операции",
        amount_column="Сумма операции",
        currency_column="Валюта операции",
    ),
    "tinkoff": BankTemplate(
        id="tinkoff",
        name="Тинькофф",
        date_column="Дата платежа",
        description_column="Описание",
        amount_column="Сумма платежа",
        currency_column="Валюта платежа",
    ),
    "alfabank": BankTemplate(
        id="alfabank",
        name="Альфа-Банк",
        date_column="Дата",
        description_column="Описание операции",
        amount_column="Сумма",
        currency_column="Валюта",
    ),
    "custom": BankTemplate(
        id="custom",
        name="Свой формат",
        date_column="",
        description_column="",
        amount_column="",
    ),
}

# (pattern, groups order as (day, month, year) indexes)
_DATE_FORMATS = (
    (re.compile(r"(\d{2})\.(\d{2})\.(\d{4})"), (1, 2, 3)),  # DD.MM.YYYY
    (re.compile(r"(\d{4})-(\d{2})-(\d{2})"), (3, 2, 1)),    # YYYY-MM-DD
    (re.compile(r"(\d{2})/(\d{2})/(\d{4})"), (1, 2, 3)),    # DD/MM/YYYY
)

EXCEL_EXTENSIONS = (".xlsx",)


@dataclass
class ParsedTransaction:
    date: date
    description: str
    amount: Decimal  # always positive
    type: str        # 'income' | 'expense'
    currency: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "date": self.date,
            "description": self.description,
            "amount": self.amount,
            "type": self.type,
            "currency": self.currency,
        }


@dataclass
class ImportResult:
    account_id: str
    transactions: list[Transaction] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "accountId": self.account_id,
            "imported": len(self.transactions),
            "transactions": [t.to_dict() for t in self.transactions],
        }


# ── Templates ─────────────────────────────────────────────

def get_template(bank: Optional[str], custom_columns: Optional[dict[str, str]] = None) -> BankTemplate:
    """
    Resolve a template by id. The 'custom' template takes its columns from
    `custom_columns` (keys: date, description, amount, currency, decimalSeparator).

    Raises:
        ValidationError: Unknown bank, or custom template without date/amount columns.
    """
    template = BANK_TEMPLATES.get(bank or "")
    if template is None:
        raise ValidationError(f"Unknown bank template: {bank!r}")
    if template.id != "custom":
        return template

    columns = {k: v for k, v in (custom_columns or {}).items() if v}
    if not columns.get("date") or not columns.get("amount"):
        raise ValidationError("Custom template needs date and amount column names")
    return BankTemplate(
        id="custom",
        name=template.name,
        date_column=columns["date"],
        description_column=columns.get("description", ""),
        amount_column=columns["amount"],
        currency_column=columns.get("currency", ""),
        decimal_separator=columns.get("decimalSeparator", template.decimal_separator),
    )


# ── Reading files ─────────────────────────────────────────

def read_rows(content: bytes, filename: str) -> list[dict[str, Any]]:
    """
    Read a statement file into row dicts keyed by header.

    CSV delimiters are sniffed; text is decoded as UTF-8 (with or without
    BOM), falling back to cp1251. Excel cells keep their native types.

    Raises:
        ParseError: Unsupported extension or unreadable file.
    """
    name = (filename or "").lower()
    try:
        if name.endswith(".csv"):
            df = _read_csv(content)
        elif name.endswith(EXCEL_EXTENSIONS):
            df = pd.read_excel(io.BytesIO(content), dtype=object, engine="openpyxl")
        else:
            raise ParseError(None, "Only CSV and Excel (.xlsx) files are supported")
    except (ValueError, pd.errors.ParserError) as e:
        raise ParseError(None, f"Could not read {filename}: {e}")

    df = df.dropna(how="all")
    df = df.astype(object).where(pd.notna(df), None)
    rows = df.to_dict(orient="records")
    logger.info(f"Read {len(rows)} row(s) from {filename}")
    return rows


def _read_csv(content: bytes) -> pd.DataFrame:
    for encoding in ("utf-8-sig", "cp1251"):
        try:
            return pd.read_csv(
                io.BytesIO(content),
                sep=None,
                engine="python",
                encoding=encoding,
                dtype=str,
                keep_default_na=False,
                na_values=[""],
            )
        except UnicodeDecodeError:
            continue
    raise ParseError(None, "Unsupported text encoding")


# ── Parsing ───────────────────────────────────────────────

def parse_date(value: Any, row_index: int) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    text = str(value).strip()
    for pattern, (d, m, y) in _DATE_FORMATS:
        match = pattern.search(text)
        if match:
            try:
                return date(int(match.group(y)), int(match.group(m)), int(match.group(d)))
            except ValueError:
                break
    raise ParseError(row_index, "invalid date format")


def parse_amount(value: Any, decimal_separator: str, row_index: int) -> Decimal:
    if isinstance(value, numbers.Number) and not isinstance(value, bool):
        return Decimal(str(value))
    text = str(value).replace("−", "-")
    if decimal_separator == ",":
        text = text.replace(".", "").replace(",", ".")
    else:
        text = text.replace(",", "")
    text = re.sub(r"[^\d.\-+]", "", text)
    try:
        amount = Decimal(text)
    except InvalidOperation:
        raise ParseError(row_index, "invalid amount format")
    if not amount.is_finite():
        raise ParseError(row_index, "invalid amount format")
    return amount


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def parse_statement(rows: Iterable[dict[str, Any]], template: BankTemplate) -> Iterator[ParsedTransaction]:
    """
    Lazily map statement rows to ParsedTransaction.

    The sign of the amount decides the type; zero amounts are skipped.

    Raises:
        ParseError: On the first row with a missing or malformed date/amount.
    """
    for index, row in enumerate(rows):
        raw_date = row.get(template.date_column)
        raw_amount = row.get(template.amount_column)
        if _is_blank(raw_date) or _is_blank(raw_amount):
            raise ParseError(index, "missing required fields")

        amount = parse_amount(raw_amount, template.decimal_separator, index)
        if amount == 0:
            continue

        description = row.get(template.description_column) if template.description_column else None
        currency = row.get(template.currency_column) if template.currency_column else None
        yield ParsedTransaction(
            date=parse_date(raw_date, index),
            description=str(description).strip() if not _is_blank(description) else f"Operation {index + 1}",
            amount=abs(amount),
            type="income" if amount > 0 else "expense",
            currency=str(currency).strip() if not _is_blank(currency) else None,
        )


class ImportService:
    """Preview and import of parsed statements through the account ledger."""

    def __init__(self, account_service: AccountService):
        self.account_service = account_service

    def preview(self, content: bytes, filename: str, template: BankTemplate) -> list[ParsedTransaction]:
        return list(parse_statement(read_rows(content, filename), template))

    def import_statement(
        self, account_id: Optional[str], rows: Iterable[dict[str, Any]], template: BankTemplate
    ) -> ImportResult:
        """
        Parse every row first, then record them one by one.

        A parse error aborts the import before anything is written.

        Raises:
            ValidationError: Missing account id.
            NotFoundError: Unknown account.
            ParseError: Bad row (zero-based index in `row_index`).
        """
        if not account_id:
            raise ValidationError("accountId is required")
        self.account_service.get_account(account_id)
        parsed = list(parse_statement(rows, template))

        result = ImportResult(account_id=account_id)
        for item in parsed:
            result.transactions.append(
                self.account_service.record_transaction(
                    account_id=account_id,
                    amount=item.amount,
                    type=item.type,
                    description=item.description,
                    date=item.date,
                )
            )
        logger.info(f"Imported {len(result.transactions)} transaction(s) into account #{account_id}")
        return result

    def import_file(
        self, account_id: Optional[str], content: bytes, filename: str, template: BankTemplate
    ) -> ImportResult:
        return self.import_statement(account_id, read_rows(content, filename), template)
