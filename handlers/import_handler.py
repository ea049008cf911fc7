"""
handlers/import_handler.py
--------------------------
Statement upload: template list, preview, and import into an account.
"""

from typing import Optional

from fastapi import APIRouter, Depends, File, Form, UploadFile

from context import AppContext
from handlers.envelope import get_context, ok
from services.import_service import BANK_TEMPLATES, BankTemplate, get_template

router = APIRouter(prefix="/api/import", tags=["import"])


def _template(
    bank: str = Form("sberbank"),
    date_column: Optional[str] = Form(None, alias="dateColumn"),
    description_column: Optional[str] = Form(None, alias="descriptionColumn"),
    amount_column: Optional[str] = Form(None, alias="amountColumn"),
    currency_column: Optional[str] = Form(None, alias="currencyColumn"),
    decimal_separator: Optional[str] = Form(None, alias="decimalSeparator"),
) -> BankTemplate:
    return get_template(
        bank,
        {
            "date": date_column,
            "description": description_column,
            "amount": amount_column,
            "currency": currency_column,
            "decimalSeparator": decimal_separator,
        },
    )


@router.get("/templates")
def list_templates():
    return ok([t.to_dict() for t in BANK_TEMPLATES.values()])


@router.post("/preview")
def preview(
    file: UploadFile = File(...),
    template: BankTemplate = Depends(_template),
    ctx: AppContext = Depends(get_context),
):
    content = file.file.read()
    return ok(ctx.imports.preview(content, file.filename, template))


@router.post("")
def import_statement(
    file: UploadFile = File(...),
    account_id: Optional[str] = Form(None, alias="accountId"),
    template: BankTemplate = Depends(_template),
    ctx: AppContext = Depends(get_context),
):
    content = file.file.read()
    return ok(ctx.imports.import_file(account_id, content, file.filename, template))
