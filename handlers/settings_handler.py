"""
handlers/settings_handler.py
----------------------------
Health check, broker token, preferences, categories and dashboard stats.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query

from context import AppContext
from handlers.envelope import get_context, ok
from handlers.schemas import SettingsPatch, TokenUpdate

router = APIRouter(prefix="/api", tags=["settings"])


@router.get("/health")
def health():
    return {"ok": True}


# ── Token & settings ──────────────────────────────────────

@router.get("/token")
def get_token(ctx: AppContext = Depends(get_context)):
    return ok({"token": ctx.settings.get_token()})


@router.post("/token")
def set_token(body: TokenUpdate, ctx: AppContext = Depends(get_context)):
    settings = ctx.settings.set_token(body.token)
    return ok({"token": settings.broker_token})


@router.get("/settings")
def get_settings(ctx: AppContext = Depends(get_context)):
    return ok(ctx.settings.get_settings())


@router.patch("/settings")
def update_settings(body: SettingsPatch, ctx: AppContext = Depends(get_context)):
    return ok(ctx.settings.update_settings(body.patch()))


@router.get("/categories")
def list_categories(
    category_type: Optional[str] = Query(None, alias="type"),
    ctx: AppContext = Depends(get_context),
):
    return ok(ctx.settings.list_categories(category_type))


# ── Stats ─────────────────────────────────────────────────

@router.get("/stats/overview")
def stats_overview(ctx: AppContext = Depends(get_context)):
    return ok(ctx.stats.overview())


@router.get("/stats/monthly")
def stats_monthly(months: int = Query(6), ctx: AppContext = Depends(get_context)):
    return ok(ctx.stats.monthly(months))
