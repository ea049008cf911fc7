"""
handlers/push_handler.py
------------------------
Web Push registration and the in-app notification feed.
"""

from fastapi import APIRouter, Depends

from context import AppContext
from handlers.envelope import get_context, ok
from handlers.schemas import PushSubscriptionIn

router = APIRouter(prefix="/api", tags=["notifications"])


@router.get("/push/public-key")
def public_key(ctx: AppContext = Depends(get_context)):
    return ok({"publicKey": ctx.notifications.public_key()})


@router.post("/push/subscribe")
def subscribe(body: PushSubscriptionIn, ctx: AppContext = Depends(get_context)):
    ctx.notifications.subscribe(body.model_dump())
    return ok({"subscribed": True})


@router.post("/push/test")
async def send_test(ctx: AppContext = Depends(get_context)):
    return ok(await ctx.notifications.send_test())


@router.get("/notifications")
def notifications(ctx: AppContext = Depends(get_context)):
    return ok(ctx.notifications.recent())
