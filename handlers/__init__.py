"""
handlers/ - Presentation Layer
================================
FastAPI routers. Each handler parses the request, delegates to the
appropriate Service, and wraps the result in the `{ok, data}` envelope.
No business logic lives here.
"""

from handlers.account_handler import router as account_router
from handlers.broker_handler import router as broker_router
from handlers.goal_handler import router as goal_router
from handlers.import_handler import router as import_router
from handlers.push_handler import router as push_router
from handlers.reminder_handler import router as reminder_router
from handlers.settings_handler import router as settings_router

ROUTERS = (
    settings_router,
    account_router,
    goal_router,
    reminder_router,
    import_router,
    push_router,
    broker_router,
)
