"""
main.py
-------
Entry point for the FinStat API server.

Responsibilities:
    - Initialize the database connection pool, schema and seed data.
    - Build the FastAPI application with all routers and error mapping.
    - Run the background jobs (reminder scheduler, broker sync).
"""

import asyncio
from contextlib import asynccontextmanager
from typing import Awaitable, Callable, Optional

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from config import API_HOST, API_PORT, BROKER_SYNC_SECONDS, CORS_ORIGINS, REMINDER_POLL_SECONDS
from context import AppContext, build_context
from db.connection import close_pool, init_pool
from db.init_db import create_tables
from db.seed import seed_database
from handlers import ROUTERS
from handlers.envelope import install_error_handlers
from utils.logger import get_logger

logger = get_logger(__name__)


async def run_periodically(name: str, interval: float, job: Callable[[], Awaitable]) -> None:
    """
    Run `job` every `interval` seconds until cancelled.
    A failing run is logged and the schedule continues.
    """
    while True:
        try:
            await job()
        except asyncio.CancelledError:
            raise
        except Exception as e:
            logger.error(f"Job '{name}' failed: {e}")
        await asyncio.sleep(interval)


async def check_reminders(ctx: AppContext) -> None:
    """Scheduled job: fire due reminders."""
    fired = await ctx.reminders.process_due()
    if fired:
        logger.info(f"Reminder job fired {len(fired)} reminder(s)")


async def sync_broker(ctx: AppContext) -> None:
    """Scheduled job: mirror brokerage cash balances."""
    await ctx.broker.sync()


def create_app(ctx: Optional[AppContext] = None, start_jobs: bool = True) -> FastAPI:
    """
    Build the application.

    Args:
        ctx: Prebuilt context (tests pass a memory-backed one).
        start_jobs: Start the background jobs with the app.
    """
    ctx = ctx or build_context()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        # ── 1. Database setup ─────────────────────────────────
        if ctx.backend == "postgres":
            logger.info("Initializing database...")
            init_pool()
            create_tables()
            seed_database(ctx.repos)

        # ── 2. Schedule jobs ──────────────────────────────────
        tasks = []
        if start_jobs:
            tasks = [
                asyncio.create_task(run_periodically(
                    "reminders", REMINDER_POLL_SECONDS, lambda: check_reminders(ctx)
                )),
                asyncio.create_task(run_periodically(
                    "broker_sync", BROKER_SYNC_SECONDS, lambda: sync_broker(ctx)
                )),
            ]
            logger.info(
                f"Scheduled reminders every {REMINDER_POLL_SECONDS}s "
                f"+ broker sync every {BROKER_SYNC_SECONDS}s"
            )

        yield

        # ── 3. Cleanup on shutdown ────────────────────────────
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        if ctx.backend == "postgres":
            close_pool()
        logger.info("FinStat stopped.")

    app = FastAPI(title="FinStat", lifespan=lifespan)
    app.state.ctx = ctx
    app.add_middleware(
        CORSMiddleware,
        allow_origins=CORS_ORIGINS,
        allow_credentials="*" not in CORS_ORIGINS,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    install_error_handlers(app)
    for router in ROUTERS:
        app.include_router(router)
    return app


def main() -> None:
    """Initialize and run the API server."""
    logger.info(f"🚀 FinStat API listening on {API_HOST}:{API_PORT}")
    uvicorn.run(create_app(), host=API_HOST, port=API_PORT, log_config=None)


if __name__ == "__main__":
    main()
