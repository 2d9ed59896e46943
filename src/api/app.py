"""FastAPI application for the dues ledger."""

import logging
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from src.api.errors import register_error_handlers
from src.api.fees import router as fees_router
from src.api.fines import router as fines_router
from src.api.payment import router as payment_router
from src.api.status import router as status_router
from src.config.settings import get_settings
from src.services import AsyncSessionLocal
from src.services.blob_store import LocalBlobStore
from src.services.notification_service import NotificationDispatcher, build_bot

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Create collaborators on startup; flush pending notifications on shutdown."""
    settings = get_settings()
    bot = build_bot(settings.telegram_bot_token)
    if bot is not None:
        await bot.initialize()
        logger.info("Telegram push notifications enabled")
    else:
        logger.info("TELEGRAM_BOT_TOKEN not set; notifications are in-app only")

    app.state.dispatcher = NotificationDispatcher(AsyncSessionLocal, bot=bot)
    app.state.blob_store = LocalBlobStore(settings.receipts_dir, settings.receipts_base_url)
    try:
        yield
    finally:
        logger.info("Draining %d pending notification(s)", app.state.dispatcher.pending)
        await app.state.dispatcher.drain()
        if bot is not None:
            await bot.shutdown()


app = FastAPI(
    title="HOA Dues",
    description="Fee, fine and payment reconciliation for homeowner associations",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_error_handlers(app)

app.include_router(fees_router)
app.include_router(fines_router)
app.include_router(payment_router)
app.include_router(status_router)

# Serve stored receipts when they live on the local filesystem
receipts_path = Path(get_settings().receipts_dir)
if receipts_path.is_dir():
    app.mount(
        get_settings().receipts_base_url,
        StaticFiles(directory=str(receipts_path)),
        name="receipts",
    )
    logger.info("Mounted receipts from %s", receipts_path)


@app.get("/health")
async def health_check() -> dict:
    """Health check endpoint for monitoring."""
    return {"status": "ok"}


__all__ = ["app", "lifespan"]
