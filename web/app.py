"""
FastAPI application

Router registration and app setup.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from adapters.db.sqlite_adapter import SQLiteAdapter, init_month_tables, resolve_db_path
from adapters.whatsapp import WhatsAppClient
from core.config.loader import get_settings
from core.ledger import LedgerEngine, LedgerHistory
from core.messaging import Broadcaster
from core.storage import SQLiteMemberStore
from web.dependencies import SchemeServices, set_services
from web.errors import register_error_handlers
from web.routes import health, members, messages, months, tokens, winners

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """App lifecycle

    Owns the DB connection and the WhatsApp client; builds the engine on
    top of them.
    """
    settings = get_settings()
    months_seq = settings.months

    db = SQLiteAdapter(resolve_db_path(settings.db_path))
    await db.connect()
    await init_month_tables(db, months_seq)

    store = SQLiteMemberStore(db)
    whatsapp = WhatsAppClient(
        api_url=settings.whatsapp.api_url,
        timeout=settings.whatsapp.timeout_sec,
    )

    set_services(
        SchemeServices(
            engine=LedgerEngine(
                store,
                months_seq,
                paid_to_recipients=settings.scheme.paid_to_recipients,
                enforce_winner_eligibility=settings.scheme.enforce_winner_eligibility,
            ),
            history=LedgerHistory(
                store,
                months_seq,
                contribution_amount=settings.scheme.contribution_amount,
            ),
            broadcaster=Broadcaster(
                whatsapp,
                settings.scheme,
                max_retries=settings.whatsapp.max_retries,
                retry_backoff_sec=settings.whatsapp.retry_backoff_sec,
                message_delay_sec=settings.whatsapp.message_delay_sec,
            ),
        )
    )
    logger.info(f"Web: ledger engine ready ({months_seq!r})")

    try:
        yield
    finally:
        set_services(None)
        await whatsapp.close()
        await db.close()
        logger.info("Web: resources released")


app = FastAPI(
    title="Savings Scheme Ledger API",
    description="Monthly ledger of a rotating savings scheme",
    version=health.API_VERSION,
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)

# CORS (dashboard served from another origin)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_error_handlers(app)

# =========================================================================
# API routers
# =========================================================================

app.include_router(health.router)
app.include_router(months.router)
app.include_router(members.router)
app.include_router(tokens.router)
app.include_router(winners.router)
app.include_router(messages.router)
