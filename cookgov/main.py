"""cookgov API — FastAPI application entry point.

Invariants:
    - Routes registered explicitly (no auto-discovery)
    - Global error handlers map CookGovError → structured JSON responses
    - CORS configured from settings (not hardcoded)
    - Database initialized on startup and disposed on shutdown via lifespan

Design Decisions:
    - Lifespan over @app.on_event: FastAPI recommended pattern, cleaner cleanup
    - Error handlers live in api.error_handlers; main.py only wires them
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from cookgov import __version__
from cookgov.api.error_handlers import register_error_handlers
from cookgov.api.routes import (
    audit_logs, committees, equity, health, ledger, proposals,
    rule_changes, teams, voting,
)
from cookgov.config import get_settings
from cookgov.infrastructure.database import close_db, init_db
from cookgov.infrastructure.observability import setup_logging

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup/shutdown lifecycle."""
    settings = get_settings()
    setup_logging(settings.log_level, settings.log_format)
    init_db(
        settings.database_url,
        pool_size=settings.database_pool_size,
        max_overflow=settings.database_max_overflow,
    )
    logger.info("cookgov API started")
    yield
    await close_db()
    logger.info("cookgov API shut down")


app = FastAPI(title="cookgov API", version=__version__, lifespan=lifespan)

settings = get_settings()
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_methods=["*"],
    allow_headers=["*"],
)

# ─── Routes ──────────────────────────────────────────────────────

app.include_router(health.router)
app.include_router(teams.router)
app.include_router(ledger.router)
app.include_router(equity.router)
app.include_router(committees.router)
app.include_router(proposals.router)
app.include_router(voting.router)
app.include_router(rule_changes.router)
app.include_router(audit_logs.router)

register_error_handlers(app)
