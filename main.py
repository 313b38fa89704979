"""School Fees Management - FastAPI Application."""

import logging

from fastapi import FastAPI

from schoolfees.api.v1.router import api_router
from schoolfees.core.config import settings
from schoolfees.core.logging import configure_logging
from schoolfees.core.roles import Actor
from schoolfees.core.session import AuthEvent, auth_events

configure_logging(settings.LOG_LEVEL)
logger = logging.getLogger("schoolfees.auth")


async def log_auth_event(event: AuthEvent, actor: Actor | None) -> None:
    """Write every auth state change to the log."""
    logger.info("%s: %s", event.value, actor.email if actor else "-")


auth_events.subscribe(log_auth_event)

app = FastAPI(
    title=settings.APP_NAME,
    version="0.1.0",
    openapi_url=f"{settings.API_V1_PREFIX}/openapi.json",
    docs_url="/docs",
    redoc_url="/redoc",
)

# Include API routes
app.include_router(api_router, prefix=settings.API_V1_PREFIX)


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "ok"}
