import asyncio
import logging
from typing import Literal

from fastapi import APIRouter
from pydantic import BaseModel
from sqlalchemy import text

from leave_engine.config import get_settings
from leave_engine.db import SessionDep

logger = logging.getLogger(__name__)

router = APIRouter(tags=["health"])


class HealthResponse(BaseModel):
    """Health check response."""

    status: Literal["ok", "degraded"]
    version: str
    environment: str
    store: Literal["ok", "unavailable"]


@router.get("/health", response_model=HealthResponse)
async def health(session: SessionDep) -> HealthResponse:
    """Report whether the leave store answers within the store timeout."""
    settings = get_settings()
    store_status: Literal["ok", "unavailable"] = "ok"

    try:
        async with asyncio.timeout(settings.store_timeout_seconds):
            await session.execute(text("SELECT 1"))
    except Exception:
        logger.exception("Health check: leave store unreachable")
        store_status = "unavailable"

    return HealthResponse(
        status="ok" if store_status == "ok" else "degraded",
        version=settings.app_version,
        environment=settings.environment,
        store=store_status,
    )
