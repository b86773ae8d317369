"""Liveness/readiness probe for load balancers and the Angular client."""

import logging
from datetime import UTC, datetime
from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from smartware.core.config import settings
from smartware.core.database import check_db_connected, get_db
from smartware.schemas.health import HealthResponse

logger = logging.getLogger(__name__)
router = APIRouter()

SERVICE_NAME = "SmartWare API"
SERVICE_VERSION = "0.1.0"


@router.get("/", response_model=HealthResponse)
def get_health(db: Annotated[Session, Depends(get_db)]) -> HealthResponse:
    """Always 200; `status` drops to 'degraded' while the database is unreachable."""
    connected = check_db_connected(db)
    if not connected:
        logger.warning("Health check: database unreachable")
    return HealthResponse(
        service=SERVICE_NAME,
        version=SERVICE_VERSION,
        environment=settings.APP_ENV,
        status="ok" if connected else "degraded",
        database="connected" if connected else "disconnected",
        checked_at=datetime.now(UTC),
    )
