"""Health check payload."""

from datetime import datetime
from typing import Literal

from pydantic import Field

from smartware.schemas.base import CamelModel


class HealthResponse(CamelModel):
    service: str = Field(description="Service name")
    version: str
    environment: Literal["dev", "prod"]
    status: Literal["ok", "degraded"] = Field(
        description="'degraded' when the database cannot be reached"
    )
    database: Literal["connected", "disconnected"]
    checked_at: datetime
