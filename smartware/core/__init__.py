"""Core app configuration, database and security."""

from smartware.core.config import JwtSettings, get_settings, settings
from smartware.core.database import get_db

__all__ = ["JwtSettings", "get_settings", "settings", "get_db"]
