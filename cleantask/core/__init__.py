"""Core app configuration, database, security and errors."""

from cleantask.core.config import get_settings, settings
from cleantask.core.database import get_db

__all__ = ["get_settings", "settings", "get_db"]
