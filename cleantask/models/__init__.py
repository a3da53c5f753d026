"""SQLAlchemy ORM models."""

from cleantask.models.account import Account, Role
from cleantask.models.base import Base

__all__ = ["Account", "Base", "Role"]
