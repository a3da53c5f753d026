"""Persistence access for domain entities."""

from cleantask.repositories.accounts import AccountRepository, SqlAccountRepository

__all__ = ["AccountRepository", "SqlAccountRepository"]
