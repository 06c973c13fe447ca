"""SQLAlchemy adapter package for iapsync."""

from __future__ import annotations

from .mappings import create_all_tables, key_value_table, metadata
from .repositories import SqlAlchemyKeyValueRepository
from .unit_of_work import (
    SqlAlchemySubscriptionUnitOfWork,
    StartupError,
    is_started,
    shutdown,
    startup,
)

__all__ = [
    "SqlAlchemyKeyValueRepository",
    "SqlAlchemySubscriptionUnitOfWork",
    "StartupError",
    "create_all_tables",
    "is_started",
    "key_value_table",
    "metadata",
    "shutdown",
    "startup",
]
