"""SQLAlchemy adapter package for contentyield."""

from __future__ import annotations

from .mappings import content_link_table, create_all_tables, mapper_registry, start_mappers
from .repositories import SqlAlchemyContentLinkRepository
from .unit_of_work import (
    SqlAlchemyContentLinkUnitOfWork,
    StartupError,
    shutdown,
    startup,
)

__all__ = [
    "SqlAlchemyContentLinkRepository",
    "SqlAlchemyContentLinkUnitOfWork",
    "StartupError",
    "content_link_table",
    "create_all_tables",
    "mapper_registry",
    "shutdown",
    "start_mappers",
    "startup",
]
