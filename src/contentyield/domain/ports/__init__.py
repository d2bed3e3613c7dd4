"""Domain port definitions for adapters."""

from __future__ import annotations

from .persistence import ContentLinkRepository, Repository
from .unit_of_work import (
    ContentLinkRepositories,
    ContentLinkUnitOfWork,
    RepositoryCollection,
    UnitOfWork,
)

__all__ = [
    "ContentLinkRepositories",
    "ContentLinkRepository",
    "ContentLinkUnitOfWork",
    "Repository",
    "RepositoryCollection",
    "UnitOfWork",
]
