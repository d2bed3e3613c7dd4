"""SQLAlchemy mapping metadata for persisted content links."""

from __future__ import annotations

import json
import logging
from functools import cache
from typing import TYPE_CHECKING, Any, cast

from sqlalchemy import Boolean, Column, Dialect, String, Table, TypeDecorator, orm

from contentyield.domain.model import ContentLink

if TYPE_CHECKING:
    from sqlalchemy.engine import Engine

log = logging.getLogger(__name__)


class StringListType(TypeDecorator[list[str]]):
    """Ordered list of identifiers stored as a JSON array."""

    impl = String
    cache_ok = True

    def process_bind_param(self, value: list[str] | None, dialect: Dialect) -> str | None:
        _ = dialect
        if value is None:
            return None
        return json.dumps(list(value))

    def process_result_value(self, value: str | None, dialect: Dialect) -> list[str]:
        _ = dialect
        if value is None:
            return []
        loaded = json.loads(value)
        if not isinstance(loaded, list):
            return []
        items = cast(list[Any], loaded)
        return [item for item in items if isinstance(item, str) and item]


mapper_registry = orm.registry()
mapper_registry.metadata.naming_convention = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_label)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_label)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}

content_link_table = Table(
    "content_link",
    mapper_registry.metadata,
    Column("id", String(36), primary_key=True),
    Column("video_id", String(64), nullable=False, unique=True),
    Column("product_ids", StringListType(), nullable=False),
    Column("title", String, nullable=False, default=""),
    Column("display_name", String, nullable=True),
    Column("manually_linked", Boolean, nullable=False, default=False),
    Column("video_date", String(32), nullable=True),
    Column("video_duration", String(32), nullable=True),
)


@cache
def start_mappers() -> orm.registry:
    """Configure SQLAlchemy mappers for the domain model."""

    log.info("Starting SQLAlchemy mappers")
    mapper_registry.map_imperatively(ContentLink, content_link_table)
    return mapper_registry


def create_all_tables(engine: Engine) -> None:
    """Create database tables for the mapped metadata."""

    log.info("Creating all tables")
    mapper_registry.metadata.create_all(engine)
