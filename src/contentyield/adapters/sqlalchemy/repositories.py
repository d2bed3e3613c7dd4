"""Repository implementations backed by SQLAlchemy sessions."""

from __future__ import annotations

from typing import TYPE_CHECKING

from sqlalchemy import select

from contentyield.adapters.sqlalchemy.mappings import content_link_table
from contentyield.domain.model import ContentLink

if TYPE_CHECKING:
    from sqlalchemy.orm import Session


class SqlAlchemyContentLinkRepository:
    def __init__(self, session: Session) -> None:
        self.session = session

    def add(self, entity: ContentLink) -> None:
        self.session.add(entity)

    def get_by_video_id(self, video_id: str) -> ContentLink | None:
        stmt = select(ContentLink).where(content_link_table.c.video_id == video_id)
        return self.session.execute(stmt).scalar_one_or_none()

    def list(self) -> list[ContentLink]:
        stmt = select(ContentLink).order_by(content_link_table.c.video_id)
        return list(self.session.execute(stmt).scalars())

    def remove(self, link: ContentLink) -> None:
        self.session.delete(link)
