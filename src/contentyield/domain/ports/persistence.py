"""Ports for persisting content links."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from contentyield.domain.model import ContentLink


@runtime_checkable
class Repository[TEntity](Protocol):
    """Minimal repository contract for a persistent aggregate store."""

    def add(self, entity: TEntity) -> None: ...


@runtime_checkable
class ContentLinkRepository(Repository["ContentLink"], Protocol):
    """Persistence contract for confirmed video/product links."""

    def get_by_video_id(self, video_id: str) -> ContentLink | None: ...

    def list(self) -> list[ContentLink]: ...

    def remove(self, link: ContentLink) -> None: ...
