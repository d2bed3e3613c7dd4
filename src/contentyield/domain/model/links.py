"""Persisted identifier associations and review payloads."""

from __future__ import annotations

from dataclasses import dataclass, field
from uuid import uuid4


def new_link_id() -> str:
    return str(uuid4())


@dataclass(eq=False, kw_only=True)
class ContentLink:
    """Confirmed association of one video id with one or more product ids.

    ``display_name`` is the user-chosen override shown instead of the video title.
    """

    video_id: str
    product_ids: list[str] = field(default_factory=list[str])
    title: str = ""
    display_name: str | None = None
    manually_linked: bool = False
    video_date: str | None = None
    video_duration: str | None = None
    id: str = field(default_factory=new_link_id)

    @property
    def primary_product_id(self) -> str | None:
        return self.product_ids[0] if self.product_ids else None

    def add_product_ids(self, product_ids: list[str] | tuple[str, ...]) -> None:
        merged = list(self.product_ids)
        for product_id in product_ids:
            if product_id and product_id not in merged:
                merged.append(product_id)
        self.product_ids = merged


@dataclass(slots=True, kw_only=True)
class NamingProposal:
    """Display-name simplification offered to the reviewer for one product id."""

    product_id: str
    original_name: str
    proposed_name: str
    selected: bool = True
