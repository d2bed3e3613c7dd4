"""Content links: confirmed video/product associations kept between runs.

Applying persisted links before matching makes reconciliation deterministic for
pairs a reviewer already confirmed; those entities no longer show up as orphans.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from contentyield.domain.model import ContentLink

from .apply import attach_product_id
from .compare import parse_date, to_seconds

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence

    from contentyield.domain.model import CanonicalEntity, NamingProposal

    from .registry import EntityRegistry

log = logging.getLogger(__name__)


def apply_links(registry: EntityRegistry, links: Iterable[ContentLink]) -> int:
    """Fold each link's product entities into its video entity.

    Idempotent: applying the same links twice leaves the registry unchanged the second
    time. Links whose video is not in the registry are ignored. Returns the number of
    links applied.
    """

    applied = 0
    for link in links:
        entity = registry.by_video_id(link.video_id)
        if entity is None:
            log.debug("Link %s references unknown video %s", link.id, link.video_id)
            continue
        for product_id in link.product_ids:
            attach_product_id(registry, entity, product_id)
        if link.display_name:
            entity.title = link.display_name
        entity.is_linked = True
        applied += 1
    log.info("Applied %s content links", applied)
    return applied


def link_for_entity(
    entity: CanonicalEntity,
    *,
    existing: ContentLink | None = None,
    manually_linked: bool = False,
) -> ContentLink:
    """Build (or refresh) the link recording ``entity``'s identifier association."""

    if not entity.video_id:
        raise ValueError(f"Entity {entity.id} has no video id to link")
    if not entity.product_ids:
        raise ValueError(f"Entity {entity.id} has no product ids to link")

    if existing is not None:
        existing.add_product_ids(entity.product_ids)
        existing.manually_linked = existing.manually_linked or manually_linked
        return existing

    parsed_date = parse_date(entity.publish_date)
    seconds = to_seconds(entity.duration)
    return ContentLink(
        video_id=entity.video_id,
        product_ids=list(entity.product_ids),
        title=entity.original_title or entity.title,
        manually_linked=manually_linked,
        video_date=parsed_date.isoformat() if parsed_date else None,
        video_duration=str(seconds) if seconds is not None else None,
    )


def links_by_video(links: Iterable[ContentLink]) -> dict[str, ContentLink]:
    return {link.video_id: link for link in links}


def upsert_link(links: Sequence[ContentLink], link: ContentLink) -> list[ContentLink]:
    """Return ``links`` with ``link`` replacing any entry for the same video id."""

    updated = [existing for existing in links if existing.video_id != link.video_id]
    position = next(
        (index for index, existing in enumerate(links) if existing.video_id == link.video_id),
        len(updated),
    )
    updated.insert(position, link)
    return updated


def apply_display_names(
    registry: EntityRegistry,
    links: Sequence[ContentLink],
    proposals: Iterable[NamingProposal],
) -> tuple[list[ContentLink], int]:
    """Apply the selected display-name proposals to links and entities.

    A proposal names a product id; every link whose primary product id matches gets
    the override, and so does the entity currently owning that product id.
    """

    chosen = {
        proposal.product_id: proposal.proposed_name.strip()
        for proposal in proposals
        if proposal.selected and proposal.proposed_name.strip()
    }
    updated = 0
    for link in links:
        name = chosen.get(link.primary_product_id or "")
        if name is None:
            continue
        link.display_name = name
        updated += 1
    for product_id, name in chosen.items():
        entity = registry.by_product_id(product_id)
        if entity is not None:
            entity.title = name
    return list(links), updated
