"""Apply approved associations to the canonical registry.

Responsibilities of this stage:
- merge a product-side entity into the video entity a candidate names
- attach product ids, consolidating any orphan that already owns them
- never overwrite an identifier owned by a different video entity
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from .consolidate import consolidate
from .errors import StaleReferenceError, UnlinkableCandidateError

if TYPE_CHECKING:
    from contentyield.domain.model import CanonicalEntity

    from .contracts import MatchCandidate
    from .registry import EntityRegistry

log = logging.getLogger(__name__)


def attach_product_id(registry: EntityRegistry, entity: CanonicalEntity, product_id: str) -> bool:
    """Make ``product_id`` resolve to ``entity``.

    An orphaned product entity owning the id is consolidated into ``entity``. Returns
    ``False`` (and leaves the registry unchanged) when another video entity owns it.
    """

    owner = registry.by_product_id(product_id)
    if owner is entity:
        return True
    if owner is None:
        registry.claim_product_id(entity, product_id)
        return True
    if owner.video_id:
        log.warning(
            "Product %s already linked to video %s; not attaching to %s",
            product_id,
            owner.video_id,
            entity.id,
        )
        return False
    consolidate(registry, keep=entity.id, discard=owner.id)
    return True


def apply_candidate(registry: EntityRegistry, candidate: MatchCandidate) -> CanonicalEntity:
    """Merge the asset side of ``candidate`` into its video entity.

    Raises :class:`StaleReferenceError` when either referenced entity has already been
    consumed, for example by an earlier candidate in the same commit, and
    :class:`UnlinkableCandidateError` when an external asset's product ids are all
    owned by other videos. Neither leaves the registry changed.
    """

    video = registry.get(candidate.entity_id)
    if video is None:
        raise StaleReferenceError(candidate.entity_id, candidate_id=candidate.candidate_id)

    asset_entity_id = candidate.asset.entity_id
    if asset_entity_id is not None:
        if asset_entity_id not in registry or asset_entity_id == video.id:
            raise StaleReferenceError(asset_entity_id, candidate_id=candidate.candidate_id)
        consolidate(registry, keep=video.id, discard=asset_entity_id)

    attached = [
        product_id
        for product_id in candidate.asset.product_ids
        if attach_product_id(registry, video, product_id)
    ]
    if asset_entity_id is None and not attached:
        raise UnlinkableCandidateError(
            candidate.candidate_id, product_ids=candidate.asset.product_ids
        )
    video.is_linked = True
    return video
