"""Manual consolidation of two canonical entities.

The numeric effect is symmetric: the survivor ends up with the elementwise sum of
both entities' additive fields whichever side is kept. Identity is not symmetric:
the surviving id, title and (when both have one) video id are always ``keep``'s, so
callers should pass the more canonical entity as ``keep``, usually the one carrying a
video id.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from .errors import SelfConsolidationError

if TYPE_CHECKING:
    from contentyield.domain.model import CanonicalEntity

    from .registry import EntityRegistry

log = logging.getLogger(__name__)


def consolidate(registry: EntityRegistry, keep: str, discard: str) -> CanonicalEntity:
    """Merge entity ``discard`` into entity ``keep`` and retire ``discard``.

    Raises :class:`EntityNotFoundError` if either id is unknown and
    :class:`SelfConsolidationError` if both ids are the same.
    """

    if keep == discard:
        raise SelfConsolidationError(keep)
    survivor = registry.require(keep)
    retired = registry.require(discard)

    registry.remove(retired.id)
    survivor.absorb(retired)
    if retired.video_id and not survivor.video_id:
        registry.claim_video_id(survivor, retired.video_id)
    elif retired.video_id and retired.video_id != survivor.video_id:
        log.warning(
            "Consolidated entity %s dropped video id %s (survivor %s keeps %s)",
            retired.id,
            retired.video_id,
            survivor.id,
            survivor.video_id,
        )
    for product_id in retired.product_ids:
        registry.claim_product_id(survivor, product_id)
    survivor.is_linked = survivor.is_linked or retired.is_linked

    log.info("Consolidated %s into %s (total=%s)", retired.id, survivor.id, survivor.total)
    return survivor
