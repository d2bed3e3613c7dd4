"""Reconciliation engine facade.

Control flow for one import cycle:

1. fold the three record collections into a fresh registry, storefront rows that
   name their video only by title last
2. apply persisted content links (confirmed pairs skip matching)
3. propose candidates for video orphans against product-side assets
4. stage them in a caller-owned :class:`VerificationWorkflow`
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from .aggregate import DEFAULT_FOLD_CHUNK_SIZE, RevenueAggregator, split_video_titled
from .links import apply_links
from .matching import CandidateMatcher, MatchPolicy, asset_from_entity
from .registry import EntityRegistry

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence

    from contentyield.domain.model import AssetDescriptor, ContentLink, RawChannelRecord

    from .aggregate import ProgressCallback
    from .contracts import FoldResult, MatchCandidate
    from .workflow import VerificationWorkflow

log = logging.getLogger(__name__)


@dataclass(slots=True)
class ReconciliationEngine:
    policy: MatchPolicy = field(default_factory=MatchPolicy)
    fold_chunk_size: int = DEFAULT_FOLD_CHUNK_SIZE
    matcher: CandidateMatcher = field(init=False)

    def __post_init__(self) -> None:
        self.matcher = CandidateMatcher(self.policy)

    def build_registry(
        self,
        video_records: Sequence[RawChannelRecord] = (),
        product_records: Sequence[RawChannelRecord] = (),
        sponsored_records: Sequence[RawChannelRecord] = (),
        links: Iterable[ContentLink] = (),
        *,
        progress: ProgressCallback | None = None,
    ) -> tuple[EntityRegistry, FoldResult]:
        """Fold every record into a new registry and apply ``links`` to it."""

        aggregator = RevenueAggregator(EntityRegistry())
        plain, titled = split_video_titled([*video_records, *product_records, *sponsored_records])
        result = aggregator.fold_chunked(plain, chunk_size=self.fold_chunk_size, progress=progress)
        result += aggregator.fold_by_video_title(titled)
        log.info(
            "Built registry of %s entities: folded=%s, created=%s, merged=%s, rejected=%s",
            len(aggregator.registry),
            result.folded,
            result.created,
            result.merged,
            result.rejected,
        )
        apply_links(aggregator.registry, links)
        return aggregator.registry, result

    def propose(
        self,
        registry: EntityRegistry,
        assets: Iterable[AssetDescriptor] = (),
    ) -> list[MatchCandidate]:
        """Match video orphans against ``assets`` plus every product-side orphan."""

        right = [*assets, *(asset_from_entity(e) for e in registry.product_orphans())]
        return self.matcher.propose(registry.video_orphans(), right)

    def stage(
        self,
        workflow: VerificationWorkflow,
        registry: EntityRegistry,
        assets: Iterable[AssetDescriptor] = (),
    ) -> list[MatchCandidate]:
        candidates = self.propose(registry, assets)
        workflow.stage_matches(candidates)
        return candidates
