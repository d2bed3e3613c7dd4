"""Revenue aggregation: fold raw channel records into canonical entities.

The fold is purely additive, so applying records in one batch or many, in any
order, produces the same accumulators and the same entity ids. It is not
re-ingestion safe: callers must pass batches already deduplicated by source.
Folding an export twice counts it twice.

Identifier resolution, in order:

1. a record with a video id always lands on that video's entity, which is created
   when missing; its product id is claimed for the video
2. a product id wanted by two videos stays with the lowest video id, and the
   revenue of product-only records for it moves along
3. product-only and title-only records land on whichever entity owns the key
"""

from __future__ import annotations

import logging
from collections import defaultdict
from collections.abc import Callable
from dataclasses import dataclass, field, replace
from itertools import chain
from typing import TYPE_CHECKING

from contentyield.domain.model import CanonicalEntity, ChannelKind

from .consolidate import consolidate
from .contracts import FoldResult
from .normalize import title_key
from .registry import EntityRegistry, entity_id_for

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence

    from contentyield.domain.model import RawChannelRecord

    from .registry import IdentityKey

type ProgressCallback = Callable[[int, int], None]

DEFAULT_FOLD_CHUNK_SIZE = 100

log = logging.getLogger(__name__)


def resolve_key(record: RawChannelRecord) -> IdentityKey | None:
    """Return the single canonical key for ``record``.

    Precedence: video id, then product id, then normalized title. ``None`` means the
    record has neither an identifier nor a usable title and must be rejected.
    """

    if record.video_id:
        return ("video", record.video_id)
    if record.product_id:
        return ("product", record.product_id)
    key = title_key(record.title)
    if key is None:
        return None
    return ("title", key)


def split_video_titled(
    records: Iterable[RawChannelRecord],
) -> tuple[list[RawChannelRecord], list[RawChannelRecord]]:
    """Separate records that name their video only by title from the rest."""

    plain: list[RawChannelRecord] = []
    titled: list[RawChannelRecord] = []
    for record in records:
        (titled if record.video_title and not record.video_id else plain).append(record)
    return plain, titled


@dataclass(slots=True)
class RevenueAggregator:
    """Fold records into ``registry`` in place.

    Product-only contributions are remembered per product id so a contested id can
    move to the video that outranks its owner. Fold every batch of one import through
    the same aggregator.
    """

    registry: EntityRegistry = field(default_factory=EntityRegistry)
    _product_shares: dict[str, CanonicalEntity] = field(
        default_factory=dict["str", "CanonicalEntity"], repr=False
    )
    _videos_by_title: defaultdict[str, set[str]] = field(
        default_factory=lambda: defaultdict(set), repr=False
    )

    def fold(self, records: Iterable[RawChannelRecord]) -> FoldResult:
        result = FoldResult()
        for record in records:
            self._fold_one(record, result)
        return result

    def fold_chunked(
        self,
        records: Sequence[RawChannelRecord],
        *,
        chunk_size: int = DEFAULT_FOLD_CHUNK_SIZE,
        progress: ProgressCallback | None = None,
    ) -> FoldResult:
        """Fold ``records`` in slices, reporting progress between slices.

        Produces the same registry as :meth:`fold`; chunking only gives an
        interactive host the chance to stay responsive.
        """

        if chunk_size <= 0:
            raise ValueError("chunk_size must be positive")
        result = FoldResult()
        total = len(records)
        for start in range(0, total, chunk_size):
            result += self.fold(records[start : start + chunk_size])
            if progress is not None:
                progress(min(start + chunk_size, total), total)
        return result

    def fold_by_video_title(self, records: Iterable[RawChannelRecord]) -> FoldResult:
        """Fold storefront records that name the video they were earned on.

        A record whose ``video_title`` normalizes to the ad-revenue title of exactly
        one video is folded onto that video; the rest fold by their own identifiers.
        Call this after every other record of the import has been folded.
        """

        result = FoldResult()
        for record in records:
            video_id = None if record.video_id else self._video_for_title(record.video_title)
            self._fold_one(replace(record, video_id=video_id) if video_id else record, result)
        return result

    def ingest(
        self,
        video_records: Iterable[RawChannelRecord] = (),
        product_records: Iterable[RawChannelRecord] = (),
        sponsored_records: Iterable[RawChannelRecord] = (),
    ) -> FoldResult:
        """Fold the three caller-supplied collections into the registry."""

        plain, titled = split_video_titled(
            chain(video_records, product_records, sponsored_records)
        )
        result = self.fold(plain)
        result += self.fold_by_video_title(titled)
        log.info(
            "Folded records: folded=%s, created=%s, merged=%s, rejected=%s",
            result.folded,
            result.created,
            result.merged,
            result.rejected,
        )
        return result

    def _fold_one(self, record: RawChannelRecord, result: FoldResult) -> None:
        key = resolve_key(record)
        if key is None:
            log.warning("Skipping record without identifier or title: %s", record.source_ref)
            result.rejected += 1
            return
        if record.amount < 0:
            log.warning(
                "Skipping record %s with negative amount %s",
                record.source_ref or key,
                record.amount,
            )
            result.rejected += 1
            return

        entity = self._entity_for(record, key, result)
        entity.add_record(record)
        namespace, value = key
        if namespace == "product":
            self._share_for(value).add_record(record)
        if namespace == "video" and record.kind is ChannelKind.VIDEO_AD_REVENUE:
            video_title = title_key(record.title)
            if video_title is not None:
                self._videos_by_title[video_title].add(value)
        result.folded += 1

    def _entity_for(
        self,
        record: RawChannelRecord,
        key: IdentityKey,
        result: FoldResult,
    ) -> CanonicalEntity:
        namespace, value = key
        if namespace != "video":
            return self.registry.resolve(key) or self._create(record, key, result)

        entity = self.registry.by_video_id(value) or self._create(record, key, result)
        if record.product_id:
            self._claim_product(entity, value, record.product_id, result)
        return entity

    def _create(
        self, record: RawChannelRecord, key: IdentityKey, result: FoldResult
    ) -> CanonicalEntity:
        namespace, value = key
        entity = self.registry.add(
            CanonicalEntity(
                id=self._unused_id(entity_id_for(key)),
                title=record.title,
                original_title=record.title,
                video_id=value if namespace == "video" else None,
                product_ids=[value] if namespace == "product" else [],
            )
        )
        result.created += 1
        return entity

    def _claim_product(
        self,
        entity: CanonicalEntity,
        video_id: str,
        product_id: str,
        result: FoldResult,
    ) -> None:
        registry = self.registry
        owner = registry.by_product_id(product_id)
        if owner is entity:
            return
        if owner is None:
            registry.claim_product_id(entity, product_id)
            return
        if not owner.video_id:
            # the record proves the product orphan is this video's asset
            consolidate(registry, keep=entity.id, discard=owner.id)
            result.merged += 1
            return

        keeper = min(video_id, owner.video_id)
        log.warning(
            "Product %s is claimed by videos %s and %s; keeping it on %s",
            product_id,
            owner.video_id,
            video_id,
            keeper,
        )
        if keeper == video_id:
            self._move_product(owner, entity, product_id)

    def _move_product(
        self, owner: CanonicalEntity, target: CanonicalEntity, product_id: str
    ) -> None:
        self.registry.release_product_id(owner, product_id)
        self.registry.claim_product_id(target, product_id)
        share = self._product_shares.get(product_id)
        if share is not None:
            owner.deduct(share)
            target.absorb(share)

    def _share_for(self, product_id: str) -> CanonicalEntity:
        share = self._product_shares.get(product_id)
        if share is None:
            share = self._product_shares[product_id] = CanonicalEntity(id=f"share:{product_id}")
        return share

    def _video_for_title(self, video_title: str | None) -> str | None:
        key = title_key(video_title)
        owners = self._videos_by_title.get(key) if key else None
        if not owners or len(owners) != 1:
            return None
        (video_id,) = owners
        return video_id

    def _unused_id(self, base: str) -> str:
        if base not in self.registry:
            return base
        suffix = 2
        while f"{base}#{suffix}" in self.registry:
            suffix += 1
        return f"{base}#{suffix}"
