"""Canonical joined entity: one real-world content asset across platforms."""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from typing import TYPE_CHECKING

from contentyield.domain.model.enums import ChannelKind

if TYPE_CHECKING:
    from contentyield.domain.model.records import Descriptor, RawChannelRecord


def _empty_accumulators() -> dict[ChannelKind, Decimal]:
    return {kind: Decimal(0) for kind in ChannelKind}


@dataclass(eq=False, kw_only=True)
class CanonicalEntity:
    """De-duplicated cross-platform record.

    ``total`` is always derived from the per-channel accumulators and never stored.
    Platform identifiers are maintained by :class:`EntityRegistry`; mutate them through
    the registry so its indices stay consistent.
    """

    id: str
    title: str = ""
    original_title: str = ""
    video_id: str | None = None
    product_ids: list[str] = field(default_factory=list[str])
    revenue: dict[ChannelKind, Decimal] = field(default_factory=_empty_accumulators)
    views: int = 0
    clicks: int = 0
    ordered_items: int = 0
    shipped_items: int = 0
    watch_time_hours: Decimal = Decimal(0)
    subscribers_gained: int = 0
    duration: Descriptor = None
    publish_date: Descriptor = None
    is_linked: bool = False

    @property
    def product_id(self) -> str | None:
        """Primary product identifier (first one linked)."""
        return self.product_ids[0] if self.product_ids else None

    @property
    def total(self) -> Decimal:
        return sum(self.revenue.values(), Decimal(0))

    @property
    def video_estimated_revenue(self) -> Decimal:
        return self.revenue[ChannelKind.VIDEO_AD_REVENUE]

    @property
    def onsite_revenue(self) -> Decimal:
        return self.revenue[ChannelKind.PRODUCT_ONSITE]

    @property
    def offsite_revenue(self) -> Decimal:
        return self.revenue[ChannelKind.PRODUCT_OFFSITE]

    @property
    def sponsored_onsite_revenue(self) -> Decimal:
        return self.revenue[ChannelKind.SPONSORED_ONSITE]

    @property
    def sponsored_offsite_revenue(self) -> Decimal:
        return self.revenue[ChannelKind.SPONSORED_OFFSITE]

    @property
    def is_orphan(self) -> bool:
        """True while the entity carries identifiers from only one platform.

        A linked entity is never an orphan, even when its counterpart was joined by
        title and brought no product id.
        """
        if self.is_linked:
            return False
        return not (self.video_id and self.product_ids)

    @property
    def is_video_orphan(self) -> bool:
        return bool(self.video_id) and not self.product_ids and not self.is_linked

    @property
    def is_product_orphan(self) -> bool:
        return not self.video_id

    def add_record(self, record: RawChannelRecord) -> None:
        """Fold one raw record's additive fields into this entity."""

        if record.amount < 0:
            raise ValueError(f"Negative amount on record {record.source_ref or record.title!r}")
        self.revenue[record.kind] += record.amount
        self.views += record.views
        self.clicks += record.clicks
        self.ordered_items += record.ordered_items
        self.shipped_items += record.shipped_items
        self.watch_time_hours += record.watch_time_hours
        self.subscribers_gained += record.subscribers_gained
        self.fill_descriptors(duration=record.duration, publish_date=record.date)
        if not self.original_title and record.title:
            self.original_title = record.title
        if not self.title and record.title:
            self.title = record.title

    def absorb(self, other: CanonicalEntity) -> None:
        """Add every additive field of ``other`` into this entity.

        Identifiers are not touched here; the registry moves them.
        """

        for kind, amount in other.revenue.items():
            self.revenue[kind] += amount
        self.views += other.views
        self.clicks += other.clicks
        self.ordered_items += other.ordered_items
        self.shipped_items += other.shipped_items
        self.watch_time_hours += other.watch_time_hours
        self.subscribers_gained += other.subscribers_gained
        self.fill_descriptors(duration=other.duration, publish_date=other.publish_date)
        if not self.original_title:
            self.original_title = other.original_title
        if not self.title:
            self.title = other.title

    def deduct(self, other: CanonicalEntity) -> None:
        """Subtract every additive field of ``other``; the inverse of :meth:`absorb`."""

        for kind, amount in other.revenue.items():
            self.revenue[kind] -= amount
        self.views -= other.views
        self.clicks -= other.clicks
        self.ordered_items -= other.ordered_items
        self.shipped_items -= other.shipped_items
        self.watch_time_hours -= other.watch_time_hours
        self.subscribers_gained -= other.subscribers_gained

    def fill_descriptors(self, *, duration: Descriptor, publish_date: Descriptor) -> None:
        if self.duration in (None, "") and duration not in (None, ""):
            self.duration = duration
        if self.publish_date in (None, "") and publish_date not in (None, ""):
            self.publish_date = publish_date

    def numeric_snapshot(self) -> tuple[object, ...]:
        """Comparable view of every additive field (used by tests and audits)."""

        return (
            tuple((kind, self.revenue[kind]) for kind in ChannelKind),
            self.total,
            self.views,
            self.clicks,
            self.ordered_items,
            self.shipped_items,
            self.watch_time_hours,
            self.subscribers_gained,
        )


type JoinedMetric = CanonicalEntity
