"""Read-only projections of the registry for reporting.

None of these functions mutate entities; they return new sequences or
summary value objects.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from typing import TYPE_CHECKING

from contentyield.domain.model import ChannelKind

from .compare import parse_date

if TYPE_CHECKING:
    from collections.abc import Collection, Iterable

    from contentyield.domain.model import CanonicalEntity, RawChannelRecord


def _zeroed() -> dict[ChannelKind, Decimal]:
    return {kind: Decimal(0) for kind in ChannelKind}


def ranked(entities: Iterable[CanonicalEntity]) -> list[CanonicalEntity]:
    """Order by descending total, ties broken by entity id."""

    return sorted(entities, key=lambda entity: (-entity.total, entity.id))


@dataclass(slots=True, kw_only=True)
class ProductPivotRow:
    """Entities sharing a primary product id, summed."""

    product_id: str | None
    title: str
    entity_ids: list[str] = field(default_factory=list[str])
    revenue: dict[ChannelKind, Decimal] = field(default_factory=_zeroed)
    views: int = 0
    clicks: int = 0
    ordered_items: int = 0

    @property
    def total(self) -> Decimal:
        return sum(self.revenue.values(), Decimal(0))

    def add(self, entity: CanonicalEntity) -> None:
        self.entity_ids.append(entity.id)
        for kind, amount in entity.revenue.items():
            self.revenue[kind] += amount
        self.views += entity.views
        self.clicks += entity.clicks
        self.ordered_items += entity.ordered_items


def pivot_by_product(entities: Iterable[CanonicalEntity]) -> list[ProductPivotRow]:
    """Collapse entities onto their primary product id.

    Within one registry product ids are unique, so rows only merge when the input
    spans several registries (one per import period, for example). Entities without
    a product id each keep a row of their own. Rows come back in descending total
    order.
    """

    rows: dict[str, ProductPivotRow] = {}
    for entity in entities:
        key = f"product:{entity.product_id}" if entity.product_id else f"entity:{entity.id}"
        row = rows.get(key)
        if row is None:
            row = rows[key] = ProductPivotRow(product_id=entity.product_id, title=entity.title)
        row.add(entity)
    return sorted(rows.values(), key=lambda row: (-row.total, row.product_id or "", row.title))


def filter_by_channels(
    entities: Iterable[CanonicalEntity], kinds: Collection[ChannelKind]
) -> list[CanonicalEntity]:
    """Keep entities with positive revenue on at least one of ``kinds``.

    An empty selection, or one naming every kind, filters nothing.
    """

    if not kinds or set(kinds) >= set(ChannelKind):
        return list(entities)
    return [entity for entity in entities if any(entity.revenue[kind] > 0 for kind in kinds)]


def filter_by_years(
    entities: Iterable[CanonicalEntity], years: Collection[int]
) -> list[CanonicalEntity]:
    """Keep entities published in one of ``years``; undated entities are dropped."""

    if not years:
        return list(entities)
    kept: list[CanonicalEntity] = []
    for entity in entities:
        published = parse_date(entity.publish_date)
        if published is not None and published.year in years:
            kept.append(entity)
    return kept


def available_years(entities: Iterable[CanonicalEntity]) -> list[int]:
    """Distinct publish years, newest first."""

    years = {
        published.year
        for published in (parse_date(entity.publish_date) for entity in entities)
        if published is not None
    }
    return sorted(years, reverse=True)


def search(entities: Iterable[CanonicalEntity], query: str) -> list[CanonicalEntity]:
    """Case-insensitive substring search over titles and identifiers."""

    needle = query.strip().lower()
    if not needle:
        return list(entities)

    def haystack(entity: CanonicalEntity) -> tuple[str, ...]:
        return (entity.title, entity.original_title, entity.video_id or "", *entity.product_ids)

    return [
        entity
        for entity in entities
        if any(needle in value.lower() for value in haystack(entity) if value)
    ]


@dataclass(frozen=True, slots=True)
class RegistrySummary:
    entities: int
    revenue: Decimal
    views: int
    clicks: int
    ordered_items: int


def summarize(entities: Iterable[CanonicalEntity]) -> RegistrySummary:
    count = 0
    revenue = Decimal(0)
    views = clicks = ordered_items = 0
    for entity in entities:
        count += 1
        revenue += entity.total
        views += entity.views
        clicks += entity.clicks
        ordered_items += entity.ordered_items
    return RegistrySummary(
        entities=count,
        revenue=revenue,
        views=views,
        clicks=clicks,
        ordered_items=ordered_items,
    )


def channel_totals(records: Iterable[RawChannelRecord]) -> dict[ChannelKind, Decimal]:
    """Platform-wide totals per channel, straight from the raw records.

    Negative amounts are ignored, matching what the aggregator folds.
    """

    totals = _zeroed()
    for record in records:
        if record.amount >= 0:
            totals[record.kind] += record.amount
    return totals
