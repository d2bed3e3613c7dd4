"""Immutable facts supplied by the export-import collaborators."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal

from contentyield.domain.model.enums import ChannelKind

type Descriptor = str | int | date | datetime | None


def to_decimal(value: Decimal | int | float | str | None) -> Decimal:
    """Coerce a monetary or fractional amount into a ``Decimal``.

    Floats go through ``str`` so ``10.1`` becomes ``Decimal("10.1")`` rather than its
    binary expansion.
    """

    if value is None:
        return Decimal(0)
    if isinstance(value, Decimal):
        return value
    if isinstance(value, float):
        return Decimal(str(value))
    return Decimal(value)


@dataclass(frozen=True, slots=True, kw_only=True)
class RawChannelRecord:
    """One row of a platform export, already parsed by the import layer.

    Many raw records may describe the same real-world asset; the aggregator folds them.
    ``video_title`` is set by storefront rows that name the video they were earned on
    without carrying its id.
    """

    kind: ChannelKind
    title: str = ""
    amount: Decimal = Decimal(0)
    video_id: str | None = None
    product_id: str | None = None
    views: int = 0
    clicks: int = 0
    ordered_items: int = 0
    shipped_items: int = 0
    watch_time_hours: Decimal = Decimal(0)
    subscribers_gained: int = 0
    duration: Descriptor = None
    date: Descriptor = None
    video_title: str | None = None
    source_ref: str | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "amount", to_decimal(self.amount))
        object.__setattr__(self, "watch_time_hours", to_decimal(self.watch_time_hours))
        object.__setattr__(self, "video_id", _blank_to_none(self.video_id))
        object.__setattr__(self, "product_id", _blank_to_none(self.product_id))
        object.__setattr__(self, "video_title", _blank_to_none(self.video_title))


@dataclass(frozen=True, slots=True, kw_only=True)
class AssetDescriptor:
    """A product-platform video/asset the matcher can pair with an orphaned video.

    ``entity_id`` is set when the descriptor was derived from an orphaned registry
    entity; externally supplied descriptors (storefront video metadata) leave it empty
    and only carry the ``product_ids`` they promote.
    """

    title: str
    duration: Descriptor = None
    date: Descriptor = None
    product_ids: tuple[str, ...] = field(default_factory=tuple)
    entity_id: str | None = None
    asset_id: str | None = None


def _blank_to_none(value: str | None) -> str | None:
    if value is None:
        return None
    stripped = value.strip()
    return stripped or None
