"""Translate validated export rows into domain records.

Rows that fail validation are skipped and logged; one bad row never aborts an import.
"""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING

from pydantic import BaseModel, ValidationError

from contentyield.domain.model import AssetDescriptor, ChannelKind, RawChannelRecord

from .schema import AssetExportRow, ProductExportRow, SponsoredExportRow, VideoExportRow

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable, Mapping

log = getLogger(__name__)

_PRODUCT_KINDS = {"onsite": ChannelKind.PRODUCT_ONSITE, "offsite": ChannelKind.PRODUCT_OFFSITE}
_SPONSORED_KINDS = {
    "onsite": ChannelKind.SPONSORED_ONSITE,
    "offsite": ChannelKind.SPONSORED_OFFSITE,
}


def translate_video_row(row: VideoExportRow, *, source_ref: str | None = None) -> RawChannelRecord:
    return RawChannelRecord(
        kind=ChannelKind.VIDEO_AD_REVENUE,
        title=row.title,
        amount=row.estimated_revenue,
        video_id=row.video_id,
        views=row.views,
        watch_time_hours=row.watch_time_hours,
        subscribers_gained=row.subscribers_gained,
        duration=row.duration,
        date=row.publish_date,
        source_ref=source_ref,
    )


def translate_product_row(
    row: ProductExportRow, *, source_ref: str | None = None
) -> RawChannelRecord:
    return RawChannelRecord(
        kind=_PRODUCT_KINDS[row.placement],
        title=row.title,
        amount=row.revenue,
        product_id=row.asin,
        clicks=row.clicks,
        ordered_items=row.ordered_items,
        shipped_items=row.shipped_items,
        date=row.report_date,
        video_title=row.video_title,
        source_ref=source_ref,
    )


def translate_sponsored_row(
    row: SponsoredExportRow, *, source_ref: str | None = None
) -> RawChannelRecord:
    return RawChannelRecord(
        kind=_SPONSORED_KINDS[row.placement],
        title=row.title,
        amount=row.revenue,
        video_id=row.video_id,
        product_id=row.asin,
        clicks=row.clicks,
        date=row.report_date,
        source_ref=source_ref,
    )


def translate_asset_row(row: AssetExportRow) -> AssetDescriptor:
    return AssetDescriptor(
        title=row.title,
        duration=row.duration,
        date=row.upload_date,
        product_ids=tuple(dict.fromkeys(row.asins)),
        asset_id=row.asset_id,
    )


def _translate_rows[TRow: BaseModel, TOut](
    rows: Iterable[Mapping[str, object]],
    model: type[TRow],
    translate: Callable[[TRow, str], TOut],
    label: str,
) -> list[TOut]:
    translated: list[TOut] = []
    skipped = 0
    for position, raw in enumerate(rows):
        source_ref = f"{label}[{position}]"
        try:
            row = model.model_validate(raw)
        except ValidationError as exc:
            skipped += 1
            log.warning("Skipping invalid %s row %s: %s", label, position, exc.errors()[:1])
            continue
        translated.append(translate(row, source_ref))
    log.info("Translated %s %s rows (%s skipped)", len(translated), label, skipped)
    return translated


def video_records(rows: Iterable[Mapping[str, object]]) -> list[RawChannelRecord]:
    return _translate_rows(
        rows, VideoExportRow, lambda row, ref: translate_video_row(row, source_ref=ref), "video"
    )


def product_records(rows: Iterable[Mapping[str, object]]) -> list[RawChannelRecord]:
    return _translate_rows(
        rows,
        ProductExportRow,
        lambda row, ref: translate_product_row(row, source_ref=ref),
        "product",
    )


def sponsored_records(rows: Iterable[Mapping[str, object]]) -> list[RawChannelRecord]:
    return _translate_rows(
        rows,
        SponsoredExportRow,
        lambda row, ref: translate_sponsored_row(row, source_ref=ref),
        "sponsored",
    )


def asset_descriptors(rows: Iterable[Mapping[str, object]]) -> list[AssetDescriptor]:
    return _translate_rows(
        rows, AssetExportRow, lambda row, _ref: translate_asset_row(row), "asset"
    )
