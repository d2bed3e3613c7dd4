"""Pydantic models describing already-parsed platform export rows."""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

Placement = Literal["onsite", "offsite"]


def _blank_to_none(value: object) -> object:
    if isinstance(value, str):
        stripped = value.strip()
        return stripped or None
    return value


def _money(value: object) -> object:
    if isinstance(value, str):
        cleaned = value.strip().replace("$", "").replace(",", "")
        return cleaned or "0"
    if value is None:
        return "0"
    return value


def _count(value: object) -> object:
    if isinstance(value, str):
        cleaned = value.strip().replace(",", "")
        return cleaned or 0
    if value is None:
        return 0
    return value


class ExportBaseModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class VideoExportRow(ExportBaseModel):
    """Ad-revenue row of the video platform's per-video export."""

    video_id: str | None = Field(default=None, alias="videoId")
    title: str = Field(default="", alias="videoTitle")
    publish_date: date | None = Field(default=None, alias="publishDate")
    duration: str | int | None = None
    views: int = 0
    watch_time_hours: Decimal = Field(default=Decimal(0), alias="watchTimeHours")
    subscribers_gained: int = Field(default=0, alias="subscribersGained")
    estimated_revenue: Decimal = Field(default=Decimal(0), alias="estimatedRevenue")

    _normalize_ids = field_validator("video_id", "duration", "publish_date", mode="before")(
        _blank_to_none
    )
    _normalize_money = field_validator("estimated_revenue", "watch_time_hours", mode="before")(
        _money
    )
    _normalize_counts = field_validator("views", "subscribers_gained", mode="before")(_count)


class ProductExportRow(ExportBaseModel):
    """Commission row of the storefront earnings export.

    Onsite influencer rows may name the video they were earned on in ``videoTitle``.
    """

    asin: str | None = None
    title: str = Field(default="", alias="productTitle")
    placement: Placement = Field(default="onsite", alias="reportType")
    report_date: date | None = Field(default=None, alias="date")
    clicks: int = 0
    ordered_items: int = Field(default=0, alias="orderedItems")
    shipped_items: int = Field(default=0, alias="shippedItems")
    revenue: Decimal = Decimal(0)
    video_title: str | None = Field(default=None, alias="videoTitle")

    _normalize_ids = field_validator("asin", "report_date", "video_title", mode="before")(
        _blank_to_none
    )
    _normalize_money = field_validator("revenue", mode="before")(_money)
    _normalize_counts = field_validator("clicks", "ordered_items", "shipped_items", mode="before")(
        _count
    )

    @field_validator("placement", mode="before")
    @classmethod
    def _lower_placement(cls, value: object) -> object:
        return value.strip().lower() if isinstance(value, str) else value


class SponsoredExportRow(ExportBaseModel):
    """Brand-partnership payout row, optionally tied to an asin and a video."""

    asin: str | None = None
    video_id: str | None = Field(default=None, alias="videoId")
    title: str = Field(default="", alias="campaignTitle")
    placement: Placement = "onsite"
    report_date: date | None = Field(default=None, alias="date")
    clicks: int = 0
    revenue: Decimal = Decimal(0)

    _normalize_ids = field_validator("asin", "video_id", "report_date", mode="before")(
        _blank_to_none
    )
    _normalize_money = field_validator("revenue", mode="before")(_money)
    _normalize_counts = field_validator("clicks", mode="before")(_count)

    @field_validator("placement", mode="before")
    @classmethod
    def _lower_placement(cls, value: object) -> object:
        return value.strip().lower() if isinstance(value, str) else value


class AssetExportRow(ExportBaseModel):
    """Storefront video listing: an uploaded clip and the asins it promotes."""

    asset_id: str | None = Field(default=None, alias="assetId")
    title: str
    duration: str | int | None = None
    upload_date: date | None = Field(default=None, alias="uploadDate")
    asins: list[str] = Field(default_factory=list)

    _normalize_ids = field_validator("asset_id", "duration", "upload_date", mode="before")(
        _blank_to_none
    )

    @field_validator("asins", mode="before")
    @classmethod
    def _split_asins(cls, value: object) -> object:
        if value is None:
            return []
        if isinstance(value, str):
            return [part.strip() for part in value.split(",") if part.strip()]
        return value
