"""Export-row adapters: validated payloads to domain records."""

from __future__ import annotations

from .schema import AssetExportRow, ProductExportRow, SponsoredExportRow, VideoExportRow
from .translator import (
    asset_descriptors,
    product_records,
    sponsored_records,
    translate_asset_row,
    translate_product_row,
    translate_sponsored_row,
    translate_video_row,
    video_records,
)

__all__ = [
    "AssetExportRow",
    "ProductExportRow",
    "SponsoredExportRow",
    "VideoExportRow",
    "asset_descriptors",
    "product_records",
    "sponsored_records",
    "translate_asset_row",
    "translate_product_row",
    "translate_sponsored_row",
    "translate_video_row",
    "video_records",
]
