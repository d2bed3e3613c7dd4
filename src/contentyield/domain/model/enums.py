"""Domain enums (pure, dependency-light)."""

from __future__ import annotations

from enum import StrEnum


class ChannelKind(StrEnum):
    """Monetization stream a raw record belongs to."""

    VIDEO_AD_REVENUE = "video_ad_revenue"
    PRODUCT_ONSITE = "product_onsite"
    PRODUCT_OFFSITE = "product_offsite"
    SPONSORED_ONSITE = "sponsored_onsite"
    SPONSORED_OFFSITE = "sponsored_offsite"


class MatchBasis(StrEnum):
    """Which signal(s) produced a match candidate."""

    TITLE = "title"
    DURATION = "duration"
    DATE = "date"
    COMBINED = "combined"


class MatchSignal(StrEnum):
    TITLE = "title"
    TITLE_SUBSTRING = "title_substring"
    DURATION = "duration"
    DATE = "date"
