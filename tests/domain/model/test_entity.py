from __future__ import annotations

from decimal import Decimal

import pytest

from contentyield.domain.model import (
    CanonicalEntity,
    ChannelKind,
    ContentLink,
    RawChannelRecord,
    to_decimal,
)


def test_to_decimal_goes_through_text_for_floats() -> None:
    assert to_decimal(10.1) == Decimal("10.1")
    assert to_decimal("7.50") == Decimal("7.50")
    assert to_decimal(None) == Decimal(0)


def test_raw_record_normalizes_amounts_and_blank_ids() -> None:
    record = RawChannelRecord(
        kind=ChannelKind.PRODUCT_ONSITE,
        amount=2.5,  # pyright: ignore[reportArgumentType]
        video_id="  ",
        product_id=" P1 ",
    )

    assert record.amount == Decimal("2.5")
    assert record.video_id is None
    assert record.product_id == "P1"


def test_total_is_derived_from_channel_accumulators() -> None:
    entity = CanonicalEntity(id="video:v1")
    entity.add_record(RawChannelRecord(kind=ChannelKind.VIDEO_AD_REVENUE, amount=Decimal("1.10")))
    entity.add_record(RawChannelRecord(kind=ChannelKind.SPONSORED_OFFSITE, amount=Decimal("2.20")))

    assert entity.total == Decimal("3.30")
    assert entity.sponsored_offsite_revenue == Decimal("2.20")


def test_add_record_fills_descriptors_only_once() -> None:
    entity = CanonicalEntity(id="video:v1")
    entity.add_record(
        RawChannelRecord(kind=ChannelKind.VIDEO_AD_REVENUE, title="First", duration="1:00")
    )
    entity.add_record(
        RawChannelRecord(kind=ChannelKind.VIDEO_AD_REVENUE, title="Second", duration="2:00")
    )

    assert entity.title == "First"
    assert entity.duration == "1:00"


def test_add_record_refuses_negative_amounts() -> None:
    entity = CanonicalEntity(id="video:v1")

    with pytest.raises(ValueError, match="Negative"):
        entity.add_record(RawChannelRecord(kind=ChannelKind.VIDEO_AD_REVENUE, amount=Decimal(-1)))


def test_content_link_add_product_ids_deduplicates() -> None:
    link = ContentLink(video_id="v1", product_ids=["P1"])

    link.add_product_ids(["P1", "", "P2"])

    assert link.product_ids == ["P1", "P2"]
    assert link.primary_product_id == "P1"


def test_deduct_reverses_absorb() -> None:
    entity = CanonicalEntity(id="video:v1")
    entity.add_record(RawChannelRecord(kind=ChannelKind.VIDEO_AD_REVENUE, amount=Decimal("10")))
    before = entity.numeric_snapshot()
    share = CanonicalEntity(id="share:P1")
    share.add_record(
        RawChannelRecord(kind=ChannelKind.PRODUCT_ONSITE, amount=Decimal("4.25"), clicks=3)
    )

    entity.absorb(share)
    assert entity.total == Decimal("14.25")
    entity.deduct(share)

    assert entity.numeric_snapshot() == before
