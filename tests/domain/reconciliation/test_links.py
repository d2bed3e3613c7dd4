from __future__ import annotations

from decimal import Decimal

import pytest

from contentyield.domain.model import CanonicalEntity, ContentLink
from contentyield.domain.reconciliation import (
    EntityRegistry,
    RevenueAggregator,
    apply_links,
    link_for_entity,
    upsert_link,
)
from tests.helpers.records import product_record, video_record


def _registry() -> EntityRegistry:
    aggregator = RevenueAggregator(EntityRegistry())
    aggregator.fold(
        [
            video_record("v1", amount="10.00"),
            product_record("P1", amount="5.00"),
            product_record("P2", amount="1.00"),
        ]
    )
    return aggregator.registry


def test_apply_links_folds_products_into_the_video_entity() -> None:
    registry = _registry()
    link = ContentLink(video_id="v1", product_ids=["P1", "P2"], display_name="Widget")

    applied = apply_links(registry, [link])

    assert applied == 1
    assert len(registry) == 1
    entity = registry.by_video_id("v1")
    assert entity is not None
    assert entity.total == Decimal("16.00")
    assert entity.title == "Widget"
    assert entity.is_linked
    assert not entity.is_orphan


def test_apply_links_is_idempotent() -> None:
    registry = _registry()
    links = [ContentLink(video_id="v1", product_ids=["P1"])]

    apply_links(registry, links)
    once = registry.snapshot()
    apply_links(registry, links)

    assert registry.snapshot() == once


def test_apply_links_ignores_unknown_videos() -> None:
    registry = _registry()
    before = registry.snapshot()

    assert apply_links(registry, [ContentLink(video_id="missing", product_ids=["P1"])]) == 0
    assert registry.snapshot() == before


def test_link_for_entity_records_descriptors() -> None:
    entity = CanonicalEntity(
        id="video:v1",
        title="Widget",
        original_title="Unboxing Widget",
        video_id="v1",
        product_ids=["P1"],
        duration="1:02:03",
        publish_date="2024-03-01T10:00:00",
    )

    link = link_for_entity(entity)

    assert link.video_id == "v1"
    assert link.product_ids == ["P1"]
    assert link.title == "Unboxing Widget"
    assert link.video_duration == "3723"
    assert link.video_date == "2024-03-01"


def test_link_for_entity_extends_an_existing_link() -> None:
    existing = ContentLink(video_id="v1", product_ids=["P1"], display_name="Keep")
    entity = CanonicalEntity(id="video:v1", video_id="v1", product_ids=["P1", "P2"])

    link = link_for_entity(entity, existing=existing, manually_linked=True)

    assert link is existing
    assert link.product_ids == ["P1", "P2"]
    assert link.display_name == "Keep"
    assert link.manually_linked


def test_link_for_entity_requires_a_video_id() -> None:
    with pytest.raises(ValueError, match="no video id"):
        link_for_entity(CanonicalEntity(id="product:P1", product_ids=["P1"]))


def test_link_for_entity_requires_product_ids() -> None:
    entity = CanonicalEntity(id="video:v1", video_id="v1", is_linked=True)

    with pytest.raises(ValueError, match="no product ids"):
        link_for_entity(entity)
    with pytest.raises(ValueError, match="no product ids"):
        link_for_entity(entity, existing=ContentLink(video_id="v1"))


def test_upsert_link_replaces_in_place() -> None:
    first = ContentLink(video_id="v1")
    second = ContentLink(video_id="v2")
    replacement = ContentLink(video_id="v1", product_ids=["P9"])

    updated = upsert_link([first, second], replacement)

    assert updated == [replacement, second]
    assert upsert_link(updated, ContentLink(video_id="v3"))[-1].video_id == "v3"
