from __future__ import annotations

import pytest

from contentyield.domain.model import CanonicalEntity
from contentyield.domain.reconciliation import (
    DuplicateIdentifierError,
    EntityNotFoundError,
    EntityRegistry,
)


def test_add_indexes_every_identifier() -> None:
    registry = EntityRegistry()
    entity = registry.add(CanonicalEntity(id="video:v1", video_id="v1", product_ids=["P1", "P2"]))

    assert registry.by_video_id("v1") is entity
    assert registry.by_product_id("P1") is entity
    assert registry.by_product_id("P2") is entity
    assert registry.resolve(("product", "P2")) is entity
    assert "video:v1" in registry


def test_add_refuses_an_identifier_owned_elsewhere() -> None:
    registry = EntityRegistry()
    registry.add(CanonicalEntity(id="product:P1", product_ids=["P1"]))

    with pytest.raises(DuplicateIdentifierError) as excinfo:
        registry.add(CanonicalEntity(id="video:v1", video_id="v1", product_ids=["P1"]))

    assert excinfo.value.owner_id == "product:P1"
    assert "video:v1" not in registry


def test_claiming_an_id_drops_the_title_index() -> None:
    registry = EntityRegistry()
    entity = registry.add(
        CanonicalEntity(id="title:widget", title="Widget", original_title="Widget")
    )
    assert registry.by_title_key("widget") is entity

    registry.claim_product_id(entity, "P9")

    assert registry.by_title_key("widget") is None
    assert registry.by_product_id("P9") is entity


def test_claim_video_id_keeps_an_existing_different_id() -> None:
    registry = EntityRegistry()
    entity = registry.add(CanonicalEntity(id="video:v1", video_id="v1"))

    assert registry.claim_video_id(entity, "v2") is False
    assert entity.video_id == "v1"
    assert registry.by_video_id("v2") is None


def test_remove_clears_indices() -> None:
    registry = EntityRegistry()
    registry.add(CanonicalEntity(id="video:v1", video_id="v1", product_ids=["P1"]))

    registry.remove("video:v1")

    assert registry.by_video_id("v1") is None
    assert registry.by_product_id("P1") is None
    with pytest.raises(EntityNotFoundError):
        registry.require("video:v1")


def test_orphan_views_split_by_platform() -> None:
    registry = EntityRegistry.from_entities(
        [
            CanonicalEntity(id="video:v1", video_id="v1"),
            CanonicalEntity(id="product:P1", product_ids=["P1"]),
            CanonicalEntity(id="video:v2", video_id="v2", product_ids=["P2"]),
        ]
    )

    assert [entity.id for entity in registry.video_orphans()] == ["video:v1"]
    assert [entity.id for entity in registry.product_orphans()] == ["product:P1"]
    assert {entity.id for entity in registry.orphans()} == {"video:v1", "product:P1"}


def test_release_product_id_frees_it_for_another_entity() -> None:
    registry = EntityRegistry()
    owner = registry.add(CanonicalEntity(id="video:v2", video_id="v2", product_ids=["P1", "P2"]))
    target = registry.add(CanonicalEntity(id="video:v1", video_id="v1"))

    registry.release_product_id(owner, "P1")
    registry.claim_product_id(target, "P1")

    assert owner.product_ids == ["P2"]
    assert registry.by_product_id("P1") is target
    registry.validate_invariants()
    with pytest.raises(ValueError, match="does not own"):
        registry.release_product_id(owner, "P1")


def test_linked_entities_are_not_orphans() -> None:
    registry = EntityRegistry.from_entities(
        [CanonicalEntity(id="video:v1", video_id="v1", original_title="Widget", is_linked=True)]
    )

    assert registry.orphans() == ()
    assert registry.video_orphans() == ()
