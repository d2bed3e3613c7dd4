"""Canonical entity registry indexed by every platform identifier.

The registry is the single owner of identifier uniqueness: a non-empty video id or
product id resolves to at most one live entity. Entities acquire identifiers only
through :meth:`EntityRegistry.claim_video_id` / :meth:`EntityRegistry.claim_product_id`.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Literal

from contentyield.domain.model import CanonicalEntity

from .errors import DuplicateIdentifierError, EntityNotFoundError
from .normalize import title_key

if TYPE_CHECKING:
    from collections.abc import Iterable, Iterator

log = logging.getLogger(__name__)

type KeyNamespace = Literal["video", "product", "title"]
type IdentityKey = tuple[KeyNamespace, str]


def entity_id_for(key: IdentityKey) -> str:
    namespace, value = key
    return f"{namespace}:{value}"


@dataclass(slots=True)
class EntityRegistry:
    """In-memory registry of canonical entities, owned by the caller."""

    _entities: dict[str, CanonicalEntity] = field(
        default_factory=dict["str", "CanonicalEntity"], repr=False
    )
    _by_video_id: dict[str, str] = field(default_factory=dict["str", "str"], repr=False)
    _by_product_id: dict[str, str] = field(default_factory=dict["str", "str"], repr=False)
    _by_title_key: dict[str, str] = field(default_factory=dict["str", "str"], repr=False)
    _title_key_by_entity: dict[str, str] = field(default_factory=dict["str", "str"], repr=False)

    @classmethod
    def from_entities(cls, entities: Iterable[CanonicalEntity]) -> EntityRegistry:
        """Rebuild a registry (and its indices) from previously persisted entities."""

        registry = cls()
        for entity in entities:
            registry.add(entity)
        return registry

    def __len__(self) -> int:
        return len(self._entities)

    def __iter__(self) -> Iterator[CanonicalEntity]:
        return iter(tuple(self._entities.values()))

    def __contains__(self, entity_id: object) -> bool:
        return entity_id in self._entities

    @property
    def entities(self) -> tuple[CanonicalEntity, ...]:
        return tuple(self._entities.values())

    def get(self, entity_id: str) -> CanonicalEntity | None:
        return self._entities.get(entity_id)

    def require(self, entity_id: str) -> CanonicalEntity:
        entity = self._entities.get(entity_id)
        if entity is None:
            raise EntityNotFoundError(entity_id)
        return entity

    def by_video_id(self, video_id: str | None) -> CanonicalEntity | None:
        if not video_id:
            return None
        return self._lookup(self._by_video_id, video_id)

    def by_product_id(self, product_id: str | None) -> CanonicalEntity | None:
        if not product_id:
            return None
        return self._lookup(self._by_product_id, product_id)

    def by_title_key(self, key: str | None) -> CanonicalEntity | None:
        if not key:
            return None
        return self._lookup(self._by_title_key, key)

    def resolve(self, key: IdentityKey) -> CanonicalEntity | None:
        namespace, value = key
        if namespace == "video":
            return self.by_video_id(value)
        if namespace == "product":
            return self.by_product_id(value)
        return self.by_title_key(value)

    def add(self, entity: CanonicalEntity) -> CanonicalEntity:
        """Register ``entity`` and index its identifiers.

        Raises :class:`DuplicateIdentifierError` if any identifier is already owned by a
        different entity; callers resolve through the index first, so this signals a
        programming error rather than bad input.
        """

        if entity.id in self._entities:
            raise DuplicateIdentifierError(namespace="entity", value=entity.id, owner_id=entity.id)
        if entity.video_id:
            self._assert_unclaimed(self._by_video_id, "video", entity.video_id, entity)
        for product_id in entity.product_ids:
            self._assert_unclaimed(self._by_product_id, "product", product_id, entity)
        key = None
        if not entity.video_id and not entity.product_ids:
            key = title_key(entity.original_title or entity.title)
            if key is not None:
                self._assert_unclaimed(self._by_title_key, "title", key, entity)

        self._entities[entity.id] = entity
        if entity.video_id:
            self._by_video_id[entity.video_id] = entity.id
        for product_id in entity.product_ids:
            self._by_product_id[product_id] = entity.id
        if key is not None:
            self._by_title_key[key] = entity.id
            self._title_key_by_entity[entity.id] = key
        return entity

    def remove(self, entity_id: str) -> CanonicalEntity:
        entity = self.require(entity_id)
        del self._entities[entity_id]
        if entity.video_id and self._by_video_id.get(entity.video_id) == entity_id:
            del self._by_video_id[entity.video_id]
        for product_id in entity.product_ids:
            if self._by_product_id.get(product_id) == entity_id:
                del self._by_product_id[product_id]
        self._drop_title_index(entity)
        return entity

    def claim_video_id(self, entity: CanonicalEntity, video_id: str) -> bool:
        """Attach ``video_id`` to ``entity`` unless it already has one.

        Returns ``False`` when the entity already carries a different video id.
        """

        self._assert_unclaimed(self._by_video_id, "video", video_id, entity)
        if entity.video_id and entity.video_id != video_id:
            return False
        entity.video_id = video_id
        self._by_video_id[video_id] = entity.id
        self._drop_title_index(entity)
        return True

    def claim_product_id(self, entity: CanonicalEntity, product_id: str) -> None:
        self._assert_unclaimed(self._by_product_id, "product", product_id, entity)
        if product_id not in entity.product_ids:
            entity.product_ids.append(product_id)
        self._by_product_id[product_id] = entity.id
        self._drop_title_index(entity)

    def release_product_id(self, entity: CanonicalEntity, product_id: str) -> None:
        """Detach ``product_id`` from ``entity`` so another entity may claim it."""

        if self._by_product_id.get(product_id) != entity.id:
            raise ValueError(f"Entity {entity.id} does not own product id {product_id!r}")
        entity.product_ids = [owned for owned in entity.product_ids if owned != product_id]
        del self._by_product_id[product_id]

    def orphans(self) -> tuple[CanonicalEntity, ...]:
        return tuple(entity for entity in self._entities.values() if entity.is_orphan)

    def video_orphans(self) -> tuple[CanonicalEntity, ...]:
        return tuple(entity for entity in self._entities.values() if entity.is_video_orphan)

    def product_orphans(self) -> tuple[CanonicalEntity, ...]:
        return tuple(entity for entity in self._entities.values() if entity.is_product_orphan)

    def snapshot(self) -> tuple[tuple[object, ...], ...]:
        """Full comparable state of the registry, in insertion order."""

        return tuple(
            (
                entity.id,
                entity.title,
                entity.original_title,
                entity.video_id,
                tuple(entity.product_ids),
                entity.duration,
                entity.publish_date,
                entity.is_linked,
                entity.numeric_snapshot(),
            )
            for entity in self._entities.values()
        )

    def validate_invariants(self) -> None:
        seen_video: dict[str, str] = {}
        seen_product: dict[str, str] = {}
        for entity in self._entities.values():
            if any(amount < 0 for amount in entity.revenue.values()):
                raise ValueError(f"Negative accumulator on entity {entity.id}")
            if entity.video_id:
                owner = seen_video.setdefault(entity.video_id, entity.id)
                if owner != entity.id:
                    raise DuplicateIdentifierError(
                        namespace="video", value=entity.video_id, owner_id=owner
                    )
                if self._by_video_id.get(entity.video_id) != entity.id:
                    raise ValueError(f"Video index out of sync for entity {entity.id}")
            for product_id in entity.product_ids:
                owner = seen_product.setdefault(product_id, entity.id)
                if owner != entity.id:
                    raise DuplicateIdentifierError(
                        namespace="product", value=product_id, owner_id=owner
                    )
                if self._by_product_id.get(product_id) != entity.id:
                    raise ValueError(f"Product index out of sync for entity {entity.id}")

    def _lookup(self, index: dict[str, str], key: str) -> CanonicalEntity | None:
        entity_id = index.get(key)
        if entity_id is None:
            return None
        return self._entities.get(entity_id)

    def _assert_unclaimed(
        self,
        index: dict[str, str],
        namespace: str,
        value: str,
        entity: CanonicalEntity,
    ) -> None:
        owner = index.get(value)
        if owner is not None and owner != entity.id:
            raise DuplicateIdentifierError(namespace=namespace, value=value, owner_id=owner)

    def _drop_title_index(self, entity: CanonicalEntity) -> None:
        key = self._title_key_by_entity.pop(entity.id, None)
        if key is not None and self._by_title_key.get(key) == entity.id:
            del self._by_title_key[key]
