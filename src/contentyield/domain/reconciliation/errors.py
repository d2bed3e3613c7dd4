"""Exception taxonomy for the reconciliation core."""

from __future__ import annotations


class ReconciliationError(Exception):
    """Base class for reconciliation contract violations."""


class DuplicateIdentifierError(ReconciliationError):
    """Raised when a platform identifier would be claimed by two live entities."""

    def __init__(self, *, namespace: str, value: str, owner_id: str) -> None:
        self.namespace = namespace
        self.value = value
        self.owner_id = owner_id
        super().__init__(f"{namespace} id {value!r} is already claimed by entity {owner_id!r}")


class ConsolidationError(ReconciliationError):
    """Raised when a manual consolidation precondition does not hold."""


class EntityNotFoundError(ConsolidationError):
    def __init__(self, entity_id: str) -> None:
        self.entity_id = entity_id
        super().__init__(f"Entity {entity_id!r} is not in the registry")


class SelfConsolidationError(ConsolidationError):
    def __init__(self, entity_id: str) -> None:
        self.entity_id = entity_id
        super().__init__(f"Cannot consolidate entity {entity_id!r} into itself")


class WorkflowError(ReconciliationError):
    """Raised when the verification workflow is driven out of order."""


class InvalidTransitionError(WorkflowError):
    def __init__(self, state: str, event: str) -> None:
        self.state = state
        self.event = event
        super().__init__(f"Event {event!r} is not allowed in state {state!r}")


class UnknownReviewItemError(WorkflowError):
    def __init__(self, item_id: str) -> None:
        self.item_id = item_id
        super().__init__(f"No staged review item {item_id!r}")


class StaleReferenceError(ReconciliationError):
    """Raised when a proposal references an entity that is no longer in the registry."""

    def __init__(self, entity_id: str, *, candidate_id: str | None = None) -> None:
        self.entity_id = entity_id
        self.candidate_id = candidate_id
        super().__init__(f"Entity {entity_id!r} no longer exists (candidate {candidate_id})")


class UnlinkableCandidateError(ReconciliationError):
    """Raised when an approved candidate has nothing it can attach to its video."""

    def __init__(self, candidate_id: str, *, product_ids: tuple[str, ...]) -> None:
        self.candidate_id = candidate_id
        self.product_ids = product_ids
        owned = ", ".join(product_ids) or "no product ids"
        super().__init__(
            f"Candidate {candidate_id} attaches nothing ({owned} linked to other videos)"
        )
