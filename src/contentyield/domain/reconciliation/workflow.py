"""Staged, resumable verification of match proposals.

The workflow is an explicit state machine::

    idle      --stage-->  staged
    staged    --review--> reviewing
    reviewing --commit--> committed
    committed --finish--> idle
    staged | reviewing | committed --stage--> staged
    any       --clear-->  idle

Nothing touches the canonical registry before ``commit``. Staging again discards any
proposals not yet committed. A committed matching stage may advance straight into a
naming stage (display-name simplification for the newly linked product ids).
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from enum import StrEnum
from typing import TYPE_CHECKING, Final

from contentyield.domain.model import NamingProposal

from .apply import apply_candidate
from .contracts import CommitResult, MatchCandidate
from .errors import (
    EntityNotFoundError,
    InvalidTransitionError,
    StaleReferenceError,
    UnknownReviewItemError,
    UnlinkableCandidateError,
    WorkflowError,
)
from .links import apply_display_names, link_for_entity, links_by_video, upsert_link

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence

    from contentyield.domain.model import ContentLink

    from .registry import EntityRegistry

type NameSuggester = Callable[[list[str]], Mapping[str, str]]

DRAFT_NAME_LENGTH: Final = 30

log = logging.getLogger(__name__)


class WorkflowState(StrEnum):
    IDLE = "idle"
    STAGED = "staged"
    REVIEWING = "reviewing"
    COMMITTED = "committed"


class WorkflowEvent(StrEnum):
    STAGE = "stage"
    REVIEW = "review"
    COMMIT = "commit"
    FINISH = "finish"
    CLEAR = "clear"


class StageKind(StrEnum):
    MATCHING = "matching"
    NAMING = "naming"


_TRANSITIONS: Final[dict[tuple[WorkflowState, WorkflowEvent], WorkflowState]] = {
    (WorkflowState.IDLE, WorkflowEvent.STAGE): WorkflowState.STAGED,
    (WorkflowState.STAGED, WorkflowEvent.STAGE): WorkflowState.STAGED,
    (WorkflowState.STAGED, WorkflowEvent.REVIEW): WorkflowState.REVIEWING,
    (WorkflowState.REVIEWING, WorkflowEvent.STAGE): WorkflowState.STAGED,
    (WorkflowState.REVIEWING, WorkflowEvent.COMMIT): WorkflowState.COMMITTED,
    (WorkflowState.COMMITTED, WorkflowEvent.STAGE): WorkflowState.STAGED,
    (WorkflowState.COMMITTED, WorkflowEvent.FINISH): WorkflowState.IDLE,
}


def transition(state: WorkflowState, event: WorkflowEvent) -> WorkflowState:
    """Pure transition function; ``clear`` is accepted from every state."""

    if event is WorkflowEvent.CLEAR:
        return WorkflowState.IDLE
    target = _TRANSITIONS.get((state, event))
    if target is None:
        raise InvalidTransitionError(state, event)
    return target


def _shorten(name: str) -> str:
    return name if len(name) <= DRAFT_NAME_LENGTH else f"{name[:DRAFT_NAME_LENGTH]}..."


@dataclass(slots=True, kw_only=True)
class ReviewItem[TPayload]:
    """One staged proposal with the reviewer's selection."""

    item_id: str
    payload: TPayload
    selected: bool


type AnyReviewItem = ReviewItem[MatchCandidate] | ReviewItem[NamingProposal]


@dataclass(slots=True)
class VerificationWorkflow:
    """Caller-owned verification stage holding proposals pending approval."""

    state: WorkflowState = WorkflowState.IDLE
    stage_kind: StageKind | None = None
    _items: dict[str, AnyReviewItem] = field(
        default_factory=dict["str", "AnyReviewItem"], repr=False
    )
    _product_names: dict[str, str] = field(default_factory=dict["str", "str"], repr=False)

    @property
    def items(self) -> tuple[AnyReviewItem, ...]:
        return tuple(self._items.values())

    @property
    def selected_items(self) -> tuple[AnyReviewItem, ...]:
        return tuple(item for item in self._items.values() if item.selected)

    def stage_matches(self, candidates: Iterable[MatchCandidate]) -> None:
        """Stage matcher output; auto-approvable candidates start selected."""

        self._advance(WorkflowEvent.STAGE)
        self.stage_kind = StageKind.MATCHING
        self._items = {
            candidate.candidate_id: ReviewItem(
                item_id=candidate.candidate_id,
                payload=candidate,
                selected=candidate.auto_approvable,
            )
            for candidate in candidates
        }
        self._product_names = {}
        log.info("Staged %s match candidates", len(self._items))

    def stage_naming(self, proposals: Iterable[NamingProposal]) -> None:
        """Stage display-name proposals produced by an external naming collaborator."""

        self._advance(WorkflowEvent.STAGE)
        self.stage_kind = StageKind.NAMING
        self._items = {
            proposal.product_id: ReviewItem(
                item_id=proposal.product_id,
                payload=proposal,
                selected=proposal.selected,
            )
            for proposal in proposals
        }
        log.info("Staged %s naming proposals", len(self._items))

    def naming_drafts(self, suggest: NameSuggester | None = None) -> list[NamingProposal]:
        """Draft naming proposals for product ids linked by the last matching commit.

        ``suggest`` maps original names to simplified names. Names it does not cover
        are cut to ``DRAFT_NAME_LENGTH`` characters plus an ellipsis.
        """

        originals = list(self._product_names.items())
        suggestions = suggest([name for _, name in originals]) if suggest and originals else {}
        return [
            NamingProposal(
                product_id=product_id,
                original_name=name,
                proposed_name=suggestions.get(name) or _shorten(name),
            )
            for product_id, name in originals
        ]

    def advance_to_naming(self, suggest: NameSuggester | None = None) -> list[NamingProposal]:
        if self.state is not WorkflowState.COMMITTED or self.stage_kind is not StageKind.MATCHING:
            raise WorkflowError("Naming follows a committed matching stage")
        drafts = self.naming_drafts(suggest)
        self.stage_naming(drafts)
        return drafts

    def begin_review(self) -> tuple[AnyReviewItem, ...]:
        self._advance(WorkflowEvent.REVIEW)
        return self.items

    def toggle(self, item_id: str) -> bool:
        item = self._reviewable(item_id)
        item.selected = not item.selected
        return item.selected

    def set_selected(self, item_id: str, *, selected: bool) -> None:
        self._reviewable(item_id).selected = selected

    def select_all(self) -> None:
        self._require_reviewing()
        for item in self._items.values():
            item.selected = True

    def deselect_all(self) -> None:
        self._require_reviewing()
        for item in self._items.values():
            item.selected = False

    def commit(self, registry: EntityRegistry, links: Sequence[ContentLink] = ()) -> CommitResult:
        """Apply the selected proposals; unselected ones are discarded.

        A proposal whose entities vanished (consolidated elsewhere, or consumed by an
        earlier proposal in this batch) or whose product ids all belong to other videos
        is skipped with a warning; the rest commit. Links are only recorded for
        entities that carry product ids.
        """

        self._advance(WorkflowEvent.COMMIT)
        if self.stage_kind is StageKind.NAMING:
            result = self._commit_naming(registry, links)
        else:
            result = self._commit_matches(registry, links)
        self._items = {}
        log.info(
            "Committed %s stage: applied=%s, discarded=%s, skipped=%s",
            self.stage_kind,
            result.applied,
            result.discarded,
            result.skipped,
        )
        return result

    def finish(self) -> None:
        self._advance(WorkflowEvent.FINISH)
        self.stage_kind = None
        self._product_names = {}

    def clear(self) -> None:
        """Abort from any state, discarding everything staged."""

        self._advance(WorkflowEvent.CLEAR)
        self.stage_kind = None
        self._items = {}
        self._product_names = {}

    def _commit_matches(
        self, registry: EntityRegistry, links: Sequence[ContentLink]
    ) -> CommitResult:
        result = CommitResult()
        updated_links = list(links)
        existing = links_by_video(updated_links)
        for item in self._items.values():
            if not item.selected:
                result.discarded += 1
                continue
            candidate = item.payload
            if not isinstance(candidate, MatchCandidate):
                raise TypeError(f"Matching stage holds non-candidate item {item.item_id}")
            names = self._capture_product_names(registry, candidate)
            try:
                entity = apply_candidate(registry, candidate)
            except (StaleReferenceError, EntityNotFoundError, UnlinkableCandidateError) as exc:
                log.warning("Skipping candidate %s: %s", candidate.candidate_id, exc)
                result.skip(f"candidate {candidate.candidate_id}: {exc}")
                continue

            for product_id, name in names.items():
                self._product_names.setdefault(product_id, name)
            if entity.video_id and entity.product_ids:
                link = link_for_entity(entity, existing=existing.get(entity.video_id))
                existing[link.video_id] = link
                updated_links = upsert_link(updated_links, link)
            result.applied += 1
        result.links = updated_links
        return result

    def _commit_naming(
        self, registry: EntityRegistry, links: Sequence[ContentLink]
    ) -> CommitResult:
        result = CommitResult()
        proposals: list[NamingProposal] = []
        for item in self._items.values():
            proposal = item.payload
            if not isinstance(proposal, NamingProposal):
                raise TypeError(f"Naming stage holds non-naming item {item.item_id}")
            proposal.selected = item.selected
            if item.selected:
                result.applied += 1
            else:
                result.discarded += 1
            proposals.append(proposal)
        result.links, _ = apply_display_names(registry, list(links), proposals)
        return result

    def _capture_product_names(
        self, registry: EntityRegistry, candidate: MatchCandidate
    ) -> dict[str, str]:
        names: dict[str, str] = {}
        asset_entity = registry.get(candidate.asset.entity_id or "")
        if asset_entity is not None:
            for product_id in asset_entity.product_ids:
                names[product_id] = asset_entity.original_title or product_id
        for product_id in candidate.product_ids:
            owner = registry.by_product_id(product_id)
            if owner is not None and not owner.video_id and owner.original_title:
                names.setdefault(product_id, owner.original_title)
            names.setdefault(product_id, product_id)
        return names

    def _advance(self, event: WorkflowEvent) -> None:
        previous = self.state
        self.state = transition(self.state, event)
        log.debug("Workflow %s -> %s on %s", previous, self.state, event)

    def _require_reviewing(self) -> None:
        if self.state is not WorkflowState.REVIEWING:
            raise WorkflowError(f"Selections can only change while reviewing (state={self.state})")

    def _reviewable(self, item_id: str) -> AnyReviewItem:
        self._require_reviewing()
        item = self._items.get(item_id)
        if item is None:
            raise UnknownReviewItemError(item_id)
        return item
