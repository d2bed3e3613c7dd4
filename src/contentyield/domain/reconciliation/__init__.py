"""Cross-platform reconciliation: fold, match, verify, consolidate."""

from __future__ import annotations

from .aggregate import (
    DEFAULT_FOLD_CHUNK_SIZE,
    RevenueAggregator,
    resolve_key,
    split_video_titled,
)
from .apply import apply_candidate, attach_product_id
from .compare import dates_close, durations_equal, parse_date, to_seconds
from .consolidate import consolidate
from .contracts import CommitResult, FoldResult, MatchCandidate
from .engine import ReconciliationEngine
from .errors import (
    ConsolidationError,
    DuplicateIdentifierError,
    EntityNotFoundError,
    InvalidTransitionError,
    ReconciliationError,
    SelfConsolidationError,
    StaleReferenceError,
    UnknownReviewItemError,
    UnlinkableCandidateError,
    WorkflowError,
)
from .links import apply_display_names, apply_links, link_for_entity, upsert_link
from .matching import CandidateMatcher, MatchPolicy, asset_from_entity
from .normalize import is_match_key, normalize_title, select_title, title_key
from .registry import EntityRegistry
from .views import (
    ProductPivotRow,
    RegistrySummary,
    available_years,
    channel_totals,
    filter_by_channels,
    filter_by_years,
    pivot_by_product,
    ranked,
    search,
    summarize,
)
from .workflow import (
    ReviewItem,
    StageKind,
    VerificationWorkflow,
    WorkflowEvent,
    WorkflowState,
    transition,
)

__all__ = [
    "DEFAULT_FOLD_CHUNK_SIZE",
    "CandidateMatcher",
    "CommitResult",
    "ConsolidationError",
    "DuplicateIdentifierError",
    "EntityNotFoundError",
    "EntityRegistry",
    "FoldResult",
    "InvalidTransitionError",
    "MatchCandidate",
    "MatchPolicy",
    "ProductPivotRow",
    "ReconciliationEngine",
    "ReconciliationError",
    "RegistrySummary",
    "RevenueAggregator",
    "ReviewItem",
    "SelfConsolidationError",
    "StageKind",
    "StaleReferenceError",
    "UnknownReviewItemError",
    "UnlinkableCandidateError",
    "VerificationWorkflow",
    "WorkflowError",
    "WorkflowEvent",
    "WorkflowState",
    "apply_candidate",
    "apply_display_names",
    "apply_links",
    "asset_from_entity",
    "attach_product_id",
    "available_years",
    "channel_totals",
    "consolidate",
    "dates_close",
    "durations_equal",
    "filter_by_channels",
    "filter_by_years",
    "is_match_key",
    "link_for_entity",
    "normalize_title",
    "parse_date",
    "pivot_by_product",
    "ranked",
    "resolve_key",
    "search",
    "select_title",
    "split_video_titled",
    "summarize",
    "title_key",
    "to_seconds",
    "transition",
    "upsert_link",
]
