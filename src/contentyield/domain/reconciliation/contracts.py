"""Shared reconciliation contract components.

This module holds only the value objects exchanged between stages:
- match candidates produced by the matcher
- fold and commit summaries
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING
from uuid import uuid4

if TYPE_CHECKING:
    from contentyield.domain.model import AssetDescriptor, ContentLink, MatchBasis, MatchSignal


def _new_candidate_id() -> str:
    return str(uuid4())


@dataclass(slots=True, kw_only=True)
class MatchCandidate:
    """Ephemeral proposal linking an orphaned video entity to a product-side asset.

    Never persisted. Several candidates may reference the same entity or asset; the
    reviewer decides.
    """

    entity_id: str
    asset: AssetDescriptor
    basis: MatchBasis
    score: int
    signals: tuple[MatchSignal, ...] = ()
    auto_approvable: bool = False
    candidate_id: str = field(default_factory=_new_candidate_id)

    @property
    def product_ids(self) -> tuple[str, ...]:
        return self.asset.product_ids


@dataclass(slots=True)
class FoldResult:
    """Summary of one aggregator fold."""

    folded: int = 0
    created: int = 0
    merged: int = 0
    rejected: int = 0

    def __iadd__(self, other: FoldResult) -> FoldResult:
        self.folded += other.folded
        self.created += other.created
        self.merged += other.merged
        self.rejected += other.rejected
        return self


@dataclass(slots=True)
class CommitResult:
    """Outcome of committing a verification stage."""

    applied: int = 0
    discarded: int = 0
    skipped: int = 0
    warnings: list[str] = field(default_factory=list[str])
    links: list[ContentLink] = field(default_factory=list["ContentLink"])

    def skip(self, message: str) -> None:
        self.skipped += 1
        self.warnings.append(message)
