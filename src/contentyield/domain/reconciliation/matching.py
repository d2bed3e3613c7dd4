"""Candidate matching between orphaned video entities and product-side assets.

Scoring is additive over independent weak signals (title, duration, date). The
matcher never picks a winner: every pair that clears ``min_score`` is proposed,
because identical generic titles are common and must be settled by a reviewer.

Pairs are drawn from inverted indices (normalized title, duration second, calendar
day) rather than a full cross product. Substring title containment is the one
signal that needs a scan; it only runs for entities with no exact title hit and
only while both collections stay under ``substring_scan_limit``.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from contentyield.domain.model import AssetDescriptor, MatchBasis, MatchSignal

from .compare import (
    DEFAULT_DATE_TOLERANCE_DAYS,
    DEFAULT_DURATION_TOLERANCE_SECONDS,
    dates_close,
    durations_equal,
    parse_date,
    to_seconds,
)
from .contracts import MatchCandidate
from .normalize import contains_either_way, normalize_title, select_title

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence

    from contentyield.domain.model import CanonicalEntity

log = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True, kw_only=True)
class MatchPolicy:
    """Tunable scoring parameters.

    The reference weights (60/30/10, minimum 40, auto-approve 90) carry no business
    meaning beyond "title and duration together are convincing".
    """

    title_weight: int = 60
    duration_weight: int = 30
    date_weight: int = 10
    substring_weight: int = 30
    min_score: int = 40
    auto_approve_score: int = 90
    duration_tolerance_seconds: int = DEFAULT_DURATION_TOLERANCE_SECONDS
    date_tolerance_days: int = DEFAULT_DATE_TOLERANCE_DAYS
    substring_scan_limit: int = 500

    def __post_init__(self) -> None:
        if self.substring_weight >= self.title_weight:
            raise ValueError("substring_weight must stay below title_weight")
        if self.min_score <= 0:
            raise ValueError("min_score must be positive")

    def allows_substring_scan(self, left_size: int, right_size: int) -> bool:
        return left_size < self.substring_scan_limit and right_size < self.substring_scan_limit


@dataclass(frozen=True, slots=True)
class _PreparedAsset:
    position: int
    asset: AssetDescriptor
    key: str
    seconds: int | None
    ordinal: int | None


@dataclass(slots=True)
class _AssetIndex:
    assets: list[_PreparedAsset] = field(default_factory=list["_PreparedAsset"])
    by_title: dict[str, list[_PreparedAsset]] = field(
        default_factory=lambda: defaultdict(list)
    )
    by_second: dict[int, list[_PreparedAsset]] = field(
        default_factory=lambda: defaultdict(list)
    )
    by_day: dict[int, list[_PreparedAsset]] = field(default_factory=lambda: defaultdict(list))

    @classmethod
    def build(cls, assets: Iterable[AssetDescriptor]) -> _AssetIndex:
        index = cls()
        for position, asset in enumerate(assets):
            parsed_date = parse_date(asset.date)
            prepared = _PreparedAsset(
                position=position,
                asset=asset,
                key=normalize_title(asset.title),
                seconds=to_seconds(asset.duration),
                ordinal=parsed_date.toordinal() if parsed_date else None,
            )
            index.assets.append(prepared)
            if prepared.key:
                index.by_title[prepared.key].append(prepared)
            if prepared.seconds is not None:
                index.by_second[prepared.seconds].append(prepared)
            if prepared.ordinal is not None:
                index.by_day[prepared.ordinal].append(prepared)
        return index

    def near(
        self, buckets: dict[int, list[_PreparedAsset]], value: int | None, tolerance: int
    ) -> Iterable[_PreparedAsset]:
        if value is None:
            return ()
        return [
            prepared
            for offset in range(-tolerance, tolerance + 1)
            for prepared in buckets.get(value + offset, ())
        ]


def asset_from_entity(entity: CanonicalEntity) -> AssetDescriptor:
    """Describe an orphaned product-side entity as a matcher asset."""

    return AssetDescriptor(
        title=select_title(entity.original_title, entity.title, entity.product_id),
        duration=entity.duration,
        date=entity.publish_date,
        product_ids=tuple(entity.product_ids),
        entity_id=entity.id,
        asset_id=entity.id,
    )


@dataclass(slots=True)
class CandidateMatcher:
    """Propose scored matches; see module docstring for the policy."""

    policy: MatchPolicy = field(default_factory=MatchPolicy)

    def propose(
        self,
        entities: Sequence[CanonicalEntity],
        assets: Sequence[AssetDescriptor],
    ) -> list[MatchCandidate]:
        """Return every candidate pair clearing ``min_score``, best first."""

        index = _AssetIndex.build(assets)
        scan_substrings = self.policy.allows_substring_scan(len(entities), len(assets))
        if not scan_substrings:
            log.info(
                "Substring fallback disabled: %s entities x %s assets exceeds limit %s",
                len(entities),
                len(assets),
                self.policy.substring_scan_limit,
            )

        candidates: list[MatchCandidate] = []
        for entity in entities:
            candidates.extend(self._candidates_for(entity, index, scan_substrings=scan_substrings))

        candidates.sort(
            key=lambda c: (-c.score, c.entity_id, c.asset.title, c.asset.asset_id or "")
        )
        log.info(
            "Proposed %s candidates (%s auto-approvable) for %s entities against %s assets",
            len(candidates),
            sum(1 for c in candidates if c.auto_approvable),
            len(entities),
            len(assets),
        )
        return candidates

    def score(
        self, entity: CanonicalEntity, asset: AssetDescriptor
    ) -> tuple[int, tuple[MatchSignal, ...]]:
        """Score one pair with every signal, substring fallback included."""

        entity_key = normalize_title(select_title(entity.original_title, entity.title))
        asset_key = normalize_title(asset.title)
        exact = bool(entity_key) and entity_key == asset_key
        return self._score(
            entity,
            asset,
            exact_title=exact,
            substring=not exact and contains_either_way(entity_key, asset_key),
        )

    def _candidates_for(
        self,
        entity: CanonicalEntity,
        index: _AssetIndex,
        *,
        scan_substrings: bool,
    ) -> list[MatchCandidate]:
        policy = self.policy
        entity_key = normalize_title(select_title(entity.original_title, entity.title))
        exact_hits = index.by_title.get(entity_key, []) if entity_key else []

        pool: dict[int, _PreparedAsset] = {prepared.position: prepared for prepared in exact_hits}
        for prepared in index.near(
            index.by_second, to_seconds(entity.duration), policy.duration_tolerance_seconds
        ):
            pool.setdefault(prepared.position, prepared)
        parsed_date = parse_date(entity.publish_date)
        for prepared in index.near(
            index.by_day,
            parsed_date.toordinal() if parsed_date else None,
            policy.date_tolerance_days,
        ):
            pool.setdefault(prepared.position, prepared)

        substring_hits: set[int] = set()
        if scan_substrings and entity_key and not exact_hits:
            for prepared in index.assets:
                if contains_either_way(entity_key, prepared.key):
                    substring_hits.add(prepared.position)
                    pool.setdefault(prepared.position, prepared)

        candidates: list[MatchCandidate] = []
        for position in sorted(pool):
            prepared = pool[position]
            score, signals = self._score(
                entity,
                prepared.asset,
                exact_title=bool(entity_key) and prepared.key == entity_key,
                substring=position in substring_hits,
            )
            if score < policy.min_score:
                continue
            candidates.append(
                MatchCandidate(
                    entity_id=entity.id,
                    asset=prepared.asset,
                    basis=_basis_for(signals),
                    score=score,
                    signals=signals,
                    auto_approvable=score >= policy.auto_approve_score,
                )
            )
        return candidates

    def _score(
        self,
        entity: CanonicalEntity,
        asset: AssetDescriptor,
        *,
        exact_title: bool,
        substring: bool,
    ) -> tuple[int, tuple[MatchSignal, ...]]:
        policy = self.policy
        score = 0
        signals: list[MatchSignal] = []
        if exact_title:
            score += policy.title_weight
            signals.append(MatchSignal.TITLE)
        elif substring:
            score += policy.substring_weight
            signals.append(MatchSignal.TITLE_SUBSTRING)
        if durations_equal(entity.duration, asset.duration, policy.duration_tolerance_seconds):
            score += policy.duration_weight
            signals.append(MatchSignal.DURATION)
        if dates_close(entity.publish_date, asset.date, policy.date_tolerance_days):
            score += policy.date_weight
            signals.append(MatchSignal.DATE)
        return score, tuple(signals)


def _basis_for(signals: tuple[MatchSignal, ...]) -> MatchBasis:
    if len(signals) > 1:
        return MatchBasis.COMBINED
    if not signals:
        raise ValueError("A candidate needs at least one signal")
    signal = signals[0]
    if signal in (MatchSignal.TITLE, MatchSignal.TITLE_SUBSTRING):
        return MatchBasis.TITLE
    if signal is MatchSignal.DURATION:
        return MatchBasis.DURATION
    return MatchBasis.DATE
