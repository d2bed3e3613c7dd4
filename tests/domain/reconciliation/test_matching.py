from __future__ import annotations

import pytest

from contentyield.domain.model import CanonicalEntity, MatchBasis, MatchSignal
from contentyield.domain.reconciliation import CandidateMatcher, MatchPolicy, asset_from_entity
from tests.helpers.records import asset


def _video(
    entity_id: str = "video:v1",
    *,
    title: str = "Unboxing Widget",
    duration: str | None = "10:30",
    date: str | None = "2024-03-01",
) -> CanonicalEntity:
    return CanonicalEntity(
        id=entity_id,
        title=title,
        original_title=title,
        video_id=entity_id.removeprefix("video:"),
        duration=duration,
        publish_date=date,
    )


def test_title_duration_and_date_score_full_marks() -> None:
    matcher = CandidateMatcher()

    [candidate] = matcher.propose(
        [_video()],
        [asset("unboxing widget!", duration="10:31", date="2024-03-02", product_ids=("P1",))],
    )

    assert candidate.score == 100
    assert candidate.basis is MatchBasis.COMBINED
    assert candidate.signals == (MatchSignal.TITLE, MatchSignal.DURATION, MatchSignal.DATE)
    assert candidate.auto_approvable
    assert candidate.product_ids == ("P1",)


def test_title_and_duration_alone_reach_auto_approval() -> None:
    [candidate] = CandidateMatcher().propose(
        [_video(date=None)], [asset("Unboxing Widget", duration="10:30")]
    )

    assert candidate.score == 90
    assert candidate.auto_approvable


def test_exact_title_alone_is_proposed_for_review() -> None:
    [candidate] = CandidateMatcher().propose(
        [_video(duration=None, date=None)], [asset("Unboxing Widget")]
    )

    assert candidate.score == 60
    assert candidate.basis is MatchBasis.TITLE
    assert not candidate.auto_approvable


def test_date_only_or_duration_only_pairs_are_not_proposed() -> None:
    matcher = CandidateMatcher()

    assert matcher.propose([_video()], [asset("Something Else", date="2024-03-01")]) == []
    assert matcher.propose([_video()], [asset("Something Else", duration="10:30")]) == []


def test_duration_and_date_together_clear_the_minimum() -> None:
    [candidate] = CandidateMatcher().propose(
        [_video()], [asset("Something Else", duration="10:29", date="2024-02-28")]
    )

    assert candidate.score == 40
    assert candidate.basis is MatchBasis.COMBINED
    assert not candidate.auto_approvable


def test_identical_titles_are_all_proposed() -> None:
    candidates = CandidateMatcher().propose(
        [_video(duration=None, date=None)],
        [asset("Unboxing Widget", asset_id="a1"), asset("Unboxing Widget", asset_id="a2")],
    )

    assert sorted(candidate.asset.asset_id or "" for candidate in candidates) == ["a1", "a2"]
    assert len({candidate.candidate_id for candidate in candidates}) == 2


def test_candidates_are_ordered_by_descending_score() -> None:
    candidates = CandidateMatcher().propose(
        [_video("video:v1"), _video("video:v2", title="Gadget Teardown", duration=None)],
        [
            asset("Gadget Teardown", date="2024-03-01"),
            asset("Unboxing Widget", duration="10:30", date="2024-03-01"),
        ],
    )

    scores = [candidate.score for candidate in candidates]
    assert scores == sorted(scores, reverse=True)
    assert candidates[0].entity_id == "video:v1"


def test_substring_fallback_scores_below_exact_title() -> None:
    [candidate] = CandidateMatcher().propose(
        [_video(date=None)], [asset("Unboxing Widget Part 2", duration="10:30")]
    )

    assert candidate.score == 60
    assert MatchSignal.TITLE_SUBSTRING in candidate.signals
    assert MatchSignal.TITLE not in candidate.signals


def test_substring_fallback_is_skipped_when_an_exact_title_exists() -> None:
    candidates = CandidateMatcher().propose(
        [_video(duration=None, date=None)],
        [asset("Unboxing Widget", asset_id="exact"), asset("Unboxing Widget Part 2")],
    )

    assert [candidate.asset.asset_id for candidate in candidates] == ["exact"]


def test_substring_fallback_is_disabled_for_large_collections() -> None:
    matcher = CandidateMatcher(MatchPolicy(substring_scan_limit=1))

    candidates = matcher.propose(
        [_video(date=None)], [asset("Unboxing Widget Part 2", duration="10:30")]
    )

    assert candidates == []


def test_policy_weights_are_tunable() -> None:
    policy = MatchPolicy(title_weight=50, min_score=50, auto_approve_score=80)
    [candidate] = CandidateMatcher(policy).propose(
        [_video(date=None)], [asset("Unboxing Widget", duration="10:30")]
    )

    assert candidate.score == 80
    assert candidate.auto_approvable


def test_policy_rejects_substring_weight_not_below_title_weight() -> None:
    with pytest.raises(ValueError, match="substring_weight"):
        MatchPolicy(title_weight=30, substring_weight=30)


def test_asset_from_entity_describes_a_product_orphan() -> None:
    entity = CanonicalEntity(
        id="product:P1",
        title="Widget",
        original_title="Widget",
        product_ids=["P1"],
        duration="1:00",
    )

    descriptor = asset_from_entity(entity)

    assert descriptor.title == "Widget"
    assert descriptor.entity_id == "product:P1"
    assert descriptor.product_ids == ("P1",)
    assert descriptor.duration == "1:00"
