from __future__ import annotations

import pytest

from contentyield.domain.reconciliation.normalize import (
    contains_either_way,
    is_match_key,
    normalize_title,
    select_title,
    title_key,
)


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("My Video!!", "my video"),
        ("  My   Video  ", "my video"),
        ("Unboxing: Widget (2024) #ad", "unboxing widget 2024 ad"),
        ("Café Tour", "caf tour"),
        ("", ""),
        (None, ""),
        ("!!!", ""),
    ],
)
def test_normalize_title_maps_to_lowercase_alnum_words(raw: str | None, expected: str) -> None:
    assert normalize_title(raw) == expected


def test_normalize_title_is_idempotent() -> None:
    for raw in ("My Video!!", "  A -- B  ", "ÅNGSTRÖM 5", "already normal"):
        once = normalize_title(raw)
        assert normalize_title(once) == once


def test_titles_differing_only_in_punctuation_and_case_share_a_key() -> None:
    assert normalize_title("My Video!!") == normalize_title("my video")


def test_empty_key_is_never_a_match_key() -> None:
    assert not is_match_key("")
    assert not is_match_key(None)
    assert title_key("?!") is None
    assert title_key("Widget") == "widget"


def test_select_title_uses_first_usable_candidate() -> None:
    assert select_title(None, "", "  ", "--", "Original", "P1") == "Original"
    assert select_title("Override", "Title") == "Override"
    assert select_title(None, None) == ""


def test_contains_either_way_requires_non_empty_keys() -> None:
    assert contains_either_way("unboxing widget", "widget")
    assert contains_either_way("widget", "unboxing widget")
    assert not contains_either_way("", "widget")
    assert not contains_either_way("gadget", "widget")
