"""Title normalization and ordered title selection.

Every comparison between titles coming from different platforms goes through
:func:`normalize_title`. The empty key is never a match key.
"""

from __future__ import annotations

import re

_NON_ALNUM = re.compile(r"[^a-z0-9]+")


def normalize_title(title: str | None) -> str:
    """Return the canonical comparison key for ``title``.

    Lower-cases, replaces every character outside ``[a-z0-9]`` with a space, collapses
    whitespace runs and trims. Total and idempotent; ``None`` maps to ``""``.
    """

    if not title:
        return ""
    text = _NON_ALNUM.sub(" ", title.lower())
    return " ".join(text.split())


def is_match_key(key: str | None) -> bool:
    return bool(key)


def title_key(title: str | None) -> str | None:
    """Normalized key, or ``None`` when the title carries nothing comparable."""

    key = normalize_title(title)
    return key if is_match_key(key) else None


def select_title(*candidates: str | None) -> str:
    """Return the first usable candidate, in the order given.

    Callers pass candidates by precedence; the conventional order is
    display-name override, entity title, original title, product id, video id.
    A candidate is usable when it normalizes to a non-empty key.
    """

    for candidate in candidates:
        if candidate and title_key(candidate) is not None:
            return candidate.strip()
    return ""


def contains_either_way(left: str, right: str) -> bool:
    """Substring containment in either direction between two normalized keys."""

    if not left or not right:
        return False
    return left in right or right in left
