"""Matching and folding defaults, with optional environment overrides."""

from __future__ import annotations

from dataclasses import dataclass

from contentyield.domain.reconciliation import DEFAULT_FOLD_CHUNK_SIZE, MatchPolicy

from .env import int_from_env
from .errors import ConfigurationError

DEFAULT_TITLE_WEIGHT = 60
DEFAULT_DURATION_WEIGHT = 30
DEFAULT_DATE_WEIGHT = 10
DEFAULT_SUBSTRING_WEIGHT = 30
DEFAULT_MIN_SCORE = 40
DEFAULT_AUTO_APPROVE_SCORE = 90
DEFAULT_DURATION_TOLERANCE_SECONDS = 2
DEFAULT_DATE_TOLERANCE_DAYS = 2
DEFAULT_SUBSTRING_SCAN_LIMIT = 500


@dataclass(frozen=True, slots=True)
class MatchingConfig:
    title_weight: int = DEFAULT_TITLE_WEIGHT
    duration_weight: int = DEFAULT_DURATION_WEIGHT
    date_weight: int = DEFAULT_DATE_WEIGHT
    substring_weight: int = DEFAULT_SUBSTRING_WEIGHT
    min_score: int = DEFAULT_MIN_SCORE
    auto_approve_score: int = DEFAULT_AUTO_APPROVE_SCORE
    duration_tolerance_seconds: int = DEFAULT_DURATION_TOLERANCE_SECONDS
    date_tolerance_days: int = DEFAULT_DATE_TOLERANCE_DAYS
    substring_scan_limit: int = DEFAULT_SUBSTRING_SCAN_LIMIT
    fold_chunk_size: int = DEFAULT_FOLD_CHUNK_SIZE

    def to_policy(self) -> MatchPolicy:
        try:
            return MatchPolicy(
                title_weight=self.title_weight,
                duration_weight=self.duration_weight,
                date_weight=self.date_weight,
                substring_weight=self.substring_weight,
                min_score=self.min_score,
                auto_approve_score=self.auto_approve_score,
                duration_tolerance_seconds=self.duration_tolerance_seconds,
                date_tolerance_days=self.date_tolerance_days,
                substring_scan_limit=self.substring_scan_limit,
            )
        except ValueError as exc:
            raise ConfigurationError(f"Invalid matching configuration: {exc}") from exc


def get_matching_config() -> MatchingConfig:
    """Defaults, overridden by any ``CONTENTYIELD_*`` variables that are set."""

    return MatchingConfig(
        title_weight=int_from_env("CONTENTYIELD_TITLE_WEIGHT", DEFAULT_TITLE_WEIGHT),
        duration_weight=int_from_env("CONTENTYIELD_DURATION_WEIGHT", DEFAULT_DURATION_WEIGHT),
        date_weight=int_from_env("CONTENTYIELD_DATE_WEIGHT", DEFAULT_DATE_WEIGHT),
        substring_weight=int_from_env("CONTENTYIELD_SUBSTRING_WEIGHT", DEFAULT_SUBSTRING_WEIGHT),
        min_score=int_from_env("CONTENTYIELD_MIN_SCORE", DEFAULT_MIN_SCORE, minimum=1),
        auto_approve_score=int_from_env(
            "CONTENTYIELD_AUTO_APPROVE_SCORE", DEFAULT_AUTO_APPROVE_SCORE
        ),
        duration_tolerance_seconds=int_from_env(
            "CONTENTYIELD_DURATION_TOLERANCE_SECONDS", DEFAULT_DURATION_TOLERANCE_SECONDS
        ),
        date_tolerance_days=int_from_env(
            "CONTENTYIELD_DATE_TOLERANCE_DAYS", DEFAULT_DATE_TOLERANCE_DAYS
        ),
        substring_scan_limit=int_from_env(
            "CONTENTYIELD_SUBSTRING_SCAN_LIMIT", DEFAULT_SUBSTRING_SCAN_LIMIT
        ),
        fold_chunk_size=int_from_env(
            "CONTENTYIELD_FOLD_CHUNK_SIZE", DEFAULT_FOLD_CHUNK_SIZE, minimum=1
        ),
    )
