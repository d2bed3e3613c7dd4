from __future__ import annotations

import pytest

from contentyield.config import ConfigurationError, MatchingConfig, get_matching_config
from contentyield.domain.reconciliation import MatchPolicy


def test_defaults_match_the_reference_policy(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in ("CONTENTYIELD_TITLE_WEIGHT", "CONTENTYIELD_MIN_SCORE"):
        monkeypatch.delenv(name, raising=False)

    config = get_matching_config()

    assert config == MatchingConfig()
    assert config.to_policy() == MatchPolicy()
    assert config.fold_chunk_size == 100


def test_environment_overrides_are_applied(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("CONTENTYIELD_MIN_SCORE", "50")
    monkeypatch.setenv("CONTENTYIELD_SUBSTRING_SCAN_LIMIT", " 20 ")
    monkeypatch.setenv("CONTENTYIELD_DATE_WEIGHT", "")

    policy = get_matching_config().to_policy()

    assert policy.min_score == 50
    assert policy.substring_scan_limit == 20
    assert policy.date_weight == 10


def test_non_integer_override_is_a_configuration_error(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("CONTENTYIELD_TITLE_WEIGHT", "heavy")

    with pytest.raises(ConfigurationError, match="CONTENTYIELD_TITLE_WEIGHT"):
        get_matching_config()


def test_inconsistent_weights_fail_when_building_the_policy() -> None:
    config = MatchingConfig(title_weight=20, substring_weight=30)

    with pytest.raises(ConfigurationError):
        config.to_policy()
