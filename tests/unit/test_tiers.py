"""Unit tests for tier defaults."""

import pytest

from workspacegate.models.domain import UNLIMITED
from workspacegate.tenancy.tiers import ALL_FEATURES, get_tier_defaults, is_unlimited
from workspacegate.types import TIER_RANK, Tier


@pytest.mark.unit
class TestTierDefaults:
    def test_standard_enables_everything(self) -> None:
        defaults = get_tier_defaults(Tier.STANDARD)
        assert all(defaults.features[name] for name in ALL_FEATURES)
        assert defaults.limits.max_users == UNLIMITED
        assert defaults.limits.max_tasks == UNLIMITED
        assert defaults.limits.max_teams == UNLIMITED

    def test_community_defaults(self) -> None:
        defaults = get_tier_defaults(Tier.COMMUNITY)
        assert defaults.features == {
            "bulkUserImport": False,
            "auditLogs": False,
            "advancedAutomation": False,
            "customBranding": False,
        }
        assert (
            defaults.limits.max_users,
            defaults.limits.max_tasks,
            defaults.limits.max_teams,
        ) == (10, 100, 3)

    def test_community_limits_follow_settings(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("COMMUNITY_MAX_TEAMS", "5")
        monkeypatch.setenv("COMMUNITY_MAX_TASKS", "-1")
        defaults = get_tier_defaults(Tier.COMMUNITY)
        assert defaults.limits.max_teams == 5
        assert defaults.limits.max_tasks == UNLIMITED

    def test_unknown_tier_falls_back_to_community(self) -> None:
        assert get_tier_defaults("ENTERPRISE").features["auditLogs"] is False

    def test_defaults_are_independent_copies(self) -> None:
        first = get_tier_defaults(Tier.COMMUNITY)
        first.features["auditLogs"] = True
        assert get_tier_defaults(Tier.COMMUNITY).features["auditLogs"] is False


@pytest.mark.unit
class TestTierHelpers:
    def test_is_unlimited(self) -> None:
        assert is_unlimited(UNLIMITED) is True
        assert is_unlimited(None) is True
        assert is_unlimited(0) is False
        assert is_unlimited(10) is False

    def test_rank_orders_tiers(self) -> None:
        assert TIER_RANK[Tier.STANDARD] > TIER_RANK[Tier.COMMUNITY]
