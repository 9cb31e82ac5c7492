"""Tier definitions with default feature flags and limits."""

from __future__ import annotations

from dataclasses import dataclass

from workspacegate.config.settings import get_settings
from workspacegate.models.domain import UNLIMITED, TenantLimits
from workspacegate.types import Tier

FEATURE_BULK_USER_IMPORT = "bulkUserImport"
FEATURE_AUDIT_LOGS = "auditLogs"
FEATURE_ADVANCED_AUTOMATION = "advancedAutomation"
FEATURE_CUSTOM_BRANDING = "customBranding"

ALL_FEATURES = (
    FEATURE_BULK_USER_IMPORT,
    FEATURE_AUDIT_LOGS,
    FEATURE_ADVANCED_AUTOMATION,
    FEATURE_CUSTOM_BRANDING,
)


@dataclass(frozen=True, slots=True)
class TierDefaults:
    """Features and limits stamped onto a workspace when it is created or re-tiered."""

    features: dict[str, bool]
    limits: TenantLimits


def is_unlimited(value: int | None) -> bool:
    return value is None or value == UNLIMITED


def get_tier_defaults(tier: Tier | str) -> TierDefaults:
    """Get defaults for a tier, falling back to COMMUNITY for unknown values."""
    if tier == Tier.STANDARD:
        return TierDefaults(
            features=dict.fromkeys(ALL_FEATURES, True),
            limits=TenantLimits(),
        )

    settings = get_settings()
    return TierDefaults(
        features=dict.fromkeys(ALL_FEATURES, False),
        limits=TenantLimits(
            max_users=settings.community_max_users,
            max_tasks=settings.community_max_tasks,
            max_teams=settings.community_max_teams,
        ),
    )
