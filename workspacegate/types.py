"""Enums and role sets for workspacegate."""

from enum import StrEnum


class Role(StrEnum):
    SUPERUSER = "superuser"
    TENANT_OWNER = "tenant_owner"
    COORDINATOR = "coordinator"
    TEAM_LEAD = "team_lead"
    MEMBER = "member"


class Tier(StrEnum):
    COMMUNITY = "COMMUNITY"
    STANDARD = "STANDARD"


class Resource(StrEnum):
    USERS = "users"
    TASKS = "tasks"
    TEAMS = "teams"


# Platform operators and HR. Consulted only by the guard bypass rule.
PRIVILEGED_ROLES: frozenset[Role] = frozenset({Role.SUPERUSER, Role.COORDINATOR})

TIER_RANK: dict[Tier, int] = {
    Tier.COMMUNITY: 0,
    Tier.STANDARD: 1,
}
