"""Ordinal tiers for global and project roles."""

from __future__ import annotations

from types import MappingProxyType

from .types import GlobalRole, ProjectRole

# Project tier reported for a principal without an active membership.
NOT_A_MEMBER = -1

GLOBAL_TIERS = MappingProxyType(
    {
        GlobalRole.VIEWER: 0,
        GlobalRole.CONTRIBUTOR: 1,
        GlobalRole.PROJECT_MANAGER: 2,
        GlobalRole.ADMIN: 3,
    }
)

PROJECT_TIERS = MappingProxyType(
    {
        ProjectRole.OBSERVER: 0,
        ProjectRole.MEMBER: 1,
        ProjectRole.LEAD: 2,
    }
)


def global_tier(role: GlobalRole) -> int:
    return GLOBAL_TIERS[role]


def project_tier(role: ProjectRole) -> int:
    return PROJECT_TIERS[role]


__all__ = [
    "GLOBAL_TIERS",
    "NOT_A_MEMBER",
    "PROJECT_TIERS",
    "global_tier",
    "project_tier",
]
