from __future__ import annotations

import pytest

from projecthub.core.rbac.tiers import (
    GLOBAL_TIERS,
    NOT_A_MEMBER,
    PROJECT_TIERS,
    global_tier,
    project_tier,
)
from projecthub.core.rbac.types import GlobalRole, ProjectRole


def test_global_tiers_follow_declaration_order() -> None:
    tiers = [global_tier(role) for role in GlobalRole]
    assert tiers == sorted(tiers)
    assert len(set(tiers)) == len(GlobalRole)


def test_project_tiers_follow_declaration_order() -> None:
    assert (
        project_tier(ProjectRole.OBSERVER)
        < project_tier(ProjectRole.MEMBER)
        < project_tier(ProjectRole.LEAD)
    )


def test_tier_tables_are_total() -> None:
    assert set(GLOBAL_TIERS) == set(GlobalRole)
    assert set(PROJECT_TIERS) == set(ProjectRole)


def test_non_member_sentinel_ranks_below_every_project_role() -> None:
    assert all(NOT_A_MEMBER < project_tier(role) for role in ProjectRole)


def test_unknown_role_is_a_programming_error() -> None:
    with pytest.raises(KeyError):
        global_tier("SUPERUSER")  # type: ignore[arg-type]


def test_tier_tables_are_read_only() -> None:
    with pytest.raises(TypeError):
        GLOBAL_TIERS[GlobalRole.VIEWER] = 99  # type: ignore[index]
