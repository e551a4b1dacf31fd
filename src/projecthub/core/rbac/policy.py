"""Static capability rules.

Each capability maps to one :class:`Rule`; a rule is a disjunction of clauses
evaluated against the facts the resolver gathers for a request. This table is
the only place capability semantics are defined.
"""

from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType

from .tiers import NOT_A_MEMBER, global_tier, project_tier
from .types import Capability, GlobalRole, ProjectRole


@dataclass(frozen=True, slots=True)
class Facts:
    """Inputs every rule is evaluated against."""

    global_tier: int
    project_tier: int = NOT_A_MEMBER
    owner_override: bool = False
    is_public: bool = False


@dataclass(frozen=True)
class Rule:
    """``True`` when any configured clause holds."""

    min_project_role: ProjectRole | None = None
    min_global_role: GlobalRole | None = None
    owner_override: bool = False
    public: bool = False

    def evaluate(self, facts: Facts) -> bool:
        if self.public and facts.is_public:
            return True
        if self.owner_override and facts.owner_override:
            return True
        if (
            self.min_project_role is not None
            and facts.project_tier >= project_tier(self.min_project_role)
        ):
            return True
        if (
            self.min_global_role is not None
            and facts.global_tier >= global_tier(self.min_global_role)
        ):
            return True
        return False


RULES: MappingProxyType[Capability, Rule] = MappingProxyType(
    {
        Capability.VIEW_PROJECT: Rule(
            public=True,
            min_project_role=ProjectRole.OBSERVER,
            min_global_role=GlobalRole.PROJECT_MANAGER,
        ),
        Capability.VIEW_MEMBERS: Rule(
            min_project_role=ProjectRole.OBSERVER,
            min_global_role=GlobalRole.PROJECT_MANAGER,
        ),
        Capability.CREATE_KNOWLEDGE: Rule(min_project_role=ProjectRole.MEMBER),
        Capability.UPLOAD_FILES: Rule(min_project_role=ProjectRole.MEMBER),
        Capability.EDIT_KNOWLEDGE: Rule(
            owner_override=True,
            min_project_role=ProjectRole.LEAD,
            min_global_role=GlobalRole.ADMIN,
        ),
        Capability.DELETE_KNOWLEDGE: Rule(
            owner_override=True,
            min_project_role=ProjectRole.LEAD,
            min_global_role=GlobalRole.ADMIN,
        ),
        Capability.DELETE_FILES: Rule(
            owner_override=True,
            min_project_role=ProjectRole.LEAD,
            min_global_role=GlobalRole.ADMIN,
        ),
        Capability.EDIT_PROJECT: Rule(
            min_project_role=ProjectRole.LEAD,
            min_global_role=GlobalRole.PROJECT_MANAGER,
        ),
        Capability.DELETE_PROJECT: Rule(min_global_role=GlobalRole.ADMIN),
        Capability.MANAGE_MEMBERS: Rule(
            min_project_role=ProjectRole.LEAD,
            min_global_role=GlobalRole.PROJECT_MANAGER,
        ),
        Capability.CREATE_PROJECT: Rule(min_global_role=GlobalRole.CONTRIBUTOR),
        Capability.VIEW_ALL_PROJECTS: Rule(min_global_role=GlobalRole.PROJECT_MANAGER),
        Capability.MANAGE_ALL_PROJECTS: Rule(min_global_role=GlobalRole.ADMIN),
        Capability.MANAGE_USERS: Rule(min_global_role=GlobalRole.ADMIN),
        Capability.ACCESS_ADMIN_PANEL: Rule(min_global_role=GlobalRole.PROJECT_MANAGER),
    }
)


def rule_for(capability: Capability) -> Rule:
    return RULES[capability]


__all__ = ["Facts", "RULES", "Rule", "rule_for"]
