"""Permission resolution: principal + project context + resource -> capabilities.

``resolve`` is a pure function. It performs no I/O; any membership lookup has
already happened by the time a :class:`ProjectContext` is built, so it is safe
to call concurrently from any thread or task.
"""

from __future__ import annotations

from projecthub.core.auth.principal import Principal

from .policy import RULES, Facts
from .registry import ALL_CAPABILITIES, RESOURCE_CAPABILITIES
from .tiers import NOT_A_MEMBER, global_tier, project_tier
from .types import (
    CapabilitySet,
    GlobalRole,
    Membership,
    ProjectContext,
    ResourceDescriptor,
)

EMPTY: CapabilitySet = frozenset()


def active_membership_for(
    principal: Principal, project: ProjectContext | None
) -> Membership | None:
    """Return the context membership only if it is active and belongs to ``principal``."""

    if project is None or project.membership is None:
        return None
    membership = project.membership
    if not membership.is_active:
        return None
    if membership.user_id != principal.user_id or membership.project_id != project.project_id:
        return None
    return membership


def owner_override_applies(
    principal: Principal,
    project: ProjectContext | None,
    resource: ResourceDescriptor | None,
) -> bool:
    if resource is None or resource.owner_id != principal.user_id:
        return False
    if (
        project is not None
        and resource.project_id is not None
        and resource.project_id != project.project_id
    ):
        return False
    return True


def gather_facts(
    principal: Principal,
    project: ProjectContext | None = None,
    resource: ResourceDescriptor | None = None,
) -> Facts:
    membership = active_membership_for(principal, project)
    return Facts(
        global_tier=global_tier(principal.global_role),
        project_tier=project_tier(membership.role) if membership is not None else NOT_A_MEMBER,
        owner_override=owner_override_applies(principal, project, resource),
        is_public=bool(project is not None and project.is_public),
    )


def resolve(
    principal: Principal,
    project: ProjectContext | None = None,
    resource: ResourceDescriptor | None = None,
) -> CapabilitySet:
    """Compute the effective capability set for ``principal``.

    Inactive principals get nothing. Active admins get the full universe.
    Everyone else gets exactly the capabilities whose rule holds; the
    ownership clause is only consulted for resource-scoped capabilities.
    """

    if not principal.is_active:
        return EMPTY
    if principal.global_role is GlobalRole.ADMIN:
        return ALL_CAPABILITIES

    facts = gather_facts(principal, project, resource)
    project_facts = Facts(
        global_tier=facts.global_tier,
        project_tier=facts.project_tier,
        is_public=facts.is_public,
    )

    granted = set()
    for capability, rule in RULES.items():
        scoped = facts if capability in RESOURCE_CAPABILITIES else project_facts
        if rule.evaluate(scoped):
            granted.add(capability)
    return frozenset(granted)


__all__ = [
    "EMPTY",
    "active_membership_for",
    "gather_facts",
    "owner_override_applies",
    "resolve",
]
