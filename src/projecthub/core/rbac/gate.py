"""Enforcement gate: the single call surface for capability checks."""

from __future__ import annotations

import logging
from collections.abc import Callable

from projecthub.common.logging import log_context
from projecthub.core.auth.errors import PermissionDeniedError
from projecthub.core.auth.principal import Principal

from .registry import scope_of
from .resolver import active_membership_for, resolve
from .types import (
    AuthorizationDecision,
    Capability,
    CapabilityScope,
    CapabilitySet,
    DenyReason,
    ProjectContext,
    ResourceDescriptor,
)

logger = logging.getLogger(__name__)

Resolver = Callable[
    [Principal, ProjectContext | None, ResourceDescriptor | None], CapabilitySet
]


def deny_reason(
    principal: Principal,
    capability: Capability,
    project: ProjectContext | None = None,
) -> DenyReason:
    """Explain why ``capability`` is missing. Never used to make a decision."""

    if not principal.is_active:
        return DenyReason.INACTIVE
    if scope_of(capability) is CapabilityScope.GLOBAL:
        return DenyReason.INSUFFICIENT_GLOBAL_ROLE
    if active_membership_for(principal, project) is None:
        return DenyReason.NOT_A_MEMBER
    return DenyReason.INSUFFICIENT_PROJECT_ROLE


class EnforcementGate:
    """Side-effect-free, cache-free capability checks.

    Callers needing several checks for the same inputs should call
    :meth:`resolve_all` once and test membership in the returned set.
    """

    def __init__(self, resolver: Resolver = resolve) -> None:
        self._resolve = resolver

    def resolve_all(
        self,
        principal: Principal,
        project: ProjectContext | None = None,
        resource: ResourceDescriptor | None = None,
    ) -> CapabilitySet:
        return self._resolve(principal, project, resource)

    def authorize(
        self,
        principal: Principal,
        capability: Capability,
        project: ProjectContext | None = None,
        resource: ResourceDescriptor | None = None,
    ) -> AuthorizationDecision:
        granted = self._resolve(principal, project, resource)
        if capability in granted:
            return AuthorizationDecision.allow(capability)
        return AuthorizationDecision.deny(
            capability, deny_reason(principal, capability, project)
        )

    def require(
        self,
        principal: Principal,
        capability: Capability,
        project: ProjectContext | None = None,
        resource: ResourceDescriptor | None = None,
    ) -> AuthorizationDecision:
        """Like :meth:`authorize` but raise :class:`PermissionDeniedError` on ``Deny``."""

        decision = self.authorize(principal, capability, project, resource)
        if decision.allowed:
            return decision

        project_id = project.project_id if project is not None else None
        logger.debug(
            "access.denied",
            extra=log_context(
                user_id=principal.user_id,
                project_id=project_id,
                capability=capability,
                reason=decision.reason,
            ),
        )
        raise PermissionDeniedError(decision, project_id=project_id)


__all__ = ["EnforcementGate", "Resolver", "deny_reason"]
