"""Request-scoped authorization: load principal and membership, then ask the gate."""

from __future__ import annotations

from uuid import UUID

from projecthub.core.auth.principal import Principal
from projecthub.core.rbac.gate import EnforcementGate
from projecthub.core.rbac.types import (
    AuthorizationDecision,
    Capability,
    CapabilitySet,
    ProjectContext,
    ResourceDescriptor,
)
from projecthub.features.memberships.store import MembershipStore

from .directory import PrincipalLoader, ProjectDirectory


class AccessService:
    """Build principals and project contexts from collaborators for the gate.

    Collaborator failures (``StoreUnavailableError``, ``PrincipalNotFoundError``)
    propagate unchanged; they are never turned into a denial.
    """

    def __init__(
        self,
        *,
        principals: PrincipalLoader,
        projects: ProjectDirectory,
        memberships: MembershipStore,
        gate: EnforcementGate,
    ) -> None:
        self._principals = principals
        self._projects = projects
        self._memberships = memberships
        self._gate = gate

    async def load_principal(self, user_id: UUID) -> Principal:
        return await self._principals.load_principal(user_id)

    async def project_context(self, principal: Principal, project_id: UUID) -> ProjectContext:
        membership = await self._memberships.load_active_membership(principal.user_id, project_id)
        return ProjectContext(
            project_id=project_id,
            is_public=await self._projects.is_public(project_id),
            membership=membership,
        )

    async def authorize(
        self,
        user_id: UUID,
        capability: Capability,
        project_id: UUID | None = None,
        resource: ResourceDescriptor | None = None,
    ) -> AuthorizationDecision:
        principal = await self.load_principal(user_id)
        return await self.authorize_principal(principal, capability, project_id, resource)

    async def authorize_principal(
        self,
        principal: Principal,
        capability: Capability,
        project_id: UUID | None = None,
        resource: ResourceDescriptor | None = None,
    ) -> AuthorizationDecision:
        context = await self._context_for(principal, project_id)
        return self._gate.authorize(principal, capability, context, resource)

    async def resolve_all(
        self,
        user_id: UUID,
        project_id: UUID | None = None,
        resource: ResourceDescriptor | None = None,
    ) -> CapabilitySet:
        principal = await self.load_principal(user_id)
        context = await self._context_for(principal, project_id)
        return self._gate.resolve_all(principal, context, resource)

    async def require(
        self,
        principal: Principal,
        capability: Capability,
        project_id: UUID | None = None,
        resource: ResourceDescriptor | None = None,
    ) -> AuthorizationDecision:
        """Raise :class:`PermissionDeniedError` unless ``capability`` is granted."""

        context = await self._context_for(principal, project_id)
        return self._gate.require(principal, capability, context, resource)

    async def _context_for(
        self, principal: Principal, project_id: UUID | None
    ) -> ProjectContext | None:
        if project_id is None:
            return None
        return await self.project_context(principal, project_id)


__all__ = ["AccessService"]
