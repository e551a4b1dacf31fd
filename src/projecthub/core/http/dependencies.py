"""FastAPI dependencies that bridge HTTP requests to the access core."""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from typing import Annotated
from uuid import UUID

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from projecthub.features.access.service import AccessService
from projecthub.features.memberships.locks import KeyedLocks
from projecthub.features.memberships.repository import SqlMembershipStore
from projecthub.features.memberships.service import MembershipLifecycleManager
from projecthub.infra.db.session import get_session

from ..auth import AuthenticationError, PrincipalNotFoundError
from ..auth.principal import Principal
from ..rbac.gate import EnforcementGate
from ..rbac.types import Capability

SessionDep = Annotated[AsyncSession, Depends(get_session)]

CapabilityDependency = Callable[..., Awaitable[Principal]]


def get_gate(request: Request) -> EnforcementGate:
    return request.app.state.gate


def get_membership_locks(request: Request) -> KeyedLocks:
    return request.app.state.membership_locks


def get_membership_store(db: SessionDep) -> SqlMembershipStore:
    return SqlMembershipStore(db)


GateDep = Annotated[EnforcementGate, Depends(get_gate)]
StoreDep = Annotated[SqlMembershipStore, Depends(get_membership_store)]


def get_access_service(
    request: Request,
    store: StoreDep,
    gate: GateDep,
) -> AccessService:
    state = request.app.state
    return AccessService(
        principals=state.principal_loader,
        projects=state.projects,
        memberships=store,
        gate=gate,
    )


def get_lifecycle_manager(
    store: StoreDep,
    gate: GateDep,
    locks: Annotated[KeyedLocks, Depends(get_membership_locks)],
) -> MembershipLifecycleManager:
    return MembershipLifecycleManager(store=store, gate=gate, locks=locks)


AccessDep = Annotated[AccessService, Depends(get_access_service)]


def get_current_user_id(request: Request) -> UUID:
    """Return the user id placed on ``request.state`` by the token verifier."""

    candidate = getattr(request.state, "user_id", None)
    if candidate is None:
        raise AuthenticationError("Authentication required")
    if isinstance(candidate, UUID):
        return candidate
    try:
        return UUID(str(candidate))
    except ValueError:
        raise AuthenticationError("Invalid principal identifier") from None


async def get_current_principal(
    user_id: Annotated[UUID, Depends(get_current_user_id)],
    access: AccessDep,
) -> Principal:
    try:
        return await access.load_principal(user_id)
    except PrincipalNotFoundError:
        raise AuthenticationError("Unknown principal") from None


CurrentPrincipal = Annotated[Principal, Depends(get_current_principal)]


def _path_uuid(request: Request, param: str | None) -> UUID | None:
    if not param:
        return None
    candidate = request.path_params.get(param)
    if candidate is None or isinstance(candidate, UUID):
        return candidate
    try:
        return UUID(str(candidate))
    except ValueError:
        return None


def require_capability(
    capability: Capability,
    *,
    project_param: str | None = None,
) -> CapabilityDependency:
    """Return a dependency that raises ``PermissionDeniedError`` unless granted."""

    async def dependency(
        request: Request,
        principal: CurrentPrincipal,
        access: AccessDep,
    ) -> Principal:
        project_id = _path_uuid(request, project_param)
        await access.require(principal, capability, project_id)
        return principal

    return dependency


__all__ = [
    "AccessDep",
    "CurrentPrincipal",
    "GateDep",
    "SessionDep",
    "StoreDep",
    "get_access_service",
    "get_current_principal",
    "get_current_user_id",
    "get_gate",
    "get_lifecycle_manager",
    "get_membership_locks",
    "get_membership_store",
    "require_capability",
]
