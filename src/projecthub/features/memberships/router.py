"""HTTP routes for project membership."""

from __future__ import annotations

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Body, Depends, Path, Response, Security, status

from projecthub.core.auth.principal import Principal
from projecthub.core.http import (
    CurrentPrincipal,
    get_lifecycle_manager,
    require_capability,
)
from projecthub.core.rbac.types import Capability, Membership, ProjectRole

from .schemas import MemberCreate, MemberJoin, MemberRoleUpdate, MembershipOut
from .service import MembershipLifecycleManager

router = APIRouter(
    prefix="/projects/{projectId}/members",
    tags=["memberships"],
)
me_router = APIRouter(prefix="/me", tags=["memberships"])

ManagerDep = Annotated[MembershipLifecycleManager, Depends(get_lifecycle_manager)]

ProjectPath = Annotated[
    UUID,
    Path(
        description="Project identifier",
        alias="projectId",
    ),
]
UserPath = Annotated[
    UUID,
    Path(description="User identifier", alias="userId"),
]


def _serialize(membership: Membership) -> MembershipOut:
    return MembershipOut.model_validate(membership)


@router.get(
    "",
    response_model=list[MembershipOut],
    response_model_exclude_none=True,
    summary="List active project members",
)
async def list_project_members(
    project_id: ProjectPath,
    _actor: Annotated[
        Principal,
        Security(require_capability(Capability.VIEW_MEMBERS, project_param="projectId")),
    ],
    manager: ManagerDep,
) -> list[MembershipOut]:
    members = await manager.list_members(project_id)
    return [_serialize(member) for member in members]


@router.post(
    "",
    response_model=MembershipOut,
    response_model_exclude_none=True,
    status_code=status.HTTP_201_CREATED,
    summary="Add a member to the project",
)
async def add_project_member(
    project_id: ProjectPath,
    actor: CurrentPrincipal,
    manager: ManagerDep,
    payload: Annotated[MemberCreate, Body()],
) -> MembershipOut:
    membership = await manager.add_member(
        payload.user_id,
        project_id,
        ProjectRole(payload.role),
        actor,
    )
    return _serialize(membership)


@router.post(
    "/me",
    response_model=MembershipOut,
    response_model_exclude_none=True,
    status_code=status.HTTP_201_CREATED,
    summary="Join the project",
)
async def join_project(
    project_id: ProjectPath,
    actor: Annotated[
        Principal,
        Security(require_capability(Capability.VIEW_PROJECT, project_param="projectId")),
    ],
    manager: ManagerDep,
    payload: Annotated[MemberJoin | None, Body()] = None,
) -> MembershipOut:
    role = ProjectRole(payload.role) if payload is not None else ProjectRole.MEMBER
    membership = await manager.join(actor.user_id, project_id, role)
    return _serialize(membership)


@router.delete(
    "/me",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Leave the project",
)
async def leave_project(
    project_id: ProjectPath,
    actor: CurrentPrincipal,
    manager: ManagerDep,
) -> Response:
    await manager.leave(actor.user_id, project_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.put(
    "/{userId}",
    response_model=MembershipOut,
    response_model_exclude_none=True,
    summary="Change a member's project role",
)
async def change_member_role(
    project_id: ProjectPath,
    user_id: UserPath,
    actor: CurrentPrincipal,
    manager: ManagerDep,
    payload: Annotated[MemberRoleUpdate, Body()],
) -> MembershipOut:
    membership = await manager.change_role(
        user_id,
        project_id,
        ProjectRole(payload.role),
        actor,
    )
    return _serialize(membership)


@router.delete(
    "/{userId}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Remove a member from the project",
)
async def remove_project_member(
    project_id: ProjectPath,
    user_id: UserPath,
    actor: CurrentPrincipal,
    manager: ManagerDep,
) -> Response:
    await manager.remove_member(user_id, project_id, actor)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get(
    "/{userId}/history",
    response_model=list[MembershipOut],
    response_model_exclude_none=True,
    summary="List every membership record for a user in the project",
)
async def member_history(
    project_id: ProjectPath,
    user_id: UserPath,
    _actor: Annotated[
        Principal,
        Security(require_capability(Capability.VIEW_MEMBERS, project_param="projectId")),
    ],
    manager: ManagerDep,
) -> list[MembershipOut]:
    rows = await manager.history(user_id, project_id)
    return [_serialize(row) for row in rows]


@me_router.get(
    "/projects",
    response_model=list[MembershipOut],
    response_model_exclude_none=True,
    summary="List the caller's active project memberships",
)
async def list_my_projects(
    actor: CurrentPrincipal,
    manager: ManagerDep,
) -> list[MembershipOut]:
    memberships = await manager.list_projects(actor.user_id)
    return [_serialize(membership) for membership in memberships]


__all__ = ["me_router", "router"]
