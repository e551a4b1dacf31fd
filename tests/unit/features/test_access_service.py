from __future__ import annotations

from uuid import uuid4

import pytest

from projecthub.core.auth.errors import (
    PermissionDeniedError,
    PrincipalNotFoundError,
    StoreUnavailableError,
)
from projecthub.core.rbac.gate import EnforcementGate
from projecthub.core.rbac.types import (
    Capability,
    DenyReason,
    GlobalRole,
    ProjectRole,
    ResourceDescriptor,
)
from projecthub.features.access.directory import InMemoryPrincipalLoader, InMemoryProjectDirectory
from projecthub.features.access.service import AccessService
from projecthub.features.memberships.store import InMemoryMembershipStore
from tests.utils import make_membership, make_principal


class _BrokenStore(InMemoryMembershipStore):
    async def load_active_membership(self, user_id, project_id):
        raise StoreUnavailableError("membership store offline")


def _service(principals, *, store=None, public=()) -> AccessService:
    return AccessService(
        principals=InMemoryPrincipalLoader(principals),
        projects=InMemoryProjectDirectory(public),
        memberships=store or InMemoryMembershipStore(),
        gate=EnforcementGate(),
    )


async def test_public_project_is_viewable_without_membership() -> None:
    viewer = make_principal(GlobalRole.VIEWER)
    public_id, private_id = uuid4(), uuid4()
    access = _service([viewer], public=[public_id])

    public = await access.resolve_all(viewer.user_id, public_id)
    private = await access.resolve_all(viewer.user_id, private_id)

    assert public == frozenset({Capability.VIEW_PROJECT})
    assert private == frozenset()


async def test_author_observer_keeps_resource_rights_only() -> None:
    author = make_principal(GlobalRole.VIEWER)
    project_id = uuid4()
    store = InMemoryMembershipStore(
        [make_membership(author.user_id, project_id, ProjectRole.OBSERVER)]
    )
    access = _service([author], store=store)
    own = ResourceDescriptor(owner_id=author.user_id, project_id=project_id)

    delete_knowledge = await access.authorize(
        author.user_id, Capability.DELETE_KNOWLEDGE, project_id, own
    )
    delete_project = await access.authorize(
        author.user_id, Capability.DELETE_PROJECT, project_id, own
    )

    assert delete_knowledge.allowed
    assert delete_project.reason is DenyReason.INSUFFICIENT_PROJECT_ROLE


async def test_require_raises_with_decision() -> None:
    contributor = make_principal(GlobalRole.CONTRIBUTOR)
    project_id = uuid4()
    access = _service([contributor])

    with pytest.raises(PermissionDeniedError) as exc:
        await access.require(contributor, Capability.UPLOAD_FILES, project_id)

    assert exc.value.decision.reason is DenyReason.NOT_A_MEMBER
    assert exc.value.project_id == project_id


async def test_global_checks_skip_project_lookup() -> None:
    manager = make_principal(GlobalRole.PROJECT_MANAGER)
    access = _service([manager], store=_BrokenStore())

    decision = await access.authorize(manager.user_id, Capability.ACCESS_ADMIN_PANEL)

    assert decision.allowed


async def test_collaborator_faults_are_not_denials() -> None:
    principal = make_principal()
    access = _service([principal], store=_BrokenStore())

    with pytest.raises(StoreUnavailableError):
        await access.authorize(principal.user_id, Capability.VIEW_PROJECT, uuid4())
    with pytest.raises(PrincipalNotFoundError):
        await access.authorize(uuid4(), Capability.VIEW_PROJECT)
