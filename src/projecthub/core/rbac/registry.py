"""Canonical capability catalog.

Keep the structure stable so feature code can reference capabilities
consistently; the evaluation rules live in :mod:`projecthub.core.rbac.policy`.
"""

from __future__ import annotations

from types import MappingProxyType

from projecthub.core.rbac.types import Capability, CapabilityDef, CapabilityScope


def _capability(
    capability: Capability,
    *,
    scope: CapabilityScope,
    label: str,
    description: str,
) -> CapabilityDef:
    return CapabilityDef(
        capability=capability,
        scope=scope,
        label=label,
        description=description,
    )


CAPABILITIES: tuple[CapabilityDef, ...] = (
    # Global capabilities ------------------------------------------------
    _capability(
        Capability.CREATE_PROJECT,
        scope=CapabilityScope.GLOBAL,
        label="Create projects",
        description="Start a new project; the creator becomes its first lead.",
    ),
    _capability(
        Capability.VIEW_ALL_PROJECTS,
        scope=CapabilityScope.GLOBAL,
        label="View all projects",
        description="Enumerate every project regardless of membership.",
    ),
    _capability(
        Capability.MANAGE_ALL_PROJECTS,
        scope=CapabilityScope.GLOBAL,
        label="Manage all projects",
        description="Administer any project in the system.",
    ),
    _capability(
        Capability.MANAGE_USERS,
        scope=CapabilityScope.GLOBAL,
        label="Manage users",
        description="Activate, deactivate, and change the global role of accounts.",
    ),
    _capability(
        Capability.ACCESS_ADMIN_PANEL,
        scope=CapabilityScope.GLOBAL,
        label="Access admin panel",
        description="Open the administrative dashboards.",
    ),
    # Project capabilities -----------------------------------------------
    _capability(
        Capability.VIEW_PROJECT,
        scope=CapabilityScope.PROJECT,
        label="View project",
        description="Read project metadata and its knowledge base.",
    ),
    _capability(
        Capability.VIEW_MEMBERS,
        scope=CapabilityScope.PROJECT,
        label="View members",
        description="List project members and their roles.",
    ),
    _capability(
        Capability.CREATE_KNOWLEDGE,
        scope=CapabilityScope.PROJECT,
        label="Create knowledge",
        description="Publish new knowledge articles in the project.",
    ),
    _capability(
        Capability.UPLOAD_FILES,
        scope=CapabilityScope.PROJECT,
        label="Upload files",
        description="Attach files to the project.",
    ),
    _capability(
        Capability.EDIT_PROJECT,
        scope=CapabilityScope.PROJECT,
        label="Edit project",
        description="Update project details and settings.",
    ),
    _capability(
        Capability.DELETE_PROJECT,
        scope=CapabilityScope.PROJECT,
        label="Delete project",
        description="Delete the project and everything in it.",
    ),
    _capability(
        Capability.MANAGE_MEMBERS,
        scope=CapabilityScope.PROJECT,
        label="Manage members",
        description="Add, remove, or change the role of project members.",
    ),
    # Resource capabilities ----------------------------------------------
    _capability(
        Capability.EDIT_KNOWLEDGE,
        scope=CapabilityScope.RESOURCE,
        label="Edit knowledge",
        description="Edit a knowledge article; authors may always edit their own.",
    ),
    _capability(
        Capability.DELETE_KNOWLEDGE,
        scope=CapabilityScope.RESOURCE,
        label="Delete knowledge",
        description="Delete a knowledge article; authors may always delete their own.",
    ),
    _capability(
        Capability.DELETE_FILES,
        scope=CapabilityScope.RESOURCE,
        label="Delete files",
        description="Delete an attached file; uploaders may always delete their own.",
    ),
)

CAPABILITY_REGISTRY: MappingProxyType[Capability, CapabilityDef] = MappingProxyType(
    {definition.capability: definition for definition in CAPABILITIES}
)

ALL_CAPABILITIES: frozenset[Capability] = frozenset(CAPABILITY_REGISTRY)

RESOURCE_CAPABILITIES: frozenset[Capability] = frozenset(
    definition.capability
    for definition in CAPABILITIES
    if definition.scope is CapabilityScope.RESOURCE
)


def scope_of(capability: Capability) -> CapabilityScope:
    return CAPABILITY_REGISTRY[capability].scope


__all__ = [
    "ALL_CAPABILITIES",
    "CAPABILITIES",
    "CAPABILITY_REGISTRY",
    "RESOURCE_CAPABILITIES",
    "scope_of",
]
