"""RBAC type definitions used across the stack."""

from __future__ import annotations

import enum
from dataclasses import dataclass
from datetime import datetime
from uuid import UUID


class GlobalRole(str, enum.Enum):
    """Account-wide role, independent of any project (ordered low to high)."""

    VIEWER = "VIEWER"
    CONTRIBUTOR = "CONTRIBUTOR"
    PROJECT_MANAGER = "PROJECT_MANAGER"
    ADMIN = "ADMIN"


class ProjectRole(str, enum.Enum):
    """Per-project membership role (ordered low to high)."""

    OBSERVER = "OBSERVER"
    MEMBER = "MEMBER"
    LEAD = "LEAD"


class CapabilityScope(str, enum.Enum):
    """What a capability acts upon."""

    GLOBAL = "global"
    PROJECT = "project"
    RESOURCE = "resource"


class Capability(str, enum.Enum):
    """Named, boolean, context-dependent permissions."""

    VIEW_PROJECT = "ViewProject"
    VIEW_MEMBERS = "ViewMembers"
    CREATE_KNOWLEDGE = "CreateKnowledge"
    UPLOAD_FILES = "UploadFiles"
    EDIT_KNOWLEDGE = "EditKnowledge"
    DELETE_KNOWLEDGE = "DeleteKnowledge"
    DELETE_FILES = "DeleteFiles"
    EDIT_PROJECT = "EditProject"
    DELETE_PROJECT = "DeleteProject"
    MANAGE_MEMBERS = "ManageMembers"
    CREATE_PROJECT = "CreateProject"
    VIEW_ALL_PROJECTS = "ViewAllProjects"
    MANAGE_ALL_PROJECTS = "ManageAllProjects"
    MANAGE_USERS = "ManageUsers"
    ACCESS_ADMIN_PANEL = "AccessAdminPanel"


class DenyReason(str, enum.Enum):
    """Machine-readable explanation attached to a denial (diagnostic only)."""

    INACTIVE = "Inactive"
    INSUFFICIENT_GLOBAL_ROLE = "InsufficientGlobalRole"
    INSUFFICIENT_PROJECT_ROLE = "InsufficientProjectRole"
    NOT_A_MEMBER = "NotAMember"


CapabilitySet = frozenset[Capability]


@dataclass(frozen=True)
class CapabilityDef:
    """Static capability catalog entry."""

    capability: Capability
    scope: CapabilityScope
    label: str
    description: str

    @property
    def key(self) -> str:
        return self.capability.value


@dataclass(frozen=True, slots=True)
class Membership:
    """One membership row; ``left_at is None`` marks the active record."""

    id: UUID
    user_id: UUID
    project_id: UUID
    role: ProjectRole
    joined_at: datetime
    left_at: datetime | None = None

    @property
    def is_active(self) -> bool:
        return self.left_at is None


@dataclass(frozen=True, slots=True)
class ProjectContext:
    """Project under evaluation plus the requesting principal's active membership."""

    project_id: UUID
    is_public: bool = False
    membership: Membership | None = None


@dataclass(frozen=True, slots=True)
class ResourceDescriptor:
    """Owner of a resource, supplied only for ownership-sensitive checks."""

    owner_id: UUID
    project_id: UUID | None = None


@dataclass(frozen=True, slots=True)
class AuthorizationDecision:
    """Outcome of a single capability check: ``Allow`` or ``Deny(reason)``."""

    capability: Capability
    allowed: bool
    reason: DenyReason | None = None

    def __bool__(self) -> bool:
        return self.allowed

    @classmethod
    def allow(cls, capability: Capability) -> AuthorizationDecision:
        return cls(capability=capability, allowed=True)

    @classmethod
    def deny(cls, capability: Capability, reason: DenyReason) -> AuthorizationDecision:
        return cls(capability=capability, allowed=False, reason=reason)


__all__ = [
    "AuthorizationDecision",
    "Capability",
    "CapabilityDef",
    "CapabilityScope",
    "CapabilitySet",
    "DenyReason",
    "GlobalRole",
    "Membership",
    "ProjectContext",
    "ProjectRole",
    "ResourceDescriptor",
]
