"""Collaborator contracts consumed by the access service, plus in-memory versions."""

from __future__ import annotations

from collections.abc import Iterable
from typing import Protocol
from uuid import UUID

from projecthub.core.auth.errors import PrincipalNotFoundError
from projecthub.core.auth.principal import Principal


class PrincipalLoader(Protocol):
    """Account collaborator: resolves a user id to its current principal."""

    async def load_principal(self, user_id: UUID) -> Principal: ...


class ProjectDirectory(Protocol):
    """Project collaborator: reports whether a project is publicly viewable."""

    async def is_public(self, project_id: UUID) -> bool: ...


class InMemoryPrincipalLoader:
    def __init__(self, principals: Iterable[Principal] = ()) -> None:
        self._principals = {principal.user_id: principal for principal in principals}

    def put(self, principal: Principal) -> None:
        self._principals[principal.user_id] = principal

    async def load_principal(self, user_id: UUID) -> Principal:
        try:
            return self._principals[user_id]
        except KeyError:
            raise PrincipalNotFoundError(user_id) from None


class InMemoryProjectDirectory:
    def __init__(self, public_projects: Iterable[UUID] = ()) -> None:
        self._public = set(public_projects)

    def set_public(self, project_id: UUID, is_public: bool = True) -> None:
        if is_public:
            self._public.add(project_id)
        else:
            self._public.discard(project_id)

    async def is_public(self, project_id: UUID) -> bool:
        return project_id in self._public


__all__ = [
    "InMemoryPrincipalLoader",
    "InMemoryProjectDirectory",
    "PrincipalLoader",
    "ProjectDirectory",
]
