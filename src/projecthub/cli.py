"""ProjectHub CLI (schema bootstrap and capability inspection)."""

from __future__ import annotations

import asyncio
from typing import Optional
from uuid import uuid4

import typer

from projecthub.common.ids import generate_uuid7
from projecthub.common.logging import setup_logging
from projecthub.common.time import utc_now
from projecthub.core.auth.principal import Principal
from projecthub.core.rbac.registry import CAPABILITIES
from projecthub.core.rbac.resolver import resolve
from projecthub.core.rbac.types import GlobalRole, Membership, ProjectContext, ProjectRole
from projecthub.infra.db.engine import create_all, get_engine, reset_database_state
from projecthub.settings import get_settings

app = typer.Typer(
    add_completion=False,
    no_args_is_help=True,
    help="ProjectHub access core CLI (init-db/capabilities).",
)


def run_init_db() -> None:
    """Create the membership tables in the configured database."""

    settings = get_settings()
    setup_logging(settings)

    async def _run() -> None:
        try:
            await create_all(get_engine(settings))
        finally:
            reset_database_state()

    asyncio.run(_run())
    typer.echo("Database schema is up to date.")


def run_capabilities(
    global_role: GlobalRole,
    project_role: ProjectRole | None,
    public: bool,
) -> None:
    """Print the capability grid for a role combination."""

    user_id = uuid4()
    project_id = uuid4()
    membership = None
    if project_role is not None:
        membership = Membership(
            id=generate_uuid7(),
            user_id=user_id,
            project_id=project_id,
            role=project_role,
            joined_at=utc_now(),
        )
    granted = resolve(
        Principal(user_id=user_id, global_role=global_role),
        ProjectContext(project_id=project_id, is_public=public, membership=membership),
    )
    width = max(len(definition.key) for definition in CAPABILITIES)
    for definition in CAPABILITIES:
        mark = "yes" if definition.capability in granted else "no"
        typer.echo(f"{definition.key:<{width}}  {definition.scope.value:<8}  {mark}")


@app.command(name="init-db", help=run_init_db.__doc__)
def init_db() -> None:
    run_init_db()


@app.command(name="capabilities", help=run_capabilities.__doc__)
def capabilities(
    global_role: GlobalRole = typer.Option(
        GlobalRole.VIEWER, "--global-role", "-g", case_sensitive=False
    ),
    project_role: Optional[ProjectRole] = typer.Option(  # noqa: UP007 - typer option typing
        None, "--project-role", "-p", case_sensitive=False
    ),
    public: bool = typer.Option(False, "--public", help="Treat the project as public."),
) -> None:
    run_capabilities(global_role, project_role, public)


def main() -> None:
    app()


if __name__ == "__main__":
    main()
