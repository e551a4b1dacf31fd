from __future__ import annotations

from typer.testing import CliRunner

from projecthub.cli import app

runner = CliRunner()


def _grid(output: str) -> dict[str, str]:
    rows = {}
    for line in output.strip().splitlines():
        key, _scope, mark = line.split()
        rows[key] = mark
    return rows


def test_capabilities_for_non_member_viewer() -> None:
    result = runner.invoke(app, ["capabilities", "--global-role", "VIEWER"])

    assert result.exit_code == 0, result.output
    grid = _grid(result.output)
    assert set(grid.values()) == {"no"}
    assert len(grid) == 15


def test_capabilities_for_project_lead() -> None:
    result = runner.invoke(app, ["capabilities", "-g", "CONTRIBUTOR", "-p", "LEAD"])

    assert result.exit_code == 0, result.output
    grid = _grid(result.output)
    assert grid["ManageMembers"] == "yes"
    assert grid["CreateProject"] == "yes"
    assert grid["DeleteProject"] == "no"
    assert grid["AccessAdminPanel"] == "no"


def test_public_flag_grants_view_project_only() -> None:
    result = runner.invoke(app, ["capabilities", "--public"])

    assert result.exit_code == 0, result.output
    grid = _grid(result.output)
    assert [key for key, mark in grid.items() if mark == "yes"] == ["ViewProject"]


def test_init_db_creates_schema(tmp_path, monkeypatch) -> None:
    from projecthub.settings import reload_settings

    monkeypatch.setenv(
        "PROJECTHUB_DATABASE_DSN", f"sqlite+aiosqlite:///{tmp_path / 'cli.sqlite'}"
    )
    reload_settings()
    try:
        result = runner.invoke(app, ["init-db"])
    finally:
        monkeypatch.delenv("PROJECTHUB_DATABASE_DSN")
        reload_settings()

    assert result.exit_code == 0, result.output
    assert "Database schema is up to date." in result.output
    assert (tmp_path / "cli.sqlite").exists()
