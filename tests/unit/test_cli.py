"""Unit tests for the management CLI (tourstack.cli.manage)."""

from __future__ import annotations

from unittest.mock import patch

import pytest

from tourstack.cli import manage
from tourstack.services.template_service import BUILT_IN_TEMPLATES


@pytest.fixture
def cli_env(monkeypatch, tmp_path):
    """Point the CLI at a throwaway database."""
    db_path = tmp_path / "cli.db"
    monkeypatch.setenv("DATABASE_PATH", str(db_path))
    monkeypatch.setenv("APP_ENV", "test")
    return db_path


def test_no_command_prints_help(capsys):
    assert manage.main([]) == 1
    assert "init-db" in capsys.readouterr().out


def test_init_db(cli_env, capsys):
    assert manage.main(["init-db"]) == 0
    assert cli_env.exists()
    assert f"Database ready: {cli_env}" in capsys.readouterr().out


def test_seed_twice(cli_env, capsys):
    assert manage.main(["seed"]) == 0
    assert f"Templates seeded: {len(BUILT_IN_TEMPLATES)} created" in capsys.readouterr().out
    assert manage.main(["seed"]) == 0
    assert "Templates seeded: 0 created" in capsys.readouterr().out


def test_migrate_slugs_on_empty_database(cli_env, capsys):
    assert manage.main(["migrate-slugs"]) == 0
    out = capsys.readouterr().out
    assert "Slug migration complete" in out
    assert "Tours updated:  0" in out
    assert "Stops updated:  0" in out


def test_serve_uses_settings_defaults(cli_env, monkeypatch):
    monkeypatch.setenv("APP_PORT", "4100")
    with patch.object(manage.uvicorn, "run") as mock_run:
        assert manage.main(["serve"]) == 0
    mock_run.assert_called_once_with("tourstack.main:app", host="0.0.0.0", port=4100, reload=False)


def test_serve_flags_override(cli_env):
    with patch.object(manage.uvicorn, "run") as mock_run:
        manage.main(["serve", "--host", "127.0.0.1", "--port", "9000", "--reload"])
    mock_run.assert_called_once_with("tourstack.main:app", host="127.0.0.1", port=9000, reload=True)
