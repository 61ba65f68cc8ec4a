"""Tests for the unitwork CLI."""

import json
from unittest.mock import patch

from typer.testing import CliRunner

from unitwork import VERSION
from unitwork.cli import app

runner = CliRunner()


class TestVersion:
    def test_version_flag(self):
        result = runner.invoke(app, ["--version"])
        assert result.exit_code == 0
        assert f"unitwork {VERSION}" in result.stdout


class TestSchemaCommand:
    def test_prints_both_tables(self):
        result = runner.invoke(app, ["schema"])
        assert result.exit_code == 0
        assert 'CREATE TABLE IF NOT EXISTS "City"' in result.stdout
        assert 'CREATE TABLE IF NOT EXISTS "Person"' in result.stdout


class TestDemoCommand:
    @patch("unitwork.cli.app.configure_logging")
    def test_demo_inserts_and_lists(self, mock_configure, tmp_path):
        db = tmp_path / "demo.db"
        result = runner.invoke(app, ["demo", "--db", f"sqlite:///{db}", "--name", "John", "--surname", "Doe"])

        assert result.exit_code == 0, result.output
        assert "Rows affected: 1" in result.stdout
        assert "Name John, Surname Doe, Age 0, City None" in result.stdout
        mock_configure.assert_called_once()
        assert db.exists()

    @patch("unitwork.cli.app.configure_logging")
    def test_demo_accumulates_rows(self, _mock_configure, tmp_path):
        url = f"sqlite:///{tmp_path / 'demo.db'}"
        runner.invoke(app, ["demo", "--db", url])
        result = runner.invoke(app, ["demo", "--db", url])

        assert result.exit_code == 0, result.output
        assert result.stdout.count("Name Name, Surname Surname") == 2

    @patch("unitwork.cli.app.configure_logging")
    def test_invalid_person_exits_with_error(self, _mock_configure, tmp_path):
        result = runner.invoke(app, ["demo", "--db", f"sqlite:///{tmp_path / 'demo.db'}", "--age=-1"])

        assert result.exit_code == 1
        assert "Rows affected" not in result.stdout


class TestConfigCommand:
    def test_json(self, monkeypatch, tmp_path):
        monkeypatch.chdir(tmp_path)
        monkeypatch.setenv("UNITWORK_DATABASE_URL", "memory")
        result = runner.invoke(app, ["config", "--format", "json"])

        assert result.exit_code == 0
        assert json.loads(result.stdout)["database_url"] == "memory"

    def test_env(self, monkeypatch, tmp_path):
        monkeypatch.chdir(tmp_path)
        monkeypatch.setenv("UNITWORK_LOG_LEVEL", "DEBUG")
        result = runner.invoke(app, ["config", "-f", "env"])

        assert result.exit_code == 0
        assert "UNITWORK_LOG_LEVEL=DEBUG" in result.stdout
