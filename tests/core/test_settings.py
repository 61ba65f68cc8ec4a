"""Tests for UnitworkSettings."""

from unitwork.core.settings import UnitworkSettings


class TestUnitworkSettings:
    def test_defaults(self, monkeypatch, tmp_path):
        monkeypatch.chdir(tmp_path)
        for var in ("UNITWORK_DATABASE_URL", "UNITWORK_ECHO_SQL", "UNITWORK_LOG_LEVEL", "UNITWORK_LOG_JSON"):
            monkeypatch.delenv(var, raising=False)

        settings = UnitworkSettings()
        assert settings.database_url == "sqlite:///unitwork.db"
        assert settings.echo_sql is False
        assert settings.log_level == "INFO"
        assert settings.log_json is None

    def test_environment_overrides(self, monkeypatch, tmp_path):
        monkeypatch.chdir(tmp_path)
        monkeypatch.setenv("UNITWORK_DATABASE_URL", "memory")
        monkeypatch.setenv("UNITWORK_ECHO_SQL", "true")
        monkeypatch.setenv("UNITWORK_LOG_JSON", "false")

        settings = UnitworkSettings()
        assert settings.database_url == "memory"
        assert settings.echo_sql is True
        assert settings.log_json is False

    def test_dotenv_file(self, monkeypatch, tmp_path):
        monkeypatch.chdir(tmp_path)
        monkeypatch.delenv("UNITWORK_LOG_LEVEL", raising=False)
        (tmp_path / ".env").write_text("UNITWORK_LOG_LEVEL=DEBUG\nUNRELATED=1\n")

        assert UnitworkSettings().log_level == "DEBUG"
