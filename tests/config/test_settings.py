"""Tests for resolver settings."""

import pytest
from sqlblueprint.config import load_settings
from sqlblueprint.config import manager
from sqlblueprint.utils.errors import ConfigError


class TestLoadSettings:
    """Test settings loading and overrides."""

    def test_packaged_defaults(self, settings):
        assert settings["iam"]["role"] == "roles/cloudsql.instanceUser"
        assert settings["identity"] == {"suffix_bytes": 4, "secret_bytes": 8}
        assert settings["insights"]["query_string_length"] == 1024
        assert settings["timeouts"]["create"] == "30m"

    def test_explicit_file_overrides_defaults(self, tmp_path):
        path = tmp_path / "settings.yaml"
        path.write_text("iam:\n  role: roles/custom.dbUser\n")

        settings = load_settings(str(path))
        assert settings["iam"]["role"] == "roles/custom.dbUser"
        assert settings["iam"]["service_account_suffix"] == ".gserviceaccount.com"

    def test_missing_explicit_file(self, tmp_path):
        with pytest.raises(ConfigError, match="Settings file not found"):
            load_settings(str(tmp_path / "missing.yaml"))

    def test_invalid_values_rejected(self, tmp_path):
        path = tmp_path / "settings.yaml"
        path.write_text("identity:\n  suffix_bytes: 0\n")

        with pytest.raises(ConfigError, match="suffix_bytes"):
            load_settings(str(path))

    def test_project_overrides_user(self, tmp_path, monkeypatch):
        user_path = tmp_path / "user.yaml"
        user_path.write_text("timeouts:\n  create: 1h\n  update: 1h\n")
        project_path = tmp_path / "project.yaml"
        project_path.write_text("timeouts:\n  create: 2h\n")
        monkeypatch.setattr(manager, "get_user_config_path", lambda: user_path)
        monkeypatch.setattr(manager, "get_project_config_path", lambda: project_path)

        settings = load_settings()
        assert settings["timeouts"]["create"] == "2h"
        assert settings["timeouts"]["update"] == "1h"
        assert settings["timeouts"]["delete"] == "30m"

    def test_broken_user_file_is_skipped(self, tmp_path, monkeypatch):
        user_path = tmp_path / "user.yaml"
        user_path.write_text("- not a mapping\n")
        monkeypatch.setattr(manager, "get_user_config_path", lambda: user_path)
        monkeypatch.setattr(manager, "get_project_config_path", lambda: None)

        settings = load_settings()
        assert settings["timeouts"]["create"] == "30m"
