"""Tests for config loader."""

import json
import pytest
from sqlblueprint.contracts.descriptors import GeneratedIdentities
from sqlblueprint.ingest.config_loader import (
    load_generated_identities,
    load_instance_config,
    save_generated_identities,
)
from sqlblueprint.utils.errors import ConfigError


class TestLoadInstanceConfig:
    """Test instance configuration loading."""

    def test_load_yaml(self, tmp_path):
        path = tmp_path / "instance.yaml"
        path.write_text(
            "project_id: my-project\n"
            "name: orders-db\n"
            "database_version: POSTGRES_15\n"
            "additional_databases:\n"
            "  - name: orders\n"
            "    charset: UTF8\n"
        )

        config = load_instance_config(str(path))
        assert config.name == "orders-db"
        assert config.additional_databases[0].charset == "UTF8"
        assert config.region == "us-central1"

    def test_bare_keys_take_defaults(self, tmp_path):
        path = tmp_path / "bare.yaml"
        path.write_text(
            "project_id: my-project\n"
            "name: orders-db\n"
            "database_version: POSTGRES_15\n"
            "ip_configuration:\n"
            "backup_configuration:\n"
            "  enabled:\n"
            "additional_users:\n"
            "iam_user_emails:\n"
        )

        config = load_instance_config(str(path))
        assert config.ip_configuration == {}
        assert config.backup_configuration.enabled is False
        assert config.additional_users == []
        assert config.iam_user_emails == []

    def test_load_json(self, tmp_path):
        path = tmp_path / "instance.json"
        path.write_text(json.dumps({
            "project_id": "my-project",
            "name": "orders-db",
            "database_version": "MYSQL_8_0",
            "iam_user_emails": ["alice@example.com"],
        }))

        config = load_instance_config(str(path))
        assert config.iam_user_emails == ["alice@example.com"]

    def test_missing_file(self):
        with pytest.raises(ConfigError, match="Configuration file not found"):
            load_instance_config("nonexistent.yaml")

    def test_invalid_yaml(self, tmp_path):
        path = tmp_path / "broken.yaml"
        path.write_text("name: [unclosed\n")

        with pytest.raises(ConfigError, match="Invalid YAML"):
            load_instance_config(str(path))

    def test_invalid_json(self, tmp_path):
        path = tmp_path / "broken.json"
        path.write_text("{invalid json")

        with pytest.raises(ConfigError, match="Invalid JSON"):
            load_instance_config(str(path))

    def test_non_mapping(self, tmp_path):
        path = tmp_path / "list.yaml"
        path.write_text("- a\n- b\n")

        with pytest.raises(ConfigError, match="must contain a mapping"):
            load_instance_config(str(path))

    def test_missing_required_values(self, tmp_path):
        path = tmp_path / "partial.yaml"
        path.write_text("name: orders-db\n")

        with pytest.raises(ConfigError, match="Invalid instance configuration"):
            load_instance_config(str(path))


class TestGeneratedIdentities:
    """Test identity state persistence."""

    def test_missing_state_returns_none(self, tmp_path):
        assert load_generated_identities(str(tmp_path / "state.json")) is None

    def test_save_and_load(self, tmp_path):
        path = tmp_path / "nested" / "state.json"
        identities = GeneratedIdentities(suffix="0a0b0c0d", fallback_secret="00" * 8, fallback_secret_keeper="db")

        save_generated_identities(identities, str(path))

        assert load_generated_identities(str(path)) == identities
