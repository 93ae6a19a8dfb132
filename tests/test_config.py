"""Tests for ConfigManager persistence."""

import json
import os
import stat
import sys
from pathlib import Path
from unittest.mock import patch

import pytest

from cswitch.config import ConfigManager
from cswitch.errors import ConfigError, ValidationError
from cswitch.models import CONFIG_VERSION, Config, LastUsed


class TestConfigManagerPaths:
    def test_default_location(self, temp_home):
        manager = ConfigManager()
        assert manager.config_dir == temp_home / ".cswitch"
        assert manager.config_path == temp_home / ".cswitch" / "config.json"

    def test_explicit_directory(self, tmp_path):
        manager = ConfigManager(tmp_path / "custom")
        assert manager.config_path == tmp_path / "custom" / "config.json"

    def test_constructor_does_not_touch_disk(self, temp_home):
        ConfigManager()
        assert not (temp_home / ".cswitch").exists()


class TestRead:
    def test_missing_file_returns_default(self, config_manager):
        config = config_manager.read()
        assert config.version == CONFIG_VERSION
        assert config.last_used is None
        assert config.providers == []
        assert not config_manager.config_path.exists()

    def test_invalid_json(self, config_manager):
        config_manager.config_dir.mkdir(parents=True)
        config_manager.config_path.write_text("{not json", encoding="utf-8")

        with pytest.raises(ConfigError) as exc_info:
            config_manager.read()
        assert "not valid JSON" in str(exc_info.value)
        assert exc_info.value.file_path == str(config_manager.config_path)

    def test_invalid_config_is_not_repaired(self, config_manager, sample_config):
        data = sample_config.to_dict()
        data["lastUsed"] = {"providerUrl": "https://gone.example.com", "tokenAlias": "work"}
        config_manager.config_dir.mkdir(parents=True)
        config_manager.config_path.write_text(json.dumps(data), encoding="utf-8")

        with pytest.raises(ConfigError) as exc_info:
            config_manager.read()
        assert isinstance(exc_info.value.__cause__, ValidationError)
        assert exc_info.value.__cause__.field == "lastUsed.providerUrl"
        assert json.loads(config_manager.config_path.read_text(encoding="utf-8")) == data

    def test_unsupported_version(self, config_manager):
        config_manager.config_dir.mkdir(parents=True)
        config_manager.config_path.write_text(
            json.dumps({"version": "2.0", "lastUsed": None, "providers": []}), encoding="utf-8"
        )
        with pytest.raises(ConfigError) as exc_info:
            config_manager.read()
        assert "Unsupported config version" in str(exc_info.value)

    def test_missing_created_at_is_not_filled_in(self, config_manager):
        data = {
            "version": "1.0",
            "lastUsed": None,
            "providers": [{
                "baseUrl": "https://api.x.com",
                "tokens": [{"alias": "work", "value": "sk-ant-0123456789"}],
            }],
        }
        config_manager.config_dir.mkdir(parents=True)
        config_manager.config_path.write_text(json.dumps(data), encoding="utf-8")

        with pytest.raises(ConfigError) as exc_info:
            config_manager.read()
        assert exc_info.value.__cause__.field == "createdAt"
        assert json.loads(config_manager.config_path.read_text(encoding="utf-8")) == data


class TestWrite:
    def test_round_trip(self, config_manager, sample_config):
        config_manager.write(sample_config)
        assert config_manager.read() == sample_config

    def test_file_format(self, config_manager, sample_config):
        config_manager.write(sample_config)
        content = config_manager.config_path.read_text(encoding="utf-8")

        assert content.startswith('{\n  "version": "1.0",\n  "lastUsed": {')
        data = json.loads(content)
        assert data["lastUsed"] == {"providerUrl": "https://api.provider-a.com", "tokenAlias": "work"}
        assert data["providers"][0]["displayName"] == "Provider A"
        assert data["providers"][0]["anthropicModel"] == "claude-3-5-sonnet-20241022"
        assert "displayName" not in data["providers"][1]
        assert "anthropicModel" not in data["providers"][1]

    def test_last_used_null_is_written(self, config_manager):
        config_manager.write(Config())
        data = json.loads(config_manager.config_path.read_text(encoding="utf-8"))
        assert data == {"version": "1.0", "lastUsed": None, "providers": []}

    @pytest.mark.skipif(sys.platform.startswith("win"), reason="POSIX permissions expected")
    def test_permissions_owner_only(self, config_manager, sample_config):
        config_manager.write(sample_config)
        mode = stat.S_IMODE(config_manager.config_path.stat().st_mode)
        assert mode == 0o600

    def test_creates_directory(self, config_manager):
        assert not config_manager.config_dir.exists()
        config_manager.write(Config())
        assert config_manager.config_path.is_file()

    def test_no_temp_files_left(self, config_manager, sample_config):
        config_manager.write(sample_config)
        config_manager.write(sample_config)
        assert [p.name for p in config_manager.config_dir.iterdir()] == ["config.json"]

    def test_refuses_invalid_config(self, config_manager, sample_config):
        config_manager.write(sample_config)
        before = config_manager.config_path.read_text(encoding="utf-8")

        sample_config.last_used = LastUsed(provider_url="https://api.provider-a.com", token_alias="gone")
        with pytest.raises(ValidationError):
            config_manager.write(sample_config)

        assert config_manager.config_path.read_text(encoding="utf-8") == before

    def test_io_failure_wraps_config_error(self, config_manager, sample_config):
        config_manager.write(Config())
        before = config_manager.config_path.read_text(encoding="utf-8")

        with patch("cswitch.config.os.replace", side_effect=OSError("disk full")):
            with pytest.raises(ConfigError) as exc_info:
                config_manager.write(sample_config)

        assert "disk full" in str(exc_info.value)
        assert exc_info.value.file_path == str(config_manager.config_path)
        assert config_manager.config_path.read_text(encoding="utf-8") == before
        assert [p.name for p in config_manager.config_dir.iterdir()] == ["config.json"]


class TestLoadOrInitialize:
    def test_first_run_creates_file(self, config_manager):
        config = config_manager.load_or_initialize()
        assert config == Config()
        assert config_manager.config_path.is_file()

    def test_existing_file_is_read(self, config_manager, sample_config):
        config_manager.write(sample_config)
        assert config_manager.load_or_initialize() == sample_config
