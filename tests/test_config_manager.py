"""Tests for netkit.config_manager module."""

import json

from netkit.config_manager import ConfigManager


class TestConfigManagerInit:
    """Test cases for ConfigManager initialization."""

    def test_init(self, tmp_path):
        config_path = tmp_path / "settings.json"
        config = ConfigManager(config_path)

        assert config.config_path == config_path
        assert config._config == {}

    def test_defaults_values(self, tmp_path):
        config = ConfigManager(tmp_path / "settings.json")

        assert config._defaults["base_url"] == "http://localhost:8080"
        assert config._defaults["http_timeout_ms"] == 10000
        assert config._defaults["connect_timeout_ms"] == 10000
        assert config._defaults["accepted_status_codes"] == [200]
        assert config._defaults["receive_chunk_size"] == 1024
        assert config._defaults["log_level"] == "INFO"

    def test_default_path_uses_data_dir(self, data_dir_env):
        config = ConfigManager()

        assert config.config_path == data_dir_env / "settings.json"


class TestConfigLoad:
    """Test cases for load() method."""

    def test_load_nonexistent_file_creates_defaults(self, tmp_path):
        config_path = tmp_path / "settings.json"
        config = ConfigManager(config_path)

        result = config.load()

        assert result == config._defaults
        assert config_path.exists()

    def test_load_existing_file(self, tmp_path):
        config_path = tmp_path / "settings.json"
        config_path.write_text(json.dumps({"base_url": "https://example.com", "custom": 1}))

        config = ConfigManager(config_path)
        result = config.load()

        assert result["base_url"] == "https://example.com"
        assert result["custom"] == 1

    def test_missing_keys_fall_back_to_defaults(self, tmp_path):
        config_path = tmp_path / "settings.json"
        config_path.write_text(json.dumps({"base_url": "https://example.com"}))

        config = ConfigManager(config_path)
        config.load()

        assert config.get("http_timeout_ms") == 10000


class TestConfigSave:
    """Test cases for save(), set(), update() and remove()."""

    def test_set_and_save_round_trip(self, tmp_path):
        config_path = tmp_path / "settings.json"
        config = ConfigManager(config_path)
        config.load()

        config.set("bearer_token", "abc")
        config.save()

        reloaded = ConfigManager(config_path)
        reloaded.load()
        assert reloaded.get("bearer_token") == "abc"

    def test_save_creates_parent_dirs(self, tmp_path):
        config_path = tmp_path / "nested" / "dir" / "settings.json"
        config = ConfigManager(config_path)

        config.save()

        assert config_path.exists()

    def test_update(self, config):
        config.update({"base_url": "https://a.test", "log_level": "DEBUG"})

        assert config.base_url == "https://a.test"
        assert config.get("log_level") == "DEBUG"

    def test_remove(self, config):
        config.set("bearer_token", "abc")

        config.remove("bearer_token")

        assert config.get("bearer_token") is None

    def test_remove_missing_key(self, config):
        config.remove("does_not_exist")


class TestConfigProperties:
    """Test cases for typed properties."""

    def test_timeouts_in_seconds(self, config):
        config.update({"http_timeout_ms": 2500, "connect_timeout_ms": 500})

        assert config.http_timeout == 2.5
        assert config.connect_timeout == 0.5

    def test_accepted_status_codes(self, config):
        config.set("accepted_status_codes", [200, 201, 204])

        assert config.accepted_status_codes == frozenset({200, 201, 204})

    def test_accepted_status_codes_default(self, config):
        assert config.accepted_status_codes == frozenset({200})


class TestLazyLoad:
    """Test cases for access before an explicit load()."""

    def test_get_reads_existing_file(self, tmp_path):
        config_path = tmp_path / "settings.json"
        config_path.write_text(json.dumps({"base_url": "https://prod.test"}))

        config = ConfigManager(config_path)

        assert config.base_url == "https://prod.test"

    def test_set_and_save_keeps_other_keys(self, tmp_path):
        config_path = tmp_path / "settings.json"
        config_path.write_text(json.dumps({"base_url": "https://prod.test", "http_timeout_ms": 3000}))

        config = ConfigManager(config_path)
        config.set("bearer_token", "abc")
        config.save()

        saved = json.loads(config_path.read_text())
        assert saved == {
            "base_url": "https://prod.test",
            "http_timeout_ms": 3000,
            "bearer_token": "abc",
        }
