"""Tests for configuration loading."""

from unittest.mock import patch

import pytest

from logcast.config.loader import ConfigError, load_config, load_yaml
from logcast.config.models import LogcastConfig


class TestLoadYaml:
    def test_empty_file(self, tmp_path):
        path = tmp_path / "empty.yaml"
        path.write_text("")
        assert load_yaml(path) == {}

    def test_invalid_yaml(self, tmp_path):
        path = tmp_path / "bad.yaml"
        path.write_text("key: [unclosed")
        with pytest.raises(ConfigError, match="Invalid YAML"):
            load_yaml(path)

    def test_non_mapping(self, tmp_path):
        path = tmp_path / "list.yaml"
        path.write_text("- a\n- b\n")
        with pytest.raises(ConfigError, match="mapping"):
            load_yaml(path)

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigError, match="not found"):
            load_yaml(tmp_path / "missing.yaml")


class TestLoadConfig:
    def test_defaults(self):
        config = LogcastConfig()
        assert config.buffer_capacity == 10000
        assert config.settle_delay_s == 1.0
        assert config.default_server_url == "http://localhost:4723"
        assert config.default_max_lines == 100
        assert config.stop_wait_s == 0.0

    def test_from_file(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("buffer_capacity: 500\nsettle_delay_s: 2.5\nport: 9000\n")
        config = load_config(path)
        assert config.buffer_capacity == 500
        assert config.settle_delay_s == 2.5
        assert config.port == 9000

    def test_validation_error(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("buffer_capacity: 0\n")
        with pytest.raises(ConfigError, match="validation failed"):
            load_config(path)

    def test_missing_default_file_uses_defaults(self, tmp_path):
        with patch(
            "logcast.config.loader.DEFAULT_CONFIG_PATH", tmp_path / "absent.yaml"
        ):
            assert load_config() == LogcastConfig()

    def test_default_file_is_read(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("default_max_lines: 42\n")
        with patch("logcast.config.loader.DEFAULT_CONFIG_PATH", path):
            assert load_config().default_max_lines == 42
