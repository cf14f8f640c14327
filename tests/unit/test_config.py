"""
Unit tests for client configuration and settings loading
========================================================

Tests for stream_codec/config.py including:
- ClientConfig validation
- Format precedence between flag, environment and file
- Configuration file error handling
"""

import dataclasses

import pytest

from stream_codec.config import (
    DEFAULT_CONFIG_PATH,
    FORMAT_ENV,
    ClientConfig,
    Settings,
    load_settings,
)
from stream_codec.errors import ConfigurationError


class TestClientConfig:
    """Test ClientConfig validation"""

    def test_defaults(self):
        config = ClientConfig()

        assert config.format == ""
        assert config.compressor is None
        assert config.decompressor is None
        assert not config.has_custom_codec

    def test_none_format_means_default(self):
        assert ClientConfig(format=None).format == ""

    def test_non_string_format(self):
        """Test format names must be strings"""
        with pytest.raises(ConfigurationError, match="format must be a string"):
            ClientConfig(format=42)

    def test_non_callable_factories(self):
        """Test transform overrides must be callable"""
        with pytest.raises(ConfigurationError, match="compressor must be callable"):
            ClientConfig(compressor="gzip")
        with pytest.raises(ConfigurationError, match="decompressor must be callable"):
            ClientConfig(decompressor=b"gzip")

    def test_partial_override_is_accepted_here(self):
        """Test completeness of overrides is left to the registry"""
        config = ClientConfig(compressor=lambda sink: sink)
        assert config.has_custom_codec

    def test_frozen(self):
        config = ClientConfig(format="gzip")

        with pytest.raises(dataclasses.FrozenInstanceError):
            config.format = "noop"


class TestLoadSettings:
    """Test settings resolution"""

    def test_missing_default_file_is_not_an_error(self, tmp_path, monkeypatch):
        """Test a missing config.yaml yields the default format"""
        monkeypatch.chdir(tmp_path)

        settings = load_settings(env={})

        assert settings.format == ""
        assert settings.config_path == DEFAULT_CONFIG_PATH
        assert settings.client_config() == ClientConfig()

    def test_default_file_is_read(self, tmp_path, monkeypatch):
        """Test config.yaml in the working directory is used"""
        monkeypatch.chdir(tmp_path)
        (tmp_path / "config.yaml").write_text("format: noop\n")

        assert load_settings(env={}).format == "noop"

    def test_explicit_file(self, tmp_path):
        config_file = tmp_path / "codec.yaml"
        config_file.write_text("format: zstd\n")

        settings = load_settings(config_path=config_file, env={})

        assert settings.format == "zstd"
        assert settings.config_path == config_file

    def test_environment_wins_over_file(self, tmp_path):
        """Test COMPRESSOR_FORMAT overrides the file"""
        config_file = tmp_path / "config.yaml"
        config_file.write_text("format: zstd\n")

        settings = load_settings(config_path=config_file, env={FORMAT_ENV: "lz4"})
        assert settings.format == "lz4"

    def test_flag_wins_over_environment(self, tmp_path):
        """Test the command line flag overrides everything"""
        config_file = tmp_path / "config.yaml"
        config_file.write_text("format: zstd\n")

        settings = load_settings(config_path=config_file,
                                 format_override="noop",
                                 env={FORMAT_ENV: "lz4"})
        assert settings.format == "noop"

    def test_os_environment_is_default(self, tmp_path, monkeypatch):
        monkeypatch.setenv(FORMAT_ENV, "lz4")

        settings = load_settings(config_path=tmp_path / "missing.yaml")
        assert settings.format == "lz4"

    def test_empty_file(self, tmp_path):
        config_file = tmp_path / "config.yaml"
        config_file.write_text("")

        assert load_settings(config_path=config_file, env={}).format == ""

    def test_malformed_yaml(self, tmp_path):
        """Test invalid YAML is reported with the file name"""
        config_file = tmp_path / "config.yaml"
        config_file.write_text("format: [unclosed\n")

        with pytest.raises(ConfigurationError, match="decoding config from file"):
            load_settings(config_path=config_file, env={})

    def test_non_mapping_yaml(self, tmp_path):
        config_file = tmp_path / "config.yaml"
        config_file.write_text("- gzip\n- zstd\n")

        with pytest.raises(ConfigurationError, match="must contain a mapping"):
            load_settings(config_path=config_file, env={})

    def test_non_string_format_in_file(self, tmp_path):
        config_file = tmp_path / "config.yaml"
        config_file.write_text("format: 12\n")

        with pytest.raises(ConfigurationError, match="must be a string"):
            load_settings(config_path=config_file, env={})

    def test_directory_instead_of_file(self, tmp_path):
        """Test unreadable configuration paths are errors"""
        with pytest.raises(ConfigurationError, match="reading configuration file"):
            load_settings(config_path=tmp_path, env={})

    def test_settings_client_config(self):
        assert Settings(format="noop").client_config() == ClientConfig(format="noop")
