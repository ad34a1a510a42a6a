"""Tests for configuration loading."""

from pathlib import Path
from unittest.mock import patch

import pytest

from modview.config import (
    DEFAULT_API_URL,
    DEFAULT_CDN_URL,
    DEFAULT_STORAGE_URL,
    Config,
    UpstreamConfig,
)


class TestConfigLoad:
    """Tests for Config.load()."""

    def test__explicit_path__loads_config(self, tmp_path: Path) -> None:
        """Load config from explicit path."""
        config_file = tmp_path / "modview.toml"
        config_file.write_text("""
[server]
host = "0.0.0.0"
port = 3000

[upstream]
api_url = "https://api.example.com"
cdn_url = "https://cdn.example.com"
storage_url = "https://storage.example.com"
timeout = 5
""")

        config = Config.load(config_file)

        assert config.server.host == "0.0.0.0"
        assert config.server.port == 3000
        assert config.upstream.api_url == "https://api.example.com"
        assert config.upstream.cdn_url == "https://cdn.example.com"
        assert config.upstream.storage_url == "https://storage.example.com"
        assert config.upstream.timeout == 5.0
        assert config.config_path == config_file

    def test__minimal_config__uses_defaults(self, tmp_path: Path) -> None:
        """Load minimal config with defaults."""
        config_file = tmp_path / "modview.toml"
        config_file.write_text("")

        config = Config.load(config_file)

        assert config.server.host == "127.0.0.1"
        assert config.server.port == 8080
        assert config.upstream.api_url == DEFAULT_API_URL
        assert config.upstream.cdn_url == DEFAULT_CDN_URL
        assert config.upstream.storage_url == DEFAULT_STORAGE_URL
        assert config.upstream.timeout is None

    def test__missing_explicit_path__raises_error(self, tmp_path: Path) -> None:
        """Raise FileNotFoundError for missing explicit config file."""
        config_file = tmp_path / "nonexistent.toml"

        with pytest.raises(FileNotFoundError, match="Configuration file not found"):
            Config.load(config_file)

    def test__no_path_no_discovery__returns_defaults(self) -> None:
        """Return defaults when no config file found."""
        with patch.object(Config, "_discover_config", return_value=None):
            config = Config.load()

        assert config.server.port == 8080
        assert config.upstream.api_url == DEFAULT_API_URL
        assert config.config_path is None


class TestConfigDiscovery:
    """Tests for config file discovery."""

    def test__config_in_current_dir__found(self, tmp_path: Path) -> None:
        """Find config in current directory."""
        config_file = tmp_path / "modview.toml"
        config_file.write_text("[server]\nport = 9000")

        with patch("pathlib.Path.cwd", return_value=tmp_path):
            discovered = Config._discover_config()

        assert discovered == config_file

    def test__config_in_parent_dir__found(self, tmp_path: Path) -> None:
        """Find config in parent directory."""
        config_file = tmp_path / "modview.toml"
        config_file.write_text("[server]\nport = 9000")
        subdir = tmp_path / "deploy" / "staging"
        subdir.mkdir(parents=True)

        with patch("pathlib.Path.cwd", return_value=subdir):
            discovered = Config._discover_config()

        assert discovered == config_file

    def test__no_config__returns_none(self, tmp_path: Path) -> None:
        """Return None when no config found."""
        with patch("pathlib.Path.cwd", return_value=tmp_path):
            discovered = Config._discover_config()

        assert discovered is None


class TestServerConfigParsing:
    """Tests for server config section parsing."""

    def test__invalid_host_type__raises_error(self, tmp_path: Path) -> None:
        """Raise ValueError when host is not a string."""
        config_file = tmp_path / "modview.toml"
        config_file.write_text("""
[server]
host = 12345
""")

        with pytest.raises(ValueError, match="server.host must be a string"):
            Config.load(config_file)

    def test__invalid_port_type__raises_error(self, tmp_path: Path) -> None:
        """Raise ValueError when port is not an integer."""
        config_file = tmp_path / "modview.toml"
        config_file.write_text("""
[server]
port = "8080"
""")

        with pytest.raises(ValueError, match="server.port must be an integer"):
            Config.load(config_file)

    def test__boolean_port__raises_error(self, tmp_path: Path) -> None:
        """Raise ValueError when port is a boolean."""
        config_file = tmp_path / "modview.toml"
        config_file.write_text("[server]\nport = true\n")

        with pytest.raises(ValueError, match="server.port must be an integer"):
            Config.load(config_file)


class TestUpstreamConfigParsing:
    """Tests for upstream config section parsing."""

    def test__partial_upstream__keeps_other_defaults(self, tmp_path: Path) -> None:
        """Fill unset upstream URLs with defaults."""
        config_file = tmp_path / "modview.toml"
        config_file.write_text("""
[upstream]
api_url = "http://localhost:8000"
""")

        config = Config.load(config_file)

        assert config.upstream.api_url == "http://localhost:8000"
        assert config.upstream.cdn_url == DEFAULT_CDN_URL
        assert config.upstream.storage_url == DEFAULT_STORAGE_URL

    def test__invalid_url_type__raises_error(self, tmp_path: Path) -> None:
        """Raise ValueError when a URL is not a string."""
        config_file = tmp_path / "modview.toml"
        config_file.write_text("""
[upstream]
cdn_url = ["https://cdn.example.com"]
""")

        with pytest.raises(ValueError, match="upstream.cdn_url must be a string"):
            Config.load(config_file)

    def test__invalid_timeout_type__raises_error(self, tmp_path: Path) -> None:
        """Raise ValueError when timeout is not a number."""
        config_file = tmp_path / "modview.toml"
        config_file.write_text("""
[upstream]
timeout = "10s"
""")

        with pytest.raises(ValueError, match="upstream.timeout must be a number"):
            Config.load(config_file)

    def test__non_positive_timeout__raises_error(self, tmp_path: Path) -> None:
        """Raise ValueError when timeout is zero or negative."""
        config_file = tmp_path / "modview.toml"
        config_file.write_text("""
[upstream]
timeout = 0
""")

        with pytest.raises(ValueError, match="upstream.timeout must be positive"):
            Config.load(config_file)

    def test__upstream_not_table__raises_error(self, tmp_path: Path) -> None:
        """Raise ValueError when upstream is not a table."""
        config_file = tmp_path / "modview.toml"
        config_file.write_text('upstream = "https://api.example.com"\n')

        with pytest.raises(ValueError, match="upstream section must be a dictionary"):
            Config.load(config_file)


class TestConfigWithOverrides:
    """Tests for Config.with_overrides method."""

    def test__no_overrides__returns_same_values(self) -> None:
        """When no overrides are provided, values remain unchanged."""
        original = Config()

        result = original.with_overrides()

        assert result == original

    def test__override_host__changes_only_host(self) -> None:
        """Override host changes only server.host."""
        original = Config()

        result = original.with_overrides(host="0.0.0.0")

        assert result.server.host == "0.0.0.0"
        assert result.server.port == original.server.port

    def test__override_port__changes_only_port(self) -> None:
        """Override port changes only server.port."""
        original = Config()

        result = original.with_overrides(port=9000)

        assert result.server.port == 9000
        assert result.server.host == original.server.host

    def test__override_api_url__changes_only_api_url(self) -> None:
        """Override api_url changes only upstream.api_url."""
        original = Config()

        result = original.with_overrides(api_url="http://localhost:8000")

        assert result.upstream.api_url == "http://localhost:8000"
        assert result.upstream.cdn_url == original.upstream.cdn_url
        assert result.upstream.storage_url == original.upstream.storage_url

    def test__override_storage_url__keeps_timeout(self) -> None:
        """Override storage_url keeps the configured timeout."""
        original = Config(upstream=UpstreamConfig(timeout=3.0))

        result = original.with_overrides(storage_url="http://localhost:9000")

        assert result.upstream.storage_url == "http://localhost:9000"
        assert result.upstream.timeout == 3.0

    def test__original_not_modified(self) -> None:
        """The original config is not modified."""
        original = Config()

        original.with_overrides(host="0.0.0.0", cdn_url="http://localhost:9001")

        assert original.server.host == "127.0.0.1"
        assert original.upstream.cdn_url == DEFAULT_CDN_URL

    def test__override_timeout__keeps_urls(self) -> None:
        """Override timeout changes only upstream.timeout."""
        original = Config(upstream=UpstreamConfig(timeout=3.0))

        result = original.with_overrides(timeout=8.0)

        assert result.upstream.timeout == 8.0
        assert result.upstream.api_url == original.upstream.api_url
        assert original.upstream.timeout == 3.0
