"""Configuration management for Modview.

Supports TOML configuration format with auto-discovery.
"""

import tomllib
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Self

CONFIG_FILENAME = "modview.toml"

DEFAULT_API_URL = "https://apiland.deno.dev"
DEFAULT_CDN_URL = "https://cdn.deno.land"
DEFAULT_STORAGE_URL = (
    "http://deno-registry2-prod-storagebucket-b3a31d16.s3-website-us-east-1.amazonaws.com"
)


@dataclass
class ServerConfig:
    """Server configuration."""

    host: str = "127.0.0.1"
    port: int = 8080


@dataclass
class UpstreamConfig:
    """Registry services configuration.

    ``timeout`` of None means requests wait as long as the services take.
    """

    api_url: str = DEFAULT_API_URL
    cdn_url: str = DEFAULT_CDN_URL
    storage_url: str = DEFAULT_STORAGE_URL
    timeout: float | None = None


@dataclass
class Config:
    """Application configuration."""

    server: ServerConfig = field(default_factory=ServerConfig)
    upstream: UpstreamConfig = field(default_factory=UpstreamConfig)
    config_path: Path | None = None

    @classmethod
    def load(cls, config_path: Path | None = None) -> Self:
        """Load configuration from file.

        If config_path is provided, loads from that file.
        Otherwise, searches for modview.toml in current directory and parents.

        Args:
            config_path: Optional explicit path to config file

        Returns:
            Config instance with defaults for missing sections

        Raises:
            FileNotFoundError: If explicit config_path doesn't exist
            ValueError: If configuration is invalid
        """
        if config_path is not None:
            if not config_path.exists():
                raise FileNotFoundError(f"Configuration file not found: {config_path}")
            return cls._load_from_file(config_path)

        discovered_path = cls._discover_config()
        if discovered_path is None:
            return cls()

        return cls._load_from_file(discovered_path)

    @classmethod
    def _discover_config(cls) -> Path | None:
        """Search for config file in current directory and parents.

        Returns:
            Path to config file or None if not found
        """
        current = Path.cwd()
        while True:
            candidate = current / CONFIG_FILENAME
            if candidate.exists():
                return candidate
            parent = current.parent
            if parent == current:
                return None
            current = parent

    @classmethod
    def _load_from_file(cls, path: Path) -> Self:
        """Load configuration from a specific file.

        Raises:
            ValueError: If configuration is invalid
        """
        with path.open("rb") as f:
            data = tomllib.load(f)

        return cls(
            server=cls._parse_server(data.get("server")),
            upstream=cls._parse_upstream(data.get("upstream")),
            config_path=path,
        )

    @classmethod
    def _parse_server(cls, data: object) -> ServerConfig:
        if data is None:
            return ServerConfig()

        if not isinstance(data, dict):
            raise ValueError("server section must be a dictionary")

        host = data.get("host", "127.0.0.1")
        if not isinstance(host, str):
            raise ValueError("server.host must be a string")

        port = data.get("port", 8080)
        if not isinstance(port, int) or isinstance(port, bool):
            raise ValueError("server.port must be an integer")

        return ServerConfig(host=host, port=port)

    @classmethod
    def _parse_upstream(cls, data: object) -> UpstreamConfig:
        """Parse upstream configuration section.

        Args:
            data: Raw upstream section data

        Returns:
            UpstreamConfig instance
        """
        if data is None:
            return UpstreamConfig()

        if not isinstance(data, dict):
            raise ValueError("upstream section must be a dictionary")

        urls: dict[str, str] = {}
        for key, default in (
            ("api_url", DEFAULT_API_URL),
            ("cdn_url", DEFAULT_CDN_URL),
            ("storage_url", DEFAULT_STORAGE_URL),
        ):
            value = data.get(key, default)
            if not isinstance(value, str):
                raise ValueError(f"upstream.{key} must be a string")
            urls[key] = value

        timeout = data.get("timeout")
        if timeout is not None:
            if isinstance(timeout, bool) or not isinstance(timeout, int | float):
                raise ValueError("upstream.timeout must be a number")
            if timeout <= 0:
                raise ValueError("upstream.timeout must be positive")
            timeout = float(timeout)

        return UpstreamConfig(**urls, timeout=timeout)

    def with_overrides(
        self,
        *,
        host: str | None = None,
        port: int | None = None,
        api_url: str | None = None,
        cdn_url: str | None = None,
        storage_url: str | None = None,
        timeout: float | None = None,
    ) -> Self:
        """Create a new Config with CLI overrides applied.

        Only non-None values override the existing config. The original
        Config is not modified.

        Returns:
            New Config instance with overrides applied
        """
        server = self.server
        if host is not None or port is not None:
            server = replace(
                self.server,
                host=host if host is not None else self.server.host,
                port=port if port is not None else self.server.port,
            )

        upstream = self.upstream
        if any(value is not None for value in (api_url, cdn_url, storage_url, timeout)):
            upstream = replace(
                self.upstream,
                api_url=api_url if api_url is not None else self.upstream.api_url,
                cdn_url=cdn_url if cdn_url is not None else self.upstream.cdn_url,
                storage_url=storage_url if storage_url is not None else self.upstream.storage_url,
                timeout=timeout if timeout is not None else self.upstream.timeout,
            )

        return replace(self, server=server, upstream=upstream)
