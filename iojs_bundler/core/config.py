"""Configuration management for iojs-bundler."""

from __future__ import annotations

import json
import platform as platform_module
import sys
from pathlib import Path

import structlog
from pydantic import BaseModel, ConfigDict, Field, field_validator

logger = structlog.get_logger()

# Node-style identifiers keyed by what the interpreter reports
_PLATFORM_ALIASES = {
    "linux": "linux",
    "darwin": "darwin",
    "win32": "win32",
    "cygwin": "win32",
    "freebsd": "freebsd",
    "sunos5": "sunos",
}

_ARCH_ALIASES = {
    "x86_64": "x64",
    "amd64": "x64",
    "aarch64": "arm64",
    "arm64": "arm64",
    "i386": "x86",
    "i686": "x86",
    "x86": "x86",
    "armv6l": "armv6l",
    "armv7l": "armv7l",
}


def default_config_file() -> Path:
    """Return the per-user configuration file location."""
    return Path.home() / ".config" / "iojs-bundler" / "config.json"


def current_platform() -> str:
    """Return the running OS as a Node-style platform identifier."""
    for prefix, name in _PLATFORM_ALIASES.items():
        if sys.platform.startswith(prefix):
            return name
    return sys.platform


def current_arch() -> str:
    """Return the running CPU as a Node-style architecture identifier."""
    machine = platform_module.machine().lower()
    return _ARCH_ALIASES.get(machine, machine)


class PlatformConfig(BaseModel):
    """Target platform and architecture of the installer archive."""

    model_config = ConfigDict(frozen=True)

    platform: str = Field(
        default_factory=current_platform,
        description="Target OS identifier (linux, darwin, win32, ...)"
    )
    arch: str = Field(
        default_factory=current_arch,
        description="Target CPU identifier (x64, x86, arm64, armv7l, ...)"
    )

    @field_validator("platform", "arch")
    @classmethod
    def validate_identifier(cls, v: str) -> str:
        """Validate that identifiers are non-empty path-safe tokens."""
        if not v or not v.strip():
            raise ValueError("Identifier cannot be empty")
        if "/" in v or "\\" in v or any(c.isspace() for c in v):
            raise ValueError(f"Invalid identifier: {v!r}")
        return v


class DistConfig(BaseModel):
    """Release distribution server configuration."""

    base_url: str = Field(
        default="https://iojs.org/dist",
        description="Base URL of the release distribution tree"
    )
    product: str = Field(default="iojs", description="Artifact name prefix")
    checksums_file: str = Field(
        default="SHASUMS256.txt",
        description="Per-version checksum manifest file name"
    )
    timeout: float = Field(default=30.0, description="Request timeout in seconds")
    verify_ssl: bool = Field(default=True, description="Verify SSL certificates")

    @field_validator("base_url")
    @classmethod
    def validate_base_url(cls, v: str) -> str:
        """Validate and normalize base URL."""
        if not v.startswith(("http://", "https://")):
            raise ValueError(f"Base URL must be http(s): {v}")
        return v.rstrip("/")

    @field_validator("timeout")
    @classmethod
    def validate_timeout(cls, v: float) -> float:
        """Validate timeout value."""
        if v <= 0:
            raise ValueError("Timeout must be positive")
        return v


class CacheConfig(BaseModel):
    """Download cache configuration."""

    cache_dir: Path = Field(
        default=Path.home() / ".cache" / "iojs-bundler",
        description="Root cache directory, one subdirectory per version"
    )


class AppConfig(BaseModel):
    """Application configuration."""

    platform: PlatformConfig = Field(default_factory=PlatformConfig)
    dist: DistConfig = Field(default_factory=DistConfig)
    cache: CacheConfig = Field(default_factory=CacheConfig)

    output_format: str = Field(
        default="rich",
        description="Output format (rich, json, plain)"
    )
    log_level: str = Field(
        default="INFO",
        description="Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)"
    )

    @classmethod
    def load(cls, config_file: Path | None = None) -> AppConfig:
        """Load configuration from file.

        Args:
            config_file: Path to config file, uses default if None

        Returns:
            Application configuration
        """
        if config_file is None:
            config_file = default_config_file()

        if config_file.exists():
            with open(config_file) as f:
                data = json.load(f)
                return cls(**data)

        return cls()

    def save(self, config_file: Path | None = None) -> None:
        """Save configuration to file.

        Args:
            config_file: Path to config file, uses default if None
        """
        if config_file is None:
            config_file = default_config_file()

        config_file.parent.mkdir(parents=True, exist_ok=True)

        with open(config_file, "w") as f:
            json.dump(self.model_dump(mode="json"), f, indent=2, default=str)

        logger.info("config_saved", path=str(config_file))

    @field_validator("output_format")
    @classmethod
    def validate_output_format(cls, v: str) -> str:
        """Validate output format."""
        valid_formats = {"rich", "json", "plain"}
        if v not in valid_formats:
            raise ValueError(f"Invalid output format: {v}. Valid formats: {valid_formats}")
        return v

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        if v not in valid_levels:
            raise ValueError(f"Invalid log level: {v}. Valid levels: {valid_levels}")
        return v
