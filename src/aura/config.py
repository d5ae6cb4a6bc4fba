"""
Configuration management for Aura Trust.

Handles loading, validation, and access to storage, device and API settings.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml


# Default configuration paths
DEFAULT_CONFIG_PATH = Path.home() / ".aura" / "aura.yaml"
DEFAULT_STORE_PATH = Path.home() / ".aura" / "store.json"

# Storage keys used by the original mobile client
DEVICE_ID_KEY = "@aura_device_id"
USER_DEVICE_MAPPING_KEY = "@aura_user_device_mapping"


@dataclass
class LoggingConfig:
    """Logging settings."""

    log_level: str = "info"
    log_file: str | None = None


@dataclass
class StorageConfig:
    """Key-value store settings."""

    backend: str = "file"
    path: str = str(DEFAULT_STORE_PATH)
    device_id_key: str = DEVICE_ID_KEY
    mapping_key: str = USER_DEVICE_MAPPING_KEY
    mapping_mode: str = "keyed"
    timeout: float | None = None
    wal_mode: bool = True

    def __post_init__(self) -> None:
        # Allow overriding the store location from environment
        env_path = os.environ.get("AURA_STORE_PATH")
        if env_path and self.path == str(DEFAULT_STORE_PATH):
            self.path = env_path


@dataclass
class DeviceConfig:
    """Current installation metadata overrides."""

    app_version: str = "1.0.0"
    device_name: str | None = None


@dataclass
class APIConfig:
    """API server settings."""

    enabled: bool = False
    host: str = "127.0.0.1"
    port: int = 8000
    cors_origins: list[str] = field(
        default_factory=lambda: ["http://localhost:8081", "http://127.0.0.1:8081"]
    )


@dataclass
class AuraConfig:
    """Main configuration container."""

    logging: LoggingConfig = field(default_factory=LoggingConfig)
    storage: StorageConfig = field(default_factory=StorageConfig)
    device: DeviceConfig = field(default_factory=DeviceConfig)
    api: APIConfig = field(default_factory=APIConfig)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> AuraConfig:
        """Create configuration from dictionary."""
        return cls(
            logging=LoggingConfig(**data.get("logging", {})),
            storage=StorageConfig(**data.get("storage", {})),
            device=DeviceConfig(**data.get("device", {})),
            api=APIConfig(**data.get("api", {})),
        )


def load_config(path: str | Path | None = None) -> AuraConfig:
    """
    Load configuration from YAML file.

    Args:
        path: Path to configuration file. If None, uses default paths.

    Returns:
        AuraConfig instance with loaded settings.

    Raises:
        FileNotFoundError: If an explicit config file is missing.
        yaml.YAMLError: If config file is invalid YAML.
        ValueError: If the YAML does not describe a configuration.
    """
    if path is None:
        candidates = [
            Path("config/aura.yaml"),
            Path("aura.yaml"),
            DEFAULT_CONFIG_PATH,
        ]
        env_path = os.environ.get("AURA_CONFIG")
        if env_path:
            candidates.insert(0, Path(env_path))
        for candidate in candidates:
            if candidate.exists():
                path = candidate
                break

    if path is None:
        return AuraConfig()

    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Configuration file not found: {path}")

    with open(path) as f:
        data = yaml.safe_load(f) or {}

    if not isinstance(data, dict):
        raise ValueError(f"Configuration file {path} must contain a mapping")
    try:
        return AuraConfig.from_dict(data)
    except TypeError as e:
        raise ValueError(f"Invalid configuration in {path}: {e}") from e


def validate_config(config: AuraConfig) -> list[str]:
    """
    Validate configuration and return list of errors.

    Args:
        config: Configuration to validate.

    Returns:
        List of error messages. Empty list if valid.
    """
    errors: list[str] = []

    valid_log_levels = {"debug", "info", "warning", "error"}
    if config.logging.log_level not in valid_log_levels:
        errors.append(f"Invalid log_level: {config.logging.log_level}")

    valid_backends = {"memory", "file", "sqlite"}
    if config.storage.backend not in valid_backends:
        errors.append(f"Invalid storage backend: {config.storage.backend}")

    valid_modes = {"keyed", "blob"}
    if config.storage.mapping_mode not in valid_modes:
        errors.append(f"Invalid mapping_mode: {config.storage.mapping_mode}")

    if config.storage.timeout is not None and config.storage.timeout <= 0:
        errors.append(f"Invalid storage timeout: {config.storage.timeout}")

    if not config.storage.device_id_key or not config.storage.mapping_key:
        errors.append("Storage keys must not be empty")

    if not (1 <= config.api.port <= 65535):
        errors.append(f"Invalid API port: {config.api.port}")

    return errors
