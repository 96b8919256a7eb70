"""Configuration management with dataclasses and YAML loading."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

DEFAULT_TRACKING_URI = "http://localhost:5000"


@dataclass
class TrackingConfig:
    """Tracking server connection configuration."""

    uri: str = ""
    api_version: str = "2.0"
    username: str = ""
    password: str = ""
    token: str = ""
    timeout: float = 30.0
    verify_ssl: bool = True

    def __post_init__(self) -> None:
        """Load connection details from environment if not set."""
        if not self.uri:
            self.uri = os.getenv("MLFLOW_TRACKING_URI", "") or DEFAULT_TRACKING_URI
        if not self.username:
            self.username = os.getenv("MLFLOW_TRACKING_USERNAME", "")
        if not self.password:
            self.password = os.getenv("MLFLOW_TRACKING_PASSWORD", "")
        if not self.token:
            self.token = os.getenv("MLFLOW_TRACKING_TOKEN", "")
        # YAML reads numeric passwords and versions as numbers
        self.api_version = str(self.api_version)
        self.username = str(self.username)
        self.password = str(self.password)
        self.token = str(self.token)


@dataclass
class LoggingConfig:
    """Logging configuration."""

    level: str = ""
    rich_tracebacks: bool = True

    def __post_init__(self) -> None:
        if not self.level:
            self.level = os.getenv("MLFLOW_REST_LOG_LEVEL", "WARNING")
        self.level = self.level.upper()


@dataclass
class Settings:
    """Main application settings."""

    tracking: TrackingConfig = field(default_factory=TrackingConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    @classmethod
    def from_yaml(cls, path: str | Path) -> Settings:
        """Load settings from YAML file."""
        path = Path(path)
        if not path.exists():
            return cls()

        with open(path) as f:
            data = yaml.safe_load(f) or {}

        return cls._from_dict(data)

    @classmethod
    def _from_dict(cls, data: dict[str, Any]) -> Settings:
        """Create Settings from dictionary."""
        return cls(
            tracking=TrackingConfig(**(data.get("tracking") or {})),
            logging=LoggingConfig(**(data.get("logging") or {})),
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert settings to dictionary."""
        from dataclasses import asdict

        return asdict(self)


# Global settings instance
_settings: Settings | None = None


def get_settings(config_path: str | Path | None = None) -> Settings:
    """Get or create global settings instance."""
    global _settings
    if _settings is None:
        if config_path is None:
            for candidate in [
                Path("config/mlflow-rest.yaml"),
                Path.home() / ".config/mlflow-rest/settings.yaml",
            ]:
                if candidate.exists():
                    config_path = candidate
                    break

        _settings = Settings.from_yaml(config_path) if config_path else Settings()

    return _settings


def reload_settings(config_path: str | Path | None = None) -> Settings:
    """Force reload settings from file."""
    global _settings
    _settings = None
    return get_settings(config_path)
