"""
Fleet Dashboard Settings
Centralized configuration from environment variables

Credentials for the tracking platform MUST come from environment variables
(or a local .env file), never from source.
"""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional

from dotenv import load_dotenv

# Load environment variables
load_dotenv()

BASE_DIR = Path(__file__).parent


def _get_env(key: str, default: str = "", required: bool = False) -> str:
    """Get environment variable with optional requirement enforcement."""
    value = os.getenv(key, default)
    if required and not value:
        raise ValueError(f"Required environment variable {key} is not set!")
    return value


def _get_env_int(key: str, default: int) -> int:
    """Get integer environment variable."""
    return int(os.getenv(key, str(default)))


def _get_env_float(key: str, default: float) -> float:
    """Get float environment variable."""
    return float(os.getenv(key, str(default)))


def _get_env_bool(key: str, default: bool = False) -> bool:
    """Get boolean environment variable."""
    return os.getenv(key, str(default)).lower() in ("true", "1", "yes")


def _get_env_list(key: str, default: str = "", separator: str = ",") -> List[str]:
    """Get list from comma-separated environment variable."""
    value = os.getenv(key, default)
    return [item.strip() for item in value.split(separator) if item.strip()]


# =============================================================================
# TRACCAR SETTINGS
# =============================================================================
@dataclass
class TraccarSettings:
    """Traccar tracking platform API configuration."""

    base_url: str = field(
        default_factory=lambda: _get_env("TRACCAR_URL", "http://localhost:8082")
    )
    email: str = field(default_factory=lambda: _get_env("TRACCAR_EMAIL", ""))
    password: str = field(default_factory=lambda: _get_env("TRACCAR_PASSWORD", ""))
    token: Optional[str] = field(
        default_factory=lambda: _get_env("TRACCAR_TOKEN") or None
    )
    timeout_seconds: float = field(
        default_factory=lambda: _get_env_float("TRACCAR_TIMEOUT", 15.0)
    )

    @property
    def credentials_configured(self) -> bool:
        """Check if some form of Traccar authentication is set."""
        return bool(self.token or (self.email and self.password))


# =============================================================================
# STORAGE SETTINGS
# =============================================================================
@dataclass
class StorageSettings:
    """Flat-file JSON storage configuration."""

    data_dir: Path = field(
        default_factory=lambda: Path(
            _get_env("STORAGE_DATA_DIR", str(BASE_DIR / "data"))
        )
    )


# =============================================================================
# MONITOR SETTINGS
# =============================================================================
@dataclass
class MonitorSettings:
    """Host metrics configuration."""

    # Partitions smaller than this are not reported (2 GB)
    min_disk_bytes: int = field(
        default_factory=lambda: _get_env_int("MONITOR_MIN_DISK_BYTES", 2_000_000_000)
    )
    docker_enabled: bool = field(
        default_factory=lambda: _get_env_bool("MONITOR_DOCKER_ENABLED", True)
    )
    docker_timeout_seconds: float = field(
        default_factory=lambda: _get_env_float("DOCKER_TIMEOUT", 10.0)
    )


# =============================================================================
# APPLICATION SETTINGS
# =============================================================================
@dataclass
class AppSettings:
    """General application settings."""

    debug: bool = field(default_factory=lambda: _get_env_bool("DEBUG", False))
    log_level: str = field(default_factory=lambda: _get_env("LOG_LEVEL", "INFO"))
    log_to_file: bool = field(
        default_factory=lambda: _get_env_bool("LOG_TO_FILE", False)
    )
    log_dir: Path = field(
        default_factory=lambda: Path(_get_env("LOG_DIR", str(BASE_DIR / "logs")))
    )
    version: str = "1.0.0"

    allowed_origins: List[str] = field(
        default_factory=lambda: _get_env_list(
            "ALLOWED_ORIGINS", "http://localhost:5173,http://localhost:3000"
        )
    )


# =============================================================================
# GLOBAL SETTINGS INSTANCE
# =============================================================================
class Settings:
    """Global settings container - singleton pattern."""

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
            cls._instance._initialize()
        return cls._instance

    def _initialize(self):
        """Initialize all settings."""
        self.traccar = TraccarSettings()
        self.storage = StorageSettings()
        self.monitor = MonitorSettings()
        self.app = AppSettings()

    def validate(self) -> List[str]:
        """Validate settings and return list of warnings."""
        warnings = []

        if not self.traccar.credentials_configured:
            warnings.append(
                "⚠️ TRACCAR_TOKEN or TRACCAR_EMAIL/TRACCAR_PASSWORD not set - ranking will fail"
            )

        if not self.monitor.docker_enabled:
            warnings.append("ℹ️ Docker metrics disabled")

        return warnings

    def to_dict(self) -> Dict:
        """Export settings as dictionary (for debugging, excludes secrets)."""
        return {
            "version": self.app.version,
            "debug": self.app.debug,
            "traccar_url": self.traccar.base_url,
            "traccar_configured": self.traccar.credentials_configured,
            "storage_data_dir": str(self.storage.data_dir),
            "docker_enabled": self.monitor.docker_enabled,
        }


# Create global settings instance
settings = Settings()


def get_settings() -> Settings:
    """Get global settings instance."""
    return settings


# Export commonly used settings
TRACCAR = settings.traccar
STORAGE = settings.storage
MONITOR = settings.monitor
APP = settings.app
