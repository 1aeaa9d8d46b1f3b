"""
USBScout configuration management.

Provides centralized configuration with validation using Pydantic.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field, field_validator

DEFAULT_HOME = Path.home() / ".usbscout"


class LoggingConfig(BaseModel):
    """Configuration for structured logging."""

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "WARNING"
    file_enabled: bool = False
    console_enabled: bool = True
    json_format: bool = False
    log_directory: Path = Field(default_factory=lambda: DEFAULT_HOME / "logs")

    @field_validator("log_directory", mode="before")
    @classmethod
    def expand_path(cls, v: str | Path) -> Path:
        return Path(v).expanduser().resolve()


class DetectorConfig(BaseModel):
    """Configuration for the storage device detectors."""

    command_timeout_seconds: int = Field(default=30, ge=1, le=600)
    label_query_enabled: bool = True
    # Overrides the %WINDIR%-derived wmic.exe location
    wmic_path: Path | None = None
    powershell_executable: str = "powershell.exe"


class UsbScoutConfig(BaseModel):
    """Main USBScout configuration."""

    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    detector: DetectorConfig = Field(default_factory=DetectorConfig)

    @classmethod
    def load(cls, config_path: Path | None = None) -> UsbScoutConfig:
        """Load configuration from file or create default."""
        if config_path is None:
            config_path = DEFAULT_HOME / "config.json"

        if config_path.exists():
            with open(config_path) as f:
                data = json.load(f)
            return cls.model_validate(data)

        return cls()

    def save(self, config_path: Path | None = None) -> None:
        """Save configuration to file."""
        if config_path is None:
            config_path = DEFAULT_HOME / "config.json"

        config_path.parent.mkdir(parents=True, exist_ok=True)
        with open(config_path, "w") as f:
            json.dump(self.model_dump(mode="json"), f, indent=2, default=str)

    def ensure_directories(self) -> None:
        """Create all required directories."""
        if self.logging.file_enabled:
            self.logging.log_directory.mkdir(parents=True, exist_ok=True)


def load_config(config_path: Path | None = None) -> UsbScoutConfig:
    """Load or create configuration."""
    config = UsbScoutConfig.load(config_path)
    config.ensure_directories()
    return config
