"""
USBScout Platform Detector Base.

Defines the interface for platform-specific storage device detectors.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

from usbscout.core.config import DetectorConfig

if TYPE_CHECKING:
    from usbscout.core.models import StorageDevice


class CommandResult:
    """Result of a command execution."""

    def __init__(
        self,
        returncode: int,
        stdout: str,
        stderr: str,
        command: str | list[str],
        duration_seconds: float = 0.0,
    ) -> None:
        self.returncode = returncode
        self.stdout = stdout
        self.stderr = stderr
        self.command = command
        self.duration_seconds = duration_seconds

    @property
    def success(self) -> bool:
        return self.returncode == 0

    def __repr__(self) -> str:
        cmd = self.command if isinstance(self.command, str) else " ".join(self.command)
        return f"CommandResult(rc={self.returncode}, cmd='{cmd[:50]}...')"


class StorageDeviceDetector(ABC):
    """Abstract base class for platform-specific device detection."""

    def __init__(self, config: DetectorConfig | None = None) -> None:
        self.config = config or DetectorConfig()

    @property
    @abstractmethod
    def name(self) -> str:
        """Platform name (e.g., 'linux', 'windows')."""

    @abstractmethod
    def get_storage_devices(self) -> list[StorageDevice]:
        """
        List the removable storage devices currently mounted.

        Never raises: command failures are logged and yield fewer
        (possibly zero) devices.
        """

    @abstractmethod
    def resolve_name(self, root_path: str) -> str | None:
        """Best-effort human-readable name for a mounted root path."""
