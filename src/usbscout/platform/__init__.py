"""
USBScout Platform Layer.

Provides the platform-specific storage device detectors for Linux and
Windows.
"""

from __future__ import annotations

import platform
from typing import TYPE_CHECKING

from usbscout.platform.base import StorageDeviceDetector

if TYPE_CHECKING:
    from usbscout.core.config import DetectorConfig


def get_platform_detector(config: DetectorConfig | None = None) -> StorageDeviceDetector:
    """Get the storage device detector for the current OS."""
    system = get_platform_name()

    if system == "linux":
        from usbscout.platform.linux import LinuxStorageDeviceDetector

        return LinuxStorageDeviceDetector(config)
    elif system == "windows":
        from usbscout.platform.windows import WindowsStorageDeviceDetector

        return WindowsStorageDeviceDetector(config)
    else:
        raise RuntimeError(f"Unsupported platform: {system}")


def get_platform_name() -> str:
    """Get the current platform name."""
    return platform.system().lower()


__all__ = [
    "StorageDeviceDetector",
    "get_platform_detector",
    "get_platform_name",
]
