"""
USBScout Linux Platform Detector.

Detects USB storage using standard Linux tools:
- df for mounted filesystems
- udevadm for bus type, label and UUID
"""

from usbscout.platform.linux.detector import LinuxStorageDeviceDetector
from usbscout.platform.linux.parsers import (
    parse_df_line,
    parse_udev_properties,
)

__all__ = [
    "LinuxStorageDeviceDetector",
    "parse_df_line",
    "parse_udev_properties",
]
