"""
USBScout Windows Platform Detector.

Detects removable drives using Windows tools:
- wmic logicaldisk for the drive listing
- PowerShell Get-Volume for volume labels
- the Explorer shell display name as a fallback
"""

from usbscout.platform.windows.detector import WindowsStorageDeviceDetector
from usbscout.platform.windows.parsers import (
    clean_display_name,
    parse_filesystem_label,
    parse_logicaldisk_line,
)

__all__ = [
    "WindowsStorageDeviceDetector",
    "clean_display_name",
    "parse_filesystem_label",
    "parse_logicaldisk_line",
]
