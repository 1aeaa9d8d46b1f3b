"""
Windows Storage Device Detector.

Lists removable drives with wmic and names them from their volume label,
falling back to the Explorer display name.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import TYPE_CHECKING

from usbscout.core.logging import get_logger
from usbscout.core.models import StorageDevice
from usbscout.platform.base import StorageDeviceDetector
from usbscout.platform.process import CommandExecutor
from usbscout.platform.windows.parsers import (
    clean_display_name,
    parse_filesystem_label,
    parse_logicaldisk_line,
)
from usbscout.platform.windows.shell import PowerShellSession, get_system_display_name

if TYPE_CHECKING:
    from usbscout.core.config import DetectorConfig

logger = get_logger(__name__)

# drivetype=2 is DRIVE_REMOVABLE
WMIC_ARGS = ["logicaldisk", "where", "drivetype=2", "get", "DeviceID,VolumeSerialNumber"]
GET_VOLUME_LABEL_TEMPLATE = "Get-Volume -DriveLetter {} | Format-List -Property FileSystemLabel"
PATH_SEPARATOR = "\\"


def default_wmic_path() -> Path:
    """wmic.exe under the Windows installation directory."""
    return Path(os.environ["WINDIR"]) / "System32" / "wbem" / "wmic.exe"


class WindowsStorageDeviceDetector(StorageDeviceDetector):
    """Windows implementation of storage device detection."""

    def __init__(self, config: DetectorConfig | None = None) -> None:
        super().__init__(config)
        self.wmic_path = self.config.wmic_path or default_wmic_path()

    @property
    def name(self) -> str:
        return "windows"

    @property
    def listing_command(self) -> list[str]:
        return [str(self.wmic_path), *WMIC_ARGS]

    def get_storage_devices(self) -> list[StorageDevice]:
        devices: list[StorageDevice] = []

        try:
            with CommandExecutor(
                self.listing_command,
                timeout=self.config.command_timeout_seconds,
            ) as executor:
                for line in executor.iter_lines():
                    candidate = parse_logicaldisk_line(line)
                    if candidate is None:
                        continue

                    root_path = candidate.device_id + PATH_SEPARATOR
                    device = StorageDevice.create(
                        root_path,
                        self.resolve_name(root_path),
                        root_path,
                        candidate.serial,
                    )
                    if device is not None:
                        devices.append(device)
        except OSError as e:
            logger.error(
                "Storage device listing failed",
                command=self.listing_command,
                error=str(e),
                found=len(devices),
                exc_info=True,
            )

        return devices

    def resolve_name(self, root_path: str) -> str | None:
        name = None
        if ":" in root_path and self.config.label_query_enabled:
            name = self._filesystem_label(root_path)

        if name is None:
            name = clean_display_name(get_system_display_name(root_path))

        return name

    def _filesystem_label(self, root_path: str) -> str | None:
        """Volume label from Get-Volume, or None when it cannot be trusted."""
        drive_letter = root_path[: root_path.index(":")]
        command = GET_VOLUME_LABEL_TEMPLATE.format(drive_letter)

        try:
            with PowerShellSession.open(
                executable=self.config.powershell_executable,
                timeout=self.config.command_timeout_seconds,
            ) as session:
                result = session.execute(command)
        except Exception as e:
            logger.debug("PowerShell session failed", drive_letter=drive_letter, error=str(e))
            return None

        if not result.success:
            # Usually the device was ejected while the query ran
            logger.debug(
                "Filesystem label query failed",
                drive_letter=drive_letter,
                returncode=result.returncode,
                stderr=result.stderr[:500],
            )
            return None

        return parse_filesystem_label(result.stdout)
