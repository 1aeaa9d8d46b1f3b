"""
Linux Storage Device Detector.

Lists local mounts with df and keeps those udev reports on the USB bus.
"""

from __future__ import annotations

from usbscout.core.logging import get_logger
from usbscout.core.models import StorageDevice
from usbscout.platform.base import StorageDeviceDetector
from usbscout.platform.linux.parsers import (
    get_filesystem_label,
    is_usb_device,
    parse_df_line,
    parse_udev_properties,
)
from usbscout.platform.process import CommandExecutor, run_command

logger = get_logger(__name__)

DF_COMMAND = ["df", "-l", "-P"]
UDEVADM_PROPERTIES_COMMAND = ["udevadm", "info", "-q", "property", "-n"]


class LinuxStorageDeviceDetector(StorageDeviceDetector):
    """Linux implementation of storage device detection."""

    @property
    def name(self) -> str:
        return "linux"

    def get_storage_devices(self) -> list[StorageDevice]:
        devices: list[StorageDevice] = []
        mounts: list[tuple[str, str]] = []

        try:
            with CommandExecutor(
                DF_COMMAND,
                timeout=self.config.command_timeout_seconds,
            ) as executor:
                for line in executor.iter_lines():
                    mount = parse_df_line(line)
                    if mount is not None:
                        mounts.append(mount)
        except OSError as e:
            logger.error(
                "Mount listing failed",
                command=DF_COMMAND,
                error=str(e),
                found=len(mounts),
                exc_info=True,
            )

        for device_node, mount_point in mounts:
            properties = self._udev_properties(device_node)
            if not is_usb_device(properties):
                continue

            device = StorageDevice.create(
                mount_point,
                get_filesystem_label(properties),
                device_node,
                properties.get("ID_FS_UUID") or None,
            )
            if device is not None:
                devices.append(device)

        return devices

    def resolve_name(self, root_path: str) -> str | None:
        result = run_command(
            ["findmnt", "-n", "-o", "SOURCE", "--target", root_path],
            timeout=self.config.command_timeout_seconds,
        )
        if result.success and result.stdout.strip():
            label = get_filesystem_label(self._udev_properties(result.stdout.strip()))
            if label:
                return label

        name = root_path.rstrip("/").rsplit("/", 1)[-1]
        return name or None

    def _udev_properties(self, device_node: str) -> dict[str, str]:
        result = run_command(
            [*UDEVADM_PROPERTIES_COMMAND, device_node],
            timeout=self.config.command_timeout_seconds,
        )
        if not result.success:
            logger.debug(
                "udevadm query failed",
                device=device_node,
                returncode=result.returncode,
                stderr=result.stderr[:500],
            )
            return {}
        return parse_udev_properties(result.stdout)
