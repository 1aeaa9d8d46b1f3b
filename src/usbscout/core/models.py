"""
USBScout data models.

Defines the records produced by a storage device scan.
"""

from __future__ import annotations

import os
import re
from dataclasses import dataclass
from typing import Any

from usbscout.core.logging import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class DeviceCandidate:
    """A drive parsed from one line of the listing command output."""

    device_id: str  # e.g. E:
    serial: str  # volume serial number, used as the UUID


@dataclass(frozen=True)
class StorageDevice:
    """A mounted removable storage device."""

    root_path: str  # e.g. E:\ or /media/user/STICK
    display_name: str
    device: str  # drive root on Windows, device node on Linux
    uuid: str | None = None

    @classmethod
    def create(
        cls,
        root_path: str,
        display_name: str | None,
        device: str,
        uuid: str | None,
    ) -> StorageDevice | None:
        """
        Build a device for a mounted root path.

        Returns None when the root path is not an accessible directory,
        which happens when the device was ejected between listing and
        lookup.
        """
        if not is_accessible_root(root_path):
            logger.debug("Invalid root found", root_path=root_path)
            return None

        if not display_name:
            display_name = default_display_name(root_path)

        logger.debug("Device found", root_path=root_path, display_name=display_name)
        return cls(
            root_path=root_path,
            display_name=display_name,
            device=device,
            uuid=uuid,
        )

    @property
    def readable(self) -> bool:
        return os.access(self.root_path, os.R_OK)

    @property
    def writable(self) -> bool:
        return os.access(self.root_path, os.W_OK)

    @property
    def executable(self) -> bool:
        return os.access(self.root_path, os.X_OK)

    def to_dict(self) -> dict[str, Any]:
        return {
            "root_path": self.root_path,
            "display_name": self.display_name,
            "device": self.device,
            "uuid": self.uuid,
            "readable": self.readable,
            "writable": self.writable,
        }


def is_accessible_root(root_path: str) -> bool:
    return os.path.isdir(root_path)


def default_display_name(root_path: str) -> str:
    """Name a device after its root path when nothing better is known."""
    name = re.split(r"[\\/]", root_path.rstrip("\\/"))[-1]
    return name or root_path
