"""
USBScout - Removable storage device detection.

Enumerates mounted USB storage devices using the host's native tools and
names them the way the desktop shell does.
"""

__version__ = "1.0.0"
__author__ = "USBScout Team"

from usbscout.core.config import UsbScoutConfig
from usbscout.core.models import StorageDevice
from usbscout.platform import get_platform_detector

__all__ = ["StorageDevice", "UsbScoutConfig", "get_platform_detector", "__version__"]
