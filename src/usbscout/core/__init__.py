"""
USBScout Core.

Configuration, logging and the device records shared by all detectors.
"""

from usbscout.core.config import DetectorConfig, LoggingConfig, UsbScoutConfig, load_config
from usbscout.core.logging import OperationLogger, get_logger, setup_logging
from usbscout.core.models import DeviceCandidate, StorageDevice

__all__ = [
    "DetectorConfig",
    "LoggingConfig",
    "UsbScoutConfig",
    "load_config",
    "OperationLogger",
    "get_logger",
    "setup_logging",
    "DeviceCandidate",
    "StorageDevice",
]
