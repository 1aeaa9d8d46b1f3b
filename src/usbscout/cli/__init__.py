"""
USBScout CLI.

Command-line interface for listing removable storage devices.
"""

from usbscout.cli.main import cli, main

__all__ = ["main", "cli"]
