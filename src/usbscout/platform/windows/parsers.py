"""
Windows output parsers.

Parsers for wmic logicaldisk listings and PowerShell Format-List output.
"""

from __future__ import annotations

from usbscout.core.models import DeviceCandidate

WMIC_HEADER = "DeviceID"
FILESYSTEM_LABEL_PROPERTY = "FileSystemLabel : "


def parse_logicaldisk_line(line: str) -> DeviceCandidate | None:
    """
    Parse one line of `wmic logicaldisk get DeviceID,VolumeSerialNumber`.

    Returns None for the header, blank lines and the separator rows wmic
    interleaves, where the last column collapses onto the first.
    """
    parts = line.split()

    if len(parts) < 2:
        return None
    if not parts[0] or parts[0] == WMIC_HEADER or parts[0] == parts[-1]:
        return None

    return DeviceCandidate(device_id=parts[0], serial=parts[-1])


def parse_property_values(output: str, property_tag: str) -> list[str]:
    """Values of every `<property_tag><value>` line in Format-List output."""
    return [
        line[len(property_tag):]
        for line in output.split("\r\n")
        if line.startswith(property_tag)
    ]


def parse_filesystem_label(output: str) -> str | None:
    """
    Extract the volume label from `Get-Volume | Format-List FileSystemLabel`.

    Only a single, non-empty label is accepted; missing, empty or repeated
    label lines all yield None.
    """
    labels = parse_property_values(output, FILESYSTEM_LABEL_PROPERTY)
    if len(labels) != 1:
        return None

    return labels[0] or None


def clean_display_name(name: str | None) -> str | None:
    """
    Drop the trailing "(E:)" style suffix from a shell display name.

    "Removable Disk (E:)" becomes "Removable Disk"; names that end up
    blank become None.
    """
    if name is None:
        return None

    idx = name.rfind("(")
    if idx != -1:
        name = name[:idx]

    name = name.strip()
    return name or None
