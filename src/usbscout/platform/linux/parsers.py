"""
Linux output parsers.

Parsers for df and udevadm output.
"""

from __future__ import annotations

import re

# "<device> <blocks> <used> <available> <capacity>% <mount point>"
DF_LINE_PATTERN = re.compile(r"^(/[^ ]+)[^%]+%[ ]+(.+)$")
UDEV_ESCAPE_PATTERN = re.compile(r"\\x([0-9a-fA-F]{2})")


def parse_df_line(line: str) -> tuple[str, str] | None:
    """
    Parse one line of `df -l -P` into (device, mount point).

    The header and pseudo filesystems such as tmpfs do not start with a
    device path and yield None.
    """
    match = DF_LINE_PATTERN.match(line.rstrip("\n"))
    if not match:
        return None
    return match.group(1), match.group(2)


def parse_udev_properties(output: str) -> dict[str, str]:
    """Parse `udevadm info -q property` KEY=VALUE output."""
    properties: dict[str, str] = {}

    for line in output.splitlines():
        key, sep, value = line.partition("=")
        if sep and key:
            properties[key.strip()] = value.strip()

    return properties


def decode_udev_string(value: str) -> str:
    """
    Undo udev's \\xNN escaping, as used by the *_ENC properties.

    udev escapes the UTF-8 bytes of the value, so the bytes are rebuilt
    before decoding.
    """
    raw = UDEV_ESCAPE_PATTERN.sub(lambda m: chr(int(m.group(1), 16)), value)
    return raw.encode("latin-1", errors="replace").decode("utf-8", errors="replace")


def is_usb_device(properties: dict[str, str]) -> bool:
    return properties.get("ID_BUS", "").lower() == "usb"


def get_filesystem_label(properties: dict[str, str]) -> str | None:
    """Volume label from udev properties, preferring the unmangled form."""
    encoded = properties.get("ID_FS_LABEL_ENC")
    if encoded:
        label = decode_udev_string(encoded).strip()
    else:
        label = properties.get("ID_FS_LABEL", "").strip()
    return label or None
