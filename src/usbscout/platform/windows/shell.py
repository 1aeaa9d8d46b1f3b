"""
Windows shell access.

PowerShellSession runs PowerShell commands for label queries, and
get_system_display_name asks the Explorer shell how it names a path.
"""

from __future__ import annotations

import locale
import os
import subprocess
import sys
import time
from typing import Any

from usbscout.core.logging import get_logger
from usbscout.platform.base import CommandResult
from usbscout.platform.process import hidden_window_kwargs

logger = get_logger(__name__)

SHGFI_DISPLAYNAME = 0x000000200
MAX_PATH = 260
# Redirected output otherwise uses the OEM code page
UTF8_OUTPUT_PREAMBLE = "[Console]::OutputEncoding = New-Object System.Text.UTF8Encoding $false"


class PowerShellSession:
    """
    A scoped PowerShell host.

    Commands are fed to `powershell -Command -` on stdin. Failures are
    reported through the returned CommandResult, never raised, so a device
    ejected mid-query only costs the caller a failed result. Closing the
    session kills any command still running.
    """

    def __init__(self, executable: str = "powershell.exe", timeout: float = 30) -> None:
        self.executable = executable
        self.timeout = timeout
        self._proc: subprocess.Popen[bytes] | None = None
        self._closed = False

    @classmethod
    def open(cls, executable: str = "powershell.exe", timeout: float = 30) -> PowerShellSession:
        return cls(executable=executable, timeout=timeout)

    def __enter__(self) -> PowerShellSession:
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        self.close()

    @property
    def command_line(self) -> list[str]:
        return [
            self.executable,
            "-NoLogo",
            "-NoProfile",
            "-NonInteractive",
            "-ExecutionPolicy", "Bypass",
            "-Command", "-",
        ]

    def execute(self, commands: str) -> CommandResult:
        """Run a PowerShell script and capture its raw output."""
        if self._closed:
            return CommandResult(
                returncode=-1,
                stdout="",
                stderr="PowerShell session is closed",
                command=commands,
            )

        logger.debug("Running PowerShell", commands=commands)
        start_time = time.time()
        input_encoding = locale.getpreferredencoding(False)

        try:
            self._proc = subprocess.Popen(
                self.command_line,
                stdin=subprocess.PIPE,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                **hidden_window_kwargs(),
            )
            # Bytes in and out: Format-List output is parsed on CRLF,
            # which text mode would translate away.
            stdout, stderr = self._proc.communicate(
                input=f"{UTF8_OUTPUT_PREAMBLE}\r\n{commands}\r\n".encode(
                    input_encoding, errors="replace"
                ),
                timeout=self.timeout,
            )
            returncode = self._proc.returncode
        except subprocess.TimeoutExpired:
            self._kill()
            return CommandResult(
                returncode=-1,
                stdout="",
                stderr=f"Command timed out after {self.timeout}s",
                command=commands,
                duration_seconds=self.timeout,
            )
        except Exception as e:
            self._kill()
            return CommandResult(
                returncode=-1,
                stdout="",
                stderr=str(e),
                command=commands,
                duration_seconds=time.time() - start_time,
            )
        finally:
            self._proc = None

        result = CommandResult(
            returncode=returncode,
            stdout=stdout.decode("utf-8-sig", errors="replace"),
            stderr=stderr.decode("utf-8-sig", errors="replace"),
            command=commands,
            duration_seconds=time.time() - start_time,
        )
        # PowerShell reports script errors on stderr with a zero exit code
        if result.success and result.stderr.strip():
            result.returncode = 1
        return result

    def _kill(self) -> None:
        proc = self._proc
        if proc is None or proc.poll() is not None:
            return
        proc.kill()
        proc.wait()

    def close(self) -> None:
        self._kill()
        self._proc = None
        self._closed = True


def get_system_display_name(path: str) -> str | None:
    """
    The name a file browser shows for a path.

    On Windows this is the Explorer display name ("USB Drive (E:)",
    "Removable Disk (F:)"), which includes localized pseudo labels for
    volumes without one. Elsewhere it is the last path component.
    """
    if sys.platform != "win32":
        name = os.path.basename(os.path.normpath(path))
        return name or None

    import ctypes
    from ctypes import wintypes

    class SHFILEINFOW(ctypes.Structure):
        _fields_ = [
            ("hIcon", wintypes.HANDLE),
            ("iIcon", ctypes.c_int),
            ("dwAttributes", wintypes.DWORD),
            ("szDisplayName", wintypes.WCHAR * MAX_PATH),
            ("szTypeName", wintypes.WCHAR * 80),
        ]

    shell32 = ctypes.WinDLL("shell32", use_last_error=True)
    sh_get_file_info = shell32.SHGetFileInfoW
    sh_get_file_info.argtypes = [
        wintypes.LPCWSTR,
        wintypes.DWORD,
        ctypes.POINTER(SHFILEINFOW),
        wintypes.UINT,
        wintypes.UINT,
    ]
    sh_get_file_info.restype = ctypes.c_size_t

    info = SHFILEINFOW()
    ok = sh_get_file_info(
        path,
        0,
        ctypes.byref(info),
        ctypes.sizeof(info),
        SHGFI_DISPLAYNAME,
    )
    if not ok:
        logger.debug("No shell display name", path=path)
        return None

    return info.szDisplayName
