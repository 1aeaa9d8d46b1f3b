"""
Tests for usbscout.platform.windows.detector module.

External commands are replaced with fakes, so these run on any OS.
"""

import subprocess
from pathlib import Path

import pytest

from conftest import FakeCommandExecutor, FakePowerShell
from usbscout.core.config import DetectorConfig
from usbscout.platform.windows import detector as windows_detector
from usbscout.platform.windows.detector import (
    WindowsStorageDeviceDetector,
    default_wmic_path,
)

LISTING = "C: 12345678\nDeviceID VolumeSerialNumber\nE: 87654321\nE: E:\n"


@pytest.fixture
def detector(sample_config) -> WindowsStorageDeviceDetector:
    return WindowsStorageDeviceDetector(sample_config.detector)


@pytest.fixture
def display_name(mocker):
    return mocker.patch.object(
        windows_detector, "get_system_display_name", return_value="USB Drive (E:)"
    )


def install_executor(mocker, lines, **kwargs) -> FakeCommandExecutor:
    executor = FakeCommandExecutor(lines, **kwargs)
    mocker.patch.object(windows_detector, "CommandExecutor", executor)
    return executor


def install_powershell(mocker, **kwargs) -> FakePowerShell:
    shell = FakePowerShell(**kwargs)
    mocker.patch.object(windows_detector, "PowerShellSession", shell)
    return shell


class TestWmicPath:
    """Tests for locating wmic.exe."""

    def test_default_from_windir(self, monkeypatch) -> None:
        monkeypatch.setenv("WINDIR", "C:\\Windows")
        path = default_wmic_path()
        assert path.name == "wmic.exe"
        assert path.parent.name == "wbem"

    def test_config_override(self) -> None:
        detector = WindowsStorageDeviceDetector(
            DetectorConfig(wmic_path=Path("D:/tools/wmic.exe"))
        )
        assert detector.listing_command[0] == str(Path("D:/tools/wmic.exe"))
        assert detector.listing_command[1:] == [
            "logicaldisk",
            "where",
            "drivetype=2",
            "get",
            "DeviceID,VolumeSerialNumber",
        ]

    def test_name(self, detector: WindowsStorageDeviceDetector) -> None:
        assert detector.name == "windows"


class TestGetStorageDevices:
    """Tests for device enumeration."""

    def test_listing_sample(
        self, mocker, detector: WindowsStorageDeviceDetector, display_name, all_roots_mounted
    ) -> None:
        install_executor(mocker, LISTING.splitlines())
        install_powershell(mocker, stdout="\r\nFileSystemLabel : MYDISK\r\n")

        devices = detector.get_storage_devices()

        assert [d.root_path for d in devices] == ["C:\\", "E:\\"]
        assert [d.uuid for d in devices] == ["12345678", "87654321"]
        assert [d.device for d in devices] == ["C:\\", "E:\\"]
        assert all(d.display_name == "MYDISK" for d in devices)

    def test_names_resolved_once_per_accepted_row(
        self, mocker, detector: WindowsStorageDeviceDetector, display_name, all_roots_mounted
    ) -> None:
        install_executor(mocker, LISTING.splitlines())
        shell = install_powershell(mocker, stdout="FileSystemLabel : MYDISK\r\n")

        detector.get_storage_devices()

        assert shell.commands == [
            "Get-Volume -DriveLetter C | Format-List -Property FileSystemLabel",
            "Get-Volume -DriveLetter E | Format-List -Property FileSystemLabel",
        ]
        assert shell.opened == shell.closed == 2

    def test_unmounted_roots_skipped(
        self, mocker, detector: WindowsStorageDeviceDetector, display_name
    ) -> None:
        install_executor(mocker, LISTING.splitlines())
        install_powershell(mocker, stdout="FileSystemLabel : MYDISK\r\n")
        mocker.patch(
            "usbscout.core.models.is_accessible_root",
            side_effect=lambda path: path == "E:\\",
        )

        devices = detector.get_storage_devices()

        assert [d.root_path for d in devices] == ["E:\\"]

    def test_start_failure_returns_empty(
        self, mocker, detector: WindowsStorageDeviceDetector, display_name, all_roots_mounted
    ) -> None:
        install_executor(mocker, [], start_error=FileNotFoundError("wmic.exe"))

        assert detector.get_storage_devices() == []

    def test_stream_failure_keeps_partial_results(
        self, mocker, detector: WindowsStorageDeviceDetector, display_name, all_roots_mounted
    ) -> None:
        executor = install_executor(
            mocker,
            ["DeviceID  VolumeSerialNumber", "E:  11111111", "F:  22222222"],
            fail_after=2,
        )
        install_powershell(mocker, stdout="FileSystemLabel : ONE\r\n")

        devices = detector.get_storage_devices()

        assert [d.uuid for d in devices] == ["11111111"]
        assert executor.closed is True

    def test_listing_command_used(
        self, mocker, detector: WindowsStorageDeviceDetector, display_name, all_roots_mounted
    ) -> None:
        executor = install_executor(mocker, [])

        detector.get_storage_devices()

        assert executor.commands == [detector.listing_command]


class TestResolveName:
    """Tests for the two-tier display name lookup."""

    def test_filesystem_label_preferred(
        self, mocker, detector: WindowsStorageDeviceDetector, display_name
    ) -> None:
        install_powershell(mocker, stdout="\r\nFileSystemLabel : MYDISK\r\n\r\n")

        assert detector.resolve_name("E:\\") == "MYDISK"
        display_name.assert_not_called()

    def test_empty_label_falls_back(
        self, mocker, detector: WindowsStorageDeviceDetector, display_name
    ) -> None:
        install_powershell(mocker, stdout="\r\nFileSystemLabel : \r\n")

        assert detector.resolve_name("E:\\") == "USB Drive"
        display_name.assert_called_once_with("E:\\")

    def test_missing_label_falls_back(
        self, mocker, detector: WindowsStorageDeviceDetector, display_name
    ) -> None:
        install_powershell(mocker, stdout="")

        assert detector.resolve_name("E:\\") == "USB Drive"

    def test_ambiguous_label_falls_back(
        self, mocker, detector: WindowsStorageDeviceDetector, display_name
    ) -> None:
        install_powershell(mocker, stdout="FileSystemLabel : A\r\nFileSystemLabel : B\r\n")

        assert detector.resolve_name("E:\\") == "USB Drive"

    def test_failed_query_falls_back(
        self, mocker, detector: WindowsStorageDeviceDetector, display_name
    ) -> None:
        install_powershell(mocker, stdout="FileSystemLabel : STALE\r\n", returncode=1)

        assert detector.resolve_name("E:\\") == "USB Drive"

    @pytest.mark.parametrize(
        "error",
        [OSError("device not ready"), RuntimeError("session died")],
    )
    def test_session_errors_fall_back(
        self, mocker, detector: WindowsStorageDeviceDetector, display_name, error
    ) -> None:
        shell = install_powershell(mocker, error=error)

        assert detector.resolve_name("E:\\") == "USB Drive"
        assert shell.closed == 1

    def test_session_open_error_falls_back(
        self, mocker, detector: WindowsStorageDeviceDetector, display_name
    ) -> None:
        shell = install_powershell(mocker)
        mocker.patch.object(shell, "open", side_effect=OSError("no powershell"))

        assert detector.resolve_name("E:\\") == "USB Drive"

    def test_real_session_spawn_failure_falls_back(
        self, mocker, detector: WindowsStorageDeviceDetector, display_name
    ) -> None:
        mocker.patch(
            "usbscout.platform.windows.shell.subprocess.Popen",
            side_effect=FileNotFoundError("powershell.exe"),
        )

        assert detector.resolve_name("E:\\") == "USB Drive"

    def test_real_session_timeout_falls_back(
        self, mocker, detector: WindowsStorageDeviceDetector, display_name
    ) -> None:
        proc = mocker.Mock()
        proc.communicate.side_effect = subprocess.TimeoutExpired("powershell.exe", 30)
        proc.poll.return_value = None
        mocker.patch("usbscout.platform.windows.shell.subprocess.Popen", return_value=proc)

        assert detector.resolve_name("E:\\") == "USB Drive"
        proc.kill.assert_called_once()

    def test_no_drive_separator_skips_label_query(
        self, mocker, detector: WindowsStorageDeviceDetector, display_name
    ) -> None:
        shell = install_powershell(mocker, stdout="FileSystemLabel : MYDISK\r\n")
        display_name.return_value = "share"

        assert detector.resolve_name("\\\\server\\share") == "share"
        assert shell.opened == 0

    def test_label_query_disabled(self, mocker, display_name) -> None:
        shell = install_powershell(mocker, stdout="FileSystemLabel : MYDISK\r\n")
        detector = WindowsStorageDeviceDetector(
            DetectorConfig(label_query_enabled=False, wmic_path=Path("wmic.exe"))
        )

        assert detector.resolve_name("E:\\") == "USB Drive"
        assert shell.opened == 0

    def test_nothing_resolved(
        self, mocker, detector: WindowsStorageDeviceDetector, display_name
    ) -> None:
        install_powershell(mocker, stdout="")
        display_name.return_value = " (E:)"

        assert detector.resolve_name("E:\\") is None

    def test_no_display_name(
        self, mocker, detector: WindowsStorageDeviceDetector, display_name
    ) -> None:
        install_powershell(mocker, stdout="")
        display_name.return_value = None

        assert detector.resolve_name("E:\\") is None

    def test_unresolved_device_named_after_root(
        self, mocker, detector: WindowsStorageDeviceDetector, display_name, all_roots_mounted
    ) -> None:
        install_executor(mocker, ["E:  87654321"])
        install_powershell(mocker, stdout="")
        display_name.return_value = None

        devices = detector.get_storage_devices()

        assert devices[0].display_name == "E:"
