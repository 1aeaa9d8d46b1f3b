"""
Pytest configuration and fixtures for USBScout tests.
"""

import sys
import tempfile
from pathlib import Path
from typing import Generator

import pytest

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from usbscout.platform.base import CommandResult


class FakeCommandExecutor:
    """Stands in for CommandExecutor, replaying canned output lines."""

    def __init__(
        self,
        lines: list[str],
        start_error: Exception | None = None,
        fail_after: int | None = None,
    ) -> None:
        self.lines = lines
        self.start_error = start_error
        self.fail_after = fail_after
        self.commands: list[list[str]] = []
        self.closed = False

    def __call__(self, command: list[str], timeout: float | None = None) -> "FakeCommandExecutor":
        self.commands.append(command)
        return self

    def __enter__(self) -> "FakeCommandExecutor":
        if self.start_error is not None:
            raise self.start_error
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.closed = True

    def iter_lines(self):
        for index, line in enumerate(self.lines):
            if self.fail_after is not None and index == self.fail_after:
                raise OSError("pipe broken")
            yield line


class FakePowerShell:
    """Stands in for PowerShellSession, answering every command the same way."""

    def __init__(
        self,
        stdout: str = "",
        returncode: int = 0,
        error: Exception | None = None,
    ) -> None:
        self.stdout = stdout
        self.returncode = returncode
        self.error = error
        self.commands: list[str] = []
        self.opened = 0
        self.closed = 0

    def open(self, **kwargs: object) -> "FakePowerShell":
        self.opened += 1
        return self

    def __enter__(self) -> "FakePowerShell":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.closed += 1

    def execute(self, commands: str) -> CommandResult:
        self.commands.append(commands)
        if self.error is not None:
            raise self.error
        return CommandResult(
            returncode=self.returncode,
            stdout=self.stdout,
            stderr="" if self.returncode == 0 else "Get-Volume : No MSFT_Volume objects found",
            command=commands,
        )


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for tests."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def all_roots_mounted(mocker):
    """Treat every root path as an existing, accessible directory."""
    return mocker.patch("usbscout.core.models.is_accessible_root", return_value=True)


@pytest.fixture
def sample_config(temp_dir: Path) -> "UsbScoutConfig":
    """Create a sample configuration for testing."""
    from usbscout.core.config import LoggingConfig, UsbScoutConfig

    config = UsbScoutConfig(
        logging=LoggingConfig(log_directory=temp_dir / "logs", file_enabled=False),
    )
    config.detector.wmic_path = Path("C:/Windows/System32/wbem/wmic.exe")
    return config


def pytest_configure(config: pytest.Config) -> None:
    """Configure pytest with custom markers."""
    config.addinivalue_line("markers", "unit: Unit tests")
    config.addinivalue_line("markers", "integration: Integration tests")
