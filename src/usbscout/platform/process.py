"""
Child process helpers.

CommandExecutor streams a command's output line by line; run_command runs a
command to completion and reports the outcome as a CommandResult.
"""

from __future__ import annotations

import subprocess
import sys
import threading
import time
from collections.abc import Iterator
from typing import Any

from usbscout.core.logging import get_logger
from usbscout.platform.base import CommandResult

logger = get_logger(__name__)


def hidden_window_kwargs() -> dict[str, Any]:
    """Keep console windows from flashing up on Windows."""
    if sys.platform != "win32":
        return {}

    startupinfo = subprocess.STARTUPINFO()
    startupinfo.dwFlags |= subprocess.STARTF_USESHOWWINDOW
    startupinfo.wShowWindow = subprocess.SW_HIDE
    return {"startupinfo": startupinfo}


class CommandExecutor:
    """
    A running command whose standard output is consumed lazily.

    Use as a context manager: the child is started on entry and is always
    reaped on exit. A child still running when the timeout expires is
    killed, which ends the output stream; lines read before that are kept.
    Starting the command or reading its output raises OSError on failure.
    """

    def __init__(self, command: list[str], timeout: float | None = None) -> None:
        self.command = command
        self.timeout = timeout
        self.timed_out = False
        self._proc: subprocess.Popen[str] | None = None
        self._deadline: threading.Timer | None = None

    def __enter__(self) -> CommandExecutor:
        self.start()
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        self.close()

    def start(self) -> None:
        logger.debug("Running command", command=self.command)
        self._proc = subprocess.Popen(
            self.command,
            stdin=subprocess.DEVNULL,
            stdout=subprocess.PIPE,
            stderr=subprocess.DEVNULL,
            text=True,
            errors="replace",
            **hidden_window_kwargs(),
        )
        if self.timeout is not None:
            self._deadline = threading.Timer(self.timeout, self._expire, args=(self._proc,))
            self._deadline.daemon = True
            self._deadline.start()

    def _expire(self, proc: subprocess.Popen[str]) -> None:
        if proc.poll() is None:
            self.timed_out = True
            proc.kill()

    def iter_lines(self) -> Iterator[str]:
        """Yield output lines as the command produces them."""
        if self._proc is None or self._proc.stdout is None:
            raise OSError(f"Command not started: {self.command}")

        for line in self._proc.stdout:
            yield line.rstrip("\r\n")

        if self.timed_out:
            logger.warning(
                "Command timed out, output truncated",
                command=self.command,
                timeout_seconds=self.timeout,
            )

    def close(self) -> None:
        if self._deadline is not None:
            self._deadline.cancel()
            self._deadline = None

        proc = self._proc
        if proc is None:
            return
        self._proc = None

        if proc.stdout is not None:
            proc.stdout.close()
        try:
            returncode = proc.wait(timeout=self.timeout)
        except subprocess.TimeoutExpired:
            logger.warning("Command timed out, killing it", command=self.command)
            proc.kill()
            returncode = proc.wait()

        if returncode != 0:
            logger.debug("Command exited with error", command=self.command, returncode=returncode)


def run_command(command: list[str], timeout: float = 30) -> CommandResult:
    """Run a command to completion, capturing its output."""
    logger.debug("Running command", command=command)
    start_time = time.time()

    try:
        result = subprocess.run(
            command,
            capture_output=True,
            text=True,
            errors="replace",
            timeout=timeout,
            **hidden_window_kwargs(),
        )
    except subprocess.TimeoutExpired:
        return CommandResult(
            returncode=-1,
            stdout="",
            stderr=f"Command timed out after {timeout}s",
            command=command,
            duration_seconds=timeout,
        )
    except OSError as e:
        return CommandResult(
            returncode=-1,
            stdout="",
            stderr=str(e),
            command=command,
            duration_seconds=time.time() - start_time,
        )

    return CommandResult(
        returncode=result.returncode,
        stdout=result.stdout,
        stderr=result.stderr,
        command=command,
        duration_seconds=time.time() - start_time,
    )
