"""
Bounded subprocess calls to the remote-store CLI.

Blocks the single control flow until the command exits or the timeout
elapses. Failures are reported to the caller, never retried here.
"""
from __future__ import annotations

import subprocess
from dataclasses import dataclass
from typing import Optional, Sequence

from secrets_sync.config.config import load_settings
from secrets_sync.exceptions import CommandFailedError, CommandTimeoutError, DependencyError
from secrets_sync.monitoring.logger import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class CommandResult:
    stdout: str
    stderr: str
    returncode: int


def get_timeout() -> int:
    """Timeout in milliseconds from ``SECRETS_SYNC_TIMEOUT`` (default 30000)."""
    return load_settings().timeout


def exec_with_timeout(
    command: Sequence[str],
    *,
    timeout_ms: Optional[int] = None,
    operation: Optional[str] = None,
    input_text: Optional[str] = None,
    check: bool = True,
    install_url: Optional[str] = None,
    install_command: Optional[str] = None,
) -> CommandResult:
    """
    Run ``command`` and capture its output.

    Secret values must be passed through ``input_text`` (stdin), never as
    arguments: argv is visible to other processes. ``install_url`` and
    ``install_command`` end up in the error raised when the executable is
    missing.

    Raises:
        DependencyError: If the executable does not exist
        CommandTimeoutError: If the command outlives the timeout
        CommandFailedError: If ``check`` and the exit status is non-zero
    """
    timeout = timeout_ms if timeout_ms and timeout_ms > 0 else get_timeout()
    label = operation or f"Command: {' '.join(command)}"

    try:
        completed = subprocess.run(
            list(command),
            input=input_text,
            capture_output=True,
            text=True,
            timeout=timeout / 1000,
        )
    except FileNotFoundError as e:
        raise DependencyError(
            command[0], install_url=install_url, install_command=install_command
        ) from e
    except subprocess.TimeoutExpired as e:
        logger.warning("Command timed out", operation=label, timeout_ms=timeout)
        raise CommandTimeoutError(label, timeout) from e

    result = CommandResult(
        stdout=completed.stdout or "",
        stderr=completed.stderr or "",
        returncode=completed.returncode,
    )
    if check and result.returncode != 0:
        logger.debug("Command failed", operation=label, returncode=result.returncode)
        raise CommandFailedError(command, result.returncode, result.stderr)
    return result
