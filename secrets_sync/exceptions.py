"""
Custom exception hierarchy for secrets-sync.

Provides clear, specific exceptions carrying the context needed to build
an actionable "what / why / how to fix" message (see
``secrets_sync.utils.error_messages``).

Hierarchy:

    SecretsSyncError (base, carries ``context``)
    ├── DependencyError      : required CLI tool missing
    ├── PermissionDeniedError: file cannot be read or written
    ├── CommandTimeoutError  : remote-store CLI exceeded the timeout
    ├── CommandFailedError   : remote-store CLI exited non-zero
    └── ValidationError      : bad input or configuration

The redaction core never raises any of these: its failures are reported as
placeholder values. These are for the surrounding tool.
"""
from typing import Any, Dict, Optional, Sequence


class SecretsSyncError(Exception):
    """Base exception for all secrets-sync errors."""

    def __init__(self, message: str, context: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.context: Dict[str, Any] = dict(context or {})


class DependencyError(SecretsSyncError):
    """Raised when a required dependency (e.g. the remote-store CLI) is missing."""

    def __init__(
        self,
        dependency: str,
        install_url: Optional[str] = None,
        install_command: Optional[str] = None,
        reason: Optional[str] = None,
    ):
        super().__init__(f"Missing dependency: {dependency}")
        self.dependency = dependency
        self.install_url = install_url
        self.install_command = install_command
        self.reason = reason


class PermissionDeniedError(SecretsSyncError):
    """Raised when a file operation fails due to insufficient permissions."""

    def __init__(self, path: str, operation: str, fix_command: str):
        if operation not in ("read", "write"):
            raise ValueError(f"operation must be 'read' or 'write', got {operation!r}")
        super().__init__(f"Permission denied: cannot {operation} {path}")
        self.path = path
        self.operation = operation
        self.fix_command = fix_command


class CommandTimeoutError(SecretsSyncError):
    """Raised when an operation exceeds its timeout. Not retried."""

    def __init__(self, operation: str, timeout_ms: int):
        super().__init__(f"Operation timed out after {timeout_ms}ms: {operation}")
        self.operation = operation
        self.timeout_ms = timeout_ms


class CommandFailedError(SecretsSyncError):
    """Raised when an external command exits with a non-zero status."""

    def __init__(self, command: Sequence[str], returncode: int, stderr: str = ""):
        super().__init__(
            f"Command failed with exit code {returncode}: {' '.join(command)}",
            context={"returncode": returncode},
        )
        self.command = list(command)
        self.returncode = returncode
        self.stderr = stderr


class ValidationError(SecretsSyncError):
    """Raised when validation fails. ``field``/``value`` name the culprit."""

    def __init__(self, message: str, field: Optional[str] = None, value: Any = None):
        super().__init__(message, context={"field": field} if field else None)
        self.field = field
        self.value = value
