"""
Shared CLI output helpers for fatal error reporting.

Output is redacted here as well as by the stream guard, so these helpers
stay safe when called before ``install()`` or with a substituted stream.
"""
from __future__ import annotations

import sys
import traceback
from typing import Optional

from secrets_sync.exceptions import (
    CommandFailedError,
    CommandTimeoutError,
    DependencyError,
    PermissionDeniedError,
    SecretsSyncError,
)
from secrets_sync.security.redactor import Scrubber
from secrets_sync.utils import error_messages


def _scrubber(scrubber: Optional[Scrubber]) -> Scrubber:
    if scrubber is not None:
        return scrubber
    from secrets_sync.bootstrap import get_output_guard
    return get_output_guard()


def print_critical_error(
    title: str,
    error: BaseException,
    *,
    include_type: bool = True,
    scrubber: Optional[Scrubber] = None,
) -> None:
    scrubber = _scrubber(scrubber)
    redact = scrubber.redact_text
    print("=" * 80, file=sys.stderr)
    print(f"CRITICAL ERROR - {redact(title)}", file=sys.stderr)
    print("=" * 80, file=sys.stderr)
    print(f"Error: {redact(str(error))}", file=sys.stderr)
    if include_type:
        print(f"Type: {type(error).__name__}", file=sys.stderr)
    tb = "".join(traceback.format_exception(type(error), error, error.__traceback__))
    print(redact(tb), file=sys.stderr, end="")
    print("=" * 80, file=sys.stderr)


def format_error(error: SecretsSyncError, scrubber: Optional[Scrubber] = None) -> str:
    """Actionable, redacted message for a known error type."""
    scrubber = _scrubber(scrubber)
    if isinstance(error, DependencyError):
        text = error_messages.format_dependency_error(error, scrubber)
    elif isinstance(error, PermissionDeniedError):
        text = error_messages.format_permission_error(error, scrubber)
    elif isinstance(error, CommandTimeoutError):
        text = error_messages.format_timeout_error(error, scrubber)
    elif isinstance(error, CommandFailedError):
        text = error_messages.format_command_error(error, scrubber)
    else:
        text = f"{error_messages.RED}❌ {scrubber.redact_text(str(error))}{error_messages.RESET}"
    return text + error_messages.format_context(error.context, scrubber)
