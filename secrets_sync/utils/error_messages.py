"""
Error message builder.

Actionable messages from a central catalog, each in "what / why / how to
fix" form. Every rendered field and every context dict is redacted before
it is returned; there is no unredacted fallback.
"""
from __future__ import annotations

import json
import re
from dataclasses import dataclass
from typing import Any, Dict, Optional

from secrets_sync.exceptions import (
    CommandFailedError,
    CommandTimeoutError,
    DependencyError,
    PermissionDeniedError,
)
from secrets_sync.security.redactor import Scrubber


RED = "\x1b[31m"
YELLOW = "\x1b[33m"
CYAN = "\x1b[36m"
RESET = "\x1b[0m"


ERROR_CATALOG: Dict[str, Dict[str, str]] = {
    "ERR_DEPENDENCY_MISSING": {
        "what": "Required dependency '{{dependency}}' was not found",
        "why": "{{reason}}",
        "how_to_fix": (
            "Install '{{dependency}}'{{#install_url}} from {{install_url}}{{/install_url}}"
            " and make sure it is on your PATH"
            "{{#install_command}}\nOr run: {{install_command}}{{/install_command}}"
        ),
    },
    "ERR_PERMISSION_READ": {
        "what": "Cannot read {{path}}",
        "why": "The current user lacks read permission on this file",
        "how_to_fix": "Fix permissions with: {{fix_command}}",
    },
    "ERR_PERMISSION_WRITE": {
        "what": "Cannot write {{path}}",
        "why": "The current user lacks write permission on this file or its directory",
        "how_to_fix": "Fix permissions with: {{fix_command}}",
    },
    "ERR_TIMEOUT": {
        "what": "Operation timed out after {{timeout_seconds}}s: {{operation}}",
        "why": "The remote secret store did not respond in time",
        "how_to_fix": "Check your network connection, or raise the limit: SECRETS_SYNC_TIMEOUT={{suggested_timeout}}",
    },
    "ERR_COMMAND_FAILED": {
        "what": "Command exited with status {{returncode}}: {{command}}",
        "why": "{{#stderr}}{{stderr}}{{/stderr}}",
        "how_to_fix": "Re-run the command by hand to see the full output, then retry the sync",
    },
    "ERR_CONFIG_INVALID": {
        "what": "Invalid configuration in {{path}}",
        "why": "{{reason}}",
        "how_to_fix": "Fix the file, or remove it to run with built-in defaults",
    },
}

_SECTION = re.compile(r"\{\{#(\w+)\}\}(.*?)\{\{/\1\}\}", re.DOTALL)
_PLACEHOLDER = re.compile(r"\{\{(\w+)\}\}")


@dataclass(frozen=True)
class ErrorMessage:
    what: str
    why: str
    how_to_fix: str


def _default_scrubber() -> Scrubber:
    from secrets_sync.bootstrap import get_output_guard
    return get_output_guard()


def interpolate(template: str, context: Dict[str, Any]) -> str:
    """
    Fill ``{{key}}`` placeholders. ``{{#key}}...{{/key}}`` sections render
    only when ``context[key]`` is truthy. Missing keys render empty.
    """
    result = _SECTION.sub(
        lambda m: interpolate(m.group(2), context) if context.get(m.group(1)) else "",
        template,
    )

    def _value(match: re.Match) -> str:
        value = context.get(match.group(1))
        return "" if value is None else str(value)

    return _PLACEHOLDER.sub(_value, result)


def get_message(code: str, context: Optional[Dict[str, Any]] = None) -> ErrorMessage:
    """
    Raises:
        KeyError: If ``code`` is not in the catalog
    """
    template = ERROR_CATALOG.get(code)
    if template is None:
        raise KeyError(f"Unknown error code: {code}")
    context = context or {}
    return ErrorMessage(
        what=interpolate(template["what"], context),
        why=interpolate(template["why"], context),
        how_to_fix=interpolate(template["how_to_fix"], context),
    )


def build_error_message(msg: ErrorMessage, scrubber: Optional[Scrubber] = None) -> str:
    scrubber = scrubber or _default_scrubber()
    lines = [
        f"{RED}❌ {scrubber.redact_text(msg.what)}{RESET}",
        f"   {scrubber.redact_text(msg.why)}",
        f"   {CYAN}{scrubber.redact_text(msg.how_to_fix)}{RESET}",
    ]
    return "\n".join(lines)


def format_context(context: Dict[str, Any], scrubber: Optional[Scrubber] = None) -> str:
    if not context:
        return ""
    scrubber = scrubber or _default_scrubber()
    body = json.dumps(scrubber.redact_value(context), indent=2, default=str)
    return f"\n   {YELLOW}Context:{RESET} " + body.replace("\n", "\n   ")


def format_dependency_error(error: DependencyError, scrubber: Optional[Scrubber] = None) -> str:
    msg = get_message("ERR_DEPENDENCY_MISSING", {
        "dependency": error.dependency,
        "reason": error.reason or f"secrets-sync calls '{error.dependency}' to talk to the remote secret store",
        "install_url": error.install_url,
        "install_command": error.install_command,
    })
    return build_error_message(msg, scrubber)


def format_permission_error(error: PermissionDeniedError, scrubber: Optional[Scrubber] = None) -> str:
    code = "ERR_PERMISSION_READ" if error.operation == "read" else "ERR_PERMISSION_WRITE"
    msg = get_message(code, {"path": error.path, "fix_command": error.fix_command})
    return build_error_message(msg, scrubber)


def format_timeout_error(error: CommandTimeoutError, scrubber: Optional[Scrubber] = None) -> str:
    msg = get_message("ERR_TIMEOUT", {
        "operation": error.operation,
        "timeout_seconds": round(error.timeout_ms / 1000),
        "suggested_timeout": error.timeout_ms * 2,
    })
    return build_error_message(msg, scrubber)


def format_command_error(error: CommandFailedError, scrubber: Optional[Scrubber] = None) -> str:
    msg = get_message("ERR_COMMAND_FAILED", {
        "command": " ".join(error.command),
        "returncode": error.returncode,
        "stderr": error.stderr.strip(),
    })
    return build_error_message(msg, scrubber)
