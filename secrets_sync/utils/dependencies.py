"""
Pre-flight validation of the tools secrets-sync shells out to.

Every check runs (no fail-fast) so the user sees all missing tools at once.
Results are cached per process by check name.
"""
from __future__ import annotations

import sys
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, Sequence, Tuple

from secrets_sync.exceptions import DependencyError, SecretsSyncError
from secrets_sync.monitoring.logger import get_logger
from secrets_sync.utils.timeout import exec_with_timeout

logger = get_logger(__name__)

GH_INSTALL_URL = "https://cli.github.com"
MIN_PYTHON_VERSION: Tuple[int, int] = (3, 10)

# `--version` and `auth status` answer instantly; a hung CLI counts as missing.
CHECK_TIMEOUT_MS = 10000


@dataclass(frozen=True)
class DependencyCheck:
    name: str
    check: Callable[[], bool]
    error_message: str
    install_url: Optional[str] = None
    install_command: Optional[str] = None


@dataclass
class ValidationResult:
    success: bool
    failures: List[DependencyCheck] = field(default_factory=list)


_validation_cache: Dict[str, bool] = {}


def clear_validation_cache() -> None:
    _validation_cache.clear()


def validate_dependencies(checks: Sequence[DependencyCheck]) -> ValidationResult:
    """
    Run every check and collect the failures.

    A check that raises counts as failed. Each result is cached under the
    check's name for the rest of the process.
    """
    failures = []
    for check in checks:
        passed = _validation_cache.get(check.name)
        if passed is None:
            try:
                passed = bool(check.check())
            except Exception as e:
                logger.debug("Dependency check raised", check=check.name, error=str(e))
                passed = False
            _validation_cache[check.name] = passed
        if not passed:
            failures.append(check)

    if failures:
        logger.info("Dependency checks failed", failed=[c.name for c in failures])
    return ValidationResult(success=not failures, failures=failures)


def to_dependency_error(check: DependencyCheck) -> DependencyError:
    return DependencyError(
        check.name,
        install_url=check.install_url,
        install_command=check.install_command,
        reason=check.error_message,
    )


def gh_install_command(platform: Optional[str] = None) -> str:
    """Platform-specific way to install the GitHub CLI."""
    platform = platform or sys.platform
    if platform == "darwin":
        return "brew install gh"
    if platform == "win32":
        return "winget install --id GitHub.cli"
    return f"See {GH_INSTALL_URL} for installation instructions"


def _gh_installed() -> bool:
    try:
        exec_with_timeout(
            ["gh", "--version"],
            timeout_ms=CHECK_TIMEOUT_MS,
            install_url=GH_INSTALL_URL,
            install_command=gh_install_command(),
        )
    except SecretsSyncError:
        return False
    return True


def _gh_authenticated() -> bool:
    # A missing gh is reported by the install check, not here
    if not _gh_installed():
        return True
    try:
        exec_with_timeout(["gh", "auth", "status"], timeout_ms=CHECK_TIMEOUT_MS)
    except SecretsSyncError:
        return False
    return True


def _python_recent_enough() -> bool:
    return tuple(sys.version_info[:2]) >= MIN_PYTHON_VERSION


gh_cli_check = DependencyCheck(
    name="gh-cli",
    check=_gh_installed,
    error_message="GitHub CLI (gh) not found",
    install_url=GH_INSTALL_URL,
    install_command=gh_install_command(),
)

gh_auth_check = DependencyCheck(
    name="gh-auth",
    check=_gh_authenticated,
    error_message="GitHub CLI not authenticated",
    install_command="gh auth login",
)

python_version_check = DependencyCheck(
    name="python-version",
    check=_python_recent_enough,
    error_message=(
        f"Python {sys.version_info.major}.{sys.version_info.minor} is too old "
        f"(requires >= {MIN_PYTHON_VERSION[0]}.{MIN_PYTHON_VERSION[1]})"
    ),
    install_url="https://www.python.org/downloads/",
)

DEFAULT_CHECKS: Tuple[DependencyCheck, ...] = (python_version_check, gh_cli_check, gh_auth_check)
