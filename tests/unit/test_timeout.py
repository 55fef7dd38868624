"""
Bounded subprocess calls: timeout, non-zero exit, missing executable.
"""
import sys

import pytest

from secrets_sync.exceptions import CommandFailedError, CommandTimeoutError, DependencyError
from secrets_sync.utils.timeout import exec_with_timeout, get_timeout


def test_captures_output():
    result = exec_with_timeout([sys.executable, "-c", "print('ok')"], timeout_ms=10000)
    assert result.stdout.strip() == "ok"
    assert result.returncode == 0


def test_secret_passed_on_stdin():
    code = "import sys; print(len(sys.stdin.read()))"
    result = exec_with_timeout([sys.executable, "-c", code], input_text="s3cr3t", timeout_ms=10000)
    assert result.stdout.strip() == "6"


def test_timeout_raises():
    with pytest.raises(CommandTimeoutError) as exc_info:
        exec_with_timeout(
            [sys.executable, "-c", "import time; time.sleep(5)"],
            timeout_ms=200,
            operation="Fetch secrets",
        )
    assert exc_info.value.timeout_ms == 200
    assert exc_info.value.operation == "Fetch secrets"


def test_non_zero_exit_raises():
    code = "import sys; sys.stderr.write('denied'); sys.exit(3)"
    with pytest.raises(CommandFailedError) as exc_info:
        exec_with_timeout([sys.executable, "-c", code], timeout_ms=10000)
    assert exc_info.value.returncode == 3
    assert exc_info.value.stderr == "denied"


def test_non_zero_exit_returned_when_unchecked():
    result = exec_with_timeout([sys.executable, "-c", "raise SystemExit(2)"], timeout_ms=10000, check=False)
    assert result.returncode == 2


def test_missing_executable_is_dependency_error():
    with pytest.raises(DependencyError) as exc_info:
        exec_with_timeout(["secrets-sync-no-such-binary"], timeout_ms=1000)
    assert exc_info.value.dependency == "secrets-sync-no-such-binary"


def test_get_timeout_from_env(monkeypatch):
    monkeypatch.setenv("SECRETS_SYNC_TIMEOUT", "45000")
    assert get_timeout() == 45000
    monkeypatch.setenv("SECRETS_SYNC_TIMEOUT", "not-a-number")
    assert get_timeout() == 30000


def test_missing_executable_carries_install_info():
    with pytest.raises(DependencyError) as exc_info:
        exec_with_timeout(
            ["secrets-sync-no-such-binary"],
            timeout_ms=1000,
            install_url="https://example.com/install",
            install_command="brew install no-such-binary",
        )
    assert exc_info.value.install_url == "https://example.com/install"
    assert exc_info.value.install_command == "brew install no-such-binary"
