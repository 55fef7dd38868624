"""
Pytest configuration and shared fixtures.
"""
import os
import subprocess
import sys
import textwrap
from pathlib import Path

import pytest

from secrets_sync.security import KeyClassifier, Redactor, clear_cache
from secrets_sync.utils.dependencies import clear_validation_cache


REPO_ROOT = Path(__file__).resolve().parent.parent


class RecordingScrubber:
    """Scrubber double: records every call, redacts nothing."""

    def __init__(self):
        self.texts = []
        self.values = []

    def redact_text(self, text):
        self.texts.append(text)
        return text

    def redact_value(self, value):
        self.values.append(value)
        return value


@pytest.fixture(autouse=True)
def _clear_default_cache():
    """Each test starts and ends with empty process-wide caches."""
    clear_cache()
    clear_validation_cache()
    yield
    clear_cache()
    clear_validation_cache()


@pytest.fixture
def redactor():
    """Fresh redactor with built-in patterns only."""
    return Redactor()


@pytest.fixture
def whitelist_redactor():
    """Redactor configured like an env-config.yml with `*_VALUE` whitelisted."""
    return Redactor(KeyClassifier(scrub_patterns=("CUSTOM_*",), whitelist_patterns=("*_VALUE",)))


@pytest.fixture
def recording_scrubber():
    return RecordingScrubber()


@pytest.fixture
def run_python(tmp_path):
    """
    Run a snippet in a fresh interpreter with cwd=tmp_path.

    Process-level behaviour (install as first statement, env-config.yml
    discovery) can only be observed from a clean process.
    """

    def _run(code: str, cwd: Path = tmp_path, extra_path: Path | None = None):
        env = dict(os.environ)
        paths = [str(REPO_ROOT)]
        if extra_path is not None:
            paths.insert(0, str(extra_path))
        env["PYTHONPATH"] = os.pathsep.join(paths)
        return subprocess.run(
            [sys.executable, "-c", textwrap.dedent(code).strip()],
            cwd=str(cwd),
            env=env,
            capture_output=True,
            text=True,
            timeout=60,
        )

    return _run
