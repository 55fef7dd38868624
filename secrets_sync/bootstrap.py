"""
Output guard: process-wide interception of every output sink.

SECURITY: ``install()`` MUST be the first statement the process executes,
before importing any other module (third-party ones included) that might
print or log during its own import.

    from secrets_sync.bootstrap import install
    install()

Installation:
1. Replaces ``sys.stdout`` / ``sys.stderr`` (and their ``.buffer``) with
   redacting wrappers.
2. Installs a log-record factory so every message and argument passed to
   any ``logging.Logger`` method is redacted before a handler sees it.
3. Loads ``env-config.yml`` / ``env-config.yaml`` from the working directory
   so user patterns are active before the caller continues. The config
   layer (pydantic, PyYAML) is imported only at this point. Failures are
   ignored; built-in patterns still apply.

There is no uninstall. The guard lives until the process exits.
"""
from __future__ import annotations

import logging
import sys
from collections.abc import Mapping
from enum import Enum
from pathlib import Path
from typing import Any, Callable, Iterable, Optional

from secrets_sync.security.classifier import KeyClassifier
from secrets_sync.security.redactor import Redactor, get_default_redactor


class GuardState(Enum):
    UNINSTALLED = "uninstalled"
    INSTALLED = "installed"


class RedactingBinaryStream:
    """
    Byte-stream wrapper. Payloads are redacted only when they are valid
    UTF-8 that round-trips losslessly; anything else passes through so
    binary output is never corrupted.
    """

    def __init__(self, raw: Any, redact_text: Callable[[str], str]):
        self._raw = raw
        self._redact_text = redact_text

    def write(self, data: Any) -> int:
        if isinstance(data, (bytes, bytearray, memoryview)):
            original = bytes(data)
            try:
                text = original.decode("utf-8")
            except UnicodeDecodeError:
                text = None
            if text is not None and text.encode("utf-8") == original:
                data = self._redact_text(text).encode("utf-8")
            self._raw.write(data)
            return len(original)
        return self._raw.write(data)

    def writelines(self, lines: Iterable[Any]) -> None:
        for line in lines:
            self.write(line)

    def __getattr__(self, name: str) -> Any:
        return getattr(self._raw, name)


class RedactingStream:
    """
    Text-stream wrapper. Every ``str`` payload is redacted before it reaches
    the wrapped stream; every other attribute is forwarded unchanged.
    """

    def __init__(self, stream: Any, redact_text: Callable[[str], str]):
        self._stream = stream
        self._redact_text = redact_text
        self._buffer: Optional[RedactingBinaryStream] = None

    @property
    def wrapped(self) -> Any:
        return self._stream

    @property
    def buffer(self) -> RedactingBinaryStream:
        if self._buffer is None:
            self._buffer = RedactingBinaryStream(self._stream.buffer, self._redact_text)
        return self._buffer

    def write(self, s: Any) -> int:
        if isinstance(s, str):
            self._stream.write(self._redact_text(s))
            return len(s)
        return self._stream.write(s)

    def writelines(self, lines: Iterable[Any]) -> None:
        for line in lines:
            self.write(line)

    def __getattr__(self, name: str) -> Any:
        return getattr(self._stream, name)


class OutputGuard:
    """
    Singleton owner of the interception state.

    Satisfies the ``Scrubber`` protocol, so logging and error formatting
    can take it as a dependency.
    """

    def __init__(self, redactor: Optional[Redactor] = None, config_dir: Optional[Path] = None):
        self._redactor = redactor or get_default_redactor()
        self._config_dir = config_dir
        self._state = GuardState.UNINSTALLED

    @property
    def state(self) -> GuardState:
        return self._state

    @property
    def installed(self) -> bool:
        return self._state is GuardState.INSTALLED

    @property
    def redactor(self) -> Redactor:
        return self._redactor

    def redact_text(self, text: Any) -> Any:
        return self._redactor.redact_text(text)

    def redact_value(self, value: Any) -> Any:
        return self._redactor.redact_value(value)

    def install(self) -> None:
        """Idempotent. Never raises."""
        if self._state is GuardState.INSTALLED:
            return
        self._state = GuardState.INSTALLED

        try:
            self._wrap_standard_streams()
        except Exception:
            pass
        try:
            self._wrap_logging()
        except Exception:
            pass
        try:
            self._load_user_patterns()
        except Exception:
            pass  # optional file; built-ins still apply

    def _load_user_patterns(self) -> None:
        # Imported after the sinks are wrapped: pydantic and PyYAML are
        # third-party and must not run first.
        from secrets_sync.config.config import load_env_config

        config = load_env_config(self._config_dir)
        if config is not None:
            self._redactor.configure(KeyClassifier.from_config(config))

    def _wrap_standard_streams(self) -> None:
        for name in ("stdout", "stderr"):
            stream = getattr(sys, name, None)
            if stream is None or isinstance(stream, RedactingStream):
                continue
            setattr(sys, name, RedactingStream(stream, self.redact_text))

    def _wrap_logging(self) -> None:
        original_factory = logging.getLogRecordFactory()
        if getattr(original_factory, "_redacting", False):
            return

        def redacting_factory(*args: Any, **kwargs: Any) -> logging.LogRecord:
            record = original_factory(*args, **kwargs)
            self.redact_record(record)
            return record

        redacting_factory._redacting = True  # type: ignore[attr-defined]
        logging.setLogRecordFactory(redacting_factory)

    def _redact_argument(self, arg: Any) -> Any:
        if isinstance(arg, str):
            return self.redact_text(arg)
        return self.redact_value(arg)

    def redact_record(self, record: logging.LogRecord) -> None:
        """
        Redact a log record in place.

        Arguments are redacted individually, then the formatted message is
        redacted as a whole so a template like ``"TOKEN=%s"`` cannot leak
        its argument. Exception and stack text are pre-rendered redacted.
        """
        if not isinstance(record.msg, str):
            record.msg = self.redact_value(record.msg)

        args = record.args
        if isinstance(args, Mapping):
            record.args = self.redact_value(args)
        elif isinstance(args, tuple):
            record.args = tuple(self._redact_argument(arg) for arg in args)

        try:
            message = record.getMessage()
        except Exception:
            # Leave args in place; logging reports the format error itself.
            record.msg = self.redact_text(record.msg)
        else:
            record.msg = self.redact_text(message)
            record.args = None

        if record.exc_info and not record.exc_text:
            record.exc_text = self.redact_text(
                logging.Formatter().formatException(record.exc_info)
            )
        elif record.exc_text:
            record.exc_text = self.redact_text(record.exc_text)
        if record.stack_info:
            record.stack_info = self.redact_text(record.stack_info)


_output_guard = OutputGuard()


def get_output_guard() -> OutputGuard:
    return _output_guard


def install() -> None:
    """Install the process-wide output guard. Call first; safe to call again."""
    _output_guard.install()
