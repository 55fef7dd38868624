"""
Log redaction helpers.

Designed for structlog: a processor for event dicts and a logger proxy
that redacts whatever reaches the underlying logger.
"""

from __future__ import annotations

from typing import Any, Callable

from secrets_sync.security.redactor import Scrubber


# Control arguments of stdlib logger methods; their values are not log content.
PASSTHROUGH_KWARGS = ("exc_info", "stack_info", "stacklevel")


def make_redaction_processor(scrubber: Scrubber) -> Callable[[Any, str, dict], dict]:
    """
    Structlog processor: redact the whole event dict.

    Secret-named keys become the placeholder; every string value (the event
    message included) goes through the text redactor.
    """

    def structlog_redaction_processor(_logger: Any, _method_name: str, event_dict: dict) -> dict:
        redacted = scrubber.redact_value(event_dict)
        if not isinstance(redacted, dict):
            # Scrubbing failed for the dict as a whole; keep only the marker.
            return {"event": redacted}
        return redacted

    return structlog_redaction_processor


class RedactingLogger:
    """
    Proxy that redacts arguments to any callable on the wrapped logger.

    Attributes are resolved dynamically, so methods added to the wrapped
    logger later are covered without listing them here.
    """

    def __init__(self, logger: Any, scrubber: Scrubber):
        self._logger = logger
        self._scrubber = scrubber

    @property
    def wrapped(self) -> Any:
        return self._logger

    def _redact(self, value: Any) -> Any:
        if isinstance(value, str):
            return self._scrubber.redact_text(value)
        return self._scrubber.redact_value(value)

    def __getattr__(self, name: str) -> Any:
        attr = getattr(self._logger, name)
        if not callable(attr):
            return attr

        def redacted_call(*args: Any, **kwargs: Any) -> Any:
            args = tuple(self._redact(arg) for arg in args)
            passthrough = {key: kwargs.pop(key) for key in PASSTHROUGH_KWARGS if key in kwargs}
            redacted_kwargs = self._scrubber.redact_value(kwargs) if kwargs else {}
            if not isinstance(redacted_kwargs, dict):
                redacted_kwargs = {}
            return attr(*args, **redacted_kwargs, **passthrough)

        redacted_call.__name__ = name
        return redacted_call
