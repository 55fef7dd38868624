"""
Redactor service: text matcher + key classifier + structured scrubber + cache.

A process-wide default instance backs the module-level helpers. Its key
classifier starts with the built-ins and may be configured exactly once,
at startup, from the user's ``env-config.yml``.
"""
from __future__ import annotations

from typing import Any, Mapping, Optional, Protocol, runtime_checkable

from secrets_sync.security.cache import RedactionCache, hash_input
from secrets_sync.security.classifier import KeyClassification, KeyClassifier
from secrets_sync.security.patterns import (
    INPUT_TOO_LARGE,
    MAX_INPUT_LENGTH,
    SCRUBBING_FAILED,
    SECRET_PATTERNS,
    SecretPattern,
    apply_patterns,
)
from secrets_sync.security.scrubber import RecursionGuard, StructuredScrubber


@runtime_checkable
class Scrubber(Protocol):
    """
    Anything that can redact text and structured values.

    Implemented by ``Redactor`` and ``OutputGuard``. Logging and error
    formatting depend on this protocol so tests can pass a recording or
    no-op variant.
    """

    def redact_text(self, text: Any) -> Any: ...

    def redact_value(self, value: Any) -> Any: ...


class Redactor:
    """Redaction entry points sharing one classifier and one cache."""

    def __init__(
        self,
        classifier: Optional[KeyClassifier] = None,
        cache: Optional[RedactionCache] = None,
        patterns: tuple[SecretPattern, ...] = SECRET_PATTERNS,
    ):
        self._classifier = classifier or KeyClassifier()
        self._configured = classifier is not None
        self._cache = cache if cache is not None else RedactionCache()
        self._patterns = patterns
        self._scrubber = StructuredScrubber(self.redact_text, self._should_redact)

    @property
    def classifier(self) -> KeyClassifier:
        return self._classifier

    @property
    def configured(self) -> bool:
        return self._configured

    def configure(self, classifier: KeyClassifier) -> bool:
        """
        Install user patterns. Only the first call takes effect.

        Returns:
            True if the classifier was installed, False if already configured.
        """
        if self._configured:
            return False
        self._classifier = classifier
        self._configured = True
        # Results computed with the built-ins alone may now be stale.
        self._cache.clear()
        return True

    def _should_redact(self, name: Any) -> bool:
        return self._classifier.should_redact(name)

    def redact_text(self, text: Any) -> Any:
        """
        Redact secret-shaped substrings. Never raises.

        Non-string and empty input is returned unchanged. Oversized input
        and internal failures produce typed placeholders, never the input.
        """
        if not text or not isinstance(text, str):
            return text

        try:
            key = hash_input(text)
            cached = self._cache.get(key)
            if cached is not None:
                return cached

            if len(text) > MAX_INPUT_LENGTH:
                result = INPUT_TOO_LARGE
            else:
                result = apply_patterns(text, self._should_redact, self._patterns)

            self._cache.put(key, result)
            return result
        except Exception:
            return SCRUBBING_FAILED

    def redact_value(self, value: Any, guard: Optional[RecursionGuard] = None) -> Any:
        """Redacted copy of ``value``. Never raises."""
        return self._scrubber.scrub(value, guard)

    def is_secret_key(self, name: Any) -> bool:
        return self._classifier.is_secret_key(name)

    def is_whitelisted(self, name: Any) -> bool:
        return self._classifier.is_whitelisted(name)

    def classify_key(self, name: Any) -> KeyClassification:
        return self._classifier.classify(name)

    def clear_cache(self) -> None:
        self._cache.clear()

    @property
    def cache_size(self) -> int:
        return len(self._cache)


_default_redactor = Redactor()


def get_default_redactor() -> Redactor:
    return _default_redactor


def load_user_config(document: Optional[Mapping[str, Any]]) -> bool:
    """Feed a parsed ``env-config.yml`` into the process default classifier."""
    return _default_redactor.configure(KeyClassifier.from_document(document))


def redact_text(text: Any) -> Any:
    return _default_redactor.redact_text(text)


def redact_value(value: Any, guard: Optional[RecursionGuard] = None) -> Any:
    return _default_redactor.redact_value(value, guard)


def is_secret_key(name: Any) -> bool:
    return _default_redactor.is_secret_key(name)


def is_whitelisted(name: Any) -> bool:
    return _default_redactor.is_whitelisted(name)


def classify_key(name: Any) -> KeyClassification:
    return _default_redactor.classify_key(name)


def clear_cache() -> None:
    _default_redactor.clear_cache()


def cache_size() -> int:
    return _default_redactor.cache_size
