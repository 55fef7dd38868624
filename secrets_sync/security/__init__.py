"""
Security - output redaction for secrets hygiene.

Provides:
- redact_text / redact_value: scrub secret-shaped text and structures
- is_secret_key / is_whitelisted / classify_key: field-name classification
- clear_cache: reset the per-run redaction memo
- Redactor / KeyClassifier: injectable instances for tests and callers
  that need their own configuration
"""

from .cache import RedactionCache
from .classifier import KeyClassification, KeyClassifier
from .patterns import (
    CIRCULAR,
    INPUT_TOO_LARGE,
    MAX_INPUT_LENGTH,
    REDACTED,
    REDACTED_JWT,
    REDACTED_PRIVATE_KEY,
    SCRUBBING_FAILED,
    PatternKind,
    SecretPattern,
)
from .redactor import (
    Redactor,
    Scrubber,
    cache_size,
    classify_key,
    clear_cache,
    get_default_redactor,
    is_secret_key,
    is_whitelisted,
    load_user_config,
    redact_text,
    redact_value,
)
from .scrubber import OPAQUE_BUILTINS, RecursionGuard


__all__ = [
    # Placeholders
    "CIRCULAR",
    "INPUT_TOO_LARGE",
    "MAX_INPUT_LENGTH",
    "REDACTED",
    "REDACTED_JWT",
    "REDACTED_PRIVATE_KEY",
    "SCRUBBING_FAILED",
    # Types
    "KeyClassification",
    "KeyClassifier",
    "OPAQUE_BUILTINS",
    "PatternKind",
    "RecursionGuard",
    "RedactionCache",
    "Redactor",
    "Scrubber",
    "SecretPattern",
    # Process default
    "cache_size",
    "classify_key",
    "clear_cache",
    "get_default_redactor",
    "is_secret_key",
    "is_whitelisted",
    "load_user_config",
    "redact_text",
    "redact_value",
]
