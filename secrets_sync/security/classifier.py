"""
Field-name classification: secret, whitelisted, or neither.

Built-in name sets are static. Users extend both sides with glob patterns
from ``env-config.yml``; a whitelist match always wins over a secret match.
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from fnmatch import fnmatchcase
from typing import TYPE_CHECKING, Any, Iterable, Mapping, Optional

if TYPE_CHECKING:
    from secrets_sync.config.config import EnvConfig


SECRET_KEYS = frozenset({
    "password", "passwd", "pwd",
    "secret", "api_key", "apikey", "api_secret",
    "token", "auth", "authorization", "auth_token",
    "private_key", "access_key", "secret_key",
    "database_url", "db_url", "db_password",
    "client_secret", "client_id",
    "aws_secret_access_key", "aws_access_key_id",
    "github_token", "gh_token",
    "stripe_secret_key", "stripe_api_key",
})

WHITELIST_KEYS = frozenset({
    "debug", "node_env", "port",
    "host", "hostname", "path",
    "log_level", "verbose",
    "secrets_sync_timeout",
})

SECRET_SUBSTRINGS = ("password", "secret", "token", "key")


class KeyClassification(Enum):
    SECRET = "secret"
    WHITELISTED = "whitelisted"
    UNCLASSIFIED = "unclassified"


def _matches_any(name: str, patterns: Iterable[str]) -> bool:
    lowered = name.lower()
    return any(fnmatchcase(lowered, pattern.lower()) for pattern in patterns)


@dataclass(frozen=True)
class KeyClassifier:
    """
    Case-insensitive classifier over built-in names plus user globs.

    Instances are immutable; the process default is replaced exactly once
    at startup (see ``Redactor.configure``).
    """
    scrub_patterns: tuple[str, ...] = ()
    whitelist_patterns: tuple[str, ...] = ()

    @classmethod
    def from_config(cls, config: EnvConfig) -> "KeyClassifier":
        return cls(
            scrub_patterns=tuple(config.scrubbing.scrub_patterns),
            whitelist_patterns=tuple(config.scrubbing.whitelist_patterns),
        )

    @classmethod
    def from_document(cls, document: Optional[Mapping[str, Any]]) -> "KeyClassifier":
        """
        Build from a parsed ``env-config.yml`` document.

        Anything malformed yields the built-ins only.
        """
        # pydantic loads here, not when the guard is imported
        from secrets_sync.config.config import parse_env_config

        return cls.from_config(parse_env_config(document))

    def is_secret_key(self, name: Any) -> bool:
        if not name or not isinstance(name, str):
            return False
        lowered = name.lower()
        if lowered in SECRET_KEYS:
            return True
        if _matches_any(name, self.scrub_patterns):
            return True
        return any(fragment in lowered for fragment in SECRET_SUBSTRINGS)

    def is_whitelisted(self, name: Any) -> bool:
        if not name or not isinstance(name, str):
            return False
        if name.lower() in WHITELIST_KEYS:
            return True
        return _matches_any(name, self.whitelist_patterns)

    def should_redact(self, name: Any) -> bool:
        """Secret and not whitelisted."""
        return self.is_secret_key(name) and not self.is_whitelisted(name)

    def classify(self, name: Any) -> KeyClassification:
        if self.is_whitelisted(name):
            return KeyClassification.WHITELISTED
        if self.is_secret_key(name):
            return KeyClassification.SECRET
        return KeyClassification.UNCLASSIFIED
