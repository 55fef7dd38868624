"""
Structured-value scrubbing.

Walks heterogeneous, possibly cyclic values and returns a redacted copy.
Strings go through the text redactor; mapping keys and object attribute
names go through the key classifier.

Only the closed set in ``OPAQUE_BUILTINS`` is passed through untouched.
Anything else, user-defined classes included, is walked field by field.
"""
from __future__ import annotations

import asyncio
import concurrent.futures
import datetime
import re
import types
import uuid
import weakref
from collections.abc import Mapping
from decimal import Decimal
from fractions import Fraction
from pathlib import PurePath
from typing import Any, Callable, Iterator, Optional

from secrets_sync.security.patterns import CIRCULAR, REDACTED, SCRUBBING_FAILED


PRIMITIVES = (type(None), bool, int, float, complex, Decimal, Fraction, uuid.UUID)

# Closed allow-list, matched on exact type. Subclasses are user-defined and
# get walked like any other object. Do not replace with a "not a plain
# object" test.
OPAQUE_BUILTINS = (
    # timestamps
    datetime.datetime, datetime.date, datetime.time, datetime.timedelta, datetime.timezone,
    # byte buffers
    bytes, bytearray, memoryview,
    # hash sets
    set, frozenset,
    # weak references
    weakref.ref, weakref.WeakSet, weakref.WeakKeyDictionary, weakref.WeakValueDictionary,
    # pending computations
    concurrent.futures.Future, asyncio.Future, asyncio.Task,
    types.CoroutineType, types.GeneratorType, types.AsyncGeneratorType,
    # compiled patterns
    re.Pattern,
)

# Rendered through str() rather than walked.
_FIELDLESS = (
    type, types.ModuleType, types.FunctionType, types.BuiltinFunctionType,
    types.MethodType,
)

_MISSING = object()


class RecursionGuard:
    """
    Identity set of containers on the active call path.

    Tracks "currently being walked", not "ever seen": a container is
    removed once its walk returns, so shared non-cyclic references are
    redacted again at every position they appear.
    """

    def __init__(self) -> None:
        self._active: set[int] = set()

    def __contains__(self, obj: object) -> bool:
        return id(obj) in self._active

    def enter(self, obj: object) -> None:
        self._active.add(id(obj))

    def exit(self, obj: object) -> None:
        self._active.discard(id(obj))

    def __len__(self) -> int:
        return len(self._active)


def is_opaque_builtin(value: Any) -> bool:
    """
    True only for the exact allow-listed types and for exceptions defined in
    ``builtins`` (``ValueError``, ``OSError``...) that carry no extra
    attributes. Custom exception classes, and built-in ones with attributes
    attached, may hold secrets and are scrubbed.
    """
    cls = type(value)
    if cls in OPAQUE_BUILTINS:
        return True
    return (
        isinstance(value, BaseException)
        and cls.__module__ == "builtins"
        and not getattr(value, "__dict__", None)
    )


def _is_primitive(value: Any) -> bool:
    if type(value) in PRIMITIVES:
        return True
    # A scalar subclass without instance attributes has nothing to leak
    return isinstance(value, PRIMITIVES) and not getattr(value, "__dict__", None)


def _slot_names(cls: type) -> Iterator[str]:
    for klass in cls.__mro__:
        slots = klass.__dict__.get("__slots__", ())
        if isinstance(slots, str):
            slots = (slots,)
        for name in slots:
            if name not in ("__dict__", "__weakref__"):
                yield name


class StructuredScrubber:
    """
    Recursive redaction of containers and records.

    Args:
        redact_text: text redactor (never raises)
        should_redact_key: True when a field name is secret and not whitelisted
    """

    def __init__(
        self,
        redact_text: Callable[[str], str],
        should_redact_key: Callable[[Any], bool],
    ):
        self._redact_text = redact_text
        self._should_redact_key = should_redact_key

    def scrub(self, value: Any, guard: Optional[RecursionGuard] = None) -> Any:
        if guard is None:
            guard = RecursionGuard()
        try:
            return self._scrub(value, guard)
        except Exception:
            return SCRUBBING_FAILED

    def _scrub(self, value: Any, guard: RecursionGuard) -> Any:
        if isinstance(value, str):
            return self._redact_text(value)
        if _is_primitive(value):
            return value
        if isinstance(value, PurePath):
            return type(value)(self._redact_text(str(value)))
        if is_opaque_builtin(value):
            return value
        if isinstance(value, _FIELDLESS):
            return self._redact_text(str(value))

        if value in guard:
            return CIRCULAR

        guard.enter(value)
        try:
            if isinstance(value, (list, tuple)):
                return self._scrub_sequence(value, guard)
            if isinstance(value, Mapping):
                return self._scrub_mapping(value, guard)
            return self._scrub_instance(value, guard)
        finally:
            guard.exit(value)

    def _scrub_member(self, value: Any, guard: RecursionGuard) -> Any:
        try:
            return self._scrub(value, guard)
        except Exception:
            return SCRUBBING_FAILED

    def _scrub_sequence(self, value: Any, guard: RecursionGuard) -> Any:
        items = [self._scrub_member(item, guard) for item in value]
        if isinstance(value, list):
            return items
        if hasattr(type(value), "_make"):
            return type(value)._make(items)
        return tuple(items)

    def _scrub_mapping(self, value: Mapping, guard: RecursionGuard) -> dict:
        scrubbed = {}
        for key in value:
            if self._should_redact_key(key):
                scrubbed[key] = REDACTED
            else:
                scrubbed[key] = self._scrub_member(value[key], guard)
        return scrubbed

    def _scrub_instance(self, value: Any, guard: RecursionGuard) -> Any:
        scrubbed = {}
        fields = getattr(value, "__dict__", None)
        if isinstance(fields, Mapping):
            for name in list(fields):
                if self._should_redact_key(name):
                    scrubbed[name] = REDACTED
                else:
                    scrubbed[name] = self._scrub_member(fields[name], guard)

        for name in _slot_names(type(value)):
            if name in scrubbed:
                continue
            if self._should_redact_key(name):
                scrubbed[name] = REDACTED
                continue
            field_value = getattr(value, name, _MISSING)
            if field_value is not _MISSING:
                scrubbed[name] = self._scrub_member(field_value, guard)

        if not scrubbed:
            return self._redact_text(str(value))
        return scrubbed
