"""Schema lookup and caching.

Schemas are bound to content files by naming convention and compiled lazily
on first use. The cache is owned by a SchemaRegistry instance; there is no
process-wide state.
"""

from __future__ import annotations

import threading
import time
from dataclasses import dataclass
from typing import TYPE_CHECKING

import orjson

from jsoncms.exceptions import SchemaLoadError
from jsoncms.schema._compiler import Validator, compile_schema

if TYPE_CHECKING:
    from collections.abc import Callable

    from jsoncms.utils._paths import ContentRoot


@dataclass(frozen=True, slots=True)
class _CacheEntry:
    validator: Validator
    loaded_at: float


class SchemaRegistry:
    """Per-path cache of compiled schema validators.

    By default a cached schema is never invalidated: edits to a schema file
    on disk are not picked up until the process restarts or ``invalidate()``
    is called. Passing ``max_age`` makes entries expire after that many
    seconds as measured by ``clock``.

    Only schemas that exist are cached. A content path without a schema is
    looked up again on every validation, so adding a schema file takes
    effect immediately.

    Attributes:
        content_root: The content root that schema paths are derived from.
    """

    __slots__ = ("_cache", "_clock", "_lock", "_max_age", "content_root")

    def __init__(
        self,
        content_root: ContentRoot,
        *,
        clock: Callable[[], float] = time.monotonic,
        max_age: float | None = None,
    ) -> None:
        """Initialize an empty registry.

        Args:
            content_root: Content root used to locate schema files.
            clock: Monotonic time source used for expiry.
            max_age: Seconds after which a cached schema is reloaded, or None
                to keep schemas for the lifetime of the registry.
        """
        self.content_root = content_root
        self._clock = clock
        self._max_age = max_age
        self._cache: dict[str, _CacheEntry] = {}
        self._lock = threading.Lock()

    def get(self, content_path: str) -> Validator | None:
        """Return the compiled validator bound to a content path.

        Args:
            content_path: A normalized content path.

        Returns:
            The compiled Validator, or None when no schema file exists.

        Raises:
            SchemaLoadError: If the schema file cannot be read or compiled.
        """
        now = self._clock()
        with self._lock:
            entry = self._cache.get(content_path)
            if entry is not None and not self._expired(entry, now):
                return entry.validator

        schema_path = self.content_root.schema_path_for(content_path)
        if schema_path is None:
            return None

        try:
            raw = schema_path.read_bytes()
        except FileNotFoundError:
            return None
        except OSError as e:
            msg = f"Failed to read schema: {e}"
            raise SchemaLoadError(msg, schema_path=schema_path) from e

        try:
            validator = compile_schema(orjson.loads(raw))
        except orjson.JSONDecodeError as e:
            msg = f"Schema is not valid JSON: {e}"
            raise SchemaLoadError(msg, schema_path=schema_path) from e
        except ValueError as e:
            msg = f"Schema cannot be compiled: {e}"
            raise SchemaLoadError(msg, schema_path=schema_path) from e

        with self._lock:
            self._cache[content_path] = _CacheEntry(validator=validator, loaded_at=now)
        return validator

    def _expired(self, entry: _CacheEntry, now: float) -> bool:
        return self._max_age is not None and now - entry.loaded_at >= self._max_age

    def invalidate(self, content_path: str | None = None) -> None:
        """Drop cached schemas.

        Args:
            content_path: Drop only this path's schema, or every schema
                when None.
        """
        with self._lock:
            if content_path is None:
                self._cache.clear()
            else:
                _ = self._cache.pop(content_path, None)

    def __contains__(self, content_path: str) -> bool:
        with self._lock:
            return content_path in self._cache
