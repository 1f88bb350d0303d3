"""Thread synchronization primitives.

KeyedLock serializes work per key in arrival order. ReadWriteLock lets
readers share access while writers are exclusive.
"""

from __future__ import annotations

import threading
from contextlib import contextmanager
from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterator


@dataclass(slots=True)
class _Slot:
    condition: threading.Condition
    next_ticket: int = 0
    serving: int = 0
    pending: int = 0


class KeyedLock:
    """Mutual exclusion per key with first-come, first-served ordering.

    Holders of different keys never wait on each other. Waiters on the same
    key are admitted strictly in the order they arrived. Idle keys are
    discarded, so the lock does not grow with the number of keys ever used.

    Example:
        >>> locks = KeyedLock()
        >>> with locks.hold("pages/home.json"):
        ...     pass
    """

    __slots__ = ("_guard", "_slots")

    def __init__(self) -> None:
        self._guard = threading.Lock()
        self._slots: dict[str, _Slot] = {}

    @contextmanager
    def hold(self, key: str) -> Iterator[None]:
        """Hold the lock for ``key`` for the duration of the block."""
        with self._guard:
            slot = self._slots.get(key)
            if slot is None:
                slot = _Slot(condition=threading.Condition(self._guard))
                self._slots[key] = slot
            ticket = slot.next_ticket
            slot.next_ticket += 1
            slot.pending += 1
            while slot.serving != ticket:
                _ = slot.condition.wait()

        try:
            yield
        finally:
            with self._guard:
                slot.serving += 1
                slot.pending -= 1
                if slot.pending == 0:
                    del self._slots[key]
                else:
                    slot.condition.notify_all()

    def is_held(self, key: str) -> bool:
        """Return True if ``key`` is held or waited on."""
        with self._guard:
            return key in self._slots


class ReadWriteLock:
    """Shared/exclusive lock that prefers waiting writers.

    Not reentrant: a thread holding either side must not acquire again.
    """

    __slots__ = ("_cond", "_readers", "_waiting_writers", "_writer")

    def __init__(self) -> None:
        self._cond = threading.Condition(threading.Lock())
        self._readers = 0
        self._writer = False
        self._waiting_writers = 0

    @contextmanager
    def read(self) -> Iterator[None]:
        """Hold shared access for the duration of the block."""
        with self._cond:
            while self._writer or self._waiting_writers:
                _ = self._cond.wait()
            self._readers += 1
        try:
            yield
        finally:
            with self._cond:
                self._readers -= 1
                if self._readers == 0:
                    self._cond.notify_all()

    @contextmanager
    def write(self) -> Iterator[None]:
        """Hold exclusive access for the duration of the block."""
        with self._cond:
            self._waiting_writers += 1
            try:
                while self._writer or self._readers:
                    _ = self._cond.wait()
            finally:
                self._waiting_writers -= 1
            self._writer = True
        try:
            yield
        finally:
            with self._cond:
                self._writer = False
                self._cond.notify_all()
