"""
Reader/writer lock for the image cache.

Any number of readers may hold the lock together; a writer holds it alone.
Waiting writers block new readers so a steady stream of list/get calls
cannot starve registrations.
"""
from __future__ import annotations

import threading
from typing import Optional

__all__ = ["ReadWriteLock"]


class ReadWriteLock:
    """
    Writer-preferring reader/writer lock built on ``threading.Condition``.

    All acquire methods take an optional timeout in seconds and return
    False instead of blocking forever when it elapses.
    """

    def __init__(self) -> None:
        self._cond = threading.Condition(threading.Lock())
        self._readers = 0
        self._writer = False
        self._writers_waiting = 0

    def acquire_read(self, timeout: Optional[float] = None) -> bool:
        with self._cond:
            acquired = self._cond.wait_for(
                lambda: not self._writer and self._writers_waiting == 0,
                timeout=timeout,
            )
            if acquired:
                self._readers += 1
            return acquired

    def release_read(self) -> None:
        with self._cond:
            if self._readers <= 0:
                raise RuntimeError("release_read called without a matching acquire_read")
            self._readers -= 1
            if self._readers == 0:
                self._cond.notify_all()

    def acquire_write(self, timeout: Optional[float] = None) -> bool:
        with self._cond:
            self._writers_waiting += 1
            try:
                acquired = self._cond.wait_for(
                    lambda: not self._writer and self._readers == 0,
                    timeout=timeout,
                )
            finally:
                self._writers_waiting -= 1
            if acquired:
                self._writer = True
            else:
                # Readers parked behind this writer may proceed again
                self._cond.notify_all()
            return acquired

    def release_write(self) -> None:
        with self._cond:
            if not self._writer:
                raise RuntimeError("release_write called without a matching acquire_write")
            self._writer = False
            self._cond.notify_all()

    @property
    def readers(self) -> int:
        return self._readers

    @property
    def write_locked(self) -> bool:
        return self._writer
