"""Test doubles for the quote provider and the clock."""

from __future__ import annotations

import threading
from datetime import datetime, timedelta, timezone


class ManualClock:
    def __init__(self, start: datetime | None = None):
        self.now = start or datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, minutes: float = 0, seconds: float = 0) -> None:
        self.now = self.now + timedelta(minutes=minutes, seconds=seconds)


class FakeProvider:
    """
    Stands in for the upstream quote call.

    Hands out queued values in order, repeating the last one; exceptions in the
    queue are raised instead of returned. hold() makes calls block until
    release is set, which is how tests keep a refresh in flight.
    """

    def __init__(self, *values):
        self.values = list(values)
        self.calls = 0
        self.entered = threading.Event()
        self.release = threading.Event()
        self.release.set()
        self._lock = threading.Lock()

    def hold(self) -> None:
        self.release.clear()

    def __call__(self):
        with self._lock:
            self.calls += 1
            value = self.values.pop(0) if len(self.values) > 1 else self.values[0]
        self.entered.set()
        self.release.wait(timeout=5)
        if isinstance(value, BaseException):
            raise value
        return value
