# backend/app/locks/clock.py
from __future__ import annotations
import threading
from datetime import datetime, timedelta, timezone
from typing import Protocol


class Clock(Protocol):
    def now(self) -> datetime: ...


class SystemClock:
    def now(self) -> datetime:
        return datetime.now(timezone.utc)


class ManualClock:
    """테스트용: advance/set 으로만 시간이 흐른다."""

    def __init__(self, start: datetime | None = None) -> None:
        start = start or datetime(2025, 1, 1, tzinfo=timezone.utc)
        if start.tzinfo is None:
            start = start.replace(tzinfo=timezone.utc)
        self._now = start
        self._mutex = threading.Lock()

    def now(self) -> datetime:
        with self._mutex:
            return self._now

    def advance(
        self, delta: timedelta | None = None, *, milliseconds: int = 0, seconds: float = 0
    ) -> datetime:
        step = (delta or timedelta()) + timedelta(milliseconds=milliseconds, seconds=seconds)
        if step < timedelta():
            raise ValueError("clock cannot move backwards")
        with self._mutex:
            self._now += step
            return self._now

    def set(self, when: datetime) -> None:
        if when.tzinfo is None:
            when = when.replace(tzinfo=timezone.utc)
        with self._mutex:
            self._now = when
