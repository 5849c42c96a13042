# backend/app/locks/sweeper.py
from __future__ import annotations
import logging
import threading
from typing import Optional
from .clock import Clock, SystemClock
from .errors import LockError
from .models import LockCondition, Result
from .store import LockStore

logger = logging.getLogger(__name__)


class StaleLockSweeper:
    """만료된 잠금 정리. 필요하면 백그라운드 스레드로 주기 실행."""

    def __init__(self, store: LockStore, clock: Optional[Clock] = None) -> None:
        self.store = store
        self.clock = clock or SystemClock()
        self._thread: Optional[threading.Thread] = None
        self._stop = threading.Event()
        self._state = threading.Lock()

    def cleanup(self) -> Result[int]:
        """expires_at <= now 인 레코드를 지우고 지운 개수를 반환."""
        try:
            now = self.clock.now()
            # owner 없이 stale 조건만: 그 사이 다시 잡힌 잠금은 지우지 않는다
            stale_only = LockCondition(owner_id=None, stale_before=now - self.store.ttl)
            removed = 0
            for rid in self.store.scan_expired(now):
                if self.store.delete(rid, stale_only):
                    removed += 1
        except LockError as e:
            logger.exception("stale lock cleanup failed: %s", e.message)
            return Result.fail(e)
        if removed:
            logger.info("cleaned up %d stale locks", removed)
        return Result.ok(removed)

    @property
    def running(self) -> bool:
        with self._state:
            return self._thread is not None and self._thread.is_alive()

    def start(self, interval_seconds: float) -> None:
        if interval_seconds <= 0:
            raise ValueError("interval_seconds must be positive")
        with self._state:
            if self._thread is not None and self._thread.is_alive():
                return
            self._stop.clear()
            self._thread = threading.Thread(
                target=self._loop,
                args=(interval_seconds,),
                name="stale-lock-sweeper",
                daemon=True,
            )
            self._thread.start()
        logger.info("stale lock sweeper started (every %ss)", interval_seconds)

    def stop(self, timeout: Optional[float] = 5.0) -> None:
        with self._state:
            thread = self._thread
            self._thread = None
        if thread is None:
            return
        self._stop.set()
        thread.join(timeout)
        logger.info("stale lock sweeper stopped")

    def _loop(self, interval_seconds: float) -> None:
        while not self._stop.wait(interval_seconds):
            try:
                self.cleanup()
            except Exception:
                # 한 번 실패해도 다음 주기는 계속 돈다
                logger.exception("stale lock sweeper pass crashed")
