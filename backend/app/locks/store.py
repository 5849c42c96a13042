# backend/app/locks/store.py
from __future__ import annotations
import threading
from abc import ABC, abstractmethod
from datetime import datetime, timedelta
from typing import Iterable, Optional
from .errors import NotFoundError
from .models import DEFAULT_OPERATION, LockCondition, LockRecord


class LockStore(ABC):
    """resource_id 별 잠금 레코드 저장소.

    읽을 때 저장소 ttl 로 expires_at 을 계산. 저장 계층 장애는 StoreError.
    """

    def __init__(self, ttl: timedelta, operation: str = DEFAULT_OPERATION) -> None:
        if ttl <= timedelta():
            raise ValueError("ttl must be positive")
        self.ttl = ttl
        self.operation = operation

    @abstractmethod
    def exists(self, resource_id: str) -> bool: ...

    @abstractmethod
    def get(self, resource_id: str) -> Optional[LockRecord]:
        """현재 레코드(만료됐을 수도 있음) 또는 None. 없는 리소스는 NotFoundError."""

    @abstractmethod
    def conditional_put(
        self, resource_id: str, condition: LockCondition, record: LockRecord
    ) -> bool:
        """condition 이 현재 레코드와 맞을 때만 원자적으로 기록."""

    @abstractmethod
    def delete(self, resource_id: str, condition: Optional[LockCondition] = None) -> bool:
        """레코드 해제 (condition 있으면 맞을 때만). 멱등."""

    @abstractmethod
    def scan_expired(self, now: datetime) -> list[str]: ...

    @abstractmethod
    def list_by_owner(self, owner_id: str) -> list[LockRecord]:
        """owner_id 가 가진 레코드, 최근 획득 순."""


class InMemoryLockStore(LockStore):
    """기준 구현. 각 연산을 mutex 하나로 원자화."""

    def __init__(
        self,
        ttl: timedelta,
        resources: Iterable[str] = (),
        operation: str = DEFAULT_OPERATION,
    ) -> None:
        super().__init__(ttl, operation)
        self._resources: set[str] = set(resources)
        self._locks: dict[str, tuple[str, datetime]] = {}  # resource_id -> (owner, acquired_at)
        self._mutex = threading.Lock()

    def add_resource(self, resource_id: str) -> None:
        with self._mutex:
            self._resources.add(resource_id)

    def remove_resource(self, resource_id: str) -> None:
        with self._mutex:
            self._resources.discard(resource_id)
            self._locks.pop(resource_id, None)

    def exists(self, resource_id: str) -> bool:
        with self._mutex:
            return resource_id in self._resources

    def get(self, resource_id: str) -> Optional[LockRecord]:
        with self._mutex:
            self._require(resource_id)
            return self._record(resource_id)

    def conditional_put(
        self, resource_id: str, condition: LockCondition, record: LockRecord
    ) -> bool:
        with self._mutex:
            self._require(resource_id)
            if not condition.matches(self._record(resource_id)):
                return False
            self._locks[resource_id] = (record.owner_id, record.acquired_at)
            return True

    def delete(self, resource_id: str, condition: Optional[LockCondition] = None) -> bool:
        with self._mutex:
            current = self._record(resource_id)
            if current is None:
                return False
            if condition is not None and not condition.matches(current):
                return False
            del self._locks[resource_id]
            return True

    def scan_expired(self, now: datetime) -> list[str]:
        stale_before = now - self.ttl
        with self._mutex:
            return [rid for rid, (_, at) in self._locks.items() if at <= stale_before]

    def list_by_owner(self, owner_id: str) -> list[LockRecord]:
        with self._mutex:
            records = [
                self._record(rid) for rid, (owner, _) in self._locks.items() if owner == owner_id
            ]
        return sorted(records, key=lambda r: r.acquired_at, reverse=True)

    def _require(self, resource_id: str) -> None:
        if resource_id not in self._resources:
            raise NotFoundError(resource_id)

    def _record(self, resource_id: str) -> Optional[LockRecord]:
        entry = self._locks.get(resource_id)
        if entry is None:
            return None
        owner, acquired_at = entry
        return LockRecord(
            resource_id=resource_id,
            owner_id=owner,
            acquired_at=acquired_at,
            ttl=self.ttl,
            operation=self.operation,
        )
