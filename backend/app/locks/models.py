# backend/app/locks/models.py
from __future__ import annotations
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Generic, Optional, TypeVar
from .errors import LockError

T = TypeVar("T")

DEFAULT_OPERATION = "editing"


@dataclass(frozen=True)
class LockRecord:
    """리소스 독점 잠금. expires_at 은 항상 acquired_at + ttl (저장하지 않음)."""

    resource_id: str
    owner_id: str
    acquired_at: datetime
    ttl: timedelta
    operation: str = DEFAULT_OPERATION

    @property
    def expires_at(self) -> datetime:
        return self.acquired_at + self.ttl

    def is_stale(self, now: datetime) -> bool:
        return self.expires_at <= now

    def to_dict(self) -> dict:
        return {
            "resource_id": self.resource_id,
            "owner_id": self.owner_id,
            "acquired_at": self.acquired_at.isoformat(),
            "expires_at": self.expires_at.isoformat(),
            "operation": self.operation,
        }


@dataclass(frozen=True)
class LockCondition:
    # CAS 조건: 소유자 없음 | 같은 소유자 | acquired_at <= stale_before
    # owner_id=None 이면 stale 조건만
    owner_id: Optional[str]
    stale_before: datetime

    @classmethod
    def claimable_by(cls, owner_id: Optional[str], now: datetime, ttl: timedelta) -> "LockCondition":
        return cls(owner_id=owner_id, stale_before=now - ttl)

    def matches(self, current: Optional[LockRecord]) -> bool:
        if current is None:
            return True
        if self.owner_id is not None and current.owner_id == self.owner_id:
            return True
        return current.acquired_at <= self.stale_before


@dataclass
class Result(Generic[T]):
    success: bool
    data: Optional[T] = None
    error: Optional[LockError] = field(default=None)

    @classmethod
    def ok(cls, data: T) -> "Result[T]":
        return cls(success=True, data=data)

    @classmethod
    def fail(cls, error: LockError) -> "Result[T]":
        return cls(success=False, error=error)

    def to_dict(self) -> dict:
        if not self.success:
            return {"success": False, "error": self.error.to_dict() if self.error else None}
        data = self.data
        if isinstance(data, list):
            data = [_plain(d) for d in data]
        return {"success": True, "data": _plain(data)}


@dataclass(frozen=True)
class EditCheck:
    can_edit: bool
    locked_by: Optional[str] = None
    locked_until: Optional[datetime] = None

    def to_dict(self) -> dict:
        return {
            "can_edit": self.can_edit,
            "locked_by": self.locked_by,
            "locked_until": self.locked_until.isoformat() if self.locked_until else None,
        }


def _plain(value):
    return value.to_dict() if hasattr(value, "to_dict") else value
