# backend/app/locks/manager.py
from __future__ import annotations
import logging
from datetime import timedelta
from typing import Callable, Optional, TypeVar
from .clock import Clock, SystemClock
from .errors import LockError, NotFoundError, ValidationError
from .models import EditCheck, LockCondition, LockRecord, Result
from .store import LockStore
from .sweeper import StaleLockSweeper

logger = logging.getLogger(__name__)

T = TypeVar("T")

MAX_ID_LENGTH = 255  # ideas.id / editing_by 컬럼 길이


def validate_id(field: str, value) -> str:
    """앞뒤 공백 제거 후 검사. 문제 있으면 ValidationError."""
    if not isinstance(value, str):
        raise ValidationError(field, f"{field} must be a string")
    value = value.strip()
    if not value:
        raise ValidationError(field, f"{field} must not be empty")
    if len(value) > MAX_ID_LENGTH:
        raise ValidationError(field, f"{field} is longer than {MAX_ID_LENGTH} characters")
    try:
        value.encode("utf-8")  # 짝 없는 surrogate 등은 DB 드라이버에서 터짐
    except UnicodeEncodeError:
        raise ValidationError(field, f"{field} is not valid UTF-8 text") from None
    return value


class LockManager:
    """아이디어 편집 잠금. 공개 메서드는 예외 대신 항상 Result 를 돌려준다.

    다른 사용자가 살아있는 잠금을 쥐고 있으면 acquire 는 Result.ok(False) (오류 아님).
    """

    def __init__(
        self,
        store: LockStore,
        clock: Optional[Clock] = None,
        ttl: Optional[timedelta] = None,
        operation: Optional[str] = None,
    ) -> None:
        self.store = store
        self.clock = clock or SystemClock()
        self.ttl = ttl or store.ttl
        self.operation = operation or store.operation
        # expires_at, operation 은 저장소 설정으로 다시 만들어짐
        if self.ttl != store.ttl:
            raise ValueError("manager ttl must match store ttl")
        if self.operation != store.operation:
            raise ValueError("manager operation must match store operation")
        self.sweeper = StaleLockSweeper(store, self.clock)

    def acquire(self, resource_id: str, owner_id: str) -> Result[bool]:
        def _acquire() -> bool:
            rid = validate_id("resource_id", resource_id)
            owner = validate_id("owner_id", owner_id)
            now = self.clock.now()
            record = LockRecord(
                resource_id=rid,
                owner_id=owner,
                acquired_at=now,
                ttl=self.ttl,
                operation=self.operation,
            )
            condition = LockCondition.claimable_by(owner, now, self.ttl)
            if self.store.conditional_put(rid, condition, record):
                logger.debug("lock acquired: %s by %s until %s", rid, owner, record.expires_at)
                return True
            logger.info("lock busy: %s requested by %s", rid, owner)
            return False

        return self._run("acquire", _acquire)

    def release(self, resource_id: str, owner_id: str) -> Result[bool]:
        def _release() -> bool:
            rid = validate_id("resource_id", resource_id)
            owner = validate_id("owner_id", owner_id)
            if not self.store.exists(rid):
                raise NotFoundError(rid)
            condition = LockCondition.claimable_by(owner, self.clock.now(), self.ttl)
            if self.store.delete(rid, condition):
                logger.debug("lock released: %s by %s", rid, owner)
            # 남의 잠금이거나 이미 없는 경우도 성공으로 응답
            return True

        return self._run("release", _release)

    def query(self, resource_id: str) -> Result[Optional[LockRecord]]:
        def _query() -> Optional[LockRecord]:
            return self._live(resource_id)

        return self._run("query", _query)

    def cleanup_stale_locks(self) -> Result[int]:
        return self.sweeper.cleanup()

    def check_edit(self, resource_id: str, owner_id: str) -> Result[EditCheck]:
        """owner_id 가 지금 편집 가능한지. 불가면 누가 언제까지 잡고 있는지."""

        def _check() -> EditCheck:
            owner = validate_id("owner_id", owner_id)
            record = self._live(resource_id)
            if record is None or record.owner_id == owner:
                return EditCheck(can_edit=True)
            return EditCheck(
                can_edit=False, locked_by=record.owner_id, locked_until=record.expires_at
            )

        return self._run("check_edit", _check)

    def locks_held_by(self, owner_id: str) -> Result[list[LockRecord]]:
        def _held() -> list[LockRecord]:
            owner = validate_id("owner_id", owner_id)
            now = self.clock.now()
            return [r for r in self.store.list_by_owner(owner) if not r.is_stale(now)]

        return self._run("locks_held_by", _held)

    def _live(self, resource_id: str) -> Optional[LockRecord]:
        rid = validate_id("resource_id", resource_id)
        record = self.store.get(rid)
        if record is None or record.is_stale(self.clock.now()):
            return None
        return record

    def _run(self, operation: str, fn: Callable[[], T]) -> Result[T]:
        try:
            return Result.ok(fn())
        except ValidationError as e:
            logger.debug("%s rejected: %s", operation, e.message)
            return Result.fail(e)
        except LockError as e:
            if e.retryable:
                logger.exception("%s failed: %s", operation, e.message)
            else:
                logger.info("%s failed: %s", operation, e.message)
            return Result.fail(e)
