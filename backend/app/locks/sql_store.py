# backend/app/locks/sql_store.py
from __future__ import annotations
from contextlib import contextmanager
from datetime import datetime, timedelta, timezone
from typing import Iterator, Optional
from sqlalchemy import and_, or_, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker
from ..ideas.models import Idea
from .errors import NotFoundError, StoreError
from .models import DEFAULT_OPERATION, LockCondition, LockRecord
from .store import LockStore


def _utc(value: datetime) -> datetime:
    # SQLite는 tz 정보를 버리므로 읽을 때 UTC로 복원
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def _claimable(condition: LockCondition):
    """LockCondition.matches 와 같은 조건을 SQL WHERE 로."""
    clauses = [
        Idea.editing_by.is_(None),
        Idea.editing_at.is_(None),
        Idea.editing_at <= condition.stale_before,
    ]
    if condition.owner_id is not None:
        clauses.append(Idea.editing_by == condition.owner_id)
    return or_(*clauses)


class SqlLockStore(LockStore):
    """ideas 테이블의 editing_by, editing_at 에 잠금 저장.

    conditional_put 은 조건부 UPDATE 한 번. 1건 변경이면 성공.
    """

    def __init__(
        self,
        session_factory: sessionmaker,
        ttl: timedelta,
        operation: str = DEFAULT_OPERATION,
    ) -> None:
        super().__init__(ttl, operation)
        self._session_factory = session_factory

    @contextmanager
    def _session(self, action: str) -> Iterator[Session]:
        db = self._session_factory()
        try:
            yield db
        except SQLAlchemyError as e:
            db.rollback()
            raise StoreError(f"{action} failed: {type(e).__name__}") from e
        finally:
            db.close()

    def exists(self, resource_id: str) -> bool:
        with self._session("exists") as db:
            return db.scalar(select(Idea.id).where(Idea.id == resource_id)) is not None

    def get(self, resource_id: str) -> Optional[LockRecord]:
        with self._session("get") as db:
            row = db.execute(
                select(Idea.editing_by, Idea.editing_at).where(Idea.id == resource_id)
            ).first()
        if row is None:
            raise NotFoundError(resource_id)
        return self._to_record(resource_id, row.editing_by, row.editing_at)

    def conditional_put(
        self, resource_id: str, condition: LockCondition, record: LockRecord
    ) -> bool:
        with self._session("conditional_put") as db:
            res = db.execute(
                update(Idea)
                .where(Idea.id == resource_id, _claimable(condition))
                .values(
                    editing_by=record.owner_id,
                    editing_at=record.acquired_at,
                    updated_at=Idea.updated_at,  # 잠금은 내용 수정이 아님 (onupdate 막기)
                )
                .execution_options(synchronize_session=False)
            )
            db.commit()
            if (res.rowcount or 0) > 0:
                return True
            # 0건이면 리소스가 없거나 다른 사용자가 잡고 있음
            if db.scalar(select(Idea.id).where(Idea.id == resource_id)) is None:
                raise NotFoundError(resource_id)
            return False

    def delete(self, resource_id: str, condition: Optional[LockCondition] = None) -> bool:
        criteria = [Idea.id == resource_id, Idea.editing_by.is_not(None)]
        if condition is not None:
            criteria.append(_claimable(condition))
        with self._session("delete") as db:
            res = db.execute(
                update(Idea)
                .where(*criteria)
                .values(editing_by=None, editing_at=None, updated_at=Idea.updated_at)
                .execution_options(synchronize_session=False)
            )
            db.commit()
            return max(res.rowcount or 0, 0) > 0

    def scan_expired(self, now: datetime) -> list[str]:
        stale_before = now - self.ttl
        with self._session("scan_expired") as db:
            return list(
                db.scalars(
                    select(Idea.id).where(
                        Idea.editing_by.is_not(None),
                        or_(Idea.editing_at.is_(None), Idea.editing_at <= stale_before),
                    )
                ).all()
            )

    def list_by_owner(self, owner_id: str) -> list[LockRecord]:
        with self._session("list_by_owner") as db:
            rows = db.execute(
                select(Idea.id, Idea.editing_by, Idea.editing_at)
                .where(and_(Idea.editing_by == owner_id, Idea.editing_at.is_not(None)))
                .order_by(Idea.editing_at.desc())
            ).all()
        return [self._to_record(r.id, r.editing_by, r.editing_at) for r in rows]

    def _to_record(
        self, resource_id: str, owner: Optional[str], acquired_at: Optional[datetime]
    ) -> Optional[LockRecord]:
        if not owner or acquired_at is None:
            return None
        return LockRecord(
            resource_id=resource_id,
            owner_id=owner,
            acquired_at=_utc(acquired_at),
            ttl=self.ttl,
            operation=self.operation,
        )
