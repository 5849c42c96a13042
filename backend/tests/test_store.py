"""LockStore contract tests (in-memory and SQL)."""

from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy import select, update

from app.ideas.models import Idea
from app.locks.errors import NotFoundError, StoreError
from app.locks.models import LockCondition, LockRecord
from app.locks.sql_store import SqlLockStore
from app.shared.db import Base

TTL = timedelta(minutes=5)

T0 = datetime(2025, 1, 1, 12, 0, tzinfo=timezone.utc)


def record(owner: str, at: datetime = T0, rid: str = "idea-1") -> LockRecord:
    return LockRecord(resource_id=rid, owner_id=owner, acquired_at=at, ttl=TTL)


def claim(owner, now: datetime = T0) -> LockCondition:
    return LockCondition.claimable_by(owner, now, TTL)


def test_exists(store) -> None:
    assert store.exists("idea-1") is True
    assert store.exists("nope") is False


def test_get_unlocked_returns_none(store) -> None:
    assert store.get("idea-1") is None


def test_get_unknown_resource_raises(store) -> None:
    with pytest.raises(NotFoundError):
        store.get("nope")


def test_conditional_put_and_get(store) -> None:
    assert store.conditional_put("idea-1", claim("alice"), record("alice")) is True
    got = store.get("idea-1")
    assert got is not None
    assert got.owner_id == "alice"
    assert got.acquired_at == T0
    assert got.expires_at == T0 + TTL


def test_conditional_put_rejects_live_foreign_owner(store) -> None:
    store.conditional_put("idea-1", claim("alice"), record("alice"))
    later = T0 + timedelta(minutes=1)
    assert store.conditional_put("idea-1", claim("bob", later), record("bob", later)) is False
    assert store.get("idea-1").owner_id == "alice"


def test_conditional_put_takes_over_stale(store) -> None:
    store.conditional_put("idea-1", claim("alice"), record("alice"))
    later = T0 + TTL
    assert store.conditional_put("idea-1", claim("bob", later), record("bob", later)) is True
    assert store.get("idea-1").owner_id == "bob"


def test_conditional_put_unknown_resource_raises(store) -> None:
    with pytest.raises(NotFoundError):
        store.conditional_put("nope", claim("alice"), record("alice", rid="nope"))


def test_delete_is_idempotent(store) -> None:
    store.conditional_put("idea-1", claim("alice"), record("alice"))
    assert store.delete("idea-1") is True
    assert store.delete("idea-1") is False
    assert store.get("idea-1") is None


def test_delete_with_condition_keeps_foreign_lock(store) -> None:
    store.conditional_put("idea-1", claim("alice"), record("alice"))
    assert store.delete("idea-1", claim("bob")) is False
    assert store.get("idea-1").owner_id == "alice"
    assert store.delete("idea-1", claim("alice")) is True


def test_scan_expired(store) -> None:
    store.conditional_put("idea-1", claim("alice"), record("alice"))
    fresh_at = T0 + timedelta(minutes=3)
    store.conditional_put("idea-2", claim("bob", fresh_at), record("bob", fresh_at, "idea-2"))
    assert store.scan_expired(T0 + TTL - timedelta(seconds=1)) == []
    assert store.scan_expired(T0 + TTL) == ["idea-1"]
    assert sorted(store.scan_expired(T0 + timedelta(hours=1))) == ["idea-1", "idea-2"]


def test_list_by_owner_newest_first(store) -> None:
    store.conditional_put("idea-1", claim("alice"), record("alice"))
    later = T0 + timedelta(seconds=30)
    store.conditional_put("idea-2", claim("alice", later), record("alice", later, "idea-2"))
    store.conditional_put("idea-42", claim("bob"), record("bob", rid="idea-42"))
    held = store.list_by_owner("alice")
    assert [r.resource_id for r in held] == ["idea-2", "idea-1"]
    assert store.list_by_owner("carol") == []


def test_store_rejects_non_positive_ttl(session_factory) -> None:
    with pytest.raises(ValueError):
        SqlLockStore(session_factory, timedelta(0))


def test_sql_failure_surfaces_as_store_error(engine, sql_store) -> None:
    Base.metadata.drop_all(engine)
    with pytest.raises(StoreError) as exc_info:
        sql_store.get("idea-1")
    assert exc_info.value.__cause__ is not None
    with pytest.raises(StoreError):
        sql_store.conditional_put("idea-1", claim("alice"), record("alice"))


def test_lock_writes_keep_idea_updated_at(session_factory, sql_store) -> None:
    edited = datetime(2024, 6, 1, 9, 30)
    with session_factory() as db:
        db.execute(update(Idea).where(Idea.id == "idea-1").values(updated_at=edited))
        db.commit()

    assert sql_store.conditional_put("idea-1", claim("alice"), record("alice"))
    assert sql_store.delete("idea-1", claim("alice"))
    assert sql_store.conditional_put("idea-1", claim("bob"), record("bob"))
    # sweeper 와 같은 stale 전용 조건
    assert sql_store.delete("idea-1", LockCondition(owner_id=None, stale_before=T0))

    with session_factory() as db:
        assert db.scalar(select(Idea.updated_at).where(Idea.id == "idea-1")) == edited
