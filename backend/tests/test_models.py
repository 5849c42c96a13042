"""Lock value type tests."""

from datetime import datetime, timedelta, timezone

from app.locks.errors import NotFoundError, StoreError, ValidationError
from app.locks.models import EditCheck, LockCondition, LockRecord, Result

T0 = datetime(2025, 1, 1, tzinfo=timezone.utc)
TTL = timedelta(minutes=5)


def make_record(owner: str = "alice", acquired_at: datetime = T0) -> LockRecord:
    return LockRecord(resource_id="idea-1", owner_id=owner, acquired_at=acquired_at, ttl=TTL)


def test_expires_at_is_derived() -> None:
    record = make_record()
    assert record.expires_at == T0 + TTL
    assert record.operation == "editing"


def test_stale_at_exact_expiry() -> None:
    record = make_record()
    assert not record.is_stale(T0 + TTL - timedelta(milliseconds=1))
    assert record.is_stale(T0 + TTL)


def test_condition_matches_empty_same_owner_and_stale() -> None:
    cond = LockCondition.claimable_by("alice", T0 + timedelta(minutes=1), TTL)
    assert cond.matches(None)
    assert cond.matches(make_record("alice"))
    assert not cond.matches(make_record("bob"))

    later = LockCondition.claimable_by("carol", T0 + TTL, TTL)
    assert later.matches(make_record("bob"))


def test_stale_only_condition_ignores_owner() -> None:
    cond = LockCondition(owner_id=None, stale_before=T0 - timedelta(seconds=1))
    assert not cond.matches(make_record("alice"))


def test_result_to_dict() -> None:
    assert Result.ok(True).to_dict() == {"success": True, "data": True}
    assert Result.ok(None).to_dict() == {"success": True, "data": None}
    assert Result.ok([make_record()]).to_dict()["data"][0]["owner_id"] == "alice"

    failed = Result.fail(ValidationError("owner_id", "owner_id must not be empty")).to_dict()
    assert failed["success"] is False
    assert failed["error"]["code"] == "VALIDATION_ERROR"
    assert failed["error"]["field"] == "owner_id"


def test_error_codes() -> None:
    assert NotFoundError("idea-9").resource_id == "idea-9"
    assert NotFoundError("idea-9").retryable is False
    assert StoreError("boom").retryable is True
    assert StoreError("boom").to_dict()["code"] == "STORE_ERROR"


def test_edit_check_to_dict() -> None:
    check = EditCheck(can_edit=False, locked_by="bob", locked_until=T0)
    assert check.to_dict() == {
        "can_edit": False,
        "locked_by": "bob",
        "locked_until": T0.isoformat(),
    }
