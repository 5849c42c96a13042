# backend/app/locks/router.py
from dataclasses import asdict
from datetime import datetime
from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse
from ..deps import get_lock_manager
from .errors import NotFoundError, StoreError, ValidationError
from .manager import LockManager
from .models import LockRecord, Result
from .schemas import EditCheckOut, ErrorOut, LockOut, LockRequestIn, ResultOut

router = APIRouter(prefix="/api/locks", tags=["locks"])

STATUS_BY_CODE = {
    ValidationError.code: 422,
    NotFoundError.code: 404,
    StoreError.code: 503,
}


def _to_out(lock: LockRecord, now: datetime) -> LockOut:
    rem = int((lock.expires_at - now).total_seconds())
    return LockOut(
        resource_id=lock.resource_id,
        owner_id=lock.owner_id,
        acquired_at=lock.acquired_at,
        expires_at=lock.expires_at,
        operation=lock.operation,
        remaining_sec=max(rem, 0),
    )


def _respond(result: Result, convert=None):
    if result.success:
        data = convert(result.data) if convert and result.data is not None else result.data
        # dict 로 넘겨 response_model(ResultOut[...]) 기준으로 검증
        return ResultOut(success=True, data=data).model_dump()
    err = result.error
    body = ResultOut(success=False, error=ErrorOut(**err.to_dict()))
    return JSONResponse(
        status_code=STATUS_BY_CODE.get(err.code, 500), content=body.model_dump(mode="json")
    )


@router.get("", response_model=ResultOut[LockOut])
def get_lock(
    resource_id: str = Query(..., description="idea id"),
    manager: LockManager = Depends(get_lock_manager),
):
    now = manager.clock.now()
    return _respond(manager.query(resource_id), lambda r: _to_out(r, now))


@router.post("/acquire", response_model=ResultOut[bool])
def acquire_lock(req: LockRequestIn, manager: LockManager = Depends(get_lock_manager)):
    # 같은 사용자가 다시 호출하면 갱신(heartbeat) 역할
    return _respond(manager.acquire(req.resource_id, req.owner_id))


@router.post("/release", response_model=ResultOut[bool])
def release_lock(req: LockRequestIn, manager: LockManager = Depends(get_lock_manager)):
    return _respond(manager.release(req.resource_id, req.owner_id))


@router.get("/check", response_model=ResultOut[EditCheckOut])
def check_edit(
    resource_id: str,
    owner_id: str,
    manager: LockManager = Depends(get_lock_manager),
):
    return _respond(
        manager.check_edit(resource_id, owner_id), lambda c: EditCheckOut(**asdict(c))
    )


@router.get("/owners/{owner_id}", response_model=ResultOut[list[LockOut]])
def locks_by_owner(owner_id: str, manager: LockManager = Depends(get_lock_manager)):
    now = manager.clock.now()
    return _respond(manager.locks_held_by(owner_id), lambda rs: [_to_out(r, now) for r in rs])


@router.post("/cleanup", response_model=ResultOut[int])
def cleanup(manager: LockManager = Depends(get_lock_manager)):
    return _respond(manager.cleanup_stale_locks())
