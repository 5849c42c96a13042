# backend/app/locks/schemas.py
from datetime import datetime
from typing import Generic, Optional, TypeVar
from pydantic import BaseModel

T = TypeVar("T")


class LockRequestIn(BaseModel):
    # 빈 값 검증은 LockManager 에서 (응답 형식을 통일하기 위해)
    resource_id: str  # idea id
    owner_id: str  # user / session id


class LockOut(BaseModel):
    resource_id: str
    owner_id: str
    acquired_at: datetime
    expires_at: datetime
    operation: str
    remaining_sec: int


class EditCheckOut(BaseModel):
    can_edit: bool
    locked_by: Optional[str] = None
    locked_until: Optional[datetime] = None


class ErrorOut(BaseModel):
    code: str
    message: str
    retryable: bool = False
    field: Optional[str] = None


class ResultOut(BaseModel, Generic[T]):
    success: bool
    data: Optional[T] = None
    error: Optional[ErrorOut] = None
