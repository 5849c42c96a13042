# backend/app/locks/errors.py
from __future__ import annotations


class LockError(Exception):
    code = "LOCK_ERROR"
    retryable = False

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict:
        return {"code": self.code, "message": self.message, "retryable": self.retryable}


class ValidationError(LockError):
    """resource_id / owner_id 가 비었거나 형식 오류."""

    code = "VALIDATION_ERROR"

    def __init__(self, field: str, message: str) -> None:
        super().__init__(message)
        self.field = field

    def to_dict(self) -> dict:
        return {**super().to_dict(), "field": self.field}


class NotFoundError(LockError):
    """잠글 리소스(아이디어)가 없음. '잠금 없음'과는 다름."""

    code = "NOT_FOUND"

    def __init__(self, resource_id: str) -> None:
        super().__init__(f"Resource not found: {resource_id}")
        self.resource_id = resource_id


class StoreError(LockError):
    code = "STORE_ERROR"
    retryable = True  # DB/네트워크 장애
