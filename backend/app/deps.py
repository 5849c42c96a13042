# backend/app/deps.py
from fastapi import HTTPException, Request
from .locks.manager import LockManager


def get_lock_manager(request: Request) -> LockManager:
    manager = getattr(request.app.state, "lock_manager", None)
    if manager is None:
        raise HTTPException(status_code=503, detail="lock manager not initialised")
    return manager
