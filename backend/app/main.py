import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.orm import sessionmaker
from .shared.config import settings
from .shared.db import SessionLocal
from .shared.log import setup_logging
from .locks.clock import Clock
from .locks.manager import LockManager
from .locks.router import router as locks_router
from .locks.sql_store import SqlLockStore

logger = logging.getLogger(__name__)


def build_lock_manager(
    session_factory: sessionmaker = SessionLocal, clock: Clock | None = None
) -> LockManager:
    store = SqlLockStore(session_factory, settings.lock_ttl, settings.LOCK_OPERATION)
    return LockManager(store, clock=clock)


@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging(settings.LOG_LEVEL)
    # 테스트 등에서 미리 넣어둔 manager 가 있으면 그대로 사용
    if getattr(app.state, "lock_manager", None) is None:
        app.state.lock_manager = build_lock_manager()
    manager: LockManager = app.state.lock_manager
    if settings.SWEEP_INTERVAL_SECONDS > 0:
        manager.sweeper.start(settings.SWEEP_INTERVAL_SECONDS)
    logger.info("lock service up (ttl=%ss, env=%s)", settings.LOCK_TTL_SECONDS, settings.APP_ENV)
    try:
        yield
    finally:
        manager.sweeper.stop()


app = FastAPI(
    title="Idea Lock API",
    version="0.1.0",
    openapi_url=f"{settings.API_PREFIX}/openapi.json",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get(f"{settings.API_PREFIX}/healthz")
def healthz():
    return {"status": "ok", "app": "idea-lock"}


app.include_router(locks_router)
