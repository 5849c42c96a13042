# backend/app/shared/db.py
from __future__ import annotations
from sqlalchemy import Engine, create_engine, event
from sqlalchemy.orm import DeclarativeBase, sessionmaker
from sqlalchemy.pool import StaticPool
from .config import settings


class Base(DeclarativeBase):
    pass


def _begin_immediate(engine: Engine) -> None:
    # 파일 SQLite: 트랜잭션 시작 시점에 쓰기 잠금을 잡아 동시 UPDATE 가 SQLITE_BUSY 대신 대기
    @event.listens_for(engine, "connect")
    def _no_pysqlite_begin(dbapi_conn, _record):
        dbapi_conn.isolation_level = None

    @event.listens_for(engine, "begin")
    def _begin(conn):
        conn.exec_driver_sql("BEGIN IMMEDIATE")


def make_engine(url: str) -> Engine:
    if not url.startswith("sqlite"):
        return create_engine(url, echo=False, future=True, pool_pre_ping=True)
    connect_args = {"check_same_thread": False}
    # 인메모리 SQLite는 커넥션마다 DB가 따로 생기므로 하나만 공유
    if url in ("sqlite://", "sqlite:///:memory:"):
        return create_engine(
            url, echo=False, future=True, connect_args=connect_args, poolclass=StaticPool
        )
    connect_args["timeout"] = 30
    engine = create_engine(url, echo=False, future=True, connect_args=connect_args)
    _begin_immediate(engine)
    return engine


def make_session_factory(bind: Engine) -> sessionmaker:
    return sessionmaker(bind=bind, autoflush=False, autocommit=False, future=True)


def init_db(bind: Engine) -> None:
    """개발/테스트용 스키마 생성. 운영은 alembic upgrade head 사용."""
    from ..ideas import models  # noqa: F401  (테이블 등록)

    Base.metadata.create_all(bind)


DB_URL = settings.DATABASE_URL
engine = make_engine(DB_URL)
SessionLocal = make_session_factory(engine)
