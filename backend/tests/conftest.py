from datetime import timedelta

import pytest

from app.ideas.models import Idea
from app.locks.clock import ManualClock
from app.locks.manager import LockManager
from app.locks.sql_store import SqlLockStore
from app.locks.store import InMemoryLockStore
from app.shared.db import init_db, make_engine, make_session_factory

TTL = timedelta(minutes=5)
IDEAS = ("idea-1", "idea-2", "idea-42")


@pytest.fixture
def clock() -> ManualClock:
    return ManualClock()


@pytest.fixture
def engine():
    engine = make_engine("sqlite://")
    init_db(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    factory = make_session_factory(engine)
    with factory() as db:
        db.add_all([Idea(id=i, content=f"content of {i}") for i in IDEAS])
        db.commit()
    return factory


@pytest.fixture
def memory_store() -> InMemoryLockStore:
    return InMemoryLockStore(TTL, resources=IDEAS)


@pytest.fixture
def sql_store(session_factory) -> SqlLockStore:
    return SqlLockStore(session_factory, TTL)


@pytest.fixture(params=["memory", "sql"])
def store(request):
    return request.getfixturevalue(f"{request.param}_store")


@pytest.fixture
def manager(store, clock) -> LockManager:
    return LockManager(store, clock=clock)
