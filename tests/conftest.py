import os

# Keep the application engine off disk; tests bind their own engine below
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["CACHE_BACKEND"] = "memory"
os.environ["DB_LOG_SLOW_QUERIES"] = "false"

from datetime import date, datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from studio import models  # noqa: F401
from studio.cache import MemoryCache, get_cache
from studio.database import Base, get_db
from studio.domain.timeline.service import TimelineService
from studio.main import app

PORTRAIT = "Portrait Session"
PORTRAIT_DATE = date(2025, 6, 15)


class FixedClock:
    """Callable clock that only moves when a test advances it"""

    def __init__(self, start: datetime):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> datetime:
        self.now = self.now + timedelta(**kwargs)
        return self.now


class ManualTimer:
    """Monotonic seconds for MemoryCache TTL tests"""

    def __init__(self):
        self.value = 1000.0

    def __call__(self) -> float:
        return self.value


def portrait_template() -> dict:
    def task(name, offset, order, automate=False, approval=False, hours=0.5, human=True, batch=False):
        return {
            "name": name,
            "offsetDays": offset,
            "order": order,
            "canAutomate": automate,
            "approvalRequired": approval,
            "estimatedHours": hours,
            "requiresHuman": human,
            "canBatch": batch,
        }

    return {
        "sessionType": PORTRAIT,
        "tasks": [
            task("Contract & payment confirmed", -14, 1, automate=True, human=False, batch=True),
            task("Style guide & preparation materials sent", -7, 2, automate=True, approval=True, hours=1.0, human=False, batch=True),
            task("Pre-session consultation call", -3, 3),
            task("Session day - Portrait photography", 0, 4, hours=2.0),
            task("Photo editing & enhancement", 2, 5, hours=3.0, batch=True),
            task("Preview gallery delivery", 3, 6, automate=True, human=False, batch=True),
            task("Final selection & delivery", 7, 7, automate=True, hours=1.0, human=False, batch=True),
        ],
    }


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def db(engine):
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def cache():
    return MemoryCache()


@pytest.fixture
def clock():
    return FixedClock(datetime(2025, 6, 1, 9, 0, tzinfo=timezone.utc))


@pytest.fixture
def service(db, cache, clock):
    return TimelineService(db, cache, clock=clock)


@pytest.fixture
def portrait(service):
    """Service with the Portrait Session template installed"""
    service.put_template(portrait_template())
    return service


@pytest.fixture
def portrait_tasks(portrait):
    return portrait.generate_timeline("session-1", PORTRAIT, PORTRAIT_DATE)


@pytest.fixture
def client(db, cache):
    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_cache] = lambda: cache
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()
