"""
Shared fixtures.

Engine-level tests run against both backends through the `store` fixture;
tests that need the transactional backend specifically use `sql_store`.
"""
from datetime import datetime, timedelta, timezone

import pytest

from ninja_missions.db import make_engine
from ninja_missions.engine import MissionLifecycleEngine
from ninja_missions.ranks import MissionRank, NinjaRank
from ninja_missions.schemas import CallerIdentity
from ninja_missions.store import DocumentMissionStore, SqlMissionStore

BASE_TIME = datetime(2026, 1, 1, 12, 0, tzinfo=timezone.utc)


class FakeClock:
    """Deterministic clock: every call advances one second."""

    def __init__(self, start: datetime = BASE_TIME):
        self.now = start

    def __call__(self) -> datetime:
        self.now += timedelta(seconds=1)
        return self.now


@pytest.fixture
def sql_store(tmp_path):
    engine = make_engine(f"sqlite:///{tmp_path / 'missions.db'}")
    store = SqlMissionStore(engine)
    store.create_all()
    yield store
    engine.dispose()


@pytest.fixture
def doc_store(tmp_path):
    return DocumentMissionStore(tmp_path / "data.json")


@pytest.fixture(params=["sql_store", "doc_store"])
def store(request):
    return request.getfixturevalue(request.param)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def engine(store, clock):
    return MissionLifecycleEngine(store, clock=clock, require_isolation=store.provides_isolation)


@pytest.fixture
def make_ninja(store):
    def _make(username: str, rank: NinjaRank = NinjaRank.GENIN) -> CallerIdentity:
        n = store.create_ninja(username, "not-a-real-hash", rank, f"https://avatars.test/{username}")
        return CallerIdentity(id=n.id, username=n.username, rank=n.rank)
    return _make


@pytest.fixture
def make_mission(store):
    counter = {"n": 0}

    def _make(rank: MissionRank = MissionRank.D, reward: int = 100, title: str | None = None):
        counter["n"] += 1
        created = BASE_TIME - timedelta(days=1) + timedelta(minutes=counter["n"])
        return store.add_mission(
            title or f"Mission {counter['n']}",
            "test mission",
            rank,
            reward,
            created_at=created,
        )
    return _make
