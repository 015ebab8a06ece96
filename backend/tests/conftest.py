"""Shared fixtures: in-memory SQLite quote store and a fake Redis client."""

from concurrent.futures import ThreadPoolExecutor
from datetime import datetime

import pytest
import redis
from sqlalchemy import create_engine, insert
from sqlalchemy.pool import StaticPool

from context import AppContext
from services.cache import BatchCache
from services.store import QuoteStore, metadata, quotes_table


class FakeClock:
    def __init__(self, now: float = 1000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeRedis:
    """Just enough of redis.Redis for BatchCache, with TTLs on a fake clock."""

    def __init__(self, clock: FakeClock | None = None):
        self.clock = clock or FakeClock()
        self.data: dict[str, tuple[bytes, float | None]] = {}
        self.set_calls: list[tuple[str, int | None]] = []
        self.fail_reads = False
        self.fail_writes = False

    def get(self, key):
        if self.fail_reads:
            raise redis.ConnectionError("connection refused")
        entry = self.data.get(key)
        if entry is None:
            return None
        value, expires_at = entry
        if expires_at is not None and self.clock() >= expires_at:
            del self.data[key]
            return None
        return value

    def set(self, key, value, ex=None):
        self.set_calls.append((key, ex))
        if self.fail_writes:
            raise redis.ConnectionError("connection refused")
        if isinstance(value, str):
            value = value.encode()
        expires_at = self.clock() + ex if ex is not None else None
        self.data[key] = (value, expires_at)
        return True

    def ping(self):
        if self.fail_reads:
            raise redis.ConnectionError("connection refused")
        return True

    def close(self):
        pass


def make_quotes_engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    metadata.create_all(engine)
    return engine


def add_quotes(engine, count: int, start_id: int = 1) -> None:
    rows = [
        {
            "id": i,
            "quote": f"Quote number {i}",
            "author": f"Author {i}",
            "created_at": datetime(2024, 1, 1, 12, 0, i % 60),
        }
        for i in range(start_id, start_id + count)
    ]
    with engine.begin() as conn:
        conn.execute(insert(quotes_table), rows)


@pytest.fixture
def engine():
    engine = make_quotes_engine()
    yield engine
    engine.dispose()


@pytest.fixture
def store(engine):
    return QuoteStore(engine)


@pytest.fixture
def broken_store(tmp_path):
    # SQLite cannot create a database file inside a missing directory.
    return QuoteStore(create_engine(f"sqlite:///{tmp_path}/missing/quotes.db"))


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def fake_redis(clock):
    return FakeRedis(clock)


@pytest.fixture
def cache(fake_redis):
    return BatchCache(fake_redis)


@pytest.fixture
def executor():
    executor = ThreadPoolExecutor(max_workers=2)
    yield executor
    executor.shutdown(wait=True)


@pytest.fixture
def context(store, cache, executor):
    return AppContext(
        store=store,
        cache=cache,
        batch_size=500,
        cache_ttl_seconds=300,
        executor=executor,
    )
