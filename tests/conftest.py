import pytest
from pathlib import Path

from linkchat.cache import ContentCache, SQLiteKeyValueStore


class FakeClock:
    """Controllable time source for TTL tests."""

    def __init__(self, now: float = 1_700_000_000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def tmp_cache_db(tmp_path: Path) -> Path:
    """Return a path to a temporary SQLite cache database."""
    return tmp_path / "data" / "test_cache.db"


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def kv_store(tmp_cache_db: Path, clock: FakeClock) -> SQLiteKeyValueStore:
    store = SQLiteKeyValueStore(tmp_cache_db, clock=clock)
    yield store
    store.close()


@pytest.fixture
def content_cache(kv_store: SQLiteKeyValueStore) -> ContentCache:
    return ContentCache(kv_store)
