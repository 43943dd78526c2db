"""Tests for PendingUpdateCache"""
from datetime import datetime, timedelta, timezone

import pytest

from restaurant_reviews.services.pending_updates import PendingUpdateCache


class FakeClock:
    def __init__(self):
        self.now = datetime(2024, 1, 1, tzinfo=timezone.utc)

    def __call__(self):
        return self.now

    def advance(self, **kwargs):
        self.now += timedelta(**kwargs)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def cache(clock):
    return PendingUpdateCache(ttl_seconds=60, clock=clock)


class TestPendingUpdateCache:

    def test_store_and_get(self, cache, clock):
        cache.store(7, {"username": "new-name"})

        entry = cache.get(7)

        assert entry.data == {"username": "new-name"}
        assert entry.staged_at == clock.now

    def test_store_replaces_previous(self, cache):
        cache.store(7, {"username": "a"})
        cache.store(7, {"email": "b@example.com"})

        assert cache.get(7).data == {"email": "b@example.com"}
        assert len(cache) == 1

    def test_store_copies_data(self, cache):
        data = {"username": "a"}
        cache.store(7, data)
        data["username"] = "changed"
        assert cache.get(7).data == {"username": "a"}

    def test_get_unknown_user(self, cache):
        assert cache.get(8) is None

    def test_acknowledge(self, cache):
        cache.store(7, {"username": "a"})

        assert cache.acknowledge(7) is True
        assert cache.get(7) is None
        assert cache.acknowledge(7) is False

    def test_entry_expires_after_ttl(self, cache, clock):
        cache.store(7, {"username": "a"})

        clock.advance(seconds=59)
        assert cache.get(7) is not None

        clock.advance(seconds=1)
        assert cache.get(7) is None
        assert len(cache) == 0

    def test_purge_expired(self, cache, clock):
        cache.store(7, {"username": "a"})
        clock.advance(seconds=30)
        cache.store(8, {"username": "b"})
        clock.advance(seconds=40)

        assert cache.purge_expired() == 1
        assert cache.get(8) is not None

    def test_store_drops_expired_entries_of_other_users(self, cache, clock):
        for user_id in range(100):
            cache.store(user_id, {"username": f"user{user_id}"})
        assert len(cache) == 100

        clock.advance(seconds=61)
        cache.store(500, {"username": "fresh"})

        assert len(cache) == 1
        assert cache.get(500) is not None

    def test_clear(self, cache):
        cache.store(7, {"username": "a"})
        cache.clear()
        assert len(cache) == 0
