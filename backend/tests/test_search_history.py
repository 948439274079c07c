"""Read-through behaviour of get_search_history against the database-backed cache."""
import json
import logging
from datetime import timedelta
from unittest.mock import patch

import pytest

from catalog.core.constants import RECENT_SEARCHES_CACHE_KEY
from catalog.core.errors import CacheWriteFailed, MalformedKey, StoreUnavailable
from catalog.models.search import Search
from catalog.models.search_cache import SearchCache
from catalog.services.search_cache import DbSearchCacheStore, MemorySearchCacheStore, utcnow
from catalog.services.search_history import effective_cache_key, get_search_history
from catalog.services.search_store import find_searches

EAN = "5901234123457"
OTHER_EAN = "12345670"


@pytest.fixture
def cache(db):
    return DbSearchCacheStore(db)


@pytest.fixture
def record_store():
    """Count reads of the searches table made by the read path."""
    with patch("catalog.services.search_history.find_searches", wraps=find_searches) as spy:
        yield spy


def _cache_rows(db, key):
    return db.query(SearchCache).filter(SearchCache.cache_key == key).all()


@pytest.mark.parametrize(
    "ean, expected",
    [
        (None, RECENT_SEARCHES_CACHE_KEY),
        ("", RECENT_SEARCHES_CACHE_KEY),
        ("   ", RECENT_SEARCHES_CACHE_KEY),
        (EAN, EAN),
        (f"  {EAN}\n", EAN),
    ],
)
def test_effective_cache_key(ean, expected):
    assert effective_cache_key(ean) == expected


def test_sentinel_is_not_a_valid_ean():
    from catalog.core.constants import EAN_PATTERN

    assert not EAN_PATTERN.match(RECENT_SEARCHES_CACHE_KEY)


def test_second_read_within_ttl_is_served_from_cache(db, cache, record_store, add_search):
    add_search(EAN, "Mleko 3,2%", minutes=1)
    add_search(EAN, "Mleko 2%", minutes=2)

    first = get_search_history(db, EAN, cache=cache)
    second = get_search_history(db, EAN, cache=cache)

    assert record_store.call_count == 1
    assert json.dumps(first) == json.dumps(second)
    assert [r["description"] for r in second] == ["Mleko 2%", "Mleko 3,2%"]


def test_filtered_read_returns_all_matching_newest_first(db, cache, add_search):
    for i in range(7):
        add_search(EAN, f"opis {i}", minutes=i)
    add_search(OTHER_EAN, "inny", minutes=10)

    result = get_search_history(db, EAN, limit=5, cache=cache)

    assert [r["description"] for r in result] == [f"opis {i}" for i in reversed(range(7))]
    assert {r["ean"] for r in result} == {EAN}


def test_expired_entry_is_recomputed_and_overwritten(db, cache, record_store, add_search):
    add_search(EAN, "nowy opis")
    cache.put(EAN, [], timedelta(hours=1), now=utcnow() - timedelta(hours=2))

    result = get_search_history(db, EAN, cache=cache)

    assert record_store.call_count == 1
    assert [r["description"] for r in result] == ["nowy opis"]
    rows = _cache_rows(db, EAN)
    assert len(rows) == 1
    entry = cache.get(EAN)
    assert entry.snapshot == result
    assert entry.is_valid()


def test_absent_and_blank_filter_share_the_recent_entry(db, cache, record_store, add_search):
    add_search(EAN, minutes=1)

    from_none = get_search_history(db, None, cache=cache)
    from_blank = get_search_history(db, "   ", cache=cache)

    assert record_store.call_count == 1
    assert from_none == from_blank
    assert len(_cache_rows(db, RECENT_SEARCHES_CACHE_KEY)) == 1
    assert _cache_rows(db, "") == []


def test_recent_entry_is_separate_from_literal_keys(db, cache, add_search):
    add_search(EAN, "a", minutes=1)
    add_search(OTHER_EAN, "b", minutes=2)

    get_search_history(db, None, cache=cache)
    get_search_history(db, EAN, cache=cache)

    keys = {row.cache_key for row in db.query(SearchCache).all()}
    assert keys == {RECENT_SEARCHES_CACHE_KEY, EAN}
    assert cache.get(RECENT_SEARCHES_CACHE_KEY).snapshot != cache.get(EAN).snapshot


def test_empty_result_is_cached_until_it_expires(db, cache, record_store, add_search):
    assert get_search_history(db, "X", cache=cache) == []

    add_search("X", "pojawił się później")

    assert get_search_history(db, "X", cache=cache) == []
    assert record_store.call_count == 1


def test_recent_view_returns_five_newest_and_caches_them(db, cache, record_store, add_search):
    stored = [add_search(f"{i:08d}", f"opis {i}", minutes=i) for i in range(7)]

    first = get_search_history(db, None, limit=5, cache=cache)
    second = get_search_history(db, None, limit=5, cache=cache)

    expected_ids = [r["id"] for r in reversed(stored)][:5]
    assert [r["id"] for r in first] == expected_ids
    created = [r["created_at"] for r in first]
    assert created == sorted(created, reverse=True)
    assert second == first
    assert record_store.call_count == 1


def test_new_search_does_not_invalidate_recent_view(db, cache, add_search):
    add_search(EAN, "pierwszy", minutes=1)
    before = get_search_history(db, None, cache=cache)

    add_search(OTHER_EAN, "drugi", minutes=2)

    assert get_search_history(db, None, cache=cache) == before


def test_record_store_failure_propagates_without_caching(db, cache, engine):
    Search.__table__.drop(engine)

    with pytest.raises(StoreUnavailable):
        get_search_history(db, EAN, cache=cache)

    assert db.query(SearchCache).count() == 0


class FailingWriteCache(MemorySearchCacheStore):
    def __init__(self):
        super().__init__()
        self.put_calls = 0

    def put(self, key, snapshot, ttl, now=None):
        self.put_calls += 1
        raise CacheWriteFailed(key, RuntimeError("disk full"))


def test_cache_write_failure_still_returns_result(db, add_search, caplog):
    add_search(EAN, "opis")
    cache = FailingWriteCache()

    with caplog.at_level(logging.WARNING, logger="catalog.services.search_history"):
        result = get_search_history(db, EAN, cache=cache)

    assert [r["description"] for r in result] == ["opis"]
    assert cache.put_calls == 1
    assert "cache write failed" in caplog.text


def test_memory_cache_backend(db, record_store, add_search):
    cache = MemorySearchCacheStore()
    add_search(EAN, "opis")

    first = get_search_history(db, EAN, cache=cache)
    second = get_search_history(db, f" {EAN} ", cache=cache)

    assert first == second
    assert record_store.call_count == 1
    assert db.query(SearchCache).count() == 0


def test_uses_configured_cache_when_none_given(db, record_store, add_search):
    add_search(EAN, "opis")

    get_search_history(db, EAN)
    get_search_history(db, EAN)

    assert record_store.call_count == 1
    assert len(_cache_rows(db, EAN)) == 1


def test_literal_recent_key_is_rejected_and_recent_view_survives(db, cache, record_store, add_search):
    add_search(EAN, "opis")

    with pytest.raises(MalformedKey):
        get_search_history(db, f" {RECENT_SEARCHES_CACHE_KEY} ", cache=cache)

    assert record_store.call_count == 0
    assert db.query(SearchCache).count() == 0
    assert [r["description"] for r in get_search_history(db, None, cache=cache)] == ["opis"]


def test_effective_cache_key_rejects_recent_key():
    with pytest.raises(MalformedKey):
        effective_cache_key(RECENT_SEARCHES_CACHE_KEY)


def test_memory_cache_hit_is_not_changed_by_callers(db, add_search):
    cache = MemorySearchCacheStore()
    add_search(EAN, "opis")

    get_search_history(db, EAN, cache=cache).clear()
    get_search_history(db, EAN, cache=cache).append({"id": 99})

    assert [r["description"] for r in get_search_history(db, EAN, cache=cache)] == ["opis"]
