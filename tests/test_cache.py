from collections import deque

from neumannsim.cache import CACHE_CAPACITY, Cache, CacheEntry, FifoPolicy


def test_fifo_policy_pops_oldest():
    queue = deque([4, 8, 12])
    policy = FifoPolicy()
    assert policy.choose_victim(queue) == 4
    assert list(queue) == [8, 12]


def test_fifo_policy_empty_queue():
    assert FifoPolicy().choose_victim(deque()) is None


def test_cache_entry_defaults():
    entry = CacheEntry(data=3)
    assert entry.valid and not entry.dirty


def test_default_capacity():
    assert Cache().capacity == CACHE_CAPACITY


def test_miss_then_hit_counts():
    cache = Cache()
    assert cache.get(40) is None
    cache.put(40, 99)
    assert cache.get(40) == 99
    assert cache.hits() == 1
    assert cache.misses() == 1


def test_eviction_is_fifo():
    cache = Cache(capacity=2)
    cache.put(0, 10)
    cache.put(4, 20)
    cache.put(8, 30)
    assert 0 not in cache
    assert cache.get(4) == 20
    assert cache.get(8) == 30
    assert len(cache) == 2


def test_dirty_victim_is_written_back():
    written = []
    cache = Cache(capacity=1)
    cache.put(0, 10)
    cache.update(0, 11)
    cache.put(4, 20, lambda address, data: written.append((address, data)))
    assert written == [(0, 11)]


def test_clean_victim_is_not_written_back():
    written = []
    cache = Cache(capacity=1)
    cache.put(0, 10)
    cache.put(4, 20, lambda address, data: written.append((address, data)))
    assert written == []
    assert cache.get(4) == 20


def test_update_absent_address_is_ignored():
    cache = Cache()
    cache.update(12, 5)
    assert 12 not in cache
    assert cache.dirty_data() == []


def test_update_marks_dirty():
    cache = Cache()
    cache.put(8, 1)
    cache.put(16, 2)
    cache.update(16, 3)
    assert cache.dirty_data() == [(16, 3)]
    assert cache.get(16) == 3


def test_invalidate_turns_hits_into_misses():
    cache = Cache()
    cache.put(8, 1)
    cache.invalidate()
    assert cache.get(8) is None
    assert cache.misses() == 1


def test_invalidate_clears_replacement_order():
    cache = Cache(capacity=1)
    cache.put(0, 10)
    cache.invalidate()
    cache.put(4, 20)
    # With no queued victim nothing is evicted.
    assert 0 in cache and 4 in cache
    assert len(cache) == 2