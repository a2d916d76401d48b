"""A small write-back L1 cache with FIFO replacement."""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass
from typing import Callable, Deque, Dict, List, Optional, Tuple

CACHE_CAPACITY = 16

WriteBack = Callable[[int, int], None]


class FifoPolicy:
    """Evicts the address that entered the cache first."""

    def choose_victim(self, queue: Deque[int]) -> Optional[int]:
        """Pop and return the oldest address, or None if the queue is empty."""
        if not queue:
            return None
        return queue.popleft()


@dataclass
class CacheEntry:
    data: int
    valid: bool = True
    dirty: bool = False


class Cache:
    """Maps addresses to cached words, writing dirty ones back on eviction."""

    def __init__(self, capacity: int = CACHE_CAPACITY, policy: Optional[FifoPolicy] = None) -> None:
        self.capacity = capacity
        self._policy = policy or FifoPolicy()
        self._entries: Dict[int, CacheEntry] = {}
        self._fifo: Deque[int] = deque()
        self._hits = 0
        self._misses = 0

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, address: int) -> bool:
        return address in self._entries

    def get(self, address: int) -> Optional[int]:
        """Return the cached word, or None on a miss. Counts hits and misses."""
        entry = self._entries.get(address)
        if entry is not None and entry.valid:
            self._hits += 1
            return entry.data
        self._misses += 1
        return None

    def put(self, address: int, data: int, write_back: Optional[WriteBack] = None) -> None:
        """Insert a clean entry, evicting one first when the cache is full.

        A dirty victim is handed to ``write_back(address, data)``.
        """
        if len(self._entries) >= self.capacity:
            victim = self._policy.choose_victim(self._fifo)
            if victim is not None:
                evicted = self._entries.pop(victim, None)
                if evicted is not None and evicted.dirty and write_back is not None:
                    write_back(victim, evicted.data)
        self._entries[address] = CacheEntry(data)
        self._fifo.append(address)

    def update(self, address: int, data: int) -> None:
        """Overwrite a cached word and mark it dirty; absent addresses are ignored."""
        entry = self._entries.get(address)
        if entry is None:
            return
        entry.data = data
        entry.dirty = True
        entry.valid = True

    def invalidate(self) -> None:
        """Mark every entry invalid and forget the replacement order."""
        for entry in self._entries.values():
            entry.valid = False
        self._fifo.clear()

    def dirty_data(self) -> List[Tuple[int, int]]:
        """Return (address, data) for every dirty entry."""
        return [(address, entry.data) for address, entry in self._entries.items() if entry.dirty]

    def hits(self) -> int:
        return self._hits

    def misses(self) -> int:
        return self._misses