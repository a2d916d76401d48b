"""Paged virtual memory over main memory, secondary memory and an L1 cache."""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

from .cache import Cache
from .process import ProcessContext
from .storage import MEMORY_ACCESS_ERROR, MainMemory, SecondaryMemory

logger = logging.getLogger(__name__)

PAGE_SIZE = 32
"""Bytes per page and per frame."""

WORD_SIZE = 4
WORDS_PER_PAGE = PAGE_SIZE // WORD_SIZE

_WORD_MASK = 0xFFFFFFFF


@dataclass
class FrameInfo:
    """Which process and virtual page currently occupy a frame."""

    owner: Optional[ProcessContext] = None
    virtual_page: int = -1


class MemoryManager:
    """Translates virtual byte addresses and routes accesses through the cache.

    Frames are handed out first-free; once none is left, a victim frame is
    chosen round-robin and its page is copied out to secondary memory.
    """

    def __init__(self, main_memory_size: int, secondary_memory_size: int) -> None:
        self.main_memory = MainMemory(main_memory_size)
        self.secondary_memory = SecondaryMemory(secondary_memory_size)
        self.cache = Cache()
        self._lock = threading.RLock()
        self._main_limit = main_memory_size
        self._frame_count = main_memory_size // PAGE_SIZE
        self._frame_used: List[bool] = [False] * self._frame_count
        self._frames: List[FrameInfo] = [FrameInfo() for _ in range(self._frame_count)]
        self._swap_table: Dict[Tuple[int, int], int] = {}
        self._next_swap_address = 0
        self._victim = 0

    @property
    def frame_count(self) -> int:
        """Number of page frames in main memory."""
        return self._frame_count

    @property
    def main_memory_limit(self) -> int:
        """Physical byte addresses below this go to main memory."""
        return self._main_limit

    @property
    def swap_table(self) -> Dict[Tuple[int, int], int]:
        """A copy of the (pid, virtual page) -> disk word address table."""
        with self._lock:
            return dict(self._swap_table)

    def frame_info(self, frame: int) -> FrameInfo:
        """Return the ownership record of ``frame``."""
        return self._frames[frame]

    def _swap_out(self) -> int:
        if self._frame_count == 0:
            raise MemoryError("main memory has no page frames")
        victim = self._victim
        self._victim = (self._victim + 1) % self._frame_count

        info = self._frames[victim]
        owner = info.owner
        if owner is None:
            return victim

        disk_address = self._next_swap_address
        self._next_swap_address += WORDS_PER_PAGE
        ram_base = victim * WORDS_PER_PAGE
        for i in range(WORDS_PER_PAGE):
            self.secondary_memory.write(disk_address + i, self.main_memory.read(ram_base + i))

        self._swap_table[(owner.pid, info.virtual_page)] = disk_address
        owner.page_table.pop(info.virtual_page, None)
        logger.info(
            "swap-out frame %d (pid %d, page %d) -> disk @%d",
            victim, owner.pid, info.virtual_page, disk_address,
        )
        return victim

    def _swap_in(self, frame: int, process: ProcessContext, page: int, disk_address: int) -> None:
        ram_base = frame * WORDS_PER_PAGE
        for i in range(WORDS_PER_PAGE):
            self.main_memory.write(ram_base + i, self.secondary_memory.read(disk_address + i))
        self._swap_table.pop((process.pid, page), None)
        logger.info(
            "swap-in pid %d, page %d (disk @%d) -> frame %d",
            process.pid, page, disk_address, frame,
        )

    def _allocate_frame(self, process: ProcessContext, page: int) -> int:
        for index, used in enumerate(self._frame_used):
            if not used:
                self._frame_used[index] = True
                self._frames[index] = FrameInfo(process, page)
                return index
        freed = self._swap_out()
        self._frames[freed] = FrameInfo(process, page)
        return freed

    def _translate(self, virtual_address: int, process: ProcessContext, is_write: bool) -> Optional[int]:
        page, offset = divmod(virtual_address, PAGE_SIZE)

        frame = process.page_table.get(page)
        if frame is not None:
            return frame * PAGE_SIZE + offset

        disk_address = self._swap_table.get((process.pid, page))
        if disk_address is not None:
            frame = self._allocate_frame(process, page)
            self._swap_in(frame, process, page, disk_address)
            process.page_table[page] = frame
            return frame * PAGE_SIZE + offset

        if not is_write:
            return None
        frame = self._allocate_frame(process, page)
        process.page_table[page] = frame
        logger.info("pid %d: frame %d allocated for page %d", process.pid, frame, page)
        return frame * PAGE_SIZE + offset

    def read(self, virtual_address: int, process: ProcessContext) -> int:
        """Read one word. Unmapped addresses read as 0."""
        with self._lock:
            process.mem_accesses_total += 1
            process.mem_reads += 1

            physical = self._translate(virtual_address, process, is_write=False)
            if physical is None:
                return 0

            cached = self.cache.get(physical)
            if cached is not None:
                process.cache_mem_accesses += 1
                process.memory_cycles += process.weights.cache
                process.record_cache(True)
                return cached

            process.record_cache(False)
            if physical < self._main_limit:
                process.primary_mem_accesses += 1
                process.memory_cycles += process.weights.primary
                data = self.main_memory.read(physical // WORD_SIZE)
            else:
                process.secondary_mem_accesses += 1
                process.memory_cycles += process.weights.secondary
                data = self.secondary_memory.read((physical - self._main_limit) // WORD_SIZE)

            self.cache.put(physical, data, self.write_back)
            return data

    def write(self, virtual_address: int, data: int, process: ProcessContext) -> None:
        """Write one 32-bit word, allocating a frame for a new page."""
        data &= _WORD_MASK
        with self._lock:
            process.mem_accesses_total += 1
            process.mem_writes += 1

            physical = self._translate(virtual_address, process, is_write=True)
            if physical is None:
                return

            if physical < self._main_limit:
                process.primary_mem_accesses += 1
                process.memory_cycles += process.weights.primary
                self.main_memory.write(physical // WORD_SIZE, data)
            else:
                self.secondary_memory.write((physical - self._main_limit) // WORD_SIZE, data)

            if self.cache.get(physical) is not None:
                self.cache.update(physical, data)
                process.record_cache(True)
            else:
                self.cache.put(physical, data, self.write_back)
                process.record_cache(False)

            process.cache_mem_accesses += 1
            process.memory_cycles += process.weights.cache

    def write_back(self, address: int, data: int) -> None:
        """Store a word at a physical byte address, bypassing the cache."""
        if address < self._main_limit:
            self.main_memory.write(address // WORD_SIZE, data)
        else:
            self.secondary_memory.write((address - self._main_limit) // WORD_SIZE, data)


__all__ = ["FrameInfo", "MemoryManager", "PAGE_SIZE", "MEMORY_ACCESS_ERROR"]