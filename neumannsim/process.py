"""Per-process state that the memory system reads and updates."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict


@dataclass
class MemoryWeights:
    """Cycle cost charged for one access at each memory level."""

    cache: int = 1
    primary: int = 5
    secondary: int = 10


@dataclass
class ProcessContext:
    """A process as seen by the memory manager: identity, page table and counters."""

    pid: int
    name: str = ""
    weights: MemoryWeights = field(default_factory=MemoryWeights)
    page_table: Dict[int, int] = field(default_factory=dict)
    program_counter: int = 0
    burst_time: int = 0
    mem_accesses_total: int = 0
    mem_reads: int = 0
    mem_writes: int = 0
    cache_mem_accesses: int = 0
    primary_mem_accesses: int = 0
    secondary_mem_accesses: int = 0
    memory_cycles: int = 0
    cache_hits: int = 0
    cache_misses: int = 0

    def record_cache(self, hit: bool) -> None:
        """Count one cache hit or one cache miss."""
        if hit:
            self.cache_hits += 1
        else:
            self.cache_misses += 1