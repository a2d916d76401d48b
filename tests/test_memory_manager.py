import pytest

from neumannsim.memory_manager import PAGE_SIZE, FrameInfo, MemoryManager
from neumannsim.process import ProcessContext


@pytest.fixture
def manager():
    return MemoryManager(512, 8192)


def test_frame_count_from_page_size(manager):
    assert manager.frame_count == 512 // PAGE_SIZE


def test_write_then_read_round_trip(manager):
    proc = ProcessContext(pid=1)
    manager.write(4, 1234, proc)
    assert manager.read(4, proc) == 1234


def test_read_of_unmapped_address_is_zero(manager):
    proc = ProcessContext(pid=1)
    assert manager.read(100, proc) == 0
    assert proc.mem_reads == 1
    assert proc.mem_accesses_total == 1
    assert proc.page_table == {}


def test_first_write_maps_page_to_first_frame(manager):
    proc = ProcessContext(pid=1)
    manager.write(PAGE_SIZE + 4, 7, proc)
    assert proc.page_table == {1: 0}
    info = manager.frame_info(0)
    assert info.owner is proc
    assert info.virtual_page == 1


def test_write_counters(manager):
    proc = ProcessContext(pid=1)
    manager.write(0, 5, proc)
    assert proc.mem_writes == 1
    assert proc.primary_mem_accesses == 1
    assert proc.cache_mem_accesses == 1
    assert proc.cache_misses == 1
    assert proc.memory_cycles == proc.weights.primary + proc.weights.cache


def test_read_after_write_hits_cache(manager):
    proc = ProcessContext(pid=1)
    manager.write(8, 42, proc)
    cycles = proc.memory_cycles
    assert manager.read(8, proc) == 42
    assert proc.cache_hits == 1
    assert proc.cache_mem_accesses == 2
    assert proc.memory_cycles == cycles + proc.weights.cache
    assert proc.primary_mem_accesses == 1


def test_negative_data_is_stored_as_unsigned_word(manager):
    proc = ProcessContext(pid=1)
    manager.write(0, -1, proc)
    assert manager.main_memory.read(0) == 0xFFFFFFFF


def test_processes_get_separate_frames(manager):
    first = ProcessContext(pid=1)
    second = ProcessContext(pid=2)
    manager.write(0, 11, first)
    manager.write(0, 22, second)
    assert first.page_table[0] != second.page_table[0]
    assert manager.read(0, first) == 11
    assert manager.read(0, second) == 22


def test_swap_out_and_swap_in_preserve_data():
    mm = MemoryManager(2 * PAGE_SIZE, 8192)
    proc = ProcessContext(pid=3)
    mm.write(4, 111, proc)
    mm.write(PAGE_SIZE, 222, proc)
    mm.write(2 * PAGE_SIZE + 8, 333, proc)

    assert proc.page_table == {1: 1, 2: 0}
    assert mm.swap_table == {(3, 0): 0}

    assert mm.read(4, proc) == 111
    assert proc.page_table == {2: 0, 0: 1}
    assert mm.swap_table == {(3, 1): PAGE_SIZE // 4}


def test_swapped_page_is_copied_to_secondary_memory():
    mm = MemoryManager(PAGE_SIZE, 8192)
    proc = ProcessContext(pid=1)
    mm.write(12, 555, proc)
    mm.write(PAGE_SIZE, 1, proc)
    assert mm.secondary_memory.read(12 // 4) == 555
    assert (1, 0) in mm.swap_table


def test_write_back_to_main_memory(manager):
    manager.write_back(8, 99)
    assert manager.main_memory.read(2) == 99


def test_write_back_beyond_limit_goes_to_secondary():
    mm = MemoryManager(64, 128)
    mm.write_back(64 + 8, 7)
    assert mm.secondary_memory.read(2) == 7
    assert mm.main_memory.read(2) != 7


def test_no_frames_raises_memory_error():
    mm = MemoryManager(PAGE_SIZE - 1, 64)
    proc = ProcessContext(pid=1)
    with pytest.raises(MemoryError):
        mm.write(0, 1, proc)


def test_frame_info_defaults():
    info = FrameInfo()
    assert info.owner is None
    assert info.virtual_page == -1