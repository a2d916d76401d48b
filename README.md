# neumannsim

The building blocks of a small von Neumann machine simulator for teaching
operating systems. It provides a two-level memory, paged virtual memory with
swapping, a write-back L1 cache with FIFO replacement, an assembler for
MIPS-like programs written as JSON, and the scheduling metrics reported
after a multicore run.

The package has no dependencies outside the standard library.

## Install

```
pip install neumannsim
```

To run the tests, install the `test` extra (`pip install "neumannsim[test]"`)
and run `pytest`.

## Modules

### `neumannsim.storage`

`MainMemory(size)` and `SecondaryMemory(size)` are word-addressed stores.
They are capped at `MAX_MEMORY_SIZE` (1024) and `MAX_SECONDARY_MEMORY_SIZE`
(8192) words. An empty slot holds `MEMORY_ACCESS_ERROR` (`0xFFFFFFFF`).

- `read(address)` returns the word stored at `address`.
- `write(address, data)` stores `data` masked to 32 bits and returns the
  stored value.
- `delete(address)` empties the slot and returns what it held.

All three return `MEMORY_ACCESS_ERROR` when the address is out of range.
`is_empty()` and `has_free_slot()` inspect every slot.

### `neumannsim.cache`

`Cache(capacity=16, policy=None)` maps addresses to `CacheEntry` records,
which have `data`, `valid` and `dirty` fields.

- `get(address)` returns the cached word, or `None` on a miss. It counts
  hits and misses, which `hits()` and `misses()` return.
- `put(address, data, write_back)` adds a clean entry. When the cache is
  full it first evicts the victim chosen by `FifoPolicy.choose_victim`. If
  that victim is dirty, it is passed to `write_back(address, data)`.
- `update(address, data)` overwrites an entry that is already cached and
  marks it dirty. Addresses that are not cached are ignored.
- `invalidate()` marks every entry invalid and clears the FIFO order.
- `dirty_data()` lists `(address, data)` for the dirty entries.

### `neumannsim.process`

`ProcessContext` holds a process's `pid`, `name`, `page_table`,
`program_counter` and `burst_time`, plus its memory counters: total, read
and write accesses, accesses at each level, `memory_cycles`, and cache hits
and misses. `record_cache(hit)` increments the hit or the miss counter.

`MemoryWeights` gives the cycles charged per access. The defaults are 1 for
the cache, 5 for primary memory and 10 for secondary memory.

### `neumannsim.memory_manager`

`MemoryManager(main_memory_size, secondary_memory_size)` translates virtual
byte addresses through per-process page tables. Pages are `PAGE_SIZE`
(32) bytes.

- New pages take the first free frame.
- When no frame is free, victims are chosen round-robin. Their page is
  copied to secondary memory and recorded in `swap_table`, and it is
  swapped back in on the next access.
- `write(virtual_address, data, process)` allocates a frame for a page it
  has not seen before.
- `read(virtual_address, process)` returns `0` for an unmapped address.
- Both methods go through `cache` and update the counters of `process`.
- `write_back(address, data)` stores a word at a physical byte address
  without going through the cache. The cache uses it for dirty evictions.

`frame_count`, `main_memory_limit` and `frame_info(frame)` expose the frame
layout. A re-entrant lock serialises access.

### `neumannsim.assembler`

`Assembler` encodes the following instructions into 32-bit words:

- R-type: `add`, `sub`, `and`, `or`, `mult`, `div`, `sll`, `srl`, `jr`
- I-type: `addi`, `andi`, `ori`, `slti`, `li`, `lw`, `sw`, `beq`, `bne`,
  `bgt`, `blt`
- J-type: `j`, `jal`
- Also: `print` and `end`

Code labels are byte addresses. Data labels come from the `data` section.

`load(document, memory, process, start_address=0)` writes the data section
and then the code into a `MemoryManager`. It sets the process's
`program_counter` to the `start` label if there is one, and to
`start_address` otherwise, and sets `burst_time` to the instruction count.
It returns a `LoadResult` with `end_address`, `labels` and `data_labels`.

`load_file(path, ...)` and the module function `load_program(path, ...)`
read the document from a JSON file.

The helpers `parse_immediate`, `parse_offset_base`, `register_code`,
`opcode_for`, `funct_for` and `build_instruction` are public. Malformed
input raises `AssemblerError`, which is a `ValueError`.

### `neumannsim.metrics`

`ProcessTimes` records one process's `arrival_time`, `finish_time`,
`cpu_time` and `io_cycles`. Its `turnaround()` is finish time minus arrival
time. Its `waiting_time()` is turnaround minus CPU and I/O time, never below
zero.

`compute_system_metrics(processes, core_clocks, core_busy)` returns a
`SystemMetrics` with totals, average waiting time and turnaround, CPU
utilisation, throughput and efficiency.

`format_system_report(metrics, policy_name)` renders the report as text.
`write_metrics_file(metrics, policy_name, directory)` writes
`metricas_<policy>.dat` and returns its path.

## Example

```python
from neumannsim.memory_manager import MemoryManager
from neumannsim.process import ProcessContext
from neumannsim.assembler import load_program

memory = MemoryManager(512, 8192)
process = ProcessContext(pid=1)
result = load_program("program.json", memory, process, 0)
print(result.end_address, process.program_counter)
first_word = memory.read(0, process)
```

## What it does not do

The package has no CPU, no instruction pipeline, no scheduler, no I/O
manager and no command-line program. Programs can be assembled and loaded
into memory, but nothing here executes them. The metrics functions work
only on times that the caller supplies.