"""Word-addressed main and secondary memory banks."""

from __future__ import annotations

MEMORY_ACCESS_ERROR = 0xFFFFFFFF
"""Marks an empty slot. Reads and writes that fail also return it."""

MAX_MEMORY_SIZE = 1024
MAX_SECONDARY_MEMORY_SIZE = 8192

_WORD_MASK = 0xFFFFFFFF


class _WordStore:
    """A fixed number of 32-bit words. Every slot starts out empty."""

    def __init__(self, size: int, max_size: int) -> None:
        self._size = min(size, max_size)
        self._words = [MEMORY_ACCESS_ERROR] * self._size

    @property
    def size(self) -> int:
        """Number of words this store holds after clamping."""
        return self._size

    def __len__(self) -> int:
        return self._size

    def _in_range(self, address: int) -> bool:
        return 0 <= address < self._size

    def _read(self, address: int) -> int:
        if self._in_range(address):
            return self._words[address]
        return MEMORY_ACCESS_ERROR

    def _write(self, address: int, data: int) -> int:
        if not self._in_range(address):
            return MEMORY_ACCESS_ERROR
        self._words[address] = data & _WORD_MASK
        return self._words[address]

    def _delete(self, address: int) -> int:
        if not self._in_range(address):
            return MEMORY_ACCESS_ERROR
        old = self._words[address]
        self._words[address] = MEMORY_ACCESS_ERROR
        return old

    def _is_empty(self) -> bool:
        return all(word == MEMORY_ACCESS_ERROR for word in self._words)

    def _has_free_slot(self) -> bool:
        return any(word == MEMORY_ACCESS_ERROR for word in self._words)


class MainMemory(_WordStore):
    """Main memory (RAM), at most MAX_MEMORY_SIZE words."""

    def __init__(self, size: int) -> None:
        super().__init__(size, MAX_MEMORY_SIZE)

    def read(self, address: int) -> int:
        """Return the word at ``address``, or MEMORY_ACCESS_ERROR if out of range."""
        return self._read(address)

    def write(self, address: int, data: int) -> int:
        """Store ``data`` as a 32-bit word and return what was stored.

        Returns MEMORY_ACCESS_ERROR when ``address`` is out of range.
        """
        return self._write(address, data)

    def delete(self, address: int) -> int:
        """Empty the slot at ``address`` and return what it held."""
        return self._delete(address)

    def is_empty(self) -> bool:
        """True when no slot holds data."""
        return self._is_empty()

    def has_free_slot(self) -> bool:
        """True when at least one slot is empty."""
        return self._has_free_slot()


class SecondaryMemory(_WordStore):
    """Secondary memory (disk), at most MAX_SECONDARY_MEMORY_SIZE words."""

    def __init__(self, size: int) -> None:
        super().__init__(size, MAX_SECONDARY_MEMORY_SIZE)

    def read(self, address: int) -> int:
        """Return the word at ``address``, or MEMORY_ACCESS_ERROR if out of range."""
        return self._read(address)

    def write(self, address: int, data: int) -> int:
        """Store ``data`` as a 32-bit word and return what was stored.

        Returns MEMORY_ACCESS_ERROR when ``address`` is out of range.
        """
        return self._write(address, data)

    def delete(self, address: int) -> int:
        """Empty the slot at ``address`` and return what it held."""
        return self._delete(address)

    def is_empty(self) -> bool:
        """True when no slot holds data."""
        return self._is_empty()

    def has_free_slot(self) -> bool:
        """True when at least one slot is empty."""
        return self._has_free_slot()