# -*- coding: utf-8 -*-
"""
dictmaths/simulation/table.py - Open-addressing reference table

Emulates the keyed container of the target: a fixed prime-sized slot array,
linear probing on collision, enumeration in slot order. The marker hashes to
its own address.
"""

from typing import Callable, Iterator, List, Optional, Sequence, Tuple

from dictmaths.core.types import TABLE_PRIMES, WORD_MASK, HashFunction, Key, is_marker


def default_capacity(size: int) -> int:
    """Largest entry count a table of ``size`` slots holds before growing"""
    return size // 2 + 2


def table_size_for(count: int, sizes: Sequence[int] = TABLE_PRIMES,
                   capacity: Callable[[int], int] = default_capacity) -> int:
    """Smallest table size whose capacity holds ``count`` entries"""
    for size in sorted(sizes):
        if count <= capacity(size):
            return size
    raise ValueError(f"No table size in {list(sizes)} holds {count} entries")


class ProbingTable:
    """
    Fixed-size open-addressing table with linear probing

    Args:
        size: slot count
        hash_fn: hash of numeric keys
        marker_hash: hash of the marker (its address on an unmitigated target)
    """

    def __init__(self, size: int, hash_fn: HashFunction, marker_hash: int) -> None:
        if size <= 0:
            raise ValueError(f"table size must be positive, got {size}")
        self.size = size
        self.hash_fn = hash_fn
        self.marker_hash = marker_hash & WORD_MASK
        self._slots: List[Optional[Key]] = [None] * size
        self._count = 0

    def __len__(self) -> int:
        return self._count

    def hash_of(self, key: Key) -> int:
        if is_marker(key):
            return self.marker_hash
        return self.hash_fn(key) & WORD_MASK

    def home_bucket(self, key: Key) -> int:
        return self.hash_of(key) % self.size

    def insert(self, key: Key) -> int:
        """
        Insert ``key`` and return the slot it landed in

        Re-inserting an existing key keeps its slot.

        Raises:
            OverflowError: the table is full
        """
        start = self.home_bucket(key)
        for step in range(self.size):
            slot = (start + step) % self.size
            current = self._slots[slot]
            if current is None:
                self._slots[slot] = key
                self._count += 1
                return slot
            if current == key and is_marker(current) == is_marker(key):
                return slot
        raise OverflowError(f"table of size {self.size} is full")

    def slot_of(self, key: Key) -> Optional[int]:
        for slot, current in enumerate(self._slots):
            if current is not None and current == key and is_marker(current) == is_marker(key):
                return slot
        return None

    def items(self) -> Iterator[Tuple[int, Key]]:
        """(slot, key) pairs in slot order"""
        for slot, key in enumerate(self._slots):
            if key is not None:
                yield slot, key

    def keys(self) -> List[Key]:
        """Keys in enumeration (slot) order"""
        return [key for _, key in self.items()]
