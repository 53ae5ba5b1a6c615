# -*- coding: utf-8 -*-
"""
dictmaths/simulation/roundtrip.py - Round-trip collaborators

The engine treats the target's deserialize/reserialize cycle as a black box
``bytes -> bytes``. These implementations stand in for it offline:

- ProbingTableRoundTrip: rebuilds the container in a ProbingTable and writes
  keys back in slot order, as an unmitigated target does
- PermutingRoundTrip: writes keys back in a seeded random order unrelated
  to bucket placement, as a target with randomized enumeration does
"""

import logging
import random
import threading
from typing import Callable, List, Optional, Sequence

from dictmaths.container.archive import encode_keys
from dictmaths.container.decoder import decode
from dictmaths.core.types import MARKER_CLASS_NAME, TABLE_PRIMES, HashFunction, Key, RoundTrip
from dictmaths.hashing.calibrate import linear_hash

from .table import ProbingTable, default_capacity, table_size_for

logger = logging.getLogger(__name__)


class ProbingTableRoundTrip:
    """
    Reference round trip: re-serialize in hash-table slot order

    Args:
        marker_address: value the marker hashes to
        hash_fn: numeric key hash (default: the affine target hash)
        sizes: table sizes the emulated container grows through
        marker_class: class name of the marker record
    """

    def __init__(self, marker_address: int, hash_fn: Optional[HashFunction] = None,
                 sizes: Sequence[int] = TABLE_PRIMES,
                 marker_class: str = MARKER_CLASS_NAME,
                 capacity: Callable[[int], int] = default_capacity) -> None:
        self.marker_address = marker_address
        self.hash_fn = hash_fn or linear_hash()
        self.sizes = tuple(sizes)
        self.marker_class = marker_class
        self.capacity = capacity
        self.calls = 0
        self._lock = threading.Lock()

    def build_table(self, keys: Sequence[Key]) -> ProbingTable:
        size = table_size_for(len(keys), self.sizes, self.capacity)
        table = ProbingTable(size, self.hash_fn, self.marker_address)
        for key in keys:
            table.insert(key)
        return table

    def __call__(self, data: bytes) -> bytes:
        # the pipeline may call from several worker threads
        with self._lock:
            self.calls += 1
            call = self.calls
        keys = decode(data, self.marker_class)
        table = self.build_table(keys)
        ordered = table.keys()
        logger.debug(f"Round trip #{call}: {len(ordered)} keys through table of size {table.size}")
        return encode_keys(ordered, marker_class=self.marker_class)


class PermutingRoundTrip:
    """
    Round trip returning keys in a fixed pseudo-random order

    The permutation depends on the seed and the container size, so the EVEN
    and ODD containers of one table size are shuffled independently.

    Args:
        seed: permutation seed
        marker_class: class name of the marker record
    """

    def __init__(self, seed: int = 0, marker_class: str = MARKER_CLASS_NAME) -> None:
        self.seed = seed
        self.marker_class = marker_class

    def permute(self, keys: Sequence[Key]) -> List[Key]:
        shuffled = list(keys)
        random.Random(self.seed * 1000003 + len(shuffled)).shuffle(shuffled)
        return shuffled

    def __call__(self, data: bytes) -> bytes:
        keys = decode(data, self.marker_class)
        return encode_keys(self.permute(keys), marker_class=self.marker_class)
