# -*- coding: utf-8 -*-
"""
dictmaths.simulation - Offline stand-ins for the target

- ProbingTable: open-addressing, linear-probing keyed table
- ProbingTableRoundTrip: re-serializes containers in slot order
- PermutingRoundTrip: re-serializes containers in a seeded random order
"""

from .table import ProbingTable, default_capacity, table_size_for
from .roundtrip import RoundTrip, ProbingTableRoundTrip, PermutingRoundTrip

__all__ = [
    'ProbingTable',
    'default_capacity',
    'table_size_for',
    'RoundTrip',
    'ProbingTableRoundTrip',
    'PermutingRoundTrip',
]
