# -*- coding: utf-8 -*-
"""
dictmaths/recon/residue.py - Residue extraction

Recovers hash(marker) mod modulus from the marker's position in an EVEN and
an ODD container of the same table size.

With EVEN buckets taken, a marker in odd bucket h sits after (h+1)/2 keys;
a marker in even bucket h probes to h+1. With ODD buckets taken the roles
swap. The two observed candidates therefore differ by one probe step, and
the smaller (mod modulus) of the pair is the true bucket.
"""

import logging
from typing import Any, Optional, Sequence

from dictmaths.core.exceptions import ResidueDesync
from dictmaths.core.types import HashModel, Pattern, ResidueRecord, is_marker

logger = logging.getLogger(__name__)


def marker_position(keys: Sequence[Any]) -> Optional[int]:
    """0-based position of the marker, or None when absent"""
    for position, key in enumerate(keys):
        if is_marker(key):
            return position
    return None


def _is_numeric_key(key: Any) -> bool:
    return isinstance(key, int) and not isinstance(key, bool)


def validate_bucket_order(keys: Sequence[Any], modulus: int, pattern: Pattern,
                          model: HashModel) -> bool:
    """
    Check that decoded numeric keys follow the table's bucket order

    Every numeric key must sit in a bucket of the pattern's parity and
    buckets must strictly increase. The marker is skipped; any other key
    type fails the check.
    """
    previous = -1
    for key in keys:
        if is_marker(key):
            continue
        if not _is_numeric_key(key):
            return False

        bucket = model.bucket(key, modulus)
        if not pattern.owns(bucket):
            return False
        if bucket <= previous:
            return False
        previous = bucket

    return True


def reconcile(even_position: int, odd_position: int, modulus: int) -> int:
    """
    Reconcile marker positions into the true bucket index

    Raises:
        ResidueDesync: positions do not correspond to a single probe step
    """
    def desync(reason: str) -> ResidueDesync:
        return ResidueDesync(
            f"Table size {modulus}: {reason}",
            modulus=modulus, even_position=even_position, odd_position=odd_position
        )

    if even_position < 1 or odd_position < 0:
        raise desync("marker position out of range")

    even_candidate = 2 * even_position - 1
    odd_candidate = 2 * odd_position

    if even_candidate >= modulus or odd_candidate >= modulus:
        raise desync(f"candidates {even_candidate}/{odd_candidate} exceed the table")

    if (even_candidate + 1) % modulus == odd_candidate:
        return even_candidate
    if (odd_candidate + 1) % modulus == even_candidate:
        return odd_candidate
    if odd_candidate == modulus - 1 and even_candidate == 1:
        # marker in the last bucket wrapped around to bucket 1
        return odd_candidate

    raise desync(f"candidates {even_candidate}/{odd_candidate} are not one probe step apart")


def extract_residue(even_keys: Sequence[Any], odd_keys: Sequence[Any], modulus: int) -> ResidueRecord:
    """
    Derive hash(marker) mod ``modulus`` from two decoded key orders

    Args:
        even_keys: decoded keys of the EVEN-pattern container
        odd_keys: decoded keys of the ODD-pattern container
        modulus: table size both containers were built for

    Returns:
        ResidueRecord(modulus, remainder)

    Raises:
        ResidueDesync: marker missing or positions do not reconcile
    """
    even_position = marker_position(even_keys)
    odd_position = marker_position(odd_keys)
    if even_position is None or odd_position is None:
        raise ResidueDesync(
            f"Table size {modulus}: marker missing from decoded keys",
            modulus=modulus, even_position=even_position, odd_position=odd_position
        )

    remainder = reconcile(even_position, odd_position, modulus)
    logger.debug(
        f"Table size {modulus}: marker at even={even_position} odd={odd_position} -> {remainder}"
    )
    return ResidueRecord(modulus=modulus, remainder=remainder)
