# -*- coding: utf-8 -*-
"""
dictmaths/hashing/calibrate.py - Hash model calibration

Determines whether the target's numeric-key hash is affine
(hash(i) == i * c mod 2**64) and, if so, the constant c.
"""

import logging

from dictmaths.core.types import (
    DEFAULT_HASH_MULTIPLIER,
    WORD_MASK,
    HashFunction,
    HashModel,
)

logger = logging.getLogger(__name__)

DEFAULT_SAMPLE_COUNT = 8


def linear_hash(multiplier: int = DEFAULT_HASH_MULTIPLIER) -> HashFunction:
    """Affine integer hash: value * multiplier truncated to 64 bits"""
    def _hash(value: int) -> int:
        return (value * multiplier) & WORD_MASK
    _hash.multiplier = multiplier
    return _hash


def calibrate(hash_fn: HashFunction, sample_count: int = DEFAULT_SAMPLE_COUNT) -> HashModel:
    """
    Calibrate the numeric-key hash model

    Observes ``hash_fn`` on 0..sample_count-1 and takes hash(1) as the
    multiplier candidate. The model is linear iff every sample equals
    i * candidate. A non-linear model is a valid outcome: the default
    multiplier is kept and synthesis switches to bounded brute force.

    Args:
        hash_fn: observed hash of the target's numeric keys
        sample_count: number of samples (<= 0 uses the default of 8)

    Returns:
        Immutable HashModel carrying ``hash_fn`` for the fallback path
    """
    if sample_count <= 0:
        sample_count = DEFAULT_SAMPLE_COUNT

    candidate = hash_fn(1) & WORD_MASK
    linear = True

    for i in range(sample_count):
        observed = hash_fn(i) & WORD_MASK
        expected = (i * candidate) & WORD_MASK
        if observed != expected:
            logger.info(
                f"Hash model is non-linear: hash({i})=0x{observed:x}, "
                f"expected 0x{expected:x}; using bounded search"
            )
            linear = False
            break

    if linear:
        logger.debug(f"Detected linear hash multiplier 0x{candidate:x} over {sample_count} samples")
        return HashModel(multiplier=candidate, is_linear=True, observed=hash_fn)

    return HashModel(multiplier=DEFAULT_HASH_MULTIPLIER, is_linear=False, observed=hash_fn)
