# -*- coding: utf-8 -*-
"""
dictmaths/hashing/synth.py - Bucket key synthesis

Produces numeric keys that land in a chosen bucket of a table of a given
size:
- linear model: closed form via the modular inverse of the multiplier
- non-linear model: bounded scan of small integers against the real hash
"""

import logging
from typing import Optional

from dictmaths.core.exceptions import KeySynthesisFailed
from dictmaths.core.types import HashModel

from .modmath import mod_inverse

logger = logging.getLogger(__name__)

DEFAULT_BRUTE_FORCE_FACTOR = 128


def _check_bucket(target_bucket: int, modulus: int) -> None:
    if modulus <= 0:
        raise KeySynthesisFailed(f"Invalid table size {modulus}", bucket=target_bucket, modulus=modulus)
    if not 0 <= target_bucket < modulus:
        raise KeySynthesisFailed(
            f"Bucket {target_bucket} outside table of size {modulus}",
            bucket=target_bucket, modulus=modulus
        )


def search_key_for_bucket(target_bucket: int, modulus: int, model: HashModel,
                          factor: int = DEFAULT_BRUTE_FORCE_FACTOR) -> Optional[int]:
    """
    Scan [0, modulus * factor) for the first key hashing into ``target_bucket``

    Every invocation owns its own loop state, so calls are safe to run
    concurrently.

    Returns:
        The smallest matching key, or None when the bound is exhausted
    """
    _check_bucket(target_bucket, modulus)
    limit = modulus * factor
    for candidate in range(limit):
        if model.bucket(candidate, modulus) == target_bucket:
            return candidate
    logger.debug(f"Bucket {target_bucket} unreachable within {limit} candidates (table size {modulus})")
    return None


def solve_key_for_bucket(target_bucket: int, modulus: int, model: HashModel) -> Optional[int]:
    """
    Closed-form key for ``target_bucket`` under the linear model

    key = target_bucket * inverse(multiplier) mod modulus, verified by
    recomputing its bucket.

    Returns:
        Key in [0, modulus), or None when no inverse exists or the check fails
    """
    _check_bucket(target_bucket, modulus)
    inverse = mod_inverse(model.multiplier, modulus)
    if inverse is None:
        logger.debug(f"Multiplier 0x{model.multiplier:x} has no inverse modulo {modulus}")
        return None

    candidate = (target_bucket * inverse) % modulus

    computed = model.bucket(candidate, modulus)
    if computed != target_bucket:
        logger.warning(
            f"Bucket mismatch for target={target_bucket}, table_size={modulus}: got {computed}"
        )
        return None
    return candidate


def find_key_for_bucket(target_bucket: int, modulus: int, model: HashModel,
                        brute_force_factor: int = DEFAULT_BRUTE_FORCE_FACTOR) -> Optional[int]:
    """
    Find a numeric key whose hash lands in ``target_bucket``

    Args:
        target_bucket: bucket index in [0, modulus)
        modulus: table size
        model: calibrated hash model
        brute_force_factor: search bound multiplier for the non-linear path

    Returns:
        The key, or None when the bucket is unreachable

    Raises:
        KeySynthesisFailed: bucket outside the table or invalid table size
    """
    if model.is_linear:
        return solve_key_for_bucket(target_bucket, modulus, model)
    return search_key_for_bucket(target_bucket, modulus, model, brute_force_factor)
