# -*- coding: utf-8 -*-
"""
dictmaths.hashing - Hash model and bucket targeting

- calibrate: detect the affine numeric-key hash and its multiplier
- find_key_for_bucket: synthesize a key landing in a chosen bucket
- extended_gcd / mod_inverse / mod_mul: modular arithmetic helpers
"""

from .modmath import extended_gcd, mod_inverse, mod_mul
from .calibrate import calibrate, linear_hash, DEFAULT_SAMPLE_COUNT
from .synth import (
    find_key_for_bucket,
    solve_key_for_bucket,
    search_key_for_bucket,
    DEFAULT_BRUTE_FORCE_FACTOR,
)

__all__ = [
    'extended_gcd',
    'mod_inverse',
    'mod_mul',
    'calibrate',
    'linear_hash',
    'DEFAULT_SAMPLE_COUNT',
    'find_key_for_bucket',
    'solve_key_for_bucket',
    'search_key_for_bucket',
    'DEFAULT_BRUTE_FORCE_FACTOR',
]
