# -*- coding: utf-8 -*-
"""
dictmaths/hashing/modmath.py - Modular arithmetic helpers

Extended Euclid, modular inverse and widened modular multiplication shared by
the key synthesizer and the CRT combiner.
"""

from typing import Optional, Tuple


def extended_gcd(a: int, b: int) -> Tuple[int, int, int]:
    """
    Extended Euclidean algorithm (iterative)

    Returns:
        (g, x, y) with a*x + b*y == g == gcd(a, b)
    """
    old_r, r = a, b
    old_x, x = 1, 0
    old_y, y = 0, 1
    while r != 0:
        q = old_r // r
        old_r, r = r, old_r - q * r
        old_x, x = x, old_x - q * x
        old_y, y = y, old_y - q * y
    if old_r < 0:
        old_r, old_x, old_y = -old_r, -old_x, -old_y
    return old_r, old_x, old_y


def mod_inverse(a: int, m: int) -> Optional[int]:
    """
    Modular multiplicative inverse of ``a`` modulo ``m``

    Returns:
        x in [0, m) with a*x ≡ 1 (mod m), or None when gcd(a, m) != 1
    """
    if m <= 0:
        raise ValueError(f"modulus must be positive, got {m}")
    if m == 1:
        return 0
    g, x, _ = extended_gcd(a % m, m)
    if g != 1:
        return None
    return x % m


def mod_mul(a: int, b: int, m: int) -> int:
    """(a * b) mod m without truncating the intermediate product"""
    if m <= 0:
        raise ValueError(f"modulus must be positive, got {m}")
    return ((a % m) * (b % m)) % m
