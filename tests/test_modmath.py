import math

import pytest

from dictmaths.core.types import DEFAULT_HASH_MULTIPLIER, TABLE_PRIMES
from dictmaths.hashing.modmath import extended_gcd, mod_inverse, mod_mul


@pytest.mark.parametrize("a,b", [(240, 46), (17, 5), (0, 9), (12, 0), (-35, 15)])
def test_extended_gcd_satisfies_bezout(a, b):
    g, x, y = extended_gcd(a, b)
    assert g == math.gcd(a, b)
    assert a * x + b * y == g


@pytest.mark.parametrize("modulus", TABLE_PRIMES)
def test_inverse_of_hash_multiplier(modulus):
    inverse = mod_inverse(DEFAULT_HASH_MULTIPLIER, modulus)
    assert 0 <= inverse < modulus
    assert (DEFAULT_HASH_MULTIPLIER * inverse) % modulus == 1


def test_inverse_edge_cases():
    assert mod_inverse(3, 7) == 5
    assert mod_inverse(6, 9) is None
    assert mod_inverse(5, 1) == 0
    assert (-3 * mod_inverse(-3, 7)) % 7 == 1
    with pytest.raises(ValueError):
        mod_inverse(3, 0)


def test_mod_mul_does_not_truncate():
    a = b = 1 << 63
    assert mod_mul(a, b, 1087) == (a * b) % 1087
    with pytest.raises(ValueError):
        mod_mul(1, 2, -5)
