# -*- coding: utf-8 -*-
"""
dictmaths/recon/crt.py - Chinese Remainder Theorem combiner

Folds per-modulus residues into the unique value below the product of the
moduli. With the nine table primes that product exceeds 2**64, so the
folded value is already the 64-bit answer.
"""

import logging
from typing import Iterable, List

from dictmaths.core.exceptions import ArithmeticOverflowGuard, CRTError
from dictmaths.core.types import WORD_MASK, ReconstructedAddress, ResidueRecord
from dictmaths.hashing.modmath import mod_inverse, mod_mul

logger = logging.getLogger(__name__)


def solve(records: Iterable[ResidueRecord]) -> ReconstructedAddress:
    """
    Combine residue records into a single value

    Args:
        records: (modulus, remainder) congruences, pairwise-coprime moduli

    Returns:
        ReconstructedAddress with the folded value and modulus product

    Raises:
        CRTError: empty input, remainder out of range, or non-coprime moduli
        ArithmeticOverflowGuard: the folded value does not fit in 64 bits
    """
    records: List[ResidueRecord] = list(records)
    if not records:
        raise CRTError("No residues to combine")

    for record in records:
        if record.modulus <= 1 or not 0 <= record.remainder < record.modulus:
            raise CRTError(
                f"Invalid residue {record.remainder} mod {record.modulus}",
                {'modulus': record.modulus, 'remainder': record.remainder}
            )

    x = records[0].remainder
    product = records[0].modulus

    for record in records[1:]:
        r, m = record.remainder, record.modulus

        # x + k*M ≡ r (mod m)  =>  k ≡ (r - x) * M^-1 (mod m)
        inverse = mod_inverse(product % m, m)
        if inverse is None:
            raise CRTError(
                f"Modulus {m} is not coprime with the running product",
                {'modulus': m, 'product': product}
            )

        diff = (r - x % m) % m
        k = mod_mul(diff, inverse, m)

        x = x + k * product
        product = product * m

    if x > WORD_MASK:
        raise ArithmeticOverflowGuard(
            f"Folded value 0x{x:x} does not fit in 64 bits",
            value=x, product=product
        )

    moduli = tuple(r.modulus for r in records)
    logger.debug(f"CRT over {len(moduli)} moduli (product {product}) -> 0x{x:x}")
    return ReconstructedAddress(value=x, modulus_product=product, moduli=moduli)
