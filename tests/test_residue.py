import pytest

from dictmaths.container.builder import build_container
from dictmaths.core.exceptions import ResidueDesync
from dictmaths.core.types import MARKER, TABLE_PRIMES, Pattern
from dictmaths.hashing import linear_hash
from dictmaths.recon.residue import extract_residue, marker_position, reconcile, validate_bucket_order
from dictmaths.simulation.table import ProbingTable


def enumerate_table(container, marker_hash):
    table = ProbingTable(container.modulus, linear_hash(), marker_hash)
    for key in container.entries:
        table.insert(key)
    return table.keys()


def test_marker_position():
    assert marker_position([4, 2, MARKER, 8]) == 2
    assert marker_position([MARKER]) == 0
    assert marker_position([1, 2]) is None


@pytest.mark.parametrize("modulus", TABLE_PRIMES)
def test_every_marker_bucket_is_recovered(model, modulus):
    even = build_container(Pattern.EVEN, modulus, model)
    odd = build_container(Pattern.ODD, modulus, model)
    for bucket in range(modulus):
        record = extract_residue(enumerate_table(even, bucket), enumerate_table(odd, bucket), modulus)
        assert record.modulus == modulus
        assert record.remainder == bucket


def test_last_bucket_wraps_to_bucket_one():
    # EVEN: slot 22 taken, wraps past slot 0 to slot 1 -> candidate 1
    # ODD: slot 22 free -> candidate 22
    assert reconcile(1, 11, 23) == 22


@pytest.mark.parametrize("even_position,odd_position", [
    (0, 3),     # EVEN marker cannot come first
    (3, -1),
    (12, 11),   # even candidate 23 exceeds the table
    (5, 9),     # candidates 9 and 18 are not adjacent
])
def test_desynchronized_positions(even_position, odd_position):
    with pytest.raises(ResidueDesync) as exc_info:
        reconcile(even_position, odd_position, 23)
    assert exc_info.value.modulus == 23
    assert exc_info.value.even_position == even_position


def test_missing_marker_raises():
    with pytest.raises(ResidueDesync, match="marker missing"):
        extract_residue([1, 2, 3], [MARKER, 4], 23)


def test_bucket_order_validation(model):
    even = build_container(Pattern.EVEN, 23, model)
    ordered = enumerate_table(even, 5)
    assert validate_bucket_order(ordered, 23, Pattern.EVEN, model)
    assert not validate_bucket_order(list(reversed(ordered)), 23, Pattern.EVEN, model)
    assert not validate_bucket_order(ordered, 23, Pattern.ODD, model)
    assert not validate_bucket_order(ordered + ["stray"], 23, Pattern.EVEN, model)
