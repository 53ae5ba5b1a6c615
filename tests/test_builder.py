import pytest

from dictmaths.container import builder
from dictmaths.container.builder import build_container
from dictmaths.core.exceptions import ContainerIntegrityError
from dictmaths.core.types import MARKER, TABLE_PRIMES, Pattern
from dictmaths.hashing import calibrate


def test_even_container_for_smallest_table(model):
    container = build_container(Pattern.EVEN, 23, model)
    assert container.buckets == list(range(0, 23, 2))
    assert len(container.keys) == 12
    assert container.size == 13
    assert container.entries[-1] is MARKER
    assert container.is_complete


def test_odd_container_for_smallest_table(model):
    container = build_container(Pattern.ODD, 23, model)
    assert container.buckets == list(range(1, 23, 2))
    assert container.size == 12


@pytest.mark.parametrize("modulus", TABLE_PRIMES)
@pytest.mark.parametrize("pattern", list(Pattern))
def test_keys_land_in_their_buckets(model, modulus, pattern):
    container = build_container(pattern, modulus, model)
    assert len(set(container.keys)) == len(container.keys)
    for key, bucket in zip(container.keys, container.buckets):
        assert model.bucket(key, modulus) == bucket
        assert pattern.owns(bucket)


def test_values_follow_entries(model):
    container = build_container(Pattern.EVEN, 23, model)
    values = container.values()
    assert len(values) == container.size
    assert values[0] == "bucket_0"
    assert values[-1] == "marker"


def test_unreachable_buckets_are_recorded():
    model = calibrate(lambda value: 4)
    container = build_container(Pattern.EVEN, 23, model, brute_force_factor=1)
    assert container.keys == [0]
    assert container.buckets == [4]
    assert len(container.missing_buckets) == 11
    assert not container.is_complete


def test_duplicate_keys_raise(model, monkeypatch):
    monkeypatch.setattr(builder, "find_key_for_bucket", lambda *args: 7)
    with pytest.raises(ContainerIntegrityError) as exc_info:
        build_container(Pattern.ODD, 23, model)
    assert exc_info.value.modulus == 23
    assert exc_info.value.pattern == "ODD"
    assert exc_info.value.details["key"] == 7
