import pytest

from dictmaths.container.archive import encode_keys
from dictmaths.container.decoder import decode
from dictmaths.core.config import DictMathsConfig
from dictmaths.core.exceptions import ConfigValidationError, DecodeFormatViolation, InsufficientResidues
from dictmaths.core.types import TABLE_PRIMES, WORD_MASK, DEFAULT_HASH_MULTIPLIER
from dictmaths.hashing import linear_hash
from dictmaths.recon import AddressReconstructor, reconstruct
from dictmaths.simulation import PermutingRoundTrip, ProbingTableRoundTrip


class DroppingRoundTrip:
    """Loses the first key of every archive sized for one table"""

    def __init__(self, inner, sizes):
        self.inner = inner
        self.sizes = sizes

    def __call__(self, data):
        keys = decode(self.inner(data))
        if len(keys) in self.sizes:
            keys = keys[1:]
        return encode_keys(keys)


def test_reconstructs_marker_address(marker_address):
    round_trip = ProbingTableRoundTrip(marker_address)
    report = reconstruct(round_trip, linear_hash())

    assert report.success
    assert report.address.value == marker_address
    assert report.address.is_unique
    assert report.failed_moduli == []
    assert [o.remainder for o in report.outcomes] == [marker_address % m for m in TABLE_PRIMES]
    assert round_trip.calls == 2 * len(TABLE_PRIMES)
    assert report.to_dict()["address"]["value"] == "0x00000001eb91ab60"


@pytest.mark.parametrize("address", [0, 1, 0x7FFF5FBFF8A0, WORD_MASK])
def test_reconstructs_boundary_addresses(address):
    assert reconstruct(ProbingTableRoundTrip(address), linear_hash()).address.value == address


def test_parallel_workers_match_sequential(marker_address):
    config = DictMathsConfig(max_workers=4)
    round_trip = ProbingTableRoundTrip(marker_address)
    report = reconstruct(round_trip, linear_hash(), config)
    assert report.address.value == marker_address
    assert [o.modulus for o in report.outcomes] == list(TABLE_PRIMES)
    assert round_trip.calls == 2 * len(TABLE_PRIMES)


def test_randomized_enumeration_never_yields_an_address():
    with pytest.raises(InsufficientResidues) as exc_info:
        reconstruct(PermutingRoundTrip(seed=7), linear_hash())

    exc = exc_info.value
    assert exc.succeeded == 0
    assert exc.required == 2
    assert exc.report.address is None
    assert exc.report.failed_moduli == list(TABLE_PRIMES)
    assert all(o.even_order_ok is False or o.odd_order_ok is False for o in exc.report.outcomes)


def test_subset_of_moduli_gives_value_modulo_product(marker_address):
    config = DictMathsConfig(moduli=(23, 41), allow_partial=True)
    report = reconstruct(ProbingTableRoundTrip(marker_address), linear_hash(), config)
    assert report.address.value == marker_address % (23 * 41)
    assert not report.address.is_unique


def test_key_count_mismatch_excludes_modulus(marker_address):
    round_trip = DroppingRoundTrip(ProbingTableRoundTrip(marker_address), sizes=(12, 13))
    report = reconstruct(round_trip, linear_hash(), DictMathsConfig(allow_partial=True))

    assert report.failed_moduli == [23]
    assert not report.address.is_unique
    assert "expected" in report.outcomes[0].error
    assert report.address.value == marker_address


def test_changed_archive_shape_aborts_with_context():
    with pytest.raises(DecodeFormatViolation) as exc_info:
        reconstruct(lambda data: b"garbage", linear_hash())
    assert exc_info.value.modulus == 23
    assert exc_info.value.pattern == "EVEN"
    assert exc_info.value.details["modulus"] == 23


def test_non_linear_hash_uses_bounded_search(marker_address):
    def mixed_hash(value):
        return ((value * DEFAULT_HASH_MULTIPLIER) ^ 0x5555) & WORD_MASK

    moduli = (23, 41, 71, 127)
    config = DictMathsConfig(moduli=moduli, allow_partial=True)
    engine = AddressReconstructor.calibrated(
        ProbingTableRoundTrip(marker_address, hash_fn=mixed_hash), mixed_hash, config
    )
    assert not engine.model.is_linear

    report = engine.run()
    assert report.address.value == marker_address % (23 * 41 * 71 * 127)


def test_invalid_config_is_rejected(model):
    with pytest.raises(ConfigValidationError):
        AddressReconstructor(ProbingTableRoundTrip(0), model, DictMathsConfig(moduli=(3, 23)))


def test_order_check_can_be_disabled(model, marker_address):
    config = DictMathsConfig(validate_order=False)
    outcome = AddressReconstructor(ProbingTableRoundTrip(marker_address), model, config).process_modulus(41)
    assert outcome.success
    assert outcome.even_order_ok is None
    assert outcome.remainder == marker_address % 41


def test_subset_of_moduli_is_rejected_by_default(marker_address):
    with pytest.raises(InsufficientResidues) as exc_info:
        reconstruct(ProbingTableRoundTrip(marker_address), linear_hash(), DictMathsConfig(moduli=(23, 41)))

    exc = exc_info.value
    assert exc.succeeded == 2
    assert exc.details["modulus_product"] == 23 * 41
    assert "does not exceed 2**64" in exc.message
    assert exc.report.address is None
    assert [r.modulus for r in exc.report.records] == [23, 41]


def test_dropped_modulus_leaves_too_small_a_product(marker_address):
    round_trip = DroppingRoundTrip(ProbingTableRoundTrip(marker_address), sizes=(12, 13))
    with pytest.raises(InsufficientResidues) as exc_info:
        reconstruct(round_trip, linear_hash())
    assert exc_info.value.succeeded == len(TABLE_PRIMES) - 1
    assert exc_info.value.report.failed_moduli == [23]


@pytest.mark.parametrize("seed", range(10))
def test_randomized_enumeration_without_order_check_never_yields_an_address(seed):
    config = DictMathsConfig(validate_order=False)
    with pytest.raises(InsufficientResidues) as exc_info:
        reconstruct(PermutingRoundTrip(seed=seed), linear_hash(), config)
    assert exc_info.value.report.address is None
    assert not exc_info.value.report.success
