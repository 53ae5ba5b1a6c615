# -*- coding: utf-8 -*-
"""
dictmaths/diagnostics.py - Target behaviour diagnostics

Quick checks run before a reconstruction to characterize the target:
    - hash model: is the numeric-key hash affine, and with which multiplier
    - serialization order: does a small container survive the round trip
    - bucket prediction: does a synthesized EVEN container come back in
      bucket order
    - marker hash: does the marker hash to its own address
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

from dictmaths.container.archive import encode_container, encode_keys
from dictmaths.container.builder import build_container
from dictmaths.container.decoder import decode
from dictmaths.core.exceptions import CalibrationAmbiguous, DecodeFormatViolation, ContainerIntegrityError
from dictmaths.core.types import (
    MARKER, MARKER_CLASS_NAME, WORD_MASK,
    HashFunction, HashModel, Pattern, RoundTrip, is_marker,
)
from dictmaths.hashing.calibrate import calibrate
from dictmaths.recon.residue import marker_position, validate_bucket_order

logger = logging.getLogger(__name__)


@dataclass
class HashModelCheck:
    """Observed vs. modelled hashes of small integers"""
    model: HashModel
    samples: List[Tuple[int, int, int]] = field(default_factory=list)  # (value, observed, expected)
    ambiguity: Optional[CalibrationAmbiguous] = None

    @property
    def mismatches(self) -> List[int]:
        return [value for value, observed, expected in self.samples if observed != expected]


@dataclass
class OrderCheck:
    """Key order observed after one round trip"""
    keys: List[Any] = field(default_factory=list)
    marker_position: Optional[int] = None
    order_ok: Optional[bool] = None
    error: Optional[str] = None

    @property
    def kinds(self) -> List[str]:
        return ["marker" if is_marker(k) else type(k).__name__ for k in self.keys]


@dataclass
class DiagnosticsReport:
    hash_model: HashModelCheck
    serialization: OrderCheck
    bucket_prediction: OrderCheck
    marker_hash_is_address: Optional[bool] = None

    @property
    def appears_vulnerable(self) -> bool:
        """Buckets are predictable, and the marker hash is its address when that is known"""
        predictable = bool(self.bucket_prediction.order_ok) and self.bucket_prediction.marker_position is not None
        if self.marker_hash_is_address is False:
            return False
        return predictable

    def to_dict(self) -> Dict[str, Any]:
        return {
            'hash_model': self.hash_model.model.to_dict(),
            'hash_mismatches': self.hash_model.mismatches,
            'calibration': str(self.hash_model.ambiguity) if self.hash_model.ambiguity else None,
            'serialization_order': self.serialization.kinds,
            'serialization_error': self.serialization.error,
            'bucket_order_ok': self.bucket_prediction.order_ok,
            'bucket_marker_position': self.bucket_prediction.marker_position,
            'bucket_error': self.bucket_prediction.error,
            'marker_hash_is_address': self.marker_hash_is_address,
            'appears_vulnerable': self.appears_vulnerable,
        }


def check_hash_model(hash_fn: HashFunction, samples: int = 10) -> HashModelCheck:
    model = calibrate(hash_fn, samples)
    check = HashModelCheck(model=model)
    for i in range(samples):
        check.samples.append((i, hash_fn(i) & WORD_MASK, (i * model.multiplier) & WORD_MASK))

    if model.is_linear:
        logger.info(f"[Diagnostic] Detected multiplier 0x{model.multiplier:x} (linear)")
    else:
        value, observed, expected = next((s for s in check.samples if s[1] != s[2]), (None, None, None))
        details = {} if value is None else {'observed': f"0x{observed:x}", 'expected': f"0x{expected:x}"}
        check.ambiguity = CalibrationAmbiguous(
            "Hash appears non-linear; using fallback bucket search", sample=value, **details
        )
        logger.info(f"[Diagnostic] {check.ambiguity}")
    return check


def check_serialization_order(round_trip: RoundTrip,
                              marker_class: str = MARKER_CLASS_NAME) -> OrderCheck:
    """Send {1, 2, marker, 3} through the round trip and record the order"""
    check = OrderCheck()
    try:
        check.keys = decode(round_trip(encode_keys([1, 2, MARKER, 3], marker_class=marker_class)), marker_class)
    except DecodeFormatViolation as e:
        check.error = str(e)
        logger.warning(f"[Diagnostic] Failed to parse serialized key order: {e}")
        return check

    check.marker_position = marker_position(check.keys)
    logger.info(f"[Diagnostic] Serialization order: {', '.join(check.kinds)}")
    return check


def check_bucket_prediction(round_trip: RoundTrip, model: HashModel, modulus: int = 23,
                            marker_class: str = MARKER_CLASS_NAME) -> OrderCheck:
    """Round-trip an EVEN container and verify the keys come back in bucket order"""
    check = OrderCheck()
    try:
        container = build_container(Pattern.EVEN, modulus, model)
        check.keys = decode(round_trip(encode_container(container, marker_class)), marker_class)
    except (DecodeFormatViolation, ContainerIntegrityError) as e:
        check.error = str(e)
        logger.warning(f"[Diagnostic] Bucket prediction test failed: {e}")
        return check

    check.order_ok = validate_bucket_order(check.keys, modulus, Pattern.EVEN, model)
    check.marker_position = marker_position(check.keys)
    logger.info(
        f"[Diagnostic] Bucket prediction (table size {modulus}): "
        f"order {'OK' if check.order_ok else 'MISMATCH'}, marker at {check.marker_position}"
    )
    return check


def run_diagnostics(round_trip: RoundTrip, hash_fn: HashFunction,
                    marker_hash: Optional[int] = None,
                    marker_address: Optional[int] = None,
                    marker_class: str = MARKER_CLASS_NAME) -> DiagnosticsReport:
    """
    Run every diagnostic against the target

    Args:
        round_trip: target round trip
        hash_fn: observed numeric-key hash of the target
        marker_hash / marker_address: when both are known, compare them
        marker_class: class name of the marker record
    """
    hash_check = check_hash_model(hash_fn)
    report = DiagnosticsReport(
        hash_model=hash_check,
        serialization=check_serialization_order(round_trip, marker_class),
        bucket_prediction=check_bucket_prediction(round_trip, hash_check.model, marker_class=marker_class),
    )
    if marker_hash is not None and marker_address is not None:
        report.marker_hash_is_address = (marker_hash & WORD_MASK) == (marker_address & WORD_MASK)

    if report.appears_vulnerable:
        logger.info("Assessment: target appears VULNERABLE")
    else:
        logger.info("Assessment: mitigation detected")
    return report
