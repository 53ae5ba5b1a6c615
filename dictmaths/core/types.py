# -*- coding: utf-8 -*-
"""
dictmaths/core/types.py - Unified Type Definitions

Data structures shared by the reconstruction pipeline:
- Table-size moduli and occupancy patterns
- The calibrated hash model
- The marker key sentinel
- Keyed containers
- Residue records, per-modulus outcomes and the final reconstruction
"""

from typing import Callable, Dict, List, Optional, Tuple, Union, Any
from dataclasses import dataclass, field
from enum import Enum


# =============================================================================
# Constants
# =============================================================================

# Prime table sizes used by the keyed container implementation under test.
# Their product (~1.07e20) exceeds 2**64.
TABLE_PRIMES: Tuple[int, ...] = (23, 41, 71, 127, 191, 251, 383, 631, 1087)

WORD_BITS = 64
WORD_MASK = (1 << WORD_BITS) - 1

# Golden ratio constant used by the integer hash of the reference target
DEFAULT_HASH_MULTIPLIER = 0x9E3779B9

MARKER_CLASS_NAME = "NSNull"


# =============================================================================
# Enumerations
# =============================================================================

class Pattern(Enum):
    """Bucket parity pre-occupied by synthesized keys"""
    EVEN = 0    # buckets 0, 2, 4, ...
    ODD = 1     # buckets 1, 3, 5, ...

    @property
    def start_bucket(self) -> int:
        return self.value

    def owns(self, bucket: int) -> bool:
        """Whether ``bucket`` has this pattern's parity"""
        return bucket % 2 == self.value


# =============================================================================
# Marker sentinel
# =============================================================================

class Marker:
    """
    The process-unique marker key

    Decoded archives substitute this singleton for every record whose class
    descriptor names the marker class.
    """

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "MARKER"

    def __reduce__(self):
        return (Marker, ())


MARKER = Marker()

Key = Union[int, Marker]


def is_marker(key: Any) -> bool:
    return key is MARKER


# =============================================================================
# Hash model
# =============================================================================

HashFunction = Callable[[int], int]

# The target's deserialize/reserialize cycle: archive bytes in, archive bytes out
RoundTrip = Callable[[bytes], bytes]


@dataclass(frozen=True)
class HashModel:
    """
    Calibrated numeric-key hash model

    Read-only once computed; passed explicitly to the synthesizer and to
    order validation.

    ``observed`` is the real hash function of the target. It is required
    when the model is non-linear, since buckets can then only be computed by
    asking the target.
    """
    multiplier: int = DEFAULT_HASH_MULTIPLIER
    is_linear: bool = True
    observed: Optional[HashFunction] = field(default=None, compare=False, repr=False)

    def hash(self, value: int) -> int:
        """64-bit hash of a numeric key under this model"""
        if self.is_linear:
            return (value * self.multiplier) & WORD_MASK
        if self.observed is None:
            raise ValueError("non-linear hash model has no observed hash function")
        return self.observed(value) & WORD_MASK

    def bucket(self, value: int, modulus: int) -> int:
        return self.hash(value) % modulus

    def to_dict(self) -> Dict[str, Any]:
        return {
            'multiplier': f'0x{self.multiplier:x}',
            'is_linear': self.is_linear,
        }


# =============================================================================
# Containers
# =============================================================================

@dataclass
class KeyedContainer:
    """
    A keyed container built for one modulus/pattern

    ``keys`` holds the numeric keys in insertion order; ``buckets[i]`` is the
    bucket ``keys[i]`` was synthesized for. The marker is always inserted
    after every numeric key.
    """
    modulus: int
    pattern: Pattern
    keys: List[int] = field(default_factory=list)
    buckets: List[int] = field(default_factory=list)
    missing_buckets: List[int] = field(default_factory=list)

    @property
    def entries(self) -> List[Key]:
        """Keys in insertion order, marker last"""
        return list(self.keys) + [MARKER]

    @property
    def size(self) -> int:
        return len(self.keys) + 1

    @property
    def is_complete(self) -> bool:
        return not self.missing_buckets

    def values(self) -> List[str]:
        """Per-entry values stored alongside the keys"""
        return [f"bucket_{b}" for b in self.buckets] + ["marker"]


# =============================================================================
# Reconstruction results
# =============================================================================

@dataclass(frozen=True)
class ResidueRecord:
    """Observed hash(marker) mod modulus"""
    modulus: int
    remainder: int

    def __post_init__(self):
        if self.modulus <= 1:
            raise ValueError(f"modulus must be > 1, got {self.modulus}")
        if not 0 <= self.remainder < self.modulus:
            raise ValueError(f"remainder {self.remainder} outside [0, {self.modulus})")


@dataclass
class ModulusOutcome:
    """Per-modulus result surface"""
    modulus: int
    record: Optional[ResidueRecord] = None
    even_position: Optional[int] = None
    odd_position: Optional[int] = None
    even_order_ok: Optional[bool] = None
    odd_order_ok: Optional[bool] = None
    missing_buckets: List[int] = field(default_factory=list)
    error: Optional[str] = None

    @property
    def success(self) -> bool:
        return self.record is not None

    @property
    def remainder(self) -> Optional[int]:
        return self.record.remainder if self.record else None

    def to_dict(self) -> Dict[str, Any]:
        return {
            'modulus': self.modulus,
            'success': self.success,
            'remainder': self.remainder,
            'even_position': self.even_position,
            'odd_position': self.odd_position,
            'even_order_ok': self.even_order_ok,
            'odd_order_ok': self.odd_order_ok,
            'missing_buckets': list(self.missing_buckets),
            'error': self.error,
        }


@dataclass(frozen=True)
class ReconstructedAddress:
    """Unique value satisfying every collected congruence"""
    value: int
    modulus_product: int
    moduli: Tuple[int, ...]

    @property
    def is_unique(self) -> bool:
        """True when the moduli alone pin down a single 64-bit value"""
        return self.modulus_product > WORD_MASK

    def __int__(self) -> int:
        return self.value

    def to_dict(self) -> Dict[str, Any]:
        return {
            'value': f'0x{self.value:016x}',
            'modulus_product': self.modulus_product,
            'moduli': list(self.moduli),
            'is_unique': self.is_unique,
        }


@dataclass
class ReconstructionReport:
    """Overall result of one reconstruction run"""
    model: HashModel
    outcomes: List[ModulusOutcome] = field(default_factory=list)
    address: Optional[ReconstructedAddress] = None
    error: Optional[str] = None

    @property
    def success(self) -> bool:
        return self.address is not None

    @property
    def records(self) -> List[ResidueRecord]:
        return [o.record for o in self.outcomes if o.record is not None]

    @property
    def failed_moduli(self) -> List[int]:
        return [o.modulus for o in self.outcomes if not o.success]

    def to_dict(self) -> Dict[str, Any]:
        return {
            'success': self.success,
            'model': self.model.to_dict(),
            'outcomes': [o.to_dict() for o in self.outcomes],
            'address': self.address.to_dict() if self.address else None,
            'error': self.error,
        }
