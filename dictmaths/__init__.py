# -*- coding: utf-8 -*-
"""
dictmaths - Keyed-container pointer leak reconstruction v1.0.0

Reconstructs the 64-bit address of a process-unique marker object from the
order in which a target re-serializes keyed containers:

1. Hash model (hashing) - calibrate the numeric-key hash, synthesize keys
   that land in chosen buckets
2. Containers (container) - build EVEN/ODD occupancy containers, encode and
   decode the keyed-archive wire format
3. Reconstruction (recon) - marker positions -> residues -> CRT

Auxiliary Modules:
- simulation: offline round-trip stand-ins (probing table, permutation)
- diagnostics: target behaviour checks
- core: types, configuration, exceptions, logging
"""

__version__ = "1.0.0"

from .core import (
    TABLE_PRIMES,
    MARKER,
    Pattern,
    HashModel,
    KeyedContainer,
    ResidueRecord,
    ModulusOutcome,
    ReconstructedAddress,
    ReconstructionReport,
    DictMathsConfig,
    DictMathsError,
    DecodeFormatViolation,
    ResidueDesync,
    InsufficientResidues,
    load_config,
    get_logger,
    setup_logging,
)
from .hashing import calibrate, linear_hash, find_key_for_bucket
from .container import build_container, encode_container, decode
from .recon import extract_residue, solve, AddressReconstructor, reconstruct

__all__ = [
    '__version__',
    'TABLE_PRIMES',
    'MARKER',
    'Pattern',
    'HashModel',
    'KeyedContainer',
    'ResidueRecord',
    'ModulusOutcome',
    'ReconstructedAddress',
    'ReconstructionReport',
    'DictMathsConfig',
    'DictMathsError',
    'DecodeFormatViolation',
    'ResidueDesync',
    'InsufficientResidues',
    'load_config',
    'get_logger',
    'setup_logging',
    'calibrate',
    'linear_hash',
    'find_key_for_bucket',
    'build_container',
    'encode_container',
    'decode',
    'extract_residue',
    'solve',
    'AddressReconstructor',
    'reconstruct',
]
