# -*- coding: utf-8 -*-
"""
dictmaths.recon - Residues and address reconstruction

- extract_residue: marker positions in EVEN/ODD orders -> hash(marker) mod m
- solve: CRT over the collected residues
- AddressReconstructor: end-to-end pipeline through a round-trip collaborator
"""

from .residue import (
    marker_position,
    validate_bucket_order,
    reconcile,
    extract_residue,
)
from .crt import solve
from .pipeline import AddressReconstructor, reconstruct

__all__ = [
    'marker_position',
    'validate_bucket_order',
    'reconcile',
    'extract_residue',
    'solve',
    'AddressReconstructor',
    'reconstruct',
]
