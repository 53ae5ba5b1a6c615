# -*- coding: utf-8 -*-
"""
dictmaths/container/builder.py - Keyed container construction

Builds a container whose numeric keys occupy every bucket of one parity,
followed by the marker key.
"""

import logging
from typing import Dict

from dictmaths.core.exceptions import ContainerIntegrityError
from dictmaths.core.logging import ModulusLogAdapter
from dictmaths.core.types import HashModel, KeyedContainer, Pattern
from dictmaths.hashing.synth import find_key_for_bucket, DEFAULT_BRUTE_FORCE_FACTOR

logger = logging.getLogger(__name__)


def build_container(pattern: Pattern, modulus: int, model: HashModel,
                    brute_force_factor: int = DEFAULT_BRUTE_FORCE_FACTOR) -> KeyedContainer:
    """
    Build a container occupying every ``pattern`` bucket of a table

    Buckets with no reachable key are recorded in ``missing_buckets``;
    residues derived from an incomplete container are untrustworthy.

    Raises:
        ContainerIntegrityError: two buckets synthesized the same key
    """
    container = KeyedContainer(modulus=modulus, pattern=pattern)
    log = ModulusLogAdapter(logger, modulus, pattern.name)
    owner: Dict[int, int] = {}

    for bucket in range(pattern.start_bucket, modulus, 2):
        key = find_key_for_bucket(bucket, modulus, model, brute_force_factor)
        if key is None:
            log.warning(f"Couldn't find key for bucket {bucket}")
            container.missing_buckets.append(bucket)
            continue

        if key in owner:
            raise ContainerIntegrityError(
                f"Key {key} synthesized for both bucket {owner[key]} and bucket {bucket}",
                modulus=modulus, pattern=pattern.name, key=key
            )
        owner[key] = bucket
        container.keys.append(key)
        container.buckets.append(bucket)

    log.debug(
        f"Built container: {len(container.keys)} keys + marker, {len(container.missing_buckets)} missing"
    )
    return container
