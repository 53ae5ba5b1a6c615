# -*- coding: utf-8 -*-
"""
dictmaths.container - Keyed containers and their archive form

- build_container: occupy every bucket of one parity, marker last
- encode_container / encode_keys: write the keyed-archive wire format
- decode / parse_archive: read the wire format back into key order
"""

from .builder import build_container
from .archive import (
    ArchiveWriter,
    encode_keys,
    encode_container,
    ARCHIVER_NAME,
    KEYS_FIELD,
    OBJECTS_FIELD,
    CLASS_FIELD,
)
from .decoder import (
    Inline,
    Index,
    Ref,
    as_ref,
    resolve,
    ArchiveGraph,
    parse_archive,
    is_marker_record,
    decode_keys,
    decode,
)

__all__ = [
    'build_container',
    'ArchiveWriter',
    'encode_keys',
    'encode_container',
    'ARCHIVER_NAME',
    'KEYS_FIELD',
    'OBJECTS_FIELD',
    'CLASS_FIELD',
    'Inline',
    'Index',
    'Ref',
    'as_ref',
    'resolve',
    'ArchiveGraph',
    'parse_archive',
    'is_marker_record',
    'decode_keys',
    'decode',
]
