# -*- coding: utf-8 -*-
"""
dictmaths/container/decoder.py - Archive graph decoder

Parses a keyed archive back into the container's logical key order.

Archive layout:
    $top.root   -> reference to the container record
    $objects    -> indexed object table (primitives and records)
    NS.keys     -> ordered key references, inline or one level removed
    $class      -> class descriptor reference ($classname / $classes)

Any deviation from this shape is a DecodeFormatViolation. Nothing is
inferred: a missing root, a dangling reference or an absent key list means
the target changed behaviour.
"""

import logging
import plistlib
from dataclasses import dataclass
from typing import Any, Dict, List, Set, Union
from xml.parsers.expat import ExpatError

from dictmaths.core.exceptions import DecodeFormatViolation
from dictmaths.core.types import MARKER, MARKER_CLASS_NAME, Key

from .archive import CLASS_FIELD, KEYS_FIELD, NULL_OBJECT, OBJECTS_FIELD

logger = logging.getLogger(__name__)


# =============================================================================
# References
# =============================================================================

@dataclass(frozen=True)
class Inline:
    """A value stored in place"""
    value: Any


@dataclass(frozen=True)
class Index:
    """A reference into the object table"""
    n: int


Ref = Union[Inline, Index]


def as_ref(raw: Any) -> Ref:
    """
    Classify a raw archive field as inline or indirect

    Binary archives carry plistlib.UID objects; archives converted through
    other formats may spell them as ``{"$uid": n}``.
    """
    if isinstance(raw, plistlib.UID):
        return Index(raw.data)
    if isinstance(raw, dict) and len(raw) == 1 and "$uid" in raw:
        uid = raw["$uid"]
        if isinstance(uid, int) and not isinstance(uid, bool):
            return Index(uid)
        raise DecodeFormatViolation(f"Malformed $uid reference: {uid!r}")
    return Inline(raw)


def resolve(ref: Ref, objects: List[Any]) -> Any:
    """
    Resolve a reference against the object table

    Raises:
        DecodeFormatViolation: index outside the table
    """
    if isinstance(ref, Inline):
        return ref.value
    if isinstance(ref, Index):
        if not 0 <= ref.n < len(objects):
            raise DecodeFormatViolation(
                f"Reference {ref.n} outside object table of {len(objects)} entries",
                index=ref.n, table_size=len(objects)
            )
        return objects[ref.n]
    raise TypeError(f"not a reference: {ref!r}")


# =============================================================================
# Archive graph
# =============================================================================

@dataclass
class ArchiveGraph:
    """Decoded archive: object table plus root reference"""
    objects: List[Any]
    root: Ref

    def resolve(self, raw: Any) -> Any:
        return resolve(as_ref(raw), self.objects)

    def root_record(self) -> Dict[str, Any]:
        obj = resolve(self.root, self.objects)
        if not isinstance(obj, dict):
            raise DecodeFormatViolation(
                f"Root object is a {type(obj).__name__}, not a record",
                root=repr(self.root)
            )
        return obj

    def summary(self) -> Dict[str, Any]:
        return {
            'objects': len(self.objects),
            'root': repr(self.root),
            'records': sum(1 for o in self.objects if isinstance(o, dict)),
        }


def parse_archive(data: bytes) -> ArchiveGraph:
    """
    Parse archive bytes into an ArchiveGraph

    Raises:
        DecodeFormatViolation: unparsable document, or $objects/$top/root missing
    """
    try:
        archive = plistlib.loads(data)
    except (plistlib.InvalidFileException, ExpatError, ValueError) as e:
        raise DecodeFormatViolation(f"Archive is not a property list: {e}")

    if not isinstance(archive, dict):
        raise DecodeFormatViolation(f"Archive is a {type(archive).__name__}, not a dictionary")

    objects = archive.get("$objects")
    top = archive.get("$top")
    if not isinstance(objects, list) or not isinstance(top, dict):
        raise DecodeFormatViolation(
            "Archive is missing $objects/$top",
            keys=sorted(str(k) for k in archive)
        )
    if "root" not in top:
        raise DecodeFormatViolation("Archive has no root reference", top_keys=sorted(top))

    root = as_ref(top["root"])
    if not isinstance(root, Index):
        raise DecodeFormatViolation(f"Root is not an object reference: {top['root']!r}")

    return ArchiveGraph(objects=objects, root=root)


# =============================================================================
# Key extraction
# =============================================================================

def _key_list(graph: ArchiveGraph, field_value: Any) -> List[Any]:
    """Locate the ordered key references, following at most one list record"""
    if isinstance(field_value, list):
        return field_value

    ref = as_ref(field_value)
    if not isinstance(ref, Index):
        raise DecodeFormatViolation(f"{KEYS_FIELD} is neither a list nor a reference: {field_value!r}")

    target = resolve(ref, graph.objects)
    if isinstance(target, list):
        return target

    if isinstance(target, dict) and OBJECTS_FIELD in target:
        nested = target[OBJECTS_FIELD]
        if isinstance(nested, list):
            return nested
        nested_ref = as_ref(nested)
        if isinstance(nested_ref, Index):
            resolved = resolve(nested_ref, graph.objects)
            if isinstance(resolved, list):
                return resolved

    raise DecodeFormatViolation(
        f"{KEYS_FIELD} reference {ref.n} does not lead to a key list",
        index=ref.n
    )


def is_marker_record(graph: ArchiveGraph, record: Dict[str, Any],
                     marker_class: str = MARKER_CLASS_NAME) -> bool:
    """
    Whether a record's class descriptor names ``marker_class``

    Follows descriptor references transitively and checks both the
    descriptor's own name and its ``$classes`` superclass chain.

    Raises:
        DecodeFormatViolation: dangling or cyclic descriptor, or a descriptor
            of unexpected shape
    """
    if CLASS_FIELD not in record:
        return False

    current = record[CLASS_FIELD]
    visited: Set[int] = set()

    while True:
        ref = as_ref(current)
        if isinstance(ref, Index):
            if ref.n in visited:
                raise DecodeFormatViolation(f"Cyclic class descriptor chain at {ref.n}", index=ref.n)
            visited.add(ref.n)
        descriptor = resolve(ref, graph.objects)

        if isinstance(descriptor, str):
            return descriptor == marker_class
        if not isinstance(descriptor, dict):
            raise DecodeFormatViolation(
                f"Class descriptor is a {type(descriptor).__name__}, not a record"
            )

        names = []
        if "$classname" in descriptor:
            names.append(graph.resolve(descriptor["$classname"]))
        chain = descriptor.get("$classes", [])
        if not isinstance(chain, list):
            chain = graph.resolve(chain)
            if not isinstance(chain, list):
                raise DecodeFormatViolation("$classes is not a list")
        names.extend(graph.resolve(c) for c in chain)

        if marker_class in names:
            return True
        if CLASS_FIELD not in descriptor:
            return False
        current = descriptor[CLASS_FIELD]


def decode_keys(graph: ArchiveGraph, marker_class: str = MARKER_CLASS_NAME) -> List[Key]:
    """
    Recover the container's keys in archive order

    Marker records come back as MARKER; numeric keys as ints. Records of
    other classes are returned unchanged for the caller to reject.
    """
    root = graph.root_record()
    if KEYS_FIELD not in root:
        raise DecodeFormatViolation(
            f"Root record has no {KEYS_FIELD} field",
            fields=sorted(str(k) for k in root)
        )

    keys: List[Key] = []
    for position, raw in enumerate(_key_list(graph, root[KEYS_FIELD])):
        key = graph.resolve(raw)
        if key == NULL_OBJECT:
            raise DecodeFormatViolation(f"Key at position {position} is $null", position=position)
        if isinstance(key, dict) and is_marker_record(graph, key, marker_class):
            key = MARKER
        keys.append(key)

    return keys


def decode(data: bytes, marker_class: str = MARKER_CLASS_NAME) -> List[Key]:
    """
    Decode archive bytes into the ordered key list

    Raises:
        DecodeFormatViolation: the archive deviates from the expected shape
    """
    graph = parse_archive(data)
    try:
        keys = decode_keys(graph, marker_class)
    except DecodeFormatViolation:
        logger.debug(f"Archive summary at decode failure: {graph.summary()}")
        raise
    logger.debug(f"Decoded {len(keys)} keys from {len(graph.objects)} archive objects")
    return keys
