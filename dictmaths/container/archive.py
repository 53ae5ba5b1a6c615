# -*- coding: utf-8 -*-
"""
dictmaths/container/archive.py - Keyed archive encoder

Writes containers in the reference-graph wire format: a keyed archive
(``$archiver``/``$version``/``$top``/``$objects``) stored as a binary
property list. Object references are plistlib UIDs into ``$objects``.
"""

import plistlib
from typing import Any, Dict, List, Optional, Sequence

from dictmaths.core.types import MARKER_CLASS_NAME, Key, KeyedContainer, is_marker

ARCHIVER_NAME = "NSKeyedArchiver"
ARCHIVE_VERSION = 100000
NULL_OBJECT = "$null"

DICTIONARY_CLASS = ("NSDictionary", "NSObject")
ARRAY_CLASS = ("NSArray", "NSObject")
KEYS_FIELD = "NS.keys"
OBJECTS_FIELD = "NS.objects"
CLASS_FIELD = "$class"


class ArchiveWriter:
    """
    Incremental builder for a keyed archive object table

    Class descriptors are interned, so each class name appears once.
    """

    def __init__(self) -> None:
        self.objects: List[Any] = [NULL_OBJECT]
        self._classes: Dict[str, plistlib.UID] = {}

    def add(self, obj: Any) -> plistlib.UID:
        self.objects.append(obj)
        return plistlib.UID(len(self.objects) - 1)

    def reserve(self) -> plistlib.UID:
        """Reserve a slot to be filled with set()"""
        return self.add(None)

    def set(self, uid: plistlib.UID, obj: Any) -> None:
        self.objects[uid.data] = obj

    def class_ref(self, hierarchy: Sequence[str]) -> plistlib.UID:
        name = hierarchy[0]
        if name not in self._classes:
            self._classes[name] = self.add({
                "$classname": name,
                "$classes": list(hierarchy),
            })
        return self._classes[name]

    def add_marker(self, marker_class: str = MARKER_CLASS_NAME) -> plistlib.UID:
        return self.add({CLASS_FIELD: self.class_ref((marker_class, "NSObject"))})

    def to_bytes(self, root: plistlib.UID, fmt=plistlib.FMT_BINARY) -> bytes:
        archive = {
            "$archiver": ARCHIVER_NAME,
            "$version": ARCHIVE_VERSION,
            "$top": {"root": root},
            "$objects": [NULL_OBJECT if o is None else o for o in self.objects],
        }
        return plistlib.dumps(archive, fmt=fmt)


def encode_keys(keys: Sequence[Key], values: Optional[Sequence[Any]] = None,
                marker_class: str = MARKER_CLASS_NAME,
                inline_keys: bool = False,
                separate_key_list: bool = False) -> bytes:
    """
    Encode an ordered key sequence as a keyed-archive dictionary

    Args:
        keys: numeric keys and the marker, in serialization order
        values: per-key values (default: the key's index as a string)
        marker_class: class name written for the marker record
        inline_keys: store numeric keys directly in the key list instead of
            as table references
        separate_key_list: store the key list as its own array record and
            point ``NS.keys`` at it

    Returns:
        Binary property list bytes
    """
    if values is None:
        values = [f"value_{i}" for i in range(len(keys))]
    if len(values) != len(keys):
        raise ValueError(f"{len(keys)} keys but {len(values)} values")

    writer = ArchiveWriter()
    root = writer.reserve()

    key_refs: List[Any] = []
    for key in keys:
        if is_marker(key):
            key_refs.append(writer.add_marker(marker_class))
        elif inline_keys:
            key_refs.append(int(key))
        else:
            key_refs.append(writer.add(int(key)))

    value_refs = [writer.add(v) for v in values]

    keys_field: Any = key_refs
    if separate_key_list:
        keys_field = writer.add({
            OBJECTS_FIELD: key_refs,
            CLASS_FIELD: writer.class_ref(ARRAY_CLASS),
        })

    writer.set(root, {
        KEYS_FIELD: keys_field,
        OBJECTS_FIELD: value_refs,
        CLASS_FIELD: writer.class_ref(DICTIONARY_CLASS),
    })
    return writer.to_bytes(root)


def encode_container(container: KeyedContainer, marker_class: str = MARKER_CLASS_NAME) -> bytes:
    """Serialize a built container in insertion order, marker last"""
    return encode_keys(container.entries, container.values(), marker_class=marker_class)
