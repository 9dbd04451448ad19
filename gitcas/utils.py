# -*- coding: utf-8 -*-
"""
common utils for gitcas
"""

import io
import os
import string
from collections import namedtuple
from typing import List, Union

import fs as pyfs
from fs.base import FS


HEXDIGITS = frozenset(string.hexdigits.lower())


class ObjectAddress(namedtuple("ObjectAddress", ["id", "relpath", "is_duplicate"])):
    """Address of a stored object: its identifier, its path relative to the
    ``objects`` directory and whether it already existed when it was written.
    """

    def __new__(cls, id, relpath, is_duplicate=False):
        return super(ObjectAddress, cls).__new__(cls, id, relpath, is_duplicate)


class ObjectHeader(namedtuple("ObjectHeader", ["type", "size"])):
    """Type tag and declared payload size from an object's frame."""

    pass


def compact(items):
    """Return only truthy elements of `items`."""
    return [item for item in items if item]


def shard(digest: str, depth: int = 1, width: int = 2) -> List[str]:
    # This creates a list of `depth` number of tokens with width
    # `width` from the first part of the id plus the remainder.
    return compact(
        [digest[i * width : width * (i + 1)] for i in range(depth)]
        + [digest[depth * width :]]
    )


def is_hexdigest(value, length: int) -> bool:
    """Return whether `value` is a lowercase hex string of `length` chars."""
    return (
        isinstance(value, str)
        and len(value) == length
        and all(char in HEXDIGITS for char in value)
    )


def to_bytes(text) -> bytes:
    if not isinstance(text, bytes):
        text = bytes(text, "utf8")
    return text


def load_fs(root: Union[FS, str, os.PathLike]) -> FS:
    """Return `root` if it is already a filesystem, else open the directory
    it names.
    """
    if isinstance(root, FS):
        return root

    return pyfs.open_fs(os.fspath(root))


def read_content(obj) -> bytes:
    """Return the whole content of a readable object or of the file at path
    `obj`. A readable object is put back at the position it was found at.
    """
    if hasattr(obj, "read"):
        pos = obj.tell()
        obj.seek(0)
        try:
            return to_bytes(obj.read())
        finally:
            obj.seek(pos)

    if isinstance(obj, (str, os.PathLike)) and os.path.isfile(obj):
        with io.open(obj, "rb") as fileobj:
            return fileobj.read()

    raise ValueError("Object must be a valid file path or a readable object.")
