# -*- coding: utf-8 -*-
"""Object framing, hashing and compression.

A canonical object is ``<type> <size>\\0<payload>``. Its identifier is the hex
digest of those bytes and its stored form is the zlib stream of them.
"""

import hashlib
import zlib
from typing import Union

from .errors import (
    DecompressionError,
    HashAlgorithmUnavailable,
    InvalidObjectType,
    MalformedObject,
)
from .utils import ObjectHeader


DEFAULT_ALGORITHM = "sha1"
NUL = b"\0"
SPACE = b" "


def encode(type_tag: Union[str, bytes], payload: bytes) -> bytes:
    """Frame `payload` as a canonical object of type `type_tag`.

    Raises:
        InvalidObjectType: If `type_tag` is empty or contains a NUL byte or a
            space.
    """
    if isinstance(type_tag, str):
        try:
            type_tag = type_tag.encode("ascii")
        except UnicodeEncodeError as exc:
            raise InvalidObjectType(
                "Invalid object type: {0!r}".format(type_tag)
            ) from exc

    if not type_tag or NUL in type_tag or SPACE in type_tag:
        raise InvalidObjectType("Invalid object type: {0!r}".format(type_tag))

    size = str(len(payload)).encode("ascii")
    return type_tag + SPACE + size + NUL + bytes(payload)


def strip_frame(data: bytes) -> bytes:
    """Return everything after the first NUL byte of a canonical object."""
    _, sep, payload = data.partition(NUL)
    if not sep:
        raise MalformedObject("Object header is not NUL terminated")
    return payload


def parse_header(data: bytes) -> ObjectHeader:
    """Parse the ``<type> <size>`` header of a canonical object."""
    header, sep, _ = data.partition(NUL)
    if not sep:
        raise MalformedObject("Object header is not NUL terminated")

    type_tag, sep, size = header.partition(SPACE)
    if not sep or not type_tag or not size.isdigit():
        raise MalformedObject("Invalid object header: {0!r}".format(header))

    return ObjectHeader(type_tag.decode("ascii", "replace"), int(size))


def _new_hash(algorithm: str):
    try:
        hasher = hashlib.new(algorithm)
    except (ValueError, TypeError) as exc:
        raise HashAlgorithmUnavailable(
            "Hash algorithm {0!r} is not available".format(algorithm)
        ) from exc

    if not hasher.digest_size:
        # Variable length digests (shake_*) have no fixed hexdigest.
        raise HashAlgorithmUnavailable(
            "Hash algorithm {0!r} has no fixed digest size".format(algorithm)
        )

    return hasher


def digest_size(algorithm: str = DEFAULT_ALGORITHM) -> int:
    """Return the digest length of `algorithm` in bytes."""
    return _new_hash(algorithm).digest_size


def digest(data: bytes, algorithm: str = DEFAULT_ALGORITHM) -> str:
    """Return the lowercase hex digest of `data`."""
    hasher = _new_hash(algorithm)
    hasher.update(data)
    return hasher.hexdigest()


def compress(data: bytes, level: int = zlib.Z_DEFAULT_COMPRESSION) -> bytes:
    return zlib.compress(data, level)


def decompress(data: bytes) -> bytes:
    """Inflate a zlib stream.

    Raises:
        DecompressionError: If `data` is truncated, corrupted, not zlib or
            followed by trailing bytes.
    """
    decompressor = zlib.decompressobj()
    try:
        result = decompressor.decompress(data) + decompressor.flush()
    except zlib.error as exc:
        raise DecompressionError("Invalid zlib stream: {0}".format(exc)) from exc

    if not decompressor.eof:
        raise DecompressionError("Invalid zlib stream: truncated")

    if decompressor.unused_data:
        raise DecompressionError("Invalid zlib stream: garbage at end of stream")

    return result
