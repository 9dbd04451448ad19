# -*- coding: utf-8 -*-
"""gitcas is a content-addressable object store laid out like git's loose
object database. What does that mean? Content is framed as a typed object
(``blob 13\\0...``), named by the SHA-1 of that frame, compressed with zlib and
written to ``objects/<first two hex digits>/<remaining hex digits>``.

Typical uses:

- Storing file contents once, no matter how often they are added.
- Reading and writing objects compatible with git's loose object format.
- Verifying that stored objects still match their names.
"""

from .__meta__ import (
    __title__,
    __summary__,
    __url__,
    __version__,
    __author__,
    __email__,
    __license__,
)

from .errors import (
    ErrorKind,
    GitCasError,
    InvalidIdentifier,
    InvalidObjectType,
    ObjectNotFound,
    DecompressionError,
    MalformedObject,
    HashAlgorithmUnavailable,
    IOFailure,
)
from .objectdb import ObjectDB
from .repository import init_repository, is_repository, open_repository
from .store import ObjectStore
from .utils import ObjectAddress, ObjectHeader


__all__ = (
    "ObjectDB",
    "ObjectStore",
    "ObjectAddress",
    "ObjectHeader",
    "init_repository",
    "is_repository",
    "open_repository",
    "ErrorKind",
    "GitCasError",
    "InvalidIdentifier",
    "InvalidObjectType",
    "ObjectNotFound",
    "DecompressionError",
    "MalformedObject",
    "HashAlgorithmUnavailable",
    "IOFailure",
)
