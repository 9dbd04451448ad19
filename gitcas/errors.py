# -*- coding: utf-8 -*-
"""Exceptions raised by the object store.

Every exception carries an :class:`ErrorKind` in its ``kind`` attribute and
also derives from the builtin exception a caller would otherwise expect, so
``except ValueError`` and ``except IOError`` handlers keep working.
"""

from enum import Enum


class ErrorKind(Enum):
    """Failure kinds reported by object store operations."""

    INVALID_IDENTIFIER = "invalid identifier"
    INVALID_OBJECT_TYPE = "invalid object type"
    OBJECT_NOT_FOUND = "object not found"
    DECOMPRESSION_ERROR = "decompression error"
    MALFORMED_OBJECT = "malformed object"
    HASH_ALGORITHM_UNAVAILABLE = "hash algorithm unavailable"
    IO_FAILURE = "io failure"


class GitCasError(Exception):
    """Base class of all object store errors."""

    kind = None


class InvalidIdentifier(GitCasError, ValueError):
    """Object identifier is not a lowercase hex digest of the right length."""

    kind = ErrorKind.INVALID_IDENTIFIER


class InvalidObjectType(GitCasError, ValueError):
    """Object type tag is empty or contains a NUL byte or a space."""

    kind = ErrorKind.INVALID_OBJECT_TYPE


class ObjectNotFound(GitCasError, IOError):
    """No object file exists for the identifier."""

    kind = ErrorKind.OBJECT_NOT_FOUND


class DecompressionError(GitCasError, ValueError):
    """Stored bytes are not a valid zlib stream."""

    kind = ErrorKind.DECOMPRESSION_ERROR


class MalformedObject(GitCasError, ValueError):
    """Decompressed bytes do not carry a ``<type> <size>\\0`` header."""

    kind = ErrorKind.MALFORMED_OBJECT


class HashAlgorithmUnavailable(GitCasError, ValueError):
    """The digest algorithm cannot be constructed by ``hashlib``."""

    kind = ErrorKind.HASH_ALGORITHM_UNAVAILABLE


class IOFailure(GitCasError, IOError):
    """Filesystem fault while reading, writing or creating directories."""

    kind = ErrorKind.IO_FAILURE
