"""Module for ObjectDB class."""

import zlib
from typing import Iterable, Optional, Tuple, Union

from fs.base import FS

from . import codec
from . import utils as u
from .errors import DecompressionError, ObjectNotFound
from .store import ObjectStore


class ObjectDB(object):
    """Git-style object database on top of an :class:`ObjectStore`.

    Writing frames content as ``<type> <size>\\0<payload>``, names it by the
    digest of those bytes and stores the zlib stream of them. Reading reverses
    the steps.

    An object that is already stored is never compressed or written again.
    Identifiers are trusted to be collision free, so the stored bytes are not
    compared against the new content.

    Attributes:
        root: Repository directory path or PyFilesystem2 ``FS`` containing an
            ``objects`` directory.
        algorithm (str): Hash algorithm used to name objects. Should be
            available in ``hashlib``. Defaults to ``'sha1'``, which is what
            git uses.
        compresslevel (int, optional): zlib compression level, ``-1`` to
            ``9``. Defaults to ``-1`` (zlib's default).
        dmode (int, optional): Directory mode permission to set for shard
            directories. Defaults to ``0o755``.
    """

    def __init__(self,
                 root: Union[FS, str],
                 algorithm: str = codec.DEFAULT_ALGORITHM,
                 compresslevel: int = zlib.Z_DEFAULT_COMPRESSION,
                 dmode: Optional[int] = 0o755):
        self.algorithm = algorithm
        self.compresslevel = compresslevel
        self.store = ObjectStore(root, algorithm=algorithm, dmode=dmode)

    def hash_and_store(self, type_tag: Union[str, bytes], payload: bytes) -> str:
        """Store `payload` as an object of type `type_tag` and return its id.
        """
        return self.hash_object(type_tag, payload).id

    def hash_object(self,
                    type_tag: Union[str, bytes],
                    payload: bytes,
                    write: bool = True) -> u.ObjectAddress:
        """Compute the identifier of `payload` framed as `type_tag` and,
        if `write` is true, store it.

        Args:
            type_tag: Object type, e.g. ``'blob'``.
            payload: Raw object content.
            write: Whether to persist the object. Defaults to ``True``.

        Returns:
            ObjectAddress: The object's id, relative path and whether it was
            already stored. ``is_duplicate`` is only meaningful when `write`
            is true.
        """
        canonical = codec.encode(type_tag, payload)
        id = codec.digest(canonical, self.algorithm)
        relpath = self.store.path(id)

        if not write:
            return u.ObjectAddress(id, relpath)

        if self.store.exists(id):
            return u.ObjectAddress(id, relpath, True)

        compressed = codec.compress(canonical, self.compresslevel)
        written = self.store.write(id, compressed)

        return u.ObjectAddress(id, relpath, not written)

    def put(self, content, type_tag: Union[str, bytes] = "blob") -> u.ObjectAddress:
        """Store `content` as an object and return its address.

        Args:
            content: Bytes, a readable object or a path to a file.
            type_tag: Object type. Defaults to ``'blob'``.

        Returns:
            ObjectAddress: The stored object's address.
        """
        if isinstance(content, (bytes, bytearray, memoryview)):
            return self.hash_object(type_tag, bytes(content))

        return self.hash_object(type_tag, u.read_content(content))

    def load(self, id: str) -> bytes:
        """Return the payload of the object `id`.

        Raises:
            InvalidIdentifier: If `id` is malformed. No I/O is attempted.
            ObjectNotFound: If no object is stored under `id`.
            DecompressionError: If the stored bytes are not a zlib stream.
            MalformedObject: If the object has no NUL terminated header.
        """
        return codec.strip_frame(self._inflate(id))

    def read(self, id: str) -> Tuple[u.ObjectHeader, bytes]:
        """Return the header and payload of the object `id`."""
        full = self._inflate(id)
        return codec.parse_header(full), codec.strip_frame(full)

    def read_header(self, id: str) -> u.ObjectHeader:
        """Return the type and declared size of the object `id`."""
        return codec.parse_header(self._inflate(id))

    def exists(self, id: str) -> bool:
        """Check whether an object is stored under `id`."""
        return self.store.exists(id)

    def corrupted(self) -> Iterable[Tuple[str, Optional[str]]]:
        """Return generator that yields corrupted objects as
        ``(path, expected_id)``, where ``path`` is the object's path relative
        to the ``objects`` directory and ``expected_id`` is the id its content
        hashes to, or ``None`` when the file is not a readable object.
        """
        for path in self.store.files():
            id = path.replace("/", "")
            try:
                full = self._inflate(id)
            except (DecompressionError, ObjectNotFound):
                yield (path, None)
                continue

            expected_id = codec.digest(full, self.algorithm)
            if expected_id != id:
                yield (path, expected_id)

    def close(self) -> None:
        self.store.close()

    def __contains__(self, id: str) -> bool:
        return self.exists(id)

    def __iter__(self) -> Iterable[str]:
        """Iterate over the ids of all stored objects."""
        return self.store.ids()

    def __len__(self) -> int:
        return len(self.store)

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        self.close()

    def _inflate(self, id: str) -> bytes:
        """Read and decompress the stored bytes of `id`."""
        return codec.decompress(self.store.read_raw(id))
