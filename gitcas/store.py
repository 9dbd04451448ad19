"""Module for ObjectStore class."""

import uuid
from contextlib import closing
from typing import Iterable, Optional, Union

import fs as pyfs
import fs.errors  # noqa: F401
import fs.path  # noqa: F401
from fs.base import FS
from fs.permissions import Permissions

from . import codec
from . import utils as u
from .errors import InvalidIdentifier, IOFailure, ObjectNotFound


OBJECTS_DIR = "objects"
TMP_PREFIX = "tmp_obj_"


class ObjectStore(object):
    """Sharded store of compressed objects under ``<root>/objects``.

    Objects live at ``objects/<id[0:2]>/<id[2:]>``. The store only moves
    bytes: framing, hashing and compression happen in
    :class:`gitcas.objectdb.ObjectDB`.

    Attributes:
        root: Repository directory path or PyFilesystem2 ``FS`` whose
            ``objects`` subdirectory holds the objects. The ``objects``
            directory must already exist.
        algorithm (str): Hash algorithm the identifiers are produced with. It
            fixes the identifier length accepted by the store. Defaults to
            ``'sha1'``.
        dmode (int, optional): Directory mode permission to set for shard
            directories. Defaults to ``0o755`` which allows owner to
            read/write and everyone to read and execute.
    """

    def __init__(self,
                 root: Union[FS, str],
                 algorithm: str = codec.DEFAULT_ALGORITHM,
                 dmode: Optional[int] = 0o755):
        self.algorithm = algorithm
        self.hexlength = codec.digest_size(algorithm) * 2
        self.dmode = dmode
        self._owns_fs = not isinstance(root, FS)

        try:
            self._rootfs = u.load_fs(root)
        except pyfs.errors.CreateFailed as exc:
            raise IOFailure("Could not open repository {0!r}".format(root)) from exc

        try:
            self.fs = self._rootfs.opendir(OBJECTS_DIR)
        except pyfs.errors.FSError as exc:
            self._close_root()
            raise IOFailure(
                "Not an object repository (missing {0!r} directory): {1!r}"
                .format(OBJECTS_DIR, root)
            ) from exc

    def write(self, id: str, data: bytes) -> bool:
        """Persist compressed `data` under `id` unless an object is already
        stored there.

        The bytes go to a temporary file in the shard directory first and are
        then moved into place without overwriting, so a failed write never
        leaves a partial object behind.

        Args:
            id: Object identifier.
            data: Compressed object bytes.

        Returns:
            bool: ``True`` if the object was written, ``False`` if it already
            existed.

        Raises:
            InvalidIdentifier: If `id` is malformed.
            IOFailure: On any filesystem error.
        """
        path = self.path(id)

        if self._isfile(path):
            return False

        dirname = pyfs.path.dirname(path)
        self._makedirs(dirname)
        tmp_path = pyfs.path.join(dirname, TMP_PREFIX + uuid.uuid4().hex)

        try:
            with closing(self.fs.open(tmp_path, mode="wb")) as fileobj:
                fileobj.write(data)
            self.fs.move(tmp_path, path, overwrite=False)
        except pyfs.errors.DestinationExists:
            # Another writer placed the same object first.
            self._discard(tmp_path)
            return False
        except pyfs.errors.FSError as exc:
            self._discard(tmp_path)
            raise IOFailure("Could not write object {0}: {1}".format(id, exc)) from exc

        return True

    def read_raw(self, id: str) -> bytes:
        """Return the stored (compressed) bytes of `id`.

        Raises:
            InvalidIdentifier: If `id` is malformed.
            ObjectNotFound: If no object is stored under `id`.
            IOFailure: On any other filesystem error.
        """
        path = self.path(id)

        try:
            with closing(self.fs.open(path, mode="rb")) as fileobj:
                return fileobj.read()
        except (pyfs.errors.ResourceNotFound, pyfs.errors.FileExpected) as exc:
            raise ObjectNotFound("Object not found: {0}".format(id)) from exc
        except pyfs.errors.FSError as exc:
            raise IOFailure("Could not read object {0}: {1}".format(id, exc)) from exc

    def exists(self, id: str) -> bool:
        """Check whether an object is stored under `id`."""
        return self._isfile(self.path(id))

    def path(self, id: str) -> str:
        """Return the path of `id` relative to the ``objects`` directory."""
        self.validate(id)
        return pyfs.path.join(*self._shard(id))

    def syspath(self, id: str) -> Optional[str]:
        """Return the OS path of `id`, or ``None`` when the backing
        filesystem has no OS paths (e.g. ``MemoryFS``).
        """
        path = self.path(id)
        try:
            return self.fs.getsyspath(path)
        except pyfs.errors.NoSysPath:
            return None

    def validate(self, id: str) -> None:
        """Raise :class:`InvalidIdentifier` unless `id` is a lowercase hex
        digest of :attr:`algorithm`.
        """
        if not u.is_hexdigest(id, self.hexlength):
            raise InvalidIdentifier(
                "Invalid object id {0!r}: expected {1} lowercase hex characters"
                .format(id, self.hexlength)
            )

    def files(self) -> Iterable[str]:
        """Return generator that yields the relative path of every stored
        object. Only loose object paths ``<id[0:2]>/<id[2:]>`` are listed, so
        temporary files and git's ``pack/`` and ``info/`` entries are skipped.
        """
        for path in self.fs.walk.files():
            path = pyfs.path.relpath(path)
            if self._is_object_path(path):
                yield path

    def ids(self) -> Iterable[str]:
        """Return generator that yields the identifier of every stored
        object.
        """
        for path in self.files():
            yield path.replace("/", "")

    def folders(self) -> Iterable[str]:
        """Return generator that yields all shard directories that contain
        objects.
        """
        seen = set()
        for path in self.files():
            dirname = pyfs.path.dirname(path)
            if dirname not in seen:
                seen.add(dirname)
                yield dirname

    def count(self) -> int:
        """Return count of the number of stored objects."""
        return sum(1 for _ in self.files())

    def size(self) -> int:
        """Return the total size in bytes of all stored (compressed) objects.
        """
        return sum(self.fs.getsize(path) for path in self.files())

    def unshard(self, path: str) -> str:
        """Unshard path to determine the object identifier."""
        path = pyfs.path.relpath(pyfs.path.normpath(path))
        if not self._is_object_path(path) or not self._isfile(path):
            raise ValueError(
                "Cannot unshard path. The path {0!r} is not a stored object."
                .format(path)
            )
        return path.replace("/", "")

    def close(self) -> None:
        """Close the backing filesystem if the store opened it."""
        self.fs.close()
        self._close_root()

    def __contains__(self, id: str) -> bool:
        """Return whether an object is stored under `id`."""
        return self.exists(id)

    def __iter__(self) -> Iterable[str]:
        """Iterate over the relative paths of all stored objects."""
        return self.files()

    def __len__(self) -> int:
        """Return count of the number of stored objects."""
        return self.count()

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        self.close()

    def _shard(self, id: str):
        """Shard identifier into ``[id[0:2], id[2:]]``."""
        return u.shard(id, depth=1, width=2)

    def _is_object_path(self, path: str) -> bool:
        """Return whether relative `path` has the shape of a loose object path."""
        id = path.replace("/", "")
        return u.is_hexdigest(id, self.hexlength) and path == pyfs.path.join(*self._shard(id))

    def _isfile(self, path: str) -> bool:
        try:
            return self.fs.isfile(path)
        except pyfs.errors.FSError as exc:
            raise IOFailure("Could not stat {0!r}: {1}".format(path, exc)) from exc

    def _makedirs(self, dir_path: str) -> None:
        """Physically create the shard directory."""
        try:
            # this is creating a directory, so we use dmode here.
            perms = Permissions.create(self.dmode)
            self.fs.makedirs(dir_path, permissions=perms, recreate=True)
        except pyfs.errors.FSError as exc:
            raise IOFailure(
                "Could not create directory {0!r}: {1}".format(dir_path, exc)
            ) from exc

    def _discard(self, path: str) -> None:
        """Remove a temporary file left by a failed write."""
        try:
            self.fs.remove(path)
        except pyfs.errors.FSError:
            # Keep the original write error.
            return None

    def _close_root(self) -> None:
        if self._owns_fs:
            self._rootfs.close()
