"""Repository skeleton creation.

A repository is a directory holding ``objects/``, ``refs/`` and a ``HEAD``
file naming the default branch. Only ``objects/`` is used by the object
database; ``refs/`` and ``HEAD`` are created for git compatibility.
"""

import os
import re
from contextlib import closing
from typing import Union

import fs as pyfs
import fs.errors  # noqa: F401
from fs.base import FS

from . import utils as u
from .errors import IOFailure
from .objectdb import ObjectDB
from .store import OBJECTS_DIR


REFS_DIR = "refs"
HEAD_FILE = "HEAD"
DEFAULT_BRANCH = "main"

_INVALID_BRANCH = re.compile(r"\s|\.\.|^[/-]|[\0~^:?*\[\\]")


def init_repository(root: Union[FS, str],
                    default_branch: str = DEFAULT_BRANCH) -> bool:
    """Create the repository skeleton at `root`.

    Missing directories are created recursively. ``HEAD`` is always
    rewritten to point at `default_branch`.

    Returns:
        bool: ``True`` if the ``objects`` directory did not exist before.

    Raises:
        ValueError: If `default_branch` is not a valid branch name.
        IOFailure: On any filesystem error.
    """
    if not default_branch or _INVALID_BRANCH.search(default_branch):
        raise ValueError("Invalid branch name: {0!r}".format(default_branch))

    try:
        repo_fs = root if isinstance(root, FS) else pyfs.open_fs(os.fspath(root), create=True)
    except pyfs.errors.CreateFailed as exc:
        raise IOFailure("Could not create repository {0!r}".format(root)) from exc

    try:
        created = not repo_fs.isdir(OBJECTS_DIR)
        repo_fs.makedirs(OBJECTS_DIR, recreate=True)
        repo_fs.makedirs(REFS_DIR, recreate=True)
        repo_fs.writetext(HEAD_FILE, "ref: refs/heads/{0}\n".format(default_branch))
    except pyfs.errors.FSError as exc:
        raise IOFailure(
            "Could not initialize repository {0!r}: {1}".format(root, exc)
        ) from exc
    finally:
        if repo_fs is not root:
            repo_fs.close()

    return created


def is_repository(root: Union[FS, str]) -> bool:
    """Return whether `root` holds an ``objects`` directory."""
    if isinstance(root, FS):
        return root.isdir(OBJECTS_DIR)

    try:
        repo_fs = u.load_fs(root)
    except pyfs.errors.CreateFailed:
        return False

    with closing(repo_fs):
        return repo_fs.isdir(OBJECTS_DIR)


def open_repository(root: Union[FS, str], **options) -> ObjectDB:
    """Return the :class:`ObjectDB` of an initialized repository. Keyword
    arguments are passed on to :class:`ObjectDB`.
    """
    return ObjectDB(root, **options)
