# -*- coding: utf-8 -*-

from io import BytesIO, StringIO
from unittest import mock
import zlib

import pytest
from fs.memoryfs import MemoryFS

import gitcas
from gitcas import codec
from gitcas.errors import (
    DecompressionError,
    HashAlgorithmUnavailable,
    InvalidIdentifier,
    MalformedObject,
    ObjectNotFound,
)


TEST_CONTENT = b"test content\n"
TEST_CONTENT_ID = "d670460b4b4aece5915caf5c68d12f560a9fe3e4"
EMPTY_BLOB_ID = "e69de29bb2d1d6434b8b29ae775ad8c2e48c5391"


@pytest.fixture
def testpath(tmpdir):
    path = tmpdir.mkdir("repo")
    path.mkdir("objects")
    return path


@pytest.fixture
def db(testpath):
    with gitcas.ObjectDB(str(testpath)) as db:
        yield db


@pytest.fixture
def testfile(tmpdir):
    testfile = tmpdir.join("content.txt")
    testfile.write_binary(TEST_CONTENT)
    return testfile


def test_objectdb_known_vector(db, testpath):
    id = db.hash_and_store("blob", TEST_CONTENT)

    assert id == TEST_CONTENT_ID

    objpath = testpath.join("objects", "d6", "70460b4b4aece5915caf5c68d12f560a9fe3e4")
    assert objpath.check(file=1)
    assert zlib.decompress(objpath.read_binary()) == b"blob 13\x00test content\n"
    assert db.load(id) == TEST_CONTENT


def test_objectdb_deterministic(db):
    assert db.hash_and_store("blob", b"foo") == db.hash_and_store("blob", b"foo")


@pytest.mark.parametrize(
    "payload",
    [b"", b"foo", TEST_CONTENT, b"a\x00b\x00c", bytes(bytearray(range(256))) * 16],
)
def test_objectdb_round_trip(db, payload):
    assert db.load(db.hash_and_store("blob", payload)) == payload


def test_objectdb_round_trip_memoryfs():
    memfs = MemoryFS()
    memfs.makedir("objects")
    db = gitcas.ObjectDB(memfs)

    id = db.hash_and_store("blob", TEST_CONTENT)

    assert id == TEST_CONTENT_ID
    assert memfs.isfile("objects/d6/70460b4b4aece5915caf5c68d12f560a9fe3e4")
    assert db.load(id) == TEST_CONTENT


def test_objectdb_empty_payload(db):
    id = db.hash_and_store("blob", b"")

    assert id == EMPTY_BLOB_ID
    assert db.load(id) == b""


def test_objectdb_hash_object(db):
    address = db.hash_object("blob", TEST_CONTENT)

    assert address.id == TEST_CONTENT_ID
    assert address.relpath == "d6/70460b4b4aece5915caf5c68d12f560a9fe3e4"
    assert not address.is_duplicate


def test_objectdb_hash_object_duplicate(db, monkeypatch):
    address_a = db.hash_object("blob", TEST_CONTENT)

    def fail(*args, **kwargs):
        raise AssertionError("compress called for a stored object")

    monkeypatch.setattr(codec, "compress", fail)
    address_b = db.hash_object("blob", TEST_CONTENT)

    assert not address_a.is_duplicate
    assert address_b.is_duplicate
    assert address_a.id == address_b.id
    assert db.store.count() == 1


def test_objectdb_hash_object_no_write(db):
    address = db.hash_object("blob", TEST_CONTENT, write=False)

    assert address.id == TEST_CONTENT_ID
    assert not db.exists(address.id)
    assert len(db) == 0


def test_objectdb_type_tag(db):
    id = db.hash_and_store("note", b"foo")

    assert id == codec.digest(b"note 3\x00foo")
    assert db.read_header(id) == ("note", 3)
    assert id != db.hash_and_store("blob", b"foo")


def test_objectdb_put_bytes(db):
    address = db.put(TEST_CONTENT)
    assert address.id == TEST_CONTENT_ID


def test_objectdb_put_file(db, testfile):
    address = db.put(str(testfile))
    assert address.id == TEST_CONTENT_ID
    assert db.load(address.id) == TEST_CONTENT


def test_objectdb_put_fileobj(db):
    fileobj = BytesIO(TEST_CONTENT)
    fileobj.seek(4)

    address = db.put(fileobj)

    assert address.id == TEST_CONTENT_ID
    assert fileobj.tell() == 4


def test_objectdb_put_stringio(db):
    address = db.put(StringIO(u"test content\n"))
    assert address.id == TEST_CONTENT_ID


def test_objectdb_put_error(db):
    with pytest.raises(ValueError):
        db.put("foo")


def test_objectdb_load_not_found(db):
    with pytest.raises(ObjectNotFound):
        db.load(TEST_CONTENT_ID)


@pytest.mark.parametrize("id", ["ab", "", TEST_CONTENT_ID.upper(), "z" * 40])
def test_objectdb_load_invalid_id(db, id):
    db.store.fs = mock.MagicMock()

    with pytest.raises(InvalidIdentifier):
        db.load(id)

    assert not db.store.fs.mock_calls


def test_objectdb_load_decompression_error(db):
    db.store.write(TEST_CONTENT_ID, b"not zlib")

    with pytest.raises(DecompressionError):
        db.load(TEST_CONTENT_ID)


def test_objectdb_load_malformed(db):
    db.store.write(TEST_CONTENT_ID, zlib.compress(b"blob 13 test content\n"))

    with pytest.raises(MalformedObject):
        db.load(TEST_CONTENT_ID)


def test_objectdb_read(db):
    id = db.hash_and_store("blob", TEST_CONTENT)
    header, payload = db.read(id)

    assert header.type == "blob"
    assert header.size == 13
    assert payload == TEST_CONTENT


def test_objectdb_read_header(db):
    id = db.hash_and_store("blob", b"")
    assert db.read_header(id) == gitcas.ObjectHeader("blob", 0)


def test_objectdb_contains(db):
    id = db.hash_and_store("blob", TEST_CONTENT)

    assert id in db
    assert EMPTY_BLOB_ID not in db


def test_objectdb_iter(db):
    ids = set(db.hash_and_store("blob", u"{0}".format(i).encode()) for i in range(5))

    assert set(db) == ids
    assert len(db) == 5


def test_objectdb_corrupted(db):
    id = db.hash_and_store("blob", TEST_CONTENT)
    empty_id = db.hash_and_store("blob", b"")

    assert list(db.corrupted()) == []

    path = db.store.path(id)
    db.store.fs.writebytes(path, zlib.compress(b"blob 3\x00foo"))
    db.store.fs.writebytes(db.store.path(empty_id), b"garbage")

    corrupted = dict(db.corrupted())

    assert corrupted == {
        path: codec.digest(b"blob 3\x00foo"),
        db.store.path(empty_id): None,
    }


def test_objectdb_algorithm(testpath):
    db = gitcas.ObjectDB(str(testpath), algorithm="sha256")
    id = db.hash_and_store("blob", TEST_CONTENT)

    assert len(id) == 64
    assert db.load(id) == TEST_CONTENT

    db.close()


def test_objectdb_algorithm_unavailable(testpath):
    with pytest.raises(HashAlgorithmUnavailable):
        gitcas.ObjectDB(str(testpath), algorithm="invalid")


def test_objectdb_compresslevel(testpath):
    db = gitcas.ObjectDB(str(testpath), compresslevel=0)
    payload = b"a" * 1024
    id = db.hash_and_store("blob", payload)

    assert len(db.store.read_raw(id)) > len(payload)
    assert db.load(id) == payload

    db.close()


def test_objectdb_corrupted_skips_stray_files(db):
    id = db.hash_and_store("blob", TEST_CONTENT)
    db.store.fs.makedirs("d6/70")
    db.store.fs.writebytes("d6/70/" + TEST_CONTENT_ID[4:], b"stray")
    db.store.fs.makedirs("pack")
    db.store.fs.writebytes("pack/pack-{0}.idx".format(id), b"idx")

    assert list(db.corrupted()) == []
    assert list(db) == [id]
    assert len(db) == 1


def test_objectdb_corrupted_vanished_file(db, monkeypatch):
    id = db.hash_and_store("blob", TEST_CONTENT)

    def missing(id):
        raise ObjectNotFound(id)

    monkeypatch.setattr(db.store, "read_raw", missing)

    assert list(db.corrupted()) == [(db.store.path(id), None)]


def test_objectdb_load_trailing_garbage(db):
    db.store.write(TEST_CONTENT_ID, zlib.compress(b"blob 13\x00test content\n") + b"junk")

    with pytest.raises(DecompressionError):
        db.load(TEST_CONTENT_ID)
