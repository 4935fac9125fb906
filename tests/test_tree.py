import io

import pytest

from spacesvm.tdata import keccak256
from spacesvm.tree import EmptyFileError, MissingFileError, Root, delete, download, upload


class FakeStore:
    def __init__(self):
        self.values = {}
        self.sets = []
        self.deletes = []

    def set(self, space, key, value):
        self.values[f"{space}/{key}"] = bytes(value)
        self.sets.append(key)
        return f"tx{len(self.sets)}", 1

    def delete(self, space, key):
        self.values.pop(f"{space}/{key}", None)
        self.deletes.append(key)
        return f"del{len(self.deletes)}", 1

    def resolve(self, path):
        return self.values.get(path)


def _roundtrip(store, data, chunk_size):
    path = upload(store, "files", io.BytesIO(data), chunk_size)
    out = io.BytesIO()
    download(store, path, out)
    return path, out.getvalue()


def test_root_json_forms():
    assert Root(children=["ab"]).to_json() == b'{"contents":null,"children":["ab"]}'
    assert Root(contents=b"hi").to_json() == b'{"contents":"aGk=","children":null}'


def test_root_json_roundtrip():
    root = Root(contents=b"\x00\x01data")
    assert Root.from_json(root.to_json()) == root


def test_small_file_is_inline():
    store = FakeStore()
    path, out = _roundtrip(store, b"hello", 16)
    assert out == b"hello"
    assert len(store.sets) == 1
    assert Root.from_json(store.values[path]).contents == b"hello"


def test_root_key_is_content_hash():
    store = FakeStore()
    path, _ = _roundtrip(store, b"content addressed", 8)
    space, key = path.split("/")
    assert space == "files"
    assert key == keccak256(store.values[path]).hex()


def test_multi_chunk_roundtrip():
    store = FakeStore()
    data = bytes(range(256)) * 3 + b"tail"
    path, out = _roundtrip(store, data, 100)
    assert out == data
    children = Root.from_json(store.values[path]).children
    assert len(children) == len(store.sets) - 1
    for child in children:
        assert child == keccak256(store.values["files/" + child]).hex()


def test_exact_chunk_size_file_uses_children():
    store = FakeStore()
    path, out = _roundtrip(store, b"abcd", 4)
    assert out == b"abcd"
    assert Root.from_json(store.values[path]).contents is None


def test_repeated_chunks_uploaded_once():
    store = FakeStore()
    path, out = _roundtrip(store, b"a" * 8, 4)
    assert out == b"a" * 8
    children = Root.from_json(store.values[path]).children
    assert len(children) == 2 and children[0] == children[1]
    assert len(store.sets) == 2


def test_empty_file_raises():
    with pytest.raises(EmptyFileError):
        upload(FakeStore(), "files", io.BytesIO(b""), 4)


def test_download_missing_root():
    with pytest.raises(MissingFileError, match="files/nothing"):
        download(FakeStore(), "files/nothing", io.BytesIO())


def test_download_missing_chunk():
    store = FakeStore()
    path = upload(store, "files", io.BytesIO(b"x" * 10), 4)
    first = Root.from_json(store.values[path]).children[0]
    del store.values["files/" + first]
    with pytest.raises(MissingFileError):
        download(store, path, io.BytesIO())


def test_download_empty_root_raises():
    store = FakeStore()
    store.values["files/root"] = Root().to_json()
    with pytest.raises(EmptyFileError):
        download(store, "files/root", io.BytesIO())


def test_delete_removes_everything():
    store = FakeStore()
    path = upload(store, "files", io.BytesIO(b"y" * 12 + b"z"), 4)
    delete(store, path)
    assert store.values == {}
    assert store.deletes[-1] == path.split("/")[1]
    with pytest.raises(MissingFileError):
        download(store, path, io.BytesIO())


def test_delete_missing_raises():
    with pytest.raises(MissingFileError):
        delete(FakeStore(), "files/gone")