"""Chunked file storage on top of a space's key-value store."""

from __future__ import annotations

import base64
import binascii
import json
import logging
from dataclasses import dataclass
from typing import BinaryIO, Protocol

from .parser import DELIMITER
from .tdata import keccak256

_log = logging.getLogger(__name__)

_KIB = 1024
_MIB = 1024 * 1024


class EmptyFileError(Exception):
    """Raised when a file has no contents."""

    def __init__(self, message: str = "file is empty") -> None:
        super().__init__(message)


class MissingFileError(LookupError):
    """Raised when a required file or chunk is not stored."""

    def __init__(self, path: str = "") -> None:
        message = "required file is missing"
        super().__init__(f"{message}:{path}" if path else message)
        self.path = path


class Store(Protocol):
    """A signed, confirmed key-value store addressed by space and key."""

    def set(self, space: str, key: str, value: bytes) -> tuple[str, int]:
        """Store value at space/key; return the transaction ID and its cost."""
        ...

    def delete(self, space: str, key: str) -> tuple[str, int]:
        """Delete space/key; return the transaction ID and its cost."""
        ...

    def resolve(self, path: str) -> bytes | None:
        """Return the value at path, or None if nothing is stored there."""
        ...


@dataclass
class Root:
    """The root record of a file: inline contents or the keys of its chunks."""

    contents: bytes | None = None
    children: list[str] | None = None

    def to_json(self) -> bytes:
        encoded = None if self.contents is None else base64.b64encode(self.contents).decode()
        body = {"contents": encoded, "children": self.children}
        return json.dumps(body, separators=(",", ":")).encode()

    @staticmethod
    def from_json(data: bytes | str) -> Root:
        parsed = json.loads(data)
        if not isinstance(parsed, dict):
            raise ValueError("root must be a JSON object")
        raw = parsed.get("contents")
        children = parsed.get("children")
        if raw is not None and not isinstance(raw, str):
            raise ValueError("root contents must be a base64 string")
        if children is not None and (
            not isinstance(children, list) or not all(isinstance(c, str) for c in children)
        ):
            raise ValueError("root children must be a list of strings")
        try:
            contents = None if raw is None else base64.b64decode(raw, validate=True)
        except binascii.Error as exc:
            raise ValueError(f"invalid root contents: {exc}") from exc
        return Root(contents=contents, children=children)


def _hash_key(data: bytes) -> str:
    return keccak256(data).hex()


def upload(store: Store, space: str, f: BinaryIO, chunk_size: int) -> str:
    """Store the file read from f in space and return the path of its root."""
    hashes: list[str] = []
    uploaded: set[str] = set()
    total_cost = 0
    chunk = b""
    while True:
        chunk = f.read(chunk_size)
        if not chunk:
            break
        last = len(chunk) < chunk_size
        if last and not hashes:
            # Small files live inline in the root.
            break
        key = _hash_key(chunk)
        if key in uploaded:
            _log.info("already uploaded k=%s, skipping", key)
        else:
            tx_id, cost = store.set(space, key, chunk)
            total_cost += cost
            _log.info("uploaded k=%s txID=%s cost=%d totalCost=%d", key, tx_id, cost, total_cost)
            uploaded.add(key)
        hashes.append(key)
        if last:
            break

    if hashes:
        root = Root(children=hashes)
    elif chunk:
        root = Root(contents=chunk)
    else:
        raise EmptyFileError()

    root_bytes = root.to_json()
    root_key = _hash_key(root_bytes)
    tx_id, cost = store.set(space, root_key, root_bytes)
    total_cost += cost
    _log.info("uploaded root=%s txID=%s cost=%d totalCost=%d", root_key, tx_id, cost, total_cost)
    return space + DELIMITER + root_key


def _load_root(store: Store, path: str) -> Root:
    data = store.resolve(path)
    if data is None:
        raise MissingFileError(path)
    return Root.from_json(data)


def download(store: Store, path: str, f: BinaryIO) -> None:
    """Write the file whose root is at path to f."""
    root = _load_root(store, path)
    if root.contents:
        f.write(root.contents)
        _log.info("downloaded path=%s size=%fKB", path, len(root.contents) / _KIB)
        return
    if not root.children:
        raise EmptyFileError()

    space = path.split(DELIMITER)[0]
    downloaded = 0
    for child in root.children:
        chunk_path = space + DELIMITER + child
        data = store.resolve(chunk_path)
        if data is None:
            raise MissingFileError(chunk_path)
        f.write(data)
        downloaded += len(data)
        _log.info("downloaded chunk=%s size=%fKB", chunk_path, len(data) / _KIB)
    _log.info("download path=%s size=%fMB", path, downloaded / _MIB)


def delete(store: Store, path: str) -> None:
    """Delete every chunk of the file at path, then its root."""
    root = _load_root(store, path)
    space, root_key = path.split(DELIMITER)[:2]
    total_cost = 0
    deleted: set[str] = set()
    for child in root.children or []:
        if child in deleted:
            _log.info("already deleted k=%s, skipping", child)
            continue
        tx_id, cost = store.delete(space, child)
        total_cost += cost
        _log.info("deleted k=%s txID=%s cost=%d totalCost=%d", child, tx_id, cost, total_cost)
        deleted.add(child)
    tx_id, cost = store.delete(space, root_key)
    total_cost += cost
    _log.info("deleted root=%s txID=%s cost=%d totalCost=%d", path, tx_id, cost, total_cost)