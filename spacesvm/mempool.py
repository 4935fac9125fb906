"""A bounded, price-ordered pool of pending transactions."""

from __future__ import annotations

import threading
from collections.abc import Container, Hashable
from typing import Any, Protocol


class Transaction(Protocol):
    """What the mempool needs to know about a transaction."""

    @property
    def id(self) -> Hashable: ...

    @property
    def price(self) -> int: ...

    @property
    def block_id(self) -> Hashable: ...

    def load_units(self, genesis: Any) -> int: ...


class _Entry:
    __slots__ = ("id", "tx", "price", "index")

    def __init__(self, tx_id: Hashable, tx: Transaction, price: int, index: int) -> None:
        self.id = tx_id
        self.tx = tx
        self.price = price
        self.index = index


class _TxHeap:
    """Binary heap of entries by price that tracks each entry's position."""

    def __init__(self, is_min_heap: bool) -> None:
        self._is_min = is_min_heap
        self.items: list[_Entry] = []
        self._lookup: dict[Hashable, _Entry] = {}

    def __len__(self) -> int:
        return len(self.items)

    def __contains__(self, tx_id: Hashable) -> bool:
        return tx_id in self._lookup

    def get(self, tx_id: Hashable) -> _Entry | None:
        return self._lookup.get(tx_id)

    def peek(self) -> _Entry:
        if not self.items:
            raise IndexError("mempool is empty")
        return self.items[0]

    def _less(self, i: int, j: int) -> bool:
        if self._is_min:
            return self.items[i].price < self.items[j].price
        return self.items[i].price > self.items[j].price

    def _swap(self, i: int, j: int) -> None:
        items = self.items
        items[i], items[j] = items[j], items[i]
        items[i].index = i
        items[j].index = j

    def _up(self, j: int) -> None:
        while j > 0:
            i = (j - 1) // 2
            if not self._less(j, i):
                break
            self._swap(i, j)
            j = i

    def _down(self, i0: int, n: int) -> bool:
        i = i0
        while True:
            j1 = 2 * i + 1
            if j1 >= n:
                break
            j = j1
            j2 = j1 + 1
            if j2 < n and self._less(j2, j1):
                j = j2
            if not self._less(j, i):
                break
            self._swap(i, j)
            i = j
        return i > i0

    def push(self, entry: _Entry) -> None:
        if entry.id in self._lookup:
            return
        entry.index = len(self.items)
        self.items.append(entry)
        self._lookup[entry.id] = entry
        self._up(len(self.items) - 1)

    def remove(self, index: int) -> _Entry:
        n = len(self.items) - 1
        if n != index:
            self._swap(index, n)
            if not self._down(index, n):
                self._up(index)
        entry = self.items.pop()
        del self._lookup[entry.id]
        return entry


class Mempool:
    """Keeps at most ``max_size`` transactions, evicting the lowest paying one.

    ``pending`` is set whenever a transaction is added, to signal that a
    block may be built.
    """

    def __init__(self, genesis: Any, max_size: int) -> None:
        self._lock = threading.RLock()
        self._genesis = genesis
        self._max_size = max_size
        self._max_heap = _TxHeap(is_min_heap=False)
        self._min_heap = _TxHeap(is_min_heap=True)
        self._new_txs: list[Transaction] = []
        self.pending = threading.Event()

    def add(self, tx: Transaction) -> bool:
        """Add tx; return False if it is a duplicate or was evicted at once."""
        tx_id = tx.id
        price = tx.price
        with self._lock:
            if tx_id in self._max_heap:
                return False
            size = len(self._max_heap)
            self._max_heap.push(_Entry(tx_id, tx, price, size))
            self._min_heap.push(_Entry(tx_id, tx, price, size))

            # Evict after adding, in case the new transaction pays the least.
            if len(self._max_heap) > self._max_size:
                evicted, _ = self._pop_min()
                if evicted is not None and evicted.id == tx_id:
                    return False

            self._new_txs.append(tx)
            self.pending.set()
            return True

    def peek_max(self) -> tuple[Transaction, int]:
        with self._lock:
            entry = self._max_heap.peek()
            return entry.tx, entry.price

    def peek_min(self) -> tuple[Transaction, int]:
        with self._lock:
            entry = self._min_heap.peek()
            return entry.tx, entry.price

    def pop_max(self) -> tuple[Transaction | None, int]:
        with self._lock:
            entry = self._max_heap.peek()
            return self._remove(entry.id), entry.price

    def pop_min(self) -> tuple[Transaction | None, int]:
        with self._lock:
            return self._pop_min()

    def remove(self, tx_id: Hashable) -> Transaction | None:
        """Remove and return the transaction with tx_id, or None if absent."""
        with self._lock:
            return self._remove(tx_id)

    def prune(self, valid_hashes: Container[Hashable]) -> None:
        """Remove every transaction whose block ID is not in valid_hashes."""
        with self._lock:
            stale = [e.id for e in self._max_heap.items if e.tx.block_id not in valid_hashes]
            for tx_id in stale:
                self._remove(tx_id)

    def __len__(self) -> int:
        with self._lock:
            return len(self._max_heap)

    def get(self, tx_id: Hashable) -> Transaction | None:
        with self._lock:
            entry = self._max_heap.get(tx_id)
            return None if entry is None else entry.tx

    def __contains__(self, tx_id: object) -> bool:
        with self._lock:
            return tx_id in self._max_heap

    def new_txs(self, max_units: int) -> list[Transaction]:
        """Take newly added transactions, in order, up to max_units load units.

        Transactions that no longer sit in the pool are dropped; those that
        do not fit are kept for the next call.
        """
        with self._lock:
            selected: list[Transaction] = []
            units = 0
            for position, tx in enumerate(self._new_txs):
                if tx.id not in self._max_heap:
                    continue
                tx_units = tx.load_units(self._genesis)
                if tx_units > max_units - units:
                    self._new_txs = self._new_txs[position:]
                    return selected
                units += tx_units
                selected.append(tx)
            self._new_txs = []
            return selected

    def _pop_min(self) -> tuple[Transaction | None, int]:
        entry = self._min_heap.peek()
        return self._remove(entry.id), entry.price

    def _remove(self, tx_id: Hashable) -> Transaction | None:
        max_entry = self._max_heap.get(tx_id)
        if max_entry is None:
            return None
        self._max_heap.remove(max_entry.index)
        min_entry = self._min_heap.get(tx_id)
        if min_entry is None:
            return None
        return self._min_heap.remove(min_entry.index).tx