from dataclasses import dataclass

import pytest

from spacesvm.mempool import Mempool


@dataclass
class FakeTx:
    id: str
    price: int
    block_id: str = "blk"
    units: int = 1

    def load_units(self, genesis):
        return self.units


def test_source_case_keeps_highest_paying():
    pool = Mempool(None, 3)
    for price in (100, 200, 220, 250):
        assert pool.add(FakeTx(f"tx{price}", price)) is True
    assert pool.peek_max()[1] == 250
    assert pool.peek_min()[1] == 200
    assert len(pool) == 3


def test_duplicate_is_rejected():
    pool = Mempool(None, 4)
    tx = FakeTx("a", 5)
    assert pool.add(tx) is True
    assert pool.add(tx) is False
    assert len(pool) == 1


def test_new_lowest_tx_is_evicted_immediately():
    pool = Mempool(None, 2)
    pool.add(FakeTx("a", 5))
    pool.add(FakeTx("b", 10))
    assert pool.add(FakeTx("c", 1)) is False
    assert "c" not in pool
    assert len(pool) == 2
    assert [tx.id for tx in pool.new_txs(100)] == ["a", "b"]


def test_pop_order():
    pool = Mempool(None, 10)
    for name, price in [("a", 3), ("b", 9), ("c", 1), ("d", 7)]:
        pool.add(FakeTx(name, price))
    tx, price = pool.pop_max()
    assert (tx.id, price) == ("b", 9)
    tx, price = pool.pop_min()
    assert (tx.id, price) == ("c", 1)
    assert sorted(t for t in "abcd" if t in pool) == ["a", "d"]
    assert pool.peek_max()[0].id == "d"
    assert pool.peek_min()[0].id == "a"


def test_remove_and_get():
    pool = Mempool(None, 10)
    tx = FakeTx("a", 3)
    pool.add(tx)
    pool.add(FakeTx("b", 4))
    assert pool.get("a") is tx
    assert pool.remove("a") is tx
    assert pool.get("a") is None
    assert pool.remove("a") is None
    assert pool.peek_min()[0].id == "b"


def test_prune_drops_invalid_block_ids():
    pool = Mempool(None, 10)
    pool.add(FakeTx("a", 1, block_id="x"))
    pool.add(FakeTx("b", 2, block_id="y"))
    pool.add(FakeTx("c", 3, block_id="x"))
    pool.prune({"x"})
    assert "b" not in pool
    assert len(pool) == 2
    assert pool.peek_max()[0].id == "c"


def test_new_txs_respects_units_and_order():
    pool = Mempool(None, 10)
    for name in "abc":
        pool.add(FakeTx(name, 1, units=3))
    assert [tx.id for tx in pool.new_txs(7)] == ["a", "b"]
    assert [tx.id for tx in pool.new_txs(100)] == ["c"]
    assert pool.new_txs(100) == []


def test_new_txs_skips_removed():
    pool = Mempool(None, 10)
    pool.add(FakeTx("a", 1))
    pool.add(FakeTx("b", 2))
    pool.remove("a")
    assert [tx.id for tx in pool.new_txs(10)] == ["b"]


def test_pending_signalled_on_add():
    pool = Mempool(None, 2)
    assert not pool.pending.is_set()
    pool.add(FakeTx("a", 1))
    assert pool.pending.is_set()


def test_empty_peek_raises():
    pool = Mempool(None, 2)
    with pytest.raises(IndexError):
        pool.peek_max()
    with pytest.raises(IndexError):
        pool.pop_min()


def test_heaps_stay_consistent_under_churn():
    pool = Mempool(None, 5)
    prices = [13, 2, 8, 21, 5, 34, 1, 3, 55, 8]
    for i, price in enumerate(prices):
        pool.add(FakeTx(f"t{i}", price))
    drained = []
    while len(pool):
        drained.append(pool.pop_max()[1])
    assert drained == sorted(prices, reverse=True)[:5]