# spacesvm

This package provides the building blocks for a chain of claimable key-value "spaces". A space is a namespace that an address owns, and it holds keys that map to values. The package is a library only. Each module stands on its own.

## Modules

- `spacesvm.parser` checks and splits identifiers.
  - `check_contents(identifier)` raises `InvalidContentsError` unless the identifier matches `^[a-z0-9]{1,256}$`.
  - `resolve_path(path)` splits a `space/key` path into `(space, key)`. It raises `InvalidPathError` when the path does not have exactly two segments. It raises `InvalidContentsError` when either segment is malformed.
  - Both errors are subclasses of `ValueError`.

- `spacesvm.tdata` handles EIP-712 style typed data.
  - The types are `TypedData`, `TypedDataDomain` and `TypeField`.
  - `create_typed_data(magic, tx_type, tx_fields, msg)` builds a message in the `"Spaces"` domain.
  - `digest_hash(td)` returns the 32-byte Keccak-256 digest to sign.
  - `TypedData` also has these methods: `encode_type`, `type_hash`, `encode_data`, `encode_primitive_value`, `hash_struct`, `dependencies` and `to_map`.
  - Supported primitives are `address`, `bool`, `string`, `bytes`, `bytes1`..`bytes32`, `int*` and `uint*`. Arrays and nested struct types are also supported.
  - Errors raise `TypedDataError`.
  - `keccak256(data)` is exposed as well.

- `spacesvm.mempool` provides `Mempool(genesis, max_size)`, a thread-safe pool of pending transactions ordered by price.
  - **Transaction objects.** Each one must have `id`, `price` and `block_id` attributes and a `load_units(genesis)` method.
  - **`add(tx)`.**
    - Returns `False` for a duplicate.
    - Returns `False` when the new transaction is itself the lowest payer and is evicted because the pool is over `max_size`.
    - Otherwise the lowest payer is evicted and the new transaction stays.
    - Sets the `pending` `threading.Event`.
  - **Reading and removing.**
    - `peek_max()`, `peek_min()`, `pop_max()` and `pop_min()` return `(tx, price)`. They raise `IndexError` when the pool is empty.
    - `remove(tx_id)` and `get(tx_id)` are also provided.
    - The pool supports `len()` and `in`.
  - **`prune(valid_hashes)`.** Drops every transaction whose `block_id` is not in `valid_hashes`.
  - **`new_txs(max_units)`.** Hands out the newly added transactions that are still in the pool.
    - They come in insertion order, up to a total of `max_units` load units.
    - The ones that do not fit are kept for the next call.

- `spacesvm.config` holds the node settings.
  - `Config` is a dataclass of intervals (`timedelta`) and sizes, with these defaults:
    - `build_interval` 500 ms
    - `gossip_interval` 1 s
    - `regossip_interval` 30 s
    - `prune_limit` 128
    - `prune_interval` 1 min
    - `full_prune_interval` 1 s
    - `compact_interval` 1 min
    - `mempool_size` 1024
    - `activity_cache_size` 128
  - `load_config(data)` overrides the defaults from a JSON object.
    - Keys such as `buildInterval` and `mempoolSize` are matched case-insensitively.
    - Durations are given in integer nanoseconds.
    - Unknown keys are ignored.
    - Empty input gives the defaults.
    - Bad JSON or non-integer values raise `ValueError`.

- `spacesvm.tree` stores files in a space as chunks.
  - **`upload(store, space, f, chunk_size)`.**
    - Reads `f` in chunks of `chunk_size` bytes.
    - Stores each chunk under the hex Keccak-256 of its bytes, uploading identical chunks only once.
    - Stores a JSON `Root` that lists the chunk keys, and returns its `space/key` path.
    - A file smaller than one chunk is stored inline in the root.
  - **`download(store, path, f)`.** Writes the file back to `f`.
  - **`delete(store, path)`.** Removes the chunks and then the root.
  - **Errors.**
    - `EmptyFileError` is raised for an empty file or an empty root.
    - `MissingFileError` (a `LookupError`) is raised when the root or a chunk is not stored.
  - **The `Store` protocol.** The store must implement it:
    - `set(space, key, value) -> (tx_id, cost)`
    - `delete(space, key) -> (tx_id, cost)`
    - `resolve(path) -> bytes | None`
  - Progress is logged through `logging`.

- `spacesvm.fees` adjusts block cost and minimum price, driven by `FeeParams`.
  - `FeeParams` fields are `target_block_rate`, `target_block_size`, `lookback_window`, `min_price`, `min_block_cost` and `block_cost_enabled`.
  - `target_range_units(params)` gives the load units expected over one lookback window.
  - `next_block_cost(params, last_cost, seconds_since_last)` gives the next block's cost:
    - It rises when blocks come faster than the target rate.
    - It falls toward `min_block_cost` when they come slower.
    - It stays unchanged when block cost is disabled.
  - `next_block_price(params, last_price, recent_units, range_units, seconds_since_last)` gives the next minimum price:
    - It goes up by one when recent load is above the target range.
    - It falls toward `min_price` when load is below the target.
  - `suggested_fee(params, prices, costs, recent_tx_count, recent_block_count)` returns `(price, cost)`:
    - Price and cost are taken at the 60th percentile of the recent values.
    - Each is floored at its minimum.
    - When there are recent transactions, the cost is spread over the transactions and blocks.

- `spacesvm.activity` provides `ActivityCache(size)`, which keeps the last `size` records.
  - `record(activity)` adds one record.
  - `recent()` returns the records newest first.
  - A size of 0 keeps nothing.

## Install

```
pip install .
```

The test dependencies are in the `test` extra:

```
pip install ".[test]"
pytest
```

## Example

```python
import io

from spacesvm import tree
from spacesvm.parser import resolve_path
from spacesvm.tdata import TypeField, create_typed_data, digest_hash

space, key = resolve_path("foo/bar")

td = create_typed_data(
    5,
    "claim",
    [TypeField("space", "string"), TypeField("price", "uint64")],
    {"space": "foo", "price": "10"},
)
digest = digest_hash(td)  # 32 bytes


class MemoryStore:
    def __init__(self):
        self.data = {}
        self.count = 0

    def set(self, space, key, value):
        self.data[(space, key)] = bytes(value)
        self.count += 1
        return f"tx{self.count}", 1

    def delete(self, space, key):
        self.data.pop((space, key), None)
        self.count += 1
        return f"tx{self.count}", 1

    def resolve(self, path):
        space, key = resolve_path(path)
        return self.data.get((space, key))


store = MemoryStore()
path = tree.upload(store, "foo", io.BytesIO(b"hello" * 1000), 1024)
out = io.BytesIO()
tree.download(store, path, out)
assert out.getvalue() == b"hello" * 1000
tree.delete(store, path)
```

## What this package does not do

This package is not a node. It contains:

- no consensus or block building;
- no block or transaction types;
- no signing of transactions;
- no networking or gossip;
- no RPC server or client;
- no command-line tool.

It has no storage of its own either. `spacesvm.tree` works only against a `Store` that you supply. The mempool and the fee functions take their transactions and parameters from the caller.