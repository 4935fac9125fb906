"""Virtual machine settings and their JSON form."""

from __future__ import annotations

import json
from dataclasses import dataclass, field, replace
from datetime import timedelta
from typing import Any

_INT64_MIN = -(2**63)
_INT64_MAX = 2**63 - 1


@dataclass
class Config:
    """Intervals and sizes that govern block building, gossip and pruning."""

    build_interval: timedelta = field(default_factory=lambda: timedelta(milliseconds=500))
    gossip_interval: timedelta = field(default_factory=lambda: timedelta(seconds=1))
    regossip_interval: timedelta = field(default_factory=lambda: timedelta(seconds=30))

    prune_limit: int = 128
    prune_interval: timedelta = field(default_factory=lambda: timedelta(minutes=1))
    full_prune_interval: timedelta = field(default_factory=lambda: timedelta(seconds=1))

    compact_interval: timedelta = field(default_factory=lambda: timedelta(minutes=1))

    mempool_size: int = 1024
    activity_cache_size: int = 128


# JSON name -> (attribute, is_duration); durations are integer nanoseconds.
_FIELDS = {
    "buildinterval": ("build_interval", True),
    "gossipinterval": ("gossip_interval", True),
    "regossipinterval": ("regossip_interval", True),
    "prunelimit": ("prune_limit", False),
    "pruneinterval": ("prune_interval", True),
    "fullpruneinterval": ("full_prune_interval", True),
    "compactinterval": ("compact_interval", True),
    "mempoolsize": ("mempool_size", False),
    "activitycachesize": ("activity_cache_size", False),
}


def _as_int(name: str, value: Any) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"cannot use {value!r} as an integer for {name}")
    if not _INT64_MIN <= value <= _INT64_MAX:
        raise ValueError(f"value {value} overflows {name}")
    return value


def load_config(data: bytes | str) -> Config:
    """Return the default Config overridden by the JSON object in data."""
    config = Config()
    if not data:
        return config
    try:
        parsed = json.loads(data)
    except ValueError as exc:
        text = data.decode(errors="replace") if isinstance(data, bytes) else data
        raise ValueError(f"failed to unmarshal config {text}: {exc}") from exc
    if parsed is None:
        return config
    if not isinstance(parsed, dict):
        raise ValueError(f"failed to unmarshal config: expected an object, got {parsed!r}")

    updates: dict[str, Any] = {}
    for key, value in parsed.items():
        known = _FIELDS.get(key.lower())
        if known is None or value is None:
            continue
        attr, is_duration = known
        number = _as_int(key, value)
        updates[attr] = timedelta(microseconds=number / 1000) if is_duration else number
    return replace(config, **updates)