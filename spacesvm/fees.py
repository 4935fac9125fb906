"""Block cost and minimum price adjustment, and fee suggestions."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

FEE_PERCENTILE = 60


@dataclass(frozen=True)
class FeeParams:
    """The genesis settings that drive fee and block cost adjustment."""

    target_block_rate: int
    target_block_size: int
    lookback_window: int
    min_price: int
    min_block_cost: int
    block_cost_enabled: bool = True


def target_range_units(params: FeeParams) -> int:
    """Load units expected over one lookback window at the target rate."""
    if params.target_block_rate <= 0:
        raise ValueError("target block rate must be positive")
    per_second = params.target_block_size // params.target_block_rate
    return per_second * params.lookback_window


def next_block_cost(params: FeeParams, last_cost: int, seconds_since_last: int) -> int:
    """Cost of the next block given the parent's cost and the time elapsed."""
    if not params.block_cost_enabled:
        return last_cost
    rate = params.target_block_rate
    minimum = params.min_block_cost
    if seconds_since_last < rate:
        return last_cost + (rate - seconds_since_last)
    excess = seconds_since_last - rate
    if last_cost >= minimum and excess < last_cost - minimum:
        return last_cost - excess
    return minimum


def _trunc_div(a: int, b: int) -> int:
    quotient = abs(a) // abs(b)
    return quotient if (a >= 0) == (b > 0) else -quotient


def next_block_price(
    params: FeeParams,
    last_price: int,
    recent_units: int,
    range_units: int,
    seconds_since_last: int,
) -> int:
    """Minimum price of the next block given recent load against the target."""
    if recent_units > range_units:
        return last_price + 1
    if recent_units == range_units:
        return last_price
    if params.lookback_window <= 0:
        raise ValueError("lookback window must be positive")
    # The current window counts even though it is not yet complete.
    elapsed_windows = _trunc_div(seconds_since_last, params.lookback_window) + 1
    minimum = params.min_price
    if last_price >= minimum and 0 <= elapsed_windows < last_price - minimum:
        return last_price - elapsed_windows
    return minimum


def _percentile(values: Iterable[int], name: str) -> int:
    ordered = sorted(values)
    if not ordered:
        raise ValueError(f"no recent {name} to suggest a fee from")
    return ordered[(len(ordered) - 1) * FEE_PERCENTILE // 100]


def suggested_fee(
    params: FeeParams,
    prices: Iterable[int],
    costs: Iterable[int],
    recent_tx_count: int,
    recent_block_count: int,
) -> tuple[int, int]:
    """Suggest a (price, cost) pair from recent block prices and costs."""
    price = max(_percentile(prices, "prices"), params.min_price)
    cost = max(_percentile(costs, "costs"), params.min_block_cost)
    if recent_tx_count == 0:
        return price, cost
    if recent_block_count <= 0:
        raise ValueError("recent transactions require at least one recent block")
    per_tx = cost // recent_tx_count // recent_block_count
    # Always recommend at least the minimum block cost.
    return price, max(per_tx, params.min_block_cost)