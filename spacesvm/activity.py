"""A fixed-size record of recent chain activity."""

from __future__ import annotations

import threading
from collections import deque
from typing import Any


class ActivityCache:
    """Keeps the most recent ``size`` activity records; a size of 0 keeps none."""

    def __init__(self, size: int) -> None:
        if size < 0:
            raise ValueError(f"activity cache size must not be negative, got {size}")
        self._lock = threading.Lock()
        self._items: deque[Any] = deque(maxlen=size)

    def record(self, activity: Any) -> None:
        """Record one activity, displacing the oldest when full."""
        with self._lock:
            self._items.append(activity)

    def recent(self) -> list[Any]:
        """Return the recorded activity, newest first."""
        with self._lock:
            return list(reversed(self._items))