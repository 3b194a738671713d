"""
Cache Pool Module

This module implements the core key/value pool: storage with per-entry
expiry, lazy and active staleness cleanup, and bulk eviction of the
least recently written entries.

Pool operations never raise for cache misses or type mismatches; they
report failure with False or None.
"""

import logging
import math
import sys
import time
from collections import OrderedDict
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional

from .codec import CacheValue, clamp_int64, is_numeric, normalize_value, sanitize_key, to_int
from .memory import process_memory_usage

logger = logging.getLogger(__name__)

# Fixed per-scalar overhead used by the status footprint model
ITEM_BASE_OVERHEAD = 16 if sys.maxsize > 2 ** 32 else 8

STATUS_COLUMNS = (
    "Memory usage (MB)",
    "Item count",
    "Smallest item (KB)",
    "Largest item (KB)",
    "Average item (KB)",
)


@dataclass
class CacheEntry:
    """
    A single cached value with its bookkeeping.

    Attributes:
        value: The stored value (str, bool or int)
        last_write: Epoch seconds of the last mutating operation
        expiry: Absolute epoch seconds after which the entry is stale (0 = never)
    """
    value: CacheValue
    last_write: int
    expiry: int = 0

    def is_stale(self, now: int) -> bool:
        """Check whether the entry has expired at ``now``."""
        return self.expiry != 0 and self.expiry < now


def item_footprint(value: CacheValue) -> int:
    """Approximate memory footprint of a stored value, in bytes."""
    if isinstance(value, str):
        return ITEM_BASE_OVERHEAD + len(value.encode("utf-8"))
    return ITEM_BASE_OVERHEAD


class Pool:
    """
    In-memory key/value pool with expiry and write-recency eviction.

    Complexity:
    - add/set/replace/delete/increment/decrement/get/has: O(1) average
    - clear_least_recently_used/clear_stale_cache: O(n)

    Internal Storage:
        OrderedDict of sanitized key -> CacheEntry. Every mutating operation
        moves its key to the end, so iteration order is write order (oldest
        first). Reads never reorder.

    Attributes:
        name: Pool name used in log messages
    """

    def __init__(
            self,
            name: str = "default",
            clock: Callable[[], float] = None,
            memory_reader: Callable[[], int] = None,
    ):
        """
        Initialize an empty pool.

        Args:
            name: Pool name (for logging)
            clock: Wall-clock source in epoch seconds (default time.time)
            memory_reader: Process memory probe in bytes, used by the status report
        """
        self.name = name
        self._clock = clock if clock is not None else time.time
        self._memory_reader = memory_reader if memory_reader is not None else process_memory_usage
        self._store: "OrderedDict[str, CacheEntry]" = OrderedDict()

    def _now(self) -> int:
        return int(self._clock())

    def _write(self, key: str, value: CacheValue, timeout: int) -> None:
        self._store[key] = CacheEntry(
            value=value,
            last_write=self._now(),
            expiry=self.calculate_expiry(timeout),
        )
        self._store.move_to_end(key)

    def _live_entry(self, key: str) -> Optional[CacheEntry]:
        """Return the entry for a sanitized key, dropping it if stale."""
        entry = self._store.get(key)
        if entry is None:
            return None

        if entry.is_stale(self._now()):
            # Lazy expiration
            self._store.pop(key, None)
            return None

        return entry

    def add(self, key: str, value: CacheValue, timeout: int = 0) -> bool:
        """
        Add a new value. If a live entry already exists, do nothing.

        Args:
            key: Key to cache with (sanitized before use)
            value: Value to cache
            timeout: Seconds from now until the value goes stale (0 = never)

        Returns:
            True if stored, False if the key was already present
        """
        key = sanitize_key(key)
        value = normalize_value(value)

        if self._live_entry(key) is not None:
            return False

        self._write(key, value, timeout)
        return True

    def set(self, key: str, value: CacheValue, timeout: int = 0) -> bool:
        """
        Set a value, creating or overwriting it.

        Returns:
            Always True
        """
        key = sanitize_key(key)
        value = normalize_value(value)

        self._write(key, value, timeout)
        return True

    def replace(self, key: str, value: CacheValue, timeout: int = 0) -> bool:
        """
        Replace a value. If no live entry exists, do nothing.

        Returns:
            True if replaced, False if the key was missing or stale
        """
        key = sanitize_key(key)
        value = normalize_value(value)

        if self._live_entry(key) is None:
            return False

        self._write(key, value, timeout)
        return True

    def delete(self, key: str) -> bool:
        """
        Delete a value. Deleting a missing key is not an error.

        Returns:
            Always True
        """
        self._store.pop(sanitize_key(key), None)
        return True

    def _step(self, key: str, delta: int, timeout: int) -> bool:
        key = sanitize_key(key)
        entry = self._live_entry(key)

        if entry is None or not is_numeric(entry.value):
            return False

        self._write(key, clamp_int64(to_int(entry.value) + delta), timeout)
        return True

    def increment(self, key: str, timeout: int = 0) -> bool:
        """
        Increment a numeric value by one and store it as an integer.

        Args:
            key: Key of the value to increment
            timeout: New timeout in seconds from now (0 = never)

        Returns:
            True on success, False if the key is missing, stale or not numeric
        """
        return self._step(key, 1, timeout)

    def decrement(self, key: str, timeout: int = 0) -> bool:
        """Decrement a numeric value by one. See ``increment``."""
        return self._step(key, -1, timeout)

    def get(self, key: str) -> Optional[CacheValue]:
        """
        Get a cached value.

        Returns:
            The value if present and not stale, None otherwise

        Note: Reading does not refresh the entry's write time.
        """
        entry = self._live_entry(sanitize_key(key))
        return entry.value if entry is not None else None

    def has(self, key: str) -> bool:
        """Check whether a live value is cached under ``key``."""
        return self._live_entry(sanitize_key(key)) is not None

    def flush(self) -> bool:
        """Remove every entry from the pool."""
        self._store = OrderedDict()
        return True

    def item_count(self) -> int:
        """
        Get the number of entries in the pool.

        Note: This may include stale entries that haven't been swept yet.
        """
        return len(self._store)

    def clear_least_recently_used(self, portion: float = 0.25) -> bool:
        """
        Evict the least recently written fraction of the pool.

        Args:
            portion: Fraction from 0.0 to 1.0 of entries to remove

        Returns:
            Always True

        With ``portion >= 1.0`` or an empty pool this is a full flush.
        Otherwise ceil(n * portion) entries with the oldest write time are
        removed. Entries with equal write times are removed in write order.
        """
        if portion >= 1.0 or not self._store:
            return self.flush()

        count = len(self._store)
        to_remove = math.ceil(count * portion)
        if to_remove <= 0:
            return True

        # Store order is write order, so this sort is close to linear
        ranked = sorted(self._store.items(), key=lambda item: item[1].last_write)
        for key, _ in ranked[:to_remove]:
            del self._store[key]

        logger.debug(f"Pool {self.name}: evicted {to_remove} of {count} entries")
        return True

    def clear_stale_cache(self) -> int:
        """
        Remove all stale entries (active expiration).

        Returns:
            Number of entries removed
        """
        now = self._now()
        to_delete = [k for k, entry in self._store.items() if entry.is_stale(now)]
        for key in to_delete:
            self._store.pop(key, None)
        return len(to_delete)

    def calculate_expiry(self, timeout: int) -> int:
        """
        Calculate the absolute expiry timestamp for a timeout.

        Args:
            timeout: Seconds from now

        Returns:
            0 for timeout <= 0 (never expires), otherwise now + timeout
        """
        timeout = int(timeout)
        if timeout <= 0:
            return 0
        return self._now() + timeout

    def get_stats(self) -> Dict[str, Any]:
        """
        Get memory and footprint statistics for the pool.

        Returns:
            Dictionary containing:
            - memory_mb: Process memory usage in MB
            - item_count: Entries currently stored
            - smallest_kb / largest_kb / average_kb: Item footprints in KB
        """
        sizes = [item_footprint(entry.value) for entry in self._store.values()]

        if sizes:
            smallest, largest, average = min(sizes), max(sizes), sum(sizes) / len(sizes)
        else:
            smallest = largest = average = 0

        return {
            "memory_mb": self._memory_reader() / (1024 * 1024),
            "item_count": len(sizes),
            "smallest_kb": smallest / 1024,
            "largest_kb": largest / 1024,
            "average_kb": average / 1024,
        }

    def get_status(self) -> str:
        """
        Build the two-line status report.

        Format:
            <column>\\t<column>...\\n<value>\\t<value>...
        """
        stats = self.get_stats()
        row = (
            f"{stats['memory_mb']:.2f}",
            str(stats["item_count"]),
            f"{stats['smallest_kb']:.3f}",
            f"{stats['largest_kb']:.3f}",
            f"{stats['average_kb']:.3f}",
        )
        return "\t".join(STATUS_COLUMNS) + "\n" + "\t".join(row)
