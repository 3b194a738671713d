"""Cache module for kvpool."""

from .codec import ValueType, cast_value, normalize_value, sanitize_key
from .governor import GovernorAction, MemoryGovernor, TickResult
from .pool import CacheEntry, Pool
from .registry import DEFAULT_POOL, PoolRegistry

__all__ = [
    "CacheEntry",
    "DEFAULT_POOL",
    "GovernorAction",
    "MemoryGovernor",
    "Pool",
    "PoolRegistry",
    "TickResult",
    "ValueType",
    "cast_value",
    "normalize_value",
    "sanitize_key",
]
