"""
Memory Governor Module

Periodic maintenance run once per timer tick. Compares process memory
usage against the configured limit:

    usage >= hard limit          -> flush the pool
    usage >= 75% of hard limit   -> evict the oldest-written 25%
    otherwise                    -> nothing

and then always sweeps stale entries.

Usage and limits are compared in KB: ``hard limit = memory_limit * 1024``
with ``memory_limit`` in MB.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Iterable, Union

from ..config.settings import settings
from .memory import process_memory_usage
from .pool import Pool

logger = logging.getLogger(__name__)

SOFT_LIMIT_RATIO = 0.75
SOFT_LIMIT_EVICTION_PORTION = 0.25


class GovernorAction(Enum):
    """Action taken by a governor tick."""
    NONE = "none"
    FLUSH = "flush"
    EVICT_LRU = "evict_lru"


@dataclass
class TickResult:
    """
    Outcome of a single governor tick.

    Attributes:
        action: Memory-pressure action taken
        usage_kb: Process memory usage seen by the tick, in KB
        stale_cleared: Number of stale entries swept
    """
    action: GovernorAction
    usage_kb: float
    stale_cleared: int = 0


class MemoryGovernor:
    """
    Memory-pressure maintenance for one or more pools.

    Attributes:
        memory_limit: Configured limit in MB
    """

    def __init__(
            self,
            pools: Union[Pool, Iterable[Pool]],
            memory_limit: int = None,
            memory_reader: Callable[[], int] = None,
    ):
        """
        Args:
            pools: A Pool, or an iterable of pools such as a PoolRegistry
            memory_limit: Limit in MB (default from settings.MEMORY_LIMIT)
            memory_reader: Process memory probe in bytes
        """
        self._pools = pools
        self.memory_limit = memory_limit if memory_limit is not None else settings.MEMORY_LIMIT
        self._memory_reader = memory_reader if memory_reader is not None else process_memory_usage

    @property
    def hard_limit(self) -> float:
        """Hard limit in KB."""
        return self.memory_limit * 1024

    @property
    def soft_limit(self) -> float:
        """Soft limit in KB."""
        return self.hard_limit * SOFT_LIMIT_RATIO

    def _iter_pools(self) -> Iterable[Pool]:
        if isinstance(self._pools, Pool):
            return (self._pools,)
        return self._pools

    def tick(self) -> TickResult:
        """
        Run one maintenance pass.

        Returns:
            TickResult describing what was done
        """
        usage_kb = self._memory_reader() / 1024
        pools = list(self._iter_pools())

        logger.debug(f"Memory usage: {usage_kb:.0f}KB/{self.memory_limit}MB")
        logger.debug(f"Items in cache: {sum(pool.item_count() for pool in pools)}")

        action = GovernorAction.NONE
        if usage_kb >= self.hard_limit:
            logger.info("Flushing all cache, reached hard memory limit")
            action = GovernorAction.FLUSH
            for pool in pools:
                pool.flush()
        elif usage_kb >= self.soft_limit:
            logger.info("Flushing LRU cache, reached soft memory limit")
            action = GovernorAction.EVICT_LRU
            for pool in pools:
                pool.clear_least_recently_used(SOFT_LIMIT_EVICTION_PORTION)

        cleared = sum(pool.clear_stale_cache() for pool in pools)
        if cleared:
            logger.info(f"Cleared {cleared} stale cache values")

        return TickResult(action=action, usage_kb=usage_kb, stale_cleared=cleared)
