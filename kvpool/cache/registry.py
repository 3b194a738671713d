"""
Pool Registry Module

Named pools owned by the hosting service. A ``default`` pool always exists.
"""

from typing import Callable, Dict, Iterator, List

from .pool import Pool

DEFAULT_POOL = "default"


class PoolRegistry:
    """
    Mapping of pool name -> Pool.

    Usage:
        registry = PoolRegistry()
        registry.get().set("key", "value")           # default pool
        registry.get("sessions").set("sid", "...")   # created on first use
    """

    def __init__(self, pool_factory: Callable[[str], Pool] = None):
        """
        Args:
            pool_factory: Callable building a Pool from its name
                          (default: ``Pool(name=name)``)
        """
        self._pool_factory = pool_factory if pool_factory is not None else (lambda name: Pool(name=name))
        self._pools: Dict[str, Pool] = {}
        self.get(DEFAULT_POOL)

    def get(self, name: str = DEFAULT_POOL) -> Pool:
        """Get a pool by name, creating it if needed."""
        if name not in self._pools:
            self._pools[name] = self._pool_factory(name)
        return self._pools[name]

    def register(self, name: str, pool: Pool) -> None:
        """Register an existing pool under ``name``, replacing any previous one."""
        self._pools[name] = pool

    def names(self) -> List[str]:
        return list(self._pools)

    def __iter__(self) -> Iterator[Pool]:
        return iter(list(self._pools.values()))

    def __len__(self) -> int:
        return len(self._pools)
