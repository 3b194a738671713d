"""Network module for kvpool."""

from .tcp_server import KVServer

__all__ = ["KVServer"]
