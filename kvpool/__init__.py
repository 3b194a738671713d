"""
kvpool: In-Memory Cache Pool

A memcached-style cache service: a key/value pool with per-entry expiry,
memory-pressure eviction and a line-oriented text protocol, served over
raw TCP with Python asyncio.
"""

__version__ = "1.0.0"
