"""
Pytest Configuration and Fixtures

This module provides shared fixtures and configuration for all tests.
"""

import asyncio
import socket
import pytest
import pytest_asyncio
from contextlib import closing
from typing import AsyncGenerator

from kvpool.cache.governor import MemoryGovernor
from kvpool.cache.pool import Pool
from kvpool.cache.registry import PoolRegistry
from kvpool.network.tcp_server import KVServer
from kvpool.protocol.handler import CommandProtocol
from kvpool.protocol.parser import ProtocolParser

MB = 1024 * 1024


def find_free_port() -> int:
    """Find an available port for testing."""
    with closing(socket.socket(socket.AF_INET, socket.SOCK_STREAM)) as s:
        s.bind(('', 0))
        s.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        return s.getsockname()[1]


class FakeClock:
    """Manually advanced wall clock (epoch seconds)."""

    def __init__(self, start: float = 1_700_000_000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeMemory:
    """Settable process memory probe (bytes)."""

    def __init__(self, usage: int = 10 * MB):
        self.usage = usage

    def __call__(self) -> int:
        return self.usage


# ============================================================================
# Pool Fixtures
# ============================================================================

@pytest.fixture
def clock() -> FakeClock:
    """Create a fake clock starting at a fixed epoch."""
    return FakeClock()


@pytest.fixture
def memory() -> FakeMemory:
    """Create a fake memory probe reporting 10MB."""
    return FakeMemory()


@pytest.fixture
def pool(clock: FakeClock, memory: FakeMemory) -> Pool:
    """Create an empty pool driven by the fake clock."""
    return Pool(clock=clock, memory_reader=memory)


@pytest.fixture
def real_pool() -> Pool:
    """Create an empty pool on the real wall clock."""
    return Pool()


@pytest.fixture
def registry(clock: FakeClock, memory: FakeMemory) -> PoolRegistry:
    """Create a registry whose pools share the fake clock."""
    return PoolRegistry(lambda name: Pool(name=name, clock=clock, memory_reader=memory))


# ============================================================================
# Protocol Fixtures
# ============================================================================

@pytest.fixture
def parser() -> ProtocolParser:
    """Create a ProtocolParser instance."""
    return ProtocolParser()


@pytest.fixture
def protocol(registry: PoolRegistry) -> CommandProtocol:
    """Create a CommandProtocol bound to the default pool."""
    return CommandProtocol(registry)


# ============================================================================
# Server Fixtures
# ============================================================================

@pytest.fixture
def server_port() -> int:
    """Get a free port for server testing."""
    return find_free_port()


@pytest_asyncio.fixture
async def server(
        server_port: int,
        registry: PoolRegistry,
        memory: FakeMemory,
) -> AsyncGenerator[KVServer, None]:
    """
    Create and start a server instance for testing.

    The governor timer is disabled; tests call ``server.tick()`` directly.
    The governor sees the fake memory probe (10MB of a 100MB limit).
    """
    governor = MemoryGovernor(registry, memory_limit=100, memory_reader=memory)
    srv = KVServer(host='127.0.0.1', port=server_port, registry=registry, governor=governor, tick_interval=0)

    # Start server in background task
    server_task = asyncio.create_task(srv.start())

    # Wait for server to be ready
    await asyncio.sleep(0.1)

    yield srv

    # Cleanup
    await srv.stop()
    server_task.cancel()
    try:
        await server_task
    except asyncio.CancelledError:
        pass


# ============================================================================
# Client Fixtures
# ============================================================================

class AsyncClient:
    """
    Helper class for testing server interactions.

    Usage:
        async with AsyncClient('127.0.0.1', 10808) as client:
            response = await client.send_command("set key value")
            assert response == "true"
    """

    def __init__(self, host: str, port: int):
        self.host = host
        self.port = port
        self.reader = None
        self.writer = None

    async def connect(self) -> None:
        """Establish connection to server."""
        self.reader, self.writer = await asyncio.open_connection(
            self.host, self.port
        )

    async def disconnect(self) -> None:
        """Close connection to server."""
        if self.writer:
            self.writer.close()
            try:
                await self.writer.wait_closed()
            except Exception:
                pass

    async def send_command(self, command: str, lines: int = 1) -> str:
        """
        Send a command and receive the response.

        Args:
            command: Command string (newline will be added if missing)
            lines: Number of response lines to read

        Returns:
            Response string (stripped of the trailing newline)
        """
        if not command.endswith('\n'):
            command += '\n'

        self.writer.write(command.encode())
        await self.writer.drain()

        response = b''
        for _ in range(lines):
            response += await self.reader.readline()
        return response.decode().rstrip('\n')

    async def __aenter__(self):
        await self.connect()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.disconnect()


@pytest.fixture
def client_factory(server_port: int):
    """
    Factory fixture to create test clients.

    Usage:
        async def test_something(server, client_factory):
            async with client_factory() as client:
                response = await client.send_command("get key")
    """
    def factory() -> AsyncClient:
        return AsyncClient('127.0.0.1', server_port)
    return factory


# ============================================================================
# Pytest Configuration
# ============================================================================

def pytest_configure(config):
    """Configure custom pytest markers."""
    config.addinivalue_line(
        "markers", "slow: marks tests as slow (deselect with '-m \"not slow\"')"
    )
    config.addinivalue_line(
        "markers", "integration: marks tests as integration tests"
    )
