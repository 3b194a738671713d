"""
Async TCP Server Module

This module implements the asynchronous TCP transport for kvpool.

Each request line is handed to the CommandProtocol and its response is
written back followed by a newline. A timer task runs the MemoryGovernor
on the same event loop; command handling and governor ticks are plain
synchronous calls, so they never interleave on a pool.
"""

import asyncio
import logging
from asyncio import StreamReader, StreamWriter
from typing import Optional

from ..cache.governor import MemoryGovernor
from ..cache.registry import PoolRegistry
from ..config.settings import settings
from ..protocol.commands import ProtocolError
from ..protocol.handler import CommandProtocol

logger = logging.getLogger(__name__)


class KVServer:
    """
    Asynchronous TCP server for the kvpool service.

    Features:
    - Non-blocking I/O with asyncio
    - Persistent connections (multiple commands per connection)
    - Periodic memory governor ticks
    - Shared PoolRegistry across all connections

    Usage:
        server = KVServer(host='127.0.0.1', port=10808)
        await server.start()  # Runs forever

    Attributes:
        host: Server bind address
        port: Server port number
        registry: The PoolRegistry shared by all connections
        protocol: The CommandProtocol handling request lines
        governor: The MemoryGovernor run on every tick
        tick_interval: Seconds between governor ticks (0 disables the timer)
    """

    def __init__(
            self,
            host: str = None,
            port: int = None,
            registry: PoolRegistry = None,
            memory_limit: int = None,
            tick_interval: float = None,
            governor: MemoryGovernor = None,
    ):
        """
        Initialize the server.

        Args:
            host: Bind address (default from settings)
            port: Port number (default from settings)
            registry: PoolRegistry instance (creates new one if not provided)
            memory_limit: Governor memory limit in MB (default from settings)
            tick_interval: Governor tick period in seconds (default from settings)
            governor: Pre-built MemoryGovernor, overrides memory_limit
        """
        self.host = host if host is not None else settings.HOST
        self.port = port if port is not None else settings.PORT
        self.registry = registry if registry is not None else PoolRegistry()
        self.protocol = CommandProtocol(self.registry)
        self.governor = governor if governor is not None else MemoryGovernor(self.registry, memory_limit)
        self.tick_interval = tick_interval if tick_interval is not None else settings.TICK_INTERVAL

        # Server state
        self._server: Optional[asyncio.Server] = None
        self._tick_task: Optional[asyncio.Task] = None
        self._running = False
        self._connection_count = 0
        self._total_requests = 0
        self._total_ticks = 0

    async def handle_client(
            self,
            reader: StreamReader,
            writer: StreamWriter
    ) -> None:
        """
        Handle a single client connection.

        Reads request lines until the client disconnects, answering each
        with exactly one response line.

        Args:
            reader: StreamReader for reading from the client
            writer: StreamWriter for writing to the client
        """
        addr = writer.get_extra_info('peername')
        self._connection_count += 1
        logger.debug(f"Client connected: {addr}")

        try:
            while True:
                data = await reader.readline()
                if not data:
                    logger.debug(f"Client disconnected: {addr}")
                    break

                try:
                    request = data.decode().rstrip('\r\n')
                except UnicodeDecodeError:
                    response = ProtocolError.INVALID_COMMAND.value
                else:
                    self._total_requests += 1
                    response = self.protocol.handle_request(request)

                writer.write(f"{response}\n".encode())
                await writer.drain()

        except ConnectionResetError:
            logger.debug(f"Connection reset by client: {addr}")
        except Exception as exc:  # Log unexpected errors but keep server alive
            logger.exception(f"Error handling client {addr}: {exc}")
        finally:
            try:
                writer.close()
                await writer.wait_closed()
            except Exception:
                pass

    def tick(self) -> None:
        """Run one governor pass."""
        self._total_ticks += 1
        self.governor.tick()

    async def _tick_loop(self) -> None:
        while True:
            await asyncio.sleep(self.tick_interval)
            try:
                self.tick()
            except Exception as exc:  # A failed tick must not stop the timer
                logger.exception(f"Governor tick failed: {exc}")

    async def start(self) -> None:
        """
        Start the server and begin accepting connections.

        Runs forever (or until cancelled / stopped).

        Example:
            server = KVServer(port=10808)
            asyncio.run(server.start())
        """
        if self._running:
            return

        self._server = await asyncio.start_server(
            self.handle_client,
            self.host,
            self.port,
            limit=settings.READ_BUFFER_SIZE,
        )
        self._running = True

        if self.tick_interval and self.tick_interval > 0:
            self._tick_task = asyncio.create_task(self._tick_loop())

        addrs = ', '.join(str(sock.getsockname()) for sock in self._server.sockets or [])
        logger.info(f"Serving on {addrs}")

        try:
            async with self._server:
                await self._server.serve_forever()
        except asyncio.CancelledError:
            # Expected during shutdown/fixture cleanup
            logger.debug("Server start cancelled")
        finally:
            self._cancel_ticks()
            self._running = False

    def _cancel_ticks(self) -> None:
        if self._tick_task is not None:
            self._tick_task.cancel()
            self._tick_task = None

    async def stop(self) -> None:
        """
        Stop the server gracefully.

        Closes the server and waits for it to fully shut down.
        """
        self._cancel_ticks()

        if self._server is None:
            return

        self._server.close()
        try:
            await self._server.wait_closed()
        finally:
            self._server = None
            self._running = False

    def is_running(self) -> bool:
        """Check if the server is currently running."""
        return self._running

    def get_stats(self) -> dict:
        """
        Get server statistics.

        Returns:
            Dictionary with server stats including connection counts,
            request counts, and per-pool statistics.
        """
        return {
            "running": self._running,
            "host": self.host,
            "port": self.port,
            "total_connections": self._connection_count,
            "total_requests": self._total_requests,
            "total_ticks": self._total_ticks,
            "pools": {name: self.registry.get(name).get_stats() for name in self.registry.names()},
        }
