"""
Command Protocol Module

Dispatches validated commands to a pool and renders the result. Every
request resolves to at most one pool call and exactly one response.
"""

import logging
from typing import Callable, Dict

from .commands import Command, CommandType, Response
from .parser import ProtocolParser
from ..cache.codec import cast_value
from ..cache.pool import Pool
from ..cache.registry import DEFAULT_POOL, PoolRegistry

logger = logging.getLogger(__name__)


class CommandProtocol:
    """
    Stateless request handler bound to one pool of a registry.

    Usage:
        protocol = CommandProtocol(PoolRegistry())
        protocol.handle_request("set greeting hello")   # -> "true"
        protocol.handle_request("get greeting")         # -> "hello"

    Attributes:
        registry: The PoolRegistry holding the target pool
        pool_name: Name of the pool commands are dispatched to
        parser: The ProtocolParser for parsing commands
    """

    def __init__(self, registry: PoolRegistry = None, pool_name: str = DEFAULT_POOL):
        self.registry = registry if registry is not None else PoolRegistry()
        self.pool_name = pool_name
        self.parser = ProtocolParser()

        self._handlers: Dict[CommandType, Callable[[Pool, Command], Response]] = {
            CommandType.ADD: self._handle_add,
            CommandType.SET: self._handle_set,
            CommandType.REPLACE: self._handle_replace,
            CommandType.DELETE: lambda pool, cmd: Response.result(pool.delete(cmd.key)),
            CommandType.INCREMENT: lambda pool, cmd: Response.result(pool.increment(cmd.key, cmd.timeout)),
            CommandType.DECREMENT: lambda pool, cmd: Response.result(pool.decrement(cmd.key, cmd.timeout)),
            CommandType.GET: lambda pool, cmd: Response.result(pool.get(cmd.key)),
            CommandType.HAS: lambda pool, cmd: Response.result(pool.has(cmd.key)),
            CommandType.FLUSH: lambda pool, cmd: Response.result(pool.flush()),
            CommandType.STATUS: lambda pool, cmd: Response.ok(pool.get_status()),
        }

    @property
    def pool(self) -> Pool:
        """The pool this protocol dispatches to."""
        return self.registry.get(self.pool_name)

    def handle_request(self, request: str) -> str:
        """
        Handle one request line.

        Args:
            request: Raw request line

        Returns:
            Response text (without trailing newline)
        """
        command = self.parser.parse_request(request)
        logger.debug(f"Doing request: {command.raw}")
        return self.execute(command).message

    def execute(self, command: Command) -> Response:
        """
        Execute a parsed command on the pool.

        Args:
            command: The Command object to execute

        Returns:
            Response object with the result
        """
        if not command.is_valid:
            return Response.error(command.error)

        return self._handlers[command.type](self.pool, command)

    def _handle_add(self, pool: Pool, command: Command) -> Response:
        value = cast_value(command.value, command.value_type)
        return Response.result(pool.add(command.key, value, command.timeout))

    def _handle_set(self, pool: Pool, command: Command) -> Response:
        value = cast_value(command.value, command.value_type)
        return Response.result(pool.set(command.key, value, command.timeout))

    def _handle_replace(self, pool: Pool, command: Command) -> Response:
        value = cast_value(command.value, command.value_type)
        return Response.result(pool.replace(command.key, value, command.timeout))
