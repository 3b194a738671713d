"""Protocol module for kvpool."""

from .commands import Command, CommandType, ProtocolError, Response, ResponseStatus
from .handler import CommandProtocol
from .parser import ProtocolParser

__all__ = [
    "Command",
    "CommandProtocol",
    "CommandType",
    "ProtocolError",
    "ProtocolParser",
    "Response",
    "ResponseStatus",
]
