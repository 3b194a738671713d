"""
Protocol Command and Response Definitions

This module defines the data structures for protocol commands and responses.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from ..cache.codec import CacheValue, ValueType


class CommandType(Enum):
    """Enumeration of supported command types (value = protocol verb)."""
    ADD = "add"
    SET = "set"
    REPLACE = "replace"
    DELETE = "delete"
    INCREMENT = "increment"
    DECREMENT = "decrement"
    GET = "get"
    HAS = "has"
    FLUSH = "flush"
    STATUS = "status"
    UNKNOWN = "?"


# Verb whitelist
COMMANDS = {command.value: command for command in CommandType if command is not CommandType.UNKNOWN}


class ProtocolError(Enum):
    """Request-level errors. Both leave the pool untouched."""
    INVALID_COMMAND = "Invalid command"
    INVALID_ARGUMENTS = "Invalid arguments"


class ResponseStatus(Enum):
    """Enumeration of response statuses."""
    OK = "OK"
    ERROR = "ERROR"


@dataclass
class Command:
    """
    Represents a parsed protocol command.

    Attributes:
        type: The type of command
        key: The raw key (sanitized later by the pool)
        value: Raw value text for add/set/replace
        value_type: Cast selected by the type tag (default string)
        timeout: Timeout in seconds (0 = never expires)
        raw: The original request line, stripped
        error: Why the request was rejected, None if it is valid
    """
    type: CommandType
    key: str = ""
    value: str = ""
    value_type: ValueType = ValueType.STRING
    timeout: int = 0
    raw: str = ""
    error: Optional[ProtocolError] = None

    @property
    def is_valid(self) -> bool:
        """Check if the command passed both validation phases."""
        return self.error is None and self.type is not CommandType.UNKNOWN


def render_value(result: Optional[CacheValue]) -> str:
    """
    Render a pool result as protocol text.

    Booleans become "true"/"false", absence becomes "null", integers and
    strings are written as-is.
    """
    if result is None:
        return "null"
    if isinstance(result, bool):
        return "true" if result else "false"
    return str(result)


@dataclass
class Response:
    """
    Represents a protocol response.

    Attributes:
        status: OK when the request reached the pool, ERROR when it was rejected
        message: Response text written back to the client
    """
    status: ResponseStatus
    message: str = ""

    @classmethod
    def ok(cls, message: str = "") -> "Response":
        """Create a successful response."""
        return cls(status=ResponseStatus.OK, message=message)

    @classmethod
    def error(cls, error: ProtocolError) -> "Response":
        """Create an error response."""
        return cls(status=ResponseStatus.ERROR, message=error.value)

    @classmethod
    def result(cls, value: Optional[CacheValue]) -> "Response":
        """Create a response carrying a rendered pool result."""
        return cls.ok(message=render_value(value))
