"""
Protocol Parser Module

This module turns a raw request line into a validated Command.

Validation happens in two phases:
    1. Command recognition: the first token must be a known verb
    2. Argument grammar: the rest of the line must match the verb's grammar

Each verb maps to one argument parser in a validator table.
"""

from typing import Callable, Dict, Optional

from .commands import COMMANDS, Command, CommandType, ProtocolError
from ..cache.codec import ValueType

ArgumentParser = Callable[[CommandType, str], Optional[Command]]


def _is_timeout(token: str) -> bool:
    return token.isascii() and token.isdigit()


def _parse_timeout(token: str) -> Optional[int]:
    """Convert a timeout token, None if it is too long for int()."""
    try:
        return int(token)
    except ValueError:
        return None


class ProtocolParser:
    """
    Parser for the kvpool text protocol.

    Protocol Format:
        Request:  <command> [ARGS...]\\n
        Response: <text>\\n

    Commands:
        add <key> [t|]<value> [timeout]      -> true | false
        set <key> [t|]<value> [timeout]      -> true
        replace <key> [t|]<value> [timeout]  -> true | false
        delete <key>                         -> true
        increment <key> [timeout]            -> true | false
        decrement <key> [timeout]            -> true | false
        get <key>                            -> <value> | null
        has <key>                            -> true | false
        flush                                -> true
        status                               -> two-line report

    The optional type tag t is one of s (string), b (bool), i (integer).
    Commands are case-insensitive.
    """

    def __init__(self):
        """Build the validator table."""
        self._argument_parsers: Dict[CommandType, ArgumentParser] = {
            CommandType.ADD: self._parse_write,
            CommandType.SET: self._parse_write,
            CommandType.REPLACE: self._parse_write,
            CommandType.DELETE: self._parse_key,
            CommandType.GET: self._parse_key,
            CommandType.HAS: self._parse_key,
            CommandType.INCREMENT: self._parse_step,
            CommandType.DECREMENT: self._parse_step,
            CommandType.FLUSH: self._parse_empty,
            CommandType.STATUS: self._parse_empty,
        }

    def parse_request(self, data: str) -> Command:
        """
        Parse a raw request string into a Command object.

        Args:
            data: Raw request string (may include trailing newline)

        Returns:
            Command object. Rejected requests carry ``error`` set to
            INVALID_COMMAND (unknown verb) or INVALID_ARGUMENTS.

        Examples:
            >>> parser = ProtocolParser()
            >>> cmd = parser.parse_request("set mykey i|42 60")
            >>> cmd.type == CommandType.SET
            True
            >>> (cmd.key, cmd.value, cmd.value_type, cmd.timeout)
            ('mykey', '42', <ValueType.INT: 'i'>, 60)
        """
        raw = data.strip()
        parts = raw.split(None, 1)
        command_type = COMMANDS.get(parts[0].lower()) if parts else None

        if command_type is None:
            return Command(type=CommandType.UNKNOWN, raw=raw, error=ProtocolError.INVALID_COMMAND)

        arguments = parts[1] if len(parts) > 1 else ""
        command = self._argument_parsers[command_type](command_type, arguments)

        if command is None:
            return Command(type=command_type, raw=raw, error=ProtocolError.INVALID_ARGUMENTS)

        command.raw = raw
        return command

    def _parse_key(self, command_type: CommandType, arguments: str) -> Optional[Command]:
        """
        Parse a single-key command.

        Format: <command> <key>
        """
        parts = arguments.split()
        if len(parts) != 1:
            return None

        return Command(type=command_type, key=parts[0])

    def _parse_step(self, command_type: CommandType, arguments: str) -> Optional[Command]:
        """
        Parse an increment/decrement command.

        Format: <command> <key> [timeout]
        """
        parts = arguments.split()
        if len(parts) not in (1, 2):
            return None

        timeout = 0
        if len(parts) == 2:
            timeout = _parse_timeout(parts[1]) if _is_timeout(parts[1]) else None
            if timeout is None:
                return None

        return Command(type=command_type, key=parts[0], timeout=timeout)

    def _parse_write(self, command_type: CommandType, arguments: str) -> Optional[Command]:
        """
        Parse an add/set/replace command.

        Format: <command> <key> [(s|b|i)|]<value> [timeout]

        The value is everything after the key (and type tag) up to an
        optional trailing whitespace-separated integer, so values may
        contain spaces.
        """
        parts = arguments.split(None, 1)
        if len(parts) != 2:
            return None

        key, rest = parts
        value_type = ValueType.STRING
        if len(rest) > 2 and rest[1] == "|" and rest[0].lower() in ("s", "b", "i"):
            value_type = ValueType.from_tag(rest[0])
            rest = rest[2:]

        value, timeout = rest, 0
        tail = rest.rsplit(None, 1)
        if len(tail) == 2 and _is_timeout(tail[1]):
            value, timeout = tail[0], _parse_timeout(tail[1])
            if timeout is None:
                return None

        if not value.strip():
            return None

        return Command(
            type=command_type,
            key=key,
            value=value,
            value_type=value_type,
            timeout=timeout,
        )

    def _parse_empty(self, command_type: CommandType, arguments: str) -> Optional[Command]:
        """
        Parse a command without arguments.

        Format: flush | status
        """
        if arguments.strip():
            return None

        return Command(type=command_type)
