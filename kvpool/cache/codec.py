"""
Key and Value Codecs

Keys are sanitized before they touch the pool, and values are normalized
into one of a closed set of types:

    String  -> str
    Bool    -> bool
    Int64   -> int (clamped to the signed 64-bit range)

The protocol layer selects a cast with a one-letter type tag (s, b, i).
Casting is best-effort: a value that does not cast cleanly is still stored
and the problem is only logged.
"""

import logging
import re
from enum import Enum
from typing import Union

from ..config.settings import settings

logger = logging.getLogger(__name__)

CacheValue = Union[str, bool, int]

INT64_MIN = -(2 ** 63)
INT64_MAX = 2 ** 63 - 1

_INVALID_KEY_CHARS = re.compile(r"[^A-Za-z0-9_.]")
_INT_LITERAL = re.compile(r"^\s*([+-]?)0*(\d+)\s*$")
_LEADING_INT = re.compile(r"^\s*([+-]?)0*(\d+)")
_NUMERIC = re.compile(r"^\s*[+-]?(\d+(\.\d*)?|\.\d+)([eE][+-]?\d+)?\s*$")
_FALSY_BOOL_LITERALS = ("", "0")

# Longest digit run that can fit in an Int64
INT64_MAX_DIGITS = len(str(INT64_MAX))


class ValueType(Enum):
    """Type tags accepted by the write commands."""
    STRING = "s"
    BOOL = "b"
    INT = "i"

    @classmethod
    def from_tag(cls, tag: str) -> "ValueType":
        """
        Look up a type by its tag.

        The grammar accepts upper-case tags, but only the lower-case tags
        select a cast; ``S|``, ``B|`` and ``I|`` store the value as a string.

        Raises:
            ValueError: If ``tag`` is not one of s, b, i in either case
        """
        if tag.lower() not in ("s", "b", "i"):
            raise ValueError(f"{tag!r} is not a valid type tag")
        return cls(tag) if tag.islower() else cls.STRING


def sanitize_key(key: str) -> str:
    """
    Strip every character outside [A-Za-z0-9_.] and cap the length.

    Truncation counts characters, not bytes.

    Examples:
        >>> sanitize_key("user:42/profile")
        'user42profile'
        >>> len(sanitize_key("k" * 100))
        64
    """
    return _INVALID_KEY_CHARS.sub("", str(key))[: settings.MAX_KEY_LENGTH]


def clamp_int64(value: int) -> int:
    """Clamp an integer into the signed 64-bit range."""
    if value > INT64_MAX:
        logger.warning(f"Integer overflows Int64, clamping to {INT64_MAX}")
        return INT64_MAX
    if value < INT64_MIN:
        logger.warning(f"Integer underflows Int64, clamping to {INT64_MIN}")
        return INT64_MIN
    return value


def _digits_to_int64(sign: str, digits: str) -> int:
    """Convert a signed digit run (no leading zeros) to Int64."""
    if len(digits) > INT64_MAX_DIGITS:
        # Too long for Int64, and possibly for int() itself
        return clamp_int64(-INT64_MAX - 2 if sign == "-" else INT64_MAX + 1)
    return clamp_int64(int(sign + digits))


def _cast_int(raw: str) -> int:
    match = _INT_LITERAL.match(raw)
    if match:
        return _digits_to_int64(*match.groups())

    match = _LEADING_INT.match(raw)
    fallback = _digits_to_int64(*match.groups()) if match else 0
    logger.warning(f"Could not cast value for caching: {raw[:64]!r} is not an integer, storing {fallback}")
    return fallback


def cast_value(raw: str, value_type: ValueType = ValueType.STRING) -> CacheValue:
    """
    Cast raw protocol text to the type selected by its tag.

    Args:
        raw: Value text as received on the wire
        value_type: Target type (defaults to string)

    Returns:
        The cast value. Never raises; failed casts log a warning and
        return a best-effort result.
    """
    if value_type is ValueType.INT:
        return _cast_int(raw)
    if value_type is ValueType.BOOL:
        return raw not in _FALSY_BOOL_LITERALS
    return str(raw)


def normalize_value(value: CacheValue) -> CacheValue:
    """
    Normalize a value on the write path.

    The literal strings "true" and "false" become booleans even without an
    explicit type tag. Integers are clamped to Int64. Reads never call this.
    """
    if isinstance(value, bool):
        return value
    if isinstance(value, int):
        return clamp_int64(value)
    if value == "true":
        return True
    if value == "false":
        return False
    return value


def is_numeric(value: CacheValue) -> bool:
    """Check whether a stored value can be incremented/decremented."""
    if isinstance(value, bool):
        return False
    if isinstance(value, int):
        return True
    return isinstance(value, str) and _NUMERIC.match(value) is not None


def to_int(value: CacheValue) -> int:
    """Integer view of a numeric value (``is_numeric`` must hold)."""
    if isinstance(value, int):
        return value
    try:
        return int(value)
    except ValueError:
        pass
    number = float(value)
    if number in (float("inf"), float("-inf")):
        return INT64_MAX if number > 0 else INT64_MIN
    return int(number)
