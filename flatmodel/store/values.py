"""
Field values and the coercion rules shared by casting and comparison.

**Conceptual**: A field holds one of five kinds of value: Null (None), Integer
(int), Float (float), Boolean (bool) or String (str). Values read from disk
start out as strings and are converted by cast rules; values supplied by
callers can be any of the five.

**Loose equality**: Queries and condition maps compare values with
loose_equals(), which is the single coercion rule used across the store:
  1. None equals None and the empty string, nothing else.
  2. If either side is a bool, both sides are compared as booleans
     (see to_bool).
  3. If both sides are numeric (numbers or numeric text), they are compared
     as numbers, so "1" equals 1 and "1.0".
  4. Otherwise the string forms are compared exactly.

Example:
    >>> loose_equals("1", 1)
    True
    >>> loose_equals("true", True)
    True
    >>> loose_equals("abc", 0)
    False
"""

from enum import Enum
from typing import Optional, Union

Value = Union[None, bool, int, float, str]

TRUTHY_STRINGS = frozenset({"1", "true", "yes", "on"})


class ValueKind(Enum):
    """The five kinds a field value can take."""
    NULL = "null"
    INTEGER = "integer"
    FLOAT = "float"
    BOOLEAN = "boolean"
    STRING = "string"


def kind_of(value: Value) -> ValueKind:
    """
    Classify a value into its ValueKind.

    Raises:
        TypeError: If the value is not one of the supported kinds.
    """
    if value is None:
        return ValueKind.NULL
    # bool must be checked before int (bool is an int subclass)
    if isinstance(value, bool):
        return ValueKind.BOOLEAN
    if isinstance(value, int):
        return ValueKind.INTEGER
    if isinstance(value, float):
        return ValueKind.FLOAT
    if isinstance(value, str):
        return ValueKind.STRING
    raise TypeError(f"Unsupported field value type: {type(value).__name__}")


def to_bool(value: Value) -> bool:
    """
    Coerce a value to a boolean.

    Strings are true iff they match the truthy set ("1", "true", "yes", "on",
    case-insensitive, surrounding whitespace ignored). Numbers are true iff
    non-zero. None is false.
    """
    if value is None:
        return False
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return value != 0
    return str(value).strip().lower() in TRUTHY_STRINGS


def to_number(value: Value) -> Optional[Union[int, float]]:
    """
    Parse a value as a number.

    Returns an int when the text is an integer literal, a float when it is a
    decimal or exponent literal, and None when the value is not numeric.
    """
    if value is None:
        return None
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, (int, float)):
        return value

    text = str(value).strip()
    # int() and float() accept digit separators; CSV data should not
    if not text or "_" in text:
        return None
    try:
        return int(text)
    except ValueError:
        pass
    try:
        return float(text)
    except ValueError:
        return None


def to_text(value: Value) -> str:
    """
    Render a value as text, the way it is written to disk.

    None renders as the empty string and booleans as "true"/"false".
    """
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def loose_equals(left: Value, right: Value) -> bool:
    """Compare two values with the store's loose equality rule."""
    if left is None or right is None:
        other = right if left is None else left
        return other is None or other == ""

    if isinstance(left, bool) or isinstance(right, bool):
        return to_bool(left) == to_bool(right)

    left_number = to_number(left)
    right_number = to_number(right)
    if left_number is not None and right_number is not None:
        return left_number == right_number

    return to_text(left) == to_text(right)
