"""
Type casting of row fields according to declared cast rules.

**Conceptual**: Every field read from disk is text. A store declares cast
rules (column -> type name) and TypeCaster converts matching fields on load
and after every mutation that produces a row. Columns without a rule, and
rules for columns the row does not have, are left alone.

Supported type names:
  - "int" / "integer": integer literal text, or float text with an integral
    value ("3.0")
  - "float" / "double": any numeric literal
  - "bool" / "boolean": truthy-string rule from values.to_bool
  - "string" / "str": text rendering from values.to_text

Unknown type names pass the value through unchanged. None is never cast, and
empty text becomes None for numeric targets (an empty CSV cell is an absent
value, not zero).
"""

import math
from typing import Mapping

from flatmodel.store.errors import CastingError
from flatmodel.store.values import Value, ValueKind, to_bool, to_number, to_text

CAST_TYPES = {
    "int": ValueKind.INTEGER,
    "integer": ValueKind.INTEGER,
    "float": ValueKind.FLOAT,
    "double": ValueKind.FLOAT,
    "bool": ValueKind.BOOLEAN,
    "boolean": ValueKind.BOOLEAN,
    "string": ValueKind.STRING,
    "str": ValueKind.STRING,
}


def resolve_cast_type(type_name: str):
    """Map a cast type name to its ValueKind, or None if the name is unknown."""
    return CAST_TYPES.get(type_name.strip().lower())


def _as_integer(value: Value, column: str) -> Value:
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, str) and not value.strip():
        return None

    number = to_number(value)
    if isinstance(number, int):
        return number
    if isinstance(number, float) and math.isfinite(number) and number.is_integer():
        return int(number)
    raise CastingError(
        f"Cannot cast column '{column}' value {value!r} to integer."
    )


def _as_float(value: Value, column: str) -> Value:
    if isinstance(value, str) and not value.strip():
        return None

    number = to_number(value)
    if number is None:
        raise CastingError(
            f"Cannot cast column '{column}' value {value!r} to float."
        )
    return float(number)


def cast_value(value: Value, type_name: str, column: str = "?") -> Value:
    """
    Cast a single value to the named type.

    Args:
        value: The field value to convert.
        type_name: Cast type name (see module docstring).
        column: Column name, used in error messages only.

    Returns:
        The converted value; None stays None and unknown types pass through.

    Raises:
        CastingError: If the value cannot be represented in the target type.
    """
    if value is None:
        return None

    kind = resolve_cast_type(type_name)
    if kind is ValueKind.INTEGER:
        return _as_integer(value, column)
    if kind is ValueKind.FLOAT:
        return _as_float(value, column)
    if kind is ValueKind.BOOLEAN:
        return to_bool(value)
    if kind is ValueKind.STRING:
        return to_text(value)
    return value


class TypeCaster:
    """Applies a fixed set of cast rules to rows."""

    def __init__(self, rules: Mapping[str, str] | None = None):
        self.rules = dict(rules or {})

    def cast(self, row: Mapping[str, Value]) -> dict[str, Value]:
        """
        Return a copy of `row` with every ruled column converted.

        Raises:
            CastingError: If any ruled field cannot be converted.
        """
        result = dict(row)
        for column, type_name in self.rules.items():
            if column in result:
                result[column] = cast_value(result[column], type_name, column)
        return result

    def has_cast(self, column: str) -> bool:
        return column in self.rules

    def casted_field(self, row: Mapping[str, Value], column: str) -> Value:
        """Read one field from `row`, converted by its rule if it has one."""
        value = row.get(column)
        if self.has_cast(column):
            return cast_value(value, self.rules[column], column)
        return value
