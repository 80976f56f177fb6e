"""Conversion of bound values into SQL literals.

The rules mirror what a MySQL style driver writes into the query text:

- ``str``: single quoted, embedded quotes backslash escaped
- ``bool``: ``1`` / ``0``
- ``None``: ``NULL``
- mappings, sequences and arbitrary objects: serialized to JSON, then quoted
- numbers: their decimal text, unquoted
"""

from collections.abc import Mapping
from decimal import Decimal
from functools import singledispatch
from typing import TYPE_CHECKING, Any

from sqlfake.utils.serializers import to_json

if TYPE_CHECKING:
    from collections.abc import Iterable

    from sqlfake.typing import Value

__all__ = ("escape_mapping", "escape_parameters", "escape_string", "escape_value")


def escape_string(value: str) -> str:
    """Quote a string literal."""
    return "'" + value.replace("'", "\\'") + "'"


@singledispatch
def escape_value(value: Any) -> str:
    """Escape a single bound value.

    Args:
        value: The value to escape.

    Returns:
        The SQL literal for ``value``.
    """
    if value is None:
        return "NULL"
    return escape_string(to_json(value))


@escape_value.register
def _(value: str) -> str:
    return escape_string(value)


@escape_value.register
def _(value: bool) -> str:
    return "1" if value else "0"


@escape_value.register(int)
@escape_value.register(float)
@escape_value.register(Decimal)
def _(value: "int | float | Decimal") -> str:
    return str(value)


def escape_parameters(values: "Iterable[Value]") -> "list[str]":
    """Escape a sequence of positional values."""
    return [escape_value(value) for value in values]


def escape_mapping(values: "Mapping[str, Value]") -> "dict[str, str]":
    """Escape the values of a column to value mapping, keeping the column order."""
    return {column: escape_value(value) for column, value in values.items()}
