from collections.abc import Mapping, Sequence
from decimal import Decimal
from typing import Any, Union

from typing_extensions import TypeAlias

__all__ = ("AssignmentsT", "ParametersT", "RowKeyT", "RowT", "ScalarT", "Value")


ScalarT: TypeAlias = Union[str, bool, int, float, Decimal, None]
"""Values that escape to a literal without serialization."""

Value: TypeAlias = Union[ScalarT, "Mapping[Any, Any]", "Sequence[Any]", object]
"""Anything that can be bound to a placeholder. Non-scalars are serialized."""

RowT: TypeAlias = "dict[str, Any]"
"""A result row keyed by column name."""

RowKeyT: TypeAlias = Union[int, str]
"""Key of a row inside a :class:`~sqlfake.core.result.FakeResult` buffer."""

ParametersT: TypeAlias = "Sequence[Value]"

AssignmentsT: TypeAlias = "Mapping[str, Value]"
"""Column to value map expanded into INSERT/UPDATE assignments."""
