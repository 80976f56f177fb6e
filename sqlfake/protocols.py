"""Runtime-checkable protocols for the statement and result contracts.

Code under test can depend on these instead of a concrete driver, and the
fake database satisfies them structurally.
"""

from typing import TYPE_CHECKING, Any, Optional, Protocol, Union, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Mapping

__all__ = ("ConnectionProtocol", "ResultProtocol", "StatementProtocol")


@runtime_checkable
class ResultProtocol(Protocol):
    """Cursor over the rows returned for a statement."""

    @property
    def query(self) -> str: ...

    @property
    def num_rows(self) -> int: ...

    @property
    def num_fields(self) -> int: ...

    @property
    def is_modified(self) -> bool: ...

    def fetch_row(self) -> "Optional[list[Any]]":
        """Fetch the next row as a list of values."""
        ...

    def fetch_assoc(self) -> "Optional[dict[str, Any]]":
        """Fetch the next row as a column to value dict."""
        ...

    def fetch_all_assoc(self) -> "list[dict[str, Any]]": ...

    def fetch_each(self, column: str) -> "list[Any]": ...

    def first(self) -> Any: ...

    def next(self) -> bool: ...

    def prev(self) -> bool: ...

    def last(self) -> Any: ...

    def reset(self) -> Any: ...

    def row(self, as_list: bool = False) -> Any: ...


@runtime_checkable
class StatementProtocol(Protocol):
    """A prepared statement."""

    @property
    def query(self) -> str: ...

    def prepare(self, sql: str) -> Any: ...

    def set(self, assignments: "Mapping[str, Any]") -> Any: ...

    def limit(self, rows: int, offset: int = 0) -> Any: ...

    def execute(self, *parameters: Any) -> "Union[ResultProtocol, StatementProtocol]": ...

    def execute_uncached(self, *parameters: Any) -> "Union[ResultProtocol, StatementProtocol]": ...


@runtime_checkable
class ConnectionProtocol(Protocol):
    """A database connection able to prepare and run statements."""

    def prepare(self, sql: str) -> StatementProtocol: ...

    def execute(self, sql: str) -> "Union[ResultProtocol, StatementProtocol]": ...

    def query(self, sql: str) -> "Union[ResultProtocol, StatementProtocol]": ...
