"""Fake result sets.

- FakeResult: the canned rows a test registers for an expectation
- Result: a cursor over a FakeResult, handed to the code under test

A ``Result`` keeps its own cache of the rows it has loaded so far, the way a
client library buffers rows of a streaming server cursor. ``reset()`` rewinds
the cursor over that cache without discarding it.
"""

from collections.abc import Iterator, Mapping, Sequence
from typing import TYPE_CHECKING, Any, Optional, Union

from mypy_extensions import mypyc_attr
from typing_extensions import Self

from sqlfake.exceptions import OutOfBoundsError
from sqlfake.utils.logging import get_logger

if TYPE_CHECKING:
    from sqlfake.core.registry import Expectation
    from sqlfake.typing import RowKeyT, RowT

__all__ = ("FakeResult", "Result")

logger = get_logger("sqlfake.core.result")


@mypyc_attr(allow_interpreted_subclasses=True)
class FakeResult:
    """Insertion ordered buffer of canned rows.

    Rows are stored by key. The key is the row's ``id`` column when present,
    otherwise the number of rows already in the buffer. Adding a row under an
    existing key replaces that row but keeps its original position.
    """

    __slots__ = ("_rows",)

    def __init__(self, rows: "Optional[Union[Mapping[Any, RowT], Sequence[RowT]]]" = None) -> None:
        self._rows: "dict[RowKeyT, RowT]" = {}
        if rows is not None:
            self.add_rows(rows)

    def add_row(self, row: "Mapping[str, Any]", row_id: "Optional[RowKeyT]" = None) -> Self:
        """Add a row.

        Args:
            row: Column to value mapping.
            row_id: Key of the row. Defaults to the ``id`` column, then to the
                current row count.

        Returns:
            The buffer, for chaining.
        """
        if row_id is None and row.get("id") is not None:
            row_id = row["id"]
        if row_id is None:
            row_id = len(self._rows)
        self._rows[row_id] = dict(row)
        return self

    def add_rows(self, rows: "Union[Mapping[Any, RowT], Sequence[RowT]]") -> Self:
        """Add many rows.

        Mapping keys, or sequence positions, are used as row keys for rows
        that do not carry an ``id`` column.
        """
        items = rows.items() if isinstance(rows, Mapping) else enumerate(rows)
        for key, row in items:
            row_id = row["id"] if row.get("id") is not None else key
            self.add_row(row, row_id)
        return self

    def get_row(self, index: int) -> "Optional[RowT]":
        """Return the row at insertion position ``index`` or ``None``."""
        if index < 0 or index >= len(self._rows):
            return None
        key = list(self._rows)[index]
        return self._rows[key]

    def keys(self) -> "list[RowKeyT]":
        return list(self._rows)

    def count(self) -> int:
        """Number of rows in the buffer."""
        return len(self._rows)

    def __len__(self) -> int:
        return len(self._rows)

    def __repr__(self) -> str:
        return f"FakeResult(rows={len(self._rows)})"


@mypyc_attr(allow_interpreted_subclasses=True)
class Result:
    """Cursor over a :class:`FakeResult`.

    Args:
        rows: The row buffer to read from.
        query: The compiled query text this result was produced for.
        expectation: The expectation that matched the query, if any.
    """

    __slots__ = (
        "_cache",
        "_done",
        "_index",
        "_modified",
        "_pointer",
        "_query",
        "_rows",
        "expectation",
    )

    def __init__(self, rows: FakeResult, query: str, expectation: "Optional[Expectation]" = None) -> None:
        self._rows = rows
        self._query = query
        self.expectation = expectation
        self._cache: "dict[int, RowT]" = {}
        self._pointer = 0
        self._index = -1
        self._done = False
        self._modified = False

    @property
    def query(self) -> str:
        """The compiled query text."""
        return self._query

    @property
    def num_rows(self) -> int:
        return self._rows.count()

    @property
    def num_fields(self) -> int:
        """Number of columns, taken from the first row."""
        first_row = self._rows.get_row(0)
        return len(first_row) if first_row is not None else 0

    @property
    def is_modified(self) -> bool:
        """Whether a field of this result was written to."""
        return self._modified

    @property
    def index(self) -> int:
        """Position of the current row, ``-1`` before the first fetch."""
        return self._index

    @property
    def row_index(self) -> int:
        """Position of the furthest row loaded so far, ``-1`` before any row was loaded."""
        return len(self._cache) - 1

    @property
    def is_done(self) -> bool:
        return self._done

    def _fetch_next(self) -> "Optional[RowT]":
        row = self._rows.get_row(self._pointer)
        if row is not None:
            self._pointer += 1
        return row

    def _advance(self) -> "Optional[RowT]":
        self._index += 1
        if self._index not in self._cache:
            row = None if self._done else self._fetch_next()
            if row is None:
                self._index -= 1
                self._done = True
                return None
            self._cache[self._index] = dict(row)
        return self._cache[self._index]

    def fetch_row(self) -> "Optional[list[Any]]":
        """Fetch the next row as a list of values, ``None`` at the end."""
        row = self._advance()
        return list(row.values()) if row is not None else None

    def fetch_assoc(self) -> "Optional[RowT]":
        """Fetch the next row as a column to value dict, ``None`` at the end."""
        row = self._advance()
        return dict(row) if row is not None else None

    def fetch_all_assoc(self) -> "list[RowT]":
        """Load the remaining rows and return every row loaded so far."""
        while self.fetch_assoc() is not None:
            pass
        return [dict(self._cache[position]) for position in sorted(self._cache)]

    def fetch_each(self, column: str) -> "list[Any]":
        """Return the values of ``column`` over all rows.

        Raises:
            KeyError: A row has no such column.
        """
        return [row[column] for row in self.fetch_all_assoc()]

    def fetch_field(self, offset: int = 0) -> Any:
        """Return the value of the column at ``offset`` of the current row.

        Raises:
            OutOfBoundsError: There is no such column.
        """
        values = self.row(as_list=True)
        if offset < 0 or offset >= len(values):
            msg = f"Invalid field offset {offset} (row has {len(values)} fields)"
            raise OutOfBoundsError(msg)
        return values[offset]

    def first(self) -> Self:
        """Move to the first row, loading it when needed."""
        if not self._cache:
            row = self._fetch_next()
            if row is not None:
                self._cache[0] = dict(row)
        self._index = 0
        return self

    def next(self) -> bool:
        """Move to the next row. Returns ``False`` when there is none."""
        if self._index + 1 in self._cache:
            self._index += 1
            return True
        if self._done:
            return False
        return self._advance() is not None

    def prev(self) -> bool:
        """Move to the previous row. Returns ``False`` at the first row."""
        if self._index < 1:
            return False
        self._index -= 1
        return True

    def last(self) -> Self:
        """Load all rows and move to the last one."""
        if not self._done:
            self.fetch_all_assoc()
        self._done = True
        self._index = len(self._cache) - 1
        return self

    def seek(self, index: int) -> None:
        """Move the cursor to the row at ``index``.

        Seeking on an empty result is a no-op.

        Raises:
            OutOfBoundsError: ``index`` is negative or past the last row.
        """
        if index < 0:
            msg = f"Invalid index {index} (must be >= 0)"
            raise OutOfBoundsError(msg)

        total = self.num_rows
        if total <= 0:
            return

        if index >= total:
            msg = f"Invalid index {index} (only {total} rows in the result set)"
            raise OutOfBoundsError(msg)

        for position in range(index + 1):
            if position not in self._cache:
                self._cache[position] = dict(self._rows.get_row(position) or {})
        self._pointer = max(self._pointer, index + 1)
        self._index = index
        self._done = False

    def row(self, as_list: bool = False) -> "Union[RowT, list[Any]]":
        """Return the current row, moving to the first row if nothing was fetched.

        Raises:
            OutOfBoundsError: The result holds no rows.
        """
        if self._index < 0:
            self.first()
        current = self._cache.get(self._index)
        if current is None:
            msg = "The result set is empty"
            raise OutOfBoundsError(msg)
        return list(current.values()) if as_list else dict(current)

    def get(self, column: str, default: Any = None) -> Any:
        """Return a column of the current row, or ``default``."""
        if self._index < 0:
            self.first()
        current = self._cache.get(self._index)
        if current is None:
            return default
        return current.get(column, default)

    def set_field(self, column: str, value: Any) -> None:
        """Write a column of the current row and flag the result as modified."""
        if self._index < 0:
            self.first()
        self._modified = True
        self._cache.setdefault(self._index, {})[column] = value
        logger.debug("Result for %s modified (column %r)", self._query, column)

    def __getitem__(self, column: str) -> Any:
        if self._index < 0:
            self.first()
        current = self._cache.get(self._index)
        if current is None:
            raise KeyError(column)
        return current[column]

    def __setitem__(self, column: str, value: Any) -> None:
        self.set_field(column, value)

    def __iter__(self) -> "Iterator[RowT]":
        while (row := self.fetch_assoc()) is not None:
            yield row

    def reset(self) -> Self:
        """Rewind to before the first row, keeping loaded rows."""
        self._index = -1
        self._done = False
        return self

    def free(self) -> None:
        """Release the result. Nothing to release for in-memory rows."""

    def __repr__(self) -> str:
        return f"Result(query={self._query!r}, num_rows={self.num_rows}, index={self._index})"
