"""Prepared statements of the fake database.

A statement moves through ``UNPREPARED -> PREPARED -> BOUND -> EXECUTED``:

- ``prepare`` normalizes the placeholders of the template
- ``set`` and ``limit`` amend the prepared template
- ``bind`` compiles the template with the bound values
- ``execute`` looks the compiled text up, first in the statement cache, then
  in the expectation registry
"""

from collections.abc import Mapping
from enum import Enum
from typing import TYPE_CHECKING, Any, Optional, Union

from mypy_extensions import mypyc_attr
from typing_extensions import Self

from sqlfake.core.cache import make_cache_key
from sqlfake.core.compiler import expand_assignments, prepare_template, starts_with_keyword, substitute
from sqlfake.core.result import Result
from sqlfake.exceptions import EmptyQueryError, QueryExecutionError, UnsupportedOperationError
from sqlfake.utils.logging import get_logger

if TYPE_CHECKING:
    from sqlfake.database import FakeDatabase
    from sqlfake.typing import AssignmentsT

__all__ = ("Statement", "StatementState")

logger = get_logger("sqlfake.core.statement")


class StatementState(str, Enum):
    """Lifecycle state of a :class:`Statement`."""

    UNPREPARED = "unprepared"
    PREPARED = "prepared"
    BOUND = "bound"
    EXECUTED = "executed"


def _normalize_parameters(parameters: "tuple[Any, ...]") -> "list[Any]":
    """Unpack a single list, tuple or mapping argument into positional values."""
    if len(parameters) == 1:
        only = parameters[0]
        if isinstance(only, Mapping):
            return list(only.values())
        if isinstance(only, (list, tuple)):
            return list(only)
    return list(parameters)


@mypyc_attr(allow_interpreted_subclasses=True)
class Statement:
    """A statement issued against a :class:`~sqlfake.database.FakeDatabase`.

    Args:
        database: The database owning the expectation registry and statement cache.
    """

    __slots__ = ("_database", "_prepared", "_query", "_result", "_state")

    def __init__(self, database: "FakeDatabase") -> None:
        self._database = database
        self._prepared = ""
        self._query = ""
        self._result: Optional[Result] = None
        self._state = StatementState.UNPREPARED

    @property
    def query(self) -> str:
        """The current query text, compiled once the statement is bound."""
        return self._query

    @property
    def state(self) -> StatementState:
        return self._state

    @property
    def result(self) -> Optional[Result]:
        """The result of the last execution, if it produced one."""
        return self._result

    @property
    def error(self) -> str:
        """The error registered for the current query, or an empty string."""
        if not self._query:
            return ""
        expectation = self._database.registry.lookup(self._query)
        if expectation is None or expectation.error is None:
            return ""
        return expectation.error

    @property
    def affected_rows(self) -> int:
        raise UnsupportedOperationError("affected_rows")

    @property
    def insert_id(self) -> int:
        raise UnsupportedOperationError("insert_id")

    def prepare(self, sql: str) -> Self:
        """Prepare ``sql`` for execution.

        Raises:
            EmptyQueryError: ``sql`` is blank.
        """
        if not sql or not sql.strip():
            raise EmptyQueryError
        self._result = None
        self._prepared = prepare_template(sql)
        self._query = self._prepared
        self._state = StatementState.PREPARED
        return self

    def _require_prepared(self) -> None:
        if self._state is StatementState.UNPREPARED:
            msg = "Statement has not been prepared"
            raise EmptyQueryError(msg)

    def set(self, assignments: "AssignmentsT") -> Self:
        """Generate the SET or VALUES part of an UPDATE or INSERT statement."""
        self._require_prepared()
        self._prepared = expand_assignments(self._prepared, assignments)
        self._query = self._prepared
        return self

    def limit(self, rows: int, offset: int = 0) -> Self:
        """Append a LIMIT clause.

        A non-positive ``rows`` falls back to the configured default limit.
        """
        self._require_prepared()
        if rows <= 0:
            rows = self._database.config.default_limit
        offset = max(offset, 0)
        if starts_with_keyword(self._prepared, "SELECT"):
            self._prepared += f" LIMIT {offset},{rows}"
        else:
            self._prepared += f" LIMIT {rows}"
        self._query = self._prepared
        return self

    def bind_and_set_limit(self, rows: int, offset: int = 0) -> Self:
        return self.limit(rows, offset)

    def bind(self, *parameters: Any) -> Self:
        """Compile the prepared template with ``parameters``.

        A single list, tuple or mapping argument is unpacked into positional values.

        Raises:
            CompileError: Fewer values than placeholders.
        """
        self._require_prepared()
        self._query = substitute(self._prepared, _normalize_parameters(parameters))
        self._state = StatementState.BOUND
        logger.debug("Bound query: %s", self._query)
        return self

    def execute(self, *parameters: Any) -> "Union[Result, Statement]":
        """Bind ``parameters`` and execute, reusing a cached result when possible.

        Returns:
            The result set, or the statement itself when no result set was produced.
        """
        self.bind(*parameters)
        cache = self._database.statement_cache
        if cache is None:
            return self.run()

        key = make_cache_key(self._query)
        cached = cache.get(key)
        if cached is not None:
            logger.debug("Statement cache hit for %s", self._query)
            self._state = StatementState.EXECUTED
            self._result = cached
            return cached.reset()

        outcome = self.run()
        if isinstance(outcome, Result):
            cache.put(key, outcome)
        return outcome

    def execute_uncached(self, *parameters: Any) -> "Union[Result, Statement]":
        """Bind ``parameters`` and execute without touching the statement cache."""
        self.bind(*parameters)
        return self.run()

    def run(self, sql: Optional[str] = None) -> "Union[Result, Statement]":
        """Execute the current query, or ``sql`` taken verbatim.

        Raises:
            EmptyQueryError: There is no query to run.
            QueryExecutionError: The matching expectation was registered to fail.

        Returns:
            The result set, or the statement itself when no expectation matched.
        """
        if sql:
            self._query = sql
        if not self._query:
            raise EmptyQueryError
        expectation = self._database.registry.lookup(self._query)
        self._state = StatementState.EXECUTED
        if expectation is None:
            self._result = None
            return self
        if expectation.error is not None:
            raise QueryExecutionError(expectation.error, self._query)
        self._result = Result(expectation.result(), self._query, expectation)
        return self._result

    def explain(self) -> "list[Any]":
        """Query plan of the current query. The fake has none."""
        return []

    def __repr__(self) -> str:
        return f"Statement(query={self._query!r}, state={self._state.value})"
