"""Registered query expectations.

A test registers the statements the code under test is expected to run,
together with the bound values and the canned outcome::

    registry = ExpectationRegistry()
    registry.the_query("SELECT * FROM test WHERE id=?").with_parameters(1).result().add_row(
        {"id": 1, "tstamp": 343094400}
    )

Matching compiles each expectation with the same compiler the statements use
and compares the resulting text literally. The first registered expectation
whose text matches wins.
"""

from collections.abc import Iterator, Mapping
from typing import TYPE_CHECKING, Any, Optional

from mypy_extensions import mypyc_attr
from typing_extensions import Self

from sqlfake.core.compiler import compile_query, is_assignment_statement
from sqlfake.core.result import FakeResult
from sqlfake.utils.logging import get_logger

if TYPE_CHECKING:
    from sqlfake.typing import AssignmentsT, ParametersT, RowT

__all__ = ("Expectation", "ExpectationBuilder", "ExpectationRegistry")

logger = get_logger("sqlfake.core.registry")


@mypyc_attr(allow_interpreted_subclasses=True)
class Expectation:
    """A statement the code under test is expected to execute.

    Args:
        template: The query template, with ``?`` placeholders.
        parameters: Positional values bound to the placeholders.
        assignments: Column map for the assignment marker of INSERT/UPDATE templates.
        result: Canned rows returned on a match.
        error: Error message the execution fails with on a match.
    """

    __slots__ = ("_compiled_query", "_result", "assignments", "error", "parameters", "template")

    def __init__(
        self,
        template: str,
        parameters: "ParametersT" = (),
        assignments: "Optional[AssignmentsT]" = None,
        result: Optional[FakeResult] = None,
        error: Optional[str] = None,
    ) -> None:
        self.template = template
        self.parameters: tuple[Any, ...] = tuple(parameters)
        self.assignments = dict(assignments) if assignments is not None else None
        self.error = error
        self._result = result
        self._compiled_query: Optional[str] = None

    @property
    def compiled_query(self) -> str:
        """The canonical query text, compiled once on first access."""
        if self._compiled_query is None:
            self._compiled_query = compile_query(self.template, self.parameters, self.assignments)
        return self._compiled_query

    def result(self) -> FakeResult:
        """Return the canned rows, creating an empty buffer on first access."""
        if self._result is None:
            self._result = FakeResult()
        return self._result

    def matches(self, compiled_query: str) -> bool:
        """Whether ``compiled_query`` is the text this expectation compiles to."""
        return compiled_query == self.compiled_query

    def _invalidate(self) -> None:
        self._compiled_query = None

    def __repr__(self) -> str:
        return f"Expectation(template={self.template!r}, parameters={self.parameters!r}, error={self.error!r})"


class ExpectationBuilder:
    """Fluent registration API over a single :class:`Expectation`."""

    __slots__ = ("expectation",)

    def __init__(self, expectation: Expectation) -> None:
        self.expectation = expectation

    def with_parameters(self, *values: Any) -> Self:
        """Set the positional values bound to the placeholders.

        A single mapping passed for an INSERT or UPDATE template is taken as
        the column map of its assignment marker.
        """
        if len(values) == 1 and isinstance(values[0], Mapping) and is_assignment_statement(
            self.expectation.template.strip()
        ):
            return self.with_assignments(values[0])
        self.expectation.parameters = values
        self.expectation._invalidate()
        return self

    def with_assignments(self, assignments: "AssignmentsT") -> Self:
        """Set the column map expanded in place of the assignment marker."""
        self.expectation.assignments = dict(assignments)
        self.expectation._invalidate()
        return self

    def will_return(self, result: FakeResult) -> Self:
        """Return ``result`` when the statement is executed."""
        self.expectation._result = result
        return self

    def will_return_rows(self, *rows: "RowT") -> Self:
        """Shortcut adding ``rows`` to the expectation's result."""
        self.expectation.result().add_rows(list(rows))
        return self

    def will_fail_with(self, message: str) -> Self:
        """Fail the execution with ``message``."""
        self.expectation.error = message
        return self

    def result(self) -> FakeResult:
        """Return the expectation's row buffer, creating it when needed."""
        return self.expectation.result()

    def error(self) -> Optional[str]:
        return self.expectation.error


@mypyc_attr(allow_interpreted_subclasses=True)
class ExpectationRegistry:
    """Ordered collection of expectations.

    Registration order is match priority.
    """

    __slots__ = ("_expectations",)

    def __init__(self) -> None:
        self._expectations: list[Expectation] = []

    def register(
        self,
        template: str,
        parameters: "ParametersT" = (),
        result: Optional[FakeResult] = None,
        error: Optional[str] = None,
        assignments: "Optional[AssignmentsT]" = None,
    ) -> Expectation:
        """Register an expectation.

        Args:
            template: The query template.
            parameters: Positional values bound to the placeholders.
            result: Canned rows returned on a match.
            error: Error message the execution fails with on a match.
            assignments: Column map for INSERT/UPDATE templates.

        Returns:
            The registered expectation.
        """
        expectation = Expectation(template, parameters, assignments, result, error)
        self._expectations.append(expectation)
        return expectation

    def the_query(self, template: str) -> ExpectationBuilder:
        """Register ``template`` and return a builder to describe it."""
        return ExpectationBuilder(self.register(template))

    register_expectation = the_query

    def lookup(self, compiled_query: str) -> Optional[Expectation]:
        """Return the first expectation matching ``compiled_query``, if any."""
        for expectation in self._expectations:
            if expectation.matches(compiled_query):
                return expectation
        logger.debug("No expectation registered for query: %s", compiled_query)
        return None

    def clear(self) -> None:
        self._expectations.clear()

    def __iter__(self) -> Iterator[Expectation]:
        return iter(self._expectations)

    def __len__(self) -> int:
        return len(self._expectations)
