"""The fake database connection handed to the code under test.

A test builds one :class:`FakeDatabase`, registers its expectations and
passes the database to the code under test in place of a real connection::

    database = FakeDatabase.new_test_instance()
    database.expect("SELECT * FROM test WHERE id=?").with_parameters(1).result().add_row({"id": 1})

    result = database.prepare("SELECT * FROM test WHERE id=?").execute(1)
    assert result.row() == {"id": 1}
"""

from collections.abc import Iterable
from typing import TYPE_CHECKING, Any, Optional, Union

from sqlfake.config import DatabaseConfig
from sqlfake.core.cache import StatementCache, get_default_statement_cache
from sqlfake.core.escaping import escape_string
from sqlfake.core.registry import ExpectationBuilder, ExpectationRegistry
from sqlfake.core.result import Result
from sqlfake.core.statement import Statement
from sqlfake.exceptions import UnsupportedOperationError
from sqlfake.utils.logging import get_logger

if TYPE_CHECKING:
    from typing_extensions import Self

__all__ = ("FakeDatabase",)

logger = get_logger("sqlfake.database")


class FakeDatabase:
    """In-memory stand-in for a database connection.

    Args:
        config: Database configuration. Defaults to :class:`DatabaseConfig()`.
        registry: Expectation registry to match statements against.
        statement_cache: Statement cache to use. Defaults to the process-wide
            cache, or a private one when ``config.isolated_cache`` is set.
    """

    __slots__ = ("_registry", "_statement_cache", "_table_cache", "config")

    def __init__(
        self,
        config: Optional[DatabaseConfig] = None,
        registry: Optional[ExpectationRegistry] = None,
        statement_cache: Optional[StatementCache] = None,
    ) -> None:
        self.config = config if config is not None else DatabaseConfig()
        self._registry = registry if registry is not None else ExpectationRegistry()
        if statement_cache is None:
            statement_cache = StatementCache() if self.config.isolated_cache else get_default_statement_cache()
        self._statement_cache = statement_cache
        self._table_cache: dict[str, list[Any]] = {}

    @classmethod
    def new_test_instance(cls, config: Optional[DatabaseConfig] = None) -> "Self":
        """Create a database with a fresh expectation registry."""
        return cls(config)

    @property
    def registry(self) -> ExpectationRegistry:
        return self._registry

    @registry.setter
    def registry(self, registry: ExpectationRegistry) -> None:
        self._registry = registry

    @property
    def statement_cache(self) -> Optional[StatementCache]:
        """The statement cache, ``None`` when caching is disabled."""
        if not self.config.enable_statement_cache:
            return None
        return self._statement_cache

    def expect(self, sql: str) -> ExpectationBuilder:
        """Register a statement the code under test is expected to run."""
        return self._registry.the_query(sql)

    def prepare(self, sql: str) -> Statement:
        """Prepare ``sql``.

        Raises:
            EmptyQueryError: ``sql`` is blank.
        """
        return Statement(self).prepare(sql)

    def execute(self, sql: str) -> "Union[Result, Statement]":
        return self.prepare(sql).execute()

    def execute_uncached(self, sql: str) -> "Union[Result, Statement]":
        return self.prepare(sql).execute_uncached()

    def query(self, sql: str) -> "Union[Result, Statement]":
        """Run ``sql`` verbatim, without placeholder substitution."""
        return Statement(self).run(sql)

    def find_in_set(self, key: str, values: "Union[str, Iterable[Any]]", is_field: bool = False) -> str:
        """Build a ``FIND_IN_SET`` expression.

        Args:
            key: The column or value to look for.
            values: Comma separated set, or an iterable joined with commas.
            is_field: Whether ``values`` names a column instead of a literal set.
        """
        if not isinstance(values, str):
            values = ",".join(str(value) for value in values)
        if is_field:
            return f"FIND_IN_SET({key}, {values})"
        return f"FIND_IN_SET({key}, {escape_string(values)})"

    def list_tables(self, database: Optional[str] = None, no_cache: bool = False) -> "list[Any]":
        """List tables by running ``SHOW TABLES FROM <database>`` against the expectations.

        The first column of every returned row is taken as a table name.
        """
        if database is None:
            database = self.config.database
        if not no_cache and database in self._table_cache:
            return self._table_cache[database]

        outcome = self.query(f"SHOW TABLES FROM {database}")
        tables: list[Any] = []
        if isinstance(outcome, Result):
            tables = [next(iter(row.values())) for row in outcome.fetch_all_assoc() if row]
        self._table_cache[database] = tables
        return tables

    def table_exists(self, table: str, database: Optional[str] = None, no_cache: bool = False) -> bool:
        return table in self.list_tables(database, no_cache)

    def list_fields(self, table: str, no_cache: bool = False) -> "list[dict[str, Any]]":
        raise UnsupportedOperationError("list_fields")

    def field_exists(self, field: str, table: str, no_cache: bool = False) -> bool:
        return any(column["name"] == field for column in self.list_fields(table, no_cache))

    def get_field_names(self, table: str, no_cache: bool = False) -> "list[str]":
        return [column["name"] for column in self.list_fields(table, no_cache)]

    def set_database(self, database: str) -> None:
        raise UnsupportedOperationError("set_database")

    def get_size_of(self, table: str) -> int:
        raise UnsupportedOperationError("get_size_of")

    def get_next_id(self, table: str) -> int:
        raise UnsupportedOperationError("get_next_id")

    def get_uuid(self) -> str:
        raise UnsupportedOperationError("get_uuid")

    def begin_transaction(self) -> None:
        logger.debug("begin_transaction ignored")

    def commit_transaction(self) -> None:
        logger.debug("commit_transaction ignored")

    def rollback_transaction(self) -> None:
        logger.debug("rollback_transaction ignored")

    def lock_tables(self, tables: "dict[str, str]") -> None:
        logger.debug("lock_tables ignored for %s", ", ".join(tables))

    def unlock_tables(self) -> None:
        logger.debug("unlock_tables ignored")

    def __repr__(self) -> str:
        return f"FakeDatabase(database={self.config.database!r}, expectations={len(self._registry)})"
