"""Tests for the fake database connection."""

import pytest

from sqlfake import ConnectionProtocol, DatabaseConfig, FakeDatabase, ResultProtocol, StatementProtocol
from sqlfake.core import ExpectationRegistry, StatementCache, get_default_statement_cache
from sqlfake.exceptions import UnsupportedOperationError


def test_new_test_instance_has_fresh_registry() -> None:
    first = FakeDatabase.new_test_instance()
    second = FakeDatabase.new_test_instance()

    assert first is not second
    assert first.registry is not second.registry


def test_default_statement_cache_is_process_wide() -> None:
    assert FakeDatabase().statement_cache is get_default_statement_cache()


def test_isolated_statement_cache(database: FakeDatabase) -> None:
    assert database.statement_cache is not None
    assert database.statement_cache is not get_default_statement_cache()


def test_injected_collaborators() -> None:
    registry = ExpectationRegistry()
    cache = StatementCache()

    database = FakeDatabase(registry=registry, statement_cache=cache)

    assert database.registry is registry
    assert database.statement_cache is cache


def test_registry_can_be_replaced(database: FakeDatabase) -> None:
    registry = ExpectationRegistry()
    registry.register("SELECT 1").result().add_row({"one": 1})

    database.registry = registry

    assert database.query("SELECT 1").row() == {"one": 1}  # type: ignore[union-attr]


def test_protocols(database: FakeDatabase) -> None:
    database.expect("SELECT 1").will_return_rows({"one": 1})
    statement = database.prepare("SELECT 1")

    assert isinstance(database, ConnectionProtocol)
    assert isinstance(statement, StatementProtocol)
    assert isinstance(statement.execute(), ResultProtocol)


def test_query_does_not_substitute_placeholders(database: FakeDatabase) -> None:
    statement = database.query("SELECT * FROM t WHERE id=?")

    assert statement.query == "SELECT * FROM t WHERE id=?"


class TestFindInSet:
    def test_literal_set(self, database: FakeDatabase) -> None:
        assert database.find_in_set("id", [1, 2, 3]) == "FIND_IN_SET(id, '1,2,3')"
        assert database.find_in_set("id", "a,b") == "FIND_IN_SET(id, 'a,b')"

    def test_field(self, database: FakeDatabase) -> None:
        assert database.find_in_set("'a'", "tags", is_field=True) == "FIND_IN_SET('a', tags)"


class TestTables:
    def test_list_tables(self, database: FakeDatabase) -> None:
        database.expect("SHOW TABLES FROM test").will_return_rows(
            {"Tables_in_test": "tl_page"}, {"Tables_in_test": "tl_news"}
        )

        assert database.list_tables() == ["tl_page", "tl_news"]
        assert database.table_exists("tl_news")
        assert not database.table_exists("tl_user")

    def test_list_tables_of_other_database(self, database: FakeDatabase) -> None:
        database.expect("SHOW TABLES FROM archive").will_return_rows({"Tables_in_archive": "tl_old"})

        assert database.list_tables("archive") == ["tl_old"]
        assert database.list_tables() == []

    def test_table_list_is_cached(self, database: FakeDatabase) -> None:
        database.expect("SHOW TABLES FROM test").will_return_rows({"Tables_in_test": "tl_page"})
        database.list_tables()
        database.registry.clear()

        assert database.list_tables() == ["tl_page"]
        assert database.list_tables(no_cache=True) == []


@pytest.mark.parametrize(
    ("operation", "args"),
    [
        ("list_fields", ("tl_page",)),
        ("field_exists", ("id", "tl_page")),
        ("get_field_names", ("tl_page",)),
        ("set_database", ("other",)),
        ("get_size_of", ("tl_page",)),
        ("get_next_id", ("tl_page",)),
        ("get_uuid", ()),
    ],
)
def test_unsupported_operations(database: FakeDatabase, operation: str, args: tuple) -> None:
    with pytest.raises(UnsupportedOperationError, match="currently unsupported in test suite"):
        getattr(database, operation)(*args)


def test_transaction_and_lock_hooks_are_noops(database: FakeDatabase) -> None:
    database.begin_transaction()
    database.commit_transaction()
    database.rollback_transaction()
    database.lock_tables({"tl_page": "WRITE"})
    database.unlock_tables()

    assert len(database.registry) == 0


def test_repr() -> None:
    database = FakeDatabase(DatabaseConfig(database="shop"))
    database.expect("SELECT 1")

    assert repr(database) == "FakeDatabase(database='shop', expectations=1)"
