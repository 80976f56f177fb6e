"""Tests for statement preparation, binding and execution."""

import pytest

from sqlfake import DatabaseConfig, FakeDatabase
from sqlfake.core.result import Result
from sqlfake.core.statement import Statement, StatementState
from sqlfake.exceptions import CompileError, EmptyQueryError, QueryExecutionError, UnsupportedOperationError


def test_retrieve_registered_row(database: FakeDatabase) -> None:
    database.expect("SELECT * FROM test WHERE id=?").with_parameters(1).result().add_row(
        {"id": 1, "tstamp": 343094400}
    )

    statement = database.prepare("SELECT * FROM test WHERE id=?")
    result = statement.execute(1)

    assert isinstance(statement, Statement)
    assert isinstance(result, Result)
    assert result.num_rows == 1
    assert result.row() == {"id": 1, "tstamp": 343094400}

    result = database.prepare("SELECT * FROM test WHERE id=?").execute(1)
    assert isinstance(result, Result)

    counter = 0
    while result.next():
        counter += 1

    assert counter == 1


class TestLifecycle:
    def test_prepare(self, database: FakeDatabase) -> None:
        statement = Statement(database)
        assert statement.state is StatementState.UNPREPARED

        statement.prepare(" SELECT * FROM t WHERE id=? ")

        assert statement.state is StatementState.PREPARED
        assert statement.query == "SELECT * FROM t WHERE id=%s"

    @pytest.mark.parametrize("sql", ["", "   "])
    def test_prepare_blank_raises(self, database: FakeDatabase, sql: str) -> None:
        with pytest.raises(EmptyQueryError, match="Empty query string"):
            database.prepare(sql)

    def test_bind_requires_prepare(self, database: FakeDatabase) -> None:
        with pytest.raises(EmptyQueryError):
            Statement(database).bind(1)

    def test_bind(self, database: FakeDatabase) -> None:
        statement = database.prepare("SELECT * FROM t WHERE id=?").bind(4)

        assert statement.state is StatementState.BOUND
        assert statement.query == "SELECT * FROM t WHERE id=4"

    @pytest.mark.parametrize("parameters", [(1, "a"), ([1, "a"],), ((1, "a"),), ({"id": 1, "name": "a"},)])
    def test_single_container_argument_is_unpacked(self, database: FakeDatabase, parameters: tuple) -> None:
        statement = database.prepare("SELECT * FROM t WHERE id=? AND name=?").bind(*parameters)

        assert statement.query == "SELECT * FROM t WHERE id=1 AND name='a'"

    def test_too_few_values(self, database: FakeDatabase) -> None:
        with pytest.raises(CompileError):
            database.prepare("SELECT * FROM t WHERE id=? AND pid=?").execute(1)

    def test_reexecution_recompiles_template(self, database: FakeDatabase) -> None:
        statement = database.prepare("SELECT * FROM t WHERE id=?")

        statement.execute(1)
        assert statement.query == "SELECT * FROM t WHERE id=1"

        statement.execute(2)
        assert statement.query == "SELECT * FROM t WHERE id=2"

    def test_repr(self, database: FakeDatabase) -> None:
        statement = database.prepare("SELECT 1")

        assert repr(statement) == "Statement(query='SELECT 1', state=prepared)"


class TestLimit:
    def test_select_limit_has_offset(self, database: FakeDatabase) -> None:
        assert database.prepare("SELECT * FROM t").limit(5, 10).query == "SELECT * FROM t LIMIT 10,5"

    def test_other_statements_have_row_count_only(self, database: FakeDatabase) -> None:
        assert database.prepare("DELETE FROM t").limit(5, 10).query == "DELETE FROM t LIMIT 5"

    def test_non_positive_rows_use_default_limit(self, database: FakeDatabase) -> None:
        assert database.prepare("SELECT * FROM t").limit(0).query == "SELECT * FROM t LIMIT 0,30"

    def test_configured_default_limit(self) -> None:
        database = FakeDatabase(DatabaseConfig(default_limit=50, isolated_cache=True))

        assert database.prepare("SELECT * FROM t").limit(-1).query == "SELECT * FROM t LIMIT 0,50"

    def test_negative_offset_is_clamped(self, database: FakeDatabase) -> None:
        assert database.prepare("SELECT * FROM t").bind_and_set_limit(5, -3).query == "SELECT * FROM t LIMIT 0,5"

    def test_limit_with_placeholders(self, database: FakeDatabase) -> None:
        statement = database.prepare("SELECT * FROM t WHERE pid=?").limit(1).bind(3)

        assert statement.query == "SELECT * FROM t WHERE pid=3 LIMIT 0,1"


def test_set_builds_update(database: FakeDatabase) -> None:
    database.expect("UPDATE t %s WHERE id=?").with_assignments({"name": "Leo"}).with_parameters(5)

    outcome = database.prepare("UPDATE t %s WHERE id=?").set({"name": "Leo"}).execute(5)

    assert isinstance(outcome, Result)
    assert outcome.query == "UPDATE t SET name='Leo' WHERE id=5"
    assert outcome.num_rows == 0


def test_set_builds_insert(database: FakeDatabase) -> None:
    statement = database.prepare("INSERT INTO t %s").set({"name": "Leo", "age": 3})

    assert statement.query == "INSERT INTO t (name, age) VALUES ('Leo', 3)"


class TestExecution:
    def test_unmatched_query_returns_statement(self, database: FakeDatabase) -> None:
        statement = database.prepare("DELETE FROM t WHERE id=?")

        outcome = statement.execute(1)

        assert outcome is statement
        assert statement.state is StatementState.EXECUTED
        assert statement.result is None

    def test_registered_error_raises(self, database: FakeDatabase) -> None:
        database.expect("SELECT * FROM t WHERE id=?").with_parameters(1).will_fail_with("Table 't' doesn't exist")
        statement = database.prepare("SELECT * FROM t WHERE id=?")

        with pytest.raises(QueryExecutionError) as exc_info:
            statement.execute(1)

        assert exc_info.value.message == "Table 't' doesn't exist"
        assert exc_info.value.sql == "SELECT * FROM t WHERE id=1"
        assert statement.error == "Table 't' doesn't exist"

    def test_error_is_empty_without_registered_error(self, database: FakeDatabase) -> None:
        database.expect("SELECT 1")
        statement = database.prepare("SELECT 1")

        assert statement.error == ""
        assert Statement(database).error == ""

    def test_result_property(self, database: FakeDatabase) -> None:
        database.expect("SELECT 1").will_return_rows({"one": 1})
        statement = database.prepare("SELECT 1")

        result = statement.execute()

        assert statement.result is result
        assert isinstance(result, Result)
        assert result.expectation is not None

    def test_run_verbatim_sql(self, database: FakeDatabase) -> None:
        database.expect("SELECT * FROM t WHERE a='?'").will_return_rows({"a": "?"})

        result = Statement(database).run("SELECT * FROM t WHERE a='?'")

        assert isinstance(result, Result)
        assert result.row() == {"a": "?"}

    def test_run_without_query_raises(self, database: FakeDatabase) -> None:
        with pytest.raises(EmptyQueryError):
            Statement(database).run()

    def test_unsupported_properties(self, database: FakeDatabase) -> None:
        statement = database.prepare("INSERT INTO t %s")

        with pytest.raises(UnsupportedOperationError, match="affected_rows"):
            _ = statement.affected_rows
        with pytest.raises(UnsupportedOperationError, match="insert_id"):
            _ = statement.insert_id

    def test_explain(self, database: FakeDatabase) -> None:
        assert database.prepare("SELECT 1").explain() == []


class TestStatementCache:
    def test_repeated_execution_reuses_result(self, database: FakeDatabase) -> None:
        database.expect("SELECT * FROM t WHERE id=?").with_parameters(1).will_return_rows({"id": 1}, {"id": 2})

        first = database.prepare("SELECT * FROM t WHERE id=?").execute(1)
        assert isinstance(first, Result)
        first.last()

        second = database.prepare("SELECT * FROM t WHERE id=?").execute(1)

        assert second is first
        assert second.index == -1
        assert not second.is_done
        assert database.statement_cache is not None
        assert database.statement_cache.get_stats().hits == 1

    def test_cached_result_restarts_at_first_row(self, database: FakeDatabase) -> None:
        database.expect("SELECT * FROM t").will_return_rows({"id": 1}, {"id": 2})

        first = database.execute("SELECT * FROM t")
        assert isinstance(first, Result)
        assert first.fetch_assoc() == {"id": 1}

        second = database.execute("SELECT * FROM t")

        assert isinstance(second, Result)
        assert second.fetch_assoc() == {"id": 1}

    def test_modified_result_is_not_reused(self, database: FakeDatabase) -> None:
        database.expect("SELECT * FROM t").will_return_rows({"id": 1, "name": "a"})

        first = database.execute("SELECT * FROM t")
        assert isinstance(first, Result)
        first["name"] = "changed"

        second = database.execute("SELECT * FROM t")

        assert isinstance(second, Result)
        assert second is not first
        assert second.row() == {"id": 1, "name": "a"}

    def test_uncached_execution(self, database: FakeDatabase) -> None:
        database.expect("SELECT 1").will_return_rows({"one": 1})

        first = database.execute_uncached("SELECT 1")
        second = database.execute_uncached("SELECT 1")

        assert first is not second
        assert database.statement_cache is not None
        assert len(database.statement_cache) == 0

    def test_unmatched_queries_are_not_cached(self, database: FakeDatabase) -> None:
        database.execute("SELECT 1")

        assert database.statement_cache is not None
        assert len(database.statement_cache) == 0

    def test_errors_are_not_cached(self, database: FakeDatabase) -> None:
        database.expect("SELECT 1").will_fail_with("boom")

        for _ in range(2):
            with pytest.raises(QueryExecutionError):
                database.execute("SELECT 1")

    def test_disabled_cache(self) -> None:
        database = FakeDatabase(DatabaseConfig(enable_statement_cache=False))
        database.expect("SELECT 1").will_return_rows({"one": 1})

        assert database.statement_cache is None
        assert database.execute("SELECT 1") is not database.execute("SELECT 1")

    def test_process_wide_cache_is_shared_between_databases(self) -> None:
        first_db = FakeDatabase.new_test_instance()
        first_db.expect("SELECT 1").will_return_rows({"one": 1})
        second_db = FakeDatabase.new_test_instance()

        first = first_db.execute("SELECT 1")

        assert isinstance(first, Result)
        assert second_db.execute("SELECT 1") is first
