from collections.abc import Iterator

import pytest

from sqlfake import DatabaseConfig, FakeDatabase, FakeResult
from sqlfake.core import clear_default_statement_cache
from sqlfake.utils.logging import correlation_id_var


@pytest.fixture(autouse=True)
def _clean_statement_cache() -> Iterator[None]:
    clear_default_statement_cache()
    yield
    clear_default_statement_cache()


@pytest.fixture(autouse=True)
def _correlate_logs(request: pytest.FixtureRequest) -> Iterator[None]:
    token = correlation_id_var.set(request.node.nodeid)
    yield
    correlation_id_var.reset(token)


@pytest.fixture
def database() -> FakeDatabase:
    return FakeDatabase.new_test_instance(DatabaseConfig(isolated_cache=True))


@pytest.fixture
def three_rows() -> FakeResult:
    return FakeResult().add_row({"id": 10, "name": "first"}).add_row({"id": 5, "name": "second"}).add_row(
        {"id": 7, "name": "third"}
    )
