"""sqlfake: an in-memory fake SQL database for unit tests."""

from sqlfake import exceptions
from sqlfake.config import DatabaseConfig
from sqlfake.core import (
    Expectation,
    ExpectationBuilder,
    ExpectationRegistry,
    FakeResult,
    Result,
    Statement,
    StatementCache,
    StatementState,
    compile_query,
    escape_value,
)
from sqlfake.database import FakeDatabase
from sqlfake.protocols import ConnectionProtocol, ResultProtocol, StatementProtocol

__all__ = (
    "ConnectionProtocol",
    "DatabaseConfig",
    "Expectation",
    "ExpectationBuilder",
    "ExpectationRegistry",
    "FakeDatabase",
    "FakeResult",
    "Result",
    "ResultProtocol",
    "Statement",
    "StatementCache",
    "StatementProtocol",
    "StatementState",
    "compile_query",
    "escape_value",
    "exceptions",
)
