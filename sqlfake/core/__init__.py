"""Core of the fake database: escaping, compilation, matching and result cursors."""

from sqlfake.core.cache import (
    CacheStats,
    StatementCache,
    clear_default_statement_cache,
    get_default_statement_cache,
    make_cache_key,
)
from sqlfake.core.compiler import (
    ASSIGNMENT_MARKER,
    compile_query,
    expand_assignments,
    is_assignment_statement,
    prepare_template,
    starts_with_keyword,
    substitute,
)
from sqlfake.core.escaping import escape_mapping, escape_parameters, escape_string, escape_value
from sqlfake.core.registry import Expectation, ExpectationBuilder, ExpectationRegistry
from sqlfake.core.result import FakeResult, Result
from sqlfake.core.statement import Statement, StatementState

__all__ = (
    "ASSIGNMENT_MARKER",
    "CacheStats",
    "Expectation",
    "ExpectationBuilder",
    "ExpectationRegistry",
    "FakeResult",
    "Result",
    "Statement",
    "StatementCache",
    "StatementState",
    "clear_default_statement_cache",
    "compile_query",
    "escape_mapping",
    "escape_parameters",
    "escape_string",
    "escape_value",
    "expand_assignments",
    "get_default_statement_cache",
    "is_assignment_statement",
    "make_cache_key",
    "prepare_template",
    "starts_with_keyword",
    "substitute",
)
