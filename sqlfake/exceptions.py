from typing import Any, Optional

__all__ = (
    "CompileError",
    "EmptyQueryError",
    "ImproperConfigurationError",
    "OutOfBoundsError",
    "QueryExecutionError",
    "SQLFakeError",
    "SerializationError",
    "UnsupportedOperationError",
)


class SQLFakeError(Exception):
    """Base exception class from which all sqlfake exceptions inherit."""

    detail: str

    def __init__(self, *args: Any, detail: str = "") -> None:
        """Initialize ``SQLFakeError``.

        Args:
            *args: args are converted to :class:`str` before passing to :class:`Exception`
            detail: detail of the exception.
        """
        str_args = [str(arg) for arg in args if arg]
        if not detail:
            if str_args:
                detail, *str_args = str_args
            elif hasattr(self, "detail"):
                detail = self.detail
        self.detail = detail
        super().__init__(*str_args)

    def __repr__(self) -> str:
        if self.detail:
            return f"{self.__class__.__name__} - {self.detail}"
        return self.__class__.__name__

    def __str__(self) -> str:
        return " ".join((*self.args, self.detail)).strip()


class EmptyQueryError(SQLFakeError):
    """A blank query string was passed to ``prepare`` or ``query``."""

    def __init__(self, message: Optional[str] = None) -> None:
        if message is None:
            message = "Empty query string"
        super().__init__(message)


class CompileError(SQLFakeError):
    """The query could not be compiled with the supplied values."""

    sql: Optional[str]

    def __init__(self, message: Optional[str] = None, sql: Optional[str] = None) -> None:
        if message is None:
            message = "Too few arguments to build the query string"
        detail_message = message
        if sql:
            detail_message = f"{message}\nSQL: {sql}"
        super().__init__(detail=detail_message)
        self.sql = sql


class QueryExecutionError(SQLFakeError):
    """A registered expectation was told to fail with a message."""

    message: str
    sql: str

    def __init__(self, message: str, sql: str) -> None:
        super().__init__(detail=f"Query error: {message} ({sql})")
        self.message = message
        self.sql = sql


class OutOfBoundsError(SQLFakeError, IndexError):
    """Cursor repositioning past the bounds of a non-empty result."""


class UnsupportedOperationError(SQLFakeError, NotImplementedError):
    """The operation is not emulated by the fake database."""

    def __init__(self, operation: Optional[str] = None) -> None:
        message = "currently unsupported in test suite."
        if operation:
            message = f"{operation} is {message}"
        super().__init__(message)


class ImproperConfigurationError(SQLFakeError):
    """Improper Configuration error.

    Raised when a :class:`~sqlfake.config.DatabaseConfig` receives invalid values.
    """


class SerializationError(SQLFakeError):
    """Encoding or decoding of an object failed."""
