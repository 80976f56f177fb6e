"""Namespaced loggers for sqlfake.

Every logger of the package lives under the ``sqlfake`` namespace so a test
suite can raise the verbosity of the fake database alone, e.g. with
``caplog.set_level(logging.DEBUG, logger="sqlfake")``.

Records carry a ``correlation_id`` attribute while one is set, typically the
node id of the running test, so that interleaved output of a test session can
be told apart.
"""

import logging
from contextvars import ContextVar
from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from logging import LogRecord

__all__ = ("CorrelationIDFilter", "correlation_id_var", "get_correlation_id", "get_logger", "set_correlation_id")

ROOT_LOGGER_NAME = "sqlfake"

correlation_id_var: "ContextVar[Optional[str]]" = ContextVar("sqlfake_correlation_id", default=None)


def set_correlation_id(correlation_id: Optional[str]) -> None:
    """Tag the records logged from the current context, ``None`` clears the tag."""
    correlation_id_var.set(correlation_id)


def get_correlation_id() -> Optional[str]:
    return correlation_id_var.get()


class CorrelationIDFilter(logging.Filter):
    """Copy the current correlation id onto each record."""

    def filter(self, record: "LogRecord") -> bool:
        correlation_id = get_correlation_id()
        if correlation_id is not None:
            record.correlation_id = correlation_id  # type: ignore[attr-defined]
        return True


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """Return a logger under the ``sqlfake`` namespace.

    Args:
        name: Dotted logger name, prefixed with ``sqlfake.`` when it lies
            outside the namespace. ``None`` returns the package logger.

    Returns:
        The logger, with a :class:`CorrelationIDFilter` attached once.
    """
    if name is None:
        return logging.getLogger(ROOT_LOGGER_NAME)
    if name != ROOT_LOGGER_NAME and not name.startswith(f"{ROOT_LOGGER_NAME}."):
        name = f"{ROOT_LOGGER_NAME}.{name}"

    logger = logging.getLogger(name)
    if not any(isinstance(log_filter, CorrelationIDFilter) for log_filter in logger.filters):
        logger.addFilter(CorrelationIDFilter())
    return logger
