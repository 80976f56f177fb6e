from typing import TYPE_CHECKING, Any, Final

from sqlfake.exceptions import ImproperConfigurationError

if TYPE_CHECKING:
    from typing_extensions import Self

__all__ = ("DEFAULT_LIMIT", "DatabaseConfig")

DEFAULT_LIMIT: Final = 30


class DatabaseConfig:
    """Configuration of a :class:`~sqlfake.database.FakeDatabase`.

    Args:
        database: Name reported as the current database, used by ``list_tables``.
        default_limit: Row count used by ``Statement.limit`` when a non-positive count is given.
        enable_statement_cache: Reuse results of identical compiled queries on ``execute``.
        isolated_cache: Give the database its own statement cache instead of the
            process-wide one. Use it when tests run in parallel.
    """

    __slots__ = ("database", "default_limit", "enable_statement_cache", "isolated_cache")

    def __init__(
        self,
        database: str = "test",
        default_limit: int = DEFAULT_LIMIT,
        enable_statement_cache: bool = True,
        isolated_cache: bool = False,
    ) -> None:
        if not database:
            msg = "database must be a non-empty name"
            raise ImproperConfigurationError(msg)
        if default_limit <= 0:
            msg = f"default_limit must be positive, got {default_limit}"
            raise ImproperConfigurationError(msg)
        self.database = database
        self.default_limit = default_limit
        self.enable_statement_cache = enable_statement_cache
        self.isolated_cache = isolated_cache

    def replace(self, **kwargs: Any) -> "Self":
        """Return a copy with the given attributes replaced."""
        unknown = set(kwargs) - set(self.__slots__)
        if unknown:
            msg = f"Unknown configuration attributes: {', '.join(sorted(unknown))}"
            raise ImproperConfigurationError(msg)
        current = {name: getattr(self, name) for name in self.__slots__}
        current.update(kwargs)
        return type(self)(**current)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, DatabaseConfig):
            return NotImplemented
        return all(getattr(self, name) == getattr(other, name) for name in self.__slots__)

    def __repr__(self) -> str:
        fields = ", ".join(f"{name}={getattr(self, name)!r}" for name in self.__slots__)
        return f"DatabaseConfig({fields})"
