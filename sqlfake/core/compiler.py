"""Query compilation.

Turns a query template with ``?`` placeholders and a list of bound values into
the canonical SQL text a MySQL style driver would send to the server. That text
is the key used for matching expectations and for the statement cache.

Compilation runs in three phases:

1. :func:`prepare_template` normalizes placeholders. ``?`` outside of quoted
   literals becomes ``%s``; INSERT/UPDATE templates get their ``%s`` turned
   into the assignment marker ``%p`` first.
2. :func:`expand_assignments` replaces the assignment marker of an INSERT or
   UPDATE template with a ``(cols) VALUES (...)`` or ``SET col=value`` fragment
   built from a column map.
3. :func:`substitute` protects stray ``%`` characters and performs printf
   style positional substitution with the escaped values.
"""

import re
from collections.abc import Callable
from decimal import Decimal, InvalidOperation
from typing import TYPE_CHECKING, Final, Optional

from sqlfake.core.escaping import escape_mapping, escape_parameters
from sqlfake.exceptions import CompileError
from sqlfake.utils.logging import get_logger

if TYPE_CHECKING:
    from sqlfake.typing import AssignmentsT, ParametersT

__all__ = (
    "ASSIGNMENT_MARKER",
    "compile_query",
    "expand_assignments",
    "is_assignment_statement",
    "prepare_template",
    "starts_with_keyword",
    "substitute",
)

logger = get_logger("sqlfake.core.compiler")

ASSIGNMENT_MARKER: Final = "%p"

_QUOTED_LITERAL_RE: Final = re.compile(r"('[^']*')")
_STRAY_PERCENT_RE: Final = re.compile(r"(?<!%)%(?![bcdufosxX%])")
_CONVERSION_RE: Final = re.compile(r"%([bcdufosxX%])")
_LEADING_NUMBER_RE: Final = re.compile(r"\s*[+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?")

_UINT_MASK: Final = (1 << 64) - 1


def starts_with_keyword(sql: str, keyword: str) -> bool:
    """Case-insensitive check of the statement's leading keyword."""
    return sql[: len(keyword)].upper() == keyword.upper()


def is_assignment_statement(sql: str) -> bool:
    """Whether ``sql`` is an INSERT or UPDATE that may carry an assignment marker."""
    return starts_with_keyword(sql, "INSERT") or starts_with_keyword(sql, "UPDATE")


def prepare_template(sql: str) -> str:
    """Normalize the placeholders of a query template.

    ``?`` characters inside single quoted literals are left untouched.

    Args:
        sql: The raw query template.

    Returns:
        The template with positional ``%s`` markers.
    """
    query = sql.strip()
    if is_assignment_statement(query):
        query = query.replace("%s", ASSIGNMENT_MARKER)

    chunks = _QUOTED_LITERAL_RE.split(query)
    return "".join(chunk if chunk.startswith("'") else chunk.replace("?", "%s") for chunk in chunks)


def expand_assignments(prepared: str, assignments: "AssignmentsT") -> str:
    """Expand the assignment marker of a prepared INSERT or UPDATE template.

    Args:
        prepared: A template returned by :func:`prepare_template`.
        assignments: Column to value map, in column order.

    Returns:
        The template with the generated fragment in place of the marker.
        Templates of any other statement are returned unchanged.
    """
    escaped = escape_mapping(assignments)
    if starts_with_keyword(prepared, "INSERT"):
        columns = ", ".join(escaped)
        values = ", ".join(escaped.values()).replace("%", "%%")
        fragment = f"({columns}) VALUES ({values})"
    elif starts_with_keyword(prepared, "UPDATE"):
        pairs = ", ".join(f"{column}={value}" for column, value in escaped.items())
        fragment = "SET " + pairs.replace("%", "%%")
    else:
        return prepared
    return prepared.replace(ASSIGNMENT_MARKER, fragment)


def _to_integer(text: str) -> int:
    match = _LEADING_NUMBER_RE.match(text)
    if match is None:
        return 0
    try:
        return int(Decimal(match.group().strip()))
    except (InvalidOperation, OverflowError):
        return 0


def _to_float(text: str) -> float:
    match = _LEADING_NUMBER_RE.match(text)
    return float(match.group()) if match else 0.0


def _to_unsigned(text: str) -> int:
    return _to_integer(text) & _UINT_MASK


def _to_char(text: str) -> str:
    code = _to_integer(text)
    return chr(code) if 0 <= code <= 0x10FFFF else ""


_CONVERTERS: "Final[dict[str, Callable[[str], str]]]" = {
    "s": str,
    "d": lambda text: str(_to_integer(text)),
    "u": lambda text: str(_to_unsigned(text)),
    "f": lambda text: f"{_to_float(text):.6f}",
    "o": lambda text: format(_to_unsigned(text), "o"),
    "x": lambda text: format(_to_unsigned(text), "x"),
    "X": lambda text: format(_to_unsigned(text), "X"),
    "b": lambda text: format(_to_unsigned(text), "b"),
    "c": _to_char,
}


def substitute(prepared: str, values: "ParametersT") -> str:
    """Substitute escaped values into a prepared template.

    Values are consumed left to right. Surplus values are ignored.

    Args:
        prepared: A template returned by :func:`prepare_template`.
        values: The positional values.

    Raises:
        CompileError: There are more markers than values.

    Returns:
        The compiled query text.
    """
    query = _STRAY_PERCENT_RE.sub("%%", prepared)
    escaped = iter(escape_parameters(values))

    def _convert(match: "re.Match[str]") -> str:
        conversion = match.group(1)
        if conversion == "%":
            return "%"
        try:
            text = next(escaped)
        except StopIteration:
            raise CompileError(sql=prepared) from None
        return _CONVERTERS[conversion](text)

    return _CONVERSION_RE.sub(_convert, query)


def compile_query(
    template: str, values: "ParametersT" = (), assignments: "Optional[AssignmentsT]" = None
) -> str:
    """Compile a template and its values into the canonical query text.

    Args:
        template: The raw query template.
        values: Positional values for the ``?`` placeholders.
        assignments: Column map for the assignment marker of INSERT/UPDATE templates.

    Returns:
        The compiled query text.
    """
    prepared = prepare_template(template)
    if assignments is not None:
        prepared = expand_assignments(prepared, assignments)
    compiled = substitute(prepared, values)
    logger.debug("Compiled query: %s", compiled)
    return compiled
