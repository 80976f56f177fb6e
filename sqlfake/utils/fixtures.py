from collections.abc import Mapping, Sequence
from pathlib import Path
from typing import Any, Union

from sqlfake._serialization import decode_json
from sqlfake.core.result import FakeResult
from sqlfake.exceptions import SerializationError

__all__ = ("load_result_fixture", "open_fixture")


def open_fixture(fixtures_path: "Union[str, Path]", fixture_name: str) -> Any:
    """Loads JSON file with the specified fixture name

    Args:
        fixtures_path: The directory to look for fixtures in
        fixture_name (str): The fixture name to load.

    Raises:
        FileNotFoundError: Fixtures not found.

    Returns:
        Any: The parsed JSON data
    """
    fixture = Path(fixtures_path) / f"{fixture_name}.json"
    if fixture.exists():
        with fixture.open(mode="r", encoding="utf-8") as f:
            f_data = f.read()
        return decode_json(f_data)
    msg = f"Could not find the {fixture_name} fixture"
    raise FileNotFoundError(msg)


def load_result_fixture(fixtures_path: "Union[str, Path]", fixture_name: str) -> FakeResult:
    """Build a :class:`FakeResult` from a JSON fixture.

    The fixture holds either a list of rows or an object mapping row keys to rows.

    Raises:
        FileNotFoundError: Fixtures not found.
        SerializationError: The fixture does not hold rows.
    """
    data = open_fixture(fixtures_path, fixture_name)
    if isinstance(data, Mapping):
        rows: Union[Mapping[Any, Any], Sequence[Any]] = data
        values = list(data.values())
    elif isinstance(data, list):
        rows = values = data
    else:
        msg = f"Fixture {fixture_name} must hold a list or an object of rows"
        raise SerializationError(msg)
    if not all(isinstance(row, Mapping) for row in values):
        msg = f"Every row of fixture {fixture_name} must be an object"
        raise SerializationError(msg)
    return FakeResult(rows)
