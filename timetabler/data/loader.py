"""Load and save timetable input data as JSON files."""

from __future__ import annotations
import json
from pathlib import Path
from typing import Union

from pydantic import ValidationError

from ..errors import DataValidationError
from .models import TimetableInput


def load_timetable_input(path: Union[str, Path]) -> TimetableInput:
    """
    Load timetable input from a JSON file.

    The file holds ``teachers``, ``subjects``, ``sections`` and an optional
    ``config`` object. Field names may be camelCase or snake_case.

    Args:
        path: Path to the JSON file

    Returns:
        Validated TimetableInput

    Raises:
        FileNotFoundError: If the file doesn't exist
        UnicodeDecodeError: If the file isn't UTF-8 text
        json.JSONDecodeError: If the file isn't valid JSON
        DataValidationError: If the data fails validation
    """
    path = Path(path)

    with open(path, encoding="utf-8") as f:
        data = json.load(f)

    return parse_timetable_input(data)


def parse_timetable_input(data: dict) -> TimetableInput:
    """
    Validate a decoded JSON document into a TimetableInput.

    Raises:
        DataValidationError: If the structure or references are invalid
    """
    if not isinstance(data, dict):
        raise DataValidationError("Input must be a JSON object")

    errors = []
    for field in ("teachers", "subjects", "sections"):
        if field in data and not isinstance(data[field], list):
            errors.append(f"Field '{field}' must be a list")
    if errors:
        raise DataValidationError("; ".join(errors))

    try:
        return TimetableInput.model_validate(data)
    except ValidationError as e:
        raise DataValidationError(str(e)) from e


def save_timetable_input(input_data: TimetableInput, path: Union[str, Path]) -> None:
    """Write input data to a JSON file using camelCase field names."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        f.write(input_data.model_dump_json(by_alias=True, indent=2))
