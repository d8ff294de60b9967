"""Flattening of nested JSON documents into numeric record fields."""

import json
import numbers
from typing import Any

from metricshipper.core.errors import InputError


def flatten_json(document: Any, prefix: str = "") -> dict[str, float]:
    """Flatten nested objects into "_"-joined numeric fields.

    Only numbers are kept. Strings, booleans, nulls and arrays are ignored.

    Example:
        {"a": {"b": 1, "c": "x"}, "d": 2.5} -> {"a_b": 1.0, "d": 2.5}
    """
    fields: dict[str, float] = {}
    if isinstance(document, dict):
        for key, value in document.items():
            name = f"{prefix}_{key}" if prefix else str(key)
            fields.update(flatten_json(value, name))
    elif isinstance(document, numbers.Real) and not isinstance(document, bool):
        if prefix:
            fields[prefix] = float(document)
    return fields


def parse_json_fields(data: bytes | str) -> dict[str, float]:
    """Parse a JSON document and flatten it.

    Raises:
        InputError: If the data is not valid JSON.
    """
    try:
        document = json.loads(data)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise InputError(f"unable to parse output as JSON: {e}") from e
    return flatten_json(document)
