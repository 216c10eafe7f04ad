"""Runtime type classification of JSON values."""

from __future__ import annotations

from typing import Any

from .models import JsonType
from .exceptions import UnsupportedValueError


def classify(value: Any) -> JsonType:
    """
    Map a JSON value to its type label.

    Numeric precision, string content and container sizes are discarded;
    the label is the only thing the diff engine compares.

    Raises:
        UnsupportedValueError: value is not a JSON value (e.g. a set or datetime)
    """
    if value is None:
        return JsonType.NULL
    # bool before number, bool is an int subclass
    if isinstance(value, bool):
        return JsonType.BOOLEAN
    if isinstance(value, (int, float)):
        return JsonType.NUMBER
    if isinstance(value, str):
        return JsonType.STRING
    if isinstance(value, (list, tuple)):
        return JsonType.ARRAY
    if isinstance(value, dict):
        return JsonType.OBJECT
    raise UnsupportedValueError(value)

