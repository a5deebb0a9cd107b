"""
Field-by-field comparison of expected and actual response values.

JSON objects are compared by the keys the contract lists; extra keys in the
producer's response are allowed. Arrays must have the same length and match
element by element. Everything else must be equal.
"""

from __future__ import annotations

from typing import Any, Optional, Tuple

Difference = Tuple[str, Any, Any]

_MISSING = object()


def _child_path(path: str, key: Any) -> str:
    if isinstance(key, int):
        return f"{path}[{key}]"
    return f"{path}.{key}"


def first_difference(expected: Any, actual: Any, path: str = "body") -> Optional[Difference]:
    """Return (field, expected, actual) for the first mismatch, or None if they agree."""
    if isinstance(expected, dict):
        if not isinstance(actual, dict):
            return path, expected, actual
        for key, value in expected.items():
            other = actual.get(key, _MISSING)
            if other is _MISSING:
                return _child_path(path, key), value, None
            diff = first_difference(value, other, _child_path(path, key))
            if diff is not None:
                return diff
        return None

    if isinstance(expected, list):
        if not isinstance(actual, list) or len(actual) != len(expected):
            return path, expected, actual
        for index, (value, other) in enumerate(zip(expected, actual)):
            diff = first_difference(value, other, _child_path(path, index))
            if diff is not None:
                return diff
        return None

    # bool is an int subclass; True must not equal 1 here.
    if isinstance(expected, bool) != isinstance(actual, bool):
        return path, expected, actual
    if expected != actual:
        return path, expected, actual
    return None


def media_type(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    return value.split(";", 1)[0].strip().lower()


def header_matches(name: str, expected: str, actual: Optional[str]) -> bool:
    if actual is None:
        return False
    if name.lower() == "content-type":
        return media_type(expected) == media_type(actual)
    return expected == actual
