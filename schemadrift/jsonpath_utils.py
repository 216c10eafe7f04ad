"""JSONPath utilities for SchemaDrift engine."""

from __future__ import annotations

from functools import lru_cache
from typing import Any

from jsonpath_ng.jsonpath import Child, Fields, Index, JSONPath, Root


MISSING = object()
WILDCARD = "*"


class JSONPathMatcher:
    """Resolves change paths (``user.addresses[0].zip``) inside documents."""

    # Compiled expressions for recently seen paths
    CACHE_SIZE = 1024

    @classmethod
    def compile(cls, path: str) -> JSONPath:
        """Compile and cache the JSONPath expression for a change path."""
        return _compile(path)

    @classmethod
    def parse_path_segments(cls, path: str) -> list[str | int]:
        """
        Split a change path into object keys and array indices.

        ``a.b[2].c`` gives ``['a', 'b', 2, 'c']``; the empty path gives [].
        Keys that themselves contain '.' or '[' cannot be told apart from
        nesting and are split as if nested.
        """
        segments: list[str | int] = []
        current = ''
        i = 0

        while i < len(path):
            char = path[i]

            if char == '.':
                if current:
                    segments.append(current)
                    current = ''
            elif char == '[':
                j = path.find(']', i)
                bracket_content = path[i + 1:j] if j != -1 else ''
                if j != -1 and bracket_content.isdigit():
                    if current:
                        segments.append(current)
                        current = ''
                    segments.append(int(bracket_content))
                    i = j
                else:
                    current += char
            else:
                current += char

            i += 1

        if current:
            segments.append(current)

        return segments

    @classmethod
    def find_value(cls, data: Any, path: str, default: Any = MISSING) -> Any:
        """
        Find the value at a change path.

        A "*" key would compile to a jsonpath-ng wildcard and match any
        sibling, so paths through such a key are not looked up.

        Returns:
            The value, or ``default`` when nothing is at that path
        """
        if WILDCARD in cls.parse_path_segments(path):
            return default
        try:
            matches = cls.compile(path).find(data)
        except (KeyError, IndexError, TypeError):
            # an index segment applied to a non-array
            return default
        if not matches:
            return default
        return matches[0].value

    @classmethod
    def exists(cls, data: Any, path: str) -> bool:
        return cls.find_value(data, path) is not MISSING


def resolve_change_values(changes, old: Any, new: Any) -> list[tuple[Any, Any]]:
    """
    Look up the old and new value behind every change.

    A side where the path does not exist (the new side of a removal, the
    old side of an addition) yields None.
    """
    values = []
    for change in changes:
        old_value = JSONPathMatcher.find_value(old, change.path, None)
        new_value = JSONPathMatcher.find_value(new, change.path, None)
        values.append((old_value, new_value))
    return values


@lru_cache(maxsize=JSONPathMatcher.CACHE_SIZE)
def _compile(path: str) -> JSONPath:
    expr: JSONPath = Root()
    for segment in JSONPathMatcher.parse_path_segments(path):
        if isinstance(segment, int):
            expr = Child(expr, Index(segment))
        else:
            expr = Child(expr, Fields(segment))
    return expr
