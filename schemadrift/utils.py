"""Utility functions for SchemaDrift engine."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import yaml

from .classifier import classify
from .exceptions import DocumentLoadError, MaxDepthExceededError
from .models import JsonType


def build_path(parent_path: str, key: str | int) -> str:
    """
    Build a change path from parent path and key.

    Object keys are joined with '.', array indices use '[i]'. The root is
    the empty path, so a top-level key has no leading dot.
    """
    if isinstance(key, int):
        return f"{parent_path}[{key}]"
    if not parent_path:
        return key
    return f"{parent_path}.{key}"


def get_json_size_mb(obj: Any) -> float:
    """Get the approximate size of a JSON object in megabytes."""
    json_str = json.dumps(obj)
    return len(json_str.encode('utf-8')) / (1024 * 1024)


def check_depth(data: Any, max_depth: int) -> int:
    """
    Measure nesting depth, failing as soon as it passes max_depth.

    Scalars have depth 0, an empty container depth 1. Non-JSON values are
    reported by classify. Iterative so that deep documents cannot exhaust
    the interpreter stack before the limit is seen.

    Returns:
        The depth of the document

    Raises:
        MaxDepthExceededError: nesting is deeper than max_depth
        UnsupportedValueError: a value is not JSON-representable
    """
    deepest = 0
    stack = [(data, "", 0)]

    while stack:
        value, path, depth = stack.pop()
        value_type = classify(value)
        if not value_type.is_container:
            continue

        depth += 1
        if depth > max_depth:
            raise MaxDepthExceededError(max_depth, path)
        deepest = max(deepest, depth)

        if value_type == JsonType.OBJECT:
            for key, child in value.items():
                stack.append((child, build_path(path, str(key)), depth))
        else:
            for i, child in enumerate(value):
                stack.append((child, build_path(path, i), depth))

    return deepest


def load_document(path: str | Path) -> Any:
    """
    Load a JSON or YAML document from disk.

    Files ending in .json are parsed with the json module; anything else
    goes through yaml.safe_load (which also accepts JSON).

    Raises:
        DocumentLoadError: file is missing, unreadable or cannot be parsed
    """
    path = Path(path)
    if not path.exists():
        raise DocumentLoadError(str(path), "file not found")

    try:
        with open(path, 'r', encoding='utf-8') as f:
            content = f.read()
    except UnicodeDecodeError as e:
        raise DocumentLoadError(str(path), f"not valid UTF-8 at byte {e.start}")
    except OSError as e:
        raise DocumentLoadError(str(path), e.strerror or str(e))

    if path.suffix.lower() == '.json':
        try:
            return json.loads(content)
        except json.JSONDecodeError as e:
            raise DocumentLoadError(str(path), f"invalid JSON at line {e.lineno}, column {e.colno}: {e.msg}")

    try:
        return yaml.safe_load(content)
    except yaml.YAMLError as e:
        raise DocumentLoadError(str(path), f"invalid YAML: {e}")
