"""Structural diffing of two JSON documents."""

from __future__ import annotations

from typing import Any, Union

from .classifier import classify
from .models import (
    AddedField,
    Change,
    DiffReport,
    JsonType,
    RemovedField,
    TypeChanged,
)
from .utils import build_path


# A pending comparison (old, new, path), or a change whose emission is
# deferred until the comparisons pushed above it have finished.
_Task = Union[tuple, Change]


class Differ:
    """
    Walks an old and a new JSON tree in lock-step and records how their
    shapes diverge.

    Handles:
    - Type changes (no descent below a mismatch)
    - Object keys removed, added, or shared (shared keys are descended)
    - Arrays compared by position; length differences become trailing
      removals or additions

    Values are only ever classified, never compared: two strings with
    different content are the same shape.

    The walk uses an explicit stack rather than recursion, so nesting depth
    is bounded by memory, not by the interpreter's recursion limit.
    """

    def __init__(self):
        self.changes: list[Change] = []

    def diff(self, old: Any, new: Any, path: str = "") -> None:
        """
        Compare the values found at the same path in both trees.

        Changes are recorded depth-first in the same order a recursive walk
        would produce them.

        Args:
            old: Value in the old document
            new: Value in the new document
            path: Path of both values relative to the root
        """
        stack: list[_Task] = [(old, new, path)]

        while stack:
            task = stack.pop()
            if not isinstance(task, tuple):
                self.changes.append(task)
                continue

            old_value, new_value, value_path = task
            old_type = classify(old_value)
            new_type = classify(new_value)

            if old_type != new_type:
                self.changes.append(TypeChanged(path=value_path, old_type=old_type, new_type=new_type))
                continue

            if old_type == JsonType.OBJECT:
                self._diff_objects(old_value, new_value, value_path, stack)
            elif old_type == JsonType.ARRAY:
                self._diff_arrays(old_value, new_value, value_path, stack)

    def _diff_objects(self, old: dict, new: dict, path: str, stack: list[_Task]) -> None:
        """Compare two objects by key presence, then queue the shared keys."""
        for key, value in old.items():
            if key not in new:
                self.changes.append(RemovedField(
                    path=build_path(path, str(key)),
                    old_type=classify(value)
                ))

        for key, value in new.items():
            if key not in old:
                self.changes.append(AddedField(
                    path=build_path(path, str(key)),
                    new_type=classify(value)
                ))

        shared = [(value, new[key], build_path(path, str(key))) for key, value in old.items() if key in new]
        # reversed so the first shared key is popped first
        stack.extend(reversed(shared))

    def _diff_arrays(self, old: list, new: list, path: str, stack: list[_Task]) -> None:
        """Compare arrays index-by-index (order matters)."""
        min_len = min(len(old), len(new))

        # pushed in reverse: prefix comparisons, then removals, then additions
        for i in reversed(range(min_len, len(new))):
            stack.append(AddedField(
                path=build_path(path, i),
                new_type=classify(new[i])
            ))

        for i in reversed(range(min_len, len(old))):
            stack.append(RemovedField(
                path=build_path(path, i),
                old_type=classify(old[i])
            ))

        for i in reversed(range(min_len)):
            stack.append((old[i], new[i], build_path(path, i)))


def diff_schemas(old: Any, new: Any) -> DiffReport:
    """
    Compare the shapes of two JSON documents.

    Args:
        old: The baseline document (typically the current API response)
        new: The candidate document (typically the next version's response)

    Returns:
        DiffReport with the ordered changes and their summary
    """
    differ = Differ()
    differ.diff(old, new)
    return DiffReport(changes=tuple(differ.changes))
