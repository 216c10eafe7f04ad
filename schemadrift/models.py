"""Data models for SchemaDrift engine."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Iterable, Optional, Union

from .exceptions import ReportFormatError


class LogLevel(Enum):
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARN = "WARN"
    ERROR = "ERROR"


class JsonType(Enum):
    NULL = "null"
    BOOLEAN = "boolean"
    NUMBER = "number"
    STRING = "string"
    ARRAY = "array"
    OBJECT = "object"

    @property
    def is_container(self) -> bool:
        return self in (JsonType.ARRAY, JsonType.OBJECT)


class ChangeKind(Enum):
    REMOVED_FIELD = "REMOVED_FIELD"
    ADDED_FIELD = "ADDED_FIELD"
    TYPE_CHANGED = "TYPE_CHANGED"

    @property
    def label(self) -> str:
        return self.value.replace("_", " ")


class RiskLevel(Enum):
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"

    @property
    def label(self) -> str:
        return f"{self.value.capitalize()} Risk"


@dataclass(frozen=True)
class RemovedField:
    """A key or array position present in old, absent in new."""
    path: str
    old_type: JsonType
    kind: ChangeKind = field(default=ChangeKind.REMOVED_FIELD, init=False)

    def to_dict(self) -> dict:
        return {
            "kind": self.kind.value,
            "path": self.path,
            "oldType": self.old_type.value,
        }


@dataclass(frozen=True)
class AddedField:
    """A key or array position absent in old, present in new."""
    path: str
    new_type: JsonType
    kind: ChangeKind = field(default=ChangeKind.ADDED_FIELD, init=False)

    def to_dict(self) -> dict:
        return {
            "kind": self.kind.value,
            "path": self.path,
            "newType": self.new_type.value,
        }


@dataclass(frozen=True)
class TypeChanged:
    """A location present on both sides whose classified types differ."""
    path: str
    old_type: JsonType
    new_type: JsonType
    kind: ChangeKind = field(default=ChangeKind.TYPE_CHANGED, init=False)

    @property
    def is_structural(self) -> bool:
        return self.old_type.is_container or self.new_type.is_container

    def to_dict(self) -> dict:
        return {
            "kind": self.kind.value,
            "path": self.path,
            "oldType": self.old_type.value,
            "newType": self.new_type.value,
        }


Change = Union[RemovedField, AddedField, TypeChanged]


def change_from_dict(data: dict) -> Change:
    """Rebuild a change from its ``to_dict`` form."""
    if not isinstance(data, dict):
        raise ReportFormatError(f"Change entry must be an object, got {type(data).__name__}")

    try:
        kind = ChangeKind(data.get("kind"))
        path = data["path"]
        if not isinstance(path, str):
            raise ReportFormatError(f"Change path must be a string: {path!r}")

        if kind == ChangeKind.REMOVED_FIELD:
            return RemovedField(path=path, old_type=JsonType(data["oldType"]))
        if kind == ChangeKind.ADDED_FIELD:
            return AddedField(path=path, new_type=JsonType(data["newType"]))
        return TypeChanged(
            path=path,
            old_type=JsonType(data["oldType"]),
            new_type=JsonType(data["newType"]),
        )
    except KeyError as e:
        raise ReportFormatError(f"Change entry is missing field {e.args[0]!r}: {data}")
    except ValueError as e:
        raise ReportFormatError(f"Invalid change entry {data}: {e}")


@dataclass(frozen=True)
class Summary:
    """Aggregate counts, always derived from a change list."""
    added: int = 0
    removed: int = 0
    risky: int = 0

    @classmethod
    def from_changes(cls, changes: Iterable[Change]) -> "Summary":
        added = removed = risky = 0
        for change in changes:
            if change.kind == ChangeKind.ADDED_FIELD:
                added += 1
            elif change.kind == ChangeKind.REMOVED_FIELD:
                removed += 1
            else:
                risky += 1
        return cls(added=added, removed=removed, risky=risky)

    def to_dict(self) -> dict:
        return {
            "added": self.added,
            "removed": self.removed,
            "risky": self.risky,
        }


@dataclass(frozen=True)
class DiffReport:
    """
    Ordered, path-qualified changes between two JSON documents.

    Produced by a single ``diff_schemas`` call and never mutated afterwards.
    The summary is computed from the changes, so the two cannot disagree.
    """
    changes: tuple = ()
    summary: Summary = field(init=False)

    def __post_init__(self):
        changes = tuple(self.changes)
        object.__setattr__(self, "changes", changes)
        object.__setattr__(self, "summary", Summary.from_changes(changes))

    @property
    def has_changes(self) -> bool:
        return len(self.changes) > 0

    def __len__(self) -> int:
        return len(self.changes)

    def __iter__(self):
        return iter(self.changes)

    def paths(self) -> list[str]:
        return [c.path for c in self.changes]

    def filter(
        self,
        kinds: Optional[Iterable[ChangeKind]] = None,
        search: Optional[str] = None
    ) -> "DiffReport":
        """
        Return a new report restricted to some change kinds and/or paths.

        Args:
            kinds: Change kinds to keep (all kinds if not provided)
            search: Case-insensitive substring the path must contain

        Returns:
            A new DiffReport; its summary reflects the filtered changes
        """
        wanted = set(kinds) if kinds else None
        needle = search.lower() if search else None

        kept = []
        for change in self.changes:
            if wanted is not None and change.kind not in wanted:
                continue
            if needle and needle not in change.path.lower():
                continue
            kept.append(change)

        return DiffReport(changes=tuple(kept))

    def to_dict(self) -> dict:
        return {
            "changes": [c.to_dict() for c in self.changes],
            "summary": self.summary.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "DiffReport":
        """Load a report previously exported with ``to_dict``."""
        if not isinstance(data, dict) or "changes" not in data:
            raise ReportFormatError("Report must be an object with a 'changes' list")
        if not isinstance(data["changes"], list):
            raise ReportFormatError("Report 'changes' must be a list")

        report = cls(changes=tuple(change_from_dict(c) for c in data["changes"]))

        # Exported summaries are checked against the change list
        summary = data.get("summary")
        if summary is not None and summary != report.summary.to_dict():
            raise ReportFormatError(
                f"Summary {summary} does not match changes {report.summary.to_dict()}"
            )
        return report


@dataclass
class ScoringConfig:
    """Severity weights, decay constant and risk level thresholds."""
    removed_field: float = 40
    type_changed_structural: float = 35
    type_changed_incompatible: float = 25
    type_changed_compatible: float = 15
    added_field: float = 5
    decay: float = 50.0
    low_threshold: int = 31
    medium_threshold: int = 71


@dataclass
class EngineConfig:
    """Global configuration for the analysis engine."""
    max_depth: int = 100
    max_payload_size_mb: float = 50
    include_values: bool = False
    log_level: LogLevel = LogLevel.INFO
    scoring: ScoringConfig = field(default_factory=ScoringConfig)


@dataclass(frozen=True)
class ScoreBreakdown:
    """How a score was reached."""
    total_points: float
    raw_score: float
    score: int
    points_by_kind: dict = field(default_factory=dict)

    def to_dict(self) -> dict:
        return {
            "total_points": self.total_points,
            "raw_score": self.raw_score,
            "score": self.score,
            "points_by_kind": dict(self.points_by_kind),
        }


@dataclass
class ExecutionInfo:
    """Execution metadata."""
    duration_ms: int
    timestamp: str
    engine_version: str = "1.0.0"

    def to_dict(self) -> dict:
        return {
            "duration_ms": self.duration_ms,
            "timestamp": self.timestamp,
            "engine_version": self.engine_version,
        }


@dataclass
class AnalysisResult:
    """A diff report together with its risk assessment."""
    report: DiffReport
    breakdown: ScoreBreakdown
    risk_level: RiskLevel
    execution: ExecutionInfo
    values: Optional[list] = None
    success: bool = True

    @property
    def score(self) -> int:
        return self.breakdown.score

    @property
    def is_match(self) -> bool:
        return not self.report.has_changes

    def to_dict(self) -> dict:
        changes = [c.to_dict() for c in self.report.changes]
        if self.values is not None:
            for entry, (old_value, new_value) in zip(changes, self.values):
                entry["oldValue"] = old_value
                entry["newValue"] = new_value

        return {
            "success": self.success,
            "score": self.score,
            "risk_level": self.risk_level.value,
            "risk_label": self.risk_level.label,
            "breakdown": self.breakdown.to_dict(),
            "summary": self.report.summary.to_dict(),
            "changes": changes,
            "execution": self.execution.to_dict(),
        }


@dataclass
class ErrorResponse:
    """Error response structure."""
    success: bool = False
    error: Optional[dict] = None

    def to_dict(self) -> dict:
        result: dict[str, Any] = {"success": self.success}
        if self.error:
            result["error"] = self.error
        return result
