"""Migration risk scoring of a diff report."""

from __future__ import annotations

import math
from typing import Optional

from .exceptions import ConfigError
from .models import (
    Change,
    ChangeKind,
    DiffReport,
    JsonType,
    RiskLevel,
    ScoreBreakdown,
    ScoringConfig,
)


def validate_config(config: ScoringConfig) -> None:
    """Reject weightings the scoring formula cannot use."""
    for name in (
        "removed_field",
        "type_changed_structural",
        "type_changed_incompatible",
        "type_changed_compatible",
        "added_field",
    ):
        weight = getattr(config, name)
        if isinstance(weight, bool) or not isinstance(weight, (int, float)) or weight < 0:
            raise ConfigError(name, f"weight must be a non-negative number, got {weight!r}")

    if isinstance(config.decay, bool) or not isinstance(config.decay, (int, float)) or config.decay <= 0:
        raise ConfigError("decay", f"must be a positive number, got {config.decay!r}")

    for name in ("low_threshold", "medium_threshold"):
        threshold = getattr(config, name)
        if isinstance(threshold, bool) or not isinstance(threshold, int):
            raise ConfigError("thresholds", f"{name} must be an integer score, got {threshold!r}")

    if not 0 <= config.low_threshold <= config.medium_threshold:
        raise ConfigError(
            "thresholds",
            f"expected 0 <= low ({config.low_threshold}) <= medium ({config.medium_threshold})"
        )


def types_compatible(old_type: JsonType, new_type: JsonType) -> bool:
    """
    Check whether a value of one type could plausibly be read as the other.

    Any pair involving null is compatible, as is string/number in either
    order. Identical types are trivially compatible.
    """
    if old_type == JsonType.NULL or new_type == JsonType.NULL:
        return True
    if {old_type, new_type} == {JsonType.STRING, JsonType.NUMBER}:
        return True
    return old_type == new_type


def is_structural(old_type: JsonType, new_type: JsonType) -> bool:
    """A change is structural when either side is an array or object."""
    return old_type.is_container or new_type.is_container


def change_points(change: Change, config: Optional[ScoringConfig] = None) -> float:
    """Raw severity points of a single change."""
    config = config or ScoringConfig()

    if change.kind == ChangeKind.REMOVED_FIELD:
        return config.removed_field
    if change.kind == ChangeKind.ADDED_FIELD:
        return config.added_field

    if is_structural(change.old_type, change.new_type):
        return config.type_changed_structural
    if types_compatible(change.old_type, change.new_type):
        return config.type_changed_compatible
    return config.type_changed_incompatible


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def score_breakdown(report: DiffReport, config: Optional[ScoringConfig] = None) -> ScoreBreakdown:
    """
    Score a report and keep the intermediate values.

    Points are summed over all changes and squashed with
    100 * (1 - e^(-points / decay)), so each extra change adds less than
    the one before. The curve only approaches 100, but once e^(-points / decay)
    is below double precision the float result is exactly 100.0.

    Args:
        report: Report produced by diff_schemas
        config: Weights and decay constant (defaults if not provided)

    Returns:
        ScoreBreakdown with total points, unrounded and rounded scores
    """
    config = config or ScoringConfig()
    validate_config(config)

    if not report.changes:
        return ScoreBreakdown(total_points=0, raw_score=0.0, score=0, points_by_kind={})

    total_points = 0
    points_by_kind: dict[str, float] = {}
    for change in report.changes:
        points = change_points(change, config)
        total_points += points
        points_by_kind[change.kind.value] = points_by_kind.get(change.kind.value, 0) + points

    raw = 100 * (1 - math.exp(-total_points / config.decay))
    raw = max(0.0, min(100.0, raw))

    return ScoreBreakdown(
        total_points=total_points,
        raw_score=raw,
        score=max(0, min(100, round_half_up(raw))),
        points_by_kind=points_by_kind,
    )


def score_diff(report: DiffReport, config: Optional[ScoringConfig] = None) -> int:
    """
    Convert a diff report into a 0-100 migration risk score.

    An empty report scores exactly 0.
    """
    return score_breakdown(report, config).score


def risk_level(score: int, config: Optional[ScoringConfig] = None) -> RiskLevel:
    """Bucket a score into LOW / MEDIUM / HIGH."""
    config = config or ScoringConfig()
    if score < config.low_threshold:
        return RiskLevel.LOW
    if score < config.medium_threshold:
        return RiskLevel.MEDIUM
    return RiskLevel.HIGH
