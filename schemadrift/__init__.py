"""
SchemaDrift - API Response Shape Diffing and Migration Risk Scoring

A stateless library that compares an old and a new version of the same API
response, reports how their shapes diverge (removed fields, added fields,
type changes) and condenses the report into a 0-100 migration risk score.
"""

from .classifier import classify
from .differ import Differ, diff_schemas
from .scorer import (
    change_points,
    risk_level,
    score_breakdown,
    score_diff,
    types_compatible,
)
from .engine import SchemaDriftEngine, analyze
from .config import load_config
from .models import (
    AddedField,
    AnalysisResult,
    ChangeKind,
    DiffReport,
    EngineConfig,
    ErrorResponse,
    JsonType,
    RemovedField,
    RiskLevel,
    ScoreBreakdown,
    ScoringConfig,
    Summary,
    TypeChanged,
)
from .runner import (
    DriftRunner,
    GlobalReport,
    ScenarioResult,
    run_folder,
)

__version__ = "1.0.0"
__all__ = [
    # Core
    "classify",
    "diff_schemas",
    "score_diff",
    "score_breakdown",
    "change_points",
    "types_compatible",
    "risk_level",
    "Differ",
    # Engine
    "SchemaDriftEngine",
    "EngineConfig",
    "ScoringConfig",
    "analyze",
    "load_config",
    # Reports
    "DiffReport",
    "Summary",
    "RemovedField",
    "AddedField",
    "TypeChanged",
    "ChangeKind",
    "JsonType",
    "RiskLevel",
    "ScoreBreakdown",
    "AnalysisResult",
    "ErrorResponse",
    # Batch Runner
    "DriftRunner",
    "GlobalReport",
    "ScenarioResult",
    "run_folder",
]
