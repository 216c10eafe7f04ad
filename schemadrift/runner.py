"""Batch runner for folders of before/after datasets."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Optional

from .engine import SchemaDriftEngine
from .exceptions import DocumentLoadError
from .models import AnalysisResult, EngineConfig, RiskLevel
from .utils import load_document


logger = logging.getLogger(__name__)

DATASET_PATTERNS = ("*.json", "*.yaml", "*.yml")


@dataclass
class ScenarioResult:
    """Result of a single dataset."""
    name: str
    dataset_path: str
    passed: bool
    score: Optional[int] = None
    risk_level: Optional[RiskLevel] = None
    summary: Optional[dict] = None
    changes: list = field(default_factory=list)
    error: Optional[dict] = None

    def to_dict(self) -> dict:
        result = {
            "name": self.name,
            "dataset_path": self.dataset_path,
            "passed": self.passed,
        }
        if self.error:
            result["error"] = self.error
            return result
        result["score"] = self.score
        result["risk_level"] = self.risk_level.value if self.risk_level else None
        result["summary"] = self.summary
        result["changes"] = self.changes
        return result


@dataclass
class GlobalReport:
    """Global report across all datasets."""
    total: int = 0
    passed: int = 0
    failed: int = 0
    errors: int = 0
    max_score: int = 0
    scenarios: list[ScenarioResult] = field(default_factory=list)
    breakdown: dict[str, list[str]] = field(default_factory=dict)
    timestamp: str = ""

    def __post_init__(self):
        if not self.timestamp:
            self.timestamp = datetime.now(timezone.utc).isoformat().replace('+00:00', 'Z')
        if not self.breakdown:
            self.breakdown = {
                "no_changes": [],
                "with_changes": [],
                "low_risk": [],
                "medium_risk": [],
                "high_risk": [],
                "fields_removed": [],
                "fields_added": [],
                "type_changes": [],
                "errors": [],
            }

    def add(self, result: ScenarioResult) -> None:
        """Record one dataset result and update the breakdown."""
        self.scenarios.append(result)
        self.total += 1

        if result.error:
            self.errors += 1
            self.breakdown["errors"].append(result.name)
            return

        if result.passed:
            self.passed += 1
            self.breakdown["no_changes"].append(result.name)
        else:
            self.failed += 1
            self.breakdown["with_changes"].append(result.name)

        self.max_score = max(self.max_score, result.score or 0)
        if result.risk_level is not None:
            self.breakdown[f"{result.risk_level.value.lower()}_risk"].append(result.name)

        summary = result.summary or {}
        if summary.get("removed"):
            self.breakdown["fields_removed"].append(result.name)
        if summary.get("added"):
            self.breakdown["fields_added"].append(result.name)
        if summary.get("risky"):
            self.breakdown["type_changes"].append(result.name)

    def to_dict(self) -> dict:
        pass_rate = f"{(self.passed / self.total * 100):.1f}%" if self.total > 0 else "0.0%"
        return {
            "timestamp": self.timestamp,
            "summary": {
                "total_datasets": self.total,
                "unchanged": self.passed,
                "changed": self.failed,
                "errors": self.errors,
                "unchanged_rate": pass_rate,
                "max_score": self.max_score,
            },
            "breakdown": self.breakdown,
            "scenarios": [s.to_dict() for s in self.scenarios]
        }

    def print_summary(self):
        pass_rate = f"{(self.passed / self.total * 100):.1f}%" if self.total > 0 else "0.0%"
        print(f"\nDrift Results: {self.passed}/{self.total} unchanged ({pass_rate})")
        if self.failed > 0:
            print(f"  Changed: {self.failed}")
        if self.errors > 0:
            print(f"  Errors: {self.errors}")
        print(f"  Highest risk score: {self.max_score}/100")

        for key, label in (
            ("low_risk", "Low risk"),
            ("medium_risk", "Medium risk"),
            ("high_risk", "High risk"),
            ("fields_removed", "Fields removed"),
            ("fields_added", "Fields added"),
            ("type_changes", "Type changes"),
        ):
            if self.breakdown.get(key):
                print(f"  {label}: {len(self.breakdown[key])} datasets")


class DriftRunner:
    """Runs before/after datasets through the analysis engine."""

    def __init__(self, engine_config: Optional[EngineConfig] = None):
        self.engine_config = engine_config or EngineConfig()
        self.engine = SchemaDriftEngine(self.engine_config)

    def run_dataset(self, dataset: Any, name: str, dataset_path: str) -> ScenarioResult:
        """Analyze a single ``{"before": ..., "after": ...}`` dataset."""
        if not isinstance(dataset, dict) or "before" not in dataset or "after" not in dataset:
            return ScenarioResult(
                name=name,
                dataset_path=dataset_path,
                passed=False,
                error={
                    "code": "DATASET_FORMAT_ERROR",
                    "message": "dataset must be an object with 'before' and 'after'"
                }
            )

        result = self.engine.analyze(dataset["before"], dataset["after"])

        if not isinstance(result, AnalysisResult):
            return ScenarioResult(
                name=name,
                dataset_path=dataset_path,
                passed=False,
                error=result.error
            )

        result_dict = result.to_dict()
        return ScenarioResult(
            name=name,
            dataset_path=dataset_path,
            passed=result.is_match,
            score=result.score,
            risk_level=result.risk_level,
            summary=result_dict["summary"],
            changes=result_dict["changes"],
        )

    def run_folder(self, folder: str | Path, print_report: bool = True) -> GlobalReport:
        """Run all dataset files in a folder."""
        folder_path = Path(folder)
        if not folder_path.is_dir():
            raise FileNotFoundError(f"Datasets folder not found: {folder_path}")

        report = GlobalReport()
        files = sorted({p for pattern in DATASET_PATTERNS for p in folder_path.glob(pattern)})

        for dataset_file in files:
            dataset_path = str(dataset_file)
            try:
                dataset = load_document(dataset_file)
            except DocumentLoadError as e:
                logger.warning("Skipping unreadable dataset %s: %s", dataset_path, e.reason)
                result = ScenarioResult(
                    name=dataset_file.stem,
                    dataset_path=dataset_path,
                    passed=False,
                    error={"code": "DOCUMENT_LOAD_ERROR", "message": str(e)}
                )
            else:
                name = dataset_file.stem
                if isinstance(dataset, dict) and isinstance(dataset.get("name"), str):
                    name = dataset["name"]
                result = self.run_dataset(dataset, name, dataset_path)

            report.add(result)

            if print_report:
                if result.error:
                    print(f"ERROR: {result.name}: {result.error.get('message')}")
                elif result.passed:
                    print(f"UNCHANGED: {result.name}")
                else:
                    print(f"CHANGED: {result.name} (score {result.score}, {result.risk_level.label})")

        logger.debug("Ran %d datasets from %s", report.total, folder_path)

        if print_report:
            report.print_summary()

        return report


def run_folder(
    test_folder: str | Path,
    engine_config: Optional[EngineConfig] = None,
    print_report: bool = True
) -> GlobalReport:
    """
    Analyze every dataset in a folder.

    This is the simplest way to run a batch:

        from schemadrift.runner import run_folder
        report = run_folder("datasets/")

    Args:
        test_folder: Folder with dataset JSON/YAML files
        engine_config: Optional engine configuration
        print_report: Whether to print per-dataset lines and the summary

    Returns:
        GlobalReport with all results
    """
    runner = DriftRunner(engine_config)
    return runner.run_folder(test_folder, print_report)
