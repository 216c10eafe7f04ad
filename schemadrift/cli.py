"""Command line interface for SchemaDrift."""

from __future__ import annotations

import argparse
import json
import sys
from typing import Optional

from .config import load_config
from .engine import SchemaDriftEngine, configure_logging
from .exceptions import ConfigError, DocumentLoadError
from .models import AnalysisResult, ChangeKind, EngineConfig
from .runner import DriftRunner
from .utils import load_document


EXIT_NO_CHANGES = 0
EXIT_CHANGES = 1
EXIT_ERROR = 2


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="schemadrift",
        description="Compare the shapes of two API responses and score the migration risk",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  schemadrift compare old.json new.json
  schemadrift compare old.json new.json --values -r report.json
  schemadrift compare old.json new.json --kind REMOVED_FIELD --search user
  schemadrift batch datasets/ -c drift.yaml -r report.json
        """
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    compare = subparsers.add_parser("compare", help="Compare two JSON/YAML documents")
    compare.add_argument("old", help="Path to the old (baseline) document")
    compare.add_argument("new", help="Path to the new document")
    compare.add_argument("--values", action="store_true", help="Include old/new values in the report")
    compare.add_argument(
        "--kind",
        action="append",
        choices=[kind.value for kind in ChangeKind],
        help="Only show changes of this kind (repeatable)"
    )
    compare.add_argument("--search", help="Only show changes whose path contains this text")

    batch = subparsers.add_parser("batch", help="Analyze a folder of before/after datasets")
    batch.add_argument("datasets", help="Path to folder containing dataset JSON/YAML files")

    for sub in (compare, batch):
        sub.add_argument("-c", "--config", help="Path to YAML/JSON config file")
        sub.add_argument("-r", "--report", help="Path to output JSON report file")
        sub.add_argument("-q", "--quiet", action="store_true", help="Suppress console output")

    return parser


def _load_engine_config(path: Optional[str]) -> EngineConfig:
    if not path:
        return EngineConfig()
    return load_config(path)


def _write_report(path: str, data: dict) -> None:
    with open(path, 'w', encoding='utf-8') as f:
        json.dump(data, indent=2, fp=f)


def print_result(result: AnalysisResult) -> None:
    """Print the change table, summary and risk score."""
    report = result.report
    if report.changes:
        width = max(len("Path"), *(len(path or "<root>") for path in report.paths()))
        print(f"{'Path':<{width}}  {'Change Type':<13}  Details")
        for change in report.changes:
            if change.kind == ChangeKind.REMOVED_FIELD:
                details = f"Removed: {change.old_type.value}"
            elif change.kind == ChangeKind.ADDED_FIELD:
                details = f"Added: {change.new_type.value}"
            else:
                details = f"{change.old_type.value} -> {change.new_type.value}"
            print(f"{change.path or '<root>':<{width}}  {change.kind.label:<13}  {details}")
    else:
        print("No schema changes detected")

    summary = report.summary
    print(f"\nAdded Fields: {summary.added}")
    print(f"Removed Fields: {summary.removed}")
    print(f"Risky Changes: {summary.risky}")
    print(f"Migration Risk Score: {result.score}/100 ({result.risk_level.label})")


def run_compare(args) -> int:
    config = _load_engine_config(args.config)
    if args.values:
        config.include_values = True
    configure_logging(config.log_level)

    old = load_document(args.old)
    new = load_document(args.new)

    result = SchemaDriftEngine(config).analyze(old, new)
    if not isinstance(result, AnalysisResult):
        print(f"Error: {result.error['message']}", file=sys.stderr)
        if args.report:
            _write_report(args.report, result.to_dict())
        return EXIT_ERROR

    if args.kind or args.search:
        kinds = [ChangeKind(kind) for kind in args.kind] if args.kind else None
        filtered = result.report.filter(kinds=kinds, search=args.search)
        values = None
        if result.values is not None:
            values = [v for c, v in zip(result.report.changes, result.values) if c in filtered.changes]
        # the score always reflects the full report
        result = AnalysisResult(
            report=filtered,
            breakdown=result.breakdown,
            risk_level=result.risk_level,
            execution=result.execution,
            values=values,
        )

    if not args.quiet:
        print_result(result)

    if args.report:
        _write_report(args.report, result.to_dict())
        if not args.quiet:
            print(f"\nReport saved to: {args.report}")

    return EXIT_CHANGES if result.report.has_changes else EXIT_NO_CHANGES


def run_batch(args) -> int:
    config = _load_engine_config(args.config)
    configure_logging(config.log_level)

    if not args.quiet:
        print(f"Datasets: {args.datasets}\n")

    report = DriftRunner(config).run_folder(args.datasets, print_report=not args.quiet)

    if args.report:
        _write_report(args.report, report.to_dict())
        if not args.quiet:
            print(f"\nReport saved to: {args.report}")

    if report.errors:
        return EXIT_ERROR
    return EXIT_NO_CHANGES if report.failed == 0 else EXIT_CHANGES


def main(argv: Optional[list[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        if args.command == "compare":
            return run_compare(args)
        return run_batch(args)
    except (ConfigError, DocumentLoadError, FileNotFoundError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_ERROR


if __name__ == "__main__":
    sys.exit(main())
