#!/usr/bin/env python
"""Run SchemaDrift over a folder of before/after datasets."""

import argparse
import sys

from schemadrift.cli import main as cli_main


def main():
    parser = argparse.ArgumentParser(
        description="Analyze SchemaDrift datasets",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python run_drift_report.py datasets/ report.json
  python run_drift_report.py -d datasets/ -r report.json -c drift.yaml
        """
    )

    parser.add_argument("datasets", nargs="?", help="Path to folder containing dataset files")
    parser.add_argument("report", nargs="?", help="Path to output JSON report file")

    # Also support named arguments
    parser.add_argument("-d", "--datasets", dest="datasets_named", help="Path to datasets folder")
    parser.add_argument("-r", "--report", dest="report_named", help="Path to output report")
    parser.add_argument("-c", "--config", help="Path to YAML/JSON config file")
    parser.add_argument("-q", "--quiet", action="store_true", help="Suppress console output")

    args = parser.parse_args()

    # Use named args if positional not provided
    datasets_path = args.datasets or args.datasets_named
    report_path = args.report or args.report_named

    if not datasets_path:
        parser.error("Datasets path is required")

    argv = ["batch", datasets_path]
    if report_path:
        argv += ["-r", report_path]
    if args.config:
        argv += ["-c", args.config]
    if args.quiet:
        argv.append("-q")

    return cli_main(argv)


if __name__ == "__main__":
    sys.exit(main())
