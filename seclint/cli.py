"""Command-line entry point for the security lints."""

from __future__ import annotations

import argparse
import json
import logging
from pathlib import Path
from typing import Iterable, List

import yaml

from .config import LintConfig, load_config
from .diagnostics import DiagnosticSink, format_summary_table
from .engine import run
from .errors import ConfigError
from .registry import RuleRegistry, register
from .utils import iter_dump_files, load_unit

DEFAULT_DUMP_DIRS = ("dumps",)
DEFAULT_CONFIG = "seclint.yaml"

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Security lints over semantic tree dumps",
    )
    parser.add_argument(
        "--dump",
        "-d",
        dest="dump_paths",
        action="append",
        default=[],
        help="Tree dump file or directory of dumps to lint (repeatable).",
    )
    parser.add_argument(
        "--config",
        default=DEFAULT_CONFIG,
        help="Path to the YAML lint configuration (optional).",
    )
    parser.add_argument(
        "--format",
        choices=["json"],
        default="json",
        help="Report format for file output (defaults to json).",
    )
    parser.add_argument(
        "--out",
        "--output",
        dest="output_path",
        type=str,
        default=None,
        help="Path to write the structured report (e.g., artifacts/lint.json).",
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Log engine decisions at debug level.",
    )
    return parser


def load_registry(config_path: str) -> RuleRegistry:
    try:
        config = load_config(Path(config_path)) or LintConfig()
    except (ConfigError, yaml.YAMLError) as exc:
        raise SystemExit(f"Invalid configuration {config_path}: {exc}") from exc
    return register(config)


def run_lints(dump_paths: Iterable[str], registry: RuleRegistry) -> DiagnosticSink:
    report = DiagnosticSink()
    for path in iter_dump_files(dump_paths):
        try:
            unit = load_unit(path)
        except (ValueError, yaml.YAMLError) as exc:
            raise SystemExit(f"Failed to load tree dump {path}: {exc}") from exc
        if unit is None:
            continue
        logger.info("Linting %s", path)
        report.extend(run(unit, registry))
    return report


def write_output(report: DiagnosticSink, output_path: str | None, report_format: str) -> None:
    summary = format_summary_table(report)
    print(summary)

    if report_format == "json":
        payload = json.dumps(report.to_dict(), indent=2)
        if output_path:
            output_file = Path(output_path)
            output_file.parent.mkdir(parents=True, exist_ok=True)
            output_file.write_text(payload, encoding="utf-8")
            print(f"\nReport written to {output_path}")
        else:
            print("\nJSON Report")
            print(payload)


def main(argv: List[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    dumps = args.dump_paths or list(DEFAULT_DUMP_DIRS)
    registry = load_registry(args.config)
    report = run_lints(dumps, registry)
    write_output(report, args.output_path, args.format)
    return report.exit_code()


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
