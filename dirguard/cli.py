"""Command-line entry point for dirguard."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import List, Optional, Sequence

from .config import DEFAULT_CONFIG_FILE, Config, load_config
from .errors import ConfigError, DirectoryEnumerationError, ScanError
from .flatten import (
    ConcatenationStyle,
    generate_single_file,
    relevant_source_files,
    write_git_patch,
)
from .options import ScanScope
from .policies import Finding, PolicyEvaluator, PolicyLike, has_failures
from .policies.max_violations import MaxViolationsPolicy
from .policies.no_empty_dirs import NoEmptyDirsMode, NoEmptyDirsPolicy
from .result import ScanResult, format_summary_table
from .rules import Rule, default_rules
from .service import ScanService

logger = logging.getLogger(__name__)

DEFAULT_IGNORED_SUFFIXES = (".h", ".m", "README", "Package.swift", "Tests")
EXIT_ERROR = 2


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="dirguard",
        description="Scan directory trees for naming and structure problems and evaluate policies.",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="count",
        default=0,
        help="Increase log verbosity (-v info, -vv debug).",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    scan = subparsers.add_parser("scan", help="Scan one or more roots and evaluate policies.")
    scan.add_argument("roots", nargs="+", help="Directories to scan.")
    scan.add_argument(
        "--scope",
        choices=[scope.value for scope in ScanScope],
        default=None,
        help="Restrict the scan to .docc bundles or scan everything (default: all).",
    )
    scan.add_argument(
        "--ignore",
        dest="ignore_prefixes",
        action="append",
        default=[],
        help="Additional name prefix/suffix to ignore (repeatable).",
    )
    scan.add_argument(
        "--no-default-ignores",
        action="store_true",
        help="Do not apply the built-in ignore list.",
    )
    scan.add_argument(
        "--follow-symlinks",
        action="store_true",
        default=None,
        help="Traverse symbolic links instead of skipping them.",
    )
    scan.add_argument(
        "--concurrency",
        type=int,
        default=None,
        help="Concurrency hint (advisory; the scan itself is single-threaded).",
    )
    scan.add_argument(
        "--config",
        default=None,
        help=f"Path to a YAML config file (defaults to {DEFAULT_CONFIG_FILE} if present).",
    )
    scan.add_argument(
        "--max-violations",
        type=int,
        default=None,
        help="Fail when more than N violations are found.",
    )
    scan.add_argument(
        "--rule",
        dest="rule_ids",
        action="append",
        default=None,
        help="Restrict --max-violations to this rule id (repeatable; requires --max-violations).",
    )
    scan.add_argument(
        "--no-empty-dirs",
        choices=[NoEmptyDirsMode.STRICT_ZERO.value, NoEmptyDirsMode.IGNORE_NOISE.value],
        default=None,
        help="Fail when empty directories exist under the roots.",
    )
    scan.add_argument(
        "--out",
        "--output",
        dest="output_path",
        default=None,
        help="Path to write the JSON report (e.g., artifacts/scan.json).",
    )

    flatten = subparsers.add_parser("flatten", help="Merge source files into a single file.")
    flatten.add_argument("sources", nargs="+", help="Directories containing the text-based files.")
    flatten.add_argument("-o", "--output", dest="output_path", required=True, help="Output file path.")
    flatten.add_argument(
        "-p",
        "--prefix",
        dest="prefixes",
        action="append",
        default=[],
        help="Only include files whose names start with the given prefix (repeatable).",
    )
    flatten.add_argument(
        "-x",
        "--ignore-suffix",
        dest="ignored_suffixes",
        action="append",
        default=[],
        help="Ignore files whose names end with the given suffix (repeatable).",
    )
    flatten.add_argument(
        "-a",
        "--allow-suffix",
        dest="allowed_suffixes",
        action="append",
        default=[],
        help="Only include files whose names end with the given suffix (repeatable).",
    )
    flatten.add_argument(
        "-s",
        "--style",
        choices=[style.value for style in ConcatenationStyle],
        default=ConcatenationStyle.STRING.value,
        help="Concatenation style used before writing the output.",
    )
    flatten.add_argument(
        "--patch",
        action="store_true",
        help="Write a git patch that recreates the files instead of a merged file.",
    )
    return parser


def configure_logging(verbosity: int) -> None:
    level = logging.WARNING
    if verbosity == 1:
        level = logging.INFO
    elif verbosity >= 2:
        level = logging.DEBUG
    logging.basicConfig(level=level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")


def load_rules() -> List[Rule]:
    return default_rules()


def _load_config(config_path: Optional[str]) -> Config:
    if config_path:
        path = Path(config_path)
        if not path.exists():
            raise ConfigError(f"Config file not found: {config_path}")
    else:
        path = Path(DEFAULT_CONFIG_FILE)
    return load_config(path) or Config()


def build_policies(args: argparse.Namespace, config: Config, roots: Sequence[str]) -> List[PolicyLike]:
    policies = config.build_policies(roots)
    if args.max_violations is not None:
        policies.append(MaxViolationsPolicy(limit=args.max_violations, rule_ids=args.rule_ids))
    if args.no_empty_dirs is not None:
        policies.append(NoEmptyDirsPolicy(mode=args.no_empty_dirs, roots=roots))
    return policies


def run_scan(args: argparse.Namespace) -> int:
    config = _load_config(args.config)
    if args.scope is not None:
        config.scan["scope"] = args.scope
    if args.no_default_ignores:
        config.scan["ignore_prefixes"] = []
    if args.ignore_prefixes:
        config.scan["extra_ignore_prefixes"] = list(config.scan.get("extra_ignore_prefixes", [])) + args.ignore_prefixes
    if args.follow_symlinks:
        config.scan["follow_symlinks"] = True
    if args.concurrency is not None:
        config.scan["concurrency"] = args.concurrency

    options = config.options(args.roots)
    result = ScanService(options, rules=load_rules()).run()
    findings = PolicyEvaluator().evaluate(result, build_policies(args, config, options.roots))
    write_output(result, findings, args.output_path)
    return max((finding.severity.exit_priority for finding in findings), default=0)


def write_output(result: ScanResult, findings: Sequence[Finding], output_path: Optional[str]) -> None:
    print(format_summary_table(result, findings))

    if output_path:
        payload = json.dumps(
            {
                "result": result.to_dict(),
                "findings": [finding.to_dict() for finding in findings],
                "passed": not has_failures(findings),
            },
            indent=2,
        )
        output_file = Path(output_path)
        output_file.parent.mkdir(parents=True, exist_ok=True)
        output_file.write_text(payload, encoding="utf-8")
        print(f"\nReport written to {output_path}")


def run_flatten(args: argparse.Namespace) -> int:
    ignored = list(DEFAULT_IGNORED_SUFFIXES) + args.ignored_suffixes
    source_files: List[Path] = []
    for source in args.sources:
        directory = Path(source).expanduser()
        try:
            source_files.extend(relevant_source_files(directory, ignored, args.allowed_suffixes))
        except DirectoryEnumerationError as exc:
            logger.warning("%s", exc)
    if args.prefixes:
        source_files = [path for path in source_files if any(path.name.startswith(prefix) for prefix in args.prefixes)]

    output = Path(args.output_path).expanduser()
    if args.patch:
        write_git_patch(source_files, output)
    else:
        generate_single_file(source_files, output, style=ConcatenationStyle(args.style))
    print(f"Single file generated at: {output}")
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.command == "scan" and args.rule_ids and args.max_violations is None:
        parser.error("--rule requires --max-violations")
    configure_logging(args.verbose)
    try:
        if args.command == "scan":
            return run_scan(args)
        return run_flatten(args)
    except (ScanError, ConfigError) as exc:
        sys.stderr.write(f"dirguard: {exc}\n")
        return EXIT_ERROR


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
