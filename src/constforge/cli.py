"""CLI entry point: ``constforge scan|duplicates|validate|usage|show``."""

from __future__ import annotations

# Singleton logging before the rest of the package is imported
from constforge.logging_config import set_level, setup_logging

setup_logging()

import argparse  # noqa: E402
import asyncio  # noqa: E402
import sys  # noqa: E402
from collections.abc import Callable  # noqa: E402
from pathlib import Path  # noqa: E402

from constforge import __version__  # noqa: E402
from constforge.analysis.analyzer import (  # noqa: E402
    MigrationAnalyzer,
    build_report,
)
from constforge.analysis.duplicates import find_duplicates  # noqa: E402
from constforge.analysis.report import (  # noqa: E402
    render_duplicates,
    render_scan,
    render_usage,
    render_validation,
)
from constforge.analysis.schemas import FileScanResult  # noqa: E402
from constforge.analysis.usage import find_binding_usages  # noqa: E402
from constforge.config import Settings  # noqa: E402
from constforge.constants import (  # noqa: E402
    DUPLICATE_MIN_DEFINITIONS,
    EXIT_FINDINGS,
    EXIT_OK,
    EXIT_TOOL_FAILURE,
    Environment,
    ReportFormat,
    ValueDomain,
)
from constforge.errors import (  # noqa: E402
    BootstrapIntegrityError,
    CatalogError,
    RuleFileError,
    ScanRootError,
)
from constforge.registry.catalog import ConstantGraph, load_catalog  # noqa: E402
from constforge.validation.rules import load_rule_file  # noqa: E402
from constforge.validation.validator import ConstantValidator  # noqa: E402

_TOOL_ERRORS = (
    BootstrapIntegrityError,
    CatalogError,
    RuleFileError,
    ScanRootError,
)


def main(argv: list[str] | None = None) -> None:
    """Main CLI entry point."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    if args.version:
        print(f"constforge {__version__}")
        return

    handlers: dict[str, Callable[[argparse.Namespace, Settings], int]] = {
        "scan": _run_scan,
        "duplicates": _run_duplicates,
        "validate": _run_validate,
        "usage": _run_usage,
        "show": _run_show,
    }
    handler = handlers.get(args.command or "")
    if handler is None:
        parser.print_help()
        return

    settings = Settings()
    set_level("INFO" if args.verbose else settings.log_level)
    try:
        code = handler(args, settings)
    except _TOOL_ERRORS as exc:
        print(f"Error: {exc}", file=sys.stderr)
        code = EXIT_TOOL_FAILURE
    sys.exit(code)


def _build_parser() -> argparse.ArgumentParser:
    """Build the argument parser."""
    parser = argparse.ArgumentParser(
        prog="constforge",
        description=(
            "Unify scattered literals: layered constants, "
            "validation, and migration analysis."
        ),
    )
    parser.add_argument(
        "--version",
        action="store_true",
        help="Print version and exit",
    )

    # Shared by every subcommand
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument(
        "--catalog",
        "-c",
        default=None,
        help="Constant catalog file (default: from settings)",
    )
    common.add_argument(
        "--environment",
        "-e",
        choices=[e.value for e in Environment],
        default=None,
        help="Apply the catalog's environment overrides",
    )
    common.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Enable verbose output",
    )

    sub = parser.add_subparsers(dest="command")

    scan = sub.add_parser(
        "scan",
        parents=[common],
        help="Find literals duplicating registered values",
    )
    scan.add_argument(
        "root_dir",
        type=str,
        help="Directory (or single file) to scan",
    )
    scan.add_argument(
        "--domain",
        "-d",
        choices=[d.value for d in ValueDomain],
        default=None,
        help="Only match values of this domain",
    )
    scan.add_argument(
        "--format",
        "-f",
        choices=[f.value for f in ReportFormat],
        default=ReportFormat.TABLE.value,
        help="Report format (default: table)",
    )
    scan.add_argument(
        "--parallel",
        "-p",
        action="store_true",
        help="Scan files concurrently",
    )

    duplicates = sub.add_parser(
        "duplicates",
        help="Find literals defined under several names (no catalog needed)",
    )
    duplicates.add_argument(
        "root_dir",
        type=str,
        help="Directory (or single file) to search",
    )
    duplicates.add_argument(
        "--min-count",
        "-m",
        type=_min_count,
        default=DUPLICATE_MIN_DEFINITIONS,
        help="Definitions needed to report a value (default: 2)",
    )
    duplicates.add_argument(
        "--format",
        "-f",
        choices=[f.value for f in ReportFormat],
        default=ReportFormat.TABLE.value,
        help="Report format (default: table)",
    )
    duplicates.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Enable verbose output",
    )

    validate = sub.add_parser(
        "validate",
        parents=[common],
        help="Check ordering/range rules (CI gate)",
    )
    validate.add_argument(
        "--rules",
        "-r",
        default=None,
        help="Rule file, YAML or JSON (default: from settings)",
    )
    validate.add_argument(
        "--format",
        "-f",
        choices=[f.value for f in ReportFormat],
        default=ReportFormat.TABLE.value,
        help="Report format (default: table)",
    )

    usage = sub.add_parser(
        "usage",
        parents=[common],
        help="Count references to semantic names and legacy aliases",
    )
    usage.add_argument(
        "root_dir",
        type=str,
        help="Directory to search",
    )
    usage.add_argument(
        "--format",
        "-f",
        choices=[f.value for f in ReportFormat],
        default=ReportFormat.TABLE.value,
        help="Report format (default: table)",
    )

    sub.add_parser(
        "show",
        parents=[common],
        help="Print composed bundles and legacy aliases",
    )

    return parser


def _min_count(raw: str) -> int:
    value = int(raw)
    if value < 2:
        msg = f"must be at least 2, got {value}"
        raise argparse.ArgumentTypeError(msg)
    return value


def _catalog_path(args: argparse.Namespace, settings: Settings) -> Path:
    return Path(args.catalog) if args.catalog else settings.catalog_path


def _load_graph(
    args: argparse.Namespace, settings: Settings
) -> ConstantGraph:
    environment = args.environment or settings.environment
    return load_catalog(_catalog_path(args, settings), environment)


def _run_scan(args: argparse.Namespace, settings: Settings) -> int:
    """Execute the scan command."""
    root = Path(args.root_dir)
    if not root.exists():
        print(f"Error: {root} does not exist", file=sys.stderr)
        return EXIT_TOOL_FAILURE

    graph = _load_graph(args, settings)
    analyzer = MigrationAnalyzer(
        graph.registry.snapshot(),
        graph.layer,
        settings=settings,
        domain=args.domain,
    )

    if args.parallel:
        try:
            report = asyncio.run(analyzer.scan_parallel(root))
        except KeyboardInterrupt:
            # Worker results are discarded when the event loop is cancelled
            report = build_report([], interrupted=True)
    else:
        results: list[FileScanResult] = []
        interrupted = False
        try:
            for result in analyzer.scan_files(root):
                results.append(result)
        except KeyboardInterrupt:
            interrupted = True
        report = build_report(results, interrupted=interrupted)

    print(render_scan(report, args.format))
    return EXIT_FINDINGS if report.has_findings else EXIT_OK


def _run_duplicates(args: argparse.Namespace, settings: Settings) -> int:
    """Execute the duplicates command."""
    report = find_duplicates(
        args.root_dir, settings, min_count=args.min_count
    )
    print(render_duplicates(report, args.format))
    return EXIT_FINDINGS if report.has_findings else EXIT_OK


def _run_validate(args: argparse.Namespace, settings: Settings) -> int:
    """Execute the validate command."""
    graph = _load_graph(args, settings)
    validator = ConstantValidator(graph.layer, graph.rule_sets)

    rules_path = Path(args.rules) if args.rules else settings.rules_path
    if rules_path is not None:
        for rule_set in load_rule_file(rules_path):
            validator.add_rule_set(rule_set)

    report = validator.validate_all()
    print(render_validation(report, args.format))
    return EXIT_OK if report.passed else EXIT_FINDINGS


def _run_usage(args: argparse.Namespace, settings: Settings) -> int:
    """Execute the usage command."""
    graph = _load_graph(args, settings)
    usages = find_binding_usages(
        args.root_dir,
        graph.layer,
        graph.bridge,
        settings=settings,
        exclude=[_catalog_path(args, settings)],
    )
    print(render_usage(usages, args.format))
    return EXIT_OK


def _run_show(args: argparse.Namespace, settings: Settings) -> int:
    """Execute the show command."""
    graph = _load_graph(args, settings)
    env = f" [{graph.environment}]" if graph.environment else ""
    print(
        f"{len(graph.registry)} atomic values, "
        f"{len(graph.layer)} semantic names{env}"
    )
    for bundle in graph.composer.bundles():
        print()
        print(bundle.summary())

    aliases = graph.bridge.migration_map()
    if aliases:
        print()
        print("Legacy aliases:")
        for old_name, new_name in aliases.items():
            print(f"  {old_name} -> {new_name}")
    return EXIT_OK


if __name__ == "__main__":
    main()
