"""fnloc CLI - Per-function line, complexity and nesting metrics for Rust code."""

import argparse
import logging
import sys
from pathlib import Path
from typing import Optional

from rich.console import Console

from fnloc import __version__
from fnloc.config import FnlocConfig
from fnloc.discovery import find_rust_files, read_sources
from fnloc.engine import AnalysisReport, analyze_files
from fnloc.errors import ConfigError, DirectoryNotAccessibleError, NoSourceFilesError
from fnloc.logging_config import setup_logging
from fnloc.report import (
    FORMATS,
    SORT_KEYS,
    build_table,
    format_csv,
    format_json,
    format_text,
    select_records,
)

console = Console()
err_console = Console(stderr=True)

logger = logging.getLogger(__name__)


def run_analysis(config: FnlocConfig) -> int:
    """Analyze every Rust file under the configured directory and print the results."""
    machine_output = config.output_format in ("json", "csv")
    status_console = err_console if machine_output else console

    if config.verbose:
        status_console.print(f"Analyzing directory: {config.directory}")
        status_console.print(f"Minimum lines filter: {config.min_lines}")
        if config.limit is not None:
            status_console.print(f"Display limit: {config.limit}")
        status_console.print(f"Sort by: {config.sort}")
        status_console.print(f"Output format: {config.output_format}")
        status_console.print()

    root = Path(config.directory)
    try:
        files = find_rust_files(root, config.exclude_dirs)
    except (DirectoryNotAccessibleError, NoSourceFilesError) as e:
        err_console.print(f"[red]Error:[/red] {e}")
        return 1

    logger.debug("Found %d Rust files under %s", len(files), root)

    if not machine_output and not config.quiet:
        console.print(f"[bold]Analyzing {len(files)} Rust files...[/bold]\n")

    report = analyze_files(
        read_sources(files, root),
        jobs=config.jobs,
        include_closures=config.include_closures,
    )

    records = select_records(
        report.records,
        sort_by=config.sort,
        min_lines=config.min_lines,
        min_complexity=config.min_complexity,
        min_nesting=config.min_nesting,
        limit=config.limit,
    )

    if config.output_format == "json":
        print(format_json(records))
    elif config.output_format == "csv":
        print(format_csv(records), end="")
    elif config.output_format == "text":
        if records:
            print(format_text(records))
    else:
        console.print(build_table(records, title=f"Functions ({len(records)} shown)"))

    _print_errors(report, status_console)
    return 0


def _print_errors(report: AnalysisReport, out: Console) -> None:
    if not report.errors and not report.span_errors:
        return

    out.print(f"\n[yellow]{len(report.errors)} file(s) could not be analyzed:[/yellow]")
    for error in report.errors:
        where = f"{error.path}:{error.line}" if error.line else error.path
        out.print(f"  • {where} ({error.kind}): {error.message}", markup=False)
    for path, span_error in report.span_errors:
        out.print(f"  • {path}:{span_error.line} (skipped function): {span_error}", markup=False)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="fnloc",
        description=(
            "Function analyzer for Rust code - counts code, comment and empty "
            "lines, cyclomatic complexity and nesting depth per function"
        ),
    )
    parser.add_argument(
        "directory",
        nargs="?",
        default=None,
        help="Directory to scan for Rust files (default: ./src)",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        default=None,
        help="Enable verbose output",
    )
    parser.add_argument(
        "-q", "--quiet",
        action="store_true",
        default=None,
        help="Only report errors",
    )
    parser.add_argument(
        "-m", "--min-lines",
        type=int,
        default=None,
        help="Minimum total lines for a function to be shown (default: 0)",
    )
    parser.add_argument(
        "--min-complexity",
        type=int,
        default=None,
        help="Minimum cyclomatic complexity to be shown (default: 0)",
    )
    parser.add_argument(
        "--min-nesting",
        type=int,
        default=None,
        help="Minimum nesting depth to be shown (default: 0)",
    )
    parser.add_argument(
        "-l", "--limit",
        type=int,
        default=None,
        help="Maximum number of functions to display",
    )
    parser.add_argument(
        "-s", "--sort",
        choices=list(SORT_KEYS),
        default=None,
        help="Sort criteria for function listing (default: code)",
    )
    parser.add_argument(
        "-f", "--format",
        dest="output_format",
        choices=list(FORMATS),
        default=None,
        help="Output format (default: table)",
    )
    parser.add_argument(
        "-j", "--jobs",
        type=int,
        default=None,
        help="Number of files analyzed in parallel (default: 1)",
    )
    parser.add_argument(
        "--no-closures",
        dest="include_closures",
        action="store_false",
        default=None,
        help="Do not report block closures as separate functions",
    )
    parser.add_argument(
        "--exclude",
        dest="exclude_dirs",
        action="append",
        default=None,
        metavar="DIR",
        help="Directory name to skip (repeatable; default: target, .git)",
    )
    return parser


def main(argv: Optional[list[str]] = None) -> int:
    """Main entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    overrides = vars(args)
    if overrides["exclude_dirs"] is not None:
        overrides["exclude_dirs"] = tuple(overrides["exclude_dirs"])

    try:
        config = FnlocConfig.from_env().with_overrides(**overrides)
    except ConfigError as e:
        parser.print_usage(sys.stderr)
        err_console.print(f"[red]Error:[/red] {e}")
        return 2

    setup_logging(verbose=config.verbose, quiet=config.quiet)
    return run_analysis(config)


if __name__ == "__main__":
    sys.exit(main())
