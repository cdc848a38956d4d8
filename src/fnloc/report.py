"""Reporting: sort, filter and render function records.

The engine hands records over unsorted; everything about presentation
(order, thresholds, limits, output format) is decided here.
"""

import csv
import io
import json
from typing import Callable, Iterable, Optional

from rich import box
from rich.table import Table

from fnloc.analysis.records import FunctionRecord

# sort name -> (key on the record, descending?)
SORT_KEYS: dict[str, tuple[Callable[[FunctionRecord], int | str], bool]] = {
    "code": (lambda r: r.code, True),
    "total": (lambda r: r.total, True),
    "comments": (lambda r: r.comment, True),
    "complexity": (lambda r: r.complexity, True),
    "nesting": (lambda r: r.nesting, True),
    "name": (lambda r: r.name, False),
}

FORMATS = ("table", "text", "json", "csv")

CSV_HEADER = [
    "Function",
    "File",
    "Start",
    "End",
    "Total Lines",
    "Code Lines",
    "Comment Lines",
    "Empty Lines",
    "Cyclomatic Complexity",
    "Nesting Depth",
]


# ---------------------------------------------------------------------------
# Selection
# ---------------------------------------------------------------------------

def sort_records(records: Iterable[FunctionRecord], sort_by: str = "code") -> list[FunctionRecord]:
    """
    Sort records; numeric keys descend, ties fall back to name ascending.

    Args:
        records: Records to sort
        sort_by: One of SORT_KEYS

    Returns:
        New sorted list (stable)
    """
    if sort_by not in SORT_KEYS:
        raise ValueError(f"unknown sort key: {sort_by}")
    key, descending = SORT_KEYS[sort_by]

    # Two stable passes: name first, then the primary key
    ordered = sorted(records, key=lambda r: r.name)
    if sort_by != "name":
        ordered.sort(key=key, reverse=descending)
    return ordered


def filter_records(
    records: Iterable[FunctionRecord],
    min_lines: int = 0,
    min_complexity: int = 0,
    min_nesting: int = 0,
) -> list[FunctionRecord]:
    """Keep records at or above every threshold (total lines, complexity, nesting)."""
    return [
        r for r in records
        if r.total >= min_lines
        and r.complexity >= min_complexity
        and r.nesting >= min_nesting
    ]


def select_records(
    records: Iterable[FunctionRecord],
    sort_by: str = "code",
    min_lines: int = 0,
    min_complexity: int = 0,
    min_nesting: int = 0,
    limit: Optional[int] = None,
) -> list[FunctionRecord]:
    """Filter, sort, then cut to ``limit`` records."""
    selected = sort_records(
        filter_records(records, min_lines, min_complexity, min_nesting),
        sort_by,
    )
    if limit is not None:
        selected = selected[:limit]
    return selected


# ---------------------------------------------------------------------------
# Output formats
# ---------------------------------------------------------------------------

def format_summary_line(record: FunctionRecord) -> str:
    """One-line summary of a function, as printed by the text format."""
    return (
        f"  - fn {record.name}: total={record.total} lines, code={record.code}, "
        f"comment={record.comment}, empty={record.blank}, "
        f"complexity={record.complexity}, nesting={record.nesting}"
    )


def format_text(records: Iterable[FunctionRecord]) -> str:
    return "\n".join(format_summary_line(r) for r in records)


def format_json(records: Iterable[FunctionRecord]) -> str:
    return json.dumps([r.to_dict() for r in records], indent=2)


def format_csv(records: Iterable[FunctionRecord]) -> str:
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(CSV_HEADER)
    for r in records:
        writer.writerow([
            r.name, r.file_path, r.start_line, r.end_line,
            r.total, r.code, r.comment, r.blank, r.complexity, r.nesting,
        ])
    return buffer.getvalue()


def _color(value: int, warn: int, bad: int) -> str:
    # green below warn, yellow up to bad, red above
    if value < warn:
        return f"[green]{value}[/green]"
    elif value < bad:
        return f"[yellow]{value}[/yellow]"
    else:
        return f"[red]{value}[/red]"


def build_table(records: Iterable[FunctionRecord], title: str = "Function Metrics") -> Table:
    """Build a rich table with one row per function."""
    table = Table(title=title, box=box.SIMPLE_HEAVY)
    table.add_column("Function", style="cyan", overflow="fold")
    table.add_column("Location", style="dim", overflow="fold")
    table.add_column("Total", justify="right")
    table.add_column("Code", justify="right", style="green")
    table.add_column("Comment", justify="right")
    table.add_column("Empty", justify="right")
    table.add_column("Complexity", justify="center")
    table.add_column("Nesting", justify="center")

    for r in records:
        table.add_row(
            r.name,
            f"{r.file_path}:{r.start_line}-{r.end_line}",
            str(r.total),
            str(r.code),
            str(r.comment),
            str(r.blank),
            _color(r.complexity, 11, 21),
            _color(r.nesting, 4, 6),
        )
    return table
