"""Analysis engine: orchestrates parsing, span extraction and measurement.

For each file the engine parses once, extracts function spans, then
measures every span against the same tree:

    1. Parse source text → syntax tree (a syntax error fails the file)
    2. Extract spans → functions, methods and block closures
    3. Classify lines and walk bodies → one FunctionRecord per span

Files share nothing, so ``analyze_files`` can spread them over worker
threads; results are merged in input order either way.

Usage:
    from fnloc.engine import analyze_files

    report = analyze_files([("src/lib.rs", text)])
    for record in report.records:
        print(record.name, record.code, record.complexity)
"""

import logging
import threading
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Iterable, Optional, Sequence, Union

from fnloc.analysis.complexity import calculate_complexity
from fnloc.analysis.lines import LineClassifier, comment_regions
from fnloc.analysis.records import FunctionRecord, build_record
from fnloc.errors import ParseError, SpanError
from fnloc.parser.base import iter_spans
from fnloc.parser.rust_parser import RustParser

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SourceFile:
    """One file handed over by discovery; immutable once read."""

    path: str
    text: str
    module_prefix: tuple[str, ...] = ()


@dataclass(frozen=True)
class FileError:
    """A file that produced no records."""

    path: str
    kind: str                     # "unreadable" or "parse"
    message: str
    line: Optional[int] = None

    def to_dict(self) -> dict:
        return {
            "path": self.path,
            "kind": self.kind,
            "message": self.message,
            "line": self.line,
        }


@dataclass
class FileAnalysis:
    """Everything the engine learned about one file."""

    path: str
    records: list[FunctionRecord] = field(default_factory=list)
    error: Optional[FileError] = None
    span_errors: list[SpanError] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass
class AnalysisReport:
    """Records and failures gathered across all analyzed files."""

    records: list[FunctionRecord] = field(default_factory=list)
    errors: list[FileError] = field(default_factory=list)
    span_errors: list[tuple[str, SpanError]] = field(default_factory=list)
    files_analyzed: int = 0

    def add(self, analysis: FileAnalysis) -> None:
        if analysis.error is not None:
            self.errors.append(analysis.error)
        else:
            self.files_analyzed += 1
        self.records.extend(analysis.records)
        self.span_errors.extend((analysis.path, e) for e in analysis.span_errors)

    def to_dict(self) -> dict:
        return {
            "files_analyzed": self.files_analyzed,
            "functions": [r.to_dict() for r in self.records],
            "errors": [e.to_dict() for e in self.errors],
            "skipped_functions": [
                {"path": path, "line": e.line, "name": e.name, "message": str(e)}
                for path, e in self.span_errors
            ],
        }


class FunctionAnalyzer:
    """Turn Rust source files into function records."""

    def __init__(self, include_closures: bool = True):
        """
        Initialize the analyzer.

        Args:
            include_closures: Emit records for block closures as well
        """
        self.parser = RustParser(include_closures=include_closures)

    def analyze(self, source: SourceFile) -> FileAnalysis:
        """
        Analyze a single file.

        Args:
            source: Path and text of the file

        Returns:
            FileAnalysis with records, or with a parse error and no records
        """
        data = source.text.encode("utf-8")

        try:
            tree = self.parser.parse(data)
        except ParseError as e:
            logger.warning("Skipping %s: %s", source.path, e)
            return FileAnalysis(
                path=source.path,
                error=FileError(source.path, "parse", str(e), e.line),
            )

        spans, span_errors = self.parser.extract_spans(tree, source.module_prefix)
        classifier = LineClassifier(data, comment_regions(tree))

        flat = list(iter_spans(spans))
        closure_ids = {span.node.id for span in flat if span.kind == "closure"}

        records = []
        for span in flat:
            records.append(build_record(
                span,
                source.path,
                classifier.count(span.start_line, span.end_line),
                calculate_complexity(span.body, closure_ids),
            ))

        logger.debug("%s: %d functions", source.path, len(records))
        return FileAnalysis(path=source.path, records=records, span_errors=span_errors)


def analyze_source(
    path: str,
    text: str,
    module_prefix: Sequence[str] = (),
    include_closures: bool = True,
) -> FileAnalysis:
    """Analyze one file's text; see ``FunctionAnalyzer.analyze``."""
    analyzer = FunctionAnalyzer(include_closures=include_closures)
    return analyzer.analyze(SourceFile(path, text, tuple(module_prefix)))


SourceInput = Union[SourceFile, FileError, tuple[str, str]]


def analyze_files(
    sources: Iterable[SourceInput],
    jobs: int = 1,
    include_closures: bool = True,
) -> AnalysisReport:
    """
    Analyze many files and collect their records.

    Args:
        sources: SourceFile values or (path, text) pairs; FileError values
                 (files discovery could not read) pass straight through
        jobs: Number of worker threads (1 = analyze in the calling thread)
        include_closures: Emit records for block closures as well

    Returns:
        AnalysisReport with records in input order, unsorted and unfiltered
    """
    report = AnalysisReport()
    pending: list[SourceFile] = []
    order: list[Union[SourceFile, FileError]] = []

    for item in sources:
        if isinstance(item, tuple):
            item = SourceFile(*item)
        order.append(item)
        if isinstance(item, SourceFile):
            pending.append(item)

    if jobs > 1 and len(pending) > 1:
        local = threading.local()

        def work(source: SourceFile) -> FileAnalysis:
            # tree-sitter parsers are not shared between threads
            if not hasattr(local, "analyzer"):
                local.analyzer = FunctionAnalyzer(include_closures=include_closures)
            return local.analyzer.analyze(source)

        with ThreadPoolExecutor(max_workers=jobs) as executor:
            results = iter(list(executor.map(work, pending)))
    else:
        analyzer = FunctionAnalyzer(include_closures=include_closures)
        results = (analyzer.analyze(source) for source in pending)

    for item in order:
        if isinstance(item, FileError):
            logger.warning("Skipping %s: %s", item.path, item.message)
            report.errors.append(item)
        else:
            report.add(next(results))

    return report
