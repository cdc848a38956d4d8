"""Function records — the per-function result handed to reporting."""

from dataclasses import dataclass

from fnloc.analysis.complexity import ComplexityMetrics
from fnloc.analysis.lines import LineCounts
from fnloc.parser.base import FunctionSpan


@dataclass(frozen=True)
class FunctionRecord:
    """Immutable metrics for one function, method or closure."""

    name: str              # qualified name, e.g. "analyzer::Stack::push"
    file_path: str
    start_line: int
    end_line: int
    kind: str
    lines: LineCounts
    metrics: ComplexityMetrics

    @property
    def total(self) -> int:
        return self.lines.total

    @property
    def code(self) -> int:
        return self.lines.code

    @property
    def comment(self) -> int:
        return self.lines.comment

    @property
    def blank(self) -> int:
        return self.lines.blank

    @property
    def complexity(self) -> int:
        return self.metrics.complexity

    @property
    def nesting(self) -> int:
        return self.metrics.nesting

    def to_dict(self) -> dict:
        """Convert to a flat dictionary for JSON and CSV output."""
        return {
            "name": self.name,
            "file": self.file_path,
            "start_line": self.start_line,
            "end_line": self.end_line,
            "kind": self.kind,
            "total": self.total,
            "code": self.code,
            "comment": self.comment,
            "empty": self.blank,
            "complexity": self.complexity,
            "nesting": self.nesting,
        }


def build_record(
    span: FunctionSpan,
    file_path: str,
    lines: LineCounts,
    metrics: ComplexityMetrics,
) -> FunctionRecord:
    """Merge a span with its line counts and complexity metrics."""
    if lines.total != span.line_count:
        raise ValueError(
            f"{span.qualified_name}: {lines.total} counted lines for a "
            f"{span.line_count}-line span"
        )
    return FunctionRecord(
        name=span.qualified_name,
        file_path=file_path,
        start_line=span.start_line,
        end_line=span.end_line,
        kind=span.kind,
        lines=lines,
        metrics=metrics,
    )
