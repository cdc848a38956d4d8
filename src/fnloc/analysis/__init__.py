"""fnloc Analysis — line classification, complexity/nesting and function records."""

from fnloc.analysis.complexity import ComplexityMetrics, ComplexityVisitor, calculate_complexity
from fnloc.analysis.lines import LineClassifier, LineCounts, comment_regions, count_lines
from fnloc.analysis.records import FunctionRecord, build_record

__all__ = [
    "ComplexityMetrics",
    "ComplexityVisitor",
    "calculate_complexity",
    "LineClassifier",
    "LineCounts",
    "comment_regions",
    "count_lines",
    "FunctionRecord",
    "build_record",
]
