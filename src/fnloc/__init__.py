"""fnloc — per-function line counts, cyclomatic complexity and nesting depth for Rust."""

__version__ = "0.1.0"

from fnloc.analysis.records import FunctionRecord
from fnloc.engine import AnalysisReport, FileError, SourceFile, analyze_files, analyze_source

__all__ = [
    "__version__",
    "AnalysisReport",
    "FileError",
    "FunctionRecord",
    "SourceFile",
    "analyze_files",
    "analyze_source",
]
