"""Error types raised and recorded during function analysis.

File-scoped and function-scoped failures never abort a run: the engine
turns them into values (``FileError`` / ``SpanError``) on the report.
Only discovery and configuration errors stop the command line tool.
"""

from typing import Optional


class FnlocError(Exception):
    """Base class for every error raised by fnloc."""


class ParseError(FnlocError):
    """The syntax tree for a file could not be built without errors."""

    def __init__(self, message: str, line: Optional[int] = None):
        super().__init__(message)
        self.line = line


class UnreadableFileError(FnlocError):
    """A source file could not be read or decoded as UTF-8."""

    def __init__(self, path: str, reason: str):
        super().__init__(f"cannot read {path}: {reason}")
        self.path = path
        self.reason = reason


class SpanError(FnlocError):
    """A single function definition whose boundaries could not be resolved."""

    def __init__(self, message: str, line: int, name: Optional[str] = None):
        super().__init__(message)
        self.line = line
        self.name = name

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, SpanError):
            return NotImplemented
        return (str(self), self.line, self.name) == (str(other), other.line, other.name)

    def __hash__(self) -> int:
        return hash((str(self), self.line, self.name))


class DirectoryNotAccessibleError(FnlocError):
    """The directory to scan does not exist or cannot be listed."""

    def __init__(self, directory: str):
        super().__init__(f"Directory not accessible: {directory}")
        self.directory = directory


class NoSourceFilesError(FnlocError):
    """The directory to scan holds no Rust source file."""

    def __init__(self, directory: str):
        super().__init__(f"No Rust files found in directory: {directory}")
        self.directory = directory


class ConfigError(FnlocError):
    """An option or environment override has an invalid value."""
