"""Base parser interface and span models."""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterator, Sequence

from tree_sitter import Node, Tree

from fnloc.errors import SpanError


@dataclass(frozen=True)
class FunctionSpan:
    """Where one function-like definition lives in its file.

    Spans nest one way only: a parent owns its nested functions and
    closures through ``children``, a child never points back.
    """

    name: str
    qualified_name: str
    start_line: int   # 1-indexed, first line of the signature
    end_line: int     # 1-indexed, line of the closing brace
    kind: str         # "function", "method" or "closure"

    # Syntax nodes stay out of equality and repr; they belong to one tree.
    node: Node = field(compare=False, repr=False)
    body: Node = field(compare=False, repr=False)
    children: tuple["FunctionSpan", ...] = ()

    @property
    def line_count(self) -> int:
        return self.end_line - self.start_line + 1

    def walk(self) -> Iterator["FunctionSpan"]:
        """Yield this span and every descendant in source order."""
        yield self
        for child in self.children:
            yield from child.walk()


def iter_spans(spans: Sequence[FunctionSpan]) -> Iterator[FunctionSpan]:
    """Flatten a span forest in pre-order (which is source order)."""
    for span in spans:
        yield from span.walk()


class CodeParser(ABC):
    """Abstract base class for language-specific parsers."""

    @property
    @abstractmethod
    def language(self) -> str:
        """Return the language this parser handles (e.g., 'rust')."""
        pass

    @property
    @abstractmethod
    def file_extensions(self) -> list[str]:
        """Return file extensions this parser handles (e.g., ['.rs'])."""
        pass

    @abstractmethod
    def parse(self, source: bytes) -> Tree:
        """
        Parse source bytes into a syntax tree.

        Args:
            source: UTF-8 encoded file contents

        Returns:
            The syntax tree

        Raises:
            ParseError: if the tree contains syntax errors
        """
        pass

    @abstractmethod
    def extract_spans(
        self,
        tree: Tree,
        module_prefix: Sequence[str] = (),
    ) -> tuple[list[FunctionSpan], list[SpanError]]:
        """
        Locate every function-like definition in a parsed file.

        Args:
            tree: Tree returned by ``parse``
            module_prefix: Module path of the file, prepended to names

        Returns:
            Top-level spans (nested ones hang off ``children``) and the
            definitions that had to be skipped
        """
        pass

    def can_parse(self, file_path: Path) -> bool:
        """Check if this parser can handle the given file."""
        return file_path.suffix.lower() in self.file_extensions
