"""Line Classification — code, comment and blank lines per function.

Every line in a function span is put in exactly one bucket:

    blank:    nothing but whitespace (wins over everything else)
    comment:  every non-whitespace byte belongs to a comment token
    code:     anything else, including code with a trailing comment

Comment regions come from the parsed tree's comment tokens rather than
from searching for ``//`` and ``/*``, so comment-like text inside string
and char literals never counts as a comment.
"""

import re
from dataclasses import dataclass
from typing import Iterable

from tree_sitter import Parser, Tree

from fnloc.parser.rust_parser import RUST_LANGUAGE

COMMENT_NODE_TYPES = frozenset({"line_comment", "block_comment"})

_WHITESPACE = frozenset(b" \t\r\n\x0b\x0c")


@dataclass(frozen=True)
class LineCounts:
    """Line composition of one function span."""

    total: int
    code: int
    comment: int
    blank: int

    def __post_init__(self):
        if self.total != self.code + self.comment + self.blank:
            raise ValueError(
                f"line counts do not add up: {self.code} code + {self.comment} "
                f"comment + {self.blank} blank != {self.total} total"
            )


def comment_regions(tree: Tree) -> list[tuple[int, int]]:
    """
    Collect the byte ranges of every comment token in a tree.

    Args:
        tree: A parsed Rust file

    Returns:
        (start_byte, end_byte) pairs in source order
    """
    regions = []
    stack = [tree.root_node]
    while stack:
        node = stack.pop()
        if node.type in COMMENT_NODE_TYPES:
            regions.append((node.start_byte, node.end_byte))
            continue
        stack.extend(reversed(node.children))
    return regions


class LineClassifier:
    """Classify the lines of one file against its comment regions."""

    def __init__(self, source: bytes, regions: Iterable[tuple[int, int]]):
        self._source = source
        self._line_starts = [0] + [m.end() for m in re.finditer(b"\n", source)]

        # One flag per byte: 1 where the byte sits inside a comment token
        mask = bytearray(len(source))
        for start, end in regions:
            mask[start:end] = b"\x01" * (end - start)
        self._mask = mask

    @property
    def line_count(self) -> int:
        return len(self._line_starts)

    def classify(self, line_no: int) -> str:
        """Return 'blank', 'comment' or 'code' for a 1-indexed line."""
        if not 1 <= line_no <= self.line_count:
            raise ValueError(f"line {line_no} outside 1..{self.line_count}")

        start = self._line_starts[line_no - 1]
        end = self._line_starts[line_no] if line_no < self.line_count else len(self._source)

        seen_text = False
        for offset in range(start, end):
            if self._source[offset] in _WHITESPACE:
                continue
            seen_text = True
            if not self._mask[offset]:
                return "code"
        return "comment" if seen_text else "blank"

    def count(self, start_line: int, end_line: int) -> LineCounts:
        """
        Count line kinds over an inclusive, 1-indexed line range.

        Args:
            start_line: First line of the range
            end_line: Last line of the range

        Returns:
            LineCounts with total == end_line - start_line + 1
        """
        if start_line > end_line:
            raise ValueError(f"empty line range {start_line}..{end_line}")

        buckets = {"code": 0, "comment": 0, "blank": 0}
        for line_no in range(start_line, end_line + 1):
            buckets[self.classify(line_no)] += 1

        return LineCounts(
            total=end_line - start_line + 1,
            code=buckets["code"],
            comment=buckets["comment"],
            blank=buckets["blank"],
        )


def count_lines(code: str, start_line: int = 1, end_line: int | None = None) -> LineCounts:
    """
    Break down a range of Rust source lines into line categories.

    Parses the text to find its comment tokens; the text does not need to
    be free of syntax errors.

    Args:
        code: Source code string
        start_line: First line to count (1-indexed)
        end_line: Last line to count (default: last line of the text)

    Returns:
        LineCounts for the range

    Example:
        >>> count_lines("fn f() {\\n\\n    // comment\\n}")
        LineCounts(total=4, code=2, comment=1, blank=1)
    """
    source = code.encode("utf-8")
    tree = Parser(RUST_LANGUAGE).parse(source)
    classifier = LineClassifier(source, comment_regions(tree))
    if end_line is None:
        end_line = classifier.line_count
    return classifier.count(start_line, end_line)
