"""Parser Module — Reads Rust source and locates function definitions.

Supported languages:
    - Rust (via tree-sitter)

The parser extracts, per function-like definition:
    - Qualified name (module path, impl/trait owner, function name)
    - First signature line and closing-brace line
    - The body node, for the complexity walk
    - Nested functions and block closures as child spans

Usage:
    from fnloc.parser import RustParser

    parser = RustParser()
    tree = parser.parse(source_bytes)
    spans, skipped = parser.extract_spans(tree)
"""

from fnloc.parser.base import CodeParser, FunctionSpan, iter_spans
from fnloc.parser.rust_parser import RUST_LANGUAGE, RustParser

__all__ = [
    "CodeParser",
    "FunctionSpan",
    "iter_spans",
    "RUST_LANGUAGE",
    "RustParser",
]
