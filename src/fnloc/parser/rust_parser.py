"""Rust parser using tree-sitter."""

import itertools
import logging
from dataclasses import dataclass, field
from typing import Iterator, Optional, Sequence

import tree_sitter_rust as tsrust
from tree_sitter import Language, Parser, Node, Tree

from fnloc.errors import ParseError, SpanError
from .base import CodeParser, FunctionSpan

logger = logging.getLogger(__name__)

RUST_LANGUAGE = Language(tsrust.language())


@dataclass
class _PendingSpan:
    """A span whose children are still being collected."""

    name: str
    qualified_name: str
    start_line: int
    end_line: int
    kind: str
    node: Node
    body: Node
    children: list["_PendingSpan"] = field(default_factory=list)

    def freeze(self) -> FunctionSpan:
        return FunctionSpan(
            name=self.name,
            qualified_name=self.qualified_name,
            start_line=self.start_line,
            end_line=self.end_line,
            kind=self.kind,
            node=self.node,
            body=self.body,
            children=tuple(child.freeze() for child in self.children),
        )


# (node, scope, closure counter of the owning function, direct impl/trait item?, output list)
_WalkItem = tuple[Node, list[str], Optional[Iterator[int]], bool, list[_PendingSpan]]


class RustParser(CodeParser):
    """Parse Rust source files and extract function spans."""

    def __init__(self, include_closures: bool = True):
        self._parser = Parser(RUST_LANGUAGE)
        self.include_closures = include_closures

    @property
    def language(self) -> str:
        return "rust"

    @property
    def file_extensions(self) -> list[str]:
        return [".rs"]

    def parse(self, source: bytes) -> Tree:
        """Parse a file, refusing trees that contain ERROR or MISSING nodes."""
        tree = self._parser.parse(source)
        if tree.root_node.has_error:
            bad = _first_error(tree.root_node)
            line = bad.start_point[0] + 1 if bad is not None else 1
            if bad is not None and bad.is_missing:
                raise ParseError(f"missing '{bad.type}' near line {line}", line=line)
            raise ParseError(f"syntax error near line {line}", line=line)
        return tree

    def extract_spans(
        self,
        tree: Tree,
        module_prefix: Sequence[str] = (),
    ) -> tuple[list[FunctionSpan], list[SpanError]]:
        """Collect function, method and closure spans in source order."""
        spans: list[_PendingSpan] = []
        errors: list[SpanError] = []
        self._collect(tree.root_node, list(module_prefix), spans, errors)
        return [span.freeze() for span in spans], errors

    def _collect(
        self,
        root: Node,
        scope: list[str],
        out: list[_PendingSpan],
        errors: list[SpanError],
    ) -> None:
        """
        Walk the tree looking for function-like definitions.

        The walk keeps its own stack so that deeply nested expressions
        cannot exhaust the interpreter's recursion limit. Nodes are popped
        in source order, which keeps both the span lists and the closure
        numbering in source order.

        Each stack entry carries the closure counter of the function that
        owns that part of the tree (None outside any function body, where
        closures are not collected) and whether the node is a direct item
        of an impl or trait body.
        """
        stack: list[_WalkItem] = []
        _push_children(stack, root, scope, None, False, out)

        while stack:
            node, scope, closures, in_type, out = stack.pop()
            kind = node.type

            if kind == "function_item":
                span = self._function_span(node, scope, in_type, errors)
                if span is not None:
                    out.append(span)
                    _push_children(
                        stack, span.body, scope + [span.name], itertools.count(), False, span.children
                    )

            elif kind == "mod_item":
                name_node = node.child_by_field_name("name")
                body = node.child_by_field_name("body")
                # `mod foo;` declares a module that lives in another file
                if name_node is not None and body is not None:
                    _push_children(stack, body, scope + [_text(name_node)], None, False, out)

            elif kind in ("impl_item", "trait_item"):
                owner = _owner_name(node)
                body = node.child_by_field_name("body")
                if body is not None:
                    inner_scope = scope + [owner] if owner else scope
                    _push_children(stack, body, inner_scope, None, True, out)

            elif kind == "closure_expression" and closures is not None and self.include_closures:
                span = self._closure_span(node, scope, closures)
                if span is not None:
                    out.append(span)
                    _push_children(
                        stack, span.body, scope + [span.name], itertools.count(), False, span.children
                    )
                else:
                    _push_children(stack, node, scope, closures, False, out)

            else:
                _push_children(stack, node, scope, closures, False, out)

    def _function_span(
        self,
        node: Node,
        scope: list[str],
        in_type: bool,
        errors: list[SpanError],
    ) -> Optional[_PendingSpan]:
        """Start the span of a ``fn`` item, or record why it was skipped."""
        name_node = node.child_by_field_name("name")
        body = node.child_by_field_name("body")
        line = node.start_point[0] + 1

        if name_node is None or body is None or body.type != "block":
            name = _text(name_node) if name_node is not None else None
            error = SpanError(f"cannot resolve body of function at line {line}", line, name)
            logger.warning("Skipping function at line %d: body not resolvable", line)
            errors.append(error)
            return None

        name = _text(name_node)
        return _PendingSpan(
            name=name,
            qualified_name="::".join(scope + [name]),
            start_line=line,
            end_line=body.end_point[0] + 1,
            kind="method" if in_type else "function",
            node=node,
            body=body,
        )

    def _closure_span(
        self,
        node: Node,
        scope: list[str],
        closures: Iterator[int],
    ) -> Optional[_PendingSpan]:
        """Start the span of a block closure; expression closures yield None."""
        body = node.child_by_field_name("body")
        if body is None or body.type != "block":
            return None

        name = f"{{closure#{next(closures)}}}"
        return _PendingSpan(
            name=name,
            qualified_name="::".join(scope + [name]),
            start_line=node.start_point[0] + 1,
            end_line=body.end_point[0] + 1,
            kind="closure",
            node=node,
            body=body,
        )


# ── Tree helpers ───────────────────────────────────────────────


def _push_children(
    stack: list[_WalkItem],
    node: Node,
    scope: list[str],
    closures: Optional[Iterator[int]],
    in_type: bool,
    out: list[_PendingSpan],
) -> None:
    # reversed, so the first child is popped first
    stack.extend((child, scope, closures, in_type, out) for child in reversed(node.children))


def _text(node: Node) -> str:
    return node.text.decode("utf-8")


def _owner_name(node: Node) -> Optional[str]:
    """
    Name of the type an impl block implements, or of a trait.

    Generic arguments and paths are dropped:
    ``impl<T> fmt::Display for crate::Stack<T>`` -> ``Stack``.
    """
    if node.type == "trait_item":
        name_node = node.child_by_field_name("name")
        return _text(name_node) if name_node is not None else None

    type_node = node.child_by_field_name("type")
    while type_node is not None:
        if type_node.type == "generic_type":
            type_node = type_node.child_by_field_name("type")
        elif type_node.type == "scoped_type_identifier":
            type_node = type_node.child_by_field_name("name")
        elif type_node.type == "reference_type":
            type_node = type_node.child_by_field_name("type")
        else:
            return _text(type_node)
    return None


def _first_error(root: Node) -> Optional[Node]:
    """Find the first ERROR or MISSING node, pruning error-free subtrees."""
    stack = [root]
    while stack:
        node = stack.pop()
        if node.type == "ERROR" or node.is_missing:
            return node
        stack.extend(
            child for child in reversed(node.children)
            if child.has_error or child.is_missing
        )
    return None
