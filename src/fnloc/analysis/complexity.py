"""Complexity Metrics — cyclomatic complexity and nesting depth.

Both metrics come from one walk over a function body's
syntax tree. Complexity starts at 1 and each decision point adds 1:

    - every ``if`` / ``else if`` condition (a bare ``else`` adds nothing)
    - every match arm, plus one more for each arm guard
    - every ``loop``, ``while`` and ``for`` header
    - every ``return`` except the function's own trailing return
    - every ``break`` and ``continue``
    - every ``&&`` / ``||`` operator
    - every ``?`` operator

Nesting is the deepest stack of blocks at any point: ``if``/``else``
branches, ``match`` arms, loop bodies, free-standing ``{}`` blocks,
closures, ``async`` and ``unsafe`` blocks each add one level.

Closures add a nesting level to the function that defines them. Their
decision points count toward that function too, unless the closure is
reported as a record of its own.
Macro invocations are opaque and never expanded.
"""

from dataclasses import dataclass
from typing import Collection, Optional

from tree_sitter import Node

# Items declared inside a body are separate units (or not callable at all)
# and contribute nothing to the enclosing function.
ITEM_NODE_TYPES = frozenset({
    "function_item",
    "function_signature_item",
    "impl_item",
    "trait_item",
    "mod_item",
    "struct_item",
    "enum_item",
    "union_item",
    "const_item",
    "static_item",
    "type_item",
    "use_declaration",
    "extern_crate_declaration",
    "foreign_mod_item",
    "macro_definition",
    "attribute_item",
    "inner_attribute_item",
})

# Blocks with a keyword prefix; each is one nesting level.
MARKED_BLOCK_TYPES = frozenset({
    "unsafe_block",
    "async_block",
    "const_block",
    "try_block",
    "gen_block",
})

SHORT_CIRCUIT_OPERATORS = frozenset({"&&", "||"})

COMMENT_TYPES = frozenset({"line_comment", "block_comment"})


@dataclass(frozen=True)
class ComplexityMetrics:
    """Structural metrics for one function body."""

    complexity: int = 1
    nesting: int = 0

    def __post_init__(self):
        if self.complexity < 1:
            raise ValueError(f"complexity must be >= 1, got {self.complexity}")
        if self.nesting < 0:
            raise ValueError(f"nesting must be >= 0, got {self.nesting}")


class ComplexityVisitor:
    """
    Single-pass visitor computing complexity and nesting for one body.

    Dispatch follows ``ast.NodeVisitor``: ``visit_<node type>`` handles a
    node kind, ``generic_visit`` queues the named children at the same
    depth. Nodes wait on an explicit work stack rather than the call
    stack, so long expression chains cannot hit the recursion limit.
    Depth travels with each queued node so sibling branches are measured
    independently and only the maximum survives.
    """

    def __init__(self, separate_closures: Collection[int] = ()):
        """
        Initialize the visitor.

        Args:
            separate_closures: Node ids of closures reported as their own
                               records; their decision points are left out
        """
        self.complexity = 1
        self.max_depth = 0
        self.separate_closures = frozenset(separate_closures)
        self._trailing_return: Optional[int] = None
        self._pending: list[tuple[Node, int, bool]] = []
        self._scored = True

    def analyze(self, body: Node) -> ComplexityMetrics:
        """
        Walk a function or closure body.

        Args:
            body: The ``block`` of a function, or a closure body

        Returns:
            ComplexityMetrics for the body
        """
        if body.type == "block":
            self._trailing_return = _trailing_return_id(body)
        self._visit_body(body, 0)
        while self._pending:
            node, depth, self._scored = self._pending.pop()
            self._dispatch(node, depth)
        return ComplexityMetrics(complexity=self.complexity, nesting=self.max_depth)

    # ── Dispatch ───────────────────────────────────────────────

    def visit(self, node: Optional[Node], depth: int, scored: Optional[bool] = None) -> None:
        """Queue a node; ``scored`` defaults to that of the node being handled."""
        if node is None or node.type in ITEM_NODE_TYPES:
            return
        self._pending.append((node, depth, self._scored if scored is None else scored))

    def _dispatch(self, node: Node, depth: int) -> None:
        if node.type in MARKED_BLOCK_TYPES:
            self._visit_marked_block(node, depth)
            return
        handler = getattr(self, f"visit_{node.type}", None)
        if handler is None:
            self.generic_visit(node, depth)
        else:
            handler(node, depth)

    def generic_visit(self, node: Node, depth: int, scored: Optional[bool] = None) -> None:
        for child in node.named_children:
            self.visit(child, depth, scored)

    def _visit_body(self, node: Optional[Node], depth: int, scored: Optional[bool] = None) -> None:
        """Visit a construct's own body without counting its braces as a level."""
        if node is None:
            return
        if node.type == "block":
            self.generic_visit(node, depth, scored)
        else:
            self.visit(node, depth, scored)

    def _enter(self, depth: int) -> int:
        inner = depth + 1
        if inner > self.max_depth:
            self.max_depth = inner
        return inner

    def _decision(self) -> None:
        # Closures with their own record score their decisions there
        if self._scored:
            self.complexity += 1

    # ── Branches ───────────────────────────────────────────────

    def visit_if_expression(self, node: Node, depth: int) -> None:
        # An else-if chain is a run of sibling branches, all one level in.
        inner = self._enter(depth)
        current: Optional[Node] = node
        while current is not None:
            self._decision()
            self.visit(current.child_by_field_name("condition"), depth)
            self._visit_body(current.child_by_field_name("consequence"), inner)
            current = self._else_branch(current, inner)

    def _else_branch(self, if_node: Node, inner: int) -> Optional[Node]:
        """Visit a bare else block, or return the ``if`` of an ``else if``."""
        alternative = if_node.child_by_field_name("alternative")
        if alternative is None:
            return None
        for child in alternative.named_children:
            if child.type == "if_expression":
                return child
            if child.type == "block":
                self._visit_body(child, inner)
        return None

    def visit_let_chain(self, node: Node, depth: int) -> None:
        for child in node.children:
            if child.type in SHORT_CIRCUIT_OPERATORS:
                self._decision()
        self.generic_visit(node, depth)

    def visit_match_expression(self, node: Node, depth: int) -> None:
        self.visit(node.child_by_field_name("value"), depth)
        inner = self._enter(depth)
        body = node.child_by_field_name("body")
        if body is None:
            return
        for arm in body.named_children:
            if arm.type != "match_arm":
                continue
            self._decision()
            pattern = arm.child_by_field_name("pattern")
            guard = pattern.child_by_field_name("condition") if pattern is not None else None
            if guard is not None:
                self._decision()
                self.visit(guard, inner)
            self._visit_body(arm.child_by_field_name("value"), inner)

    def visit_let_declaration(self, node: Node, depth: int) -> None:
        self.visit(node.child_by_field_name("value"), depth)
        # let-else: the diverging branch is a conditional block
        alternative = node.child_by_field_name("alternative")
        if alternative is not None:
            self._visit_body(alternative, self._enter(depth))

    # ── Loops ──────────────────────────────────────────────────

    def visit_loop_expression(self, node: Node, depth: int) -> None:
        self._decision()
        self._visit_body(node.child_by_field_name("body"), self._enter(depth))

    def visit_while_expression(self, node: Node, depth: int) -> None:
        self._decision()
        self.visit(node.child_by_field_name("condition"), depth)
        self._visit_body(node.child_by_field_name("body"), self._enter(depth))

    def visit_for_expression(self, node: Node, depth: int) -> None:
        self._decision()
        self.visit(node.child_by_field_name("value"), depth)
        self._visit_body(node.child_by_field_name("body"), self._enter(depth))

    # ── Early exits ────────────────────────────────────────────

    def visit_return_expression(self, node: Node, depth: int) -> None:
        if node.id != self._trailing_return:
            self._decision()
        self.generic_visit(node, depth)

    def visit_break_expression(self, node: Node, depth: int) -> None:
        self._decision()
        self.generic_visit(node, depth)

    def visit_continue_expression(self, node: Node, depth: int) -> None:
        self._decision()

    def visit_try_expression(self, node: Node, depth: int) -> None:
        self._decision()
        self.generic_visit(node, depth)

    def visit_binary_expression(self, node: Node, depth: int) -> None:
        operator = node.child_by_field_name("operator")
        if operator is not None and operator.type in SHORT_CIRCUIT_OPERATORS:
            self._decision()
        self.generic_visit(node, depth)

    # ── Blocks ─────────────────────────────────────────────────

    def visit_block(self, node: Node, depth: int) -> None:
        # Only free-standing blocks get here; owned bodies go through _visit_body
        self.generic_visit(node, self._enter(depth))

    def _visit_marked_block(self, node: Node, depth: int) -> None:
        inner = self._enter(depth)
        for child in node.named_children:
            self._visit_body(child, inner)

    def visit_closure_expression(self, node: Node, depth: int) -> None:
        scored = self._scored and node.id not in self.separate_closures
        self._visit_body(node.child_by_field_name("body"), self._enter(depth), scored)

    def visit_macro_invocation(self, node: Node, depth: int) -> None:
        # Token trees are never expanded
        pass


def _trailing_return_id(block: Node) -> Optional[int]:
    """Id of the ``return`` that ends a body, if it ends with one."""
    last = None
    for child in block.named_children:
        if child.type not in COMMENT_TYPES and child.type not in ITEM_NODE_TYPES:
            last = child
    if last is None:
        return None
    if last.type == "expression_statement" and last.named_child_count:
        last = last.named_children[0]
    if last.type == "return_expression":
        return last.id
    return None


def calculate_complexity(body: Node, separate_closures: Collection[int] = ()) -> ComplexityMetrics:
    """
    Calculate cyclomatic complexity and nesting depth for a body.

    Args:
        body: Body node of a function or closure span
        separate_closures: Node ids of closures that have their own
                           records; every other closure's decision
                           points count toward this body

    Returns:
        ComplexityMetrics (complexity >= 1, nesting >= 0)
    """
    return ComplexityVisitor(separate_closures).analyze(body)
