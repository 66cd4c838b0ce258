"""
Bytebeat Abstract Syntax Tree (AST) Definitions
===============================================

This module defines the AST node types produced by the bytebeat parser.
A bytebeat program is a single expression, so the tree only has
expression nodes.

Node Hierarchy
--------------
Expression (base)
├── IntLiteral - integer constant (already wrapped to 32 bits)
├── TimeVar - the sample counter 't'
├── Unary - prefix operator (-x, +x, !x, ~x)
├── Binary - infix operator (a op b), including && and ||
└── Ternary - conditional (cond ? a : b)

Design Notes
------------
- All nodes are frozen dataclasses; the tree is immutable after parsing
- Every node owns its children exclusively; subtrees are never shared
- Each node stores the 0-based column of the token that introduced it
- Columns are excluded from equality, so two trees compare equal when
  they have the same shape, whatever the spacing of their sources
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, List, Tuple


# =============================================================================
# Operators
# =============================================================================

class BinaryOperator(Enum):
    """Binary operator types; the value is the source symbol."""
    # Arithmetic
    ADD = "+"
    SUBTRACT = "-"
    MULTIPLY = "*"
    DIVIDE = "/"
    MODULO = "%"

    # Shifts
    LEFT_SHIFT = "<<"
    RIGHT_SHIFT = ">>"

    # Comparison
    LESS = "<"
    LESS_EQ = "<="
    GREATER = ">"
    GREATER_EQ = ">="
    EQUAL = "=="
    NOT_EQUAL = "!="

    # Bitwise
    BITWISE_AND = "&"
    BITWISE_XOR = "^"
    BITWISE_OR = "|"

    # Logical (short-circuit)
    LOGICAL_AND = "&&"
    LOGICAL_OR = "||"


class UnaryOperator(Enum):
    """Unary operator types; the value is the source symbol."""
    NEGATE = "-"
    POSITIVE = "+"
    LOGICAL_NOT = "!"
    BITWISE_NOT = "~"


# =============================================================================
# Expression Nodes
# =============================================================================

class Expression:
    """Base class for all expression nodes."""
    column: int


@dataclass(frozen=True)
class IntLiteral(Expression):
    """
    Integer constant.

    Attributes:
        value: Signed 32-bit value (literals are wrapped by the lexer)
    """
    value: int
    column: int = field(default=0, compare=False)


@dataclass(frozen=True)
class TimeVar(Expression):
    """Reference to the sample counter 't'."""
    column: int = field(default=0, compare=False)


@dataclass(frozen=True)
class Unary(Expression):
    """
    Prefix operation (op x).

    Attributes:
        op: The unary operator
        operand: The operand expression
    """
    op: UnaryOperator
    operand: Expression
    column: int = field(default=0, compare=False)


@dataclass(frozen=True)
class Binary(Expression):
    """
    Infix operation (a op b).

    Attributes:
        op: The binary operator
        left: Left operand expression
        right: Right operand expression
    """
    op: BinaryOperator
    left: Expression
    right: Expression
    column: int = field(default=0, compare=False)


@dataclass(frozen=True)
class Ternary(Expression):
    """
    Conditional expression (cond ? then : else).

    Attributes:
        condition: The condition expression
        then_expr: Expression if condition is non-zero
        else_expr: Expression if condition is zero
    """
    condition: Expression
    then_expr: Expression
    else_expr: Expression
    column: int = field(default=0, compare=False)


# =============================================================================
# Operator Chains
# =============================================================================
# A run of left-associative operators such as t+t+t+... is as tall as it is
# long. Walkers use these helpers to handle such runs with a loop, so only
# parentheses and conditionals (bounded by the parser) cost recursion.

def left_spine(node: Binary) -> Tuple[Expression, List[Binary]]:
    """
    Split a binary node into its leftmost operand and the operator chain.

    Returns:
        (first operand, Binary nodes in evaluation order, innermost first)
    """
    chain = []
    current: Expression = node
    while isinstance(current, Binary):
        chain.append(current)
        current = current.left
    chain.reverse()
    return current, chain


def unary_chain(node: Unary) -> Tuple[Expression, List[UnaryOperator]]:
    """
    Split a run of prefix operators from the operand they apply to.

    Returns:
        (operand, operators in application order, innermost first)
    """
    operators = []
    current: Expression = node
    while isinstance(current, Unary):
        operators.append(current.op)
        current = current.operand
    operators.reverse()
    return current, operators


# =============================================================================
# Visitor Pattern Support
# =============================================================================

class ASTVisitor:
    """
    Base class for AST visitors.

    Subclasses override visit_* methods for the node types they care
    about. Unhandled nodes fall through to generic_visit, which visits
    the children.

    Usage:
        class LiteralCounter(ASTVisitor):
            def __init__(self):
                self.count = 0

            def visit_IntLiteral(self, node):
                self.count += 1

        counter = LiteralCounter()
        counter.visit(root)
    """

    def visit(self, node: Expression) -> Any:
        """Visit a node by dispatching to the appropriate method."""
        method_name = f"visit_{node.__class__.__name__}"
        visitor = getattr(self, method_name, self.generic_visit)
        return visitor(node)

    def generic_visit(self, node: Expression) -> None:
        """Default visit method: visits all child nodes, left to right."""
        if isinstance(node, Binary):
            first, chain = left_spine(node)
            self.visit(first)
            for link in chain:
                self.visit(link.right)
            return
        if isinstance(node, Unary):
            self.visit(unary_chain(node)[0])
            return
        for value in node.__dict__.values():
            if isinstance(value, Expression):
                self.visit(value)


# =============================================================================
# AST Pretty Printer
# =============================================================================

class ASTPrinter(ASTVisitor):
    """
    Pretty printer for AST debugging.

    Produces an indented tree, one node per line, with the 1-based column
    each node came from. Children are queued rather than visited
    recursively, so arbitrarily tall trees print without a RecursionError.

    Usage:
        printer = ASTPrinter()
        print(printer.print(root))
    """

    def __init__(self):
        self.output: list[str] = []
        self.indent_level = 0
        self._pending: list[tuple[Expression, int]] = []

    def print(self, node: Expression) -> str:
        """Print the AST and return as string."""
        self.output = []
        self._pending = [(node, 0)]
        while self._pending:
            node, self.indent_level = self._pending.pop()
            self.visit(node)
        return "\n".join(self.output)

    def _emit(self, text: str, node: Expression) -> None:
        indent = "  " * self.indent_level
        self.output.append(f"{indent}{text}  @{node.column + 1}")

    def _children(self, *children: Expression) -> None:
        for child in reversed(children):
            self._pending.append((child, self.indent_level + 1))

    def visit_IntLiteral(self, node: IntLiteral):
        self._emit(f"Int {node.value}", node)

    def visit_TimeVar(self, node: TimeVar):
        self._emit("Time t", node)

    def visit_Unary(self, node: Unary):
        self._emit(f"Unary {node.op.value}", node)
        self._children(node.operand)

    def visit_Binary(self, node: Binary):
        self._emit(f"Binary {node.op.value}", node)
        self._children(node.left, node.right)

    def visit_Ternary(self, node: Ternary):
        self._emit("Ternary ?:", node)
        self._children(node.condition, node.then_expr, node.else_expr)


def format_expression(expr: Expression) -> str:
    """
    Convert an expression back to source, fully parenthesized.

    The output is valid bytebeat and C, and makes the parsed precedence
    explicit:

        >>> format_expression(parse_source("1+2*3").root)
        '(1 + (2 * 3))'
    """
    if isinstance(expr, IntLiteral):
        return str(expr.value) if expr.value >= 0 else f"({expr.value})"
    if isinstance(expr, TimeVar):
        return "t"
    if isinstance(expr, Unary):
        operand, operators = unary_chain(expr)
        prefix = "".join(f"({op.value}" for op in reversed(operators))
        return prefix + format_expression(operand) + ")" * len(operators)
    if isinstance(expr, Binary):
        first, chain = left_spine(expr)
        parts = ["(" * len(chain), format_expression(first)]
        for node in chain:
            parts.append(f" {node.op.value} {format_expression(node.right)})")
        return "".join(parts)
    if isinstance(expr, Ternary):
        return (
            f"({format_expression(expr.condition)} ? {format_expression(expr.then_expr)}"
            f" : {format_expression(expr.else_expr)})"
        )
    return f"<{type(expr).__name__}>"
