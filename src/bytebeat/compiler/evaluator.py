"""
Bytebeat Expression Evaluator
=============================

This module evaluates a parsed bytebeat expression for one value of t,
reproducing what a C compiler does with the same expression written as
the body of `uint8_t f(int t) { return (EXPR); }` on a 32-bit int target.

Integer Semantics
-----------------
All intermediate values are 32-bit signed integers:

- + - * and unary - wrap around on overflow (two's complement)
- / and % truncate toward zero; the remainder takes the dividend's sign
- x / 0 and x % 0 are 0 (C leaves these undefined)
- INT_MIN / -1 wraps to INT_MIN and INT_MIN % -1 is 0
- << and >> use only the low 5 bits of the shift count; >> is arithmetic
- && and || short-circuit; comparisons and logical operators yield 0 or 1
- ?: evaluates exactly one branch

The final value is truncated to its low 8 bits exactly once, at the root,
giving an unsigned sample in [0, 255].

Example Usage
-------------
>>> from bytebeat.compiler.parser import parse_source
>>> from bytebeat.compiler.evaluator import evaluate
>>> root = parse_source("t*1000").root
>>> evaluate(root, 1000)
64
"""

from typing import Callable, Dict

from bytebeat.compiler.ast import (
    ASTVisitor,
    Binary,
    BinaryOperator,
    Expression,
    IntLiteral,
    Ternary,
    TimeVar,
    Unary,
    UnaryOperator,
    left_spine,
    unary_chain,
)
from bytebeat.compiler.lexer import wrap_int32


# =============================================================================
# 32-bit Integer Operations
# =============================================================================

def c_div(left: int, right: int) -> int:
    """C division truncating toward zero; division by zero yields 0."""
    if right == 0:
        return 0
    quotient = abs(left) // abs(right)
    if (left < 0) != (right < 0):
        quotient = -quotient
    return wrap_int32(quotient)


def c_mod(left: int, right: int) -> int:
    """C remainder with the sign of the dividend; modulo by zero yields 0."""
    if right == 0:
        return 0
    remainder = abs(left) % abs(right)
    return -remainder if left < 0 else remainder


def shift_left(left: int, right: int) -> int:
    return wrap_int32(left << (right & 31))


def shift_right(left: int, right: int) -> int:
    return left >> (right & 31)


# Operands are always in int32 range, so bitwise results are too
BINARY_FUNCTIONS: Dict[BinaryOperator, Callable[[int, int], int]] = {
    BinaryOperator.ADD: lambda a, b: wrap_int32(a + b),
    BinaryOperator.SUBTRACT: lambda a, b: wrap_int32(a - b),
    BinaryOperator.MULTIPLY: lambda a, b: wrap_int32(a * b),
    BinaryOperator.DIVIDE: c_div,
    BinaryOperator.MODULO: c_mod,
    BinaryOperator.LEFT_SHIFT: shift_left,
    BinaryOperator.RIGHT_SHIFT: shift_right,
    BinaryOperator.LESS: lambda a, b: int(a < b),
    BinaryOperator.LESS_EQ: lambda a, b: int(a <= b),
    BinaryOperator.GREATER: lambda a, b: int(a > b),
    BinaryOperator.GREATER_EQ: lambda a, b: int(a >= b),
    BinaryOperator.EQUAL: lambda a, b: int(a == b),
    BinaryOperator.NOT_EQUAL: lambda a, b: int(a != b),
    BinaryOperator.BITWISE_AND: lambda a, b: a & b,
    BinaryOperator.BITWISE_XOR: lambda a, b: a ^ b,
    BinaryOperator.BITWISE_OR: lambda a, b: a | b,
}

UNARY_FUNCTIONS: Dict[UnaryOperator, Callable[[int], int]] = {
    UnaryOperator.NEGATE: lambda a: wrap_int32(-a),
    UnaryOperator.POSITIVE: lambda a: a,
    UnaryOperator.LOGICAL_NOT: lambda a: int(a == 0),
    UnaryOperator.BITWISE_NOT: lambda a: ~a,
}


# =============================================================================
# Tree-Walking Evaluator
# =============================================================================

class Evaluator(ASTVisitor):
    """
    Evaluates an expression tree for one value of t.

    The evaluator is stateless apart from t, so one instance can be
    reused for any number of trees.

    Usage:
        evaluator = Evaluator(t=1000)
        value = evaluator.visit(root)   # full int32 result
    """

    def __init__(self, t: int = 0):
        self.t = wrap_int32(t)

    def visit_IntLiteral(self, node: IntLiteral) -> int:
        return node.value

    def visit_TimeVar(self, node: TimeVar) -> int:
        return self.t

    def visit_Unary(self, node: Unary) -> int:
        operand, operators = unary_chain(node)
        value = self.visit(operand)
        for op in operators:
            value = UNARY_FUNCTIONS[op](value)
        return value

    def visit_Binary(self, node: Binary) -> int:
        first, chain = left_spine(node)
        value = self.visit(first)
        for link in chain:
            value = self._apply(link, value)
        return value

    def _apply(self, node: Binary, left: int) -> int:
        """Combine an already evaluated left operand with node's right operand."""
        if node.op == BinaryOperator.LOGICAL_AND:
            if left == 0:
                return 0
            return int(self.visit(node.right) != 0)

        if node.op == BinaryOperator.LOGICAL_OR:
            if left != 0:
                return 1
            return int(self.visit(node.right) != 0)

        return BINARY_FUNCTIONS[node.op](left, self.visit(node.right))

    def visit_Ternary(self, node: Ternary) -> int:
        if self.visit(node.condition) != 0:
            return self.visit(node.then_expr)
        return self.visit(node.else_expr)


# =============================================================================
# Convenience Functions
# =============================================================================

def evaluate_int32(root: Expression, t: int) -> int:
    """Evaluate an expression, returning the untruncated 32-bit result."""
    return Evaluator(t).visit(root)


def evaluate(root: Expression, t: int) -> int:
    """Evaluate an expression for t, returning the sample in [0, 255]."""
    return evaluate_int32(root, t) & 0xFF
