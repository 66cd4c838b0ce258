# =============================================================================
# test_evaluator.py - Evaluator Unit Tests
# =============================================================================
# Tests for evaluation with C int32 semantics.
#
# Test coverage includes:
#   - Wraparound of + - * and unary minus
#   - Truncating division and remainder, and division by zero
#   - Shift counts masked to 5 bits, arithmetic right shift
#   - Comparisons and logical operators yielding 0 or 1
#   - Short-circuit evaluation and single-branch conditionals
#   - Truncation of the result to an unsigned byte
# =============================================================================

import pytest

from bytebeat.compiler.evaluator import (
    Evaluator,
    c_div,
    c_mod,
    evaluate,
    evaluate_int32,
    shift_left,
    shift_right,
)
from bytebeat.compiler.lexer import INT32_MAX, INT32_MIN
from bytebeat.compiler.parser import parse_source


def root(source: str):
    program = parse_source(source)
    assert program.ok, program.diagnostics
    return program.root


def value(source: str, t: int = 0) -> int:
    return evaluate_int32(root(source), t)


def sample(source: str, t: int = 0) -> int:
    return evaluate(root(source), t)


# =============================================================================
# Integer Helpers
# =============================================================================

class TestDivision:
    """C division truncates toward zero."""

    @pytest.mark.parametrize("a,b,expected", [
        (7, 2, 3),
        (-7, 2, -3),
        (7, -2, -3),
        (-7, -2, 3),
        (0, 5, 0),
        (1, 3, 0),
        (-1, 3, 0),
    ])
    def test_truncates(self, a, b, expected):
        assert c_div(a, b) == expected

    @pytest.mark.parametrize("a", [0, 1, -1, INT32_MAX, INT32_MIN])
    def test_by_zero_is_zero(self, a):
        assert c_div(a, 0) == 0

    def test_min_by_minus_one_wraps(self):
        assert c_div(INT32_MIN, -1) == INT32_MIN


class TestModulo:
    """The remainder takes the sign of the dividend."""

    @pytest.mark.parametrize("a,b,expected", [
        (7, 3, 1),
        (-7, 3, -1),
        (7, -3, 1),
        (-7, -3, -1),
        (6, 3, 0),
        (-6, 3, 0),
    ])
    def test_sign_of_dividend(self, a, b, expected):
        assert c_mod(a, b) == expected

    @pytest.mark.parametrize("a", [0, 1, -1, INT32_MAX, INT32_MIN])
    def test_by_zero_is_zero(self, a):
        assert c_mod(a, 0) == 0

    def test_min_by_minus_one(self):
        assert c_mod(INT32_MIN, -1) == 0

    @pytest.mark.parametrize("a,b", [(17, 5), (-17, 5), (17, -5), (-17, -5), (INT32_MIN, 7)])
    def test_division_identity(self, a, b):
        """(a/b)*b + a%b == a, as C guarantees."""
        assert c_div(a, b) * b + c_mod(a, b) == a


class TestShifts:
    """Shift counts use their low 5 bits."""

    @pytest.mark.parametrize("a,count,expected", [
        (1, 0, 1),
        (1, 4, 16),
        (1, 31, INT32_MIN),
        (1, 32, 1),
        (1, 33, 2),
        (1, -1, INT32_MIN),
        (0x40000000, 1, INT32_MIN),
        (3, 31, INT32_MIN),
    ])
    def test_left(self, a, count, expected):
        assert shift_left(a, count) == expected

    @pytest.mark.parametrize("a,count,expected", [
        (256, 8, 1),
        (-16, 2, -4),
        (-1, 31, -1),
        (INT32_MIN, 31, -1),
        (256, 40, 1),
        (INT32_MAX, -1, 0),
    ])
    def test_right_is_arithmetic(self, a, count, expected):
        assert shift_right(a, count) == expected


# =============================================================================
# Expression Evaluation
# =============================================================================

class TestArithmetic:
    """Arithmetic through the tree walker."""

    def test_precedence(self):
        assert value("1+2*3") == 7
        assert value("8-4-2") == 2
        assert value("2<<1+1") == 8

    def test_multiplication_wraps(self):
        assert value("t*t", 65536) == 0
        assert value("t*t", 46341) == 46341 * 46341 - (1 << 32)

    def test_addition_wraps(self):
        assert value("t+1", INT32_MAX) == INT32_MIN

    def test_subtraction_wraps(self):
        assert value("t-1", INT32_MIN) == INT32_MAX

    def test_negation_of_min(self):
        assert value("-t", INT32_MIN) == INT32_MIN

    def test_literal_minimum(self):
        """2147483648 wraps to INT_MIN, and negating it stays there."""
        assert value("-2147483648") == INT32_MIN

    def test_division_by_zero_expression(self):
        assert value("t/(t-t)", 1234) == 0
        assert value("t%(t&0)", 1234) == 0

    def test_negative_division(self):
        assert value("(-t)/7", 20) == -2
        assert value("(-t)%7", 20) == -6

    def test_unary_plus(self):
        assert value("+t", 5) == 5

    def test_time_is_wrapped(self):
        assert value("t", 1 << 31) == INT32_MIN
        assert value("t", -1) == -1


class TestLogic:
    """Comparisons, logical operators and conditionals."""

    @pytest.mark.parametrize("source,expected", [
        ("3<5", 1),
        ("5<3", 0),
        ("3<=3", 1),
        ("3>=4", 0),
        ("3==3", 1),
        ("3!=3", 0),
        ("-1<0", 1),
        ("!0", 1),
        ("!7", 0),
        ("!-1", 0),
        ("2&&3", 1),
        ("2&&0", 0),
        ("0||-5", 1),
        ("0||0", 0),
    ])
    def test_yields_zero_or_one(self, source, expected):
        assert value(source) == expected

    def test_bitwise(self):
        assert value("12&10") == 8
        assert value("12|10") == 14
        assert value("12^10") == 6
        assert value("~0") == -1

    def test_conditional(self):
        assert value("t?10:20", 1) == 10
        assert value("t?10:20", 0) == 20
        assert value("t>5?t:-t", 3) == -3


class RecordingEvaluator(Evaluator):
    """Records every literal it evaluates."""

    def __init__(self, t: int = 0):
        super().__init__(t)
        self.seen = []

    def visit_IntLiteral(self, node):
        self.seen.append(node.value)
        return node.value


class TestShortCircuit:
    """Operands that are not needed are never evaluated."""

    def test_and_skips_right(self):
        assert sample("0 && (1/0)") == 0

    def test_or_skips_right(self):
        assert sample("1 || (1/0)") == 1

    @pytest.mark.parametrize("source,seen", [
        ("0&&5", [0]),
        ("2&&5", [2, 5]),
        ("3||5", [3]),
        ("0||5", [0, 5]),
        ("1?7:9", [1, 7]),
        ("0?7:9", [0, 9]),
    ])
    def test_only_needed_operands_evaluated(self, source, seen):
        evaluator = RecordingEvaluator()
        evaluator.visit(root(source))
        assert evaluator.seen == seen


class TestOutput:
    """The result is truncated to its low 8 bits at the root only."""

    def test_truncation_boundary(self):
        assert sample("t*1000", 1000) == (1000 * 1000) % 256

    def test_negative_result(self):
        assert sample("-t", 1) == 255
        assert sample("~t", 0) == 255

    def test_intermediate_values_not_truncated(self):
        """(t*256)>>8 keeps the bits a per-node truncation would lose."""
        assert sample("(t*256)>>8", 3) == 3

    def test_arithmetic_shift_of_negative(self):
        assert sample("(-t)>>1", 3) == 254

    @pytest.mark.parametrize("t", [0, 1, 255, 256, 1000, 65535, INT32_MAX, INT32_MIN])
    def test_range(self, t):
        assert 0 <= sample("t*(42&t>>10)", t) <= 255

    def test_classic_melody(self):
        root_ = root("t*(42&t>>10)")
        # t>>10 is 3 at t=3072 and 42&3 is 2
        assert evaluate(root_, 3072) == (3072 * 2) & 0xFF
        assert evaluate_int32(root_, 3072) == 6144

    def test_evaluator_reusable(self):
        evaluator = Evaluator(t=5)
        assert evaluator.visit(root("t*2")) == 10
        assert evaluator.visit(root("t+1")) == 6
