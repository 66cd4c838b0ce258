# =============================================================================
# test_lexer.py - Lexer Unit Tests
# =============================================================================
# Tests for the bytebeat lexer (tokenizer).
#
# Test coverage includes:
#   - Integer literals in all four bases, and 32-bit truncation
#   - Every operator, with maximal munch for two-character operators
#   - Token columns
#   - Error tokens for bad characters, malformed literals, '=' and newlines
#   - Recording of lexical errors and warnings in a DiagnosticCollector
# =============================================================================

import pytest

from bytebeat.compiler.errors import Category, DiagnosticCollector, Severity
from bytebeat.compiler.lexer import (
    INT32_MAX,
    INT32_MIN,
    Lexer,
    NumberBase,
    Token,
    TokenType,
    tokenize,
    wrap_int32,
)


def lex(source: str) -> list:
    """Tokenize and drop the trailing EOF."""
    tokens = tokenize(source)
    assert tokens[-1].type == TokenType.EOF
    return tokens[:-1]


def lex_types(source: str) -> list:
    return [t.type for t in lex(source)]


# =============================================================================
# Basics
# =============================================================================

class TestBasics:
    """Empty input, whitespace and identifiers."""

    def test_empty_source(self):
        """Empty source should produce only an EOF token."""
        tokens = tokenize("")
        assert len(tokens) == 1
        assert tokens[0].type == TokenType.EOF
        assert tokens[0].column == 0

    def test_whitespace_only(self):
        tokens = tokenize(" \t  ")
        assert len(tokens) == 1
        assert tokens[0].type == TokenType.EOF
        assert tokens[0].column == 4

    def test_time_variable(self):
        tokens = lex("t")
        assert tokens[0].type == TokenType.IDENTIFIER
        assert tokens[0].value == "t"

    def test_other_identifiers_are_tokens(self):
        """The lexer accepts any identifier; the parser rejects it."""
        tokens = lex("time _x t1")
        assert [t.value for t in tokens] == ["time", "_x", "t1"]
        assert all(t.type == TokenType.IDENTIFIER for t in tokens)

    def test_classic_expression(self):
        tokens = tokenize("t*(42&t>>10)")
        assert [repr(t) for t in tokens] == [
            "Token(IDENTIFIER, 't', 0)",
            "Token(STAR, '*', 1)",
            "Token(LPAREN, '(', 2)",
            "Token(NUMBER, 42, 3)",
            "Token(AMPERSAND, '&', 5)",
            "Token(IDENTIFIER, 't', 6)",
            "Token(RSHIFT, '>>', 7)",
            "Token(NUMBER, 10, 9)",
            "Token(RPAREN, ')', 11)",
            "Token(EOF, 12)",
        ]

    def test_columns_skip_whitespace(self):
        tokens = lex(" t  >>\t8")
        assert [t.column for t in tokens] == [1, 4, 7]

    def test_token_is_immutable(self):
        token = lex("t")[0]
        with pytest.raises(AttributeError):
            token.column = 3

    def test_lexer_class_matches_function(self):
        assert Lexer("t&t>>8").tokenize() == tokenize("t&t>>8")


# =============================================================================
# Number Literals
# =============================================================================

class TestNumbers:
    """Integer literals in all supported bases."""

    @pytest.mark.parametrize("source,value,base", [
        ("0", 0, NumberBase.DECIMAL),
        ("42", 42, NumberBase.DECIMAL),
        ("0x7F", 127, NumberBase.HEXADECIMAL),
        ("0XfF", 255, NumberBase.HEXADECIMAL),
        ("0177", 127, NumberBase.OCTAL),
        ("012", 10, NumberBase.OCTAL),
        ("0b1010", 10, NumberBase.BINARY),
        ("0B1", 1, NumberBase.BINARY),
    ])
    def test_literal(self, source, value, base):
        tokens = lex(source)
        assert len(tokens) == 1
        assert tokens[0].type == TokenType.NUMBER
        assert tokens[0].value == value
        assert tokens[0].base == base
        assert tokens[0].lexeme == source

    def test_int32_max_fits(self):
        sink = DiagnosticCollector()
        tokens = tokenize("2147483647", sink)
        assert tokens[0].value == INT32_MAX
        assert len(sink) == 0

    @pytest.mark.parametrize("source,value", [
        ("2147483648", INT32_MIN),
        ("0xFFFFFFFF", -1),
        ("4294967296", 0),
        ("0x100000005", 5),
    ])
    def test_overflow_wraps_with_warning(self, source, value):
        sink = DiagnosticCollector()
        tokens = tokenize(source, sink)

        assert tokens[0].type == TokenType.NUMBER
        assert tokens[0].value == value

        assert not sink.has_errors()
        [warning] = sink.warnings()
        assert warning.severity == Severity.WARNING
        assert warning.category == Category.LEXICAL
        assert warning.column == 0
        assert warning.length == len(source)
        assert f"truncated to {value}" in warning.message

    def test_number_followed_by_operator(self):
        assert lex_types("10>>2") == [TokenType.NUMBER, TokenType.RSHIFT, TokenType.NUMBER]


# =============================================================================
# Operators
# =============================================================================

class TestOperators:
    """Operator and delimiter tokens."""

    @pytest.mark.parametrize("source,expected", [
        ("+", TokenType.PLUS),
        ("-", TokenType.MINUS),
        ("*", TokenType.STAR),
        ("/", TokenType.SLASH),
        ("%", TokenType.PERCENT),
        ("&", TokenType.AMPERSAND),
        ("|", TokenType.PIPE),
        ("^", TokenType.CARET),
        ("~", TokenType.TILDE),
        ("<<", TokenType.LSHIFT),
        (">>", TokenType.RSHIFT),
        ("&&", TokenType.AND),
        ("||", TokenType.OR),
        ("!", TokenType.NOT),
        ("==", TokenType.EQ),
        ("!=", TokenType.NE),
        ("<", TokenType.LT),
        ("<=", TokenType.LE),
        (">", TokenType.GT),
        (">=", TokenType.GE),
        ("?", TokenType.QUESTION),
        (":", TokenType.COLON),
        ("(", TokenType.LPAREN),
        (")", TokenType.RPAREN),
    ])
    def test_operator(self, source, expected):
        tokens = lex(source)
        assert len(tokens) == 1
        assert tokens[0].type == expected
        assert tokens[0].value == source

    def test_maximal_munch(self):
        """Two-character operators win over their one-character prefixes."""
        assert lex_types("&&&") == [TokenType.AND, TokenType.AMPERSAND]
        assert lex_types(">>>") == [TokenType.RSHIFT, TokenType.GT]
        assert lex_types("<<=") == [TokenType.LSHIFT, TokenType.ERROR]

    def test_separated_operators_stay_separate(self):
        assert lex_types("& &") == [TokenType.AMPERSAND, TokenType.AMPERSAND]
        assert lex_types("> >") == [TokenType.GT, TokenType.GT]

    def test_logical_expression(self):
        assert lex_types("t&&!t||t") == [
            TokenType.IDENTIFIER,
            TokenType.AND,
            TokenType.NOT,
            TokenType.IDENTIFIER,
            TokenType.OR,
            TokenType.IDENTIFIER,
        ]


# =============================================================================
# Error Tokens
# =============================================================================

class TestErrorTokens:
    """Problems become ERROR tokens; the lexer never raises."""

    def test_unexpected_character(self):
        tokens = lex("t$1")
        assert tokens[1].type == TokenType.ERROR
        assert tokens[1].column == 1
        assert tokens[1].value == "unexpected character '$'"
        assert tokens[2].type == TokenType.NUMBER

    def test_identifier_glued_to_number(self):
        """'12ab' is one malformed literal, not a number and a variable."""
        tokens = lex("12ab+t")
        assert tokens[0].type == TokenType.ERROR
        assert tokens[0].lexeme == "12ab"
        assert tokens[0].length == 4
        assert tokens[0].value == "invalid integer literal '12ab'"
        assert tokens[1].type == TokenType.PLUS

    def test_bad_octal_digit(self):
        [token] = lex("089")
        assert token.is_error
        assert token.value == "invalid digit in octal literal '089'"

    @pytest.mark.parametrize("source,message", [
        ("0x", "expected hexadecimal digits after '0x'"),
        ("0b", "expected binary digits after '0b'"),
        ("0xg", "invalid integer literal '0xg'"),
        ("0b2", "invalid integer literal '0b2'"),
        ("0x1FZ", "invalid integer literal '0x1FZ'"),
    ])
    def test_bad_prefixed_literal(self, source, message):
        [token] = lex(source)
        assert token.is_error
        assert token.value == message
        assert token.lexeme == source

    def test_single_equals(self):
        tokens = lex("t=1")
        assert tokens[1].type == TokenType.ERROR
        assert tokens[1].value == "assignment is not supported"

    def test_newline_is_an_error(self):
        tokens = lex("t\n+1")
        assert tokens[1].type == TokenType.ERROR
        assert tokens[1].column == 1
        assert tokens[1].value == "line break in expression"
        assert tokens[2].type == TokenType.PLUS

    def test_lexing_continues_after_errors(self):
        tokens = lex("$t#")
        assert [t.type for t in tokens] == [
            TokenType.ERROR,
            TokenType.IDENTIFIER,
            TokenType.ERROR,
        ]


# =============================================================================
# Diagnostics
# =============================================================================

class TestLexerDiagnostics:
    """Error tokens are recorded in the shared collector."""

    def test_errors_recorded_in_order(self):
        sink = DiagnosticCollector()
        tokenize("t$1#", sink)

        errors = sink.errors()
        assert [e.column for e in errors] == [1, 3]
        assert all(e.category == Category.LEXICAL for e in errors)

    def test_hint_for_assignment(self):
        sink = DiagnosticCollector()
        tokenize("t=1", sink)
        [error] = sink.errors()
        assert error.hint == "use '==' to compare values"

    def test_error_length_covers_literal(self):
        sink = DiagnosticCollector()
        tokenize("t+99zz", sink)
        [error] = sink.errors()
        assert error.column == 2
        assert error.length == 4

    def test_no_collector_is_fine(self):
        tokens = tokenize("$$")
        assert len(tokens) == 3


# =============================================================================
# 32-bit Wrapping
# =============================================================================

class TestWrapInt32:
    """Two's-complement truncation helper."""

    @pytest.mark.parametrize("value,expected", [
        (0, 0),
        (-1, -1),
        (INT32_MAX, INT32_MAX),
        (INT32_MAX + 1, INT32_MIN),
        (INT32_MIN - 1, INT32_MAX),
        (0xFFFFFFFF, -1),
        (1 << 40, 0),
        (1000 * 1000 * 1000 * 3, -1294967296),
    ])
    def test_wrap(self, value, expected):
        assert wrap_int32(value) == expected

    def test_token_repr_for_error(self):
        token = Token(TokenType.ERROR, "unexpected character '$'", 4, "$")
        assert repr(token) == "Token(ERROR, \"unexpected character '$'\", 4)"
