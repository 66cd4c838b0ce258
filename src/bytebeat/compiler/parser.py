"""
Bytebeat Precedence-Climbing Parser
===================================

This module implements the parser for bytebeat expressions. It takes the
token list from the lexer and builds an immutable expression tree.

Grammar (Simplified EBNF)
-------------------------
expression      ::= ternary
ternary         ::= binary ('?' expression ':' ternary)?
binary          ::= unary (BINOP unary)*        (precedence climbing)
unary           ::= ('-' | '+' | '!' | '~')* primary
primary         ::= NUMBER | 't' | '(' expression ')'

Expression Precedence (lowest to highest)
-----------------------------------------
1.  ternary        ?:   (right-associative)
2.  logical_or     ||
3.  logical_and    &&
4.  bitwise_or     |
5.  bitwise_xor    ^
6.  bitwise_and    &
7.  equality       == !=
8.  relational     < <= > >=
9.  shift          << >>
10. additive       + -
11. multiplicative * / %
12. unary          - + ! ~
13. primary        NUMBER, 't', '(' expression ')'

All binary operators are left-associative.

Error Recovery
--------------
The parser never raises. Parse methods return None for a subtree that
contained an error, after recording a diagnostic at the offending token.
Parsing then carries on from the next token that can start or continue
an expression, so independent problems later in the line are found in
the same pass. A None anywhere below a node makes that node None too:
no partial tree is ever fabricated, and any error makes the Program
failed.

Example Usage
-------------
>>> from bytebeat.compiler.parser import parse_source
>>> program = parse_source("t*(42&t>>10)")
>>> program.ok
True
>>> parse_source("t*(x&t>>10)").errors[0].message
"unknown variable 'x'"
"""

from dataclasses import dataclass
from typing import List, Optional, Tuple

from bytebeat.compiler.ast import (
    Binary,
    BinaryOperator,
    Expression,
    IntLiteral,
    Ternary,
    TimeVar,
    Unary,
    UnaryOperator,
)
from bytebeat.compiler.errors import (
    Category,
    Diagnostic,
    DiagnosticCollector,
)
from bytebeat.compiler.lexer import Token, TokenType, tokenize


# Binding power and operator for each binary token; higher binds tighter
BINARY_OPERATORS = {
    TokenType.OR: (1, BinaryOperator.LOGICAL_OR),
    TokenType.AND: (2, BinaryOperator.LOGICAL_AND),
    TokenType.PIPE: (3, BinaryOperator.BITWISE_OR),
    TokenType.CARET: (4, BinaryOperator.BITWISE_XOR),
    TokenType.AMPERSAND: (5, BinaryOperator.BITWISE_AND),
    TokenType.EQ: (6, BinaryOperator.EQUAL),
    TokenType.NE: (6, BinaryOperator.NOT_EQUAL),
    TokenType.LT: (7, BinaryOperator.LESS),
    TokenType.LE: (7, BinaryOperator.LESS_EQ),
    TokenType.GT: (7, BinaryOperator.GREATER),
    TokenType.GE: (7, BinaryOperator.GREATER_EQ),
    TokenType.LSHIFT: (8, BinaryOperator.LEFT_SHIFT),
    TokenType.RSHIFT: (8, BinaryOperator.RIGHT_SHIFT),
    TokenType.PLUS: (9, BinaryOperator.ADD),
    TokenType.MINUS: (9, BinaryOperator.SUBTRACT),
    TokenType.STAR: (10, BinaryOperator.MULTIPLY),
    TokenType.SLASH: (10, BinaryOperator.DIVIDE),
    TokenType.PERCENT: (10, BinaryOperator.MODULO),
}

UNARY_OPERATORS = {
    TokenType.MINUS: UnaryOperator.NEGATE,
    TokenType.PLUS: UnaryOperator.POSITIVE,
    TokenType.NOT: UnaryOperator.LOGICAL_NOT,
    TokenType.TILDE: UnaryOperator.BITWISE_NOT,
}

# Tokens that can begin an expression
EXPRESSION_START = frozenset(
    {TokenType.NUMBER, TokenType.IDENTIFIER, TokenType.LPAREN} | set(UNARY_OPERATORS)
)

TIME_VARIABLE = "t"


# =============================================================================
# Parse Result
# =============================================================================

@dataclass(frozen=True)
class Program:
    """
    Result of parsing one expression.

    A Program is OK when it has a root and no error diagnostics. A failed
    Program has no root and at least one error. Warnings may accompany
    either.

    Attributes:
        root: The expression tree, or None if parsing failed
        diagnostics: All diagnostics, ordered by column
    """
    root: Optional[Expression]
    diagnostics: Tuple[Diagnostic, ...] = ()

    @property
    def ok(self) -> bool:
        return self.root is not None

    @property
    def errors(self) -> List[Diagnostic]:
        return [d for d in self.diagnostics if d.is_error]

    @property
    def warnings(self) -> List[Diagnostic]:
        return [d for d in self.diagnostics if not d.is_error]


# =============================================================================
# Parser
# =============================================================================

class Parser:
    """
    Precedence-climbing parser for bytebeat expressions.

    Usage:
        sink = DiagnosticCollector()
        parser = Parser(tokenize(source, sink), sink)
        program = parser.parse()

    Attributes:
        tokens: List of tokens to parse (must end with EOF)
        diagnostics: Collector shared with the lexer
    """

    # Parentheses and conditionals deeper than this are rejected
    MAX_NESTING = 32

    def __init__(self, tokens: List[Token], diagnostics: Optional[DiagnosticCollector] = None):
        self.tokens = tokens
        self.diagnostics = diagnostics if diagnostics is not None else DiagnosticCollector()

        # Current position in token stream
        self._pos = 0

        # Open parentheses and conditionals around the current position
        self._nesting = 0

        # Set once the rest of the input has been skipped
        self._abandoned = False

        # ':' tokens reported as having no matching '?'
        self._stray_colons = 0

    def parse(self) -> Program:
        """
        Parse the token stream into a Program.

        Every token is examined, so each independent problem on the line
        produces its own diagnostic, up to the collector's max_errors.
        """
        root = self._parse_expression()

        while not self._at_end():
            self._recover_step()

        diagnostics = tuple(self.diagnostics.into_sorted_list())
        if root is None or self.diagnostics.has_errors():
            return Program(root=None, diagnostics=diagnostics)
        return Program(root=root, diagnostics=diagnostics)

    # =========================================================================
    # Token Access Methods
    # =========================================================================

    def _at_end(self) -> bool:
        return self._peek().type == TokenType.EOF

    def _peek(self) -> Token:
        if self._pos >= len(self.tokens):
            return self.tokens[-1]
        return self.tokens[self._pos]

    def _advance(self) -> Token:
        """Consume and return the current token (EOF is never consumed)."""
        token = self._peek()
        if token.type != TokenType.EOF:
            self._pos += 1
        return token

    def _check(self, *types: TokenType) -> bool:
        return self._peek().type in types

    def _match(self, *types: TokenType) -> Optional[Token]:
        """Consume current token if it matches one of the types."""
        if self._check(*types):
            return self._advance()
        return None

    # =========================================================================
    # Error Reporting and Recovery
    # =========================================================================

    @staticmethod
    def _describe(token: Token) -> str:
        if token.type == TokenType.EOF:
            return "end of input"
        return f"'{token.lexeme}'"

    def _error(self, token: Token, message: str, hint: Optional[str] = None) -> None:
        """Record a syntax error at the given token."""
        if self._abandoned:
            return
        length = token.length if token.type != TokenType.EOF else 1
        self.diagnostics.record(token.column, message, length=length, hint=hint)

    def _lexical_error(self, token: Token) -> None:
        """Record an ERROR token; a no-op if the lexer already did."""
        self.diagnostics.record(
            token.column,
            str(token.value),
            category=Category.LEXICAL,
            length=token.length,
        )

    def _recover_step(self) -> None:
        """
        Deal with one token that cannot continue the current expression.

        Always consumes at least one token. A stray token that sits where
        an operator belongs is reported once, and whatever follows it is
        parsed as the rest of the expression (and the result discarded)
        so that errors inside it are still reported. Once max_errors has
        been reached the rest of the input is skipped.
        """
        if self.diagnostics.should_stop():
            self._pos = len(self.tokens) - 1
            return

        token = self._peek()

        if token.type == TokenType.ERROR:
            self._lexical_error(token)
            self._advance()
            self._resume()
            return

        if token.type == TokenType.RPAREN:
            self._error(token, "unmatched ')'", hint="remove it or add a matching '('")
            self._advance()
            self._resume()
            return

        if token.type == TokenType.COLON:
            self._error(
                token,
                "':' without a matching '?'",
                hint="a conditional needs both branches: cond ? a : b",
            )
            self._stray_colons += 1
            self._advance()
            self._resume()
            return

        hint = None
        if token.type in EXPRESSION_START:
            hint = "insert an operator between the two operands"
        self._error(token, f"expected operator, found {self._describe(token)}", hint=hint)

        if token.type in EXPRESSION_START:
            self._parse_expression()
        else:
            self._advance()

    def _resume(self) -> None:
        """
        Parse the remainder of an expression after a reported stray token.

        The stray token stands in for an operator, so an operand, a binary
        operator or a '?' right after it continues the expression rather
        than being a second error.
        """
        token = self._peek()
        if token.type in EXPRESSION_START:
            self._parse_expression()
        elif token.type in BINARY_OPERATORS:
            self._advance()
            self._parse_expression()
        elif token.type == TokenType.QUESTION:
            self._finish_ternary(None, self._advance())

    def _abandon(self, token: Token) -> None:
        """Report excessive nesting and skip the rest of the input."""
        self._error(token, f"expression is nested too deeply (limit {self.MAX_NESTING})")
        self._abandoned = True
        self._pos = len(self.tokens) - 1

    # =========================================================================
    # Expression Parsing
    # =========================================================================

    def _parse_expression(self) -> Optional[Expression]:
        return self._parse_ternary()

    def _parse_ternary(self) -> Optional[Expression]:
        """Parse ternary conditional expression (? :), right-associative."""
        condition = self._parse_binary(1)

        question = self._match(TokenType.QUESTION)
        if question is None:
            return condition
        return self._finish_ternary(condition, question)

    def _finish_ternary(self, condition: Optional[Expression], question: Token) -> Optional[Expression]:
        """Parse the branches of a conditional whose '?' has been consumed."""
        if self._nesting >= self.MAX_NESTING:
            self._abandon(question)
            return None

        self._nesting += 1
        try:
            strays = self._stray_colons
            then_expr = self._parse_expression()

            if self._match(TokenType.COLON) is None:
                # A misplaced ':' inside the then branch was already reported
                if self._stray_colons == strays:
                    self._error(
                        self._peek(),
                        f"expected ':' in conditional expression, found {self._describe(self._peek())}",
                        hint="a conditional needs both branches: cond ? a : b",
                    )
                self._skip_to_colon()
                return None

            else_expr = self._parse_ternary()
        finally:
            self._nesting -= 1

        if condition is None or then_expr is None or else_expr is None:
            return None
        return Ternary(condition, then_expr, else_expr, column=question.column)

    def _skip_to_colon(self) -> None:
        """
        Resynchronize after a conditional that is missing its ':'.

        Skips to the ':' (parsing any operands on the way) and parses the
        else branch, so 't?1 2:3' is reported once.
        """
        while not self._check(TokenType.COLON, TokenType.RPAREN, TokenType.EOF):
            token = self._peek()
            if token.type in EXPRESSION_START:
                self._parse_binary(1)
            else:
                if token.type == TokenType.ERROR:
                    self._lexical_error(token)
                self._advance()

        if self._match(TokenType.COLON):
            self._parse_ternary()

    def _parse_binary(self, min_precedence: int) -> Optional[Expression]:
        """
        Parse binary operators binding at least as tightly as min_precedence.

        The right operand of each operator is parsed one level tighter,
        which makes every binary operator left-associative.
        """
        left = self._parse_unary()

        while True:
            token = self._peek()
            entry = BINARY_OPERATORS.get(token.type)
            if entry is None or entry[0] < min_precedence:
                return left

            precedence, operator = entry
            self._advance()
            right = self._parse_binary(precedence + 1)

            if left is None or right is None:
                left = None
            else:
                left = Binary(operator, left, right, column=token.column)

    def _parse_unary(self) -> Optional[Expression]:
        """Parse prefix operators (- + ! ~), innermost applied first."""
        prefixes = []
        while self._peek().type in UNARY_OPERATORS:
            prefixes.append(self._advance())

        expr = self._parse_primary()
        if expr is None:
            return None

        for token in reversed(prefixes):
            expr = Unary(UNARY_OPERATORS[token.type], expr, column=token.column)
        return expr

    def _parse_primary(self) -> Optional[Expression]:
        """Parse primary expression (literal, 't', parenthesized)."""
        token = self._peek()

        if token.type == TokenType.NUMBER:
            self._advance()
            return IntLiteral(token.value, column=token.column)

        if token.type == TokenType.IDENTIFIER:
            self._advance()
            if token.value == TIME_VARIABLE:
                return TimeVar(column=token.column)
            self.diagnostics.record(
                token.column,
                f"unknown variable '{token.value}'",
                category=Category.SEMANTIC,
                length=token.length,
                hint="the only variable available is 't'",
            )
            return None

        if token.type == TokenType.LPAREN:
            return self._parse_group()

        # Operand is missing: ')' ':' '?' or end of input. These tokens
        # belong to an enclosing construct, so leave them in place.
        if token.type in (TokenType.RPAREN, TokenType.COLON, TokenType.QUESTION, TokenType.EOF):
            self._error(token, f"expected expression, found {self._describe(token)}")
            return None

        # Garbage in operand position: a bad token or a binary-only
        # operator. Skip it; if an operand follows, parse it for its
        # own errors.
        if token.type == TokenType.ERROR:
            self._lexical_error(token)
        else:
            self._error(
                token,
                f"expected expression, found {self._describe(token)}",
                hint=f"{self._describe(token)} needs an operand on each side",
            )
        self._advance()
        if self._peek().type in EXPRESSION_START:
            self._parse_unary()
        return None

    def _parse_group(self) -> Optional[Expression]:
        """Parse a parenthesized expression."""
        open_paren = self._advance()

        if self._nesting >= self.MAX_NESTING:
            self._abandon(open_paren)
            return None

        self._nesting += 1
        try:
            expr = self._parse_expression()
            clean = True
            while not self._check(TokenType.RPAREN, TokenType.EOF):
                clean = False
                self._recover_step()
        finally:
            self._nesting -= 1

        if self._match(TokenType.RPAREN) is None:
            self._error(open_paren, "unmatched '('", hint="add a closing ')'")
            return None

        return expr if clean else None


# =============================================================================
# Convenience Functions
# =============================================================================

def parse(tokens: List[Token], diagnostics: Optional[DiagnosticCollector] = None) -> Program:
    """Parse a token list (ending with EOF) into a Program."""
    return Parser(tokens, diagnostics).parse()


def parse_source(source: str, max_errors: int = 100) -> Program:
    """
    Parse bytebeat source text into a Program.

    This is a convenience function that combines lexing and parsing with
    one shared diagnostics collector.
    """
    diagnostics = DiagnosticCollector(max_errors=max_errors)
    tokens = tokenize(source, diagnostics)
    return Parser(tokens, diagnostics).parse()
