"""
Bytebeat Lexer (Tokenizer)
==========================

This module implements the lexer for bytebeat expressions. It converts a
single line of source text into a list of tokens for the parser.

Token Categories
----------------
- Identifiers: only 't' is meaningful; others are reported by the parser
- Numbers: decimal, hexadecimal (0x), octal (0), binary (0b)
- Operators: + - * / % & | ^ ~ << >> && || ! == != < <= > >= ? :
- Delimiters: ( )
- Errors: anything the language does not accept

Number Formats
--------------
| Format      | Prefix  | Example   | Value |
|-------------|---------|-----------|-------|
| Decimal     | (none)  | 123       | 123   |
| Hexadecimal | 0x/0X   | 0x7F      | 127   |
| Octal       | 0       | 0177      | 127   |
| Binary      | 0b/0B   | 0b1010    | 10    |

Literals that do not fit in 32 bits are truncated with two's-complement
wraparound (0xFFFFFFFF is -1), and a warning is recorded.

Fault Tolerance
---------------
The lexer never raises. Unknown characters, malformed literals, a lone
'=' and line breaks become ERROR tokens carrying a message, and lexing
continues with the next character. When a DiagnosticCollector is passed
in, each error token is also recorded there, so a single pass reports
every lexical problem.

Example Usage
-------------
>>> from bytebeat.compiler.lexer import tokenize
>>> for token in tokenize("t*(42&t>>10)"):
...     print(token)
Token(IDENTIFIER, 't', 0)
Token(STAR, '*', 1)
Token(LPAREN, '(', 2)
Token(NUMBER, 42, 3)
Token(AMPERSAND, '&', 5)
Token(IDENTIFIER, 't', 6)
Token(RSHIFT, '>>', 7)
Token(NUMBER, 10, 9)
Token(RPAREN, ')', 11)
Token(EOF, 12)
"""

from dataclasses import dataclass
from enum import Enum, auto
from typing import List, Optional, Union
import string

from bytebeat.compiler.errors import Category, DiagnosticCollector, Severity


# =============================================================================
# Token Type Enumeration
# =============================================================================

class TokenType(Enum):
    """
    Token types for bytebeat expressions.

    Each operator has its own type so the parser can dispatch on types
    alone; the lexeme is kept on the token for error messages.
    """

    # === Structural Tokens ===
    EOF = auto()            # End of input
    ERROR = auto()          # Anything the language does not accept

    # === Identifiers and Literals ===
    IDENTIFIER = auto()     # Variable names (only 't' is valid)
    NUMBER = auto()         # Integer literals (all formats)

    # === Arithmetic Operators ===
    PLUS = auto()           # +
    MINUS = auto()          # -
    STAR = auto()           # *
    SLASH = auto()          # /
    PERCENT = auto()        # %

    # === Bitwise Operators ===
    AMPERSAND = auto()      # &
    PIPE = auto()           # |
    CARET = auto()          # ^
    TILDE = auto()          # ~
    LSHIFT = auto()         # <<
    RSHIFT = auto()         # >>

    # === Logical Operators ===
    AND = auto()            # &&
    OR = auto()             # ||
    NOT = auto()            # !

    # === Comparison Operators ===
    EQ = auto()             # ==
    NE = auto()             # !=
    LT = auto()             # <
    LE = auto()             # <=
    GT = auto()             # >
    GE = auto()             # >=

    # === Ternary and Grouping ===
    QUESTION = auto()       # ?
    COLON = auto()          # :
    LPAREN = auto()         # (
    RPAREN = auto()         # )


class NumberBase(Enum):
    """Base an integer literal was written in."""
    BINARY = 2
    OCTAL = 8
    DECIMAL = 10
    HEXADECIMAL = 16


# =============================================================================
# Token Data Class
# =============================================================================

@dataclass(frozen=True)
class Token:
    """
    Represents a single token from a bytebeat expression.

    Attributes:
        type: The TokenType classification
        value: int for NUMBER (already wrapped to 32 bits), the name for
            IDENTIFIER, the message for ERROR, the lexeme for operators,
            None for EOF
        column: 0-based column of the first character of the token
        lexeme: The exact source text of the token
        base: Literal base for NUMBER tokens, None otherwise
    """
    type: TokenType
    value: Union[str, int, None]
    column: int
    lexeme: str = ""
    base: Optional[NumberBase] = None

    def __repr__(self) -> str:
        """Format token for debugging output."""
        if self.value is not None:
            if isinstance(self.value, int):
                return f"Token({self.type.name}, {self.value}, {self.column})"
            return f"Token({self.type.name}, {self.value!r}, {self.column})"
        return f"Token({self.type.name}, {self.column})"

    @property
    def length(self) -> int:
        """Number of source characters the token covers (at least 1)."""
        return max(1, len(self.lexeme))

    @property
    def is_error(self) -> bool:
        return self.type == TokenType.ERROR


INT32_MIN = -0x80000000
INT32_MAX = 0x7FFFFFFF


def wrap_int32(value: int) -> int:
    """Truncate an integer to 32 bits and reinterpret it as signed."""
    return ((value + 0x80000000) & 0xFFFFFFFF) - 0x80000000


# =============================================================================
# Lexer Implementation
# =============================================================================

class Lexer:
    """
    Tokenizes a bytebeat expression.

    Usage:
        lexer = Lexer(source_text, diagnostics)
        tokens = lexer.tokenize()

    Attributes:
        source: The expression being tokenized
        diagnostics: Optional sink for lexical errors and warnings
    """

    # Characters that can start an identifier
    IDENT_START = string.ascii_letters + "_"

    # Characters that can continue an identifier (or illegally follow a number)
    IDENT_CHARS = string.ascii_letters + string.digits + "_"

    # Whitespace skipped between tokens; newline is deliberately absent
    WHITESPACE = " \t\r\f\v"

    SINGLE_TOKENS = {
        "+": TokenType.PLUS,
        "-": TokenType.MINUS,
        "*": TokenType.STAR,
        "/": TokenType.SLASH,
        "%": TokenType.PERCENT,
        "^": TokenType.CARET,
        "~": TokenType.TILDE,
        "?": TokenType.QUESTION,
        ":": TokenType.COLON,
        "(": TokenType.LPAREN,
        ")": TokenType.RPAREN,
    }

    def __init__(self, source: str, diagnostics: Optional[DiagnosticCollector] = None):
        self.source = source
        self.diagnostics = diagnostics
        self._pos = 0

    def tokenize(self) -> List[Token]:
        """
        Scan the whole source.

        Returns:
            The token list, always terminated by an EOF token
        """
        tokens = []
        while True:
            self._skip_whitespace()
            if self._at_end():
                break
            tokens.append(self._scan_token())

        tokens.append(Token(TokenType.EOF, None, self._pos))
        return tokens

    # =========================================================================
    # Character Access Methods
    # =========================================================================

    def _at_end(self) -> bool:
        return self._pos >= len(self.source)

    def _peek(self, offset: int = 0) -> str:
        """
        Look at character at current position + offset without advancing.

        Returns empty string if past end of source.
        """
        pos = self._pos + offset
        if pos >= len(self.source):
            return ""
        return self.source[pos]

    def _advance(self) -> str:
        if self._at_end():
            return ""
        char = self.source[self._pos]
        self._pos += 1
        return char

    def _match(self, expected: str) -> bool:
        """Consume next character if it matches expected."""
        if self._peek() == expected:
            self._pos += 1
            return True
        return False

    def _skip_whitespace(self) -> None:
        while self._peek() and self._peek() in self.WHITESPACE:
            self._pos += 1

    # =========================================================================
    # Token Creation
    # =========================================================================

    def _make_token(
        self,
        token_type: TokenType,
        start: int,
        value: Union[str, int, None] = None,
        base: Optional[NumberBase] = None,
    ) -> Token:
        """Create a token spanning from start to the current position."""
        lexeme = self.source[start:self._pos]
        if value is None and token_type != TokenType.EOF:
            value = lexeme
        return Token(type=token_type, value=value, column=start, lexeme=lexeme, base=base)

    def _error_token(self, start: int, message: str, hint: Optional[str] = None) -> Token:
        """Create an ERROR token for source[start:pos] and record it."""
        token = self._make_token(TokenType.ERROR, start, value=message)
        if self.diagnostics is not None:
            self.diagnostics.record(
                start,
                message,
                category=Category.LEXICAL,
                length=token.length,
                hint=hint,
            )
        return token

    # =========================================================================
    # Scanning
    # =========================================================================

    def _scan_token(self) -> Token:
        char = self._peek()

        if char in self.IDENT_START:
            return self._scan_identifier()

        if char.isdigit() and char.isascii():
            return self._scan_number()

        return self._scan_operator()

    def _scan_identifier(self) -> Token:
        """Identifiers start with a letter or underscore."""
        start = self._pos
        while self._peek() and self._peek() in self.IDENT_CHARS:
            self._pos += 1
        return self._make_token(TokenType.IDENTIFIER, start)

    def _scan_number(self) -> Token:
        """
        Scan a numeric literal.

        Handles:
        - Decimal: 123
        - Hexadecimal: 0x7F or 0X7F
        - Octal: 0177
        - Binary: 0b1010 or 0B1010

        Any identifier characters directly after the digits make the whole
        run (digits included) one malformed literal, so '12ab' is reported
        once rather than as a number followed by an unknown variable.
        """
        start = self._pos

        if self._peek() == "0" and self._peek(1).lower() == "x":
            self._pos += 2
            return self._scan_digits(start, string.hexdigits, NumberBase.HEXADECIMAL, "0x")

        if self._peek() == "0" and self._peek(1).lower() == "b":
            self._pos += 2
            return self._scan_digits(start, "01", NumberBase.BINARY, "0b")

        while self._peek() and self._peek() in string.digits:
            self._pos += 1

        if self._consume_suffix():
            return self._error_token(
                start,
                f"invalid integer literal '{self.source[start:self._pos]}'",
                hint="identifiers cannot start with a digit",
            )

        digits = self.source[start:self._pos]
        if len(digits) > 1 and digits[0] == "0":
            if any(d in "89" for d in digits):
                return self._error_token(
                    start,
                    f"invalid digit in octal literal '{digits}'",
                    hint="a leading 0 makes a literal octal; remove it for decimal",
                )
            return self._number_token(start, int(digits, 8), NumberBase.OCTAL)

        return self._number_token(start, int(digits), NumberBase.DECIMAL)

    def _scan_digits(self, start: int, digits: str, base: NumberBase, prefix: str) -> Token:
        """Scan the digits after a 0x or 0b prefix."""
        digits_start = self._pos
        while self._peek() and self._peek() in digits:
            self._pos += 1
        body = self.source[digits_start:self._pos]

        if self._consume_suffix():
            return self._error_token(
                start,
                f"invalid integer literal '{self.source[start:self._pos]}'",
            )
        if not body:
            kind = "hexadecimal" if base == NumberBase.HEXADECIMAL else "binary"
            return self._error_token(start, f"expected {kind} digits after '{prefix}'")

        return self._number_token(start, int(body, base.value), base)

    def _consume_suffix(self) -> bool:
        """Consume identifier characters glued to a literal; True if any."""
        suffix_start = self._pos
        while self._peek() and self._peek() in self.IDENT_CHARS:
            self._pos += 1
        return self._pos > suffix_start

    def _number_token(self, start: int, raw: int, base: NumberBase) -> Token:
        value = wrap_int32(raw)
        if value != raw and self.diagnostics is not None:
            self.diagnostics.record(
                start,
                f"integer literal '{self.source[start:self._pos]}' does not fit "
                f"in 32 bits; truncated to {value}",
                category=Category.LEXICAL,
                severity=Severity.WARNING,
                length=self._pos - start,
            )
        return self._make_token(TokenType.NUMBER, start, value=value, base=base)

    def _scan_operator(self) -> Token:
        """
        Scan an operator or delimiter.

        Two-character operators take priority over their one-character
        prefixes (maximal munch).
        """
        start = self._pos
        char = self._advance()

        if char == "&":
            if self._match("&"):
                return self._make_token(TokenType.AND, start)
            return self._make_token(TokenType.AMPERSAND, start)

        if char == "|":
            if self._match("|"):
                return self._make_token(TokenType.OR, start)
            return self._make_token(TokenType.PIPE, start)

        if char == "=":
            if self._match("="):
                return self._make_token(TokenType.EQ, start)
            return self._error_token(
                start,
                "assignment is not supported",
                hint="use '==' to compare values",
            )

        if char == "!":
            if self._match("="):
                return self._make_token(TokenType.NE, start)
            return self._make_token(TokenType.NOT, start)

        if char == "<":
            if self._match("<"):
                return self._make_token(TokenType.LSHIFT, start)
            if self._match("="):
                return self._make_token(TokenType.LE, start)
            return self._make_token(TokenType.LT, start)

        if char == ">":
            if self._match(">"):
                return self._make_token(TokenType.RSHIFT, start)
            if self._match("="):
                return self._make_token(TokenType.GE, start)
            return self._make_token(TokenType.GT, start)

        if char in self.SINGLE_TOKENS:
            return self._make_token(self.SINGLE_TOKENS[char], start)

        if char == "\n":
            return self._error_token(
                start,
                "line break in expression",
                hint="a bytebeat expression must fit on a single line",
            )

        return self._error_token(start, f"unexpected character {char!r}")


def tokenize(source: str, diagnostics: Optional[DiagnosticCollector] = None) -> List[Token]:
    """
    Tokenize a bytebeat expression.

    Always succeeds; problems become ERROR tokens (and diagnostics when a
    collector is supplied). The returned list ends with an EOF token.
    """
    return Lexer(source, diagnostics).tokenize()
