"""
Bytebeat Compiler
=================

A fault-tolerant compiler for bytebeat expressions: single-line C integer
expressions over the sample counter `t`, evaluated once per sample to
produce an unsigned 8-bit audio stream.

Features
--------
- Every lexical, syntax and semantic error in one pass, each with its
  exact column
- Bit-exact C int32 semantics (wraparound, truncating division, masked
  shifts, short-circuit logic)
- Division and modulo by zero defined as 0
- Atomic, versioned replacement of the playing beat

Usage
-----
    >>> from bytebeat.compiler import compile_program, Beat
    >>> program = compile_program("t*(42&t>>10)")
    >>> beat = Beat(program)
    >>> beat.render(4)
    b'\\x00\\x00\\x00\\x00'

    >>> compile_program("t*(x&t>>10)").errors[0].column
    3
"""

from bytebeat.compiler.ast import (
    ASTPrinter,
    ASTVisitor,
    Binary,
    BinaryOperator,
    Expression,
    IntLiteral,
    Ternary,
    TimeVar,
    Unary,
    UnaryOperator,
    format_expression,
)
from bytebeat.compiler.compiler import (
    Beat,
    BeatSlot,
    BeatSnapshot,
    compile_beat,
    compile_program,
    lower,
)
from bytebeat.compiler.errors import (
    BeatCompilationError,
    Category,
    Diagnostic,
    DiagnosticCollector,
    Severity,
    format_report,
)
from bytebeat.compiler.evaluator import Evaluator, evaluate, evaluate_int32
from bytebeat.compiler.lexer import Lexer, NumberBase, Token, TokenType, tokenize
from bytebeat.compiler.parser import Parser, Program, parse, parse_source

__all__ = [
    # Main API
    "compile_program",
    "compile_beat",
    "Beat",
    "BeatSlot",
    "BeatSnapshot",
    "Program",
    "lower",
    # Diagnostics
    "BeatCompilationError",
    "Category",
    "Diagnostic",
    "DiagnosticCollector",
    "Severity",
    "format_report",
    # Lexer
    "Lexer",
    "NumberBase",
    "Token",
    "TokenType",
    "tokenize",
    # Parser
    "Parser",
    "parse",
    "parse_source",
    # Evaluator
    "Evaluator",
    "evaluate",
    "evaluate_int32",
    # AST Nodes
    "ASTPrinter",
    "ASTVisitor",
    "Binary",
    "BinaryOperator",
    "Expression",
    "IntLiteral",
    "Ternary",
    "TimeVar",
    "Unary",
    "UnaryOperator",
    "format_expression",
]
