"""
Bytebeat Compiler Main Module
=============================

This module provides the main compiler interface for bytebeat expressions.
It orchestrates the complete compilation process:

    Source → Lex → Parse → Lower → Beat

Usage
-----
Command line:
    $ bbc "t*(42&t>>10)" --eval 1000

Programmatic:
    >>> from bytebeat.compiler import compile_beat
    >>> beat = compile_beat("t*(42&t>>10)")
    >>> beat.sample_for(1000)
    0

Compilation Pipeline
--------------------
1. **Lexical Analysis**: Convert source to tokens, recording bad characters
2. **Parsing**: Build the expression tree, recording every syntax and
   semantic error in one pass
3. **Lowering**: Turn the tree into a chain of closures, so generating a
   sample does no per-node dispatch

Blank Input
-----------
A source containing only whitespace compiles to the silent beat, which
produces 0 for every t. An editor can therefore clear its input without
the player reporting an error.

Live Replacement
----------------
BeatSlot holds the beat currently being played. A new source is compiled
off to the side and only published if it compiled cleanly; otherwise the
previous beat keeps playing and the diagnostics are handed back.
"""

from dataclasses import dataclass
from typing import Callable, List, Optional
import logging
import threading

from bytebeat.compiler.ast import (
    Binary,
    BinaryOperator,
    Expression,
    IntLiteral,
    Ternary,
    TimeVar,
    Unary,
    left_spine,
    unary_chain,
)
from bytebeat.compiler.errors import (
    BeatCompilationError,
    Diagnostic,
    DiagnosticCollector,
    format_report,
)
from bytebeat.compiler.evaluator import BINARY_FUNCTIONS, UNARY_FUNCTIONS
from bytebeat.compiler.lexer import tokenize, wrap_int32
from bytebeat.compiler.parser import Parser, Program


logger = logging.getLogger(__name__)


# =============================================================================
# Compilation
# =============================================================================

def compile_program(source: str, max_errors: int = 100) -> Program:
    """
    Compile source text to a Program.

    Never raises for bad input. Blank source gives a Program whose root is
    the literal 0.

    Args:
        source: The bytebeat expression
        max_errors: Maximum error diagnostics to collect

    Returns:
        The Program, OK or failed, with all diagnostics
    """
    if not source.strip():
        logger.debug("Blank source: compiling the silent beat")
        return Program(root=IntLiteral(0))

    diagnostics = DiagnosticCollector(max_errors=max_errors)
    tokens = tokenize(source, diagnostics)
    logger.debug(f"Lexed {len(tokens)} tokens")

    program = Parser(tokens, diagnostics).parse()
    if program.ok:
        logger.debug(f"Compiled {source!r} ({len(program.warnings)} warnings)")
    else:
        logger.debug(f"Compilation of {source!r} failed with {len(program.errors)} errors")
    return program


def compile_beat(source: str, max_errors: int = 100) -> "Beat":
    """
    Compile source text to a playable Beat.

    Raises:
        BeatCompilationError: If the source has errors; the exception
            carries the diagnostics and a formatted report
    """
    program = compile_program(source, max_errors=max_errors)
    if not program.ok:
        raise BeatCompilationError(
            program.errors,
            source=source,
            report=format_report(list(program.diagnostics), source),
        )
    return Beat(program, source)


# =============================================================================
# Lowering
# =============================================================================

SampleFunction = Callable[[int], int]


def lower(node: Expression) -> SampleFunction:
    """
    Turn an expression tree into a function of t returning the int32 value.

    Each node becomes one closure that calls its children's closures
    directly. Runs of prefix or left-associative operators become a single
    closure with a loop, so a long flat expression does not nest calls.
    The arithmetic is shared with the tree-walking evaluator, so the two
    always agree.
    """
    if isinstance(node, IntLiteral):
        value = node.value
        return lambda t: value

    if isinstance(node, TimeVar):
        return lambda t: t

    if isinstance(node, Unary):
        operand, operators = unary_chain(node)
        inner = lower(operand)
        if len(operators) == 1:
            apply = UNARY_FUNCTIONS[operators[0]]
            return lambda t: apply(inner(t))

        functions = [UNARY_FUNCTIONS[op] for op in operators]

        def run_unary(t: int) -> int:
            value = inner(t)
            for function in functions:
                value = function(value)
            return value

        return run_unary

    if isinstance(node, Binary):
        first, chain = left_spine(node)
        if len(chain) == 1:
            return _lower_pair(node.op, lower(first), lower(node.right))

        start = lower(first)
        links = [(link.op, lower(link.right)) for link in chain]

        def run_chain(t: int) -> int:
            value = start(t)
            for op, right in links:
                if op == BinaryOperator.LOGICAL_AND:
                    value = 1 if value != 0 and right(t) != 0 else 0
                elif op == BinaryOperator.LOGICAL_OR:
                    value = 1 if value != 0 or right(t) != 0 else 0
                else:
                    value = BINARY_FUNCTIONS[op](value, right(t))
            return value

        return run_chain

    if isinstance(node, Ternary):
        condition = lower(node.condition)
        then_expr = lower(node.then_expr)
        else_expr = lower(node.else_expr)
        return lambda t: then_expr(t) if condition(t) != 0 else else_expr(t)

    raise TypeError(f"cannot lower {type(node).__name__}")


def _lower_pair(op: BinaryOperator, left: SampleFunction, right: SampleFunction) -> SampleFunction:
    if op == BinaryOperator.LOGICAL_AND:
        return lambda t: 1 if left(t) != 0 and right(t) != 0 else 0
    if op == BinaryOperator.LOGICAL_OR:
        return lambda t: 1 if left(t) != 0 or right(t) != 0 else 0

    apply = BINARY_FUNCTIONS[op]
    return lambda t: apply(left(t), right(t))


# =============================================================================
# Beat
# =============================================================================

class Beat:
    """
    A compiled, playable bytebeat.

    A Beat is immutable and holds no per-playback state, so it can be
    shared between threads; the caller owns the t counter.

    Example:
        beat = compile_beat("t&t>>8")
        first_second = beat.render(8000)

    Attributes:
        source: The expression the beat was compiled from
        program: The successful Program (root and any warnings)
    """

    def __init__(self, program: Program, source: str = ""):
        if not program.ok:
            raise ValueError("cannot build a Beat from a failed program")
        self.program = program
        self.source = source
        self._function = lower(program.root)

    @classmethod
    def silent(cls) -> "Beat":
        """The beat that produces 0 for every t."""
        return cls(Program(root=IntLiteral(0)), "")

    @property
    def root(self) -> Expression:
        return self.program.root

    @property
    def warnings(self) -> List[Diagnostic]:
        return self.program.warnings

    @property
    def is_silent(self) -> bool:
        return not self.source.strip()

    def value_for(self, t: int) -> int:
        """Return the full 32-bit value of the expression at t."""
        return self._function(wrap_int32(t))

    def sample_for(self, t: int) -> int:
        """Return the unsigned 8-bit sample at t."""
        return self._function(wrap_int32(t)) & 0xFF

    def samples(self, start: int, count: int) -> bytes:
        """
        Generate count consecutive samples starting at t = start.

        t wraps around like a C int, so long renders keep going past
        2**31 - 1 the way a 32-bit counter would.
        """
        function = self._function
        return bytes(
            function(wrap_int32(t)) & 0xFF for t in range(start, start + count)
        )

    def render(self, count: int) -> bytes:
        """Generate the first count samples (t = 0, 1, ...)."""
        return self.samples(0, count)

    def __repr__(self) -> str:
        return f"Beat({self.source!r})"


# =============================================================================
# Live Replacement
# =============================================================================

@dataclass(frozen=True)
class BeatSnapshot:
    """An immutable (version, beat) pair published by a BeatSlot."""
    version: int
    beat: Beat


class BeatSlot:
    """
    Holds the beat currently being played and swaps it atomically.

    Readers call `current` (or `beat`) without locking and get a consistent
    snapshot; a generation loop keeps using the snapshot it has until it
    asks again. Writers are serialized by a lock so versions increase by
    exactly one per successful publication.

    Example:
        slot = BeatSlot()
        program = slot.try_replace("t*(42&t>>10)")
        if not program.ok:
            show_errors(program.errors)   # old beat still playing
    """

    def __init__(self, beat: Optional[Beat] = None, max_errors: int = 100):
        self.max_errors = max_errors
        self._lock = threading.Lock()
        self._snapshot = BeatSnapshot(0, beat if beat is not None else Beat.silent())

    @property
    def current(self) -> BeatSnapshot:
        return self._snapshot

    @property
    def beat(self) -> Beat:
        return self._snapshot.beat

    @property
    def version(self) -> int:
        return self._snapshot.version

    def replace(self, beat: Beat) -> int:
        """Publish a beat unconditionally; returns its version."""
        with self._lock:
            version = self._snapshot.version + 1
            self._snapshot = BeatSnapshot(version, beat)
        logger.info(f"Published beat version {version}: {beat.source!r}")
        return version

    def try_replace(self, source: str) -> Program:
        """
        Compile source and publish it if it compiled cleanly.

        Returns:
            The compiled Program. When it is not OK, nothing was published
            and the previous beat stays current.
        """
        program = compile_program(source, max_errors=self.max_errors)
        if program.ok:
            self.replace(Beat(program, source))
        else:
            logger.info(
                f"Kept beat version {self.version}: "
                f"new source has {len(program.errors)} errors"
            )
        return program
