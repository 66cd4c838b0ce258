"""
Bytebeat Compiler Diagnostics
=============================

This module defines the diagnostic records produced by the lexer and the
parser, and the collector that accumulates them during one compile.

Unlike a conventional compiler front end, the bytebeat compiler never raises
for bad input. Every problem is recorded as a Diagnostic with the exact
column where it was found, so an editor can underline all of them after a
single pass. The raising convenience API (compile_beat) wraps the collected
diagnostics in a BeatCompilationError.

Diagnostic Taxonomy
-------------------
- LEXICAL: unrecognized character, illegal literal form, newline in input
- SYNTAX: unexpected token, unmatched parenthesis, missing operand
- SEMANTIC: identifier other than 't'

Severity is ERROR for all of the above. WARNING is used for problems that
do not prevent evaluation, such as an integer literal truncated to 32 bits.

Report Format
-------------
    <input>:1:5: error: unknown variable 'x'
        t*(x&t>>10)
           ^
    hint: the only variable available is 't'
"""

from dataclasses import dataclass
from enum import Enum, auto
from typing import List, Optional

from bytebeat.errors import BeatCompilationError, SourceLocation


__all__ = [
    "Severity",
    "Category",
    "Diagnostic",
    "DiagnosticCollector",
    "BeatCompilationError",
]


# =============================================================================
# Diagnostic Record
# =============================================================================

class Severity(Enum):
    """How serious a diagnostic is."""
    ERROR = auto()
    WARNING = auto()


class Category(Enum):
    """Which compiler stage found the problem."""
    LEXICAL = auto()
    SYNTAX = auto()
    SEMANTIC = auto()


@dataclass(frozen=True)
class Diagnostic:
    """
    A positioned, human-readable description of a problem.

    Attributes:
        column: 0-based column in the source where the problem starts
        message: Description of the problem
        severity: ERROR or WARNING
        category: Which stage produced it (lexical, syntax, semantic)
        length: Number of characters to underline (at least 1)
        hint: Optional suggestion for fixing the problem
    """
    column: int
    message: str
    severity: Severity = Severity.ERROR
    category: Category = Category.SYNTAX
    length: int = 1
    hint: Optional[str] = None

    @property
    def is_error(self) -> bool:
        return self.severity == Severity.ERROR

    def format(self, source: Optional[str] = None, filename: str = "<input>") -> str:
        """
        Format the diagnostic with location, source context and hint.

        The caret line underlines `length` characters starting at the
        diagnostic's column. Columns past the end of the source (for
        example an error at end of input) put the caret just after the
        last character.
        """
        kind = "error" if self.is_error else "warning"
        location = SourceLocation(filename, self.column)
        parts = [f"{location}: {kind}: {self.message}"]

        if source is not None:
            parts.append(f"    {source}")
            padding = " " * (4 + self.column)
            parts.append(f"{padding}{'^' * max(1, self.length)}")

        if self.hint:
            parts.append(f"hint: {self.hint}")

        return "\n".join(parts)

    def __str__(self) -> str:
        return self.format()


# =============================================================================
# Diagnostic Collection (for multi-error reporting)
# =============================================================================

class DiagnosticCollector:
    """
    Collects diagnostics from the lexer and parser of a single compile.

    The collector is pure accumulation: recording never raises and never
    alters control flow. Two diagnostics of the same category at the same
    column are considered duplicates, and only the first is kept; this
    stops one bad token from being reported by both the lexer and the
    parser, and suppresses cascades from error recovery.

    Example:
        sink = DiagnosticCollector()
        tokens = tokenize("t*(x&t>>10", sink)
        program = parse(tokens, sink)

        if sink.has_errors():
            print(sink.report("t*(x&t>>10"))
    """

    def __init__(self, max_errors: int = 100):
        """
        Initialize the collector.

        Args:
            max_errors: Maximum error diagnostics to keep; later errors are
                dropped. Warnings are not capped.
        """
        self.max_errors = max(1, max_errors)
        self._diagnostics: List[Diagnostic] = []
        self._seen: set = set()
        self._error_count = 0

    def record(
        self,
        column: int,
        message: str,
        *,
        category: Category = Category.SYNTAX,
        severity: Severity = Severity.ERROR,
        length: int = 1,
        hint: Optional[str] = None,
    ) -> bool:
        """
        Record a diagnostic.

        Returns:
            True if the diagnostic was kept, False if it was a duplicate or
            the error cap had been reached.
        """
        key = (column, category)
        if key in self._seen:
            return False
        if severity == Severity.ERROR:
            if self._error_count >= self.max_errors:
                return False
            self._error_count += 1

        self._seen.add(key)
        self._diagnostics.append(
            Diagnostic(
                column=column,
                message=message,
                severity=severity,
                category=category,
                length=max(1, length),
                hint=hint,
            )
        )
        return True

    def has_errors(self) -> bool:
        """Return True if any error diagnostics have been recorded."""
        return self._error_count > 0

    def should_stop(self) -> bool:
        """Return True if max_errors has been reached."""
        return self._error_count >= self.max_errors

    def into_sorted_list(self) -> List[Diagnostic]:
        """
        Return all diagnostics ordered by column.

        Diagnostics at the same column keep the order they were recorded in
        (the sort is stable).
        """
        return sorted(self._diagnostics, key=lambda d: d.column)

    def errors(self) -> List[Diagnostic]:
        """Return the error diagnostics, ordered by column."""
        return [d for d in self.into_sorted_list() if d.is_error]

    def warnings(self) -> List[Diagnostic]:
        """Return the warning diagnostics, ordered by column."""
        return [d for d in self.into_sorted_list() if not d.is_error]

    def error_count(self) -> int:
        return self._error_count

    def warning_count(self) -> int:
        return len(self._diagnostics) - self._error_count

    def __len__(self) -> int:
        return len(self._diagnostics)

    def report(self, source: Optional[str] = None, filename: str = "<input>") -> str:
        """Format all diagnostics for display, followed by a summary line."""
        return format_report(self.into_sorted_list(), source, filename)

    def raise_if_errors(self, source: str = "") -> None:
        """Raise a BeatCompilationError if any errors were recorded."""
        if self.has_errors():
            raise BeatCompilationError(
                self.errors(), source=source, report=self.report(source)
            )


def format_report(
    diagnostics: List[Diagnostic],
    source: Optional[str] = None,
    filename: str = "<input>",
) -> str:
    """Format a list of diagnostics the way DiagnosticCollector.report does."""
    lines = []
    for diagnostic in diagnostics:
        lines.append(diagnostic.format(source, filename))
        lines.append("")

    errors = sum(1 for d in diagnostics if d.is_error)
    warnings = len(diagnostics) - errors
    error_word = "error" if errors == 1 else "errors"
    warning_word = "warning" if warnings == 1 else "warnings"
    lines.append(f"{errors} {error_word}, {warnings} {warning_word}")

    return "\n".join(lines)
