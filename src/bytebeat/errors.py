"""
Bytebeat Toolkit Error Hierarchy
================================

This module defines the exception hierarchy for the whole toolkit.
All exceptions inherit from BytebeatError, allowing callers to catch all
toolkit-related errors with a single except clause if desired.

Exception Hierarchy
-------------------
BytebeatError (base)
├── BeatCompilationError - expression failed to compile (carries diagnostics)
├── OracleError (reference oracle handling)
│   ├── CorpusFormatError - malformed corpus CSV
│   └── ReferenceBuildError - C reference program failed to build or run
└── RenderError - sample rendering or output failed

Design Philosophy
-----------------
The compiler itself never raises for bad source text: lexical, syntax and
semantic problems are reported as diagnostics (see
bytebeat.compiler.errors). Exceptions are reserved for the raising
convenience APIs and for the tooling built around the compiler.

Error messages follow this format:
    <input>:1:column: error: description
        source_line_text
        ^^^ (pointer to error location)
    hint: suggestion for fixing (when available)
"""

from dataclasses import dataclass
from typing import Optional


# =============================================================================
# Base Exception Class
# =============================================================================

class BytebeatError(Exception):
    """
    Base exception for all toolkit errors.

    All exceptions in the toolkit inherit from this class, allowing callers
    to catch everything with a single except clause:

        try:
            beat = compile_beat("t*(42&t>>10)")
        except BytebeatError as e:
            print(f"Error: {e}")
    """
    pass


# =============================================================================
# Source Location Tracking
# =============================================================================

@dataclass(frozen=True)
class SourceLocation:
    """
    Represents a location in a bytebeat expression for error reporting.

    Bytebeat expressions are single-line, so a location is just a column.
    The column is 0-based internally (it indexes the source string) and is
    printed 1-based, matching the way compilers report positions.

    Attributes:
        filename: Name of the source (or "<input>" for string input)
        column: Column number (0-based)
    """
    filename: str
    column: int

    def __str__(self) -> str:
        """Format as 'filename:1:column' for error messages."""
        return f"{self.filename}:1:{self.column + 1}"


# =============================================================================
# Compilation Exceptions
# =============================================================================

class BeatCompilationError(BytebeatError):
    """
    Aggregate compilation failure.

    Raised by compile_beat() when an expression produced error diagnostics.
    The message is the formatted multi-error report; the individual
    diagnostics remain available for callers that render them differently
    (for example as underlines in an editor).

    Attributes:
        diagnostics: The ordered diagnostics that caused the failure
        source: The expression that failed to compile
    """

    def __init__(self, diagnostics: list, source: str = "", report: Optional[str] = None):
        self.diagnostics = list(diagnostics)
        self.source = source
        if report is None:
            count = len(self.diagnostics)
            word = "error" if count == 1 else "errors"
            report = f"{count} {word} in bytebeat expression"
        super().__init__(report)


# =============================================================================
# Oracle Exceptions
# =============================================================================

class OracleError(BytebeatError):
    """Base exception for reference oracle handling errors."""
    pass


class CorpusFormatError(OracleError):
    """
    Invalid corpus file.

    Raised when reading a corpus CSV that:
    - Lacks the 'name' or 'code' column
    - Contains an empty or duplicate name
    - Uses a name that is not a valid C identifier suffix
    """

    def __init__(self, message: str, line: Optional[int] = None):
        self.line = line
        if line is not None:
            message = f"line {line}: {message}"
        super().__init__(message)


class ReferenceBuildError(OracleError):
    """
    Raised when compiling or running the C reference program fails.

    Carries the command and its output so the failure can be reproduced
    by hand.
    """

    def __init__(
        self,
        message: str,
        *,
        command: Optional[str] = None,
        stdout: Optional[str] = None,
        stderr: Optional[str] = None,
        return_code: Optional[int] = None,
    ):
        self.command = command
        self.stdout = stdout
        self.stderr = stderr
        self.return_code = return_code

        parts = [message]
        if command:
            parts.append(f"command: {command}")
        if return_code is not None:
            parts.append(f"exit status: {return_code}")
        if stderr:
            parts.append(stderr.rstrip())
        super().__init__("\n".join(parts))


# =============================================================================
# Rendering Exceptions
# =============================================================================

class RenderError(BytebeatError):
    """
    Error rendering samples.

    Raised when:
    - Sample rate or duration is not positive
    - The output file cannot be written
    """
    pass
