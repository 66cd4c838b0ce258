"""
Bytebeat Toolkit - Fault-Tolerant Bytebeat Compiler
===================================================

This package compiles "bytebeat" expressions: single-line C integer
expressions over a sample counter `t`, evaluated once per sample to
produce an 8-bit audio stream. `t*(42&t>>10)` at 8000 samples per second
is the classic example.

Main Components
---------------
- **compiler**: lexer, parser, evaluator and the Beat facade
    Reports every error in one pass with exact columns, and evaluates
    with bit-exact C int32 semantics

- **oracle**: reference checking (bbref)
    Builds reference output with the system C compiler and checks the
    evaluator against it sample by sample

- **render**: offline rendering (bbrender)
    Raw unsigned 8-bit streams and WAV files

Quick Start
-----------
Compile and play a beat:
    >>> from bytebeat import compile_beat
    >>> beat = compile_beat("t*(42&t>>10)")
    >>> samples = beat.render(8000)     # one second at 8 kHz

See every problem at once:
    >>> from bytebeat import compile_program
    >>> for d in compile_program("t*(x&t>>10").errors:
    ...     print(d.column, d.message)
    2 unmatched '('
    3 unknown variable 'x'

Or use the command-line tools:
    $ bbc "t*(42&t>>10)" --eval 1000
    $ bbrender "t*(42&t>>10)" -o melody.wav --seconds 30
    $ bbrender "t*(42&t>>10)" -o - | aplay -f U8 -r 8000
    $ bbref verify tests/fixtures/oracle/corpus.csv -d tests/fixtures/oracle

Version History
---------------
1.0.0 - Initial release with compiler, renderer and reference oracle
"""

__version__ = "1.0.0"

# =============================================================================
# Public API Exports
# =============================================================================

from bytebeat.compiler import (
    Beat,
    BeatSlot,
    Diagnostic,
    Program,
    compile_beat,
    compile_program,
    evaluate,
    parse,
    tokenize,
)
from bytebeat.config import BytebeatConfig, get_default_config
from bytebeat.errors import (
    BeatCompilationError,
    BytebeatError,
    CorpusFormatError,
    OracleError,
    ReferenceBuildError,
    RenderError,
)

__all__ = [
    # Version info
    "__version__",
    # Compiler
    "Beat",
    "BeatSlot",
    "Diagnostic",
    "Program",
    "compile_beat",
    "compile_program",
    "evaluate",
    "parse",
    "tokenize",
    # Configuration
    "BytebeatConfig",
    "get_default_config",
    # Exception hierarchy
    "BytebeatError",
    "BeatCompilationError",
    "OracleError",
    "CorpusFormatError",
    "ReferenceBuildError",
    "RenderError",
]
