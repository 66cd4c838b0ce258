"""
Bytebeat Reference Oracle
=========================

Tools for checking the evaluator against a real C compiler: a corpus of
named expressions, a generator for the C reference program, a builder
that runs it, and a sample-by-sample parity checker.

Usage
-----
    >>> from bytebeat.oracle import load_corpus, verify_corpus
    >>> entries = load_corpus("tests/fixtures/oracle/corpus.csv")
    >>> results = verify_corpus(entries, "tests/fixtures/oracle")
    >>> all(r.passed for r in results)
    True
"""

from bytebeat.oracle.corpus import CorpusEntry, load_corpus, load_reference
from bytebeat.oracle.reference import (
    ParityResult,
    build_references,
    check_parity,
    generate_reference_program,
    verify_corpus,
)

__all__ = [
    "CorpusEntry",
    "load_corpus",
    "load_reference",
    "ParityResult",
    "build_references",
    "check_parity",
    "generate_reference_program",
    "verify_corpus",
]
