# =============================================================================
# test_diagnostics.py - Diagnostics and Error Hierarchy Tests
# =============================================================================
# Tests for Diagnostic, DiagnosticCollector, format_report and the toolkit
# exception classes.
#
# Test coverage includes:
#   - Duplicate suppression by (column, category)
#   - The error cap, which never drops warnings
#   - Stable ordering by column
#   - Report formatting with carets, hints and the summary line
# =============================================================================

import pytest

from bytebeat.compiler.errors import (
    Category,
    Diagnostic,
    DiagnosticCollector,
    Severity,
    format_report,
)
from bytebeat.errors import (
    BeatCompilationError,
    BytebeatError,
    CorpusFormatError,
    OracleError,
    ReferenceBuildError,
    RenderError,
    SourceLocation,
)


# =============================================================================
# Diagnostic Formatting
# =============================================================================

class TestDiagnostic:
    """Formatting of a single diagnostic."""

    def test_format_with_source(self):
        diagnostic = Diagnostic(
            3,
            "unknown variable 'x'",
            category=Category.SEMANTIC,
            hint="the only variable available is 't'",
        )
        assert diagnostic.format("t*(x&t>>10)") == "\n".join([
            "<input>:1:4: error: unknown variable 'x'",
            "    t*(x&t>>10)",
            "       ^",
            "hint: the only variable available is 't'",
        ])

    def test_underline_length(self):
        diagnostic = Diagnostic(2, "invalid integer literal '12ab'", length=4)
        lines = diagnostic.format("t+12ab").splitlines()
        assert lines[2] == "      ^^^^"

    def test_caret_past_end(self):
        lines = Diagnostic(2, "expected expression").format("t*").splitlines()
        assert lines[2] == " " * 6 + "^"

    def test_warning_kind(self):
        diagnostic = Diagnostic(0, "truncated", severity=Severity.WARNING)
        assert not diagnostic.is_error
        assert str(diagnostic) == "<input>:1:1: warning: truncated"

    def test_filename(self):
        assert Diagnostic(4, "oops").format(filename="song.txt") == "song.txt:1:5: error: oops"

    def test_defaults(self):
        diagnostic = Diagnostic(0, "oops")
        assert diagnostic.severity == Severity.ERROR
        assert diagnostic.category == Category.SYNTAX
        assert diagnostic.length == 1
        assert diagnostic.hint is None


# =============================================================================
# Diagnostic Collection
# =============================================================================

class TestCollector:
    """Accumulation, suppression and ordering."""

    def test_empty(self):
        sink = DiagnosticCollector()
        assert not sink.has_errors()
        assert sink.into_sorted_list() == []
        assert len(sink) == 0

    def test_record(self):
        sink = DiagnosticCollector()
        assert sink.record(3, "oops") is True
        assert sink.has_errors()
        assert sink.error_count() == 1
        assert sink.into_sorted_list()[0] == Diagnostic(3, "oops")

    def test_duplicate_same_column_and_category(self):
        sink = DiagnosticCollector()
        assert sink.record(3, "first")
        assert not sink.record(3, "second")
        assert [d.message for d in sink.into_sorted_list()] == ["first"]

    def test_same_column_different_category_kept(self):
        sink = DiagnosticCollector()
        sink.record(3, "lexical", category=Category.LEXICAL)
        sink.record(3, "syntax", category=Category.SYNTAX)
        assert len(sink) == 2

    def test_sorted_by_column_then_insertion(self):
        sink = DiagnosticCollector()
        sink.record(5, "a")
        sink.record(1, "b")
        sink.record(5, "c", category=Category.SEMANTIC)
        sink.record(0, "d")
        assert [d.message for d in sink.into_sorted_list()] == ["d", "b", "a", "c"]

    def test_error_cap(self):
        sink = DiagnosticCollector(max_errors=2)
        assert sink.record(0, "one")
        assert not sink.should_stop()
        assert sink.record(1, "two")
        assert sink.should_stop()
        assert not sink.record(2, "three")
        assert sink.error_count() == 2

    def test_warnings_not_capped(self):
        sink = DiagnosticCollector(max_errors=1)
        sink.record(0, "error")
        assert sink.record(1, "warning", severity=Severity.WARNING)
        assert sink.warning_count() == 1
        assert [d.message for d in sink.warnings()] == ["warning"]
        assert [d.message for d in sink.errors()] == ["error"]

    @pytest.mark.parametrize("requested", [0, -5])
    def test_cap_is_at_least_one(self, requested):
        sink = DiagnosticCollector(max_errors=requested)
        assert sink.max_errors == 1
        assert sink.record(0, "kept")

    def test_length_at_least_one(self):
        sink = DiagnosticCollector()
        sink.record(0, "oops", length=0)
        assert sink.into_sorted_list()[0].length == 1

    def test_raise_if_errors(self):
        sink = DiagnosticCollector()
        sink.record(2, "oops")
        with pytest.raises(BeatCompilationError) as exc_info:
            sink.raise_if_errors("t+")
        assert exc_info.value.source == "t+"
        assert exc_info.value.diagnostics == [Diagnostic(2, "oops")]

    def test_warnings_do_not_raise(self):
        sink = DiagnosticCollector()
        sink.record(0, "careful", severity=Severity.WARNING)
        sink.raise_if_errors("t")


# =============================================================================
# Reports
# =============================================================================

class TestReport:
    """Multi-diagnostic reports."""

    def test_summary_line(self):
        sink = DiagnosticCollector()
        sink.record(0, "one")
        assert sink.report().splitlines()[-1] == "1 error, 0 warnings"

    def test_plural_summary(self):
        diagnostics = [
            Diagnostic(0, "a"),
            Diagnostic(2, "b"),
            Diagnostic(4, "c", severity=Severity.WARNING),
        ]
        report = format_report(diagnostics, "t+t+t")
        assert report.endswith("2 errors, 1 warning")
        assert report.count("^") == 3

    def test_empty_report(self):
        assert format_report([]) == "0 errors, 0 warnings"

    def test_report_order(self):
        sink = DiagnosticCollector()
        sink.record(4, "later")
        sink.record(1, "earlier")
        report = sink.report("t+t+t")
        assert report.index("earlier") < report.index("later")


# =============================================================================
# Exception Hierarchy
# =============================================================================

class TestExceptions:
    """Toolkit exception classes."""

    def test_hierarchy(self):
        assert issubclass(BeatCompilationError, BytebeatError)
        assert issubclass(CorpusFormatError, OracleError)
        assert issubclass(ReferenceBuildError, OracleError)
        assert issubclass(OracleError, BytebeatError)
        assert issubclass(RenderError, BytebeatError)

    def test_source_location(self):
        assert str(SourceLocation("<input>", 0)) == "<input>:1:1"

    def test_compilation_error_default_message(self):
        assert str(BeatCompilationError([Diagnostic(0, "a")])) == "1 error in bytebeat expression"
        assert str(BeatCompilationError([Diagnostic(0, "a"), Diagnostic(1, "b")])) == (
            "2 errors in bytebeat expression"
        )

    def test_corpus_error_line(self):
        error = CorpusFormatError("duplicate name 'x'", line=4)
        assert error.line == 4
        assert str(error) == "line 4: duplicate name 'x'"

    def test_corpus_error_without_line(self):
        assert str(CorpusFormatError("bad")) == "bad"

    def test_reference_build_error(self):
        error = ReferenceBuildError(
            "compiling the reference program failed",
            command="cc ref.c",
            stderr="ref.c:3: error: expected ';'\n",
            return_code=1,
        )
        assert str(error).splitlines() == [
            "compiling the reference program failed",
            "command: cc ref.c",
            "exit status: 1",
            "ref.c:3: error: expected ';'",
        ]
        assert error.return_code == 1
