"""
Reference Output Builder and Parity Checker
===========================================

The evaluator's contract is byte-for-byte agreement with a C compiler.
This module produces the C side of that comparison and checks the
evaluator against it.

Pipeline
--------
1. generate_reference_program() writes a C99 program with one function
   per corpus entry, `static uint8_t song_<name>(int t)`, whose body is the
   entry's expression verbatim, plus a main() that writes `<name>.bin`
2. build_references() compiles that program with the configured C
   compiler and runs it in the output directory
3. check_parity() renders the same expression with the evaluator and
   compares sample by sample

The program is compiled with -fwrapv so signed overflow wraps instead of
being undefined. Expressions that divide by zero are not usable as
references: the evaluator defines the result as 0, while the C program
traps.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, List, Optional, Union
import logging
import subprocess
import tempfile

from bytebeat.compiler import BeatCompilationError, compile_beat, compile_program
from bytebeat.config import BytebeatConfig, get_default_config
from bytebeat.errors import OracleError, ReferenceBuildError
from bytebeat.oracle.corpus import CorpusEntry, load_reference


logger = logging.getLogger(__name__)


# =============================================================================
# C Program Generation
# =============================================================================

PROGRAM_HEADER = """\
/* Reference output for bytebeat expressions.
 * Generated by bbref; each song_<name> writes <name>.bin, one byte per t.
 */
#include <stdio.h>
#include <stdint.h>

static int write_song(const char *filename, uint8_t (*song)(int))
{
    FILE *f = fopen(filename, "wb");
    if (!f) {
        fprintf(stderr, "cannot open %s\\n", filename);
        return 1;
    }
    for (int t = 0; t < SAMPLES; t++) {
        uint8_t s = song(t);
        fwrite(&s, 1, 1, f);
    }
    fclose(f);
    printf("wrote %s\\n", filename);
    return 0;
}
"""


def generate_reference_program(entries: Iterable[CorpusEntry], samples: int = 65536) -> str:
    """
    Generate the C source of the reference program.

    Every expression is compiled first, so only text the bytebeat lexer
    accepts (integers, 't', operators and parentheses) is ever pasted
    into the C source.

    Raises:
        OracleError: If an entry does not compile
    """
    entries = list(entries)
    parts = [f"#define SAMPLES {samples}", "", PROGRAM_HEADER]

    for entry in entries:
        program = compile_program(entry.code)
        if not program.ok or not entry.code.strip():
            first = program.errors[0] if program.errors else None
            detail = f": {first.message} at column {first.column + 1}" if first else ""
            raise OracleError(f"corpus entry {entry.name!r} does not compile{detail}")

        parts.append(f"static uint8_t song_{entry.name}(int t)")
        parts.append("{")
        parts.append(f"    return ({entry.code});")
        parts.append("}")
        parts.append("")

    parts.append("int main(void)")
    parts.append("{")
    parts.append("    int failures = 0;")
    for entry in entries:
        parts.append(
            f'    failures += write_song("{entry.reference_filename}", song_{entry.name});'
        )
    parts.append("    return failures != 0;")
    parts.append("}")

    return "\n".join(parts) + "\n"


# =============================================================================
# Building References
# =============================================================================

def _run(command: List[str], description: str, cwd: Path, timeout: int) -> subprocess.CompletedProcess:
    """Run a build step, turning every failure into ReferenceBuildError."""
    logger.debug(f"Running {' '.join(command)} in {cwd}")
    try:
        result = subprocess.run(
            command,
            capture_output=True,
            text=True,
            cwd=str(cwd),
            timeout=timeout,
        )
    except subprocess.TimeoutExpired:
        raise ReferenceBuildError(
            f"{description} timed out after {timeout}s",
            command=" ".join(command),
        )
    except FileNotFoundError:
        raise ReferenceBuildError(
            f"{description} failed: {command[0]} not found",
            command=" ".join(command),
        )

    if result.returncode != 0:
        raise ReferenceBuildError(
            f"{description} failed",
            command=" ".join(command),
            stdout=result.stdout,
            stderr=result.stderr,
            return_code=result.returncode,
        )
    return result


def build_references(
    entries: Iterable[CorpusEntry],
    out_dir: Union[str, Path],
    config: Optional[BytebeatConfig] = None,
) -> List[Path]:
    """
    Compile and run the reference program, writing `<name>.bin` files.

    Args:
        entries: Corpus entries to build references for
        out_dir: Directory receiving the .bin files (created if needed)
        config: Supplies the C compiler, flags, sample count and timeout

    Returns:
        Paths of the written reference files, in corpus order

    Raises:
        OracleError: If an entry does not compile as bytebeat
        ReferenceBuildError: If the C compiler or the program fails
    """
    config = config or get_default_config()
    entries = list(entries)
    out_dir = Path(out_dir)
    out_dir.mkdir(parents=True, exist_ok=True)

    source = generate_reference_program(entries, samples=config.reference_samples)

    with tempfile.TemporaryDirectory(prefix="bytebeat-ref-") as tmp:
        tmp_path = Path(tmp)
        c_file = tmp_path / "reference.c"
        executable = tmp_path / "reference"
        c_file.write_text(source, encoding="utf-8")

        compile_command = [*config.compiler_command(), "-o", str(executable), str(c_file)]
        _run(compile_command, "compiling the reference program", tmp_path, config.build_timeout)

        _run([str(executable)], "running the reference program", out_dir.resolve(), config.build_timeout)

    paths = []
    for entry in entries:
        path = entry.reference_path(out_dir)
        if not path.exists():
            raise ReferenceBuildError(f"reference program did not write {path}")
        paths.append(path)

    logger.info(f"Built {len(paths)} reference files in {out_dir}")
    return paths


# =============================================================================
# Parity Checking
# =============================================================================

@dataclass(frozen=True)
class ParityResult:
    """
    Outcome of comparing the evaluator with one reference file.

    Attributes:
        name: The corpus entry name
        samples_checked: Number of samples compared
        mismatches: Number of samples that differ
        first_mismatch: t of the first differing sample, or None
        expected: Reference byte at first_mismatch
        actual: Evaluator byte at first_mismatch
        error: Compilation report when the expression did not compile
    """
    name: str
    samples_checked: int
    mismatches: int = 0
    first_mismatch: Optional[int] = None
    expected: Optional[int] = None
    actual: Optional[int] = None
    error: Optional[str] = None

    @property
    def passed(self) -> bool:
        return self.error is None and self.mismatches == 0

    def describe(self) -> str:
        """One-line summary for reports."""
        if self.error is not None:
            return f"{self.name}: does not compile"
        if self.passed:
            return f"{self.name}: OK ({self.samples_checked} samples)"
        return (
            f"{self.name}: {self.mismatches} of {self.samples_checked} samples differ; "
            f"first at t={self.first_mismatch} "
            f"(expected {self.expected}, got {self.actual})"
        )


def check_parity(entry: CorpusEntry, reference: bytes) -> ParityResult:
    """
    Render an entry with the evaluator and compare it with reference bytes.

    Sample i of the reference is compared with the evaluator at t = i.
    """
    try:
        beat = compile_beat(entry.code)
    except BeatCompilationError as e:
        return ParityResult(name=entry.name, samples_checked=0, error=str(e))

    rendered = beat.render(len(reference))
    mismatches = [t for t, (a, b) in enumerate(zip(reference, rendered)) if a != b]

    if not mismatches:
        return ParityResult(name=entry.name, samples_checked=len(reference))

    first = mismatches[0]
    logger.warning(
        f"{entry.name}: {len(mismatches)} samples differ from the reference, first at t={first}"
    )
    return ParityResult(
        name=entry.name,
        samples_checked=len(reference),
        mismatches=len(mismatches),
        first_mismatch=first,
        expected=reference[first],
        actual=rendered[first],
    )


def verify_corpus(entries: Iterable[CorpusEntry], directory: Union[str, Path]) -> List[ParityResult]:
    """
    Check every entry against its `<name>.bin` file in directory.

    Raises:
        OSError: If a reference file is missing or unreadable
    """
    return [check_parity(entry, load_reference(entry, directory)) for entry in entries]
