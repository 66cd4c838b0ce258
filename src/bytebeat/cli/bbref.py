"""
bbref - Reference Oracle Command-Line Interface
===============================================

Builds reference output for a corpus of bytebeat expressions with the
system C compiler, and checks the evaluator against it.

Usage Examples
--------------
Write the C reference program:
    $ bbref generate corpus.csv -o reference.c

Compile and run it, writing <name>.bin files:
    $ bbref build corpus.csv -d refs/

Check the evaluator against the .bin files:
    $ bbref verify corpus.csv -d refs/

The compiler and flags come from BYTEBEAT_CC and BYTEBEAT_CFLAGS
(default: cc -std=c99 -O0 -fwrapv).
"""

import sys
from pathlib import Path
from typing import Optional

import click

from bytebeat import __version__
from bytebeat.cli.errors import ExitCode, handle_cli_exception, setup_logging
from bytebeat.config import BytebeatConfig
from bytebeat.oracle import (
    build_references,
    generate_reference_program,
    load_corpus,
    verify_corpus,
)


# =============================================================================
# Main CLI Group
# =============================================================================

@click.group()
@click.option(
    "-v", "--verbose",
    is_flag=True,
    help="Enable debug logging",
)
@click.version_option(__version__, "--version", "-V", prog_name="bbref")
@click.pass_context
def main(ctx: click.Context, verbose: bool) -> None:
    """
    Reference oracle for the bytebeat evaluator.

    A corpus is a CSV file with 'name' and 'code' columns. Reference
    output for an entry is <name>.bin: one unsigned byte per t.

    \b
    Commands:
      generate  Write the C program that produces reference output
      build     Compile and run it to write the .bin files
      verify    Compare the evaluator with the .bin files

    \b
    Examples:
      bbref generate corpus.csv -o reference.c
      bbref build corpus.csv -d refs/
      bbref verify corpus.csv -d refs/
    """
    setup_logging(verbose)
    ctx.obj = {"verbose": verbose}


corpus_argument = click.argument(
    "corpus",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
)


# =============================================================================
# Generate Command
# =============================================================================

@main.command("generate")
@corpus_argument
@click.option(
    "-o", "--output",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Output C file (default: stdout)",
)
@click.option(
    "-n", "--samples",
    type=click.IntRange(min=1),
    default=None,
    help="Samples per reference file (default: 65536)",
)
@click.pass_context
def cmd_generate(
    ctx: click.Context,
    corpus: Path,
    output: Optional[Path],
    samples: Optional[int],
) -> None:
    """
    Write the C reference program for a corpus.

    \b
    Example:
      bbref generate corpus.csv -o reference.c
      cc -std=c99 -O0 -fwrapv reference.c -o reference && ./reference
    """
    config = BytebeatConfig.from_env()
    try:
        entries = load_corpus(corpus)
        source = generate_reference_program(
            entries, samples=samples or config.reference_samples
        )
        if output is None:
            click.echo(source, nl=False)
        else:
            output.write_text(source, encoding="utf-8")
            click.echo(f"Wrote reference program for {len(entries)} entries to {output}")
    except Exception as e:
        handle_cli_exception(e, verbose=ctx.obj["verbose"], error_type="Reference")


# =============================================================================
# Build Command
# =============================================================================

@main.command("build")
@corpus_argument
@click.option(
    "-d", "--directory",
    type=click.Path(file_okay=False, path_type=Path),
    required=True,
    help="Directory for the .bin files (created if needed)",
)
@click.option(
    "--cc",
    default=None,
    help="C compiler (default: $BYTEBEAT_CC or cc)",
)
@click.pass_context
def cmd_build(ctx: click.Context, corpus: Path, directory: Path, cc: Optional[str]) -> None:
    """
    Compile the reference program and run it.

    \b
    Example:
      bbref build corpus.csv -d refs/ --cc clang
    """
    config = BytebeatConfig.from_env()
    if cc:
        config.c_compiler = cc

    try:
        entries = load_corpus(corpus)
        paths = build_references(entries, directory, config)
        for path in paths:
            click.echo(f"  {path}")
        click.echo(f"Built {len(paths)} reference files in {directory}")
    except Exception as e:
        handle_cli_exception(e, verbose=ctx.obj["verbose"], error_type="Reference")


# =============================================================================
# Verify Command
# =============================================================================

@main.command("verify")
@corpus_argument
@click.option(
    "-d", "--directory",
    type=click.Path(exists=True, file_okay=False, path_type=Path),
    default=None,
    help="Directory holding the .bin files (default: next to the corpus)",
)
@click.pass_context
def cmd_verify(ctx: click.Context, corpus: Path, directory: Optional[Path]) -> None:
    """
    Compare the evaluator with reference output, sample by sample.

    Exits with status 1 if any entry differs or does not compile.

    \b
    Example:
      bbref verify tests/fixtures/oracle/corpus.csv
    """
    directory = directory or corpus.parent

    try:
        entries = load_corpus(corpus)
        results = verify_corpus(entries, directory)
    except Exception as e:
        handle_cli_exception(e, verbose=ctx.obj["verbose"], error_type="Reference")

    failed = [r for r in results if not r.passed]
    for result in results:
        click.echo(("PASS  " if result.passed else "FAIL  ") + result.describe())
        if result.error:
            click.echo(result.error, err=True)

    click.echo(f"\n{len(results) - len(failed)} passed, {len(failed)} failed")
    if failed:
        sys.exit(ExitCode.BUILD_ERROR)


if __name__ == "__main__":
    main()
