"""
bbc - Bytebeat Compiler Command-Line Interface
==============================================

Checks a bytebeat expression, reporting every problem with its column,
and optionally shows the tokens, the parsed tree or sample values.

Usage Examples
--------------
Check an expression:
    $ bbc "t*(42&t>>10)"
    OK

See all errors at once:
    $ bbc "t*(x&t>>10"

Evaluate at some values of t:
    $ bbc "t*(42&t>>10)" --eval 1024 --eval 2048

Show how it was parsed:
    $ bbc "t&t>>8|t*3" --ast

Read the expression from a file:
    $ bbc -f song.txt
"""

from pathlib import Path
from typing import Optional

import click

from bytebeat import __version__
from bytebeat.cli.errors import handle_cli_exception, setup_logging
from bytebeat.compiler import (
    ASTPrinter,
    compile_beat,
    format_expression,
    format_report,
    tokenize,
)
from bytebeat.config import BytebeatConfig


def read_expression(expression: Optional[str], file: Optional[Path]) -> str:
    """
    Resolve the expression from the argument or the --file option.

    A single trailing line break in a file is ignored, so files written by
    editors work; any other line break is reported by the lexer.
    """
    if expression is not None and file is not None:
        raise click.UsageError("give either EXPRESSION or --file, not both")
    if expression is None and file is None:
        raise click.UsageError("missing EXPRESSION (or --file)")

    if file is None:
        return expression

    text = file.read_text(encoding="utf-8")
    if text.endswith("\r\n"):
        return text[:-2]
    if text.endswith("\n"):
        return text[:-1]
    return text


# =============================================================================
# CLI Definition
# =============================================================================

@click.command()
@click.argument("expression", required=False)
@click.option(
    "-f", "--file",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="Read the expression from a file",
)
@click.option(
    "--tokens",
    is_flag=True,
    help="Print the token stream",
)
@click.option(
    "--ast",
    is_flag=True,
    help="Print the parsed expression tree",
)
@click.option(
    "-e", "--eval", "eval_at",
    type=int,
    multiple=True,
    metavar="T",
    help="Print the sample at t=T (can be repeated)",
)
@click.option(
    "--max-errors",
    type=click.IntRange(min=1),
    default=None,
    help="Stop reporting after this many errors (default: 100)",
)
@click.option(
    "-v", "--verbose",
    is_flag=True,
    help="Enable debug logging",
)
@click.version_option(version=__version__, prog_name="bbc")
def main(
    expression: Optional[str],
    file: Optional[Path],
    tokens: bool,
    ast: bool,
    eval_at: tuple[int, ...],
    max_errors: Optional[int],
    verbose: bool,
) -> None:
    """
    Check a bytebeat expression.

    EXPRESSION is a C integer expression over t, for example
    "t*(42&t>>10)". Quote it so the shell leaves the operators alone.

    All lexical, syntax and semantic errors are reported in one run,
    each with its column. The exit status is 1 if there were errors.

    \b
    Examples:
        bbc "t*(42&t>>10)"              # Check only
        bbc "t*(42&t>>10)" -e 1024      # Sample at t=1024
        bbc "t&t>>8" --ast              # Show the parse tree
        bbc "t&t>>8" --tokens           # Show the tokens
        bbc -f song.txt                 # Expression from a file
    """
    setup_logging(verbose)
    config = BytebeatConfig.from_env()
    if max_errors is not None:
        config.max_errors = max_errors

    source = read_expression(expression, file)

    try:
        if tokens:
            for token in tokenize(source):
                click.echo(repr(token))

        beat = compile_beat(source, max_errors=config.max_errors)

        if beat.warnings:
            click.echo(format_report(beat.warnings, source), err=True)

        if ast:
            click.echo(ASTPrinter().print(beat.root))
            click.echo(format_expression(beat.root))

        for t in eval_at:
            click.echo(f"t={t}: {beat.sample_for(t)} (int32 {beat.value_for(t)})")

        if not (tokens or ast or eval_at):
            click.echo("OK")

    except Exception as e:
        handle_cli_exception(e, verbose=verbose)


if __name__ == "__main__":
    main()
