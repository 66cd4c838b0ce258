"""
bbrender - Bytebeat Renderer Command-Line Interface
===================================================

Renders a bytebeat expression to a WAV file, a raw unsigned 8-bit file,
or standard output.

Usage Examples
--------------
Ten seconds of WAV at 8 kHz:
    $ bbrender "t*(42&t>>10)" -o melody.wav

Play it directly:
    $ bbrender "t*(42&t>>10)" -o - --seconds 60 | aplay -f U8 -r 8000

Start later in the song, at a higher rate:
    $ bbrender "t&t>>8" -o sierpinski.raw --start 65536 --rate 11025
"""

from pathlib import Path
from typing import Optional

import click

from bytebeat import __version__
from bytebeat.cli.errors import handle_cli_exception, setup_logging
from bytebeat.compiler import compile_beat, format_report
from bytebeat.config import BytebeatConfig
from bytebeat.render import FORMATS, render_to_file, write_raw


@click.command()
@click.argument("expression")
@click.option(
    "-o", "--output",
    default="-",
    show_default=True,
    help="Output file, or '-' for raw samples on stdout",
)
@click.option(
    "-F", "--format", "output_format",
    type=click.Choice(FORMATS, case_sensitive=False),
    default=None,
    help="Output format (default: wav for *.wav, raw otherwise)",
)
@click.option(
    "-r", "--rate",
    type=click.IntRange(min=1),
    default=None,
    help="Sample rate in Hz (default: 8000)",
)
@click.option(
    "-s", "--seconds",
    type=click.FloatRange(min=0, min_open=True),
    default=None,
    help="Duration in seconds (default: 10)",
)
@click.option(
    "--start",
    type=int,
    default=0,
    show_default=True,
    help="Value of t for the first sample",
)
@click.option(
    "--16bit", "sixteen_bit",
    is_flag=True,
    help="Write 16-bit signed WAV samples instead of 8-bit unsigned",
)
@click.option(
    "-v", "--verbose",
    is_flag=True,
    help="Enable debug logging",
)
@click.version_option(version=__version__, prog_name="bbrender")
def main(
    expression: str,
    output: str,
    output_format: Optional[str],
    rate: Optional[int],
    seconds: Optional[float],
    start: int,
    sixteen_bit: bool,
    verbose: bool,
) -> None:
    """
    Render a bytebeat expression to audio.

    EXPRESSION is compiled first; if it has errors they are all reported
    and nothing is written.

    \b
    Examples:
        bbrender "t*(42&t>>10)" -o melody.wav
        bbrender "t*(42&t>>10)" -o - | aplay -f U8 -r 8000
        bbrender "t&t>>8" -o out.raw --seconds 30 --start 8000
    """
    setup_logging(verbose)
    config = BytebeatConfig.from_env()
    if rate is not None:
        config.sample_rate = rate
    if seconds is not None:
        config.duration_seconds = seconds

    try:
        beat = compile_beat(expression, max_errors=config.max_errors)
        if beat.warnings:
            click.echo(format_report(beat.warnings, expression), err=True)

        if output == "-":
            if output_format == "wav":
                raise click.BadParameter("WAV output needs a file name", param_hint="--output")
            stream = click.get_binary_stream("stdout")
            write_raw(beat, stream, config.sample_count, start=start)
            stream.flush()
            return

        count = render_to_file(
            beat,
            Path(output),
            config.duration_seconds,
            sample_rate=config.sample_rate,
            output_format=output_format.lower() if output_format else None,
            start=start,
            sample_width=2 if sixteen_bit else 1,
        )
        click.echo(f"Rendered {count} samples to {output}")

    except Exception as e:
        handle_cli_exception(e, verbose=verbose, error_type="Render")


if __name__ == "__main__":
    main()
