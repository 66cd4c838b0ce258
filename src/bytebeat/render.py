"""
Offline Rendering
=================

Writes the output of a Beat to a file or stream, either as raw unsigned
8-bit samples (what `aplay -f U8 -r 8000` or `sox -t u8` expect on
stdin) or as a mono PCM WAV file.

WAV Sample Formats
------------------
| Width | Encoding                      | Bytebeat sample s becomes |
|-------|-------------------------------|---------------------------|
| 1     | unsigned 8-bit (WAV native)   | s                         |
| 2     | signed 16-bit little-endian   | (s - 128) << 8            |

Samples are generated in blocks so long renders do not need to hold the
whole signal in memory twice.
"""

from pathlib import Path
from typing import BinaryIO, Optional, Union
import logging
import wave

from bytebeat.compiler import Beat
from bytebeat.errors import RenderError


logger = logging.getLogger(__name__)

BLOCK_SIZE = 65536

FORMATS = ("raw", "wav")


def _check_positive(name: str, value) -> None:
    if value <= 0:
        raise RenderError(f"{name} must be positive, got {value}")


def _blocks(beat: Beat, start: int, count: int):
    """Yield the requested samples in blocks of at most BLOCK_SIZE."""
    end = start + count
    for block_start in range(start, end, BLOCK_SIZE):
        yield beat.samples(block_start, min(BLOCK_SIZE, end - block_start))


def to_pcm16(samples: bytes) -> bytes:
    """Convert unsigned 8-bit samples to centered signed 16-bit little-endian."""
    out = bytearray(len(samples) * 2)
    for i, s in enumerate(samples):
        # (s - 128) << 8 has a zero low byte; the high byte is s ^ 0x80
        out[2 * i + 1] = s ^ 0x80
    return bytes(out)


def write_raw(beat: Beat, stream: BinaryIO, count: int, start: int = 0) -> int:
    """
    Write count raw unsigned 8-bit samples to a binary stream.

    Returns:
        Number of bytes written
    """
    _check_positive("sample count", count)
    written = 0
    for block in _blocks(beat, start, count):
        stream.write(block)
        written += len(block)
    return written


def write_wav(
    beat: Beat,
    path: Union[str, Path, BinaryIO],
    count: int,
    sample_rate: int = 8000,
    start: int = 0,
    sample_width: int = 1,
) -> None:
    """
    Write count samples as a mono WAV file.

    Args:
        beat: The beat to render
        path: Output file path or writable binary stream
        count: Number of samples
        sample_rate: Samples per second stored in the header
        start: t of the first sample
        sample_width: Bytes per sample, 1 (8-bit) or 2 (16-bit)

    Raises:
        RenderError: If an argument is invalid or the file cannot be written
    """
    _check_positive("sample count", count)
    _check_positive("sample rate", sample_rate)
    if sample_width not in (1, 2):
        raise RenderError(f"sample width must be 1 or 2 bytes, got {sample_width}")

    target = str(path) if isinstance(path, Path) else path
    try:
        with wave.open(target, "wb") as wf:
            wf.setnchannels(1)
            wf.setsampwidth(sample_width)
            wf.setframerate(sample_rate)
            for block in _blocks(beat, start, count):
                wf.writeframes(block if sample_width == 1 else to_pcm16(block))
    except OSError as e:
        raise RenderError(f"cannot write {path}: {e}") from e

    logger.info(f"Wrote {count} samples ({count / sample_rate:.2f}s) to {path}")


def render_to_file(
    beat: Beat,
    path: Union[str, Path],
    seconds: float,
    sample_rate: int = 8000,
    output_format: Optional[str] = None,
    start: int = 0,
    sample_width: int = 1,
) -> int:
    """
    Render a duration of a beat to a file.

    The format defaults to "wav" for paths ending in .wav and "raw"
    otherwise.

    Returns:
        Number of samples written

    Raises:
        RenderError: If an argument is invalid or the file cannot be written
    """
    _check_positive("duration", seconds)
    _check_positive("sample rate", sample_rate)

    path = Path(path)
    if output_format is None:
        output_format = "wav" if path.suffix.lower() == ".wav" else "raw"
    if output_format not in FORMATS:
        raise RenderError(f"unknown output format {output_format!r}")

    count = int(seconds * sample_rate)
    _check_positive("sample count", count)

    if output_format == "wav":
        write_wav(beat, path, count, sample_rate=sample_rate, start=start, sample_width=sample_width)
        return count

    try:
        with path.open("wb") as f:
            write_raw(beat, f, count, start=start)
    except OSError as e:
        raise RenderError(f"cannot write {path}: {e}") from e

    logger.info(f"Wrote {count} raw samples to {path}")
    return count
