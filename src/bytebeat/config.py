"""
Bytebeat Toolkit - Configuration
================================

Toolkit configuration: rendering defaults, compiler limits and the C
toolchain used to build reference output. Configuration can come from:
- Default values (defined here)
- Environment variables
- Command-line options (the CLI tools override fields after loading)

Environment Variables
---------------------
| Variable               | Field             | Default                 |
|------------------------|-------------------|-------------------------|
| BYTEBEAT_SAMPLE_RATE   | sample_rate       | 8000                    |
| BYTEBEAT_DURATION      | duration_seconds  | 10.0                    |
| BYTEBEAT_MAX_ERRORS    | max_errors        | 100                     |
| BYTEBEAT_CC            | c_compiler        | cc                      |
| BYTEBEAT_CFLAGS        | c_flags           | -std=c99 -O0 -fwrapv    |
"""

from dataclasses import dataclass
from typing import List, Optional
import logging
import os
import shlex


logger = logging.getLogger(__name__)


@dataclass
class BytebeatConfig:
    """
    Configuration for compiling, rendering and reference building.

    Attributes:
        sample_rate: Samples per second when rendering (default: 8000)
        duration_seconds: Default render length (default: 10.0)
        max_errors: Error diagnostics kept per compile (default: 100)
        c_compiler: C compiler used for reference output (default: "cc")
        c_flags: Flags passed to the C compiler; -fwrapv makes signed
            overflow wrap like the evaluator does
        reference_samples: Samples per reference file (t = 0 .. 65535)
        build_timeout: Seconds allowed for compiling or running the
            reference program
    """

    # ═══════════════════════════════════════════════════════════════════════════
    # RENDERING
    # ═══════════════════════════════════════════════════════════════════════════

    sample_rate: int = 8000
    duration_seconds: float = 10.0

    # ═══════════════════════════════════════════════════════════════════════════
    # COMPILER
    # ═══════════════════════════════════════════════════════════════════════════

    max_errors: int = 100

    # ═══════════════════════════════════════════════════════════════════════════
    # REFERENCE ORACLE
    # ═══════════════════════════════════════════════════════════════════════════

    c_compiler: str = "cc"
    c_flags: str = "-std=c99 -O0 -fwrapv"
    reference_samples: int = 65536
    build_timeout: int = 60

    # ═══════════════════════════════════════════════════════════════════════════
    # FACTORY METHODS
    # ═══════════════════════════════════════════════════════════════════════════

    @classmethod
    def from_env(cls) -> "BytebeatConfig":
        """
        Create a BytebeatConfig from environment variables.

        Unset variables keep their defaults. Values that do not parse, or
        are out of range, are ignored with a warning.
        """
        config = cls()

        if rate := os.environ.get("BYTEBEAT_SAMPLE_RATE"):
            value = _positive(rate, int, "BYTEBEAT_SAMPLE_RATE")
            if value is not None:
                config.sample_rate = value

        if duration := os.environ.get("BYTEBEAT_DURATION"):
            value = _positive(duration, float, "BYTEBEAT_DURATION")
            if value is not None:
                config.duration_seconds = value

        if max_errors := os.environ.get("BYTEBEAT_MAX_ERRORS"):
            value = _positive(max_errors, int, "BYTEBEAT_MAX_ERRORS")
            if value is not None:
                config.max_errors = value

        if compiler := os.environ.get("BYTEBEAT_CC"):
            config.c_compiler = compiler

        if flags := os.environ.get("BYTEBEAT_CFLAGS"):
            config.c_flags = flags

        return config

    # ═══════════════════════════════════════════════════════════════════════════
    # HELPER METHODS
    # ═══════════════════════════════════════════════════════════════════════════

    @property
    def sample_count(self) -> int:
        """Number of samples in a default-length render."""
        return int(self.sample_rate * self.duration_seconds)

    def compiler_command(self) -> List[str]:
        """The C compiler and its flags as an argument list."""
        return [self.c_compiler, *shlex.split(self.c_flags)]


def _positive(text: str, kind: type, name: str):
    """Parse a positive number from an environment variable, or None."""
    try:
        value = kind(text)
    except ValueError:
        logger.warning(f"Ignoring {name}={text!r}: not a valid {kind.__name__}")
        return None
    if value <= 0:
        logger.warning(f"Ignoring {name}={text!r}: must be positive")
        return None
    return value


# ═══════════════════════════════════════════════════════════════════════════════
# DEFAULT CONFIGURATION INSTANCE
# ═══════════════════════════════════════════════════════════════════════════════

_default_config: Optional[BytebeatConfig] = None


def get_default_config() -> BytebeatConfig:
    """
    Get the default configuration.

    Created from environment variables on first access. Can be overridden
    by calling set_default_config().
    """
    global _default_config
    if _default_config is None:
        _default_config = BytebeatConfig.from_env()
    return _default_config


def set_default_config(config: Optional[BytebeatConfig]) -> None:
    """Set (or with None, reset) the default configuration."""
    global _default_config
    _default_config = config
