"""
Bytebeat Command-Line Interface
===============================

This package provides the command-line tools of the toolkit:

- **bbc**: check an expression, show tokens, tree or samples
- **bbrender**: render an expression to WAV, raw samples or stdout
- **bbref**: build reference output with a C compiler and verify against it

Each tool is implemented as a Click-based CLI application with
comprehensive help and error reporting.
"""

__all__ = ["bbc", "bbrender", "bbref"]
