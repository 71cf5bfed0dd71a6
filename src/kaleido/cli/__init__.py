"""
Kaleidoscope Front-End Command-Line Interface
=============================================

This package provides the command-line tool for the front end:

- **kparse**: tokenize or parse Kaleidoscope source, interactively or
  from a file

The tool is implemented as a Click-based CLI application with help text
and consistent exit codes (see kaleido.cli.errors).
"""

__all__ = ["kparse"]
