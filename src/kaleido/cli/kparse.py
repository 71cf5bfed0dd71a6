"""
kparse - Kaleidoscope Parser Command-Line Interface
===================================================

This module implements the command-line interface for the Kaleidoscope
front end. It reads source from a file or standard input and reports
each top-level unit as it is parsed.

Usage Examples
--------------
Interactive session (prompt shown when stdin is a terminal):
    $ kparse

Parse a file:
    $ kparse program.kal

Print the AST of each unit:
    $ kparse --ast program.kal

Dump the token stream:
    $ kparse --tokens program.kal

Add a division operator:
    $ kparse -O /=40 program.kal
"""

import logging
import sys
from typing import Optional, TextIO

import click

from kaleido import __version__
from kaleido.cli.errors import ExitCode, handle_cli_exception
from kaleido.config import FrontendConfig
from kaleido.driver import Driver
from kaleido.lexer import Lexer

logger = logging.getLogger(__name__)


def setup_logging(verbose: bool, level_name: str) -> None:
    """Configure logging from --verbose or the configured level."""
    level = logging.DEBUG if verbose else getattr(logging, level_name, logging.WARNING)
    logging.basicConfig(
        level=level,
        format="%(levelname)s: %(message)s" if verbose else "%(message)s",
    )


# =============================================================================
# CLI Definition
# =============================================================================

@click.command()
@click.argument(
    "input_file",
    type=click.File("r"),
    default="-",
    required=False,
)
@click.option(
    "--tokens",
    is_flag=True,
    help="Print the token stream and exit",
)
@click.option(
    "--ast", "show_ast",
    is_flag=True,
    help="Print the AST of every parsed unit",
)
@click.option(
    "-O", "--operator", "operators",
    multiple=True,
    metavar="OP=PREC",
    help="Install a binary operator, e.g. '/=40' (can be repeated)",
)
@click.option(
    "--prompt",
    default=None,
    help="Interactive prompt text (default: 'ready> ')",
)
@click.option(
    "--interactive/--batch",
    default=None,
    help="Force the prompt on or off (default: on when input is a terminal)",
)
@click.option(
    "-v", "--verbose",
    is_flag=True,
    help="Verbose output (debug logging)",
)
@click.version_option(version=__version__, prog_name="kparse")
def main(
    input_file: TextIO,
    tokens: bool,
    show_ast: bool,
    operators: tuple[str, ...],
    prompt: Optional[str],
    interactive: Optional[bool],
    verbose: bool,
) -> None:
    """
    Parse Kaleidoscope source.

    INPUT_FILE is the source file to parse; '-' or no argument reads
    standard input.

    \b
    Examples:
        kparse                       # Interactive session
        kparse program.kal           # Parse a file
        kparse --ast program.kal     # Show each unit's AST
        kparse --tokens program.kal  # Show the token stream
        kparse -O /=40 program.kal   # Add a division operator

    \b
    Exit status:
        0  all units parsed
        1  one or more parse errors were reported
        2  invalid arguments or configuration
    """
    config = FrontendConfig.from_env()
    setup_logging(verbose, config.log_level)

    try:
        config.add_operators(operators)
        if prompt is not None:
            config.prompt = prompt
        if show_ast:
            config.show_ast = True

        if tokens:
            for token in Lexer(input_file).tokenize():
                click.echo(repr(token))
            return

        if interactive is None:
            interactive = input_file.isatty()

        driver = Driver.from_config(input_file, config, interactive=interactive)
        summary = driver.run()

    except Exception as e:
        handle_cli_exception(e, verbose)

    if verbose:
        click.echo(
            f"Parsed {summary.parsed} units with {summary.errors} errors",
            err=True,
        )
    if summary.errors:
        sys.exit(ExitCode.PARSE_ERROR)


if __name__ == "__main__":
    main()
