"""
Top-Level Driver
================

Repeatedly asks the parser for the next top-level unit and acknowledges
each one, the way the classic Kaleidoscope REPL does:

    ready> def foo(a b) a + b
    Parsed a function definition.
    ready> extern sin(x)
    Parsed an extern.
    ready> foo(1, 2) * 3
    Parsed a top-level expression.
    ready> def )
    LogError: Expected fcn name in prototype

Acknowledgements go to standard output and errors to standard error, both
through click.echo. The driver only counts nodes; it keeps none of them.
"""

import logging
from dataclasses import dataclass
from typing import Callable, Optional, TextIO, Union

import click

from kaleido.ast import ASTPrinter
from kaleido.config import DEFAULT_PROMPT, FrontendConfig
from kaleido.errors import ErrorReporter
from kaleido.parser import ParseResult, Parser, UnitKind

logger = logging.getLogger(__name__)


ACKNOWLEDGEMENTS: dict[UnitKind, str] = {
    UnitKind.DEFINITION: "Parsed a function definition.",
    UnitKind.EXTERN: "Parsed an extern.",
    UnitKind.EXPRESSION: "Parsed a top-level expression.",
}


@dataclass
class DriverSummary:
    """Counts of what a driver run saw."""
    definitions: int = 0
    externs: int = 0
    expressions: int = 0
    errors: int = 0

    @property
    def parsed(self) -> int:
        return self.definitions + self.externs + self.expressions


class Driver:
    """
    Runs the parse loop over one input until end of input.

    Usage:
        driver = Driver(Parser(source))
        summary = driver.run()

    Attributes:
        parser: Where units come from
        prompt: Text shown before each unit when interactive
        interactive: Show the prompt
        show_ast: Print each parsed node as an indented tree
    """

    def __init__(
        self,
        parser: Parser,
        prompt: str = DEFAULT_PROMPT,
        interactive: bool = False,
        show_ast: bool = False,
        echo: Callable[..., None] = click.echo,
    ):
        self.parser = parser
        self.prompt = prompt
        self.interactive = interactive
        self.show_ast = show_ast
        self._echo = echo
        self._printer = ASTPrinter()

    @classmethod
    def from_config(
        cls,
        source: Union[str, TextIO],
        config: Optional[FrontendConfig] = None,
        interactive: bool = False,
        echo: Callable[..., None] = click.echo,
    ) -> "Driver":
        """
        Build a parser and driver for ``source`` from configuration.

        Raises:
            PrecedenceConfigError: If a configured operator is invalid
        """
        config = config or FrontendConfig()
        parser = Parser(
            source,
            precedence=config.build_precedence_table(),
            reporter=ErrorReporter(),
        )
        return cls(
            parser,
            prompt=config.prompt,
            interactive=interactive,
            show_ast=config.show_ast,
            echo=echo,
        )

    def run(self) -> DriverSummary:
        """
        Parse and acknowledge units until end of input.

        Returns:
            DriverSummary with per-kind counts
        """
        summary = DriverSummary()

        while True:
            if self.interactive:
                self._echo(self.prompt, nl=False)

            result = self.parser.parse_next_unit()

            if result.kind == UnitKind.END:
                break
            if result.kind == UnitKind.SKIP:
                continue
            if result.kind == UnitKind.ERROR:
                summary.errors += 1
                self._report_error(result)
                continue

            self._acknowledge(result, summary)

        if self.interactive:
            self._echo()
        logger.info(
            f"Parsed {summary.parsed} units "
            f"({summary.definitions} definitions, {summary.externs} externs, "
            f"{summary.expressions} expressions), {summary.errors} errors"
        )
        return summary

    def _acknowledge(self, result: ParseResult, summary: DriverSummary) -> None:
        if result.kind == UnitKind.DEFINITION:
            summary.definitions += 1
        elif result.kind == UnitKind.EXTERN:
            summary.externs += 1
        else:
            summary.expressions += 1

        self._echo(ACKNOWLEDGEMENTS[result.kind])
        if self.show_ast:
            self._echo(self._printer.print(result.node))

    def _report_error(self, result: ParseResult) -> None:
        reason = result.diagnostic.message if result.diagnostic else "parse failed"
        self._echo(f"LogError: {reason}", err=True)
        # Already printed and counted
        self.parser.reporter.clear()
