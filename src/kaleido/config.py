"""
Front-End Configuration
=======================

Settings shared by the driver and the command-line tool. Configuration
can come from:
- Default values (defined here)
- Environment variables (FrontendConfig.from_env)
- Command-line options (applied by the CLI on top of the above)

Operator Specifications
-----------------------
Extra binary operators are written as comma-separated ``OP=PRECEDENCE``
items, for example ``"/=40,>=10"``. Higher precedence binds tighter; the
defaults are < 10, + 20, - 20, * 40.
"""

import logging
import os
from dataclasses import dataclass, field
from typing import Iterable

from kaleido.errors import ConfigurationError
from kaleido.precedence import PrecedenceTable

logger = logging.getLogger(__name__)


DEFAULT_PROMPT = "ready> "

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def parse_operator_spec(text: str) -> dict[str, int]:
    """
    Parse an operator specification string.

    Args:
        text: Comma-separated ``OP=PRECEDENCE`` items; blanks are ignored

    Returns:
        Mapping of operator character to precedence, in the given order

    Raises:
        ConfigurationError: If an item is malformed

    Examples:
        >>> parse_operator_spec("/=40, >=10")
        {'/': 40, '>': 10}
    """
    operators: dict[str, int] = {}
    for item in text.split(","):
        item = item.strip()
        if not item:
            continue

        # Split on the last '=' so that '=' itself can be installed ("==5")
        operator, sep, precedence = item.rpartition("=")
        if not sep or not operator:
            raise ConfigurationError(
                f"invalid operator specification {item!r}",
                hint="use OP=PRECEDENCE, e.g. '/=40'",
            )
        try:
            operators[operator] = int(precedence)
        except ValueError:
            raise ConfigurationError(
                f"invalid precedence {precedence!r} for operator {operator!r}",
                hint="precedence must be a whole number",
            ) from None
    return operators


@dataclass
class FrontendConfig:
    """
    Configuration for parsing sessions.

    Attributes:
        operators: Binary operators added to (or overriding) the defaults
        prompt: Prompt shown before each unit in interactive mode
        log_level: Logging level name used by the CLI
        show_ast: Print the AST of every parsed unit
    """
    operators: dict[str, int] = field(default_factory=dict)
    prompt: str = DEFAULT_PROMPT
    log_level: str = "WARNING"
    show_ast: bool = False

    @classmethod
    def from_env(cls) -> "FrontendConfig":
        """
        Create a FrontendConfig from environment variables.

        Environment variables (all optional):
            KALEIDO_OPERATORS: Extra operators, e.g. "/=40,>=10"
            KALEIDO_PROMPT: Interactive prompt text
            KALEIDO_LOG_LEVEL: DEBUG, INFO, WARNING, ERROR or CRITICAL
            KALEIDO_SHOW_AST: "1", "true" or "yes" to print ASTs

        Invalid values are logged and ignored.
        """
        config = cls()

        if spec := os.environ.get("KALEIDO_OPERATORS"):
            try:
                operators = parse_operator_spec(spec)
                PrecedenceTable.from_mapping(operators)
                config.operators = operators
            except ConfigurationError as e:
                logger.warning(f"Ignoring KALEIDO_OPERATORS: {e.message}")

        if (prompt := os.environ.get("KALEIDO_PROMPT")) is not None:
            config.prompt = prompt

        if level := os.environ.get("KALEIDO_LOG_LEVEL"):
            if level.upper() in LOG_LEVELS:
                config.log_level = level.upper()
            else:
                logger.warning(f"Ignoring unknown KALEIDO_LOG_LEVEL {level!r}")

        if show_ast := os.environ.get("KALEIDO_SHOW_AST"):
            config.show_ast = show_ast.lower() in ("1", "true", "yes")

        return config

    def add_operators(self, specs: Iterable[str]) -> None:
        """Merge one or more operator specification strings."""
        for spec in specs:
            self.operators.update(parse_operator_spec(spec))

    def build_precedence_table(self) -> PrecedenceTable:
        """
        Return the default operator table plus the configured operators.

        Raises:
            PrecedenceConfigError: If a configured operator is invalid
        """
        return PrecedenceTable.from_mapping(self.operators)
