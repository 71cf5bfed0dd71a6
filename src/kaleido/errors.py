"""
Kaleidoscope Front-End Error Hierarchy
======================================

This module defines two separate things:

1. The exception hierarchy for the package. Exceptions are reserved for
   programmer and configuration mistakes (a bad operator table, a strict
   parse that produced diagnostics). They are never used to steer the
   parser through a syntax error.

2. The diagnostics machinery used by the parser. A syntax error produces
   a Diagnostic, which the ErrorReporter records, logs and forwards to an
   optional sink. The failing parse routine then returns None and the
   top-level loop recovers by discarding one token.

Exception Hierarchy
-------------------
KaleidoError (base)
├── ConfigurationError - invalid front-end configuration
│   └── PrecedenceConfigError - invalid operator/precedence entry
└── FrontendError - errors raised by front-end convenience APIs
    └── ParseFailedError - strict parse finished with diagnostics

Message Format
--------------
Exceptions render as:

    error: description
    hint: suggestion for fixing (when available)

Diagnostics render as:

    parse error: Expected ')' in prototype (at identifier 'x')
"""

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Callable, List, Optional

if TYPE_CHECKING:
    from kaleido.lexer import Token

logger = logging.getLogger(__name__)


# =============================================================================
# Base Exception Class
# =============================================================================

class KaleidoError(Exception):
    """
    Base exception for all front-end errors.

    Callers can catch everything raised by this package with a single
    except clause:

        try:
            table = PrecedenceTable.from_mapping({"/": 40})
        except KaleidoError as e:
            print(e)

    Attributes:
        message: The error description
        hint: A suggestion for fixing the error (optional)
    """

    def __init__(self, message: str, hint: Optional[str] = None):
        self.message = message
        self.hint = hint
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        parts = [f"error: {self.message}"]
        if self.hint:
            parts.append(f"hint: {self.hint}")
        return "\n".join(parts)


# =============================================================================
# Configuration Errors
# =============================================================================

class ConfigurationError(KaleidoError):
    """
    Invalid front-end configuration.

    Raised when an operator specification string, environment variable
    or programmatic setting cannot be interpreted.
    """
    pass


class PrecedenceConfigError(ConfigurationError):
    """
    Invalid entry for the binary operator precedence table.

    Raised when installing an operator that is not a single printable
    character, collides with a character the lexer or grammar already
    gives meaning to, or carries a non-positive precedence.
    """

    def __init__(self, operator: str, reason: str, hint: Optional[str] = None):
        self.operator = operator
        self.reason = reason
        super().__init__(f"cannot install operator {operator!r}: {reason}", hint=hint)


# =============================================================================
# Front-End Errors
# =============================================================================

class FrontendError(KaleidoError):
    """Base class for errors raised by the front-end convenience APIs."""
    pass


class ParseFailedError(FrontendError):
    """
    A strict parse finished with one or more diagnostics.

    The message is the pre-formatted report from ErrorReporter, so no
    extra prefix is added.
    """

    def __init__(self, report: str, diagnostics: Optional[List["Diagnostic"]] = None):
        self.diagnostics = list(diagnostics or [])
        super().__init__(report)

    def _format_message(self) -> str:
        return self.message


# =============================================================================
# Diagnostics
# =============================================================================

PARSE_ERROR = "parse error"


@dataclass(frozen=True)
class Diagnostic:
    """
    One non-fatal problem found while parsing.

    Attributes:
        message: Human-readable reason, e.g. "Expected ')' in prototype"
        token: The lookahead token at the point of failure, if known
        kind: Diagnostic category; the parser only produces "parse error"
    """
    message: str
    token: Optional["Token"] = None
    kind: str = PARSE_ERROR

    def __str__(self) -> str:
        if self.token is None:
            return f"{self.kind}: {self.message}"
        return f"{self.kind}: {self.message} (at {self.token.describe()})"


DiagnosticSink = Callable[[Diagnostic], None]


class ErrorReporter:
    """
    Collects diagnostics reported by the parser.

    Every reported diagnostic is appended to ``diagnostics``, logged at
    INFO level and passed to ``sink`` when one is configured. Reporting
    never raises; it is up to the caller to decide whether diagnostics
    are fatal (see raise_if_errors).

    Example:
        reporter = ErrorReporter(sink=lambda d: print(f"LogError: {d.message}"))
        parser = Parser(Lexer("def )"), reporter=reporter)
        parser.parse_next_unit()
        assert reporter.has_errors()
    """

    def __init__(self, sink: Optional[DiagnosticSink] = None):
        self.diagnostics: List[Diagnostic] = []
        self.sink = sink

    def report(
        self,
        message: str,
        token: Optional["Token"] = None,
    ) -> Diagnostic:
        """Record a parse error and return the resulting Diagnostic."""
        diagnostic = Diagnostic(message, token)
        self.diagnostics.append(diagnostic)
        logger.info(str(diagnostic))
        if self.sink is not None:
            self.sink(diagnostic)
        return diagnostic

    def has_errors(self) -> bool:
        return len(self.diagnostics) > 0

    def error_count(self) -> int:
        return len(self.diagnostics)

    def clear(self) -> None:
        self.diagnostics.clear()

    def format_report(self) -> str:
        """Format all diagnostics followed by a summary line."""
        lines = [str(d) for d in self.diagnostics]
        word = "error" if len(self.diagnostics) == 1 else "errors"
        lines.append(f"{len(self.diagnostics)} {word}")
        return "\n".join(lines)

    def raise_if_errors(self) -> None:
        """Raise ParseFailedError if any diagnostics were recorded."""
        if self.has_errors():
            raise ParseFailedError(self.format_report(), self.diagnostics)
