"""
Kaleidoscope Recursive Descent Parser
=====================================

This module implements the parser for Kaleidoscope. It pulls tokens from
the lexer one at a time (a single token of lookahead) and builds AST
nodes. Binary expressions are resolved by operator-precedence climbing
against a PrecedenceTable rather than one grammar rule per level.

Grammar (EBNF)
--------------
program     ::= unit*
unit        ::= definition | extern | expression | ';'
definition  ::= 'def' prototype expression
extern      ::= 'extern' prototype
prototype   ::= IDENTIFIER '(' IDENTIFIER* ')'
expression  ::= primary (operator primary)*        (precedence-climbed)
primary     ::= IDENTIFIER ('(' (expression (',' expression)*)? ')')?
              | NUMBER
              | '(' expression ')'

Error Handling
--------------
Syntax errors are not raised. A parse routine that fails reports a
Diagnostic through the ErrorReporter and returns None; its callers pass
the None straight up. parse_next_unit() is the single recovery point: it
discards exactly one token and hands back an ERROR result, after which
parsing resumes with the next unit. Nothing from the failed unit is kept.

Example Usage
-------------
>>> from kaleido.parser import Parser
>>> parser = Parser("def add(a b) a + b")
>>> result = parser.parse_next_unit()
>>> result.kind
<UnitKind.DEFINITION: 1>
>>> result.node.prototype.name
'add'
"""

import logging
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Iterator, Optional, TextIO, Union

from kaleido.ast import (
    BinaryOp,
    Call,
    Expr,
    FunctionDef,
    NumberLiteral,
    Prototype,
    VariableRef,
)
from kaleido.errors import Diagnostic, ErrorReporter
from kaleido.lexer import Lexer, Token, TokenType
from kaleido.precedence import PrecedenceTable

logger = logging.getLogger(__name__)


# =============================================================================
# Top-Level Results
# =============================================================================

class UnitKind(Enum):
    """What parse_next_unit() found."""
    DEFINITION = auto()     # def ... -> FunctionDef
    EXTERN = auto()         # extern ... -> Prototype
    EXPRESSION = auto()     # bare expression -> anonymous FunctionDef
    SKIP = auto()           # a top-level ';'
    END = auto()            # end of input
    ERROR = auto()          # parse failure, one token discarded


@dataclass(frozen=True)
class ParseResult:
    """
    Outcome of parsing one top-level unit.

    Attributes:
        kind: What was found
        node: The FunctionDef or Prototype for successful units
        diagnostic: The reported problem for ERROR results
    """
    kind: UnitKind
    node: Optional[Union[FunctionDef, Prototype]] = None
    diagnostic: Optional[Diagnostic] = None

    @property
    def ok(self) -> bool:
        return self.node is not None


# =============================================================================
# Parser
# =============================================================================

class Parser:
    """
    Recursive descent parser for Kaleidoscope.

    All state (the lexer, the current lookahead token, the operator table
    and the error reporter) lives on the instance. The lookahead is read
    lazily the first time it is needed, so an interactive driver can show
    its prompt before the parser blocks on input.

    Attributes:
        lexer: Token source
        precedence: Binary operator precedence table
        reporter: Collects diagnostics for failed parses
    """

    def __init__(
        self,
        source: Union[Lexer, str, TextIO],
        precedence: Optional[PrecedenceTable] = None,
        reporter: Optional[ErrorReporter] = None,
    ):
        """
        Initialize the parser.

        Args:
            source: A Lexer, or source text / text stream to lex
            precedence: Operator table (defaults to the standard operators)
            reporter: Diagnostic collector (a fresh one if None)
        """
        self.lexer = source if isinstance(source, Lexer) else Lexer(source)
        self.precedence = precedence if precedence is not None else PrecedenceTable()
        self.reporter = reporter if reporter is not None else ErrorReporter()

        self._current: Optional[Token] = None
        self._last_diagnostic: Optional[Diagnostic] = None

    # =========================================================================
    # Token Access
    # =========================================================================

    @property
    def current(self) -> Token:
        """The lookahead token, read from the lexer on first access."""
        if self._current is None:
            self._current = self.lexer.next_token()
        return self._current

    def advance(self) -> Token:
        """Replace the lookahead with the next token from the lexer."""
        self._current = self.lexer.next_token()
        logger.debug(f"Token: {self._current!r}")
        return self._current

    def _error(self, message: str) -> None:
        """Report a parse error at the current token; always returns None."""
        self._last_diagnostic = self.reporter.report(message, self.current)
        return None

    # =========================================================================
    # Primary Expressions
    # =========================================================================

    def parse_number_expr(self) -> NumberLiteral:
        """numberexpr ::= NUMBER"""
        node = NumberLiteral(self.current.value)
        self.advance()
        return node

    def parse_paren_expr(self) -> Optional[Expr]:
        """
        parenexpr ::= '(' expression ')'

        Parentheses only group; no node is created for them.
        """
        self.advance()  # eat (
        inner = self.parse_expression()
        if inner is None:
            return None

        if not self.current.is_char(")"):
            return self._error("Expected ')'")
        self.advance()  # eat )
        return inner

    def parse_identifier_expr(self) -> Optional[Expr]:
        """
        identifierexpr ::= IDENTIFIER
                         | IDENTIFIER '(' (expression (',' expression)*)? ')'
        """
        name = self.current.value
        self.advance()  # eat identifier

        # Simple variable reference
        if not self.current.is_char("("):
            return VariableRef(name)

        # Call
        self.advance()  # eat (
        arguments: list[Expr] = []
        if not self.current.is_char(")"):
            while True:
                argument = self.parse_expression()
                if argument is None:
                    return None
                arguments.append(argument)

                if self.current.is_char(")"):
                    break
                if not self.current.is_char(","):
                    return self._error("Expected ')' or ',' in arg list")
                self.advance()  # eat ,

        self.advance()  # eat )
        return Call(name, tuple(arguments))

    def parse_primary(self) -> Optional[Expr]:
        """
        primary ::= identifierexpr | numberexpr | parenexpr
        """
        token = self.current
        if token.type == TokenType.IDENTIFIER:
            return self.parse_identifier_expr()
        if token.type == TokenType.NUMBER:
            return self.parse_number_expr()
        if token.is_char("("):
            return self.parse_paren_expr()
        return self._error("unknown token when expecting an expression")

    # =========================================================================
    # Binary Expressions
    # =========================================================================

    def parse_expression(self) -> Optional[Expr]:
        """expression ::= primary binoprhs"""
        lhs = self.parse_primary()
        if lhs is None:
            return None
        return self.parse_bin_op_rhs(0, lhs)

    def parse_bin_op_rhs(self, min_precedence: int, lhs: Expr) -> Optional[Expr]:
        """
        binoprhs ::= (operator primary)*

        Folds operators into ``lhs`` for as long as they bind at least as
        tightly as ``min_precedence``. Equal precedence folds to the left;
        when the operator after the right operand binds tighter, that
        operand is resolved first with a raised minimum.
        """
        while True:
            op_precedence = self.precedence.get_precedence(self.current)

            # Not an operator, or one that binds too loosely: done
            if op_precedence < min_precedence:
                return lhs

            operator = self.current.value
            self.advance()  # eat operator

            rhs = self.parse_primary()
            if rhs is None:
                return None

            # A tighter operator after rhs takes rhs as its left operand
            next_precedence = self.precedence.get_precedence(self.current)
            if op_precedence < next_precedence:
                rhs = self.parse_bin_op_rhs(op_precedence + 1, rhs)
                if rhs is None:
                    return None

            lhs = BinaryOp(operator, lhs, rhs)

    # =========================================================================
    # Declarations
    # =========================================================================

    def parse_prototype(self) -> Optional[Prototype]:
        """prototype ::= IDENTIFIER '(' IDENTIFIER* ')'"""
        if self.current.type != TokenType.IDENTIFIER:
            return self._error("Expected fcn name in prototype")

        name = self.current.value
        self.advance()  # eat name

        if not self.current.is_char("("):
            return self._error("Expected '(' in prototype")

        parameters: list[str] = []
        while self.advance().type == TokenType.IDENTIFIER:
            parameters.append(self.current.value)

        if not self.current.is_char(")"):
            return self._error("Expected ')' in prototype")
        self.advance()  # eat )

        return Prototype(name, tuple(parameters))

    def parse_definition(self) -> Optional[FunctionDef]:
        """definition ::= 'def' prototype expression"""
        self.advance()  # eat def
        prototype = self.parse_prototype()
        if prototype is None:
            return None

        body = self.parse_expression()
        if body is None:
            return None
        return FunctionDef(prototype, body)

    def parse_extern(self) -> Optional[Prototype]:
        """extern ::= 'extern' prototype"""
        self.advance()  # eat extern
        return self.parse_prototype()

    def parse_top_level_expr(self) -> Optional[FunctionDef]:
        """toplevelexpr ::= expression, wrapped in an anonymous function"""
        body = self.parse_expression()
        if body is None:
            return None
        return FunctionDef(Prototype.anonymous(), body)

    # =========================================================================
    # Top Level
    # =========================================================================

    def parse_next_unit(self) -> ParseResult:
        """
        Parse the next top-level unit.

        Returns:
            A ParseResult. On ERROR the offending token has already been
            discarded, so calling again continues with fresh input.
        """
        self._last_diagnostic = None
        token = self.current

        if token.type == TokenType.EOF:
            return ParseResult(UnitKind.END)

        # Top-level semicolons are ignored
        if token.is_char(";"):
            self.advance()
            return ParseResult(UnitKind.SKIP)

        node: Optional[Union[FunctionDef, Prototype]]
        if token.type == TokenType.DEF:
            kind = UnitKind.DEFINITION
            node = self.parse_definition()
        elif token.type == TokenType.EXTERN:
            kind = UnitKind.EXTERN
            node = self.parse_extern()
        else:
            kind = UnitKind.EXPRESSION
            node = self.parse_top_level_expr()

        if node is None:
            # Panic-mode recovery: skip one token and start over
            skipped = self.current
            self.advance()
            logger.debug(f"Recovered from parse error by skipping {skipped!r}")
            return ParseResult(UnitKind.ERROR, diagnostic=self._last_diagnostic)

        logger.debug(f"Parsed {kind.name.lower()} unit")
        return ParseResult(kind, node)

    def units(self) -> Iterator[ParseResult]:
        """Yield every top-level result until end of input (END excluded)."""
        while True:
            result = self.parse_next_unit()
            if result.kind == UnitKind.END:
                return
            yield result


# =============================================================================
# Convenience Functions
# =============================================================================

@dataclass
class ParseReport:
    """
    Everything parse_source() found.

    Attributes:
        units: Every non-END result in source order (SKIP included)
        diagnostics: All diagnostics reported while parsing
    """
    units: list[ParseResult] = field(default_factory=list)
    diagnostics: list[Diagnostic] = field(default_factory=list)

    @property
    def nodes(self) -> list[Union[FunctionDef, Prototype]]:
        """The nodes of all successfully parsed units."""
        return [unit.node for unit in self.units if unit.ok]

    def has_errors(self) -> bool:
        return len(self.diagnostics) > 0


def parse_source(
    source: Union[str, TextIO],
    precedence: Optional[PrecedenceTable] = None,
    strict: bool = False,
) -> ParseReport:
    """
    Parse a whole program.

    Args:
        source: Source text or text stream
        precedence: Operator table (defaults to the standard operators)
        strict: Raise ParseFailedError if any diagnostic was reported

    Returns:
        A ParseReport with every unit and diagnostic

    Raises:
        ParseFailedError: If ``strict`` and parsing reported errors
    """
    reporter = ErrorReporter()
    parser = Parser(source, precedence=precedence, reporter=reporter)
    report = ParseReport(units=list(parser.units()))
    report.diagnostics = list(reporter.diagnostics)

    if strict:
        reporter.raise_if_errors()
    return report
