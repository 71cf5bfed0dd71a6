"""
kaleido - Kaleidoscope Language Front End
=========================================

This package provides the front end for Kaleidoscope, a small
expression-oriented language: a tokenizer and a recursive-descent parser
with operator-precedence climbing that turn source text into an abstract
syntax tree of function definitions, extern declarations and top-level
expressions.

Main Components
---------------
- **lexer**: character stream to tokens, one character of lookahead
- **precedence**: binary operator precedence table
- **ast**: the six AST node kinds, visitor, printers
- **parser**: recursive descent with precedence climbing and
  single-token panic-mode recovery
- **driver**: REPL-style loop acknowledging each parsed unit
- **cli**: the ``kparse`` command-line tool

Pipeline
--------
    Source → Lexer → Tokens → Parser (+ PrecedenceTable) → AST → Driver

Quick Start
-----------
Parse a program:
    >>> from kaleido import parse_source, to_sexpr
    >>> report = parse_source("def foo(a b) a + b * 2")
    >>> to_sexpr(report.nodes[0])
    '(def foo (a b) (+ a (* b 2)))'

Step through units one at a time:
    >>> from kaleido import Parser, UnitKind
    >>> parser = Parser("extern sin(x); sin(1)")
    >>> [r.kind for r in parser.units()]
    [<UnitKind.EXTERN: 2>, <UnitKind.SKIP: 4>, <UnitKind.EXPRESSION: 3>]

Or use the command-line tool:
    $ kparse program.kal
    $ kparse --ast -O /=40 program.kal
"""

__version__ = "1.0.0"

# =============================================================================
# Public API Exports
# =============================================================================

from kaleido.ast import (
    ASTPrinter,
    ASTVisitor,
    BinaryOp,
    Call,
    Expr,
    FunctionDef,
    Node,
    NumberLiteral,
    Prototype,
    VariableRef,
    to_sexpr,
    walk,
)
from kaleido.config import FrontendConfig, parse_operator_spec
from kaleido.driver import Driver, DriverSummary
from kaleido.errors import (
    ConfigurationError,
    Diagnostic,
    ErrorReporter,
    FrontendError,
    KaleidoError,
    ParseFailedError,
    PrecedenceConfigError,
)
from kaleido.lexer import Lexer, Token, TokenType, tokenize
from kaleido.parser import ParseReport, ParseResult, Parser, UnitKind, parse_source
from kaleido.precedence import DEFAULT_PRECEDENCE, NOT_AN_OPERATOR, PrecedenceTable

__all__ = [
    # Version
    "__version__",
    # Lexer
    "Lexer",
    "Token",
    "TokenType",
    "tokenize",
    # Precedence
    "PrecedenceTable",
    "DEFAULT_PRECEDENCE",
    "NOT_AN_OPERATOR",
    # AST
    "NumberLiteral",
    "VariableRef",
    "BinaryOp",
    "Call",
    "Prototype",
    "FunctionDef",
    "Expr",
    "Node",
    "ASTVisitor",
    "ASTPrinter",
    "to_sexpr",
    "walk",
    # Parser
    "Parser",
    "ParseResult",
    "ParseReport",
    "UnitKind",
    "parse_source",
    # Driver and configuration
    "Driver",
    "DriverSummary",
    "FrontendConfig",
    "parse_operator_spec",
    # Errors and diagnostics
    "KaleidoError",
    "ConfigurationError",
    "PrecedenceConfigError",
    "FrontendError",
    "ParseFailedError",
    "Diagnostic",
    "ErrorReporter",
]
