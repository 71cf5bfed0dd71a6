"""
Kaleidoscope Lexer (Tokenizer)
==============================

This module implements the lexer for the Kaleidoscope language. It pulls
characters from a source string or text stream one at a time and turns
them into tokens on demand for the parser.

Token Categories
----------------
- Keywords: def, extern
- Identifiers: [a-zA-Z][a-zA-Z0-9]*
- Numbers: runs of digits and '.', always converted to float
- Single characters: every other character, e.g. ( ) , ; + - * <
- EOF: end of input (returned repeatedly once reached)

Comments
--------
A '#' starts a comment that runs to the end of the line ('\\n' or '\\r')
or to the end of input. Comments never produce tokens.

Lookahead
---------
The lexer keeps exactly one pending character: the character that ended
the previous token. A token boundary is only known after reading one
character past it, so that character is held back for the next call.

Numeric Literals
----------------
The scanner accepts any run of digits and dots. Conversion keeps the
longest valid prefix of the run, the way C's strtod does, so "1.2.3"
becomes 1.2 and a lone "." becomes 0.0. Malformed numbers are never
reported as errors.

Example Usage
-------------
>>> from kaleido.lexer import Lexer
>>> lexer = Lexer("def foo(x) x + 1.5")
>>> for token in lexer.tokenize():
...     print(token)
Token(DEF, 'def')
Token(IDENTIFIER, 'foo')
Token(CHAR, '(')
Token(IDENTIFIER, 'x')
Token(CHAR, ')')
Token(IDENTIFIER, 'x')
Token(CHAR, '+')
Token(NUMBER, 1.5)
Token(EOF)
"""

import io
import logging
import re
import string
from dataclasses import dataclass
from enum import Enum, auto
from typing import Iterator, TextIO, Union

logger = logging.getLogger(__name__)


# =============================================================================
# Token Type Enumeration
# =============================================================================

class TokenType(Enum):
    """
    Token kinds for Kaleidoscope.

    Anything that is not a keyword, identifier, number or end of input is
    returned as a CHAR token carrying the character itself.
    """
    EOF = auto()            # End of input
    DEF = auto()            # def
    EXTERN = auto()         # extern
    IDENTIFIER = auto()     # Function and variable names
    NUMBER = auto()         # Floating-point literals
    CHAR = auto()           # Any other single character


KEYWORDS: dict[str, TokenType] = {
    "def": TokenType.DEF,
    "extern": TokenType.EXTERN,
}


# =============================================================================
# Token Data Class
# =============================================================================

@dataclass(frozen=True)
class Token:
    """
    A single token from Kaleidoscope source.

    Attributes:
        type: The TokenType classification
        value: str for IDENTIFIER, CHAR and keywords; float for NUMBER;
               None for EOF
    """
    type: TokenType
    value: Union[str, float, None] = None

    def __repr__(self) -> str:
        if self.value is None:
            return f"Token({self.type.name})"
        return f"Token({self.type.name}, {self.value!r})"

    def is_char(self, char: str) -> bool:
        """Return True if this is the single-character token ``char``."""
        return self.type == TokenType.CHAR and self.value == char

    def describe(self) -> str:
        """Short human-readable form used in diagnostics."""
        if self.type == TokenType.EOF:
            return "end of input"
        if self.type == TokenType.IDENTIFIER:
            return f"identifier '{self.value}'"
        if self.type == TokenType.NUMBER:
            return f"number {self.value:g}"
        if self.type == TokenType.CHAR:
            return repr(self.value)
        return f"keyword '{self.value}'"


EOF_TOKEN = Token(TokenType.EOF)


# =============================================================================
# Numeric Conversion
# =============================================================================

# Longest prefix that float() accepts, restricted to the characters the
# scanner collects (digits and '.')
_NUMBER_PREFIX = re.compile(r"[0-9]*\.?[0-9]*")


def parse_number(text: str) -> float:
    """
    Convert a scanned digit/dot run to a float.

    Follows strtod: the longest valid prefix is converted and the rest is
    ignored. A run with no valid prefix (such as ".") yields 0.0. The
    conversion does not depend on the process locale.

    Examples:
        >>> parse_number("3.14")
        3.14
        >>> parse_number("1.2.3")
        1.2
        >>> parse_number(".")
        0.0
    """
    prefix = _NUMBER_PREFIX.match(text).group(0)
    if not prefix.strip("."):
        return 0.0
    return float(prefix)


# =============================================================================
# Lexer Implementation
# =============================================================================

class Lexer:
    """
    Tokenizes Kaleidoscope source on demand.

    The lexer reads from a text stream one character at a time and never
    looks further ahead than a single character. All state lives on the
    instance, so independent lexers over independent streams never
    interfere with each other.

    Usage:
        lexer = Lexer("extern sin(x)")
        token = lexer.next_token()

    Attributes:
        stream: The text stream characters are read from
    """

    # Whitespace as defined by C's isspace() in the "C" locale
    WHITESPACE = " \t\n\r\v\f"

    IDENT_START = string.ascii_letters
    IDENT_CHARS = string.ascii_letters + string.digits

    NUMBER_CHARS = string.digits + "."

    COMMENT_START = "#"
    COMMENT_END = "\n\r"

    def __init__(self, source: Union[str, TextIO]):
        """
        Initialize the lexer.

        Args:
            source: Source text, or any object with a ``read(1)`` method
                    returning one character at a time ("" at end of input)
        """
        if isinstance(source, str):
            source = io.StringIO(source)
        self.stream = source

        # Pending lookahead character; "" means end of input
        self._last_char: str = " "

    def _read_char(self) -> str:
        return self.stream.read(1)

    def next_token(self) -> Token:
        """
        Read and return the next token, advancing the stream.

        Once end of input is reached every further call returns an EOF
        token without consuming anything.
        """
        while True:
            # Skip whitespace
            while self._last_char and self._last_char in self.WHITESPACE:
                self._last_char = self._read_char()

            char = self._last_char

            # End of input: don't consume
            if not char:
                return EOF_TOKEN

            # Identifiers and keywords
            if char in self.IDENT_START:
                return self._scan_identifier()

            # Numbers start with a digit or a literal '.'
            if char in self.NUMBER_CHARS:
                return self._scan_number()

            # Comments: skip to end of line, then look for a token again
            if char == self.COMMENT_START:
                self._skip_comment()
                continue

            # Anything else is returned as itself
            self._last_char = self._read_char()
            return Token(TokenType.CHAR, char)

    def tokenize(self) -> Iterator[Token]:
        """
        Yield tokens up to and including the first EOF token.
        """
        while True:
            token = self.next_token()
            yield token
            if token.type == TokenType.EOF:
                return

    # =========================================================================
    # Scanners
    # =========================================================================

    def _scan_identifier(self) -> Token:
        chars = [self._last_char]
        self._last_char = self._read_char()
        while self._last_char and self._last_char in self.IDENT_CHARS:
            chars.append(self._last_char)
            self._last_char = self._read_char()

        name = "".join(chars)
        if name in KEYWORDS:
            return Token(KEYWORDS[name], name)
        return Token(TokenType.IDENTIFIER, name)

    def _scan_number(self) -> Token:
        chars = []
        while self._last_char and self._last_char in self.NUMBER_CHARS:
            chars.append(self._last_char)
            self._last_char = self._read_char()

        text = "".join(chars)
        value = parse_number(text)
        if text.count(".") > 1:
            logger.debug(f"Numeric literal {text!r} truncated to {value!r}")
        return Token(TokenType.NUMBER, value)

    def _skip_comment(self) -> None:
        while self._last_char and self._last_char not in self.COMMENT_END:
            self._last_char = self._read_char()


# =============================================================================
# Convenience Functions
# =============================================================================

def tokenize(source: Union[str, TextIO]) -> list[Token]:
    """
    Tokenize source text into a list ending with an EOF token.

    Args:
        source: Source text or a text stream

    Returns:
        All tokens, the last one being EOF
    """
    return list(Lexer(source).tokenize())
