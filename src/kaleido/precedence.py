"""
Binary Operator Precedence Table
================================

Maps single-character binary operators to their binding strength. The
parser consults this table while precedence climbing; a higher number
binds tighter.

Default Operators
-----------------
| Operator | Precedence |
|----------|------------|
| <        | 10         |
| +        | 20         |
| -        | 20         |
| *        | 40         |

There is no division by default. Additional operators are installed from
configuration, e.g. ``{"/": 40}``.

Any token that is not a single printable character, or a character with
no entry in the table, has precedence NOT_AN_OPERATOR (-1). The parser
reads that as "no binary operator here" and stops climbing.
"""

import logging
import string
from typing import Iterator, Mapping, Optional

from kaleido.errors import PrecedenceConfigError
from kaleido.lexer import Lexer, Token, TokenType

logger = logging.getLogger(__name__)


NOT_AN_OPERATOR = -1

DEFAULT_PRECEDENCE: dict[str, int] = {
    "<": 10,
    "+": 20,
    "-": 20,
    "*": 40,
}

# Structural characters of the grammar
RESERVED_CHARS = "(),;"

# Printable, non-whitespace ASCII
_PRINTABLE = frozenset(string.printable) - frozenset(string.whitespace)


class PrecedenceTable:
    """
    Operator precedence lookup for the expression parser.

    Usage:
        table = PrecedenceTable()
        table.install("/", 40)
        table.get_precedence(Token(TokenType.CHAR, "/"))  # 40

    Each parser owns its own table, so changing one parser's operators
    never affects another.
    """

    def __init__(self, operators: Optional[Mapping[str, int]] = None):
        """
        Initialize the table.

        Args:
            operators: Initial operators; defaults to DEFAULT_PRECEDENCE
        """
        self._table: dict[str, int] = {}
        for operator, precedence in (operators if operators is not None else DEFAULT_PRECEDENCE).items():
            self.install(operator, precedence)

    @classmethod
    def from_mapping(
        cls,
        extra: Mapping[str, int],
        include_defaults: bool = True,
    ) -> "PrecedenceTable":
        """
        Build a table from configuration.

        Args:
            extra: Operators to add (or override)
            include_defaults: Start from DEFAULT_PRECEDENCE when True,
                              from an empty table otherwise
        """
        table = cls(DEFAULT_PRECEDENCE if include_defaults else {})
        for operator, precedence in extra.items():
            table.install(operator, precedence)
        return table

    def install(self, operator: str, precedence: int) -> None:
        """
        Add or replace a binary operator.

        Raises:
            PrecedenceConfigError: If the operator or precedence is invalid
        """
        self._validate(operator, precedence)
        previous = self._table.get(operator)
        self._table[operator] = precedence
        if previous is not None and previous != precedence:
            logger.debug(f"Operator {operator!r} precedence changed {previous} -> {precedence}")
        else:
            logger.debug(f"Installed operator {operator!r} with precedence {precedence}")

    def remove(self, operator: str) -> None:
        """Remove an operator; unknown operators are ignored."""
        self._table.pop(operator, None)

    def get_precedence(self, token: Token) -> int:
        """
        Return the precedence of ``token`` as a binary operator.

        Returns NOT_AN_OPERATOR for anything that is not a single printable
        character with an entry in the table.
        """
        if token.type != TokenType.CHAR:
            return NOT_AN_OPERATOR
        char = token.value
        if char not in _PRINTABLE:
            return NOT_AN_OPERATOR
        return self._table.get(char, NOT_AN_OPERATOR)

    def as_dict(self) -> dict[str, int]:
        return dict(self._table)

    def __contains__(self, operator: object) -> bool:
        return operator in self._table

    def __iter__(self) -> Iterator[str]:
        return iter(self._table)

    def __len__(self) -> int:
        return len(self._table)

    def __repr__(self) -> str:
        entries = ", ".join(f"{op!r}: {prec}" for op, prec in sorted(self._table.items(), key=lambda i: (i[1], i[0])))
        return f"PrecedenceTable({{{entries}}})"

    # =========================================================================
    # Validation
    # =========================================================================

    @staticmethod
    def _validate(operator: str, precedence: int) -> None:
        if not isinstance(operator, str) or len(operator) != 1:
            raise PrecedenceConfigError(
                str(operator),
                "operators must be exactly one character",
                hint="multi-character operators are not supported",
            )
        if operator not in _PRINTABLE:
            raise PrecedenceConfigError(operator, "operators must be printable ASCII characters")
        if (
            operator in Lexer.IDENT_CHARS
            or operator in Lexer.NUMBER_CHARS
            or operator == Lexer.COMMENT_START
        ):
            raise PrecedenceConfigError(
                operator,
                "character is consumed by the lexer before it can become an operator",
            )
        if operator in RESERVED_CHARS:
            raise PrecedenceConfigError(operator, "character is reserved by the grammar")
        if isinstance(precedence, bool) or not isinstance(precedence, int):
            raise PrecedenceConfigError(operator, f"precedence must be an integer, got {precedence!r}")
        if precedence <= 0:
            raise PrecedenceConfigError(
                operator,
                f"precedence must be positive, got {precedence}",
                hint="higher numbers bind tighter; use 1 or more",
            )
