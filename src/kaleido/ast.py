"""
Kaleidoscope Abstract Syntax Tree (AST) Definitions
===================================================

This module defines the AST node types produced by the parser. The set
of node kinds is closed: every consumer in this package handles all six
and rejects anything else.

Node Kinds
----------
Expressions (Expr)
├── NumberLiteral - floating-point constant
├── VariableRef - reference to a named value
├── BinaryOp - single-character binary operator
└── Call - function call with ordered arguments
Declarations
├── Prototype - function name and parameter names
└── FunctionDef - prototype plus a single body expression

Design Notes
------------
- All nodes are frozen dataclasses; a parsed tree cannot be modified
- Children are owned by exactly one parent; the parser never shares
  a node between two positions, so every AST is a tree
- Sequences are tuples so that nodes are hashable and compare by value
- A bare top-level expression is wrapped in a FunctionDef whose
  Prototype has an empty name and no parameters (an anonymous function)
"""

from dataclasses import dataclass
from typing import Any, Iterator, Union


# =============================================================================
# Expression Nodes
# =============================================================================

@dataclass(frozen=True)
class NumberLiteral:
    """Numeric constant; every number in the language is a float."""
    value: float


@dataclass(frozen=True)
class VariableRef:
    """Reference to a variable such as a function parameter."""
    name: str


@dataclass(frozen=True)
class BinaryOp:
    """
    Binary operation (left op right).

    Attributes:
        operator: The operator character, e.g. "+"
        left: Left operand
        right: Right operand
    """
    operator: str
    left: "Expr"
    right: "Expr"


@dataclass(frozen=True)
class Call:
    """
    Function call.

    Attributes:
        callee: Name of the called function
        arguments: Argument expressions in source order
    """
    callee: str
    arguments: tuple["Expr", ...] = ()


Expr = Union[NumberLiteral, VariableRef, BinaryOp, Call]


# =============================================================================
# Declaration Nodes
# =============================================================================

ANONYMOUS_NAME = ""


@dataclass(frozen=True)
class Prototype:
    """
    Function signature: its name and the names of its parameters.

    Used on its own for ``extern`` declarations and as the head of every
    FunctionDef. Duplicate parameter names are not rejected.
    """
    name: str
    parameters: tuple[str, ...] = ()

    @property
    def is_anonymous(self) -> bool:
        """True for the prototype of a wrapped top-level expression."""
        return self.name == ANONYMOUS_NAME and not self.parameters

    @classmethod
    def anonymous(cls) -> "Prototype":
        return cls(ANONYMOUS_NAME, ())


@dataclass(frozen=True)
class FunctionDef:
    """
    Function definition.

    The body is a single expression; the language has no statements.
    """
    prototype: Prototype
    body: Expr


Node = Union[NumberLiteral, VariableRef, BinaryOp, Call, Prototype, FunctionDef]

NODE_TYPES = (NumberLiteral, VariableRef, BinaryOp, Call, Prototype, FunctionDef)


def _unknown_node(node: Any) -> TypeError:
    return TypeError(f"not a Kaleidoscope AST node: {type(node).__name__}")


# =============================================================================
# Traversal
# =============================================================================

def children(node: Node) -> tuple[Node, ...]:
    """Return the direct child nodes of ``node`` in source order."""
    if isinstance(node, (NumberLiteral, VariableRef, Prototype)):
        return ()
    if isinstance(node, BinaryOp):
        return (node.left, node.right)
    if isinstance(node, Call):
        return node.arguments
    if isinstance(node, FunctionDef):
        return (node.prototype, node.body)
    raise _unknown_node(node)


def walk(node: Node) -> Iterator[Node]:
    """
    Iterate over ``node`` and all of its descendants in pre-order.

    Uses an explicit stack, so deeply nested expressions do not hit the
    recursion limit.
    """
    stack = [node]
    while stack:
        current = stack.pop()
        yield current
        stack.extend(reversed(children(current)))


# =============================================================================
# AST Visitor Pattern
# =============================================================================

class ASTVisitor:
    """
    Base class for AST visitors.

    Subclasses override visit_* methods for the node kinds they care
    about; the rest fall through to generic_visit, which visits children.

    Usage:
        class CallCollector(ASTVisitor):
            def __init__(self):
                self.callees = []

            def visit_Call(self, node):
                self.callees.append(node.callee)
                self.generic_visit(node)
    """

    def visit(self, node: Node) -> Any:
        if not isinstance(node, NODE_TYPES):
            raise _unknown_node(node)
        method_name = f"visit_{node.__class__.__name__}"
        visitor = getattr(self, method_name, self.generic_visit)
        return visitor(node)

    def generic_visit(self, node: Node) -> None:
        for child in children(node):
            self.visit(child)

    def visit_NumberLiteral(self, node: NumberLiteral): return self.generic_visit(node)
    def visit_VariableRef(self, node: VariableRef): return self.generic_visit(node)
    def visit_BinaryOp(self, node: BinaryOp): return self.generic_visit(node)
    def visit_Call(self, node: Call): return self.generic_visit(node)
    def visit_Prototype(self, node: Prototype): return self.generic_visit(node)
    def visit_FunctionDef(self, node: FunctionDef): return self.generic_visit(node)


# =============================================================================
# AST Pretty Printer
# =============================================================================

def _format_number(value: float) -> str:
    return f"{value:g}"


class ASTPrinter(ASTVisitor):
    """
    Pretty printer for AST debugging.

    Produces one line per node, indented by depth:

        FunctionDef
          Prototype: foo(a, b)
          BinaryOp: +
            VariableRef: a
            VariableRef: b

    Usage:
        printer = ASTPrinter()
        print(printer.print(node))
    """

    def __init__(self):
        self.output: list[str] = []
        self.indent_level = 0

    def print(self, node: Node) -> str:
        """Print the AST and return it as a string."""
        self.output = []
        self.indent_level = 0
        self.visit(node)
        return "\n".join(self.output)

    def _emit(self, text: str) -> None:
        indent = "  " * self.indent_level
        self.output.append(f"{indent}{text}")

    def _visit_children(self, node: Node) -> None:
        self.indent_level += 1
        self.generic_visit(node)
        self.indent_level -= 1

    def visit_NumberLiteral(self, node: NumberLiteral):
        self._emit(f"NumberLiteral: {_format_number(node.value)}")

    def visit_VariableRef(self, node: VariableRef):
        self._emit(f"VariableRef: {node.name}")

    def visit_BinaryOp(self, node: BinaryOp):
        self._emit(f"BinaryOp: {node.operator}")
        self._visit_children(node)

    def visit_Call(self, node: Call):
        self._emit(f"Call: {node.callee}")
        self._visit_children(node)

    def visit_Prototype(self, node: Prototype):
        name = "<anonymous>" if node.is_anonymous else node.name
        self._emit(f"Prototype: {name}({', '.join(node.parameters)})")

    def visit_FunctionDef(self, node: FunctionDef):
        self._emit("FunctionDef")
        self._visit_children(node)


# =============================================================================
# Compact S-Expression Form
# =============================================================================

def to_sexpr(node: Node) -> str:
    """
    Render ``node`` as a one-line s-expression.

    Examples:
        (+ 1 (* 2 3))
        (foo 1 (+ 2 3))
        (def foo (a b) (+ a b))
        (def () (+ 1 2))
        (extern sin (x))
    """
    if isinstance(node, NumberLiteral):
        return _format_number(node.value)
    if isinstance(node, VariableRef):
        return node.name
    if isinstance(node, BinaryOp):
        return f"({node.operator} {to_sexpr(node.left)} {to_sexpr(node.right)})"
    if isinstance(node, Call):
        if not node.arguments:
            return f"({node.callee})"
        args = " ".join(to_sexpr(a) for a in node.arguments)
        return f"({node.callee} {args})"
    if isinstance(node, Prototype):
        return f"(extern {node.name} ({' '.join(node.parameters)}))"
    if isinstance(node, FunctionDef):
        if node.prototype.is_anonymous:
            return f"(def () {to_sexpr(node.body)})"
        params = " ".join(node.prototype.parameters)
        return f"(def {node.prototype.name} ({params}) {to_sexpr(node.body)})"
    raise _unknown_node(node)
