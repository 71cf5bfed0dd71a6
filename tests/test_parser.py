"""
Kaleidoscope Parser Test Suite
==============================

Tests for the recursive descent parser, covering expression parsing with
precedence climbing, declarations, the top-level unit loop and
single-token error recovery.

Test Organization
-----------------
- TestPrimaryExpressions: numbers, variables, calls, parentheses
- TestPrecedenceClimbing: operator nesting and associativity
- TestDeclarations: def, extern and anonymous top-level expressions
- TestErrors: diagnostics for each failing production
- TestRecovery: panic-mode recovery at the top level
- TestTopLevel: the unit loop and parse_source()
"""

import io

import pytest
from kaleido.ast import (
    BinaryOp,
    Call,
    FunctionDef,
    NumberLiteral,
    Prototype,
    VariableRef,
    to_sexpr,
)
from kaleido.errors import ErrorReporter, ParseFailedError
from kaleido.lexer import TokenType
from kaleido.parser import Parser, UnitKind, parse_source
from kaleido.precedence import PrecedenceTable


# =============================================================================
# Helper Functions
# =============================================================================

def parse_expr(source: str, precedence: PrecedenceTable = None):
    """Parse a single expression with a fresh parser."""
    return Parser(source, precedence=precedence).parse_expression()


def N(value):
    return NumberLiteral(float(value))


def V(name):
    return VariableRef(name)


# =============================================================================
# Primary Expressions
# =============================================================================

class TestPrimaryExpressions:
    """Tests for primary expressions."""

    def test_number(self):
        assert parse_expr("42") == N(42)

    def test_variable(self):
        assert parse_expr("x") == V("x")

    def test_call_without_arguments(self):
        assert parse_expr("rand()") == Call("rand", ())

    def test_call_arguments(self):
        """Arguments keep source order and may be full expressions."""
        node = parse_expr("foo(1, 2+3)")
        assert node == Call("foo", (N(1), BinaryOp("+", N(2), N(3))))

    def test_nested_calls(self):
        node = parse_expr("f(g(x), h())")
        assert node == Call("f", (Call("g", (V("x"),)), Call("h", ())))

    def test_parentheses_create_no_node(self):
        assert parse_expr("((x))") == V("x")

    def test_number_consumed(self):
        parser = Parser("3 x")
        parser.parse_primary()
        assert parser.current.type == TokenType.IDENTIFIER


# =============================================================================
# Precedence Climbing
# =============================================================================

class TestPrecedenceClimbing:
    """Tests for binary operator nesting."""

    def test_higher_precedence_binds_right_operand(self):
        assert parse_expr("1+2*3") == BinaryOp("+", N(1), BinaryOp("*", N(2), N(3)))

    def test_higher_precedence_first(self):
        assert parse_expr("1*2+3") == BinaryOp("+", BinaryOp("*", N(1), N(2)), N(3))

    def test_left_associative(self):
        assert parse_expr("1-2-3") == BinaryOp("-", BinaryOp("-", N(1), N(2)), N(3))

    def test_mixed_equal_precedence(self):
        assert to_sexpr(parse_expr("a+b-c+d")) == "(+ (- (+ a b) c) d)"

    def test_parentheses_override(self):
        assert parse_expr("(1+2)*3") == BinaryOp("*", BinaryOp("+", N(1), N(2)), N(3))

    def test_climb_and_fall(self):
        """A tighter operator in the middle, then a looser one again."""
        assert to_sexpr(parse_expr("1+2*3-4")) == "(- (+ 1 (* 2 3)) 4)"

    def test_comparison_lowest(self):
        assert to_sexpr(parse_expr("a<b+c*d")) == "(< a (+ b (* c d)))"

    def test_three_levels(self):
        assert to_sexpr(parse_expr("a*b+c<d")) == "(< (+ (* a b) c) d)"

    def test_comparison_left_associative(self):
        assert to_sexpr(parse_expr("a<b<c")) == "(< (< a b) c)"

    def test_operands_may_be_calls(self):
        assert to_sexpr(parse_expr("f(x)*g(y)+1")) == "(+ (* (f x) (g y)) 1)"

    def test_unknown_operator_ends_expression(self):
        """An operator missing from the table stops the climb."""
        parser = Parser("1 / 2")
        assert parser.parse_expression() == N(1)
        assert parser.current.is_char("/")

    def test_custom_operator(self):
        table = PrecedenceTable.from_mapping({"/": 40})
        assert to_sexpr(parse_expr("8/2*2", table)) == "(* (/ 8 2) 2)"
        assert to_sexpr(parse_expr("1+8/2", table)) == "(+ 1 (/ 8 2))"

    def test_custom_precedence_changes_nesting(self):
        """Raising '+' above '*' flips the tree."""
        table = PrecedenceTable.from_mapping({"+": 50})
        assert to_sexpr(parse_expr("1+2*3", table)) == "(* (+ 1 2) 3)"

    def test_non_printable_char_is_not_operator(self):
        parser = Parser("1 \x01 2")
        assert parser.parse_expression() == N(1)


# =============================================================================
# Declarations
# =============================================================================

class TestDeclarations:
    """Tests for def, extern and top-level expressions."""

    def test_definition(self):
        result = Parser("def foo(a b) a+b").parse_next_unit()
        assert result.kind == UnitKind.DEFINITION
        assert result.node == FunctionDef(
            Prototype("foo", ("a", "b")),
            BinaryOp("+", V("a"), V("b")),
        )

    def test_definition_without_parameters(self):
        result = Parser("def one() 1").parse_next_unit()
        assert result.node == FunctionDef(Prototype("one", ()), N(1))

    def test_duplicate_parameters_allowed(self):
        result = Parser("def f(x x) x").parse_next_unit()
        assert result.node.prototype.parameters == ("x", "x")

    def test_extern(self):
        result = Parser("extern sin(x)").parse_next_unit()
        assert result.kind == UnitKind.EXTERN
        assert result.node == Prototype("sin", ("x",))

    def test_extern_without_parameters(self):
        result = Parser("extern rand()").parse_next_unit()
        assert result.node == Prototype("rand", ())

    def test_top_level_expression_is_anonymous(self):
        result = Parser("1+2").parse_next_unit()
        assert result.kind == UnitKind.EXPRESSION
        assert result.node == FunctionDef(Prototype("", ()), BinaryOp("+", N(1), N(2)))
        assert result.node.prototype.is_anonymous

    def test_definition_body_is_one_expression(self):
        """The body ends where the expression ends; the rest is a new unit."""
        parser = Parser("def f(x) x y")
        first = parser.parse_next_unit()
        second = parser.parse_next_unit()
        assert first.node.body == V("x")
        assert second.kind == UnitKind.EXPRESSION
        assert second.node.body == V("y")


# =============================================================================
# Errors
# =============================================================================

class TestErrors:
    """Tests for diagnostics produced by each failing production."""

    @pytest.mark.parametrize("source,message", [
        ("def )", "Expected fcn name in prototype"),
        ("extern 1()", "Expected fcn name in prototype"),
        ("def foo x", "Expected '(' in prototype"),
        ("def foo(a, b) a", "Expected ')' in prototype"),
        ("extern foo(a", "Expected ')' in prototype"),
        ("foo(1 2)", "Expected ')' or ',' in arg list"),
        ("(1+2", "Expected ')'"),
        (")", "unknown token when expecting an expression"),
        ("1 + ;", "unknown token when expecting an expression"),
        ("def f(x)", "unknown token when expecting an expression"),
    ])
    def test_diagnostic_message(self, source, message):
        parser = Parser(source)
        result = parser.parse_next_unit()
        assert result.kind == UnitKind.ERROR
        assert result.node is None
        assert result.diagnostic.message == message
        assert parser.reporter.diagnostics[0] is result.diagnostic

    def test_diagnostic_records_lookahead(self):
        result = Parser("def foo(a, b) a").parse_next_unit()
        assert result.diagnostic.token.is_char(",")
        assert result.diagnostic.kind == "parse error"

    def test_failed_sub_parse_returns_none(self):
        parser = Parser("foo(1 2)")
        assert parser.parse_expression() is None

    def test_no_partial_tree(self):
        """A body that fails leaves no definition behind."""
        report = parse_source("def foo(a) a +")
        assert report.nodes == []
        assert len(report.diagnostics) == 1

    def test_errors_are_not_raised(self):
        parser = Parser(") ) )")
        results = list(parser.units())
        assert [r.kind for r in results] == [UnitKind.ERROR] * 3

    def test_sink_receives_diagnostics(self):
        received = []
        reporter = ErrorReporter(sink=received.append)
        Parser("def )", reporter=reporter).parse_next_unit()
        assert len(received) == 1
        assert received[0].message == "Expected fcn name in prototype"


# =============================================================================
# Recovery
# =============================================================================

class TestRecovery:
    """Tests for single-token panic-mode recovery."""

    def test_skips_exactly_one_token(self):
        parser = Parser("def ) def foo(a b) a+b")
        result = parser.parse_next_unit()
        assert result.kind == UnitKind.ERROR
        # ')' was discarded; the next 'def' is current
        assert parser.current.type == TokenType.DEF

    def test_valid_input_after_error(self):
        parser = Parser("def ) def foo(a b) a+b")
        kinds = [r.kind for r in parser.units()]
        assert kinds == [UnitKind.ERROR, UnitKind.DEFINITION]

    def test_recovery_is_not_synchronising(self):
        """Recovery drops one token, not everything up to ';'."""
        parser = Parser("foo(1 2) ; x")
        results = list(parser.units())
        # '2' is skipped, then ')' fails as a new unit and is skipped too
        assert [r.kind for r in results] == [
            UnitKind.ERROR,
            UnitKind.ERROR,
            UnitKind.SKIP,
            UnitKind.EXPRESSION,
        ]

    def test_expression_after_unknown_operator(self):
        results = list(Parser("1 / 2").units())
        assert [r.kind for r in results] == [
            UnitKind.EXPRESSION,
            UnitKind.ERROR,
            UnitKind.EXPRESSION,
        ]
        assert results[2].node.body == N(2)

    def test_error_at_end_of_input(self):
        parser = Parser("(1+2")
        assert parser.parse_next_unit().kind == UnitKind.ERROR
        assert parser.parse_next_unit().kind == UnitKind.END


# =============================================================================
# Top Level
# =============================================================================

class TestTopLevel:
    """Tests for the unit loop and the parse_source() helper."""

    def test_empty_input(self):
        parser = Parser("")
        assert parser.parse_next_unit().kind == UnitKind.END
        assert parser.parse_next_unit().kind == UnitKind.END

    def test_semicolon_is_skipped(self):
        results = list(Parser("; ; 1").units())
        assert [r.kind for r in results] == [UnitKind.SKIP, UnitKind.SKIP, UnitKind.EXPRESSION]

    def test_program(self):
        source = """
        # Fibonacci-ish helpers
        extern sin(x);
        def square(x) x*x;
        def poly(a b c) a*square(b) + c;
        poly(1, 2, 3) < sin(0.5)
        """
        report = parse_source(source)
        assert not report.has_errors()
        assert [to_sexpr(n) for n in report.nodes] == [
            "(extern sin (x))",
            "(def square (x) (* x x))",
            "(def poly (a b c) (+ (* a (square b)) c))",
            "(def () (< (poly 1 2 3) (sin 0.5)))",
        ]

    def test_parse_from_stream(self):
        report = parse_source(io.StringIO("def id(x) x"))
        assert report.nodes == [FunctionDef(Prototype("id", ("x",)), V("x"))]

    def test_parse_source_collects_diagnostics(self):
        report = parse_source("def ) 1")
        assert report.has_errors()
        assert len(report.diagnostics) == 1
        assert len(report.nodes) == 1

    def test_strict_raises(self):
        with pytest.raises(ParseFailedError) as exc_info:
            parse_source("def ) 1", strict=True)
        assert "Expected fcn name in prototype" in str(exc_info.value)
        assert len(exc_info.value.diagnostics) == 1

    def test_strict_passes_clean_source(self):
        report = parse_source("1", strict=True)
        assert len(report.nodes) == 1

    def test_lookahead_is_lazy(self):
        """Creating a parser reads nothing from the stream."""
        stream = io.StringIO("x")
        Parser(stream)
        assert stream.tell() == 0

    def test_independent_parsers(self):
        table = PrecedenceTable.from_mapping({"/": 40})
        with_div = Parser("4/2", precedence=table)
        without = Parser("4/2")
        assert to_sexpr(with_div.parse_expression()) == "(/ 4 2)"
        assert without.parse_expression() == N(4)
