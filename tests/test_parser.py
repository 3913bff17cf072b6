import sys

import pytest

from ast_nodes import (
    Assign, ArrayLiteral, BinaryOp, BooleanLiteral, Comparison, ExprStatement, For, FunctionCall,
    Identifier, If, IndexAccess, LogicalOp, Not, NumberLiteral, Print, Program, StringLiteral, While,
)
from errors import LexError, ParseError
from parser import parse_source


def expr_of(source):
    program = parse_source(f"print {source};")
    return program.statements[0].expr


def test_program_keeps_every_statement():
    program = parse_source("x = 1; y = 2; print x;")
    assert isinstance(program, Program)
    assert [type(s) for s in program.statements] == [Assign, Assign, Print]


def test_empty_program():
    assert parse_source("// nothing\n").statements == []


def test_multiplication_binds_tighter():
    node = expr_of("1 + 2 * 3")
    assert isinstance(node, BinaryOp) and node.op == "+"
    assert isinstance(node.left, NumberLiteral) and node.left.value == 1
    assert isinstance(node.right, BinaryOp) and node.right.op == "*"


def test_binary_layers_are_left_associative():
    node = expr_of("10 - 3 - 2")
    assert node.op == "-"
    assert isinstance(node.left, BinaryOp) and node.left.op == "-"
    assert node.right.value == 2

    node = expr_of("a || b || c")
    assert isinstance(node, LogicalOp) and isinstance(node.left, LogicalOp)


def test_parentheses_override_precedence():
    node = expr_of("(1 + 2) * 3")
    assert node.op == "*"
    assert isinstance(node.left, BinaryOp) and node.left.op == "+"


def test_logical_and_comparison_ladder():
    # || < && < equality < relational < additive
    node = expr_of("a == 1 + 2 < 4 || b && c")
    assert isinstance(node, LogicalOp) and node.op == "||"
    assert isinstance(node.right, LogicalOp) and node.right.op == "&&"
    eq = node.left
    assert isinstance(eq, Comparison) and eq.op == "=="
    rel = eq.right
    assert isinstance(rel, Comparison) and rel.op == "<"
    assert isinstance(rel.left, BinaryOp)


def test_not_binds_looser_than_index():
    node = expr_of("!flags[0]")
    assert isinstance(node, Not)
    assert isinstance(node.expr, IndexAccess)

    node = expr_of("!!true")
    assert isinstance(node, Not) and isinstance(node.expr, Not)
    assert isinstance(node.expr.expr, BooleanLiteral)


def test_postfix_index_chains():
    node = expr_of("grid[1][2]")
    assert isinstance(node, IndexAccess)
    assert isinstance(node.target, IndexAccess)
    assert isinstance(node.target.target, Identifier)
    assert node.index.value == 2


def test_array_literals():
    node = expr_of('[1, "a", true, []]')
    assert isinstance(node, ArrayLiteral)
    kinds = [type(e) for e in node.elements]
    assert kinds == [NumberLiteral, StringLiteral, BooleanLiteral, ArrayLiteral]
    assert node.elements[3].elements == []


def test_function_calls():
    node = expr_of('join(",", split("a,b", ","))')
    assert isinstance(node, FunctionCall) and node.name == "join"
    assert isinstance(node.args[1], FunctionCall) and node.args[1].name == "split"

    node = expr_of("length([])")
    assert node.name == "length" and len(node.args) == 1


def test_expression_statement():
    program = parse_source('write_file("out.txt", "x");')
    stmt = program.statements[0]
    assert isinstance(stmt, ExprStatement)
    assert isinstance(stmt.expr, FunctionCall)


def test_if_elseif_else_is_flat():
    program = parse_source(
        "if x < 1 { print 1; } elseif x < 2 { print 2; } elseif x < 3 { print 3; } else { print 4; }"
    )
    node = program.statements[0]
    assert isinstance(node, If)
    assert len(node.then_block) == 1
    assert len(node.elseif_clauses) == 2
    cond, block = node.elseif_clauses[1]
    assert isinstance(cond, Comparison)
    assert isinstance(block[0], Print)
    assert len(node.else_block) == 1


def test_if_without_else():
    node = parse_source("if true { }").statements[0]
    assert node.then_block == []
    assert node.elseif_clauses == []
    assert node.else_block is None


def test_while_loop():
    node = parse_source("while i < 3 { print i; i = i + 1; }").statements[0]
    assert isinstance(node, While)
    assert [type(s) for s in node.body] == [Print, Assign]


def test_for_loop():
    node = parse_source("for i = 0; i < 3; i = i + 1 { print i; }").statements[0]
    assert isinstance(node, For)
    assert isinstance(node.init, Assign) and node.init.name == "i"
    assert isinstance(node.condition, Comparison)
    assert isinstance(node.update, Assign)
    assert len(node.body) == 1


def test_nodes_carry_lines():
    program = parse_source("x = 1;\n\nprint x;")
    assert program.statements[0].line == 1
    assert program.statements[1].line == 3


def test_missing_semicolon():
    with pytest.raises(ParseError) as exc:
        parse_source("print 1")
    assert "Expected ';'" in str(exc.value)
    assert "end of input" in str(exc.value)


def test_unexpected_token_names_it():
    with pytest.raises(ParseError) as exc:
        parse_source("print 1 + ;")
    assert "';'" in str(exc.value)
    assert exc.value.line == 1


def test_builtin_name_needs_call():
    with pytest.raises(ParseError):
        parse_source("count = 1;")
    with pytest.raises(ParseError):
        parse_source("print length;")


def test_no_unary_minus():
    with pytest.raises(ParseError):
        parse_source("print -1;")


def test_else_without_if():
    with pytest.raises(ParseError) as exc:
        parse_source("else { }")
    assert "without a preceding if" in str(exc.value)


def test_unclosed_block():
    with pytest.raises(ParseError) as exc:
        parse_source("while true { print 1;")
    assert "'}'" in str(exc.value)


def test_first_error_in_source_order():
    # the parse error at ')' comes before the bad character
    with pytest.raises(ParseError):
        parse_source("print ) @")
    with pytest.raises(LexError):
        parse_source("print 1; @")


def test_unknown_name_call_parses_as_function_call():
    node = expr_of("shout(1, x)")
    assert isinstance(node, FunctionCall) and node.name == "shout"
    assert len(node.args) == 2

    stmt = parse_source("greet();").statements[0]
    assert isinstance(stmt, ExprStatement)
    assert isinstance(stmt.expr, FunctionCall) and stmt.expr.args == []


def test_identifier_without_call_stays_identifier():
    node = expr_of("x + 1")
    assert isinstance(node.left, Identifier)


def test_deep_nesting_is_a_parse_error():
    depth = sys.getrecursionlimit()
    source = "print " + "(" * depth + "1" + ")" * depth + ";"
    with pytest.raises(ParseError) as exc:
        parse_source(source)
    assert "nested too deeply" in str(exc.value)
