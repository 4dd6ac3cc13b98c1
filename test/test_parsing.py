"""
Expression parsing tests for the Monkey Pratt parser
"""

import pytest
from ast_nodes import (
  BlockStatement,
  BooleanLiteral,
  CallExpression,
  ExpressionStatement,
  FunctionLiteral,
  Identifier,
  IfExpression,
  InfixExpression,
  IntegerLiteral,
  PrefixExpression,
  pretty_print_ast,
)
from lexer import Lexer
from parsing import Parser, Precedence, parse


def parse_single_expression(parser, text):
  program, errors = parser.parse_string(text)
  assert errors == [], errors
  assert len(program.statements) == 1
  stmt = program.statements[0]
  assert isinstance(stmt, ExpressionStatement)
  return stmt.expression


class TestPrefixAndInfix:
  """Test operator expressions"""

  @pytest.mark.parametrize("source, operator, operand", [
      ("!5;", "!", IntegerLiteral(5)),
      ("-15;", "-", IntegerLiteral(15)),
      ("!foobar;", "!", Identifier("foobar")),
      ("!true;", "!", BooleanLiteral(True)),
  ])
  def test_prefix_expressions(self, parser, source, operator, operand):
    assert parse_single_expression(parser, source) == PrefixExpression(operator, operand)

  @pytest.mark.parametrize("operator", ["+", "-", "*", "/", "%", ">", "<", "==", "!="])
  def test_infix_expressions(self, parser, operator):
    expression = parse_single_expression(parser, f"5 {operator} 6;")
    assert expression == InfixExpression(IntegerLiteral(5), operator, IntegerLiteral(6))

  def test_boolean_infix(self, parser):
    expression = parse_single_expression(parser, "true != false")
    assert expression == InfixExpression(BooleanLiteral(True), "!=", BooleanLiteral(False))

  def test_precedence_ordering(self):
    assert Precedence.LOWEST < Precedence.EQUALS < Precedence.LESSGREATER < Precedence.SUM
    assert Precedence.SUM < Precedence.PRODUCT < Precedence.PREFIX < Precedence.CALL


class TestOperatorPrecedence:
  """Test grouping through the canonical rendering"""

  @pytest.mark.parametrize("source, expected", [
      ("-a * b", "((-a) * b)"),
      ("!-a", "(!(-a))"),
      ("a + b + c", "((a + b) + c)"),
      ("a + b - c", "((a + b) - c)"),
      ("a * b * c", "((a * b) * c)"),
      ("a * b / c", "((a * b) / c)"),
      ("a + b / c", "(a + (b / c))"),
      ("a % b * c", "((a % b) * c)"),
      ("a + b * c + d / e - f", "(((a + (b * c)) + (d / e)) - f)"),
      ("3 + 4; -5 * 5", "(3 + 4);\n((-5) * 5)"),
      ("5 > 4 == 3 < 4", "((5 > 4) == (3 < 4))"),
      ("5 < 4 != 3 > 4", "((5 < 4) != (3 > 4))"),
      ("3 + 4 * 5 == 3 * 1 + 4 * 5", "((3 + (4 * 5)) == ((3 * 1) + (4 * 5)))"),
      ("true", "true"),
      ("3 > 5 == false", "((3 > 5) == false)"),
      ("1 + (2 + 3) + 4", "((1 + (2 + 3)) + 4)"),
      ("(5 + 5) * 2", "((5 + 5) * 2)"),
      ("2 / (5 + 5)", "(2 / (5 + 5))"),
      ("-(5 + 5)", "(-(5 + 5))"),
      ("!(true == true)", "(!(true == true))"),
      ("-a(b)", "(-a(b))"),
      ("a + add(b * c) + d", "((a + add((b * c))) + d)"),
      ("add(a, b, 1, 2 * 3, 4 + 5, add(6, 7 * 8))",
       "add(a, b, 1, (2 * 3), (4 + 5), add(6, (7 * 8)))"),
      ("add(a + b + c * d / f + g)", "add((((a + b) + ((c * d) / f)) + g))"),
  ])
  def test_rendering(self, parser, source, expected):
    program, errors = parser.parse_string(source)
    assert errors == []
    assert str(program) == expected


class TestCompoundExpressions:
  """Test if, function and call expressions"""

  def test_if_expression(self, parser):
    expression = parse_single_expression(parser, "if (x < y) { x }")
    assert isinstance(expression, IfExpression)
    assert expression.condition == InfixExpression(Identifier("x"), "<", Identifier("y"))
    assert expression.consequence == BlockStatement((ExpressionStatement(Identifier("x")),))
    assert expression.alternative is None
    assert str(expression) == "if (x < y) {x}"

  def test_if_else_expression(self, parser):
    expression = parse_single_expression(parser, "if x < y { x } else { y }")
    assert expression.alternative == BlockStatement((ExpressionStatement(Identifier("y")),))
    assert str(expression) == "if (x < y) {x} else {y}"

  def test_function_literal(self, parser):
    expression = parse_single_expression(parser, "fn(x, y) { x + y; }")
    assert isinstance(expression, FunctionLiteral)
    assert expression.parameters == ("x", "y")
    assert len(expression.body.statements) == 1
    assert str(expression) == "fn(x, y) {(x + y)}"

  @pytest.mark.parametrize("source, parameters", [
      ("fn() {};", ()),
      ("fn(x) {};", ("x",)),
      ("fn(x, y, z) {};", ("x", "y", "z")),
  ])
  def test_function_parameters(self, parser, source, parameters):
    assert parse_single_expression(parser, source).parameters == parameters

  def test_call_expression(self, parser):
    expression = parse_single_expression(parser, "add(1, 2 * 3, 4 + 5);")
    assert isinstance(expression, CallExpression)
    assert expression.function == Identifier("add")
    assert [str(arg) for arg in expression.arguments] == ["1", "(2 * 3)", "(4 + 5)"]

  def test_immediately_applied_function(self, parser):
    expression = parse_single_expression(parser, "fn(x) { x }(5)")
    assert isinstance(expression.function, FunctionLiteral)
    assert expression.arguments == (IntegerLiteral(5),)

  def test_block_unterminated_at_end_of_input(self, parser):
    expression = parse_single_expression(parser, "fn(x) { x")
    assert expression.body.statements == (ExpressionStatement(Identifier("x")),)

  def test_pretty_print(self, parser):
    program, _ = parser.parse_string("1 + 2")
    assert pretty_print_ast(program) == "PROGRAM\n  INFIX +\n    INTEGER(1)\n    INTEGER(2)\n"


class TestParseErrors:
  """Test error messages and recovery"""

  def test_missing_let_name(self, parser):
    program, errors = parser.parse_string("let = 5;")
    assert errors == [
        "expected next token to be IDENT, got = instead",
        "no prefix parse function for =",
    ]
    assert program.statements == (ExpressionStatement(IntegerLiteral(5)),)

  def test_missing_assign(self, parser):
    _, errors = parser.parse_string("let x 5;")
    assert errors == ["expected next token to be =, got 5 instead"]

  def test_recovery_continues_with_next_statement(self, parser):
    program, errors = parser.parse_string("let x = 5; ) let y = 10;")
    assert errors == ["no prefix parse function for )"]
    assert [stmt.name for stmt in program.statements] == ["x", "y"]

  def test_unclosed_group(self, parser):
    _, errors = parser.parse_string("(1 + 2")
    assert errors == ["expected next token to be ), got EOF instead"]

  def test_else_without_block(self, parser):
    program, errors = parser.parse_string("if x { 1 } else 2")
    assert errors == ["expected next token to be {, got 2 instead"]
    assert program.statements == (ExpressionStatement(IntegerLiteral(2)),)

  def test_non_identifier_parameter(self, parser):
    _, errors = parser.parse_string("fn(1) { }")
    assert errors[0] == "expected next token to be IDENT, got 1 instead"

  def test_illegal_token(self, parser):
    program, errors = parser.parse_string("5 @ 3")
    assert errors == ["no prefix parse function for ILLEGAL(@)"]
    assert len(program.statements) == 2

  def test_bare_block_is_rejected(self, parser):
    _, errors = parser.parse_string("{ 1 }")
    assert errors[0] == "no prefix parse function for {"

  def test_integer_literal_out_of_range(self, parser):
    _, errors = parser.parse_string("9223372036854775808")
    assert errors == ["could not parse 9223372036854775808 as integer"]

  def test_largest_integer_literal(self, parser):
    assert parse_single_expression(parser, "9223372036854775807") == IntegerLiteral(2 ** 63 - 1)

  def test_parser_over_lexer(self):
    parser = Parser(Lexer("let = 1"))
    parser.parse_program()
    assert parser.errors[0] == "expected next token to be IDENT, got = instead"


class TestRoundTrip:
  """Rendering a program and parsing it again gives the same program"""

  @pytest.mark.parametrize("source", [
      "let x = 5; x + 1",
      "let add = fn(a, b) { a + b; }; add(1, 2 * 3)",
      "if (a > b) { return a; } else { let c = b; c }",
      "a; (-b)",
      r'let s = "say \"hi\"\n"; len(s)',
      "fn(x) { x }(5)",
      "!(true == false) != true",
      "let f = fn() { a; b; if c { d } }; f()",
  ])
  def test_render_and_reparse(self, source):
    program, errors = parse(source)
    assert errors == []

    rendered = str(program)
    reparsed, errors = parse(rendered)
    assert errors == []
    assert reparsed == program
    assert str(reparsed) == rendered
