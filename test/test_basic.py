"""
Basic parsing tests for the Monkey language
Tests statements, expressions and operator precedence
"""

import logging

import pytest
from parsing import create_parser, create_debug_parser, parse_source, Precedence
from error_handling import MonkeyParseError
from syntax_tree import (
  BlockStatement, Boolean, CallExpression, ExpressionStatement, FunctionLiteral,
  Identifier, IfExpression, InfixExpression, IntegerLiteral, LetStatement,
  PrefixExpression, Program, ReturnStatement, StringLiteral, pretty_print_ast,
)


def parse(source):
  """Parse source and fail the test on any parse error"""
  parser = create_parser(source)
  program = parser.parse_program()
  assert parser.errors == [], [str(e) for e in parser.errors]
  return program


def single_expression(source):
  program = parse(source)
  assert len(program.statements) == 1
  stmt = program.statements[0]
  assert isinstance(stmt, ExpressionStatement)
  return stmt.expression


class TestStatements:
  """let, return and expression statements"""

  def test_let_statements(self):
    program = parse("let x = 5;\nlet y = true;\nlet foobar = y;")
    assert program.statements == (
        LetStatement("x", IntegerLiteral(5)),
        LetStatement("y", Boolean(True)),
        LetStatement("foobar", Identifier("y")),
    )

  def test_return_statements(self):
    program = parse("return 5;\nreturn 10;\nreturn 993322;")
    assert [type(s) for s in program.statements] == [ReturnStatement] * 3
    assert program.statements[2].value == IntegerLiteral(993322)

  def test_semicolons_are_optional(self):
    program = parse("let x = 1\nreturn x\nx + 1")
    assert program.statements == (
        LetStatement("x", IntegerLiteral(1)),
        ReturnStatement(Identifier("x")),
        ExpressionStatement(InfixExpression("+", Identifier("x"), IntegerLiteral(1))),
    )

  def test_empty_program(self):
    assert parse("") == Program(())

  def test_program_str(self):
    program = parse("let myVar = anotherVar; return myVar")
    assert str(program) == "let myVar = anotherVar;\nreturn myVar;"


class TestExpressions:
  """Literal and compound expressions"""

  def test_identifier(self):
    assert single_expression("foobar;") == Identifier("foobar")

  def test_integer_literal(self):
    assert single_expression("5;") == IntegerLiteral(5)

  def test_string_literal(self):
    assert single_expression('"hello world";') == StringLiteral("hello world")

  @pytest.mark.parametrize("source,value", [("true;", True), ("false;", False)])
  def test_boolean(self, source, value):
    assert single_expression(source) == Boolean(value)

  @pytest.mark.parametrize("source,operator,operand", [
      ("!5;", "!", IntegerLiteral(5)),
      ("-15;", "-", IntegerLiteral(15)),
      ("!true;", "!", Boolean(True)),
  ])
  def test_prefix_expressions(self, source, operator, operand):
    assert single_expression(source) == PrefixExpression(operator, operand)

  @pytest.mark.parametrize("operator", ["+", "-", "*", "/", ">", "<", "==", "!="])
  def test_infix_expressions(self, operator):
    expression = single_expression(f"5 {operator} 5;")
    assert expression == InfixExpression(operator, IntegerLiteral(5), IntegerLiteral(5))

  def test_if_expression(self):
    expression = single_expression("if (x < y) { x }")
    assert isinstance(expression, IfExpression)
    assert expression.condition == InfixExpression("<", Identifier("x"), Identifier("y"))
    assert expression.consequence == BlockStatement((ExpressionStatement(Identifier("x")),))
    assert expression.alternative is None

  def test_if_else_expression(self):
    expression = single_expression("if (x < y) { x } else { y }")
    assert expression.alternative == BlockStatement((ExpressionStatement(Identifier("y")),))

  def test_function_literal(self):
    expression = single_expression("fn(x, y) { x + y; }")
    assert isinstance(expression, FunctionLiteral)
    assert expression.parameters == ("x", "y")
    assert str(expression.body) == "{ (x + y); }"

  @pytest.mark.parametrize("source,parameters", [
      ("fn() {};", ()),
      ("fn(x) {};", ("x",)),
      ("fn(x, y, z) {};", ("x", "y", "z")),
  ])
  def test_function_parameters(self, source, parameters):
    assert single_expression(source).parameters == parameters

  def test_call_expression(self):
    expression = single_expression("add(1, 2 * 3, 4 + 5);")
    assert isinstance(expression, CallExpression)
    assert expression.function == Identifier("add")
    assert [str(arg) for arg in expression.arguments] == ["1", "(2 * 3)", "(4 + 5)"]

  def test_call_without_arguments(self):
    assert single_expression("f()") == CallExpression(Identifier("f"), ())

  def test_immediately_invoked_function(self):
    expression = single_expression("fn(x) { x }(5)")
    assert isinstance(expression, CallExpression)
    assert isinstance(expression.function, FunctionLiteral)
    assert expression.arguments == (IntegerLiteral(5),)


class TestOperatorPrecedence:
  """Canonical source form shows how expressions were grouped"""

  @pytest.mark.parametrize("source,expected", [
      ("-a * b", "((-a) * b)"),
      ("!-a", "(!(-a))"),
      ("a + b + c", "((a + b) + c)"),
      ("a + b - c", "((a + b) - c)"),
      ("a * b * c", "((a * b) * c)"),
      ("a * b / c", "((a * b) / c)"),
      ("a + b / c", "(a + (b / c))"),
      ("1 + 2 * 3", "(1 + (2 * 3))"),
      ("a + b * c + d / e - f", "(((a + (b * c)) + (d / e)) - f)"),
      ("3 + 4; -5 * 5", "(3 + 4);\n((-5) * 5);"),
      ("5 > 4 == 3 < 4", "((5 > 4) == (3 < 4))"),
      ("5 < 4 != 3 > 4", "((5 < 4) != (3 > 4))"),
      ("3 + 4 * 5 == 3 * 1 + 4 * 5", "((3 + (4 * 5)) == ((3 * 1) + (4 * 5)))"),
      ("true == false", "(true == false)"),
      ("3 > 5 == false", "((3 > 5) == false)"),
      ("1 + (2 + 3) + 4", "((1 + (2 + 3)) + 4)"),
      ("(5 + 5) * 2", "((5 + 5) * 2)"),
      ("-(5 + 5)", "(-(5 + 5))"),
      ("!(true == true)", "(!(true == true))"),
      ("a + add(b * c) + d", "((a + add((b * c))) + d)"),
      ("add(a, b, 1, 2 * 3, 4 + 5, add(6, 7 * 8))",
       "add(a, b, 1, (2 * 3), (4 + 5), add(6, (7 * 8)))"),
      ("add(a + b + c * d / f + g)", "add((((a + b) + ((c * d) / f)) + g))"),
  ])
  def test_precedence(self, source, expected):
    program = parse(source)
    rendered = "\n".join(str(stmt) for stmt in program.statements)
    assert rendered == expected + ("" if expected.endswith(";") else ";")

  def test_precedence_levels_are_ordered(self):
    assert Precedence.LOWEST < Precedence.EQUALS < Precedence.LESSGREATER \
        < Precedence.SUM < Precedence.PRODUCT < Precedence.PREFIX < Precedence.CALL


class TestErrorHandling:
  """Malformed input produces collected errors, not exceptions"""

  def errors_for(self, source):
    parser = create_parser(source)
    parser.parse_program()
    return parser.errors

  def test_missing_assign(self):
    errors = self.errors_for("let x 5;")
    assert len(errors) == 1
    assert errors[0].message == "expected next token to be =, got INT instead"
    assert errors[0].expected == ("=",)
    assert errors[0].got == "5"
    assert (errors[0].line, errors[0].column) == (1, 7)

  def test_missing_identifier(self):
    errors = self.errors_for("let = 10;")
    assert errors[0].message == "expected next token to be IDENT, got = instead"

  def test_errors_are_collected_past_the_first(self):
    errors = self.errors_for("let x 5;\nlet = 10;\nlet 838383;")
    assert len(errors) == 3
    assert [e.line for e in errors] == [1, 2, 3]

  def test_no_prefix_parse_function(self):
    errors = self.errors_for("let x = ;")
    assert errors[0].message == "no prefix parse function for ; found"

  def test_illegal_character(self):
    errors = self.errors_for("5 + @")
    assert errors[0].message == "illegal character '@'"

  def test_unclosed_paren(self):
    errors = self.errors_for("(1 + 2")
    assert errors[0].message == "expected next token to be ), got EOF instead"
    assert errors[0].got == "EOF"

  def test_unterminated_block(self):
    errors = self.errors_for("if (x) { 1")
    assert errors
    assert errors[-1].expected == ("}",)

  def test_recovery_inside_block_keeps_closing_brace(self):
    parser = create_parser("if (x) { let y } 5")
    program = parser.parse_program()

    assert [e.message for e in parser.errors] == [
        "expected next token to be =, got } instead",
    ]
    assert [str(stmt) for stmt in program.statements] == ["if (x) { };", "5;"]

  def test_recovery_at_brace_after_missing_operand(self):
    parser = create_parser("let f = fn() { 1 + }; f")
    program = parser.parse_program()

    assert [e.message for e in parser.errors] == ["no prefix parse function for } found"]
    assert [str(stmt) for stmt in program.statements] == ["let f = fn() { };", "f;"]

  def test_integer_literal_out_of_range(self):
    errors = self.errors_for("9223372036854775808")
    assert errors[0].message == "could not parse 9223372036854775808 as integer"
    assert self.errors_for("9223372036854775807") == []

  def test_bad_parameter_list(self):
    errors = self.errors_for("fn(x, 1) { x }")
    assert errors[0].message == "expected next token to be IDENT, got INT instead"

  def test_parse_source_raises_with_all_errors(self):
    with pytest.raises(MonkeyParseError) as exc_info:
      parse_source("let x 5;\nlet = 10;", filename="bad.monkey")
    assert len(exc_info.value.errors) == 2
    assert "bad.monkey" in str(exc_info.value)

  def test_parse_source_returns_program(self):
    assert parse_source("1") == Program((ExpressionStatement(IntegerLiteral(1)),))


class TestTreeProperties:
  """The tree is immutable and printable"""

  def test_nodes_are_immutable(self):
    node = parse("let x = 1;").statements[0]
    with pytest.raises(AttributeError):
      node.name = "y"

  def test_pretty_print(self):
    program = parse("let x = 1; x")
    assert pretty_print_ast(program) == (
        "Program\n"
        "  LetStatement: let x = 1;\n"
        "  ExpressionStatement: x;"
    )

  def test_debug_parse_logs_outline(self, caplog):
    with caplog.at_level(logging.DEBUG, logger="parsing"):
      parse_source("let x = 1; x", filename="outline.monkey", debug=True)
    messages = [r.getMessage() for r in caplog.records if r.name == "parsing"]
    assert any(m.startswith("parsed outline.monkey:\nProgram\n") for m in messages)

  def test_debug_parser_produces_same_tree(self):
    source = "let f = fn(a) { a * 2 }; f(3)"
    debug_parser = create_debug_parser(source)
    assert debug_parser.parse_program() == parse(source)
    assert debug_parser.errors == []
