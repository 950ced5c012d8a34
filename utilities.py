"""
Utilities module for the Monkey interpreter
Runtime error builders, truthiness and operator factories shared by the
interpreter and the standard library
"""

from typing import Callable, Dict
import operator

from objects import (
  ERROR_OBJ,
  FALSE,
  NULL,
  TRUE,
  Boolean,
  Error,
  Integer,
  MonkeyObject,
)


INT64_MIN = -2 ** 63
INT64_MAX = 2 ** 63 - 1


# ==================== TYPE CHECKING UTILITIES ====================

def is_error(obj: MonkeyObject) -> bool:
  """
  Check if a value is a runtime error

  Args:
    obj: Value to check (may be None for statements with no value)

  Returns:
    True if obj is an Error object
  """
  return obj is not None and obj.type_name == ERROR_OBJ


def is_truthy(obj: MonkeyObject) -> bool:
  """
  Truthiness used by `if` and `!`

  Only NULL and FALSE are falsy; every other value, 0 included, is truthy.
  """
  if obj is NULL or obj is FALSE:
    return False
  return True


def native_bool_to_boolean(value: bool) -> Boolean:
  """Map a Python bool onto the TRUE/FALSE singletons"""
  return TRUE if value else FALSE


# ==================== ERROR MESSAGE BUILDERS ====================

def type_mismatch_error(op: str, left: MonkeyObject, right: MonkeyObject) -> Error:
  """
  Generate type mismatch error for an infix operator

  Args:
    op: Operator symbol
    left: Left operand
    right: Right operand

  Returns:
    Error such as "type mismatch: INTEGER + BOOLEAN"
  """
  return Error(f"type mismatch: {left.type_name} {op} {right.type_name}")


def unknown_operator_error(op: str, left: MonkeyObject, right: MonkeyObject = None) -> Error:
  """
  Generate unknown operator error

  Args:
    op: Operator symbol
    left: Left operand, or the only operand of a prefix operator
    right: Right operand (None for prefix operators)

  Returns:
    Error such as "unknown operator: -BOOLEAN" or
    "unknown operator: BOOLEAN + BOOLEAN"
  """
  if right is None:
    return Error(f"unknown operator: {op}{left.type_name}")
  return Error(f"unknown operator: {left.type_name} {op} {right.type_name}")


def identifier_not_found_error(name: str) -> Error:
  return Error(f"identifier not found: {name}")


def not_a_function_error(obj: MonkeyObject) -> Error:
  return Error(f"not a function: {obj.type_name}")


def arity_error(expected: int, got: int) -> Error:
  """
  Generate arity mismatch error

  Args:
    expected: Expected number of arguments
    got: Actual number of arguments

  Returns:
    Error with formatted message
  """
  return Error(f"wrong number of arguments: expected {expected}, got {got}")


def division_by_zero_error() -> Error:
  return Error("division by zero")


def integer_overflow_error(op: str, left: int, right: int) -> Error:
  return Error(f"integer overflow: {left} {op} {right}")


# ==================== BINARY OPERATION FACTORIES ====================

IntegerOp = Callable[[Integer, Integer], MonkeyObject]


def integer_arithmetic_op(op: Callable[[int, int], int], symbol: str) -> IntegerOp:
  """
  Factory for integer arithmetic operations

  Args:
    op: Python operator function (e.g., operator.add)
    symbol: Operator symbol for error messages

  Returns:
    Function combining two Integers into an Integer, or an Error when the
    result does not fit in a signed 64-bit integer

  Examples:
    add = integer_arithmetic_op(operator.add, "+")
    add(Integer(2), Integer(3)) -> Integer(5)
  """
  def arithmetic(left: Integer, right: Integer) -> MonkeyObject:
    result = op(left.value, right.value)
    if not INT64_MIN <= result <= INT64_MAX:
      return integer_overflow_error(symbol, left.value, right.value)
    return Integer(result)

  return arithmetic


def integer_comparison_op(op: Callable[[int, int], bool]) -> IntegerOp:
  """
  Factory for integer comparison operations

  Args:
    op: Python operator function (e.g., operator.lt)

  Returns:
    Function comparing two Integers into TRUE or FALSE
  """
  def comparison(left: Integer, right: Integer) -> MonkeyObject:
    return native_bool_to_boolean(op(left.value, right.value))

  return comparison


def truncating_div(left: int, right: int) -> int:
  """Integer division rounding toward zero"""
  quotient = abs(left) // abs(right)
  return quotient if (left < 0) == (right < 0) else -quotient


def _integer_division(left: Integer, right: Integer) -> MonkeyObject:
  if right.value == 0:
    return division_by_zero_error()
  return integer_arithmetic_op(truncating_div, "/")(left, right)


INTEGER_OPERATORS: Dict[str, IntegerOp] = {
  '+': integer_arithmetic_op(operator.add, '+'),
  '-': integer_arithmetic_op(operator.sub, '-'),
  '*': integer_arithmetic_op(operator.mul, '*'),
  '/': _integer_division,
  '<': integer_comparison_op(operator.lt),
  '>': integer_comparison_op(operator.gt),
  '==': integer_comparison_op(operator.eq),
  '!=': integer_comparison_op(operator.ne),
}
