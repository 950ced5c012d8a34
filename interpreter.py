"""
Monkey Interpreter
Tree-walking evaluator. Return values and runtime errors travel as
ordinary objects; only a malformed AST raises a host exception.
"""

from typing import Callable, List, Mapping, Optional, TextIO, Union
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
import logging
import sys
import threading

from environment import Environment
from objects import (
  BOOLEAN_OBJ,
  NULL,
  STRING_OBJ,
  Builtin,
  Error,
  Function,
  Integer,
  MonkeyObject,
  ReturnValue,
  String,
)
from parsing import parse_source
from stdlib import BUILTINS
from syntax_tree import (
  BlockStatement,
  Boolean,
  CallExpression,
  ExpressionStatement,
  FunctionLiteral,
  Identifier,
  IfExpression,
  InfixExpression,
  IntegerLiteral,
  LetStatement,
  Node,
  PrefixExpression,
  Program,
  ReturnStatement,
  StringLiteral,
)
from utilities import (
  INTEGER_OPERATORS,
  arity_error,
  identifier_not_found_error,
  is_error,
  is_truthy,
  native_bool_to_boolean,
  not_a_function_error,
  type_mismatch_error,
  unknown_operator_error,
)


logger = logging.getLogger(__name__)

# Each Monkey call nests about eight Python frames
RECURSION_LIMIT = 20000
EVAL_STACK_SIZE = 256 * 1024 * 1024


# ============================================================================
# EXECUTION CONTEXT
# ============================================================================

@dataclass(frozen=True)
class ExecutionContext:
  """Everything evaluation depends on besides the AST and the environment"""
  builtins: Mapping[str, Builtin]
  output: TextIO
  debug: bool = False


def make_execution_context(output: Optional[TextIO] = None,
                           builtins: Optional[Mapping[str, Builtin]] = None,
                           debug: bool = False) -> ExecutionContext:
  """Create an execution context, defaulting to stdout and the shared built-ins"""
  return ExecutionContext(
      builtins=BUILTINS if builtins is None else builtins,
      output=sys.stdout if output is None else output,
      debug=debug,
  )


# ============================================================================
# EVALUATION FUNCTIONS
# ============================================================================

def eval_ast(ast_node: Node, env: Environment, context: ExecutionContext) -> MonkeyObject:
  """
  Evaluate an AST node in env and return the resulting object.
  Statements that produce no value (let) evaluate to NULL.
  """
  if context.debug:
    logger.debug("Evaluating: %s", type(ast_node).__name__)

  # Statements
  if isinstance(ast_node, Program):
    return eval_program(ast_node, env, context)
  elif isinstance(ast_node, BlockStatement):
    return eval_block_statement(ast_node, env, context)
  elif isinstance(ast_node, ExpressionStatement):
    return eval_ast(ast_node.expression, env, context)
  elif isinstance(ast_node, LetStatement):
    return eval_let_statement(ast_node, env, context)
  elif isinstance(ast_node, ReturnStatement):
    return eval_return_statement(ast_node, env, context)

  # Expressions
  elif isinstance(ast_node, IntegerLiteral):
    return Integer(ast_node.value)
  elif isinstance(ast_node, Boolean):
    return native_bool_to_boolean(ast_node.value)
  elif isinstance(ast_node, StringLiteral):
    return String(ast_node.value)
  elif isinstance(ast_node, Identifier):
    return eval_identifier(ast_node, env, context)
  elif isinstance(ast_node, PrefixExpression):
    return eval_prefix_expression(ast_node, env, context)
  elif isinstance(ast_node, InfixExpression):
    return eval_infix_expression(ast_node, env, context)
  elif isinstance(ast_node, IfExpression):
    return eval_if_expression(ast_node, env, context)
  elif isinstance(ast_node, FunctionLiteral):
    return Function(ast_node.parameters, ast_node.body, env)
  elif isinstance(ast_node, CallExpression):
    return eval_call_expression(ast_node, env, context)

  raise TypeError(f"Unknown node type: {type(ast_node).__name__}")


def eval_program(program: Program, env: Environment, context: ExecutionContext) -> MonkeyObject:
  """Evaluate top-level statements; the last value is the program's value"""
  result = NULL
  for statement in program.statements:
    result = eval_ast(statement, env, context)

    if isinstance(result, ReturnValue):
      return result.value
    if is_error(result):
      return result

  return result


def eval_block_statement(block: BlockStatement, env: Environment,
                         context: ExecutionContext) -> MonkeyObject:
  """Like eval_program, but a ReturnValue stays wrapped so enclosing blocks stop too"""
  result = NULL
  for statement in block.statements:
    result = eval_ast(statement, env, context)

    if isinstance(result, ReturnValue) or is_error(result):
      return result

  return result


def eval_let_statement(ast_node: LetStatement, env: Environment,
                       context: ExecutionContext) -> MonkeyObject:
  """Evaluate the value and bind it in the current scope"""
  value = eval_ast(ast_node.value, env, context)
  if is_error(value):
    return value

  env.set(ast_node.name, value)
  return NULL


def eval_return_statement(ast_node: ReturnStatement, env: Environment,
                          context: ExecutionContext) -> MonkeyObject:
  value = eval_ast(ast_node.value, env, context)
  if is_error(value):
    return value
  return ReturnValue(value)


def eval_identifier(ast_node: Identifier, env: Environment,
                    context: ExecutionContext) -> MonkeyObject:
  """Look the name up in the scope chain, then in the built-in table"""
  value, found = env.get(ast_node.name)
  if found:
    return value

  builtin = context.builtins.get(ast_node.name)
  if builtin is not None:
    return builtin

  return identifier_not_found_error(ast_node.name)


# ============================================================================
# OPERATORS
# ============================================================================

def eval_prefix_expression(ast_node: PrefixExpression, env: Environment,
                           context: ExecutionContext) -> MonkeyObject:
  operand = eval_ast(ast_node.operand, env, context)
  if is_error(operand):
    return operand
  return eval_prefix_operation(ast_node.operator, operand)


def eval_prefix_operation(op: str, operand: MonkeyObject) -> MonkeyObject:
  if op == '!':
    return native_bool_to_boolean(not is_truthy(operand))
  if op == '-' and isinstance(operand, Integer):
    return INTEGER_OPERATORS['-'](Integer(0), operand)
  return unknown_operator_error(op, operand)


def eval_infix_expression(ast_node: InfixExpression, env: Environment,
                          context: ExecutionContext) -> MonkeyObject:
  left = eval_ast(ast_node.left, env, context)
  if is_error(left):
    return left

  right = eval_ast(ast_node.right, env, context)
  if is_error(right):
    return right

  return eval_infix_operation(ast_node.operator, left, right)


def eval_infix_operation(op: str, left: MonkeyObject, right: MonkeyObject) -> MonkeyObject:
  """Apply a binary operator to two evaluated operands"""
  if isinstance(left, Integer) and isinstance(right, Integer):
    integer_op = INTEGER_OPERATORS.get(op)
    if integer_op is None:
      return unknown_operator_error(op, left, right)
    return integer_op(left, right)

  if left.type_name != right.type_name:
    return type_mismatch_error(op, left, right)

  if left.type_name in (BOOLEAN_OBJ, STRING_OBJ):
    if op == '==':
      return native_bool_to_boolean(_same_value(left, right))
    if op == '!=':
      return native_bool_to_boolean(not _same_value(left, right))

  return unknown_operator_error(op, left, right)


def _same_value(left: MonkeyObject, right: MonkeyObject) -> bool:
  if isinstance(left, String):
    return left.value == right.value
  # Booleans are the TRUE/FALSE singletons
  return left is right


def eval_if_expression(ast_node: IfExpression, env: Environment,
                       context: ExecutionContext) -> MonkeyObject:
  condition = eval_ast(ast_node.condition, env, context)
  if is_error(condition):
    return condition

  if is_truthy(condition):
    return eval_ast(ast_node.consequence, env, context)
  elif ast_node.alternative is not None:
    return eval_ast(ast_node.alternative, env, context)
  return NULL


# ============================================================================
# FUNCTION CALLS
# ============================================================================

def eval_call_expression(ast_node: CallExpression, env: Environment,
                         context: ExecutionContext) -> MonkeyObject:
  """Evaluate callee, then arguments left to right, then apply"""
  function = eval_ast(ast_node.function, env, context)
  if is_error(function):
    return function

  args = eval_expressions(ast_node.arguments, env, context)
  if isinstance(args, Error):
    return args

  return apply_function(function, args, context)


def eval_expressions(expressions, env: Environment,
                     context: ExecutionContext) -> Union[List[MonkeyObject], Error]:
  """Evaluate expressions in order, stopping at the first Error"""
  values = []
  for expression in expressions:
    value = eval_ast(expression, env, context)
    if is_error(value):
      return value
    values.append(value)
  return values


def apply_function(function: MonkeyObject, args: List[MonkeyObject],
                   context: ExecutionContext) -> MonkeyObject:
  """Call a user function or a built-in with already evaluated arguments"""
  if isinstance(function, Function):
    if len(args) != len(function.parameters):
      return arity_error(len(function.parameters), len(args))

    call_env = extend_function_env(function, args)
    if context.debug:
      logger.debug("Calling fn(%s) with %s at scope depth %d",
                   ", ".join(call_env),
                   ", ".join(arg.inspect() for arg in args),
                   call_env.depth())

    result = eval_ast(function.body, call_env, context)
    return unwrap_return_value(result)

  if isinstance(function, Builtin):
    if context.debug:
      logger.debug("Calling builtin %s", function.name)
    return function.fn(args, context.output)

  return not_a_function_error(function)


def extend_function_env(function: Function, args: List[MonkeyObject]) -> Environment:
  """New scope enclosed by the closure's scope, with parameters bound"""
  env = Environment.new_enclosed(function.env)
  for name, value in zip(function.parameters, args):
    env.set(name, value)
  return env


def unwrap_return_value(obj: MonkeyObject) -> MonkeyObject:
  if isinstance(obj, ReturnValue):
    return obj.value
  return obj


# ============================================================================
# HOST API
# ============================================================================

def run_with_deep_stack(fn: Callable[[], MonkeyObject]) -> MonkeyObject:
  """
  Run fn on a worker thread with a large stack and a raised recursion limit.
  Both settings are process-wide and restored before returning.
  """
  old_limit = sys.getrecursionlimit()
  old_stack_size = threading.stack_size()
  sys.setrecursionlimit(max(old_limit, RECURSION_LIMIT))
  try:
    # stack_size only applies to threads started after the call
    threading.stack_size(EVAL_STACK_SIZE)
    with ThreadPoolExecutor(max_workers=1) as executor:
      future = executor.submit(fn)
    return future.result()
  finally:
    threading.stack_size(old_stack_size)
    sys.setrecursionlimit(old_limit)


class MonkeyInterpreter:
  """Parses and evaluates Monkey source with a fixed output sink and built-ins"""

  def __init__(self, output: Optional[TextIO] = None,
               builtins: Optional[Mapping[str, Builtin]] = None,
               debug: bool = False):
    self.output = output
    self.builtins = builtins
    self.debug = debug

  def _context(self) -> ExecutionContext:
    return make_execution_context(self.output, self.builtins, self.debug)

  def new_environment(self) -> Environment:
    """A fresh, empty root environment"""
    return Environment()

  def parse(self, source: str, filename: str = "<input>") -> Program:
    """Parse source, raising MonkeyParseError if it is malformed"""
    return parse_source(source, filename, debug=self.debug)

  def eval_program(self, program: Program, env: Optional[Environment] = None) -> MonkeyObject:
    """Evaluate a parsed program; a fresh root environment is used unless env is given"""
    if env is None:
      env = self.new_environment()
    context = self._context()

    def run() -> MonkeyObject:
      try:
        return eval_ast(program, env, context)
      except RecursionError:
        logger.debug("Recursion limit reached while evaluating program")
        return Error("stack overflow")

    return run_with_deep_stack(run)

  def evaluate(self, source: str, env: Optional[Environment] = None,
               filename: str = "<input>") -> MonkeyObject:
    """Parse and evaluate source; raises MonkeyParseError, returns Error objects"""
    return self.eval_program(self.parse(source, filename), env)


# ============================================================================
# FACTORY FUNCTIONS
# ============================================================================

def create_interpreter(output: Optional[TextIO] = None, debug: bool = False) -> MonkeyInterpreter:
  """Factory function returning an interpreter"""
  return MonkeyInterpreter(output=output, debug=debug)


def create_debug_interpreter(output: Optional[TextIO] = None) -> MonkeyInterpreter:
  """Factory function returning a debug interpreter"""
  return create_interpreter(output=output, debug=True)


def evaluate(source: str, output: Optional[TextIO] = None,
             env: Optional[Environment] = None, debug: bool = False) -> MonkeyObject:
  """Lex, parse and evaluate a source string"""
  return create_interpreter(output=output, debug=debug).evaluate(source, env)
