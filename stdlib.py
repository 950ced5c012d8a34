"""
Monkey Standard Library
Built-in functions callable from Monkey code. The table is built once and
is read-only; the output sink is supplied per call by the interpreter.
"""

from typing import List, Mapping, TextIO
from types import MappingProxyType

from objects import NULL, Builtin, Error, Integer, MonkeyObject, String
from utilities import arity_error


# ============================================================================
# PRINT FUNCTIONS
# ============================================================================

def format_puts_line(args: List[MonkeyObject]) -> str:
  """Space-join the printed forms of args"""
  return " ".join(arg.inspect() for arg in args)


def monkey_puts(args: List[MonkeyObject], output: TextIO) -> MonkeyObject:
  """Write all arguments on one line to the output sink"""
  output.write(format_puts_line(args) + "\n")
  return NULL


# ============================================================================
# STRING FUNCTIONS
# ============================================================================

def monkey_len(args: List[MonkeyObject], output: TextIO) -> MonkeyObject:
  """Length of a string"""
  if len(args) != 1:
    return arity_error(1, len(args))

  arg = args[0]
  if isinstance(arg, String):
    return Integer(len(arg.value))
  return Error(f"argument to `len` not supported, got {arg.type_name}")


# ============================================================================
# BUILT-IN TABLE
# ============================================================================

BUILTINS: Mapping[str, Builtin] = MappingProxyType({
    "puts": Builtin("puts", monkey_puts),
    "len": Builtin("len", monkey_len),
})
