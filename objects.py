"""
Monkey Object Model
Runtime values produced by the interpreter
"""

from typing import Callable, List, TextIO, Tuple, TYPE_CHECKING
from dataclasses import dataclass

from syntax_tree import BlockStatement

if TYPE_CHECKING:
  from environment import Environment


INTEGER_OBJ = "INTEGER"
BOOLEAN_OBJ = "BOOLEAN"
STRING_OBJ = "STRING"
NULL_OBJ = "NULL"
RETURN_VALUE_OBJ = "RETURN_VALUE"
ERROR_OBJ = "ERROR"
FUNCTION_OBJ = "FUNCTION"
BUILTIN_OBJ = "BUILTIN"


class MonkeyObject:
  """Base class of every runtime value"""
  type_name = "OBJECT"

  def inspect(self) -> str:
    raise NotImplementedError(f"{type(self).__name__} must implement inspect()")

  def __str__(self) -> str:
    return self.inspect()


@dataclass(frozen=True)
class Integer(MonkeyObject):
  value: int
  type_name = INTEGER_OBJ

  def inspect(self) -> str:
    return str(self.value)


@dataclass(frozen=True)
class Boolean(MonkeyObject):
  """Only the TRUE and FALSE singletons are ever created at runtime"""
  value: bool
  type_name = BOOLEAN_OBJ

  def inspect(self) -> str:
    return "true" if self.value else "false"


@dataclass(frozen=True)
class String(MonkeyObject):
  value: str
  type_name = STRING_OBJ

  def inspect(self) -> str:
    return self.value


class Null(MonkeyObject):
  type_name = NULL_OBJ

  def inspect(self) -> str:
    return "null"

  def __repr__(self) -> str:
    return "NULL"


@dataclass(frozen=True)
class ReturnValue(MonkeyObject):
  """Wraps the value of a `return` while it unwinds to the call boundary"""
  value: MonkeyObject
  type_name = RETURN_VALUE_OBJ

  def inspect(self) -> str:
    return self.value.inspect()


@dataclass(frozen=True)
class Error(MonkeyObject):
  """A runtime error, propagated as an ordinary value"""
  message: str
  type_name = ERROR_OBJ

  def inspect(self) -> str:
    return f"ERROR: {self.message}"


@dataclass(eq=False)
class Function(MonkeyObject):
  """A closure: parameters and body plus the environment it was defined in

  The body is shared with the AST, never copied.
  """
  parameters: Tuple[str, ...]
  body: BlockStatement
  env: "Environment"
  type_name = FUNCTION_OBJ

  def inspect(self) -> str:
    return f"fn({', '.join(self.parameters)}) {{ ... }}"

  def __repr__(self) -> str:
    return f"Function(parameters={self.parameters!r})"


BuiltinFn = Callable[[List[MonkeyObject], TextIO], MonkeyObject]


@dataclass(frozen=True)
class Builtin(MonkeyObject):
  """A host function; receives evaluated arguments and the output sink"""
  name: str
  fn: BuiltinFn
  type_name = BUILTIN_OBJ

  def inspect(self) -> str:
    return f"<builtin {self.name}>"


TRUE = Boolean(True)
FALSE = Boolean(False)
NULL = Null()
