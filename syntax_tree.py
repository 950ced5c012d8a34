"""
Monkey Abstract Syntax Tree
Immutable node types produced by the parser and walked by the interpreter.
str() of any node gives its canonical, fully parenthesized source form.
"""

from typing import Optional, Tuple
from dataclasses import dataclass


class Node:
    """Base class of all AST nodes"""


class Statement(Node):
    """A node that appears directly inside a program or block"""


class Expression(Node):
    """A node that produces a value"""


# ============================================================================
# EXPRESSIONS
# ============================================================================

@dataclass(frozen=True)
class Identifier(Expression):
    name: str

    def __str__(self) -> str:
        return self.name


@dataclass(frozen=True)
class IntegerLiteral(Expression):
    value: int

    def __str__(self) -> str:
        return str(self.value)


@dataclass(frozen=True)
class StringLiteral(Expression):
    value: str

    def __str__(self) -> str:
        return f'"{self.value}"'


@dataclass(frozen=True)
class Boolean(Expression):
    value: bool

    def __str__(self) -> str:
        return "true" if self.value else "false"


@dataclass(frozen=True)
class PrefixExpression(Expression):
    operator: str
    operand: Expression

    def __str__(self) -> str:
        return f"({self.operator}{self.operand})"


@dataclass(frozen=True)
class InfixExpression(Expression):
    operator: str
    left: Expression
    right: Expression

    def __str__(self) -> str:
        return f"({self.left} {self.operator} {self.right})"


@dataclass(frozen=True)
class IfExpression(Expression):
    condition: Expression
    consequence: "BlockStatement"
    alternative: Optional["BlockStatement"] = None

    def __str__(self) -> str:
        result = f"if ({self.condition}) {self.consequence}"
        if self.alternative is not None:
            result += f" else {self.alternative}"
        return result


@dataclass(frozen=True)
class FunctionLiteral(Expression):
    parameters: Tuple[str, ...]
    body: "BlockStatement"

    def __str__(self) -> str:
        return f"fn({', '.join(self.parameters)}) {self.body}"


@dataclass(frozen=True)
class CallExpression(Expression):
    function: Expression
    arguments: Tuple[Expression, ...] = ()

    def __str__(self) -> str:
        args = ", ".join(str(arg) for arg in self.arguments)
        return f"{self.function}({args})"


# ============================================================================
# STATEMENTS
# ============================================================================

@dataclass(frozen=True)
class LetStatement(Statement):
    name: str
    value: Expression

    def __str__(self) -> str:
        return f"let {self.name} = {self.value};"


@dataclass(frozen=True)
class ReturnStatement(Statement):
    value: Expression

    def __str__(self) -> str:
        return f"return {self.value};"


@dataclass(frozen=True)
class ExpressionStatement(Statement):
    expression: Expression

    def __str__(self) -> str:
        return f"{self.expression};"


@dataclass(frozen=True)
class BlockStatement(Statement):
    statements: Tuple[Statement, ...] = ()

    def __str__(self) -> str:
        if not self.statements:
            return "{ }"
        body = " ".join(str(stmt) for stmt in self.statements)
        return f"{{ {body} }}"


@dataclass(frozen=True)
class Program(Node):
    """Root node: the top-level statements of one source string"""
    statements: Tuple[Statement, ...] = ()

    def __str__(self) -> str:
        return "\n".join(str(stmt) for stmt in self.statements)


def pretty_print_ast(node: Node, indent: int = 0) -> str:
    """Render a node as an indented outline, one node per line"""
    pad = "  " * indent
    if isinstance(node, (Program, BlockStatement)):
        lines = [f"{pad}{type(node).__name__}"]
        lines.extend(pretty_print_ast(stmt, indent + 1) for stmt in node.statements)
        return "\n".join(lines)
    return f"{pad}{type(node).__name__}: {node}"
