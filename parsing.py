"""
Monkey Parser
Recursive descent for statements, Pratt (precedence climbing) for expressions
"""

from typing import Callable, Dict, List, Optional, Tuple
from enum import IntEnum
import logging

from lexing import MonkeyLexer, Token, TokenKind
from error_handling import MonkeyParseError, ParseError, make_parse_error
from syntax_tree import (
    BlockStatement, Boolean, CallExpression, Expression, ExpressionStatement,
    FunctionLiteral, Identifier, IfExpression, InfixExpression, IntegerLiteral,
    LetStatement, PrefixExpression, Program, ReturnStatement, Statement,
    StringLiteral, pretty_print_ast,
)


logger = logging.getLogger(__name__)

INT64_MAX = 2 ** 63 - 1


class Precedence(IntEnum):
    """Binding power of operators, lowest to highest"""
    LOWEST = 1
    EQUALS = 2        # == !=
    LESSGREATER = 3   # < >
    SUM = 4           # + -
    PRODUCT = 5       # * /
    PREFIX = 6        # -x !x
    CALL = 7          # f(x)


PRECEDENCES: Dict[TokenKind, Precedence] = {
    TokenKind.EQ: Precedence.EQUALS,
    TokenKind.NOT_EQ: Precedence.EQUALS,
    TokenKind.LT: Precedence.LESSGREATER,
    TokenKind.GT: Precedence.LESSGREATER,
    TokenKind.PLUS: Precedence.SUM,
    TokenKind.MINUS: Precedence.SUM,
    TokenKind.SLASH: Precedence.PRODUCT,
    TokenKind.ASTERISK: Precedence.PRODUCT,
    TokenKind.LPAREN: Precedence.CALL,
}

PrefixParseFn = Callable[[], Optional[Expression]]
InfixParseFn = Callable[[Expression], Optional[Expression]]


class MonkeyParser:
    """Parser over the token stream of a single lexer

    parse_program() always returns a Program; when self.errors is
    non-empty that Program is incomplete and must not be evaluated.
    """

    def __init__(self, lexer: MonkeyLexer, debug: bool = False):
        self.lexer = lexer
        self.debug = debug
        self.errors: List[ParseError] = []
        # Number of `{ ... }` blocks currently open
        self.block_depth = 0

        self.prefix_parse_fns: Dict[TokenKind, PrefixParseFn] = {
            TokenKind.IDENT: self.parse_identifier,
            TokenKind.INT: self.parse_integer_literal,
            TokenKind.STRING: self.parse_string_literal,
            TokenKind.TRUE: self.parse_boolean,
            TokenKind.FALSE: self.parse_boolean,
            TokenKind.BANG: self.parse_prefix_expression,
            TokenKind.MINUS: self.parse_prefix_expression,
            TokenKind.LPAREN: self.parse_grouped_expression,
            TokenKind.IF: self.parse_if_expression,
            TokenKind.FUNCTION: self.parse_function_literal,
        }
        self.infix_parse_fns: Dict[TokenKind, InfixParseFn] = {
            TokenKind.PLUS: self.parse_infix_expression,
            TokenKind.MINUS: self.parse_infix_expression,
            TokenKind.ASTERISK: self.parse_infix_expression,
            TokenKind.SLASH: self.parse_infix_expression,
            TokenKind.EQ: self.parse_infix_expression,
            TokenKind.NOT_EQ: self.parse_infix_expression,
            TokenKind.LT: self.parse_infix_expression,
            TokenKind.GT: self.parse_infix_expression,
            TokenKind.LPAREN: self.parse_call_expression,
        }

        # Read two tokens so cur_token and peek_token are both set
        self.cur_token: Token = lexer.next_token()
        self.peek_token: Token = lexer.next_token()

    # ------------------------------------------------------------------
    # Token cursor
    # ------------------------------------------------------------------

    def next_token(self) -> None:
        self.cur_token = self.peek_token
        self.peek_token = self.lexer.next_token()

    def cur_token_is(self, kind: TokenKind) -> bool:
        return self.cur_token.kind is kind

    def peek_token_is(self, kind: TokenKind) -> bool:
        return self.peek_token.kind is kind

    def expect_peek(self, kind: TokenKind) -> bool:
        """Advance if the next token has the given kind, else record an error"""
        if self.peek_token_is(kind):
            self.next_token()
            return True
        self.peek_error(kind)
        return False

    def peek_precedence(self) -> Precedence:
        return PRECEDENCES.get(self.peek_token.kind, Precedence.LOWEST)

    def cur_precedence(self) -> Precedence:
        return PRECEDENCES.get(self.cur_token.kind, Precedence.LOWEST)

    # ------------------------------------------------------------------
    # Errors
    # ------------------------------------------------------------------

    def _add_error(self, message: str, token: Token, expected: Tuple[str, ...] = ()) -> None:
        got = token.literal if token.kind is not TokenKind.EOF else "EOF"
        error = make_parse_error(message, token.line, token.column, expected, got)
        if self.debug:
            logger.debug("parse error: %s", error)
        self.errors.append(error)

    def peek_error(self, kind: TokenKind) -> None:
        self._add_error(
            f"expected next token to be {kind.value}, got {self.peek_token.kind.value} instead",
            self.peek_token,
            (kind.value,),
        )

    def no_prefix_parse_fn_error(self, token: Token) -> None:
        if token.kind is TokenKind.ILLEGAL:
            self._add_error(f"illegal character {token.literal!r}", token)
        else:
            self._add_error(f"no prefix parse function for {token.kind.value} found", token)

    def _skip_to_statement_boundary(self) -> None:
        """Skip to the next `;`, or inside a block to its closing brace"""
        while not self.cur_token_is(TokenKind.SEMICOLON) and not self.cur_token_is(TokenKind.EOF):
            if self.block_depth and (self.cur_token_is(TokenKind.RBRACE)
                                     or self.peek_token_is(TokenKind.RBRACE)):
                return
            self.next_token()

    # ------------------------------------------------------------------
    # Statements
    # ------------------------------------------------------------------

    def parse_program(self) -> Program:
        """Parse statements until EOF"""
        statements = []
        while not self.cur_token_is(TokenKind.EOF):
            stmt = self.parse_statement()
            if stmt is not None:
                statements.append(stmt)
            self.next_token()
        return Program(tuple(statements))

    def parse_statement(self) -> Optional[Statement]:
        if self.cur_token_is(TokenKind.LET):
            stmt = self.parse_let_statement()
        elif self.cur_token_is(TokenKind.RETURN):
            stmt = self.parse_return_statement()
        else:
            stmt = self.parse_expression_statement()

        if stmt is None:
            self._skip_to_statement_boundary()
        elif self.debug:
            logger.debug("parsed statement: %s", stmt)
        return stmt

    def parse_let_statement(self) -> Optional[LetStatement]:
        if not self.expect_peek(TokenKind.IDENT):
            return None
        name = self.cur_token.literal

        if not self.expect_peek(TokenKind.ASSIGN):
            return None

        self.next_token()
        value = self.parse_expression(Precedence.LOWEST)
        if value is None:
            return None

        if self.peek_token_is(TokenKind.SEMICOLON):
            self.next_token()
        return LetStatement(name, value)

    def parse_return_statement(self) -> Optional[ReturnStatement]:
        self.next_token()
        value = self.parse_expression(Precedence.LOWEST)
        if value is None:
            return None

        if self.peek_token_is(TokenKind.SEMICOLON):
            self.next_token()
        return ReturnStatement(value)

    def parse_expression_statement(self) -> Optional[ExpressionStatement]:
        expression = self.parse_expression(Precedence.LOWEST)
        if expression is None:
            return None

        # Trailing semicolon is optional
        if self.peek_token_is(TokenKind.SEMICOLON):
            self.next_token()
        return ExpressionStatement(expression)

    def parse_block_statement(self) -> Optional[BlockStatement]:
        """Parse `{ ... }`; cur_token is the opening brace"""
        statements = []
        self.next_token()
        self.block_depth += 1

        while not self.cur_token_is(TokenKind.RBRACE) and not self.cur_token_is(TokenKind.EOF):
            stmt = self.parse_statement()
            if stmt is not None:
                statements.append(stmt)
            elif self.cur_token_is(TokenKind.RBRACE):
                # Recovery stopped on this block's closing brace
                break
            self.next_token()

        self.block_depth -= 1

        if not self.cur_token_is(TokenKind.RBRACE):
            self._add_error(
                f"expected next token to be {TokenKind.RBRACE.value}, got EOF instead",
                self.cur_token,
                (TokenKind.RBRACE.value,),
            )
            return None
        return BlockStatement(tuple(statements))

    # ------------------------------------------------------------------
    # Expressions
    # ------------------------------------------------------------------

    def parse_expression(self, precedence: Precedence) -> Optional[Expression]:
        prefix = self.prefix_parse_fns.get(self.cur_token.kind)
        if prefix is None:
            self.no_prefix_parse_fn_error(self.cur_token)
            return None

        left = prefix()
        if left is None:
            return None

        while not self.peek_token_is(TokenKind.SEMICOLON) and precedence < self.peek_precedence():
            infix = self.infix_parse_fns.get(self.peek_token.kind)
            if infix is None:
                return left

            self.next_token()
            left = infix(left)
            if left is None:
                return None

        return left

    def parse_identifier(self) -> Expression:
        return Identifier(self.cur_token.literal)

    def parse_integer_literal(self) -> Optional[Expression]:
        value = int(self.cur_token.literal)
        if value > INT64_MAX:
            self._add_error(f"could not parse {self.cur_token.literal} as integer", self.cur_token)
            return None
        return IntegerLiteral(value)

    def parse_string_literal(self) -> Expression:
        return StringLiteral(self.cur_token.literal)

    def parse_boolean(self) -> Expression:
        return Boolean(self.cur_token_is(TokenKind.TRUE))

    def parse_prefix_expression(self) -> Optional[Expression]:
        operator = self.cur_token.literal
        self.next_token()

        operand = self.parse_expression(Precedence.PREFIX)
        if operand is None:
            return None
        return PrefixExpression(operator, operand)

    def parse_infix_expression(self, left: Expression) -> Optional[Expression]:
        operator = self.cur_token.literal
        precedence = self.cur_precedence()
        self.next_token()

        right = self.parse_expression(precedence)
        if right is None:
            return None
        return InfixExpression(operator, left, right)

    def parse_grouped_expression(self) -> Optional[Expression]:
        self.next_token()

        expression = self.parse_expression(Precedence.LOWEST)
        if expression is None or not self.expect_peek(TokenKind.RPAREN):
            return None
        return expression

    def parse_if_expression(self) -> Optional[Expression]:
        if not self.expect_peek(TokenKind.LPAREN):
            return None

        self.next_token()
        condition = self.parse_expression(Precedence.LOWEST)
        if condition is None:
            return None

        if not self.expect_peek(TokenKind.RPAREN) or not self.expect_peek(TokenKind.LBRACE):
            return None

        consequence = self.parse_block_statement()
        if consequence is None:
            return None

        alternative = None
        if self.peek_token_is(TokenKind.ELSE):
            self.next_token()
            if not self.expect_peek(TokenKind.LBRACE):
                return None
            alternative = self.parse_block_statement()
            if alternative is None:
                return None

        return IfExpression(condition, consequence, alternative)

    def parse_function_literal(self) -> Optional[Expression]:
        if not self.expect_peek(TokenKind.LPAREN):
            return None

        parameters = self.parse_function_parameters()
        if parameters is None or not self.expect_peek(TokenKind.LBRACE):
            return None

        body = self.parse_block_statement()
        if body is None:
            return None
        return FunctionLiteral(parameters, body)

    def parse_function_parameters(self) -> Optional[Tuple[str, ...]]:
        """Parse `(a, b, c)`; cur_token is the opening parenthesis"""
        if self.peek_token_is(TokenKind.RPAREN):
            self.next_token()
            return ()

        names = []
        if not self.expect_peek(TokenKind.IDENT):
            return None
        names.append(self.cur_token.literal)

        while self.peek_token_is(TokenKind.COMMA):
            self.next_token()
            if not self.expect_peek(TokenKind.IDENT):
                return None
            names.append(self.cur_token.literal)

        if not self.expect_peek(TokenKind.RPAREN):
            return None
        return tuple(names)

    def parse_call_expression(self, function: Expression) -> Optional[Expression]:
        arguments = self.parse_call_arguments()
        if arguments is None:
            return None
        return CallExpression(function, arguments)

    def parse_call_arguments(self) -> Optional[Tuple[Expression, ...]]:
        """Parse `(x, y + 1)`; cur_token is the opening parenthesis"""
        if self.peek_token_is(TokenKind.RPAREN):
            self.next_token()
            return ()

        self.next_token()
        argument = self.parse_expression(Precedence.LOWEST)
        if argument is None:
            return None
        arguments = [argument]

        while self.peek_token_is(TokenKind.COMMA):
            self.next_token()
            self.next_token()
            argument = self.parse_expression(Precedence.LOWEST)
            if argument is None:
                return None
            arguments.append(argument)

        if not self.expect_peek(TokenKind.RPAREN):
            return None
        return tuple(arguments)


# ============================================================================
# FACTORY FUNCTIONS
# ============================================================================

def create_parser(source: str, debug: bool = False) -> MonkeyParser:
    """Create a Monkey parser over a source string"""
    return MonkeyParser(MonkeyLexer(source, debug=debug), debug=debug)


def create_debug_parser(source: str) -> MonkeyParser:
    """Create a Monkey parser with debug logging enabled"""
    return create_parser(source, debug=True)


def parse_source(source: str, filename: str = "<input>", debug: bool = False) -> Program:
    """Parse a source string, raising MonkeyParseError if it is malformed"""
    parser = create_parser(source, debug=debug)
    program = parser.parse_program()
    if parser.errors:
        raise MonkeyParseError(parser.errors, source, filename)
    if debug:
        logger.debug("parsed %s:\n%s", filename, pretty_print_ast(program))
    return program
