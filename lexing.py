"""
Monkey Lexer
Turns source text into a lazy stream of position-tagged tokens
"""

from typing import Dict, Iterator, List
from dataclasses import dataclass
from enum import Enum
import logging

from pyparsing import MatchFirst, ParserElement, Regex, col, lineno, one_of


logger = logging.getLogger(__name__)


class TokenKind(Enum):
    """Every kind of token the lexer can produce"""
    ILLEGAL = "ILLEGAL"
    EOF = "EOF"

    # Identifiers and literals
    IDENT = "IDENT"
    INT = "INT"
    STRING = "STRING"

    # Operators
    ASSIGN = "="
    PLUS = "+"
    MINUS = "-"
    BANG = "!"
    ASTERISK = "*"
    SLASH = "/"
    LT = "<"
    GT = ">"
    EQ = "=="
    NOT_EQ = "!="

    # Delimiters
    COMMA = ","
    SEMICOLON = ";"
    LPAREN = "("
    RPAREN = ")"
    LBRACE = "{"
    RBRACE = "}"

    # Keywords
    FUNCTION = "FUNCTION"
    LET = "LET"
    TRUE = "TRUE"
    FALSE = "FALSE"
    IF = "IF"
    ELSE = "ELSE"
    RETURN = "RETURN"


KEYWORDS: Dict[str, TokenKind] = {
    "fn": TokenKind.FUNCTION,
    "let": TokenKind.LET,
    "true": TokenKind.TRUE,
    "false": TokenKind.FALSE,
    "if": TokenKind.IF,
    "else": TokenKind.ELSE,
    "return": TokenKind.RETURN,
}

SYMBOLS: Dict[str, TokenKind] = {
    kind.value: kind
    for kind in TokenKind
    if not kind.value.isalpha()
}


@dataclass(frozen=True)
class Token:
    """Monkey token with source position (1-based line and column)"""
    kind: TokenKind
    literal: str
    line: int = 0
    column: int = 0

    def __str__(self) -> str:
        return f"{self.kind.name}({self.literal})"


def lookup_ident(word: str) -> TokenKind:
    """Return the keyword kind for word, or IDENT"""
    return KEYWORDS.get(word, TokenKind.IDENT)


# ============================================================================
# TOKEN PATTERNS
# ============================================================================

def _make_token(kind: TokenKind, literal: str, source: str, loc: int) -> Token:
    return Token(kind, literal, lineno(loc, source), col(loc, source))


def _string_body(text: str) -> str:
    # An unterminated literal runs to end of input
    if len(text) > 1 and text.endswith('"'):
        return text[1:-1]
    return text[1:]


def _build_token_scanner() -> ParserElement:
    """Build the pyparsing element matching exactly one token"""
    integer = Regex(r"[0-9]+").set_parse_action(
        lambda s, loc, t: _make_token(TokenKind.INT, t[0], s, loc)
    )
    word = Regex(r"[A-Za-z_]+").set_parse_action(
        lambda s, loc, t: _make_token(lookup_ident(t[0]), t[0], s, loc)
    )
    string = Regex(r'"[^"]*"?').set_parse_action(
        lambda s, loc, t: _make_token(TokenKind.STRING, _string_body(t[0]), s, loc)
    )
    # one_of tries "==" before "=" and "!=" before "!"
    symbol = one_of(list(SYMBOLS)).set_parse_action(
        lambda s, loc, t: _make_token(SYMBOLS[t[0]], t[0], s, loc)
    )
    illegal = Regex(r"\S").set_parse_action(
        lambda s, loc, t: _make_token(TokenKind.ILLEGAL, t[0], s, loc)
    )

    scanner = MatchFirst([integer, word, string, symbol, illegal])
    # Keep tabs so columns and string contents match the source
    scanner.parse_with_tabs()
    return scanner


TOKEN_SCANNER = _build_token_scanner()


# ============================================================================
# LEXER
# ============================================================================

class MonkeyLexer:
    """Lexer over a single source string

    Tokens are produced on demand. Once the input is exhausted every
    further call to next_token() returns an EOF token.
    """

    def __init__(self, source: str, debug: bool = False):
        self.source = source
        self.debug = debug
        self._tokens = self._scan()
        self._eof = Token(
            TokenKind.EOF, "", lineno(len(source), source), col(len(source), source)
        )

    def _scan(self) -> Iterator[Token]:
        for tokens, _start, _end in TOKEN_SCANNER.scan_string(self.source):
            token = tokens[0]
            if self.debug:
                logger.debug("token %s at %d:%d", token, token.line, token.column)
            yield token
        yield self._eof

    def next_token(self) -> Token:
        """Return the next token, EOF forever after the end of input"""
        return next(self._tokens, self._eof)

    def __iter__(self) -> Iterator[Token]:
        while True:
            token = self.next_token()
            yield token
            if token.kind is TokenKind.EOF:
                return


def tokenize(source: str) -> List[Token]:
    """Tokenize a whole source string, EOF token included"""
    return list(MonkeyLexer(source))
