"""
Parse error records and formatting for the Monkey parser
Errors are collected as immutable records; the exception is raised only
at the host boundary, carrying every collected record.
"""

from typing import List, Optional, Sequence, Tuple
from dataclasses import dataclass


# ============================================================================
# DATA STRUCTURES
# ============================================================================

@dataclass(frozen=True)
class ParseError:
    """A single structural error found while parsing"""
    message: str
    line: int
    column: int
    expected: Tuple[str, ...] = ()
    got: Optional[str] = None
    suggestions: Tuple[str, ...] = ()

    def __str__(self) -> str:
        return f"{self.line}:{self.column}: {self.message}"


def make_parse_error(
    message: str,
    line: int,
    column: int,
    expected: Optional[Sequence[str]] = None,
    got: Optional[str] = None,
) -> ParseError:
    """Create a parse error record with suggestions filled in"""
    expected = tuple(expected or ())
    return ParseError(
        message=message,
        line=line,
        column=column,
        expected=expected,
        got=got,
        suggestions=tuple(generate_suggestions(expected, got)),
    )


# ============================================================================
# PURE FUNCTIONS
# ============================================================================

def get_context_lines(source_text: str, line_num: int, col_num: int, context_lines: int = 2) -> str:
    """Get context lines around the error"""
    lines = source_text.split('\n')
    start_line = max(0, line_num - context_lines - 1)
    end_line = min(len(lines), line_num + context_lines)

    context_parts = []
    for i in range(start_line, end_line):
        line_prefix = f"{i+1:4d}: "
        context_parts.append(f"{line_prefix}{lines[i]}")
        if i == line_num - 1:
            context_parts.append(f"{'':6}{' ' * (col_num - 1)}^ Error here")

    return '\n'.join(context_parts)


def generate_suggestions(expected: Sequence[str], got: Optional[str]) -> List[str]:
    """Generate helpful suggestions based on the error"""
    suggestions = []

    if "=" in expected:
        suggestions.append("let bindings take the form: let <name> = <expression>;")

    if ")" in expected:
        suggestions.append("Check that every '(' has a matching ')'")

    if "}" in expected:
        suggestions.append("Check that every '{' has a matching '}'")

    if "{" in expected:
        suggestions.append("if/else branches and function bodies must be wrapped in { }")

    if "IDENT" in expected and got in ("fn", "let", "if", "else", "return", "true", "false"):
        suggestions.append(f"'{got}' is a keyword and cannot be used as a name")

    return suggestions


def format_parse_error(error: ParseError, source_text: Optional[str] = None,
                       filename: str = "<input>") -> str:
    """Format parse error as string"""
    error_msg = f"Parse error in {filename} at line {error.line}, column {error.column}:\n"
    error_msg += f"  {error.message}\n"

    if error.expected:
        error_msg += f"  Expected: {', '.join(error.expected)}\n"

    if error.got is not None:
        error_msg += f"  Got: {error.got!r}\n"

    if source_text:
        context = get_context_lines(source_text, error.line, error.column)
        error_msg += f"  Context:\n{context}\n"

    if error.suggestions:
        error_msg += "  Suggestions:\n"
        for suggestion in error.suggestions:
            error_msg += f"    - {suggestion}\n"

    return error_msg


# ============================================================================
# EXCEPTIONS
# ============================================================================

class MonkeyParseError(Exception):
    """Raised at the host boundary when a program failed to parse"""

    def __init__(self, errors: Sequence[ParseError], source_text: str = "",
                 filename: str = "<input>"):
        self.errors = list(errors)
        self.source_text = source_text
        self.filename = filename
        super().__init__(self._format_errors())

    def _format_errors(self) -> str:
        header = f"{len(self.errors)} parse error(s) in {self.filename}"
        parts = [format_parse_error(error, self.source_text, self.filename)
                 for error in self.errors]
        return "\n".join([header] + parts)
