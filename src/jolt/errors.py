"""
Jolt exceptions and diagnostics.

Error code ranges:
- E0xx: Lexer errors
- E1xx: Parser errors
- E2xx: Runtime type errors
- E3xx: Declaration errors
- E4xx: Name errors
- E5xx: Control-flow errors
- W0xx: Checker warnings
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, List
from .tokens import SourceSpan


class ErrorSeverity(Enum):
    """Severity levels for diagnostics."""
    ERROR = "error"
    WARNING = "warning"


@dataclass
class Diagnostic:
    """A single diagnostic message (error or warning)."""
    code: str                       # E001, E101, etc.
    message: str                    # Human-readable message
    severity: ErrorSeverity
    span: SourceSpan
    source_line: Optional[str] = None   # The actual line of source code
    hints: List[str] = field(default_factory=list)

    def format(self, show_source: bool = True) -> str:
        """Render as 'file:line:col: severity[code]: message', an excerpt and hints."""
        lines = [f"{self.span.start}: {self.severity.value}[{self.code}]: {self.message}"]
        if show_source and self.source_line:
            lines.extend(self._excerpt())
        lines.extend(f"    = hint: {hint}" for hint in self.hints)
        return "\n".join(lines)

    def _excerpt(self) -> List[str]:
        """The offending line with the span underlined by carets."""
        start, end = self.span.start, self.span.end
        # Multi-line spans are underlined to the end of their first line
        stop = end.column if end.line == start.line else len(self.source_line) + 1
        marker = " " * (start.column - 1) + "^" * max(1, stop - start.column)
        return [
            "    |",
            f"{start.line:>3} | {self.source_line}",
            f"    | {marker}",
        ]

    def to_json(self) -> dict:
        """Convert to JSON-serializable dict for tooling integration."""
        return {
            "code": self.code,
            "message": self.message,
            "severity": self.severity.value,
            "file": self.span.name,
            "range": {
                "start": {
                    "line": self.span.start.line,
                    "column": self.span.start.column,
                    "offset": self.span.start.offset,
                },
                "end": {
                    "line": self.span.end.line,
                    "column": self.span.end.column,
                    "offset": self.span.end.offset,
                },
            },
            "hints": self.hints,
        }


class JoltError(Exception):
    """Base exception for every fatal Jolt error."""

    def __init__(self, diagnostic: Diagnostic):
        self.diagnostic = diagnostic
        super().__init__(diagnostic.message)

    @property
    def code(self) -> str:
        return self.diagnostic.code

    @property
    def message(self) -> str:
        return self.diagnostic.message

    @property
    def span(self) -> SourceSpan:
        return self.diagnostic.span

    def __str__(self) -> str:
        return self.diagnostic.format()


class LexerError(JoltError):
    """Error during lexical analysis (E0xx)."""
    pass


class ParserError(JoltError):
    """Error during parsing (E1xx)."""
    pass


class JoltTypeError(JoltError):
    """Operand, condition, or indexing error at runtime (E2xx)."""
    pass


class DeclarationError(JoltError):
    """Duplicate declaration in one scope (E3xx)."""
    pass


class JoltNameError(JoltError):
    """Undeclared name or constant reassignment (E4xx)."""
    pass


class ControlFlowError(JoltError):
    """break/continue without a matching loop (E5xx)."""
    pass


def _error(code: str, message: str, span: SourceSpan, source_line: Optional[str],
           hints: Optional[List[str]] = None) -> Diagnostic:
    return Diagnostic(
        code=code,
        message=message,
        severity=ErrorSeverity.ERROR,
        span=span,
        source_line=source_line,
        hints=hints or [],
    )


# --- Lexer error codes ---

def error_illegal_character(char: str, span: SourceSpan, source_line: str = None) -> LexerError:
    """E001: Character that starts no token."""
    return LexerError(_error("E001", f"illegal character '{char}'", span, source_line))


def error_unterminated_string(span: SourceSpan, source_line: str = None) -> LexerError:
    """E002: End of file inside a string literal."""
    return LexerError(_error(
        "E002", "reached end of file inside a string", span, source_line,
        ["string literals must be closed with a matching '\"'"],
    ))


def error_unclosed_block_comment(span: SourceSpan, source_line: str = None) -> LexerError:
    """E003: End of file inside a block comment."""
    return LexerError(_error(
        "E003", "unclosed block comment", span, source_line,
        ["block comments must be closed with '*/'"],
    ))


def error_invalid_escape_sequence(seq: str, span: SourceSpan, source_line: str = None) -> LexerError:
    """E004: Invalid escape sequence in string."""
    return LexerError(_error(
        "E004", f"invalid escape sequence '\\{seq}'", span, source_line,
        ["valid escape sequences: \\0 \\a \\b \\f \\n \\r \\t \\v \\\\ \\\" \\{ \\} \\xHH \\uHHHH \\UHHHHHHHH"],
    ))


def error_invalid_number_literal(text: str, span: SourceSpan, source_line: str = None) -> LexerError:
    """E005: Invalid number literal."""
    return LexerError(_error("E005", f"invalid number literal '{text}'", span, source_line))


# --- Parser error codes ---

def error_unexpected_token(expected: str, found: str, span: SourceSpan,
                           source_line: str = None) -> ParserError:
    """E101: Unexpected token."""
    return ParserError(_error("E101", f"expected {expected}, found {found}", span, source_line))


def error_unexpected_eof(expected: str, span: SourceSpan, source_line: str = None) -> ParserError:
    """E102: Unexpected end of file."""
    return ParserError(_error("E102", f"unexpected end of file, expected {expected}", span, source_line))


def error_invalid_terminal(found: str, span: SourceSpan, source_line: str = None) -> ParserError:
    """E103: Token that cannot start an expression."""
    return ParserError(_error("E103", f"invalid terminal {found}", span, source_line))


def error_not_assignable(span: SourceSpan, source_line: str = None) -> ParserError:
    """E104: Assignment to something other than a name or index."""
    return ParserError(_error(
        "E104", "cannot assign to this expression", span, source_line,
        ["only names and index expressions like 'a[0]' can be assigned"],
    ))


def error_reserved_keyword(word: str, hint: str, span: SourceSpan,
                           source_line: str = None) -> ParserError:
    """E105: Keyword reserved but not supported."""
    return ParserError(_error("E105", f"'{word}' is a reserved keyword", span, source_line, [hint]))


# --- Runtime type error codes ---

def error_invalid_operand(operator: str, type_name: str, span: SourceSpan,
                          source_line: str = None) -> JoltTypeError:
    """E201: Unsupported operand for a unary operator."""
    return JoltTypeError(_error(
        "E201", f"invalid operand of type '{type_name}' for '{operator}'", span, source_line
    ))


def error_invalid_operands(operator: str, side: str, type_name: str, span: SourceSpan,
                           source_line: str = None) -> JoltTypeError:
    """E202: Unsupported left or right operand for a binary operator."""
    return JoltTypeError(_error(
        "E202", f"invalid {side} operand of type '{type_name}' for '{operator}'", span, source_line
    ))


def error_condition_not_boolean(statement: str, type_name: str, span: SourceSpan,
                                source_line: str = None) -> JoltTypeError:
    """E203: Condition did not produce a bool."""
    return JoltTypeError(_error(
        "E203", f"{statement} condition must result in a boolean, found '{type_name}'",
        span, source_line,
    ))


def error_not_iterable(type_name: str, span: SourceSpan, source_line: str = None) -> JoltTypeError:
    """E204: For-loop source has no iterable projection."""
    return JoltTypeError(_error(
        "E204", f"value of type '{type_name}' cannot be iterated", span, source_line,
        ["numbers, strings and lists can be iterated"],
    ))


def error_not_indexable(value: str, span: SourceSpan, source_line: str = None) -> JoltTypeError:
    """E205: Indexing a value that is not a string or list."""
    return JoltTypeError(_error("E205", f"value '{value}' cannot be indexed", span, source_line))


def error_index_not_number(type_name: str, span: SourceSpan, source_line: str = None) -> JoltTypeError:
    """E206: Index expression is not a number."""
    return JoltTypeError(_error(
        "E206", f"index must be a number, found '{type_name}'", span, source_line
    ))


def error_index_out_of_bounds(index: str, kind: str, length: int, span: SourceSpan,
                              source_line: str = None) -> JoltTypeError:
    """E207: Index outside 0..length-1."""
    return JoltTypeError(_error(
        "E207", f"index '{index}' out of bounds for '{kind}' of length '{length}'", span, source_line
    ))


# --- Declaration error codes ---

def error_already_declared(name: str, span: SourceSpan, source_line: str = None) -> DeclarationError:
    """E301: Name declared twice in one scope."""
    return DeclarationError(_error(
        "E301", f"variable '{name}' is already declared in this scope", span, source_line
    ))


# --- Name error codes ---

def error_undeclared_variable(name: str, span: SourceSpan, source_line: str = None) -> JoltNameError:
    """E401: Name not found in any enclosing scope."""
    return JoltNameError(_error(
        "E401", f"undeclared variable '{name}'", span, source_line,
        [f"declare it first with 'var {name} = ...;'"],
    ))


def error_constant_reassignment(name: str, span: SourceSpan, source_line: str = None) -> JoltNameError:
    """E402: Assignment to a 'let' constant."""
    return JoltNameError(_error(
        "E402", f"cannot reassign constant '{name}'", span, source_line,
        ["declare it with 'var' to make it reassignable"],
    ))


# --- Control-flow error codes ---

def error_unhandled_redirect(keyword: str, span: SourceSpan, source_line: str = None) -> ControlFlowError:
    """E501: break/continue outside of any loop."""
    return ControlFlowError(_error(
        "E501", f"{keyword} statement was unhandled", span, source_line,
        [f"'{keyword}' is only valid inside a loop"],
    ))


def error_unknown_label(keyword: str, label: str, span: SourceSpan,
                        source_line: str = None) -> ControlFlowError:
    """E502: Labeled break/continue with no loop of that label."""
    return ControlFlowError(_error(
        "E502", f"{keyword} statement with label '{label}' was unhandled", span, source_line,
        [f"no enclosing loop is labeled '@{label}'"],
    ))


# --- Warnings ---

def warning_unreachable(keyword: str, span: SourceSpan, source_line: str = None) -> Diagnostic:
    """W001: Statement following break/continue in the same block."""
    return Diagnostic(
        code="W001",
        message=f"unreachable statement after '{keyword}'",
        severity=ErrorSeverity.WARNING,
        span=span,
        source_line=source_line,
    )


class DiagnosticCollector:
    """Collects diagnostics during static checking."""

    def __init__(self, max_errors: int = 20):
        self.diagnostics: List[Diagnostic] = []
        self.max_errors = max_errors
        self._error_count = 0

    def add(self, diagnostic: Diagnostic) -> None:
        """Add a diagnostic."""
        self.diagnostics.append(diagnostic)
        if diagnostic.severity == ErrorSeverity.ERROR:
            self._error_count += 1

    def add_error(self, error: JoltError) -> None:
        """Add an error exception as a diagnostic."""
        self.add(error.diagnostic)

    @property
    def warning_count(self) -> int:
        return sum(1 for d in self.diagnostics if d.severity == ErrorSeverity.WARNING)

    @property
    def has_errors(self) -> bool:
        return self._error_count > 0

    @property
    def has_warnings(self) -> bool:
        return self.warning_count > 0

    @property
    def should_stop(self) -> bool:
        """Check if we've hit the max error limit."""
        return self._error_count >= self.max_errors
