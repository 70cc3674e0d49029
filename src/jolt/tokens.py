"""
Token types for the Jolt lexer.

Error code ranges used across the package:
- E0xx: Lexer errors
- E1xx: Parser errors
- E2xx: Runtime type errors
- E3xx: Declaration errors
- E4xx: Name errors
- E5xx: Control-flow errors
"""

from enum import Enum, auto
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple


class TokenType(Enum):
    """All token types recognized by the lexer."""

    # --- Literals and names ---
    VALUE = auto()              # 42, 3.5e2, "text", true, false
    NAME = auto()               # user-defined names

    # --- Keywords ---
    LET = auto()                # let (constant declaration)
    VAR = auto()                # var (variable declaration)
    IF = auto()                 # if
    ELSE = auto()               # else
    LOOP = auto()               # loop
    WHILE = auto()              # while
    DO = auto()                 # do
    FOR = auto()                # for
    BREAK = auto()              # break
    CONTINUE = auto()           # continue

    # --- Reserved keywords (kept for error messages) ---
    FUN = auto()                # fun
    RETURN = auto()             # return
    CLASS = auto()              # class

    # --- Logical operators ---
    PIPE = auto()               # |
    DOUBLE_PIPE = auto()        # ||
    CARET = auto()              # ^
    AMPERSAND = auto()          # &
    DOUBLE_AMPERSAND = auto()   # &&

    # --- Comparison operators ---
    DOUBLE_EQUAL = auto()       # ==
    EXCLAMATION_EQUAL = auto()  # !=
    LESS = auto()               # <
    LESS_EQUAL = auto()         # <=
    GREATER = auto()            # >
    GREATER_EQUAL = auto()      # >=

    # --- Arithmetic operators ---
    PLUS = auto()               # +
    DASH = auto()               # -
    STAR = auto()               # *
    SLASH = auto()              # /
    PERCENT = auto()            # %

    # --- Prefix operators ---
    EXCLAMATION = auto()        # !
    POUND = auto()              # # (size)

    # --- Assignment ---
    EQUAL = auto()              # =

    # --- Delimiters ---
    LEFT_PAREN = auto()         # (
    RIGHT_PAREN = auto()        # )
    LEFT_BRACE = auto()         # {
    RIGHT_BRACE = auto()        # }
    LEFT_SQUARE = auto()        # [
    RIGHT_SQUARE = auto()       # ]
    AT = auto()                 # @ (loop label)
    COMMA = auto()              # ,
    COLON = auto()              # :
    SEMICOLON = auto()          # ;

    # --- String interpolation ---
    OPEN_INTERPOLATE = auto()   # "text{
    MID_INTERPOLATE = auto()    # }text{
    CLOSE_INTERPOLATE = auto()  # }text"

    # --- Special ---
    EOF = auto()                # end of file


@dataclass(frozen=True)
class SourceLocation:
    """Represents a position in source code."""
    line: int           # 1-indexed line number
    column: int         # 1-indexed column number
    offset: int         # 0-indexed character offset from start
    filename: Optional[str] = None

    def __str__(self) -> str:
        if self.filename:
            return f"{self.filename}:{self.line}:{self.column}"
        return f"{self.line}:{self.column}"


@dataclass(frozen=True)
class SourceSpan:
    """Represents a range in source code."""
    start: SourceLocation
    end: SourceLocation

    @property
    def name(self) -> Optional[str]:
        return self.start.filename

    @property
    def row(self) -> int:
        return self.start.line

    @property
    def column(self) -> int:
        return self.start.column

    @property
    def length(self) -> int:
        return self.end.offset - self.start.offset

    def to(self, other: "SourceSpan") -> "SourceSpan":
        """Span from the start of this span to the end of another."""
        return SourceSpan(self.start, other.end)

    def __str__(self) -> str:
        if self.start.filename:
            return f"{self.start.filename}:{self.start.line}:{self.start.column}-{self.end.line}:{self.end.column}"
        return f"{self.start.line}:{self.start.column}-{self.end.line}:{self.end.column}"


@dataclass(frozen=True)
class Token:
    """A single token from the lexer."""
    type: TokenType
    value: Any              # JoltValue for VALUE, str for NAME and interpolation parts
    lexeme: str             # The original source text
    span: SourceSpan        # Location in source

    def __str__(self) -> str:
        if self.type in (TokenType.VALUE, TokenType.NAME, TokenType.OPEN_INTERPOLATE,
                         TokenType.MID_INTERPOLATE, TokenType.CLOSE_INTERPOLATE):
            return f"{self.type.name}({self.value!s})"
        return self.type.name


# Keyword mapping - maps string to token type
KEYWORDS: Dict[str, TokenType] = {
    "let": TokenType.LET,
    "var": TokenType.VAR,
    "if": TokenType.IF,
    "else": TokenType.ELSE,
    "loop": TokenType.LOOP,
    "while": TokenType.WHILE,
    "do": TokenType.DO,
    "for": TokenType.FOR,
    "break": TokenType.BREAK,
    "continue": TokenType.CONTINUE,

    "fun": TokenType.FUN,
    "return": TokenType.RETURN,
    "class": TokenType.CLASS,
}

BOOLEAN_LITERALS: Dict[str, bool] = {
    "true": True,
    "false": False,
}

# Reserved for later language levels; the parser refuses them with a hint
RESERVED_SUGGESTIONS: Dict[TokenType, str] = {
    TokenType.FUN: "functions are not supported by this interpreter",
    TokenType.RETURN: "'return' is only meaningful inside functions, which are not supported",
    TokenType.CLASS: "classes are not supported by this interpreter",
}

SYMBOLS: Dict[str, TokenType] = {
    "||": TokenType.DOUBLE_PIPE,
    "&&": TokenType.DOUBLE_AMPERSAND,
    "==": TokenType.DOUBLE_EQUAL,
    "!=": TokenType.EXCLAMATION_EQUAL,
    "<=": TokenType.LESS_EQUAL,
    ">=": TokenType.GREATER_EQUAL,
    "|": TokenType.PIPE,
    "^": TokenType.CARET,
    "&": TokenType.AMPERSAND,
    "=": TokenType.EQUAL,
    "<": TokenType.LESS,
    ">": TokenType.GREATER,
    "+": TokenType.PLUS,
    "-": TokenType.DASH,
    "*": TokenType.STAR,
    "/": TokenType.SLASH,
    "%": TokenType.PERCENT,
    "!": TokenType.EXCLAMATION,
    "#": TokenType.POUND,
    "(": TokenType.LEFT_PAREN,
    ")": TokenType.RIGHT_PAREN,
    "{": TokenType.LEFT_BRACE,
    "}": TokenType.RIGHT_BRACE,
    "[": TokenType.LEFT_SQUARE,
    "]": TokenType.RIGHT_SQUARE,
    "@": TokenType.AT,
    ",": TokenType.COMMA,
    ":": TokenType.COLON,
    ";": TokenType.SEMICOLON,
}

# Longest representations first, so "==" wins over "="
SYMBOLS_BY_LENGTH: List[Tuple[str, TokenType]] = sorted(
    SYMBOLS.items(), key=lambda item: len(item[0]), reverse=True
)

SYMBOL_TEXT: Dict[TokenType, str] = {token_type: text for text, token_type in SYMBOLS.items()}


def is_keyword_token(token_type: TokenType) -> bool:
    """Check if a token type represents a keyword."""
    return token_type in KEYWORDS.values()


def describe(token_type: TokenType) -> str:
    """Human-readable name of a token type for error messages."""
    if token_type in SYMBOL_TEXT:
        return f"'{SYMBOL_TEXT[token_type]}'"
    if is_keyword_token(token_type):
        return f"'{token_type.name.lower()}'"
    if token_type == TokenType.VALUE:
        return "value"
    if token_type == TokenType.NAME:
        return "name"
    if token_type == TokenType.EOF:
        return "end of file"
    return "string interpolation"
