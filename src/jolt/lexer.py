"""
Lexer for the Jolt scripting language.

Converts source text into a stream of tokens for the parser.
Supports:
- Whitespace, line comments (//) and block comments (/* */)
- Number literals (integer, decimal, exponent), all read as floats
- Boolean literals and keywords
- String literals with escape sequences
- String interpolation ("a{expr}b") split into OPEN/MID/CLOSE tokens
- Maximal-munch symbol matching
"""

from typing import Iterator, List, Optional, Tuple, Union

from .source import Source, as_source
from .tokens import (
    Token, TokenType, SourceLocation, SourceSpan, KEYWORDS, BOOLEAN_LITERALS,
    SYMBOLS_BY_LENGTH,
)
from .errors import (
    error_illegal_character,
    error_unterminated_string,
    error_unclosed_block_comment,
    error_invalid_escape_sequence,
    error_invalid_number_literal,
)
from .runtime.values import JoltBool, JoltNum, JoltString

HEX_DIGITS = "0123456789abcdefABCDEF"

ESCAPE_CHARS = {
    '0': '\0',
    'a': '\a',
    'b': '\b',
    'f': '\f',
    'n': '\n',
    'r': '\r',
    't': '\t',
    'v': '\v',
    '\\': '\\',
    '"': '"',
    '{': '{',
    '}': '}',
}

# Number of hex digits following \x, \u and \U
HEX_ESCAPES = {
    'x': 2,
    'u': 4,
    'U': 8,
}


def _is_digit(ch: str) -> bool:
    return '0' <= ch <= '9'


class Lexer:
    """
    Tokenizer for Jolt source text.

    Usage:
        lexer = Lexer(source_code)
        tokens = lexer.tokenize()

    Or for streaming:
        lexer = Lexer(source_code)
        while lexer.has_next():
            process(lexer.next_token())
    """

    def __init__(self, source: Union[str, Source], filename: Optional[str] = None):
        self.source = as_source(source, filename or "<string>")
        self.text = self.source.text
        self.filename = self.source.name
        self.pos = 0            # Current position in text
        self.line = 1           # Current line (1-indexed)
        self.column = 1         # Current column (1-indexed)

        # One entry per open interpolation: brace depth inside its embedded code
        self.interpolation_stack: List[int] = []
        self._finished = False

    def get_source_line(self, line_num: int) -> str:
        """Get a specific line of source (1-indexed)."""
        return self.source.get_line(line_num)

    def _location(self) -> SourceLocation:
        """Get current source location."""
        return SourceLocation(self.line, self.column, self.pos, self.filename)

    def _span(self, start: SourceLocation) -> SourceSpan:
        """Create a span from start to current position."""
        return SourceSpan(start, self._location())

    def _peek(self, offset: int = 0) -> str:
        """Look at character at current position + offset without consuming."""
        idx = self.pos + offset
        if idx >= len(self.text):
            return '\0'
        return self.text[idx]

    def _advance(self) -> str:
        """Consume and return current character."""
        if self.pos >= len(self.text):
            return '\0'
        ch = self.text[self.pos]
        self.pos += 1
        if ch == '\n':
            self.line += 1
            self.column = 1
        else:
            self.column += 1
        return ch

    def _is_at_end(self) -> bool:
        """Check if we've reached end of text."""
        return self.pos >= len(self.text)

    def _make_token(self, token_type: TokenType, value, start: SourceLocation) -> Token:
        """Create a token covering start up to the current position."""
        lexeme = self.text[start.offset:self.pos]
        return Token(token_type, value, lexeme, self._span(start))

    def _skip_insignificant(self) -> None:
        """Skip whitespace and comments until something significant."""
        while not self._is_at_end():
            ch = self._peek()
            if ch.isspace():
                self._advance()
            elif ch == '/' and self._peek(1) == '/':
                while not self._is_at_end() and self._peek() != '\n':
                    self._advance()
            elif ch == '/' and self._peek(1) == '*':
                self._skip_block_comment()
            else:
                break

    def _skip_block_comment(self) -> None:
        """Skip /* ... */ comment."""
        start = self._location()
        self._advance()  # consume '/'
        self._advance()  # consume '*'
        while not self._is_at_end():
            if self._peek() == '*' and self._peek(1) == '/':
                self._advance()
                self._advance()
                return
            self._advance()
        raise error_unclosed_block_comment(
            self._span(start), self.get_source_line(start.line)
        )

    def _scan_number(self) -> Token:
        """Scan a number literal; every number is a float."""
        start = self._location()

        while _is_digit(self._peek()):
            self._advance()

        if self._peek() == '.' and _is_digit(self._peek(1)):
            self._advance()  # consume '.'
            while _is_digit(self._peek()):
                self._advance()

        if self._peek() in 'eE' and not self._is_at_end():
            self._advance()  # consume 'e'
            if self._peek() in '+-' and not self._is_at_end():
                self._advance()
            if not _is_digit(self._peek()):
                lexeme = self.text[start.offset:self.pos]
                raise error_invalid_number_literal(
                    lexeme, self._span(start), self.get_source_line(start.line)
                )
            while _is_digit(self._peek()):
                self._advance()

        lexeme = self.text[start.offset:self.pos]
        return self._make_token(TokenType.VALUE, JoltNum(float(lexeme)), start)

    def _scan_word(self) -> Token:
        """Scan a keyword, boolean literal, or name."""
        start = self._location()

        while self._peek().isalnum() or self._peek() == '_':
            self._advance()

        lexeme = self.text[start.offset:self.pos]

        if lexeme in KEYWORDS:
            return self._make_token(KEYWORDS[lexeme], lexeme, start)
        if lexeme in BOOLEAN_LITERALS:
            return self._make_token(TokenType.VALUE, JoltBool(BOOLEAN_LITERALS[lexeme]), start)
        return self._make_token(TokenType.NAME, lexeme, start)

    def _scan_escape_sequence(self) -> str:
        """Parse an escape sequence after backslash."""
        esc_start = self._location()
        if self._is_at_end():
            raise error_unterminated_string(
                self._span(esc_start), self.get_source_line(esc_start.line)
            )

        ch = self._advance()
        if ch in ESCAPE_CHARS:
            return ESCAPE_CHARS[ch]

        if ch in HEX_ESCAPES:
            hex_chars = ''
            for _ in range(HEX_ESCAPES[ch]):
                if self._is_at_end() or self._peek() not in HEX_DIGITS:
                    break
                hex_chars += self._advance()
            if len(hex_chars) == HEX_ESCAPES[ch]:
                code_point = int(hex_chars, 16)
                if code_point <= 0x10FFFF:
                    return chr(code_point)
            raise error_invalid_escape_sequence(
                f"{ch}{hex_chars}", self._span(esc_start),
                self.get_source_line(esc_start.line)
            )

        raise error_invalid_escape_sequence(
            ch, self._span(esc_start), self.get_source_line(esc_start.line)
        )

    def _scan_string_segment(self, start: SourceLocation) -> Tuple[str, str]:
        """
        Scan string content up to a closing quote or an unescaped '{'.

        Returns the decoded text and the terminator that ended it.
        """
        chars = []
        while not self._is_at_end():
            ch = self._peek()
            if ch == '"' or ch == '{':
                self._advance()
                return ''.join(chars), ch
            if ch == '\\':
                self._advance()  # consume backslash
                chars.append(self._scan_escape_sequence())
            else:
                chars.append(self._advance())

        raise error_unterminated_string(
            self._span(start), self.get_source_line(start.line)
        )

    def _scan_string(self) -> Token:
        """Scan a string literal, or the first part of an interpolated one."""
        start = self._location()
        self._advance()  # consume opening quote

        text, terminator = self._scan_string_segment(start)
        if terminator == '"':
            return self._make_token(TokenType.VALUE, JoltString(text), start)

        self.interpolation_stack.append(0)
        return self._make_token(TokenType.OPEN_INTERPOLATE, text, start)

    def _resume_string(self) -> Token:
        """Continue an interpolated string after its embedded expression."""
        start = self._location()
        self._advance()  # consume '}'

        text, terminator = self._scan_string_segment(start)
        if terminator == '"':
            self.interpolation_stack.pop()
            return self._make_token(TokenType.CLOSE_INTERPOLATE, text, start)
        return self._make_token(TokenType.MID_INTERPOLATE, text, start)

    def _scan_symbol(self) -> Token:
        """Match the longest symbol at the current position."""
        start = self._location()
        for text, token_type in SYMBOLS_BY_LENGTH:
            if self.text.startswith(text, self.pos):
                for _ in text:
                    self._advance()
                return self._make_token(token_type, text, start)

        ch = self._advance()
        raise error_illegal_character(
            ch, self._span(start), self.get_source_line(start.line)
        )

    def _scan_token(self) -> Token:
        """Scan the next token."""
        self._skip_insignificant()

        if self._is_at_end():
            start = self._location()
            if self.interpolation_stack:
                raise error_unterminated_string(
                    self._span(start), self.get_source_line(start.line)
                )
            self._finished = True
            return self._make_token(TokenType.EOF, None, start)

        ch = self._peek()

        if _is_digit(ch):
            return self._scan_number()

        if ch.isalpha() or ch == '_':
            return self._scan_word()

        if ch == '"':
            return self._scan_string()

        if self.interpolation_stack:
            if ch == '{':
                self.interpolation_stack[-1] += 1
            elif ch == '}':
                if self.interpolation_stack[-1] == 0:
                    return self._resume_string()
                self.interpolation_stack[-1] -= 1

        return self._scan_symbol()

    def has_next(self) -> bool:
        """True until the EOF token has been produced."""
        return not self._finished

    def next_token(self) -> Token:
        """Produce the next token; EOF repeats once the text is exhausted."""
        return self._scan_token()

    def tokenize(self) -> List[Token]:
        """Tokenize the entire text, returning a list of tokens."""
        tokens = []
        while True:
            token = self._scan_token()
            tokens.append(token)
            if token.type == TokenType.EOF:
                break
        return tokens

    def __iter__(self) -> Iterator[Token]:
        """Iterate over tokens, ending with EOF."""
        while self.has_next():
            yield self._scan_token()


def tokenize(source: Union[str, Source], filename: Optional[str] = None) -> List[Token]:
    """
    Convenience function to tokenize source code.

    Args:
        source: The source text (or Source) to tokenize
        filename: Optional filename for error messages

    Returns:
        List of tokens, the last one being EOF

    Raises:
        LexerError: If tokenization fails
    """
    lexer = Lexer(source, filename)
    return lexer.tokenize()
