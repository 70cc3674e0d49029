"""
Recursive descent parser for the Jolt scripting language.

Pulls tokens from a Lexer one at a time, holding a single token of
lookahead, and builds a Program AST.
"""

from typing import Dict, List, Optional, Union

from .source import Source
from .tokens import Token, TokenType, SourceSpan, RESERVED_SUGGESTIONS, describe
from .lexer import Lexer
from .ast import (
    # Operators
    BinaryOperator, UnaryOperator,
    # Expressions
    Expression, EmptyExpr, ValueExpr, NameExpr, NestedExpr, ListLiteral,
    ListGenerator, UnaryOp, BinaryOp, Assign, GetIndex, SetIndex, Interpolation,
    # Statements
    Statement, EmptyStatement, BlockStatement, Declaration, IfStatement,
    LoopStatement, WhileStatement, DoStatement, ForStatement, BreakStatement,
    ContinueStatement, ExpressionStatement, Program,
)
from .errors import (
    error_unexpected_token,
    error_unexpected_eof,
    error_invalid_terminal,
    error_not_assignable,
    error_reserved_keyword,
)
from .runtime.values import JoltString


class Parser:
    """
    Recursive descent parser for Jolt.

    Usage:
        parser = Parser(Lexer(source_code))
        program = parser.parse()

    Expressions use precedence climbing, lowest to highest:
        Lowest:  =  (assignment, right-associative)
                 |
                 ^
                 &
                 == !=
                 < <= > >=
                 + -
                 * / %
        Highest: prefix - ! #, then postfix [index]
    """

    # Operator precedence levels (higher = tighter binding)
    PRECEDENCE = {
        TokenType.PIPE: 1,
        TokenType.DOUBLE_PIPE: 1,
        TokenType.CARET: 2,
        TokenType.AMPERSAND: 3,
        TokenType.DOUBLE_AMPERSAND: 3,
        TokenType.DOUBLE_EQUAL: 4,
        TokenType.EXCLAMATION_EQUAL: 4,
        TokenType.LESS: 5,
        TokenType.LESS_EQUAL: 5,
        TokenType.GREATER: 5,
        TokenType.GREATER_EQUAL: 5,
        TokenType.PLUS: 6,
        TokenType.DASH: 6,
        TokenType.STAR: 7,
        TokenType.SLASH: 7,
        TokenType.PERCENT: 7,
    }

    BINARY_OPERATORS: Dict[TokenType, BinaryOperator] = {
        TokenType.PIPE: BinaryOperator.OR,
        TokenType.DOUBLE_PIPE: BinaryOperator.OR,
        TokenType.CARET: BinaryOperator.XOR,
        TokenType.AMPERSAND: BinaryOperator.AND,
        TokenType.DOUBLE_AMPERSAND: BinaryOperator.AND,
        TokenType.DOUBLE_EQUAL: BinaryOperator.EQUAL,
        TokenType.EXCLAMATION_EQUAL: BinaryOperator.NOT_EQUAL,
        TokenType.LESS: BinaryOperator.LESS,
        TokenType.LESS_EQUAL: BinaryOperator.LESS_EQUAL,
        TokenType.GREATER: BinaryOperator.GREATER,
        TokenType.GREATER_EQUAL: BinaryOperator.GREATER_EQUAL,
        TokenType.PLUS: BinaryOperator.ADD,
        TokenType.DASH: BinaryOperator.SUBTRACT,
        TokenType.STAR: BinaryOperator.MULTIPLY,
        TokenType.SLASH: BinaryOperator.DIVIDE,
        TokenType.PERCENT: BinaryOperator.MODULUS,
    }

    UNARY_OPERATORS: Dict[TokenType, UnaryOperator] = {
        TokenType.DASH: UnaryOperator.NEGATE,
        TokenType.EXCLAMATION: UnaryOperator.NOT,
        TokenType.POUND: UnaryOperator.SIZE,
    }

    def __init__(self, lexer: Lexer, source: Optional[Source] = None):
        self.lexer = lexer
        self.source = source if source is not None else lexer.source
        self.previous: Optional[Token] = None
        self.token = lexer.next_token()

    # =========================================================================
    # Token Navigation
    # =========================================================================

    def _current(self) -> Token:
        """Get current token."""
        return self.token

    def _is_at_end(self) -> bool:
        """Check if at end of tokens."""
        return self.token.type == TokenType.EOF

    def _check(self, token_type: TokenType) -> bool:
        """Check if current token is of given type."""
        return self.token.type == token_type

    def _check_any(self, *token_types: TokenType) -> bool:
        """Check if current token is any of given types."""
        return self.token.type in token_types

    def _advance(self) -> Token:
        """Consume and return current token."""
        token = self.token
        if not self._is_at_end():
            self.previous = token
            self.token = self.lexer.next_token()
        return token

    def _consume(self, token_type: TokenType, expected: Optional[str] = None) -> Token:
        """Consume token of expected type, or raise error."""
        if self._check(token_type):
            return self._advance()
        self._error(expected or describe(token_type))

    def _match(self, *token_types: TokenType) -> Optional[Token]:
        """Consume token if it matches any of the given types."""
        if self.token.type in token_types:
            return self._advance()
        return None

    def _line(self, span: SourceSpan) -> str:
        return self.source.get_line(span.row)

    def _error(self, expected: str) -> None:
        """Raise a parser error at the current token."""
        token = self.token
        if token.type == TokenType.EOF:
            raise error_unexpected_eof(expected, token.span, self._line(token.span))
        raise error_unexpected_token(expected, describe(token.type), token.span,
                                     self._line(token.span))

    def _span_from(self, start: Union[Token, Expression, Statement]) -> SourceSpan:
        """Create a span from start up to the end of the last consumed token."""
        end = self.previous if self.previous is not None else self.token
        return start.span.to(end.span)

    # =========================================================================
    # Expression Parsing
    # =========================================================================

    def _parse_expression(self) -> Expression:
        """Parse an expression, starting at assignment."""
        return self._parse_assignment()

    def _parse_assignment(self) -> Expression:
        """Parse assignment; the target must be a name or an index expression."""
        target = self._parse_binary_expr(1)

        if not self._match(TokenType.EQUAL):
            return target

        value = self._parse_assignment()
        if isinstance(target, NameExpr):
            return Assign(span=self._span_from(target), name=target.name, value=value)
        if isinstance(target, GetIndex):
            return SetIndex(
                span=self._span_from(target),
                target=target.target,
                index=target.index,
                value=value
            )
        raise error_not_assignable(target.span, self._line(target.span))

    def _parse_binary_expr(self, min_precedence: int) -> Expression:
        """Parse binary expressions with precedence climbing."""
        left = self._parse_unary_expr()

        while True:
            op_token = self._current()
            precedence = self.PRECEDENCE.get(op_token.type)

            if precedence is None or precedence < min_precedence:
                break

            self._advance()  # consume operator
            right = self._parse_binary_expr(precedence + 1)

            left = BinaryOp(
                span=left.span.to(right.span),
                left=left,
                operator=self.BINARY_OPERATORS[op_token.type],
                right=right
            )

        return left

    def _parse_unary_expr(self) -> Expression:
        """Parse prefix expressions (-, !, #)."""
        if self._check_any(*self.UNARY_OPERATORS):
            op = self._advance()
            operand = self._parse_unary_expr()
            return UnaryOp(
                span=op.span.to(operand.span),
                operator=self.UNARY_OPERATORS[op.type],
                operand=operand
            )

        return self._parse_postfix_expr()

    def _parse_postfix_expr(self) -> Expression:
        """Parse index chains (a[0][1])."""
        expr = self._parse_primary_expr()

        while self._match(TokenType.LEFT_SQUARE):
            index = self._parse_expression()
            self._consume(TokenType.RIGHT_SQUARE)
            expr = GetIndex(span=self._span_from(expr), target=expr, index=index)

        return expr

    def _parse_primary_expr(self) -> Expression:
        """Parse terminals (literals, names, grouped, lists, interpolation)."""
        token = self._current()

        if token.type == TokenType.VALUE:
            self._advance()
            return ValueExpr(span=token.span, value=token.value)

        if token.type == TokenType.NAME:
            self._advance()
            return NameExpr(span=token.span, name=token.value)

        if token.type == TokenType.LEFT_PAREN:
            self._advance()
            expr = self._parse_expression()
            self._consume(TokenType.RIGHT_PAREN)
            return NestedExpr(span=self._span_from(token), expr=expr)

        if token.type == TokenType.LEFT_SQUARE:
            return self._parse_list()

        if token.type == TokenType.OPEN_INTERPOLATE:
            return self._parse_interpolation()

        if token.type in RESERVED_SUGGESTIONS:
            raise error_reserved_keyword(token.lexeme, RESERVED_SUGGESTIONS[token.type],
                                         token.span, self._line(token.span))

        if token.type == TokenType.EOF:
            self._error("expression")

        raise error_invalid_terminal(describe(token.type), token.span, self._line(token.span))

    def _parse_list(self) -> Expression:
        """Parse list literal or list generator.

            []
            [a, b, c]
            [expr for name : iterable]
        """
        start = self._advance()  # consume '['

        if self._match(TokenType.RIGHT_SQUARE):
            return ListLiteral(span=self._span_from(start), elements=[])

        first = self._parse_expression()

        if self._match(TokenType.FOR):
            pointer = self._consume(TokenType.NAME, "loop variable name").value
            self._consume(TokenType.COLON)
            iterable = self._parse_expression()
            self._consume(TokenType.RIGHT_SQUARE)
            return ListGenerator(
                span=self._span_from(start),
                element=first,
                pointer=pointer,
                iterable=iterable
            )

        elements = [first]
        while self._match(TokenType.COMMA):
            if self._check(TokenType.RIGHT_SQUARE):
                break  # Allow trailing comma
            elements.append(self._parse_expression())

        self._consume(TokenType.RIGHT_SQUARE)
        return ListLiteral(span=self._span_from(start), elements=elements)

    def _parse_interpolation(self) -> Interpolation:
        """Parse "text{expr}text{expr}text" from OPEN, MID and CLOSE tokens."""
        start = self._current()
        parts: List[Expression] = []

        segment = self._advance()
        while True:
            if segment.value:
                parts.append(ValueExpr(span=segment.span, value=JoltString(segment.value)))
            if segment.type == TokenType.CLOSE_INTERPOLATE:
                break
            parts.append(self._parse_expression())
            if not self._check_any(TokenType.MID_INTERPOLATE, TokenType.CLOSE_INTERPOLATE):
                self._error("'}' closing the interpolated expression")
            segment = self._advance()

        return Interpolation(span=self._span_from(start), parts=parts)

    # =========================================================================
    # Statement Parsing
    # =========================================================================

    def _parse_statement(self) -> Statement:
        """Parse a single statement, dispatching on its leading token."""
        token = self._current()

        if token.type == TokenType.SEMICOLON:
            self._advance()
            return EmptyStatement(span=token.span)
        if token.type == TokenType.LEFT_BRACE:
            return self._parse_block()
        if token.type in (TokenType.LET, TokenType.VAR):
            return self._parse_declaration()
        if token.type == TokenType.IF:
            return self._parse_if_statement()
        if token.type == TokenType.LOOP:
            return self._parse_loop_statement()
        if token.type == TokenType.WHILE:
            return self._parse_while_statement()
        if token.type == TokenType.DO:
            return self._parse_do_statement()
        if token.type == TokenType.FOR:
            return self._parse_for_statement()
        if token.type in (TokenType.BREAK, TokenType.CONTINUE):
            return self._parse_redirect_statement()
        if token.type in RESERVED_SUGGESTIONS:
            raise error_reserved_keyword(token.lexeme, RESERVED_SUGGESTIONS[token.type],
                                         token.span, self._line(token.span))

        expr = self._parse_expression()
        self._consume(TokenType.SEMICOLON)
        return ExpressionStatement(span=self._span_from(expr), expr=expr)

    def _parse_block(self) -> BlockStatement:
        """Parse { statement* }."""
        start = self._consume(TokenType.LEFT_BRACE)
        statements = []
        while not self._check(TokenType.RIGHT_BRACE):
            if self._is_at_end():
                self._error("'}' to close the block")
            statements.append(self._parse_statement())
        self._advance()  # consume '}'
        return BlockStatement(span=self._span_from(start), statements=statements)

    def _parse_declaration(self) -> Declaration:
        """Parse let/var name [= expr];"""
        start = self._advance()  # consume 'let' or 'var'
        name_token = self._consume(TokenType.NAME, "variable name")

        if self._match(TokenType.EQUAL):
            value = self._parse_expression()
        else:
            value = EmptyExpr(span=name_token.span)

        self._consume(TokenType.SEMICOLON)
        return Declaration(
            span=self._span_from(start),
            constant=start.type == TokenType.LET,
            name=name_token.value,
            value=value
        )

    def _parse_condition(self) -> Expression:
        """Parse ( expr )."""
        self._consume(TokenType.LEFT_PAREN)
        condition = self._parse_expression()
        self._consume(TokenType.RIGHT_PAREN)
        return condition

    def _parse_loop_label(self) -> str:
        """Parse an optional @label after a loop keyword."""
        if self._match(TokenType.AT):
            return self._consume(TokenType.NAME, "loop label").value
        return ""

    def _parse_if_statement(self) -> IfStatement:
        """Parse if (expr) stmt [else stmt]."""
        start = self._advance()  # consume 'if'
        condition = self._parse_condition()
        then_branch = self._parse_statement()
        else_branch = None
        if self._match(TokenType.ELSE):
            else_branch = self._parse_statement()
        return IfStatement(
            span=self._span_from(start),
            condition=condition,
            then_branch=then_branch,
            else_branch=else_branch
        )

    def _parse_loop_statement(self) -> LoopStatement:
        """Parse loop [@label] stmt."""
        start = self._advance()  # consume 'loop'
        label = self._parse_loop_label()
        body = self._parse_statement()
        return LoopStatement(span=self._span_from(start), body=body, label=label)

    def _parse_while_statement(self) -> WhileStatement:
        """Parse while [@label] (expr) stmt."""
        start = self._advance()  # consume 'while'
        label = self._parse_loop_label()
        condition = self._parse_condition()
        body = self._parse_statement()
        return WhileStatement(
            span=self._span_from(start),
            condition=condition,
            body=body,
            label=label
        )

    def _parse_do_statement(self) -> DoStatement:
        """Parse do [@label] stmt while (expr);"""
        start = self._advance()  # consume 'do'
        label = self._parse_loop_label()
        body = self._parse_statement()
        self._consume(TokenType.WHILE)
        condition = self._parse_condition()
        self._consume(TokenType.SEMICOLON)
        return DoStatement(
            span=self._span_from(start),
            body=body,
            condition=condition,
            label=label
        )

    def _parse_for_statement(self) -> ForStatement:
        """Parse for [@label] (name : expr) stmt."""
        start = self._advance()  # consume 'for'
        label = self._parse_loop_label()
        self._consume(TokenType.LEFT_PAREN)
        pointer = self._consume(TokenType.NAME, "loop variable name").value
        self._consume(TokenType.COLON)
        iterable = self._parse_expression()
        self._consume(TokenType.RIGHT_PAREN)
        body = self._parse_statement()
        return ForStatement(
            span=self._span_from(start),
            pointer=pointer,
            iterable=iterable,
            body=body,
            label=label
        )

    def _parse_redirect_statement(self) -> Statement:
        """Parse break [label]; or continue [label];"""
        start = self._advance()  # consume 'break' or 'continue'
        label = ""
        name = self._match(TokenType.NAME)
        if name is not None:
            label = name.value
        self._consume(TokenType.SEMICOLON)
        if start.type == TokenType.BREAK:
            return BreakStatement(span=self._span_from(start), label=label)
        return ContinueStatement(span=self._span_from(start), label=label)

    # =========================================================================
    # Entry Points
    # =========================================================================

    def parse(self) -> Program:
        """Parse statements until end of file."""
        start = self._current()
        statements = []
        while not self._is_at_end():
            statements.append(self._parse_statement())
        return Program(span=start.span.to(self.token.span), statements=statements)

    def parse_expression(self) -> Expression:
        """Parse exactly one expression followed by end of file."""
        expr = self._parse_expression()
        self._consume(TokenType.EOF, "end of input")
        return expr


def parse(source: Union[str, Source], filename: Optional[str] = None) -> Program:
    """
    Convenience function to parse source text into a Program.

    Args:
        source: The source text (or Source) to parse
        filename: Optional filename for error messages

    Returns:
        Parsed Program AST

    Raises:
        LexerError: If tokenization fails
        ParserError: If parsing fails
    """
    lexer = Lexer(source, filename)
    return Parser(lexer).parse()
