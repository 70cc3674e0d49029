"""
Jolt: a small dynamically-typed scripting language.

This package provides:
- Lexer: Tokenizes Jolt source text
- Parser: Builds a Program AST from tokens
- Checker: Reports errors statically, without running the program
- Interpreter: Tree-walking evaluation against a scoped Memory

Usage:
    from jolt import parse, check, execute, run_source

    value = run_source('var total = 0; for (i : 5) total = total + i; total;')
    print(value)    # 10

    program = parse('let x = 1; x = 2;')
    result = check(program)
    if result.has_errors:
        for diag in result.diagnostics:
            print(diag.format())
"""

__version__ = "0.1.0"

from .source import (
    Source,
    as_source,
)

from .tokens import (
    Token,
    TokenType,
    SourceLocation,
    SourceSpan,
    KEYWORDS,
    SYMBOLS,
)

from .errors import (
    ErrorSeverity,
    Diagnostic,
    DiagnosticCollector,
    JoltError,
    LexerError,
    ParserError,
    JoltTypeError,
    DeclarationError,
    JoltNameError,
    ControlFlowError,
)

from .lexer import (
    Lexer,
    tokenize,
)

from .parser import (
    Parser,
    parse,
)

from .ast import (
    # Base
    AstNode,
    AstVisitor,
    BinaryOperator,
    UnaryOperator,
    # Expressions
    Expression,
    EmptyExpr,
    ValueExpr,
    NameExpr,
    NestedExpr,
    ListLiteral,
    ListGenerator,
    UnaryOp,
    BinaryOp,
    Assign,
    GetIndex,
    SetIndex,
    Interpolation,
    # Statements
    Statement,
    EmptyStatement,
    BlockStatement,
    Declaration,
    IfStatement,
    LoopStatement,
    WhileStatement,
    DoStatement,
    ForStatement,
    BreakStatement,
    ContinueStatement,
    ExpressionStatement,
    Program,
    # Helpers
    PrintVisitor,
    print_ast,
)

from .checker import (
    Checker,
    CheckResult,
    check,
)

from .runtime import (
    JoltValue,
    JoltBool,
    JoltNum,
    JoltString,
    JoltList,
    jolt_value,
    Memory,
    Record,
    Scope,
    Redirect,
    Break,
    Continue,
    Interpreter,
    ExecutionResult,
    execute,
    run_source,
)

from .config import (
    JoltConfig,
    ConfigError,
    load_config,
)

__all__ = [
    '__version__',

    # Source
    'Source',
    'as_source',

    # Tokens
    'Token',
    'TokenType',
    'SourceLocation',
    'SourceSpan',
    'KEYWORDS',
    'SYMBOLS',

    # Errors
    'ErrorSeverity',
    'Diagnostic',
    'DiagnosticCollector',
    'JoltError',
    'LexerError',
    'ParserError',
    'JoltTypeError',
    'DeclarationError',
    'JoltNameError',
    'ControlFlowError',

    # Lexer
    'Lexer',
    'tokenize',

    # Parser
    'Parser',
    'parse',

    # AST
    'AstNode',
    'AstVisitor',
    'BinaryOperator',
    'UnaryOperator',
    'Expression',
    'EmptyExpr',
    'ValueExpr',
    'NameExpr',
    'NestedExpr',
    'ListLiteral',
    'ListGenerator',
    'UnaryOp',
    'BinaryOp',
    'Assign',
    'GetIndex',
    'SetIndex',
    'Interpolation',
    'Statement',
    'EmptyStatement',
    'BlockStatement',
    'Declaration',
    'IfStatement',
    'LoopStatement',
    'WhileStatement',
    'DoStatement',
    'ForStatement',
    'BreakStatement',
    'ContinueStatement',
    'ExpressionStatement',
    'Program',
    'PrintVisitor',
    'print_ast',

    # Checker
    'Checker',
    'CheckResult',
    'check',

    # Runtime/Interpreter
    'JoltValue',
    'JoltBool',
    'JoltNum',
    'JoltString',
    'JoltList',
    'jolt_value',
    'Memory',
    'Record',
    'Scope',
    'Redirect',
    'Break',
    'Continue',
    'Interpreter',
    'ExecutionResult',
    'execute',
    'run_source',

    # Configuration
    'JoltConfig',
    'ConfigError',
    'load_config',
]
