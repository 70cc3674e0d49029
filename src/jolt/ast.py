"""
Abstract Syntax Tree (AST) node definitions for the Jolt scripting language.

The parser produces a Program of statements; the interpreter (and the static
checker) walk it. Every node carries the span of source text it came from.
"""

import sys
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Iterator, List, Optional, TextIO
from abc import ABC

from .tokens import SourceSpan
from .runtime.values import JoltValue


# =============================================================================
# Base Classes
# =============================================================================

@dataclass
class AstNode(ABC):
    """Base class for all AST nodes."""
    span: SourceSpan  # Source location for error reporting

    def accept(self, visitor: "AstVisitor") -> Any:
        """Accept a visitor for traversal."""
        method_name = f"visit_{self.__class__.__name__}"
        method = getattr(visitor, method_name, visitor.generic_visit)
        return method(self)


class AstVisitor(ABC):
    """Base class for AST visitors."""

    def generic_visit(self, node: AstNode) -> Any:
        """Default visit method."""
        raise NotImplementedError(f"No visitor for {node.__class__.__name__}")


# =============================================================================
# Operators
# =============================================================================

class BinaryOperator(Enum):
    """Binary operators, valued by their source symbol."""
    OR = "|"
    XOR = "^"
    AND = "&"
    EQUAL = "=="
    NOT_EQUAL = "!="
    LESS = "<"
    LESS_EQUAL = "<="
    GREATER = ">"
    GREATER_EQUAL = ">="
    ADD = "+"
    SUBTRACT = "-"
    MULTIPLY = "*"
    DIVIDE = "/"
    MODULUS = "%"

    @property
    def symbol(self) -> str:
        return self.value


class UnaryOperator(Enum):
    """Prefix operators, valued by their source symbol."""
    NEGATE = "-"
    NOT = "!"
    SIZE = "#"

    @property
    def symbol(self) -> str:
        return self.value


# =============================================================================
# Expression Nodes
# =============================================================================

@dataclass
class Expression(AstNode):
    """Base class for all expressions."""
    pass


@dataclass
class EmptyExpr(Expression):
    """Stand-in initializer for 'var x;'; evaluates to NaN."""
    pass


@dataclass
class ValueExpr(Expression):
    """A literal value: number, string or boolean."""
    value: JoltValue


@dataclass
class NameExpr(Expression):
    """A variable reference."""
    name: str


@dataclass
class NestedExpr(Expression):
    """A parenthesized expression."""
    expr: Expression


@dataclass
class ListLiteral(Expression):
    """A list literal (e.g., [1, 2, 3])."""
    elements: List[Expression]


@dataclass
class ListGenerator(Expression):
    """
    A list generator (e.g., [x * x for x : 10]).

    The element expression is evaluated once per item of the iterable with
    the pointer bound as a constant in its own scope.
    """
    element: Expression
    pointer: str
    iterable: Expression


@dataclass
class UnaryOp(Expression):
    """A prefix operation (-x, !x, #x)."""
    operator: UnaryOperator
    operand: Expression


@dataclass
class BinaryOp(Expression):
    """A binary operation (e.g., a + b, x == y)."""
    left: Expression
    operator: BinaryOperator
    right: Expression


@dataclass
class Assign(Expression):
    """Assignment to a named variable (x = value)."""
    name: str
    value: Expression


@dataclass
class GetIndex(Expression):
    """Index access (e.g., items[0])."""
    target: Expression
    index: Expression


@dataclass
class SetIndex(Expression):
    """Index assignment (e.g., items[0] = value)."""
    target: Expression
    index: Expression
    value: Expression


@dataclass
class Interpolation(Expression):
    """
    An interpolated string ("a{x}b").

    Parts alternate between literal text (as ValueExpr) and embedded
    expressions, in source order.
    """
    parts: List[Expression]


# =============================================================================
# Statement Nodes
# =============================================================================

@dataclass
class Statement(AstNode):
    """Base class for all statements."""
    pass


@dataclass
class EmptyStatement(Statement):
    """A lone ';'."""
    pass


@dataclass
class BlockStatement(Statement):
    """A braced block; runs in its own scope."""
    statements: List[Statement]


@dataclass
class Declaration(Statement):
    """A variable declaration (let x = 1; var y;)."""
    constant: bool
    name: str
    value: Expression


@dataclass
class IfStatement(Statement):
    """An if statement with optional else branch."""
    condition: Expression
    then_branch: Statement
    else_branch: Optional[Statement] = None


@dataclass
class LoopStatement(Statement):
    """An unconditional loop, left only through break."""
    body: Statement
    label: str = ""


@dataclass
class WhileStatement(Statement):
    """A while loop; the condition is checked before each pass."""
    condition: Expression
    body: Statement
    label: str = ""


@dataclass
class DoStatement(Statement):
    """A do-while loop; the condition is checked after each pass."""
    body: Statement
    condition: Expression
    label: str = ""


@dataclass
class ForStatement(Statement):
    """A for loop (for (x : iterable) body)."""
    pointer: str
    iterable: Expression
    body: Statement
    label: str = ""


@dataclass
class BreakStatement(Statement):
    """break, optionally naming the loop to leave."""
    label: str = ""


@dataclass
class ContinueStatement(Statement):
    """continue, optionally naming the loop to restart."""
    label: str = ""


@dataclass
class ExpressionStatement(Statement):
    """An expression used as a statement."""
    expr: Expression


@dataclass
class Program(AstNode):
    """A complete parsed program."""
    statements: List[Statement] = field(default_factory=list)

    def __iter__(self) -> Iterator[Statement]:
        return iter(self.statements)

    def __len__(self) -> int:
        return len(self.statements)


# =============================================================================
# Visitor Helpers
# =============================================================================

class PrintVisitor(AstVisitor):
    """Debug visitor that prints the AST structure."""

    def __init__(self, indent: int = 0, out: Optional[TextIO] = None):
        self.indent = indent
        self.out = out if out is not None else sys.stdout

    def _print(self, text: str) -> None:
        print("  " * self.indent + text, file=self.out)

    def _child(self) -> "PrintVisitor":
        return PrintVisitor(self.indent + 2, self.out)

    def generic_visit(self, node: AstNode) -> None:
        self._print(f"{node.__class__.__name__}")
        for name, value in node.__dict__.items():
            if name == "span":
                continue
            if isinstance(value, AstNode):
                self._print(f"  {name}:")
                self._child().generic_visit(value)
            elif isinstance(value, list):
                self._print(f"  {name}: [")
                for item in value:
                    self._child().generic_visit(item)
                self._print("  ]")
            elif isinstance(value, Enum):
                self._print(f"  {name}: {value.value}")
            elif isinstance(value, JoltValue):
                self._print(f"  {name}: {value.type} {value}")
            else:
                self._print(f"  {name}: {value!r}")


def print_ast(node: AstNode, out: Optional[TextIO] = None) -> None:
    """Print an AST node for debugging."""
    PrintVisitor(out=out).generic_visit(node)
