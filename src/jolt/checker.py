"""
Static checker for Jolt programs.

Walks a parsed Program without running it and reports, as diagnostics,
the errors the interpreter would otherwise only hit at runtime:
undeclared names, constant reassignment, duplicate declarations,
break/continue with no loop to target, and literal conditions or for-loop
sources of the wrong type.
"""

from typing import Dict, List, Optional, Union
from dataclasses import dataclass

from .ast import (
    Program, Statement, EmptyStatement, BlockStatement, Declaration,
    IfStatement, LoopStatement, WhileStatement, DoStatement, ForStatement,
    BreakStatement, ContinueStatement, ExpressionStatement,
    Expression, EmptyExpr, ValueExpr, NameExpr, NestedExpr, ListLiteral,
    ListGenerator, UnaryOp, BinaryOp, Assign, GetIndex, SetIndex, Interpolation,
)
from .errors import (
    Diagnostic, DiagnosticCollector, ErrorSeverity,
    error_condition_not_boolean,
    error_not_iterable,
    error_already_declared,
    error_undeclared_variable,
    error_constant_reassignment,
    error_unhandled_redirect,
    error_unknown_label,
    warning_unreachable,
)
from .runtime.memory import Memory
from .runtime.values import JoltBool, JoltValue
from .source import Source, as_source
from .tokens import SourceSpan


@dataclass
class CheckResult:
    """Result of checking a program."""
    diagnostics: List[Diagnostic]
    has_errors: bool
    has_warnings: bool

    def to_json(self) -> dict:
        """Convert all diagnostics to JSON format."""
        return {
            "diagnostics": [d.to_json() for d in self.diagnostics],
            "error_count": sum(1 for d in self.diagnostics if d.severity == ErrorSeverity.ERROR),
            "warning_count": sum(1 for d in self.diagnostics if d.severity == ErrorSeverity.WARNING),
        }


class Checker:
    """
    Static checker for Jolt.

    Tracks declared names (and whether they are constant) per block scope,
    the same way the interpreter's Memory does, plus the labels of the
    loops enclosing each statement.
    """

    def __init__(self, max_errors: int = 20, source: Optional[Source] = None,
                 memory: Optional[Memory] = None):
        self.diagnostics = DiagnosticCollector(max_errors)
        self.source = source
        self.scopes: List[Dict[str, bool]] = [{}]
        self.loops: List[str] = []

        if memory is not None:
            # Names already living in a REPL session
            for name, record in memory.root.records.items():
                self.scopes[0][name] = record.constant

    def check(self, program: Program) -> CheckResult:
        """Check a complete program."""
        self._check_statements(program.statements)

        return CheckResult(
            diagnostics=self.diagnostics.diagnostics,
            has_errors=self.diagnostics.has_errors,
            has_warnings=self.diagnostics.has_warnings,
        )

    # =========================================================================
    # Scopes
    # =========================================================================

    def _lookup(self, name: str) -> Optional[bool]:
        """Constancy of the nearest declaration of name, or None."""
        for scope in reversed(self.scopes):
            if name in scope:
                return scope[name]
        return None

    def _line(self, span: SourceSpan) -> Optional[str]:
        if self.source is None:
            return None
        return self.source.get_line(span.row)

    # =========================================================================
    # Statements
    # =========================================================================

    def _check_statements(self, statements: List[Statement]) -> None:
        redirect = None
        for stmt in statements:
            if self.diagnostics.should_stop:
                return
            if redirect is not None:
                keyword = "break" if isinstance(redirect, BreakStatement) else "continue"
                self.diagnostics.add(warning_unreachable(keyword, stmt.span, self._line(stmt.span)))
                redirect = None
            self._check_statement(stmt)
            if isinstance(stmt, (BreakStatement, ContinueStatement)):
                redirect = stmt

    def _check_statement(self, stmt: Statement) -> None:
        if isinstance(stmt, EmptyStatement):
            return

        if isinstance(stmt, BlockStatement):
            self.scopes.append({})
            self._check_statements(stmt.statements)
            self.scopes.pop()

        elif isinstance(stmt, Declaration):
            self._check_expression(stmt.value)
            if stmt.name in self.scopes[-1]:
                self.diagnostics.add_error(
                    error_already_declared(stmt.name, stmt.span, self._line(stmt.span))
                )
            else:
                self.scopes[-1][stmt.name] = stmt.constant

        elif isinstance(stmt, IfStatement):
            self._check_condition(stmt.condition, "if")
            self._check_statement(stmt.then_branch)
            if stmt.else_branch is not None:
                self._check_statement(stmt.else_branch)

        elif isinstance(stmt, LoopStatement):
            self._check_loop_body(stmt.body, stmt.label)

        elif isinstance(stmt, WhileStatement):
            self._check_condition(stmt.condition, "while")
            self._check_loop_body(stmt.body, stmt.label)

        elif isinstance(stmt, DoStatement):
            self._check_loop_body(stmt.body, stmt.label)
            self._check_condition(stmt.condition, "do")

        elif isinstance(stmt, ForStatement):
            self._check_iterable(stmt.iterable)
            self.scopes.append({stmt.pointer: True})
            self._check_loop_body(stmt.body, stmt.label)
            self.scopes.pop()

        elif isinstance(stmt, (BreakStatement, ContinueStatement)):
            self._check_redirect(stmt)

        elif isinstance(stmt, ExpressionStatement):
            self._check_expression(stmt.expr)

    def _check_loop_body(self, body: Statement, label: str) -> None:
        self.loops.append(label)
        self._check_statement(body)
        self.loops.pop()

    def _check_redirect(self, stmt: Union[BreakStatement, ContinueStatement]) -> None:
        keyword = "break" if isinstance(stmt, BreakStatement) else "continue"
        if not self.loops:
            self.diagnostics.add_error(
                error_unhandled_redirect(keyword, stmt.span, self._line(stmt.span))
            )
        elif stmt.label and stmt.label not in self.loops:
            self.diagnostics.add_error(
                error_unknown_label(keyword, stmt.label, stmt.span, self._line(stmt.span))
            )

    def _check_condition(self, expr: Expression, statement: str) -> None:
        self._check_expression(expr)
        literal = _literal_value(expr)
        if literal is not None and not isinstance(literal, JoltBool):
            self.diagnostics.add_error(
                error_condition_not_boolean(statement, literal.type, expr.span, self._line(expr.span))
            )

    def _check_iterable(self, expr: Expression) -> None:
        self._check_expression(expr)
        literal = _literal_value(expr)
        if isinstance(literal, JoltBool):
            self.diagnostics.add_error(
                error_not_iterable(literal.type, expr.span, self._line(expr.span))
            )

    # =========================================================================
    # Expressions
    # =========================================================================

    def _check_expression(self, expr: Expression) -> None:
        if isinstance(expr, (EmptyExpr, ValueExpr)):
            return

        if isinstance(expr, NameExpr):
            if self._lookup(expr.name) is None:
                self.diagnostics.add_error(
                    error_undeclared_variable(expr.name, expr.span, self._line(expr.span))
                )

        elif isinstance(expr, Assign):
            constant = self._lookup(expr.name)
            if constant is None:
                self.diagnostics.add_error(
                    error_undeclared_variable(expr.name, expr.span, self._line(expr.span))
                )
            elif constant:
                self.diagnostics.add_error(
                    error_constant_reassignment(expr.name, expr.span, self._line(expr.span))
                )
            self._check_expression(expr.value)

        elif isinstance(expr, NestedExpr):
            self._check_expression(expr.expr)

        elif isinstance(expr, ListLiteral):
            for element in expr.elements:
                self._check_expression(element)

        elif isinstance(expr, ListGenerator):
            self._check_iterable(expr.iterable)
            self.scopes.append({expr.pointer: True})
            self._check_expression(expr.element)
            self.scopes.pop()

        elif isinstance(expr, UnaryOp):
            self._check_expression(expr.operand)

        elif isinstance(expr, BinaryOp):
            self._check_expression(expr.left)
            self._check_expression(expr.right)

        elif isinstance(expr, GetIndex):
            self._check_expression(expr.target)
            self._check_expression(expr.index)

        elif isinstance(expr, SetIndex):
            self._check_expression(expr.target)
            self._check_expression(expr.index)
            self._check_expression(expr.value)

        elif isinstance(expr, Interpolation):
            for part in expr.parts:
                self._check_expression(part)


def _literal_value(expr: Expression) -> Optional[JoltValue]:
    """The value of a literal, looking through parentheses."""
    while isinstance(expr, NestedExpr):
        expr = expr.expr
    if isinstance(expr, ValueExpr):
        return expr.value
    return None


def check(program: Program, max_errors: int = 20,
          source: Union[str, Source, None] = None,
          memory: Optional[Memory] = None) -> CheckResult:
    """
    Convenience function to check a program.

    Args:
        program: The parsed Program
        max_errors: Maximum errors before stopping (default 20)
        source: Optional source, so diagnostics can show the offending line
        memory: Optional Memory whose global names count as declared

    Returns:
        CheckResult with diagnostics
    """
    checker = Checker(
        max_errors=max_errors,
        source=as_source(source) if source is not None else None,
        memory=memory,
    )
    return checker.check(program)
