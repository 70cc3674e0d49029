"""
Tree-walking interpreter for Jolt programs.

Walks the AST through the visitor protocol, storing variables in a Memory
scope chain. break and continue travel as Redirect exceptions up to the loop
they target.
"""

import math
import sys
import time
from dataclasses import dataclass, field
from typing import Callable, List, Optional, Union

from .values import JoltValue, JoltBool, JoltNum, JoltString, JoltList, format_number
from .memory import Memory
from .redirects import Redirect, Break, Continue

from ..ast import (
    AstVisitor, BinaryOperator, UnaryOperator, Program,
    Statement, EmptyStatement, BlockStatement, Declaration, IfStatement,
    LoopStatement, WhileStatement, DoStatement, ForStatement, BreakStatement,
    ContinueStatement, ExpressionStatement,
    Expression, EmptyExpr, ValueExpr, NameExpr, NestedExpr, ListLiteral,
    ListGenerator, UnaryOp, BinaryOp, Assign, GetIndex, SetIndex, Interpolation,
)
from ..errors import (
    Diagnostic, JoltError,
    error_invalid_operand,
    error_invalid_operands,
    error_condition_not_boolean,
    error_not_iterable,
    error_not_indexable,
    error_index_not_number,
    error_index_out_of_bounds,
    error_already_declared,
    error_undeclared_variable,
    error_constant_reassignment,
    error_unhandled_redirect,
    error_unknown_label,
)
from ..source import Source, as_source
from ..tokens import SourceSpan

Echo = Callable[[JoltValue], None]

# Types each operator accepts on its left; anything else blames the left side
LEFT_OPERAND_TYPES = {
    BinaryOperator.ADD: (JoltNum, JoltString, JoltBool, JoltList),
    BinaryOperator.SUBTRACT: (JoltNum,),
    BinaryOperator.MULTIPLY: (JoltNum, JoltString, JoltList),
    BinaryOperator.DIVIDE: (JoltNum,),
    BinaryOperator.MODULUS: (JoltNum,),
    BinaryOperator.LESS: (JoltNum, JoltString),
    BinaryOperator.LESS_EQUAL: (JoltNum, JoltString),
    BinaryOperator.GREATER: (JoltNum, JoltString),
    BinaryOperator.GREATER_EQUAL: (JoltNum, JoltString),
}


def _divide(a: float, b: float) -> float:
    """IEEE-754 division: x/0 is +-Infinity, 0/0 is NaN."""
    if b == 0:
        if a == 0 or math.isnan(a):
            return math.nan
        return math.copysign(math.inf, a) * math.copysign(1.0, b)
    return a / b


def _remainder(a: float, b: float) -> float:
    """IEEE-754 remainder with the sign of the dividend."""
    if b == 0 or math.isinf(a):
        return math.nan
    return math.fmod(a, b)


def _repeat_count(count: JoltNum, size: int) -> Optional[int]:
    """Whole repetitions for string or list '*', or None when unusable."""
    if not count.is_finite():
        return None
    if size == 0:
        return 0
    times = max(0, math.floor(count.value))
    # Result length must fit in an index
    if size * times > sys.maxsize:
        return None
    return times


@dataclass
class ExecutionResult:
    """Result of running a piece of source text."""
    success: bool
    value: Optional[JoltValue] = None
    error: Optional[JoltError] = None
    diagnostics: List[Diagnostic] = field(default_factory=list)
    elapsed: float = 0.0  # seconds

    @property
    def error_message(self) -> Optional[str]:
        """Formatted error text, if the run failed."""
        if self.error is not None:
            return str(self.error)
        if self.diagnostics:
            return "\n\n".join(d.format() for d in self.diagnostics)
        return None


class Interpreter(AstVisitor):
    """
    Tree-walking interpreter for Jolt.

    Usage:
        interpreter = Interpreter(source)
        value = interpreter.run(program)

    The echo callback, when given, receives the value of every expression
    statement executed.
    """

    def __init__(self, source: Union[str, Source, None] = None,
                 memory: Optional[Memory] = None, echo: Optional[Echo] = None):
        self.source = as_source(source if source is not None else "")
        self.memory = memory if memory is not None else Memory()
        self.echo = echo

    def _line(self, span: SourceSpan) -> str:
        return self.source.get_line(span.row)

    # =========================================================================
    # Entry Points
    # =========================================================================

    def run(self, program: Program) -> JoltValue:
        """
        Execute a program.

        Returns the value of the last top-level expression statement, or 0
        when there was none.

        Raises:
            JoltError: On the first fatal error
        """
        result: JoltValue = JoltNum(0)
        try:
            for stmt in program:
                value = self.execute(stmt)
                if isinstance(stmt, ExpressionStatement):
                    result = value
        except Redirect as redirect:
            line = self._line(redirect.origin)
            if redirect.label:
                raise error_unknown_label(redirect.keyword, redirect.label,
                                          redirect.origin, line) from None
            raise error_unhandled_redirect(redirect.keyword, redirect.origin, line) from None
        return result

    def execute(self, stmt: Statement) -> Optional[JoltValue]:
        """Execute one statement."""
        return stmt.accept(self)

    def evaluate(self, expr: Expression) -> JoltValue:
        """Evaluate one expression."""
        return expr.accept(self)

    # =========================================================================
    # Statements
    # =========================================================================

    def visit_EmptyStatement(self, stmt: EmptyStatement) -> None:
        pass

    def visit_BlockStatement(self, stmt: BlockStatement) -> None:
        with self.memory.scope("block"):
            for sub in stmt.statements:
                self.execute(sub)

    def visit_Declaration(self, stmt: Declaration) -> None:
        if stmt.name in self.memory.current.records:
            raise error_already_declared(stmt.name, stmt.span, self._line(stmt.span))

        value = self.evaluate(stmt.value)
        self.memory.declare(stmt.name, stmt.constant, value)

    def visit_IfStatement(self, stmt: IfStatement) -> None:
        if self._condition(stmt.condition, "if"):
            self.execute(stmt.then_branch)
        elif stmt.else_branch is not None:
            self.execute(stmt.else_branch)

    def visit_LoopStatement(self, stmt: LoopStatement) -> None:
        while self._run_body(stmt.body, stmt.label):
            pass

    def visit_WhileStatement(self, stmt: WhileStatement) -> None:
        while self._condition(stmt.condition, "while"):
            if not self._run_body(stmt.body, stmt.label):
                break

    def visit_DoStatement(self, stmt: DoStatement) -> None:
        while True:
            if not self._run_body(stmt.body, stmt.label):
                break
            if not self._condition(stmt.condition, "do"):
                break

    def visit_ForStatement(self, stmt: ForStatement) -> None:
        iterable = self.evaluate(stmt.iterable)
        elements = self._elements(iterable, stmt.iterable)

        with self.memory.scope("for"):
            pointer = self.memory.declare(stmt.pointer, True, JoltNum(math.nan))
            for element in elements:
                pointer.value = element
                if not self._run_body(stmt.body, stmt.label):
                    break

    def visit_BreakStatement(self, stmt: BreakStatement) -> None:
        raise Break(stmt.span, stmt.label)

    def visit_ContinueStatement(self, stmt: ContinueStatement) -> None:
        raise Continue(stmt.span, stmt.label)

    def visit_ExpressionStatement(self, stmt: ExpressionStatement) -> JoltValue:
        value = self.evaluate(stmt.expr)
        if self.echo is not None:
            self.echo(value)
        return value

    def _condition(self, expr: Expression, statement: str) -> bool:
        """Evaluate a condition, which must produce a bool."""
        value = self.evaluate(expr)
        if not isinstance(value, JoltBool):
            raise error_condition_not_boolean(statement, value.type, expr.span, self._line(expr.span))
        return value.value

    def _run_body(self, body: Statement, label: str) -> bool:
        """Run one pass of a loop body; False when the loop must stop."""
        try:
            self.execute(body)
        except Break as redirect:
            if redirect.targets(label):
                return False
            raise
        except Continue as redirect:
            if redirect.targets(label):
                return True
            raise
        return True

    def _elements(self, value: JoltValue, expr: Expression):
        elements = value.iterable()
        if elements is None:
            raise error_not_iterable(value.type, expr.span, self._line(expr.span))
        return elements

    # =========================================================================
    # Expressions
    # =========================================================================

    def visit_EmptyExpr(self, expr: EmptyExpr) -> JoltValue:
        return JoltNum(math.nan)

    def visit_ValueExpr(self, expr: ValueExpr) -> JoltValue:
        return expr.value

    def visit_NameExpr(self, expr: NameExpr) -> JoltValue:
        record = self.memory.get(expr.name)
        if record is None:
            raise error_undeclared_variable(expr.name, expr.span, self._line(expr.span))
        return record.value

    def visit_NestedExpr(self, expr: NestedExpr) -> JoltValue:
        return self.evaluate(expr.expr)

    def visit_ListLiteral(self, expr: ListLiteral) -> JoltValue:
        return JoltList([self.evaluate(element) for element in expr.elements])

    def visit_ListGenerator(self, expr: ListGenerator) -> JoltValue:
        iterable = self.evaluate(expr.iterable)
        elements = self._elements(iterable, expr.iterable)

        result = []
        with self.memory.scope("generator"):
            pointer = self.memory.declare(expr.pointer, True, JoltNum(math.nan))
            for element in elements:
                pointer.value = element
                result.append(self.evaluate(expr.element))
        return JoltList(result)

    def visit_Assign(self, expr: Assign) -> JoltValue:
        record = self.memory.get(expr.name)
        if record is None:
            raise error_undeclared_variable(expr.name, expr.span, self._line(expr.span))
        if record.constant:
            raise error_constant_reassignment(expr.name, expr.span, self._line(expr.span))

        value = self.evaluate(expr.value)
        record.value = value
        return value

    def visit_Interpolation(self, expr: Interpolation) -> JoltValue:
        return JoltString("".join(str(self.evaluate(part)) for part in expr.parts))

    def visit_UnaryOp(self, expr: UnaryOp) -> JoltValue:
        operand = self.evaluate(expr.operand)
        op = expr.operator

        if op == UnaryOperator.NEGATE:
            if isinstance(operand, JoltNum):
                return JoltNum(-operand.value)
            if isinstance(operand, JoltString):
                return JoltString(operand.value[::-1])

        elif op == UnaryOperator.NOT:
            if isinstance(operand, JoltBool):
                return JoltBool(not operand.value)

        elif op == UnaryOperator.SIZE:
            if isinstance(operand, JoltString):
                return JoltNum(len(operand.value))
            if isinstance(operand, JoltList):
                return JoltNum(len(operand))
            # Every other value counts as one item
            return JoltNum(1)

        raise error_invalid_operand(op.symbol, operand.type, expr.span, self._line(expr.span))

    def visit_BinaryOp(self, expr: BinaryOp) -> JoltValue:
        op = expr.operator

        if op in (BinaryOperator.OR, BinaryOperator.AND, BinaryOperator.XOR):
            return self._eval_logical(expr)

        left = self.evaluate(expr.left)
        right = self.evaluate(expr.right)

        if op == BinaryOperator.EQUAL:
            return JoltBool(left.equals(right))
        if op == BinaryOperator.NOT_EQUAL:
            return JoltBool(not left.equals(right))

        if op in (BinaryOperator.LESS, BinaryOperator.LESS_EQUAL,
                  BinaryOperator.GREATER, BinaryOperator.GREATER_EQUAL):
            result = self._eval_comparison(op, left, right)
        else:
            result = self._eval_arithmetic(op, left, right)

        if result is None:
            self._operand_error(expr, left, right)
        return result

    def _eval_logical(self, expr: BinaryOp) -> JoltValue:
        """Evaluate |, & and ^ on bools, short-circuiting | and &."""
        op = expr.operator
        left = self.evaluate(expr.left)
        if not isinstance(left, JoltBool):
            raise error_invalid_operands(op.symbol, "left", left.type, expr.left.span,
                                         self._line(expr.left.span))

        if op == BinaryOperator.OR and left.value:
            return JoltBool(True)
        if op == BinaryOperator.AND and not left.value:
            return JoltBool(False)

        right = self.evaluate(expr.right)
        if not isinstance(right, JoltBool):
            raise error_invalid_operands(op.symbol, "right", right.type, expr.right.span,
                                         self._line(expr.right.span))

        if op == BinaryOperator.XOR:
            return JoltBool(left.value != right.value)
        return JoltBool(right.value)

    def _eval_comparison(self, op: BinaryOperator, left: JoltValue,
                         right: JoltValue) -> Optional[JoltValue]:
        if isinstance(left, JoltNum) and isinstance(right, JoltNum):
            a, b = left.value, right.value
        elif isinstance(left, JoltString) and isinstance(right, JoltString):
            a, b = left.value, right.value
        else:
            return None

        if op == BinaryOperator.LESS:
            return JoltBool(a < b)
        if op == BinaryOperator.LESS_EQUAL:
            return JoltBool(a <= b)
        if op == BinaryOperator.GREATER:
            return JoltBool(a > b)
        return JoltBool(a >= b)

    def _eval_arithmetic(self, op: BinaryOperator, left: JoltValue,
                         right: JoltValue) -> Optional[JoltValue]:
        if isinstance(left, JoltNum) and isinstance(right, JoltNum):
            a, b = left.value, right.value
            if op == BinaryOperator.ADD:
                return JoltNum(a + b)
            if op == BinaryOperator.SUBTRACT:
                return JoltNum(a - b)
            if op == BinaryOperator.MULTIPLY:
                return JoltNum(a * b)
            if op == BinaryOperator.DIVIDE:
                return JoltNum(_divide(a, b))
            return JoltNum(_remainder(a, b))

        if op == BinaryOperator.ADD:
            if isinstance(left, JoltString):
                return JoltString(left.value + str(right))
            if isinstance(right, JoltString) and isinstance(left, (JoltNum, JoltBool)):
                return JoltString(str(left) + right.value)
            if isinstance(left, JoltList) and isinstance(right, JoltList):
                return JoltList(left.elements + right.elements)

        if op == BinaryOperator.MULTIPLY and isinstance(right, JoltNum):
            if isinstance(left, JoltString):
                count = _repeat_count(right, len(left.value))
                if count is not None:
                    return JoltString(left.value * count)
            elif isinstance(left, JoltList):
                count = _repeat_count(right, len(left))
                if count is not None:
                    return JoltList(left.elements * count)

        return None

    def _operand_error(self, expr: BinaryOp, left: JoltValue, right: JoltValue) -> None:
        op = expr.operator
        if not isinstance(left, LEFT_OPERAND_TYPES[op]):
            raise error_invalid_operands(op.symbol, "left", left.type, expr.left.span,
                                         self._line(expr.left.span))
        raise error_invalid_operands(op.symbol, "right", right.type, expr.right.span,
                                     self._line(expr.right.span))

    def _index(self, index: JoltValue, expr: Expression, kind: str, length: int) -> int:
        """Check an index value against a container length."""
        if not isinstance(index, JoltNum):
            raise error_index_not_number(index.type, expr.span, self._line(expr.span))
        if index.is_finite():
            position = int(index.value)
            if 0 <= position < length:
                return position
            text = format_number(float(position))
        else:
            text = str(index)
        raise error_index_out_of_bounds(text, kind, length, expr.span, self._line(expr.span))

    def visit_GetIndex(self, expr: GetIndex) -> JoltValue:
        target = self.evaluate(expr.target)

        if isinstance(target, JoltString):
            index = self.evaluate(expr.index)
            position = self._index(index, expr.index, target.type, len(target.value))
            return JoltString(target.value[position])

        if isinstance(target, JoltList):
            index = self.evaluate(expr.index)
            position = self._index(index, expr.index, target.type, len(target))
            return target.elements[position]

        raise error_not_indexable(str(target), expr.target.span, self._line(expr.target.span))

    def visit_SetIndex(self, expr: SetIndex) -> JoltValue:
        target = self.evaluate(expr.target)

        if not isinstance(target, JoltList):
            raise error_not_indexable(str(target), expr.target.span, self._line(expr.target.span))

        index = self.evaluate(expr.index)
        position = self._index(index, expr.index, target.type, len(target))
        value = self.evaluate(expr.value)
        target.elements[position] = value
        return value


def execute(source: Union[str, Source], memory: Optional[Memory] = None,
            echo: Optional[Echo] = None, check: bool = False,
            filename: Optional[str] = None) -> ExecutionResult:
    """
    High-level API to parse and run Jolt source text in one call.

        from jolt import execute

        result = execute('var x = 2; x * 21;')
        if result.success:
            print(result.value)        # 42
        else:
            print(result.error_message)

    Jolt errors are reported in the result rather than raised.
    """
    from ..parser import parse
    from ..checker import check as check_program

    src = as_source(source, filename or "<string>")
    started = time.perf_counter()
    try:
        program = parse(src)
        if check:
            checked = check_program(program, source=src, memory=memory)
            if checked.has_errors:
                return ExecutionResult(
                    success=False,
                    diagnostics=checked.diagnostics,
                    elapsed=time.perf_counter() - started,
                )
        value = Interpreter(src, memory, echo).run(program)
    except JoltError as e:
        return ExecutionResult(success=False, error=e, elapsed=time.perf_counter() - started)

    return ExecutionResult(success=True, value=value, elapsed=time.perf_counter() - started)


def run_source(source: Union[str, Source], memory: Optional[Memory] = None,
               echo: Optional[Echo] = None, filename: Optional[str] = None) -> JoltValue:
    """
    Parse and run Jolt source text, returning the program's result.

    Raises:
        JoltError: On the first lexer, parser or runtime error
    """
    from ..parser import parse

    src = as_source(source, filename or "<string>")
    return Interpreter(src, memory, echo).run(parse(src))
