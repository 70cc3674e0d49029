"""
Jolt runtime - tree-walking interpreter.

This module provides:
- Values: JoltBool, JoltNum, JoltString and JoltList
- Memory: Scope chain of variable records
- Redirects: break/continue signals
- Interpreter: Executes a parsed Program
"""

from .values import (
    JoltValue,
    JoltBool,
    JoltNum,
    JoltString,
    JoltList,
    format_number,
    jolt_value,
)

from .memory import (
    Record,
    Scope,
    Memory,
)

from .redirects import (
    Redirect,
    Break,
    Continue,
)

from .interpreter import (
    Interpreter,
    ExecutionResult,
    execute,
    run_source,
)

__all__ = [
    # Values
    'JoltValue',
    'JoltBool',
    'JoltNum',
    'JoltString',
    'JoltList',
    'format_number',
    'jolt_value',

    # Memory
    'Record',
    'Scope',
    'Memory',

    # Redirects
    'Redirect',
    'Break',
    'Continue',

    # Interpreter
    'Interpreter',
    'ExecutionResult',
    'execute',
    'run_source',
]
