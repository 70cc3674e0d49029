"""
Variable storage for the Jolt interpreter.

Memory is a chain of scopes. Each block and each for-loop pushes a scope
whose parent is the one active before it; lookups walk outward to the root.
"""

from dataclasses import dataclass, field
from typing import Dict, Iterator, Optional
from contextlib import contextmanager

from .values import JoltValue


@dataclass
class Record:
    """A named storage cell; constant cells refuse assignment."""
    constant: bool
    value: JoltValue


@dataclass
class Scope:
    """
    A single scope containing variable records.

    Scopes form a chain via the `parent` field for lexical scoping.
    """
    records: Dict[str, Record] = field(default_factory=dict)
    parent: Optional["Scope"] = None
    name: str = "block"  # For debugging

    def get(self, name: str) -> Optional[Record]:
        """Look up a record in this scope or parent scopes."""
        scope = self
        while scope is not None:
            if name in scope.records:
                return scope.records[name]
            scope = scope.parent
        return None

    def declare(self, name: str, constant: bool, value: JoltValue) -> Optional[Record]:
        """Add a record to this scope; None if the name is already here."""
        if name in self.records:
            return None
        record = Record(constant, value)
        self.records[name] = record
        return record


class Memory:
    """
    The scope stack of one program run (or of a whole REPL session).

    Usage:
        memory = Memory()
        memory.declare("x", False, JoltNum(1))
        with memory.scope("block"):
            memory.declare("x", True, JoltNum(2))   # shadows the outer x
        memory.get("x").value                       # JoltNum(1)
    """

    def __init__(self):
        self.root = Scope(name="global")
        self.current = self.root

    @property
    def depth(self) -> int:
        """Number of scopes above the root."""
        depth = 0
        scope = self.current
        while scope.parent is not None:
            depth += 1
            scope = scope.parent
        return depth

    def push(self, name: str = "block") -> Scope:
        """Open a new scope nested in the current one."""
        self.current = Scope(parent=self.current, name=name)
        return self.current

    def pop(self) -> Scope:
        """Close the current scope."""
        if self.current.parent is None:
            raise RuntimeError("cannot pop the global scope")
        closed = self.current
        self.current = closed.parent
        return closed

    @contextmanager
    def scope(self, name: str = "block") -> Iterator[Scope]:
        """
        Context manager to create a new nested scope.

        The scope is popped however the body exits, including through
        break/continue redirects and errors.
        """
        opened = self.push(name)
        try:
            yield opened
        finally:
            self.pop()

    def declare(self, name: str, constant: bool, value: JoltValue) -> Optional[Record]:
        """Declare in the innermost scope; None on a same-scope duplicate."""
        return self.current.declare(name, constant, value)

    def get(self, name: str) -> Optional[Record]:
        """Find the nearest record for a name."""
        return self.current.get(name)

    def bind(self, name: str, value: JoltValue, constant: bool = True) -> Record:
        """Create or overwrite a record in the global scope."""
        record = Record(constant, value)
        self.root.records[name] = record
        return record

    def clear(self) -> None:
        """Forget every variable and return to a single global scope."""
        self.root = Scope(name="global")
        self.current = self.root
