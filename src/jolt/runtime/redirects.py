"""
Non-local exits for break and continue.

A Break or Continue is raised by its statement and caught by the nearest
enclosing loop it targets: any loop when unlabeled, otherwise only the loop
carrying the same label.
"""

from ..tokens import SourceSpan


class Redirect(Exception):
    """Base class for break/continue signals."""

    keyword = "redirect"

    def __init__(self, origin: SourceSpan, label: str = ""):
        self.origin = origin
        self.label = label
        super().__init__(f"{self.keyword} {label}".strip())

    def targets(self, loop_label: str) -> bool:
        """Whether a loop with the given label should handle this signal."""
        return self.label == "" or self.label == loop_label


class Break(Redirect):
    """Leave the targeted loop."""
    keyword = "break"


class Continue(Redirect):
    """Skip to the next pass of the targeted loop."""
    keyword = "continue"
