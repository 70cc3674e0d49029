"""
Source buffers for the Jolt scripting language.

A Source pairs a display name with the program text and answers the one
question diagnostics need: what does line N look like?
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Union


@dataclass(frozen=True)
class Source:
    """An immutable, named piece of program text."""
    name: str
    text: str
    _lines: List[str] = field(default=None, init=False, repr=False, compare=False)

    @classmethod
    def from_path(cls, path: Union[str, Path]) -> "Source":
        """Load a source file (UTF-8); the file's base name becomes the source name."""
        path = Path(path)
        return cls(path.name, path.read_text(encoding="utf-8"))

    @property
    def lines(self) -> List[str]:
        """Lazy-load line list for error reporting."""
        if self._lines is None:
            object.__setattr__(self, "_lines", self.text.split("\n"))
        return self._lines

    def get_line(self, row: int) -> str:
        """Get a specific line of source (1-indexed), or '' if out of range."""
        if 1 <= row <= len(self.lines):
            return self.lines[row - 1].rstrip("\r")
        return ""


def as_source(text: Union[str, Source], filename: str = "<string>") -> Source:
    """Accept either raw text or an existing Source."""
    if isinstance(text, Source):
        return text
    return Source(filename, text)
