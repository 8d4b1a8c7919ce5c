"""Source positions for the Pop scanner.

A `Position` records how far the lexer has progressed through a source
text. The lexer keeps one live position and advances it a character at a
time; anything that needs to remember a location (tokens, diagnostics)
stores a copy.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional


@dataclass
class Position:
    idx: int
    ln: int
    col: int
    fn: str
    ftxt: str = field(repr=False, compare=False)

    def advance(self, current_char: Optional[str] = None) -> 'Position':
        self.idx += 1
        self.col += 1
        if current_char == '\n':
            self.ln += 1
            self.col = 0
        return self

    def copy(self) -> 'Position':
        return Position(self.idx, self.ln, self.col, self.fn, self.ftxt)
