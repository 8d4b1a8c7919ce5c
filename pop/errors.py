"""Diagnostics produced by the Pop pipeline.

Every stage reports failure by returning one of these records rather than
raising. Lexical and syntax errors render as a message plus a file/line
reference; runtime errors additionally render a traceback built from the
evaluation context chain.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, ClassVar, Optional

from .position import Position

if TYPE_CHECKING:
    from .environment import Context


@dataclass
class Error:
    """Base diagnostic: a span of source text and a human readable detail."""
    pos_start: Position
    pos_end: Position
    details: str = ''

    name: ClassVar[str] = 'Error'

    def __post_init__(self):
        # the lexer's position keeps moving after the error is built
        self.pos_start = self.pos_start.copy()
        self.pos_end = self.pos_end.copy()

    def as_string(self) -> str:
        result = f'{self.name}: {self.details}\n'
        result += f'File {self.pos_start.fn}, line {self.pos_start.ln + 1}'
        return result

    def __str__(self) -> str:
        return self.as_string()


@dataclass
class IllegalCharError(Error):
    name: ClassVar[str] = 'Illegal Character'


@dataclass
class ExpectedCharError(Error):
    name: ClassVar[str] = 'Expected Character'


@dataclass
class InvalidSyntaxError(Error):
    name: ClassVar[str] = 'Invalid Syntax'


@dataclass
class RTError(Error):
    """Error raised while walking the tree; carries the active context."""
    context: Optional['Context'] = None

    name: ClassVar[str] = 'Runtime Error'

    def as_string(self) -> str:
        result = self.generate_traceback()
        result += f'{self.name}: {self.details}'
        return result

    def generate_traceback(self) -> str:
        result = ''
        pos = self.pos_start
        ctx = self.context

        while ctx:
            result = f'  File {pos.fn}, line {pos.ln + 1}, in {ctx.display_name}\n' + result
            pos = ctx.parent_entry_pos if ctx.parent_entry_pos else pos
            ctx = ctx.parent

        return 'Traceback (most recent call last):\n' + result


@dataclass
class DivisionByZeroError(RTError):
    details: str = 'Division by zero'


@dataclass
class UndefinedVariableError(RTError):
    pass


@dataclass
class IllegalOperationError(RTError):
    details: str = 'Illegal operation'


@dataclass
class StepLimitError(RTError):
    pass


class PopError(Exception):
    """Exception wrapper for callers that prefer raising over result pairs."""
    def __init__(self, err: Error):
        super().__init__(err.as_string())
        self.err = err
