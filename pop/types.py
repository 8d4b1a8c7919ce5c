"""Runtime values for Pop.

The language has a single kind of value, a number, which is either a
Python `int` or `float`. Each `Number` also remembers where in the source
it came from and which environment produced it; those annotations only
exist to point runtime diagnostics at the right text and play no part in
equality. `NoneVal` is the explicit "no value" produced by loops and by
conditionals without a matching branch.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Optional, Union

from .position import Position

if TYPE_CHECKING:
    from .environment import Environment


class NoneVal:
    """Marker object for the Pop "no value" result."""
    def __repr__(self) -> str:
        return 'None'

    def __eq__(self, other: Any) -> bool:
        return isinstance(other, NoneVal)

    def __hash__(self) -> int:
        return hash(NoneVal)


@dataclass
class Number:
    value: Union[int, float]
    pos_start: Optional[Position] = field(default=None, repr=False, compare=False)
    pos_end: Optional[Position] = field(default=None, repr=False, compare=False)
    env: Optional['Environment'] = field(default=None, repr=False, compare=False)

    def set_pos(self, pos_start: Optional[Position] = None,
                pos_end: Optional[Position] = None) -> 'Number':
        self.pos_start = pos_start
        self.pos_end = pos_end
        return self

    def set_env(self, env: Optional['Environment'] = None) -> 'Number':
        self.env = env
        return self

    def copy(self) -> 'Number':
        return Number(self.value, self.pos_start, self.pos_end, self.env)

    def is_true(self) -> bool:
        return self.value != 0

    def __str__(self) -> str:
        return to_string(self)


def to_string(value: Any) -> str:
    """Convert a Pop value to the text shown by the shell."""
    if isinstance(value, Number):
        # repr keeps floats round-trippable (0.1 stays 0.1)
        return repr(value.value) if isinstance(value.value, float) else str(value.value)
    if isinstance(value, NoneVal):
        return 'None'
    return str(value)
