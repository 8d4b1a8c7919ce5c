"""Abstract Syntax Tree (AST) definitions for the Pop language.

Every construct in Pop is an expression, so every node here can appear
wherever a value is expected. Leaf and operator nodes keep the token they
were built from; each node exposes `pos_start`/`pos_end`, the span from
its leftmost to its rightmost child, for use in diagnostics.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Tuple

from .lexer import TT_KEYWORD, Token
from .position import Position


@dataclass
class Node:
    """Base class for all AST nodes."""

    @property
    def pos_start(self) -> Position:
        raise NotImplementedError

    @property
    def pos_end(self) -> Position:
        raise NotImplementedError


@dataclass
class Literal(Node):
    token: Token  # INT or FLOAT

    @property
    def value(self):
        return self.token.value

    @property
    def pos_start(self) -> Position:
        return self.token.pos_start

    @property
    def pos_end(self) -> Position:
        return self.token.pos_end


@dataclass
class Ident(Node):
    token: Token

    @property
    def name(self) -> str:
        return self.token.value

    @property
    def pos_start(self) -> Position:
        return self.token.pos_start

    @property
    def pos_end(self) -> Position:
        return self.token.pos_end


@dataclass
class Assign(Node):
    name_tok: Token
    value: Node

    @property
    def name(self) -> str:
        return self.name_tok.value

    @property
    def pos_start(self) -> Position:
        return self.name_tok.pos_start

    @property
    def pos_end(self) -> Position:
        return self.value.pos_end


def op_name(tok: Token) -> str:
    """Operator key for a token: the keyword text for AND/OR/NOT, else the token type."""
    return tok.value if tok.type == TT_KEYWORD else tok.type


@dataclass
class UnaryOp(Node):
    op_tok: Token
    operand: Node

    @property
    def op(self) -> str:
        return op_name(self.op_tok)

    @property
    def pos_start(self) -> Position:
        return self.op_tok.pos_start

    @property
    def pos_end(self) -> Position:
        return self.operand.pos_end


@dataclass
class BinaryOp(Node):
    op_tok: Token
    left: Node
    right: Node

    @property
    def op(self) -> str:
        return op_name(self.op_tok)

    @property
    def pos_start(self) -> Position:
        return self.left.pos_start

    @property
    def pos_end(self) -> Position:
        return self.right.pos_end


@dataclass
class IfExpr(Node):
    cases: List[Tuple[Node, Node]]  # (condition, body) in source order
    else_case: Optional[Node]

    @property
    def pos_start(self) -> Position:
        return self.cases[0][0].pos_start

    @property
    def pos_end(self) -> Position:
        return (self.else_case or self.cases[-1][1]).pos_end


@dataclass
class ForExpr(Node):
    var_name_tok: Token
    start: Node
    end: Node
    step: Optional[Node]
    body: Node

    @property
    def var_name(self) -> str:
        return self.var_name_tok.value

    @property
    def pos_start(self) -> Position:
        return self.var_name_tok.pos_start

    @property
    def pos_end(self) -> Position:
        return self.body.pos_end


@dataclass
class WhileExpr(Node):
    condition: Node
    body: Node

    @property
    def pos_start(self) -> Position:
        return self.condition.pos_start

    @property
    def pos_end(self) -> Position:
        return self.body.pos_end
