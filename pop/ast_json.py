"""JSON serialization/deserialization for the Pop AST.

This module converts between Pop AST dataclasses and plain Python
dict/list structures suitable for JSON encoding. Tokens keep their spans
so that a tree loaded back from JSON still produces diagnostics that point
at the original source. Positions are stored as `[idx, ln, col]`; the
source name and text are supplied again when loading.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from .ast import (
    Assign,
    BinaryOp,
    ForExpr,
    Ident,
    IfExpr,
    Literal,
    UnaryOp,
    WhileExpr,
)
from .lexer import Token
from .position import Position


def position_to_obj(pos: Optional[Position]) -> Optional[List[int]]:
    if pos is None:
        return None
    return [pos.idx, pos.ln, pos.col]


def token_to_obj(tok: Token) -> Dict[str, Any]:
    return {
        "tok": tok.type,
        "value": tok.value,
        "start": position_to_obj(tok.pos_start),
        "end": position_to_obj(tok.pos_end),
    }


def ast_to_obj(node: Any) -> Any:
    if node is None:
        return None

    if isinstance(node, Literal):
        return {"type": "Literal", "token": token_to_obj(node.token)}
    if isinstance(node, Ident):
        return {"type": "Ident", "token": token_to_obj(node.token)}
    if isinstance(node, Assign):
        return {"type": "Assign", "name_tok": token_to_obj(node.name_tok), "value": ast_to_obj(node.value)}
    if isinstance(node, UnaryOp):
        return {"type": "UnaryOp", "op_tok": token_to_obj(node.op_tok), "operand": ast_to_obj(node.operand)}
    if isinstance(node, BinaryOp):
        return {
            "type": "BinaryOp",
            "op_tok": token_to_obj(node.op_tok),
            "left": ast_to_obj(node.left),
            "right": ast_to_obj(node.right),
        }
    if isinstance(node, IfExpr):
        return {
            "type": "IfExpr",
            "cases": [[ast_to_obj(c), ast_to_obj(b)] for (c, b) in node.cases],
            "else_case": ast_to_obj(node.else_case),
        }
    if isinstance(node, ForExpr):
        return {
            "type": "ForExpr",
            "var_name_tok": token_to_obj(node.var_name_tok),
            "start": ast_to_obj(node.start),
            "end": ast_to_obj(node.end),
            "step": ast_to_obj(node.step),
            "body": ast_to_obj(node.body),
        }
    if isinstance(node, WhileExpr):
        return {"type": "WhileExpr", "condition": ast_to_obj(node.condition), "body": ast_to_obj(node.body)}

    raise TypeError(f"Unsupported node for serialization: {type(node).__name__}")


def ast_from_obj(obj: Any, fn: str = '<ast>', text: str = '') -> Any:
    """Rebuild an AST from `ast_to_obj` output, attaching `fn`/`text` to every position."""

    def position(o: Optional[List[int]]) -> Optional[Position]:
        if o is None:
            return None
        idx, ln, col = o
        return Position(idx, ln, col, fn, text)

    def token(o: Dict[str, Any]) -> Token:
        return Token(o["tok"], o.get("value"), position(o.get("start")), position(o.get("end")))

    def node(o: Any) -> Any:
        if o is None:
            return None
        if not isinstance(o, dict):
            raise TypeError("Invalid AST object")
        t = o.get("type")
        if t == "Literal":
            return Literal(token=token(o["token"]))
        if t == "Ident":
            return Ident(token=token(o["token"]))
        if t == "Assign":
            return Assign(name_tok=token(o["name_tok"]), value=node(o["value"]))
        if t == "UnaryOp":
            return UnaryOp(op_tok=token(o["op_tok"]), operand=node(o["operand"]))
        if t == "BinaryOp":
            return BinaryOp(op_tok=token(o["op_tok"]), left=node(o["left"]), right=node(o["right"]))
        if t == "IfExpr":
            return IfExpr(
                cases=[(node(c), node(b)) for (c, b) in o["cases"]],
                else_case=node(o.get("else_case")),
            )
        if t == "ForExpr":
            return ForExpr(
                var_name_tok=token(o["var_name_tok"]),
                start=node(o["start"]),
                end=node(o["end"]),
                step=node(o.get("step")),
                body=node(o["body"]),
            )
        if t == "WhileExpr":
            return WhileExpr(condition=node(o["condition"]), body=node(o["body"]))

        raise ValueError(f"Unknown AST node type: {t}")

    return node(obj)
