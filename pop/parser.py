"""Recursive-descent parser for the Pop language.

Grammar, loosest binding first::

    expr        := 'VAR' IDENT '=' expr
                 | comp_expr (('AND' | 'OR') comp_expr)*
    comp_expr   := 'NOT' comp_expr
                 | arith_expr (('==' | '!=' | '<' | '>' | '<=' | '>=') arith_expr)*
    arith_expr  := term (('+' | '-') term)*
    term        := factor (('*' | '/') factor)*
    factor      := ('+' | '-') factor | power
    power       := atom ('^' factor)?
    atom        := INT | FLOAT | IDENT | '(' expr ')'
                 | if_expr | for_expr | while_expr
    if_expr     := 'IF' expr 'DO' expr ('ELIF' expr 'DO' expr)* ('ELSE' expr)?
    for_expr    := 'FOR' IDENT '=' expr 'UPTO' expr ('STEP' expr)? 'DO' expr
    while_expr  := 'WHILE' expr 'DO' expr

Because the right operand of '^' is a `factor`, which itself may contain a
power, `a ^ b ^ c` groups as `a ^ (b ^ c)`.

Each rule returns a `ParseResult` rather than raising. The result counts
the tokens consumed; when a rule wants to report its own error after a
sub-rule failed, it only does so if that sub-rule consumed nothing. The
effect is that the message from whichever alternative got furthest into
the input is the one the user sees.
"""

from __future__ import annotations

from typing import Callable, List, Optional, Sequence, Tuple, Union

from .ast import (
    Assign, BinaryOp, ForExpr, Ident, IfExpr, Literal, Node, UnaryOp, WhileExpr,
)
from .errors import Error, InvalidSyntaxError
from .lexer import (
    TT_DIV, TT_EE, TT_EOF, TT_EQ, TT_FLOAT, TT_GT, TT_GTE, TT_IDENTIFIER,
    TT_INT, TT_KEYWORD, TT_LPAREN, TT_LT, TT_LTE, TT_MINUS, TT_MUL, TT_NE,
    TT_PLUS, TT_POW, TT_RPAREN, Token,
)

OpSpec = Union[str, Tuple[str, str]]


class ParseResult:
    def __init__(self):
        self.error: Optional[Error] = None
        self.node: Optional[Node] = None
        self.last_registered_advance_count = 0
        self.advance_count = 0

    def register_advancement(self):
        self.last_registered_advance_count = 1
        self.advance_count += 1

    def register(self, res: 'ParseResult') -> Optional[Node]:
        self.last_registered_advance_count = res.advance_count
        self.advance_count += res.advance_count
        if res.error:
            self.error = res.error
        return res.node

    def success(self, node: Node) -> 'ParseResult':
        self.node = node
        return self

    def failure(self, error: Error) -> 'ParseResult':
        # keep a deeper error unless the failing sub-rule made no progress
        if not self.error or self.last_registered_advance_count == 0:
            self.error = error
        return self


class Parser:
    def __init__(self, tokens: List[Token]):
        self.tokens = tokens
        self.tok_idx = -1
        self.current_tok: Optional[Token] = None
        self.advance()

    def advance(self) -> Token:
        self.tok_idx += 1
        if self.tok_idx < len(self.tokens):
            self.current_tok = self.tokens[self.tok_idx]
        return self.current_tok

    def syntax_error(self, details: str) -> InvalidSyntaxError:
        return InvalidSyntaxError(self.current_tok.pos_start, self.current_tok.pos_end, details)

    def parse(self) -> ParseResult:
        res = self.expr()
        if not res.error and self.current_tok.type != TT_EOF:
            return res.failure(self.syntax_error(
                "Expected '+', '-', '*', '/', '^', '==', '!=', '<', '>', '<=', '>=', 'AND' or 'OR'"
            ))
        return res

    ###########################################################################
    # Expressions
    ###########################################################################

    def expr(self) -> ParseResult:
        res = ParseResult()

        if self.current_tok.matches(TT_KEYWORD, 'VAR'):
            res.register_advancement()
            self.advance()

            if self.current_tok.type != TT_IDENTIFIER:
                return res.failure(self.syntax_error('Expected identifier'))
            var_name = self.current_tok
            res.register_advancement()
            self.advance()

            if self.current_tok.type != TT_EQ:
                return res.failure(self.syntax_error("Expected '='"))
            res.register_advancement()
            self.advance()

            value = res.register(self.expr())
            if res.error:
                return res
            return res.success(Assign(var_name, value))

        node = res.register(self.bin_op(self.comp_expr, ((TT_KEYWORD, 'AND'), (TT_KEYWORD, 'OR'))))
        if res.error:
            return res.failure(self.syntax_error(
                "Expected 'VAR', 'IF', 'FOR', 'WHILE', int, float, identifier, '+', '-', '(' or 'NOT'"
            ))
        return res.success(node)

    def comp_expr(self) -> ParseResult:
        res = ParseResult()

        if self.current_tok.matches(TT_KEYWORD, 'NOT'):
            op_tok = self.current_tok
            res.register_advancement()
            self.advance()

            node = res.register(self.comp_expr())
            if res.error:
                return res
            return res.success(UnaryOp(op_tok, node))

        node = res.register(self.bin_op(self.arith_expr, (TT_EE, TT_NE, TT_LT, TT_GT, TT_LTE, TT_GTE)))
        if res.error:
            return res.failure(self.syntax_error(
                "Expected int, float, identifier, '+', '-', '(' or 'NOT'"
            ))
        return res.success(node)

    def arith_expr(self) -> ParseResult:
        return self.bin_op(self.term, (TT_PLUS, TT_MINUS))

    def term(self) -> ParseResult:
        return self.bin_op(self.factor, (TT_MUL, TT_DIV))

    def factor(self) -> ParseResult:
        res = ParseResult()
        tok = self.current_tok

        if tok.type in (TT_PLUS, TT_MINUS):
            res.register_advancement()
            self.advance()
            operand = res.register(self.factor())
            if res.error:
                return res
            return res.success(UnaryOp(tok, operand))

        return self.power()

    def power(self) -> ParseResult:
        res = ParseResult()
        left = res.register(self.atom())
        if res.error:
            return res

        if self.current_tok.type == TT_POW:
            op_tok = self.current_tok
            res.register_advancement()
            self.advance()
            # recursing through factor makes '^' right-associative
            right = res.register(self.factor())
            if res.error:
                return res
            left = BinaryOp(op_tok, left, right)

        return res.success(left)

    def atom(self) -> ParseResult:
        res = ParseResult()
        tok = self.current_tok

        if tok.type in (TT_INT, TT_FLOAT):
            res.register_advancement()
            self.advance()
            return res.success(Literal(tok))

        if tok.type == TT_IDENTIFIER:
            res.register_advancement()
            self.advance()
            return res.success(Ident(tok))

        if tok.type == TT_LPAREN:
            res.register_advancement()
            self.advance()
            expr = res.register(self.expr())
            if res.error:
                return res
            if self.current_tok.type != TT_RPAREN:
                return res.failure(self.syntax_error("Expected ')'"))
            res.register_advancement()
            self.advance()
            return res.success(expr)

        if tok.matches(TT_KEYWORD, 'IF'):
            if_expr = res.register(self.if_expr())
            if res.error:
                return res
            return res.success(if_expr)

        if tok.matches(TT_KEYWORD, 'FOR'):
            for_expr = res.register(self.for_expr())
            if res.error:
                return res
            return res.success(for_expr)

        if tok.matches(TT_KEYWORD, 'WHILE'):
            while_expr = res.register(self.while_expr())
            if res.error:
                return res
            return res.success(while_expr)

        return res.failure(self.syntax_error(
            "Expected int, float, identifier, '+', '-', '(', 'IF', 'FOR' or 'WHILE'"
        ))

    ###########################################################################
    # Compound expressions
    ###########################################################################

    def expect_keyword(self, res: ParseResult, keyword: str) -> bool:
        """Consume `keyword`, or record an error on `res` and return False."""
        if not self.current_tok.matches(TT_KEYWORD, keyword):
            res.failure(self.syntax_error(f"Expected '{keyword}'"))
            return False
        res.register_advancement()
        self.advance()
        return True

    def if_expr(self) -> ParseResult:
        res = ParseResult()
        cases: List[Tuple[Node, Node]] = []
        else_case: Optional[Node] = None

        if not self.expect_keyword(res, 'IF'):
            return res

        condition = res.register(self.expr())
        if res.error:
            return res
        if not self.expect_keyword(res, 'DO'):
            return res
        body = res.register(self.expr())
        if res.error:
            return res
        cases.append((condition, body))

        while self.current_tok.matches(TT_KEYWORD, 'ELIF'):
            res.register_advancement()
            self.advance()

            condition = res.register(self.expr())
            if res.error:
                return res
            if not self.expect_keyword(res, 'DO'):
                return res
            body = res.register(self.expr())
            if res.error:
                return res
            cases.append((condition, body))

        if self.current_tok.matches(TT_KEYWORD, 'ELSE'):
            res.register_advancement()
            self.advance()

            else_case = res.register(self.expr())
            if res.error:
                return res

        return res.success(IfExpr(cases, else_case))

    def for_expr(self) -> ParseResult:
        res = ParseResult()

        if not self.expect_keyword(res, 'FOR'):
            return res

        if self.current_tok.type != TT_IDENTIFIER:
            return res.failure(self.syntax_error('Expected identifier'))
        var_name = self.current_tok
        res.register_advancement()
        self.advance()

        if self.current_tok.type != TT_EQ:
            return res.failure(self.syntax_error("Expected '='"))
        res.register_advancement()
        self.advance()

        start_value = res.register(self.expr())
        if res.error:
            return res

        if not self.expect_keyword(res, 'UPTO'):
            return res

        end_value = res.register(self.expr())
        if res.error:
            return res

        step_value: Optional[Node] = None
        if self.current_tok.matches(TT_KEYWORD, 'STEP'):
            res.register_advancement()
            self.advance()

            step_value = res.register(self.expr())
            if res.error:
                return res

        if not self.expect_keyword(res, 'DO'):
            return res

        body = res.register(self.expr())
        if res.error:
            return res

        return res.success(ForExpr(var_name, start_value, end_value, step_value, body))

    def while_expr(self) -> ParseResult:
        res = ParseResult()

        if not self.expect_keyword(res, 'WHILE'):
            return res

        condition = res.register(self.expr())
        if res.error:
            return res

        if not self.expect_keyword(res, 'DO'):
            return res

        body = res.register(self.expr())
        if res.error:
            return res

        return res.success(WhileExpr(condition, body))

    ###########################################################################

    def bin_op(self, func: Callable[[], ParseResult], ops: Sequence[OpSpec]) -> ParseResult:
        res = ParseResult()
        left = res.register(func())
        if res.error:
            return res

        while self.current_tok.type in ops or (self.current_tok.type, self.current_tok.value) in ops:
            op_tok = self.current_tok
            res.register_advancement()
            self.advance()
            right = res.register(func())
            if res.error:
                return res
            left = BinaryOp(op_tok, left, right)

        return res.success(left)


def parse(tokens: List[Token]) -> ParseResult:
    """Parse a token list (as produced by `scan`) into a single expression tree."""
    return Parser(tokens).parse()
