"""Interpreter for the Pop language.

This module ties the pipeline together: `run` scans the source, parses the
tokens and walks the resulting tree, stopping at the first diagnostic.
Each stage hands back a result object instead of raising, so a caller
always receives a `(value, error)` pair with exactly one side set.

All calls to `run` share one process-wide global environment, so a
variable assigned by one call is visible to the next. Hosts that need
isolated state construct their own `Interpreter` with a fresh
`Environment`.
"""

from __future__ import annotations

import math
from typing import Any, Optional, TextIO, Tuple

from .ast import (
    Assign, BinaryOp, ForExpr, Ident, IfExpr, Literal, Node, UnaryOp, WhileExpr,
)
from .environment import Context, Environment
from .errors import (
    DivisionByZeroError, Error, IllegalOperationError, PopError, RTError,
    StepLimitError, UndefinedVariableError,
)
from .lexer import (
    TT_DIV, TT_EE, TT_GT, TT_GTE, TT_LT, TT_LTE, TT_MINUS, TT_MUL, TT_NE,
    TT_PLUS, TT_POW, scan,
)
from .parser import parse
from .types import NoneVal, Number, to_string


ARITHMETIC_OPS = (TT_PLUS, TT_MINUS, TT_MUL, TT_DIV, TT_POW)


def clamp_to_float_range(value: Any) -> Any:
    """Map an int too large for a float onto the infinity of the same sign."""
    try:
        float(value)
    except OverflowError:
        return math.inf if value > 0 else -math.inf
    return value


def arithmetic(op: str, x: Any, y: Any) -> Any:
    if op == TT_PLUS:
        return x + y
    if op == TT_MINUS:
        return x - y
    if op == TT_MUL:
        return x * y
    if op == TT_DIV:
        return x / y
    return x ** y


def checked_arithmetic(op: str, x: Any, y: Any) -> Any:
    """Apply an arithmetic operator; results beyond the float range become inf.

    Only ZeroDivisionError can escape.
    """
    try:
        try:
            result = arithmetic(op, x, y)
        except OverflowError:
            # an int operand too large to mix with floats
            result = arithmetic(op, clamp_to_float_range(x), clamp_to_float_range(y))
    except OverflowError:
        # float ** float out of range; odd integral powers keep the base's sign
        result = -math.inf if x < 0 and y % 2 == 1 else math.inf
    if isinstance(result, complex):
        result = math.nan
    return result


class RTResult:
    def __init__(self):
        self.value: Any = None
        self.error: Optional[RTError] = None

    def register(self, res: 'RTResult') -> Any:
        self.error = res.error
        return res.value

    def success(self, value: Any) -> 'RTResult':
        self.value = value
        self.error = None
        return self

    def failure(self, error: RTError) -> 'RTResult':
        self.value = None
        self.error = error
        return self


class Interpreter:
    """Tree-walking evaluator for Pop expressions."""
    def __init__(self, global_env: Optional[Environment] = None, debug_level: int = 0,
                 debug_file: Optional[str] = 'debug.txt', max_steps: Optional[int] = None):
        self.global_env = global_env if global_env is not None else Environment()
        self.debug_level = debug_level
        self.debug_file = debug_file
        self.debug_fp: Optional[TextIO] = None
        self.max_steps = max_steps
        self.steps = 0

    def debug(self, msg: str):
        if self.debug_level > 0:
            if self.debug_fp is None and self.debug_file:
                self.debug_fp = open(self.debug_file, 'a', encoding='utf-8')
            if self.debug_fp:
                self.debug_fp.write(msg + '\n')
                self.debug_fp.flush()
            else:
                print(msg)

    # Public API
    def run(self, fn: str, text: str) -> Tuple[Optional[Any], Optional[Error]]:
        """Scan, parse and evaluate `text`; returns (value, None) or (None, error)."""
        try:
            tokens, error = scan(fn, text)
            if error:
                self.debug(f"{fn}: lexer error: {error.details}")
                return None, error
            if self.debug_level >= 1:
                self.debug(f"{fn}: {len(tokens)} tokens")

            ast = parse(tokens)
            if ast.error:
                self.debug(f"{fn}: syntax error: {ast.error.details}")
                return None, ast.error
            if self.debug_level >= 1:
                self.debug(f"{fn}: parsed {type(ast.node).__name__}")

            return self.execute(ast.node)
        finally:
            self.close()

    def close(self):
        if self.debug_fp:
            self.debug_fp.close()
            self.debug_fp = None

    def execute(self, node: Node) -> Tuple[Optional[Any], Optional[Error]]:
        """Evaluate an already parsed tree in a fresh top-level context."""
        self.steps = 0
        context = Context('<program>')
        result = self.evaluate(node, self.global_env, context)
        if result.error:
            self.debug(f"runtime error: {result.error.details}")
            return None, result.error
        if self.debug_level >= 1:
            self.debug(f"result: {to_string(result.value)}")
        return result.value, None

    def evaluate(self, node: Node, env: Environment, context: Context) -> RTResult:
        res = RTResult()

        if isinstance(node, Literal):
            return res.success(Number(node.value).set_pos(node.pos_start, node.pos_end).set_env(env))

        if isinstance(node, Ident):
            value = env.get(node.name)
            if value is None:
                return res.failure(UndefinedVariableError(
                    node.pos_start, node.pos_end, f"'{node.name}' is not defined", context
                ))
            if isinstance(value, Number):
                # hand out a copy so the stored value is never mutated through a read
                value = value.copy().set_pos(node.pos_start, node.pos_end).set_env(env)
            return res.success(value)

        if isinstance(node, Assign):
            value = res.register(self.evaluate(node.value, env, context))
            if res.error:
                return res
            # store a private copy so chained assignments never share a value
            env.set(node.name, value.copy() if isinstance(value, Number) else value)
            if self.debug_level >= 2:
                self.debug(f"assign {node.name} = {to_string(value)}")
            return res.success(value)

        if isinstance(node, UnaryOp):
            operand = res.register(self.evaluate(node.operand, env, context))
            if res.error:
                return res
            if not isinstance(operand, Number):
                return res.failure(IllegalOperationError(
                    node.operand.pos_start, node.operand.pos_end, context=context
                ))
            if node.op == TT_MINUS:
                result = Number(operand.value * -1)
            elif node.op == 'NOT':
                result = Number(0 if operand.is_true() else 1)
            else:
                result = Number(operand.value)
            return res.success(result.set_pos(node.pos_start, node.pos_end).set_env(env))

        if isinstance(node, BinaryOp):
            # both operands are always evaluated, AND/OR included
            left = res.register(self.evaluate(node.left, env, context))
            if res.error:
                return res
            right = res.register(self.evaluate(node.right, env, context))
            if res.error:
                return res
            for operand, operand_node in ((left, node.left), (right, node.right)):
                if not isinstance(operand, Number):
                    return res.failure(IllegalOperationError(
                        operand_node.pos_start, operand_node.pos_end, context=context
                    ))
            value, error = self.apply_binary_op(node.op, left, right, node.right, context)
            if error:
                return res.failure(error)
            return res.success(Number(value).set_pos(node.pos_start, node.pos_end).set_env(env))

        if isinstance(node, IfExpr):
            for condition, body in node.cases:
                cond = res.register(self.evaluate(condition, env, context))
                if res.error:
                    return res
                truthy = self.is_truthy(cond)
                if self.debug_level >= 3:
                    self.debug(f"if condition {to_string(cond)} -> {truthy}")
                if truthy:
                    value = res.register(self.evaluate(body, env, context))
                    if res.error:
                        return res
                    return res.success(value)
            if node.else_case is not None:
                value = res.register(self.evaluate(node.else_case, env, context))
                if res.error:
                    return res
                return res.success(value)
            return res.success(NoneVal())

        if isinstance(node, ForExpr):
            bounds = []
            for bound_node in (node.start, node.end, node.step):
                if bound_node is None:
                    bounds.append(Number(1))
                    continue
                bound = res.register(self.evaluate(bound_node, env, context))
                if res.error:
                    return res
                if not isinstance(bound, Number):
                    return res.failure(IllegalOperationError(
                        bound_node.pos_start, bound_node.pos_end, context=context
                    ))
                bounds.append(bound)
            start_value, end_value, step_value = bounds
            if self.debug_level >= 2:
                self.debug(f"for {node.var_name} = {to_string(start_value)} upto "
                           f"{to_string(end_value)} step {to_string(step_value)}")

            i = start_value.value
            end = end_value.value
            step = step_value.value

            # the end bound is exclusive in both directions
            while (i < end) if step >= 0 else (i > end):
                error = self.tick(node, context)
                if error:
                    return res.failure(error)
                env.set(node.var_name, Number(i).set_pos(node.var_name_tok.pos_start,
                                                         node.var_name_tok.pos_end).set_env(env))
                if self.debug_level >= 3:
                    self.debug(f"for iteration {node.var_name} = {i}")
                i = checked_arithmetic(TT_PLUS, i, step)

                res.register(self.evaluate(node.body, env, context))
                if res.error:
                    return res
            return res.success(NoneVal())

        if isinstance(node, WhileExpr):
            while True:
                cond = res.register(self.evaluate(node.condition, env, context))
                if res.error:
                    return res
                truthy = self.is_truthy(cond)
                if self.debug_level >= 3:
                    self.debug(f"while condition {to_string(cond)} -> {truthy}")
                if not truthy:
                    break
                error = self.tick(node, context)
                if error:
                    return res.failure(error)

                res.register(self.evaluate(node.body, env, context))
                if res.error:
                    return res
            return res.success(NoneVal())

        raise NotImplementedError(f"evaluate: unexpected node type {type(node)}")

    def tick(self, node: Node, context: Context) -> Optional[RTError]:
        """Count one loop iteration against the optional step budget."""
        self.steps += 1
        if self.max_steps is not None and self.steps > self.max_steps:
            return StepLimitError(node.pos_start, node.pos_end,
                                  f"Step limit of {self.max_steps} exceeded", context)
        return None

    def is_truthy(self, value: Any) -> bool:
        if isinstance(value, Number):
            return value.is_true()
        return False

    def apply_binary_op(self, op: str, a: Number, b: Number, right: Node,
                        context: Context) -> Tuple[Any, Optional[RTError]]:
        x, y = a.value, b.value
        if op in ARITHMETIC_OPS:
            if op == TT_DIV and y == 0:
                return None, DivisionByZeroError(right.pos_start, right.pos_end, context=context)
            try:
                return checked_arithmetic(op, x, y), None
            except ZeroDivisionError:
                return None, DivisionByZeroError(right.pos_start, right.pos_end, context=context)
        if op == TT_EE:
            return int(x == y), None
        if op == TT_NE:
            return int(x != y), None
        if op == TT_LT:
            return int(x < y), None
        if op == TT_GT:
            return int(x > y), None
        if op == TT_LTE:
            return int(x <= y), None
        if op == TT_GTE:
            return int(x >= y), None
        if op == 'AND':
            return int(a.is_true() and b.is_true()), None
        if op == 'OR':
            return int(a.is_true() or b.is_true()), None
        raise NotImplementedError(f"unknown operator {op}")


# One environment for the life of the process; every `run` call reads and
# writes it.
global_env = Environment()


def run(fn: str, text: str, debug_level: int = 0) -> Tuple[Optional[Any], Optional[Error]]:
    """Run Pop source against the process-wide global environment."""
    interpreter = Interpreter(global_env, debug_level=debug_level)
    return interpreter.run(fn, text)


def run_program(text: str, fn: str = '<program>', debug_level: int = 0) -> Any:
    """Convenience wrapper around `run` that raises `PopError` on failure."""
    value, error = run(fn, text, debug_level=debug_level)
    if error:
        raise PopError(error)
    return value
