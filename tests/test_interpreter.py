import math

import pytest

from pop.environment import Environment
from pop.errors import (
    DivisionByZeroError, IllegalCharError, IllegalOperationError, InvalidSyntaxError,
    StepLimitError, UndefinedVariableError,
)
from pop.interpreter import Interpreter
from pop.types import NoneVal, Number


def run_fresh(text, env=None, **kwargs):
    interp = Interpreter(env if env is not None else Environment(), **kwargs)
    return interp.run('<test>', text)


def value_of(text, env=None):
    value, error = run_fresh(text, env)
    assert error is None, error.as_string()
    return value


@pytest.mark.parametrize('text, expected', [
    ('1 + 2 * 3', 7),
    ('(1 + 2) * 3', 9),
    ('7 / 2', 3.5),
    ('10 - 4 - 3', 3),
    ('2^3^2', 512),
    ('-2^2', -4),
    ('--3', 3),
    ('+4', 4),
    ('1.5 + 1', 2.5),
    ('1 == 1', 1),
    ('1 != 1', 0),
    ('2 < 3', 1),
    ('2 >= 3', 0),
    ('2 <= 2', 1),
    ('3 > 2', 1),
    ('NOT 0', 1),
    ('NOT 5', 0),
    ('1 AND 0', 0),
    ('2 AND 3', 1),
    ('0 OR 0', 0),
    ('1 OR 0', 1),
])
def test_expressions(text, expected):
    assert value_of(text) == Number(expected)


def test_conditionals():
    assert value_of('IF 0 DO 1 ELSE 2') == Number(2)
    assert value_of('IF 1 DO 1 ELSE 2') == Number(1)
    assert value_of('IF 0 DO 1 ELIF 1 DO 2 ELSE 3') == Number(2)
    assert value_of('IF 0 DO 1') == NoneVal()


def test_conditional_stops_at_first_true_case():
    env = Environment()
    assert value_of('IF 1 DO 1 ELIF (VAR hit = 1) DO 2', env) == Number(1)
    assert env.get('hit') is None


def test_logic_operators_evaluate_both_sides():
    env = Environment()
    assert value_of('0 AND (VAR sc = 1)', env) == Number(0)
    assert env.get('sc') == Number(1)


def test_for_loop_end_is_exclusive():
    env = Environment()
    assert value_of('FOR i = 0 UPTO 3 DO VAR r = i', env) == NoneVal()
    assert env.get('r') == Number(2)
    assert env.get('i') == Number(2)


def test_for_loop_negative_step():
    env = Environment()
    value_of('VAR total = 0', env)
    value_of('FOR k = 3 UPTO 0 STEP -1 DO VAR total = total + k', env)
    assert env.get('total') == Number(6)


def test_for_loop_step():
    env = Environment()
    value_of('VAR total = 0', env)
    value_of('FOR k = 0 UPTO 5 STEP 2 DO VAR total = total + k', env)
    assert env.get('total') == Number(6)


def test_for_loop_without_iterations_binds_nothing():
    env = Environment()
    assert value_of('FOR j = 5 UPTO 0 DO 1', env) == NoneVal()
    assert env.get('j') is None


def test_assignment_in_loop_bound():
    env = Environment()
    value_of('FOR q = 0 UPTO (VAR lim = 2) DO q', env)
    assert env.get('lim') == Number(2)
    assert env.get('q') == Number(1)


def test_while_loop():
    env = Environment()
    value_of('VAR i = 0', env)
    assert value_of('WHILE i < 3 DO VAR i = i + 1', env) == NoneVal()
    assert env.get('i') == Number(3)


def test_while_loop_runs_exactly_three_times():
    env = Environment()
    value_of('VAR i = 0', env)
    value, error = run_fresh('WHILE i < 3 DO VAR i = i + 1', env, max_steps=3)
    assert error is None

    value_of('VAR i = 0', env)
    value, error = run_fresh('WHILE i < 3 DO VAR i = i + 1', env, max_steps=2)
    assert isinstance(error, StepLimitError)


def test_step_limit():
    value, error = run_fresh('WHILE 1 DO 1', max_steps=10)
    assert value is None
    assert isinstance(error, StepLimitError)
    assert error.details == 'Step limit of 10 exceeded'


def test_assignment_yields_value():
    env = Environment()
    assert value_of('VAR b = 4', env) == Number(4)
    assert value_of('(VAR c = 2) * 3', env) == Number(6)
    assert env.get('c') == Number(2)


def test_variable_read_is_a_copy():
    env = Environment()
    value_of('VAR a = 5', env)
    value = value_of('a', env)
    value.value = 99
    assert env.get('a') == Number(5)


def test_read_rebinds_position():
    env = Environment()
    value_of('VAR a = 5', env)
    value = value_of('  a', env)
    assert value.pos_start.idx == 2
    assert value.env is env


def test_division_by_zero():
    value, error = run_fresh('3/0')
    assert value is None
    assert isinstance(error, DivisionByZeroError)
    assert error.details == 'Division by zero'
    assert (error.pos_start.idx, error.pos_end.idx) == (2, 3)


def test_zero_to_negative_power():
    value, error = run_fresh('0 ^ -1')
    assert isinstance(error, DivisionByZeroError)
    assert (error.pos_start.idx, error.pos_end.idx) == (4, 6)


def test_undefined_variable():
    value, error = run_fresh('nope + 1')
    assert value is None
    assert isinstance(error, UndefinedVariableError)
    assert error.details == "'nope' is not defined"
    assert error.context.display_name == '<program>'


def test_runtime_error_aborts_assignment():
    env = Environment()
    value, error = run_fresh('VAR e = 1 / 0', env)
    assert isinstance(error, DivisionByZeroError)
    assert env.get('e') is None


def test_no_value_operand_is_illegal():
    value, error = run_fresh('1 + (WHILE 0 DO 1)')
    assert isinstance(error, IllegalOperationError)
    value, error = run_fresh('-(IF 0 DO 1)')
    assert isinstance(error, IllegalOperationError)


def test_lexical_error_skips_evaluation():
    env = Environment()
    value, error = run_fresh('VAR lx = 1 $', env)
    assert value is None
    assert isinstance(error, IllegalCharError)
    assert env.get('lx') is None


def test_syntax_error_skips_evaluation():
    env = Environment()
    value, error = run_fresh('VAR sx = 1 1', env)
    assert value is None
    assert isinstance(error, InvalidSyntaxError)
    assert env.get('sx') is None


def test_number_equality_ignores_annotations():
    env = Environment()
    assert Number(3).set_env(env) == Number(3)
    assert Number(3) != Number(4)


def test_debug_trace(tmp_path):
    debug_file = tmp_path / 'debug.txt'
    interp = Interpreter(Environment(), debug_level=2, debug_file=str(debug_file))
    interp.run('<test>', 'VAR dbg = 1')
    lines = debug_file.read_text(encoding='utf-8').splitlines()
    assert '<test>: 5 tokens' in lines
    assert 'assign dbg = 1' in lines
    assert 'result: 1' in lines


def test_debug_trace_to_stdout(capsys):
    interp = Interpreter(Environment(), debug_level=1, debug_file=None)
    interp.run('<test>', '1 / 0')
    out = capsys.readouterr().out
    assert 'runtime error: Division by zero' in out


def test_nested_environment_reads_parent_and_writes_locally():
    parent = Environment()
    child = Environment(parent)
    value_of('VAR outer = 1', parent)
    assert value_of('outer + 1', child) == Number(2)
    value_of('VAR outer = 5', child)
    assert parent.get('outer') == Number(1)
    assert child.get('outer') == Number(5)


@pytest.mark.parametrize('text, expected', [
    ('2^2000 + 0.5', math.inf),
    ('0.5 - 2^2000', -math.inf),
    ('10^400 * -0.5', -math.inf),
    ('10^400 / 3', math.inf),
    ('(0 - 10^400) / 3', -math.inf),
    ('3 / 10^400', 0.0),
    ('(10^400) ^ 0.5', math.inf),
    ('(10^400) ^ -0.5', 0.0),
    ('(0 - 10.0) ^ 309', -math.inf),
    ('1.5 ^ 2000.0', math.inf),
])
def test_results_beyond_float_range_become_infinite(text, expected):
    assert value_of(text) == Number(expected)


def test_for_loop_step_overflowing_float_range():
    env = Environment()
    assert value_of('FOR n = 10^400 UPTO 10^401 STEP 0.5 DO VAR seen = 1', env) == NoneVal()
    assert env.get('n') == Number(10 ** 400)
    assert env.get('seen') == Number(1)


@pytest.mark.parametrize('text, span', [
    ('1 / (IF 1 DO 0)', (8, 14)),
    ('1 / (VAR z = 0)', (9, 14)),
    ('0 ^ (VAR w = -1)', (9, 15)),
])
def test_division_by_zero_spans_right_operand(text, span):
    value, error = run_fresh(text)
    assert isinstance(error, DivisionByZeroError)
    assert (error.pos_start.idx, error.pos_end.idx) == span


def test_chained_assignment_stores_separate_values():
    env = Environment()
    assert value_of('VAR a = VAR b = 1', env) == Number(1)
    assert env.get('a') == env.get('b')
    assert env.get('a') is not env.get('b')
