from pop.environment import Context, Environment
from pop.errors import IllegalCharError, InvalidSyntaxError, RTError
from pop.interpreter import Interpreter
from pop.lexer import scan
from pop.position import Position


def test_lexical_error_rendering():
    _, error = scan('<stdin>', '1 $')
    assert error.as_string() == "Illegal Character: '$'\nFile <stdin>, line 1"
    assert str(error) == error.as_string()


def test_syntax_error_rendering():
    _, error = Interpreter(Environment()).run('prog.pop', '(1')
    assert isinstance(error, InvalidSyntaxError)
    assert error.as_string() == "Invalid Syntax: Expected ')'\nFile prog.pop, line 1"


def test_runtime_error_traceback():
    _, error = Interpreter(Environment()).run('<stdin>', '3/0')
    assert error.as_string() == (
        'Traceback (most recent call last):\n'
        '  File <stdin>, line 1, in <program>\n'
        'Runtime Error: Division by zero'
    )


def test_traceback_lists_oldest_frame_first():
    text = 'a\nb\nc\nd\ne'
    program = Context('<program>')
    loop = Context('loop', program, Position(2, 1, 0, 'f.pop', text))
    error = RTError(Position(8, 4, 0, 'f.pop', text), Position(9, 4, 1, 'f.pop', text), 'boom', loop)
    assert error.as_string() == (
        'Traceback (most recent call last):\n'
        '  File f.pop, line 2, in <program>\n'
        '  File f.pop, line 5, in loop\n'
        'Runtime Error: boom'
    )


def test_errors_keep_position_snapshots():
    pos = Position(0, 0, 0, '<test>', 'x')
    error = IllegalCharError(pos, pos, "'x'")
    pos.advance('x')
    assert error.pos_start.idx == 0
    assert error.pos_end.idx == 0
    assert error.pos_start is not error.pos_end
