# Pop language package
# scan -> parse -> evaluate, exposed through `run` and `run_program`.
from .interpreter import run, run_program, Interpreter, global_env
from .errors import PopError

__all__ = [
    'run',
    'run_program',
    'Interpreter',
    'global_env',
    'PopError',
]
