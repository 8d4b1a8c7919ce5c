"""CLI entry point for the Pop interpreter.

Usage:
    python -m pop [-v|-vv|-vvv]                      interactive shell
    python -m pop [-v...] <program_file>
    python -m pop [-v...] --emit-ast <program_file>
    python -m pop [-v...] --ast <ast_json_file>

Options:
  -v            Increase debug verbosity (can be repeated)
  --max-steps   Abort any loop that runs more than N iterations in one line
  --emit-ast    Parse the given file and emit an AST JSON file
  --ast         Execute a previously emitted AST JSON file

Pop has no statement separator, so a program file is run one line at a
time. Every line shares the same global environment, as do successive
lines typed into the shell. Debug information is appended to `debug.txt`
in the current directory when verbosity is greater than zero.
"""

import argparse
import json
import sys
from pathlib import Path

from .ast_json import ast_from_obj, ast_to_obj
from .interpreter import Interpreter, global_env
from .lexer import scan
from .parser import parse
from .types import NoneVal, to_string


def print_result(value, error) -> bool:
    if error:
        print(error.as_string(), file=sys.stderr)
        return False
    if value is not None and not isinstance(value, NoneVal):
        print(to_string(value))
    return True


def read_lines(path: Path) -> list[tuple[int, str]]:
    with open(path, 'r', encoding='utf-8') as f:
        return [(n, line.rstrip('\r\n')) for n, line in enumerate(f, start=1) if line.strip()]


def shell(interpreter: Interpreter) -> None:
    while True:
        try:
            text = input('pop > ')
        except (EOFError, KeyboardInterrupt):
            print()
            return
        if not text.strip():
            continue
        print_result(*interpreter.run('<stdin>', text))


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description="Pop language interpreter")
    parser.add_argument('-v', action='count', default=0, help='increase debug verbosity (can be repeated)')
    parser.add_argument('--max-steps', type=int, default=None, metavar='N',
                        help='abort loops after N iterations per line')
    group = parser.add_mutually_exclusive_group()
    group.add_argument('--emit-ast', metavar='POP_FILE', help='emit AST JSON for the given .pop file')
    group.add_argument('--ast', metavar='AST_JSON_FILE', help='execute AST from a JSON file')
    parser.add_argument('program', nargs='?', help='Pop program file (.pop) to execute')
    args = parser.parse_args(argv)

    interpreter = Interpreter(global_env, debug_level=args.v, max_steps=args.max_steps)

    # Emit AST mode
    if args.emit_ast:
        program_file = Path(args.emit_ast)
        if not program_file.exists():
            print(f"Error: file {program_file} not found", file=sys.stderr)
            sys.exit(1)
        lines = []
        for n, text in read_lines(program_file):
            tokens, error = scan(str(program_file), text)
            if not error:
                ast = parse(tokens)
                error = ast.error
            if error:
                print(error.as_string(), file=sys.stderr)
                sys.exit(1)
            lines.append({"line": n, "text": text, "ast": ast_to_obj(ast.node)})
        obj = {"fn": str(program_file), "lines": lines}
        out_path = program_file.with_name(program_file.name + '.ast.json')
        with open(out_path, 'w', encoding='utf-8') as out:
            json.dump(obj, out, ensure_ascii=False, indent=2)
        print(str(out_path))
        return

    # Execute from AST JSON
    if args.ast:
        ast_path = Path(args.ast)
        if not ast_path.exists():
            print(f"Error: file {ast_path} not found", file=sys.stderr)
            sys.exit(1)
        with open(ast_path, 'r', encoding='utf-8') as f:
            data = json.load(f)
        try:
            for entry in data["lines"]:
                node = ast_from_obj(entry["ast"], data["fn"], entry["text"])
                if not print_result(*interpreter.execute(node)):
                    sys.exit(1)
        finally:
            interpreter.close()
        return

    # No program: interactive shell
    if not args.program:
        shell(interpreter)
        return

    program_file = Path(args.program)
    if not program_file.exists():
        print(f"Error: file {program_file} not found", file=sys.stderr)
        sys.exit(1)
    for _, text in read_lines(program_file):
        if not print_result(*interpreter.run(str(program_file), text)):
            sys.exit(1)


if __name__ == '__main__':
    main()
