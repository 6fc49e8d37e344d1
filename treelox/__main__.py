"""CLI entry point for the Lox interpreter.

Usage:
    python -m treelox [-v|-vv|-vvv] [script]
    python -m treelox [-v...] --emit-ast <script>
    python -m treelox [-v...] --ast <ast_json_file>

Options:
  -v            Increase debug verbosity (can be repeated)
  --emit-ast    Parse the given .lox file and emit an AST JSON file
  --ast         Execute a previously emitted AST JSON file

Without a script an interactive prompt is started. Debug information is
written to `debug.txt` in the current directory when verbosity is greater
than zero.

Exit codes: 0 on success, 65 when the script fails to scan or parse, 66
when the input file is missing, and 70 on a runtime error.
"""

import argparse
import json
import sys
from pathlib import Path

from .ast_json import program_from_obj, program_to_obj
from .deepstack import call_with_deep_stack
from .errors import LoxRuntimeError, ParseFailed, RuntimeFailed, ScanFailed
from .interpreter import Interpreter, parse_program, run_program
from .shell import Shell

EX_DATAERR = 65
EX_NOINPUT = 66
EX_SOFTWARE = 70


def read_source(path: Path) -> str:
    if not path.exists():
        print(f"Error: file {path} not found", file=sys.stderr)
        sys.exit(EX_NOINPUT)
    with open(path, 'r', encoding='utf-8') as f:
        return f.read()


def report_compile_errors(error) -> None:
    for diagnostic in error.diagnostics:
        print(diagnostic, file=sys.stderr)


def dump_program(statements) -> str:
    return json.dumps(program_to_obj(statements), ensure_ascii=False, indent=2)


def load_program(text: str):
    return program_from_obj(json.loads(text))


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description="Lox tree-walking interpreter")
    parser.add_argument('-v', action='count', default=0, help='increase debug verbosity (can be repeated)')
    group = parser.add_mutually_exclusive_group()
    group.add_argument('--emit-ast', metavar='LOX_FILE', help='emit AST JSON for the given .lox file')
    group.add_argument('--ast', metavar='AST_JSON_FILE', help='execute AST from a JSON file')
    parser.add_argument('script', nargs='?', help='Lox script to execute; omit for an interactive prompt')
    args = parser.parse_args(argv)
    debug_file = 'debug.txt' if args.v > 0 else None

    # Emit AST mode
    if args.emit_ast:
        program_file = Path(args.emit_ast)
        source = read_source(program_file)
        try:
            statements = call_with_deep_stack(parse_program, source)
        except (ScanFailed, ParseFailed) as e:
            report_compile_errors(e)
            sys.exit(e.exit_code)
        out_path = program_file.with_name(program_file.name + '.ast.json')
        try:
            text = call_with_deep_stack(dump_program, statements)
        except RecursionError:
            print(f"Error: {program_file} is nested too deeply to emit as JSON", file=sys.stderr)
            sys.exit(EX_DATAERR)
        with open(out_path, 'w', encoding='utf-8') as out:
            out.write(text)
        print(str(out_path))
        return

    # Execute from AST JSON
    if args.ast:
        ast_path = Path(args.ast)
        text = read_source(ast_path)
        try:
            statements = call_with_deep_stack(load_program, text)
        except RecursionError:
            print(f"Error: {ast_path} is nested too deeply to load", file=sys.stderr)
            sys.exit(EX_DATAERR)
        interpreter = Interpreter(debug_level=args.v, debug_file=debug_file)
        try:
            call_with_deep_stack(interpreter.interpret, statements)
        except LoxRuntimeError as e:
            print(e, file=sys.stderr)
            sys.exit(EX_SOFTWARE)
        finally:
            interpreter.close()
        return

    interpreter = Interpreter(debug_level=args.v, debug_file=debug_file)
    try:
        # Interactive mode
        if not args.script:
            Shell(interpreter).cmdloop()
            return
        source = read_source(Path(args.script))
        try:
            run_program(source, interpreter)
        except (ScanFailed, ParseFailed) as e:
            report_compile_errors(e)
            sys.exit(EX_DATAERR)
        except RuntimeFailed as e:
            print(e.error, file=sys.stderr)
            sys.exit(EX_SOFTWARE)
    finally:
        interpreter.close()


if __name__ == '__main__':
    main()
