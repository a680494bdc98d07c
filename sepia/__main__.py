"""CLI entry point for the Sepia interpreter.

Usage:
    python -m sepia [-v|-vv|-vvv|-vvvv] [program_file]
    python -m sepia [-v...] --emit-ast <program_file>
    python -m sepia [-v...] --ast <ast_json_file>

Options:
  -v            Increase debug verbosity (can be repeated)
  --emit-ast    Parse the given .sepia file and emit an AST JSON file
  --ast         Execute a previously emitted AST JSON file

Without a program file an interactive shell is started. Debug
information is written to `debug.txt` in the current directory when
verbosity is greater than zero.
"""

import argparse
import cmd
import json
import sys
from pathlib import Path

from .ast_json import ast_to_obj, ast_from_obj
from .errors import ParseFailure
from .interpreter import Interpreter, parse
from .objects import ErrorVal


class Shell(cmd.Cmd):
    """Sepia read-eval-print loop. Bindings persist between lines."""
    intro = "Sepia interpreter\nType 'exit' or press Ctrl-D to leave."
    prompt = ">> "
    secondary_prompt = ".. "  # used while a block is still open

    def __init__(self, interpreter: Interpreter, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.interpreter = interpreter
        self._pending = ""

    def default(self, line):
        """Evaluates a line of Sepia code."""
        source = self._pending + line + "\n"
        program, errors = parse(source)
        if errors and all(e.startswith('unterminated block') for e in errors):
            self._pending = source
            self.prompt = self.secondary_prompt
            return
        self._pending = ""
        self.prompt = Shell.prompt
        if errors:
            for e in errors:
                print(f"\t{e}", file=self.stdout)
            return
        result = self.interpreter.run(program)
        print(result.inspect(), file=self.stdout)

    def emptyline(self):
        """Do not repeat previous command on empty line."""
        return ""

    def do_EOF(self, arg):
        """Exits interpreter."""
        print(file=self.stdout)
        return self.do_exit(arg)

    def do_exit(self, arg):
        """Exits interpreter."""
        return True


def read_source(path_arg: str) -> str:
    program_file = Path(path_arg)
    if not program_file.exists():
        print(f"Error: file {program_file} not found", file=sys.stderr)
        sys.exit(1)
    with open(program_file, 'r', encoding='utf-8') as f:
        return f.read()


def load_ast_or_exit(path_arg: str):
    try:
        return ast_from_obj(json.loads(read_source(path_arg)))
    except (ValueError, TypeError, KeyError) as e:
        print(f"Error: invalid AST file {path_arg}: {e}", file=sys.stderr)
        sys.exit(1)


def parse_or_exit(interpreter: Interpreter, source: str):
    try:
        return interpreter.parse(source)
    except ParseFailure as e:
        for msg in e.errors:
            print(msg, file=sys.stderr)
        sys.exit(1)


def report_result(result) -> None:
    if isinstance(result, ErrorVal):
        print(result.inspect(), file=sys.stderr)
        sys.exit(1)


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(prog='sepia', description="Sepia language interpreter")
    parser.add_argument('-v', action='count', default=0, help='increase debug verbosity (can be repeated)')
    group = parser.add_mutually_exclusive_group()
    group.add_argument('--emit-ast', metavar='SEPIA_FILE', help='emit AST JSON for the given .sepia file')
    group.add_argument('--ast', metavar='AST_JSON_FILE', help='execute AST from a JSON file')
    parser.add_argument('program', nargs='?', help='Sepia program file (.sepia) to execute; omit for a REPL')
    args = parser.parse_args(argv)

    with Interpreter(debug_level=args.v) as interpreter:
        # Emit AST mode
        if args.emit_ast:
            source = read_source(args.emit_ast)
            ast_program = parse_or_exit(interpreter, source)
            program_file = Path(args.emit_ast)
            out_path = program_file.with_name(program_file.name + '.ast.json')
            with open(out_path, 'w', encoding='utf-8') as out:
                json.dump(ast_to_obj(ast_program), out, ensure_ascii=False, indent=2)
            print(str(out_path))
            return

        # Execute from AST JSON
        if args.ast:
            report_result(interpreter.run(load_ast_or_exit(args.ast)))
            return

        if not args.program:
            Shell(interpreter).cmdloop()
            return

        source = read_source(args.program)
        ast_program = parse_or_exit(interpreter, source)
        report_result(interpreter.run(ast_program))


if __name__ == '__main__':
    main()
