"""CLI entry point for the Lox interpreter.

Usage:
    python -m plox [-v|-vv|-vvv]                 start the interactive prompt
    python -m plox [-v...] <script>              run a script
    python -m plox [-v...] --emit-ast <script>   write <script>.ast
    python -m plox [-v...] --ast <ast_file>      run a previously emitted dump

Options:
  -v            Increase debug verbosity (can be repeated)
  --emit-ast    Parse the given script and write its AST dump
  --ast         Execute a previously emitted AST dump

Debug information is written to `debug.txt` in the current directory when
verbosity is greater than zero. A script run exits with 65 for syntax or
resolution errors, 70 for runtime errors, 66 when the file is missing or
unreadable and 0 otherwise.
"""

import argparse
import sys
from pathlib import Path

from .errors import SourceFileError
from .lox import EXIT_NOINPUT, EXIT_USAGE, Lox


def require_file(path: str):
    if not Path(path).is_file():
        print(f"Error: file {path} not found", file=sys.stderr)
        sys.exit(EXIT_NOINPUT)


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(prog='plox', description="Lox language interpreter")
    parser.add_argument('-v', action='count', default=0, help='increase debug verbosity (can be repeated)')
    group = parser.add_mutually_exclusive_group()
    group.add_argument('--emit-ast', metavar='LOX_FILE', help='write the AST dump for the given script')
    group.add_argument('--ast', metavar='AST_FILE', help='execute an AST dump')
    parser.add_argument('scripts', nargs='*', metavar='script', help='Lox script to execute')
    args = parser.parse_args(argv)

    if len(args.scripts) > 1:
        print('Usage: plox [script]')
        sys.exit(EXIT_USAGE)

    lox = Lox(debug_level=args.v)
    try:
        # Emit AST mode
        if args.emit_ast:
            require_file(args.emit_ast)
            out_path = lox.emit_ast(args.emit_ast)
            if out_path is None:
                sys.exit(lox.exit_code())
            print(str(out_path))
            return

        # Execute from AST dump
        if args.ast:
            require_file(args.ast)
            sys.exit(lox.run_ast_file(args.ast))

        if args.scripts:
            require_file(args.scripts[0])
            sys.exit(lox.run_file(args.scripts[0]))

        sys.exit(lox.run_prompt())
    except SourceFileError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(EXIT_NOINPUT)
    finally:
        lox.close()


if __name__ == '__main__':
    main()
