"""Session driver tying the pipeline together.

A `Lox` session owns one error reporter and one interpreter, so globals
persist across calls to `run`; the REPL relies on this.
"""

from __future__ import annotations

import builtins
import sys
from pathlib import Path
from typing import List, Optional

from .ast import Stmt
from .ast_reader import AstReadError, read_program
from .errors import ErrorReporter, SourceFileError
from .interpreter import Interpreter
from .parser import parse_program
from .printer import AstPrinter
from .resolver import Resolver
from .scanner import scan


EXIT_OK = 0
EXIT_USAGE = 64
EXIT_DATAERR = 65
EXIT_NOINPUT = 66
EXIT_SOFTWARE = 70

# Each Lox call nests about eight Python frames.
RECURSION_LIMIT = 10_000


def read_source(path: str) -> str:
    try:
        return Path(path).read_text(encoding='utf-8')
    except UnicodeDecodeError as e:
        raise SourceFileError(path, f"not valid UTF-8 ({e.reason} at byte {e.start})") from e
    except OSError as e:
        raise SourceFileError(path, e.strerror or str(e)) from e


class Lox:
    def __init__(self, debug_level: int = 0, debug_file: str = 'debug.txt'):
        if sys.getrecursionlimit() < RECURSION_LIMIT:
            sys.setrecursionlimit(RECURSION_LIMIT)
        self.reporter = ErrorReporter()
        self.interpreter = Interpreter(self.reporter, debug_level=debug_level, debug_file=debug_file)

    def parse(self, source: str) -> List[Stmt]:
        tokens = scan(source, self.reporter)
        return parse_program(tokens, self.reporter)

    def run(self, source: str, repl: bool = False):
        statements = self.parse(source)
        # syntax errors stop the pipeline before resolution
        if self.reporter.had_error:
            return
        self.execute(statements, repl=repl)

    def execute(self, statements: List[Stmt], repl: bool = False):
        Resolver(self.interpreter, self.reporter).resolve(statements)
        if self.reporter.had_error:
            return
        self.interpreter.interpret(statements, repl=repl)

    def exit_code(self) -> int:
        if self.reporter.had_error:
            return EXIT_DATAERR
        if self.reporter.had_runtime_error:
            return EXIT_SOFTWARE
        return EXIT_OK

    def run_file(self, path: str) -> int:
        source = read_source(path)
        self.run(source)
        return self.exit_code()

    def run_ast_file(self, path: str) -> int:
        text = read_source(path)
        try:
            statements = read_program(text)
        except AstReadError as e:
            self.reporter.error(e.line, e.message)
            return self.exit_code()
        self.execute(statements)
        return self.exit_code()

    def emit_ast(self, path: str) -> Optional[Path]:
        """Write `<path>.ast` with one printed statement per line."""
        program_file = Path(path)
        statements = self.parse(read_source(path))
        if self.reporter.had_error:
            return None
        out_path = program_file.with_name(program_file.name + '.ast')
        out_path.write_text(AstPrinter().print_program(statements) + '\n', encoding='utf-8')
        return out_path

    def run_prompt(self) -> int:
        while True:
            try:
                line = builtins.input('> ')
            except EOFError:
                print()
                return EXIT_OK
            self.run(line, repl=True)
            self.reporter.reset()

    def close(self):
        self.interpreter.close()


def run_program(source: str, debug_level: int = 0) -> Lox:
    """Convenience function to run Lox source in a fresh session."""
    lox = Lox(debug_level=debug_level)
    try:
        lox.run(source)
    finally:
        lox.close()
    return lox
