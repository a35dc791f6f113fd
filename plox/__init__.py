# Lox language package
# This package provides a scanner, parser, resolver and tree-walking interpreter for Lox.
from .errors import ErrorReporter, LoxRuntimeError
from .interpreter import Interpreter
from .lox import Lox, run_program

__all__ = [
    'ErrorReporter',
    'Interpreter',
    'Lox',
    'LoxRuntimeError',
    'run_program',
]
